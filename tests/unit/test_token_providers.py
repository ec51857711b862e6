"""
Unit tests for the identity backends.

The legacy backend is exercised against a mocked authority (respx); the
modern backend with MSAL patched out.
"""

from urllib.parse import parse_qs
from unittest.mock import MagicMock, patch

import httpx
import pytest

from caconnector.domain.services.token_provider import to_resource, to_scopes
from caconnector.exceptions import AuthenticationUnavailableError, InvalidArgumentError
from caconnector.infrastructure.providers import (
    LegacyAuthorityTokenProvider,
    ModernAuthorityTokenProvider,
)
from caconnector.models.auth import Credential
from conftest import TENANT

TOKEN_URL = f"https://login.microsoftonline.com/{TENANT}/oauth2/token"


@pytest.fixture
def credential():
    """Client credential for the test tenant."""
    return Credential(
        client_id="test-client-id",
        client_secret="test-client-secret",
        tenant=TENANT,
    )


# ===========================
# Resource / scope helpers
# ===========================


def test_to_scopes_from_resource():
    """Test a resource URL becomes its .default scope."""
    assert to_scopes("https://graph.windows.net/") == ["https://graph.windows.net/.default"]
    assert to_scopes("https://api.manage.microsoft.com") == [
        "https://api.manage.microsoft.com/.default"
    ]


def test_to_scopes_passes_scopes_through():
    """Test explicit scopes are kept."""
    assert to_scopes(["https://graph.microsoft.com/.default", " "]) == [
        "https://graph.microsoft.com/.default"
    ]


@pytest.mark.parametrize("value", ["", "   ", [], ["", " "]])
def test_to_scopes_rejects_empty(value):
    """Test empty input is an argument error."""
    with pytest.raises(InvalidArgumentError):
        to_scopes(value)


def test_to_resource_from_scope():
    """Test a .default scope maps back to its resource."""
    assert to_resource(["https://graph.windows.net/.default"]) == "https://graph.windows.net/"
    assert to_resource("https://api.manage.microsoft.com/") == "https://api.manage.microsoft.com/"


def test_to_resource_rejects_several_resources():
    """Test the legacy authority only takes one resource."""
    with pytest.raises(InvalidArgumentError):
        to_resource(["https://a.example.com/.default", "https://b.example.com/.default"])


# ===========================
# Legacy backend
# ===========================


class TestLegacyAuthorityTokenProvider:
    """Tests for the v1 client-credentials provider."""

    def test_backend_name_and_url(self, credential):
        """Test backend name and tenant-qualified token URL."""
        provider = LegacyAuthorityTokenProvider(credential)

        assert provider.backend_name == "legacy"
        assert provider.token_url == TOKEN_URL

    def test_get_token_success(self, credential, mock_router, http_client):
        """Test a resource token is requested with the client credential."""
        # Arrange
        route = mock_router.post(TOKEN_URL).mock(
            return_value=httpx.Response(
                200,
                json={
                    "token_type": "Bearer",
                    "access_token": "legacy-token",
                    "expires_on": "1900000000",
                },
            )
        )
        provider = LegacyAuthorityTokenProvider(credential, http_client=http_client)

        # Act
        token = provider.get_token("https://graph.windows.net/")

        # Assert
        assert token.access_token == "legacy-token"
        assert token.expires_on is not None
        form = parse_qs(route.calls.last.request.content.decode())
        assert form["grant_type"] == ["client_credentials"]
        assert form["client_id"] == ["test-client-id"]
        assert form["client_secret"] == ["test-client-secret"]
        assert form["resource"] == ["https://graph.windows.net/"]

    def test_get_token_accepts_default_scope(self, credential, mock_router, http_client):
        """Test a .default scope is sent as its resource."""
        route = mock_router.post(TOKEN_URL).mock(
            return_value=httpx.Response(200, json={"access_token": "t", "expires_in": 3599})
        )
        provider = LegacyAuthorityTokenProvider(credential, http_client=http_client)

        provider.get_token(["https://api.manage.microsoft.com/.default"])

        form = parse_qs(route.calls.last.request.content.decode())
        assert form["resource"] == ["https://api.manage.microsoft.com/"]

    def test_get_token_without_shared_client(self, credential, mock_router):
        """Test a short-lived client is used when none is injected."""
        mock_router.post(TOKEN_URL).mock(
            return_value=httpx.Response(200, json={"access_token": "t"})
        )
        provider = LegacyAuthorityTokenProvider(credential)

        assert provider.get_token("https://graph.windows.net/").access_token == "t"

    def test_get_token_error_status(self, credential, mock_router, http_client):
        """Test an authority error is reported as unavailable authentication."""
        mock_router.post(TOKEN_URL).mock(
            return_value=httpx.Response(
                401,
                json={"error": "invalid_client", "error_description": "AADSTS7000215"},
            )
        )
        provider = LegacyAuthorityTokenProvider(credential, http_client=http_client)

        with pytest.raises(AuthenticationUnavailableError, match="invalid_client"):
            provider.get_token("https://graph.windows.net/")

    def test_get_token_missing_access_token(self, credential, mock_router, http_client):
        """Test a response without a token is a failure."""
        mock_router.post(TOKEN_URL).mock(return_value=httpx.Response(200, json={}))
        provider = LegacyAuthorityTokenProvider(credential, http_client=http_client)

        with pytest.raises(AuthenticationUnavailableError):
            provider.get_token("https://graph.windows.net/")

    def test_get_token_unreachable(self, credential, mock_router, http_client):
        """Test transport failures are wrapped."""
        mock_router.post(TOKEN_URL).mock(side_effect=httpx.ConnectError("refused"))
        provider = LegacyAuthorityTokenProvider(credential, http_client=http_client)

        with pytest.raises(AuthenticationUnavailableError) as exc_info:
            provider.get_token("https://graph.windows.net/")

        assert isinstance(exc_info.value.__cause__, httpx.ConnectError)
        assert exc_info.value.retryable is True


# ===========================
# Modern backend
# ===========================


class TestModernAuthorityTokenProvider:
    """Tests for the MSAL-backed provider."""

    def test_backend_name(self, credential):
        """Test backend name."""
        assert ModernAuthorityTokenProvider(credential).backend_name == "modern"

    def test_get_token_success(self, credential):
        """Test scopes are derived from the resource and passed to MSAL."""
        # Arrange
        with patch("msal.ConfidentialClientApplication") as app_class:
            app = app_class.return_value
            app.acquire_token_for_client.return_value = {
                "access_token": "modern-token",
                "token_type": "Bearer",
                "expires_in": 3599,
            }
            provider = ModernAuthorityTokenProvider(
                credential, proxy_url="http://proxy:8080", timeout=12.0
            )

            # Act
            token = provider.get_token("https://graph.windows.net/")

        # Assert
        assert token.access_token == "modern-token"
        assert token.is_expired is False
        app.acquire_token_for_client.assert_called_once_with(
            scopes=["https://graph.windows.net/.default"]
        )
        kwargs = app_class.call_args.kwargs
        assert kwargs["client_id"] == "test-client-id"
        assert kwargs["client_credential"] == "test-client-secret"
        assert kwargs["authority"] == f"https://login.microsoftonline.com/{TENANT}"
        assert kwargs["proxies"] == {"http": "http://proxy:8080", "https": "http://proxy:8080"}
        assert kwargs["timeout"] == 12.0

    def test_application_is_built_once(self, credential):
        """Test the MSAL application (and its token cache) is reused."""
        with patch("msal.ConfidentialClientApplication") as app_class:
            app_class.return_value.acquire_token_for_client.return_value = {
                "access_token": "t"
            }
            provider = ModernAuthorityTokenProvider(credential)

            provider.get_token("https://graph.windows.net/")
            provider.get_token("https://api.manage.microsoft.com/")

        app_class.assert_called_once()

    def test_get_token_error_result(self, credential):
        """Test an MSAL error result raises."""
        with patch("msal.ConfidentialClientApplication") as app_class:
            app_class.return_value.acquire_token_for_client.return_value = {
                "error": "invalid_client",
                "error_description": "AADSTS7000215: Invalid client secret",
            }
            provider = ModernAuthorityTokenProvider(credential)

            with pytest.raises(AuthenticationUnavailableError, match="invalid_client"):
                provider.get_token("https://graph.windows.net/")

    def test_get_token_msal_raises(self, credential):
        """Test MSAL exceptions are wrapped."""
        with patch("msal.ConfidentialClientApplication") as app_class:
            app_class.return_value.acquire_token_for_client.side_effect = ValueError(
                "Unable to get authority configuration"
            )
            provider = ModernAuthorityTokenProvider(credential)

            with pytest.raises(AuthenticationUnavailableError) as exc_info:
                provider.get_token("https://graph.windows.net/")

        assert isinstance(exc_info.value.__cause__, ValueError)

    def test_get_token_empty_scope(self, credential):
        """Test an empty resource is rejected before MSAL is called."""
        app_factory = MagicMock()
        with patch("msal.ConfidentialClientApplication", app_factory):
            provider = ModernAuthorityTokenProvider(credential)

            with pytest.raises(InvalidArgumentError):
                provider.get_token("")

        app_factory.assert_not_called()
