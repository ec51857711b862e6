"""Global pytest configuration and fixtures for all tests."""

import os
from unittest.mock import MagicMock

import httpx
import pytest
import respx

from caconnector.config import Settings
from caconnector.domain.services.token_provider import TokenProvider
from caconnector.models.auth import Token

TENANT = "contoso.onmicrosoft.com"
SCEP_BASE_URL = "https://scep.manage.example.com/TrafficGateway/ScepRequestValidationFEService"
PKI_BASE_URL = "https://pki.manage.example.com/TrafficGateway/PkiConnectorFEService"


@pytest.fixture(scope="session", autouse=True)
def set_test_env_vars():
    """
    Set environment variables for testing.

    These are NOT real credentials - just placeholders for testing.
    """
    # Store original values to restore after tests
    original_env = {}

    test_env_vars = {
        "AAD_APP_ID": "11111111-2222-3333-4444-555555555555",
        "AAD_APP_KEY": "test-app-key-for-testing-only",
        "TENANT": TENANT,
        "PROVIDER_NAME_AND_VERSION": "ContosoCA/1.0",
    }

    for key, value in test_env_vars.items():
        original_env[key] = os.environ.get(key)
        os.environ[key] = value

    yield

    # Restore original environment after all tests
    for key, original_value in original_env.items():
        if original_value is None:
            os.environ.pop(key, None)
        else:
            os.environ[key] = original_value


def make_settings(**overrides) -> Settings:
    """Build settings that ignore any local .env file."""
    values = {
        "aad_app_id": "11111111-2222-3333-4444-555555555555",
        "aad_app_key": "test-app-key-for-testing-only",
        "tenant": TENANT,
        "provider_name_and_version": "ContosoCA/1.0",
    }
    values.update(overrides)
    return Settings(_env_file=None, **values)


def directory_payload(key: str = "serviceName", services: dict | None = None) -> dict:
    """Directory response listing the given services (name -> uri)."""
    if services is None:
        services = {
            "ScepRequestValidationFEService": SCEP_BASE_URL,
            "PkiConnectorFEService": PKI_BASE_URL,
        }
    return {"value": [{key: name, "uri": uri} for name, uri in services.items()]}


@pytest.fixture
def token_provider():
    """Token provider double returning a fixed bearer token."""
    provider = MagicMock(spec=TokenProvider)
    provider.backend_name = "static"
    provider.get_token.return_value = Token(access_token="test-access-token")
    return provider


@pytest.fixture
def mock_router():
    """Intercept every httpx request; unmatched requests fail the test."""
    with respx.mock(assert_all_called=False) as router:
        yield router


@pytest.fixture
def directory_route(mock_router):
    """AAD Graph directory answering with both management services."""
    return mock_router.get(host="graph.windows.net").mock(
        return_value=httpx.Response(200, json=directory_payload())
    )


@pytest.fixture
def http_client():
    """Plain httpx client, intercepted by respx when mock_router is active."""
    client = httpx.Client()
    yield client
    client.close()
