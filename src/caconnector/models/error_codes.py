"""Symbolic error codes returned by the management services."""

from enum import Enum, IntEnum

from loguru import logger


class ScepErrorCode(str, Enum):
    """
    Result codes of the SCEP validation and notification service.

    Values match the strings the service returns in the ``code`` field.
    """

    UNKNOWN = "Unknown"
    SUCCESS = "Success"
    CERTIFICATE_REQUEST_DECODING_FAILED = "CertificateRequestDecodingFailed"
    CHALLENGE_PASSWORD_MISSING = "ChallengePasswordMissing"
    CHALLENGE_DESERIALIZATION_ERROR = "ChallengeDeserializationError"
    CHALLENGE_DECRYPTION_ERROR = "ChallengeDecryptionError"
    CHALLENGE_DECODING_ERROR = "ChallengeDecodingError"
    CHALLENGE_INVALID_TIMESTAMP = "ChallengeInvalidTimestamp"
    CHALLENGE_EXPIRED = "ChallengeExpired"
    SUBJECT_NAME_MISSING = "SubjectNameMissing"
    SUBJECT_NAME_MISMATCH = "SubjectNameMismatch"
    SUBJECT_ALT_NAME_MISSING = "SubjectAltNameMissing"
    SUBJECT_ALT_NAME_MISMATCH = "SubjectAltNameMismatch"
    KEY_USAGE_MISMATCH = "KeyUsageMismatch"
    KEY_LENGTH_MISMATCH = "KeyLengthMismatch"
    ENHANCED_KEY_USAGE_MISSING = "EnhancedKeyUsageMissing"
    ENHANCED_KEY_USAGE_MISMATCH = "EnhancedKeyUsageMismatch"
    AAD_KEY_IDENTIFIER_LIST_MISSING = "AadKeyIdentifierListMissing"
    REGISTERED_KEY_MISMATCH = "RegisteredKeyMismatch"
    SIGNING_CERT_THUMBPRINT_MISMATCH = "SigningCertThumbprintMismatch"
    SCEP_PROFILE_NO_LONGER_TARGETED_TO_THE_CLIENT = (
        "ScepProfileNoLongerTargetedToTheClient"
    )
    SIGNATURE_VALIDATION_FAILED = "SignatureValidationFailed"
    BAD_CERTIFICATE_REQUEST_ID_IN_CHALLENGE = "BadCertificateRequestIdInChallenge"
    BAD_DEVICE_ID_IN_CHALLENGE = "BadDeviceIdInChallenge"
    BAD_USER_ID_IN_CHALLENGE = "BadUserIdInChallenge"

    @classmethod
    def parse(cls, value: object) -> "ScepErrorCode":
        """
        Map a server-supplied code onto a member.

        The exact server string is tried first. A code differing only in
        case or surrounding whitespace (``"success"``, ``" Success "``)
        still maps to its member.

        Never raises: anything unrecognised (including None) becomes
        ``UNKNOWN`` so newer server responses do not crash the client.

        Args:
            value: Raw ``code`` value from the response body

        Returns:
            Matching member, or UNKNOWN
        """
        if isinstance(value, str):
            try:
                return cls(value)
            except ValueError:
                folded = value.strip().lower()
                for member in cls:
                    if member.value.lower() == folded:
                        return member

        logger.warning(f"Error Code value not expected: {value!r}")
        return cls.UNKNOWN


class CARequestErrorCode(IntEnum):
    """Error codes reported back for each processed revocation request."""

    # No errors occurred
    NONE = 0
    # Non-retryable
    NON_RETRYABLE_SERVICE_EXCEPTION = 4000
    DATA_SERIALIZATION_ERROR = 4001
    PARAMETER_DATA_INVALID_ERROR = 4002
    CRYPTOGRAPHY_ERROR = 4003
    CERTIFICATE_NOT_FOUND_ERROR = 4004
    CONFLICT_ERROR = 4005  # e.g. certificate already revoked
    NOT_SUPPORTED_ERROR = 4006
    PAYLOAD_TOO_LARGE_ERROR = 4007
    # Retryable
    RETRYABLE_SERVICE_EXCEPTION = 4100
    SERVICE_UNAVAILABLE_EXCEPTION = 4101
    SERVICE_TOO_BUSY_EXCEPTION = 4102
    AUTHENTICATION_EXCEPTION = 4103

    @property
    def retryable(self) -> bool:
        """Whether the CA may retry the request later."""
        return self >= 4100
