from enum import Enum


class DecodeFailure(Enum):
    EXPIRED = "expired"
    MALFORMED = "malformed"


class AuthState(Enum):
    UNAUTHENTICATED = "unauthenticated"
    HEADER_CHECKED = "header_checked"
    SIGNATURE_VERIFIED = "signature_verified"
    EXPIRY_CHECKED = "expiry_checked"
    REVOCATION_CHECKED = "revocation_checked"
    IDENTITY_ESTABLISHED = "identity_established"
    REJECTED = "rejected"


# Claims the codec owns; caller-supplied claims may not override them.
REGISTERED_CLAIMS = frozenset({"sub", "jti", "iat", "exp"})

ROLE_CLAIM = "role"
BEARER_PREFIX = "Bearer "
