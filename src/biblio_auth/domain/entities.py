from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Mapping, Optional

from .constants import AuthState, DecodeFailure, ROLE_CLAIM
from .exceptions import MalformedTokenError, TokenExpiredError
from .value_objects import Subject


@dataclass(frozen=True, slots=True)
class DecodedToken:
    """
    Verified content of a token: signature checked, not expired.
    Says nothing about revocation.
    """
    subject: Subject
    token_id: str
    issued_at: Optional[datetime] = None
    expires_at: Optional[datetime] = None
    claims: Mapping[str, Any] = field(default_factory=dict)

    @property
    def role(self) -> Optional[str]:
        return self.claims.get(ROLE_CLAIM)


@dataclass(frozen=True, slots=True)
class DecodeResult:
    """
    Outcome of `TokenCodec.decode`: either a token, or a tagged failure.
    """
    token: Optional[DecodedToken] = None
    failure: Optional[DecodeFailure] = None
    message: str = ""

    @classmethod
    def success(cls, token: DecodedToken) -> "DecodeResult":
        return cls(token=token)

    @classmethod
    def failed(cls, failure: DecodeFailure, message: str) -> "DecodeResult":
        return cls(failure=failure, message=message)

    @property
    def ok(self) -> bool:
        return self.token is not None

    def unwrap(self) -> DecodedToken:
        """
        Raises:
            TokenExpiredError
            MalformedTokenError
        """
        if self.token is not None:
            return self.token
        if self.failure is DecodeFailure.EXPIRED:
            raise TokenExpiredError(self.message or "Token has expired")
        raise MalformedTokenError(self.message or "Invalid token")


@dataclass(frozen=True, slots=True)
class Principal:
    """
    What a credential store hands back for a successful login or registration.
    """
    subject: Subject
    role: Optional[str] = None
    profile: Mapping[str, Any] = field(default_factory=dict)


@dataclass(frozen=True, slots=True)
class Identity:
    """
    Request-scoped caller identity resolved from a validated token.
    """
    subject: Subject
    token_id: str
    role: Optional[str] = None
    issued_at: Optional[datetime] = None
    expires_at: Optional[datetime] = None

    is_authenticated = True

    @classmethod
    def from_token(cls, token: DecodedToken) -> "Identity":
        return cls(
            subject=token.subject,
            token_id=token.token_id,
            role=token.role,
            issued_at=token.issued_at,
            expires_at=token.expires_at,
        )

    def has_any_role(self, *roles: str) -> bool:
        return self.role is not None and self.role in roles


class _Anonymous:
    """Singleton published for requests without an established identity."""

    __slots__ = ()
    _instance: "Optional[_Anonymous]" = None

    is_authenticated = False
    subject = None
    role = None
    token_id = None

    def __new__(cls) -> "_Anonymous":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def has_any_role(self, *roles: str) -> bool:
        return False

    def __repr__(self) -> str:
        return "ANONYMOUS"

    def __bool__(self) -> bool:
        return False


ANONYMOUS = _Anonymous()


@dataclass(frozen=True, slots=True)
class AuthenticationResult:
    """
    Where the per-request state machine stopped, and who the caller is.
    """
    state: AuthState
    principal: "Identity | _Anonymous" = ANONYMOUS
    failure: Optional[DecodeFailure] = None

    @property
    def authenticated(self) -> bool:
        return self.state is AuthState.IDENTITY_ESTABLISHED
