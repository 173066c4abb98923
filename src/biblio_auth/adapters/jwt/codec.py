import uuid
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Dict, Mapping, Optional

import jwt
from jwt.exceptions import (
    DecodeError,
    ExpiredSignatureError,
    InvalidSignatureError,
    InvalidTokenError as JWTInvalidTokenError,
)

from ...domain.constants import DecodeFailure, REGISTERED_CLAIMS
from ...domain.entities import DecodedToken, DecodeResult
from ...domain.ports import TokenCodec
from ...domain.value_objects import Subject

DEFAULT_TOKEN_TTL_SECONDS = 60 * 60 * 24


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _as_datetime(value: Any) -> Optional[datetime]:
    if value is None:
        return None
    return datetime.fromtimestamp(int(value), tz=timezone.utc)


class JWTTokenCodec(TokenCodec):
    """
    Adapter implementing TokenCodec port using PyJWT and a shared HMAC secret.

    Infrastructure layer:
    - Knows about JWT structure, signing and verification.
    - Knows nothing about revocation.
    """

    def __init__(
        self,
        secret_key: str,
        *,
        ttl_seconds: int = DEFAULT_TOKEN_TTL_SECONDS,
        algorithm: str = "HS256",
        leeway_seconds: int = 0,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        if not secret_key:
            raise ValueError("JWTTokenCodec needs a non-empty secret key")
        self._secret_key = secret_key
        self._ttl = timedelta(seconds=ttl_seconds)
        self._algorithm = algorithm
        self._leeway = leeway_seconds
        self._clock = clock

    @property
    def ttl(self) -> timedelta:
        return self._ttl

    # ------------------------------------------------------------------ #
    # Port implementation
    # ------------------------------------------------------------------ #

    def issue(self, subject: str, claims: Optional[Mapping[str, Any]] = None) -> str:
        """
        Sign a new token.

        Caller claims are copied first so the registered claims
        (sub, jti, iat, exp) always win.
        """
        issued_at = self._clock()
        payload: Dict[str, Any] = {
            k: v for k, v in (claims or {}).items() if k not in REGISTERED_CLAIMS
        }
        payload.update(
            {
                "sub": str(Subject(subject)),
                "jti": str(uuid.uuid4()),
                "iat": issued_at,
                "exp": issued_at + self._ttl,
            }
        )
        return jwt.encode(payload, self._secret_key, algorithm=self._algorithm)

    def decode(self, token: str) -> DecodeResult:
        """
        Decode and validate a JWT.

        PyJWT checks the signature before it looks at any claim, so an
        expired-but-forged token is reported as malformed, not expired.
        """
        try:
            payload = jwt.decode(
                token,
                self._secret_key,
                algorithms=[self._algorithm],
                leeway=self._leeway,
                options={"require": ["sub", "jti", "iat", "exp"]},
            )
        except ExpiredSignatureError:
            return DecodeResult.failed(DecodeFailure.EXPIRED, "Token has expired")
        except (InvalidSignatureError, DecodeError, JWTInvalidTokenError) as exc:
            return DecodeResult.failed(DecodeFailure.MALFORMED, f"Invalid token: {exc}")

        if not str(payload["jti"]).strip():
            return DecodeResult.failed(DecodeFailure.MALFORMED, "Invalid token: empty jti")

        try:
            decoded = DecodedToken(
                subject=Subject(str(payload["sub"])),
                token_id=str(payload["jti"]),
                issued_at=_as_datetime(payload.get("iat")),
                expires_at=_as_datetime(payload.get("exp")),
                claims={k: v for k, v in payload.items() if k not in REGISTERED_CLAIMS},
            )
        except (TypeError, ValueError) as exc:
            return DecodeResult.failed(DecodeFailure.MALFORMED, f"Invalid token claims: {exc}")

        return DecodeResult.success(decoded)
