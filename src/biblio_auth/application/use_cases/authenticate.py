from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from ...domain.constants import AuthState, BEARER_PREFIX, DecodeFailure
from ...domain.entities import ANONYMOUS, AuthenticationResult, Identity
from ...domain.exceptions import TokenRevokedError
from ...domain.ports import RevocationRegistry, TokenCodec

logger = logging.getLogger(__name__)


def extract_bearer_token(authorization: Optional[str]) -> Optional[str]:
    """
    Return the token from an `Authorization: Bearer <token>` header value,
    or None when the header is absent, uses another scheme, or is empty.
    """
    if not authorization or not authorization.startswith(BEARER_PREFIX):
        return None
    token = authorization.removeprefix(BEARER_PREFIX).strip()
    return token or None


@dataclass(slots=True)
class AuthenticateRequestUseCase:
    """
    Application use case run once per inbound request:
    - Pull the bearer token out of the Authorization header
    - Decode it via the TokenCodec port (signature, then expiry)
    - Consult the RevocationRegistry port
    - Resolve the caller's Identity

    Malformed and expired tokens are not errors here: the request simply
    carries on as anonymous and route authorization decides what to answer.
    A revoked token is different, it raises TokenRevokedError so the caller
    can stop the request outright.
    """

    token_codec: TokenCodec
    revocation_registry: RevocationRegistry

    def execute(self, authorization: Optional[str]) -> AuthenticationResult:
        """
        Raises:
            TokenRevokedError
        """
        token = extract_bearer_token(authorization)
        if token is None:
            return AuthenticationResult(state=AuthState.UNAUTHENTICATED)

        # HEADER_CHECKED -> SIGNATURE_VERIFIED -> EXPIRY_CHECKED
        result = self.token_codec.decode(token)
        decoded = result.token
        if decoded is None:
            self._log_rejection(result.failure, result.message)
            return AuthenticationResult(state=AuthState.REJECTED, failure=result.failure)

        # REVOCATION_CHECKED
        if self.revocation_registry.is_revoked(decoded.token_id):
            logger.warning(
                "Revoked token presented",
                extra={"subject": str(decoded.subject), "token_id": decoded.token_id},
            )
            raise TokenRevokedError("Token has been revoked")

        return AuthenticationResult(
            state=AuthState.IDENTITY_ESTABLISHED,
            principal=Identity.from_token(decoded),
        )

    @staticmethod
    def _log_rejection(failure: Optional[DecodeFailure], message: str) -> None:
        if failure is DecodeFailure.EXPIRED:
            logger.info("Expired token treated as anonymous")
        else:
            logger.warning("Rejected token treated as anonymous: %s", message)
