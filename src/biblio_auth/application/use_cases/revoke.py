from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from ...domain.constants import DecodeFailure
from ...domain.exceptions import MissingCredentialHeaderError
from ...domain.ports import RevocationRegistry, TokenCodec
from .authenticate import extract_bearer_token

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class RevocationOutcome:
    token_id: Optional[str]
    revoked: bool
    already_expired: bool = False


@dataclass(slots=True)
class RevokeTokenUseCase:
    """
    Application use case behind the logout endpoint: register the caller's
    own token identifier in the RevocationRegistry.

    An expired token is already unusable, so logging it out is a no-op
    that still succeeds.
    """

    token_codec: TokenCodec
    revocation_registry: RevocationRegistry

    def execute(self, authorization: Optional[str]) -> RevocationOutcome:
        """
        Raises:
            MissingCredentialHeaderError when there is no bearer header
            MalformedTokenError when the token cannot be verified
        """
        token = extract_bearer_token(authorization)
        if token is None:
            raise MissingCredentialHeaderError("Token not found or header not in 'Bearer' format")

        result = self.token_codec.decode(token)
        if result.failure is DecodeFailure.EXPIRED:
            logger.info("Logout with an already expired token")
            return RevocationOutcome(token_id=None, revoked=False, already_expired=True)

        decoded = result.unwrap()

        self.revocation_registry.revoke(decoded.token_id, decoded.expires_at)
        return RevocationOutcome(token_id=decoded.token_id, revoked=True)

    def revoke_token_id(self, token_id: str) -> RevocationOutcome:
        """Administrative revoke of an identifier, without the token itself."""
        self.revocation_registry.revoke(token_id)
        logger.info("Token revoked administratively", extra={"token_id": token_id})
        return RevocationOutcome(token_id=token_id, revoked=True)
