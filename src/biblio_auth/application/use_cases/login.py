from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, Optional

from ...domain.constants import ROLE_CLAIM
from ...domain.entities import Principal
from ...domain.ports import CredentialStore, TokenCodec
from ...domain.value_objects import Registration

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class IssuedToken:
    token: str
    principal: Principal
    token_id: str
    expires_at: Optional[datetime]


@dataclass(slots=True)
class IssueTokenUseCase:
    """
    Application use case behind the login and registration endpoints:
    - Ask the CredentialStore port who the caller is
    - Wrap the answer in a freshly signed token via the TokenCodec port
    """

    credential_store: CredentialStore
    token_codec: TokenCodec

    def login(self, nick: str, password: str) -> IssuedToken:
        """
        Raises:
            InvalidCredentialsError (from the credential store)
        """
        principal = self.credential_store.authenticate(nick, password)
        logger.info("Login succeeded", extra={"subject": str(principal.subject)})
        return self._issue(principal)

    def register(self, registration: Registration) -> IssuedToken:
        """
        Raises:
            SubjectAlreadyExistsError (from the credential store)
        """
        principal = self.credential_store.register(registration)
        logger.info("Registered new subject", extra={"subject": str(principal.subject)})
        return self._issue(principal)

    def _issue(self, principal: Principal) -> IssuedToken:
        claims: Dict[str, Any] = {}
        if principal.role is not None:
            claims[ROLE_CLAIM] = principal.role

        token = self.token_codec.issue(str(principal.subject), claims)

        # read back what was signed so callers get the real jti/exp
        decoded = self.token_codec.decode(token).unwrap()

        return IssuedToken(
            token=token,
            principal=principal,
            token_id=decoded.token_id,
            expires_at=decoded.expires_at,
        )
