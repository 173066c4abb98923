from __future__ import annotations

from datetime import datetime
from typing import Any, Mapping, Optional, Protocol

from .entities import DecodeResult, Principal
from .value_objects import Registration


class TokenCodec(Protocol):
    """
    Port for issuing and decoding signed access tokens.

    Implementations live in the adapters layer (e.g. the PyJWT codec).
    """

    def issue(self, subject: str, claims: Optional[Mapping[str, Any]] = None) -> str:
        """Sign a fresh token for `subject` with a new token identifier."""
        ...

    def decode(self, token: str) -> DecodeResult:
        """
        Verify signature, then expiry.

        Never raises for bad input: failures come back as a tagged
        DecodeResult. Does not know about revocation.
        """
        ...


class RevocationRegistry(Protocol):
    """
    Port for the set of token identifiers that must no longer be honored.
    """

    def revoke(self, token_id: str, expires_at: Optional[datetime] = None) -> None: ...

    def is_revoked(self, token_id: str) -> bool: ...


class CredentialStore(Protocol):
    """
    Port for the host application's user records.

    Password hashing and storage are entirely the implementation's concern.
    """

    def authenticate(self, nick: str, password: str) -> Principal:
        """
        Raises:
          - InvalidCredentialsError
        """
        ...

    def register(self, registration: Registration) -> Principal:
        """
        Raises:
          - SubjectAlreadyExistsError
        """
        ...


class SessionStorage(Protocol):
    """
    Port for the client's durable token slot (replace-or-clear only).
    """

    def load(self) -> Optional[str]: ...

    def store(self, token: str) -> None: ...

    def erase(self) -> None: ...


class RevocationClient(Protocol):
    """
    Port for the client's call to the server-side logout endpoint.
    """

    async def revoke(self, token: str) -> None:
        """
        Raises:
          - RemoteRevocationUnreachableError
        """
        ...
