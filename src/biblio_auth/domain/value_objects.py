# src/biblio_auth/domain/value_objects.py

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, FrozenSet, Iterable, Mapping, Optional


# --- Identity value objects ----------------------------------------------


@dataclass(frozen=True, slots=True)
class Subject:
    """
    The stable identity string a token asserts for its bearer
    (the user's nick in the library backend).
    """
    value: str

    def __post_init__(self) -> None:
        if not self.value or not self.value.strip():
            raise ValueError("Subject must be a non-empty string")

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True, slots=True)
class Registration:
    """
    Data handed to the credential store when a new user signs up.

    The password is passed through untouched; hashing it is the store's job.
    """
    nick: str
    password: str
    role: Optional[str] = None
    profile: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if not self.nick.strip():
            raise ValueError("Registration nick must not be blank")
        if not self.password:
            raise ValueError("Registration password must not be empty")


# --- Routing value objects -----------------------------------------------


def _normalize_paths(paths: Iterable[str]) -> FrozenSet[str]:
    """
    Normalize an iterable of paths into a frozenset, dropping trailing slashes.
    If a plain string is passed, treat it as a single-element collection.
    """
    if isinstance(paths, str):
        paths = (paths,)
    return frozenset(p.rstrip("/") or "/" for p in paths)


@dataclass(frozen=True, slots=True)
class RoutePolicy:
    """
    Declarative allow-lists consulted around the request authenticator.

    - exempt_paths: requests to these paths skip the authenticator entirely
      (the registration endpoint).
    - public_paths: reachable without an identity (login, registration, error).

    Both are exact-path matches, never prefixes.
    """

    exempt_paths: FrozenSet[str] = frozenset()
    public_paths: FrozenSet[str] = frozenset()

    def __init__(
            self,
            exempt_paths: Iterable[str] | None = None,
            public_paths: Iterable[str] | None = None,
    ) -> None:
        exempt = _normalize_paths(exempt_paths or ())
        # an exempt path is always public as well
        object.__setattr__(self, "exempt_paths", exempt)
        object.__setattr__(self, "public_paths", _normalize_paths(public_paths or ()) | exempt)

    @staticmethod
    def _key(path: str) -> str:
        return path.rstrip("/") or "/"

    def is_exempt(self, path: str) -> bool:
        return self._key(path) in self.exempt_paths

    def is_public(self, path: str) -> bool:
        return self._key(path) in self.public_paths
