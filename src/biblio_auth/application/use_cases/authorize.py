from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Union

from ...domain.entities import Identity, _Anonymous
from ...domain.exceptions import AuthenticationError, AuthorizationError


@dataclass(slots=True)
class AuthorizeAccessUseCase:
    """
    Application use case for route authorization.

    Takes:
      - the principal published by the request authenticator
        (an Identity, or ANONYMOUS)
      - the roles a route accepts (any of them; empty means any identity)

    and raises AuthenticationError for anonymous callers, AuthorizationError
    when the identity holds none of the roles.
    """

    def execute(
            self,
            principal: Union[Identity, _Anonymous],
            roles: Iterable[str] = (),
    ) -> Identity:
        """
        Raises:
            AuthenticationError if nobody is authenticated.
            AuthorizationError if the role requirement is not satisfied.

        Returns:
            The Identity if authorization succeeds (for chaining).
        """
        if not isinstance(principal, Identity):
            raise AuthenticationError("Not authenticated")

        wanted = tuple(roles)
        if wanted and not principal.has_any_role(*wanted):
            raise AuthorizationError(
                f"Missing at least one required role from: {list(wanted)}"
            )

        return principal
