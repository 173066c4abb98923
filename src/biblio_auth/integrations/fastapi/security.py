from __future__ import annotations

from typing import Union

from fastapi import Request
from fastapi.security import HTTPBearer

from ...domain.entities import ANONYMOUS, Identity, _Anonymous

# Expose this so apps can plug it into dependencies if they want OpenAPI security
bearer_scheme = HTTPBearer(auto_error=False)

IDENTITY_STATE_KEY = "identity"


def get_request_principal(request: Request) -> Union[Identity, _Anonymous]:
    """
    Read the principal the request authenticator published for this request.

    Requests that never went through the middleware (exempt paths, or apps
    that did not install it) are anonymous.
    """
    principal = request.scope.get("state", {}).get(IDENTITY_STATE_KEY)
    if isinstance(principal, Identity):
        return principal
    return ANONYMOUS

