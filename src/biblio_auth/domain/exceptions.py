class AuthenticationError(Exception):
    """Raised when authentication fails."""
    pass


class AuthorizationError(Exception):
    """Raised when the caller lacks a required role."""
    pass


class MalformedTokenError(AuthenticationError):
    """Raised when a token cannot be parsed or its signature does not verify."""
    pass


class TokenExpiredError(AuthenticationError):
    """Raised when token has expired."""
    pass


class TokenRevokedError(AuthenticationError):
    """Raised when a well-formed, unexpired token was revoked by a logout."""
    pass


class MissingCredentialHeaderError(AuthenticationError):
    """Raised when an endpoint needs a bearer header and none was sent."""
    pass


class InvalidCredentialsError(AuthenticationError):
    """Raised by a credential store when nick/password do not match."""
    pass


class SubjectAlreadyExistsError(Exception):
    """Raised by a credential store when registering a taken nick."""
    pass


class RemoteRevocationUnreachableError(Exception):
    """Raised by the client when the server-side logout call fails."""
    pass
