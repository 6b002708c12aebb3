"""Exceptions."""


class ConfigurationError(RuntimeError):
    """Raised when a required service parameter is missing or invalid."""


class AuthenticationFailed(RuntimeError):
    """Failed to authenticate user with provided credentials."""


class MalformedCredential(AuthenticationFailed):
    """The credential header is missing or could not be decoded."""


class UnsupportedOperation(AuthenticationFailed):
    """The active authenticator does not support the requested flow."""


class AuthorizationFailed(RuntimeError):
    """The identity may not perform the requested action."""

    tag = 'authorizationCheckFailed'

    def __init__(self, reason: str) -> None:
        super(AuthorizationFailed, self).__init__(reason)
        self.reason = reason


class IncompleteRequest(AuthorizationFailed):
    """Neither an API key nor a username was provided."""

    tag = 'authorizationIncompleteRequest'


class IdentityMismatch(AuthorizationFailed):
    """The API key belongs to someone other than the claimed username."""

    tag = 'authorizationIdentityMismatch'


class NoSuchUser(RuntimeError):
    """User does not exist."""


class UserExists(RuntimeError):
    """A profile with the requested username already exists."""


class Unavailable(RuntimeError):
    """The identity store or an authentication backend is unreachable."""
