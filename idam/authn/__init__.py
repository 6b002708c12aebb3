"""
Pluggable authentication.

Exactly one :class:`.Authenticator` is active in a deployment. It is chosen
when the application is created, from the ``AUTHN_PROVIDER`` configuration
parameter, and attached to the application by :func:`.init_app`.

An authenticator returns an :class:`.AuthResponse` for an expected outcome
(including a rejected credential), ``None`` if it makes no decisions at all,
and raises :class:`.Unavailable` if a backend it depends on cannot be
reached. A flow the variant does not support raises
:class:`.UnsupportedOperation`.
"""

from flask import Flask, current_app

from ..domain import AuthResponse
from ..exceptions import ConfigurationError
from .base import Authenticator
from .disabled import DisabledAuthenticator
from .store import StoreAuthenticator
from .directory import DirectoryAuthenticator
from .federated import FederatedAuthenticator

PROVIDERS = {
    'disabled': DisabledAuthenticator,
    'store': StoreAuthenticator,
    'directory': DirectoryAuthenticator,
    'federated': FederatedAuthenticator,
}

EXTENSION = 'idam.authenticator'


def init_app(app: Flask) -> None:
    """Construct the configured authenticator and attach it to ``app``."""
    provider = app.config.get('AUTHN_PROVIDER', 'store')
    try:
        authenticator_class = PROVIDERS[provider]
    except KeyError as e:
        raise ConfigurationError(f'Unknown AUTHN_PROVIDER: {provider}') from e
    app.extensions[EXTENSION] = authenticator_class.from_config(app.config)


def current_authenticator() -> Authenticator:
    """Get the authenticator for the current application."""
    authenticator: Authenticator = current_app.extensions[EXTENSION]
    return authenticator


__all__ = (
    'Authenticator', 'DisabledAuthenticator', 'StoreAuthenticator',
    'DirectoryAuthenticator', 'FederatedAuthenticator', 'AuthResponse',
    'init_app', 'current_authenticator',
)
