"""
Authorization of actions.

An :class:`.AuthorizationChain` is built when the application is created. It
resolves the identity behind an :class:`.AuthorizationCheck` and then runs
the :class:`.EndpointAuthorizer` and the :class:`.ThrottleAuthorizer`, in that
order.
"""

from flask import Flask, current_app

from ..services import counters
from .base import Authorizer
from .chain import AuthorizationChain
from .endpoint import EndpointAuthorizer, load_policy
from .throttle import ThrottleAuthorizer

EXTENSION = 'idam.authorization'


def init_app(app: Flask) -> None:
    """
    Build the authorization chain from config and attach it to ``app``.

    The throttle counter backend must already be attached.
    """
    app.extensions[EXTENSION] = AuthorizationChain([
        EndpointAuthorizer.from_config(app.config),
        ThrottleAuthorizer(app.config.get('THROTTLE_CATEGORIES') or {},
                           app.config.get('THROTTLE_LIMITS') or {},
                           app.extensions[counters.EXTENSION]),
    ])


def current_chain() -> AuthorizationChain:
    """Get the authorization chain for the current application."""
    chain: AuthorizationChain = current_app.extensions[EXTENSION]
    return chain


__all__ = (
    'Authorizer', 'AuthorizationChain', 'EndpointAuthorizer',
    'ThrottleAuthorizer', 'load_policy', 'init_app', 'current_chain',
)
