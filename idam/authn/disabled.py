"""Authenticator for deployments where authentication happens upstream."""

from typing import Optional
import logging

from ..domain import AuthResponse
from .base import Authenticator

logger = logging.getLogger(__name__)


class DisabledAuthenticator(Authenticator):
    """
    Makes no decisions.

    Used when the boundary is trusted by deployment topology, e.g. behind a
    gateway that has already authenticated the caller. Nothing should ask
    this authenticator for a decision; if something does, the answer is
    ``None`` and the caller must treat it as a failure.
    """

    name = 'disabled'

    def authenticate_by_password(self, username: str, secret: str) \
            -> Optional[AuthResponse]:
        logger.warning('Password authentication requested for %s, but'
                       ' authentication is disabled', username)
        return None

    def authenticate_by_certificate(self, subject: str) \
            -> Optional[AuthResponse]:
        logger.warning('Certificate authentication requested, but'
                       ' authentication is disabled')
        return None
