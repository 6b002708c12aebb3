"""Authenticate users against password hashes in the identity store."""

from typing import Optional
import logging

from ..audit import audit
from ..domain import AuthResponse
from ..services import datastore
from .base import Authenticator
from .passwords import check_password

logger = logging.getLogger(__name__)


class StoreAuthenticator(Authenticator):
    """Password authentication against the stored profile credential."""

    name = 'store'

    def authenticate_by_password(self, username: str, secret: str) \
            -> Optional[AuthResponse]:
        """
        Verify ``secret`` against the profile stored for ``username``.

        Parameters
        ----------
        username : str
        secret : str

        Returns
        -------
        :class:`.AuthResponse`
            Successful only if the profile exists and the hash matches.

        Raises
        ------
        :class:`.Unavailable`
            Raised if the identity store cannot be reached.

        """
        audit(f'Performing credential check for {username} against the'
              ' identity store', username, 'loginAttempt')
        profile = datastore.find_profile_by_username(username)
        if profile is None or not profile.credential:
            logger.debug('No credential stored for %s', username)
            audit('Store authentication failed', username,
                  'userFailedAuthentication', 'no such user')
            return AuthResponse(False, None, 'Invalid username or password')

        if not check_password(secret, profile.credential):
            audit('Store authentication failed', username,
                  'userFailedAuthentication', 'incorrect password')
            return AuthResponse(False, None, 'Invalid username or password')

        audit('Store authentication succeeded', username, 'userLoggedIn')
        return AuthResponse(True, profile)
