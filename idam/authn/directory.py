"""Authenticate users with a simple bind against an LDAP directory."""

from typing import Any, Dict, Iterable, Mapping, Optional
import hmac
import logging

from ldap3 import Connection, Server, SIMPLE, NONE
from ldap3.core.exceptions import LDAPException
from ldap3.utils.dn import escape_rdn

from ..audit import audit
from ..domain import AuthResponse, UserProfile
from ..exceptions import Unavailable
from ..services import datastore
from .base import Authenticator

logger = logging.getLogger(__name__)

PRODUCTION_SPACE = 'prod'


def parse_test_users(value: str) -> Dict[str, str]:
    """Parse ``user:credential`` pairs separated by commas."""
    users = {}
    for pair in value.split(','):
        username, sep, credential = pair.strip().partition(':')
        if username and sep and credential:
            users[username] = credential
    return users


class DirectoryAuthenticator(Authenticator):
    """
    Password authentication by binding to a directory as the user.

    A small allow-list of pre-shared credentials can be enabled for
    integration testing. It is honoured only when the service runs in one of
    the override spaces, and never in production.
    """

    name = 'directory'

    def __init__(self, url: str, user_dn: str, timeout: float = 5,
                 space: str = '', override_spaces: Iterable[str] = (),
                 test_users: Optional[Mapping[str, str]] = None) -> None:
        self.url = url
        self.user_dn = user_dn
        self.timeout = timeout
        self.space = space.lower()
        self.override_spaces = {s.strip().lower() for s in override_spaces
                                if s.strip()} - {PRODUCTION_SPACE}
        self.test_users = dict(test_users or {})

    @classmethod
    def from_config(cls, config: Mapping[str, Any]) -> 'DirectoryAuthenticator':
        return cls(
            url=config['LDAP_URL'],
            user_dn=config['LDAP_USER_DN'],
            timeout=float(config.get('LDAP_TIMEOUT', 5)),
            space=config.get('SPACE', ''),
            override_spaces=config.get('OVERRIDE_SPACES', '').split(','),
            test_users=parse_test_users(config.get('TEST_USERS', ''))
        )

    def principal(self, username: str) -> str:
        """The distinguished name used to bind as ``username``."""
        return f'uid={escape_rdn(username)},{self.user_dn}'

    def is_override_space(self) -> bool:
        """Whether pre-shared test credentials are honoured here."""
        return self.space in self.override_spaces

    def is_approved_test_user(self, username: str, secret: str) -> bool:
        """Whether ``username`` and ``secret`` match a pre-shared credential."""
        expected = self.test_users.get(username)
        if expected is None:
            return False
        return hmac.compare_digest(expected.encode('utf-8'),
                                   secret.encode('utf-8'))

    def authenticate_by_password(self, username: str, secret: str) \
            -> Optional[AuthResponse]:
        """
        Bind to the directory as ``username``.

        Raises
        ------
        :class:`.Unavailable`
            Raised if the directory cannot be reached within the timeout.

        """
        if not username or not secret:
            # An empty simple bind is an anonymous bind, and would succeed.
            audit('Directory authentication failed', username,
                  'userFailedAuthentication', 'missing username or secret')
            return AuthResponse(False, None, 'Username and secret required')

        if self.is_override_space() \
                and self.is_approved_test_user(username, secret):
            audit(f'Pre-shared test credential accepted for {username} in'
                  f' space {self.space}', username, 'testUserBypass',
                  level=logging.WARNING)
            return AuthResponse(True, self._profile(username))

        if not self._bind(self.principal(username), secret):
            logger.info('User authentication failed for %s', username)
            audit('Directory authentication failed', username,
                  'userFailedAuthentication', 'bind rejected')
            return AuthResponse(False, None, 'Invalid username or password')

        audit('Directory authentication succeeded', username, 'userLoggedIn')
        return AuthResponse(True, self._profile(username))

    def _bind(self, principal: str, secret: str) -> bool:
        server = Server(self.url, connect_timeout=self.timeout, get_info=NONE)
        connection = Connection(server, user=principal, password=secret,
                                authentication=SIMPLE,
                                receive_timeout=self.timeout)
        try:
            bound: bool = connection.bind()
        except LDAPException as e:
            logger.error('Directory at %s is unavailable: %s', self.url, e)
            raise Unavailable(f'Directory is unavailable: {e}') from e
        finally:
            connection.unbind()
        return bound

    def _profile(self, username: str) -> UserProfile:
        profile = datastore.find_profile_by_username(username)
        if profile is None:
            # Authenticated, but not yet known to the identity store.
            return UserProfile(username=username,
                               distinguished_name=self.principal(username))
        return profile
