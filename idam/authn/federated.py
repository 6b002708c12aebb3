"""Delegate authentication to an external identity provider."""

from typing import Any, Dict, FrozenSet, Mapping, Optional, Tuple, Union
import logging

import requests

from ..audit import audit
from ..domain import AuthResponse, UserProfile, now, parse_roles
from ..exceptions import ConfigurationError, UserExists
from ..services import datastore
from .base import Authenticator

logger = logging.getLogger(__name__)


class FederatedAuthenticator(Authenticator):
    """
    Ask a federated identity provider for a decision.

    The provider is reached over a mutually authenticated TLS channel; the
    client certificate and key are supplied by the deployment. The provider
    is sent ``{"mechanism": "password", "username", "password"}`` or
    ``{"mechanism": "pki", "subject"}`` and is expected to answer with
    ``{"authenticated", "username", "distinguishedName", "details"}``. Its
    decision is returned verbatim.

    A provider that cannot be reached, or that answers with an error, has
    not authenticated anyone: the outcome is a failed authentication, not a
    fault of this service.
    """

    name = 'federated'

    def __init__(self, url: str,
                 cert: Optional[Union[str, Tuple[str, str]]] = None,
                 verify: Union[bool, str] = True, timeout: float = 10,
                 default_roles: FrozenSet[str] = frozenset()) -> None:
        self.url = url
        self.cert = cert
        self.verify = verify
        self.timeout = timeout
        self.default_roles = default_roles

    @classmethod
    def from_config(cls, config: Mapping[str, Any]) \
            -> 'FederatedAuthenticator':
        url = config.get('FEDERATED_AUTH_URL')
        if not url:
            raise ConfigurationError('FEDERATED_AUTH_URL is required')
        cert: Optional[Union[str, Tuple[str, str]]] = None
        if config.get('FEDERATED_CERT') and config.get('FEDERATED_KEY'):
            cert = (config['FEDERATED_CERT'], config['FEDERATED_KEY'])
        elif config.get('FEDERATED_CERT'):
            cert = config['FEDERATED_CERT']
        return cls(
            url=url,
            cert=cert,
            verify=config.get('FEDERATED_CA') or True,
            timeout=float(config.get('FEDERATED_TIMEOUT', 10)),
            default_roles=parse_roles(config.get('DEFAULT_ROLES', ''))
        )

    def authenticate_by_password(self, username: str, secret: str) \
            -> Optional[AuthResponse]:
        audit(f'Performing credential check for {username} against the'
              ' identity provider', username, 'loginAttempt')
        return self._decide({'mechanism': 'password', 'username': username,
                             'password': secret}, username)

    def authenticate_by_certificate(self, subject: str) \
            -> Optional[AuthResponse]:
        audit('Performing certificate check against the identity provider',
              None, 'loginAttempt', subject)
        return self._decide({'mechanism': 'pki', 'subject': subject})

    def _decide(self, payload: Dict[str, str],
                claimed: Optional[str] = None) -> AuthResponse:
        try:
            response = requests.post(self.url, json=payload, cert=self.cert,
                                     verify=self.verify, timeout=self.timeout)
        except requests.exceptions.RequestException as e:
            logger.error('Identity provider at %s is unavailable: %s',
                         self.url, e)
            return self._unavailable(claimed, str(e))

        if response.status_code >= 500:
            return self._unavailable(claimed,
                                     f'returned {response.status_code}')
        try:
            data = response.json()
        except ValueError:
            return self._unavailable(claimed, 'response is not JSON')
        if not isinstance(data, dict):
            return self._unavailable(claimed, 'response is malformed')

        details = str(data.get('details') or '')
        username = data.get('username') or claimed
        if not data.get('authenticated') or not username:
            audit('Federated authentication failed', claimed,
                  'userFailedAuthentication', details)
            return AuthResponse(False, None, details)

        profile = self._ensure_profile(username,
                                       data.get('distinguishedName') or '')
        audit('Federated authentication succeeded', username, 'userLoggedIn')
        return AuthResponse(True, profile, details)

    def _ensure_profile(self, username: str, dn: str) -> UserProfile:
        """Load the local profile, creating it for first-time identities."""
        profile = datastore.find_profile_by_username(username)
        if profile is not None:
            return profile
        created = now()
        profile = UserProfile(username=username, distinguished_name=dn,
                              roles=self.default_roles, created_on=created,
                              last_updated_on=created)
        try:
            datastore.insert_profile(profile)
            audit(f'Created profile for federated identity {username}',
                  username, 'createUser', dn)
        except UserExists:
            # Created concurrently by another request.
            profile = datastore.find_profile_by_username(username) or profile
        return profile

    def _unavailable(self, claimed: Optional[str], cause: str) -> AuthResponse:
        """Without a decision from the provider, nobody is authenticated."""
        details = f'Identity provider is unavailable: {cause}'
        audit('Federated authentication failed', claimed,
              'userFailedAuthentication', details)
        return AuthResponse(False, None, details)
