"""Identity resolution followed by an ordered sequence of authorizers."""

from typing import Sequence, Tuple
import logging

from ..audit import audit
from ..domain import AuthorizationCheck, AuthResponse, UserProfile
from ..exceptions import AuthorizationFailed, IdentityMismatch, \
    IncompleteRequest
from ..services import datastore, keys
from .base import Authorizer

logger = logging.getLogger(__name__)


class AuthorizationChain(object):
    """
    Decides whether an identity may perform an action.

    The identity is resolved from the API key and/or username on the check,
    failing closed if they are missing, disagree, or name a user with no
    profile. The authorizers are then consulted in order, and the first
    failure ends the evaluation.
    """

    def __init__(self, authorizers: Sequence[Authorizer]) -> None:
        self.authorizers = tuple(authorizers)

    def authorize(self, check: AuthorizationCheck) -> AuthResponse:
        """
        Evaluate ``check``.

        Returns
        -------
        :class:`.AuthResponse`
            The resolved profile on success; a reason on failure.

        Raises
        ------
        :class:`.Unavailable`
            If the identity store cannot be reached.

        """
        audit('Checking authorization for action', check.username,
              'authorizationCheckForAction', str(check))
        try:
            username, profile = self._resolve(check)
            for authorizer in self.authorizers:
                response = authorizer.authorize(profile, check.action)
                if not response.success:
                    raise AuthorizationFailed(response.details)
        except IdentityMismatch as e:
            audit(f'API key identity does not match: {e.reason}',
                  check.username, e.tag, str(check), level=logging.WARNING)
            return AuthResponse(False, None, e.reason)
        except AuthorizationFailed as e:
            audit(f'Failed authorization check: {e.reason}', check.username,
                  e.tag, str(check))
            return AuthResponse(False, None, e.reason)

        audit('Passed authorization check', username,
              'authorizationCheckPassed', str(check))
        return AuthResponse(True, profile)

    def _resolve(self, check: AuthorizationCheck) -> Tuple[str, UserProfile]:
        username = check.username
        if check.api_key:
            owner = keys.lookup_owner(check.api_key)
            if owner is None:
                raise AuthorizationFailed('Invalid API Key.')
            if not username:
                username = owner
            elif owner != username:
                raise IdentityMismatch('identity mismatch: API key does not'
                                       f' belong to {username}')
        elif not username:
            raise IncompleteRequest('incomplete request: API key or username'
                                    ' not specified')

        profile = datastore.find_profile_by_username(username)
        if profile is None:
            raise AuthorizationFailed(f'no profile for identity {username}')
        return username, profile
