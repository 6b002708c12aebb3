"""Role-based access to actions."""

from typing import Any, Iterable, Mapping, Optional
from types import MappingProxyType
import json
import logging

from ..domain import AuthResponse, UserProfile
from ..exceptions import ConfigurationError
from .base import Authorizer

logger = logging.getLogger(__name__)

Policy = Mapping[str, frozenset]


def load_policy(policy: Optional[Mapping[str, Iterable[str]]] = None,
                path: Optional[str] = None) -> Policy:
    """
    Load the action policy into a read-only mapping.

    Parameters
    ----------
    policy : dict
        Maps action names to the roles allowed to perform them.
    path : str
        Path to a JSON file with the same structure. Takes precedence over
        ``policy`` if provided.

    Returns
    -------
    Mapping
        Immutable mapping of action names to frozensets of roles.

    """
    if path:
        try:
            with open(path) as f:
                policy = json.load(f)
        except (OSError, ValueError) as e:
            raise ConfigurationError(f'Could not load policy {path}') from e
    if not isinstance(policy, Mapping):
        raise ConfigurationError('Endpoint policy must be a mapping')
    table = {}
    for action, roles in policy.items():
        if isinstance(roles, str):
            roles = [roles]
        table[action] = frozenset(roles)
    logger.debug('Loaded endpoint policy for %i actions', len(table))
    return MappingProxyType(table)


class EndpointAuthorizer(Authorizer):
    """
    Checks that the user holds a role that may perform the action.

    Actions that are not in the policy table are denied.
    """

    name = 'endpoint'

    def __init__(self, policy: Policy) -> None:
        self.policy = policy

    @classmethod
    def from_config(cls, config: Mapping[str, Any]) -> 'EndpointAuthorizer':
        return cls(load_policy(config.get('ENDPOINT_POLICY') or {},
                               config.get('ENDPOINT_POLICY_FILE')))

    def authorize(self, profile: UserProfile, action: str) -> AuthResponse:
        allowed = self.policy.get(action)
        if allowed is None:
            return AuthResponse(False, None, f'Unknown action: {action}')
        if not profile.has_any_role(allowed):
            return AuthResponse(False, None, f'{profile.username} does not'
                                f' have a role permitted to {action}')
        return AuthResponse(True, profile)
