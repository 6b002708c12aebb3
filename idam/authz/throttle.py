"""Per-user quotas on actions."""

from typing import Any, Mapping
import logging

from ..domain import AuthResponse, UserProfile
from ..exceptions import ConfigurationError
from .base import Authorizer

logger = logging.getLogger(__name__)


class ThrottleAuthorizer(Authorizer):
    """
    Limits the number of times a user may perform actions in a category.

    Actions map to throttle categories, and each category has a limit. An
    action with no category consumes no quota. A user may act while their
    count for the category is below the limit; each permitted action adds one
    to the count. The comparison and the increment happen together at the
    store, so concurrent requests cannot overrun the limit.
    """

    name = 'throttle'

    def __init__(self, categories: Mapping[str, str],
                 limits: Mapping[str, int], counters: Any) -> None:
        missing = set(categories.values()) - set(limits)
        if missing:
            raise ConfigurationError('No throttle limit for categories: '
                                     + ', '.join(sorted(missing)))
        try:
            self.limits = {category: int(limit)
                           for category, limit in limits.items()}
        except (TypeError, ValueError) as e:
            raise ConfigurationError('Throttle limits must be integers') from e
        self.categories = dict(categories)
        self.counters = counters

    def authorize(self, profile: UserProfile, action: str) -> AuthResponse:
        category = self.categories.get(action)
        if category is None:
            return AuthResponse(True, profile)

        limit = self.limits[category]
        if not self.counters.consume(profile.username, category, limit):
            return AuthResponse(False, None, f'{profile.username} has'
                                f' exceeded the {category} limit of {limit}')
        logger.debug('%s used one of %i %s', profile.username, limit,
                     category)
        return AuthResponse(True, profile)
