"""Base class for authorizers."""

from ..domain import AuthResponse, UserProfile


class Authorizer(object):
    """A policy check over a resolved identity and a requested action."""

    name = 'base'

    def authorize(self, profile: UserProfile, action: str) -> AuthResponse:
        """
        Decide whether ``profile`` may perform ``action``.

        Returns
        -------
        :class:`.AuthResponse`
            On failure, ``details`` explains which policy denied the action.

        """
        raise NotImplementedError('Must be implemented by a child class')
