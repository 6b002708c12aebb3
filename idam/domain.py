"""Defines identity and authorization concepts for the IDAM service."""

from typing import Any, Dict, FrozenSet, Iterable, Mapping, NamedTuple, \
    Optional, Union
from datetime import datetime
from types import MappingProxyType

import dateutil.parser
from pytz import UTC


class UserProfile(NamedTuple):
    """Stored identity for a user of the platform."""

    username: str
    """Unique, slug-like username."""

    distinguished_name: str = ''
    """Directory or certificate distinguished name for the user."""

    roles: FrozenSet[str] = frozenset()
    """Role names consulted by :class:`.authz.endpoint.EndpointAuthorizer`."""

    credential: Optional[str] = None
    """Adaptive salted hash of the user's password. Never serialized."""

    country: str = 'us'

    created_by: str = 'system'
    """Username (or ``system``) that created this profile."""

    created_on: Optional[datetime] = None
    last_updated_on: Optional[datetime] = None

    def has_any_role(self, roles: FrozenSet[str]) -> bool:
        """Determine whether this profile holds at least one of ``roles``."""
        return bool(self.roles & roles)


class AuthResponse(NamedTuple):
    """The outcome of an authentication or authorization decision."""

    success: bool
    profile: Optional[UserProfile] = None
    details: str = ''


class AuthorizationCheck(NamedTuple):
    """A request to decide whether an identity may perform an action."""

    action: str
    username: Optional[str] = None
    api_key: Optional[str] = None

    def __str__(self) -> str:
        return f'AuthorizationCheck(username={self.username},' \
            f' action={self.action})'


class ThrottleRecord(NamedTuple):
    """Cumulative usage counts for a user, per throttle category."""

    username: str
    counts: Mapping[str, int] = MappingProxyType({})
    """Read-only. Categories with no count are absent."""

    def count(self, category: str) -> int:
        """Get the count for ``category``; missing categories count as zero."""
        return self.counts.get(category, 0)


def now() -> datetime:
    """Get the current time in UTC."""
    return datetime.now(tz=UTC)


def profile_to_dict(profile: UserProfile) -> Dict[str, Any]:
    """Serialize a :class:`.UserProfile`, leaving out the credential hash."""
    return {
        'username': profile.username,
        'distinguishedName': profile.distinguished_name,
        'roles': sorted(profile.roles),
        'country': profile.country,
        'createdBy': profile.created_by,
        'createdOn': _isoformat(profile.created_on),
        'lastUpdatedOn': _isoformat(profile.last_updated_on),
    }


def profile_from_dict(data: Dict[str, Any]) -> UserProfile:
    """Load a :class:`.UserProfile` from its serialized representation."""
    return UserProfile(
        username=data['username'],
        distinguished_name=data.get('distinguishedName') or '',
        roles=frozenset(data.get('roles') or []),
        country=data.get('country') or 'us',
        created_by=data.get('createdBy') or 'system',
        created_on=_parse(data.get('createdOn')),
        last_updated_on=_parse(data.get('lastUpdatedOn'))
    )


def _isoformat(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value is not None else None


def _parse(value: Optional[str]) -> Optional[datetime]:
    return dateutil.parser.parse(value) if value else None


def parse_roles(value: Union[str, Iterable[str], None]) -> FrozenSet[str]:
    """Normalize a comma-separated string or an iterable of role names."""
    if not value:
        return frozenset()
    if isinstance(value, str):
        value = value.split(',')
    return frozenset(role.strip() for role in value if role.strip())
