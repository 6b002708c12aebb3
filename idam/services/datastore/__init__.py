"""
Database integration for profiles, API keys and throttle counts.

This is the identity store. It exclusively owns durable state; callers get
:mod:`idam.domain` objects back and never hold on to database rows. Uniqueness
of profiles and keys is enforced by table constraints rather than by
checking before writing, and throttle counts are incremented with a single
``UPDATE`` so that concurrent increments are never lost.
"""

from typing import Iterable, Optional
import logging

from sqlalchemy import delete, insert, select, update
from sqlalchemy.exc import IntegrityError

from ... import domain
from ...exceptions import NoSuchUser, Unavailable, UserExists
from . import util
from .models import DBApiKey, DBThrottle, DBUserProfile

logger = logging.getLogger(__name__)

MAX_INCREMENT_ATTEMPTS = 5

init_app = util.init_app
create_all = util.create_all
drop_all = util.drop_all
is_available = util.is_available
transaction = util.transaction


def find_profile_by_username(username: str) -> Optional[domain.UserProfile]:
    """Load the profile for ``username``, or ``None`` if there is none."""
    with util.transaction() as session:
        db_profile = session.get(DBUserProfile, username)
        if db_profile is None:
            return None
        return _to_profile(db_profile)


def find_profile_by_key(uuid: str) -> Optional[domain.UserProfile]:
    """Load the profile that owns the API key ``uuid``."""
    username = find_username_by_key(uuid)
    if username is None:
        return None
    return find_profile_by_username(username)


def find_username_by_key(uuid: str) -> Optional[str]:
    """Get the username that owns the API key ``uuid``."""
    with util.transaction() as session:
        username: Optional[str] = session.scalar(
            select(DBApiKey.username).where(DBApiKey.uuid == uuid)
        )
    return username


def find_key_by_username(username: str) -> Optional[str]:
    """Get the API key owned by ``username``."""
    with util.transaction() as session:
        db_key = session.get(DBApiKey, username)
        return db_key.uuid if db_key is not None else None


def upsert_key(username: str, uuid: str) -> None:
    """
    Bind the API key ``uuid`` to ``username``, replacing any existing key.

    Parameters
    ----------
    username : str
    uuid : str

    """
    try:
        _upsert_key(username, uuid)
    except IntegrityError:
        logger.debug('Key for %s was created concurrently', username)
        _upsert_key(username, uuid)


def _upsert_key(username: str, uuid: str) -> None:
    with util.transaction() as session:
        db_key = session.get(DBApiKey, username)
        if db_key is None:
            session.add(DBApiKey(username=username, uuid=uuid))
        else:
            db_key.uuid = uuid


def delete_key(uuid: str) -> None:
    """Delete the API key ``uuid``. Deleting an unknown key does nothing."""
    with util.transaction() as session:
        session.execute(delete(DBApiKey).where(DBApiKey.uuid == uuid))


def insert_profile(profile: domain.UserProfile) -> None:
    """
    Create a new profile, if none exists for its username.

    Raises
    ------
    :class:`.UserExists`
        Raised if a profile with the same username already exists.

    """
    created = profile.created_on or domain.now()
    try:
        with util.transaction() as session:
            session.execute(insert(DBUserProfile).values(
                username=profile.username,
                distinguished_name=profile.distinguished_name,
                roles=','.join(sorted(profile.roles)),
                credential=profile.credential,
                country=profile.country,
                created_by=profile.created_by,
                created_on=created,
                last_updated_on=profile.last_updated_on or created
            ))
    except IntegrityError as e:
        raise UserExists(f'User {profile.username} already exists') from e


def update_profile(profile: domain.UserProfile) -> None:
    """
    Update the stored profile with the same username.

    Raises
    ------
    :class:`.NoSuchUser`

    """
    with util.transaction() as session:
        db_profile = session.get(DBUserProfile, profile.username)
        if db_profile is None:
            raise NoSuchUser(f'User {profile.username} does not exist')
        db_profile.distinguished_name = profile.distinguished_name
        db_profile.roles = ','.join(sorted(profile.roles))
        db_profile.credential = profile.credential
        db_profile.country = profile.country
        db_profile.last_updated_on = domain.now()


def delete_profile(username: str) -> bool:
    """Delete the profile for ``username``; ``False`` if there was none."""
    with util.transaction() as session:
        result = session.execute(
            delete(DBUserProfile).where(DBUserProfile.username == username)
        )
        return bool(result.rowcount)


def get_or_create_throttles(username: str,
                            categories: Iterable[str] = ()) \
        -> domain.ThrottleRecord:
    """
    Get the throttle counts for ``username``.

    Rows for any of ``categories`` that do not exist yet are created with a
    count of zero.
    """
    counts = _load_counts(username)
    missing = [c for c in categories if c not in counts]
    for category in missing:
        try:
            with util.transaction() as session:
                session.execute(insert(DBThrottle).values(
                    username=username, category=category, count=0
                ))
        except IntegrityError:
            logger.debug('Throttle %s for %s created concurrently',
                         category, username)
    if missing:
        counts = _load_counts(username)
    return domain.ThrottleRecord(username, counts)


def increment_throttle(username: str, category: str) -> int:
    """
    Atomically add one to the count for ``username`` in ``category``.

    Returns
    -------
    int
        The count after incrementing.

    """
    for _ in range(MAX_INCREMENT_ATTEMPTS):
        with util.transaction() as session:
            result = session.execute(
                update(DBThrottle)
                .where(DBThrottle.username == username)
                .where(DBThrottle.category == category)
                .values(count=DBThrottle.count + 1)
            )
            if result.rowcount:
                count: int = session.scalar(
                    select(DBThrottle.count)
                    .where(DBThrottle.username == username)
                    .where(DBThrottle.category == category)
                )
                return count
        try:
            with util.transaction() as session:
                session.execute(insert(DBThrottle).values(
                    username=username, category=category, count=1
                ))
            return 1
        except IntegrityError:
            # Somebody else created the row first; increment theirs.
            logger.debug('Throttle %s for %s created concurrently',
                         category, username)
    raise Unavailable(f'Could not increment throttle {category}')


def consume_throttle(username: str, category: str, limit: int) -> bool:
    """
    Add one to the count for ``username`` in ``category``, if below ``limit``.

    The comparison and the increment are one ``UPDATE``, so concurrent
    callers can never take the count past ``limit``.

    Returns
    -------
    bool
        Whether the count was incremented. A count already at ``limit`` is
        left unchanged.

    """
    for _ in range(MAX_INCREMENT_ATTEMPTS):
        with util.transaction() as session:
            result = session.execute(
                update(DBThrottle)
                .where(DBThrottle.username == username)
                .where(DBThrottle.category == category)
                .where(DBThrottle.count < limit)
                .values(count=DBThrottle.count + 1)
            )
            if result.rowcount:
                return True
            existing = session.scalar(
                select(DBThrottle.count)
                .where(DBThrottle.username == username)
                .where(DBThrottle.category == category)
            )
        if existing is not None or limit < 1:
            return False
        try:
            with util.transaction() as session:
                session.execute(insert(DBThrottle).values(
                    username=username, category=category, count=1
                ))
            return True
        except IntegrityError:
            logger.debug('Throttle %s for %s created concurrently',
                         category, username)
    raise Unavailable(f'Could not update throttle {category}')


def clear_throttles(username: Optional[str] = None) -> None:
    """Reset throttle counts for ``username``, or for everyone."""
    with util.transaction() as session:
        statement = delete(DBThrottle)
        if username is not None:
            statement = statement.where(DBThrottle.username == username)
        session.execute(statement)


def _load_counts(username: str) -> dict:
    with util.transaction() as session:
        rows = session.execute(
            select(DBThrottle.category, DBThrottle.count)
            .where(DBThrottle.username == username)
        )
        return {category: count for category, count in rows}


def _to_profile(db_profile: DBUserProfile) -> domain.UserProfile:
    return domain.UserProfile(
        username=db_profile.username,
        distinguished_name=db_profile.distinguished_name,
        roles=domain.parse_roles(db_profile.roles),
        credential=db_profile.credential,
        country=db_profile.country,
        created_by=db_profile.created_by,
        created_on=db_profile.created_on,
        last_updated_on=db_profile.last_updated_on
    )
