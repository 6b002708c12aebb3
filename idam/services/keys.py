"""
Opaque API keys.

Each identity has at most one live key. Issuing a key for an identity that
already has one rotates it: the new token replaces the old one, and the old
one stops validating immediately.
"""

from typing import Optional
import logging
import uuid

from ..audit import audit
from . import datastore

logger = logging.getLogger(__name__)


def issue(username: str) -> str:
    """
    Generate a new API key for ``username``.

    Parameters
    ----------
    username : str

    Returns
    -------
    str
        The new token. Any previous token for ``username`` is revoked.

    """
    token = str(uuid.uuid4())
    datastore.upsert_key(username, token)
    audit(f'Issued API key for {username}', username, 'generateApiKey')
    return token


def lookup_owner(token: str) -> Optional[str]:
    """Get the username that owns ``token``, if it is live."""
    return datastore.find_username_by_key(token)


def lookup_key(username: str) -> Optional[str]:
    """Get the live token for ``username``, without issuing one."""
    return datastore.find_key_by_username(username)


def revoke(token: str) -> Optional[str]:
    """
    Revoke ``token``. Revoking an unknown token does nothing.

    Returns
    -------
    str or None
        The username that owned ``token``, if anyone did.

    """
    owner = lookup_owner(token)
    if owner is None:
        logger.debug('No such API key; nothing to revoke')
        return None
    logger.info('Deleting API key for %s', owner)
    datastore.delete_key(token)
    audit(f'Deleted API key for {owner}', owner, 'deleteApiKey')
    return owner


def validate(token: str) -> bool:
    """Determine whether ``token`` is a live API key."""
    return bool(token) and lookup_owner(token) is not None
