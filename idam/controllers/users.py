"""Controllers for creating and deleting user profiles."""

from typing import Any, Mapping
from http import HTTPStatus
import logging

from flask import current_app
from werkzeug.exceptions import BadRequest, InternalServerError

from ..audit import audit
from ..authn.passwords import hash_password
from ..domain import UserProfile, now, parse_roles
from ..exceptions import UserExists
from ..services import datastore, keys
from ..services.counters import current_counters
from . import ResponseData

logger = logging.getLogger(__name__)


def create_user(payload: Mapping[str, Any]) -> ResponseData:
    """
    Create a new user profile.

    Parameters
    ----------
    payload : dict
        Must include ``username`` and ``distinguishedName`` (or ``dn``). May
        include ``roles`` (a list or a comma-separated string) and
        ``password``. A password is required when passwords are checked
        against the identity store; otherwise the profile is created with
        no stored credential.

    """
    username = payload.get('username')
    dn = payload.get('distinguishedName') or payload.get('dn')
    if not username or not dn:
        raise BadRequest('username and distinguishedName are required')

    roles = parse_roles(payload.get('roles')) \
        or parse_roles(current_app.config.get('DEFAULT_ROLES'))
    password = payload.get('password')
    credential = None
    if password:
        try:
            credential = hash_password(password,
                                       current_app.config['BCRYPT_ROUNDS'])
        except ValueError as e:
            raise BadRequest(str(e)) from e
    elif current_app.config.get('AUTHN_PROVIDER') == 'store':
        raise BadRequest('password is required')

    created = now()
    profile = UserProfile(username=username, distinguished_name=dn,
                          roles=roles, credential=credential,
                          created_on=created, last_updated_on=created)
    try:
        datastore.insert_profile(profile)
    except UserExists as e:
        raise BadRequest(f'User: {username} already exists') from e
    except Exception as e:
        logger.exception('Error creating user')
        raise InternalServerError(f'Error creating user: {e}') from e
    audit(f'Created user {username}', username, 'createUser', dn)
    return {'message': f'User: {username} was created'}, HTTPStatus.OK, {}


def delete_user(username: str) -> ResponseData:
    """Delete a user profile, along with its API key and throttle counts."""
    try:
        token = keys.lookup_key(username)
        if token is not None:
            keys.revoke(token)
        current_counters().clear(username)
        existed = datastore.delete_profile(username)
    except Exception as e:
        logger.exception('Error deleting user')
        raise InternalServerError(f'Error deleting user: {e}') from e
    if not existed:
        logger.debug('No profile for %s; nothing to delete', username)
    audit(f'User: {username} was deleted', username, 'deleteUser')
    return {'message': f'User: {username} was deleted'}, HTTPStatus.OK, {}
