"""Controllers for issuing, retrieving and revoking API keys."""

from typing import Optional
from http import HTTPStatus
import logging

from werkzeug.exceptions import InternalServerError

from ..audit import audit
from ..exceptions import AuthenticationFailed
from ..services import keys
from . import ResponseData
from .authentication import authenticate_header

logger = logging.getLogger(__name__)


def issue_key(header: Optional[str]) -> ResponseData:
    """
    Issue a new API key to the authenticated user.

    Any key the user already holds is replaced.
    """
    try:
        username = authenticate_header(header).profile.username
        token = keys.issue(username)
    except AuthenticationFailed as e:
        audit(f'Failed to generate API key: {e}', None, 'failedToGenerateKey')
        return {'reason': str(e)}, HTTPStatus.UNAUTHORIZED, {}
    except Exception as e:
        logger.exception('Error generating API key')
        raise InternalServerError(f'Error retrieving API Key: {e}') from e
    return {'uuid': token}, HTTPStatus.OK, {}


def get_existing_key(header: Optional[str]) -> ResponseData:
    """Get the API key of the authenticated user, without issuing one."""
    try:
        username = authenticate_header(header).profile.username
        token = keys.lookup_key(username)
    except AuthenticationFailed as e:
        audit(f'Failed to get existing API key: {e}', None,
              'failedToGetExistingKey')
        return {'reason': str(e)}, HTTPStatus.UNAUTHORIZED, {}
    except Exception as e:
        logger.exception('Error retrieving API key')
        raise InternalServerError(f'Error retrieving API Key: {e}') from e
    audit(f'Retrieved API key for {username}', username, 'getExistingApiKey')
    return {'uuid': token}, HTTPStatus.OK, {}


def delete_key(token: str) -> ResponseData:
    """Revoke an API key."""
    try:
        owner = keys.revoke(token)
    except Exception as e:
        logger.exception('Error deleting API key')
        raise InternalServerError(f'Error deleting API Key: {e}') from e
    if owner is None:
        return {'message': 'API Key was deleted'}, HTTPStatus.OK, {}
    return {'message': f'User: {owner} API Key was deleted'}, \
        HTTPStatus.OK, {}
