"""Controllers for credential checks and password changes."""

from typing import Any, Mapping, Optional
from http import HTTPStatus
import logging

from flask import current_app
from retry import retry
from werkzeug.exceptions import BadRequest, InternalServerError

from ..audit import audit
from ..authn import current_authenticator
from ..authn.passwords import hash_password
from ..credentials import extract
from ..domain import AuthResponse, profile_to_dict
from ..exceptions import AuthenticationFailed, NoSuchUser, Unavailable
from ..services import datastore
from . import ResponseData

logger = logging.getLogger(__name__)


def authenticate_header(header: Optional[str]) -> AuthResponse:
    """
    Authenticate the credential in an Authorization header.

    Returns
    -------
    :class:`.AuthResponse`
        Always successful, and always carries a profile.

    Raises
    ------
    :class:`.AuthenticationFailed`
        If the header is malformed, the flow is unsupported, or the
        credential is rejected.
    :class:`.Unavailable`
        If the authentication backend could not be reached, after retrying.

    """
    claim = extract(header, current_app.config.get('CREDENTIAL_PARSING',
                                                   'legacy'))
    response = _decide(claim)
    if response is None:
        raise AuthenticationFailed('Authentication is disabled')
    if not response.success or response.profile is None:
        raise AuthenticationFailed(response.details or 'Not authenticated')
    return response


@retry(Unavailable, tries=3, delay=0.5, backoff=2)
def _decide(claim: Any) -> Optional[AuthResponse]:
    return current_authenticator().authenticate(claim)


def authenticate(header: Optional[str]) -> ResponseData:
    """Verify the credential in the Authorization header."""
    try:
        response = authenticate_header(header)
    except AuthenticationFailed as e:
        logger.debug('Authentication failed: %s', e)
        audit(f'Failed to authenticate: {e}', None, 'failedToAuthenticateUser')
        data = {'valid': False, 'reason': str(e)}
        return data, HTTPStatus.UNAUTHORIZED, {}
    except Exception as e:
        logger.exception('Error authenticating user')
        raise InternalServerError(f'Error authenticating user: {e}') from e
    profile = profile_to_dict(response.profile)
    return {'valid': True, 'profile': profile}, HTTPStatus.OK, {}


def authenticate_key(payload: Mapping[str, Any]) -> ResponseData:
    """Verify an API key, and get the profile of its owner."""
    token = payload.get('uuid')
    if not token:
        raise BadRequest('API Key is null.')
    try:
        profile = datastore.find_profile_by_key(token)
    except Exception as e:
        logger.exception('Error authenticating API key')
        raise InternalServerError(f'Error authenticating UUID: {e}') from e
    if profile is None:
        audit('Unable to verify API key', None, 'failedToVerifyApiKey')
        return {'valid': False}, HTTPStatus.UNAUTHORIZED, {}
    audit('Verified API key', profile.username, 'verifiedApiKey')
    return {'valid': True, 'profile': profile_to_dict(profile)}, \
        HTTPStatus.OK, {}


def update_password(header: Optional[str],
                    payload: Mapping[str, Any]) -> ResponseData:
    """Replace the stored credential of the authenticated user."""
    new_password = payload.get('newPassword')
    if not new_password:
        raise BadRequest('newPassword is required')
    try:
        profile = authenticate_header(header).profile
    except AuthenticationFailed as e:
        audit(f'Failed to update credential: {e}', None,
              'failedToUpdateCredential')
        return {'reason': str(e)}, HTTPStatus.UNAUTHORIZED, {}
    except Exception as e:
        logger.exception('Error updating credential')
        raise InternalServerError(f'Error updating credential: {e}') from e

    try:
        credential = hash_password(new_password,
                                   current_app.config['BCRYPT_ROUNDS'])
    except ValueError as e:
        raise BadRequest(str(e)) from e
    try:
        datastore.update_profile(profile._replace(credential=credential))
    except NoSuchUser as e:
        raise BadRequest(f'No stored profile for {profile.username}') from e
    except Exception as e:
        logger.exception('Error updating credential')
        raise InternalServerError(f'Error updating credential: {e}') from e
    audit(f'Updated password for {profile.username}', profile.username,
          'updateCredential')
    return {'message': 'Password Updated'}, HTTPStatus.OK, {}
