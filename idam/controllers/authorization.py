"""Controller for authorization checks."""

from typing import Any, Mapping, Optional
from http import HTTPStatus
import logging

from werkzeug.exceptions import BadRequest, InternalServerError

from ..authz import current_chain
from ..domain import AuthorizationCheck, profile_to_dict
from . import ResponseData

logger = logging.getLogger(__name__)


def normalize_action(action: Any) -> Optional[str]:
    """
    Get the action name from an authorization request.

    The action may be given as a name, or as an object with ``method`` and
    ``uri``, which is named ``"<METHOD> <uri>"``.
    """
    if isinstance(action, str):
        return action.strip() or None
    if isinstance(action, Mapping):
        method = str(action.get('method') or '').strip().upper()
        uri = str(action.get('uri') or '').strip()
        if method and uri:
            return f'{method} {uri}'
    return None


def authorize(payload: Mapping[str, Any]) -> ResponseData:
    """
    Decide whether an identity may perform an action.

    Parameters
    ----------
    payload : dict
        Should include ``action``, and either or both of ``username`` and
        ``apiKey``.

    Returns
    -------
    dict
        ``{"authorized": true, "profile": {...}}`` or
        ``{"authorized": false, "reason": "..."}``.
    int
        200 if authorized, 401 if not.
    dict
        Headers to add to the response.

    """
    action = normalize_action(payload.get('action'))
    if action is None:
        raise BadRequest('action is required')
    check = AuthorizationCheck(action=action,
                               username=payload.get('username') or None,
                               api_key=payload.get('apiKey') or None)
    try:
        response = current_chain().authorize(check)
    except Exception as e:
        logger.exception('Error checking authorization')
        raise InternalServerError(f'Error checking authorization: {check}:'
                                  f' {e}') from e
    if not response.success:
        data = {'authorized': False, 'reason': response.details}
        return data, HTTPStatus.UNAUTHORIZED, {}
    profile = profile_to_dict(response.profile)
    return {'authorized': True, 'profile': profile}, HTTPStatus.OK, {}
