"""HTTP routes for the IDAM service."""

from typing import Any, Dict

from flask import Blueprint, Response, jsonify, make_response, request

from .controllers import authentication, authorization, health, keys, users

blueprint = Blueprint('idam', __name__, url_prefix='')


def _respond(data: dict, code: int, headers: dict) -> Response:
    response: Response = make_response(jsonify(data), code, headers)
    return response


def _payload() -> Dict[str, Any]:
    """Request parameters from the query, form and JSON body, in that order."""
    payload: Dict[str, Any] = request.values.to_dict()
    body = request.get_json(silent=True)
    if isinstance(body, dict):
        payload.update(body)
    return payload


@blueprint.route('/authentication', methods=['GET'])
def authenticate() -> Response:
    """Verify the credential in the Authorization header."""
    return _respond(*authentication.authenticate(
        request.headers.get('Authorization')
    ))


@blueprint.route('/authn', methods=['POST'])
def authenticate_key() -> Response:
    """Verify an API key."""
    return _respond(*authentication.authenticate_key(_payload()))


@blueprint.route('/updatePassword', methods=['POST'])
def update_password() -> Response:
    """Change the password of the authenticated user."""
    return _respond(*authentication.update_password(
        request.headers.get('Authorization'), _payload()
    ))


@blueprint.route('/authz', methods=['POST'])
def authorize() -> Response:
    """Decide whether an identity may perform an action."""
    return _respond(*authorization.authorize(_payload()))


@blueprint.route('/key', methods=['GET'])
@blueprint.route('/v2/key', methods=['POST'])
def issue_key() -> Response:
    """Issue a new API key to the authenticated user."""
    return _respond(*keys.issue_key(request.headers.get('Authorization')))


@blueprint.route('/v2/key', methods=['GET'])
def get_existing_key() -> Response:
    """Get the current API key of the authenticated user."""
    return _respond(*keys.get_existing_key(
        request.headers.get('Authorization')
    ))


@blueprint.route('/v2/key/<string:token>', methods=['DELETE'])
def delete_key(token: str) -> Response:
    """Revoke an API key."""
    return _respond(*keys.delete_key(token))


@blueprint.route('/user', methods=['POST'])
def create_user() -> Response:
    """Create a user profile."""
    return _respond(*users.create_user(_payload()))


@blueprint.route('/user/<string:username>', methods=['DELETE'])
def delete_user(username: str) -> Response:
    """Delete a user profile."""
    return _respond(*users.delete_user(username))


@blueprint.route('/health', methods=['GET'])
def health_check() -> Response:
    """Report on the availability of the identity store."""
    return _respond(*health.health_check())
