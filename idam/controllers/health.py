"""Controller for the health check."""

from http import HTTPStatus

from ..services import datastore
from . import ResponseData


def health_check() -> ResponseData:
    """Report whether the identity store is reachable."""
    if datastore.is_available():
        return {'status': 'ok'}, HTTPStatus.OK, {}
    return {'status': 'unavailable'}, HTTPStatus.SERVICE_UNAVAILABLE, {}
