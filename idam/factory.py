"""Provides an app factory for the IDAM service."""

from typing import Any, Mapping, Optional
import logging

import click
from flask import Flask, jsonify
from werkzeug.exceptions import HTTPException, BadRequest, NotFound, \
    MethodNotAllowed, Unauthorized, InternalServerError

from . import authn, authz, routes
from .audit import setup_logger
from .services import counters, datastore

logger = logging.getLogger(__name__)


def jsonify_exception(error: HTTPException) -> Any:
    """Render an HTTP exception as ``{"reason": ...}``."""
    exc_resp = error.get_response()
    response = jsonify(reason=error.description)
    response.status_code = exc_resp.status_code
    return response


def create_app(config: Optional[Mapping[str, Any]] = None) -> Flask:
    """
    Initialize an instance of the IDAM service.

    Parameters
    ----------
    config : dict
        Overrides for values in :mod:`idam.config`. These are applied before
        any of the extensions are initialized.

    """
    app = Flask('idam')
    app.config.from_pyfile('config.py')
    if config:
        app.config.update(config)
    setup_logger(app.config.get('LOGLEVEL', 'INFO'))

    datastore.init_app(app)
    counters.init_app(app)
    authn.init_app(app)
    authz.init_app(app)

    app.register_blueprint(routes.blueprint)
    app.errorhandler(BadRequest)(jsonify_exception)
    app.errorhandler(Unauthorized)(jsonify_exception)
    app.errorhandler(NotFound)(jsonify_exception)
    app.errorhandler(MethodNotAllowed)(jsonify_exception)
    app.errorhandler(InternalServerError)(jsonify_exception)

    @app.cli.command('create-db')
    def create_db() -> None:
        """Create the identity store tables."""
        datastore.create_all()
        click.echo('Created tables')

    @app.cli.command('reset-throttles')
    @click.option('--username', default=None,
                  help='Only reset the counts of this user.')
    def reset_throttles(username: Optional[str]) -> None:
        """Reset throttle counts, e.g. at the end of each quota period."""
        counters.current_counters().clear(username)
        logger.info('Reset throttle counts for %s', username or 'all users')
        click.echo('Reset throttle counts')

    if app.config.get('CREATE_DB'):
        with app.app_context():
            datastore.create_all()

    logger.debug('Using %s authentication', app.config.get('AUTHN_PROVIDER'))
    return app
