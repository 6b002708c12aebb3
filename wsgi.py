"""Web Server Gateway Interface entry-point."""

import os
from typing import Optional

from flask import Flask

from idam.factory import create_app

__flask_app__: Optional[Flask] = None


def application(environ, start_response):
    """WSGI application factory."""
    global __flask_app__
    for key, value in environ.items():
        if key.isupper() and isinstance(value, str):
            os.environ[key] = value
    if __flask_app__ is None:
        __flask_app__ = create_app()
    return __flask_app__(environ, start_response)
