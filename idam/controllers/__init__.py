"""
Request controllers for the IDAM service.

Controllers are framework-agnostic in the sense that they receive plain
request data and return a ``(data, status, headers)`` tuple; the routes take
care of serialization. Infrastructure failures are raised as
:class:`werkzeug.exceptions.InternalServerError`, whose description carries
only a generic message plus the proximate cause.
"""

from typing import Tuple

ResponseData = Tuple[dict, int, dict]
