"""Structured logging and audit records."""

from typing import Optional
import logging

from pythonjsonlogger import jsonlogger

UNKNOWN_ACTOR = 'unknown'

audit_logger = logging.getLogger('idam.audit')


def setup_logger(level: str = 'INFO') -> None:
    """Send all log records to stderr as JSON."""
    root = logging.getLogger()
    for handler in root.handlers:
        if isinstance(handler.formatter, jsonlogger.JsonFormatter):
            return  # Already set up, e.g. by a previous app instance.
    handler = logging.StreamHandler()
    formatter = jsonlogger.JsonFormatter(
        '%(asctime)s %(levelname)s %(name)s %(message)s',
        rename_fields={'levelname': 'level', 'asctime': 'timestamp'}
    )
    handler.setFormatter(formatter)
    root.addHandler(handler)
    root.setLevel(level)


def audit(message: str, actor: Optional[str], action: str,
          details: str = '', level: int = logging.INFO) -> None:
    """
    Emit an audit record.

    Parameters
    ----------
    message : str
        Human-readable description of what happened.
    actor : str or None
        Best-effort resolved username. ``None`` is recorded as ``unknown``.
    action : str
        Short machine-readable tag, e.g. ``generateApiKey``.
    details : str
        Contextual detail, e.g. the authorization check being evaluated.
    level : int
        Logging level of the record.

    """
    audit_logger.log(level, message, extra={
        'actor': actor or UNKNOWN_ACTOR,
        'action': action,
        'details': details
    })
