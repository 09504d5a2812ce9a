"""Structured logging for the Fresh Bonds services."""

import logging
import os
from typing import Any, Optional

from flask import request
from pythonjsonlogger.json import JsonFormatter

SENSITIVE_FIELDS = ('password', 'current_password', 'new_password', 'token')
MASK = '***'

logger = logging.getLogger(__name__)


def setup_logger(level: Optional[str] = None) -> None:
    """
    Send JSON log records to stderr.

    The level is taken from ``level``, or the ``LOGLEVEL`` environment
    variable, and defaults to ``INFO``.
    """
    level = level or os.environ.get('LOGLEVEL', 'INFO')
    handler = logging.StreamHandler()
    formatter = JsonFormatter(
        '%(asctime)s %(levelname)s %(name)s %(message)s',
        rename_fields={'levelname': 'level', 'asctime': 'timestamp'}
    )
    handler.setFormatter(formatter)
    root = logging.getLogger()
    root.addHandler(handler)
    root.setLevel(level.upper())


def mask(payload: Any) -> Any:
    """Replace the values of sensitive fields in a request body."""
    if isinstance(payload, dict):
        return {key: MASK if key in SENSITIVE_FIELDS else mask(value)
                for key, value in payload.items()}
    if isinstance(payload, list):
        return [mask(item) for item in payload]
    return payload


def log_request() -> None:
    """Log the method, path and client of each request."""
    logger.info('%s %s', request.method, request.path,
                extra={'remote_addr': request.remote_addr})
    if logger.isEnabledFor(logging.DEBUG) and request.is_json:
        logger.debug('Request body', extra={
            'body': mask(request.get_json(silent=True))
        })
