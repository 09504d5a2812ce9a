"""Web Server Gateway Interface entry-point."""

import os
from typing import Callable, Iterable, Optional

from flask import Flask

from freshbonds.app_logging import setup_logger
from .factory import create_web_app

__flask_app__: Optional[Flask] = None


def application(environ: dict, start_response: Callable) -> Iterable[bytes]:
    """WSGI application."""
    global __flask_app__
    if __flask_app__ is None:
        for key, value in environ.items():
            # uWSGI passes deployment settings in the environ of the first
            # request. Request headers and the server name are not settings.
            if key.startswith('HTTP_') or key == 'SERVER_NAME' \
                    or not isinstance(value, str):
                continue
            os.environ[key] = value
        setup_logger()
        __flask_app__ = create_web_app()
    return __flask_app__(environ, start_response)
