"""Flask configuration for the product service."""

import os

NAME = 'product_service'

JWT_SECRET = os.environ.get('JWT_SECRET', '')
"""
Secret used to verify session tokens. Shared by all services.

Must be at least 32 characters; the service refuses to start otherwise.
"""

SQLALCHEMY_DATABASE_URI = os.environ.get('SQLALCHEMY_DATABASE_URI',
                                         'sqlite:///products.db')
"""Database in which products are stored."""

SQLALCHEMY_TRACK_MODIFICATIONS = False

CREATE_DB = bool(int(os.environ.get('CREATE_DB', '1')))
"""Create tables at startup if they do not exist."""

PROXY_FIX_X_FOR = int(os.environ.get('PROXY_FIX_X_FOR', '0'))
"""
Number of trusted ``X-Forwarded-For`` hops.

Set to 1 when the service is only reachable through the gateway, so that
``request.remote_addr`` is the client rather than the gateway. Leave at 0
only if clients connect to the service directly, since a client can then
forge the header.
"""

MAX_CONTENT_LENGTH = int(os.environ.get('MAX_CONTENT_LENGTH',
                                        5 * 1024 * 1024))
"""Largest request body accepted, in bytes. Larger bodies get a 413."""

CORS_ORIGINS = os.environ.get('CORS_ORIGINS',
                              'http://localhost:3000,http://localhost:8080')
"""Comma-separated origins from which browsers may call the service."""
