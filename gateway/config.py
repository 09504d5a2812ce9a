"""Flask configuration for the API gateway."""

import os

NAME = 'gateway'

USER_SERVICE_URL = os.environ.get('USER_SERVICE_URL', 'http://localhost:3001')
"""Base URL of the user service."""

PRODUCT_SERVICE_URL = os.environ.get('PRODUCT_SERVICE_URL',
                                     'http://localhost:3002')
"""Base URL of the product service."""

UPSTREAM_TIMEOUT = float(os.environ.get('UPSTREAM_TIMEOUT', '30'))
"""Seconds to wait for an upstream service before giving up."""

PROXY_FIX_X_FOR = int(os.environ.get('PROXY_FIX_X_FOR', '0'))
"""
Number of trusted ``X-Forwarded-For`` hops in front of the gateway.

Leave at 0 when clients connect to the gateway directly.
"""

MAX_CONTENT_LENGTH = int(os.environ.get('MAX_CONTENT_LENGTH',
                                        1024 * 1024))
"""Largest request body relayed, in bytes. Larger bodies get a 413."""

CORS_ORIGINS = os.environ.get('CORS_ORIGINS',
                              'http://localhost:3000,http://localhost:8080')
"""
Comma-separated origins from which browsers may call the API.

The frontend is served from another origin than the gateway, and sends the
session token in an ``Authorization`` header.
"""
