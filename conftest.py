"""Test configuration shared by all of the services."""

import os

# Each service reads its config.py when its app is created, so these have to
# be in place before any app is built.
os.environ.setdefault('JWT_SECRET', 'test-secret-that-is-at-least-32-chars')
os.environ.setdefault('SQLALCHEMY_DATABASE_URI', 'sqlite://')
os.environ.setdefault('BCRYPT_ROUNDS', '4')
os.environ.setdefault('CREATE_DB', '1')
os.environ.setdefault('RATE_LIMIT_BACKEND', 'memory')
