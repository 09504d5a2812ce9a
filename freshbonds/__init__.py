"""
Shared domain and auth core for the Fresh Bonds marketplace services.

- :mod:`freshbonds.domain` defines users and sessions.
- :mod:`freshbonds.auth` issues and verifies session tokens, and provides
  role, ownership and rate-limit guards for Flask routes.
- :mod:`freshbonds.web` and :mod:`freshbonds.forms` provide the JSON error
  handling and request validation used by every service.
"""
