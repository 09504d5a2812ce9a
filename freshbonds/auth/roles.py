"""
Roles for marketplace identities.

Every identity has exactly one role, fixed at registration. The role is
carried in the session token and is the basis for role-based access control
(see :func:`freshbonds.auth.decorators.scoped`). These constants should be
used rather than bare strings.
"""

FARMER = 'farmer'
"""
An ordinary producer.

Farmers may list products and manage the products they own.
"""

ADMIN = 'admin'
"""
An administrator.

Administrators may view all products, and act on any product regardless of
ownership.
"""

ALL = (FARMER, ADMIN)
"""All known roles."""
