"""
Scope-based authorization of individual routes.

:func:`scoped` enforces that a route is called with a verified session, that
the session's role is one of the allowed roles, and (optionally) that an
authorizer function approves the request. :func:`owned` goes one step further
for routes that act on a single resource: it loads the resource, and permits
the request only to the resource's owner or to an administrator.

Here's an example of how you might use these in a Flask application:

.. code-block:: python

   from freshbonds.auth.decorators import scoped, owned
   from freshbonds.auth import roles


   @blueprint.route('/<product_id>', methods=['DELETE'])
   @scoped()
   @owned(datastore.load_product)
   def delete_product(product_id: str, resource: Product):
       '''Only the owning farmer or an administrator may delete.'''
       ...

The checks are applied in a fixed order, so that callers learn as little as
possible about resources that they may not act on:

1. no verified session → :class:`.Unauthorized` (401);
2. role not allowed, or the authorizer declines → :class:`.Forbidden` (403);
3. resource id is not syntactically valid → :class:`.BadRequest` (400);
4. resource does not exist → :class:`.NotFound` (404);
5. caller is neither the owner nor an administrator → :class:`.Forbidden`.

Validation of the request body happens in the route itself, after all of the
above.
"""

import logging
from functools import wraps
from typing import Any, Callable, Iterable, Optional

from flask import request
from werkzeug.exceptions import BadRequest, Unauthorized, Forbidden, NotFound

from .. import domain

logger = logging.getLogger(__name__)


def scoped(roles: Optional[Iterable[str]] = None,
           authorizer: Optional[Callable] = None) -> Callable:
    """
    Generate a decorator to enforce authorization requirements.

    Parameters
    ----------
    roles : iterable
        Roles permitted to use the decorated route. See
        :mod:`freshbonds.auth.roles`. If not provided, any authenticated
        session is permitted.
    authorizer : function
        In addition, an authorizer function may be passed to provide more
        specific authorization checks. Should have the signature:
        ``(session: domain.Session, *args, **kwargs) -> bool``, where
        ``*args`` and ``**kwargs`` are the parameters passed to the decorated
        function. If the authorizer returns ``False``, a :class:`.Forbidden`
        exception is raised.

    Returns
    -------
    function
        A decorator that enforces the allowed roles and calls the (optionally)
        provided authorizer.

    """
    allowed = tuple(roles) if roles is not None else None

    def protector(func: Callable) -> Callable:
        """Decorator that provides role enforcement."""
        @wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            """
            Check the session before executing the route.

            Raises
            ------
            :class:`.Unauthorized`
                Raised when there is no verified session on the request.
            :class:`.Forbidden`
                Raised when the session role is not allowed, or the provided
                authorizer returns ``False``.

            """
            session = request.auth
            if session is None:
                # The middleware leaves the reason for a rejected token here.
                error = request.environ.get('session')
                logger.debug('No valid session; aborting')
                if isinstance(error, Unauthorized):
                    raise error
                raise Unauthorized('Authentication required')

            if allowed is not None and session.role not in allowed:
                logger.debug('Role %s is not allowed here', session.role)
                raise Forbidden('Insufficient permissions')

            if authorizer and not authorizer(session, *args, **kwargs):
                logger.debug('Authorizer returned negative result')
                raise Forbidden('Access denied')

            logger.debug('Request is authorized, proceeding')
            return func(*args, **kwargs)
        return wrapper
    return protector


def owned(loader: Callable[[str], Any], id_param: str = 'product_id',
          owner_attr: str = 'farmer_id') -> Callable:
    """
    Generate a decorator that limits a route to the owner of a resource.

    Must be applied beneath :func:`scoped`, which guarantees that a session
    is present.

    Parameters
    ----------
    loader : function
        Called with the resource id; returns the resource or ``None``.
    id_param : str
        Name of the URL parameter that holds the resource id.
    owner_attr : str
        Attribute of the resource that holds the owner's user id.

    Returns
    -------
    function
        A decorator that loads the resource and passes it to the route as the
        ``resource`` keyword argument.

    """
    def protector(func: Callable) -> Callable:
        @wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            session: domain.Session = request.auth
            if session is None:
                raise Unauthorized('Authentication required')

            resource_id = kwargs.get(id_param)
            if not domain.is_valid_id(resource_id):
                raise BadRequest('Invalid id')

            resource = loader(resource_id)
            if resource is None:
                raise NotFound('No such resource')

            if not session.is_admin \
                    and getattr(resource, owner_attr) != session.user_id:
                logger.info('%s is not the owner of %s', session.user_id,
                            resource_id)
                raise Forbidden('Access denied')
            return func(*args, resource=resource, **kwargs)
        return wrapper
    return protector


def user_is_owner(session: domain.Session, farmer_id: str,
                  **kwargs: Any) -> bool:
    """Check whether the session belongs to ``farmer_id``, or an admin."""
    return session.is_admin or session.user_id == farmer_id
