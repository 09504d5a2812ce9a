"""
Controllers for browsing and managing products.

Authorization is enforced by the route decorators before these controllers
are called: role checks by :func:`freshbonds.auth.decorators.scoped`, and
ownership of an existing product by :func:`freshbonds.auth.decorators.owned`,
which also loads the product. The controllers validate request bodies and do
the work.
"""

import logging
from http import HTTPStatus
from typing import List, Optional, Tuple

from werkzeug.exceptions import BadRequest, Forbidden, NotFound, \
    ServiceUnavailable

from freshbonds import domain as auth_domain
from freshbonds.forms import to_formdata, validate
from .. import domain
from ..services import datastore
from .forms import ProductForm

logger = logging.getLogger(__name__)

ResponseData = Tuple[dict, int, dict]


def product_data(product: domain.Product) -> dict:
    """Render a product for a response body."""
    return auth_domain.to_dict(product)


def _listing(products: List[domain.Product]) -> dict:
    return {'products': [product_data(p) for p in products],
            'count': len(products)}


def load_product(product_id: str) -> Optional[domain.Product]:
    """Load a product for an ownership check."""
    try:
        return datastore.load_product(product_id)
    except datastore.Unavailable as e:
        raise ServiceUnavailable('Service unavailable') from e


def list_products(category: Optional[str] = None) -> ResponseData:
    """List visible products, newest first. Anyone may do this."""
    if category and category not in domain.CATEGORIES:
        raise BadRequest('Invalid product category')
    try:
        products = datastore.list_visible(category=category)
    except datastore.Unavailable as e:
        raise ServiceUnavailable('Service unavailable') from e
    return _listing(products), HTTPStatus.OK, {}


def list_all_products() -> ResponseData:
    """List all products, including hidden ones. For administrators."""
    try:
        products = datastore.list_all()
    except datastore.Unavailable as e:
        raise ServiceUnavailable('Service unavailable') from e
    return _listing(products), HTTPStatus.OK, {}


def list_farmer_products(farmer_id: str) -> ResponseData:
    """List the products of a farmer, including hidden ones."""
    if not auth_domain.is_valid_id(farmer_id):
        raise BadRequest('Invalid id')
    try:
        products = datastore.list_by_farmer(farmer_id)
    except datastore.Unavailable as e:
        raise ServiceUnavailable('Service unavailable') from e
    return _listing(products), HTTPStatus.OK, {}


def get_product(product_id: str) -> ResponseData:
    """Get a single product. Anyone may do this."""
    if not auth_domain.is_valid_id(product_id):
        raise BadRequest('Invalid id')
    try:
        product = datastore.load_product(product_id)
        if product is None:
            raise NotFound('Product not found')
        datastore.record_view(product_id)
    except datastore.Unavailable as e:
        raise ServiceUnavailable('Service unavailable') from e
    return product_data(product), HTTPStatus.OK, {}


def create_product(session: auth_domain.Session,
                   payload: Optional[dict]) -> ResponseData:
    """
    List a new product for the authenticated farmer.

    Raises
    ------
    :class:`.Forbidden`
        If the body names a different owner than the caller.
    :class:`.ValidationFailed`
        If the product data are not valid.

    """
    form = ProductForm(to_formdata(payload))
    if form.farmer_id.data and form.farmer_id.data != session.user_id:
        logger.info('%s tried to create a product for %s', session.user_id,
                    form.farmer_id.data)
        raise Forbidden('Cannot create products for other farmers')
    validate(form)
    try:
        product = datastore.save_product(form.to_domain(session.user_id))
    except datastore.Unavailable as e:
        raise ServiceUnavailable('Service unavailable') from e
    logger.info('Farmer %s listed product %s', session.user_id,
                product.product_id)
    return product_data(product), HTTPStatus.CREATED, {}


def update_product(product: domain.Product,
                   payload: Optional[dict]) -> ResponseData:
    """Update an existing product. Ownership fields are kept."""
    form = ProductForm(to_formdata(payload))
    validate(form)
    try:
        product = datastore.save_product(form.to_domain(product.farmer_id,
                                                        existing=product))
    except datastore.NoSuchProduct as e:
        raise NotFound('Product not found') from e
    except datastore.Unavailable as e:
        raise ServiceUnavailable('Service unavailable') from e
    return product_data(product), HTTPStatus.OK, {}


def toggle_visibility(product: domain.Product) -> ResponseData:
    """Hide a visible product, or show a hidden one."""
    try:
        product = datastore.toggle_visibility(product.product_id)
    except datastore.NoSuchProduct as e:
        raise NotFound('Product not found') from e
    except datastore.Unavailable as e:
        raise ServiceUnavailable('Service unavailable') from e
    return product_data(product), HTTPStatus.OK, {}


def delete_product(product: domain.Product) -> ResponseData:
    """Remove a product."""
    try:
        datastore.delete_product(product.product_id)
    except datastore.NoSuchProduct as e:
        raise NotFound('Product not found') from e
    except datastore.Unavailable as e:
        raise ServiceUnavailable('Service unavailable') from e
    return {'message': 'Product deleted successfully',
            'product_name': product.name}, HTTPStatus.OK, {}
