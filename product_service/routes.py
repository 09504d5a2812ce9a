"""Provides the JSON API of the product service."""

import logging
from http import HTTPStatus

from flask import Blueprint, Response, jsonify, make_response, request

from freshbonds.auth import roles
from freshbonds.auth.decorators import scoped, owned, user_is_owner

from . import domain
from .controllers import products
from .services import datastore

logger = logging.getLogger(__name__)

blueprint = Blueprint('products', __name__, url_prefix='/api/products')
health = Blueprint('health', __name__, url_prefix='/health')


def _respond(data: dict, code: int, headers: dict) -> Response:
    response: Response = make_response(jsonify(data), code, headers)
    return response


@blueprint.route('', methods=['GET'])
def list_products() -> Response:
    """List visible products."""
    return _respond(*products.list_products(request.args.get('category')))


@blueprint.route('/all', methods=['GET'])
@scoped([roles.ADMIN])
def list_all_products() -> Response:
    """List all products, including hidden ones."""
    return _respond(*products.list_all_products())


@blueprint.route('/farmer/<farmer_id>', methods=['GET'])
@scoped(authorizer=user_is_owner)
def list_farmer_products(farmer_id: str) -> Response:
    """List the products of a farmer."""
    return _respond(*products.list_farmer_products(farmer_id))


@blueprint.route('/<product_id>', methods=['GET'])
def get_product(product_id: str) -> Response:
    """Get a single product."""
    return _respond(*products.get_product(product_id))


@blueprint.route('', methods=['POST'])
@scoped([roles.FARMER])
def create_product() -> Response:
    """List a new product."""
    return _respond(*products.create_product(request.auth,
                                             request.get_json(silent=True)))


@blueprint.route('/<product_id>', methods=['PUT'])
@scoped()
@owned(products.load_product)
def update_product(product_id: str, resource: domain.Product) -> Response:
    """Update a product."""
    return _respond(*products.update_product(resource,
                                             request.get_json(silent=True)))


@blueprint.route('/<product_id>/visibility', methods=['PATCH'])
@scoped()
@owned(products.load_product)
def toggle_visibility(product_id: str, resource: domain.Product) -> Response:
    """Hide or show a product."""
    return _respond(*products.toggle_visibility(resource))


@blueprint.route('/<product_id>', methods=['DELETE'])
@scoped()
@owned(products.load_product)
def delete_product(product_id: str, resource: domain.Product) -> Response:
    """Remove a product."""
    return _respond(*products.delete_product(resource))


@health.route('', methods=['GET'])
def status() -> Response:
    """Report that the service is up, and whether the database is."""
    if not datastore.is_available():
        return _respond({'status': 'DOWN', 'service': 'product-service',
                         'database': 'disconnected'},
                        HTTPStatus.SERVICE_UNAVAILABLE, {})
    return jsonify(status='UP', service='product-service',
                   database='connected')
