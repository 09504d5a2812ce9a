"""Database integration for persisting products."""

import logging
from decimal import Decimal, ROUND_HALF_UP
from typing import List, Optional

from sqlalchemy import update

from . import util, models
from .models import DBProduct
from ... import domain
from freshbonds.domain import new_id

logger = logging.getLogger(__name__)

LISTING_LIMIT = 100
"""Most products returned by the public listing."""

ADMIN_LISTING_LIMIT = 1000
"""Most products returned by the administrative listing."""


class NoSuchProduct(RuntimeError):
    """A product was requested that does not exist."""


Unavailable = util.Unavailable
init_app = util.init_app
create_all = util.create_all
drop_all = util.drop_all
is_available = util.is_available


def round_price(price: float) -> float:
    """Round a price to two decimal places, half up."""
    return float(Decimal(str(price)).quantize(Decimal('0.01'),
                                              rounding=ROUND_HALF_UP))


def save_product(product: domain.Product) -> domain.Product:
    """
    Persist a :class:`domain.Product`.

    A product without a ``product_id`` is created; otherwise the existing
    product is updated. The owner (``farmer_id``) and the farmer's name and
    location are never changed by an update.

    Returns
    -------
    :class:`domain.Product`
        The product as stored.

    Raises
    ------
    :class:`NoSuchProduct`
        If ``product.product_id`` is set but there is no such product.

    """
    with util.transaction() as dbsession:
        if product.product_id:
            db_product = _load_dbproduct(product.product_id, dbsession)
            db_product.updated = util.now()
        else:
            db_product = DBProduct(
                product_id=new_id(),
                farmer_id=product.farmer_id,
                farmer_name=product.farmer_name,
                farmer_location=product.farmer_location,
                views=0,
                created=util.now()
            )
        db_product.name = product.name
        db_product.description = product.description
        db_product.price = round_price(product.price)
        db_product.category = product.category
        db_product.image = product.image
        db_product.quantity = product.quantity
        db_product.unit = product.unit
        db_product.harvest_date = product.harvest_date
        db_product.organic = product.organic
        db_product.in_stock = product.in_stock
        db_product.is_visible = product.is_visible
        db_product.is_approved = product.is_approved
        db_product.farmer_mobile = product.farmer_mobile
        dbsession.add(db_product)
    logger.debug('Saved product %s', db_product.product_id)
    return _to_domain(db_product)


def load_product(product_id: str) -> Optional[domain.Product]:
    """Load a :class:`domain.Product`, or ``None`` if there is none."""
    with util.transaction() as dbsession:
        db_product: Optional[DBProduct] = dbsession.get(DBProduct,
                                                        product_id)
        if db_product is None:
            return None
        return _to_domain(db_product)


def list_visible(category: Optional[str] = None,
                 limit: int = LISTING_LIMIT) -> List[domain.Product]:
    """List visible products, newest first."""
    with util.transaction() as dbsession:
        query = dbsession.query(DBProduct).filter(DBProduct.is_visible)
        if category:
            query = query.filter(DBProduct.category == category)
        query = query.order_by(DBProduct.created.desc()).limit(limit)
        return [_to_domain(db_product) for db_product in query]


def list_all(limit: int = ADMIN_LISTING_LIMIT) -> List[domain.Product]:
    """List all products, including hidden ones, newest first."""
    with util.transaction() as dbsession:
        query = dbsession.query(DBProduct) \
            .order_by(DBProduct.created.desc()) \
            .limit(limit)
        return [_to_domain(db_product) for db_product in query]


def list_by_farmer(farmer_id: str) -> List[domain.Product]:
    """List all of the products of a farmer, including hidden ones."""
    with util.transaction() as dbsession:
        query = dbsession.query(DBProduct) \
            .filter(DBProduct.farmer_id == farmer_id) \
            .order_by(DBProduct.created.desc())
        return [_to_domain(db_product) for db_product in query]


def toggle_visibility(product_id: str) -> domain.Product:
    """Hide a visible product, or show a hidden one."""
    with util.transaction() as dbsession:
        db_product = _load_dbproduct(product_id, dbsession)
        db_product.is_visible = not db_product.is_visible
        db_product.updated = util.now()
    return _to_domain(db_product)


def record_view(product_id: str) -> None:
    """Count a view of a product."""
    with util.transaction() as dbsession:
        dbsession.execute(
            update(DBProduct)
            .where(DBProduct.product_id == product_id)
            .values(views=DBProduct.views + 1)
        )


def delete_product(product_id: str) -> None:
    """
    Remove a product.

    Raises
    ------
    :class:`NoSuchProduct`

    """
    with util.transaction() as dbsession:
        dbsession.delete(_load_dbproduct(product_id, dbsession))
    logger.debug('Deleted product %s', product_id)


def _load_dbproduct(product_id: str, dbsession: util.Session) -> DBProduct:
    db_product: Optional[DBProduct] = dbsession.get(DBProduct, product_id)
    if db_product is None:
        raise NoSuchProduct(f'No product with id {product_id}')
    return db_product


def _to_domain(db_product: DBProduct) -> domain.Product:
    return domain.Product(
        product_id=db_product.product_id,
        name=db_product.name,
        description=db_product.description,
        price=db_product.price,
        category=db_product.category,
        image=db_product.image,
        quantity=db_product.quantity,
        unit=db_product.unit,
        harvest_date=db_product.harvest_date,
        organic=bool(db_product.organic),
        in_stock=bool(db_product.in_stock),
        is_visible=bool(db_product.is_visible),
        is_approved=bool(db_product.is_approved),
        views=db_product.views,
        farmer_id=db_product.farmer_id,
        farmer_name=db_product.farmer_name,
        farmer_location=db_product.farmer_location,
        farmer_mobile=db_product.farmer_mobile,
        created=util.from_epoch(db_product.created),
        updated=util.from_epoch(db_product.updated)
    )
