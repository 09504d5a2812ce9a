"""Defines product concepts for the product service."""

from typing import NamedTuple, Optional
from datetime import date, datetime

CATEGORIES = ('Vegetables', 'Fruits', 'Herbs', 'Dairy & Eggs',
              'Meat & Poultry', 'Grains & Cereals', 'Pantry', 'Flowers',
              'Other')
"""Product categories."""

UNITS = ('lbs', 'oz', 'kg', 'g', 'count', 'dozen', 'bunch', 'head', 'pint',
         'quart', 'gallon', 'bag', 'box')
"""Units in which quantities are given."""

MAX_PRICE = 1_000_000
"""Upper bound on a price, in LKR."""


class Product(NamedTuple):
    """A product listed by a farmer."""

    name: str
    description: str

    price: float
    """Unit price in LKR, rounded to two decimals."""

    category: str
    """One of :data:`CATEGORIES`."""

    quantity: str
    """Amount available, as a decimal string (e.g. ``'2.5'``)."""

    unit: str
    """One of :data:`UNITS`."""

    harvest_date: date

    farmer_id: str
    """
    The ``user_id`` of the owning farmer.

    Set from the session token when the product is created, and never changed
    afterwards.
    """

    product_id: Optional[str] = None
    """Unique identifier. If ``None``, the product has not been saved."""

    farmer_name: Optional[str] = None
    farmer_location: Optional[str] = None
    farmer_mobile: Optional[str] = None

    image: Optional[str] = None
    """URL of a product photo."""

    organic: bool = False
    in_stock: bool = True

    is_visible: bool = True
    """Hidden products are only listed to their owner and administrators."""

    is_approved: bool = True
    views: int = 0
    created: Optional[datetime] = None
    updated: Optional[datetime] = None
