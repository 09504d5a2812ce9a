"""SQLAlchemy models for products."""

from flask_sqlalchemy import SQLAlchemy
from sqlalchemy import Column, Integer, String, Boolean, Date, Numeric, Text

db: SQLAlchemy = SQLAlchemy()


class DBProduct(db.Model):  # type: ignore
    """A product listing."""

    __tablename__ = 'products'

    product_id = Column(String(32), primary_key=True)
    name = Column(String(255), nullable=False)
    description = Column(Text, nullable=False)
    price = Column(Numeric(10, 2, asdecimal=False), nullable=False)
    category = Column(String(32), nullable=False, index=True)
    image = Column(String(2048))
    quantity = Column(String(32), nullable=False)
    unit = Column(String(16), nullable=False)
    harvest_date = Column(Date, nullable=False)
    organic = Column(Boolean, nullable=False, default=False)
    in_stock = Column(Boolean, nullable=False, default=True)
    is_visible = Column(Boolean, nullable=False, default=True, index=True)
    is_approved = Column(Boolean, nullable=False, default=True)
    views = Column(Integer, nullable=False, default=0)

    farmer_id = Column(String(32), nullable=False, index=True)
    """``user_id`` of the owner, as issued by the user service."""
    farmer_name = Column(String(100))
    farmer_location = Column(String(255))
    farmer_mobile = Column(String(20))

    created = Column(Integer, nullable=False, index=True)
    updated = Column(Integer)
