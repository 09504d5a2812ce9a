"""Forms for creating and updating products."""

import re
from datetime import date, datetime, timedelta
from decimal import Decimal, InvalidOperation
from typing import Optional
from urllib.parse import urlparse

import dateutil.parser
from pytz import UTC
from wtforms import Form, StringField, BooleanField
from wtforms.validators import DataRequired, Length, Regexp, AnyOf, \
    Optional as IsOptional, ValidationError

from freshbonds.forms import strip
from .. import domain

PRODUCT_NAME = re.compile(r'^[a-zA-Z0-9\s&.-]+$')
QUANTITY = re.compile(r'^[0-9]+(\.[0-9]+)?$')
FALSE_VALUES = (False, 'false', '', '0')
"""Flag values read as false. JSON ``0`` arrives as ``'0'``."""


class ProductForm(Form):
    """
    Product data, for creation and for update.

    The owner is always the authenticated farmer, and cannot be changed.
    ``farmer_id`` is accepted only so that a mismatch with the caller can be
    refused. ``farmer_name`` and ``farmer_location`` are taken on creation
    and ignored on update.
    """

    name = StringField('Name', filters=[strip], validators=[
        DataRequired('Product name is required'),
        Length(min=2, max=255,
               message='Product name must be between 2 and 255 characters'),
        Regexp(PRODUCT_NAME,
               message='Product name contains invalid characters')
    ])
    description = StringField('Description', filters=[strip], validators=[
        DataRequired('Description is required'),
        Length(min=10, max=2000,
               message='Description must be between 10 and 2000 characters')
    ])
    price = StringField('Price', filters=[strip])
    category = StringField('Category', filters=[strip], validators=[
        AnyOf(domain.CATEGORIES, message='Invalid product category')
    ])
    quantity = StringField('Quantity', filters=[strip], validators=[
        DataRequired('Quantity is required'),
        Regexp(QUANTITY, message='Quantity must be a valid number')
    ])
    unit = StringField('Unit', filters=[strip], validators=[
        AnyOf(domain.UNITS, message='Invalid unit')
    ])
    harvest_date = StringField('Harvest date', filters=[strip])
    image = StringField('Image URL', filters=[strip], validators=[
        IsOptional(), Length(max=2048, message='Image URL is too long')
    ])
    organic = BooleanField('Organic', false_values=FALSE_VALUES)
    in_stock = BooleanField('In stock', false_values=FALSE_VALUES)
    is_visible = BooleanField('Visible', false_values=FALSE_VALUES)
    farmer_name = StringField('Farmer name', filters=[strip], validators=[
        IsOptional(), Length(max=100, message='Farmer name is too long')
    ])
    farmer_location = StringField(
        'Farmer location', filters=[strip],
        validators=[IsOptional(),
                    Length(max=255, message='Farmer location is too long')]
    )
    farmer_mobile = StringField('Farmer mobile', filters=[strip], validators=[
        IsOptional(), Length(max=20, message='Mobile number is too long')
    ])
    farmer_id = StringField('Farmer ID', filters=[strip])

    def validate_price(self, field: StringField) -> None:
        """Prices are positive amounts in LKR, up to a million."""
        try:
            price = Decimal(field.data or '')
        except InvalidOperation as e:
            raise ValidationError('Price must be a positive number') from e
        if not price.is_finite() or price <= 0:
            raise ValidationError('Price must be a positive number')
        if price > domain.MAX_PRICE:
            raise ValidationError('Price must be less than LKR 1,000,000')

    def validate_harvest_date(self, field: StringField) -> None:
        """Harvests are from the last year, or due within a month."""
        harvested = self._parse_date(field.data)
        if harvested is None:
            raise ValidationError('Valid harvest date is required')
        today = datetime.now(tz=UTC).date()
        if not today - timedelta(days=365) <= harvested \
                <= today + timedelta(days=31):
            raise ValidationError(
                'Harvest date must be within the last year and not more than'
                ' one month in the future'
            )

    def validate_image(self, field: StringField) -> None:
        """Images are linked by http or https URL."""
        parsed = urlparse(field.data)
        if parsed.scheme not in ('http', 'https') or not parsed.netloc:
            raise ValidationError('Image must be a valid URL')

    @staticmethod
    def _parse_date(value: Optional[str]) -> Optional[date]:
        if not value:
            return None
        try:
            return dateutil.parser.isoparse(value).date()
        except (ValueError, OverflowError):
            return None

    def _flag(self, field: BooleanField, default: bool) -> bool:
        # Absent flags keep their default rather than becoming false.
        return bool(field.data) if field.raw_data else default

    def to_domain(self, farmer_id: str,
                  existing: Optional[domain.Product] = None) -> domain.Product:
        """
        Generate a :class:`.Product` from this form's data.

        Parameters
        ----------
        farmer_id : str
            The owner of a new product. Ignored if ``existing`` is given.
        existing : :class:`.Product`
            The stored product, for an update. Its ownership fields and
            counters are kept, as are flags and the image when they are not
            submitted.

        """
        base = existing or domain.Product(
            name='', description='', price=0., category='', quantity='',
            unit='', harvest_date=date.today(), farmer_id=farmer_id,
            farmer_name=self.farmer_name.data or None,
            farmer_location=self.farmer_location.data or None
        )
        return base._replace(
            name=self.name.data,
            description=self.description.data,
            price=float(Decimal(self.price.data)),
            category=self.category.data,
            quantity=self.quantity.data,
            unit=self.unit.data,
            harvest_date=self._parse_date(self.harvest_date.data),
            image=((self.image.data or None) if self.image.raw_data
                   else base.image),
            organic=self._flag(self.organic, base.organic),
            in_stock=self._flag(self.in_stock, base.in_stock),
            is_visible=self._flag(self.is_visible, base.is_visible),
            farmer_mobile=self.farmer_mobile.data or base.farmer_mobile
        )
