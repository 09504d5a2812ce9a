"""Forms for registration, login and profile management."""

import re
from typing import Any, Optional

from wtforms import Form, StringField, PasswordField
from wtforms.validators import DataRequired, Email, Length, Regexp, AnyOf, \
    ValidationError

from freshbonds import domain
from freshbonds.auth import roles
from freshbonds.forms import strip

NAME = re.compile(r'^[a-zA-Z\s]+$')
LOCATION = re.compile(r'^[a-zA-Z0-9\s,.-]+$')
MOBILE = re.compile(r'^0(7[01245678]|1[1-9]|[2-9][1-9])\d{7}$')
"""Sri Lankan mobile (07x) or landline number, without separators."""

COMPLEXITY = r'^(?=.*[a-z])(?=.*[A-Z])(?=.*\d)'
COMPLEXITY_MESSAGE = 'Password must contain at least one uppercase letter,' \
    ' one lowercase letter, and one number'


def lower(value: Any) -> Any:
    """Lower-case an e-mail address."""
    return value.lower() if isinstance(value, str) else value


def clean_mobile(value: Any) -> Any:
    """Remove spaces, dashes and parentheses from a phone number."""
    if isinstance(value, str):
        return re.sub(r'[\s\-()]', '', value)
    return value


def _name_field() -> StringField:
    return StringField('Name', filters=[strip], validators=[
        DataRequired('Name is required'),
        Length(min=2, max=100,
               message='Name must be between 2 and 100 characters'),
        Regexp(NAME, message='Name can only contain letters and spaces')
    ])


def _new_password_field(label: str) -> PasswordField:
    return PasswordField(label, validators=[
        DataRequired('Password is required'),
        Length(min=8, message='Password must be at least 8 characters long'),
        Length(max=128, message='Password is too long'),
        Regexp(COMPLEXITY, message=COMPLEXITY_MESSAGE)
    ])


class ProfileFieldsMixin(object):
    """Validation of the profile fields shared by several forms."""

    def is_farmer(self) -> bool:
        """Whether the form is for a farmer."""
        raise NotImplementedError('Implemented in a child class')

    def validate_location(self, field: StringField) -> None:
        """Location is optional, but must be plain text."""
        if not field.data:
            return
        if len(field.data) > 255:
            raise ValidationError('Location is too long')
        if not LOCATION.match(field.data):
            raise ValidationError('Location contains invalid characters')

    def validate_farm_name(self, field: StringField) -> None:
        """Farmers must name their farm."""
        if not field.data:
            if self.is_farmer():
                raise ValidationError('Farm name is required for farmers')
            return
        if not 2 <= len(field.data) <= 100:
            raise ValidationError(
                'Farm name must be between 2 and 100 characters'
            )

    def validate_mobile(self, field: StringField) -> None:
        """Farmers must give a Sri Lankan phone number."""
        if not field.data:
            if self.is_farmer():
                raise ValidationError('Mobile number is required for farmers')
            return
        if not MOBILE.match(field.data):
            raise ValidationError(
                'Please provide a valid Sri Lankan mobile number'
                ' (e.g., 0771234567)'
            )

    def profile_to_domain(self) -> domain.UserProfile:
        """Generate a :class:`.UserProfile` from this form's data."""
        farm_name = None
        if self.is_farmer():
            farm_name = self.farm_name.data  # type: ignore
        return domain.UserProfile(
            location=self.location.data or None,  # type: ignore
            farm_name=farm_name or None,
            mobile=self.mobile.data or None  # type: ignore
        )


class RegistrationForm(ProfileFieldsMixin, Form):
    """User registration form."""

    name = _name_field()
    email = StringField('Email address', filters=[strip, lower], validators=[
        DataRequired('Email is required'),
        Email(message='Please provide a valid email'),
        Length(max=255, message='Email is too long')
    ])
    password = _new_password_field('Password')
    role = StringField('Role', filters=[strip], validators=[
        AnyOf(roles.ALL, message='Role must be either farmer or admin')
    ])
    location = StringField('Location', filters=[strip])
    farm_name = StringField('Farm name', filters=[strip])
    mobile = StringField('Mobile number', filters=[strip, clean_mobile])

    def is_farmer(self) -> bool:
        """Farmer fields are required when registering as a farmer."""
        return self.role.data == roles.FARMER

    def to_domain(self) -> domain.User:
        """Generate a :class:`.User` from this form's data."""
        return domain.User(
            email=self.email.data,
            name=self.name.data,
            role=self.role.data,
            profile=self.profile_to_domain()
        )


class LoginForm(Form):
    """Log in form."""

    email = StringField('Email address', filters=[strip, lower], validators=[
        DataRequired('Email is required'),
        Email(message='Please provide a valid email')
    ])
    password = PasswordField('Password', validators=[
        DataRequired('Password is required'),
        Length(max=128, message='Password is too long')
    ])


class ProfileForm(ProfileFieldsMixin, Form):
    """
    Profile update form.

    The role and e-mail address of an account cannot be changed, so they are
    not part of the form. The role of the account being edited decides which
    fields are required.
    """

    name = _name_field()
    location = StringField('Location', filters=[strip])
    farm_name = StringField('Farm name', filters=[strip])
    mobile = StringField('Mobile number', filters=[strip, clean_mobile])

    def __init__(self, *args: Any, **kwargs: Any) -> None:
        """Grab the role of the account being edited."""
        self.account_role: Optional[str] = kwargs.pop('role', None)
        super(ProfileForm, self).__init__(*args, **kwargs)

    def is_farmer(self) -> bool:
        """Farmers must keep their farm details."""
        return self.account_role == roles.FARMER


class PasswordForm(Form):
    """Password change form."""

    current_password = PasswordField('Current password', validators=[
        DataRequired('Current password is required')
    ])
    new_password = _new_password_field('New password')
