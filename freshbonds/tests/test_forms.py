"""Tests for :mod:`freshbonds.forms`."""

from unittest import TestCase

from wtforms import Form, StringField, BooleanField
from wtforms.validators import DataRequired, Length

from .. import forms


class WidgetForm(Form):
    """A small form."""

    name = StringField('Name', filters=[forms.strip],
                       validators=[DataRequired('Name is required'),
                                   Length(min=2, message='Name is too short')])
    colour = StringField('Colour',
                         validators=[DataRequired('Colour is required')])
    shiny = BooleanField('Shiny')


class TestToFormdata(TestCase):
    """Tests for :func:`.forms.to_formdata`."""

    def test_types(self):
        """Scalars are stringified, and nulls dropped."""
        formdata = forms.to_formdata({'name': 'Tomato', 'price': 120.5,
                                      'organic': True, 'shiny': False,
                                      'image': None, 'tags': ['a', 'b']})
        self.assertEqual(formdata['name'], 'Tomato')
        self.assertEqual(formdata['price'], '120.5')
        self.assertEqual(formdata['organic'], 'true')
        self.assertEqual(formdata['shiny'], 'false')
        self.assertNotIn('image', formdata)
        self.assertEqual(formdata.getlist('tags'), ['a', 'b'])

    def test_not_an_object(self):
        """Anything other than an object yields empty form data."""
        for payload in [None, [], 'foo', 42]:
            self.assertEqual(len(forms.to_formdata(payload)), 0)


class TestValidate(TestCase):
    """Tests for :func:`.forms.validate`."""

    def test_all_errors_are_reported(self):
        """Every violation is listed."""
        form = WidgetForm(forms.to_formdata({'name': ' x '}))
        with self.assertRaises(forms.ValidationFailed) as ctx:
            forms.validate(form)
        self.assertEqual(ctx.exception.details,
                         ['Name is too short', 'Colour is required'])
        self.assertEqual(ctx.exception.code, 400)

    def test_valid(self):
        """A valid form passes."""
        form = WidgetForm(forms.to_formdata({'name': 'Tomato',
                                             'colour': 'red',
                                             'shiny': False}))
        forms.validate(form)
        self.assertFalse(form.shiny.data)
