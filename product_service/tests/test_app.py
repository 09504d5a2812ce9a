"""Tests for the product service, through its HTTP API."""

from unittest import TestCase
from datetime import date, timedelta
from http import HTTPStatus

from freshbonds.auth import tokens, roles
from freshbonds.domain import new_id
from product_service.factory import create_web_app
from product_service.services import datastore


def product(**changes) -> dict:
    """A valid product."""
    data = {'name': 'Red Rice', 'description': 'Traditional red rice, milled.',
            'price': 320, 'category': 'Grains & Cereals', 'quantity': '5',
            'unit': 'kg',
            'harvest_date': (date.today() - timedelta(days=10)).isoformat(),
            'farmer_name': 'Kamal Perera', 'farmer_location': 'Polonnaruwa'}
    data.update(changes)
    return data


class ProductServiceTestCase(TestCase):
    """Creates an app, and sessions for two farmers and an admin."""

    def setUp(self):
        """Create the app and the tokens."""
        self.app = create_web_app()
        self.client = self.app.test_client()
        secret = self.app.config['JWT_SECRET']
        self.farmer_id = new_id()
        self.other_id = new_id()
        self.farmer = tokens.issue(self.farmer_id, 'kamal@example.lk',
                                   roles.FARMER, secret)
        self.other = tokens.issue(self.other_id, 'nimal@example.lk',
                                  roles.FARMER, secret)
        self.admin = tokens.issue(new_id(), 'admin@example.lk', roles.ADMIN,
                                  secret)

    def tearDown(self):
        """Discard the product database."""
        with self.app.app_context():
            datastore.drop_all()

    def request(self, method, path, token=None, json=None):
        headers = {'Authorization': f'Bearer {token}'} if token else {}
        return self.client.open(path, method=method, json=json,
                                headers=headers)

    def create(self, token=None, **changes):
        response = self.request('POST', '/api/products',
                                token or self.farmer, product(**changes))
        self.assertEqual(response.status_code, HTTPStatus.CREATED,
                         response.get_json())
        return response.get_json()


class TestCreate(ProductServiceTestCase):
    """Tests for ``POST /api/products``."""

    def test_create(self):
        """The owner is the caller."""
        data = self.create()
        self.assertEqual(data['farmer_id'], self.farmer_id)
        self.assertEqual(data['price'], 320.)
        self.assertTrue(data['is_visible'])

    def test_no_token(self):
        """Anonymous callers cannot list products."""
        response = self.request('POST', '/api/products', json=product())
        self.assertEqual(response.status_code, HTTPStatus.UNAUTHORIZED)

    def test_bad_token(self):
        """A token signed with another secret is refused."""
        token = tokens.issue(self.farmer_id, 'kamal@example.lk', roles.FARMER,
                             'a-different-secret-of-at-least-32-chars')
        response = self.request('POST', '/api/products', token, product())
        self.assertEqual(response.status_code, HTTPStatus.UNAUTHORIZED)
        self.assertEqual(response.get_json()['reason'], 'Invalid token')

    def test_admin_cannot_create(self):
        """Only farmers list products."""
        response = self.request('POST', '/api/products', self.admin,
                                product())
        self.assertEqual(response.status_code, HTTPStatus.FORBIDDEN)
        self.assertEqual(response.get_json()['reason'],
                         'Insufficient permissions')

    def test_for_another_farmer(self):
        """A farmer cannot list a product on behalf of someone else."""
        response = self.request('POST', '/api/products', self.farmer,
                                product(farmer_id=self.other_id))
        self.assertEqual(response.status_code, HTTPStatus.FORBIDDEN)

    def test_body_size(self):
        """Bodies up to 5 MB are read; larger bodies are refused."""
        response = self.request('POST', '/api/products', self.farmer,
                                product(description='x' * (2 * 1024 * 1024)))
        self.assertEqual(response.status_code, HTTPStatus.BAD_REQUEST)

        response = self.request('POST', '/api/products', self.farmer,
                                product(description='x' * (6 * 1024 * 1024)))
        self.assertEqual(response.status_code,
                         HTTPStatus.REQUEST_ENTITY_TOO_LARGE)
        self.assertIn('reason', response.get_json())

    def test_invalid(self):
        """Violations are itemized."""
        response = self.request('POST', '/api/products', self.farmer,
                                product(price=-1, unit='tonne'))
        self.assertEqual(response.status_code, HTTPStatus.BAD_REQUEST)
        data = response.get_json()
        self.assertEqual(data['reason'], 'Validation failed')
        self.assertIn('Invalid unit', data['details'])


class TestRead(ProductServiceTestCase):
    """Tests for the public and restricted listings."""

    def setUp(self):
        """Add a visible and a hidden product."""
        super(TestRead, self).setUp()
        self.visible = self.create(name='Red Rice')
        self.hidden = self.create(name='Kithul Treacle', category='Pantry',
                                  is_visible=False)

    def test_public_listing(self):
        """Anyone sees visible products."""
        response = self.request('GET', '/api/products')
        self.assertEqual(response.status_code, HTTPStatus.OK)
        data = response.get_json()
        self.assertEqual(data['count'], 1)
        self.assertEqual(data['products'][0]['name'], 'Red Rice')

    def test_category_filter(self):
        """Listings can be filtered by category."""
        response = self.request('GET', '/api/products?category=Pantry')
        self.assertEqual(response.get_json()['count'], 0)
        response = self.request('GET', '/api/products?category=Toys')
        self.assertEqual(response.status_code, HTTPStatus.BAD_REQUEST)

    def test_get_product(self):
        """Anyone can get a product, which counts a view."""
        path = f'/api/products/{self.visible["product_id"]}'
        self.request('GET', path)
        response = self.request('GET', path)
        self.assertEqual(response.status_code, HTTPStatus.OK)
        self.assertEqual(response.get_json()['views'], 1)

    def test_get_invalid_and_missing(self):
        """Malformed ids are bad requests; unknown ids are not found."""
        response = self.request('GET', '/api/products/not-an-id')
        self.assertEqual(response.status_code, HTTPStatus.BAD_REQUEST)
        response = self.request('GET', f'/api/products/{new_id()}')
        self.assertEqual(response.status_code, HTTPStatus.NOT_FOUND)

    def test_list_all(self):
        """Administrators see hidden products; farmers may not look."""
        response = self.request('GET', '/api/products/all', self.admin)
        self.assertEqual(response.status_code, HTTPStatus.OK)
        self.assertEqual(response.get_json()['count'], 2)

        response = self.request('GET', '/api/products/all', self.farmer)
        self.assertEqual(response.status_code, HTTPStatus.FORBIDDEN)
        response = self.request('GET', '/api/products/all')
        self.assertEqual(response.status_code, HTTPStatus.UNAUTHORIZED)

    def test_list_by_farmer(self):
        """Farmers see their own products; admins see anyone's."""
        path = f'/api/products/farmer/{self.farmer_id}'
        response = self.request('GET', path, self.farmer)
        self.assertEqual(response.status_code, HTTPStatus.OK)
        self.assertEqual(response.get_json()['count'], 2)
        response = self.request('GET', path, self.admin)
        self.assertEqual(response.status_code, HTTPStatus.OK)
        response = self.request('GET', path, self.other)
        self.assertEqual(response.status_code, HTTPStatus.FORBIDDEN)


class TestOwnership(ProductServiceTestCase):
    """Tests for update, visibility, and deletion."""

    def setUp(self):
        """Add a product for the first farmer."""
        super(TestOwnership, self).setUp()
        self.product = self.create()
        self.path = f'/api/products/{self.product["product_id"]}'

    def test_update(self):
        """The owner can update; the owner cannot be changed."""
        response = self.request('PUT', self.path, self.farmer,
                                product(price=350, farmer_name='Someone'))
        self.assertEqual(response.status_code, HTTPStatus.OK)
        data = response.get_json()
        self.assertEqual(data['price'], 350.)
        self.assertEqual(data['farmer_id'], self.farmer_id)
        self.assertEqual(data['farmer_name'], 'Kamal Perera')

    def test_update_by_other(self):
        """Other farmers cannot update, even with a valid body."""
        response = self.request('PUT', self.path, self.other, product())
        self.assertEqual(response.status_code, HTTPStatus.FORBIDDEN)

    def test_ownership_before_validation(self):
        """An invalid body from a non-owner is still forbidden."""
        response = self.request('PUT', self.path, self.other, {})
        self.assertEqual(response.status_code, HTTPStatus.FORBIDDEN)

    def test_toggle_visibility(self):
        """The owner can hide and show a product."""
        response = self.request('PATCH', f'{self.path}/visibility',
                                self.farmer)
        self.assertEqual(response.status_code, HTTPStatus.OK)
        self.assertFalse(response.get_json()['is_visible'])
        response = self.request('PATCH', f'{self.path}/visibility',
                                self.other)
        self.assertEqual(response.status_code, HTTPStatus.FORBIDDEN)

    def test_delete_by_other_farmer(self):
        """Another farmer cannot delete the product."""
        response = self.request('DELETE', self.path, self.other)
        self.assertEqual(response.status_code, HTTPStatus.FORBIDDEN)
        response = self.request('GET', self.path)
        self.assertEqual(response.status_code, HTTPStatus.OK)

    def test_delete_by_admin(self):
        """Administrators can delete any product."""
        response = self.request('DELETE', self.path, self.admin)
        self.assertEqual(response.status_code, HTTPStatus.OK)
        self.assertEqual(response.get_json()['product_name'], 'Red Rice')
        response = self.request('GET', self.path)
        self.assertEqual(response.status_code, HTTPStatus.NOT_FOUND)

    def test_delete_missing(self):
        """Existence is checked before ownership."""
        response = self.request('DELETE', f'/api/products/{new_id()}',
                                self.other)
        self.assertEqual(response.status_code, HTTPStatus.NOT_FOUND)

    def test_delete_invalid_id(self):
        """Malformed ids are bad requests."""
        response = self.request('DELETE', '/api/products/42', self.farmer)
        self.assertEqual(response.status_code, HTTPStatus.BAD_REQUEST)

    def test_delete_anonymous(self):
        """Authentication comes first."""
        response = self.request('DELETE', '/api/products/42')
        self.assertEqual(response.status_code, HTTPStatus.UNAUTHORIZED)


class TestHealth(ProductServiceTestCase):
    """Tests for ``/health``."""

    def test_health(self):
        """The service and its database are up."""
        response = self.request('GET', '/health')
        self.assertEqual(response.status_code, HTTPStatus.OK)
        self.assertEqual(response.get_json()['status'], 'UP')
