"""
API tests for the storefront, local product and curation endpoints.
"""
import json
from decimal import Decimal
from unittest import mock

from django.test import Client, TestCase

from apps.catalog.models import CuratedProduct, LocalProduct
from apps.identity.jwt_auth import create_access_token
from apps.identity.models import User

from .factories import fake_client, make_product, warehouse


class CatalogAPITestCase(TestCase):

    def setUp(self):
        self.client = Client()
        self.admin = User.objects.create_user(
            username='admin@shop.test', email='admin@shop.test', password='secret1', is_admin=True,
        )
        self.customer = User.objects.create_user(
            username='buyer@shop.test', email='buyer@shop.test', password='secret1',
        )

    def auth(self, user):
        return {'HTTP_AUTHORIZATION': f'Bearer {create_access_token(user)}'}

    def post_json(self, path, data, user=None):
        extra = self.auth(user) if user else {}
        return self.client.post(path, data=json.dumps(data), content_type='application/json', **extra)

    def put_json(self, path, data, user=None):
        extra = self.auth(user) if user else {}
        return self.client.put(path, data=json.dumps(data), content_type='application/json', **extra)


class StorefrontAPITest(CatalogAPITestCase):

    def test_list_and_detail(self):
        product = make_product(custom_price=Decimal('250.00'))
        response = self.client.get('/api/products/')
        self.assertEqual(response.status_code, 200)
        self.assertEqual(Decimal(response.json()[0]['display_price']), Decimal('250.00'))

        self.assertEqual(self.client.get(f'/api/products/{product.id}').json()['cj_pid'], 'CJ1001')
        self.assertEqual(self.client.get('/api/products/CJ1001').json()['id'], product.id)
        self.assertEqual(self.client.get('/api/products/NOPE').status_code, 404)


class LocalProductAPITest(CatalogAPITestCase):

    def test_writes_require_admin(self):
        payload = {'name': 'Bib', 'price': '19.99', 'stock_quantity': 4}
        self.assertEqual(self.post_json('/api/local-products/', payload).status_code, 401)
        self.assertEqual(self.post_json('/api/local-products/', payload, self.customer).status_code, 403)

        response = self.post_json('/api/local-products/', payload, self.admin)
        self.assertEqual(response.status_code, 201)
        self.assertEqual(response.json()['category'], 'General')

    def test_update_keeps_unsent_fields(self):
        product = LocalProduct.objects.create(name='Bib', price=Decimal('10'), stock_quantity=1, sku='B-1')
        response = self.put_json(f'/api/local-products/{product.id}', {'stock_quantity': 9}, self.admin)
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()['stock_quantity'], 9)
        self.assertEqual(response.json()['sku'], 'B-1')

    def test_bulk_stock_update(self):
        product = LocalProduct.objects.create(name='Bib', price=Decimal('10'), stock_quantity=1)
        response = self.post_json(
            '/api/local-products/bulk-stock-update',
            {'updates': [{'id': product.id, 'stock_quantity': 7}, {'id': 999, 'stock_quantity': 1}]},
            self.admin,
        )
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()['updated'], 1)
        product.refresh_from_db()
        self.assertEqual(product.stock_quantity, 7)

    def test_bulk_stock_update_rejects_negative_quantity(self):
        product = LocalProduct.objects.create(name='Bib', price=Decimal('10'), stock_quantity=1)
        response = self.post_json(
            '/api/local-products/bulk-stock-update',
            {'updates': [{'id': product.id, 'stock_quantity': -5}]},
            self.admin,
        )
        self.assertEqual(response.status_code, 400)
        product.refresh_from_db()
        self.assertEqual(product.stock_quantity, 1)

    def test_delete_is_soft(self):
        product = LocalProduct.objects.create(name='Bib', price=Decimal('10'), stock_quantity=1)
        response = self.client.delete(f'/api/local-products/{product.id}', **self.auth(self.admin))
        self.assertEqual(response.status_code, 200)
        self.assertEqual(self.client.get(f'/api/local-products/{product.id}').status_code, 404)
        self.assertTrue(LocalProduct.objects.filter(id=product.id).exists())


class CurationAPITest(CatalogAPITestCase):

    def test_add_product(self):
        client = fake_client(get_inventory=mock.Mock(return_value=[warehouse(80)]))
        with mock.patch('apps.catalog.services.get_client', return_value=client):
            response = self.post_json(
                '/api/admin/catalog/products',
                {'cj_pid': 'CJ42', 'cj_vid': 'V42', 'product_name': 'Onesie', 'cj_cost_price': '5.00'},
                self.admin,
            )
        self.assertEqual(response.status_code, 201)
        self.assertEqual(response.json()['stock_quantity'], 80)

    def test_duplicate_is_409(self):
        make_product(cj_pid='CJ42')
        response = self.post_json(
            '/api/admin/catalog/products',
            {'cj_pid': 'CJ42', 'cj_vid': 'V42', 'product_name': 'Onesie', 'cj_cost_price': '5.00'},
            self.admin,
        )
        self.assertEqual(response.status_code, 409)

    def test_update_and_delete(self):
        product = make_product()
        response = self.put_json(
            f'/api/admin/catalog/products/{product.id}', {'custom_price': '199.00'}, self.admin,
        )
        self.assertEqual(response.status_code, 200)
        self.assertEqual(Decimal(response.json()['custom_price']), Decimal('199.00'))

        self.assertEqual(
            self.put_json(f'/api/admin/catalog/products/{product.id}', {}, self.admin).status_code, 400,
        )
        self.assertEqual(
            self.client.delete(f'/api/admin/catalog/products/{product.id}', **self.auth(self.admin)).status_code,
            200,
        )
        self.assertFalse(CuratedProduct.objects.exists())

    def test_admin_listing_includes_inactive(self):
        make_product(is_active=False)
        response = self.client.get('/api/admin/catalog/products', **self.auth(self.admin))
        self.assertEqual(len(response.json()), 1)
        self.assertEqual(self.client.get('/api/products/').json(), [])

    def test_supplier_search_validates_paging(self):
        response = self.client.get(
            '/api/admin/catalog/supplier-products/search?q=x&page=0', **self.auth(self.admin),
        )
        self.assertEqual(response.status_code, 400)
