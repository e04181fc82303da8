"""
Tests for supplier webhooks and the supplier pass-through API.
"""
import hashlib
import hmac
import json
from decimal import Decimal
from unittest import mock

from django.core import mail
from django.test import Client, TestCase, override_settings

from apps.identity.jwt_auth import create_access_token
from apps.identity.models import User
from apps.orders.models import Order, OrderStatus
from apps.orders.tests.test_services import paid_order
from apps.supplier.client import SupplierClient
from apps.supplier.dtos import SupplierOrderDTO, SupplierProductPageDTO
from apps.supplier.services import handle_webhook


@override_settings(EMAIL_BACKEND='django.core.mail.backends.locmem.EmailBackend')
class HandleWebhookTest(TestCase):

    def test_tracking_event_updates_order(self):
        paid_order(supplier_order_id='CJ-ORD-1')
        result = handle_webhook({
            'type': 'LOGISTIC',
            'params': {'orderId': 'CJ-ORD-1', 'trackingNumber': 'YT1', 'logisticName': 'YunExpress'},
        })
        self.assertEqual(result.orders_updated, 1)
        order = Order.objects.get()
        self.assertEqual(order.tracking_number, 'YT1')
        self.assertEqual(order.carrier, 'YunExpress')
        self.assertEqual(order.status, OrderStatus.COMPLETED)
        self.assertEqual(len(mail.outbox), 1)

    def test_list_of_entries_matched_by_order_number(self):
        paid_order(order_number='ORDER-1')
        paid_order(order_number='ORDER-2')
        result = handle_webhook({
            'type': 'ORDER',
            'params': [
                {'orderNumber': 'ORDER-1', 'orderStatus': 'SHIPPED'},
                {'orderNumber': 'ORDER-404', 'orderStatus': 'SHIPPED'},
                {'orderNumber': 'ORDER-2'},
            ],
        })
        self.assertEqual(result.orders_updated, 1)
        self.assertEqual(Order.objects.get(order_number='ORDER-1').supplier_status, 'SHIPPED')

    def test_other_event_types_ignored(self):
        paid_order(supplier_order_id='CJ-ORD-1')
        result = handle_webhook({'type': 'PRODUCT', 'params': {'orderId': 'CJ-ORD-1', 'trackingNumber': 'X'}})
        self.assertEqual(result.event_type, 'PRODUCT')
        self.assertEqual(result.orders_updated, 0)


@override_settings(EMAIL_BACKEND='django.core.mail.backends.locmem.EmailBackend')
class SupplierAPITest(TestCase):

    def setUp(self):
        self.client = Client()
        self.supplier = SupplierClient(access_token='tok', webhook_secret='s3cret', min_interval=0)
        patcher = mock.patch('apps.supplier.api.get_client', return_value=self.supplier)
        patcher.start()
        self.addCleanup(patcher.stop)

    def post_webhook(self, payload, secret='s3cret', timestamp='1700000000'):
        body = json.dumps(payload).encode()
        signature = hmac.new(secret.encode(), f'{timestamp}.'.encode() + body, hashlib.sha256).hexdigest()
        return self.client.post(
            '/api/supplier/webhook',
            data=body,
            content_type='application/json',
            HTTP_X_CJ_SIGNATURE=signature,
            HTTP_X_CJ_TIMESTAMP=timestamp,
        )

    def test_signed_webhook(self):
        paid_order(supplier_order_id='CJ-ORD-1')
        response = self.post_webhook({'type': 'LOGISTIC', 'params': {'orderId': 'CJ-ORD-1', 'trackNumber': 'YT9'}})
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()['orders_updated'], 1)

    def test_bad_signature_is_401(self):
        response = self.post_webhook({'type': 'ORDER'}, secret='wrong')
        self.assertEqual(response.status_code, 401)

    def test_non_object_body_is_400(self):
        response = self.post_webhook([1, 2])
        self.assertEqual(response.status_code, 400)

    def test_health(self):
        body = self.client.get('/api/supplier/health').json()
        self.assertTrue(body['ok'])
        self.assertTrue(body['status']['uses_static_token'])

    def test_product_search_passthrough(self):
        page = SupplierProductPageDTO(page=1, page_size=20, total=0, products=[])
        with mock.patch.object(self.supplier, 'search_products', return_value=page) as search:
            response = self.client.get('/api/supplier/products?q=blanket')
        self.assertEqual(response.status_code, 200)
        search.assert_called_once_with('blanket', 1, 20)
        self.assertEqual(self.client.get('/api/supplier/products?page_size=500').status_code, 400)

    def test_raw_order_requires_admin(self):
        self.assertEqual(
            self.client.post('/api/supplier/orders', data='{}', content_type='application/json').status_code,
            401,
        )
        admin = User.objects.create_user(
            username='admin@shop.test', email='admin@shop.test', password='secret1', is_admin=True,
        )
        created = SupplierOrderDTO(order_id='CJ-1', order_number='ORDER-1', status='CREATED')
        with mock.patch.object(self.supplier, 'create_order', return_value=created):
            response = self.client.post(
                '/api/supplier/orders',
                data=json.dumps({'orderNumber': 'ORDER-1', 'products': []}),
                content_type='application/json',
                HTTP_AUTHORIZATION=f'Bearer {create_access_token(admin)}',
            )
        self.assertEqual(response.status_code, 201)
        self.assertEqual(response.json()['order_id'], 'CJ-1')
