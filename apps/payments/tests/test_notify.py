"""
Tests for PayFast ITN signature checks and order settlement.
"""
import hashlib
from decimal import Decimal
from unittest import mock

from django.core import mail
from django.test import Client, TestCase, override_settings

from apps.orders.models import Cart, Order, OrderStatus
from apps.orders.tests.test_services import paid_order
from apps.payments import services
from apps.supplier.dtos import SupplierOrderDTO
from apps.supplier.exceptions import SupplierError


def test_signature_skips_blank_fields_and_signature():
    fields = {'merchant_id': '10000100', 'item_name': 'Order #1', 'blank': '  ', 'signature': 'abc'}
    expected = hashlib.md5(b'merchant_id=10000100&item_name=Order+%231').hexdigest()
    assert services.generate_signature(fields) == expected


def test_signature_appends_passphrase():
    expected = hashlib.md5(b'amount_gross=100.00&passphrase=salt+and+pepper').hexdigest()
    assert services.generate_signature({'amount_gross': ' 100.00 '}, 'salt and pepper') == expected


def signed(data, passphrase='jt7NOE43FZPn'):
    data = dict(data)
    data['signature'] = services.generate_signature(data, passphrase)
    return data


@override_settings(
    PAYFAST_PASSPHRASE='jt7NOE43FZPn',
    PAYFAST_MERCHANT_ID='10000100',
    CJ_AUTO_SUBMIT_ORDERS=False,
    EMAIL_BACKEND='django.core.mail.backends.locmem.EmailBackend',
)
class NotificationTest(TestCase):

    def setUp(self):
        self.order = paid_order(status=OrderStatus.PENDING, total=Decimal('400.00'))
        Cart.objects.create(user_id='user-1', items=[{'id': 'curated-1'}])

    def itn(self, **overrides):
        data = {
            'm_payment_id': 'ORDER-1',
            'pf_payment_id': '1089250',
            'payment_status': 'COMPLETE',
            'amount_gross': '400.00',
            'merchant_id': '10000100',
        }
        data.update(overrides)
        return signed(data)

    def test_complete_marks_paid_and_follows_up(self):
        result = services.process_notification(self.itn())

        self.assertEqual(result.order_status, OrderStatus.PAID)
        order = Order.objects.get(id=self.order.id)
        self.assertEqual(order.status, OrderStatus.PAID)
        self.assertEqual(order.payfast_payment_id, '1089250')
        self.assertFalse(Cart.objects.filter(user_id='user-1').exists())
        self.assertEqual(len(mail.outbox), 1)
        self.assertEqual(mail.outbox[0].subject, 'Order Confirmation - ORDER-1')

    def test_duplicate_complete_is_a_no_op(self):
        services.process_notification(self.itn())
        services.process_notification(self.itn())
        self.assertEqual(len(mail.outbox), 1)

    def test_cancelled_and_failed(self):
        services.process_notification(self.itn(payment_status='CANCELLED'))
        self.assertEqual(Order.objects.get(id=self.order.id).status, OrderStatus.CANCELLED)
        services.process_notification(self.itn(payment_status='FAILED'))
        self.assertEqual(Order.objects.get(id=self.order.id).status, OrderStatus.FAILED)
        self.assertEqual(len(mail.outbox), 0)

    def test_unknown_status_is_ignored(self):
        result = services.process_notification(self.itn(payment_status='PENDING'))
        self.assertEqual(result.order_status, OrderStatus.PENDING)

    def test_tampered_payload_rejected(self):
        data = self.itn()
        data['amount_gross'] = '1.00'
        with self.assertRaisesMessage(ValueError, 'Invalid signature'):
            services.process_notification(data)

    def test_merchant_mismatch(self):
        with self.assertRaisesMessage(ValueError, 'Merchant id mismatch'):
            services.process_notification(self.itn(merchant_id='999'))

    def test_amount_mismatch(self):
        with self.assertRaisesMessage(ValueError, 'Amount mismatch'):
            services.process_notification(self.itn(amount_gross='399.98'))
        services.process_notification(self.itn(amount_gross='399.99'))
        self.assertEqual(Order.objects.get(id=self.order.id).status, OrderStatus.PAID)

    def test_bad_amount_and_unknown_order(self):
        with self.assertRaisesMessage(ValueError, 'Invalid amount_gross'):
            services.process_notification(self.itn(amount_gross='abc'))
        with self.assertRaisesMessage(ValueError, 'Invalid amount_gross'):
            services.process_notification(self.itn(amount_gross='NaN'))
        with self.assertRaisesMessage(ValueError, 'Unknown order'):
            services.process_notification(self.itn(m_payment_id='ORDER-404'))

    @override_settings(CJ_AUTO_SUBMIT_ORDERS=True, TASK_BACKEND='local')
    def test_auto_submit_to_supplier(self):
        client = mock.Mock()
        client.create_order.return_value = SupplierOrderDTO(order_id='CJ-9', order_number='ORDER-1', status='CREATED')
        with mock.patch('apps.orders.services.get_client', return_value=client):
            result = services.process_notification(self.itn())
        self.assertIsNotNone(result.supplier_task_id)
        self.assertEqual(Order.objects.get(id=self.order.id).supplier_order_id, 'CJ-9')

    @override_settings(CJ_AUTO_SUBMIT_ORDERS=True, TASK_BACKEND='local')
    def test_auto_submit_failure_keeps_payment(self):
        client = mock.Mock()
        client.create_order.side_effect = SupplierError('rejected')
        with mock.patch('apps.orders.services.get_client', return_value=client):
            result = services.process_notification(self.itn())
        self.assertEqual(result.order_status, OrderStatus.PAID)
        self.assertIsNone(result.supplier_task_id)
        self.assertEqual(Order.objects.get(id=self.order.id).supplier_error, 'rejected')


@override_settings(
    PAYFAST_PASSPHRASE='jt7NOE43FZPn',
    PAYFAST_MERCHANT_ID='',
    CJ_AUTO_SUBMIT_ORDERS=False,
    EMAIL_BACKEND='django.core.mail.backends.locmem.EmailBackend',
)
class NotifyEndpointTest(TestCase):

    def setUp(self):
        self.client = Client()
        paid_order(status=OrderStatus.PENDING)

    def test_ok(self):
        data = signed({
            'm_payment_id': 'ORDER-1',
            'pf_payment_id': '1',
            'payment_status': 'COMPLETE',
            'amount_gross': '400.00',
        })
        response = self.client.post('/api/payments/notify', data=data)
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.content, b'OK')

    def test_bad_signature_is_400(self):
        response = self.client.post('/api/payments/notify', data={'m_payment_id': 'ORDER-1', 'signature': 'x'})
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.content, b'Invalid signature')
