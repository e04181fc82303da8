"""
Tests for carts, checkout, analytics and the supplier relay.
"""
from decimal import Decimal
from unittest import mock

from django.core import mail
from django.test import TestCase, override_settings

from apps.catalog.models import ProductInventory
from apps.catalog.tests.factories import make_product
from apps.orders import services
from apps.orders.models import Cart, Order, OrderStatus
from apps.supplier.dtos import SupplierOrderDTO
from apps.supplier.exceptions import SupplierError


def stocked_product(cj_inventory=100, **overrides):
    product = make_product(**overrides)
    ProductInventory.objects.create(
        product=product, cj_pid=product.cj_pid, cj_vid=product.cj_vid,
        warehouse_id='CN-1', cj_inventory=cj_inventory,
    )
    return product


def paid_order(**overrides):
    fields = {
        'user_id': 'user-1',
        'order_number': 'ORDER-1',
        'items': [{'id': 'curated-1', 'name': 'Blanket', 'price': '200.00', 'quantity': 2, 'cj_vid': 'V1'}],
        'subtotal': Decimal('400.00'),
        'total': Decimal('400.00'),
        'status': OrderStatus.PAID,
        'customer_email': 'buyer@shop.test',
        'customer_name': 'Buyer',
        'shipping_address': '1 Long St',
        'shipping_city': 'Cape Town',
        'shipping_province': 'Western Cape',
        'shipping_postal_code': '8001',
        'shipping_method': 'CJPacket',
    }
    fields.update(overrides)
    return Order.objects.create(**fields)


class CartTest(TestCase):

    def test_empty_cart(self):
        cart = services.get_cart('user-1')
        self.assertEqual(cart.items, [])
        self.assertIsNone(cart.updated_at)

    def test_save_replaces_items(self):
        product = stocked_product()
        services.save_cart('user-1', [{'id': f'curated-{product.id}', 'quantity': 1}])
        services.save_cart('user-1', [{'id': f'curated-{product.id}', 'quantity': 3}])
        self.assertEqual(services.get_cart('user-1').items[0]['quantity'], 3)
        self.assertEqual(Cart.objects.count(), 1)

    def test_sold_out_products_rejected(self):
        product = stocked_product(cj_inventory=0, product_name='Sold Out Pram')
        with self.assertRaises(services.SoldOutError) as ctx:
            services.save_cart('user-1', [{'id': f'curated-{product.id}'}])
        self.assertEqual(ctx.exception.product_names, ['Sold Out Pram'])
        self.assertFalse(Cart.objects.exists())

    def test_local_items_are_not_stock_checked(self):
        services.save_cart('user-1', [{'id': 'local-5', 'quantity': 1}])
        self.assertEqual(len(services.get_cart('user-1').items), 1)

    def test_items_must_be_a_list(self):
        with self.assertRaises(ValueError):
            services.save_cart('user-1', {'id': 1})

    def test_clear(self):
        services.save_cart('user-1', [])
        self.assertTrue(services.clear_cart('user-1'))
        self.assertFalse(services.clear_cart('user-1'))


class CreateOrderTest(TestCase):

    def test_prices_come_from_catalog(self):
        product = stocked_product(custom_price=Decimal('199.99'), cj_vid='V9')
        order = services.create_order(
            'user-1',
            [{'id': f'curated-{product.id}', 'quantity': 2, 'price': '1.00'}],
            'buyer@shop.test',
            shipping='74.19',
            insurance='25',
            discount='10',
            shipping_country='za',
        )
        self.assertEqual(order.subtotal, Decimal('399.98'))
        self.assertEqual(order.total, Decimal('489.17'))
        self.assertEqual(order.status, OrderStatus.PENDING)
        self.assertEqual(order.shipping_country, 'ZA')
        self.assertTrue(order.order_number.startswith('ORDER-'))
        line = order.items[0]
        self.assertEqual(line['price'], '199.99')
        self.assertEqual(line['cj_vid'], 'V9')
        self.assertEqual(line['id'], f'curated-{product.id}')

    def test_total_never_negative(self):
        product = stocked_product(custom_price=Decimal('50.00'))
        order = services.create_order('user-1', [{'id': product.id}], 'b@shop.test', discount='80')
        self.assertEqual(order.total, Decimal('0.00'))

    def test_order_numbers_are_unique(self):
        product = stocked_product()
        with mock.patch('apps.orders.services.time') as fake_time:
            fake_time.time.return_value = 1700000000.0
            first = services.create_order('u', [{'id': product.id}], 'b@shop.test')
            second = services.create_order('u', [{'id': product.id}], 'b@shop.test')
        self.assertEqual(first.order_number, 'ORDER-1700000000000')
        self.assertEqual(second.order_number, 'ORDER-1700000000001')

    def test_rejections(self):
        product = stocked_product()
        inactive = stocked_product(cj_pid='CJ-OFF', is_active=False)
        with self.assertRaises(ValueError):
            services.create_order('u', [], 'b@shop.test')
        with self.assertRaises(ValueError):
            services.create_order('u', [{'id': product.id}], '')
        with self.assertRaisesMessage(ValueError, 'not available'):
            services.create_order('u', [{'id': inactive.id}], 'b@shop.test')
        with self.assertRaisesMessage(ValueError, 'Quantity'):
            services.create_order('u', [{'id': product.id, 'quantity': 0}], 'b@shop.test')
        with self.assertRaisesMessage(ValueError, 'shipping'):
            services.create_order('u', [{'id': product.id}], 'b@shop.test', shipping='-1')
        self.assertFalse(Order.objects.exists())

    def test_sold_out_blocks_checkout(self):
        product = stocked_product(cj_inventory=0)
        with self.assertRaises(services.SoldOutError):
            services.create_order('u', [{'id': product.id}], 'b@shop.test')


class OrderStatusTest(TestCase):

    def test_update_by_number(self):
        paid_order(status=OrderStatus.PENDING)
        order = services.update_order_status('ORDER-1', OrderStatus.PAID, payment_id='PF-1')
        self.assertEqual(order.status, OrderStatus.PAID)
        self.assertEqual(order.payfast_payment_id, 'PF-1')
        self.assertIsNone(services.update_order_status('ORDER-X', OrderStatus.PAID))
        with self.assertRaises(ValueError):
            services.update_order_status('ORDER-1', 'shipped')

    def test_user_scoped_lookups(self):
        order = paid_order()
        self.assertEqual(services.get_user_order('user-1', order.id).order_number, 'ORDER-1')
        self.assertIsNone(services.get_user_order('user-2', order.id))
        self.assertEqual(len(services.list_user_orders('user-1')), 1)

    def test_reviewable_order(self):
        order = paid_order()
        self.assertEqual(services.find_reviewable_order('user-1', 'curated-1').id, order.id)
        self.assertIsNone(services.find_reviewable_order('user-1', 'curated-2'))
        Order.objects.filter(id=order.id).update(status=OrderStatus.PENDING)
        self.assertIsNone(services.find_reviewable_order('user-1', 'curated-1'))

    def test_admin_listing(self):
        paid_order()
        paid_order(order_number='ORDER-2', status=OrderStatus.PENDING)
        page = services.list_orders(status=OrderStatus.PENDING)
        self.assertEqual(page.total, 1)
        self.assertEqual(page.orders[0].order_number, 'ORDER-2')
        self.assertEqual(services.list_orders(limit=1).total, 2)


class AnalyticsTest(TestCase):

    def test_summary_and_top_products(self):
        paid_order(status=OrderStatus.COMPLETED)
        paid_order(
            order_number='ORDER-2', status=OrderStatus.COMPLETED, total=Decimal('100.00'),
            items=[
                {'id': 'curated-1', 'name': 'Blanket', 'price': '200.00', 'quantity': 1},
                {'id': 'curated-2', 'name': 'Bib', 'price': '50.00', 'quantity': 2},
            ],
        )
        paid_order(order_number='ORDER-3', status=OrderStatus.PENDING, total=Decimal('10.00'))

        analytics = services.get_order_analytics()

        self.assertEqual(analytics.summary.total_orders, 3)
        self.assertEqual(analytics.summary.total_revenue, Decimal('510.00'))
        self.assertEqual(analytics.summary.completed_orders, 2)
        self.assertEqual(analytics.summary.pending_orders, 1)
        self.assertEqual(sum(d.order_count for d in analytics.daily_orders), 3)

        top = analytics.top_products[0]
        self.assertEqual(top.product_id, 'curated-1')
        self.assertEqual(top.times_ordered, 2)
        self.assertEqual(top.total_revenue, Decimal('600.00'))

    def test_empty(self):
        analytics = services.get_order_analytics()
        self.assertEqual(analytics.summary.total_revenue, Decimal('0.00'))
        self.assertEqual(analytics.daily_orders, [])
        self.assertEqual(analytics.top_products, [])


class SupplierRelayTest(TestCase):

    def submit(self, order, client):
        with mock.patch('apps.orders.services.get_client', return_value=client):
            return services.submit_order_to_supplier(order.id)

    def test_successful_submission(self):
        order = paid_order()
        client = mock.Mock()
        client.create_order.return_value = SupplierOrderDTO(order_id='CJ-ORD-1', order_number='ORDER-1', status='CREATED')

        result = self.submit(order, client)

        payload = client.create_order.call_args[0][0]
        self.assertEqual(payload['orderNumber'], 'ORDER-1')
        self.assertEqual(payload['fromCountryCode'], 'CN')
        self.assertEqual(payload['logisticName'], 'CJPacket')
        self.assertEqual(payload['products'], [{'vid': 'V1', 'quantity': 2}])
        self.assertEqual(result.supplier_order_id, 'CJ-ORD-1')
        self.assertIsNotNone(result.supplier_submitted_at)

    def test_only_paid_unsubmitted_orders(self):
        pending = paid_order(status=OrderStatus.PENDING)
        with self.assertRaisesMessage(ValueError, 'only paid orders'):
            self.submit(pending, mock.Mock())
        submitted = paid_order(order_number='ORDER-2', supplier_order_id='CJ-1')
        with self.assertRaisesMessage(ValueError, 'already submitted'):
            self.submit(submitted, mock.Mock())
        with self.assertRaisesMessage(ValueError, 'Order not found'):
            services.submit_order_to_supplier(9999)

    def test_missing_vid_is_recorded(self):
        order = paid_order(items=[{'id': 'curated-1', 'name': 'Blanket', 'quantity': 1}])
        with self.assertRaises(ValueError):
            self.submit(order, mock.Mock())
        order.refresh_from_db()
        self.assertIn('no supplier variant id', order.supplier_error)

    def test_supplier_rejection_is_recorded(self):
        order = paid_order()
        client = mock.Mock()
        client.create_order.side_effect = SupplierError('Address invalid', code=1600100)
        with self.assertRaises(SupplierError):
            self.submit(order, client)
        order.refresh_from_db()
        self.assertEqual(order.supplier_error, 'Address invalid')
        self.assertEqual(order.supplier_order_id, '')


@override_settings(EMAIL_BACKEND='django.core.mail.backends.locmem.EmailBackend')
class TrackingUpdateTest(TestCase):

    def test_new_tracking_completes_order_and_emails(self):
        paid_order(supplier_order_id='CJ-ORD-1')
        order = services.apply_tracking_update(
            supplier_order_id='CJ-ORD-1', tracking_number='YT123', carrier='YunExpress',
        )
        self.assertEqual(order.status, OrderStatus.COMPLETED)
        self.assertEqual(order.tracking_number, 'YT123')
        self.assertEqual(len(mail.outbox), 1)
        self.assertIn('ORDER-1', mail.outbox[0].subject)
        self.assertIn('YT123', mail.outbox[0].body)

    def test_repeated_tracking_does_not_email_again(self):
        paid_order(tracking_number='YT123', status=OrderStatus.COMPLETED)
        order = services.apply_tracking_update(order_number='ORDER-1', tracking_number='YT123', supplier_status='SHIPPED')
        self.assertEqual(order.supplier_status, 'SHIPPED')
        self.assertEqual(len(mail.outbox), 0)

    def test_unknown_order(self):
        self.assertIsNone(services.apply_tracking_update(supplier_order_id='nope', tracking_number='X'))
        self.assertIsNone(services.apply_tracking_update())
