"""
Tests for customer email rendering and delivery.
"""
from decimal import Decimal
from unittest import mock

from django.core import mail
from django.test import TestCase, override_settings

from apps.notifications import services


@override_settings(
    EMAIL_BACKEND='django.core.mail.backends.locmem.EmailBackend',
    STORE_NAME='SnuggleUp',
    DEFAULT_FROM_EMAIL='orders@snuggleup.test',
)
class EmailTest(TestCase):

    def test_tracking_email(self):
        result = services.send_tracking_email('a@b.com', 'ORDER-1', 'YT123', 'https://track.test/YT123')
        self.assertTrue(result.success)
        message = mail.outbox[0]
        self.assertEqual(message.subject, 'Your SnuggleUp Order ORDER-1 Has Shipped!')
        self.assertEqual(message.from_email, 'orders@snuggleup.test')
        self.assertIn('https://track.test/YT123', message.body)
        html, mimetype = message.alternatives[0]
        self.assertEqual(mimetype, 'text/html')
        self.assertIn('YT123', html)

    def test_tracking_link_falls_back_to_search(self):
        services.send_tracking_email('a@b.com', 'ORDER-1', 'YT 123')
        self.assertIn('https://www.google.com/search?q=YT%20123', mail.outbox[0].body)

    def test_order_confirmation_lists_items(self):
        services.send_order_confirmation_email(
            'a@b.com',
            'ORDER-7',
            Decimal('250'),
            [{'name': 'Blanket', 'price': '125', 'quantity': 2}],
            customer_name='Thandi',
        )
        body = mail.outbox[0].body
        self.assertIn('Hi Thandi', body)
        self.assertIn('Total: R 250.00', body)
        self.assertIn('- Blanket - R 125.00 x 2', body)

    def test_missing_recipient(self):
        result = services.send_password_reset_email('', 'Ann', 'https://x.test')
        self.assertFalse(result.success)
        self.assertEqual(result.error, 'No recipient address')
        self.assertEqual(len(mail.outbox), 0)

    def test_send_failure_is_reported_not_raised(self):
        with mock.patch('apps.notifications.services.send_mail', side_effect=OSError('smtp down')):
            result = services.send_password_reset_email('a@b.com', 'Ann', 'https://x.test')
        self.assertFalse(result.success)
        self.assertEqual(result.error, 'smtp down')
