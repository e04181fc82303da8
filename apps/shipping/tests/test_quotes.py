"""
Tests for freight quotes, the flat-rate fallback and the shipping API.
"""
import json
from decimal import Decimal
from unittest import mock

from django.test import Client, TestCase, override_settings

from apps.shipping import services
from apps.siteconfig.services import set_shipping_fallback_enabled, update_pricing_config
from apps.supplier.dtos import FreightOptionDTO
from apps.supplier.exceptions import SupplierError, SupplierUnavailable


def freight_client(options=None, error=None):
    client = mock.Mock()
    if error is not None:
        client.get_freight_quote.side_effect = error
    else:
        client.get_freight_quote.return_value = options or []
    return client


class ShippingQuoteTest(TestCase):

    def setUp(self):
        update_pricing_config(usd_to_zar=Decimal('18.5'), price_markup=Decimal('1.12'))

    def quote(self, client, **kwargs):
        with mock.patch('apps.shipping.services.get_client', return_value=client):
            return services.get_shipping_quote(**kwargs)

    def test_options_converted_to_rand(self):
        client = freight_client([
            FreightOptionDTO(logistic_name='CJPacket', total_postage=Decimal('4.01'), aging='7-12'),
        ])
        result = self.quote(client, items=[{'cj_vid': 'V1', 'quantity': 2}], country='za', postal_code='2000')

        client.get_freight_quote.assert_called_once_with('CN', 'ZA', [{'vid': 'V1', 'quantity': 2}], '2000')
        option = result.options[0]
        # 4.01 * 18.5 = 74.185, rounded up
        self.assertEqual(option.price_zar, Decimal('74.19'))
        self.assertEqual(option.price_usd, Decimal('4.01'))
        self.assertFalse(result.fallback)
        self.assertEqual(result.from_country, 'CN')

    def test_insurance_included_when_order_value_known(self):
        result = self.quote(freight_client(), items=[{'vid': 'V1'}], order_value=Decimal('1000'))
        self.assertTrue(result.insurance.available)
        self.assertEqual(result.insurance.price_zar, Decimal('30.00'))
        self.assertEqual(result.insurance.coverage, Decimal('1000'))

        result = self.quote(freight_client(), items=[{'vid': 'V1'}])
        self.assertFalse(result.insurance.available)

    def test_validation(self):
        with self.assertRaisesMessage(ValueError, 'At least one item'):
            services.get_shipping_quote([])
        with self.assertRaisesMessage(ValueError, 'variant id'):
            services.get_shipping_quote([{'quantity': 1}])
        with self.assertRaisesMessage(ValueError, 'Quantity'):
            services.get_shipping_quote([{'vid': 'V1', 'quantity': -1}])

    def test_supplier_error_without_fallback(self):
        set_shipping_fallback_enabled(False)
        with self.assertRaises(SupplierError):
            self.quote(freight_client(error=SupplierUnavailable('down')), items=[{'vid': 'V1'}])

    @override_settings(SHIPPING_FALLBACK_PRICE_ZAR='175.00')
    def test_supplier_error_with_fallback(self):
        set_shipping_fallback_enabled(True)
        result = self.quote(freight_client(error=SupplierError('down')), items=[{'vid': 'V1'}], country='US')

        self.assertTrue(result.fallback)
        self.assertEqual(result.country, 'US')
        self.assertEqual(len(result.options), 1)
        option = result.options[0]
        self.assertEqual(option.logistic_name, 'Standard Shipping')
        self.assertEqual(option.price_zar, Decimal('175.00'))
        self.assertIsNone(option.price_usd)
        self.assertEqual(option.delivery_days, '10-20')


class ShippingAPITest(TestCase):

    def setUp(self):
        self.client = Client()

    def post_quote(self, payload):
        return self.client.post('/api/shipping/quote', data=json.dumps(payload), content_type='application/json')

    def test_countries(self):
        codes = [c['code'] for c in self.client.get('/api/shipping/countries').json()]
        self.assertEqual(codes[0], 'ZA')
        self.assertEqual(len(codes), 10)

    def test_quote(self):
        client = freight_client([
            FreightOptionDTO(logistic_name='YunExpress', total_postage=Decimal('10'), aging='10-15'),
        ])
        with mock.patch('apps.shipping.services.get_client', return_value=client):
            response = self.post_quote({'items': [{'vid': 'V1', 'quantity': 1}], 'country': 'ZA'})
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()['options'][0]['logistic_name'], 'YunExpress')

    def test_missing_vid_is_400(self):
        response = self.post_quote({'items': [{'quantity': 1}]})
        self.assertEqual(response.status_code, 400)

    def test_supplier_failure_is_502(self):
        with mock.patch('apps.shipping.services.get_client', return_value=freight_client(error=SupplierError('down'))):
            response = self.post_quote({'items': [{'vid': 'V1'}]})
        self.assertEqual(response.status_code, 502)
        self.assertEqual(response.json()['detail'], 'Supplier request failed')
