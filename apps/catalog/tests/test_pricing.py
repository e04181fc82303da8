"""Unit tests for retail pricing, freight conversion and insurance."""
from decimal import Decimal

from apps.catalog import pricing


def test_retail_price_rounds_conversion_then_markup():
    # 10.00 USD * 18.0 = 180.00 ZAR, * 1.12 = 201.60
    assert pricing.retail_price(Decimal('10.00'), Decimal('18.0'), Decimal('1.12')) == Decimal('201.60')


def test_retail_price_rounds_half_up():
    # 1.255 * 10 = 12.55 -> * 1.5 = 18.825 -> 18.83
    assert pricing.retail_price(Decimal('1.255'), 10, Decimal('1.5')) == Decimal('18.83')


def test_percent_change():
    assert pricing.percent_change(Decimal('10.00'), Decimal('10.04')) == Decimal('0.4')
    assert pricing.percent_change(Decimal('10.00'), Decimal('9.00')) == Decimal('10.0')
    assert pricing.percent_change(Decimal('0'), Decimal('5.00')) == Decimal('0.0')
    assert pricing.percent_change(Decimal('100.00'), Decimal('100.54'), places=None) == Decimal('0.54')


def test_shipping_rounds_up_to_the_cent():
    # 3.333 * 18 = 59.994
    assert pricing.shipping_to_zar(Decimal('3.333'), Decimal('18')) == Decimal('60.00')
    assert pricing.shipping_to_zar(Decimal('2.00'), Decimal('18.5')) == Decimal('37.00')


def test_insurance_bounds():
    assert pricing.insurance_quote(Decimal('1500')) == Decimal('45.00')
    assert pricing.insurance_quote(Decimal('1001')) == Decimal('31.00')
    assert pricing.insurance_quote(Decimal('100')) == Decimal('25.00')
    assert pricing.insurance_quote(Decimal('20000')) == Decimal('500.00')


def test_insurance_without_order_value():
    assert pricing.insurance_quote(None) is None
    assert pricing.insurance_quote(0) is None
