"""
Freight quotes.

All supplier goods ship from the supplier's CN warehouses. Postage is
quoted in USD and converted with the configured exchange rate, rounded up
to the cent. If the supplier cannot quote and the shipping fallback is
switched on, a single flat-rate option is offered instead.
"""
import logging
from decimal import Decimal
from typing import Any, Dict, List, Optional

from apps.catalog.pricing import INSURANCE_RATE, insurance_quote, shipping_to_zar
from apps.siteconfig.services import (
    get_pricing_config, get_shipping_fallback_price, is_shipping_fallback_enabled,
)
from apps.supplier.client import get_client
from apps.supplier.exceptions import SupplierError

from .dtos import CountryDTO, InsuranceDTO, ShippingOptionDTO, ShippingQuoteDTO

logger = logging.getLogger(__name__)

START_COUNTRY = 'CN'
FALLBACK_LOGISTIC_NAME = 'Standard Shipping'
FALLBACK_DELIVERY_DAYS = '10-20'
ZERO = Decimal('0.00')

SUPPORTED_COUNTRIES = (
    ('ZA', 'South Africa'),
    ('US', 'United States'),
    ('GB', 'United Kingdom'),
    ('AU', 'Australia'),
    ('CA', 'Canada'),
    ('DE', 'Germany'),
    ('FR', 'France'),
    ('IT', 'Italy'),
    ('ES', 'Spain'),
    ('NL', 'Netherlands'),
)


def list_supported_countries() -> List[CountryDTO]:
    return [CountryDTO(code=code, name=name) for code, name in SUPPORTED_COUNTRIES]


def _supplier_products(items: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """Cart items to the supplier's {"vid", "quantity"} shape. `cj_vid` is accepted for `vid`."""
    if not items:
        raise ValueError("At least one item is required")

    products = []
    for item in items:
        vid = str(item.get('vid') or item.get('cj_vid') or '').strip()
        if not vid:
            raise ValueError("All items must have a variant id (vid)")
        quantity = int(item.get('quantity') or 1)
        if quantity < 1:
            raise ValueError("Quantity must be at least 1")
        products.append({'vid': vid, 'quantity': quantity})
    return products


def _insurance(order_value) -> InsuranceDTO:
    premium = insurance_quote(order_value)
    if premium is None:
        return InsuranceDTO(available=False, price_zar=ZERO, coverage=ZERO, rate_percent=ZERO)
    return InsuranceDTO(
        available=True,
        price_zar=premium,
        coverage=Decimal(str(order_value)),
        rate_percent=INSURANCE_RATE * 100,
    )


def get_shipping_quote(
    items: List[Dict[str, Any]],
    country: str = 'ZA',
    postal_code: Optional[str] = None,
    order_value: Optional[Decimal] = None,
) -> ShippingQuoteDTO:
    """
    Quote freight for `items` to `country`.

    Raises:
        ValueError: missing vid or bad quantity
        SupplierError: supplier failure while the fallback is off
    """
    products = _supplier_products(items)
    country = (country or 'ZA').strip().upper()
    insurance = _insurance(order_value)

    try:
        options = get_client().get_freight_quote(START_COUNTRY, country, products, postal_code)
    except SupplierError as e:
        if not is_shipping_fallback_enabled():
            raise
        logger.warning("Freight quote failed (%s); using flat-rate fallback", e)
        fallback = ShippingOptionDTO(
            logistic_name=FALLBACK_LOGISTIC_NAME,
            price_usd=None,
            price_zar=get_shipping_fallback_price(),
            delivery_days=FALLBACK_DELIVERY_DAYS,
            fallback=True,
        )
        return ShippingQuoteDTO(
            country=country,
            from_country=START_COUNTRY,
            insurance=insurance,
            options=[fallback],
            fallback=True,
        )

    rate = get_pricing_config().usd_to_zar
    quoted = [
        ShippingOptionDTO(
            logistic_name=option.logistic_name,
            price_usd=option.total_postage,
            price_zar=shipping_to_zar(option.total_postage, rate),
            delivery_days=option.aging,
        )
        for option in options
    ]
    logger.info("Freight quote to %s: %d options for %d items", country, len(quoted), len(products))
    return ShippingQuoteDTO(country=country, from_country=START_COUNTRY, insurance=insurance, options=quoted)
