"""API Schemas for Shipping app."""
from decimal import Decimal
from typing import List, Optional
from ninja import Schema


class ShippingItemIn(Schema):
    vid: Optional[str] = None
    cj_vid: Optional[str] = None
    quantity: int = 1


class ShippingQuoteIn(Schema):
    items: List[ShippingItemIn]
    country: str = "ZA"
    postal_code: Optional[str] = None
    order_value: Optional[Decimal] = None


class ShippingOptionOut(Schema):
    logistic_name: str
    price_usd: Optional[Decimal] = None
    price_zar: Decimal
    delivery_days: str
    fallback: bool


class InsuranceOut(Schema):
    available: bool
    price_zar: Decimal
    coverage: Decimal
    rate_percent: Decimal


class ShippingQuoteOut(Schema):
    country: str
    from_country: str
    insurance: InsuranceOut
    options: List[ShippingOptionOut]
    fallback: bool


class CountryOut(Schema):
    code: str
    name: str
