"""API Schemas for Siteconfig app."""
from decimal import Decimal
from typing import Optional
from ninja import Schema


class PricingConfigIn(Schema):
    usd_to_zar: Optional[Decimal] = None
    price_markup: Optional[Decimal] = None


class PricingConfigOut(Schema):
    usd_to_zar: Decimal
    price_markup: Decimal


class ShippingFallbackIn(Schema):
    enabled: bool


class ShippingFallbackOut(Schema):
    enabled: bool


class RuntimeConfigOut(Schema):
    usd_to_zar: Decimal
    price_markup: Decimal
    shipping_fallback_enabled: bool
    shipping_fallback_price_zar: Decimal
    inventory_sync_enabled: bool
    price_sync_enabled: bool
    auto_submit_orders: bool
