"""DTOs for Siteconfig app."""
from dataclasses import dataclass
from decimal import Decimal


@dataclass(frozen=True)
class PricingConfigDTO:
    """Exchange rate and markup used for every retail price."""
    usd_to_zar: Decimal
    price_markup: Decimal


@dataclass(frozen=True)
class RuntimeConfigDTO:
    usd_to_zar: Decimal
    price_markup: Decimal
    shipping_fallback_enabled: bool
    shipping_fallback_price_zar: Decimal
    inventory_sync_enabled: bool
    price_sync_enabled: bool
    auto_submit_orders: bool
