"""
Services for Siteconfig app.

Reads fall back to Django settings (populated from the environment) when a
key has not been stored, or when the stored value cannot be parsed.
"""
import logging
from decimal import Decimal, InvalidOperation
from typing import Optional

from django.conf import settings

from .dtos import PricingConfigDTO, RuntimeConfigDTO
from .models import SiteSetting

logger = logging.getLogger(__name__)

USD_TO_ZAR_KEY = 'usd_to_zar'
PRICE_MARKUP_KEY = 'price_markup'
SHIPPING_FALLBACK_KEY = 'shipping_fallback_enabled'

DEFAULT_USD_TO_ZAR = Decimal('18.0')
DEFAULT_PRICE_MARKUP = Decimal('1.12')


def get_setting(key: str, default: Optional[str] = None) -> Optional[str]:
    row = SiteSetting.objects.filter(key=key).first()
    return row.value if row else default


def set_setting(key: str, value) -> str:
    row, _ = SiteSetting.objects.update_or_create(key=key, defaults={'value': str(value)})
    logger.info("Site setting %s updated to %s", key, row.value)
    return row.value


def _to_decimal(raw) -> Optional[Decimal]:
    try:
        value = Decimal(str(raw))
    except (InvalidOperation, TypeError, ValueError):
        return None
    return value if value.is_finite() else None


def get_decimal_setting(key: str, default: Decimal) -> Decimal:
    """
    Positive decimal setting. Unparseable or non-positive stored values
    are ignored in favour of `default`.
    """
    raw = get_setting(key)
    if raw is None:
        return default

    value = _to_decimal(raw)
    if value is None or value <= 0:
        logger.warning("Ignoring invalid value %r for setting %s", raw, key)
        return default
    return value


def _env_decimal(name: str, default: Decimal) -> Decimal:
    value = _to_decimal(getattr(settings, name, None))
    return value if value is not None and value > 0 else default


def get_pricing_config() -> PricingConfigDTO:
    return PricingConfigDTO(
        usd_to_zar=get_decimal_setting(USD_TO_ZAR_KEY, _env_decimal('USD_TO_ZAR', DEFAULT_USD_TO_ZAR)),
        price_markup=get_decimal_setting(PRICE_MARKUP_KEY, _env_decimal('PRICE_MARKUP', DEFAULT_PRICE_MARKUP)),
    )


def update_pricing_config(usd_to_zar=None, price_markup=None) -> PricingConfigDTO:
    """
    Store new pricing values. Only the values given are changed.

    Raises:
        ValueError: a value is not a positive number
    """
    for key, value in ((USD_TO_ZAR_KEY, usd_to_zar), (PRICE_MARKUP_KEY, price_markup)):
        if value is None:
            continue
        parsed = _to_decimal(value)
        if parsed is None or parsed <= 0:
            raise ValueError(f"{key} must be a positive number")
        set_setting(key, parsed)
    return get_pricing_config()


def is_shipping_fallback_enabled() -> bool:
    return (get_setting(SHIPPING_FALLBACK_KEY, 'false') or '').lower() == 'true'


def set_shipping_fallback_enabled(enabled: bool) -> bool:
    set_setting(SHIPPING_FALLBACK_KEY, 'true' if enabled else 'false')
    return enabled


def get_shipping_fallback_price() -> Decimal:
    return _env_decimal('SHIPPING_FALLBACK_PRICE_ZAR', Decimal('150.00'))


def get_runtime_config() -> RuntimeConfigDTO:
    pricing = get_pricing_config()
    return RuntimeConfigDTO(
        usd_to_zar=pricing.usd_to_zar,
        price_markup=pricing.price_markup,
        shipping_fallback_enabled=is_shipping_fallback_enabled(),
        shipping_fallback_price_zar=get_shipping_fallback_price(),
        inventory_sync_enabled=settings.CJ_INVENTORY_SYNC_ENABLED,
        price_sync_enabled=settings.CJ_PRICE_SYNC_ENABLED,
        auto_submit_orders=settings.CJ_AUTO_SUBMIT_ORDERS,
    )
