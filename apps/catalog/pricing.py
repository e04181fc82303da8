"""
Retail pricing, freight conversion and shipping insurance.

All amounts are Decimals. Supplier prices are USD; everything shown to
customers is ZAR.
"""
from decimal import Decimal, ROUND_CEILING, ROUND_HALF_UP
from typing import Optional

CENT = Decimal('0.01')
RAND = Decimal('1')

INSURANCE_RATE = Decimal('0.03')
INSURANCE_MIN = Decimal('25')
INSURANCE_MAX = Decimal('500')

SIGNIFICANT_CHANGE_PERCENT = Decimal('0.5')


def _dec(value) -> Decimal:
    return value if isinstance(value, Decimal) else Decimal(str(value))


def cost_to_zar(cost_usd, rate) -> Decimal:
    """Supplier cost converted to rand, rounded to the cent."""
    return (_dec(cost_usd) * _dec(rate)).quantize(CENT, rounding=ROUND_HALF_UP)


def retail_price(cost_usd, rate, markup) -> Decimal:
    """Retail price in rand: converted cost times markup, rounded to the cent."""
    return (cost_to_zar(cost_usd, rate) * _dec(markup)).quantize(CENT, rounding=ROUND_HALF_UP)


def percent_change(old, new, places: Optional[Decimal] = Decimal('0.1')) -> Decimal:
    """
    Absolute change from `old` to `new` in percent, one decimal place.
    Zero when there is no previous value. `places=None` skips rounding.
    """
    old, new = _dec(old), _dec(new)
    if old <= 0:
        return Decimal('0.0')
    change = abs(new - old) / old * 100
    if places is None:
        return change
    return change.quantize(places, rounding=ROUND_HALF_UP)


def shipping_to_zar(postage_usd, rate) -> Decimal:
    """Freight cost in rand, rounded up to the next cent."""
    return (_dec(postage_usd) * _dec(rate)).quantize(CENT, rounding=ROUND_CEILING)


def insurance_quote(order_value) -> Optional[Decimal]:
    """
    Shipping insurance: 3% of the order value rounded up to a whole rand,
    kept within R25 and R500. None when no order value is known.
    """
    if order_value is None:
        return None
    value = _dec(order_value)
    if value <= 0:
        return None
    premium = (value * INSURANCE_RATE).quantize(RAND, rounding=ROUND_CEILING)
    return min(max(premium, INSURANCE_MIN), INSURANCE_MAX).quantize(CENT)
