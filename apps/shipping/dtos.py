"""DTOs for Shipping app."""
from dataclasses import dataclass, field
from decimal import Decimal
from typing import List, Optional


@dataclass(frozen=True)
class ShippingOptionDTO:
    logistic_name: str
    price_usd: Optional[Decimal]
    price_zar: Decimal
    delivery_days: str
    fallback: bool = False


@dataclass(frozen=True)
class InsuranceDTO:
    available: bool
    price_zar: Decimal
    coverage: Decimal
    rate_percent: Decimal


@dataclass(frozen=True)
class ShippingQuoteDTO:
    country: str
    from_country: str
    insurance: InsuranceDTO
    options: List[ShippingOptionDTO] = field(default_factory=list)
    fallback: bool = False


@dataclass(frozen=True)
class CountryDTO:
    code: str
    name: str
