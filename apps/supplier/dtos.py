"""DTOs for Supplier app - normalized supplier API payloads."""
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import List, Optional


@dataclass(frozen=True)
class SupplierVariantDTO:
    vid: str
    name: str
    sku: str
    price: Decimal


@dataclass(frozen=True)
class SupplierProductSummaryDTO:
    """One row of a product search."""
    pid: str
    name: str
    sku: str
    image: str
    price: Decimal
    category_name: str


@dataclass(frozen=True)
class SupplierProductPageDTO:
    page: int
    page_size: int
    total: int
    products: List[SupplierProductSummaryDTO]


@dataclass(frozen=True)
class SupplierProductDTO:
    """Full product details. `price` is the supplier sell price in USD."""
    pid: str
    name: str
    sku: str
    price: Decimal
    image: str
    category_name: str
    description: str
    variants: List[SupplierVariantDTO] = field(default_factory=list)


@dataclass(frozen=True)
class WarehouseStockDTO:
    warehouse_id: str
    warehouse_name: str
    country_code: str
    total_inventory: int
    cj_inventory: int
    factory_inventory: int


@dataclass(frozen=True)
class FreightOptionDTO:
    logistic_name: str
    total_postage: Decimal  # USD
    aging: str  # delivery estimate in days, e.g. "7-12"


@dataclass(frozen=True)
class SupplierOrderDTO:
    order_id: str
    order_number: str
    status: str


@dataclass(frozen=True)
class SupplierOrderDetailDTO:
    order_id: str
    order_number: str
    status: str
    tracking_number: str
    logistic_name: str


@dataclass(frozen=True)
class SupplierStatusDTO:
    base_url: str
    authenticated: bool
    uses_static_token: bool
    token_expires_at: Optional[str]
    request_count: int
    rate_limit_hits: int
    last_request_at: Optional[datetime]


@dataclass(frozen=True)
class WebhookResultDTO:
    received: bool
    event_type: str
    orders_updated: int
