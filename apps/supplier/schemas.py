"""API Schemas for Supplier app."""
from datetime import datetime
from decimal import Decimal
from typing import List, Optional
from ninja import Schema


class SupplierStatusOut(Schema):
    base_url: str
    authenticated: bool
    uses_static_token: bool
    token_expires_at: Optional[str] = None
    request_count: int
    rate_limit_hits: int
    last_request_at: Optional[datetime] = None


class SupplierHealthOut(Schema):
    ok: bool
    status: SupplierStatusOut


class SupplierProductSummaryOut(Schema):
    pid: str
    name: str
    sku: str
    image: str
    price: Decimal
    category_name: str


class SupplierProductPageOut(Schema):
    page: int
    page_size: int
    total: int
    products: List[SupplierProductSummaryOut]


class SupplierVariantOut(Schema):
    vid: str
    name: str
    sku: str
    price: Decimal


class SupplierProductOut(Schema):
    pid: str
    name: str
    sku: str
    price: Decimal
    image: str
    category_name: str
    description: str
    variants: List[SupplierVariantOut]


class SupplierOrderOut(Schema):
    order_id: str
    order_number: str
    status: str


class WebhookOut(Schema):
    received: bool
    event_type: str
    orders_updated: int
