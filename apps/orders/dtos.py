"""DTOs for Orders app."""
from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from typing import Dict, List, Optional


@dataclass(frozen=True)
class CartDTO:
    items: List[Dict]
    updated_at: Optional[datetime] = None


@dataclass(frozen=True)
class OrderDTO:
    id: int
    user_id: str
    order_number: str
    items: List[Dict]
    subtotal: Decimal
    shipping: Decimal
    insurance: Decimal
    discount: Decimal
    total: Decimal
    status: str
    customer_email: str
    customer_name: str
    shipping_phone: str
    shipping_address: str
    shipping_city: str
    shipping_province: str
    shipping_postal_code: str
    shipping_country: str
    shipping_method: str
    payfast_payment_id: str
    supplier_order_id: str
    supplier_status: str
    supplier_error: str
    supplier_submitted_at: Optional[datetime]
    tracking_number: str
    tracking_url: str
    carrier: str
    created_at: datetime
    updated_at: datetime


@dataclass(frozen=True)
class OrderPageDTO:
    orders: List[OrderDTO]
    total: int
    limit: int
    offset: int


@dataclass(frozen=True)
class OrderSummaryDTO:
    total_orders: int
    total_revenue: Decimal
    completed_orders: int
    pending_orders: int


@dataclass(frozen=True)
class DailyOrdersDTO:
    date: date
    order_count: int
    revenue: Decimal


@dataclass(frozen=True)
class TopProductDTO:
    product_id: str
    product_name: str
    times_ordered: int
    total_revenue: Decimal


@dataclass(frozen=True)
class AnalyticsDTO:
    summary: OrderSummaryDTO
    daily_orders: List[DailyOrdersDTO] = field(default_factory=list)
    top_products: List[TopProductDTO] = field(default_factory=list)
