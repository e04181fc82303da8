"""API Schemas for Orders app."""
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Dict, List, Optional, Union
from ninja import Schema


class CartIn(Schema):
    items: List[Dict[str, Any]]


class CartOut(Schema):
    items: List[Dict[str, Any]]
    updated_at: Optional[datetime] = None


class SoldOutOut(Schema):
    detail: str
    sold_out_items: List[str]


class CheckoutItemIn(Schema):
    id: Union[str, int]
    quantity: int = 1


class CheckoutIn(Schema):
    items: List[CheckoutItemIn]
    email: Optional[str] = None
    shipping: Decimal = Decimal('0.00')
    insurance: Decimal = Decimal('0.00')
    discount: Decimal = Decimal('0.00')
    customer_name: str = ""
    shipping_phone: str = ""
    shipping_address: str = ""
    shipping_city: str = ""
    shipping_province: str = ""
    shipping_postal_code: str = ""
    shipping_country: str = "ZA"
    shipping_method: str = ""


class OrderOut(Schema):
    id: int
    user_id: str
    order_number: str
    items: List[Dict[str, Any]]
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
    supplier_submitted_at: Optional[datetime] = None
    tracking_number: str
    tracking_url: str
    carrier: str
    created_at: datetime
    updated_at: datetime


class OrderPageOut(Schema):
    orders: List[OrderOut]
    total: int
    limit: int
    offset: int


class OrderStatusIn(Schema):
    status: str


class OrderSummaryOut(Schema):
    total_orders: int
    total_revenue: Decimal
    completed_orders: int
    pending_orders: int


class DailyOrdersOut(Schema):
    date: date
    order_count: int
    revenue: Decimal


class TopProductOut(Schema):
    product_id: str
    product_name: str
    times_ordered: int
    total_revenue: Decimal


class AnalyticsOut(Schema):
    summary: OrderSummaryOut
    daily_orders: List[DailyOrdersOut]
    top_products: List[TopProductOut]
