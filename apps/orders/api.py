"""
API Routers for Orders app.

- cart_router: the signed-in customer's saved cart
- router: checkout and order history
- admin_router: order management and dashboard analytics
"""
from dataclasses import asdict
from typing import List, Optional
from ninja import Router
from ninja.errors import HttpError
from django.http import HttpRequest

from apps.identity.permissions import require_admin, require_user

from . import services
from .schemas import (
    AnalyticsOut, CartIn, CartOut, CheckoutIn, OrderOut, OrderPageOut, OrderStatusIn,
    SoldOutOut,
)

cart_router = Router(tags=["Cart"])
router = Router(tags=["Orders"])
admin_router = Router(tags=["Admin Orders"])


# =============================================================================
# Cart
# =============================================================================

@cart_router.get("/", response=CartOut, auth=None)
def get_cart(request: HttpRequest):
    user = require_user(request)
    return CartOut(**services.get_cart(user.id).__dict__)


@cart_router.post("/", response={200: CartOut, 400: SoldOutOut}, auth=None)
def save_cart(request: HttpRequest, payload: CartIn):
    """Replace the cart. Sold-out products are rejected with their names."""
    user = require_user(request)
    try:
        cart = services.save_cart(user.id, payload.items)
    except services.SoldOutError as e:
        return 400, SoldOutOut(detail=str(e), sold_out_items=e.product_names)
    except ValueError as e:
        raise HttpError(400, str(e))
    return CartOut(**cart.__dict__)


@cart_router.delete("/", auth=None)
def clear_cart(request: HttpRequest):
    user = require_user(request)
    services.clear_cart(user.id)
    return {"success": True}


# =============================================================================
# Orders
# =============================================================================

@router.post("/", response={201: OrderOut, 400: SoldOutOut}, auth=None)
def checkout(request: HttpRequest, payload: CheckoutIn):
    """
    Create a pending order. Its order_number is the payment reference
    (m_payment_id) for the gateway.
    """
    user = require_user(request)
    data = payload.dict()
    items = data.pop('items')
    email = data.pop('email') or user.email
    try:
        order = services.create_order(user_id=user.id, items=items, customer_email=email, **data)
    except services.SoldOutError as e:
        return 400, SoldOutOut(detail=str(e), sold_out_items=e.product_names)
    except ValueError as e:
        raise HttpError(400, str(e))
    return 201, OrderOut(**order.__dict__)


@router.get("/history", response=List[OrderOut], auth=None)
def order_history(request: HttpRequest):
    user = require_user(request)
    return [OrderOut(**o.__dict__) for o in services.list_user_orders(user.id)]


@router.get("/{order_id}", response=OrderOut, auth=None)
def get_order(request: HttpRequest, order_id: int):
    user = require_user(request)
    order = services.get_user_order(user.id, order_id)
    if not order:
        raise HttpError(404, "Order not found")
    return OrderOut(**order.__dict__)


# =============================================================================
# Admin
# =============================================================================

@admin_router.get("/", response=OrderPageOut, auth=None)
def admin_list_orders(request: HttpRequest, status: Optional[str] = None, limit: int = 50, offset: int = 0):
    require_admin(request)
    page = services.list_orders(status=status, limit=max(1, min(limit, 200)), offset=max(0, offset))
    return OrderPageOut(
        orders=[OrderOut(**o.__dict__) for o in page.orders],
        total=page.total,
        limit=page.limit,
        offset=page.offset,
    )


@admin_router.get("/analytics", response=AnalyticsOut, auth=None)
def admin_analytics(request: HttpRequest):
    require_admin(request)
    return AnalyticsOut(**asdict(services.get_order_analytics()))


@admin_router.put("/{order_id}", response=OrderOut, auth=None)
def admin_update_order(request: HttpRequest, order_id: int, payload: OrderStatusIn):
    require_admin(request)
    try:
        order = services.admin_update_order_status(order_id, payload.status)
    except ValueError as e:
        raise HttpError(400, str(e))
    if not order:
        raise HttpError(404, "Order not found")
    return OrderOut(**order.__dict__)


@admin_router.post("/{order_id}/submit", response=OrderOut, auth=None)
def admin_submit_order(request: HttpRequest, order_id: int):
    """Relay a paid order to the supplier now. Supplier failures surface as 502."""
    require_admin(request)
    try:
        order = services.submit_order_to_supplier(order_id)
    except ValueError as e:
        raise HttpError(400, str(e))
    return OrderOut(**order.__dict__)
