"""
Services for Orders app.

Carts, checkout, order lookups for customers and admins, and the relay of
paid orders to the supplier.
"""
import logging
import time
from collections import OrderedDict
from datetime import timedelta
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, List, Optional

from django.db.models import Count, Q, Sum
from django.db.models.functions import TruncDate
from django.utils import timezone

from apps.catalog.services import (
    get_curated_products_by_ids, get_supplier_stock, parse_curated_item_id,
)
from apps.supplier.client import get_client
from apps.supplier.exceptions import SupplierError

from .dtos import (
    AnalyticsDTO, CartDTO, DailyOrdersDTO, OrderDTO, OrderPageDTO, OrderSummaryDTO,
    TopProductDTO,
)
from .models import Cart, Order, OrderStatus

logger = logging.getLogger(__name__)

CENT = Decimal('0.01')
ZERO = Decimal('0.00')
ANALYTICS_DAYS = 30
TOP_PRODUCTS_LIMIT = 10
SUPPLIER_FROM_COUNTRY = 'CN'
REVIEWABLE_STATUSES = (OrderStatus.PAID, OrderStatus.COMPLETED)


class SoldOutError(ValueError):
    """Raised when items reference products with no supplier warehouse stock."""

    def __init__(self, product_names: List[str]):
        self.product_names = product_names
        super().__init__(
            "The following items are currently sold out and cannot be purchased: "
            + ", ".join(product_names)
        )


def _to_dto(order: Order) -> OrderDTO:
    return OrderDTO(
        id=order.id,
        user_id=order.user_id,
        order_number=order.order_number,
        items=list(order.items or []),
        subtotal=order.subtotal,
        shipping=order.shipping,
        insurance=order.insurance,
        discount=order.discount,
        total=order.total,
        status=order.status,
        customer_email=order.customer_email,
        customer_name=order.customer_name,
        shipping_phone=order.shipping_phone,
        shipping_address=order.shipping_address,
        shipping_city=order.shipping_city,
        shipping_province=order.shipping_province,
        shipping_postal_code=order.shipping_postal_code,
        shipping_country=order.shipping_country,
        shipping_method=order.shipping_method,
        payfast_payment_id=order.payfast_payment_id,
        supplier_order_id=order.supplier_order_id,
        supplier_status=order.supplier_status,
        supplier_error=order.supplier_error,
        supplier_submitted_at=order.supplier_submitted_at,
        tracking_number=order.tracking_number,
        tracking_url=order.tracking_url,
        carrier=order.carrier,
        created_at=order.created_at,
        updated_at=order.updated_at,
    )


def _amount(value, field_name: str) -> Decimal:
    """Non-negative money amount rounded to the cent."""
    try:
        amount = Decimal(str(value if value is not None else 0))
    except (InvalidOperation, TypeError, ValueError):
        raise ValueError(f"Invalid {field_name}")
    if not amount.is_finite() or amount < 0:
        raise ValueError(f"Invalid {field_name}: must be zero or more")
    return amount.quantize(CENT)


def _check_stock(items: List[Dict[str, Any]]):
    """Raise SoldOutError for items whose product has no supplier stock."""
    product_ids = {
        pid for pid in (parse_curated_item_id(item.get('id')) for item in items)
        if pid is not None
    }
    if not product_ids:
        return
    stock = get_supplier_stock(product_ids)
    sold_out = [s.product_name for s in stock.values() if s.cj_stock == 0]
    if sold_out:
        raise SoldOutError(sold_out)


# =============================================================================
# Cart
# =============================================================================

def get_cart(user_id: str) -> CartDTO:
    cart = Cart.objects.filter(user_id=user_id).first()
    if cart is None:
        return CartDTO(items=[])
    return CartDTO(items=list(cart.items or []), updated_at=cart.updated_at)


def save_cart(user_id: str, items: List[Dict[str, Any]]) -> CartDTO:
    """
    Replace the saved cart.

    Raises:
        ValueError: items is not a list
        SoldOutError: an item's product has no supplier warehouse stock
    """
    if not isinstance(items, list):
        raise ValueError("Items must be an array")
    _check_stock([item for item in items if isinstance(item, dict)])

    cart, _ = Cart.objects.update_or_create(user_id=user_id, defaults={'items': items})
    return CartDTO(items=list(cart.items), updated_at=cart.updated_at)


def clear_cart(user_id: str) -> bool:
    deleted, _ = Cart.objects.filter(user_id=user_id).delete()
    return deleted > 0


# =============================================================================
# Checkout
# =============================================================================

def _next_order_number() -> str:
    stamp = int(time.time() * 1000)
    while Order.objects.filter(order_number=f"ORDER-{stamp}").exists():
        stamp += 1
    return f"ORDER-{stamp}"


def create_order(
    user_id: str,
    items: List[Dict[str, Any]],
    customer_email: str,
    shipping=ZERO,
    insurance=ZERO,
    discount=ZERO,
    customer_name: str = '',
    shipping_phone: str = '',
    shipping_address: str = '',
    shipping_city: str = '',
    shipping_province: str = '',
    shipping_postal_code: str = '',
    shipping_country: str = 'ZA',
    shipping_method: str = '',
) -> OrderDTO:
    """
    Create a pending order from cart items.

    Item prices are read from the catalog, never from the request. The
    order number doubles as the payment gateway's m_payment_id.

    Raises:
        ValueError: empty cart, unknown or inactive product, bad quantity or amount
        SoldOutError: a product has no supplier warehouse stock
    """
    if not items:
        raise ValueError("Order must contain at least one item")
    if not customer_email:
        raise ValueError("Customer email is required")

    requested = []
    for item in items:
        product_id = parse_curated_item_id(item.get('id'))
        if product_id is None:
            raise ValueError(f"Unknown item: {item.get('id')}")
        try:
            quantity = int(item.get('quantity', 1))
        except (TypeError, ValueError):
            raise ValueError("Quantity must be a whole number")
        if quantity < 1:
            raise ValueError("Quantity must be at least 1")
        requested.append((product_id, quantity))

    products = get_curated_products_by_ids(pid for pid, _ in requested)
    for product_id, _ in requested:
        product = products.get(product_id)
        if product is None or not product.is_active:
            raise ValueError(f"Product {product_id} is not available")
    _check_stock([{'id': pid} for pid, _ in requested])

    lines = []
    subtotal = ZERO
    for product_id, quantity in requested:
        product = products[product_id]
        price = product.display_price.quantize(CENT)
        subtotal += price * quantity
        lines.append({
            'id': f"curated-{product_id}",
            'product_id': product_id,
            'name': product.product_name,
            'price': str(price),
            'quantity': quantity,
            'cj_pid': product.cj_pid,
            'cj_vid': product.cj_vid,
            'image': product.product_image,
        })

    shipping = _amount(shipping, 'shipping')
    insurance = _amount(insurance, 'insurance')
    discount = _amount(discount, 'discount')
    total = max(subtotal + shipping + insurance - discount, ZERO)

    order = Order.objects.create(
        user_id=user_id or '',
        order_number=_next_order_number(),
        items=lines,
        subtotal=subtotal,
        shipping=shipping,
        insurance=insurance,
        discount=discount,
        total=total,
        status=OrderStatus.PENDING,
        customer_email=customer_email,
        customer_name=customer_name or '',
        shipping_phone=shipping_phone or '',
        shipping_address=shipping_address or '',
        shipping_city=shipping_city or '',
        shipping_province=shipping_province or '',
        shipping_postal_code=shipping_postal_code or '',
        shipping_country=(shipping_country or 'ZA').upper(),
        shipping_method=shipping_method or '',
    )
    logger.info("Order %s created for %s: total R%s", order.order_number, user_id or 'guest', total)
    return _to_dto(order)


def update_order_status(
    order_number: str,
    status: str,
    payment_id: Optional[str] = None,
) -> Optional[OrderDTO]:
    """
    Set the status of an order by its number. Returns None when no such order exists.

    Raises:
        ValueError: unknown status
    """
    if status not in OrderStatus.values:
        raise ValueError("Invalid status")
    order = Order.objects.filter(order_number=order_number).first()
    if order is None:
        return None

    order.status = status
    update_fields = ['status', 'updated_at']
    if payment_id:
        order.payfast_payment_id = payment_id
        update_fields.append('payfast_payment_id')
    order.save(update_fields=update_fields)
    logger.info("Order %s is now %s", order_number, status)
    return _to_dto(order)


def get_order_by_number(order_number: str) -> Optional[OrderDTO]:
    order = Order.objects.filter(order_number=order_number).first()
    return _to_dto(order) if order else None


# =============================================================================
# Customer views
# =============================================================================

def list_user_orders(user_id: str) -> List[OrderDTO]:
    return [_to_dto(o) for o in Order.objects.filter(user_id=user_id).order_by('-created_at')]


def get_user_order(user_id: str, order_id: int) -> Optional[OrderDTO]:
    order = Order.objects.filter(id=order_id, user_id=user_id).first()
    return _to_dto(order) if order else None


def find_reviewable_order(user_id: str, item_id: str, order_id: Optional[int] = None) -> Optional[OrderDTO]:
    """Latest paid or completed order of `user_id` containing the item id."""
    queryset = Order.objects.filter(user_id=user_id, status__in=REVIEWABLE_STATUSES)
    if order_id is not None:
        queryset = queryset.filter(id=order_id)
    for order in queryset.order_by('-created_at'):
        if any(str(item.get('id')) == str(item_id) for item in order.items or []):
            return _to_dto(order)
    return None


# =============================================================================
# Admin
# =============================================================================

def list_orders(status: Optional[str] = None, limit: int = 50, offset: int = 0) -> OrderPageDTO:
    queryset = Order.objects.all()
    if status:
        queryset = queryset.filter(status=status)
    total = queryset.count()
    page = queryset.order_by('-created_at')[offset:offset + limit]
    return OrderPageDTO(orders=[_to_dto(o) for o in page], total=total, limit=limit, offset=offset)


def admin_update_order_status(order_id: int, status: str) -> Optional[OrderDTO]:
    """
    Raises:
        ValueError: unknown status
    """
    if status not in OrderStatus.values:
        raise ValueError("Invalid status")
    order = Order.objects.filter(id=order_id).first()
    if order is None:
        return None
    order.status = status
    order.save(update_fields=['status', 'updated_at'])
    logger.info("Admin set order %s to %s", order.order_number, status)
    return _to_dto(order)


def get_order_analytics(now=None) -> AnalyticsDTO:
    """
    Dashboard figures: order totals, a daily series for the last 30 days
    (newest first) and the ten most ordered products of completed orders.
    """
    now = now or timezone.now()

    totals = Order.objects.aggregate(
        total_orders=Count('id'),
        total_revenue=Sum('total'),
        completed_orders=Count('id', filter=Q(status=OrderStatus.COMPLETED)),
        pending_orders=Count('id', filter=Q(status=OrderStatus.PENDING)),
    )
    summary = OrderSummaryDTO(
        total_orders=totals['total_orders'],
        total_revenue=totals['total_revenue'] or ZERO,
        completed_orders=totals['completed_orders'],
        pending_orders=totals['pending_orders'],
    )

    daily_rows = (
        Order.objects.filter(created_at__gte=now - timedelta(days=ANALYTICS_DAYS))
        .annotate(day=TruncDate('created_at'))
        .values('day')
        .annotate(order_count=Count('id'), revenue=Sum('total'))
        .order_by('-day')
    )
    daily = [
        DailyOrdersDTO(date=row['day'], order_count=row['order_count'], revenue=row['revenue'] or ZERO)
        for row in daily_rows
    ]

    products: Dict[tuple, Dict[str, Any]] = OrderedDict()
    for items in Order.objects.filter(status=OrderStatus.COMPLETED).values_list('items', flat=True):
        for item in items or []:
            key = (str(item.get('id') or ''), item.get('name') or '')
            entry = products.setdefault(key, {'count': 0, 'revenue': ZERO})
            entry['count'] += 1
            entry['revenue'] += Decimal(str(item.get('price') or 0)) * int(item.get('quantity') or 1)

    ranked = sorted(products.items(), key=lambda kv: kv[1]['count'], reverse=True)[:TOP_PRODUCTS_LIMIT]
    top = [
        TopProductDTO(
            product_id=product_id,
            product_name=name,
            times_ordered=entry['count'],
            total_revenue=entry['revenue'].quantize(CENT),
        )
        for (product_id, name), entry in ranked
    ]
    return AnalyticsDTO(summary=summary, daily_orders=daily, top_products=top)


# =============================================================================
# Supplier relay
# =============================================================================

def _supplier_payload(order: Order) -> Dict[str, Any]:
    products = []
    for item in order.items or []:
        vid = item.get('cj_vid') or ''
        if not vid:
            raise ValueError(f"Item '{item.get('name') or item.get('id')}' has no supplier variant id")
        products.append({'vid': vid, 'quantity': int(item.get('quantity') or 1)})

    return {
        'orderNumber': order.order_number,
        'shippingCountryCode': order.shipping_country,
        'shippingProvince': order.shipping_province,
        'shippingCity': order.shipping_city,
        'shippingAddress': order.shipping_address,
        'shippingZip': order.shipping_postal_code,
        'shippingCustomerName': order.customer_name,
        'shippingPhone': order.shipping_phone,
        'email': order.customer_email,
        'logisticName': order.shipping_method,
        'fromCountryCode': SUPPLIER_FROM_COUNTRY,
        'products': products,
    }


def submit_order_to_supplier(order_id: int) -> OrderDTO:
    """
    Create the supplier-side order for a paid order.

    The supplier order id and status are stored on success; the failure
    reason is stored in supplier_error otherwise.

    Raises:
        ValueError: unknown order, not paid, already submitted, item without a vid
        SupplierError: the supplier rejected the order
    """
    order = Order.objects.filter(id=order_id).first()
    if order is None:
        raise ValueError("Order not found")
    if order.status != OrderStatus.PAID:
        raise ValueError(f"Order {order.order_number} is {order.status}; only paid orders are submitted")
    if order.supplier_order_id:
        raise ValueError(f"Order {order.order_number} was already submitted")

    try:
        payload = _supplier_payload(order)
    except ValueError as e:
        order.supplier_error = str(e)
        order.save(update_fields=['supplier_error', 'updated_at'])
        raise

    try:
        supplier_order = get_client().create_order(payload)
    except SupplierError as e:
        logger.error("Supplier rejected order %s: %s", order.order_number, e)
        order.supplier_error = str(e)
        order.save(update_fields=['supplier_error', 'updated_at'])
        raise

    order.supplier_order_id = supplier_order.order_id
    order.supplier_status = supplier_order.status
    order.supplier_error = ''
    order.supplier_submitted_at = timezone.now()
    order.save(update_fields=[
        'supplier_order_id', 'supplier_status', 'supplier_error', 'supplier_submitted_at', 'updated_at',
    ])
    logger.info("Order %s submitted to supplier as %s", order.order_number, supplier_order.order_id)
    return _to_dto(order)


def apply_tracking_update(
    supplier_order_id: Optional[str] = None,
    order_number: Optional[str] = None,
    tracking_number: str = '',
    tracking_url: str = '',
    carrier: str = '',
    supplier_status: str = '',
) -> Optional[OrderDTO]:
    """
    Record supplier fulfilment progress on the matching order.

    A new tracking number marks a paid order completed and emails the
    customer. Returns None when no order matches.
    """
    from apps.notifications.services import send_tracking_email

    lookup = Q()
    if supplier_order_id:
        lookup |= Q(supplier_order_id=supplier_order_id)
    if order_number:
        lookup |= Q(order_number=order_number)
    if not lookup:
        return None

    order = Order.objects.filter(lookup).first()
    if order is None:
        logger.info("No order matches supplier update (%s / %s)", supplier_order_id, order_number)
        return None

    new_tracking = bool(tracking_number) and tracking_number != order.tracking_number
    if tracking_number:
        order.tracking_number = tracking_number
    if tracking_url:
        order.tracking_url = tracking_url
    if carrier:
        order.carrier = carrier
    if supplier_status:
        order.supplier_status = supplier_status
    if new_tracking and order.status == OrderStatus.PAID:
        order.status = OrderStatus.COMPLETED
    order.save()

    if new_tracking:
        logger.info("Order %s shipped with tracking %s", order.order_number, tracking_number)
        send_tracking_email(
            to=order.customer_email,
            order_number=order.order_number,
            tracking_number=order.tracking_number,
            tracking_url=order.tracking_url or None,
        )
    return _to_dto(order)
