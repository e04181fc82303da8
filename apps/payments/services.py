"""
Payment gateway (PayFast) notifications.

PayFast posts an ITN (instant transaction notification) to /notify once a
payment settles. The notification is trusted only when its signature, the
merchant id and the paid amount all check out.
"""
import hashlib
import logging
from decimal import Decimal, InvalidOperation
from typing import Mapping, Optional
from urllib.parse import quote_plus

from django.conf import settings

from apps.core.task_service import TaskService
from apps.orders.models import OrderStatus
from apps.orders import services as order_services
from apps.supplier.exceptions import SupplierError

from .dtos import NotificationResultDTO

logger = logging.getLogger(__name__)

AMOUNT_TOLERANCE = Decimal('0.01')
STATUS_MAP = {
    'COMPLETE': OrderStatus.PAID,
    'CANCELLED': OrderStatus.CANCELLED,
    'FAILED': OrderStatus.FAILED,
}
SETTLED_STATUSES = (OrderStatus.PAID, OrderStatus.COMPLETED)


def generate_signature(fields: Mapping[str, str], passphrase: Optional[str] = None) -> str:
    """
    MD5 signature over "key=value" pairs joined by "&", in the order the
    fields were received. Values are stripped and URL-encoded with "+" for
    spaces; blank values and the signature field are skipped. A passphrase
    is appended as the last pair.
    """
    pairs = [
        f"{key}={quote_plus(str(value).strip())}"
        for key, value in fields.items()
        if key != 'signature' and value is not None and str(value).strip() != ''
    ]
    if passphrase:
        pairs.append(f"passphrase={quote_plus(passphrase.strip())}")
    return hashlib.md5('&'.join(pairs).encode('utf-8')).hexdigest()


def _verify(data: Mapping[str, str]):
    signature = (data.get('signature') or '').lower()
    expected = generate_signature(data, settings.PAYFAST_PASSPHRASE)
    if not signature or signature != expected:
        raise ValueError("Invalid signature")

    merchant_id = settings.PAYFAST_MERCHANT_ID
    if merchant_id and data.get('merchant_id') != merchant_id:
        raise ValueError("Merchant id mismatch")


def process_notification(data: Mapping[str, str]) -> NotificationResultDTO:
    """
    Apply a payment notification to its order.

    COMPLETE marks the order paid, emails the confirmation, clears the
    customer's cart and (with CJ_AUTO_SUBMIT_ORDERS) queues the supplier
    submission. A repeated COMPLETE for a settled order changes nothing.

    Raises:
        ValueError: bad signature or merchant, unknown order, amount mismatch
    """
    from apps.notifications.services import send_order_confirmation_email

    _verify(data)

    order_number = data.get('m_payment_id') or ''
    order = order_services.get_order_by_number(order_number)
    if order is None:
        raise ValueError(f"Unknown order: {order_number}")

    try:
        amount = Decimal(data.get('amount_gross') or '')
    except InvalidOperation:
        raise ValueError("Invalid amount_gross")
    if not amount.is_finite():
        raise ValueError("Invalid amount_gross")
    if abs(amount - order.total) > AMOUNT_TOLERANCE:
        raise ValueError(f"Amount mismatch for {order_number}: paid {amount}, expected {order.total}")

    payment_status = (data.get('payment_status') or '').upper()
    payment_id = data.get('pf_payment_id') or ''
    new_status = STATUS_MAP.get(payment_status)

    if new_status is None:
        logger.info("Ignoring payment status %s for %s", payment_status, order_number)
        return NotificationResultDTO(order_number, payment_status, order.status, payment_id)

    if new_status == OrderStatus.PAID and order.status in SETTLED_STATUSES:
        logger.info("Duplicate COMPLETE notification for %s", order_number)
        return NotificationResultDTO(order_number, payment_status, order.status, payment_id)

    order = order_services.update_order_status(order_number, new_status, payment_id)
    logger.info("Payment %s for %s (pf_payment_id=%s)", payment_status, order_number, payment_id)

    task_id = None
    if new_status == OrderStatus.PAID:
        send_order_confirmation_email(
            to=order.customer_email,
            order_number=order.order_number,
            total_amount=order.total,
            items=order.items,
            customer_name=order.customer_name,
        )
        if order.user_id:
            order_services.clear_cart(order.user_id)
        if settings.CJ_AUTO_SUBMIT_ORDERS:
            try:
                task_id = TaskService.submit_supplier_order(order.id)
            except (ValueError, SupplierError) as e:
                logger.error("Automatic supplier submission of %s failed: %s", order_number, e)

    return NotificationResultDTO(order_number, payment_status, order.status, payment_id, task_id)
