"""Celery tasks for Orders app."""
import logging

from celery import shared_task

from apps.supplier.exceptions import SupplierRateLimitError, SupplierUnavailable

from . import services

logger = logging.getLogger(__name__)


@shared_task(bind=True, max_retries=3, default_retry_delay=60)
def submit_order_to_supplier_task(self, order_id):
    """
    Relay a paid order to the supplier.

    Throttling and outages are retried; rejected orders keep the
    supplier error on the order for an admin to resolve.
    """
    try:
        order = services.submit_order_to_supplier(order_id)
    except (SupplierRateLimitError, SupplierUnavailable) as exc:
        logger.warning("Supplier busy while submitting order %s: %s", order_id, exc)
        raise self.retry(exc=exc)
    return f"Order {order.order_number} submitted: {order.supplier_order_id}"
