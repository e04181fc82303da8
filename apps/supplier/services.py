"""
Services for Supplier app.

Webhook handling: supplier order/logistics events are matched to local
orders and applied as tracking updates.
"""
import logging
from typing import Any, Dict

from .dtos import WebhookResultDTO

logger = logging.getLogger(__name__)

TRACKING_EVENT_TYPES = {'', 'ORDER', 'LOGISTIC', 'LOGISTICS', 'TRACKING'}


def handle_webhook(payload: Dict[str, Any]) -> WebhookResultDTO:
    """
    Apply tracking information carried by a supplier webhook.

    Accepts both a single `params` object and a list of them. Events that
    name neither a supplier order id nor an order number are ignored.
    """
    from apps.orders.services import apply_tracking_update

    event_type = str(payload.get('type') or payload.get('messageType') or '').upper()
    params = payload.get('params') or payload.get('data') or {}
    entries = params if isinstance(params, list) else [params]

    if event_type not in TRACKING_EVENT_TYPES:
        logger.info("Ignoring supplier webhook of type %s", event_type)
        return WebhookResultDTO(received=True, event_type=event_type, orders_updated=0)

    updated = 0
    for entry in entries:
        if not isinstance(entry, dict):
            continue
        supplier_order_id = str(entry.get('orderId') or '')
        order_number = str(entry.get('orderNumber') or entry.get('orderNum') or '')
        tracking_number = entry.get('trackingNumber') or entry.get('trackNumber') or ''
        status = entry.get('orderStatus') or entry.get('trackingStatus') or entry.get('logisticsStatus') or ''

        if not (supplier_order_id or order_number) or not (tracking_number or status):
            continue

        order = apply_tracking_update(
            supplier_order_id=supplier_order_id or None,
            order_number=order_number or None,
            tracking_number=tracking_number,
            tracking_url=entry.get('trackingUrl') or entry.get('logisticsUrl') or '',
            carrier=entry.get('logisticName') or '',
            supplier_status=status,
        )
        if order is not None:
            updated += 1

    logger.info("Supplier webhook %s applied to %d order(s)", event_type or 'UNKNOWN', updated)
    return WebhookResultDTO(received=True, event_type=event_type or 'UNKNOWN', orders_updated=updated)
