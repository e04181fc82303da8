"""
Customer email.

Messages are rendered from templates under notifications/ (an HTML and a
plain-text part each) and sent with Django's send_mail, so the SMTP
settings in config/settings.py apply. Sending never raises: failures are
logged and returned as EmailResultDTO(success=False).
"""
import logging
from decimal import Decimal
from typing import Iterable, Mapping, Optional
from urllib.parse import quote

from django.conf import settings
from django.core.mail import send_mail
from django.template.loader import render_to_string

from .dtos import EmailResultDTO

logger = logging.getLogger(__name__)


def _send(to: str, subject: str, template: str, context: dict) -> EmailResultDTO:
    if not to:
        logger.warning("Email '%s' not sent: no recipient", subject)
        return EmailResultDTO(success=False, error='No recipient address')

    context = {'store_name': settings.STORE_NAME, **context}
    try:
        text_body = render_to_string(f'notifications/{template}.txt', context)
        html_body = render_to_string(f'notifications/{template}.html', context)
        send_mail(
            subject=subject,
            message=text_body,
            from_email=settings.DEFAULT_FROM_EMAIL,
            recipient_list=[to],
            html_message=html_body,
        )
    except Exception as e:
        logger.error("Failed to send '%s' email to %s: %s", template, to, e)
        return EmailResultDTO(success=False, error=str(e))

    logger.info("Sent '%s' email to %s", template, to)
    return EmailResultDTO(success=True)


def send_tracking_email(
    to: str,
    order_number: str,
    tracking_number: str,
    tracking_url: Optional[str] = None,
) -> EmailResultDTO:
    """Shipment notice. Without a carrier URL the link is a web search for the number."""
    tracking_link = tracking_url or f"https://www.google.com/search?q={quote(tracking_number)}"
    return _send(
        to,
        f"Your {settings.STORE_NAME} Order {order_number} Has Shipped!",
        'tracking',
        {
            'order_number': order_number,
            'tracking_number': tracking_number,
            'tracking_link': tracking_link,
        },
    )


def send_order_confirmation_email(
    to: str,
    order_number: str,
    total_amount,
    items: Iterable[Mapping],
    customer_name: str = '',
) -> EmailResultDTO:
    lines = [
        {
            'name': item.get('name') or 'Item',
            'price': Decimal(str(item.get('price') or 0)).quantize(Decimal('0.01')),
            'quantity': item.get('quantity') or 1,
        }
        for item in items
    ]
    return _send(
        to,
        f"Order Confirmation - {order_number}",
        'order_confirmation',
        {
            'customer_name': customer_name,
            'order_number': order_number,
            'total_amount': Decimal(str(total_amount)).quantize(Decimal('0.01')),
            'items': lines,
        },
    )


def send_password_reset_email(to: str, name: str, reset_url: str) -> EmailResultDTO:
    return _send(
        to,
        f"Reset your {settings.STORE_NAME} password",
        'password_reset',
        {'name': name, 'reset_url': reset_url},
    )
