"""API Router for Supplier app."""
import json
from dataclasses import asdict
from typing import Any, Dict
from ninja import Body, Router
from ninja.errors import HttpError
from django.http import HttpRequest

from apps.identity.permissions import require_admin

from . import services
from .client import get_client
from .schemas import (
    SupplierHealthOut, SupplierOrderOut, SupplierProductOut, SupplierProductPageOut,
    SupplierStatusOut, WebhookOut,
)

router = Router(tags=["Supplier"])


@router.get("/health", response=SupplierHealthOut, auth=None)
def health(request: HttpRequest):
    """Client status: token state and request counters."""
    status = get_client().get_status()
    return SupplierHealthOut(ok=True, status=SupplierStatusOut(**status.__dict__))


@router.get("/products", response=SupplierProductPageOut, auth=None)
def search_products(request: HttpRequest, q: str = "", page: int = 1, page_size: int = 20):
    """Pass-through product search. Supplier failures surface as 502."""
    if page < 1 or not 1 <= page_size <= 200:
        raise HttpError(400, "page must be >= 1 and page_size between 1 and 200")
    result = get_client().search_products(q, page, page_size)
    return SupplierProductPageOut(**asdict(result))


@router.get("/products/{pid}", response=SupplierProductOut, auth=None)
def get_product(request: HttpRequest, pid: str):
    product = get_client().get_product_details(pid)
    return SupplierProductOut(**asdict(product))


@router.post("/orders", response={201: SupplierOrderOut}, auth=None)
def create_order(request: HttpRequest, payload: Dict[str, Any] = Body(...)):
    """Forward a raw order payload to the supplier. Admin only."""
    require_admin(request)
    order = get_client().create_order(payload)
    return 201, SupplierOrderOut(**order.__dict__)


@router.post("/webhook", response=WebhookOut, auth=None)
def webhook(request: HttpRequest):
    """
    Fulfilment / tracking callback from the supplier.

    Headers: X-CJ-Signature (or X-Signature) and X-CJ-Timestamp.
    """
    signature = request.headers.get('X-CJ-Signature') or request.headers.get('X-Signature')
    timestamp = request.headers.get('X-CJ-Timestamp')

    if not get_client().verify_webhook(signature, timestamp, request.body):
        raise HttpError(401, "Invalid webhook signature")

    try:
        payload = json.loads(request.body or b'{}')
    except ValueError:
        raise HttpError(400, "Webhook body must be JSON")
    if not isinstance(payload, dict):
        raise HttpError(400, "Webhook body must be a JSON object")

    result = services.handle_webhook(payload)
    return WebhookOut(**result.__dict__)
