"""API Router for Shipping app."""
from dataclasses import asdict
from typing import List
from ninja import Router
from ninja.errors import HttpError
from django.http import HttpRequest

from . import services
from .schemas import CountryOut, ShippingQuoteIn, ShippingQuoteOut

router = Router(tags=["Shipping"])


@router.post("/quote", response=ShippingQuoteOut, auth=None)
def quote(request: HttpRequest, payload: ShippingQuoteIn):
    """Freight options for a basket. Supplier failures surface as 502 unless the fallback is on."""
    try:
        result = services.get_shipping_quote(
            items=[item.dict() for item in payload.items],
            country=payload.country,
            postal_code=payload.postal_code,
            order_value=payload.order_value,
        )
    except ValueError as e:
        raise HttpError(400, str(e))
    return ShippingQuoteOut(**asdict(result))


@router.get("/countries", response=List[CountryOut], auth=None)
def countries(request: HttpRequest):
    return [CountryOut(**c.__dict__) for c in services.list_supported_countries()]
