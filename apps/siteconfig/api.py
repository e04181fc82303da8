"""API Router for Siteconfig app. All endpoints are admin-only."""
from ninja import Router
from ninja.errors import HttpError
from django.http import HttpRequest

from apps.identity.permissions import require_admin

from . import services
from .schemas import (
    PricingConfigIn, PricingConfigOut, ShippingFallbackIn, ShippingFallbackOut,
    RuntimeConfigOut,
)

router = Router(tags=["Config"])


@router.get("/", response=RuntimeConfigOut, auth=None)
def get_config(request: HttpRequest):
    require_admin(request)
    return RuntimeConfigOut(**services.get_runtime_config().__dict__)


@router.put("/pricing", response=PricingConfigOut, auth=None)
def update_pricing(request: HttpRequest, payload: PricingConfigIn):
    """
    Change the exchange rate and/or markup. Takes effect on the next
    product add or price sync.
    """
    require_admin(request)
    try:
        config = services.update_pricing_config(
            usd_to_zar=payload.usd_to_zar,
            price_markup=payload.price_markup,
        )
    except ValueError as e:
        raise HttpError(400, str(e))
    return PricingConfigOut(**config.__dict__)


@router.put("/shipping-fallback", response=ShippingFallbackOut, auth=None)
def update_shipping_fallback(request: HttpRequest, payload: ShippingFallbackIn):
    require_admin(request)
    return ShippingFallbackOut(enabled=services.set_shipping_fallback_enabled(payload.enabled))
