"""
URL configuration for the Dropship Store API.
"""
from django.contrib import admin
from django.urls import path
from django.utils import timezone
from ninja import NinjaAPI

from apps.supplier.exceptions import SupplierError

api = NinjaAPI(
    title="Dropship Store API",
    version="1.0.0",
    description="Curated dropshipping storefront backend",
    docs_url="/docs",
)


@api.exception_handler(SupplierError)
def supplier_error_handler(request, exc):
    """Supplier failures are upstream errors: 502 with the supplier's message."""
    return api.create_response(
        request,
        {"detail": "Supplier request failed", "error": str(exc)},
        status=502,
    )


@api.get("/health", auth=None, tags=["Health"])
def health(request):
    return {"status": "ok", "timestamp": timezone.now().isoformat()}


from apps.identity.api import router as identity_router, admin_router as admin_users_router
from apps.siteconfig.api import router as siteconfig_router
from apps.supplier.api import router as supplier_router
from apps.catalog.api import (
    router as products_router,
    local_router as local_products_router,
    admin_router as admin_catalog_router,
)
from apps.monitoring.api import router as monitoring_router
from apps.shipping.api import router as shipping_router
from apps.orders.api import (
    cart_router,
    router as orders_router,
    admin_router as admin_orders_router,
)
from apps.payments.api import router as payments_router
from apps.reviews.api import router as reviews_router

api.add_router("/auth/", identity_router)
api.add_router("/admin/users/", admin_users_router)
api.add_router("/admin/catalog/", admin_catalog_router)
api.add_router("/admin/orders/", admin_orders_router)
api.add_router("/config/", siteconfig_router)
api.add_router("/supplier/", supplier_router)
api.add_router("/products/", products_router)
api.add_router("/local-products/", local_products_router)
api.add_router("/monitoring/", monitoring_router)
api.add_router("/shipping/", shipping_router)
api.add_router("/cart/", cart_router)
api.add_router("/orders/", orders_router)
api.add_router("/payments/", payments_router)
api.add_router("/reviews/", reviews_router)

urlpatterns = [
    path('admin/', admin.site.urls),
    path('api/', api.urls),
]
