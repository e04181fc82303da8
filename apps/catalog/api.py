"""
API Routers for Catalog app.

- router: public storefront listing of curated supplier products
- local_router: store-stocked products (writes are admin-only)
- admin_router: curation of supplier products
"""
from dataclasses import asdict
from decimal import Decimal
from typing import List, Optional
from ninja import Router
from ninja.errors import HttpError
from django.http import HttpRequest

from apps.identity.permissions import require_admin
from apps.supplier.client import get_client
from apps.supplier.schemas import SupplierProductOut, SupplierProductPageOut

from . import services
from .schemas import (
    BulkStockUpdateIn, BulkStockUpdateOut, CuratedProductIn, CuratedProductOut,
    CuratedProductUpdateIn, LocalProductIn, LocalProductOut, LocalProductUpdateIn,
    StockUpdateOut,
)

router = Router(tags=["Products"])
local_router = Router(tags=["Local Products"])
admin_router = Router(tags=["Admin Catalog"])


# =============================================================================
# Storefront
# =============================================================================

@router.get("/", response=List[CuratedProductOut], auth=None)
def list_products(
    request: HttpRequest,
    category: Optional[str] = None,
    min_price: Optional[Decimal] = None,
    max_price: Optional[Decimal] = None,
    sort_by: str = "created_at",
    sort_order: str = "desc",
):
    products = services.list_curated_products(
        category=category,
        min_price=min_price,
        max_price=max_price,
        sort_by=sort_by,
        sort_order=sort_order,
    )
    return [CuratedProductOut(**p.__dict__) for p in products]


@router.get("/{identifier}", response=CuratedProductOut, auth=None)
def get_product(request: HttpRequest, identifier: str):
    """Look up by numeric id or supplier pid."""
    product = services.get_curated_product(identifier)
    if not product:
        raise HttpError(404, "Product not found")
    return CuratedProductOut(**product.__dict__)


# =============================================================================
# Local products
# =============================================================================

@local_router.get("/", response=List[LocalProductOut], auth=None)
def list_local_products(
    request: HttpRequest,
    category: Optional[str] = None,
    search: Optional[str] = None,
    in_stock: bool = False,
    limit: int = 50,
    offset: int = 0,
):
    products = services.list_local_products(
        category=category,
        search=search,
        in_stock=in_stock,
        limit=max(1, min(limit, 200)),
        offset=max(0, offset),
    )
    return [LocalProductOut(**p.__dict__) for p in products]


@local_router.post("/bulk-stock-update", response=BulkStockUpdateOut, auth=None)
def bulk_stock_update(request: HttpRequest, payload: BulkStockUpdateIn):
    """Set stock for several products at once; unknown ids are skipped."""
    require_admin(request)
    try:
        results = services.bulk_update_local_stock([u.dict() for u in payload.updates])
    except ValueError as e:
        raise HttpError(400, str(e))
    return BulkStockUpdateOut(
        updated=len(results),
        products=[StockUpdateOut(**r.__dict__) for r in results],
    )


@local_router.get("/{int:product_id}", response=LocalProductOut, auth=None)
def get_local_product(request: HttpRequest, product_id: int):
    product = services.get_local_product(product_id)
    if not product:
        raise HttpError(404, "Product not found")
    return LocalProductOut(**product.__dict__)


@local_router.post("/", response={201: LocalProductOut}, auth=None)
def create_local_product(request: HttpRequest, payload: LocalProductIn):
    require_admin(request)
    try:
        product = services.create_local_product(payload.dict())
    except ValueError as e:
        raise HttpError(400, str(e))
    return 201, LocalProductOut(**product.__dict__)


@local_router.put("/{int:product_id}", response=LocalProductOut, auth=None)
def update_local_product(request: HttpRequest, product_id: int, payload: LocalProductUpdateIn):
    require_admin(request)
    try:
        product = services.update_local_product(product_id, payload.dict(exclude_unset=True))
    except ValueError as e:
        raise HttpError(400, str(e))
    if not product:
        raise HttpError(404, "Product not found")
    return LocalProductOut(**product.__dict__)


@local_router.delete("/{int:product_id}", response=LocalProductOut, auth=None)
def delete_local_product(request: HttpRequest, product_id: int):
    """Soft delete: the product is hidden, not removed."""
    require_admin(request)
    product = services.soft_delete_local_product(product_id)
    if not product:
        raise HttpError(404, "Product not found")
    return LocalProductOut(**product.__dict__)


# =============================================================================
# Admin curation
# =============================================================================

@admin_router.get("/products", response=List[CuratedProductOut], auth=None)
def admin_list_products(request: HttpRequest):
    """All curated products, active or not, newest first."""
    require_admin(request)
    return [CuratedProductOut(**p.__dict__) for p in services.list_all_curated_products()]


@admin_router.get("/products/search", response=List[CuratedProductOut], auth=None)
def admin_search_products(request: HttpRequest, q: str = ""):
    require_admin(request)
    return [CuratedProductOut(**p.__dict__) for p in services.search_curated_products(q)]


@admin_router.post("/products", response={201: CuratedProductOut}, auth=None)
def admin_add_product(request: HttpRequest, payload: CuratedProductIn):
    require_admin(request)
    try:
        product = services.add_curated_product(**payload.dict())
    except services.DuplicateProductError as e:
        raise HttpError(409, str(e))
    except ValueError as e:
        raise HttpError(400, str(e))
    return 201, CuratedProductOut(**product.__dict__)


@admin_router.put("/products/{product_id}", response=CuratedProductOut, auth=None)
def admin_update_product(request: HttpRequest, product_id: int, payload: CuratedProductUpdateIn):
    require_admin(request)
    try:
        product = services.update_curated_product(product_id, payload.dict(exclude_unset=True))
    except services.DuplicateProductError as e:
        raise HttpError(409, str(e))
    except ValueError as e:
        raise HttpError(400, str(e))
    if not product:
        raise HttpError(404, "Product not found")
    return CuratedProductOut(**product.__dict__)


@admin_router.delete("/products/{product_id}", response=CuratedProductOut, auth=None)
def admin_delete_product(request: HttpRequest, product_id: int):
    require_admin(request)
    product = services.delete_curated_product(product_id)
    if not product:
        raise HttpError(404, "Product not found")
    return CuratedProductOut(**product.__dict__)


@admin_router.get("/supplier-products/search", response=SupplierProductPageOut, auth=None)
def admin_search_supplier(request: HttpRequest, q: str = "", page: int = 1, page_size: int = 20):
    """Search the supplier catalogue by keyword or pid."""
    require_admin(request)
    if page < 1 or not 1 <= page_size <= 200:
        raise HttpError(400, "page must be >= 1 and page_size between 1 and 200")
    return SupplierProductPageOut(**asdict(services.search_supplier_products(q, page, page_size)))


@admin_router.get("/supplier-products/{pid}", response=SupplierProductOut, auth=None)
def admin_supplier_product(request: HttpRequest, pid: str):
    require_admin(request)
    return SupplierProductOut(**asdict(get_client().get_product_details(pid)))
