"""Services for Catalog app - curated supplier products and local products."""
import logging
import re
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, Iterable, List, Optional

from django.db import IntegrityError, transaction
from django.db.models import Case, IntegerField, Q, Sum, Value, When
from django.db.models.functions import Coalesce

from apps.siteconfig.services import get_pricing_config
from apps.supplier.client import get_client
from apps.supplier.dtos import SupplierProductPageDTO, SupplierProductSummaryDTO
from apps.supplier.exceptions import SupplierError

from .dtos import (
    CuratedProductDTO, LocalProductDTO, StockUpdateResultDTO, SupplierStockDTO,
)
from .inventory_sync import replace_warehouse_rows, sellable_quantity, supplier_stock
from .models import CuratedProduct, LocalProduct
from .pricing import retail_price

logger = logging.getLogger(__name__)

PID_PATTERN = re.compile(r'^[A-Z]{2,}[0-9]')
CURATED_SORT_FIELDS = {
    'created_at': 'created_at',
    'custom_price': 'price_sort',
    'price': 'price_sort',
    'product_name': 'product_name',
}
CURATED_UPDATABLE_FIELDS = (
    'custom_price', 'is_active', 'product_name', 'original_cj_title', 'seo_title',
    'product_description', 'product_image', 'category', 'stock_quantity', 'cj_vid', 'cj_pid',
)
LOCAL_PRODUCT_FIELDS = (
    'name', 'description', 'price', 'compare_at_price', 'stock_quantity', 'sku',
    'category', 'tags', 'images', 'weight_kg', 'dimensions', 'is_featured', 'is_active',
)
DEFAULT_LOCAL_CATEGORY = 'General'


class DuplicateProductError(ValueError):
    """A curated product with the same supplier pid already exists."""
    pass


# =============================================================================
# Conversions
# =============================================================================

def _curated_to_dto(product: CuratedProduct) -> CuratedProductDTO:
    return CuratedProductDTO(
        id=product.id,
        cj_pid=product.cj_pid,
        cj_vid=product.cj_vid,
        product_name=product.product_name,
        original_cj_title=product.original_cj_title,
        seo_title=product.seo_title,
        product_description=product.product_description,
        product_image=product.product_image,
        category=product.category,
        cj_cost_price=product.cj_cost_price,
        suggested_price=product.suggested_price,
        custom_price=product.custom_price,
        display_price=product.display_price,
        stock_quantity=product.stock_quantity,
        is_active=product.is_active,
        created_at=product.created_at,
        updated_at=product.updated_at,
    )


def _local_to_dto(product: LocalProduct) -> LocalProductDTO:
    return LocalProductDTO(
        id=product.id,
        name=product.name,
        description=product.description,
        price=product.price,
        compare_at_price=product.compare_at_price,
        stock_quantity=product.stock_quantity,
        sku=product.sku,
        category=product.category,
        tags=list(product.tags or []),
        images=list(product.images or []),
        weight_kg=product.weight_kg,
        dimensions=dict(product.dimensions or {}),
        is_featured=product.is_featured,
        is_active=product.is_active,
        created_at=product.created_at,
        updated_at=product.updated_at,
    )


def _positive_decimal(value, field_name: str) -> Decimal:
    try:
        amount = Decimal(str(value))
    except (InvalidOperation, TypeError, ValueError):
        raise ValueError(f"Invalid {field_name}: must be a positive number")
    if not amount.is_finite() or amount <= 0:
        raise ValueError(f"Invalid {field_name}: must be a positive number")
    return amount


def _stock_quantity(value) -> int:
    try:
        quantity = int(value)
    except (TypeError, ValueError):
        raise ValueError("Invalid stock_quantity: must be a whole number")
    if quantity < 0:
        raise ValueError("Invalid stock_quantity: cannot be negative")
    return quantity


def parse_curated_item_id(item_id) -> Optional[int]:
    """Cart item ids look like "curated-<id>"; plain ids are accepted too."""
    text = str(item_id or '').strip()
    if text.startswith('curated-'):
        text = text[len('curated-'):]
    try:
        return int(text)
    except ValueError:
        return None


# =============================================================================
# Storefront
# =============================================================================

def list_curated_products(
    category: Optional[str] = None,
    min_price: Optional[Decimal] = None,
    max_price: Optional[Decimal] = None,
    sort_by: str = 'created_at',
    sort_order: str = 'desc',
) -> List[CuratedProductDTO]:
    """
    Active curated products. Price filters apply to the display price.
    Unknown sort fields fall back to created_at, unknown orders to desc.
    """
    queryset = CuratedProduct.objects.filter(is_active=True).annotate(
        price_sort=Coalesce('custom_price', 'suggested_price'),
    )

    if category and category != 'all':
        queryset = queryset.filter(category=category)
    if min_price is not None:
        queryset = queryset.filter(price_sort__gte=min_price)
    if max_price is not None:
        queryset = queryset.filter(price_sort__lte=max_price)

    sort_field = CURATED_SORT_FIELDS.get(sort_by, 'created_at')
    prefix = '' if (sort_order or '').lower() == 'asc' else '-'
    queryset = queryset.order_by(f'{prefix}{sort_field}', '-id')

    return [_curated_to_dto(p) for p in queryset]


def get_curated_product(identifier: str) -> Optional[CuratedProductDTO]:
    """Active product by numeric id or supplier pid."""
    lookup = Q(cj_pid=identifier)
    if str(identifier).isdigit():
        lookup |= Q(id=int(identifier))
    product = CuratedProduct.objects.filter(lookup, is_active=True).first()
    return _curated_to_dto(product) if product else None


def get_curated_products_by_ids(product_ids: Iterable[int]) -> Dict[int, CuratedProductDTO]:
    return {
        p.id: _curated_to_dto(p)
        for p in CuratedProduct.objects.filter(id__in=list(product_ids))
    }


def get_supplier_stock(product_ids: Iterable[int]) -> Dict[int, SupplierStockDTO]:
    """
    Summed cj_inventory per product across its warehouse rows. Products
    without warehouse rows count as zero stock.
    """
    rows = (
        CuratedProduct.objects.filter(id__in=list(product_ids))
        .annotate(cj_stock=Coalesce(Sum('inventories__cj_inventory'), Value(0)))
        .values('id', 'product_name', 'cj_stock')
    )
    return {
        row['id']: SupplierStockDTO(
            product_id=row['id'],
            product_name=row['product_name'],
            cj_stock=row['cj_stock'],
        )
        for row in rows
    }


# =============================================================================
# Curated product administration
# =============================================================================

def list_all_curated_products() -> List[CuratedProductDTO]:
    return [_curated_to_dto(p) for p in CuratedProduct.objects.order_by('-created_at')]


def search_curated_products(query: str, limit: int = 20) -> List[CuratedProductDTO]:
    """Match by database id, supplier pid or product name; id matches first."""
    query = (query or '').strip()
    if not query:
        return []

    numeric_id = int(query) if query.isdigit() else None
    lookup = Q(cj_pid__icontains=query) | Q(product_name__icontains=query)
    if numeric_id is not None:
        lookup |= Q(id=numeric_id)

    rank_conditions = [When(cj_pid__icontains=query, then=Value(2))]
    if numeric_id is not None:
        rank_conditions.insert(0, When(id=numeric_id, then=Value(1)))

    queryset = (
        CuratedProduct.objects.filter(lookup)
        .annotate(rank=Case(*rank_conditions, default=Value(3), output_field=IntegerField()))
        .order_by('rank', '-created_at')[:limit]
    )
    return [_curated_to_dto(p) for p in queryset]


def add_curated_product(
    cj_pid: str,
    product_name: str,
    cj_cost_price,
    cj_vid: str = '',
    original_cj_title: str = '',
    seo_title: str = '',
    product_description: str = '',
    product_image: str = '',
    category: str = '',
) -> CuratedProductDTO:
    """
    Curate a supplier product.

    Resolves a missing variant id from the supplier's product details,
    fetches initial warehouse stock and prices the product with the current
    exchange rate and markup. Supplier lookups are best-effort: the product
    is still added, without stock, when they fail.

    Raises:
        ValueError: missing fields or non-positive cost
        DuplicateProductError: pid already curated
    """
    cj_pid = (cj_pid or '').strip()
    if not cj_pid or not product_name:
        raise ValueError("Missing required fields")
    cost = _positive_decimal(cj_cost_price, 'price')

    if CuratedProduct.objects.filter(cj_pid=cj_pid).exists():
        raise DuplicateProductError("Product already curated")

    pricing = get_pricing_config()
    price = retail_price(cost, pricing.usd_to_zar, pricing.price_markup)

    client = get_client()
    vid = (cj_vid or '').strip()
    if not vid:
        try:
            details = client.get_product_details(cj_pid)
            vid = details.variants[0].vid if details.variants else ''
        except SupplierError as e:
            logger.warning("Failed to fetch supplier details for pid %s: %s", cj_pid, e)

    warehouses = []
    if vid:
        try:
            warehouses = client.get_inventory(vid)
        except SupplierError as e:
            logger.warning("Failed to fetch initial inventory for vid %s: %s", vid, e)

    try:
        with transaction.atomic():
            product = CuratedProduct.objects.create(
                cj_pid=cj_pid,
                cj_vid=vid,
                product_name=product_name,
                original_cj_title=original_cj_title or product_name,
                seo_title=seo_title or '',
                product_description=product_description or '',
                product_image=product_image or '',
                category=category or '',
                cj_cost_price=cost,
                suggested_price=price,
                custom_price=price,
                stock_quantity=sellable_quantity(supplier_stock(warehouses)),
            )
            replace_warehouse_rows(product, warehouses)
    except IntegrityError:
        raise DuplicateProductError("Product already curated")

    logger.info(
        "Curated product %s (pid=%s, vid=%s, stock=%s, price=%s)",
        product.id, cj_pid, vid or '-', product.stock_quantity, price,
    )
    return _curated_to_dto(product)


def update_curated_product(product_id: int, data: Dict[str, Any]) -> Optional[CuratedProductDTO]:
    """
    Partial update. Only keys present in `data` are written.

    Raises:
        ValueError: nothing to update or invalid price
        DuplicateProductError: cj_pid collides with another product
    """
    updates = {k: v for k, v in data.items() if k in CURATED_UPDATABLE_FIELDS}
    if not updates:
        raise ValueError("No fields to update")

    try:
        product = CuratedProduct.objects.get(id=product_id)
    except CuratedProduct.DoesNotExist:
        return None

    if updates.get('custom_price') is not None:
        updates['custom_price'] = _positive_decimal(updates['custom_price'], 'custom_price')
    if 'stock_quantity' in updates and (updates['stock_quantity'] is None or updates['stock_quantity'] < 0):
        raise ValueError("stock_quantity must be zero or more")
    for text_field in ('cj_vid', 'cj_pid', 'seo_title', 'original_cj_title', 'product_description', 'product_image', 'category'):
        if text_field in updates and updates[text_field] is None:
            updates[text_field] = ''

    for key, value in updates.items():
        setattr(product, key, value)

    try:
        with transaction.atomic():
            product.save()
    except IntegrityError:
        raise DuplicateProductError("Another product already uses that pid")
    return _curated_to_dto(product)


def delete_curated_product(product_id: int) -> Optional[CuratedProductDTO]:
    product = CuratedProduct.objects.filter(id=product_id).first()
    if product is None:
        return None
    dto = _curated_to_dto(product)
    product.delete()
    logger.info("Deleted curated product %s (pid=%s)", dto.id, dto.cj_pid)
    return dto


def search_supplier_products(query: str, page: int = 1, page_size: int = 20) -> SupplierProductPageDTO:
    """
    Supplier search for curation.

    Queries shaped like a supplier pid (two or more capitals followed by a
    digit) are looked up directly; if that fails the same text is used as a
    name search, and an empty page is returned when both fail.
    """
    client = get_client()
    query = (query or '').strip()

    if not query or not PID_PATTERN.match(query):
        return client.search_products(query, page, page_size)

    try:
        details = client.get_product_details(query)
    except SupplierError as e:
        logger.info("PID lookup for %s failed (%s); trying name search", query, e)
        try:
            return client.search_products(query, 1, 10)
        except SupplierError as search_error:
            logger.warning("Supplier search also failed for %s: %s", query, search_error)
            return SupplierProductPageDTO(page=1, page_size=page_size, total=0, products=[])

    summary = SupplierProductSummaryDTO(
        pid=details.pid,
        name=details.name,
        sku=details.sku,
        image=details.image,
        price=details.price,
        category_name=details.category_name,
    )
    return SupplierProductPageDTO(page=1, page_size=1, total=1, products=[summary])


# =============================================================================
# Local products
# =============================================================================

def list_local_products(
    category: Optional[str] = None,
    search: Optional[str] = None,
    in_stock: bool = False,
    limit: int = 50,
    offset: int = 0,
) -> List[LocalProductDTO]:
    """Active local products, featured first then newest."""
    queryset = LocalProduct.objects.filter(is_active=True)
    if category:
        queryset = queryset.filter(category=category)
    if search:
        queryset = queryset.filter(Q(name__icontains=search) | Q(description__icontains=search))
    if in_stock:
        queryset = queryset.filter(stock_quantity__gt=0)

    queryset = queryset.order_by('-is_featured', '-created_at')[offset:offset + limit]
    return [_local_to_dto(p) for p in queryset]


def get_local_product(product_id: int) -> Optional[LocalProductDTO]:
    product = LocalProduct.objects.filter(id=product_id, is_active=True).first()
    return _local_to_dto(product) if product else None


def create_local_product(data: Dict[str, Any]) -> LocalProductDTO:
    """
    Raises:
        ValueError: name, price or stock_quantity missing / invalid
    """
    if not data.get('name') or data.get('price') is None or data.get('stock_quantity') is None:
        raise ValueError("Name, price, and stock_quantity are required")
    price = _positive_decimal(data['price'], 'price')
    stock_quantity = _stock_quantity(data['stock_quantity'])

    product = LocalProduct.objects.create(
        name=data['name'],
        description=data.get('description') or '',
        price=price,
        compare_at_price=data.get('compare_at_price'),
        stock_quantity=stock_quantity,
        sku=data.get('sku') or '',
        category=data.get('category') or DEFAULT_LOCAL_CATEGORY,
        tags=data.get('tags') or [],
        images=data.get('images') or [],
        weight_kg=data.get('weight_kg'),
        dimensions=data.get('dimensions') or {},
        is_featured=bool(data.get('is_featured')),
        is_active=data.get('is_active') is not False,
    )
    logger.info("Local product created: %s (id=%s)", product.name, product.id)
    return _local_to_dto(product)


def update_local_product(product_id: int, data: Dict[str, Any]) -> Optional[LocalProductDTO]:
    """Partial update; keys absent from `data` keep their values."""
    try:
        product = LocalProduct.objects.get(id=product_id)
    except LocalProduct.DoesNotExist:
        return None

    for key, value in data.items():
        if key not in LOCAL_PRODUCT_FIELDS:
            continue
        if key == 'price':
            value = _positive_decimal(value, 'price')
        elif key == 'stock_quantity' and value is not None:
            value = _stock_quantity(value)
        elif key in ('description', 'sku') and value is None:
            value = ''
        elif key in ('name', 'category', 'tags', 'images', 'stock_quantity', 'is_featured', 'is_active') and value is None:
            continue
        elif key == 'dimensions' and value is None:
            value = {}
        setattr(product, key, value)

    product.save()
    return _local_to_dto(product)


def soft_delete_local_product(product_id: int) -> Optional[LocalProductDTO]:
    product = LocalProduct.objects.filter(id=product_id).first()
    if product is None:
        return None
    product.is_active = False
    product.save(update_fields=['is_active', 'updated_at'])
    logger.info("Local product deleted: %s (id=%s)", product.name, product.id)
    return _local_to_dto(product)


def bulk_update_local_stock(updates: List[Dict[str, Any]]) -> List[StockUpdateResultDTO]:
    """
    Set stock for many products. Unknown ids are skipped.

    Raises:
        ValueError: a negative or non-numeric quantity; nothing is written
    """
    for update in updates:
        if update.get('stock_quantity') is not None:
            _stock_quantity(update['stock_quantity'])

    results = []
    with transaction.atomic():
        for update in updates:
            product = LocalProduct.objects.filter(id=update.get('id')).first()
            if product is None or update.get('stock_quantity') is None:
                continue
            product.stock_quantity = _stock_quantity(update['stock_quantity'])
            product.save(update_fields=['stock_quantity', 'updated_at'])
            results.append(StockUpdateResultDTO(
                id=product.id, name=product.name, stock_quantity=product.stock_quantity,
            ))
    logger.info("Bulk stock update: %d products updated", len(results))
    return results
