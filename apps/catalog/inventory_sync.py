"""
Curated inventory sync.

Stock shown in the store is the supplier's own warehouse stock (cj
inventory). Factory stock is ignored because it is not ready to ship, and
low stock is reported as zero so the storefront shows the item as sold out
before the supplier actually runs dry. Products stay active either way.
"""
import logging
from typing import List, Optional

from django.db import transaction
from django.utils import timezone

from apps.supplier.client import get_client
from apps.supplier.dtos import WarehouseStockDTO
from apps.supplier.exceptions import SupplierError

from .dtos import (
    InventoryFailureDTO, InventorySnapshotDTO, InventorySyncResultDTO,
    InventorySyncRunDTO, InventoryUpdateDTO, WarehouseInventoryDTO,
)
from .models import CuratedProduct, InventorySyncRun, InventorySyncStatus, ProductInventory

logger = logging.getLogger(__name__)

LOW_STOCK_THRESHOLD = 20


def supplier_stock(warehouses: List[WarehouseStockDTO]) -> int:
    return sum(w.cj_inventory for w in warehouses)


def sellable_quantity(stock: int) -> int:
    """Stock at or below the threshold is reported as zero."""
    return 0 if stock <= LOW_STOCK_THRESHOLD else stock


def replace_warehouse_rows(product: CuratedProduct, warehouses: List[WarehouseStockDTO]):
    """Replace a product's warehouse rows with a fresh supplier reading."""
    ProductInventory.objects.filter(product=product).delete()
    ProductInventory.objects.bulk_create([
        ProductInventory(
            product=product,
            cj_pid=product.cj_pid,
            cj_vid=product.cj_vid,
            warehouse_id=w.warehouse_id,
            warehouse_name=w.warehouse_name,
            country_code=w.country_code,
            total_inventory=w.total_inventory,
            cj_inventory=w.cj_inventory,
            factory_inventory=w.factory_inventory,
        )
        for w in warehouses
    ])


def _resolve_vid(client, product: CuratedProduct) -> str:
    """First variant of the supplier product, persisted when found."""
    try:
        details = client.get_product_details(product.cj_pid)
    except SupplierError as e:
        logger.warning("Failed to fetch details for pid %s: %s", product.cj_pid, e)
        return ''

    if not details.variants:
        return ''
    product.cj_vid = details.variants[0].vid
    product.save(update_fields=['cj_vid', 'updated_at'])
    return product.cj_vid


def sync_curated_inventory(limit: Optional[int] = None, sync_type: str = 'scheduled') -> InventorySyncResultDTO:
    """
    Refresh stock for active curated products.

    With `limit`, only the least recently updated products are synced.
    Per-product failures are collected and the sync carries on; any other
    error marks the run failed and is re-raised.
    """
    run = InventorySyncRun.objects.create(sync_type=sync_type, status=InventorySyncStatus.RUNNING)
    updated: List[InventoryUpdateDTO] = []
    failures: List[InventoryFailureDTO] = []

    try:
        queryset = CuratedProduct.objects.filter(is_active=True)
        if limit:
            queryset = queryset.order_by('updated_at')[:limit]
        else:
            queryset = queryset.order_by('id')
        products = list(queryset)

        logger.info("Inventory sync %s started (%s, %d products)", run.id, sync_type, len(products))
        client = get_client()

        for product in products:
            vid = product.cj_vid
            try:
                if not vid and product.cj_pid:
                    vid = _resolve_vid(client, product)
                if not vid:
                    failures.append(InventoryFailureDTO(
                        product_id=product.id, cj_pid=product.cj_pid, cj_vid='', reason='Missing vid',
                    ))
                    continue

                warehouses = client.get_inventory(vid)
                stock = supplier_stock(warehouses)

                with transaction.atomic():
                    product.stock_quantity = sellable_quantity(stock)
                    product.is_active = True
                    product.save(update_fields=['stock_quantity', 'is_active', 'updated_at'])
                    replace_warehouse_rows(product, warehouses)

                updated.append(InventoryUpdateDTO(
                    product_id=product.id,
                    cj_pid=product.cj_pid,
                    cj_vid=vid,
                    cj_stock=stock,
                    warehouses=len(warehouses),
                ))
            except SupplierError as e:
                logger.error("Inventory sync error for product %s (%s): %s", product.id, product.cj_pid, e)
                failures.append(InventoryFailureDTO(
                    product_id=product.id, cj_pid=product.cj_pid, cj_vid=vid or '', reason=str(e),
                ))
    except Exception as e:
        run.status = InventorySyncStatus.FAILED
        run.completed_at = timezone.now()
        run.products_updated = len(updated)
        run.products_failed = len(failures)
        run.error_message = str(e)
        run.save()
        logger.exception("Inventory sync %s failed", run.id)
        raise

    run.status = InventorySyncStatus.COMPLETED
    run.completed_at = timezone.now()
    run.products_updated = len(updated)
    run.products_failed = len(failures)
    run.save()

    logger.info(
        "Inventory sync %s completed: %d updated, %d failed",
        run.id, len(updated), len(failures),
    )
    return InventorySyncResultDTO(
        run_id=run.id,
        processed=len(products),
        updated=updated,
        failures=failures,
    )


def get_curated_inventory_snapshot() -> List[InventorySnapshotDTO]:
    """Warehouse rows grouped per active curated product."""
    products = (
        CuratedProduct.objects.filter(is_active=True)
        .prefetch_related('inventories')
        .order_by('id')
    )
    return [
        InventorySnapshotDTO(
            product_id=p.id,
            product_name=p.product_name,
            cj_pid=p.cj_pid,
            cj_vid=p.cj_vid,
            stock_quantity=p.stock_quantity,
            warehouses=[
                WarehouseInventoryDTO(
                    warehouse_id=i.warehouse_id,
                    warehouse_name=i.warehouse_name,
                    country_code=i.country_code,
                    total_inventory=i.total_inventory,
                    cj_inventory=i.cj_inventory,
                    factory_inventory=i.factory_inventory,
                    updated_at=i.updated_at,
                )
                for i in p.inventories.all()
            ],
        )
        for p in products
    ]


def list_sync_runs(limit: int = 20) -> List[InventorySyncRunDTO]:
    return [
        InventorySyncRunDTO(
            id=r.id,
            sync_type=r.sync_type,
            status=r.status,
            started_at=r.started_at,
            completed_at=r.completed_at,
            products_updated=r.products_updated,
            products_failed=r.products_failed,
            error_message=r.error_message,
        )
        for r in InventorySyncRun.objects.order_by('-started_at', '-id')[:limit]
    ]
