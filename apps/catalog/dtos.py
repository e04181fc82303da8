"""DTOs for Catalog app - Data Transfer Objects for cross-app communication."""
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import Dict, List, Optional


@dataclass(frozen=True)
class CuratedProductDTO:
    id: int
    cj_pid: str
    cj_vid: str
    product_name: str
    original_cj_title: str
    seo_title: str
    product_description: str
    product_image: str
    category: str
    cj_cost_price: Decimal  # USD
    suggested_price: Decimal  # ZAR
    custom_price: Optional[Decimal]  # ZAR
    display_price: Decimal
    stock_quantity: int
    is_active: bool
    created_at: datetime
    updated_at: datetime


@dataclass(frozen=True)
class WarehouseInventoryDTO:
    warehouse_id: str
    warehouse_name: str
    country_code: str
    total_inventory: int
    cj_inventory: int
    factory_inventory: int
    updated_at: Optional[datetime] = None


@dataclass(frozen=True)
class InventorySnapshotDTO:
    """Current warehouse stock of one active curated product."""
    product_id: int
    product_name: str
    cj_pid: str
    cj_vid: str
    stock_quantity: int
    warehouses: List[WarehouseInventoryDTO]


@dataclass(frozen=True)
class SupplierStockDTO:
    """Summed supplier-warehouse stock used for sold-out checks."""
    product_id: int
    product_name: str
    cj_stock: int


@dataclass(frozen=True)
class LocalProductDTO:
    id: int
    name: str
    description: str
    price: Decimal
    compare_at_price: Optional[Decimal]
    stock_quantity: int
    sku: str
    category: str
    tags: List[str]
    images: List[str]
    weight_kg: Optional[Decimal]
    dimensions: Dict
    is_featured: bool
    is_active: bool
    created_at: datetime
    updated_at: datetime


@dataclass(frozen=True)
class StockUpdateResultDTO:
    id: int
    name: str
    stock_quantity: int


# =============================================================================
# Sync results
# =============================================================================

@dataclass(frozen=True)
class InventoryUpdateDTO:
    product_id: int
    cj_pid: str
    cj_vid: str
    cj_stock: int
    warehouses: int


@dataclass(frozen=True)
class InventoryFailureDTO:
    product_id: int
    cj_pid: str
    cj_vid: str
    reason: str


@dataclass(frozen=True)
class InventorySyncResultDTO:
    run_id: int
    processed: int
    updated: List[InventoryUpdateDTO] = field(default_factory=list)
    failures: List[InventoryFailureDTO] = field(default_factory=list)

    @property
    def updated_count(self) -> int:
        return len(self.updated)

    @property
    def failed_count(self) -> int:
        return len(self.failures)


@dataclass(frozen=True)
class InventorySyncRunDTO:
    id: int
    sync_type: str
    status: str
    started_at: datetime
    completed_at: Optional[datetime]
    products_updated: int
    products_failed: int
    error_message: str


@dataclass(frozen=True)
class PriceChangeDTO:
    """A supplier cost change above the reporting threshold."""
    product_id: int
    name: str
    old_cost_usd: Decimal
    new_cost_usd: Decimal
    old_price_zar: Optional[Decimal]
    new_price_zar: Decimal
    percent_change: Decimal
    increased: bool


@dataclass(frozen=True)
class PriceSyncErrorDTO:
    product_id: int
    name: str
    reason: str


@dataclass(frozen=True)
class PriceSyncResultDTO:
    synced: int
    processed: int
    changes: List[PriceChangeDTO] = field(default_factory=list)
    errors: List[PriceSyncErrorDTO] = field(default_factory=list)
    elapsed_ms: int = 0
