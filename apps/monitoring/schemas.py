"""API Schemas for Monitoring app."""
from datetime import datetime
from typing import List, Optional
from ninja import Schema


class SyncExecutionOut(Schema):
    id: int
    kind: str
    status: str
    sync_type: str
    processed: int
    updated: int
    failures: int
    price_changes: int
    batch_size: int
    duration_ms: int
    error: str
    error_details: list
    timestamp: datetime


class SyncHealthOut(Schema):
    enabled: bool
    last_execution: Optional[datetime] = None
    total_runs: int
    success_rate: Optional[float] = None
    avg_duration_ms: Optional[int] = None
    overdue: bool
    recent_runs: List[SyncExecutionOut]


class SystemHealthOut(Schema):
    timestamp: datetime
    uptime_seconds: int
    warnings: List[str]


class SchedulerHealthOut(Schema):
    inventory_sync: SyncHealthOut
    price_sync: SyncHealthOut
    system: SystemHealthOut


class SyncTriggerOut(Schema):
    queued: bool
    task_id: str


class WarehouseInventoryOut(Schema):
    warehouse_id: str
    warehouse_name: str
    country_code: str
    total_inventory: int
    cj_inventory: int
    factory_inventory: int
    updated_at: Optional[datetime] = None


class InventorySnapshotOut(Schema):
    product_id: int
    product_name: str
    cj_pid: str
    cj_vid: str
    stock_quantity: int
    warehouses: List[WarehouseInventoryOut]


class InventorySyncRunOut(Schema):
    id: int
    sync_type: str
    status: str
    started_at: datetime
    completed_at: Optional[datetime] = None
    products_updated: int
    products_failed: int
    error_message: str
