"""API Router for Monitoring app. All endpoints are admin-only."""
from dataclasses import asdict
from typing import List, Optional
from ninja import Router
from ninja.errors import HttpError
from django.http import HttpRequest, HttpResponse

from apps.catalog.inventory_sync import get_curated_inventory_snapshot, list_sync_runs
from apps.core.task_service import TaskService
from apps.identity.permissions import require_admin

from . import services
from .schemas import (
    InventorySnapshotOut, InventorySyncRunOut, SchedulerHealthOut, SyncExecutionOut,
    SyncTriggerOut,
)

router = Router(tags=["Monitoring"])


@router.get("/health", response=SchedulerHealthOut, auth=None)
def scheduler_health(request: HttpRequest):
    require_admin(request)
    return SchedulerHealthOut(**asdict(services.get_scheduler_health()))


@router.get("/history/{kind}", response=List[SyncExecutionOut], auth=None)
def execution_history(request: HttpRequest, kind: str, limit: int = 50):
    """`kind` is inventory or price."""
    require_admin(request)
    try:
        history = services.get_execution_history(kind, limit=max(1, min(limit, 100)))
    except ValueError as e:
        raise HttpError(400, str(e))
    return [SyncExecutionOut(**e.__dict__) for e in history]


@router.get("/report", auth=None)
def scheduler_report(request: HttpRequest):
    require_admin(request)
    return HttpResponse(services.generate_scheduler_report(), content_type='text/plain; charset=utf-8')


@router.post("/sync/inventory", response={202: SyncTriggerOut}, auth=None)
def trigger_inventory_sync(request: HttpRequest, limit: Optional[int] = None):
    """Queue a manual inventory sync (runs inline with the local backend)."""
    require_admin(request)
    task_id = TaskService.sync_inventory(limit=limit, sync_type='manual')
    return 202, SyncTriggerOut(queued=True, task_id=task_id)


@router.post("/sync/prices", response={202: SyncTriggerOut}, auth=None)
def trigger_price_sync(request: HttpRequest, limit: Optional[int] = None):
    require_admin(request)
    task_id = TaskService.sync_prices(limit=limit, sync_type='manual')
    return 202, SyncTriggerOut(queued=True, task_id=task_id)


@router.get("/inventory/snapshot", response=List[InventorySnapshotOut], auth=None)
def inventory_snapshot(request: HttpRequest):
    require_admin(request)
    return [InventorySnapshotOut(**asdict(s)) for s in get_curated_inventory_snapshot()]


@router.get("/inventory/runs", response=List[InventorySyncRunOut], auth=None)
def inventory_runs(request: HttpRequest, limit: int = 20):
    require_admin(request)
    return [InventorySyncRunOut(**r.__dict__) for r in list_sync_runs(limit=max(1, min(limit, 100)))]
