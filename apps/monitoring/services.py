"""
Scheduler monitoring.

Every sync run is recorded as a SyncExecution. Health is derived from the
stored history: success rate and average duration over the last 10 runs,
and an overdue flag when the last run is older than the schedule allows.
"""
import logging
import time
from datetime import datetime, timedelta
from typing import List, Optional
from zoneinfo import ZoneInfo

from django.conf import settings
from django.utils import timezone

from .dtos import SchedulerHealthDTO, SyncExecutionDTO, SyncHealthDTO, SystemHealthDTO
from .models import ExecutionStatus, SyncExecution, SyncKind

logger = logging.getLogger(__name__)

MAX_HISTORY_RECORDS = 100
STATS_WINDOW = 10
RECENT_RUNS = 5

INVENTORY_WEEKDAY_INTERVAL = timedelta(hours=6)
INVENTORY_WEEKEND_INTERVAL = timedelta(hours=2)
INVENTORY_GRACE_FACTOR = 1.5
PRICE_SYNC_MAX_AGE = timedelta(hours=26)

_PROCESS_STARTED = time.monotonic()


def _store_tz() -> ZoneInfo:
    return ZoneInfo(getattr(settings, 'STORE_TIME_ZONE', 'Africa/Johannesburg'))


def _to_dto(execution: SyncExecution) -> SyncExecutionDTO:
    return SyncExecutionDTO(
        id=execution.id,
        kind=execution.kind,
        status=execution.status,
        sync_type=execution.sync_type,
        processed=execution.processed,
        updated=execution.updated,
        failures=execution.failures,
        price_changes=execution.price_changes,
        batch_size=execution.batch_size,
        duration_ms=execution.duration_ms,
        error=execution.error,
        error_details=list(execution.error_details or []),
        timestamp=execution.created_at,
    )


def _trim_history(kind: str):
    stale_ids = list(
        SyncExecution.objects.filter(kind=kind)
        .order_by('-created_at', '-id')
        .values_list('id', flat=True)[MAX_HISTORY_RECORDS:]
    )
    if stale_ids:
        SyncExecution.objects.filter(id__in=stale_ids).delete()


# =============================================================================
# Recording
# =============================================================================

def record_inventory_sync_execution(
    processed: int = 0,
    updated: int = 0,
    failures: int = 0,
    duration_ms: int = 0,
    batch_size: int = 0,
    sync_type: str = 'scheduled',
    error: str = '',
) -> SyncExecutionDTO:
    if error:
        status = ExecutionStatus.FAILED
    elif failures == 0:
        status = ExecutionStatus.SUCCESS
    else:
        status = ExecutionStatus.PARTIAL

    execution = SyncExecution.objects.create(
        kind=SyncKind.INVENTORY,
        status=status,
        sync_type=sync_type,
        processed=processed,
        updated=updated,
        failures=failures,
        batch_size=batch_size,
        duration_ms=duration_ms,
        error=error or '',
    )
    _trim_history(SyncKind.INVENTORY)
    return _to_dto(execution)


def record_price_sync_execution(
    processed: int = 0,
    synced: int = 0,
    price_changes: int = 0,
    errors: Optional[List[dict]] = None,
    duration_ms: int = 0,
    sync_type: str = 'scheduled',
    error: str = '',
) -> SyncExecutionDTO:
    errors = errors or []
    if error:
        status = ExecutionStatus.FAILED
    elif not errors:
        status = ExecutionStatus.SUCCESS
    else:
        status = ExecutionStatus.PARTIAL

    execution = SyncExecution.objects.create(
        kind=SyncKind.PRICE,
        status=status,
        sync_type=sync_type,
        processed=processed,
        updated=synced,
        failures=len(errors),
        price_changes=price_changes,
        batch_size=processed,
        duration_ms=duration_ms,
        error=error or '',
        error_details=errors,
    )
    _trim_history(SyncKind.PRICE)
    return _to_dto(execution)


# =============================================================================
# Health
# =============================================================================

def is_inventory_sync_overdue(last_run: Optional[datetime], now: Optional[datetime] = None) -> bool:
    """
    Overdue when the last run is older than 1.5x the current interval:
    2 hours Friday to Sunday, 6 hours otherwise (store time).
    """
    if last_run is None:
        return False
    now = now or timezone.now()
    weekday = timezone.localtime(now, _store_tz()).weekday()
    interval = INVENTORY_WEEKEND_INTERVAL if weekday >= 4 else INVENTORY_WEEKDAY_INTERVAL
    return now - last_run > interval * INVENTORY_GRACE_FACTOR


def is_price_sync_overdue(last_run: Optional[datetime], now: Optional[datetime] = None) -> bool:
    if last_run is None:
        return False
    now = now or timezone.now()
    return now - last_run > PRICE_SYNC_MAX_AGE


def _sync_health(kind: str, enabled: bool, now: datetime) -> SyncHealthDTO:
    queryset = SyncExecution.objects.filter(kind=kind).order_by('-created_at', '-id')
    total = queryset.count()
    window = list(queryset[:STATS_WINDOW])

    last_execution = window[0].created_at if window else None
    if window:
        successes = sum(1 for e in window if e.status == ExecutionStatus.SUCCESS)
        success_rate = successes / len(window) * 100
        avg_duration = round(sum(e.duration_ms for e in window) / len(window))
    else:
        success_rate = None
        avg_duration = None

    if kind == SyncKind.INVENTORY:
        overdue = is_inventory_sync_overdue(last_execution, now)
    else:
        overdue = is_price_sync_overdue(last_execution, now)

    return SyncHealthDTO(
        enabled=enabled,
        last_execution=last_execution,
        total_runs=total,
        success_rate=success_rate,
        avg_duration_ms=avg_duration,
        overdue=overdue,
        recent_runs=[_to_dto(e) for e in reversed(window[:RECENT_RUNS])],
    )


def get_scheduler_health(now: Optional[datetime] = None) -> SchedulerHealthDTO:
    now = now or timezone.now()
    inventory = _sync_health(SyncKind.INVENTORY, settings.CJ_INVENTORY_SYNC_ENABLED, now)
    price = _sync_health(SyncKind.PRICE, settings.CJ_PRICE_SYNC_ENABLED, now)

    warnings = []
    if inventory.overdue:
        warnings.append('Inventory sync may be overdue')
    if price.overdue:
        warnings.append('Price sync may be overdue')

    return SchedulerHealthDTO(
        inventory_sync=inventory,
        price_sync=price,
        system=SystemHealthDTO(
            timestamp=now,
            uptime_seconds=int(time.monotonic() - _PROCESS_STARTED),
            warnings=warnings,
        ),
    )


def get_execution_history(kind: str, limit: int = 50) -> List[SyncExecutionDTO]:
    """
    Most recent executions of one kind, oldest first.

    Raises:
        ValueError: unknown kind
    """
    if kind not in SyncKind.values:
        raise ValueError(f"Unknown sync kind: {kind}")
    latest = SyncExecution.objects.filter(kind=kind).order_by('-created_at', '-id')[:limit]
    return [_to_dto(e) for e in reversed(list(latest))]


# =============================================================================
# Text report
# =============================================================================

def _format_time(value: Optional[datetime]) -> str:
    if value is None:
        return 'Never'
    return timezone.localtime(value, _store_tz()).strftime('%Y/%m/%d, %H:%M:%S')


def _format_duration(ms: Optional[int]) -> str:
    if not ms:
        return 'N/A'
    if ms < 1000:
        return f'{ms}ms'
    if ms < 60000:
        return f'{ms / 1000:.1f}s'
    return f'{ms / 60000:.1f}m'


def _format_rate(rate: Optional[float]) -> str:
    return 'N/A' if rate is None else f'{rate:.1f}%'


def _section(title: str, health: SyncHealthDTO, run_line) -> List[str]:
    lines = [
        title,
        '-' * 61,
        f"Status:           {'ENABLED' if health.enabled else 'DISABLED'}",
        f"Last Run:         {_format_time(health.last_execution)}",
        f"Total Runs:       {health.total_runs}",
        f"Success Rate:     {_format_rate(health.success_rate)}",
        f"Avg Duration:     {_format_duration(health.avg_duration_ms)}",
        f"Schedule:         {'OVERDUE' if health.overdue else 'ON SCHEDULE'}",
        '',
        'Recent Runs:',
    ]
    if not health.recent_runs:
        lines.append('  (No runs yet)')
    lines.extend(f'  * {run_line(run)}' for run in health.recent_runs)
    return lines


def generate_scheduler_report(now: Optional[datetime] = None) -> str:
    """Plain-text scheduler report; times are shown in store time."""
    health = get_scheduler_health(now)
    rule = '=' * 61

    lines = [
        f"{settings.STORE_NAME.upper()} SCHEDULER STATUS REPORT",
        f"Generated: {health.system.timestamp.isoformat()}",
        '',
        rule,
        '',
    ]
    lines += _section(
        'INVENTORY SYNC (supplier stock updates)',
        health.inventory_sync,
        lambda r: (
            f"{_format_time(r.timestamp)} - {r.status.upper()} "
            f"(updated: {r.updated}/{r.processed}, duration: {_format_duration(r.duration_ms)})"
        ),
    )
    lines += ['', rule, '']
    lines += _section(
        'PRICE SYNC (supplier cost updates)',
        health.price_sync,
        lambda r: (
            f"{_format_time(r.timestamp)} - {r.status.upper()} "
            f"(synced: {r.updated}, changes: {r.price_changes}, duration: {_format_duration(r.duration_ms)})"
        ),
    )
    lines += [
        '',
        rule,
        '',
        'SYSTEM HEALTH',
        '-' * 61,
        f"Uptime:           {health.system.uptime_seconds / 3600:.1f} hours",
        '',
        'Alerts:',
    ]
    if health.system.warnings:
        lines.extend(f'  WARNING: {w}' for w in health.system.warnings)
    else:
        lines.append('  No warnings')
    lines += ['', rule, '']
    return '\n'.join(lines)
