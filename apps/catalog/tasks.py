"""
Celery tasks for Catalog app.

Beat runs both syncs (see config/celery.py). The execute_* functions hold
the monitored run so the local backend and the Lambda scheduled handlers
can call them without Celery.
"""
import logging
import time
from typing import Optional

from celery import shared_task
from django.conf import settings

from apps.monitoring.services import (
    record_inventory_sync_execution, record_price_sync_execution,
)

from .inventory_sync import sync_curated_inventory
from .price_sync import sync_product_prices

logger = logging.getLogger(__name__)


def _elapsed_ms(started: float) -> int:
    return int((time.monotonic() - started) * 1000)


def _change_summary(change) -> dict:
    return {
        'product_id': change.product_id,
        'name': change.name,
        'old_cost_usd': str(change.old_cost_usd),
        'new_cost_usd': str(change.new_cost_usd),
        'new_price_zar': str(change.new_price_zar),
        'percent_change': str(change.percent_change),
        'increased': change.increased,
    }


def execute_inventory_sync(limit: Optional[int] = None, sync_type: str = 'scheduled') -> dict:
    """
    Run an inventory sync and record it with the scheduler monitor.
    Scheduled runs are skipped while CJ_INVENTORY_SYNC_ENABLED is off.
    """
    if sync_type == 'scheduled' and not settings.CJ_INVENTORY_SYNC_ENABLED:
        logger.info("Inventory sync disabled; skipping scheduled run")
        return {'status': 'skipped', 'processed': 0, 'products_updated': 0}

    batch_size = limit if limit is not None else settings.CJ_INVENTORY_SYNC_BATCH_SIZE
    started = time.monotonic()

    try:
        result = sync_curated_inventory(limit=batch_size, sync_type=sync_type)
    except Exception as e:
        record_inventory_sync_execution(
            batch_size=batch_size or 0,
            duration_ms=_elapsed_ms(started),
            sync_type=sync_type,
            error=str(e),
        )
        raise

    execution = record_inventory_sync_execution(
        processed=result.processed,
        updated=result.updated_count,
        failures=result.failed_count,
        duration_ms=_elapsed_ms(started),
        batch_size=batch_size or 0,
        sync_type=sync_type,
    )
    logger.info(
        "Inventory sync %s: %d/%d updated, %d failed in %dms",
        execution.status, result.updated_count, result.processed,
        result.failed_count, execution.duration_ms,
    )
    return {
        'status': execution.status,
        'run_id': result.run_id,
        'processed': result.processed,
        'products_updated': result.updated_count,
        'failures': result.failed_count,
        'duration_ms': execution.duration_ms,
    }


def execute_price_sync(limit: Optional[int] = None, sync_type: str = 'scheduled') -> dict:
    """
    Run a price sync and record it with the scheduler monitor.
    Scheduled runs are skipped while CJ_PRICE_SYNC_ENABLED is off.
    """
    if sync_type == 'scheduled' and not settings.CJ_PRICE_SYNC_ENABLED:
        logger.info("Price sync disabled; skipping scheduled run")
        return {'status': 'skipped', 'processed': 0, 'products_updated': 0}

    limit = limit if limit is not None else settings.CJ_PRICE_SYNC_LIMIT
    started = time.monotonic()

    try:
        result = sync_product_prices(limit=limit, sync_type=sync_type)
    except Exception as e:
        record_price_sync_execution(
            duration_ms=_elapsed_ms(started), sync_type=sync_type, error=str(e),
        )
        raise

    errors = [
        {'product_id': err.product_id, 'name': err.name, 'reason': err.reason}
        for err in result.errors
    ]
    execution = record_price_sync_execution(
        processed=result.processed,
        synced=result.synced,
        price_changes=len(result.changes),
        errors=errors,
        duration_ms=_elapsed_ms(started),
        sync_type=sync_type,
    )
    return {
        'status': execution.status,
        'processed': result.processed,
        'products_updated': result.synced,
        'price_changes': [_change_summary(c) for c in result.changes],
        'errors': errors,
        'duration_ms': execution.duration_ms,
    }


@shared_task
def run_inventory_sync(limit=None, sync_type='scheduled'):
    """Beat / worker entry point for the inventory sync."""
    return execute_inventory_sync(limit=limit, sync_type=sync_type)


@shared_task
def run_price_sync(limit=None, sync_type='scheduled'):
    """Beat / worker entry point for the price sync."""
    return execute_price_sync(limit=limit, sync_type=sync_type)
