"""
Local Task Backend - Synchronous execution for development.

This backend executes tasks immediately in the same process.
No Redis, SQS, or external dependencies required.

Usage:
    Set TASK_BACKEND=local in your .env file.
"""

import uuid
import logging
from typing import Any, Dict
from apps.core.task_service import TaskServiceInterface

logger = logging.getLogger(__name__)


# Task handler registry - maps task names to handler functions
TASK_HANDLERS = {}


def register_handler(task_name: str):
    """Decorator to register a task handler."""
    def decorator(func):
        TASK_HANDLERS[task_name] = func
        return func
    return decorator


class LocalTaskService(TaskServiceInterface):
    """
    Execute tasks synchronously in the same process.

    This is ideal for:
    - Local development without Docker/Redis
    - Unit testing with immediate execution

    Note: Tasks run in the same request cycle, so they block
    the response. A full inventory sync can take minutes.
    """

    def send_task(
        self,
        task_name: str,
        payload: Dict[str, Any],
        delay_seconds: int = 0,
    ) -> str:
        """Execute task synchronously."""
        task_id = str(uuid.uuid4())

        logger.info(f"[LOCAL] Executing task {task_name} (id={task_id})")

        if delay_seconds > 0:
            logger.warning(
                f"[LOCAL] delay_seconds={delay_seconds} ignored in local backend"
            )

        handler = TASK_HANDLERS.get(task_name)
        if handler:
            try:
                result = handler(**payload)
                logger.info(f"[LOCAL] Task {task_name} completed: {result}")
            except Exception as e:
                logger.exception(f"[LOCAL] Task {task_name} failed: {e}")
                raise
        else:
            logger.warning(f"[LOCAL] No handler registered for task: {task_name}")

        return task_id


# =============================================================================
# Task Handlers - shared by the local backend and the SQS Lambda consumer
# =============================================================================

@register_handler("inventory_sync")
def handle_inventory_sync(limit=None, sync_type: str = 'manual'):
    """Run a monitored inventory sync synchronously."""
    from apps.catalog.tasks import execute_inventory_sync
    summary = execute_inventory_sync(limit=limit, sync_type=sync_type)
    return f"Inventory sync {summary['status']}: {summary['products_updated']} updated"


@register_handler("price_sync")
def handle_price_sync(limit=None, sync_type: str = 'manual'):
    """Run a monitored price sync synchronously."""
    from apps.catalog.tasks import execute_price_sync
    summary = execute_price_sync(limit=limit, sync_type=sync_type)
    return f"Price sync {summary['status']}: {summary['products_updated']} updated"


@register_handler("submit_supplier_order")
def handle_submit_supplier_order(order_id: int):
    """Relay one paid order to the supplier."""
    from apps.orders import services
    result = services.submit_order_to_supplier(order_id)
    return f"Order {order_id} submitted: {result.supplier_order_id}"
