"""
Celery Task Backend - Async execution via Celery + Redis.

Usage:
    Set TASK_BACKEND=celery in your .env file.
    Requires Redis and Celery worker running.
"""

import uuid
import logging
from typing import Any, Dict
from apps.core.task_service import TaskServiceInterface

logger = logging.getLogger(__name__)


# Map task names to Celery task functions
def _get_celery_task(task_name: str):
    """Get the Celery task function for a task name."""
    task_map = {
        "inventory_sync": "apps.catalog.tasks.run_inventory_sync",
        "price_sync": "apps.catalog.tasks.run_price_sync",
        "submit_supplier_order": "apps.orders.tasks.submit_order_to_supplier_task",
    }

    task_path = task_map.get(task_name)
    if not task_path:
        raise ValueError(f"No Celery task mapped for: {task_name}")

    from celery import current_app
    return current_app.tasks.get(task_path)


class CeleryTaskService(TaskServiceInterface):
    """
    Execute tasks via Celery + Redis.

    This backend delegates to the Celery tasks also used by beat.
    """

    def send_task(
        self,
        task_name: str,
        payload: Dict[str, Any],
        delay_seconds: int = 0,
    ) -> str:
        """Queue task via Celery."""
        task_id = str(uuid.uuid4())

        logger.info(f"[CELERY] Queueing task {task_name} (id={task_id})")

        task = _get_celery_task(task_name)

        if task is None:
            logger.error(f"[CELERY] Task not found: {task_name}")
            raise ValueError(f"Celery task not found: {task_name}")

        if task_name in ("inventory_sync", "price_sync"):
            kwargs = {
                "limit": payload.get("limit"),
                "sync_type": payload.get("sync_type", "manual"),
            }
        elif task_name == "submit_supplier_order":
            kwargs = {"order_id": payload.get("order_id")}
        else:
            kwargs = {}

        if delay_seconds > 0:
            task.apply_async(kwargs=kwargs, countdown=delay_seconds, task_id=task_id)
        else:
            task.apply_async(kwargs=kwargs, task_id=task_id)

        return task_id
