"""
TaskService - Abstraction layer for async task execution.

This module provides a platform-agnostic interface for executing background tasks.
The actual backend is determined by the TASK_BACKEND setting.

Usage:
    from apps.core.task_service import TaskService

    # Queue an on-demand inventory sync
    TaskService.sync_inventory(sync_type='manual')

    # Relay a paid order to the supplier
    TaskService.submit_supplier_order(order_id=42)

Environment Configuration:
    TASK_BACKEND=local   # Sync execution (development)
    TASK_BACKEND=lambda  # AWS Lambda + SQS (production)
    TASK_BACKEND=celery  # Celery + Redis
"""

import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, Optional

from django.conf import settings

logger = logging.getLogger(__name__)


class TaskServiceInterface(ABC):
    """
    Abstract interface for async task execution.

    Implementations:
    - LocalTaskService: Sync execution for development/testing
    - LambdaTaskService: AWS Lambda + SQS for production
    - CeleryTaskService: Celery + Redis
    """

    @abstractmethod
    def send_task(
        self,
        task_name: str,
        payload: Dict[str, Any],
        delay_seconds: int = 0,
    ) -> str:
        """
        Queue a task for async execution.

        Args:
            task_name: Identifier for the task handler
            payload: Data to pass to the task
            delay_seconds: Delay before execution (0 = immediate)

        Returns:
            Task ID for tracking
        """
        pass


def _get_backend() -> TaskServiceInterface:
    """Get the configured task backend based on the TASK_BACKEND setting."""
    backend = getattr(settings, 'TASK_BACKEND', 'local')

    if backend == 'local':
        from apps.core.backends.local_backend import LocalTaskService
        return LocalTaskService()
    elif backend == 'lambda':
        from apps.core.backends.lambda_backend import LambdaTaskService
        return LambdaTaskService()
    elif backend == 'celery':
        from apps.core.backends.celery_backend import CeleryTaskService
        return CeleryTaskService()
    else:
        raise ValueError(f"Unknown TASK_BACKEND: {backend}")


class TaskService:
    """
    Facade for sending async tasks.

    This class provides static methods for each task type,
    delegating to the configured backend.
    """

    @staticmethod
    def sync_inventory(limit: Optional[int] = None, sync_type: str = 'manual') -> str:
        """
        Queue a curated inventory sync.

        Used by: Monitoring admin endpoint for on-demand syncs.
        """
        logger.info(f"Queueing inventory_sync task (type={sync_type}, limit={limit})")
        return _get_backend().send_task(
            task_name="inventory_sync",
            payload={"limit": limit, "sync_type": sync_type}
        )

    @staticmethod
    def sync_prices(limit: Optional[int] = None, sync_type: str = 'manual') -> str:
        """
        Queue a supplier price sync.

        Used by: Monitoring admin endpoint for on-demand syncs.
        """
        logger.info(f"Queueing price_sync task (type={sync_type}, limit={limit})")
        return _get_backend().send_task(
            task_name="price_sync",
            payload={"limit": limit, "sync_type": sync_type}
        )

    @staticmethod
    def submit_supplier_order(order_id: int) -> str:
        """
        Queue relaying a paid order to the supplier.

        Used by: Payments app after a COMPLETE notification when
        CJ_AUTO_SUBMIT_ORDERS is on.
        """
        logger.info(f"Queueing submit_supplier_order task for order {order_id}")
        return _get_backend().send_task(
            task_name="submit_supplier_order",
            payload={"order_id": order_id}
        )
