"""
Lambda Task Backend - supplier work queued on SQS.

Inventory syncs, price syncs and order relays are serialised into one
SQS message each; lambda_handlers.sqs_task_handler picks them up and runs
the handler registered under the same name in the local backend.

Set TASK_BACKEND=lambda. The queue comes from TASK_QUEUE_URL and the
region from AWS_REGION (default: af-south-1).
"""

import os
import json
import uuid
import logging
from typing import Any, Dict

from apps.core.task_service import TaskServiceInterface

logger = logging.getLogger(__name__)

SQS_MAX_DELAY_SECONDS = 900


def _string_attribute(value) -> Dict[str, str]:
    return {'DataType': 'String', 'StringValue': str(value)}


class LambdaTaskService(TaskServiceInterface):
    """
    Queue supplier tasks for the SQS consumer Lambda.

    Task names are checked against the handler registry before anything
    is sent, so a misspelt task fails in the caller instead of landing in
    the dead-letter queue.
    """

    def __init__(self):
        self._sqs_client = None
        self._queue_url = os.getenv('TASK_QUEUE_URL')

        if not self._queue_url:
            logger.warning("[SQS] TASK_QUEUE_URL not set; supplier tasks cannot be queued")

    @property
    def sqs_client(self):
        if self._sqs_client is None:
            import boto3
            self._sqs_client = boto3.client(
                'sqs',
                region_name=os.getenv('AWS_REGION', 'af-south-1')
            )
        return self._sqs_client

    def _attributes(self, task_name: str, task_id: str, payload: Dict[str, Any]) -> Dict[str, Dict[str, str]]:
        attributes = {
            'TaskName': _string_attribute(task_name),
            'TaskId': _string_attribute(task_id),
        }
        if payload.get('sync_type'):
            attributes['SyncType'] = _string_attribute(payload['sync_type'])
        if payload.get('order_id') is not None:
            attributes['OrderId'] = _string_attribute(payload['order_id'])
        return attributes

    def send_task(
        self,
        task_name: str,
        payload: Dict[str, Any],
        delay_seconds: int = 0,
    ) -> str:
        """
        Raises:
            RuntimeError: no queue configured
            ValueError: no handler registered for task_name
        """
        if not self._queue_url:
            raise RuntimeError(f"TASK_QUEUE_URL is not set; cannot queue {task_name}")

        from apps.core.backends.local_backend import TASK_HANDLERS
        if task_name not in TASK_HANDLERS:
            raise ValueError(f"Unknown task: {task_name}")

        task_id = str(uuid.uuid4())
        body = json.dumps({
            "task_id": task_id,
            "task_name": task_name,
            "payload": payload,
        })

        try:
            response = self.sqs_client.send_message(
                QueueUrl=self._queue_url,
                MessageBody=body,
                DelaySeconds=max(0, min(delay_seconds, SQS_MAX_DELAY_SECONDS)),
                MessageAttributes=self._attributes(task_name, task_id, payload),
            )
        except Exception:
            logger.exception("[SQS] Could not queue %s (id=%s)", task_name, task_id)
            raise

        logger.info("[SQS] Queued %s (id=%s, message=%s)", task_name, task_id, response['MessageId'])
        return task_id
