"""
Lambda Handlers - Entry points for AWS Lambda functions.

This module provides Lambda handlers for:
1. SQS Task Processing - Consumes messages from task queue
2. Django API (via Mangum) - HTTP requests through API Gateway
3. Scheduled Events - EventBridge triggers for the supplier syncs

The handlers use Django's setup to access models and services.
"""

import os
import sys
import json
import logging

# Ensure the project root is in the path for Lambda
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

# Configure Django before importing any models
os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'config.settings')

import django
django.setup()

logger = logging.getLogger(__name__)
logger.setLevel(logging.INFO)


def sqs_task_handler(event, context):
    """
    AWS Lambda handler for SQS task messages.

    Processes messages from the task queue and dispatches
    to the appropriate task handler.

    Event structure:
    {
        "Records": [
            {
                "body": "{\"task_id\": \"...\", \"task_name\": \"...\", \"payload\": {...}}"
            }
        ]
    }
    """
    from apps.core.backends.local_backend import TASK_HANDLERS

    processed = 0
    failed = 0

    for record in event.get('Records', []):
        message = json.loads(record['body'])
        task_id = message.get('task_id', 'unknown')
        task_name = message['task_name']
        payload = message.get('payload', {})

        logger.info(f"Processing task {task_name} (id={task_id})")

        handler = TASK_HANDLERS.get(task_name)
        if handler is None:
            logger.error(f"No handler for task: {task_name}")
            failed += 1
            continue

        try:
            result = handler(**payload)
        except Exception as e:
            # Re-raise so the message goes back to the queue / DLQ
            logger.exception(f"Task {task_name} failed: {e}")
            raise
        logger.info(f"Task {task_name} completed: {result}")
        processed += 1

    return {
        'statusCode': 200,
        'body': json.dumps({
            'processed': processed,
            'failed': failed
        })
    }


def scheduled_inventory_sync(event, context):
    """
    EventBridge scheduled handler: Sync curated inventory.

    Schedule: every 6 hours Mon-Thu, every 2 hours Fri-Sun
    """
    from apps.catalog.tasks import execute_inventory_sync

    logger.info("Running scheduled inventory sync")
    summary = execute_inventory_sync(sync_type='scheduled')

    return {
        'statusCode': 200,
        'body': json.dumps(summary)
    }


def scheduled_price_sync(event, context):
    """
    EventBridge scheduled handler: Sync supplier prices.

    Schedule: daily at 02:00 Africa/Johannesburg
    """
    from apps.catalog.tasks import execute_price_sync

    logger.info("Running scheduled price sync")
    summary = execute_price_sync(sync_type='scheduled')

    return {
        'statusCode': 200,
        'body': json.dumps(summary)
    }


# =============================================================================
# Django API Handler (Mangum)
# =============================================================================

_asgi_handler = None


def api_handler(event, context):
    """
    AWS Lambda handler for HTTP requests via API Gateway.

    Uses Mangum to wrap Django's ASGI application.
    """
    global _asgi_handler

    if _asgi_handler is None:
        from mangum import Mangum
        from config.asgi import application
        _asgi_handler = Mangum(application, lifespan="off")

    return _asgi_handler(event, context)
