"""
Core app - task dispatch for the store's background work.

TaskService hides where supplier work runs: inventory and price syncs
and the relay of paid orders to the supplier go inline (local), to a
Celery worker, or onto the SQS queue consumed by lambda_handlers.
"""
