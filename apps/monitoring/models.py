"""Models for Monitoring app."""
from django.db import models


class SyncKind(models.TextChoices):
    INVENTORY = 'inventory', 'Inventory sync'
    PRICE = 'price', 'Price sync'


class ExecutionStatus(models.TextChoices):
    SUCCESS = 'success', 'Success'
    PARTIAL = 'partial', 'Partial'
    FAILED = 'failed', 'Failed'


class SyncExecution(models.Model):
    """
    One run of a supplier sync job, as seen by the scheduler.
    Only the most recent runs per kind are kept.
    """
    kind = models.CharField(max_length=20, choices=SyncKind.choices, db_index=True)
    status = models.CharField(max_length=20, choices=ExecutionStatus.choices)
    sync_type = models.CharField(max_length=20, default='scheduled')

    processed = models.PositiveIntegerField(default=0)
    updated = models.PositiveIntegerField(default=0)  # inventory: updated, price: repriced
    failures = models.PositiveIntegerField(default=0)
    price_changes = models.PositiveIntegerField(default=0)
    batch_size = models.PositiveIntegerField(default=0)
    duration_ms = models.PositiveIntegerField(default=0)

    error = models.TextField(blank=True)
    error_details = models.JSONField(default=list, blank=True)
    created_at = models.DateTimeField(auto_now_add=True, db_index=True)

    class Meta:
        ordering = ['-created_at', '-id']

    def __str__(self):
        return f"{self.kind} sync {self.status} at {self.created_at:%Y-%m-%d %H:%M}"
