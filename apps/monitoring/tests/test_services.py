"""
Tests for sync execution history, health and the text report.
"""
from datetime import datetime, timedelta, timezone as dt_timezone
from unittest import mock

from django.test import TestCase, override_settings

from apps.monitoring import services
from apps.monitoring.models import ExecutionStatus, SyncExecution, SyncKind


# 2025-03-05 is a Wednesday, 2025-03-08 a Saturday (store time is UTC+2)
WEDNESDAY_NOON = datetime(2025, 3, 5, 10, 0, tzinfo=dt_timezone.utc)
SATURDAY_NOON = datetime(2025, 3, 8, 10, 0, tzinfo=dt_timezone.utc)


def test_inventory_overdue_uses_weekday_interval():
    assert not services.is_inventory_sync_overdue(WEDNESDAY_NOON - timedelta(hours=8), WEDNESDAY_NOON)
    assert services.is_inventory_sync_overdue(WEDNESDAY_NOON - timedelta(hours=10), WEDNESDAY_NOON)


def test_inventory_overdue_uses_weekend_interval():
    assert not services.is_inventory_sync_overdue(SATURDAY_NOON - timedelta(hours=2), SATURDAY_NOON)
    assert services.is_inventory_sync_overdue(SATURDAY_NOON - timedelta(hours=4), SATURDAY_NOON)


def test_never_run_is_not_overdue():
    assert not services.is_inventory_sync_overdue(None)
    assert not services.is_price_sync_overdue(None)


def test_price_overdue_after_26_hours():
    assert not services.is_price_sync_overdue(WEDNESDAY_NOON - timedelta(hours=25), WEDNESDAY_NOON)
    assert services.is_price_sync_overdue(WEDNESDAY_NOON - timedelta(hours=27), WEDNESDAY_NOON)


class RecordingTest(TestCase):

    def test_status_from_failures(self):
        self.assertEqual(services.record_inventory_sync_execution(processed=3, updated=3).status, ExecutionStatus.SUCCESS)
        self.assertEqual(services.record_inventory_sync_execution(processed=3, failures=1).status, ExecutionStatus.PARTIAL)
        self.assertEqual(services.record_inventory_sync_execution(error='boom').status, ExecutionStatus.FAILED)
        self.assertEqual(
            services.record_price_sync_execution(errors=[{'product_id': 1, 'reason': 'x'}]).status,
            ExecutionStatus.PARTIAL,
        )

    def test_history_is_capped(self):
        with mock.patch.object(services, 'MAX_HISTORY_RECORDS', 3):
            for i in range(5):
                services.record_price_sync_execution(processed=i)
        self.assertEqual(SyncExecution.objects.filter(kind=SyncKind.PRICE).count(), 3)

    def test_history_oldest_first(self):
        for i in range(3):
            services.record_inventory_sync_execution(processed=i)
        history = services.get_execution_history('inventory', limit=2)
        self.assertEqual([h.processed for h in history], [1, 2])

    def test_unknown_kind(self):
        with self.assertRaises(ValueError):
            services.get_execution_history('shipping')


class HealthTest(TestCase):

    def test_empty_history(self):
        health = services.get_scheduler_health()
        self.assertIsNone(health.inventory_sync.success_rate)
        self.assertEqual(health.inventory_sync.total_runs, 0)
        self.assertEqual(health.system.warnings, [])

    def test_success_rate_and_overdue_warning(self):
        services.record_inventory_sync_execution(processed=1, updated=1, duration_ms=100)
        services.record_inventory_sync_execution(processed=1, failures=1, duration_ms=300)
        SyncExecution.objects.update(created_at=WEDNESDAY_NOON - timedelta(hours=12))

        health = services.get_scheduler_health(now=WEDNESDAY_NOON)
        self.assertEqual(health.inventory_sync.success_rate, 50.0)
        self.assertEqual(health.inventory_sync.avg_duration_ms, 200)
        self.assertTrue(health.inventory_sync.overdue)
        self.assertIn('Inventory sync may be overdue', health.system.warnings)

    @override_settings(STORE_NAME='SnuggleUp', CJ_PRICE_SYNC_ENABLED=False)
    def test_report(self):
        services.record_inventory_sync_execution(processed=4, updated=3, failures=1, duration_ms=1500)
        report = services.generate_scheduler_report()
        self.assertIn('SNUGGLEUP SCHEDULER STATUS REPORT', report)
        self.assertIn('PARTIAL (updated: 3/4, duration: 1.5s)', report)
        self.assertIn('Status:           DISABLED', report)
        self.assertIn('(No runs yet)', report)
        self.assertIn('No warnings', report)
