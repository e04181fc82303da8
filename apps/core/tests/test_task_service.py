"""
Tests for the task facade and its backends.
"""
import json
from unittest import mock

from django.test import TestCase, override_settings

from apps.core.backends import celery_backend
from apps.core.backends.lambda_backend import LambdaTaskService
from apps.core.backends.local_backend import TASK_HANDLERS, LocalTaskService
from apps.core.task_service import TaskService


class LocalBackendTest(TestCase):

    def test_handlers_registered(self):
        self.assertEqual(
            set(TASK_HANDLERS),
            {'inventory_sync', 'price_sync', 'submit_supplier_order'},
        )

    def test_unknown_task_is_logged_not_raised(self):
        self.assertTrue(LocalTaskService().send_task('nope', {}))

    def test_handler_errors_propagate(self):
        with mock.patch.dict(TASK_HANDLERS, {'boom': mock.Mock(side_effect=RuntimeError('x'))}):
            with self.assertRaises(RuntimeError):
                LocalTaskService().send_task('boom', {})

    @override_settings(TASK_BACKEND='local', CJ_PRICE_SYNC_ENABLED=False)
    def test_manual_price_sync_runs_inline(self):
        with mock.patch('apps.catalog.tasks.execute_price_sync', return_value={
            'status': 'success', 'products_updated': 0,
        }) as execute:
            TaskService.sync_prices(limit=5)
        execute.assert_called_once_with(limit=5, sync_type='manual')


class CeleryBackendTest(TestCase):

    @override_settings(TASK_BACKEND='celery')
    def test_submit_order_is_queued(self):
        task = mock.Mock()
        with mock.patch.object(celery_backend, '_get_celery_task', return_value=task):
            task_id = TaskService.submit_supplier_order(order_id=42)
        task.apply_async.assert_called_once_with(kwargs={'order_id': 42}, task_id=task_id)

    @override_settings(TASK_BACKEND='celery')
    def test_sync_kwargs(self):
        task = mock.Mock()
        with mock.patch.object(celery_backend, '_get_celery_task', return_value=task):
            TaskService.sync_inventory(limit=10, sync_type='manual')
        self.assertEqual(task.apply_async.call_args.kwargs['kwargs'], {'limit': 10, 'sync_type': 'manual'})

    def test_unmapped_task(self):
        with self.assertRaises(ValueError):
            celery_backend._get_celery_task('unknown')


class LambdaBackendTest(TestCase):

    @mock.patch.dict('os.environ', {'TASK_QUEUE_URL': 'https://sqs.test/queue'})
    def test_message_shape(self):
        service = LambdaTaskService()
        service._sqs_client = mock.Mock()
        service._sqs_client.send_message.return_value = {'MessageId': 'm-1'}

        task_id = service.send_task('inventory_sync', {'limit': None, 'sync_type': 'manual'})

        kwargs = service._sqs_client.send_message.call_args.kwargs
        self.assertEqual(kwargs['QueueUrl'], 'https://sqs.test/queue')
        body = json.loads(kwargs['MessageBody'])
        self.assertEqual(body['task_id'], task_id)
        self.assertEqual(body['task_name'], 'inventory_sync')

    @mock.patch.dict('os.environ', {'TASK_QUEUE_URL': 'https://sqs.test/queue'})
    def test_order_relay_attributes_and_delay_cap(self):
        service = LambdaTaskService()
        service._sqs_client = mock.Mock()
        service._sqs_client.send_message.return_value = {'MessageId': 'm-2'}

        service.send_task('submit_supplier_order', {'order_id': 42}, delay_seconds=3600)

        kwargs = service._sqs_client.send_message.call_args.kwargs
        self.assertEqual(kwargs['DelaySeconds'], 900)
        self.assertEqual(kwargs['MessageAttributes']['OrderId']['StringValue'], '42')
        self.assertNotIn('SyncType', kwargs['MessageAttributes'])

    @mock.patch.dict('os.environ', {'TASK_QUEUE_URL': 'https://sqs.test/queue'})
    def test_unknown_task_is_not_queued(self):
        service = LambdaTaskService()
        service._sqs_client = mock.Mock()
        with self.assertRaises(ValueError):
            service.send_task('reindex_everything', {})
        service._sqs_client.send_message.assert_not_called()

    @mock.patch.dict('os.environ', {'TASK_QUEUE_URL': ''})
    def test_missing_queue_url(self):
        with self.assertRaises(RuntimeError):
            LambdaTaskService().send_task('price_sync', {})


class UnknownBackendTest(TestCase):

    @override_settings(TASK_BACKEND='carrier-pigeon')
    def test_rejected(self):
        with self.assertRaises(ValueError):
            TaskService.sync_prices()
