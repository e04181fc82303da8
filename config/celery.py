"""
Celery configuration for the Dropship Store API.
"""
import os
from celery import Celery
from celery.schedules import crontab

os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'config.settings')

app = Celery('config')
app.config_from_object('django.conf:settings', namespace='CELERY')
app.autodiscover_tasks()

# Celery Beat Schedule
# Inventory moves faster over the weekend, so it is polled more often Fri-Sun.
app.conf.beat_schedule = {
    'inventory-sync-weekdays': {
        'task': 'apps.catalog.tasks.run_inventory_sync',
        'schedule': crontab(minute='0', hour='*/6', day_of_week='mon-thu'),
    },
    'inventory-sync-weekend': {
        'task': 'apps.catalog.tasks.run_inventory_sync',
        'schedule': crontab(minute='0', hour='*/2', day_of_week='fri,sat,sun'),
    },
    'price-sync-daily': {
        'task': 'apps.catalog.tasks.run_price_sync',
        'schedule': crontab(minute='0', hour='2'),
    },
}
