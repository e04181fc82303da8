from django.contrib import admin
from .models import SyncExecution


@admin.register(SyncExecution)
class SyncExecutionAdmin(admin.ModelAdmin):
    list_display = ('kind', 'status', 'sync_type', 'processed', 'updated', 'failures', 'duration_ms', 'created_at')
    list_filter = ('kind', 'status', 'sync_type')
    readonly_fields = ('created_at',)
