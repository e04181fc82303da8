from django.contrib import admin
from .models import CuratedProduct, InventorySyncRun, LocalProduct, ProductInventory


class ProductInventoryInline(admin.TabularInline):
    model = ProductInventory
    extra = 0
    readonly_fields = ('updated_at',)


@admin.register(CuratedProduct)
class CuratedProductAdmin(admin.ModelAdmin):
    list_display = ('product_name', 'cj_pid', 'category', 'cj_cost_price', 'custom_price', 'stock_quantity', 'is_active')
    list_filter = ('is_active', 'category')
    search_fields = ('product_name', 'cj_pid', 'cj_vid')
    inlines = [ProductInventoryInline]


@admin.register(InventorySyncRun)
class InventorySyncRunAdmin(admin.ModelAdmin):
    list_display = ('id', 'sync_type', 'status', 'started_at', 'completed_at', 'products_updated', 'products_failed')
    list_filter = ('status', 'sync_type')


@admin.register(LocalProduct)
class LocalProductAdmin(admin.ModelAdmin):
    list_display = ('name', 'sku', 'category', 'price', 'stock_quantity', 'is_featured', 'is_active')
    list_filter = ('is_active', 'is_featured', 'category')
    search_fields = ('name', 'sku')
