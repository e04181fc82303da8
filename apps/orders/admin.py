from django.contrib import admin
from .models import Cart, Order


@admin.register(Order)
class OrderAdmin(admin.ModelAdmin):
    list_display = ('order_number', 'customer_email', 'total', 'status', 'supplier_order_id', 'tracking_number', 'created_at')
    list_filter = ('status', 'shipping_country')
    search_fields = ('order_number', 'customer_email', 'supplier_order_id', 'tracking_number')
    readonly_fields = ('created_at', 'updated_at', 'supplier_submitted_at')


@admin.register(Cart)
class CartAdmin(admin.ModelAdmin):
    list_display = ('user_id', 'updated_at')
    search_fields = ('user_id',)
