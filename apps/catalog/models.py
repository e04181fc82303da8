"""Models for Catalog app."""
from decimal import Decimal
from django.db import models


class CuratedProduct(models.Model):
    """
    Supplier product selected for the storefront.

    `cj_cost_price` is the supplier price in USD. `suggested_price` is the
    computed retail price in ZAR; `custom_price` is what the store charges
    and may be overridden by an admin. Price syncs reset both to the
    recomputed retail price.
    """
    cj_pid = models.CharField(max_length=100, unique=True)
    cj_vid = models.CharField(max_length=100, blank=True)

    product_name = models.CharField(max_length=500)
    original_cj_title = models.CharField(max_length=500, blank=True)
    seo_title = models.CharField(max_length=500, blank=True)
    product_description = models.TextField(blank=True)
    product_image = models.URLField(max_length=1000, blank=True)
    category = models.CharField(max_length=255, blank=True, db_index=True)

    cj_cost_price = models.DecimalField(max_digits=12, decimal_places=4)
    suggested_price = models.DecimalField(max_digits=10, decimal_places=2)
    custom_price = models.DecimalField(max_digits=10, decimal_places=2, null=True, blank=True)

    stock_quantity = models.PositiveIntegerField(default=0)
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['-created_at']

    def __str__(self):
        return f"{self.product_name} ({self.cj_pid})"

    @property
    def display_price(self) -> Decimal:
        return self.custom_price if self.custom_price is not None else self.suggested_price


class ProductInventory(models.Model):
    """Stock for one curated product in one supplier warehouse."""
    product = models.ForeignKey(CuratedProduct, on_delete=models.CASCADE, related_name='inventories')
    cj_pid = models.CharField(max_length=100)
    cj_vid = models.CharField(max_length=100)
    warehouse_id = models.CharField(max_length=100)
    warehouse_name = models.CharField(max_length=255, blank=True)
    country_code = models.CharField(max_length=10, blank=True)
    total_inventory = models.IntegerField(default=0)
    cj_inventory = models.IntegerField(default=0)
    factory_inventory = models.IntegerField(default=0)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['product_id', 'warehouse_id']
        verbose_name_plural = 'product inventories'

    def __str__(self):
        return f"{self.cj_pid} @ {self.warehouse_name or self.warehouse_id}: {self.cj_inventory}"


class InventorySyncStatus(models.TextChoices):
    RUNNING = 'running', 'Running'
    COMPLETED = 'completed', 'Completed'
    FAILED = 'failed', 'Failed'


class InventorySyncRun(models.Model):
    """History row for one inventory sync."""
    sync_type = models.CharField(max_length=20, default='scheduled')
    status = models.CharField(
        max_length=20,
        choices=InventorySyncStatus.choices,
        default=InventorySyncStatus.RUNNING,
    )
    started_at = models.DateTimeField(auto_now_add=True)
    completed_at = models.DateTimeField(null=True, blank=True)
    products_updated = models.PositiveIntegerField(default=0)
    products_failed = models.PositiveIntegerField(default=0)
    error_message = models.TextField(blank=True)

    class Meta:
        ordering = ['-started_at']

    def __str__(self):
        return f"Inventory sync {self.id} ({self.status})"


class LocalProduct(models.Model):
    """Item stocked and shipped by the store itself."""
    name = models.CharField(max_length=500)
    description = models.TextField(blank=True)
    price = models.DecimalField(max_digits=10, decimal_places=2)
    compare_at_price = models.DecimalField(max_digits=10, decimal_places=2, null=True, blank=True)
    stock_quantity = models.IntegerField(default=0)
    sku = models.CharField(max_length=100, blank=True, db_index=True)
    category = models.CharField(max_length=255, blank=True, db_index=True)
    tags = models.JSONField(default=list, blank=True)
    images = models.JSONField(default=list, blank=True)
    weight_kg = models.DecimalField(max_digits=8, decimal_places=3, null=True, blank=True)
    dimensions = models.JSONField(default=dict, blank=True)
    is_featured = models.BooleanField(default=False)
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['-is_featured', '-created_at']

    def __str__(self):
        return self.name
