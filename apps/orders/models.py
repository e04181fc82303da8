"""Models for Orders app."""
from decimal import Decimal
from django.db import models


class OrderStatus(models.TextChoices):
    PENDING = 'pending', 'Pending'
    PAID = 'paid', 'Paid'
    COMPLETED = 'completed', 'Completed'
    FAILED = 'failed', 'Failed'
    CANCELLED = 'cancelled', 'Cancelled'


class Cart(models.Model):
    """
    Saved basket, one per customer.

    `user_id` is the bearer token subject: a local user id or a Supabase
    user id, so it is not a foreign key.
    """
    user_id = models.CharField(max_length=255, unique=True)
    items = models.JSONField(default=list, blank=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"Cart of {self.user_id} ({len(self.items or [])} items)"


class Order(models.Model):
    """
    Customer order. Items are stored as priced at checkout:
    [{"id": "curated-12", "product_id", "name", "price", "quantity", "cj_vid", ...}]
    """
    user_id = models.CharField(max_length=255, blank=True, db_index=True)
    order_number = models.CharField(max_length=50, unique=True)
    items = models.JSONField(default=list)

    subtotal = models.DecimalField(max_digits=12, decimal_places=2)
    shipping = models.DecimalField(max_digits=10, decimal_places=2, default=Decimal('0.00'))
    insurance = models.DecimalField(max_digits=10, decimal_places=2, default=Decimal('0.00'))
    discount = models.DecimalField(max_digits=10, decimal_places=2, default=Decimal('0.00'))
    total = models.DecimalField(max_digits=12, decimal_places=2)
    status = models.CharField(
        max_length=20,
        choices=OrderStatus.choices,
        default=OrderStatus.PENDING,
        db_index=True,
    )

    customer_email = models.EmailField(blank=True)
    customer_name = models.CharField(max_length=255, blank=True)
    shipping_phone = models.CharField(max_length=50, blank=True)
    shipping_address = models.CharField(max_length=500, blank=True)
    shipping_city = models.CharField(max_length=255, blank=True)
    shipping_province = models.CharField(max_length=255, blank=True)
    shipping_postal_code = models.CharField(max_length=20, blank=True)
    shipping_country = models.CharField(max_length=2, default='ZA')
    shipping_method = models.CharField(max_length=255, blank=True)

    payfast_payment_id = models.CharField(max_length=100, blank=True)

    # Supplier relay
    supplier_order_id = models.CharField(max_length=100, blank=True, db_index=True)
    supplier_status = models.CharField(max_length=50, blank=True)
    supplier_error = models.TextField(blank=True)
    supplier_submitted_at = models.DateTimeField(null=True, blank=True)
    tracking_number = models.CharField(max_length=100, blank=True)
    tracking_url = models.URLField(max_length=1000, blank=True)
    carrier = models.CharField(max_length=255, blank=True)

    created_at = models.DateTimeField(auto_now_add=True, db_index=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['-created_at']

    def __str__(self):
        return f"{self.order_number} ({self.status})"
