"""Models for Reviews app."""
from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models


class Review(models.Model):
    """
    Customer review of a purchased product.

    `product_id` is the cart item id of the product (e.g. "curated-12").
    """
    user_id = models.CharField(max_length=255, db_index=True)
    author_name = models.CharField(max_length=255, blank=True)
    product_id = models.CharField(max_length=100, db_index=True)
    order = models.ForeignKey('orders.Order', on_delete=models.SET_NULL, null=True, blank=True, related_name='reviews')
    rating = models.PositiveSmallIntegerField(validators=[MinValueValidator(1), MaxValueValidator(5)])
    title = models.CharField(max_length=255, blank=True)
    comment = models.TextField()
    verified_purchase = models.BooleanField(default=True)
    helpful_count = models.PositiveIntegerField(default=0)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['-created_at']
        constraints = [
            models.UniqueConstraint(fields=['user_id', 'product_id'], name='unique_review_per_user_product'),
        ]

    def __str__(self):
        return f"{self.product_id}: {self.rating}/5 by {self.author_name or self.user_id}"
