"""Models for Siteconfig app."""
from django.db import models


class SiteSetting(models.Model):
    """
    Admin-editable runtime setting stored as text.

    Known keys: usd_to_zar, price_markup, shipping_fallback_enabled.
    """
    key = models.CharField(max_length=100, unique=True)
    value = models.TextField()
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['key']

    def __str__(self):
        return f"{self.key}={self.value}"
