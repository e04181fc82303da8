import uuid
from django.db import models
from django.contrib.auth.models import AbstractUser


class User(AbstractUser):
    """
    Store customer account.

    Customers sign in with their email address. `is_admin` grants access to
    the store management endpoints and is independent of Django's own
    is_staff / is_superuser flags, which only govern the Django admin site.
    """
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    email = models.EmailField(unique=True)
    name = models.CharField(max_length=255, blank=True)
    phone = models.CharField(max_length=20, blank=True)
    is_admin = models.BooleanField(default=False)

    # Password reset
    reset_token = models.CharField(max_length=128, blank=True, db_index=True)
    reset_token_expires = models.DateTimeField(null=True, blank=True)

    USERNAME_FIELD = 'email'
    REQUIRED_FIELDS = ['username']

    class Meta:
        ordering = ['-date_joined']

    def __str__(self):
        return self.email or self.username
