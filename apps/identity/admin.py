from django.contrib import admin
from .models import User


@admin.register(User)
class UserAdmin(admin.ModelAdmin):
    list_display = ('email', 'name', 'is_admin', 'is_active', 'date_joined')
    list_filter = ('is_admin', 'is_active')
    search_fields = ('email', 'name', 'phone')
    exclude = ('password', 'reset_token', 'reset_token_expires')
