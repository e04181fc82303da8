from django.contrib import admin
from .models import Review


@admin.register(Review)
class ReviewAdmin(admin.ModelAdmin):
    list_display = ('product_id', 'rating', 'author_name', 'verified_purchase', 'created_at')
    list_filter = ('rating', 'verified_purchase')
    search_fields = ('product_id', 'author_name', 'comment')
