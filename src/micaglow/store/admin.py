from django.contrib import admin

from .models import Product


@admin.register(Product)
class ProductAdmin(admin.ModelAdmin):
    list_display = ("name", "category", "price_per_vial", "price_per_box", "vials_per_box", "is_active")
    list_filter = ("category", "is_active")
    search_fields = ("name", "description")
