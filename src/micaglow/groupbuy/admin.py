from django.contrib import admin

from .models import Batch, BatchProduct, SubGroup


@admin.register(SubGroup)
class SubGroupAdmin(admin.ModelAdmin):
    list_display = ("name", "region", "city", "host", "is_active", "created_at")
    list_filter = ("region", "is_active")
    search_fields = ("name", "region", "city")
    raw_id_fields = ("host",)


class BatchProductInline(admin.TabularInline):
    model = BatchProduct
    extra = 0
    raw_id_fields = ("product",)


@admin.register(Batch)
class BatchAdmin(admin.ModelAdmin):
    list_display = ("name", "kind", "status", "current_vials", "target_vials", "host", "created_at")
    list_filter = ("kind", "status")
    search_fields = ("name",)
    raw_id_fields = ("host", "sub_group")
    inlines = [BatchProductInline]
