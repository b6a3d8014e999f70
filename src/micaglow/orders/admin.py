from django.contrib import admin

from .models import Order, OrderItem


class OrderItemInline(admin.TabularInline):
    model = OrderItem
    extra = 0
    raw_id_fields = ("product",)
    readonly_fields = ("unit_price", "total_price")


@admin.register(Order)
class OrderAdmin(admin.ModelAdmin):
    list_display = ("order_code", "kind", "customer_name", "total_amount", "status", "payment_status", "created_at")
    list_filter = ("kind", "status", "payment_status")
    search_fields = ("order_code", "customer_name", "whatsapp_number")
    raw_id_fields = ("profile", "batch", "sub_group")
    readonly_fields = ("order_code", "subtotal", "shipping_cost", "total_amount", "created_at", "updated_at")
    inlines = [OrderItemInline]
