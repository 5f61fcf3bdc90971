from django.contrib import admin

from .models import Order, OrderItem


class OrderItemInline(admin.TabularInline):
    model = OrderItem
    extra = 0
    raw_id_fields = ("unit", "product")


@admin.register(Order)
class OrderAdmin(admin.ModelAdmin):
    list_display = ("id", "order_number", "source", "customer", "payment_status", "fulfillment_status", "created_at")
    list_filter = ("source", "payment_status", "delivery_status", "fulfillment_status", "created_at")
    search_fields = ("order_number", "shopify_order_number", "customer__name", "customer__phone")
    date_hierarchy = "created_at"
    inlines = [OrderItemInline]


@admin.register(OrderItem)
class OrderItemAdmin(admin.ModelAdmin):
    list_display = ("id", "order", "product", "qr_code", "price", "fulfillment_status")
    list_filter = ("fulfillment_status",)
    search_fields = ("qr_code", "order__order_number")
