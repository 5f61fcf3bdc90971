from django.contrib import admin

from .models import Delivery, DeliveryHistory, DeliveryResolution


class DeliveryHistoryInline(admin.TabularInline):
    model = DeliveryHistory
    extra = 0
    readonly_fields = ("from_status", "to_status", "notes", "changed_by", "created_at")


@admin.register(Delivery)
class DeliveryAdmin(admin.ModelAdmin):
    list_display = ("id", "order", "shipper_name", "tracking_number", "status", "delivered_at", "created_at")
    list_filter = ("status", "failure_category", "created_at")
    search_fields = ("order__order_number", "tracking_number", "shipper_name")
    inlines = [DeliveryHistoryInline]


@admin.register(DeliveryResolution)
class DeliveryResolutionAdmin(admin.ModelAdmin):
    list_display = ("id", "delivery", "resolution_type", "resolution_status", "target_storage", "completed_at")
    list_filter = ("resolution_type", "resolution_status")
