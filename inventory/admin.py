"""Admin registrations for inventory app."""

from django.contrib import admin

from .models import InventoryItem, Shipment, ShipmentItem, Storage


@admin.register(Storage)
class StorageAdmin(admin.ModelAdmin):
    list_display = ("id", "name", "location", "capacity", "used_capacity", "is_active")
    search_fields = ("name", "location")


class ShipmentItemInline(admin.TabularInline):
    model = ShipmentItem
    extra = 0
    fields = ("qr_code", "product", "status", "storage", "scanned_at")
    readonly_fields = fields
    show_change_link = True


@admin.register(Shipment)
class ShipmentAdmin(admin.ModelAdmin):
    list_display = ("id", "receipt_number", "receipt_date", "supplier_name", "status", "created_at")
    list_filter = ("status",)
    search_fields = ("receipt_number", "supplier_name")
    inlines = [ShipmentItemInline]


@admin.register(ShipmentItem)
class ShipmentItemAdmin(admin.ModelAdmin):
    list_display = ("id", "qr_code", "product", "status", "warranty_status", "storage", "scanned_at")
    list_filter = ("status", "warranty_status")
    search_fields = ("qr_code", "product__name", "current_owner_id")
    raw_id_fields = ("shipment", "product", "storage")
    # Status moves through inventory.transitions only
    readonly_fields = ("status",)


@admin.register(InventoryItem)
class InventoryItemAdmin(admin.ModelAdmin):
    list_display = ("id", "qr_code", "product", "status", "source_type", "bundle", "created_at")
    list_filter = ("status", "source_type")
    search_fields = ("qr_code", "product__name")


# EOF
