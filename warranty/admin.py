from django.contrib import admin

from .models import CustomerScan, OwnershipTransfer, WarrantyClaim


@admin.register(WarrantyClaim)
class WarrantyClaimAdmin(admin.ModelAdmin):
    list_display = ("id", "unit", "customer_id", "claim_type", "status", "submitted_at")
    list_filter = ("status", "claim_type")
    search_fields = ("unit__qr_code", "customer_id", "title")
    raw_id_fields = ("unit",)


@admin.register(OwnershipTransfer)
class OwnershipTransferAdmin(admin.ModelAdmin):
    list_display = ("unit", "from_owner_id", "to_owner_id", "transferred_at")
    search_fields = ("unit__qr_code", "from_owner_id", "to_owner_id")
    raw_id_fields = ("unit",)


@admin.register(CustomerScan)
class CustomerScanAdmin(admin.ModelAdmin):
    list_display = ("qr_code", "unit", "customer_id", "scanned_at")
    search_fields = ("qr_code", "customer_id")
    raw_id_fields = ("unit",)
