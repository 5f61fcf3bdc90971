from django.contrib import admin

from .models import AssemblyScan, Bundle, BundleItem


class BundleItemInline(admin.TabularInline):
    model = BundleItem
    extra = 0
    fields = ("phase_order", "product", "expected_count", "scanned_count")
    readonly_fields = ("scanned_count",)


@admin.register(Bundle)
class BundleAdmin(admin.ModelAdmin):
    list_display = ("id", "name", "qr_code", "status", "current_phase_index", "assembly_completed_at")
    list_filter = ("status",)
    search_fields = ("name", "qr_code")
    inlines = [BundleItemInline]


@admin.register(AssemblyScan)
class AssemblyScanAdmin(admin.ModelAdmin):
    list_display = ("id", "bundle", "bundle_item", "unit", "scanned_by", "created_at")
    raw_id_fields = ("bundle", "bundle_item", "unit")
