from django.contrib import admin

from .models import ScanningSession


@admin.register(ScanningSession)
class ScanningSessionAdmin(admin.ModelAdmin):
    list_display = ("id", "user", "device_count", "last_updated", "last_ping")
    search_fields = ("user__username", "user__email")
    readonly_fields = ("cart_items", "customer_info", "devices")
