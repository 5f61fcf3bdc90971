from django.contrib import admin

from .models import ShopifyProductMapping, ShopifySettings


@admin.register(ShopifySettings)
class ShopifySettingsAdmin(admin.ModelAdmin):
    list_display = ("organization", "enabled", "store_domain", "api_version", "location_id", "updated_at")
    list_filter = ("enabled",)
    search_fields = ("organization__name", "store_domain")


@admin.register(ShopifyProductMapping)
class ShopifyProductMappingAdmin(admin.ModelAdmin):
    list_display = ("product", "shopify_variant_id", "last_sync_status", "last_synced_at")
    list_filter = ("last_sync_status",)
    search_fields = ("product__name", "shopify_product_id", "shopify_variant_id")
    raw_id_fields = ("product",)
    readonly_fields = ("last_synced_at", "last_sync_error")
