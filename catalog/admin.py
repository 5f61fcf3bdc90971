"""Admin registration for catalog models."""

from django.contrib import admin

from .models import Product


class PackProductInline(admin.TabularInline):
    model = Product
    fk_name = "base_product"
    extra = 0
    fields = ("name", "pack_size", "price", "is_active")
    readonly_fields = ("name", "pack_size")


@admin.register(Product)
class ProductAdmin(admin.ModelAdmin):
    list_display = ("name", "brand", "model", "product_type", "price", "is_pack_product", "is_active")
    search_fields = ("name", "brand", "model")
    list_filter = ("product_type", "is_pack_product", "is_active", "organization")
    raw_id_fields = ("base_product",)
    inlines = [PackProductInline]
