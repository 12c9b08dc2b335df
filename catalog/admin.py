from django.contrib import admin
from django.utils.html import format_html

from .models import (
    Category,
    CategoryTranslation,
    Product,
    ProductCharacteristic,
    ProductImage,
    ProductTranslation,
)


class CategoryTranslationInline(admin.TabularInline):
    model = CategoryTranslation
    extra = 1
    fields = ("language", "name")


@admin.register(Category)
class CategoryAdmin(admin.ModelAdmin):
    list_display = ("id", "name_display", "parent", "updated_at")
    list_filter = ("parent",)
    search_fields = ("translations__name",)
    readonly_fields = ("created_at", "updated_at")
    inlines = [CategoryTranslationInline]

    def get_queryset(self, request):
        return super().get_queryset(request).prefetch_related("translations")

    def name_display(self, obj):
        return obj.display_name() or "—"

    name_display.short_description = "Название"


class ProductTranslationInline(admin.StackedInline):
    model = ProductTranslation
    extra = 1
    fields = ("language", "name", "description", "price", "currency")


class ProductCharacteristicInline(admin.TabularInline):
    model = ProductCharacteristic
    extra = 1
    fields = ("language", "key", "value")


class ProductImageInline(admin.TabularInline):
    model = ProductImage
    extra = 1
    fields = ("url", "is_main", "sort_order", "preview")
    readonly_fields = ("preview",)

    def preview(self, obj):
        if not obj.url:
            return "—"
        return format_html('<img src="{}" style="max-height: 60px;">', obj.url)

    preview.short_description = "Превью"


@admin.register(Product)
class ProductAdmin(admin.ModelAdmin):
    list_display = ("id", "name_display", "category", "subcategory", "created_at")
    list_filter = ("category",)
    search_fields = ("translations__name", "translations__description")
    readonly_fields = ("id", "created_at", "updated_at")
    inlines = [
        ProductTranslationInline,
        ProductImageInline,
        ProductCharacteristicInline,
    ]
    fieldsets = (
        (None, {"fields": ("id", "category", "subcategory")}),
        ("Публикация", {"fields": ("created_at", "updated_at")}),
    )

    def get_queryset(self, request):
        return super().get_queryset(request).prefetch_related("translations")

    def name_display(self, obj):
        return str(obj)

    name_display.short_description = "Название"
