from django.contrib import admin
from django.utils.html import format_html

from .models import GalleryItem, GalleryItemTranslation


class GalleryItemTranslationInline(admin.StackedInline):
    model = GalleryItemTranslation
    extra = 1
    fields = ("language", "title", "description")


@admin.register(GalleryItem)
class GalleryItemAdmin(admin.ModelAdmin):
    list_display = ("id", "title_display", "category", "preview", "created_at")
    list_filter = ("category",)
    search_fields = ("translations__title",)
    readonly_fields = ("created_at", "updated_at", "preview")
    inlines = [GalleryItemTranslationInline]

    def get_queryset(self, request):
        return super().get_queryset(request).prefetch_related("translations")

    def title_display(self, obj):
        return str(obj)

    title_display.short_description = "Заголовок"

    def preview(self, obj):
        if not obj.thumbnail:
            return "—"
        return format_html(
            '<img src="{}" style="max-height: 60px;">',
            obj.thumbnail,
        )

    preview.short_description = "Превью"
