"""
Админка заказов.
"""
from django.contrib import admin
from django.utils.html import format_html

from notifications.messages import currency_for_language, format_currency

from .models import Order, OrderItem


class OrderItemInline(admin.TabularInline):
    model = OrderItem
    extra = 0
    readonly_fields = (
        "product_id",
        "product_name",
        "price",
        "quantity",
        "line_total_display",
    )
    fields = readonly_fields
    can_delete = False

    def line_total_display(self, obj):
        return format_currency(
            obj.line_total,
            currency_for_language(obj.order.language),
        )

    line_total_display.short_description = "Сумма"


@admin.register(Order)
class OrderAdmin(admin.ModelAdmin):
    list_display = (
        "id",
        "created_at",
        "name",
        "phone",
        "status",
        "language",
        "total_display",
    )
    list_filter = ("status", "language", "created_at")
    search_fields = ("name", "email", "phone", "id")
    readonly_fields = ("total_cost", "language", "created_at", "updated_at")
    inlines = [OrderItemInline]
    fieldsets = (
        (None, {"fields": ("status", "total_cost", "language")}),
        ("Покупатель", {"fields": ("name", "email", "phone")}),
        ("Прочее", {"fields": ("comment", "created_at", "updated_at")}),
    )

    def total_display(self, obj):
        return format_html(
            "{}",
            format_currency(obj.total_cost, currency_for_language(obj.language)),
        )

    total_display.short_description = "Итого"
