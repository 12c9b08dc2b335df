"""
Модели заказов: заказ и позиции заказа.

Позиция хранит снимок товара на момент оформления (цена, название, фото)
и ссылку на товар обычным числом: история заказа переживает удаление
товара из каталога.
"""
from decimal import Decimal

from django.db import models

from core.languages import DEFAULT_LANGUAGE


class Order(models.Model):
    """Заказ покупателя."""

    STATUS_NEW = "new"

    name = models.CharField("Имя", max_length=200)
    email = models.EmailField("Email")
    phone = models.CharField("Телефон", max_length=50)
    comment = models.TextField("Комментарий к заказу", blank=True)
    status = models.CharField(
        "Статус",
        max_length=50,
        default=STATUS_NEW,
        db_index=True,
    )
    total_cost = models.DecimalField(
        "Сумма заказа",
        max_digits=12,
        decimal_places=2,
        default=Decimal("0"),
    )
    language = models.CharField("Язык", max_length=10, default=DEFAULT_LANGUAGE)
    created_at = models.DateTimeField("Дата создания", auto_now_add=True)
    updated_at = models.DateTimeField("Дата обновления", auto_now=True)

    class Meta:
        db_table = "orders"
        ordering = ["-created_at"]
        verbose_name = "заказ"
        verbose_name_plural = "заказы"

    def __str__(self):
        return f"Заказ #{self.pk} от {self.created_at.strftime('%d.%m.%Y')}"


class OrderItem(models.Model):
    """Позиция в заказе."""

    order = models.ForeignKey(
        Order,
        on_delete=models.CASCADE,
        related_name="items",
        verbose_name="Заказ",
    )
    product_id = models.PositiveBigIntegerField("ID товара", db_index=True)
    quantity = models.PositiveIntegerField("Количество", default=1)
    price = models.DecimalField(
        "Цена за единицу",
        max_digits=12,
        decimal_places=2,
        help_text="Цена на момент оформления",
    )
    product_name = models.CharField("Название товара", max_length=300)
    product_image = models.CharField("Фото товара", max_length=500, blank=True)

    class Meta:
        db_table = "order_items"
        ordering = ["id"]
        verbose_name = "позиция заказа"
        verbose_name_plural = "позиции заказа"

    def __str__(self):
        return f"{self.product_name} × {self.quantity}"

    @property
    def line_total(self):
        """Сумма по позиции."""
        return (self.price or Decimal("0")) * self.quantity
