"""
Оформление заказа и обработка формы обратной связи.

Цены, названия и фото позиций берутся из каталога на языке заказа;
присланные клиентом значения не используются. Заказ и позиции
записываются в одной транзакции. Уведомление отправляется после
фиксации и на результат оформления не влияет.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from decimal import Decimal

from django.db import DatabaseError, transaction

from catalog.services import get_product
from core.exceptions import (
    ConflictError,
    DependencyError,
    NotFoundError,
    ValidationError,
)
from core.languages import DEFAULT_LANGUAGE
from notifications.base import NotificationSender

from .models import Order, OrderItem

logger = logging.getLogger(__name__)

ORDER_SUCCESS_MESSAGES = {
    "ru": "Заказ успешно создан",
    "en": "Order successfully created",
    "es": "Pedido creado exitosamente",
}

# Предел Order.total_cost (max_digits=12, decimal_places=2)
MAX_TOTAL_COST = Decimal("9999999999.99")

CONTACT_SUCCESS_MESSAGES = {
    "ru": "Сообщение успешно отправлено",
    "en": "Message sent successfully",
    "es": "Mensaje enviado exitosamente",
}


def localized(messages: dict, language: str) -> str:
    return messages.get(language, messages[DEFAULT_LANGUAGE])


@dataclass(frozen=True)
class ItemSnapshot:
    """Позиция заказа, как она была в каталоге в момент оформления."""

    product_id: int
    quantity: int
    price: Decimal
    product_name: str
    product_image: str

    @property
    def line_total(self) -> Decimal:
        return self.price * self.quantity


@dataclass(frozen=True)
class OrderRequest:
    name: str
    email: str
    phone: str
    language: str = DEFAULT_LANGUAGE
    comment: str = ""
    items: tuple[dict, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class ContactRequest:
    """Обращение с формы обратной связи; в БД не сохраняется."""

    name: str
    email: str
    phone: str
    message: str
    language: str = DEFAULT_LANGUAGE


def price_items(items, language: str) -> list[ItemSnapshot]:
    """
    Снимки позиций по текущему каталогу. Если хотя бы один товар
    не найден на языке заказа, заказ не оформляется.
    """
    snapshots = []
    for item in items:
        try:
            product = get_product(
                item["product_id"],
                language,
                with_related=False,
            )
        except NotFoundError:
            logger.warning(
                "Product %s not found in language %s while pricing order",
                item["product_id"],
                language,
            )
            raise ConflictError("Один из товаров не найден")
        snapshots.append(ItemSnapshot(
            product_id=product.id,
            quantity=item["quantity"],
            price=product.price,
            product_name=product.name,
            product_image=product.thumbnail,
        ))
    return snapshots


def create_order(request: OrderRequest, snapshots: list[ItemSnapshot]) -> Order:
    """Заказ и позиции в одной транзакции."""
    total_cost = sum((s.line_total for s in snapshots), Decimal("0"))
    if total_cost > MAX_TOTAL_COST:
        raise ValidationError("Сумма заказа превышает допустимую")
    try:
        with transaction.atomic():
            order = Order.objects.create(
                name=request.name,
                email=request.email,
                phone=request.phone,
                comment=request.comment,
                language=request.language,
                status=Order.STATUS_NEW,
                total_cost=total_cost,
            )
            OrderItem.objects.bulk_create([
                OrderItem(
                    order=order,
                    product_id=s.product_id,
                    quantity=s.quantity,
                    price=s.price,
                    product_name=s.product_name,
                    product_image=s.product_image,
                )
                for s in snapshots
            ])
    except DatabaseError as e:
        logger.exception("Failed to create order for %s", request.email)
        raise DependencyError("Ошибка при создании заказа") from e
    logger.info("Order %s created, total %s", order.pk, total_cost)
    return order


def notify_order(order_id: int, sender: NotificationSender) -> None:
    """Перечитывает заказ и отправляет письма; ошибки только логируются."""
    try:
        order = Order.objects.prefetch_related("items").get(pk=order_id)
    except (Order.DoesNotExist, DatabaseError):
        logger.exception("Failed to read back order %s", order_id)
        return
    try:
        sender.send_order_confirmation(order)
    except Exception:
        logger.exception("Failed to send notification for order %s", order_id)


def place_order(request: OrderRequest, sender: NotificationSender) -> Order:
    snapshots = price_items(request.items, request.language)
    order = create_order(request, snapshots)
    notify_order(order.pk, sender)
    return order


def submit_contact(contact: ContactRequest, sender: NotificationSender) -> None:
    """Ошибка доставки письма поднимается как DependencyError (500)."""
    try:
        sender.send_contact_form(contact)
    except Exception as e:
        logger.exception("Failed to send contact form from %s", contact.email)
        raise DependencyError("Ошибка при отправке сообщения") from e
