"""
Отправка уведомлений о заказах и обращениях.

Отправитель получает готовый заказ или обращение, собирает письма
клиенту и владельцу на языке клиента и отправляет их. Любая ошибка
доставки поднимается как NotificationError; как на неё реагировать,
решает вызывающий код.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from django.utils.html import strip_tags

if TYPE_CHECKING:
    from orders.models import Order
    from orders.services import ContactRequest


class NotificationError(Exception):
    """Письмо не удалось отправить."""


@dataclass(frozen=True)
class OutgoingEmail:
    to: str
    subject: str
    html: str

    @property
    def text(self) -> str:
        return strip_tags(self.html).strip()


class NotificationSender:
    """Базовый отправитель: письма собираются здесь, доставка в send."""

    def send_order_confirmation(self, order: Order) -> None:
        from .messages import order_emails

        self.send(order_emails(order))

    def send_contact_form(self, contact: ContactRequest) -> None:
        from .messages import contact_emails

        self.send(contact_emails(contact))

    def send(self, emails: list[OutgoingEmail]) -> None:
        raise NotImplementedError
