"""
Письма о заказе и обращении на языке клиента.

Тексты писем лежат в шаблонах notifications/<язык>/; для языка без
шаблонов используется русский.
"""
from __future__ import annotations

from decimal import Decimal

from django.conf import settings
from django.template.loader import render_to_string
from django.utils import timezone

from core.languages import DEFAULT_LANGUAGE, SUPPORTED_LANGUAGES

from .base import OutgoingEmail

LANGUAGE_CURRENCIES = {"ru": "RUB", "en": "USD", "es": "EUR"}

DATE_FORMATS = {
    "ru": "%d.%m.%Y %H:%M",
    "en": "%m/%d/%Y %H:%M",
    "es": "%d/%m/%Y %H:%M",
}

SUBJECTS = {
    "order_customer": {
        "ru": "Подтверждение заказа №{id}",
        "en": "Order Confirmation #{id}",
        "es": "Confirmación de pedido #{id}",
    },
    "order_owner": {
        "ru": "Новый заказ №{id}",
        "en": "New Order #{id}",
        "es": "Nuevo Pedido #{id}",
    },
    "contact_customer": {
        "ru": "Мы получили ваше сообщение",
        "en": "We have received your message",
        "es": "Hemos recibido su mensaje",
    },
    "contact_owner": {
        "ru": "Новое сообщение с формы обратной связи",
        "en": "New message from the contact form",
        "es": "Nuevo mensaje del formulario de contacto",
    },
}


def template_language(language: str) -> str:
    return language if language in SUPPORTED_LANGUAGES else DEFAULT_LANGUAGE


def currency_for_language(language: str) -> str:
    return LANGUAGE_CURRENCIES.get(language, LANGUAGE_CURRENCIES["ru"])


def format_currency(amount, currency: str = "", language: str = "ru") -> str:
    """1500 -> '1500.00 ₽', '$20.50', '€18.00'; прочие валюты кодом."""
    currency = currency or currency_for_language(language)
    amount = Decimal(amount or 0)
    if currency == "USD":
        return f"${amount:.2f}"
    if currency == "EUR":
        return f"€{amount:.2f}"
    if currency == "RUB":
        return f"{amount:.2f} ₽"
    return f"{amount:.2f} {currency}"


def format_date(value, language: str) -> str:
    fmt = DATE_FORMATS[template_language(language)]
    return timezone.localtime(value).strftime(fmt)


def _render(kind: str, language: str, context: dict) -> tuple[str, str]:
    language = template_language(language)
    subject = SUBJECTS[kind][language].format(**context.get("subject", {}))
    html = render_to_string(
        f"notifications/{language}/{kind}.html",
        {**context, "team": settings.MAIL_FROM_NAME},
    )
    return subject, html


def order_emails(order) -> list[OutgoingEmail]:
    """Подтверждение клиенту и уведомление владельцу."""
    language = order.language or DEFAULT_LANGUAGE
    currency = currency_for_language(language)
    items = [
        {
            "product_id": item.product_id,
            "name": item.product_name,
            "quantity": item.quantity,
            "price": format_currency(item.price, currency),
            "total": format_currency(item.line_total, currency),
        }
        for item in order.items.all()
    ]
    context = {
        "order": order,
        "items": items,
        "total_cost": format_currency(order.total_cost, currency),
        "created_at": format_date(order.created_at, language),
        "subject": {"id": order.pk},
    }
    emails = []
    for kind, recipient in (
        ("order_customer", order.email),
        ("order_owner", settings.COMPANY_EMAIL),
    ):
        subject, html = _render(kind, language, context)
        emails.append(OutgoingEmail(to=recipient, subject=subject, html=html))
    return emails


def contact_emails(contact) -> list[OutgoingEmail]:
    language = contact.language or DEFAULT_LANGUAGE
    context = {"contact": contact}
    emails = []
    for kind, recipient in (
        ("contact_customer", contact.email),
        ("contact_owner", settings.COMPANY_EMAIL),
    ):
        subject, html = _render(kind, language, context)
        emails.append(OutgoingEmail(to=recipient, subject=subject, html=html))
    return emails
