"""
Тесты оформления заказа и формы обратной связи.
"""
from __future__ import annotations

import json
from decimal import Decimal

import pytest
from django.core import mail
from django.db import DatabaseError

from catalog.models import (
    Category,
    CategoryTranslation,
    Product,
    ProductImage,
    ProductTranslation,
)
from notifications.base import NotificationError, NotificationSender
from orders import services
from orders import views as order_views
from orders.models import Order, OrderItem


pytestmark = pytest.mark.django_db

ORDER_URL = "/api/orders"
CONTACT_URL = "/api/contact"


class RecordingSender(NotificationSender):
    """Запоминает уведомления вместо отправки."""

    def __init__(self, fail=False, error=NotificationError):
        self.fail = fail
        self.error = error
        self.orders = []
        self.contacts = []

    def send_order_confirmation(self, order):
        self.orders.append(order)
        if self.fail:
            raise self.error("smtp down")

    def send_contact_form(self, contact):
        self.contacts.append(contact)
        if self.fail:
            raise self.error("smtp down")


@pytest.fixture
def sender(monkeypatch):
    recording = RecordingSender()
    monkeypatch.setattr(order_views, "get_sender", lambda: recording)
    return recording


def _create_product(prices=None, images=()) -> Product:
    category = Category.objects.create()
    CategoryTranslation.objects.create(
        category=category, language="ru", name="Гравировка",
    )
    product = Product.objects.create(category=category)
    prices = prices or {"ru": ("Доска", "100.00", "RUB")}
    for language, (name, price, currency) in prices.items():
        ProductTranslation.objects.create(
            product=product,
            language=language,
            name=name,
            price=Decimal(price),
            currency=currency,
        )
    for index, url in enumerate(images):
        ProductImage.objects.create(
            product=product, url=url, is_main=index == 0, sort_order=index,
        )
    return product


def post_json(client, url, payload, **extra):
    return client.post(
        url,
        data=json.dumps(payload),
        content_type="application/json",
        **extra,
    )


def order_payload(**overrides):
    payload = {"name": "A", "email": "a@b.com", "phone": "123"}
    payload.update(overrides)
    return payload


class TestCreateOrder:
    """Тесты POST /api/orders."""

    def test_total_is_priced_from_catalog(self, client, sender):
        product = _create_product()
        response = post_json(
            client,
            ORDER_URL,
            order_payload(items=[{"product_id": product.pk, "quantity": 2}]),
        )
        assert response.status_code == 200
        body = response.json()
        order = Order.objects.get()
        assert body == {
            "success": True,
            "order_id": order.pk,
            "message": "Заказ успешно создан",
        }
        assert order.total_cost == Decimal("200.00")
        assert order.status == "new"
        assert order.language == "ru"
        assert sender.orders[0].pk == order.pk

    def test_client_prices_are_ignored(self, client, sender):
        product = _create_product(images=["/board.jpg", "/side.jpg"])
        post_json(
            client,
            ORDER_URL,
            order_payload(items=[{
                "product_id": product.pk,
                "quantity": 3,
                "price": 1,
                "product_name": "Подделка",
            }]),
        )
        item = OrderItem.objects.get()
        assert item.price == Decimal("100.00")
        assert item.product_name == "Доска"
        assert item.product_image == "/board.jpg"
        assert item.order.total_cost == Decimal("300.00")

    def test_snapshot_outlives_catalog_changes(self, client, sender):
        product = _create_product()
        post_json(
            client,
            ORDER_URL,
            order_payload(items=[{"product_id": product.pk, "quantity": 1}]),
        )
        ProductTranslation.objects.filter(product=product).update(
            price=Decimal("999.00"),
        )
        product.delete()
        item = OrderItem.objects.get()
        assert item.price == Decimal("100.00")
        assert item.product_image == "/default-product-image.jpg"

    def test_language_from_accept_language_header(self, client, sender):
        product = _create_product(prices={
            "ru": ("Доска", "1500.00", "RUB"),
            "en": ("Board", "20.00", "USD"),
        })
        response = post_json(
            client,
            ORDER_URL,
            order_payload(items=[{"product_id": product.pk, "quantity": 2}]),
            HTTP_ACCEPT_LANGUAGE="en-US,en;q=0.9",
        )
        assert response.json()["message"] == "Order successfully created"
        order = Order.objects.get()
        assert order.language == "en"
        assert order.total_cost == Decimal("40.00")

    def test_explicit_language_wins(self, client, sender):
        response = post_json(
            client,
            ORDER_URL,
            order_payload(language="es"),
            HTTP_ACCEPT_LANGUAGE="en-US",
        )
        assert response.json()["message"] == "Pedido creado exitosamente"

    def test_empty_items_is_a_valid_inquiry(self, client, sender):
        response = post_json(client, ORDER_URL, order_payload(items=[]))
        assert response.status_code == 200
        order = Order.objects.get()
        assert order.total_cost == Decimal("0")
        assert order.items.count() == 0

    def test_unknown_product_creates_nothing(self, client, sender):
        product = _create_product()
        response = post_json(
            client,
            ORDER_URL,
            order_payload(items=[
                {"product_id": product.pk, "quantity": 1},
                {"product_id": 99999, "quantity": 1},
            ]),
        )
        assert response.status_code == 400
        assert response.json() == {
            "success": False,
            "error": "Один из товаров не найден",
        }
        assert Order.objects.count() == 0
        assert OrderItem.objects.count() == 0
        assert sender.orders == []

    def test_product_missing_in_order_language(self, client, sender):
        product = _create_product()
        response = post_json(
            client,
            ORDER_URL,
            order_payload(
                language="en",
                items=[{"product_id": product.pk, "quantity": 1}],
            ),
        )
        assert response.status_code == 400
        assert Order.objects.count() == 0

    def test_validation_errors(self, client, sender):
        response = post_json(
            client,
            ORDER_URL,
            {"email": "not-an-email", "phone": "123"},
        )
        assert response.status_code == 400
        errors = {e["field"]: e["message"] for e in response.json()["errors"]}
        assert errors == {
            "name": "Поле обязательно для заполнения",
            "email": "Некорректный формат email",
        }

    def test_item_quantity_must_be_positive(self, client, sender):
        product = _create_product()
        response = post_json(
            client,
            ORDER_URL,
            order_payload(items=[{"product_id": product.pk, "quantity": 0}]),
        )
        assert response.status_code == 400
        assert response.json()["errors"][0]["field"] == "items.0.quantity"

    @pytest.mark.parametrize("field", ["quantity", "product_id"])
    def test_oversized_item_numbers_are_rejected(self, client, sender, field):
        product = _create_product()
        item = {"product_id": product.pk, "quantity": 1}
        item[field] = 10**30
        response = post_json(client, ORDER_URL, order_payload(items=[item]))
        assert response.status_code == 400
        assert response.json()["errors"][0]["field"] == f"items.0.{field}"
        assert Order.objects.count() == 0

    def test_total_above_column_limit_is_rejected(self, client, sender):
        product = _create_product(
            prices={"ru": ("Станок", "9999999999.99", "RUB")},
        )
        response = post_json(
            client,
            ORDER_URL,
            order_payload(items=[{"product_id": product.pk, "quantity": 2}]),
        )
        assert response.status_code == 400
        assert response.json()["error"] == "Сумма заказа превышает допустимую"
        assert Order.objects.count() == 0

    def test_malformed_json(self, client, sender):
        response = client.post(
            ORDER_URL,
            data="[1, 2",
            content_type="application/json",
        )
        assert response.status_code == 400
        assert response.json()["error"] == "Некорректный формат запроса"

    def test_notification_failure_does_not_fail_order(
        self, client, monkeypatch
    ):
        failing = RecordingSender(fail=True)
        monkeypatch.setattr(order_views, "get_sender", lambda: failing)
        response = post_json(client, ORDER_URL, order_payload())
        assert response.status_code == 200
        assert response.json()["success"] is True
        assert Order.objects.count() == 1
        assert len(failing.orders) == 1

    def test_unexpected_sender_error_does_not_fail_order(
        self, client, monkeypatch
    ):
        failing = RecordingSender(fail=True, error=RuntimeError)
        monkeypatch.setattr(order_views, "get_sender", lambda: failing)
        product = _create_product()
        response = post_json(
            client,
            ORDER_URL,
            order_payload(items=[{"product_id": product.pk, "quantity": 1}]),
        )
        assert response.status_code == 200
        order = Order.objects.get()
        assert response.json()["order_id"] == order.pk
        assert len(failing.orders) == 1

    def test_database_failure_rolls_back(self, client, sender, monkeypatch):
        product = _create_product()

        def broken(*args, **kwargs):
            raise DatabaseError("deadlock")

        monkeypatch.setattr(OrderItem.objects, "bulk_create", broken)
        response = post_json(
            client,
            ORDER_URL,
            order_payload(items=[{"product_id": product.pk, "quantity": 1}]),
        )
        assert response.status_code == 500
        assert response.json()["error"] == "Ошибка при создании заказа"
        assert Order.objects.count() == 0

    def test_get_is_not_allowed(self, client):
        assert client.get(ORDER_URL).status_code == 405

    def test_order_emails_are_sent_to_customer_and_owner(
        self, client, settings
    ):
        settings.EMAIL_PROVIDER = "django"
        settings.COMPANY_EMAIL = "owner@studio.test"
        product = _create_product()
        post_json(
            client,
            ORDER_URL,
            order_payload(items=[{"product_id": product.pk, "quantity": 2}]),
        )
        order = Order.objects.get()
        assert [m.to for m in mail.outbox] == [["a@b.com"], ["owner@studio.test"]]
        assert mail.outbox[0].subject == f"Подтверждение заказа №{order.pk}"
        assert mail.outbox[1].subject == f"Новый заказ №{order.pk}"
        assert "200.00 ₽" in mail.outbox[0].body
        assert "Доска - 2 шт." in mail.outbox[0].body


class TestOrderServices:
    def test_price_items_builds_snapshots(self):
        product = _create_product()
        snapshots = services.price_items(
            [{"product_id": product.pk, "quantity": 4}],
            "ru",
        )
        assert snapshots == [services.ItemSnapshot(
            product_id=product.pk,
            quantity=4,
            price=Decimal("100.00"),
            product_name="Доска",
            product_image="/default-product-image.jpg",
        )]
        assert snapshots[0].line_total == Decimal("400.00")

    def test_notify_skips_missing_order(self):
        sender = RecordingSender()
        services.notify_order(424242, sender)
        assert sender.orders == []


class TestContactForm:
    """Тесты POST /api/contact."""

    def payload(self, **overrides):
        data = {
            "name": "Анна",
            "email": "anna@example.com",
            "phone": "+7 900 000-00-00",
            "message": "Хочу панно на заказ",
        }
        data.update(overrides)
        return data

    def test_success(self, client, sender):
        response = post_json(client, CONTACT_URL, self.payload())
        assert response.status_code == 200
        assert response.json() == {
            "success": True,
            "data": {"message": "Сообщение успешно отправлено"},
        }
        assert sender.contacts[0].message == "Хочу панно на заказ"
        assert sender.contacts[0].language == "ru"

    def test_localized_message(self, client, sender):
        response = post_json(
            client, CONTACT_URL, self.payload(), HTTP_ACCEPT_LANGUAGE="es-ES",
        )
        assert response.json()["data"]["message"] == (
            "Mensaje enviado exitosamente"
        )

    def test_missing_message(self, client, sender):
        payload = self.payload()
        del payload["message"]
        response = post_json(client, CONTACT_URL, payload)
        assert response.status_code == 400
        assert response.json()["errors"] == [{
            "field": "message",
            "message": "Поле обязательно для заполнения",
        }]
        assert sender.contacts == []

    def test_notification_failure_is_server_error(self, client, monkeypatch):
        monkeypatch.setattr(
            order_views, "get_sender", lambda: RecordingSender(fail=True),
        )
        response = post_json(client, CONTACT_URL, self.payload())
        assert response.status_code == 500
        assert response.json() == {
            "success": False,
            "error": "Ошибка при отправке сообщения",
        }

    def test_unexpected_sender_error_is_json_server_error(
        self, client, monkeypatch
    ):
        monkeypatch.setattr(
            order_views,
            "get_sender",
            lambda: RecordingSender(fail=True, error=RuntimeError),
        )
        response = post_json(client, CONTACT_URL, self.payload())
        assert response.status_code == 500
        assert response.json() == {
            "success": False,
            "error": "Ошибка при отправке сообщения",
        }

    def test_contact_emails(self, client, settings):
        settings.EMAIL_PROVIDER = "django"
        settings.COMPANY_EMAIL = "owner@studio.test"
        post_json(client, CONTACT_URL, self.payload(language="en"))
        assert [m.subject for m in mail.outbox] == [
            "We have received your message",
            "New message from the contact form",
        ]
        assert "Хочу панно на заказ" in mail.outbox[1].body
