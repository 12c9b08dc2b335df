"""
Тесты писем и способов их доставки.
"""
import smtplib
from decimal import Decimal

import pytest
import requests
from django.core import mail

from notifications import backends
from notifications.backends import DjangoMailSender, SendGridSender
from notifications.base import NotificationError, OutgoingEmail
from notifications.messages import contact_emails, format_currency, order_emails
from notifications.services import get_sender
from orders.models import Order, OrderItem
from orders.services import ContactRequest


@pytest.fixture
def order():
    order = Order.objects.create(
        name="John",
        email="john@example.com",
        phone="+1 555 0100",
        language="en",
        total_cost=Decimal("40.00"),
    )
    OrderItem.objects.create(
        order=order,
        product_id=7,
        quantity=2,
        price=Decimal("20.00"),
        product_name="Board",
    )
    return order


class FakeResponse:
    def __init__(self, status_code=202, text=""):
        self.status_code = status_code
        self.text = text

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code}", response=self)


class TestFormatCurrency:
    @pytest.mark.parametrize(
        "amount,currency,expected",
        [
            (1500, "RUB", "1500.00 ₽"),
            (Decimal("20.5"), "USD", "$20.50"),
            (18, "EUR", "€18.00"),
            (3, "GBP", "3.00 GBP"),
            (None, "RUB", "0.00 ₽"),
        ],
    )
    def test_known_currencies(self, amount, currency, expected):
        assert format_currency(amount, currency) == expected

    def test_currency_from_language(self):
        assert format_currency(5, language="es") == "€5.00"
        assert format_currency(5, language="de") == "5.00 ₽"


@pytest.mark.django_db
class TestMessages:
    def test_order_emails_in_customer_language(self, order, settings):
        settings.COMPANY_EMAIL = "owner@studio.test"
        customer, owner = order_emails(order)
        assert customer.to == "john@example.com"
        assert customer.subject == f"Order Confirmation #{order.pk}"
        assert owner.to == "owner@studio.test"
        assert owner.subject == f"New Order #{order.pk}"
        assert "$40.00" in customer.html
        assert "Board" in owner.text

    def test_unsupported_language_uses_russian(self, order):
        order.language = "de"
        customer, _ = order_emails(order)
        assert customer.subject == f"Подтверждение заказа №{order.pk}"
        assert "40.00 ₽" in customer.text

    def test_contact_emails_are_escaped(self):
        contact = ContactRequest(
            name="Анна",
            email="anna@example.com",
            phone="123",
            message="<b>Привет</b>",
            language="es",
        )
        customer, owner = contact_emails(contact)
        assert customer.subject == "Hemos recibido su mensaje"
        assert "&lt;b&gt;Привет&lt;/b&gt;" in owner.html


class TestDjangoMailSender:
    def test_sends_text_and_html(self):
        DjangoMailSender().send([
            OutgoingEmail("a@b.com", "Тема", "<p>Текст</p>"),
        ])
        assert len(mail.outbox) == 1
        message = mail.outbox[0]
        assert message.to == ["a@b.com"]
        assert message.body == "Текст"
        assert message.alternatives[0][1] == "text/html"

    def test_smtp_failure(self, monkeypatch):
        class BrokenConnection:
            def __enter__(self):
                return self

            def __exit__(self, *exc_info):
                return False

            def send_messages(self, messages):
                raise smtplib.SMTPServerDisconnected("closed")

        monkeypatch.setattr(
            backends, "get_connection", lambda **kwargs: BrokenConnection(),
        )
        with pytest.raises(NotificationError):
            DjangoMailSender().send([OutgoingEmail("a@b.com", "s", "<p>x</p>")])


class TestSendGridSender:
    def test_posts_each_email(self, monkeypatch, settings):
        settings.MAIL_FROM = "shop@example.com"
        calls = []

        def fake_post(url, json, headers, timeout):
            calls.append((url, json, headers))
            return FakeResponse()

        monkeypatch.setattr(backends.requests, "post", fake_post)
        SendGridSender("SG.key").send([
            OutgoingEmail("a@b.com", "Тема", "<p>Текст</p>"),
            OutgoingEmail("c@d.com", "Тема", "<p>Текст</p>"),
        ])
        assert len(calls) == 2
        url, payload, headers = calls[0]
        assert url == backends.SENDGRID_API_URL
        assert headers["Authorization"] == "Bearer SG.key"
        assert payload["personalizations"] == [{"to": [{"email": "a@b.com"}]}]
        assert payload["from"]["email"] == "shop@example.com"
        assert payload["content"][0] == {"type": "text/plain", "value": "Текст"}

    def test_rejected_request(self, monkeypatch):
        monkeypatch.setattr(
            backends.requests,
            "post",
            lambda *args, **kwargs: FakeResponse(401, "unauthorized"),
        )
        with pytest.raises(NotificationError):
            SendGridSender("bad").send([OutgoingEmail("a@b.com", "s", "x")])

    def test_network_error(self, monkeypatch):
        def fake_post(*args, **kwargs):
            raise requests.ConnectionError("timeout")

        monkeypatch.setattr(backends.requests, "post", fake_post)
        with pytest.raises(NotificationError):
            SendGridSender("key").send([OutgoingEmail("a@b.com", "s", "x")])


class TestGetSender:
    def test_default_is_django_mail(self, settings):
        settings.EMAIL_PROVIDER = "django"
        assert isinstance(get_sender(), DjangoMailSender)

    def test_sendgrid_with_key(self, settings):
        settings.EMAIL_PROVIDER = "SendGrid"
        settings.SENDGRID_API_KEY = "SG.key"
        sender = get_sender()
        assert isinstance(sender, SendGridSender)
        assert sender.api_key == "SG.key"

    def test_sendgrid_without_key_falls_back(self, settings):
        settings.EMAIL_PROVIDER = "sendgrid"
        settings.SENDGRID_API_KEY = ""
        assert isinstance(get_sender(), DjangoMailSender)
