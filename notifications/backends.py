"""
Доставка писем: через почтовый бэкенд Django или через API SendGrid.
"""
import logging
import smtplib

import requests
from django.conf import settings
from django.core.mail import EmailMultiAlternatives, get_connection

from .base import NotificationError, NotificationSender

logger = logging.getLogger(__name__)

SENDGRID_API_URL = "https://api.sendgrid.com/v3/mail/send"


class DjangoMailSender(NotificationSender):
    """
    Письма через EMAIL_BACKEND (SMTP в продакшене, консоль в разработке).
    Все письма уходят через одно соединение.
    """

    def send(self, emails):
        messages = []
        for email in emails:
            message = EmailMultiAlternatives(
                subject=email.subject,
                body=email.text,
                from_email=settings.DEFAULT_FROM_EMAIL,
                to=[email.to],
            )
            message.attach_alternative(email.html, "text/html")
            messages.append(message)
        try:
            with get_connection(fail_silently=False) as connection:
                connection.send_messages(messages)
        except (smtplib.SMTPException, OSError) as e:
            raise NotificationError(f"Ошибка отправки письма: {e}") from e
        for email in emails:
            logger.info("Email sent: %s -> %s", email.subject, email.to)


class SendGridSender(NotificationSender):
    """Письма через SendGrid v3 Mail Send API."""

    def __init__(self, api_key: str, *, timeout: int = 15):
        self.api_key = api_key
        self.timeout = timeout

    def _payload(self, email) -> dict:
        return {
            "personalizations": [{"to": [{"email": email.to}]}],
            "from": {
                "email": settings.MAIL_FROM,
                "name": settings.MAIL_FROM_NAME,
            },
            "subject": email.subject,
            "content": [
                {"type": "text/plain", "value": email.text},
                {"type": "text/html", "value": email.html},
            ],
        }

    def send(self, emails):
        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }
        for email in emails:
            try:
                resp = requests.post(
                    SENDGRID_API_URL,
                    json=self._payload(email),
                    headers=headers,
                    timeout=self.timeout,
                )
                resp.raise_for_status()
            except requests.RequestException as e:
                logger.error(
                    "SendGrid request failed for %s: %s",
                    email.to,
                    getattr(e.response, "text", e),
                )
                raise NotificationError(
                    f"SendGrid отклонил письмо: {e}"
                ) from e
            logger.info("Email sent via SendGrid: %s -> %s", email.subject, email.to)
