from django.conf import settings

from .backends import DjangoMailSender, SendGridSender
from .base import NotificationSender


def get_sender() -> NotificationSender:
    """
    Отправитель по EMAIL_PROVIDER. SendGrid без ключа API
    заменяется почтовым бэкендом Django.
    """
    provider = (getattr(settings, "EMAIL_PROVIDER", "") or "django").lower()
    api_key = getattr(settings, "SENDGRID_API_KEY", "") or ""
    if provider == "sendgrid" and api_key:
        return SendGridSender(api_key)
    return DjangoMailSender()
