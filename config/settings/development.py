"""
Настройки для локальной разработки.
"""
from .base import *  # noqa: F401, F403

DEBUG = True

ALLOWED_HOSTS = [
    "localhost",
    "127.0.0.1",
    "0.0.0.0",
    "testserver",
]

# Для разработки письма выводятся в консоль, а не отправляются реально.
EMAIL_BACKEND = "django.core.mail.backends.console.EmailBackend"
