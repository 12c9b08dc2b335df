"""
Тесты настроек проекта.
"""
import pytest  # noqa: F401


def test_debug_is_boolean():
    """DEBUG должен быть булевым."""
    from django.conf import settings
    assert isinstance(settings.DEBUG, bool)


def test_installed_apps_contains_project_apps():
    """В INSTALLED_APPS есть все приложения проекта."""
    from django.conf import settings
    for app in ("core", "catalog", "gallery", "orders", "notifications"):
        assert app in settings.INSTALLED_APPS


def test_rate_limit_middleware_enabled():
    """Ограничение частоты запросов стоит до сессий и CSRF."""
    from django.conf import settings
    middleware = settings.MIDDLEWARE
    assert "core.ratelimit.RateLimitMiddleware" in middleware
    assert middleware.index("core.ratelimit.RateLimitMiddleware") < (
        middleware.index("django.middleware.csrf.CsrfViewMiddleware")
    )


def test_page_sizes():
    """Размеры страниц по умолчанию: каталог 10, галерея 15."""
    from django.conf import settings
    assert settings.CATALOG_PAGE_SIZE == 10
    assert settings.GALLERY_PAGE_SIZE == 15
    assert settings.MAX_PAGE_SIZE >= settings.GALLERY_PAGE_SIZE


def test_mail_settings():
    """Отправитель писем и адрес владельца заданы."""
    from django.conf import settings
    assert settings.EMAIL_PROVIDER in ("django", "sendgrid")
    assert settings.MAIL_FROM_NAME
    assert settings.COMPANY_EMAIL
    assert settings.MAIL_FROM in settings.DEFAULT_FROM_EMAIL
