"""
Тесты приложения core.
"""
import json
from decimal import Decimal

import pytest
from django.contrib.auth.models import AnonymousUser
from django.db.models import Q
from django.test import Client, RequestFactory

from catalog.models import Category, Product, ProductTranslation
from core.api import success_response
from core.decorators import staff_required
from core.languages import get_preferred_language, resolve_language
from core.query import (
    Equals,
    Page,
    PageRequest,
    PredicateSet,
    Search,
    paginate,
    parse_optional_id,
    parse_sort_direction,
)
from core.ratelimit import (
    RATE_LIMIT_MESSAGE,
    ClientRateLimiter,
    TokenBucket,
    get_client_ip,
)
from core.translations import TranslationResolver, resolve


class FakeClock:
    def __init__(self, now=0.0):
        self.now = now

    def __call__(self):
        return self.now


class TestPredicateSet:
    def test_empty_set_matches_everything(self):
        assert PredicateSet().as_q() == Q()
        assert not PredicateSet().equals("category_id", None).predicates

    def test_skips_blank_search(self):
        predicates = PredicateSet().search(("name",), "   ").predicates
        assert predicates == []

    def test_collects_typed_predicates(self):
        predicates = (
            PredicateSet()
            .equals("category_id", 3)
            .search(("name", "description"), " доска ")
            .predicates
        )
        assert predicates == [
            Equals("category_id", 3),
            Search(("name", "description"), "доска"),
        ]


@pytest.mark.django_db
class TestPredicateSetQueries:
    """Предикаты поверх строк перевода товаров."""

    def _product(self, category, name, description=""):
        product = Product.objects.create(category=category)
        ProductTranslation.objects.create(
            product=product,
            language="ru",
            name=name,
            description=description,
            price=Decimal("10"),
            currency="RUB",
        )
        return product

    def test_and_of_equals_and_search(self):
        wood, metal = Category.objects.create(), Category.objects.create()
        wanted = self._product(wood, "Доска", "из дуба")
        self._product(wood, "Кружка", "керамика")
        self._product(metal, "Доска", "стальная")
        queryset = (
            PredicateSet()
            .equals("product__category_id", wood.pk)
            .search(("name", "description"), "ДУБ")
            .apply(ProductTranslation.objects.all())
        )
        assert [row.product_id for row in queryset] == [wanted.pk]

    def test_paginate_counts_the_filtered_queryset(self):
        category = Category.objects.create()
        for i in range(7):
            self._product(category, f"Товар {i}")
        queryset = ProductTranslation.objects.order_by("product_id")
        rows, total = paginate(queryset, PageRequest(page=2, page_size=3))
        assert total == 7
        assert [row.name for row in rows] == ["Товар 3", "Товар 4", "Товар 5"]

        rows, total = paginate(queryset, PageRequest(page=9, page_size=3))
        assert rows == []
        assert total == 7


class TestPageRequest:
    @pytest.mark.parametrize(
        "page,page_size,expected",
        [
            (None, None, PageRequest(1, 10)),
            ("3", "25", PageRequest(3, 25)),
            ("0", "-5", PageRequest(1, 10)),
            ("abc", "x", PageRequest(1, 10)),
            ("2", "500", PageRequest(2, 10)),
        ],
    )
    def test_from_params(self, page, page_size, expected):
        assert PageRequest.from_params(
            page, page_size, default_page_size=10, max_page_size=100,
        ) == expected

    def test_offset(self):
        assert PageRequest(page=3, page_size=15).offset == 30

    def test_total_pages(self):
        assert Page([], 0, 1, 10).total_pages == 0
        assert Page([], 10, 1, 10).total_pages == 1
        assert Page([], 11, 1, 10).total_pages == 2

    def test_as_dict(self):
        assert Page(["a"], 21, 3, 10).as_dict() == {
            "items": ["a"],
            "total_items": 21,
            "page": 3,
            "page_size": 10,
            "total_pages": 3,
        }

    def test_query_param_parsers(self):
        assert parse_optional_id("12") == 12
        assert parse_optional_id("") is None
        assert parse_optional_id("abc") is None
        assert parse_sort_direction(" DESC ") == "desc"
        assert parse_sort_direction("random") is None


class TestTranslations:
    def test_resolve_prefers_requested_language(self):
        assert resolve({"ru": "Доска", "en": "Board"}, "en") == "Board"

    def test_resolve_falls_back_to_default(self):
        assert resolve({"ru": "Доска"}, "es") == "Доска"
        assert resolve({"en": "Board"}, "es") is None

    @pytest.mark.django_db
    def test_resolver_rows_hide_untranslated(self):
        category = Category.objects.create()
        translated = Product.objects.create(category=category)
        Product.objects.create(category=category)
        ProductTranslation.objects.create(
            product=translated,
            language="en",
            name="Board",
            price=Decimal("5"),
            currency="USD",
        )
        resolver = TranslationResolver(ProductTranslation, "product")
        assert [r.product_id for r in resolver.rows("en")] == [translated.pk]
        assert resolver.get(translated.pk, "ru") is None
        assert set(resolver.mapping(translated.pk)) == {"en"}


class TestLanguages:
    @pytest.mark.parametrize(
        "header,expected",
        [
            ("en-US,en;q=0.9", "en"),
            ("es", "es"),
            ("ru-RU,ru;q=0.9", "ru"),
            ("de-DE,en;q=0.5", "ru"),
            ("", "ru"),
        ],
    )
    def test_preferred_language(self, header, expected):
        request = RequestFactory().get("/", HTTP_ACCEPT_LANGUAGE=header)
        assert get_preferred_language(request) == expected

    def test_explicit_language_wins(self):
        request = RequestFactory().get("/", HTTP_ACCEPT_LANGUAGE="en")
        assert resolve_language("es", request) == "es"
        assert resolve_language("  ", request) == "en"


class TestRateLimiter:
    def test_bucket_refills_over_time(self):
        bucket = TokenBucket(rate=1, burst=2, now=0)
        assert bucket.allow(0)
        assert bucket.allow(0)
        assert not bucket.allow(0)
        assert bucket.allow(1.0)
        assert not bucket.allow(1.0)

    def test_bucket_never_exceeds_burst(self):
        bucket = TokenBucket(rate=100, burst=2, now=0)
        assert bucket.allow(1000)
        assert bucket.allow(1000)
        assert not bucket.allow(1000)

    def test_clients_are_limited_independently(self):
        limiter = ClientRateLimiter(rate=1, burst=1, clock=FakeClock())
        assert limiter.allow("10.0.0.1")
        assert not limiter.allow("10.0.0.1")
        assert limiter.allow("10.0.0.2")

    def test_least_recently_seen_client_is_evicted(self):
        limiter = ClientRateLimiter(
            rate=1, burst=5, max_clients=2, clock=FakeClock(),
        )
        limiter.allow("a")
        limiter.allow("b")
        limiter.allow("a")
        limiter.allow("c")
        assert len(limiter) == 2
        assert "a" in limiter
        assert "b" not in limiter
        assert "c" in limiter

    def test_client_ip(self, settings):
        request = RequestFactory().get(
            "/",
            REMOTE_ADDR="10.0.0.9",
            HTTP_X_FORWARDED_FOR="1.2.3.4, 10.0.0.1",
        )
        settings.RATE_LIMIT_TRUST_FORWARDED = False
        assert get_client_ip(request) == "10.0.0.9"
        settings.RATE_LIMIT_TRUST_FORWARDED = True
        assert get_client_ip(request) == "1.2.3.4"

    def test_middleware_returns_429(self, settings):
        settings.API_RATE_LIMIT = 0.001
        settings.API_RATE_BURST = 2
        client = Client()
        assert client.get("/api/health").status_code == 200
        assert client.get("/api/health").status_code == 200
        response = client.get("/api/health")
        assert response.status_code == 429
        assert response.json() == {
            "success": False,
            "error": RATE_LIMIT_MESSAGE,
        }


@pytest.mark.django_db
class TestStaffRequired:
    """Доступ к изменяющим представлениям."""

    @staticmethod
    @staff_required
    def view(request):
        return success_response({"ok": True})

    def _request(self, user):
        request = RequestFactory().post("/")
        request.user = user
        return request

    def test_anonymous_gets_401(self):
        response = self.view(self._request(AnonymousUser()))
        assert response.status_code == 401
        assert json.loads(response.content)["error"] == "Требуется авторизация"

    def test_regular_user_gets_403(self, django_user_model):
        user = django_user_model.objects.create_user("buyer", password="pw")
        assert self.view(self._request(user)).status_code == 403

    def test_staff_passes(self, admin_user):
        assert self.view(self._request(admin_user)).status_code == 200


@pytest.mark.django_db
class TestServiceEndpoints:
    """health, csrf и вход сотрудников."""

    def test_health(self, client):
        response = client.get("/api/health")
        assert response.json() == {"success": True, "data": {"status": "ok"}}

    def test_login_and_logout(self, client, django_user_model):
        django_user_model.objects.create_user(
            "manager", password="secret", is_staff=True,
        )
        response = client.post(
            "/api/auth/login",
            data=json.dumps({"username": "manager", "password": "secret"}),
            content_type="application/json",
        )
        assert response.status_code == 200
        assert response.json()["data"] == {"username": "manager"}
        assert "_auth_user_id" in client.session

        assert client.post("/api/auth/logout").status_code == 200
        assert "_auth_user_id" not in client.session

    def test_login_rejects_non_staff(self, client, django_user_model):
        django_user_model.objects.create_user("buyer", password="secret")
        response = client.post(
            "/api/auth/login",
            data=json.dumps({"username": "buyer", "password": "secret"}),
            content_type="application/json",
        )
        assert response.status_code == 401
        assert response.json()["error"] == "Неверный логин или пароль"

    def test_mutations_require_csrf_token(self):
        client = Client(enforce_csrf_checks=True)
        body = json.dumps({"username": "x", "password": "y"})
        response = client.post(
            "/api/auth/login", data=body, content_type="application/json",
        )
        assert response.status_code == 403

        token = client.get("/api/csrf").json()["data"]["csrf_token"]
        response = client.post(
            "/api/auth/login",
            data=body,
            content_type="application/json",
            HTTP_X_CSRFTOKEN=token,
        )
        assert response.status_code == 401
