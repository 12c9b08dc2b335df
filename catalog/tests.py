"""
Тесты каталога: списки и карточки товаров, дерево категорий, изменения
каталога сотрудниками.
"""
from __future__ import annotations

import json
from decimal import Decimal

import pytest
from django.db import DatabaseError
from django.urls import reverse

from catalog import services
from catalog.models import (
    Category,
    CategoryTranslation,
    Product,
    ProductCharacteristic,
    ProductImage,
    ProductTranslation,
)


pytestmark = pytest.mark.django_db


def make_category(name="Гравировка", parent=None, **names) -> Category:
    category = Category.objects.create(parent=parent)
    CategoryTranslation.objects.create(
        category=category,
        language="ru",
        name=name,
    )
    for language, translated in names.items():
        CategoryTranslation.objects.create(
            category=category,
            language=language,
            name=translated,
        )
    return category


def make_product(
    category,
    name="Доска",
    price="100.00",
    language="ru",
    currency="RUB",
    description="",
    subcategory=None,
    images=(),
) -> Product:
    product = Product.objects.create(category=category, subcategory=subcategory)
    ProductTranslation.objects.create(
        product=product,
        language=language,
        name=name,
        description=description,
        price=Decimal(price),
        currency=currency,
    )
    for index, url in enumerate(images):
        ProductImage.objects.create(
            product=product,
            url=url,
            is_main=index == 0,
            sort_order=index,
        )
    return product


def post_json(client, url, payload):
    return client.post(
        url,
        data=json.dumps(payload),
        content_type="application/json",
    )


def patch_json(client, url, payload):
    return client.patch(
        url,
        data=json.dumps(payload),
        content_type="application/json",
    )


class TestProductList:
    """Тесты списка товаров: фильтры, сортировка, пагинация."""

    url = "/api/products"

    def test_empty_catalog_returns_empty_page(self, client):
        response = client.get(self.url)
        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert body["data"] == {
            "items": [],
            "total_items": 0,
            "page": 1,
            "page_size": 10,
            "total_pages": 0,
        }

    def test_items_have_placeholder_image_and_empty_characteristics(
        self, client
    ):
        make_product(make_category())
        item = client.get(self.url).json()["data"]["items"][0]
        assert item["images"] == ["/default-product-image.jpg"]
        assert item["characteristics"] == {}
        assert item["price"] == 100.0
        assert "subcategory_id" not in item

    def test_default_ordering_is_newest_first(self, client):
        category = make_category()
        first = make_product(category, name="Первый")
        second = make_product(category, name="Второй")
        items = client.get(self.url).json()["data"]["items"]
        assert [i["id"] for i in items] == [second.pk, first.pk]

    def test_pagination_metadata_matches_page(self, client):
        category = make_category()
        for i in range(7):
            make_product(category, name=f"Товар {i}")
        data = client.get(self.url, {"page": 2, "page_size": 3}).json()["data"]
        assert data["total_items"] == 7
        assert data["page_size"] == 3
        assert data["total_pages"] == 3
        assert len(data["items"]) == 3

        last = client.get(self.url, {"page": 3, "page_size": 3}).json()["data"]
        assert len(last["items"]) == 1

    @pytest.mark.parametrize("page_size", ["abc", "0", "-5", "1000"])
    def test_invalid_page_size_falls_back_to_default(self, client, page_size):
        response = client.get(self.url, {"page_size": page_size})
        assert response.status_code == 200
        assert response.json()["data"]["page_size"] == 10

    def test_invalid_page_falls_back_to_first(self, client):
        response = client.get(self.url, {"page": "x"})
        assert response.json()["data"]["page"] == 1

    def test_filter_by_category_and_subcategory(self, client):
        engraving = make_category("Гравировка")
        boards = make_category("Доски", parent=engraving)
        printing = make_category("Печать")
        in_sub = make_product(engraving, subcategory=boards)
        make_product(engraving)
        make_product(printing)

        by_category = client.get(self.url, {"category": engraving.pk})
        assert by_category.json()["data"]["total_items"] == 2

        by_sub = client.get(self.url, {"subcategory": boards.pk}).json()
        assert [i["id"] for i in by_sub["data"]["items"]] == [in_sub.pk]
        assert by_sub["data"]["items"][0]["subcategory_id"] == boards.pk

    def test_unparsable_category_is_ignored(self, client):
        make_product(make_category())
        response = client.get(self.url, {"category": "abc"})
        assert response.json()["data"]["total_items"] == 1

    def test_search_matches_name_or_description_case_insensitive(
        self, client
    ):
        category = make_category()
        by_name = make_product(category, name="Oak Board")
        by_description = make_product(
            category,
            name="Stand",
            description="Made of OAK wood",
        )
        make_product(category, name="Mug")
        items = client.get(self.url, {"search": "oak"}).json()["data"]["items"]
        assert {i["id"] for i in items} == {by_name.pk, by_description.pk}

    def test_sort_by_price(self, client):
        category = make_category()
        cheap = make_product(category, price="10.00")
        expensive = make_product(category, price="500.00")
        same_as_cheap = make_product(category, price="10.00")

        asc = client.get(self.url, {"sort_price": "asc"}).json()["data"]
        assert [i["id"] for i in asc["items"]] == [
            same_as_cheap.pk,
            cheap.pk,
            expensive.pk,
        ]
        desc = client.get(self.url, {"sort_price": "desc"}).json()["data"]
        assert desc["items"][0]["id"] == expensive.pk

    def test_unknown_sort_direction_is_ignored(self, client):
        category = make_category()
        first = make_product(category, price="1.00")
        second = make_product(category, price="2.00")
        items = client.get(
            self.url, {"sort_price": "sideways"}
        ).json()["data"]["items"]
        assert [i["id"] for i in items] == [second.pk, first.pk]

    def test_product_without_translation_is_invisible_in_language(
        self, client
    ):
        category = make_category()
        make_product(category, name="Только русский")
        english = make_product(
            category,
            name="English",
            language="en",
            currency="USD",
        )
        items = client.get(
            self.url, {"language": "en"}
        ).json()["data"]["items"]
        assert [i["id"] for i in items] == [english.pk]
        assert items[0]["currency"] == "USD"

    def test_characteristics_are_scoped_to_language(self, client):
        product = make_product(make_category())
        ProductCharacteristic.objects.create(
            product=product, language="ru", key="Материал", value="Дуб",
        )
        ProductCharacteristic.objects.create(
            product=product, language="en", key="Material", value="Oak",
        )
        item = client.get(self.url).json()["data"]["items"][0]
        assert item["characteristics"] == {"Материал": "Дуб"}


class TestProductDetail:
    """Тесты карточки товара и похожих товаров."""

    def url(self, pk):
        return reverse("catalog:product_detail", kwargs={"pk": pk})

    def test_unknown_product_returns_404(self, client):
        response = client.get(self.url(999))
        assert response.status_code == 404
        assert response.json() == {"success": False, "error": "Товар не найден"}

    def test_missing_translation_returns_404(self, client):
        product = make_product(make_category())
        response = client.get(self.url(product.pk), {"language": "es"})
        assert response.status_code == 404

    def test_images_main_first_then_sort_order(self, client):
        product = make_product(make_category())
        ProductImage.objects.create(product=product, url="/b.jpg", sort_order=2)
        ProductImage.objects.create(product=product, url="/a.jpg", sort_order=1)
        ProductImage.objects.create(
            product=product, url="/main.jpg", is_main=True, sort_order=5,
        )
        data = client.get(self.url(product.pk)).json()["data"]
        assert data["images"] == ["/main.jpg", "/a.jpg", "/b.jpg"]

    def test_image_order_does_not_depend_on_model_ordering(self, monkeypatch):
        product = make_product(make_category())
        ProductImage.objects.create(product=product, url="/b.jpg", sort_order=2)
        ProductImage.objects.create(
            product=product, url="/main.jpg", is_main=True, sort_order=9,
        )
        ProductImage.objects.create(product=product, url="/a.jpg", sort_order=1)
        monkeypatch.setattr(ProductImage._meta, "ordering", [])
        assert services.images_by_product([product.pk]) == {
            product.pk: ["/main.jpg", "/a.jpg", "/b.jpg"],
        }

    def test_related_products_same_category_excluding_self(self, client):
        category = make_category()
        product = make_product(category)
        for i in range(7):
            make_product(category, name=f"Похожий {i}")
        make_product(make_category("Другая"))

        related = client.get(
            self.url(product.pk)
        ).json()["data"]["related_products"]
        assert len(related) == 5
        ids = {r["id"] for r in related}
        assert product.pk not in ids
        assert all(r["category_id"] == category.pk for r in related)

    def test_related_products_is_empty_list_when_alone(self, client):
        product = make_product(make_category())
        data = client.get(self.url(product.pk)).json()["data"]
        assert data["related_products"] == []

    def test_repeated_fetch_returns_same_data(self, client):
        product = make_product(make_category(), images=["/1.jpg"])
        first = client.get(self.url(product.pk)).json()
        second = client.get(self.url(product.pk)).json()
        assert first == second

    def test_images_failure_degrades_to_placeholder(
        self, client, monkeypatch
    ):
        product = make_product(make_category(), images=["/1.jpg"])

        def broken(*args, **kwargs):
            raise DatabaseError("connection lost")

        monkeypatch.setattr(services, "images_by_product", broken)
        response = client.get(self.url(product.pk))
        assert response.status_code == 200
        assert response.json()["data"]["images"] == [
            "/default-product-image.jpg"
        ]

    def test_related_endpoint_respects_limit(self, client):
        category = make_category()
        product = make_product(category)
        for i in range(4):
            make_product(category, images=[f"/{i}.jpg", f"/{i}-2.jpg"])
        url = reverse("catalog:related_products", kwargs={"pk": product.pk})

        related = client.get(url, {"limit": 2}).json()["data"]
        assert len(related) == 2
        assert all(len(r["images"]) == 1 for r in related)
        assert all(not r["images"][0].endswith("-2.jpg") for r in related)

        fallback = client.get(url, {"limit": "many"}).json()["data"]
        assert len(fallback) == 4

    def test_related_endpoint_unknown_product(self, client):
        url = reverse("catalog:related_products", kwargs={"pk": 12345})
        assert client.get(url).status_code == 404


class TestCategories:
    """Тесты дерева категорий."""

    url = "/api/categories"

    def test_tree_is_two_levels_ordered_by_name(self, client):
        printing = make_category("Печать")
        engraving = make_category("Гравировка")
        make_category("Шкатулки", parent=engraving)
        make_category("Доски", parent=engraving)

        data = client.get(self.url).json()["data"]
        assert [c["name"] for c in data] == ["Гравировка", "Печать"]
        assert [s["name"] for s in data[0]["subcategories"]] == [
            "Доски",
            "Шкатулки",
        ]
        assert data[0]["subcategories"][0]["parent_id"] == engraving.pk
        assert data[1]["id"] == printing.pk
        assert data[1]["subcategories"] == []

    def test_categories_without_translation_are_hidden(self, client):
        make_category("Гравировка", en="Engraving")
        make_category("Печать")
        data = client.get(self.url, {"language": "en"}).json()["data"]
        assert [c["name"] for c in data] == ["Engraving"]

    def test_category_detail(self, client):
        parent = make_category("Гравировка")
        make_category("Доски", parent=parent)
        url = reverse("catalog:category_detail", kwargs={"pk": parent.pk})
        data = client.get(url).json()["data"]
        assert data["name"] == "Гравировка"
        assert len(data["subcategories"]) == 1

    def test_category_detail_missing_translation(self, client):
        category = make_category()
        url = reverse("catalog:category_detail", kwargs={"pk": category.pk})
        assert client.get(url, {"language": "en"}).status_code == 404

    def test_display_name_is_empty_without_default_translation(self):
        category = Category.objects.create()
        assert category.display_name() == ""


class TestProductMutations:
    """Тесты создания и частичного изменения товаров."""

    url = "/api/products"

    def detail_url(self, pk):
        return reverse("catalog:product_detail", kwargs={"pk": pk})

    def payload(self, category, **overrides):
        data = {
            "category_id": category.pk,
            "images": ["/main.jpg", "/second.jpg"],
            "translations": {
                "ru": {
                    "name": "Разделочная доска",
                    "description": "Дуб, гравировка",
                    "price": 1500,
                    "currency": "RUB",
                    "characteristics": {"Материал": "Дуб"},
                },
                "en": {
                    "name": "Cutting board",
                    "price": 20.5,
                    "currency": "USD",
                },
            },
        }
        data.update(overrides)
        return data

    def test_anonymous_is_rejected(self, client):
        response = post_json(client, self.url, self.payload(make_category()))
        assert response.status_code == 401
        assert Product.objects.count() == 0

    def test_non_staff_is_forbidden(self, client, django_user_model):
        user = django_user_model.objects.create_user(
            username="buyer",
            password="pass12345",
        )
        client.force_login(user)
        response = post_json(client, self.url, self.payload(make_category()))
        assert response.status_code == 403

    def test_create_product_round_trip(self, admin_client):
        category = make_category()
        response = post_json(admin_client, self.url, self.payload(category))
        assert response.status_code == 201
        data = response.json()["data"]
        assert data["message"] == "Товар успешно создан"
        assert data["product"]["name"] == "Разделочная доска"

        detail = admin_client.get(self.detail_url(data["id"])).json()["data"]
        assert detail["name"] == "Разделочная доска"
        assert detail["description"] == "Дуб, гравировка"
        assert detail["price"] == 1500.0
        assert detail["currency"] == "RUB"
        assert detail["images"] == ["/main.jpg", "/second.jpg"]
        assert detail["characteristics"] == {"Материал": "Дуб"}

        english = admin_client.get(
            self.detail_url(data["id"]), {"language": "en"}
        ).json()["data"]
        assert english["price"] == 20.5
        assert english["characteristics"] == {}

        main = ProductImage.objects.get(product_id=data["id"], is_main=True)
        assert main.url == "/main.jpg"

    def test_create_requires_russian_translation(self, admin_client):
        payload = self.payload(make_category())
        del payload["translations"]["ru"]
        response = post_json(admin_client, self.url, payload)
        assert response.status_code == 400
        assert response.json()["error"] == (
            "Отсутствует обязательный перевод для русского языка"
        )

    def test_create_validates_fields(self, admin_client):
        payload = self.payload(make_category(), category_id=999)
        payload["translations"]["ru"]["price"] = -1
        response = post_json(admin_client, self.url, payload)
        assert response.status_code == 400
        fields = {e["field"] for e in response.json()["errors"]}
        assert fields == {"category_id"}

        payload = self.payload(make_category())
        payload["translations"]["ru"]["price"] = -1
        response = post_json(admin_client, self.url, payload)
        fields = {e["field"] for e in response.json()["errors"]}
        assert fields == {"translations.ru.price"}

    def test_malformed_json(self, admin_client):
        response = admin_client.post(
            self.url,
            data="{not json",
            content_type="application/json",
        )
        assert response.status_code == 400
        assert response.json()["error"] == "Некорректный формат запроса"

    def test_partial_update_keeps_omitted_fields(self, admin_client):
        category = make_category()
        product = make_product(
            category,
            name="Старое имя",
            description="Описание",
            images=["/old.jpg"],
        )
        response = patch_json(
            admin_client,
            self.detail_url(product.pk),
            {"translations": {"ru": {"price": 250}}},
        )
        assert response.status_code == 200
        data = response.json()["data"]
        assert data["message"] == "Товар успешно обновлен"
        assert data["product"]["price"] == 250.0
        assert data["product"]["name"] == "Старое имя"
        assert data["product"]["description"] == "Описание"
        assert data["product"]["images"] == ["/old.jpg"]

    def test_update_replaces_images_and_characteristics(self, admin_client):
        product = make_product(make_category(), images=["/old.jpg"])
        ProductCharacteristic.objects.create(
            product=product, language="ru", key="Цвет", value="Белый",
        )
        ProductCharacteristic.objects.create(
            product=product, language="en", key="Color", value="White",
        )
        response = patch_json(
            admin_client,
            self.detail_url(product.pk),
            {
                "images": ["/new-1.jpg", "/new-2.jpg"],
                "translations": {
                    "ru": {"characteristics": {"Размер": "30x20"}},
                },
            },
        )
        assert response.status_code == 200
        product_data = response.json()["data"]["product"]
        assert product_data["images"] == ["/new-1.jpg", "/new-2.jpg"]
        assert product_data["characteristics"] == {"Размер": "30x20"}
        assert ProductCharacteristic.objects.filter(
            product=product, language="en",
        ).count() == 1

    def test_update_adds_complete_new_language(self, admin_client):
        product = make_product(make_category())
        url = self.detail_url(product.pk)

        incomplete = patch_json(
            admin_client, url, {"translations": {"es": {"name": "Tabla"}}},
        )
        assert incomplete.status_code == 400
        fields = {e["field"] for e in incomplete.json()["errors"]}
        assert fields == {"translations.es.price", "translations.es.currency"}

        complete = patch_json(
            admin_client,
            url,
            {
                "translations": {
                    "es": {"name": "Tabla", "price": 18, "currency": "EUR"},
                },
            },
        )
        assert complete.status_code == 200
        assert ProductTranslation.objects.filter(
            product=product, language="es",
        ).exists()

    def test_update_moves_and_clears_subcategory(self, admin_client):
        engraving = make_category("Гравировка")
        boards = make_category("Доски", parent=engraving)
        printing = make_category("Печать")
        product = make_product(engraving, subcategory=boards)

        response = patch_json(
            admin_client,
            self.detail_url(product.pk),
            {"category_id": printing.pk, "subcategory_id": None},
        )
        assert response.status_code == 200
        product.refresh_from_db()
        assert product.category_id == printing.pk
        assert product.subcategory_id is None

    def test_update_missing_translation_returns_404(self, admin_client):
        product = make_product(make_category())
        response = patch_json(
            admin_client,
            self.detail_url(product.pk) + "?language=en",
            {"translations": {"en": {"name": "Board"}}},
        )
        assert response.status_code == 404

    def test_update_failure_rolls_back(self, admin_client, monkeypatch):
        product = make_product(make_category(), images=["/old.jpg"])

        def broken(*args, **kwargs):
            raise DatabaseError("disk full")

        monkeypatch.setattr(services, "_replace_characteristics", broken)
        response = patch_json(
            admin_client,
            self.detail_url(product.pk),
            {
                "images": ["/new.jpg"],
                "translations": {"ru": {"characteristics": {"a": "b"}}},
            },
        )
        assert response.status_code == 500
        assert list(
            product.images.values_list("url", flat=True)
        ) == ["/old.jpg"]


class TestCategoryMutations:
    """Тесты создания и изменения категорий."""

    url = "/api/categories"

    def test_create_subcategory(self, admin_client):
        parent = make_category("Гравировка")
        response = post_json(
            admin_client,
            self.url,
            {
                "parent_id": parent.pk,
                "translations": {"ru": {"name": "Доски"}, "en": {"name": "Boards"}},
            },
        )
        assert response.status_code == 201
        data = response.json()["data"]
        assert data["category"]["parent_id"] == parent.pk
        assert CategoryTranslation.objects.filter(
            category_id=data["id"],
        ).count() == 2

    def test_parent_must_be_top_level(self, admin_client):
        parent = make_category("Гравировка")
        child = make_category("Доски", parent=parent)
        response = post_json(
            admin_client,
            self.url,
            {"parent_id": child.pk, "translations": {"ru": {"name": "Мелкие"}}},
        )
        assert response.status_code == 400
        assert response.json()["errors"][0]["field"] == "parent_id"

    def test_update_renames_one_language(self, admin_client):
        category = make_category("Гравировка", en="Engraving")
        url = reverse("catalog:category_detail", kwargs={"pk": category.pk})
        response = patch_json(
            admin_client, url, {"translations": {"en": {"name": "Laser"}}},
        )
        assert response.status_code == 200
        names = dict(
            category.translations.values_list("language", "name")
        )
        assert names == {"ru": "Гравировка", "en": "Laser"}

    def test_category_with_children_cannot_be_nested(self, admin_client):
        engraving = make_category("Гравировка")
        make_category("Доски", parent=engraving)
        printing = make_category("Печать")
        url = reverse("catalog:category_detail", kwargs={"pk": engraving.pk})
        response = patch_json(admin_client, url, {"parent_id": printing.pk})
        assert response.status_code == 400
        engraving.refresh_from_db()
        assert engraving.parent_id is None

    def test_update_unknown_category(self, admin_client):
        url = reverse("catalog:category_detail", kwargs={"pk": 404})
        response = patch_json(admin_client, url, {"parent_id": None})
        assert response.status_code == 404
