"""
Тесты галереи работ.
"""
from __future__ import annotations

import json

import pytest

from catalog.models import Category, CategoryTranslation
from gallery.models import GalleryItem, GalleryItemTranslation


pytestmark = pytest.mark.django_db

LIST_URL = "/api/gallery"


def detail_url(pk):
    return f"/api/gallery/{pk}"


def make_category(name="Гравировка") -> Category:
    category = Category.objects.create()
    CategoryTranslation.objects.create(
        category=category,
        language="ru",
        name=name,
    )
    return category


def make_item(category, title="Шкатулка", **titles) -> GalleryItem:
    item = GalleryItem.objects.create(
        category=category,
        thumbnail="/thumb.jpg",
        full_image="/full.jpg",
    )
    GalleryItemTranslation.objects.create(item=item, language="ru", title=title)
    for language, translated in titles.items():
        GalleryItemTranslation.objects.create(
            item=item,
            language=language,
            title=translated,
        )
    return item


class TestGalleryList:
    def test_newest_first_with_default_page_size(self, client):
        category = make_category()
        items = [make_item(category, title=f"Работа {i}") for i in range(17)]
        data = client.get(LIST_URL).json()["data"]
        assert data["page_size"] == 15
        assert data["total_items"] == 17
        assert data["total_pages"] == 2
        assert data["items"][0]["id"] == items[-1].pk
        assert data["items"][0]["full"] == "/full.jpg"

    def test_filter_by_category(self, client):
        engraving = make_category()
        printing = make_category("Печать")
        make_item(engraving)
        wanted = make_item(printing, title="Фигурка")
        data = client.get(LIST_URL, {"category": printing.pk}).json()["data"]
        assert [i["id"] for i in data["items"]] == [wanted.pk]
        assert data["items"][0]["title"] == "Фигурка"

    def test_language_hides_untranslated_items(self, client):
        category = make_category()
        make_item(category)
        translated = make_item(category, en="Box")
        data = client.get(LIST_URL, {"language": "en"}).json()["data"]
        assert [i["id"] for i in data["items"]] == [translated.pk]

    def test_detail_and_404(self, client):
        item = make_item(make_category())
        assert client.get(detail_url(item.pk)).json()["data"]["title"] == (
            "Шкатулка"
        )
        response = client.get(detail_url(item.pk), {"language": "es"})
        assert response.status_code == 404
        assert response.json()["error"] == "Элемент галереи не найден"


class TestGalleryMutations:
    def payload(self, category):
        return {
            "category_id": category.pk,
            "thumbnail": "/t.jpg",
            "full_image": "/f.jpg",
            "translations": {
                "ru": {"title": "Панно", "description": "Фанера"},
                "en": {"title": "Panel"},
            },
        }

    def test_create_requires_staff(self, client):
        response = client.post(
            LIST_URL,
            data=json.dumps(self.payload(make_category())),
            content_type="application/json",
        )
        assert response.status_code == 401

    def test_create_and_delete_removes_translations(self, admin_client):
        response = admin_client.post(
            LIST_URL,
            data=json.dumps(self.payload(make_category())),
            content_type="application/json",
        )
        assert response.status_code == 201
        item_id = response.json()["data"]["id"]
        assert GalleryItemTranslation.objects.filter(item_id=item_id).count() == 2

        response = admin_client.delete(detail_url(item_id))
        assert response.status_code == 200
        assert response.json()["data"]["message"] == (
            "Элемент галереи успешно удален"
        )
        assert not GalleryItem.objects.filter(pk=item_id).exists()
        assert not GalleryItemTranslation.objects.filter(
            item_id=item_id,
        ).exists()

    def test_create_requires_russian_title(self, admin_client):
        payload = self.payload(make_category())
        payload["translations"] = {"en": {"title": "Panel"}}
        response = admin_client.post(
            LIST_URL,
            data=json.dumps(payload),
            content_type="application/json",
        )
        assert response.status_code == 400
        assert GalleryItem.objects.count() == 0

    def test_create_missing_fields(self, admin_client):
        response = admin_client.post(
            LIST_URL,
            data=json.dumps({"category_id": make_category().pk}),
            content_type="application/json",
        )
        assert response.status_code == 400
        fields = {e["field"] for e in response.json()["errors"]}
        assert fields == {"thumbnail", "full_image", "translations"}

    def test_delete_unknown_item(self, admin_client):
        response = admin_client.delete(detail_url(999))
        assert response.status_code == 404
        assert response.json()["error"] == "Элемент галереи не найден"

    def test_partial_update(self, admin_client):
        item = make_item(make_category(), title="Старое")
        response = admin_client.patch(
            detail_url(item.pk),
            data=json.dumps({
                "thumbnail": "/new-thumb.jpg",
                "translations": {"ru": {"description": "Новое описание"}},
            }),
            content_type="application/json",
        )
        assert response.status_code == 200
        data = response.json()["data"]["item"]
        assert data["thumbnail"] == "/new-thumb.jpg"
        assert data["full"] == "/full.jpg"
        assert data["title"] == "Старое"
        assert data["description"] == "Новое описание"
