"""
Галерея работ: список по категории, карточка, создание, изменение
и удаление.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime

from django.conf import settings
from django.db import DatabaseError, transaction

from core.exceptions import DependencyError, NotFoundError
from core.languages import DEFAULT_LANGUAGE
from core.query import Page, PageRequest, PredicateSet, paginate
from core.query import parse_optional_id
from core.translations import TranslationResolver

from .models import GalleryItem, GalleryItemTranslation

logger = logging.getLogger(__name__)

GALLERY_TRANSLATIONS = TranslationResolver(GalleryItemTranslation, "item")

NOT_FOUND_MESSAGE = "Элемент галереи не найден"
TRANSLATION_FIELDS = ("title", "description")


@dataclass
class GalleryEntry:
    id: int
    category_id: int
    thumbnail: str
    full_image: str
    title: str
    description: str
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_translation(cls, row: GalleryItemTranslation) -> GalleryEntry:
        item = row.item
        return cls(
            id=item.pk,
            category_id=item.category_id,
            thumbnail=item.thumbnail,
            full_image=item.full_image,
            title=row.title,
            description=row.description,
            created_at=item.created_at,
            updated_at=item.updated_at,
        )

    def as_dict(self) -> dict:
        return {
            "id": self.id,
            "category_id": self.category_id,
            "thumbnail": self.thumbnail,
            "full": self.full_image,
            "title": self.title,
            "description": self.description,
            "created_at": self.created_at,
            "updated_at": self.updated_at,
        }


@dataclass(frozen=True)
class GalleryFilter:
    language: str = DEFAULT_LANGUAGE
    category_id: int | None = None
    page: PageRequest = field(default_factory=PageRequest)

    @classmethod
    def from_query(cls, params, language: str) -> GalleryFilter:
        return cls(
            language=language,
            category_id=parse_optional_id(params.get("category")),
            page=PageRequest.from_params(
                params.get("page"),
                params.get("page_size"),
                default_page_size=settings.GALLERY_PAGE_SIZE,
                max_page_size=settings.MAX_PAGE_SIZE,
            ),
        )

    def predicates(self) -> PredicateSet:
        return PredicateSet().equals("item__category_id", self.category_id)


def list_gallery(filters: GalleryFilter) -> Page:
    """Страница галереи, новые работы первыми."""
    queryset = filters.predicates().apply(
        GALLERY_TRANSLATIONS.rows(filters.language),
    ).order_by("-item__created_at", "-item_id")
    rows, total = paginate(queryset, filters.page)
    return Page(
        items=[GalleryEntry.from_translation(row).as_dict() for row in rows],
        total_items=total,
        page=filters.page.page,
        page_size=filters.page.page_size,
    )


def get_gallery_item(item_id: int, language: str) -> GalleryEntry:
    row = GALLERY_TRANSLATIONS.get(item_id, language)
    if row is None:
        raise NotFoundError(NOT_FOUND_MESSAGE)
    return GalleryEntry.from_translation(row)


def create_gallery_item(
    *,
    category,
    thumbnail: str,
    full_image: str,
    translations: dict[str, dict],
) -> GalleryItem:
    try:
        with transaction.atomic():
            item = GalleryItem.objects.create(
                category=category,
                thumbnail=thumbnail,
                full_image=full_image,
            )
            GalleryItemTranslation.objects.bulk_create([
                GalleryItemTranslation(
                    item=item,
                    language=language,
                    title=data["title"],
                    description=data.get("description", ""),
                )
                for language, data in translations.items()
            ])
    except DatabaseError as e:
        logger.exception("Failed to create gallery item")
        raise DependencyError("Ошибка при создании элемента галереи") from e
    logger.info("Gallery item %s created", item.pk)
    return item


def update_gallery_item(
    item: GalleryItem,
    *,
    changes: dict,
    translations: dict[str, dict],
) -> GalleryItem:
    """Частичное обновление, как у товаров."""
    try:
        with transaction.atomic():
            for name in ("category", "thumbnail", "full_image"):
                if name in changes:
                    setattr(item, name, changes[name])
            item.save()

            existing = GALLERY_TRANSLATIONS.mapping(item.pk)
            for language, data in translations.items():
                row = existing.get(language) or GalleryItemTranslation(
                    item=item,
                    language=language,
                )
                for name in TRANSLATION_FIELDS:
                    if name in data:
                        setattr(row, name, data[name])
                row.save()
    except DatabaseError as e:
        logger.exception("Failed to update gallery item %s", item.pk)
        raise DependencyError("Ошибка при обновлении элемента галереи") from e
    logger.info("Gallery item %s updated", item.pk)
    return item


def delete_gallery_item(item_id: int) -> None:
    """Удаляет элемент вместе со всеми переводами."""
    try:
        with transaction.atomic():
            item = GalleryItem.objects.select_for_update().filter(
                pk=item_id,
            ).first()
            if item is None:
                raise NotFoundError(NOT_FOUND_MESSAGE)
            GalleryItemTranslation.objects.filter(item=item).delete()
            item.delete()
    except DatabaseError as e:
        logger.exception("Failed to delete gallery item %s", item_id)
        raise DependencyError("Ошибка при удалении элемента галереи") from e
    logger.info("Gallery item %s deleted", item_id)
