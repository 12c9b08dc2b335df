"""
Сборка товаров и категорий каталога из таблиц переводов, фото и характеристик.

Списки строятся от строк перевода на запрошенный язык: товар или категория
без перевода на этот язык в выдаче не появляются. Фото, характеристики и
похожие товары догружаются отдельными запросами; ошибка такого запроса
логируется и считается отсутствием данных.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal

from django.conf import settings
from django.db import DatabaseError, transaction

from core.exceptions import DependencyError, NotFoundError
from core.languages import DEFAULT_LANGUAGE
from core.query import Page, PageRequest, PredicateSet, paginate
from core.query import parse_optional_id, parse_sort_direction
from core.translations import TranslationResolver

from .models import (
    Category,
    CategoryTranslation,
    Product,
    ProductCharacteristic,
    ProductImage,
    ProductTranslation,
)

logger = logging.getLogger(__name__)

PRODUCT_TRANSLATIONS = TranslationResolver(ProductTranslation, "product")
CATEGORY_TRANSLATIONS = TranslationResolver(CategoryTranslation, "category")

TRANSLATION_FIELDS = ("name", "description", "price", "currency")
SEARCH_FIELDS = ("name", "description")


def _load(loader, default, what: str, product_id):
    """Дополнительный запрос агрегата; при ошибке БД возвращает default."""
    try:
        return loader()
    except DatabaseError:
        logger.exception("Failed to load %s for product %s", what, product_id)
        return default


def placeholder_images() -> list[str]:
    return [settings.DEFAULT_PRODUCT_IMAGE]


def images_by_product(product_ids) -> dict[int, list[str]]:
    """Ссылки на фото по товарам: основное первым, затем по sort_order."""
    result: dict[int, list[str]] = {}
    rows = (
        ProductImage.objects.filter(product_id__in=list(product_ids))
        .order_by("-is_main", "sort_order", "id")
        .values_list("product_id", "url")
    )
    for product_id, url in rows:
        result.setdefault(product_id, []).append(url)
    return result


def characteristics_by_product(product_ids, language: str) -> dict[int, dict]:
    result: dict[int, dict] = {}
    rows = ProductCharacteristic.objects.filter(
        product_id__in=list(product_ids),
        language=language,
    ).values_list("product_id", "key", "value")
    for product_id, key, value in rows:
        result.setdefault(product_id, {})[key] = value
    return result


@dataclass
class ProductAggregate:
    id: int
    category_id: int
    subcategory_id: int | None
    name: str
    description: str
    price: Decimal
    currency: str
    created_at: datetime
    updated_at: datetime
    images: list[str] = field(default_factory=placeholder_images)
    characteristics: dict[str, str] = field(default_factory=dict)
    related_products: list[ProductAggregate] | None = None

    @classmethod
    def from_translation(
        cls,
        row: ProductTranslation,
        images=None,
        characteristics=None,
    ) -> ProductAggregate:
        product = row.product
        return cls(
            id=product.pk,
            category_id=product.category_id,
            subcategory_id=product.subcategory_id,
            name=row.name,
            description=row.description,
            price=row.price,
            currency=row.currency,
            created_at=product.created_at,
            updated_at=product.updated_at,
            images=list(images) if images else placeholder_images(),
            characteristics=dict(characteristics or {}),
        )

    @property
    def thumbnail(self) -> str:
        return self.images[0]

    def as_dict(self) -> dict:
        data = {
            "id": self.id,
            "category_id": self.category_id,
        }
        if self.subcategory_id is not None:
            data["subcategory_id"] = self.subcategory_id
        data.update({
            "images": self.images,
            "name": self.name,
            "description": self.description,
            "price": float(self.price),
            "currency": self.currency,
            "characteristics": self.characteristics,
            "created_at": self.created_at,
            "updated_at": self.updated_at,
        })
        if self.related_products is not None:
            data["related_products"] = [
                p.as_dict() for p in self.related_products
            ]
        return data


@dataclass(frozen=True)
class ProductFilter:
    """Параметры списка товаров из query-строки."""

    language: str = DEFAULT_LANGUAGE
    category_id: int | None = None
    subcategory_id: int | None = None
    search: str = ""
    sort_price: str | None = None
    page: PageRequest = field(default_factory=PageRequest)

    @classmethod
    def from_query(cls, params, language: str) -> ProductFilter:
        return cls(
            language=language,
            category_id=parse_optional_id(params.get("category")),
            subcategory_id=parse_optional_id(params.get("subcategory")),
            search=(params.get("search") or "").strip(),
            sort_price=parse_sort_direction(params.get("sort_price")),
            page=PageRequest.from_params(
                params.get("page"),
                params.get("page_size"),
                default_page_size=settings.CATALOG_PAGE_SIZE,
                max_page_size=settings.MAX_PAGE_SIZE,
            ),
        )

    def predicates(self) -> PredicateSet:
        return (
            PredicateSet()
            .equals("product__category_id", self.category_id)
            .equals("product__subcategory_id", self.subcategory_id)
            .search(SEARCH_FIELDS, self.search)
        )

    def ordering(self) -> tuple[str, ...]:
        # При равной цене сначала новые
        if self.sort_price == "asc":
            return ("price", "-product_id")
        if self.sort_price == "desc":
            return ("-price", "-product_id")
        return ("-product_id",)


def list_products(filters: ProductFilter) -> Page:
    """Страница товаров на языке фильтра."""
    queryset = filters.predicates().apply(
        PRODUCT_TRANSLATIONS.rows(filters.language),
    ).order_by(*filters.ordering())
    rows, total = paginate(queryset, filters.page)

    ids = [row.product_id for row in rows]
    images = _load(lambda: images_by_product(ids), {}, "images", ids)
    characteristics = _load(
        lambda: characteristics_by_product(ids, filters.language),
        {},
        "characteristics",
        ids,
    )
    items = [
        ProductAggregate.from_translation(
            row,
            images.get(row.product_id),
            characteristics.get(row.product_id),
        ).as_dict()
        for row in rows
    ]
    return Page(
        items=items,
        total_items=total,
        page=filters.page.page,
        page_size=filters.page.page_size,
    )


def get_related_products(
    product_id: int,
    language: str,
    limit: int | None = None,
) -> list[ProductAggregate]:
    """
    Случайные товары той же категории, кроме самого товара.
    У каждого одно фото: основное, иначе первое, иначе заглушка.
    """
    limit = limit or settings.RELATED_PRODUCTS_LIMIT
    category_id = (
        Product.objects.filter(pk=product_id)
        .values_list("category_id", flat=True)
        .first()
    )
    if category_id is None:
        raise NotFoundError("Товар не найден")

    rows = list(
        PRODUCT_TRANSLATIONS.rows(language)
        .filter(product__category_id=category_id)
        .exclude(product_id=product_id)
        .order_by("?")[:limit]
    )
    ids = [row.product_id for row in rows]
    images = _load(lambda: images_by_product(ids), {}, "images", ids)
    related = []
    for row in rows:
        thumbnail = images.get(row.product_id, [])[:1]
        related.append(ProductAggregate.from_translation(row, thumbnail))
    return related


def get_product(
    product_id: int,
    language: str,
    with_related: bool = True,
) -> ProductAggregate:
    """Товар с фото, характеристиками и похожими товарами."""
    row = PRODUCT_TRANSLATIONS.get(product_id, language)
    if row is None:
        raise NotFoundError("Товар не найден")

    images = _load(
        lambda: images_by_product([product_id]).get(product_id),
        None,
        "images",
        product_id,
    )
    characteristics = _load(
        lambda: characteristics_by_product([product_id], language).get(
            product_id
        ),
        None,
        "characteristics",
        product_id,
    )
    product = ProductAggregate.from_translation(row, images, characteristics)
    if with_related:
        product.related_products = _load(
            lambda: get_related_products(product_id, language),
            [],
            "related products",
            product_id,
        )
    return product


def _replace_images(product: Product, urls) -> None:
    """Заменяет все фото товара; первое становится основным."""
    product.images.all().delete()
    ProductImage.objects.bulk_create([
        ProductImage(
            product=product,
            url=url,
            is_main=index == 0,
            sort_order=index,
        )
        for index, url in enumerate(urls)
    ])


def _replace_characteristics(
    product: Product,
    language: str,
    characteristics: dict,
) -> None:
    product.characteristics.filter(language=language).delete()
    ProductCharacteristic.objects.bulk_create([
        ProductCharacteristic(
            product=product,
            language=language,
            key=key,
            value=value,
        )
        for key, value in characteristics.items()
    ])


def create_product(
    *,
    category: Category,
    translations: dict[str, dict],
    subcategory: Category | None = None,
    images=(),
) -> Product:
    """
    Создаёт товар со всеми переводами, фото и характеристиками
    в одной транзакции.
    """
    try:
        with transaction.atomic():
            product = Product.objects.create(
                category=category,
                subcategory=subcategory,
            )
            _replace_images(product, images or [])
            for language, data in translations.items():
                ProductTranslation.objects.create(
                    product=product,
                    language=language,
                    **{name: data[name] for name in TRANSLATION_FIELDS},
                )
                _replace_characteristics(
                    product,
                    language,
                    data.get("characteristics") or {},
                )
    except DatabaseError as e:
        logger.exception("Failed to create product")
        raise DependencyError("Ошибка при создании товара") from e
    logger.info("Product %s created", product.pk)
    return product


def update_product(
    product: Product,
    *,
    changes: dict,
    translations: dict[str, dict],
    images: list[str] | None = None,
) -> Product:
    """
    Частичное обновление: меняются только переданные поля.

    changes: поля самого товара (category, subcategory);
    translations: {язык: переданные поля перевода}. Новый язык должен
    прийти целиком; переданные characteristics заменяют набор этого языка.
    images, если переданы, заменяют все фото.
    """
    try:
        with transaction.atomic():
            if "category" in changes:
                product.category = changes["category"]
            if "subcategory" in changes:
                product.subcategory = changes["subcategory"]
            product.save()

            if images is not None:
                _replace_images(product, images)

            existing = PRODUCT_TRANSLATIONS.mapping(product.pk)
            for language, data in translations.items():
                row = existing.get(language)
                if row is None:
                    row = ProductTranslation(product=product, language=language)
                for name in TRANSLATION_FIELDS:
                    if name in data:
                        setattr(row, name, data[name])
                row.save()
                if "characteristics" in data:
                    _replace_characteristics(
                        product,
                        language,
                        data["characteristics"] or {},
                    )
    except DatabaseError as e:
        logger.exception("Failed to update product %s", product.pk)
        raise DependencyError("Ошибка при обновлении товара") from e
    logger.info("Product %s updated", product.pk)
    return product


@dataclass
class CategoryNode:
    id: int
    parent_id: int | None
    name: str
    created_at: datetime
    updated_at: datetime
    subcategories: list[CategoryNode] = field(default_factory=list)

    @classmethod
    def from_translation(cls, row: CategoryTranslation) -> CategoryNode:
        category = row.category
        return cls(
            id=category.pk,
            parent_id=category.parent_id,
            name=row.name,
            created_at=category.created_at,
            updated_at=category.updated_at,
        )

    def as_dict(self) -> dict:
        data = {"id": self.id}
        if self.parent_id is not None:
            data["parent_id"] = self.parent_id
        data.update({
            "name": self.name,
            "created_at": self.created_at,
            "updated_at": self.updated_at,
            "subcategories": [c.as_dict() for c in self.subcategories],
        })
        return data


def get_subcategories(parent_id: int, language: str) -> list[CategoryNode]:
    rows = CATEGORY_TRANSLATIONS.rows(language).filter(
        category__parent_id=parent_id,
    ).order_by("name")
    return [CategoryNode.from_translation(row) for row in rows]


def _with_subcategories(node: CategoryNode, language: str) -> CategoryNode:
    try:
        node.subcategories = get_subcategories(node.id, language)
    except DatabaseError:
        logger.exception("Failed to load subcategories for category %s", node.id)
        node.subcategories = []
    return node


def get_categories(language: str) -> list[CategoryNode]:
    """
    Дерево категорий: верхний уровень по названию, у каждой
    её прямые подкатегории. Подкатегории читаются отдельным запросом
    на каждую категорию.
    """
    rows = CATEGORY_TRANSLATIONS.rows(language).filter(
        category__parent__isnull=True,
    ).order_by("name")
    return [
        _with_subcategories(CategoryNode.from_translation(row), language)
        for row in rows
    ]


def get_category(category_id: int, language: str) -> CategoryNode:
    row = CATEGORY_TRANSLATIONS.get(category_id, language)
    if row is None:
        raise NotFoundError("Категория не найдена")
    return _with_subcategories(CategoryNode.from_translation(row), language)


def save_category(
    category: Category | None,
    *,
    changes: dict,
    names: dict[str, str],
) -> Category:
    """Создаёт (category=None) или частично обновляет категорию."""
    creating = category is None
    try:
        with transaction.atomic():
            if creating:
                category = Category()
            if "parent" in changes:
                category.parent = changes["parent"]
            category.save()
            for language, name in names.items():
                CategoryTranslation.objects.update_or_create(
                    category=category,
                    language=language,
                    defaults={"name": name},
                )
    except DatabaseError as e:
        logger.exception("Failed to save category %s", getattr(category, "pk", None))
        raise DependencyError("Ошибка при сохранении категории") from e
    logger.info(
        "Category %s %s", category.pk, "created" if creating else "updated"
    )
    return category
