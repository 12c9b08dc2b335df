"""
JSON API каталога: товары, похожие товары и дерево категорий.
Изменяющие запросы доступны только сотрудникам.
"""
import logging

from django.conf import settings
from django.db import DatabaseError
from django.views.decorators.http import require_http_methods

from core.api import api_view, parse_json_body, success_response
from core.decorators import staff_required
from core.exceptions import ApiError, NotFoundError, ValidationError
from core.languages import get_query_language
from core.query import parse_positive_int

from . import services
from .forms import parse_category_payload, parse_product_payload
from .models import Category, Product

logger = logging.getLogger(__name__)


def _read_back(loader, what, pk):
    """Повторное чтение после записи; при ошибке запись уже сделана."""
    try:
        return loader()
    except (ApiError, DatabaseError):
        logger.exception("Failed to read back %s %s", what, pk)
        return None


@require_http_methods(["GET", "POST"])
@api_view
def products(request):
    if request.method == "POST":
        return create_product(request)
    filters = services.ProductFilter.from_query(
        request.GET,
        language=get_query_language(request),
    )
    return success_response(services.list_products(filters).as_dict())


@staff_required
def create_product(request):
    fields, translations = parse_product_payload(parse_json_body(request))
    product = services.create_product(
        category=fields["category_id"],
        subcategory=fields.get("subcategory_id"),
        images=fields.get("images", []),
        translations=translations,
    )
    data = {"id": product.pk, "message": "Товар успешно создан"}
    created = _read_back(
        lambda: services.get_product(product.pk, "ru", with_related=False),
        "product",
        product.pk,
    )
    if created is not None:
        data["product"] = created.as_dict()
    return success_response(data, status=201)


@require_http_methods(["GET", "PATCH"])
@api_view
def product_detail(request, pk):
    language = get_query_language(request)
    if request.method == "PATCH":
        return update_product(request, pk, language)
    return success_response(services.get_product(pk, language).as_dict())


@staff_required
def update_product(request, pk, language):
    if services.PRODUCT_TRANSLATIONS.get(pk, language) is None:
        raise NotFoundError("Товар не найден")
    product = Product.objects.get(pk=pk)
    existing = services.PRODUCT_TRANSLATIONS.mapping(pk)

    payload = parse_json_body(request)
    fields, translations = parse_product_payload(
        payload,
        existing_languages=set(existing),
    )
    changes = {}
    if "category_id" in fields:
        changes["category"] = fields["category_id"]
    if "subcategory_id" in fields:
        changes["subcategory"] = fields["subcategory_id"]
    services.update_product(
        product,
        changes=changes,
        translations=translations,
        images=fields.get("images") if "images" in payload else None,
    )

    data = {"id": pk, "message": "Товар успешно обновлен"}
    updated = _read_back(
        lambda: services.get_product(pk, language, with_related=False),
        "product",
        pk,
    )
    if updated is not None:
        data["product"] = updated.as_dict()
    return success_response(data)


@require_http_methods(["GET"])
@api_view
def related_products(request, pk):
    limit = parse_positive_int(
        request.GET.get("limit"),
        settings.RELATED_PRODUCTS_LIMIT,
    )
    related = services.get_related_products(
        pk,
        get_query_language(request),
        limit=limit,
    )
    return success_response([p.as_dict() for p in related])


@require_http_methods(["GET", "POST"])
@api_view
def categories(request):
    if request.method == "POST":
        return create_category(request)
    tree = services.get_categories(get_query_language(request))
    return success_response([c.as_dict() for c in tree])


@staff_required
def create_category(request):
    fields, names = parse_category_payload(parse_json_body(request))
    category = services.save_category(
        None,
        changes={"parent": fields.get("parent_id")},
        names=names,
    )
    data = {"id": category.pk, "message": "Категория успешно создана"}
    created = _read_back(
        lambda: services.get_category(category.pk, "ru"),
        "category",
        category.pk,
    )
    if created is not None:
        data["category"] = created.as_dict()
    return success_response(data, status=201)


@require_http_methods(["GET", "PATCH"])
@api_view
def category_detail(request, pk):
    language = get_query_language(request)
    if request.method == "PATCH":
        return update_category(request, pk, language)
    return success_response(services.get_category(pk, language).as_dict())


@staff_required
def update_category(request, pk, language):
    category = Category.objects.filter(pk=pk).first()
    if category is None:
        raise NotFoundError("Категория не найдена")
    existing = services.CATEGORY_TRANSLATIONS.mapping(pk)
    fields, names = parse_category_payload(
        parse_json_body(request),
        existing_languages=set(existing),
    )

    changes = {}
    if "parent_id" in fields:
        parent = fields["parent_id"]
        if parent is not None and (
            parent.pk == category.pk or category.subcategories.exists()
        ):
            # Дерево категорий не глубже двух уровней
            raise ValidationError(
                errors=[{
                    "field": "parent_id",
                    "message": "Недопустимая родительская категория",
                }]
            )
        changes["parent"] = parent
    services.save_category(category, changes=changes, names=names)

    data = {"id": pk, "message": "Категория успешно обновлена"}
    updated = _read_back(
        lambda: services.get_category(pk, language),
        "category",
        pk,
    )
    if updated is not None:
        data["category"] = updated.as_dict()
    return success_response(data)
