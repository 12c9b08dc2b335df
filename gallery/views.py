"""
JSON API галереи работ.
"""
import logging

from django.db import DatabaseError
from django.views.decorators.http import require_http_methods

from core.api import api_view, parse_json_body, success_response
from core.decorators import staff_required
from core.exceptions import ApiError, NotFoundError
from core.languages import get_query_language

from . import services
from .forms import parse_gallery_payload
from .models import GalleryItem

logger = logging.getLogger(__name__)


@require_http_methods(["GET", "POST"])
@api_view
def gallery(request):
    if request.method == "POST":
        return create_item(request)
    filters = services.GalleryFilter.from_query(
        request.GET,
        language=get_query_language(request),
    )
    return success_response(services.list_gallery(filters).as_dict())


@staff_required
def create_item(request):
    fields, translations = parse_gallery_payload(parse_json_body(request))
    item = services.create_gallery_item(
        category=fields["category_id"],
        thumbnail=fields["thumbnail"],
        full_image=fields["full_image"],
        translations=translations,
    )
    return success_response(
        {"id": item.pk, "message": "Элемент галереи успешно создан"},
        status=201,
    )


@require_http_methods(["GET", "PATCH", "DELETE"])
@api_view
def gallery_item(request, pk):
    language = get_query_language(request)
    if request.method == "PATCH":
        return update_item(request, pk, language)
    if request.method == "DELETE":
        return delete_item(request, pk)
    return success_response(services.get_gallery_item(pk, language).as_dict())


@staff_required
def update_item(request, pk, language):
    item = GalleryItem.objects.filter(pk=pk).first()
    if item is None:
        raise NotFoundError(services.NOT_FOUND_MESSAGE)
    existing = services.GALLERY_TRANSLATIONS.mapping(pk)
    fields, translations = parse_gallery_payload(
        parse_json_body(request),
        existing_languages=set(existing),
    )
    changes = {
        name: fields[name]
        for name in ("thumbnail", "full_image")
        if name in fields
    }
    if "category_id" in fields:
        changes["category"] = fields["category_id"]
    services.update_gallery_item(
        item,
        changes=changes,
        translations=translations,
    )

    data = {"id": pk, "message": "Элемент галереи успешно обновлен"}
    try:
        data["item"] = services.get_gallery_item(pk, language).as_dict()
    except (ApiError, DatabaseError):
        logger.exception("Failed to read back gallery item %s", pk)
    return success_response(data)


@staff_required
def delete_item(request, pk):
    services.delete_gallery_item(pk)
    return success_response({"message": "Элемент галереи успешно удален"})
