"""
Публичные точки API: оформление заказа и форма обратной связи.
"""
from django.http import JsonResponse
from django.views.decorators.http import require_POST

from core.api import api_view, parse_json_body, success_response
from core.languages import resolve_language
from notifications.services import get_sender

from . import services
from .forms import parse_contact_form, parse_order_form


@require_POST
@api_view
def create_order(request):
    data = parse_order_form(parse_json_body(request))
    language = resolve_language(data["language"], request)
    order = services.place_order(
        services.OrderRequest(
            name=data["name"],
            email=data["email"],
            phone=data["phone"],
            comment=data["comment"],
            language=language,
            items=tuple(data["items"]),
        ),
        get_sender(),
    )
    return JsonResponse({
        "success": True,
        "order_id": order.pk,
        "message": services.localized(
            services.ORDER_SUCCESS_MESSAGES,
            language,
        ),
    })


@require_POST
@api_view
def contact(request):
    data = parse_contact_form(parse_json_body(request))
    language = resolve_language(data["language"], request)
    services.submit_contact(
        services.ContactRequest(
            name=data["name"],
            email=data["email"],
            phone=data["phone"],
            message=data["message"],
            language=language,
        ),
        get_sender(),
    )
    return success_response({
        "message": services.localized(
            services.CONTACT_SUCCESS_MESSAGES,
            language,
        ),
    })
