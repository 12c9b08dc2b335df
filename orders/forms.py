"""
Формы заказа и обратной связи (JSON-запросы).
"""
from django import forms

from catalog.forms import PayloadForm, validate_form

EMAIL_MESSAGE = "Некорректный формат email"
MAX_QUANTITY = 10_000
MAX_PRODUCT_ID = 2**63 - 1


class ContactFieldsForm(PayloadForm):
    """Общие поля клиента: имя, email, телефон, язык."""

    name = forms.CharField(max_length=200)
    email = forms.EmailField(error_messages={"invalid": EMAIL_MESSAGE})
    phone = forms.CharField(max_length=50)
    language = forms.CharField(max_length=10, required=False)


class OrderForm(ContactFieldsForm):
    comment = forms.CharField(required=False)
    items = forms.JSONField(required=False)

    def clean_items(self):
        items = self.cleaned_data.get("items")
        if items is None:
            return []
        if not isinstance(items, list) or not all(
            isinstance(item, dict) for item in items
        ):
            raise forms.ValidationError(
                "Ожидается список вида [{product_id, quantity}]"
            )
        return items


class OrderItemForm(PayloadForm):
    product_id = forms.IntegerField(min_value=1, max_value=MAX_PRODUCT_ID)
    quantity = forms.IntegerField(min_value=1, max_value=MAX_QUANTITY)


class ContactForm(ContactFieldsForm):
    message = forms.CharField()


def parse_order_form(payload) -> dict:
    """Проверяет заказ вместе с позициями; ошибки позиций: items.<n>.<поле>."""
    form = validate_form(OrderForm(payload))
    data = dict(form.cleaned_data)
    data["items"] = [
        validate_form(OrderItemForm(item), prefix=f"items.{index}.").cleaned_data
        for index, item in enumerate(data["items"])
    ]
    return data


def parse_contact_form(payload) -> dict:
    return dict(validate_form(ContactForm(payload)).cleaned_data)
