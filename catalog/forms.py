"""
Формы проверки JSON-запросов на создание и изменение каталога.

При частичном обновлении (partial=True) обязательны только переданные
поля; отсутствующие в запросе поля не проверяются и не меняются.
"""
from django import forms

from core.api import form_errors
from core.exceptions import ValidationError
from core.languages import DEFAULT_LANGUAGE

from .models import Category

REQUIRED_MESSAGE = "Поле обязательно для заполнения"
MISSING_DEFAULT_TRANSLATION = (
    "Отсутствует обязательный перевод для русского языка"
)


class PayloadForm(forms.Form):
    """Форма поверх словаря из JSON; partial снимает обязательность."""

    def __init__(self, payload, *, partial=False, **kwargs):
        super().__init__(data=payload, **kwargs)
        self.payload = payload
        for name, form_field in self.fields.items():
            form_field.error_messages["required"] = REQUIRED_MESSAGE
            if partial and name not in payload:
                form_field.required = False

    def present_data(self) -> dict:
        """Очищенные значения только тех полей, что были в запросе."""
        return {
            name: value
            for name, value in self.cleaned_data.items()
            if name in self.payload
        }


class CategoryChoiceField(forms.ModelChoiceField):
    def __init__(self, **kwargs):
        kwargs.setdefault("queryset", Category.objects.all())
        kwargs.setdefault(
            "error_messages",
            {"invalid_choice": "Категория не найдена"},
        )
        super().__init__(**kwargs)


def clean_translations_map(value):
    if value is None:
        return {}
    if not isinstance(value, dict) or not all(
        isinstance(v, dict) for v in value.values()
    ):
        raise forms.ValidationError(
            "Ожидается объект с переводами по языкам"
        )
    for language in value:
        if not language or len(language) > 10:
            raise forms.ValidationError(f"Некорректный код языка: {language}")
    return value


class ProductForm(PayloadForm):
    category_id = CategoryChoiceField()
    subcategory_id = CategoryChoiceField(required=False)
    images = forms.JSONField(required=False)
    translations = forms.JSONField()

    def clean_images(self):
        images = self.cleaned_data.get("images")
        if images is None:
            return []
        if not isinstance(images, list) or not all(
            isinstance(url, str) and url.strip() for url in images
        ):
            raise forms.ValidationError(
                "Ожидается список ссылок на изображения"
            )
        return [url.strip() for url in images]

    def clean_translations(self):
        return clean_translations_map(self.cleaned_data.get("translations"))


class ProductTranslationForm(PayloadForm):
    name = forms.CharField(max_length=300)
    description = forms.CharField(required=False, strip=False)
    price = forms.DecimalField(min_value=0, max_digits=12, decimal_places=2)
    currency = forms.CharField(max_length=10)
    characteristics = forms.JSONField(required=False)

    def clean_characteristics(self):
        value = self.cleaned_data.get("characteristics")
        if value is None:
            return {}
        if not isinstance(value, dict):
            raise forms.ValidationError(
                "Ожидается объект вида {характеристика: значение}"
            )
        return {
            str(key).strip(): "" if item is None else str(item)
            for key, item in value.items()
            if str(key).strip()
        }


class CategoryForm(PayloadForm):
    parent_id = CategoryChoiceField(
        queryset=Category.objects.filter(parent__isnull=True),
        required=False,
        error_messages={
            "invalid_choice": (
                "Родительской может быть только категория верхнего уровня"
            ),
        },
    )
    translations = forms.JSONField()

    def clean_translations(self):
        return clean_translations_map(self.cleaned_data.get("translations"))


class CategoryTranslationForm(PayloadForm):
    name = forms.CharField(max_length=200)


def validate_form(form, prefix=""):
    if not form.is_valid():
        raise ValidationError(errors=form_errors(form, prefix))
    return form


def parse_product_payload(payload, *, existing_languages=None):
    """
    Проверяет тело запроса товара.

    existing_languages=None означает создание: нужны category_id и перевод "ru".
    Иначе это частичное обновление: для языков из existing_languages
    проверяются только переданные поля, новый язык нужен целиком.

    Возвращает (поля товара, {язык: поля перевода}).
    """
    partial = existing_languages is not None
    form = validate_form(ProductForm(payload, partial=partial))
    translations = form.cleaned_data["translations"]
    if not partial and DEFAULT_LANGUAGE not in translations:
        raise ValidationError(MISSING_DEFAULT_TRANSLATION)

    cleaned_translations = {}
    for language, data in translations.items():
        is_partial = partial and language in existing_languages
        translation_form = validate_form(
            ProductTranslationForm(data, partial=is_partial),
            prefix=f"translations.{language}.",
        )
        cleaned_translations[language] = translation_form.present_data()
        if not is_partial:
            cleaned_translations[language].setdefault("description", "")
    return form.present_data(), cleaned_translations


def parse_category_payload(payload, *, existing_languages=None):
    """То же для категории: (поля категории, {язык: название})."""
    partial = existing_languages is not None
    form = validate_form(CategoryForm(payload, partial=partial))
    translations = form.cleaned_data["translations"]
    if not partial and DEFAULT_LANGUAGE not in translations:
        raise ValidationError(MISSING_DEFAULT_TRANSLATION)

    names = {}
    for language, data in translations.items():
        translation_form = validate_form(
            CategoryTranslationForm(data),
            prefix=f"translations.{language}.",
        )
        names[language] = translation_form.cleaned_data["name"]
    return form.present_data(), names
