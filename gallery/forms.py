from django import forms

from catalog.forms import (
    MISSING_DEFAULT_TRANSLATION,
    CategoryChoiceField,
    PayloadForm,
    clean_translations_map,
    validate_form,
)
from core.exceptions import ValidationError
from core.languages import DEFAULT_LANGUAGE


class GalleryItemForm(PayloadForm):
    category_id = CategoryChoiceField()
    thumbnail = forms.CharField(max_length=500)
    full_image = forms.CharField(max_length=500)
    translations = forms.JSONField()

    def clean_translations(self):
        return clean_translations_map(self.cleaned_data.get("translations"))


class GalleryItemTranslationForm(PayloadForm):
    title = forms.CharField(max_length=300)
    description = forms.CharField(required=False, strip=False)


def parse_gallery_payload(payload, *, existing_languages=None):
    """
    Проверяет тело запроса элемента галереи.
    Возвращает (поля элемента, {язык: поля перевода}).
    """
    partial = existing_languages is not None
    form = validate_form(GalleryItemForm(payload, partial=partial))
    translations = form.cleaned_data["translations"]
    if not partial and DEFAULT_LANGUAGE not in translations:
        raise ValidationError(MISSING_DEFAULT_TRANSLATION)

    cleaned = {}
    for language, data in translations.items():
        is_partial = partial and language in existing_languages
        translation_form = validate_form(
            GalleryItemTranslationForm(data, partial=is_partial),
            prefix=f"translations.{language}.",
        )
        cleaned[language] = translation_form.present_data()
        if not is_partial:
            cleaned[language].setdefault("description", "")
    return form.present_data(), cleaned
