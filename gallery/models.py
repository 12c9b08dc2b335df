from django.db import models

from core.languages import DEFAULT_LANGUAGE
from core.translations import resolve


class GalleryItem(models.Model):
    """Работа в галерее: превью и полноразмерное изображение."""

    category = models.ForeignKey(
        "catalog.Category",
        on_delete=models.CASCADE,
        related_name="gallery_items",
        verbose_name="Категория",
    )
    thumbnail = models.CharField("Превью", max_length=500)
    full_image = models.CharField("Изображение", max_length=500)
    created_at = models.DateTimeField("Дата создания", auto_now_add=True)
    updated_at = models.DateTimeField("Дата обновления", auto_now=True)

    class Meta:
        db_table = "gallery_items"
        ordering = ["-created_at", "-id"]
        verbose_name = "Элемент галереи"
        verbose_name_plural = "Галерея"

    def __str__(self):
        translation = resolve(
            {t.language: t for t in self.translations.all()},
            DEFAULT_LANGUAGE,
        )
        return translation.title if translation else f"Работа #{self.pk}"


class GalleryItemTranslation(models.Model):
    item = models.ForeignKey(
        GalleryItem,
        on_delete=models.CASCADE,
        related_name="translations",
        db_column="gallery_item_id",
        verbose_name="Элемент галереи",
    )
    language = models.CharField("Язык", max_length=10)
    title = models.CharField("Заголовок", max_length=300)
    description = models.TextField("Описание", blank=True)

    class Meta:
        db_table = "gallery_item_translations"
        verbose_name = "Перевод элемента галереи"
        verbose_name_plural = "Переводы элементов галереи"
        constraints = [
            models.UniqueConstraint(
                fields=["item", "language"],
                name="gallery_translation_unique_language",
            ),
        ]

    def __str__(self):
        return f"{self.title} ({self.language})"
