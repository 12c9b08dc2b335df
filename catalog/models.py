from django.db import models

from core.languages import DEFAULT_LANGUAGE
from core.translations import resolve


class Category(models.Model):
    """Категория товаров (верхний уровень или подкатегория)."""

    parent = models.ForeignKey(
        "self",
        on_delete=models.CASCADE,
        null=True,
        blank=True,
        related_name="subcategories",
        verbose_name="Родительская категория",
    )
    created_at = models.DateTimeField("Дата создания", auto_now_add=True)
    updated_at = models.DateTimeField("Дата обновления", auto_now=True)

    class Meta:
        db_table = "categories"
        ordering = ["id"]
        verbose_name = "Категория"
        verbose_name_plural = "Категории"

    def __str__(self):
        return self.display_name()

    def display_name(self, language=DEFAULT_LANGUAGE):
        """Название на языке или на русском; пустая строка, если нет ни того, ни другого."""
        translation = resolve(
            {t.language: t for t in self.translations.all()},
            language,
        )
        return translation.name if translation else ""


class CategoryTranslation(models.Model):
    """Название категории на одном языке."""

    category = models.ForeignKey(
        Category,
        on_delete=models.CASCADE,
        related_name="translations",
        verbose_name="Категория",
    )
    language = models.CharField("Язык", max_length=10)
    name = models.CharField("Название", max_length=200)

    class Meta:
        db_table = "category_translations"
        verbose_name = "Перевод категории"
        verbose_name_plural = "Переводы категорий"
        constraints = [
            models.UniqueConstraint(
                fields=["category", "language"],
                name="category_translation_unique_language",
            ),
        ]

    def __str__(self):
        return f"{self.name} ({self.language})"


class Product(models.Model):
    """
    Товар. Название, описание, цена и валюта зависят от языка
    и хранятся в ProductTranslation.
    """

    category = models.ForeignKey(
        Category,
        on_delete=models.CASCADE,
        related_name="products",
        verbose_name="Категория",
    )
    subcategory = models.ForeignKey(
        Category,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="subcategory_products",
        verbose_name="Подкатегория",
    )
    created_at = models.DateTimeField("Дата создания", auto_now_add=True)
    updated_at = models.DateTimeField("Дата обновления", auto_now=True)

    class Meta:
        db_table = "products"
        ordering = ["-id"]
        verbose_name = "Товар"
        verbose_name_plural = "Товары"

    def __str__(self):
        translation = resolve(
            {t.language: t for t in self.translations.all()},
            DEFAULT_LANGUAGE,
        )
        return translation.name if translation else f"Товар #{self.pk}"


class ProductTranslation(models.Model):
    """Название, описание и цена товара на одном языке."""

    product = models.ForeignKey(
        Product,
        on_delete=models.CASCADE,
        related_name="translations",
        verbose_name="Товар",
    )
    language = models.CharField("Язык", max_length=10)
    name = models.CharField("Название", max_length=300)
    description = models.TextField("Описание", blank=True)
    price = models.DecimalField(
        "Цена",
        max_digits=12,
        decimal_places=2,
    )
    currency = models.CharField("Валюта", max_length=10)

    class Meta:
        db_table = "product_translations"
        verbose_name = "Перевод товара"
        verbose_name_plural = "Переводы товаров"
        constraints = [
            models.UniqueConstraint(
                fields=["product", "language"],
                name="product_translation_unique_language",
            ),
        ]

    def __str__(self):
        return f"{self.name} ({self.language})"


class ProductCharacteristic(models.Model):
    """Произвольная характеристика товара (ключ и значение) на одном языке."""

    product = models.ForeignKey(
        Product,
        on_delete=models.CASCADE,
        related_name="characteristics",
        verbose_name="Товар",
    )
    language = models.CharField("Язык", max_length=10)
    key = models.CharField("Характеристика", max_length=200)
    value = models.TextField("Значение", blank=True)

    class Meta:
        db_table = "product_characteristics"
        ordering = ["id"]
        verbose_name = "Характеристика товара"
        verbose_name_plural = "Характеристики товаров"
        constraints = [
            models.UniqueConstraint(
                fields=["product", "language", "key"],
                name="product_characteristic_unique_key",
            ),
        ]

    def __str__(self):
        return f"{self.key}: {self.value}"


class ProductImage(models.Model):
    """Фотография товара (ссылка). Первое фото считается основным."""

    product = models.ForeignKey(
        Product,
        on_delete=models.CASCADE,
        related_name="images",
        verbose_name="Товар",
    )
    url = models.CharField("Ссылка", max_length=500)
    is_main = models.BooleanField("Основное фото", default=False)
    sort_order = models.PositiveIntegerField("Порядок", default=0)
    created_at = models.DateTimeField("Дата создания", auto_now_add=True)

    class Meta:
        db_table = "product_images"
        ordering = ["-is_main", "sort_order", "id"]
        verbose_name = "Фото товара"
        verbose_name_plural = "Фото товаров"

    def __str__(self):
        return self.url
