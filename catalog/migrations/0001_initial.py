# Generated manually for catalog app

from django.db import migrations, models
import django.db.models.deletion


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="Category",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("created_at", models.DateTimeField(auto_now_add=True, verbose_name="Дата создания")),
                ("updated_at", models.DateTimeField(auto_now=True, verbose_name="Дата обновления")),
                ("parent", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.CASCADE, related_name="subcategories", to="catalog.category", verbose_name="Родительская категория")),
            ],
            options={
                "verbose_name": "Категория",
                "verbose_name_plural": "Категории",
                "db_table": "categories",
                "ordering": ["id"],
            },
        ),
        migrations.CreateModel(
            name="Product",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("created_at", models.DateTimeField(auto_now_add=True, verbose_name="Дата создания")),
                ("updated_at", models.DateTimeField(auto_now=True, verbose_name="Дата обновления")),
                ("category", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="products", to="catalog.category", verbose_name="Категория")),
                ("subcategory", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="subcategory_products", to="catalog.category", verbose_name="Подкатегория")),
            ],
            options={
                "verbose_name": "Товар",
                "verbose_name_plural": "Товары",
                "db_table": "products",
                "ordering": ["-id"],
            },
        ),
        migrations.CreateModel(
            name="CategoryTranslation",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("language", models.CharField(max_length=10, verbose_name="Язык")),
                ("name", models.CharField(max_length=200, verbose_name="Название")),
                ("category", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="translations", to="catalog.category", verbose_name="Категория")),
            ],
            options={
                "verbose_name": "Перевод категории",
                "verbose_name_plural": "Переводы категорий",
                "db_table": "category_translations",
            },
        ),
        migrations.CreateModel(
            name="ProductTranslation",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("language", models.CharField(max_length=10, verbose_name="Язык")),
                ("name", models.CharField(max_length=300, verbose_name="Название")),
                ("description", models.TextField(blank=True, verbose_name="Описание")),
                ("price", models.DecimalField(decimal_places=2, max_digits=12, verbose_name="Цена")),
                ("currency", models.CharField(max_length=10, verbose_name="Валюта")),
                ("product", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="translations", to="catalog.product", verbose_name="Товар")),
            ],
            options={
                "verbose_name": "Перевод товара",
                "verbose_name_plural": "Переводы товаров",
                "db_table": "product_translations",
            },
        ),
        migrations.CreateModel(
            name="ProductCharacteristic",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("language", models.CharField(max_length=10, verbose_name="Язык")),
                ("key", models.CharField(max_length=200, verbose_name="Характеристика")),
                ("value", models.TextField(blank=True, verbose_name="Значение")),
                ("product", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="characteristics", to="catalog.product", verbose_name="Товар")),
            ],
            options={
                "verbose_name": "Характеристика товара",
                "verbose_name_plural": "Характеристики товаров",
                "db_table": "product_characteristics",
                "ordering": ["id"],
            },
        ),
        migrations.CreateModel(
            name="ProductImage",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("url", models.CharField(max_length=500, verbose_name="Ссылка")),
                ("is_main", models.BooleanField(default=False, verbose_name="Основное фото")),
                ("sort_order", models.PositiveIntegerField(default=0, verbose_name="Порядок")),
                ("created_at", models.DateTimeField(auto_now_add=True, verbose_name="Дата создания")),
                ("product", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="images", to="catalog.product", verbose_name="Товар")),
            ],
            options={
                "verbose_name": "Фото товара",
                "verbose_name_plural": "Фото товаров",
                "db_table": "product_images",
                "ordering": ["-is_main", "sort_order", "id"],
            },
        ),
        migrations.AddConstraint(
            model_name="categorytranslation",
            constraint=models.UniqueConstraint(fields=("category", "language"), name="category_translation_unique_language"),
        ),
        migrations.AddConstraint(
            model_name="producttranslation",
            constraint=models.UniqueConstraint(fields=("product", "language"), name="product_translation_unique_language"),
        ),
        migrations.AddConstraint(
            model_name="productcharacteristic",
            constraint=models.UniqueConstraint(fields=("product", "language", "key"), name="product_characteristic_unique_key"),
        ),
    ]
