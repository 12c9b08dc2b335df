# Generated manually for gallery app

from django.db import migrations, models
import django.db.models.deletion


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("catalog", "0001_initial"),
    ]

    operations = [
        migrations.CreateModel(
            name="GalleryItem",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("thumbnail", models.CharField(max_length=500, verbose_name="Превью")),
                ("full_image", models.CharField(max_length=500, verbose_name="Изображение")),
                ("created_at", models.DateTimeField(auto_now_add=True, verbose_name="Дата создания")),
                ("updated_at", models.DateTimeField(auto_now=True, verbose_name="Дата обновления")),
                ("category", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="gallery_items", to="catalog.category", verbose_name="Категория")),
            ],
            options={
                "verbose_name": "Элемент галереи",
                "verbose_name_plural": "Галерея",
                "db_table": "gallery_items",
                "ordering": ["-created_at", "-id"],
            },
        ),
        migrations.CreateModel(
            name="GalleryItemTranslation",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("language", models.CharField(max_length=10, verbose_name="Язык")),
                ("title", models.CharField(max_length=300, verbose_name="Заголовок")),
                ("description", models.TextField(blank=True, verbose_name="Описание")),
                ("item", models.ForeignKey(db_column="gallery_item_id", on_delete=django.db.models.deletion.CASCADE, related_name="translations", to="gallery.galleryitem", verbose_name="Элемент галереи")),
            ],
            options={
                "verbose_name": "Перевод элемента галереи",
                "verbose_name_plural": "Переводы элементов галереи",
                "db_table": "gallery_item_translations",
            },
        ),
        migrations.AddConstraint(
            model_name="galleryitemtranslation",
            constraint=models.UniqueConstraint(fields=("item", "language"), name="gallery_translation_unique_language"),
        ),
    ]
