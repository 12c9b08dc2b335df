# Generated manually for orders app

from decimal import Decimal

from django.db import migrations, models
import django.db.models.deletion


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="Order",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("name", models.CharField(max_length=200, verbose_name="Имя")),
                ("email", models.EmailField(max_length=254, verbose_name="Email")),
                ("phone", models.CharField(max_length=50, verbose_name="Телефон")),
                ("comment", models.TextField(blank=True, verbose_name="Комментарий к заказу")),
                ("status", models.CharField(db_index=True, default="new", max_length=50, verbose_name="Статус")),
                ("total_cost", models.DecimalField(decimal_places=2, default=Decimal("0"), max_digits=12, verbose_name="Сумма заказа")),
                ("language", models.CharField(default="ru", max_length=10, verbose_name="Язык")),
                ("created_at", models.DateTimeField(auto_now_add=True, verbose_name="Дата создания")),
                ("updated_at", models.DateTimeField(auto_now=True, verbose_name="Дата обновления")),
            ],
            options={
                "verbose_name": "заказ",
                "verbose_name_plural": "заказы",
                "db_table": "orders",
                "ordering": ["-created_at"],
            },
        ),
        migrations.CreateModel(
            name="OrderItem",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("product_id", models.PositiveBigIntegerField(db_index=True, verbose_name="ID товара")),
                ("quantity", models.PositiveIntegerField(default=1, verbose_name="Количество")),
                ("price", models.DecimalField(decimal_places=2, help_text="Цена на момент оформления", max_digits=12, verbose_name="Цена за единицу")),
                ("product_name", models.CharField(max_length=300, verbose_name="Название товара")),
                ("product_image", models.CharField(blank=True, max_length=500, verbose_name="Фото товара")),
                ("order", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="items", to="orders.order", verbose_name="Заказ")),
            ],
            options={
                "verbose_name": "позиция заказа",
                "verbose_name_plural": "позиции заказа",
                "db_table": "order_items",
                "ordering": ["id"],
            },
        ),
    ]
