from django.urls import path

from . import views

app_name = "catalog"

urlpatterns = [
    path("products", views.products, name="products"),
    path("products/<int:pk>", views.product_detail, name="product_detail"),
    path(
        "products/<int:pk>/related",
        views.related_products,
        name="related_products",
    ),
    path("categories", views.categories, name="categories"),
    path(
        "categories/<int:pk>",
        views.category_detail,
        name="category_detail",
    ),
]
