"""
Корневые URL-маршруты проекта.
"""
from django.contrib import admin
from django.urls import include, path

urlpatterns = [
    path("admin/", admin.site.urls),
    path("api/", include("core.urls")),
    path("api/", include("catalog.urls")),
    path("api/", include("gallery.urls")),
    path("api/", include("orders.urls")),
]
