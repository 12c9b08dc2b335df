from django.urls import path

from . import views

app_name = "gallery"

urlpatterns = [
    path("gallery", views.gallery, name="list"),
    path("gallery/<int:pk>", views.gallery_item, name="detail"),
]
