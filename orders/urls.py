from django.urls import path

from . import views

app_name = "orders"

urlpatterns = [
    path("orders", views.create_order, name="create"),
    path("contact", views.contact, name="contact"),
]
