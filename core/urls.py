from django.urls import path

from . import views

app_name = "core"

urlpatterns = [
    path("health", views.health, name="health"),
    path("csrf", views.csrf, name="csrf"),
    path("auth/login", views.login_view, name="login"),
    path("auth/logout", views.logout_view, name="logout"),
]
