from django.urls import path

from .api import notifications

urlpatterns = [
    path("", notifications, name="notifications"),
]
