from django.urls import path

from .api import payment_success, stripe_webhook

app_name = "payments"

urlpatterns = [
    path("success/", payment_success, name="payment_success"),
    path("stripe/webhook/", stripe_webhook, name="stripe_webhook"),
]
