"""Shared pytest configuration and fixtures."""

from __future__ import annotations

import pytest
from django.contrib.auth import get_user_model
from rest_framework.test import APIClient

from applications.models import Application
from listings.models import Listing
from payments import stripe_api

User = get_user_model()
PASSWORD = "x"


def _create_user(username: str, **extra) -> User:
    return User.objects.create_user(
        username=username,
        email=f"{username}@example.com",
        password=PASSWORD,
        **extra,
    )


@pytest.fixture
def api_client():
    """DRF API client for request/response helpers."""
    return APIClient()


@pytest.fixture
def auth():
    """Return a helper that logs ``user`` in and yields an authenticated client."""

    def _auth(user) -> APIClient:
        client = APIClient()
        token_resp = client.post(
            "/api/users/token/",
            {"username": user.username, "password": PASSWORD},
            format="json",
        )
        token = token_resp.data["access"]
        client.credentials(HTTP_AUTHORIZATION=f"Bearer {token}")
        return client

    return _auth


@pytest.fixture
def owner_user():
    return _create_user("owner", name="Olivia Owner")


@pytest.fixture
def renter_user():
    return _create_user("renter", name="Rina Renter")


@pytest.fixture
def other_user():
    return _create_user("other", name="Oscar Other")


@pytest.fixture
def listing(owner_user):
    return Listing.objects.create(
        owner=owner_user,
        title="Camping Tent",
        description="Four person tent, easy setup.",
        image_uris=["https://img.test/tent.jpg"],
        price_amount=5000,
        price_unit=Listing.PriceUnit.DAY,
    )


@pytest.fixture
def application_factory(listing):
    def _create(
        applicant,
        *,
        target: Listing | None = None,
        status: str = Application.Status.PENDING,
        days_renting: int = 3,
        description: str = "I'd like to borrow this for a weekend trip.",
    ) -> Application:
        return Application.objects.create(
            listing=target or listing,
            applicant=applicant,
            description=description,
            days_renting=days_renting,
            status=status,
        )

    return _create


@pytest.fixture
def fake_stripe(monkeypatch):
    """Replace Stripe Price/PaymentLink creation and record the calls."""
    calls: dict[str, list[dict]] = {"price": [], "link": []}

    def fake_price_create(**kwargs):
        calls["price"].append(kwargs)
        return {"id": f"price_test_{len(calls['price'])}"}

    def fake_link_create(**kwargs):
        calls["link"].append(kwargs)
        count = len(calls["link"])
        return {"id": f"plink_test_{count}", "url": f"https://buy.stripe.test/plink_{count}"}

    monkeypatch.setattr(
        stripe_api.stripe,
        "Price",
        type("MockPrice", (), {"create": staticmethod(fake_price_create)}),
    )
    monkeypatch.setattr(
        stripe_api.stripe,
        "PaymentLink",
        type("MockPaymentLink", (), {"create": staticmethod(fake_link_create)}),
    )
    return calls
