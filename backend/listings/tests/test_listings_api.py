import pytest
from django.core.exceptions import ValidationError

from listings.models import Listing

pytestmark = pytest.mark.django_db


def listing_payload(**overrides):
    payload = {
        "title": "Pressure Washer",
        "description": "Electric, 2000 PSI.",
        "image_uris": ["https://img.test/washer.jpg"],
        "price": {"amount": 2500, "unit": "day"},
    }
    payload.update(overrides)
    return payload


def test_create_listing_starts_available(auth, owner_user):
    resp = auth(owner_user).post("/api/listings/", listing_payload(), format="json")

    assert resp.status_code == 201, resp.data
    assert resp.data["owner_uuid"] == str(owner_user.uuid)
    assert resp.data["status"] == "available"
    assert resp.data["active"] is True
    assert resp.data["current_tenant_uuid"] is None
    assert resp.data["price"] == {"amount": 2500, "unit": "day"}
    listing = Listing.objects.get(pk=resp.data["id"])
    assert listing.price_amount == 2500
    assert listing.owner == owner_user


def test_create_listing_ignores_client_status(auth, owner_user):
    resp = auth(owner_user).post(
        "/api/listings/",
        listing_payload(status="rented", active=False),
        format="json",
    )
    assert resp.status_code == 201
    assert resp.data["status"] == "available"
    assert resp.data["active"] is True


def test_create_listing_requires_auth(api_client):
    resp = api_client.post("/api/listings/", listing_payload(), format="json")
    assert resp.status_code == 401


@pytest.mark.parametrize(
    "overrides",
    [
        {"title": "ab"},
        {"description": "  "},
        {"image_uris": []},
        {"price": {"amount": 0, "unit": "day"}},
        {"price": {"amount": 100, "unit": "year"}},
    ],
)
def test_create_listing_validation(auth, owner_user, overrides):
    resp = auth(owner_user).post("/api/listings/", listing_payload(**overrides), format="json")
    assert resp.status_code == 400
    assert not Listing.objects.exists()


def test_browse_shows_only_active_listings(api_client, listing, owner_user, renter_user):
    Listing.objects.create(
        owner=owner_user,
        title="Rented Canoe",
        description="Already out",
        image_uris=["https://img.test/canoe.jpg"],
        price_amount=4000,
        status=Listing.Status.RENTED,
        active=False,
        current_tenant=renter_user,
    )

    resp = api_client.get("/api/listings/")

    assert resp.status_code == 200
    assert [item["id"] for item in resp.data["results"]] == [listing.id]


def test_mine_lists_all_owned_listings(auth, listing, owner_user, renter_user):
    rented = Listing.objects.create(
        owner=owner_user,
        title="Rented Canoe",
        description="Already out",
        image_uris=["https://img.test/canoe.jpg"],
        price_amount=4000,
        status=Listing.Status.RENTED,
        active=False,
        current_tenant=renter_user,
    )

    resp = auth(owner_user).get("/api/listings/?mine=1")

    assert {item["id"] for item in resp.data["results"]} == {listing.id, rented.id}
    assert auth(renter_user).get("/api/listings/?mine=1").data["results"] == []


def test_retrieve_listing(api_client, listing):
    resp = api_client.get(f"/api/listings/{listing.id}/")
    assert resp.status_code == 200
    assert resp.data["title"] == "Camping Tent"
    assert api_client.get("/api/listings/999999/").status_code == 404


def test_rented_listing_requires_tenant_and_inactive(listing):
    listing.status = Listing.Status.RENTED
    with pytest.raises(ValidationError):
        listing.clean()
