from urllib.parse import parse_qs, urlparse

import pytest
import stripe

from applications import workflow
from applications.exceptions import AccessDenied, Conflict, InvalidRequest
from applications.models import Application
from notifications.models import Notification
from payments import stripe_api
from payments.models import SecureToken

pytestmark = pytest.mark.django_db


def confirm_url(application_id):
    return f"/api/applications/{application_id}/confirm-receipt/"


def test_confirm_receipt_issues_payment_link(
    auth,
    listing,
    owner_user,
    renter_user,
    application_factory,
    fake_stripe,
    django_capture_on_commit_callbacks,
):
    application = application_factory(renter_user, status=Application.Status.APPROVED)

    with django_capture_on_commit_callbacks(execute=True):
        resp = auth(renter_user).post(confirm_url(application.id))

    assert resp.status_code == 200, resp.data
    assert resp.data["application_id"] == application.id
    assert resp.data["listing_id"] == listing.id
    assert resp.data["payment_link"] == "https://buy.stripe.test/plink_1"
    assert resp.data["message"]

    application.refresh_from_db()
    assert application.status == Application.Status.CONFIRMED
    assert application.confirmed_at is not None
    assert application.payment_link_id == "plink_test_1"

    token = SecureToken.objects.get(application=application)
    assert len(token.token) >= 32
    assert token.listing_id == listing.id
    assert str(token.applicant_uuid) == str(renter_user.uuid)

    price_call = fake_stripe["price"][0]
    assert price_call["unit_amount"] == 5000
    assert price_call["currency"] == "usd"
    assert price_call["product_data"] == {"name": "Camping Tent"}

    link_call = fake_stripe["link"][0]
    assert link_call["line_items"] == [{"price": "price_test_1", "quantity": 3}]
    expected_metadata = {
        "listingId": str(listing.id),
        "applicationId": str(application.id),
        "applicantUuid": str(renter_user.uuid),
        "secureString": token.token,
    }
    assert link_call["metadata"] == expected_metadata
    assert link_call["payment_intent_data"] == {"metadata": expected_metadata}

    redirect = urlparse(link_call["after_completion"]["redirect"]["url"])
    assert f"{redirect.scheme}://{redirect.netloc}" == "http://api.test"
    assert redirect.path == "/api/payments/success/"
    query = parse_qs(redirect.query)
    assert query == {
        "listingId": [str(listing.id)],
        "applicationId": [str(application.id)],
        "token": [token.token],
    }

    notification = Notification.objects.get(user=owner_user)
    assert notification.type == Notification.Type.RECEIPT_CONFIRMED
    assert notification.title == "Item Picked Up"


@pytest.mark.parametrize(
    "status",
    [
        Application.Status.PENDING,
        Application.Status.REJECTED,
        Application.Status.CONFIRMED,
        Application.Status.PAID,
    ],
)
def test_confirm_receipt_requires_approved_status(
    renter_user, application_factory, fake_stripe, status
):
    application = application_factory(renter_user, status=status)

    with pytest.raises(Conflict) as excinfo:
        workflow.confirm_receipt(application.id, renter_user, base_url="http://api.test")

    assert excinfo.value.detail == "Application is not approved yet"
    assert fake_stripe["link"] == []
    assert not SecureToken.objects.exists()
    application.refresh_from_db()
    assert application.status == status


def test_confirm_receipt_only_by_applicant(auth, other_user, renter_user, application_factory):
    application = application_factory(renter_user, status=Application.Status.APPROVED)
    resp = auth(other_user).post(confirm_url(application.id))
    assert resp.status_code == 403


def test_confirm_receipt_missing_application(renter_user):
    with pytest.raises(InvalidRequest):
        workflow.confirm_receipt(987654, renter_user, base_url="http://api.test")


def test_access_checked_before_status(other_user, renter_user, application_factory):
    application = application_factory(renter_user, status=Application.Status.PENDING)
    with pytest.raises(AccessDenied):
        workflow.confirm_receipt(application.id, other_user, base_url="http://api.test")


def test_stripe_failure_rolls_back_confirmation(
    auth, renter_user, application_factory, monkeypatch
):
    application = application_factory(renter_user, status=Application.Status.APPROVED)

    def fake_price_create(**kwargs):
        raise stripe.APIConnectionError("network down")

    monkeypatch.setattr(
        stripe_api.stripe,
        "Price",
        type("MockPrice", (), {"create": staticmethod(fake_price_create)}),
    )

    resp = auth(renter_user).post(confirm_url(application.id))

    assert resp.status_code == 503
    application.refresh_from_db()
    assert application.status == Application.Status.APPROVED
    assert application.payment_link_url == ""
    assert not SecureToken.objects.exists()


def test_generated_tokens_are_long_and_unique():
    tokens = {stripe_api.generate_secure_token() for _ in range(20)}
    assert len(tokens) == 20
    assert all(len(token) >= 32 for token in tokens)
    assert all(set(token) <= set("0123456789abcdef") for token in tokens)
