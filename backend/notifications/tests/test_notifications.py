import pytest

from notifications import tasks
from notifications.dispatch import queue_after_commit
from notifications.models import Notification

pytestmark = pytest.mark.django_db


def test_notify_payment_completed_wording(listing, owner_user, renter_user):
    tasks.notify_payment_completed(owner_user.id, listing.id, None, True)
    tasks.notify_payment_completed(renter_user.id, listing.id, None, False)

    owner_note = Notification.objects.get(user=owner_user)
    renter_note = Notification.objects.get(user=renter_user)
    assert owner_note.title == renter_note.title == "Payment Complete"
    assert owner_note.message == 'Payment received for "Camping Tent". The rental is now active.'
    assert renter_note.message == 'Your payment for "Camping Tent" is complete. Enjoy your rental!'
    assert owner_note.listing_id == listing.id
    assert owner_note.read is False


def test_rejected_wording(listing, renter_user):
    tasks.notify_application_rejected(renter_user.id, listing.id, None)

    note = Notification.objects.get(user=renter_user)
    assert note.type == Notification.Type.APPLICATION_REJECTED
    assert note.title == "Application Not Selected"
    assert note.message == (
        'Your application for "Camping Tent" was not selected. '
        "The owner chose another applicant."
    )


def test_missing_recipient_is_skipped(listing):
    assert tasks.create_notification(999999, "new_application", "t", "m", listing.id) is None
    assert not Notification.objects.exists()


def test_missing_listing_is_not_linked(renter_user):
    note_id = tasks.notify_application_approved(renter_user.id, 424242, 535353)

    note = Notification.objects.get(pk=note_id)
    assert note.listing_id is None
    assert note.application_id is None
    assert '"your listing"' in note.message


def test_queue_after_commit_waits_for_commit(
    renter_user, listing, django_capture_on_commit_callbacks
):
    with django_capture_on_commit_callbacks(execute=False) as callbacks:
        queue_after_commit(tasks.notify_application_rejected, renter_user.id, listing.id, None)
        assert not Notification.objects.exists()

    assert len(callbacks) == 1
    callbacks[0]()
    assert Notification.objects.filter(user=renter_user).count() == 1


class BrokenTask:
    name = "notifications.tasks.broken"

    def delay(self, *args, **kwargs):
        raise RuntimeError("broker down")


def test_queue_failure_is_swallowed(renter_user, listing, django_capture_on_commit_callbacks):
    with django_capture_on_commit_callbacks(execute=True) as callbacks:
        queue_after_commit(BrokenTask(), renter_user.id, listing.id, None)

    assert len(callbacks) == 1
    assert not Notification.objects.exists()


def test_list_notifications_with_unread_count(auth, renter_user, other_user, listing):
    tasks.notify_application_approved(renter_user.id, listing.id, None)
    first_id = tasks.notify_application_rejected(renter_user.id, listing.id, None)
    tasks.notify_application_rejected(other_user.id, listing.id, None)
    Notification.objects.filter(pk=first_id).update(read=True)

    resp = auth(renter_user).get("/api/notifications/")

    assert resp.status_code == 200
    assert resp.data["unread_count"] == 1
    assert len(resp.data["notifications"]) == 2
    assert {item["user_uuid"] for item in resp.data["notifications"]} == {str(renter_user.uuid)}


def test_mark_read_only_touches_own_notifications(auth, renter_user, other_user, listing):
    mine = tasks.notify_application_approved(renter_user.id, listing.id, None)
    theirs = tasks.notify_application_rejected(other_user.id, listing.id, None)

    resp = auth(renter_user).patch(
        "/api/notifications/",
        {"notification_ids": [mine, theirs]},
        format="json",
    )

    assert resp.status_code == 200
    assert resp.data["updated"] == 1
    assert Notification.objects.get(pk=mine).read is True
    assert Notification.objects.get(pk=theirs).read is False


@pytest.mark.parametrize("payload", [{}, {"notification_ids": []}, {"notification_ids": "1"}])
def test_mark_read_requires_ids(auth, renter_user, payload):
    resp = auth(renter_user).patch("/api/notifications/", payload, format="json")
    assert resp.status_code == 400


def test_notifications_require_auth(api_client):
    assert api_client.get("/api/notifications/").status_code == 401
