from __future__ import annotations

import logging
from typing import Optional

from celery import shared_task
from django.contrib.auth import get_user_model

from notifications.models import Notification

logger = logging.getLogger(__name__)
User = get_user_model()
FALLBACK_TITLE = "your listing"


def _get_user(user_id: int) -> Optional[User]:
    try:
        return User.objects.get(pk=user_id)
    except User.DoesNotExist:
        logger.warning("notifications: user %s no longer exists", user_id)
        return None


def _listing_title(listing_id: int | None) -> str:
    from listings.models import Listing

    if not listing_id:
        return FALLBACK_TITLE
    title = Listing.objects.filter(pk=listing_id).values_list("title", flat=True).first()
    return title or FALLBACK_TITLE


def _existing_id(model_label: str, pk: int | None) -> int | None:
    """Return ``pk`` if the referenced row still exists, else None."""
    from django.apps import apps

    if not pk:
        return None
    model = apps.get_model(model_label)
    return pk if model.objects.filter(pk=pk).exists() else None


@shared_task(queue="notifications")
def create_notification(
    user_id: int,
    type_: str,
    title: str,
    message: str,
    listing_id: int | None = None,
    application_id: int | None = None,
) -> int | None:
    """Persist one in-app notification for ``user_id``.

    Returns the new notification id, or None when the recipient is gone.
    """
    user = _get_user(user_id)
    if not user:
        return None
    notification = Notification.objects.create(
        user=user,
        type=type_,
        title=title,
        message=message,
        listing_id=_existing_id("listings.Listing", listing_id),
        application_id=_existing_id("applications.Application", application_id),
    )
    logger.info(
        "notifications: created %s",
        type_,
        extra={"notification_id": notification.id, "user_id": user_id},
    )
    return notification.id


@shared_task(queue="notifications")
def notify_new_application(owner_id: int, listing_id: int, application_id: int):
    """Tell the listing owner someone applied."""
    title = _listing_title(listing_id)
    return create_notification(
        owner_id,
        Notification.Type.NEW_APPLICATION,
        "New Application",
        f'Someone applied to rent "{title}". Review their application now.',
        listing_id,
        application_id,
    )


@shared_task(queue="notifications")
def notify_application_approved(applicant_id: int, listing_id: int, application_id: int):
    title = _listing_title(listing_id)
    return create_notification(
        applicant_id,
        Notification.Type.APPLICATION_APPROVED,
        "Application Approved!",
        (
            f'Your application for "{title}" has been approved. '
            "Pick up the item and confirm receipt to complete the rental."
        ),
        listing_id,
        application_id,
    )


@shared_task(queue="notifications")
def notify_application_rejected(applicant_id: int, listing_id: int, application_id: int):
    title = _listing_title(listing_id)
    return create_notification(
        applicant_id,
        Notification.Type.APPLICATION_REJECTED,
        "Application Not Selected",
        f'Your application for "{title}" was not selected. The owner chose another applicant.',
        listing_id,
        application_id,
    )


@shared_task(queue="notifications")
def notify_receipt_confirmed(owner_id: int, listing_id: int, application_id: int):
    """Tell the owner the renter picked the item up and is paying."""
    title = _listing_title(listing_id)
    return create_notification(
        owner_id,
        Notification.Type.RECEIPT_CONFIRMED,
        "Item Picked Up",
        f'The renter has confirmed receipt of "{title}" and is completing payment.',
        listing_id,
        application_id,
    )


@shared_task(queue="notifications")
def notify_payment_completed(
    user_id: int,
    listing_id: int,
    application_id: int,
    is_owner: bool,
):
    """Payment confirmation; wording differs for the owner and the renter."""
    title = _listing_title(listing_id)
    if is_owner:
        message = f'Payment received for "{title}". The rental is now active.'
    else:
        message = f'Your payment for "{title}" is complete. Enjoy your rental!'
    return create_notification(
        user_id,
        Notification.Type.PAYMENT_COMPLETED,
        "Payment Complete",
        message,
        listing_id,
        application_id,
    )
