"""Rental application workflow.

Four transitions drive a rental from request to payment:

* ``submit_application``: a renter asks to rent an available listing.
* ``approve_application``: the owner picks one applicant; every other open
  application on that listing is rejected in the same transaction.
* ``confirm_receipt``: the approved renter confirms pickup and receives a
  Stripe payment link bound to a single-use token.
* ``finalize_payment``: the payment redirect or webhook consumes the token and
  marks the listing rented.

Each transition validates before writing, runs in one database transaction and
queues notifications only after commit.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

from django.db import transaction
from django.utils import timezone

from listings.models import Listing
from notifications import tasks as notification_tasks
from notifications.dispatch import queue_after_commit
from payments import stripe_api
from payments.models import SecureToken

from .exceptions import AccessDenied, Conflict, InvalidRequest, NotFound
from .models import Application

logger = logging.getLogger(__name__)

MAX_DAYS_RENTING = 365


@dataclass(frozen=True)
class ApprovalResult:
    listing_id: int
    approved_application_id: int
    rejected_application_ids: tuple[int, ...] = ()
    message: str = "Application approved successfully"


@dataclass(frozen=True)
class ReceiptResult:
    application_id: int
    listing_id: int
    payment_link: str
    message: str = "Receipt confirmed. Complete payment to finish the rental."


@dataclass(frozen=True)
class CompletionResult:
    listing_id: int
    application_id: int
    tenant_uuid: str


def _is_owner(listing: Listing, caller) -> bool:
    return listing.owner_id == getattr(caller, "id", None)


def _parse_days(value) -> int:
    """Round a positive day count half-up to a whole number of days."""
    if isinstance(value, bool) or value is None:
        raise InvalidRequest("days_renting must be a positive number")
    if isinstance(value, str):
        value = value.strip()
    try:
        number = Decimal(str(value))
    except (InvalidOperation, ValueError, TypeError):
        raise InvalidRequest("days_renting must be a positive number")
    if not number.is_finite() or number <= 0:
        raise InvalidRequest("days_renting must be a positive number")
    if number >= MAX_DAYS_RENTING + Decimal("0.5"):
        raise InvalidRequest(f"days_renting cannot exceed {MAX_DAYS_RENTING}")
    try:
        days = int(number.quantize(Decimal("1"), rounding=ROUND_HALF_UP))
    except InvalidOperation:
        raise InvalidRequest("days_renting must be a positive number")
    if days < 1:
        raise InvalidRequest("days_renting must round to at least one day")
    return days


def _get_listing(listing_id, *, lock: bool = False) -> Listing:
    qs = Listing.objects.all()
    if lock:
        qs = qs.select_for_update()
    listing = qs.filter(pk=listing_id).first()
    if listing is None:
        raise NotFound("Listing not found")
    return listing


def owner_applications(listing_id, caller):
    """Return the applications on ``listing_id`` if ``caller`` owns it."""
    listing = _get_listing(listing_id)
    if not _is_owner(listing, caller):
        raise AccessDenied("Only the listing owner can view its applications")
    return listing.applications.select_related("applicant", "listing").order_by("-created_at")


def submit_application(listing_id, caller, *, description, days_renting) -> Application:
    """Create a pending application from ``caller`` on ``listing_id``."""
    listing = _get_listing(listing_id)
    if _is_owner(listing, caller):
        raise AccessDenied("You cannot apply to your own listing")

    if not isinstance(description, str) or not description.strip():
        raise InvalidRequest("description is required")
    days = _parse_days(days_renting)

    if not listing.is_accepting_applications():
        raise Conflict("This listing is not accepting applications")

    with transaction.atomic():
        application = Application.objects.create(
            listing=listing,
            applicant=caller,
            description=description.strip(),
            days_renting=days,
            status=Application.Status.PENDING,
        )
        queue_after_commit(
            notification_tasks.notify_new_application,
            listing.owner_id,
            listing.id,
            application.id,
        )
    logger.info(
        "workflow: application submitted",
        extra={"listing_id": listing.id, "application_id": application.id},
    )
    return application


def approve_application(listing_id, application_id, caller) -> ApprovalResult:
    """Approve one application and reject every other open one on the listing.

    Calls for the same listing are serialized by a row lock on the listing.
    Re-approving the listing's current approved applicant repeats the
    rejection fan-out without touching anything else.
    """
    with transaction.atomic():
        listing = _get_listing(listing_id, lock=True)
        if not _is_owner(listing, caller):
            raise AccessDenied("Only the listing owner can approve applications")

        application = (
            Application.objects.select_for_update().filter(pk=application_id).first()
        )
        if application is None or application.listing_id != listing.id:
            raise InvalidRequest("Application not found for this listing")

        already_approved = (
            application.status == Application.Status.APPROVED
            and listing.status == Listing.Status.PENDING
            and listing.current_tenant_id == application.applicant_id
        )
        if not already_approved:
            if application.status != Application.Status.PENDING:
                raise Conflict("Only pending applications can be approved")
            if not listing.is_accepting_applications():
                raise Conflict("This listing is not available for approval")

            application.status = Application.Status.APPROVED
            application.save(update_fields=["status", "updated_at"])
            listing.status = Listing.Status.PENDING
            listing.current_tenant_id = application.applicant_id
            listing.save(update_fields=["status", "current_tenant", "updated_at"])

        others = (
            Application.objects.filter(listing_id=listing.id)
            .exclude(pk=application.id)
            .exclude(status=Application.Status.REJECTED)
        )
        rejected = list(others.values_list("id", "applicant_id"))
        if rejected:
            Application.objects.filter(pk__in=[pk for pk, _ in rejected]).update(
                status=Application.Status.REJECTED,
                updated_at=timezone.now(),
            )

        if not already_approved:
            queue_after_commit(
                notification_tasks.notify_application_approved,
                application.applicant_id,
                listing.id,
                application.id,
            )
        for rejected_id, applicant_id in rejected:
            queue_after_commit(
                notification_tasks.notify_application_rejected,
                applicant_id,
                listing.id,
                rejected_id,
            )

    logger.info(
        "workflow: application approved",
        extra={
            "listing_id": listing.id,
            "application_id": application.id,
            "rejected_count": len(rejected),
        },
    )
    return ApprovalResult(
        listing_id=listing.id,
        approved_application_id=application.id,
        rejected_application_ids=tuple(pk for pk, _ in rejected),
    )


def confirm_receipt(application_id, caller, *, base_url: str) -> ReceiptResult:
    """Confirm pickup and issue a payment link for an approved application.

    Stripe is called inside the transaction; if link creation fails the
    status change and the minted token are rolled back.
    """
    with transaction.atomic():
        application = (
            Application.objects.select_for_update().filter(pk=application_id).first()
        )
        if application is None:
            raise InvalidRequest("Application not found")
        if application.applicant_id != getattr(caller, "id", None):
            raise AccessDenied("Only the applicant can confirm receipt")
        if application.status != Application.Status.APPROVED:
            raise Conflict("Application is not approved yet")
        listing = Listing.objects.filter(pk=application.listing_id).first()
        if listing is None:
            raise NotFound("Listing not found")

        application.status = Application.Status.CONFIRMED
        application.confirmed_at = timezone.now()

        token = stripe_api.generate_secure_token()
        applicant_uuid = str(caller.uuid)
        SecureToken.objects.create(
            token=token,
            applicant_uuid=applicant_uuid,
            listing_id=listing.id,
            application_id=application.id,
        )
        link_id, link_url = stripe_api.create_payment_link(
            title=listing.title,
            unit_amount=listing.price_amount,
            quantity=application.days_renting,
            success_url=stripe_api.build_success_url(
                base_url,
                listing_id=listing.id,
                application_id=application.id,
                token=token,
            ),
            metadata=stripe_api.payment_metadata(
                listing_id=listing.id,
                application_id=application.id,
                applicant_uuid=applicant_uuid,
                token=token,
            ),
        )
        application.payment_link_id = link_id
        application.payment_link_url = link_url
        application.save(
            update_fields=[
                "status",
                "confirmed_at",
                "payment_link_id",
                "payment_link_url",
                "updated_at",
            ]
        )
        queue_after_commit(
            notification_tasks.notify_receipt_confirmed,
            listing.owner_id,
            listing.id,
            application.id,
        )

    logger.info(
        "workflow: receipt confirmed",
        extra={"listing_id": listing.id, "application_id": application.id},
    )
    return ReceiptResult(
        application_id=application.id,
        listing_id=listing.id,
        payment_link=link_url,
    )


def finalize_payment(
    listing_id: int,
    application_id: int,
    token: str,
    applicant_uuid=None,
) -> CompletionResult | None:
    """Mark a paid rental complete, at most once per token.

    Returns None without writing anything when the token is unknown, already
    consumed, or bound to other ids. Any error after the claim rolls the claim
    back so a retry can succeed.
    """
    with transaction.atomic():
        claimed = SecureToken.objects.claim(
            token,
            listing_id=listing_id,
            application_id=application_id,
            applicant_uuid=applicant_uuid,
        )
        if claimed is None:
            logger.info(
                "workflow: payment token not claimable",
                extra={"listing_id": listing_id, "application_id": application_id},
            )
            return None

        listing = _get_listing(listing_id, lock=True)
        application = (
            Application.objects.select_for_update()
            .select_related("applicant")
            .filter(pk=application_id)
            .first()
        )
        if application is None or application.listing_id != listing.id:
            raise InvalidRequest("Application not found for this listing")
        if application.status != Application.Status.CONFIRMED:
            raise Conflict("Application has not confirmed receipt")

        listing.current_tenant_id = application.applicant_id
        listing.status = Listing.Status.RENTED
        listing.active = False
        listing.save(update_fields=["current_tenant", "status", "active", "updated_at"])

        application.status = Application.Status.PAID
        application.paid_at = timezone.now()
        application.save(update_fields=["status", "paid_at", "updated_at"])

        queue_after_commit(
            notification_tasks.notify_payment_completed,
            application.applicant_id,
            listing.id,
            application.id,
            False,
        )
        queue_after_commit(
            notification_tasks.notify_payment_completed,
            listing.owner_id,
            listing.id,
            application.id,
            True,
        )

    logger.info(
        "workflow: payment finalized",
        extra={"listing_id": listing.id, "application_id": application.id},
    )
    return CompletionResult(
        listing_id=listing.id,
        application_id=application.id,
        tenant_uuid=str(application.applicant.uuid),
    )
