"""Entry points that complete a rental after Stripe collects payment."""

from __future__ import annotations

import logging

import stripe
from django.conf import settings
from django.http import HttpResponseRedirect
from rest_framework import status
from rest_framework.decorators import api_view, authentication_classes, permission_classes
from rest_framework.response import Response

from applications.exceptions import WorkflowError
from applications.workflow import finalize_payment

from .models import SecureToken

logger = logging.getLogger(__name__)
COMPLETION_EVENTS = {"checkout.session.completed", "payment_intent.succeeded"}


def _parse_id(value) -> int | None:
    try:
        parsed = int(str(value).strip())
    except (TypeError, ValueError):
        return None
    return parsed if parsed > 0 else None


def _success_redirect_url() -> str:
    frontend_origin = (getattr(settings, "FRONTEND_ORIGIN", "") or "").rstrip("/")
    path = getattr(settings, "PAYMENT_SUCCESS_REDIRECT_PATH", "/home") or "/home"
    if not path.startswith("/"):
        path = f"/{path}"
    return f"{frontend_origin}{path}"


@api_view(["GET"])
@authentication_classes([])
@permission_classes([])
def payment_success(request):
    """Finish the rental after Stripe's post-payment redirect.

    Always redirects the browser to the frontend, whatever the outcome.
    """
    params = request.query_params
    listing_id = _parse_id(params.get("listingId"))
    application_id = _parse_id(params.get("applicationId"))
    token = (params.get("token") or "").strip()

    if listing_id and application_id and token:
        # The redirect does not carry the applicant, so match the token's own.
        applicant_uuid = (
            SecureToken.objects.filter(pk=token).values_list("applicant_uuid", flat=True).first()
        )
        try:
            result = finalize_payment(listing_id, application_id, token, applicant_uuid)
        except WorkflowError as exc:
            logger.warning(
                "payment_success: could not finalize payment: %s",
                exc.detail,
                extra={"listing_id": listing_id, "application_id": application_id},
            )
        except Exception:
            logger.exception(
                "payment_success: unexpected error finalizing payment",
                extra={"listing_id": listing_id, "application_id": application_id},
            )
        else:
            if result is None:
                logger.info(
                    "payment_success: nothing to finalize",
                    extra={"listing_id": listing_id, "application_id": application_id},
                )
    else:
        logger.info("payment_success: redirect missing listingId, applicationId or token")

    return HttpResponseRedirect(_success_redirect_url())


@api_view(["POST"])
@authentication_classes([])
@permission_classes([])
def stripe_webhook(request):
    """Handle Stripe webhook callbacks for rental payment links."""
    payload = request.body
    sig_header = request.META.get("HTTP_STRIPE_SIGNATURE", "")
    endpoint_secret = getattr(settings, "STRIPE_WEBHOOK_SECRET", "")
    if not sig_header or not endpoint_secret:
        logger.warning("stripe_webhook: missing signature header or endpoint secret")
        return Response(
            {"detail": "Missing Stripe signature or webhook secret."},
            status=status.HTTP_400_BAD_REQUEST,
        )

    try:
        event = stripe.Webhook.construct_event(
            payload=payload,
            sig_header=sig_header,
            secret=endpoint_secret,
        )
    except ValueError:
        return Response({"detail": "Invalid payload."}, status=status.HTTP_400_BAD_REQUEST)
    except stripe.SignatureVerificationError:
        return Response({"detail": "Invalid signature."}, status=status.HTTP_400_BAD_REQUEST)

    event_type = event.get("type")
    if event_type not in COMPLETION_EVENTS:
        return Response({"received": True}, status=status.HTTP_200_OK)

    data_object = event.get("data", {}).get("object", {}) or {}
    if event_type == "checkout.session.completed" and data_object.get("payment_status") == "unpaid":
        # Delayed payment methods settle later through payment_intent.succeeded.
        logger.info(
            "stripe_webhook: checkout session not paid yet",
            extra={"object_id": data_object.get("id")},
        )
        return Response({"received": True}, status=status.HTTP_200_OK)
    metadata = data_object.get("metadata") or {}
    listing_id = _parse_id(metadata.get("listingId"))
    application_id = _parse_id(metadata.get("applicationId"))
    applicant_uuid = metadata.get("applicantUuid") or ""
    token = metadata.get("secureString") or ""
    if not (listing_id and application_id and applicant_uuid and token):
        logger.info(
            "stripe_webhook: %s without rental metadata",
            event_type,
            extra={"object_id": data_object.get("id")},
        )
        return Response({"received": True}, status=status.HTTP_200_OK)

    try:
        result = finalize_payment(listing_id, application_id, token, applicant_uuid)
    except WorkflowError as exc:
        logger.error(
            "stripe_webhook: failed to finalize payment: %s",
            exc.detail,
            extra={"listing_id": listing_id, "application_id": application_id},
        )
        return Response(
            {"detail": exc.detail},
            status=status.HTTP_500_INTERNAL_SERVER_ERROR,
        )

    if result is None:
        logger.info(
            "stripe_webhook: %s already handled or token mismatch",
            event_type,
            extra={"listing_id": listing_id, "application_id": application_id},
        )
    return Response({"received": True}, status=status.HTTP_200_OK)
