"""Stripe helpers for rental payment links."""

from __future__ import annotations

import logging
import secrets
from urllib.parse import urlencode

import stripe
from django.conf import settings

logger = logging.getLogger(__name__)
MIN_TOKEN_HEX_LENGTH = 32


class StripeConfigurationError(Exception):
    """Stripe is not configured correctly in the environment."""


class StripeTransientError(Exception):
    """Temporary Stripe/API issue that should be retried."""


class StripePaymentError(Exception):
    """Permanent failure creating a payment object."""


def _get_stripe_api_key() -> str:
    """Return the configured Stripe API key or raise if missing."""
    api_key = getattr(settings, "STRIPE_SECRET_KEY", "")
    if not api_key:
        raise StripeConfigurationError("Stripe secret key not configured.")
    return api_key


def _handle_stripe_error(exc: stripe.StripeError) -> None:
    """Map Stripe SDK errors onto internal exception types."""
    if isinstance(exc, stripe.CardError):
        raise StripePaymentError(exc.user_message or "Your card was declined.") from exc
    if isinstance(
        exc,
        (
            stripe.RateLimitError,
            stripe.APIConnectionError,
            stripe.APIError,
        ),
    ):
        raise StripeTransientError("Temporary Stripe error, please retry.") from exc
    if isinstance(exc, (stripe.AuthenticationError, stripe.PermissionError)):
        raise StripeConfigurationError("Stripe credentials are invalid or unauthorized.") from exc
    if isinstance(exc, stripe.InvalidRequestError):
        raise StripePaymentError(exc.user_message or "Invalid payment request.") from exc
    raise StripePaymentError(exc.user_message or "Stripe payment failure.") from exc


def _object_value(obj, field: str):
    value = getattr(obj, field, None)
    if value is None and hasattr(obj, "get"):
        value = obj.get(field)
    return value


def generate_secure_token() -> str:
    """Return a fresh unguessable hex token for a payment redirect."""
    length = max(getattr(settings, "SECURE_TOKEN_LENGTH", MIN_TOKEN_HEX_LENGTH), MIN_TOKEN_HEX_LENGTH)
    # token_hex takes bytes and returns two hex chars per byte
    return secrets.token_hex((length + 1) // 2)


def build_success_url(base_url: str, *, listing_id: int, application_id: int, token: str) -> str:
    query = urlencode(
        {
            "listingId": listing_id,
            "applicationId": application_id,
            "token": token,
        }
    )
    return f"{base_url.rstrip('/')}/api/payments/success/?{query}"


def payment_metadata(
    *,
    listing_id: int,
    application_id: int,
    applicant_uuid: str,
    token: str,
) -> dict[str, str]:
    """Metadata attached to both the payment link and its PaymentIntent."""
    return {
        "listingId": str(listing_id),
        "applicationId": str(application_id),
        "applicantUuid": str(applicant_uuid),
        "secureString": token,
    }


def create_payment_link(
    *,
    title: str,
    unit_amount: int,
    quantity: int,
    success_url: str,
    metadata: dict[str, str],
) -> tuple[str, str]:
    """Create a one-off Price and a Payment Link for it.

    Returns ``(payment_link_id, payment_link_url)``. Stripe failures are
    raised as one of the Stripe*Error types above.
    """
    stripe.api_key = _get_stripe_api_key()
    if unit_amount <= 0:
        raise StripePaymentError("Listing price must be greater than zero.")
    currency = (getattr(settings, "PAYMENTS_CURRENCY", "usd") or "usd").lower()

    try:
        price = stripe.Price.create(
            currency=currency,
            unit_amount=unit_amount,
            product_data={"name": (title or "Rental").strip()},
        )
        link = stripe.PaymentLink.create(
            line_items=[{"price": _object_value(price, "id"), "quantity": max(1, quantity)}],
            after_completion={"type": "redirect", "redirect": {"url": success_url}},
            metadata=metadata,
            payment_intent_data={"metadata": metadata},
        )
    except stripe.StripeError as exc:
        _handle_stripe_error(exc)

    link_id = _object_value(link, "id")
    link_url = _object_value(link, "url")
    if not link_id or not link_url:
        raise StripeConfigurationError("Stripe did not return a payment link URL.")
    logger.info(
        "stripe: created payment link",
        extra={"payment_link_id": link_id, "application_id": metadata.get("applicationId")},
    )
    return link_id, link_url
