import logging

from django.conf import settings
from django.db.models import Q
from rest_framework import permissions, status, viewsets
from rest_framework.decorators import action
from rest_framework.response import Response

from payments.stripe_api import (
    StripeConfigurationError,
    StripePaymentError,
    StripeTransientError,
)

from . import workflow
from .exceptions import WorkflowError
from .models import Application
from .serializers import ApplicationSerializer

logger = logging.getLogger(__name__)
PAYMENT_UNAVAILABLE_MESSAGE = "Payments are temporarily unavailable. Please try again later."


def workflow_error_response(exc: WorkflowError) -> Response:
    """Translate a workflow failure into the API's ``{"detail": ...}`` shape."""
    return Response({"detail": exc.detail}, status=exc.status_code)


def stripe_error_response(exc: Exception) -> Response:
    if isinstance(exc, StripePaymentError):
        return Response({"detail": str(exc)}, status=status.HTTP_400_BAD_REQUEST)
    return Response(
        {"detail": PAYMENT_UNAVAILABLE_MESSAGE},
        status=status.HTTP_503_SERVICE_UNAVAILABLE,
    )


def backend_base_url(request) -> str:
    """Absolute origin Stripe should redirect back to after payment."""
    configured = (getattr(settings, "BACKEND_ORIGIN", "") or "").rstrip("/")
    if configured:
        return configured
    return request.build_absolute_uri("/").rstrip("/")


class ApplicationViewSet(viewsets.ReadOnlyModelViewSet):
    """Applications the caller submitted, or received on listings they own."""

    serializer_class = ApplicationSerializer
    permission_classes = [permissions.IsAuthenticated]
    lookup_value_regex = r"\d+"

    def get_queryset(self):
        user = self.request.user
        qs = Application.objects.select_related("listing", "applicant")
        if self.action == "list":
            return qs.filter(applicant=user).order_by("-created_at")
        return qs.filter(Q(applicant=user) | Q(listing__owner=user))

    @action(detail=True, methods=["post"], url_path="confirm-receipt")
    def confirm_receipt(self, request, pk=None):
        try:
            result = workflow.confirm_receipt(
                pk,
                request.user,
                base_url=backend_base_url(request),
            )
        except WorkflowError as exc:
            return workflow_error_response(exc)
        except (StripeConfigurationError, StripeTransientError, StripePaymentError) as exc:
            logger.warning(
                "workflow: payment link creation failed for application %s: %s",
                pk,
                exc,
            )
            return stripe_error_response(exc)
        return Response(
            {
                "application_id": result.application_id,
                "listing_id": result.listing_id,
                "payment_link": result.payment_link,
                "message": result.message,
            }
        )
