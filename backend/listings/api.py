import logging

from rest_framework import permissions, status, viewsets
from rest_framework.decorators import api_view, permission_classes
from rest_framework.exceptions import AuthenticationFailed
from rest_framework.pagination import PageNumberPagination
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from applications import workflow
from applications.api import workflow_error_response
from applications.exceptions import WorkflowError
from applications.serializers import ApplicationSerializer

from .models import Listing
from .serializers import ListingSerializer

logger = logging.getLogger(__name__)
PUBLIC_ACTIONS = {"list", "retrieve"}


class ListingPagination(PageNumberPagination):
    page_size = 20
    page_size_query_param = "page_size"
    max_page_size = 100


def _truthy(value) -> bool:
    return str(value or "").strip().lower() in {"1", "true", "yes"}


class ListingViewSet(viewsets.ModelViewSet):
    serializer_class = ListingSerializer
    pagination_class = ListingPagination
    permission_classes = [permissions.IsAuthenticated]
    http_method_names = ["get", "post", "head", "options"]
    lookup_value_regex = r"\d+"

    def get_permissions(self):
        if getattr(self, "action", None) in PUBLIC_ACTIONS:
            return [permissions.AllowAny()]
        return [permission() for permission in self.permission_classes]

    def perform_authentication(self, request):
        """Downgrade to anonymous user when public actions receive invalid tokens."""
        try:
            return super().perform_authentication(request)
        except AuthenticationFailed:
            if getattr(self, "action", None) in PUBLIC_ACTIONS:
                request._not_authenticated()
                return
            raise

    def get_queryset(self):
        qs = Listing.objects.select_related("owner", "current_tenant")
        if self.action != "list":
            return qs
        user = self.request.user
        if _truthy(self.request.query_params.get("mine")):
            if not user.is_authenticated:
                return qs.none()
            return qs.filter(owner=user).order_by("-created_at")
        return qs.filter(active=True).order_by("-created_at")

    def perform_create(self, serializer):
        listing = serializer.save()
        logger.info(
            "listings: created listing",
            extra={"listing_id": listing.id, "owner_id": listing.owner_id},
        )


@api_view(["GET", "POST"])
@permission_classes([IsAuthenticated])
def listing_applications(request, listing_id: int):
    """List a listing's applications (owner only) or apply to rent it."""
    listing_id = int(listing_id)
    if request.method == "GET":
        try:
            applications = workflow.owner_applications(listing_id, request.user)
        except WorkflowError as exc:
            return workflow_error_response(exc)
        return Response(ApplicationSerializer(applications, many=True).data)

    data = request.data if hasattr(request.data, "get") else {}
    try:
        application = workflow.submit_application(
            listing_id,
            request.user,
            description=data.get("description"),
            days_renting=data.get("days_renting"),
        )
    except WorkflowError as exc:
        return workflow_error_response(exc)
    return Response({"id": application.id}, status=status.HTTP_201_CREATED)


@api_view(["POST"])
@permission_classes([IsAuthenticated])
def approve_application(request, listing_id: int, application_id: int):
    try:
        result = workflow.approve_application(
            int(listing_id),
            int(application_id),
            request.user,
        )
    except WorkflowError as exc:
        return workflow_error_response(exc)
    return Response(
        {
            "approved_application_id": result.approved_application_id,
            "listing_id": result.listing_id,
            "message": result.message,
        }
    )
