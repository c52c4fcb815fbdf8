import logging

from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from .models import Notification
from .serializers import MarkReadSerializer, NotificationSerializer

logger = logging.getLogger(__name__)
MAX_NOTIFICATIONS = 100


@api_view(["GET", "PATCH"])
@permission_classes([IsAuthenticated])
def notifications(request):
    """List the caller's notifications, or mark some of them as read."""
    user_notifications = Notification.objects.filter(user=request.user)

    if request.method == "PATCH":
        serializer = MarkReadSerializer(data=request.data)
        if not serializer.is_valid():
            return Response(
                {"detail": "notification_ids must be a non-empty list of ids."},
                status=status.HTTP_400_BAD_REQUEST,
            )
        ids = serializer.validated_data["notification_ids"]
        updated = user_notifications.filter(pk__in=ids, read=False).update(read=True)
        logger.info(
            "notifications: marked %s as read",
            updated,
            extra={"user_id": request.user.id},
        )
        return Response({"updated": updated})

    items = user_notifications.select_related("user").order_by("-created_at", "-id")[
        :MAX_NOTIFICATIONS
    ]
    return Response(
        {
            "notifications": NotificationSerializer(items, many=True).data,
            "unread_count": user_notifications.filter(read=False).count(),
        }
    )
