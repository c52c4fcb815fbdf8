from rest_framework import serializers

from .models import Notification


class NotificationSerializer(serializers.ModelSerializer):
    user_uuid = serializers.SerializerMethodField()
    listing_id = serializers.IntegerField(read_only=True, allow_null=True)
    application_id = serializers.IntegerField(read_only=True, allow_null=True)

    class Meta:
        model = Notification
        fields = [
            "id",
            "user_uuid",
            "type",
            "title",
            "message",
            "listing_id",
            "application_id",
            "read",
            "created_at",
        ]
        read_only_fields = fields

    def get_user_uuid(self, obj: Notification) -> str:
        return obj.user_uuid


class MarkReadSerializer(serializers.Serializer):
    notification_ids = serializers.ListField(
        child=serializers.IntegerField(min_value=1),
        allow_empty=False,
    )
