from rest_framework import serializers

from .models import Application


class ApplicationSerializer(serializers.ModelSerializer):
    """Read-only view of an application using the marketplace's field names."""

    listing_id = serializers.IntegerField(read_only=True)
    user_uuid = serializers.SerializerMethodField()
    listing_title = serializers.CharField(source="listing.title", read_only=True)

    class Meta:
        model = Application
        fields = [
            "id",
            "listing_id",
            "listing_title",
            "user_uuid",
            "description",
            "days_renting",
            "status",
            "confirmed_at",
            "paid_at",
            "payment_link_url",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields

    def get_user_uuid(self, obj: Application) -> str:
        return obj.user_uuid
