from rest_framework import serializers

from .models import Listing


class PriceSerializer(serializers.Serializer):
    """`{amount, unit}` view over the listing's flat price columns."""

    amount = serializers.IntegerField(source="price_amount", min_value=1)
    unit = serializers.ChoiceField(source="price_unit", choices=Listing.PriceUnit.choices)


class ListingSerializer(serializers.ModelSerializer):
    """Serializer for Listing exposing the marketplace's public field names."""

    owner_uuid = serializers.SerializerMethodField()
    current_tenant_uuid = serializers.SerializerMethodField()
    price = PriceSerializer(source="*")
    description = serializers.CharField()
    image_uris = serializers.ListField(
        child=serializers.CharField(max_length=1024),
        min_length=1,
    )

    class Meta:
        model = Listing
        fields = [
            "id",
            "owner_uuid",
            "title",
            "description",
            "image_uris",
            "price",
            "status",
            "active",
            "current_tenant_uuid",
            "created_at",
            "updated_at",
        ]
        read_only_fields = [
            "id",
            "status",
            "active",
            "created_at",
            "updated_at",
        ]

    def get_owner_uuid(self, obj: Listing) -> str:
        return obj.owner_uuid

    def get_current_tenant_uuid(self, obj: Listing) -> str | None:
        return obj.current_tenant_uuid

    def validate_title(self, value: str) -> str:
        value = (value or "").strip()
        if len(value) < 3:
            raise serializers.ValidationError("Title must be at least 3 characters.")
        return value

    def validate_description(self, value: str) -> str:
        value = (value or "").strip()
        if not value:
            raise serializers.ValidationError("Description is required.")
        return value

    def create(self, validated_data):
        """Create a listing owned by the authenticated user."""
        request = self.context.get("request")
        user = getattr(request, "user", None)
        if not user or not user.is_authenticated:
            raise serializers.ValidationError({"detail": "Authentication required."})
        validated_data["owner"] = user
        validated_data["status"] = Listing.Status.AVAILABLE
        validated_data["active"] = True
        return super().create(validated_data)
