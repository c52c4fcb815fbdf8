from __future__ import annotations

import logging
import re
from typing import Optional

from django.contrib.auth import get_user_model
from django.contrib.auth.password_validation import validate_password
from rest_framework import serializers
from rest_framework.exceptions import AuthenticationFailed
from rest_framework_simplejwt.serializers import TokenObtainPairSerializer

User = get_user_model()
logger = logging.getLogger(__name__)


class ProfileSerializer(serializers.ModelSerializer):
    """Profile of the authenticated user."""

    class Meta:
        model = User
        fields = [
            "id",
            "uuid",
            "username",
            "email",
            "name",
            "neighborhood",
            "first_name",
            "last_name",
            "date_joined",
        ]
        read_only_fields = ["id", "uuid", "username", "date_joined"]

    @staticmethod
    def _clean_optional_text(value: Optional[str]) -> str:
        return (value or "").strip()

    def validate_name(self, value: Optional[str]) -> str:
        return self._clean_optional_text(value)

    def validate_neighborhood(self, value: Optional[str]) -> str:
        return self._clean_optional_text(value)


class SignupSerializer(serializers.ModelSerializer):
    """Create an account from a username (optional), email and password."""

    password = serializers.CharField(write_only=True)
    email = serializers.EmailField()
    username = serializers.CharField(required=False, allow_blank=True, max_length=150)

    class Meta:
        model = User
        fields = [
            "id",
            "uuid",
            "username",
            "email",
            "password",
            "name",
            "neighborhood",
        ]
        read_only_fields = ["id", "uuid"]
        extra_kwargs = {"password": {"write_only": True}}

    def validate_password(self, value: str) -> str:
        validate_password(value)
        return value

    def validate(self, attrs: dict) -> dict:
        email = (attrs.get("email") or "").strip().lower()
        attrs["email"] = email
        if User.objects.filter(email__iexact=email).exists():
            raise serializers.ValidationError({"email": "A user with this email already exists."})

        username = (attrs.get("username") or "").strip()
        if username and User.objects.filter(username__iexact=username).exists():
            raise serializers.ValidationError(
                {"username": "A user with this username already exists."}
            )
        attrs["username"] = username
        return attrs

    def create(self, validated_data: dict) -> User:
        password = validated_data.pop("password")
        if not validated_data.get("username"):
            validated_data["username"] = self._generate_username(validated_data)
        user = User.objects.create_user(password=password, **validated_data)
        logger.info("users: signup completed", extra={"user_uuid": str(user.uuid)})
        return user

    def _generate_username(self, data: dict) -> str:
        """Generate a unique username derived from the email local part."""
        source = data["email"].split("@")[0]
        base = re.sub(r"[^a-z0-9]+", "", source.lower()) or "user"
        candidate = base
        suffix = 1
        while User.objects.filter(username=candidate).exists():
            candidate = f"{base}{suffix}"
            suffix += 1
        return candidate


class FlexibleTokenObtainPairSerializer(TokenObtainPairSerializer):
    """
    Accepts email or username for authentication and returns a JWT pair.
    """

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.fields["identifier"] = serializers.CharField(required=False, allow_blank=True)
        if self.username_field in self.fields:
            self.fields[self.username_field].required = False

    def validate(self, attrs: dict) -> dict:
        identifier = attrs.get("identifier") or attrs.get(self.username_field) or ""
        password = attrs.get("password")
        if not identifier or not password:
            raise serializers.ValidationError(
                {"non_field_errors": ["Provide credentials to log in."]}
            )

        user = self._resolve_user(identifier)
        if not user:
            raise AuthenticationFailed(self.error_messages["no_active_account"])

        # TokenObtainPairSerializer expects the username field in attrs.
        attrs[self.username_field] = user.get_username()
        data = super().validate(attrs)
        data["uuid"] = str(self.user.uuid)
        return data

    def _resolve_user(self, identifier: str) -> Optional[User]:
        value = identifier.strip()
        if not value:
            return None
        if "@" in value:
            user = User.objects.filter(email__iexact=value).first()
            if user:
                return user
        return User.objects.filter(username__iexact=value).first()
