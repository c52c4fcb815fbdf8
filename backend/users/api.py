from __future__ import annotations

import logging

from django.contrib.auth import get_user_model
from rest_framework import generics, permissions
from rest_framework.response import Response
from rest_framework_simplejwt.views import TokenObtainPairView

from applications.models import Application
from applications.serializers import ApplicationSerializer
from listings.models import Listing
from listings.serializers import ListingSerializer

from .serializers import FlexibleTokenObtainPairSerializer, ProfileSerializer, SignupSerializer

User = get_user_model()
logger = logging.getLogger(__name__)


class SignupView(generics.CreateAPIView):
    """Public signup endpoint."""

    queryset = User.objects.all()
    serializer_class = SignupSerializer
    permission_classes = [permissions.AllowAny]


class FlexibleTokenObtainPairView(TokenObtainPairView):
    """Login endpoint that accepts email or username as the identifier."""

    permission_classes = [permissions.AllowAny]
    serializer_class = FlexibleTokenObtainPairSerializer


class MeView(generics.RetrieveUpdateAPIView):
    """
    Profile of the current user plus everything the dashboard needs:
    owned listings, submitted applications and applications received.
    """

    serializer_class = ProfileSerializer
    permission_classes = [permissions.IsAuthenticated]

    def get_object(self):
        user = self.request.user
        self.check_object_permissions(self.request, user)
        return user

    def retrieve(self, request, *args, **kwargs):
        user = self.get_object()
        listings = Listing.objects.filter(owner=user).select_related("owner", "current_tenant")
        applications = Application.objects.filter(applicant=user).select_related(
            "listing", "applicant"
        )
        requests = Application.objects.filter(listing__owner=user).select_related(
            "listing", "applicant"
        )
        return Response(
            {
                "user": self.get_serializer(user).data,
                "listings": ListingSerializer(listings, many=True).data,
                "applications": ApplicationSerializer(applications, many=True).data,
                "requests": ApplicationSerializer(requests, many=True).data,
            }
        )
