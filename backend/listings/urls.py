from django.urls import include, path, re_path
from rest_framework.routers import SimpleRouter

from .api import ListingViewSet, approve_application, listing_applications

router = SimpleRouter()
router.register("", ListingViewSet, basename="listing")

urlpatterns = [
    re_path(
        r"^(?P<listing_id>\d+)/applications/?$",
        listing_applications,
        name="listing_applications",
    ),
    re_path(
        r"^(?P<listing_id>\d+)/applications/(?P<application_id>\d+)/approve/?$",
        approve_application,
        name="approve_application",
    ),
    path("", include(router.urls)),
]
