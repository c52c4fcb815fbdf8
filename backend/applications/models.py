"""Database models for rental applications."""

from __future__ import annotations

from django.conf import settings
from django.core.validators import MinValueValidator
from django.db import models

from listings.models import Listing


class Application(models.Model):
    """A renter's bid to rent a listing for a number of days."""

    class Status(models.TextChoices):
        PENDING = "pending", "pending"
        APPROVED = "approved", "approved"
        REJECTED = "rejected", "rejected"
        CONFIRMED = "confirmed", "confirmed"
        PAID = "paid", "paid"

    listing = models.ForeignKey(
        Listing,
        related_name="applications",
        on_delete=models.CASCADE,
    )
    applicant = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        related_name="applications",
        on_delete=models.CASCADE,
    )
    description = models.TextField()
    days_renting = models.PositiveIntegerField(validators=[MinValueValidator(1)])
    status = models.CharField(
        max_length=16,
        choices=Status.choices,
        default=Status.PENDING,
    )
    confirmed_at = models.DateTimeField(null=True, blank=True)
    paid_at = models.DateTimeField(null=True, blank=True)
    payment_link_id = models.CharField(max_length=120, blank=True, default="")
    payment_link_url = models.URLField(max_length=1024, blank=True, default="")
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = "applications"
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["listing", "status"], name="applications_listing_stat_idx"),
            models.Index(fields=["applicant", "status"], name="applications_applicant_st_idx"),
        ]

    def __str__(self) -> str:
        """Return a human-readable representation."""
        return f"Application #{self.pk} for listing {self.listing_id} ({self.status})"

    @property
    def user_uuid(self) -> str:
        return str(self.applicant.uuid)
