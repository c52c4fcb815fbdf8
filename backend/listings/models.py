from django.conf import settings
from django.core.exceptions import ValidationError
from django.core.validators import MinValueValidator
from django.db import models


class Listing(models.Model):
    """An item an owner offers for rent."""

    class Status(models.TextChoices):
        AVAILABLE = "available", "available"
        PENDING = "pending", "pending"
        RENTED = "rented", "rented"

    class PriceUnit(models.TextChoices):
        DAY = "day", "day"
        WEEK = "week", "week"
        MONTH = "month", "month"

    owner = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="listings",
    )
    title = models.CharField(max_length=140)
    description = models.TextField(blank=True)
    image_uris = models.JSONField(default=list, blank=True)
    price_amount = models.PositiveIntegerField(
        validators=[MinValueValidator(1)],
        help_text="Price per unit in the currency's minor units (cents).",
    )
    price_unit = models.CharField(
        max_length=8,
        choices=PriceUnit.choices,
        default=PriceUnit.DAY,
    )
    status = models.CharField(
        max_length=16,
        choices=Status.choices,
        default=Status.AVAILABLE,
    )
    active = models.BooleanField(default=True)
    current_tenant = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="rented_listings",
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = "listings"
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["owner", "status"], name="listings_owner_status_idx"),
            models.Index(fields=["active", "status"], name="listings_active_status_idx"),
        ]

    def clean(self):
        if not self.title or len(self.title.strip()) < 3:
            raise ValidationError("Title too short")
        if self.status == self.Status.RENTED and (self.current_tenant_id is None or self.active):
            raise ValidationError("Rented listings need a tenant and must be inactive.")

    @property
    def owner_uuid(self) -> str:
        return str(self.owner.uuid)

    @property
    def current_tenant_uuid(self) -> str | None:
        if self.current_tenant_id is None:
            return None
        return str(self.current_tenant.uuid)

    def is_accepting_applications(self) -> bool:
        return self.active and self.status == self.Status.AVAILABLE

    def __str__(self) -> str:
        return f"{self.title} (#{self.pk}, {self.status})"
