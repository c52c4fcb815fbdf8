from django.conf import settings
from django.db import models


class Notification(models.Model):
    class Type(models.TextChoices):
        NEW_APPLICATION = "new_application", "New application"
        APPLICATION_APPROVED = "application_approved", "Application approved"
        APPLICATION_REJECTED = "application_rejected", "Application rejected"
        RECEIPT_CONFIRMED = "receipt_confirmed", "Receipt confirmed"
        PAYMENT_COMPLETED = "payment_completed", "Payment completed"

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="notifications",
    )
    type = models.CharField(max_length=32, choices=Type.choices)
    title = models.CharField(max_length=140)
    message = models.TextField()
    listing = models.ForeignKey(
        "listings.Listing",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="notifications",
    )
    application = models.ForeignKey(
        "applications.Application",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="notifications",
    )
    read = models.BooleanField(default=False)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = "notifications"
        indexes = [
            models.Index(fields=["user", "read"], name="notifications_user_read_idx"),
            models.Index(fields=["user", "created_at"], name="notifications_user_created_idx"),
        ]
        ordering = ["-created_at", "-id"]

    @property
    def user_uuid(self) -> str:
        return str(self.user.uuid)

    def __str__(self) -> str:
        return f"{self.type} -> user {self.user_id} ({'read' if self.read else 'unread'})"
