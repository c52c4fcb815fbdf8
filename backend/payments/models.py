import uuid

from django.db import models, transaction


class SecureTokenQuerySet(models.QuerySet):
    def claim(
        self,
        token: str,
        *,
        listing_id: int,
        application_id: int,
        applicant_uuid=None,
    ):
        """Consume ``token`` if it is bound to the given listing and application.

        Returns the deleted row, or None when the token is unknown, already
        used, or bound to a different triple. Runs inside the caller's
        transaction when there is one, so a later rollback restores the token.
        """
        if not token:
            return None
        if applicant_uuid is not None:
            try:
                applicant_uuid = uuid.UUID(str(applicant_uuid))
            except ValueError:
                return None

        with transaction.atomic():
            row = self.select_for_update().filter(pk=token).first()
            if row is None:
                return None
            if row.listing_id != listing_id or row.application_id != application_id:
                return None
            if applicant_uuid is not None and row.applicant_uuid != applicant_uuid:
                return None
            deleted, _ = self.filter(pk=row.pk).delete()
            if not deleted:
                return None
            return row


class SecureToken(models.Model):
    """Single-use proof that a payment redirect belongs to a confirmed application."""

    token = models.CharField(max_length=128, primary_key=True)
    applicant_uuid = models.UUIDField()
    listing = models.ForeignKey(
        "listings.Listing",
        on_delete=models.CASCADE,
        related_name="secure_tokens",
    )
    application = models.ForeignKey(
        "applications.Application",
        on_delete=models.CASCADE,
        related_name="secure_tokens",
    )
    created_at = models.DateTimeField(auto_now_add=True)

    objects = SecureTokenQuerySet.as_manager()

    class Meta:
        db_table = "secure_strings"
        ordering = ["-created_at"]
        indexes = [models.Index(fields=["application"], name="secure_strings_app_idx")]

    def __str__(self) -> str:
        return f"token for application {self.application_id}"
