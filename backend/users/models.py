from __future__ import annotations

import uuid

from django.contrib.auth.models import AbstractUser
from django.db import models


class User(AbstractUser):
    """Marketplace account; `uuid` is the public subject id carried in JWTs."""

    uuid = models.UUIDField(
        default=uuid.uuid4,
        unique=True,
        editable=False,
        help_text="Public subject id used by listings, applications and tokens.",
    )
    name = models.CharField(
        max_length=150,
        blank=True,
        default="",
        help_text="Display name shown to other users.",
    )
    neighborhood = models.CharField(
        max_length=120,
        blank=True,
        default="",
        help_text="Neighborhood used to match nearby rentals.",
    )

    def __str__(self) -> str:
        return f"{self.get_username()} ({self.uuid})"
