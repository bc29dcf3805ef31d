"""Room catalog models."""

from __future__ import annotations

from django.core.validators import MinValueValidator  # type: ignore
from django.db import models  # type: ignore
from django.utils.translation import gettext_lazy as _  # type: ignore


class Room(models.Model):
    """A shared room that members can reserve."""

    name = models.CharField(_("Name"), max_length=255)
    room_number = models.CharField(_("Room number"), max_length=50, unique=True)
    capacity = models.PositiveIntegerField(_("Capacity"), validators=[MinValueValidator(1)])
    description = models.TextField(blank=True)
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = _("Room")
        verbose_name_plural = _("Rooms")
        ordering = ["room_number"]

    def __str__(self) -> str:
        return f"{self.room_number} {self.name}"
