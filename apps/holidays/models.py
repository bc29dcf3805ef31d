"""Holiday calendar models."""

from __future__ import annotations

from django.db import models  # type: ignore
from django.utils.translation import gettext_lazy as _  # type: ignore


class HolidayQuerySet(models.QuerySet):
    def active(self):
        return self.filter(is_active=True)

    def blocks(self, day) -> bool:
        return self.active().filter(date=day).exists()


class Holiday(models.Model):
    """A calendar day on which reservations may not begin.

    Inactive rows are kept for history and do not block anything.
    """

    date = models.DateField(_("Date"), unique=True)
    name = models.CharField(_("Name"), max_length=255, blank=True)
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)

    objects = HolidayQuerySet.as_manager()

    class Meta:
        verbose_name = _("Holiday")
        verbose_name_plural = _("Holidays")
        ordering = ["date"]

    def __str__(self) -> str:
        return f"{self.date} {self.name}".strip()
