"""Reservation persistence models."""

from __future__ import annotations

import uuid

from django.conf import settings  # type: ignore
from django.db import models  # type: ignore
from django.utils.translation import gettext_lazy as _  # type: ignore


class Reservation(models.Model):
    """Room reservation row. State changes go through the domain aggregate."""

    class Status(models.TextChoices):
        PENDING = "pending", _("Pending approval")
        APPROVED = "approved", _("Approved")
        REJECTED = "rejected", _("Rejected")
        CANCELLED = "cancelled", _("Cancelled")

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    room = models.ForeignKey(
        "rooms.Room",
        on_delete=models.PROTECT,
        related_name="reservations",
    )
    requester = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.PROTECT,
        related_name="reservations",
    )
    start_time = models.DateTimeField()
    end_time = models.DateTimeField()
    purpose = models.TextField(blank=True)
    status = models.CharField(
        max_length=16,
        choices=Status.choices,
        default=Status.PENDING,
    )
    reason = models.CharField(
        max_length=500,
        null=True,
        blank=True,
        help_text=_("Rejection or cancellation reason."),
    )
    created_at = models.DateTimeField(editable=False)
    updated_at = models.DateTimeField()

    class Meta:
        verbose_name = _("Reservation")
        verbose_name_plural = _("Reservations")
        ordering = ["created_at"]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(end_time__gt=models.F("start_time")),
                name="reservation_valid_interval",
            ),
        ]
        indexes = [
            models.Index(fields=["room", "start_time", "end_time"], name="bookings_re_room_id_5c1f0e_idx"),
            models.Index(fields=["status"], name="bookings_re_status_8d2a41_idx"),
        ]

    def __str__(self) -> str:
        return f"Reservation {self.id} for room {self.room_id} ({self.status})"


class ReservationHistory(models.Model):
    """Append-only audit entry for one reservation transition."""

    class Action(models.TextChoices):
        CREATED = "created", _("Created")
        APPROVED = "approved", _("Approved")
        REJECTED = "rejected", _("Rejected")
        CANCELLED = "cancelled", _("Cancelled")

    reservation = models.ForeignKey(
        Reservation,
        on_delete=models.PROTECT,
        related_name="history",
    )
    actor = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        related_name="reservation_actions",
    )
    previous_status = models.CharField(
        max_length=16,
        choices=Reservation.Status.choices,
        null=True,
        blank=True,
    )
    new_status = models.CharField(max_length=16, choices=Reservation.Status.choices)
    action = models.CharField(max_length=16, choices=Action.choices)
    reason = models.CharField(max_length=500, null=True, blank=True)
    created_at = models.DateTimeField(editable=False)

    class Meta:
        verbose_name = _("Reservation history entry")
        verbose_name_plural = _("Reservation history")
        ordering = ["created_at", "id"]
        indexes = [
            models.Index(fields=["reservation", "created_at"], name="bookings_re_reserva_3e7b92_idx"),
        ]

    def __str__(self) -> str:
        return f"{self.reservation_id}: {self.previous_status} -> {self.new_status} ({self.action})"

    def save(self, *args, **kwargs):  # type: ignore
        if not self._state.adding:
            raise PermissionError("Reservation history entries are immutable.")
        super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):  # type: ignore
        raise PermissionError("Reservation history entries cannot be deleted.")
