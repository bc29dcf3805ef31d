import uuid

import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


STATUS_CHOICES = [
    ("pending", "Pending approval"),
    ("approved", "Approved"),
    ("rejected", "Rejected"),
    ("cancelled", "Cancelled"),
]


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("rooms", "0001_initial"),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Reservation",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("start_time", models.DateTimeField()),
                ("end_time", models.DateTimeField()),
                ("purpose", models.TextField(blank=True)),
                ("status", models.CharField(choices=STATUS_CHOICES, default="pending", max_length=16)),
                (
                    "reason",
                    models.CharField(
                        blank=True,
                        help_text="Rejection or cancellation reason.",
                        max_length=500,
                        null=True,
                    ),
                ),
                ("created_at", models.DateTimeField(editable=False)),
                ("updated_at", models.DateTimeField()),
                (
                    "requester",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="reservations",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
                (
                    "room",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="reservations",
                        to="rooms.room",
                    ),
                ),
            ],
            options={
                "verbose_name": "Reservation",
                "verbose_name_plural": "Reservations",
                "ordering": ["created_at"],
                "indexes": [
                    models.Index(fields=["room", "start_time", "end_time"], name="bookings_re_room_id_5c1f0e_idx"),
                    models.Index(fields=["status"], name="bookings_re_status_8d2a41_idx"),
                ],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(end_time__gt=models.F("start_time")),
                        name="reservation_valid_interval",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="ReservationHistory",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("previous_status", models.CharField(blank=True, choices=STATUS_CHOICES, max_length=16, null=True)),
                ("new_status", models.CharField(choices=STATUS_CHOICES, max_length=16)),
                (
                    "action",
                    models.CharField(
                        choices=[
                            ("created", "Created"),
                            ("approved", "Approved"),
                            ("rejected", "Rejected"),
                            ("cancelled", "Cancelled"),
                        ],
                        max_length=16,
                    ),
                ),
                ("reason", models.CharField(blank=True, max_length=500, null=True)),
                ("created_at", models.DateTimeField(editable=False)),
                (
                    "actor",
                    models.ForeignKey(
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="reservation_actions",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
                (
                    "reservation",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="history",
                        to="bookings.reservation",
                    ),
                ),
            ],
            options={
                "verbose_name": "Reservation history entry",
                "verbose_name_plural": "Reservation history",
                "ordering": ["created_at", "id"],
                "indexes": [
                    models.Index(fields=["reservation", "created_at"], name="bookings_re_reserva_3e7b92_idx"),
                ],
            },
        ),
    ]
