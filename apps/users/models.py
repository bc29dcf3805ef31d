"""User domain models.

Members of the organization log in with their email and carry one role.
The role is the only attribute the reservation core reads: admins moderate
reservations, students and faculty members request them.
"""

from __future__ import annotations

from typing import Any

from django.contrib.auth.models import AbstractUser, BaseUserManager  # type: ignore
from django.db import models  # type: ignore
from django.utils.translation import gettext_lazy as _  # type: ignore


class CustomUserManager(BaseUserManager):
    """Creates members keyed by email; new accounts are students unless told otherwise."""

    use_in_migrations = True

    def _create_user(self, email: str, password: str | None, **extra_fields: Any):
        if not email:
            raise ValueError("An email address is required.")

        user = self.model(email=self.normalize_email(email), **extra_fields)
        # Accounts provisioned without a password authenticate elsewhere
        if password:
            user.set_password(password)
        else:
            user.set_unusable_password()
        user.save(using=self._db)
        return user

    def create_user(self, email: str, password: str | None = None, **extra_fields: Any):
        extra_fields = {"is_staff": False, "is_superuser": False, "role": CustomUser.RoleChoices.STUDENT, **extra_fields}
        return self._create_user(email, password, **extra_fields)

    def create_superuser(self, email: str, password: str | None = None, **extra_fields: Any):
        extra_fields = {"is_staff": True, "is_superuser": True, "role": CustomUser.RoleChoices.ADMIN, **extra_fields}
        for flag in ("is_staff", "is_superuser"):
            if extra_fields[flag] is not True:
                raise ValueError(f"A superuser needs {flag}=True.")
        return self._create_user(email, password, **extra_fields)


class CustomUser(AbstractUser):
    """Organization member with a reservation role."""

    class RoleChoices(models.TextChoices):
        STUDENT = "student", _("Student")
        FACULTY_MEMBER = "faculty_member", _("Faculty member")
        ADMIN = "admin", _("Admin")

    username = models.CharField(
        _("Display name"),
        max_length=150,
        blank=True,
        help_text=_("Optional, shown in interfaces and notifications."),
    )
    email = models.EmailField(_("Email"), unique=True)
    role = models.CharField(
        _("Role"),
        max_length=20,
        choices=RoleChoices.choices,
        default=RoleChoices.STUDENT,
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = CustomUserManager()

    USERNAME_FIELD = "email"
    REQUIRED_FIELDS = ["username"]

    class Meta:
        verbose_name = _("User")
        verbose_name_plural = _("Users")
        ordering = ["-created_at"]

    def __str__(self) -> str:
        return f"{self.email} ({self.get_role_display()})"

    def is_admin(self) -> bool:
        return self.role == self.RoleChoices.ADMIN


User = CustomUser
