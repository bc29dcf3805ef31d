"""Tests for the email-login user manager and roles."""

from __future__ import annotations

from django.test import TestCase

from apps.users.models import User


class UserManagerTests(TestCase):
    def test_create_user_defaults_to_student(self) -> None:
        user = User.objects.create_user(email="Student@Example.COM", password="StudentPass123")

        self.assertEqual(user.email, "Student@example.com")
        self.assertEqual(user.role, User.RoleChoices.STUDENT)
        self.assertFalse(user.is_admin())
        self.assertFalse(user.is_staff)
        self.assertTrue(user.check_password("StudentPass123"))

    def test_user_without_password_cannot_log_in(self) -> None:
        user = User.objects.create_user(email="sso@example.com")

        self.assertFalse(user.has_usable_password())

    def test_email_is_required(self) -> None:
        with self.assertRaises(ValueError):
            User.objects.create_user(email="", password="whatever")

    def test_superuser_is_admin(self) -> None:
        user = User.objects.create_superuser(email="root@example.com", password="RootPass123")

        self.assertEqual(user.role, User.RoleChoices.ADMIN)
        self.assertTrue(user.is_admin())
        self.assertTrue(user.is_staff)
        self.assertTrue(user.is_superuser)

    def test_superuser_flags_are_enforced(self) -> None:
        with self.assertRaises(ValueError):
            User.objects.create_superuser(email="x@example.com", password="x", is_staff=False)

    def test_faculty_member(self) -> None:
        user = User.objects.create_user(
            email="prof@example.com",
            password="ProfPass123",
            role=User.RoleChoices.FACULTY_MEMBER,
        )

        self.assertEqual(str(user), "prof@example.com (Faculty member)")
        self.assertFalse(user.is_admin())
