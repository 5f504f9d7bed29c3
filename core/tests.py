from io import StringIO

from django.contrib.auth import get_user_model
from django.core.management import call_command
from django.test import TestCase
from rest_framework.test import APIClient

from catalog.models import Product, ProductType, Supplier
from common.audit import create_audit_log
from common.exceptions import custom_exception_handler
from core.models import AuditLog


class AdminEmployeeTests(TestCase):
    def setUp(self):
        self.client = APIClient()
        self.user_model = get_user_model()
        self.admin = self.user_model.objects.create_user(
            username="admin@example.com",
            email="admin@example.com",
            password="pass12345",
            role=self.user_model.Role.ADMIN,
        )
        self.employee = self.user_model.objects.create_user(
            username="jane@example.com",
            email="jane@example.com",
            password="pass12345",
            first_name="Jane",
            last_name="Smith",
        )

    def test_admin_creates_employee_with_default_role(self):
        self.client.force_authenticate(user=self.admin)

        response = self.client.post(
            "/api/v1/admin/employees/",
            {"email": "Mark@Example.com", "firstName": "Mark", "lastName": "Jones", "password": "a-long-secret-42"},
            format="json",
        )

        self.assertEqual(response.status_code, 201)
        payload = response.json()
        self.assertEqual(payload["email"], "mark@example.com")
        self.assertEqual(payload["roles"], ["USER"])
        self.assertNotIn("password", payload)
        created = self.user_model.objects.get(email="mark@example.com")
        self.assertTrue(created.check_password("a-long-secret-42"))
        self.assertTrue(
            AuditLog.objects.filter(action=AuditLog.Action.CREATE, entity_type="User", entity_id=created.id).exists()
        )

    def test_admin_role_implies_user_role(self):
        self.client.force_authenticate(user=self.admin)

        response = self.client.post(
            "/api/v1/admin/employees/",
            {"email": "boss@example.com", "firstName": "Boss", "lastName": "Person", "roles": ["ADMIN"]},
            format="json",
        )

        self.assertEqual(response.status_code, 201)
        self.assertEqual(response.json()["roles"], ["ADMIN", "USER"])
        created = self.user_model.objects.get(email="boss@example.com")
        self.assertFalse(created.has_usable_password())

    def test_duplicate_email_is_rejected_case_insensitively(self):
        self.client.force_authenticate(user=self.admin)

        response = self.client.post(
            "/api/v1/admin/employees/",
            {"email": "JANE@example.com", "firstName": "Jane", "lastName": "Again"},
            format="json",
        )

        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["details"], {"email": ["A user with this email address already exists."]})

    def test_admin_deactivates_employee(self):
        self.client.force_authenticate(user=self.admin)

        response = self.client.patch(f"/api/v1/admin/employees/{self.employee.id}/", {"isActive": False}, format="json")

        self.assertEqual(response.status_code, 200)
        self.employee.refresh_from_db()
        self.assertFalse(self.employee.is_active)

    def test_employee_cannot_manage_employees(self):
        self.client.force_authenticate(user=self.employee)

        response = self.client.get("/api/v1/admin/employees/")

        self.assertEqual(response.status_code, 403)
        self.assertEqual(response.json()["code"], "permission_denied")

    def test_superuser_counts_as_admin(self):
        root = self.user_model.objects.create_superuser(username="root", email="root@example.com", password="pass12345")

        self.assertEqual(root.roles, {self.user_model.Role.ADMIN, self.user_model.Role.USER})
        self.assertEqual(self.employee.roles, {self.user_model.Role.USER})
        self.assertEqual(self.employee.full_name, "Jane Smith")


class TokenTests(TestCase):
    def setUp(self):
        self.client = APIClient()
        self.user = get_user_model().objects.create_user(
            username="jane@example.com",
            email="jane@example.com",
            password="pass12345",
        )

    def test_token_can_be_obtained_with_email(self):
        response = self.client.post(
            "/api/v1/token/",
            {"username": "JANE@example.com", "password": "pass12345"},
            format="json",
        )

        self.assertEqual(response.status_code, 200)
        self.assertIn("access", response.json())
        self.assertIn("refresh", response.json())

    def test_wrong_password_is_rejected(self):
        response = self.client.post(
            "/api/v1/token/",
            {"username": "jane@example.com", "password": "wrong-password"},
            format="json",
        )

        self.assertEqual(response.status_code, 401)
        self.assertEqual(response.json()["code"], "authentication_failed")


class AuditLogTests(TestCase):
    def setUp(self):
        self.user = get_user_model().objects.create_user(username="audit@example.com", email="audit@example.com")

    def test_audit_entries_are_append_only(self):
        entry = create_audit_log(user=self.user, action=AuditLog.Action.CREATE, entity_type="Supplier", details="PackRight")

        entry.details = "changed"
        with self.assertRaises(TypeError):
            entry.save()
        with self.assertRaises(TypeError):
            entry.delete()
        with self.assertRaises(TypeError):
            AuditLog.objects.filter(id=entry.id).update(details="changed")
        with self.assertRaises(TypeError):
            AuditLog.objects.filter(id=entry.id).delete()

        entry.refresh_from_db()
        self.assertEqual(entry.details, "PackRight")

    def test_empty_details_are_stored_as_null(self):
        entry = create_audit_log(user=self.user, action=AuditLog.Action.UPDATE, entity_type="Product", details="")

        self.assertIsNone(entry.details)


class ErrorEnvelopeTests(TestCase):
    def test_unhandled_exception_becomes_generic_500(self):
        with self.assertLogs("common.exceptions", level="ERROR"):
            response = custom_exception_handler(RuntimeError("database exploded"), {"view": None})

        self.assertEqual(response.status_code, 500)
        self.assertEqual(
            response.data,
            {
                "error": "An unexpected error occurred.",
                "details": None,
                "code": "internal_server_error",
                "status": 500,
            },
        )


class OpsEndpointTests(TestCase):
    def setUp(self):
        self.client = APIClient()

    def test_healthz_echoes_request_id(self):
        response = self.client.get("/api/v1/healthz/", HTTP_X_REQUEST_ID="req-health")

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json(), {"status": "ok", "request_id": "req-health"})
        self.assertEqual(response["X-Request-ID"], "req-health")

    def test_readyz_checks_database(self):
        response = self.client.get("/api/v1/readyz/")

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["status"], "ready")


class SeedDemoDataCommandTests(TestCase):
    def test_seed_is_idempotent(self):
        call_command("seed_demo_data", stdout=StringIO())
        call_command("seed_demo_data", stdout=StringIO())

        user_model = get_user_model()
        self.assertTrue(user_model.objects.get(email="admin@example.com").check_password("admin1234"))
        self.assertEqual(user_model.objects.filter(email__in=["admin@example.com", "employee@example.com"]).count(), 2)
        self.assertEqual(Supplier.objects.count(), 4)
        self.assertEqual(ProductType.objects.count(), 6)
        self.assertEqual(Product.objects.count(), 10)
        self.assertEqual(Product.objects.get(article_code="PKG-001").supplier.name, "PackRight B.V.")
