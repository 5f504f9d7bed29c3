from django.contrib.auth import get_user_model
from django.test import TestCase
from rest_framework.test import APIClient

from catalog.models import Product, ProductType, Supplier
from core.models import AuditLog


class CatalogReadTests(TestCase):
    def setUp(self):
        self.client = APIClient()
        self.user_model = get_user_model()
        self.employee = self.user_model.objects.create_user(
            username="jane@example.com",
            email="jane@example.com",
            password="pass12345",
        )

        self.supplier = Supplier.objects.create(
            name="PackRight B.V.",
            email="orders@packright.nl",
            article_group=Supplier.ArticleGroup.PACKAGING,
        )
        self.inactive_supplier = Supplier.objects.create(
            name="Closed Supplies",
            email="closed@example.com",
            article_group=Supplier.ArticleGroup.OTHER,
            is_active=False,
        )
        self.other_supplier = Supplier.objects.create(
            name="LabelPro International",
            email="info@labelpro.com",
            article_group=Supplier.ArticleGroup.LABELS,
        )
        self.box_type = ProductType.objects.create(name="Box")
        ProductType.objects.create(name="Retired", is_active=False)

        self.box = Product.objects.create(
            name="Cardboard Box 40x30x20",
            article_code="PKG-001",
            supplier=self.supplier,
            product_type=self.box_type,
        )
        self.retired_box = Product.objects.create(name="Old Box", article_code="PKG-000", supplier=self.supplier, is_active=False)
        self.orphan = Product.objects.create(name="Orphan", article_code="CLS-001", supplier=self.inactive_supplier)
        self.label = Product.objects.create(name="Shipping Label A6", article_code="LBL-001", supplier=self.other_supplier)

        self.client.force_authenticate(user=self.employee)

    def test_suppliers_list_only_active(self):
        response = self.client.get("/api/v1/suppliers/")

        self.assertEqual(response.status_code, 200)
        self.assertEqual([item["name"] for item in response.json()], ["LabelPro International", "PackRight B.V."])

    def test_products_list_only_active_products_of_active_suppliers(self):
        response = self.client.get("/api/v1/products/")

        self.assertEqual(response.status_code, 200)
        codes = {item["articleCode"] for item in response.json()}
        self.assertEqual(codes, {"PKG-001", "LBL-001"})

    def test_products_filter_by_supplier(self):
        response = self.client.get("/api/v1/products/", {"supplierId": str(self.supplier.id)})

        payload = response.json()
        self.assertEqual([item["articleCode"] for item in payload], ["PKG-001"])
        self.assertEqual(payload[0]["productType"], "Box")
        self.assertEqual(payload[0]["supplier"], {"id": str(self.supplier.id), "name": "PackRight B.V."})

    def test_products_filter_rejects_malformed_supplier_id(self):
        response = self.client.get("/api/v1/products/", {"supplierId": "not-a-uuid"})

        self.assertEqual(response.status_code, 400)
        self.assertIn("supplierId", response.json()["details"])

    def test_product_types_list_only_active(self):
        response = self.client.get("/api/v1/product-types/")

        self.assertEqual([item["name"] for item in response.json()], ["Box"])

    def test_catalog_requires_authentication(self):
        self.client.force_authenticate(user=None)

        response = self.client.get("/api/v1/products/")

        self.assertEqual(response.status_code, 401)


class AdminCatalogTests(TestCase):
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
        )
        self.supplier = Supplier.objects.create(
            name="TapeMasters GmbH",
            email="bestellungen@tapemasters.de",
            article_group=Supplier.ArticleGroup.TAPE,
        )
        self.tape_type = ProductType.objects.create(name="Tape")

    def test_admin_creates_supplier_with_audit_entry(self):
        self.client.force_authenticate(user=self.admin)

        response = self.client.post(
            "/api/v1/admin/suppliers/",
            {
                "name": "Euro Pallets Co.",
                "email": "orders@europallets.eu",
                "ccEmails": ["logistics@europallets.eu"],
                "articleGroup": "PALLETS",
            },
            format="json",
            HTTP_X_REQUEST_ID="req-supplier-1",
        )

        self.assertEqual(response.status_code, 201)
        payload = response.json()
        self.assertEqual(payload["ccEmails"], ["logistics@europallets.eu"])
        self.assertTrue(payload["isActive"])
        self.assertTrue(
            AuditLog.objects.filter(
                action=AuditLog.Action.CREATE,
                entity_type="Supplier",
                entity_id=payload["id"],
                user=self.admin,
                request_id="req-supplier-1",
            ).exists()
        )

    def test_admin_lists_suppliers_with_product_counts(self):
        Product.objects.create(name="Packing Tape", article_code="TPE-001", supplier=self.supplier)
        Supplier.objects.create(name="Dormant", email="dormant@example.com", article_group="OTHER", is_active=False)
        self.client.force_authenticate(user=self.admin)

        response = self.client.get("/api/v1/admin/suppliers/")

        counts = {item["name"]: item["productCount"] for item in response.json()}
        self.assertEqual(counts, {"Dormant": 0, "TapeMasters GmbH": 1})

    def test_admin_deactivates_supplier_with_patch(self):
        self.client.force_authenticate(user=self.admin)

        response = self.client.patch(f"/api/v1/admin/suppliers/{self.supplier.id}/", {"isActive": False}, format="json")

        self.assertEqual(response.status_code, 200)
        self.supplier.refresh_from_db()
        self.assertFalse(self.supplier.is_active)
        entry = AuditLog.objects.get(action=AuditLog.Action.UPDATE, entity_id=self.supplier.id)
        self.assertEqual(entry.details, "fields: is_active")

    def test_delete_is_not_allowed(self):
        self.client.force_authenticate(user=self.admin)

        response = self.client.delete(f"/api/v1/admin/suppliers/{self.supplier.id}/")

        self.assertEqual(response.status_code, 405)
        self.assertEqual(response.json()["code"], "method_not_allowed")
        self.assertTrue(Supplier.objects.filter(id=self.supplier.id).exists())

    def test_admin_creates_product(self):
        self.client.force_authenticate(user=self.admin)

        response = self.client.post(
            "/api/v1/admin/products/",
            {
                "name": "Packing Tape 50mm x 66m",
                "articleCode": "TPE-001",
                "supplierId": str(self.supplier.id),
                "productTypeId": str(self.tape_type.id),
                "unitsPerBox": 36,
                "unitsPerPallet": 1440,
                "pricePerUnit": "1.80",
            },
            format="json",
        )

        self.assertEqual(response.status_code, 201)
        payload = response.json()
        self.assertEqual(payload["productType"], "Tape")
        self.assertEqual(payload["supplier"]["name"], "TapeMasters GmbH")
        product = Product.objects.get(article_code="TPE-001")
        self.assertEqual(product.units_per_box, 36)
        self.assertTrue(AuditLog.objects.filter(action=AuditLog.Action.CREATE, entity_type="Product", entity_id=product.id).exists())

    def test_duplicate_article_code_is_rejected(self):
        Product.objects.create(name="Packing Tape", article_code="TPE-001", supplier=self.supplier)
        self.client.force_authenticate(user=self.admin)

        response = self.client.post(
            "/api/v1/admin/products/",
            {"name": "Another Tape", "articleCode": "TPE-001", "supplierId": str(self.supplier.id)},
            format="json",
        )

        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["details"], {"articleCode": ["A product with this article code already exists."]})

    def test_non_positive_price_is_rejected(self):
        self.client.force_authenticate(user=self.admin)

        response = self.client.post(
            "/api/v1/admin/products/",
            {"name": "Free Tape", "articleCode": "TPE-009", "supplierId": str(self.supplier.id), "pricePerUnit": "0"},
            format="json",
        )

        self.assertEqual(response.status_code, 400)
        self.assertIn("pricePerUnit", response.json()["details"])

    def test_duplicate_product_type_name_is_rejected(self):
        self.client.force_authenticate(user=self.admin)

        response = self.client.post("/api/v1/admin/product-types/", {"name": "Tape"}, format="json")

        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["details"], {"name": ["A product type with this name already exists."]})

    def test_delete_deactivates_product_type(self):
        self.client.force_authenticate(user=self.admin)

        response = self.client.delete(f"/api/v1/admin/product-types/{self.tape_type.id}/")

        self.assertEqual(response.status_code, 200)
        self.assertFalse(response.json()["isActive"])
        self.tape_type.refresh_from_db()
        self.assertFalse(self.tape_type.is_active)
        entry = AuditLog.objects.get(action=AuditLog.Action.UPDATE, entity_type="ProductType", entity_id=self.tape_type.id)
        self.assertEqual(entry.details, "fields: is_active")

    def test_employee_cannot_delete_product_type(self):
        self.client.force_authenticate(user=self.employee)

        response = self.client.delete(f"/api/v1/admin/product-types/{self.tape_type.id}/")

        self.assertEqual(response.status_code, 403)
        self.tape_type.refresh_from_db()
        self.assertTrue(self.tape_type.is_active)

    def test_employee_cannot_manage_catalog_and_denial_is_logged(self):
        self.client.force_authenticate(user=self.employee)

        with self.assertLogs("security.authorization", level="WARNING") as logs:
            response = self.client.post(
                "/api/v1/admin/product-types/",
                {"name": "Sleeve"},
                format="json",
            )

        self.assertEqual(response.status_code, 403)
        self.assertEqual(response.json()["error"], "Insufficient permissions.")
        self.assertTrue(any("permission_denied" in entry for entry in logs.output))
        self.assertFalse(ProductType.objects.filter(name="Sleeve").exists())
