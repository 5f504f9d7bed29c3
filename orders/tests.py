from itertools import product
from smtplib import SMTPException
from unittest.mock import patch

from django.contrib.auth import get_user_model
from django.core import mail
from django.db import IntegrityError, transaction
from django.test import TestCase, override_settings
from rest_framework.test import APIClient

from catalog.models import Product, Supplier
from core.models import AuditLog
from notifications.models import EmailLog
from orders.models import Order, OrderItem, OrderNumberSequence
from orders.services import allocate_order_number, derive_order_status, next_order_number, parse_order_number


class OrderApiTestCase(TestCase):
    def setUp(self):
        self.client = APIClient()
        self.user_model = get_user_model()

        self.employee = self.user_model.objects.create_user(
            username="jane@example.com",
            email="jane@example.com",
            password="pass12345",
            first_name="Jane",
            last_name="Smith",
        )
        self.other_employee = self.user_model.objects.create_user(
            username="mark@example.com",
            email="mark@example.com",
            password="pass12345",
            first_name="Mark",
            last_name="Jones",
        )
        self.admin = self.user_model.objects.create_user(
            username="admin@example.com",
            email="admin@example.com",
            password="pass12345",
            role=self.user_model.Role.ADMIN,
        )

        self.supplier = Supplier.objects.create(
            name="PackRight B.V.",
            email="orders@packright.nl",
            cc_emails=["sales@packright.nl"],
            article_group=Supplier.ArticleGroup.PACKAGING,
        )
        self.other_supplier = Supplier.objects.create(
            name="TapeMasters GmbH",
            email="bestellungen@tapemasters.de",
            article_group=Supplier.ArticleGroup.TAPE,
        )
        self.label = Product.objects.create(name="Shipping Label A6", article_code="LBL-001", supplier=self.supplier)
        self.box = Product.objects.create(name="Cardboard Box 40x30x20", article_code="PKG-001", supplier=self.supplier)
        self.tape = Product.objects.create(name="Packing Tape 50mm", article_code="TPE-001", supplier=self.other_supplier)

    def order_payload(self, items=None, supplier=None, notes=None):
        payload = {
            "supplierId": str((supplier or self.supplier).id),
            "items": items
            or [
                {"productId": str(self.label.id), "quantity": 10, "unit": "PIECE"},
                {"productId": str(self.box.id), "quantity": 5, "unit": "BOX"},
            ],
        }
        if notes is not None:
            payload["notes"] = notes
        return payload

    def place_order(self, user=None, **kwargs):
        self.client.force_authenticate(user=user or self.employee)
        return self.client.post("/api/v1/orders/", self.order_payload(**kwargs), format="json")

    def receive(self, order_id, items, user=None, notes=None):
        self.client.force_authenticate(user=user or self.employee)
        payload = {"items": items}
        if notes is not None:
            payload["notes"] = notes
        return self.client.patch(f"/api/v1/orders/{order_id}/receive/", payload, format="json")

    def items_by_product(self, order_id):
        return {item.product_id: item for item in OrderItem.objects.filter(order_id=order_id)}


class OrderNumberFormatTests(TestCase):
    def test_first_number_is_one(self):
        self.assertEqual(next_order_number([], prefix="BEST-", width=4), "BEST-0001")

    def test_next_number_follows_highest_suffix(self):
        existing = ["BEST-0007", "BEST-0012", "BEST-0003"]
        self.assertEqual(next_order_number(existing, prefix="BEST-", width=4), "BEST-0013")

    def test_foreign_prefixes_and_non_numeric_suffixes_are_ignored(self):
        existing = ["BEST-0002", "PO-0099", "BEST-12AB", "BEST-", "", None]
        self.assertEqual(next_order_number(existing, prefix="BEST-", width=4), "BEST-0003")

    def test_numbers_keep_growing_past_width(self):
        self.assertEqual(next_order_number(["BEST-9999"], prefix="BEST-", width=4), "BEST-10000")
        self.assertEqual(next_order_number(["BEST-099"], prefix="BEST-", width=3), "BEST-100")

    def test_parse_order_number(self):
        self.assertEqual(parse_order_number("BEST-0042", prefix="BEST-"), 42)
        self.assertIsNone(parse_order_number("PO-0042", prefix="BEST-"))
        self.assertIsNone(parse_order_number("BEST-4x2", prefix="BEST-"))


class OrderNumberAllocatorTests(OrderApiTestCase):
    def test_allocations_are_sequential(self):
        with transaction.atomic():
            first = allocate_order_number()
            second = allocate_order_number()

        self.assertEqual((first, second), ("BEST-0001", "BEST-0002"))
        self.assertEqual(OrderNumberSequence.objects.get(prefix="BEST-").last_value, 2)

    def test_allocator_seeds_from_existing_orders(self):
        Order.objects.create(order_number="BEST-0041", employee=self.employee, supplier=self.supplier)

        with transaction.atomic():
            self.assertEqual(allocate_order_number(), "BEST-0042")

    def test_rolled_back_allocation_is_reused(self):
        with self.assertRaises(RuntimeError):
            with transaction.atomic():
                allocate_order_number()
                raise RuntimeError("boom")

        with transaction.atomic():
            self.assertEqual(allocate_order_number(), "BEST-0001")

    def test_duplicate_order_number_is_rejected_by_the_database(self):
        Order.objects.create(order_number="BEST-0001", employee=self.employee, supplier=self.supplier)

        with self.assertRaises(IntegrityError):
            with transaction.atomic():
                Order.objects.create(order_number="BEST-0001", employee=self.other_employee, supplier=self.supplier)

        self.assertEqual(Order.objects.filter(order_number="BEST-0001").count(), 1)

    @override_settings(ORDER_NUMBER_PREFIX="TST-", ORDER_NUMBER_WIDTH=3)
    def test_prefix_and_width_come_from_settings(self):
        with transaction.atomic():
            self.assertEqual(allocate_order_number(), "TST-001")

    def test_placed_orders_get_gapless_increasing_numbers(self):
        numbers = [self.place_order().json()["orderNumber"] for _ in range(5)]

        self.assertEqual(numbers, ["BEST-0001", "BEST-0002", "BEST-0003", "BEST-0004", "BEST-0005"])
        self.assertEqual(len(set(Order.objects.values_list("order_number", flat=True))), 5)


class OrderStatusDerivationTests(TestCase):
    RECEIVED_STATES = {"unset": None, "zero": 0, "partial": 2, "full": 4, "over": 6}

    def expected_status(self, states):
        if all(state in ("full", "over") for state in states):
            return Order.Status.RECEIVED
        if any(state in ("partial", "full", "over") for state in states):
            return Order.Status.PARTIALLY_RECEIVED
        return Order.Status.PENDING

    def test_status_matches_rule_table_for_every_combination(self):
        for size in (1, 2, 3):
            for states in product(self.RECEIVED_STATES, repeat=size):
                items = [OrderItem(quantity=4, quantity_received=self.RECEIVED_STATES[state]) for state in states]
                with self.subTest(states=states):
                    self.assertEqual(derive_order_status(items), self.expected_status(states))
                    self.assertEqual(derive_order_status(items), derive_order_status(items))

    def test_zero_received_on_every_item_is_pending(self):
        items = [OrderItem(quantity=10, quantity_received=0), OrderItem(quantity=5, quantity_received=None)]
        self.assertEqual(derive_order_status(items), Order.Status.PENDING)


class OrderPlacementTests(OrderApiTestCase):
    def test_place_order_creates_pending_order(self):
        response = self.place_order(notes="Deliver to dock 3")

        self.assertEqual(response.status_code, 201)
        payload = response.json()
        self.assertEqual(payload["orderNumber"], "BEST-0001")
        self.assertEqual(payload["status"], "PENDING")
        self.assertEqual(payload["statusLabel"], "Pending")
        self.assertEqual(payload["notes"], "Deliver to dock 3")
        self.assertEqual(payload["supplier"]["name"], "PackRight B.V.")
        self.assertEqual(payload["employee"]["email"], "jane@example.com")
        self.assertEqual(payload["itemCount"], 2)
        self.assertIn("etherealUrl", payload)
        self.assertIsNone(payload["etherealUrl"])

        order = Order.objects.get(id=payload["id"])
        items = self.items_by_product(order.id)
        self.assertEqual((items[self.label.id].quantity, items[self.label.id].unit), (10, OrderItem.Unit.PIECE))
        self.assertEqual((items[self.box.id].quantity, items[self.box.id].unit), (5, OrderItem.Unit.BOX))
        self.assertTrue(all(item.quantity_received is None for item in items.values()))
        self.assertTrue(
            AuditLog.objects.filter(
                action=AuditLog.Action.ORDER_PLACED,
                entity_type="Order",
                entity_id=order.id,
                user=self.employee,
            ).exists()
        )

    def test_order_number_follows_previous_max(self):
        Order.objects.create(order_number="BEST-0007", employee=self.employee, supplier=self.supplier)

        response = self.place_order()

        self.assertEqual(response.status_code, 201)
        self.assertEqual(response.json()["orderNumber"], "BEST-0008")

    def test_place_order_sends_supplier_email_and_stamps_order(self):
        response = self.place_order()

        self.assertEqual(response.status_code, 201)
        self.assertEqual(len(mail.outbox), 1)
        message = mail.outbox[0]
        self.assertEqual(message.subject, "New Order BEST-0001 - PackRight B.V.")
        self.assertEqual(message.to, ["orders@packright.nl"])
        self.assertEqual(message.cc, ["sales@packright.nl", "jane@example.com"])
        self.assertIn("LBL-001", message.body)
        self.assertIn("Box(es)", message.body)

        order = Order.objects.get(id=response.json()["id"])
        self.assertIsNotNone(order.email_sent_at)
        self.assertIsNotNone(response.json()["emailSentAt"])
        self.assertTrue(AuditLog.objects.filter(action=AuditLog.Action.ORDER_EMAIL_SENT, entity_id=order.id).exists())
        log = EmailLog.objects.get(order=order)
        self.assertEqual(log.status, EmailLog.Status.SENT)
        self.assertEqual(log.sent_by, self.employee)

    def test_email_failure_keeps_the_order(self):
        with patch(
            "django.core.mail.backends.locmem.EmailBackend.send_messages",
            side_effect=SMTPException("relay unavailable"),
        ):
            with self.assertLogs("notifications.dispatcher", level="ERROR") as logs:
                response = self.place_order()

        self.assertEqual(response.status_code, 201)
        self.assertTrue(any("order_email_send_failed" in entry for entry in logs.output))
        order = Order.objects.get(id=response.json()["id"])
        self.assertEqual(order.status, Order.Status.PENDING)
        self.assertIsNone(order.email_sent_at)
        self.assertIsNone(response.json()["etherealUrl"])
        self.assertFalse(AuditLog.objects.filter(action=AuditLog.Action.ORDER_EMAIL_SENT).exists())
        log = EmailLog.objects.get(order=order)
        self.assertEqual(log.status, EmailLog.Status.FAILED)
        self.assertEqual(log.error_message, "relay unavailable")

    def test_product_from_other_supplier_is_rejected_without_advancing_sequence(self):
        response = self.place_order(
            items=[
                {"productId": str(self.label.id), "quantity": 1, "unit": "PIECE"},
                {"productId": str(self.tape.id), "quantity": 2, "unit": "BOX"},
            ]
        )

        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["code"], "validation_error")
        self.assertEqual(
            response.json()["error"],
            "One or more products are invalid, inactive, or do not belong to the selected supplier.",
        )
        self.assertFalse(Order.objects.exists())
        self.assertFalse(OrderNumberSequence.objects.exists())
        self.assertEqual(len(mail.outbox), 0)

        self.assertEqual(self.place_order().json()["orderNumber"], "BEST-0001")

    def test_inactive_supplier_is_rejected(self):
        self.supplier.is_active = False
        self.supplier.save(update_fields=["is_active"])

        response = self.place_order()

        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["error"], "Supplier not found or inactive.")
        self.assertFalse(Order.objects.exists())

    def test_inactive_product_is_rejected(self):
        self.box.is_active = False
        self.box.save(update_fields=["is_active"])

        response = self.place_order()

        self.assertEqual(response.status_code, 400)
        self.assertFalse(Order.objects.exists())

    def test_invalid_payload_returns_field_errors(self):
        response = self.place_order(items=[{"productId": str(self.label.id), "quantity": 0, "unit": "CRATE"}])

        self.assertEqual(response.status_code, 400)
        body = response.json()
        self.assertEqual(body["code"], "validation_error")
        self.assertEqual(body["error"], "Validation failed.")
        self.assertIn("items", body["details"])

    def test_quantity_beyond_column_range_is_rejected_before_any_write(self):
        response = self.place_order(items=[{"productId": str(self.label.id), "quantity": 10**20, "unit": "PIECE"}])

        self.assertEqual(response.status_code, 400)
        body = response.json()
        self.assertEqual(body["code"], "validation_error")
        self.assertIn("quantity", body["details"]["items"][0])
        self.assertFalse(Order.objects.exists())
        self.assertFalse(OrderNumberSequence.objects.exists())

        self.assertEqual(self.place_order().json()["orderNumber"], "BEST-0001")

    def test_empty_items_are_rejected(self):
        self.client.force_authenticate(user=self.employee)
        response = self.client.post(
            "/api/v1/orders/",
            {"supplierId": str(self.supplier.id), "items": []},
            format="json",
        )

        self.assertEqual(response.status_code, 400)
        self.assertIn("items", response.json()["details"])

    def test_unauthenticated_request_is_rejected(self):
        response = self.client.post("/api/v1/orders/", self.order_payload(), format="json")

        self.assertEqual(response.status_code, 401)
        self.assertEqual(response.json()["code"], "not_authenticated")


class GoodsReceivingTests(OrderApiTestCase):
    def setUp(self):
        super().setUp()
        self.order = Order.objects.get(id=self.place_order().json()["id"])
        items = self.items_by_product(self.order.id)
        self.label_item = items[self.label.id]
        self.box_item = items[self.box.id]

    def receipt(self, item, quantity, received_date="2026-10-19"):
        return {"orderItemId": str(item.id), "quantityReceived": quantity, "receivedDate": received_date}

    def test_full_receipt_marks_order_received(self):
        response = self.receive(self.order.id, [self.receipt(self.label_item, 10), self.receipt(self.box_item, 5)], notes="All good")

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["status"], "RECEIVED")
        self.order.refresh_from_db()
        self.assertEqual(self.order.status, Order.Status.RECEIVED)
        self.label_item.refresh_from_db()
        self.assertEqual(self.label_item.quantity_received, 10)
        self.assertEqual(str(self.label_item.received_date), "2026-10-19")
        self.assertEqual(self.label_item.received_by, self.employee)
        entry = AuditLog.objects.get(action=AuditLog.Action.GOODS_RECEIVED, entity_id=self.order.id)
        self.assertEqual(entry.details, "All good")

    def test_partial_receipt_leaves_other_items_untouched(self):
        response = self.receive(self.order.id, [self.receipt(self.label_item, 4)])

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["status"], "PARTIALLY_RECEIVED")
        self.box_item.refresh_from_db()
        self.assertIsNone(self.box_item.quantity_received)
        self.assertIsNone(self.box_item.received_by)

    def test_second_submission_completes_order_and_repeat_is_rejected(self):
        self.receive(self.order.id, [self.receipt(self.label_item, 4)])

        response = self.receive(self.order.id, [self.receipt(self.label_item, 10), self.receipt(self.box_item, 5)])
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["status"], "RECEIVED")

        repeat = self.receive(self.order.id, [self.receipt(self.label_item, 10), self.receipt(self.box_item, 5)])
        self.assertEqual(repeat.status_code, 400)
        self.order.refresh_from_db()
        self.assertEqual(self.order.status, Order.Status.RECEIVED)

    def test_repeating_the_same_submission_is_idempotent(self):
        payload = [self.receipt(self.label_item, 4), self.receipt(self.box_item, 0)]

        first = self.receive(self.order.id, payload)
        first_items = {item["id"]: item["quantityReceived"] for item in first.json()["items"]}
        second = self.receive(self.order.id, payload)
        second_items = {item["id"]: item["quantityReceived"] for item in second.json()["items"]}

        self.assertEqual(first.json()["status"], "PARTIALLY_RECEIVED")
        self.assertEqual(second.json()["status"], "PARTIALLY_RECEIVED")
        self.assertEqual(first_items, second_items)
        self.assertEqual(AuditLog.objects.filter(action=AuditLog.Action.GOODS_RECEIVED).count(), 2)

    def test_zero_quantity_is_not_an_update(self):
        self.receive(self.order.id, [self.receipt(self.label_item, 4)])

        response = self.receive(self.order.id, [self.receipt(self.label_item, 0)])

        self.assertEqual(response.status_code, 200)
        self.label_item.refresh_from_db()
        self.assertEqual(self.label_item.quantity_received, 4)

    def test_over_receipt_is_allowed(self):
        response = self.receive(self.order.id, [self.receipt(self.label_item, 12), self.receipt(self.box_item, 5)])

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["status"], "RECEIVED")

    def test_receiving_against_received_order_is_a_conflict(self):
        self.receive(self.order.id, [self.receipt(self.label_item, 10), self.receipt(self.box_item, 5)])
        audit_count = AuditLog.objects.count()

        response = self.receive(self.order.id, [self.receipt(self.label_item, 3, "2026-10-20")])

        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["code"], "conflict")
        self.assertEqual(response.json()["error"], "Order is already fully received.")
        self.label_item.refresh_from_db()
        self.assertEqual(self.label_item.quantity_received, 10)
        self.assertEqual(str(self.label_item.received_date), "2026-10-19")
        self.assertEqual(AuditLog.objects.count(), audit_count)

    def test_receiving_against_cancelled_order_is_a_conflict(self):
        Order.objects.filter(id=self.order.id).update(status=Order.Status.CANCELLED)

        response = self.receive(self.order.id, [self.receipt(self.label_item, 10)])

        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["code"], "conflict")
        self.assertEqual(response.json()["error"], "Cannot receive goods for a cancelled order.")
        self.label_item.refresh_from_db()
        self.assertIsNone(self.label_item.quantity_received)
        self.order.refresh_from_db()
        self.assertEqual(self.order.status, Order.Status.CANCELLED)

    def test_item_from_another_order_is_rejected_and_nothing_changes(self):
        other_order = Order.objects.get(id=self.place_order().json()["id"])
        foreign_item = other_order.items.first()

        response = self.receive(self.order.id, [self.receipt(self.label_item, 10), self.receipt(foreign_item, 1)])

        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["code"], "validation_error")
        self.assertEqual(response.json()["error"], f"Item {foreign_item.id} does not belong to this order.")
        self.label_item.refresh_from_db()
        foreign_item.refresh_from_db()
        self.assertIsNone(self.label_item.quantity_received)
        self.assertIsNone(foreign_item.quantity_received)
        self.order.refresh_from_db()
        self.assertEqual(self.order.status, Order.Status.PENDING)
        self.assertFalse(AuditLog.objects.filter(action=AuditLog.Action.GOODS_RECEIVED).exists())

    def test_receiving_missing_order_returns_404(self):
        response = self.receive("00000000-0000-0000-0000-000000000000", [self.receipt(self.label_item, 1)])

        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.json()["code"], "not_found")

    def test_other_employee_cannot_receive(self):
        response = self.receive(self.order.id, [self.receipt(self.label_item, 10)], user=self.other_employee)

        self.assertEqual(response.status_code, 403)
        self.label_item.refresh_from_db()
        self.assertIsNone(self.label_item.quantity_received)

    def test_admin_can_receive_any_order(self):
        response = self.receive(self.order.id, [self.receipt(self.label_item, 10)], user=self.admin)

        self.assertEqual(response.status_code, 200)
        self.label_item.refresh_from_db()
        self.assertEqual(self.label_item.received_by, self.admin)

    def test_negative_quantity_and_empty_items_are_rejected(self):
        negative = self.receive(self.order.id, [self.receipt(self.label_item, -1)])
        empty = self.receive(self.order.id, [])

        self.assertEqual(negative.status_code, 400)
        self.assertEqual(empty.status_code, 400)

    def test_received_quantity_beyond_column_range_is_rejected(self):
        response = self.receive(self.order.id, [self.receipt(self.label_item, 10**20)])

        self.assertEqual(response.status_code, 400)
        self.assertIn("quantityReceived", response.json()["details"]["items"][0])
        self.label_item.refresh_from_db()
        self.assertIsNone(self.label_item.quantity_received)
        self.order.refresh_from_db()
        self.assertEqual(self.order.status, Order.Status.PENDING)
        self.assertFalse(AuditLog.objects.filter(action=AuditLog.Action.GOODS_RECEIVED).exists())

    def test_received_date_accepts_iso_timestamps(self):
        response = self.receive(self.order.id, [self.receipt(self.label_item, 2, "2026-10-19T08:30:00.000Z")])

        self.assertEqual(response.status_code, 200)
        self.label_item.refresh_from_db()
        self.assertEqual(str(self.label_item.received_date), "2026-10-19")


class OrderAccessTests(OrderApiTestCase):
    def setUp(self):
        super().setUp()
        self.own_order_id = self.place_order(user=self.employee).json()["id"]
        self.other_order_id = self.place_order(user=self.other_employee).json()["id"]

    def test_employee_lists_only_own_orders(self):
        self.client.force_authenticate(user=self.employee)
        response = self.client.get("/api/v1/orders/")

        self.assertEqual(response.status_code, 200)
        self.assertEqual([order["id"] for order in response.json()], [self.own_order_id])

    def test_admin_lists_all_orders_newest_first(self):
        self.client.force_authenticate(user=self.admin)
        response = self.client.get("/api/v1/orders/")

        self.assertEqual([order["id"] for order in response.json()], [self.other_order_id, self.own_order_id])

    def test_reading_another_employees_order_is_forbidden_and_logged(self):
        self.client.force_authenticate(user=self.employee)
        with self.assertLogs("security.authorization", level="WARNING") as logs:
            response = self.client.get(f"/api/v1/orders/{self.other_order_id}/")

        self.assertEqual(response.status_code, 403)
        self.assertEqual(response.json()["code"], "permission_denied")
        self.assertTrue(any("order_access_denied" in entry for entry in logs.output))

    def test_admin_reads_any_order(self):
        self.client.force_authenticate(user=self.admin)
        response = self.client.get(f"/api/v1/orders/{self.other_order_id}/")

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["employee"]["email"], "mark@example.com")

    def test_missing_order_returns_404(self):
        self.client.force_authenticate(user=self.employee)
        response = self.client.get("/api/v1/orders/00000000-0000-0000-0000-000000000000/")

        self.assertEqual(response.status_code, 404)

    def test_status_and_receivable_filters(self):
        Order.objects.filter(id=self.own_order_id).update(status=Order.Status.RECEIVED)
        self.client.force_authenticate(user=self.admin)

        received = self.client.get("/api/v1/orders/", {"status": "RECEIVED"})
        receivable = self.client.get("/api/v1/orders/", {"receivable": "true"})
        unknown = self.client.get("/api/v1/orders/", {"status": "SHIPPED"})

        self.assertEqual([order["id"] for order in received.json()], [self.own_order_id])
        self.assertEqual([order["id"] for order in receivable.json()], [self.other_order_id])
        self.assertEqual(unknown.status_code, 400)
        self.assertIn("status", unknown.json()["details"])

    def test_unauthenticated_list_is_rejected(self):
        self.client.force_authenticate(user=None)
        response = self.client.get("/api/v1/orders/")

        self.assertEqual(response.status_code, 401)


class ResendOrderEmailTests(OrderApiTestCase):
    def setUp(self):
        super().setUp()
        self.order_id = self.place_order().json()["id"]
        mail.outbox.clear()

    def test_owner_can_resend_email(self):
        self.client.force_authenticate(user=self.employee)
        response = self.client.post(f"/api/v1/orders/{self.order_id}/resend-email/")

        self.assertEqual(response.status_code, 200)
        self.assertTrue(response.json()["sent"])
        self.assertEqual(response.json()["order"]["id"], self.order_id)
        self.assertEqual(len(mail.outbox), 1)
        self.assertEqual(EmailLog.objects.filter(order_id=self.order_id).count(), 2)

    def test_other_employee_cannot_resend_email(self):
        self.client.force_authenticate(user=self.other_employee)
        response = self.client.post(f"/api/v1/orders/{self.order_id}/resend-email/")

        self.assertEqual(response.status_code, 403)
        self.assertEqual(len(mail.outbox), 0)

    def test_cancelled_order_email_is_not_resent(self):
        Order.objects.filter(id=self.order_id).update(status=Order.Status.CANCELLED)
        self.client.force_authenticate(user=self.employee)

        response = self.client.post(f"/api/v1/orders/{self.order_id}/resend-email/")

        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["code"], "conflict")
        self.assertEqual(len(mail.outbox), 0)


class DashboardTests(OrderApiTestCase):
    def test_dashboard_counts(self):
        self.place_order(user=self.employee)
        self.place_order(user=self.other_employee)

        self.client.force_authenticate(user=self.admin)
        admin_view = self.client.get("/api/v1/dashboard/").json()
        self.client.force_authenticate(user=self.employee)
        employee_view = self.client.get("/api/v1/dashboard/").json()

        self.assertEqual(
            admin_view,
            {"totalOrders": 2, "pendingOrders": 2, "totalProducts": 3, "totalSuppliers": 2},
        )
        self.assertEqual(employee_view["totalOrders"], 1)
