from smtplib import SMTPException

from django.apps import apps
from django.contrib.auth import get_user_model
from django.core import mail
from django.test import TestCase, override_settings
from rest_framework.test import APIClient

from catalog.models import Product, Supplier
from notifications.dispatcher import OrderEmailDispatcher
from notifications.models import EmailLog
from orders.models import OrderItem
from orders.services import place_order


class BrokenConnection:
    def __init__(self, **kwargs):
        pass

    def send_messages(self, messages):
        raise SMTPException("relay down")


class NotificationTestCase(TestCase):
    def setUp(self):
        self.client = APIClient()
        self.user_model = get_user_model()
        self.employee = self.user_model.objects.create_user(
            username="jane@example.com",
            email="jane@example.com",
            first_name="Jane",
            last_name="Smith",
        )
        self.supplier = Supplier.objects.create(
            name="PackRight B.V.",
            email="orders@packright.nl",
            cc_emails=["sales@packright.nl", "ORDERS@packright.nl"],
            article_group=Supplier.ArticleGroup.PACKAGING,
        )
        self.box = Product.objects.create(name="Cardboard Box 40x30x20", article_code="PKG-001", supplier=self.supplier)
        self.pallet = Product.objects.create(name="Euro Pallet", article_code="PLT-001", supplier=self.supplier)

    def make_order(self, notes=None, employee=None):
        return place_order(
            employee=employee or self.employee,
            supplier_id=self.supplier.id,
            notes=notes,
            items=[
                {"product_id": self.box.id, "quantity": 10, "unit": OrderItem.Unit.BOX},
                {"product_id": self.pallet.id, "quantity": 2, "unit": OrderItem.Unit.PALLET},
            ],
        )


class OrderEmailDispatcherTests(NotificationTestCase):
    def setUp(self):
        super().setUp()
        self.order = self.make_order(notes="Deliver before <b>Friday</b>")

    def dispatcher(self, **kwargs):
        kwargs.setdefault("from_email", '"Packaging Orders" <orders@example.com>')
        return OrderEmailDispatcher(**kwargs)

    def test_app_config_builds_dispatcher_from_settings(self):
        dispatcher = apps.get_app_config("notifications").dispatcher

        self.assertIsInstance(dispatcher, OrderEmailDispatcher)

    def test_message_goes_to_supplier_with_cc_and_without_duplicates(self):
        result = self.dispatcher().send_order_email(self.order, sent_by=self.employee)

        self.assertTrue(result["sent"])
        self.assertIsNone(result["error"])
        message = mail.outbox[0]
        self.assertEqual(message.from_email, '"Packaging Orders" <orders@example.com>')
        self.assertEqual(message.to, ["orders@packright.nl"])
        self.assertEqual(message.cc, ["sales@packright.nl", "jane@example.com"])
        self.assertEqual(message.subject, f"New Order {self.order.order_number} - PackRight B.V.")
        self.assertIn("Dear PackRight B.V.", message.body)
        self.assertIn("Jane Smith", message.body)
        self.assertIn("Pallet(s)", message.body)

        log = EmailLog.objects.get(id=result["email_log_id"])
        self.assertEqual(log.status, EmailLog.Status.SENT)
        self.assertEqual(log.recipient, "orders@packright.nl")
        self.assertEqual(log.cc, ["sales@packright.nl", "jane@example.com"])
        self.assertEqual(log.provider, "locmem")
        self.assertEqual(log.order, self.order)

    def test_html_body_escapes_notes(self):
        self.dispatcher().send_order_email(self.order, sent_by=self.employee)

        html, mimetype = mail.outbox[0].alternatives[0]
        self.assertEqual(mimetype, "text/html")
        self.assertIn("Deliver before &lt;b&gt;Friday&lt;/b&gt;", html)
        self.assertIn("PKG-001", html)
        self.assertIn("Box(es)", html)

    def test_redirect_sends_to_test_address_only(self):
        result = self.dispatcher(redirect_to="qa@example.com").send_order_email(self.order, sent_by=self.employee)

        self.assertTrue(result["sent"])
        message = mail.outbox[0]
        self.assertEqual(message.to, ["qa@example.com"])
        self.assertEqual(message.cc, [])
        self.assertTrue(message.subject.startswith("[TEST] New Order "))
        log = EmailLog.objects.get(id=result["email_log_id"])
        self.assertEqual(log.recipient, "qa@example.com")
        self.assertEqual(log.cc, [])

    def test_preview_url_is_built_from_message_id(self):
        dispatcher = self.dispatcher(preview_url_template="https://mail.example.test/message/{message_id}")

        result = dispatcher.send_order_email(self.order, sent_by=self.employee)

        message_id = mail.outbox[0].extra_headers["Message-ID"].strip("<>")
        self.assertEqual(result["preview_url"], f"https://mail.example.test/message/{message_id}")
        self.assertEqual(EmailLog.objects.get(id=result["email_log_id"]).preview_url, result["preview_url"])

    def test_failed_send_is_logged_and_never_raises(self):
        dispatcher = self.dispatcher(connection_factory=BrokenConnection)

        with self.assertLogs("notifications.dispatcher", level="ERROR") as logs:
            result = dispatcher.send_order_email(self.order, sent_by=self.employee)

        self.assertFalse(result["sent"])
        self.assertEqual(result["error"], "relay down")
        self.assertIsNone(result["preview_url"])
        self.assertTrue(any("order_email_send_failed" in entry for entry in logs.output))
        log = EmailLog.objects.get(id=result["email_log_id"])
        self.assertEqual(log.status, EmailLog.Status.FAILED)
        self.assertEqual(log.error_message, "relay down")
        self.assertEqual(len(mail.outbox), 0)

    def test_explicit_provider_wins(self):
        result = self.dispatcher(provider="resend").send_order_email(self.order)

        log = EmailLog.objects.get(id=result["email_log_id"])
        self.assertEqual(log.provider, "resend")
        self.assertIsNone(log.sent_by)

    @override_settings(ORDER_EMAIL_FROM="orders@packaging.test", ORDER_EMAIL_REDIRECT_TO="demo@packaging.test")
    def test_from_settings_reads_routing_settings(self):
        dispatcher = OrderEmailDispatcher.from_settings()

        self.assertEqual(dispatcher.from_email, "orders@packaging.test")
        self.assertEqual(dispatcher.redirect_to, "demo@packaging.test")


class EmailLogApiTests(NotificationTestCase):
    def setUp(self):
        super().setUp()
        self.other_employee = self.user_model.objects.create_user(username="mark@example.com", email="mark@example.com")
        self.admin = self.user_model.objects.create_user(
            username="admin@example.com",
            email="admin@example.com",
            role=self.user_model.Role.ADMIN,
        )
        self.own_order = self.make_order()
        self.other_order = self.make_order(employee=self.other_employee)

        dispatcher = OrderEmailDispatcher(from_email="orders@example.com")
        self.own_log_id = dispatcher.send_order_email(self.own_order, sent_by=self.employee)["email_log_id"]
        self.other_log_id = dispatcher.send_order_email(self.other_order, sent_by=self.other_employee)["email_log_id"]

    def test_employee_sees_only_emails_they_sent(self):
        self.client.force_authenticate(user=self.employee)

        response = self.client.get("/api/v1/emails/")

        self.assertEqual(response.status_code, 200)
        payload = response.json()
        self.assertEqual([item["id"] for item in payload], [str(self.own_log_id)])
        self.assertEqual(payload[0]["order"], {"orderNumber": self.own_order.order_number})
        self.assertEqual(payload[0]["sentBy"], {"firstName": "Jane", "lastName": "Smith"})
        self.assertEqual(payload[0]["toAddress"], "orders@packright.nl")

    def test_admin_sees_all_and_filters_by_order(self):
        self.client.force_authenticate(user=self.admin)

        everything = self.client.get("/api/v1/emails/")
        filtered = self.client.get("/api/v1/emails/", {"orderId": str(self.other_order.id), "type": "ORDER"})

        self.assertEqual({item["id"] for item in everything.json()}, {str(self.own_log_id), str(self.other_log_id)})
        self.assertEqual([item["id"] for item in filtered.json()], [str(self.other_log_id)])

    def test_unknown_type_is_rejected(self):
        self.client.force_authenticate(user=self.admin)

        response = self.client.get("/api/v1/emails/", {"type": "NEWSLETTER"})

        self.assertEqual(response.status_code, 400)
        self.assertIn("type", response.json()["details"])

    def test_employee_cannot_read_someone_elses_email(self):
        self.client.force_authenticate(user=self.employee)

        response = self.client.get(f"/api/v1/emails/{self.other_log_id}/")

        self.assertEqual(response.status_code, 404)
