import logging
from email.utils import make_msgid, parseaddr
from urllib.parse import quote

from django.conf import settings
from django.core.mail import EmailMultiAlternatives, get_connection
from django.template.loader import render_to_string

from notifications.models import EmailLog
from orders.models import OrderItem

logger = logging.getLogger(__name__)

UNIT_EMAIL_LABELS = {
    OrderItem.Unit.PIECE: "Piece(s)",
    OrderItem.Unit.BOX: "Box(es)",
    OrderItem.Unit.PALLET: "Pallet(s)",
}

TEST_SUBJECT_PREFIX = "[TEST] "


class DownstreamNotificationError(Exception):
    """The mail backend did not deliver an order email."""


class OrderEmailDispatcher:
    """
    Composes order emails for suppliers, sends them through Django's mail
    backend and records every attempt as an ``EmailLog`` row.

    Built once by the notifications app config and handed to callers. The mail
    connection is opened per send so settings overrides apply immediately.
    """

    def __init__(self, *, from_email, provider="", preview_url_template="", redirect_to="", connection_factory=None):
        self.from_email = from_email
        self.provider = provider
        self.preview_url_template = preview_url_template
        self.redirect_to = redirect_to
        self.connection_factory = connection_factory

    @classmethod
    def from_settings(cls):
        return cls(
            from_email=settings.ORDER_EMAIL_FROM,
            provider=getattr(settings, "EMAIL_PROVIDER", ""),
            preview_url_template=getattr(settings, "EMAIL_PREVIEW_URL_TEMPLATE", ""),
            redirect_to=getattr(settings, "ORDER_EMAIL_REDIRECT_TO", ""),
        )

    def resolve_provider(self):
        if self.provider:
            return self.provider
        # "django.core.mail.backends.smtp.EmailBackend" -> "smtp"
        parts = settings.EMAIL_BACKEND.split(".")
        return parts[-2] if len(parts) >= 2 else settings.EMAIL_BACKEND

    def envelope(self, order):
        """Return ``(subject, to, cc)`` for ``order`` after test routing."""
        supplier = order.supplier
        subject = f"New Order {order.order_number} - {supplier.name}"
        if self.redirect_to:
            return f"{TEST_SUBJECT_PREFIX}{subject}", [self.redirect_to], []

        to = [supplier.email]
        cc = []
        for address in [*(supplier.cc_emails or []), order.employee.email]:
            address = (address or "").strip()
            if address and address.lower() not in {existing.lower() for existing in to + cc}:
                cc.append(address)
        return subject, to, cc

    def render_context(self, order):
        items = order.items.select_related("product").order_by("product__name")
        return {
            "order_number": order.order_number,
            "supplier_name": order.supplier.name,
            "employee_name": order.employee.full_name,
            "notes": order.notes,
            "lines": [
                {
                    "product_name": item.product.name,
                    "article_code": item.product.article_code,
                    "quantity": item.quantity,
                    "unit_label": UNIT_EMAIL_LABELS[item.unit],
                }
                for item in items
            ],
        }

    def build_message(self, order, connection=None):
        subject, to, cc = self.envelope(order)
        context = self.render_context(order)
        domain = parseaddr(self.from_email)[1].rpartition("@")[2] or "localhost"

        message = EmailMultiAlternatives(
            subject=subject,
            body=render_to_string("notifications/order_email.txt", context),
            from_email=self.from_email,
            to=to,
            cc=cc,
            headers={"Message-ID": make_msgid(domain=domain)},
            connection=connection,
        )
        message.attach_alternative(render_to_string("notifications/order_email.html", context), "text/html")
        return message

    def preview_url_for(self, message):
        if not self.preview_url_template:
            return None
        message_id = message.extra_headers["Message-ID"].strip("<>")
        return self.preview_url_template.format(message_id=quote(message_id, safe="@"))

    def send_order_email(self, order, *, sent_by=None):
        """
        Send the order email and log the attempt. Never raises.

        Returns ``{"sent", "email_log_id", "preview_url", "error"}``.
        """
        subject, to, cc = self.envelope(order)
        provider = self.resolve_provider()

        try:
            connection = (self.connection_factory or get_connection)(fail_silently=False)
            message = self.build_message(order, connection=connection)
            if message.send() != 1:
                raise DownstreamNotificationError("The mail backend did not accept the message.")
        except Exception as exc:
            logger.exception(
                "order_email_send_failed",
                extra={"order_id": order.id, "order_number": order.order_number, "recipient": to[0]},
            )
            log = self._record(
                order=order,
                sent_by=sent_by,
                subject=subject,
                recipient=to[0],
                cc=cc,
                provider=provider,
                status=EmailLog.Status.FAILED,
                error_message=str(exc) or exc.__class__.__name__,
            )
            return {
                "sent": False,
                "email_log_id": log.id if log else None,
                "preview_url": None,
                "error": str(exc) or exc.__class__.__name__,
            }

        preview_url = self.preview_url_for(message)
        log = self._record(
            order=order,
            sent_by=sent_by,
            subject=subject,
            recipient=to[0],
            cc=cc,
            provider=provider,
            status=EmailLog.Status.SENT,
            preview_url=preview_url,
        )
        logger.info(
            "order_email_sent",
            extra={
                "order_id": order.id,
                "order_number": order.order_number,
                "recipient": to[0],
                "email_log_id": log.id if log else None,
            },
        )
        return {"sent": True, "email_log_id": log.id if log else None, "preview_url": preview_url, "error": None}

    def _record(self, *, order, sent_by, subject, recipient, cc, provider, status, preview_url=None, error_message=None):
        try:
            return EmailLog.objects.create(
                type=EmailLog.Type.ORDER,
                subject=subject[:255],
                recipient=recipient,
                cc=cc,
                order=order,
                sent_by=sent_by if sent_by is not None and sent_by.is_authenticated else None,
                provider=provider[:32],
                preview_url=preview_url,
                status=status,
                error_message=error_message,
            )
        except Exception:
            logger.exception("order_email_log_failed", extra={"order_id": order.id, "recipient": recipient})
            return None
