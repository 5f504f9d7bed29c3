import logging

from django.conf import settings
from django.db import transaction
from django.utils import timezone
from rest_framework.exceptions import ValidationError

from catalog.models import Product, Supplier
from common.audit import create_audit_log
from common.exceptions import ConflictError
from core.models import AuditLog
from orders.models import Order, OrderItem, OrderNumberSequence

logger = logging.getLogger(__name__)

RECEIVABLE_STATUSES = (Order.Status.PENDING, Order.Status.PARTIALLY_RECEIVED)


def format_order_number(value, *, prefix, width):
    return f"{prefix}{value:0{width}d}"


def parse_order_number(order_number, *, prefix):
    """Return the numeric suffix of ``order_number`` or None when it is not one of ours."""
    if not order_number or not str(order_number).startswith(prefix):
        return None
    suffix = str(order_number)[len(prefix):]
    if not suffix or not (suffix.isascii() and suffix.isdigit()):
        return None
    return int(suffix)


def next_order_number(existing_numbers, *, prefix, width):
    serials = [parse_order_number(number, prefix=prefix) for number in existing_numbers]
    highest = max([serial for serial in serials if serial is not None] + [0])
    return format_order_number(highest + 1, prefix=prefix, width=width)


def allocate_order_number(*, prefix=None, width=None):
    """
    Hand out the next order number for ``prefix``.

    Must be called inside the transaction that creates the order: the sequence
    row stays locked until that transaction ends and a rollback returns the
    number to the pool.
    """
    if not transaction.get_connection().in_atomic_block:
        raise RuntimeError("allocate_order_number() must run inside transaction.atomic().")

    prefix = settings.ORDER_NUMBER_PREFIX if prefix is None else prefix
    width = settings.ORDER_NUMBER_WIDTH if width is None else width

    sequence, created = OrderNumberSequence.objects.select_for_update().get_or_create(prefix=prefix)
    if created:
        existing = Order.objects.filter(order_number__startswith=prefix).values_list("order_number", flat=True)
        seeded = next_order_number(existing, prefix=prefix, width=width)
        sequence.last_value = parse_order_number(seeded, prefix=prefix) - 1

    sequence.last_value += 1
    sequence.save(update_fields=["last_value", "updated_at"])
    return format_order_number(sequence.last_value, prefix=prefix, width=width)


def derive_order_status(items):
    items = list(items)
    if all(item.quantity_received is not None and item.quantity_received >= item.quantity for item in items):
        return Order.Status.RECEIVED
    if any((item.quantity_received or 0) > 0 for item in items):
        return Order.Status.PARTIALLY_RECEIVED
    return Order.Status.PENDING


def place_order(*, employee, supplier_id, items, notes=None, request_id=None):
    supplier = Supplier.objects.filter(id=supplier_id, is_active=True).first()
    if supplier is None:
        raise ValidationError("Supplier not found or inactive.")

    product_ids = {item["product_id"] for item in items}
    matched = Product.objects.filter(id__in=product_ids, supplier=supplier, is_active=True).count()
    if matched != len(product_ids):
        raise ValidationError("One or more products are invalid, inactive, or do not belong to the selected supplier.")

    with transaction.atomic():
        order = Order.objects.create(
            order_number=allocate_order_number(),
            employee=employee,
            supplier=supplier,
            status=Order.Status.PENDING,
            notes=notes or None,
        )
        OrderItem.objects.bulk_create(
            [
                OrderItem(order=order, product_id=item["product_id"], quantity=item["quantity"], unit=item["unit"])
                for item in items
            ]
        )
        create_audit_log(
            user=employee,
            action=AuditLog.Action.ORDER_PLACED,
            entity_type="Order",
            entity_id=order.id,
            details=f"Order {order.order_number} placed with {supplier.name} ({len(items)} items)",
            request_id=request_id,
        )

    logger.info(
        "order_placed",
        extra={"order_id": order.id, "order_number": order.order_number, "request_id": request_id},
    )
    return order


def send_order_notification(order, *, dispatcher, sent_by, request_id=None):
    """Send the supplier email for ``order``; a failed send never undoes the order."""
    result = dispatcher.send_order_email(order, sent_by=sent_by)
    if not result["sent"]:
        logger.warning(
            "order_notification_not_sent",
            extra={"order_id": order.id, "email_log_id": result["email_log_id"], "request_id": request_id},
        )
        return result

    now = timezone.now()
    with transaction.atomic():
        Order.objects.filter(pk=order.pk).update(email_sent_at=now, updated_at=now)
        create_audit_log(
            user=sent_by,
            action=AuditLog.Action.ORDER_EMAIL_SENT,
            entity_type="Order",
            entity_id=order.id,
            details=f"Order email for {order.order_number} sent to {order.supplier.email}",
            request_id=request_id,
        )
    order.email_sent_at = now
    return result


def _ensure_receivable(order):
    if order.status == Order.Status.CANCELLED:
        raise ConflictError("Cannot receive goods for a cancelled order.")
    if order.status == Order.Status.RECEIVED:
        raise ConflictError("Order is already fully received.")


def receive_goods(*, order, items, user, notes=None, request_id=None):
    _ensure_receivable(order)

    order_item_ids = set(order.items.values_list("id", flat=True))
    for item in items:
        if item["order_item_id"] not in order_item_ids:
            raise ValidationError(f"Item {item['order_item_id']} does not belong to this order.")

    with transaction.atomic():
        locked = Order.objects.select_for_update().get(pk=order.pk)
        _ensure_receivable(locked)

        for item in items:
            if item["quantity_received"] <= 0:
                continue
            OrderItem.objects.filter(pk=item["order_item_id"], order=locked).update(
                quantity_received=item["quantity_received"],
                received_date=item["received_date"],
                received_by=user,
            )

        previous_status = locked.status
        locked.status = derive_order_status(locked.items.all())
        locked.save(update_fields=["status", "updated_at"])
        create_audit_log(
            user=user,
            action=AuditLog.Action.GOODS_RECEIVED,
            entity_type="Order",
            entity_id=locked.id,
            details=notes or None,
            request_id=request_id,
        )

    logger.info(
        "goods_received",
        extra={
            "order_id": locked.id,
            "order_number": locked.order_number,
            "status": locked.status,
            "previous_status": previous_status,
            "request_id": request_id,
        },
    )
    return locked
