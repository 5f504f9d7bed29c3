from django.db import transaction

from core.models import AuditLog


def get_request_id(request):
    return getattr(request, "request_id", None) or request.headers.get("X-Request-ID")


def create_audit_log(
    *,
    user=None,
    action,
    entity_type,
    entity_id=None,
    details=None,
    request_id=None,
):
    """Append one audit entry.

    Call this inside the same ``transaction.atomic()`` block as the change it
    records so both commit or roll back together.
    """
    return AuditLog.objects.create(
        user=user if user is not None and user.is_authenticated else None,
        action=action,
        entity_type=entity_type,
        entity_id=entity_id,
        details=details or None,
        request_id=request_id,
    )


def create_audit_log_from_request(
    request,
    *,
    action,
    entity_type,
    entity_id=None,
    details=None,
):
    return create_audit_log(
        user=getattr(request, "user", None),
        action=action,
        entity_type=entity_type,
        entity_id=entity_id,
        details=details,
        request_id=get_request_id(request),
    )


class AuditedMutationMixin:
    """Writes CREATE/UPDATE audit entries for admin master-data viewsets."""

    audit_entity = None

    def _audit(self, *, action, instance, details=None):
        create_audit_log_from_request(
            self.request,
            action=action,
            entity_type=self.audit_entity,
            entity_id=instance.id,
            details=details,
        )

    def perform_create(self, serializer):
        with transaction.atomic():
            instance = serializer.save()
            self._audit(action=AuditLog.Action.CREATE, instance=instance, details=_describe(instance))

    def perform_update(self, serializer):
        changed = sorted(serializer.validated_data.keys())
        with transaction.atomic():
            instance = serializer.save()
            self._audit(action=AuditLog.Action.UPDATE, instance=instance, details=f"fields: {', '.join(changed)}" if changed else None)


def _describe(instance):
    label = getattr(instance, "name", None) or getattr(instance, "email", None)
    return str(label) if label else None
