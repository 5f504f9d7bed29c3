import logging

from rest_framework.exceptions import PermissionDenied
from rest_framework.permissions import BasePermission

from core.models import User

logger = logging.getLogger("security.authorization")

ROLE_CAPABILITY_MATRIX = {
    "dashboard.view": {User.Role.USER, User.Role.ADMIN},
    "catalog.view": {User.Role.USER, User.Role.ADMIN},
    "orders.view": {User.Role.USER, User.Role.ADMIN},
    "orders.place": {User.Role.USER, User.Role.ADMIN},
    "orders.receive": {User.Role.USER, User.Role.ADMIN},
    "emails.view": {User.Role.USER, User.Role.ADMIN},
    "catalog.manage": {User.Role.ADMIN},
    "employees.manage": {User.Role.ADMIN},
}


def get_user_roles(user):
    if not user or not user.is_authenticated:
        return set()
    return set(user.roles)


def user_is_admin(user):
    return User.Role.ADMIN in get_user_roles(user)


def user_has_capability(user, capability):
    if not user or not user.is_authenticated:
        return False
    allowed_roles = ROLE_CAPABILITY_MATRIX.get(capability)
    if not allowed_roles:
        return False
    return bool(get_user_roles(user) & allowed_roles)


def can_access_order(user, order):
    """Admins may access any order; everybody else only the orders they created."""
    if not user or not user.is_authenticated:
        return False
    if user_is_admin(user):
        return True
    return order.employee_id == user.id


def ensure_order_access(user, order):
    if can_access_order(user, order):
        return
    logger.warning(
        "order_access_denied user=%s order=%s",
        getattr(user, "username", "anonymous"),
        order.order_number,
        extra={"user_id": getattr(user, "id", None), "order_id": order.id, "order_number": order.order_number},
    )
    raise PermissionDenied("You do not have permission to access this order.")


def scope_orders_for_user(queryset, user):
    if not user or not user.is_authenticated:
        return queryset.none()
    if user_is_admin(user):
        return queryset
    return queryset.filter(employee_id=user.id)


class RoleCapabilityPermission(BasePermission):
    """Permission class that validates role capability by action/method and logs denied attempts."""

    message = "Insufficient permissions."

    def has_permission(self, request, view):
        capability_map = getattr(view, "permission_action_map", {})
        action_key = getattr(view, "action", None) or request.method.lower()
        capability = capability_map.get(action_key)
        if capability is None:
            return True

        allowed = user_has_capability(request.user, capability)
        if not allowed:
            logger.warning(
                "permission_denied capability=%s user=%s roles=%s method=%s path=%s view=%s action=%s",
                capability,
                getattr(request.user, "username", "anonymous"),
                ",".join(sorted(get_user_roles(request.user))),
                request.method,
                request.path,
                view.__class__.__name__,
                action_key,
                extra={"capability": capability},
            )
        return allowed
