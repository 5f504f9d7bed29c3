import uuid

from rest_framework.exceptions import ValidationError

TRUE_VALUES = {"1", "true", "yes", "on"}
FALSE_VALUES = {"0", "false", "no", "off"}


def uuid_query_param(request, name):
    value = request.query_params.get(name)
    if not value:
        return None
    try:
        return uuid.UUID(str(value))
    except ValueError:
        raise ValidationError({name: "Must be a valid UUID."})


def bool_query_param(request, name):
    value = request.query_params.get(name)
    if value is None or value == "":
        return None
    normalized = value.strip().lower()
    if normalized in TRUE_VALUES:
        return True
    if normalized in FALSE_VALUES:
        return False
    raise ValidationError({name: "Must be true or false."})


def choice_query_param(request, name, choices):
    value = request.query_params.get(name)
    if not value:
        return None
    if value not in choices:
        raise ValidationError({name: f"Unknown value '{value}'. Expected one of: {', '.join(choices)}."})
    return value
