"""Request parsing and the success envelope shared by API views."""
import math
from flask import request
from storefront.errors import ValidationError


def ok(data=None, message=None, status=200, **extra):
    body = {"success": True, "data": data}
    if message:
        body["message"] = message
    body.update(extra)
    return body, status


def json_body():
    """The request's JSON object, or a ValidationError."""
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise ValidationError("Se esperaba un cuerpo JSON")
    return data


def bool_arg(name):
    """Tri-state query flag: True, False or None when absent."""
    value = request.args.get(name)
    if value is None or value == "":
        return None
    return value.lower() in ("1", "true", "yes", "si")


def float_arg(name):
    value = request.args.get(name)
    if value is None or value == "":
        return None
    try:
        number = float(value)
    except ValueError:
        raise ValidationError(f"{name} debe ser numérico")
    if not math.isfinite(number):
        raise ValidationError(f"{name} debe ser numérico")
    return number


def page_args(default_limit=20, max_limit=100):
    page = request.args.get("pagina", 1, type=int)
    limit = request.args.get("limite", default_limit, type=int)
    return max(page, 1), min(max(limit, 1), max_limit)


def pagination_meta(pagination):
    return {
        "total": pagination.total,
        "pagina": pagination.page,
        "limite": pagination.per_page,
        "total_paginas": pagination.pages,
    }
