"""Forms and the glue that binds them to JSON request bodies."""

from __future__ import annotations

from flask import jsonify, request
from werkzeug.datastructures import MultiDict
from wtforms import BooleanField
from wtforms.fields.core import UnboundField

from .management import (
    ApiForm,
    BudgetForm,
    ExpenseForm,
    HostelForm,
    HostelUpdateForm,
    LoginForm,
    MatchForm,
    MatchResultForm,
    RegistrationLinkForm,
    RevenueForm,
    TeamForm,
    TeamUpdateForm,
    UnlockForm,
    VolunteerForm,
)
from .registration import MOBILE_MESSAGE, PlayerForm, PlayerRegistrationForm


def _boolean_fields(form_class) -> set[str]:
    return {
        name
        for name in dir(form_class)
        if isinstance(getattr(form_class, name, None), UnboundField)
        and issubclass(getattr(form_class, name).field_class, BooleanField)
    }


def _flatten(payload: dict, boolean_fields: set[str] = frozenset()) -> MultiDict:
    # Nested objects (e.g. {"sports": {"cricket": true}}) are merged into the
    # top level; nulls are treated as absent. JSON booleans only reach
    # BooleanFields as-is, every other field sees them as text.
    flat = MultiDict()

    def put(key, value):
        if value is None or isinstance(value, list):
            return
        if isinstance(value, bool):
            flat[key] = value if key in boolean_fields else str(value).lower()
        else:
            flat[key] = str(value)

    for key, value in payload.items():
        if isinstance(value, dict):
            for inner_key, inner_value in value.items():
                put(inner_key, inner_value)
        else:
            put(key, value)
    return flat


def bind_form(form_class, **kwargs):
    """Instantiate ``form_class`` from a JSON body or, failing that, form data."""
    if request.is_json:
        payload = request.get_json(silent=True)
        formdata = _flatten(payload if isinstance(payload, dict) else {}, _boolean_fields(form_class))
        return form_class(formdata=formdata, **kwargs)
    return form_class(**kwargs)


def form_errors(form) -> dict:
    fields = {name: list(messages) for name, messages in form.errors.items() if name is not None}
    general = list(form.form_errors)
    first = general[0] if general else next((msgs[0] for msgs in fields.values() if msgs), "Invalid input")
    return {'error': first, 'fields': fields}


def form_error_response(form):
    return jsonify(form_errors(form)), 400


__all__ = [
    "ApiForm",
    "BudgetForm",
    "ExpenseForm",
    "HostelForm",
    "HostelUpdateForm",
    "LoginForm",
    "MOBILE_MESSAGE",
    "MatchForm",
    "MatchResultForm",
    "PlayerForm",
    "PlayerRegistrationForm",
    "RegistrationLinkForm",
    "RevenueForm",
    "TeamForm",
    "TeamUpdateForm",
    "UnlockForm",
    "VolunteerForm",
    "bind_form",
    "form_error_response",
    "form_errors",
]
