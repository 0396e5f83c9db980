from collections.abc import Callable
from functools import wraps
from typing import Any

from flask import request

from app.registry.modules.customers.utils import is_basic_email
from app.registry.utils import api_error


def json_payload() -> dict[str, Any]:
    """Request body as a dict; anything that is not a JSON object counts as empty."""
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else {}


def require_customer_fields(fn: Callable[..., Any]) -> Callable[..., Any]:
    """Reject create requests missing nome/email/telefone or with a malformed email."""

    @wraps(fn)
    def wrapped(*args: Any, **kwargs: Any):
        payload = json_payload()
        nome, email, telefone = (str(payload.get(k) or "").strip() for k in ("nome", "email", "telefone"))
        if not nome or not email or not telefone:
            return api_error("Nome, email e telefone são obrigatórios", 400)
        if not is_basic_email(email):
            return api_error("Formato de email inválido", 400)
        return fn(*args, **kwargs)

    return wrapped
