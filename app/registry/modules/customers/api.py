from __future__ import annotations

import logging

from flask import Blueprint, g, request
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.registry.db import db_session
from app.registry.modules.customers.middleware import json_payload, require_customer_fields
from app.registry.modules.customers.service import (
    CustomerValidationError,
    DuplicateEmailError,
    customer_stats,
    create_customer,
    find_customers,
    get_customer_by_email,
    get_customer_by_id,
    set_customer_active,
    update_customer,
)
from app.registry.modules.customers.utils import build_pagination
from app.registry.utils import api_error, api_ok, parse_bool_arg, parse_int_arg

bp = Blueprint("customers_api", __name__)
logger = logging.getLogger(__name__)

DEFAULT_PAGE_SIZE = 10
MAX_PAGE_SIZE = 100

MSG_NOT_FOUND = "Cliente não encontrado"
MSG_DUPLICATE_EMAIL = "Email já cadastrado"
MSG_INVALID = "Dados inválidos"
MSG_INTERNAL = "Erro interno do servidor"


def _storage_failure(s: Session, action: str, exc: SQLAlchemyError):
    s.rollback()
    logger.exception("Erro ao %s (request_id=%s)", action, getattr(g, "request_id", None))
    return api_error(MSG_INTERNAL, 500, exc=exc)


def _invalid(e: CustomerValidationError):
    return api_error(MSG_INVALID, 400, errors=[err.as_dict() for err in e.errors])


# Route order matters: the literal /clientes/estatisticas is registered
# ahead of the /clientes/<id> rules sharing its prefix.


@bp.get("/clientes")
def list_customers():
    s = db_session()
    page = parse_int_arg(request.args.get("page"), 1)
    limit = parse_int_arg(request.args.get("limit"), DEFAULT_PAGE_SIZE, maximum=MAX_PAGE_SIZE)
    nome = (request.args.get("nome") or "").strip() or None
    ativo = parse_bool_arg(request.args.get("ativo"))
    try:
        result = find_customers(s, page=page, page_size=limit, nome=nome, ativo=ativo)
    except SQLAlchemyError as e:
        return _storage_failure(s, "listar clientes", e)
    return api_ok(
        {
            "clientes": [c.to_dict() for c in result.items],
            "pagination": build_pagination(page=page, page_size=limit, total=result.total),
        }
    )


@bp.get("/clientes/estatisticas")
def customers_stats():
    s = db_session()
    try:
        stats = customer_stats(s)
    except SQLAlchemyError as e:
        return _storage_failure(s, "obter estatísticas", e)
    return api_ok(stats)


@bp.get("/clientes/<int:customer_id>")
def get_customer(customer_id: int):
    s = db_session()
    try:
        c = get_customer_by_id(s, customer_id)
    except SQLAlchemyError as e:
        return _storage_failure(s, "buscar cliente", e)
    if not c:
        return api_error(MSG_NOT_FOUND, 404)
    return api_ok(c.to_dict())


@bp.post("/clientes")
@require_customer_fields
def create_customer_view():
    s = db_session()
    payload = json_payload()
    try:
        email = str(payload.get("email") or "").strip()
        if get_customer_by_email(s, email) is not None:
            return api_error(MSG_DUPLICATE_EMAIL, 400)
        c = create_customer(s, payload)
        s.commit()
    except CustomerValidationError as e:
        s.rollback()
        return _invalid(e)
    except DuplicateEmailError:
        s.rollback()
        return api_error(MSG_DUPLICATE_EMAIL, 400)
    except SQLAlchemyError as e:
        return _storage_failure(s, "criar cliente", e)
    return api_ok(c.to_dict(), message="Cliente criado com sucesso", status=201)


@bp.put("/clientes/<int:customer_id>")
def update_customer_view(customer_id: int):
    s = db_session()
    payload = json_payload()
    try:
        c = get_customer_by_id(s, customer_id)
        if not c:
            return api_error(MSG_NOT_FOUND, 404)

        new_email = str(payload.get("email") or "").strip()
        if new_email and new_email != c.email:
            other = get_customer_by_email(s, new_email)
            if other is not None and other.id != c.id:
                return api_error(MSG_DUPLICATE_EMAIL, 400)

        c = update_customer(s, c, payload)
        s.commit()
    except CustomerValidationError as e:
        s.rollback()
        return _invalid(e)
    except DuplicateEmailError:
        s.rollback()
        return api_error(MSG_DUPLICATE_EMAIL, 400)
    except SQLAlchemyError as e:
        return _storage_failure(s, "atualizar cliente", e)
    return api_ok(c.to_dict(), message="Cliente atualizado com sucesso")


@bp.delete("/clientes/<int:customer_id>")
def delete_customer(customer_id: int):
    s = db_session()
    try:
        c = get_customer_by_id(s, customer_id)
        if not c:
            return api_error(MSG_NOT_FOUND, 404)
        set_customer_active(s, c, False)
        s.commit()
    except SQLAlchemyError as e:
        return _storage_failure(s, "excluir cliente", e)
    return api_ok(message="Cliente excluído com sucesso")


@bp.patch("/clientes/<int:customer_id>/restaurar")
def restore_customer(customer_id: int):
    s = db_session()
    try:
        c = get_customer_by_id(s, customer_id)
        if not c:
            return api_error(MSG_NOT_FOUND, 404)
        set_customer_active(s, c, True)
        s.commit()
    except SQLAlchemyError as e:
        return _storage_failure(s, "restaurar cliente", e)
    return api_ok(c.to_dict(), message="Cliente restaurado com sucesso")
