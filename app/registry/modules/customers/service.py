"""
Customer persistence gateway.

All reads and writes against the ``clientes`` table go through this module.
Validation is explicit (``validate_customer_payload``) and runs before any
write; the unique constraint on ``email`` is the storage-level backstop and
surfaces as ``DuplicateEmailError``.

Writes flush but never commit or roll back: the caller owns the transaction
and must roll back when one of these functions raises.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, datetime
from typing import Any

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.registry.modules.customers.models import Customer
from app.registry.modules.customers.utils import escape_like, is_valid_email
from app.registry.utils import utcnow

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ValidationError:
    field: str
    message: str

    def as_dict(self) -> dict[str, str]:
        return {"field": self.field, "message": self.message}


class CustomerValidationError(Exception):
    def __init__(self, errors: list[ValidationError]):
        super().__init__("; ".join(f"{e.field}: {e.message}" for e in errors))
        self.errors = errors


class DuplicateEmailError(Exception):
    pass


@dataclass(frozen=True)
class CustomerPage:
    items: list[Customer]
    total: int


# JSON key -> model attribute. Anything else in a payload is ignored
# (id and timestamps are system-managed).
PAYLOAD_FIELDS: dict[str, str] = {
    "nome": "nome",
    "email": "email",
    "telefone": "telefone",
    "endereco": "endereco",
    "cidade": "cidade",
    "estado": "estado",
    "cep": "cep",
    "dataNascimento": "data_nascimento",
    "data_nascimento": "data_nascimento",
    "ativo": "ativo",
}

REQUIRED_FIELDS = ("nome", "email", "telefone")

# Signed 64-bit range of the integer primary key.
MIN_DB_INT = -(2**63)
MAX_DB_INT = 2**63 - 1


def _text(value: Any) -> str | None:
    if value is None:
        return None
    return str(value).strip()


def _coerce_date(value: Any) -> date | None:
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    raw = str(value).strip()
    if not raw:
        return None
    # Browsers and JS clients sometimes send a full ISO timestamp.
    return date.fromisoformat(raw.split("T", 1)[0])


def _coerce_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str) and value.strip().lower() in ("true", "false"):
        return value.strip().lower() == "true"
    raise ValueError(f"not a boolean: {value!r}")


def _length_rule(field: str, value: str | None, lo: int, hi: int, message: str) -> ValidationError | None:
    if value is None or value == "":
        return None
    if not (lo <= len(value) <= hi):
        return ValidationError(field, message)
    return None


def validate_customer_payload(payload: dict[str, Any], *, partial: bool = False) -> list[ValidationError]:
    """
    Check a create (partial=False) or update (partial=True) payload.

    Returns one ValidationError per offending field; the first failing rule
    for a field wins. With partial=True only keys present in the payload are
    checked, so a patch touching ``nome`` never trips the ``email`` rules.
    """
    errs: list[ValidationError] = []

    def present(key: str) -> bool:
        return not partial or key in payload

    if present("nome"):
        nome = _text(payload.get("nome"))
        if not nome:
            errs.append(ValidationError("nome", "O nome é obrigatório"))
        elif not (2 <= len(nome) <= 100):
            errs.append(ValidationError("nome", "O nome deve ter entre 2 e 100 caracteres"))

    if present("email"):
        email = _text(payload.get("email"))
        if not email:
            errs.append(ValidationError("email", "O email é obrigatório"))
        elif not is_valid_email(email):
            errs.append(ValidationError("email", "Email deve ter um formato válido"))
        elif not (2 <= len(email) <= 150):
            errs.append(ValidationError("email", "O email deve ter entre 2 e 150 caracteres"))

    if present("telefone"):
        telefone = _text(payload.get("telefone"))
        if not telefone:
            errs.append(ValidationError("telefone", "O telefone é obrigatório"))
        elif not (10 <= len(telefone) <= 20):
            errs.append(ValidationError("telefone", "O telefone deve ter entre 10 e 20 caracteres"))

    optional_rules = (
        ("endereco", 0, 200, "O endereço deve ter no máximo 200 caracteres"),
        ("cidade", 0, 100, "A cidade deve ter no máximo 100 caracteres"),
        ("estado", 2, 2, "O estado deve ter exatamente 2 caracteres"),
        ("cep", 8, 10, "O CEP deve ter entre 8 e 10 caracteres"),
    )
    for key, lo, hi, message in optional_rules:
        if key in payload:
            err = _length_rule(key, _text(payload.get(key)), lo, hi, message)
            if err:
                errs.append(err)

    for key in ("dataNascimento", "data_nascimento"):
        if key in payload:
            try:
                _coerce_date(payload.get(key))
            except (TypeError, ValueError):
                errs.append(ValidationError("dataNascimento", "Data de nascimento deve ser uma data válida"))
            break

    if "ativo" in payload and payload.get("ativo") is not None:
        try:
            _coerce_bool(payload.get("ativo"))
        except ValueError:
            errs.append(ValidationError("ativo", "O campo ativo deve ser verdadeiro ou falso"))

    return errs


def clean_customer_payload(payload: dict[str, Any]) -> dict[str, Any]:
    """Map a validated payload onto model attribute values (blank optionals -> None)."""
    values: dict[str, Any] = {}
    for key, attr in PAYLOAD_FIELDS.items():
        if key not in payload or attr in values:
            continue
        raw = payload.get(key)
        if attr == "data_nascimento":
            values[attr] = _coerce_date(raw)
        elif attr == "ativo":
            if raw is not None:
                values[attr] = _coerce_bool(raw)
        elif attr in REQUIRED_FIELDS:
            values[attr] = _text(raw)
        else:
            values[attr] = _text(raw) or None
    return values


def _is_email_conflict(exc: IntegrityError) -> bool:
    return "email" in str(getattr(exc, "orig", exc)).lower()


def _flush_or_raise(s: Session) -> None:
    try:
        s.flush()
    except IntegrityError as e:
        if _is_email_conflict(e):
            raise DuplicateEmailError("Email já cadastrado") from e
        raise


def get_customer_by_id(s: Session, customer_id: int) -> Customer | None:
    # Ids past a BIGINT can't exist; drivers raise on binding them.
    if not (MIN_DB_INT <= customer_id <= MAX_DB_INT):
        return None
    return s.get(Customer, customer_id)


def get_customer_by_email(s: Session, email: str) -> Customer | None:
    return s.query(Customer).filter(Customer.email == email).one_or_none()


def find_customers(
    s: Session,
    *,
    page: int,
    page_size: int,
    nome: str | None = None,
    ativo: bool | None = None,
) -> CustomerPage:
    query = s.query(Customer)
    if nome:
        query = query.filter(Customer.nome.ilike(f"%{escape_like(nome)}%", escape="\\"))
    if ativo is not None:
        query = query.filter(Customer.ativo.is_(ativo))

    total = query.count()
    offset = (page - 1) * page_size
    if offset >= total:
        # Past the last page; also keeps huge offsets away from the driver.
        return CustomerPage(items=[], total=total)
    items = (
        query.order_by(Customer.nome.asc(), Customer.id.asc())
        .offset(offset)
        .limit(page_size)
        .all()
    )
    return CustomerPage(items=items, total=total)


def count_customers(s: Session, *, ativo: bool | None = None) -> int:
    query = s.query(Customer)
    if ativo is not None:
        query = query.filter(Customer.ativo.is_(ativo))
    return query.count()


def customer_stats(s: Session) -> dict[str, int]:
    return {
        "total": count_customers(s),
        "ativos": count_customers(s, ativo=True),
        "inativos": count_customers(s, ativo=False),
    }


def create_customer(s: Session, payload: dict[str, Any]) -> Customer:
    errs = validate_customer_payload(payload)
    if errs:
        raise CustomerValidationError(errs)

    values = clean_customer_payload(payload)
    values.setdefault("ativo", True)
    now = utcnow()
    c = Customer(created_at=now, updated_at=now, **values)
    s.add(c)
    _flush_or_raise(s)
    logger.info("customer created id=%s", c.id)
    return c


def update_customer(s: Session, c: Customer, payload: dict[str, Any]) -> Customer:
    """Apply a partial patch, flush, then reload the row from storage."""
    errs = validate_customer_payload(payload, partial=True)
    if errs:
        raise CustomerValidationError(errs)

    values = clean_customer_payload(payload)
    fields_changed = [attr for attr, v in values.items() if getattr(c, attr) != v]
    for attr, v in values.items():
        setattr(c, attr, v)
    c.updated_at = utcnow()
    _flush_or_raise(s)
    s.refresh(c)
    logger.info("customer updated id=%s fields_changed=%s", c.id, ",".join(fields_changed) or "-")
    return c


def set_customer_active(s: Session, c: Customer, active: bool) -> Customer:
    """Soft delete (active=False) or restore (active=True). No-op if already in that state."""
    if c.ativo != active:
        c.ativo = active
        c.updated_at = utcnow()
        _flush_or_raise(s)
        logger.info("customer id=%s ativo=%s", c.id, active)
    return c
