from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import Any

from flask import Blueprint, current_app, render_template, request
from sqlalchemy.exc import SQLAlchemyError
from werkzeug.datastructures import MultiDict

from app.registry.db import db_session
from app.registry.modules.customers.service import customer_stats, find_customers
from app.registry.modules.customers.utils import total_pages_for
from app.registry.utils import parse_bool_arg, parse_int_arg

bp = Blueprint("customers_frontend", __name__)
logger = logging.getLogger(__name__)

PAGE_SIZE = 10


@dataclass(frozen=True)
class ListState:
    """Pagination and filter state for the registry page (lives in the query string)."""

    page: int = 1
    page_size: int = PAGE_SIZE
    nome: str = ""
    ativo: str = ""  # "", "true" or "false"
    total_pages: int = 0

    @classmethod
    def from_args(cls, args: MultiDict) -> "ListState":
        ativo = (args.get("ativo") or "").strip().lower()
        return cls(
            page=parse_int_arg(args.get("page"), 1),
            nome=(args.get("nome") or "").strip(),
            ativo=ativo if ativo in ("true", "false") else "",
        )

    @property
    def ativo_filter(self) -> bool | None:
        return parse_bool_arg(self.ativo)

    @property
    def has_prev(self) -> bool:
        return self.page > 1

    @property
    def has_next(self) -> bool:
        return self.page < self.total_pages

    def with_total(self, total: int) -> "ListState":
        return replace(self, total_pages=total_pages_for(total, self.page_size))

    def with_page(self, page: int) -> "ListState":
        return replace(self, page=max(1, page))

    def query_params(self) -> dict[str, Any]:
        """Args for url_for(); filters are dropped when empty so URLs stay clean."""
        params: dict[str, Any] = {"page": self.page}
        if self.nome:
            params["nome"] = self.nome
        if self.ativo:
            params["ativo"] = self.ativo
        return params


def render_registry(state: ListState):
    s = db_session()
    customers: list = []
    stats = {"total": 0, "ativos": 0, "inativos": 0}
    load_error = None
    try:
        result = find_customers(
            s,
            page=state.page,
            page_size=state.page_size,
            nome=state.nome or None,
            ativo=state.ativo_filter,
        )
        customers = result.items
        state = state.with_total(result.total)
        stats = customer_stats(s)
    except SQLAlchemyError:
        s.rollback()
        logger.exception("Erro ao carregar clientes para a página")
        load_error = "Erro ao carregar clientes"

    return render_template(
        "clientes/index.html",
        state=state,
        customers=customers,
        stats=stats,
        load_error=load_error,
        api_base=current_app.config["API_PREFIX"],
    )


@bp.get("/")
def index():
    return render_registry(ListState.from_args(request.args))
