"""
Create the schema (when not using alembic) and seed sample customers.

Usage:
  python scripts/init_db.py            # create missing tables + seed (idempotent)
  python scripts/init_db.py --reset    # drop and recreate clientes, then seed
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from dotenv import load_dotenv
from sqlalchemy.orm import Session

# Ensure repo root is on sys.path when running as a script (Windows-friendly).
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from app.registry.models import Base
from app.registry.modules.customers.models import Customer
from app.registry.modules.customers.service import create_customer, customer_stats, get_customer_by_email
from scripts._db_utils import create_script_engine, resolve_database_url, script_session


SAMPLE_CUSTOMERS: list[dict] = [
    {
        "nome": "João Silva",
        "email": "joao.silva@email.com",
        "telefone": "11999999999",
        "endereco": "Rua das Flores, 123",
        "cidade": "São Paulo",
        "estado": "SP",
        "cep": "01234567",
        "dataNascimento": "1990-05-15",
        "ativo": True,
    },
    {
        "nome": "Maria Santos",
        "email": "maria.santos@email.com",
        "telefone": "11888888888",
        "endereco": "Avenida Paulista, 1000",
        "cidade": "São Paulo",
        "estado": "SP",
        "cep": "01310100",
        "dataNascimento": "1985-08-22",
        "ativo": True,
    },
    {
        "nome": "Pedro Oliveira",
        "email": "pedro.oliveira@email.com",
        "telefone": "11777777777",
        "endereco": "Rua Augusta, 456",
        "cidade": "São Paulo",
        "estado": "SP",
        "cep": "01305000",
        "dataNascimento": "1992-12-03",
        "ativo": True,
    },
    {
        "nome": "Ana Costa",
        "email": "ana.costa@email.com",
        "telefone": "11666666666",
        "endereco": "Rua Oscar Freire, 789",
        "cidade": "São Paulo",
        "estado": "SP",
        "cep": "01426001",
        "dataNascimento": "1988-03-18",
        "ativo": True,
    },
    {
        "nome": "Carlos Ferreira",
        "email": "carlos.ferreira@email.com",
        "telefone": "11555555555",
        "endereco": "Rua Haddock Lobo, 321",
        "cidade": "São Paulo",
        "estado": "SP",
        "cep": "01414000",
        "dataNascimento": "1995-07-10",
        "ativo": False,
    },
]


def create_schema(db_url: str, *, reset: bool = False) -> None:
    engine = create_script_engine(db_url)
    try:
        if reset:
            Customer.__table__.drop(bind=engine, checkfirst=True)
        Base.metadata.create_all(bind=engine)
    finally:
        engine.dispose()


def seed_customers(s: Session) -> int:
    """Insert sample customers that are not there yet (matched by email). Returns how many were created."""
    created = 0
    for payload in SAMPLE_CUSTOMERS:
        if get_customer_by_email(s, payload["email"]) is not None:
            continue
        create_customer(s, payload)
        created += 1
        print(f"Cliente \"{payload['nome']}\" criado", flush=True)
    return created


def seed_only(*, database_url: str | None = None) -> None:
    db_url = resolve_database_url(database_url)
    with script_session(db_url) as s:
        created = seed_customers(s)
        s.flush()
        stats = customer_stats(s)
    print(f"Seed complete: {created} clientes criados.", flush=True)
    print(f"  Total de clientes: {stats['total']}", flush=True)
    print(f"  Clientes ativos: {stats['ativos']}", flush=True)
    print(f"  Clientes inativos: {stats['inativos']}", flush=True)


def main() -> None:
    load_dotenv()
    parser = argparse.ArgumentParser(description="Create tables and seed sample customers.")
    parser.add_argument("--database-url", default=None, help="Overrides DATABASE_URL.")
    parser.add_argument("--reset", action="store_true", help="Drop and recreate the clientes table first.")
    args = parser.parse_args()

    db_url = resolve_database_url(args.database_url)
    create_schema(db_url, reset=args.reset)
    seed_only(database_url=db_url)


if __name__ == "__main__":
    main()
