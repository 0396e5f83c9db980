"""create clientes table

Revision ID: 5e1c0a7b9d21
Revises:
Create Date: 2026-10-19

"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy import inspect


# revision identifiers, used by Alembic.
revision: str = "5e1c0a7b9d21"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    bind = op.get_bind()
    insp = inspect(bind)
    existing_tables = set(insp.get_table_names())

    # Tolerate databases bootstrapped with create_all (AUTO_CREATE_TABLES).
    if "clientes" in existing_tables:
        return

    op.create_table(
        "clientes",
        sa.Column("id", sa.Integer(), primary_key=True, nullable=False),
        sa.Column("nome", sa.String(length=100), nullable=False),
        sa.Column("email", sa.String(length=150), nullable=False),
        sa.Column("telefone", sa.String(length=20), nullable=False),
        sa.Column("endereco", sa.String(length=200), nullable=True),
        sa.Column("cidade", sa.String(length=100), nullable=True),
        sa.Column("estado", sa.String(length=2), nullable=True),
        sa.Column("cep", sa.String(length=10), nullable=True),
        sa.Column("data_nascimento", sa.Date(), nullable=True),
        sa.Column("ativo", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=False),
            nullable=False,
            server_default=sa.func.current_timestamp(),
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=False),
            nullable=False,
            server_default=sa.func.current_timestamp(),
        ),
        sa.UniqueConstraint("email", name="uq_clientes_email"),
    )
    op.create_index("idx_clientes_nome", "clientes", ["nome"])
    op.create_index("idx_clientes_ativo", "clientes", ["ativo"])


def downgrade() -> None:
    op.drop_index("idx_clientes_ativo", table_name="clientes")
    op.drop_index("idx_clientes_nome", table_name="clientes")
    op.drop_table("clientes")
