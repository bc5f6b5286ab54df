"""initial_ledger_schema

Revision ID: 5b1f0c2e9a47
Revises:
Create Date: 2026-10-19 09:12:41.408213
"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '5b1f0c2e9a47'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _ledger_columns():
    return [
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("description", sa.String(), nullable=False),
        sa.Column("amount", sa.Numeric(12, 2), nullable=False),
        sa.Column("type", sa.String(), nullable=False, server_default="manual"),
        sa.Column(
            "product_id",
            sa.Integer(),
            sa.ForeignKey("products.id", ondelete="SET NULL"),
            nullable=True,
        ),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
    ]


def _ledger_indexes(table: str) -> None:
    op.create_index(f"ix_{table}_id", table, ["id"], unique=False)
    op.create_index(f"ix_{table}_type", table, ["type"], unique=False)
    op.create_index(f"ix_{table}_created_at", table, ["created_at"], unique=False)
    op.create_index(f"ix_{table}_product_id", table, ["product_id"], unique=False)


def upgrade() -> None:
    """Upgrade schema."""

    # USERS
    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("username", sa.String(), nullable=False),
        sa.Column("password_hash", sa.String(), nullable=False),
        sa.Column("role", sa.String(), nullable=False),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
        sa.CheckConstraint("role IN ('owner', 'staff')", name="ck_users_role_valid"),
        sa.CheckConstraint("length(username) >= 3", name="ck_users_username_length"),
    )
    op.create_index("ix_users_id", "users", ["id"], unique=False)
    op.create_index("ix_users_username", "users", ["username"], unique=True)
    op.create_index("ix_users_role", "users", ["role"], unique=False)

    # PRODUCTS
    op.create_table(
        "products",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("cost_price", sa.Numeric(10, 2), nullable=False),
        sa.Column("selling_price", sa.Numeric(10, 2), nullable=False),
        sa.Column("quantity", sa.Integer(), nullable=False, server_default="0"),
        sa.Column(
            "total_cost",
            sa.Numeric(14, 2),
            sa.Computed("cost_price * quantity", persisted=True),
        ),
        sa.Column(
            "total_revenue",
            sa.Numeric(14, 2),
            sa.Computed("selling_price * quantity", persisted=True),
        ),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
        sa.CheckConstraint("cost_price >= 0", name="ck_cost_price_non_negative"),
        sa.CheckConstraint("selling_price >= 0", name="ck_selling_price_non_negative"),
        sa.CheckConstraint("quantity >= 0", name="ck_quantity_non_negative"),
    )
    op.create_index("ix_products_id", "products", ["id"], unique=False)
    op.create_index("ix_products_name", "products", ["name"], unique=False)
    op.create_index("ix_products_created_at", "products", ["created_at"], unique=False)

    # EXPENSES
    op.create_table(
        "expenses",
        *_ledger_columns(),
        sa.Column("category", sa.String(), nullable=True),
        sa.CheckConstraint("amount > 0", name="ck_expenses_amount_positive"),
        sa.CheckConstraint("type IN ('manual', 'auto')", name="ck_expenses_type_valid"),
    )
    _ledger_indexes("expenses")
    op.create_index("ix_expenses_category", "expenses", ["category"], unique=False)

    # INCOME
    op.create_table(
        "income",
        *_ledger_columns(),
        sa.CheckConstraint("amount > 0", name="ck_income_amount_positive"),
        sa.CheckConstraint("type IN ('manual', 'auto')", name="ck_income_type_valid"),
    )
    _ledger_indexes("income")

    # PARTNERS
    op.create_table(
        "partners",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("share_percentage", sa.Numeric(5, 2), nullable=False, server_default="0"),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
        sa.CheckConstraint(
            "share_percentage >= 0 AND share_percentage <= 100",
            name="ck_partners_share_range",
        ),
    )
    op.create_index("ix_partners_id", "partners", ["id"], unique=False)
    op.create_index("ix_partners_name", "partners", ["name"], unique=False)
    op.create_index("ix_partners_created_at", "partners", ["created_at"], unique=False)


def downgrade() -> None:
    """Downgrade schema."""

    op.drop_table("partners")
    op.drop_table("income")
    op.drop_table("expenses")
    op.drop_table("products")
    op.drop_table("users")
