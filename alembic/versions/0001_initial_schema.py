# File: alembic/versions/0001_initial_schema.py | Version: 1.0 | Title: Users, bases, tables, columns, rows & views
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

from alembic import op

# revision identifiers, used by Alembic.
revision = "0001_initial_schema"
down_revision = None
branch_labels = None
depends_on = None

JSONType = sa.JSON().with_variant(postgresql.JSONB(), "postgresql")


def upgrade():
    op.create_table(
        "user",
        sa.Column("id", sa.String(), primary_key=True),
        sa.Column("email", sa.String(length=255), nullable=False),
        sa.Column("hashed_password", sa.String(length=255), nullable=False),
        sa.Column("full_name", sa.String(length=255), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index("ix_user_email", "user", ["email"], unique=True)

    op.create_table(
        "base",
        sa.Column("id", sa.String(), primary_key=True),
        sa.Column("user_id", sa.String(), sa.ForeignKey("user.id", ondelete="CASCADE"), nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index("ix_base_user_id", "base", ["user_id"])

    op.create_table(
        "table",
        sa.Column("id", sa.String(), primary_key=True),
        sa.Column("base_id", sa.String(), sa.ForeignKey("base.id", ondelete="CASCADE"), nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("order", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index("ix_table_base_id", "table", ["base_id"])

    op.create_table(
        "column",
        sa.Column("id", sa.String(), primary_key=True),
        sa.Column("table_id", sa.String(), sa.ForeignKey("table.id", ondelete="CASCADE"), nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("type", sa.String(length=20), nullable=False),
        sa.Column("size", sa.Integer(), nullable=False, server_default="180"),
        sa.Column("order", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("number_config", JSONType, nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index("ix_column_table_id", "column", ["table_id"])
    op.create_index("ix_column_table_id_order", "column", ["table_id", "order"])

    op.create_table(
        "row",
        sa.Column("id", sa.String(), primary_key=True),
        sa.Column("table_id", sa.String(), sa.ForeignKey("table.id", ondelete="CASCADE"), nullable=False),
        sa.Column("cells", JSONType, nullable=False),
        sa.Column("order", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index("ix_row_table_id", "row", ["table_id"])
    op.create_index("ix_row_table_id_order_id", "row", ["table_id", "order", "id"])

    op.create_table(
        "view",
        sa.Column("id", sa.String(), primary_key=True),
        sa.Column("table_id", sa.String(), sa.ForeignKey("table.id", ondelete="CASCADE"), nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("order", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("filters", JSONType, nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index("ix_view_table_id_order", "view", ["table_id", "order"])


def downgrade():
    # Per-column row indexes (row_txt_* / row_num_*) are partial indexes on
    # "row" and go away with it
    op.drop_index("ix_view_table_id_order", table_name="view")
    op.drop_table("view")
    op.drop_index("ix_row_table_id_order_id", table_name="row")
    op.drop_index("ix_row_table_id", table_name="row")
    op.drop_table("row")
    op.drop_index("ix_column_table_id_order", table_name="column")
    op.drop_index("ix_column_table_id", table_name="column")
    op.drop_table("column")
    op.drop_index("ix_table_base_id", table_name="table")
    op.drop_table("table")
    op.drop_index("ix_base_user_id", table_name="base")
    op.drop_table("base")
    op.drop_index("ix_user_email", table_name="user")
    op.drop_table("user")
