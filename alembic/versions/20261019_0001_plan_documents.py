"""plan week and plan document tables"""

from alembic import op
import sqlalchemy as sa


revision = "20261019_0001"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "plan_week_documents",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("user_id", sa.String(length=128), nullable=False),
        sa.Column("week_id", sa.String(length=64), nullable=False),
        sa.Column("week_number", sa.Integer(), nullable=False),
        sa.Column("payload", sa.JSON(), nullable=False),
        sa.Column("version", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("updated_at", sa.String(length=40), nullable=False),
        sa.Column("updated_by", sa.String(length=120), nullable=False),
        sa.UniqueConstraint("user_id", "week_id", name="uq_plan_week_documents_user_week"),
    )
    op.create_index(
        "ix_plan_week_documents_user_week_number",
        "plan_week_documents",
        ["user_id", "week_number"],
    )

    op.create_table(
        "plan_documents",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("user_id", sa.String(length=128), nullable=False),
        sa.Column("plan_id", sa.String(length=128), nullable=False),
        sa.Column("weeks", sa.JSON(), nullable=False),
        sa.Column("version", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("changelog", sa.JSON(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False, server_default=sa.text("CURRENT_TIMESTAMP")),
        sa.Column("updated_at", sa.String(length=40), nullable=True),
        sa.Column("updated_by", sa.String(length=120), nullable=True),
        sa.UniqueConstraint("user_id", "plan_id", name="uq_plan_documents_user_plan"),
    )


def downgrade() -> None:
    op.drop_table("plan_documents")
    op.drop_index("ix_plan_week_documents_user_week_number", table_name="plan_week_documents")
    op.drop_table("plan_week_documents")
