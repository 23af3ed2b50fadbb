"""Initial schema: users and one CV record per user.

Revision ID: 001
Revises: None
Create Date: 2026-10-19
"""

from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects.postgresql import JSONB, UUID

revision: str = "001"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None

_JSON = sa.JSON().with_variant(JSONB(), "postgresql")


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        sa.Column("email", sa.String(255), unique=True, nullable=False),
        sa.Column("password_hash", sa.String(255), nullable=False),
        sa.Column("is_active", sa.Boolean(), default=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index("ix_users_email", "users", ["email"])

    op.create_table(
        "cv_records",
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        sa.Column("user_id", UUID(as_uuid=True), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("personal_details", _JSON, nullable=True),
        sa.Column("about", _JSON, nullable=True),
        sa.Column("education", _JSON, nullable=True),
        sa.Column("work_experience", _JSON, nullable=True),
        sa.Column("projects", _JSON, nullable=True),
        sa.Column("skills", _JSON, nullable=True),
        sa.Column("interests", _JSON, nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index("ix_cv_records_user_id", "cv_records", ["user_id"], unique=True)


def downgrade() -> None:
    op.drop_index("ix_cv_records_user_id", table_name="cv_records")
    op.drop_table("cv_records")
    op.drop_index("ix_users_email", table_name="users")
    op.drop_table("users")
