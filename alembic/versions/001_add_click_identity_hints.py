"""Add email/phone identity hints to link clicks for cross-device matching.

Revision ID: 001_add_click_identity_hints
Revises: 000_initial_schema
"""

from typing import Union

from alembic import op
from sqlalchemy import inspect
import sqlalchemy as sa

revision: str = "001_add_click_identity_hints"
down_revision: Union[str, None] = "000_initial_schema"
branch_labels: Union[str, None] = None
depends_on: Union[str, None] = None


def _column_exists(table: str, column: str) -> bool:
    bind = op.get_bind()
    insp = inspect(bind)
    return column in [c["name"] for c in insp.get_columns(table)]


def upgrade() -> None:
    if not _column_exists("link_clicks", "user_email"):
        op.add_column("link_clicks", sa.Column("user_email", sa.String(255), nullable=True))
        op.create_index("ix_link_clicks_user_email", "link_clicks", ["user_email"])

    if not _column_exists("link_clicks", "user_phone"):
        op.add_column("link_clicks", sa.Column("user_phone", sa.String(20), nullable=True))
        op.create_index("ix_link_clicks_user_phone", "link_clicks", ["user_phone"])


def downgrade() -> None:
    if _column_exists("link_clicks", "user_phone"):
        op.drop_index("ix_link_clicks_user_phone", table_name="link_clicks")
        op.drop_column("link_clicks", "user_phone")
    if _column_exists("link_clicks", "user_email"):
        op.drop_index("ix_link_clicks_user_email", table_name="link_clicks")
        op.drop_column("link_clicks", "user_email")
