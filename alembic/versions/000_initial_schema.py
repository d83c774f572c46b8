"""Initial database schema

Revision ID: 000_initial_schema
Revises:
Create Date: 2026-10-19

"""

from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision: str = "000_initial_schema"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps():
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
    ]


def upgrade() -> None:
    """Create referrer, link and lead tables."""

    # Referrer profiles
    op.create_table(
        "referrer_profiles",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("display_name", sa.String(100), nullable=True),
        sa.Column(
            "role",
            sa.Enum("affiliate", "tax_preparer", "client", "admin", name="referrerrole"),
            nullable=False,
        ),
        sa.Column("is_active", sa.Boolean(), server_default=sa.true(), nullable=False),
        sa.Column("short_link_username", sa.String(100), nullable=True),
        sa.Column("custom_tracking_code", sa.String(100), nullable=True),
        sa.Column("tracking_code", sa.String(100), nullable=True),
        sa.Column(
            "affiliate_bonded_to_preparer_id",
            sa.Integer(),
            sa.ForeignKey("referrer_profiles.id"),
            nullable=True,
        ),
        *_timestamps(),
    )
    op.create_index("ix_referrer_profiles_role", "referrer_profiles", ["role"])
    op.create_index("ix_referrer_profiles_short_link_username", "referrer_profiles", ["short_link_username"], unique=True)
    op.create_index("ix_referrer_profiles_custom_tracking_code", "referrer_profiles", ["custom_tracking_code"], unique=True)
    op.create_index("ix_referrer_profiles_tracking_code", "referrer_profiles", ["tracking_code"], unique=True)

    # Affiliate bondings
    op.create_table(
        "affiliate_bondings",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("affiliate_id", sa.Integer(), sa.ForeignKey("referrer_profiles.id"), nullable=False),
        sa.Column("preparer_id", sa.Integer(), sa.ForeignKey("referrer_profiles.id"), nullable=False),
        sa.Column("commission_structure", sa.JSON(), nullable=True),
        sa.Column("is_active", sa.Boolean(), server_default=sa.true(), nullable=False),
        sa.Column("bonded_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        *_timestamps(),
    )
    op.create_index("ix_affiliate_bondings_affiliate_id", "affiliate_bondings", ["affiliate_id"])
    op.create_index("ix_affiliate_bondings_preparer_id", "affiliate_bondings", ["preparer_id"])

    # Marketing links
    op.create_table(
        "marketing_links",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("code", sa.String(100), nullable=False),
        sa.Column("title", sa.String(255), nullable=True),
        sa.Column("destination_url", sa.Text(), nullable=True),
        sa.Column("creator_id", sa.Integer(), sa.ForeignKey("referrer_profiles.id"), nullable=False),
        sa.Column("creator_type", sa.String(50), nullable=True),
        sa.Column("clicks", sa.Integer(), server_default="0", nullable=False),
        sa.Column("unique_clicks", sa.Integer(), server_default="0", nullable=False),
        *_timestamps(),
    )
    op.create_index("ix_marketing_links_code", "marketing_links", ["code"], unique=True)
    op.create_index("ix_marketing_links_creator_id", "marketing_links", ["creator_id"])

    # Link clicks (append-only)
    op.create_table(
        "link_clicks",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("link_id", sa.Integer(), sa.ForeignKey("marketing_links.id"), nullable=False),
        sa.Column("clicked_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("ip_address", sa.String(45), nullable=True),
        sa.Column("user_agent", sa.Text(), nullable=True),
        sa.Column("referrer", sa.Text(), nullable=True),
        sa.Column("city", sa.String(100), nullable=True),
        sa.Column("state", sa.String(50), nullable=True),
    )
    op.create_index("ix_link_clicks_link_id", "link_clicks", ["link_id"])
    op.create_index("ix_link_clicks_clicked_at", "link_clicks", ["clicked_at"])

    # Leads
    op.create_table(
        "leads",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("first_name", sa.String(100), nullable=True),
        sa.Column("last_name", sa.String(100), nullable=True),
        sa.Column("email", sa.String(255), nullable=True),
        sa.Column("phone", sa.String(50), nullable=True),
        sa.Column("referrer_username", sa.String(100), nullable=True),
        sa.Column("referrer_type", sa.String(50), nullable=True),
        sa.Column("attribution_method", sa.String(20), nullable=True),
        sa.Column("attribution_confidence", sa.Integer(), nullable=True),
        sa.Column("commission_rate", sa.Numeric(10, 2), nullable=True),
        sa.Column("commission_rate_locked_at", sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_leads_email", "leads", ["email"])
    op.create_index("ix_leads_referrer_username", "leads", ["referrer_username"])
    op.create_index("ix_leads_attribution_method", "leads", ["attribution_method"])

    # Tax intake leads
    op.create_table(
        "tax_intake_leads",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("first_name", sa.String(100), nullable=True),
        sa.Column("last_name", sa.String(100), nullable=True),
        sa.Column("email", sa.String(255), nullable=True),
        sa.Column("phone", sa.String(50), nullable=True),
        sa.Column("referrer_username", sa.String(100), nullable=True),
        sa.Column("referrer_type", sa.String(50), nullable=True),
        sa.Column("attribution_method", sa.String(20), nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_tax_intake_leads_referrer_username", "tax_intake_leads", ["referrer_username"])


def downgrade() -> None:
    """Drop all tables."""
    op.drop_table("tax_intake_leads")
    op.drop_table("leads")
    op.drop_table("link_clicks")
    op.drop_table("marketing_links")
    op.drop_table("affiliate_bondings")
    op.drop_table("referrer_profiles")
    op.execute("DROP TYPE IF EXISTS referrerrole")
