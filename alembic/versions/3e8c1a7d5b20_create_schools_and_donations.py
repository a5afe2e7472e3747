"""create schools and donations

Revision ID: 3e8c1a7d5b20
Revises:
Create Date: 2026-10-19 00:00:00.000000
"""

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = "3e8c1a7d5b20"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "schools",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("name", sa.String(length=200), nullable=False),
        sa.Column("contact_email", sa.String(length=320), nullable=True),
        sa.Column("website_url", sa.String(length=500), nullable=True),
        sa.Column("country", sa.String(length=120), nullable=True),
        sa.Column("did", sa.String(length=255), nullable=True),
        sa.Column("wallet_address", sa.String(length=64), nullable=True),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("is_verified", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.UniqueConstraint("did", name="uq_schools_did"),
    )
    op.create_index("ix_schools_wallet_address", "schools", ["wallet_address"])

    op.create_table(
        "donations",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("xrpl_tx_hash", sa.String(length=64), nullable=False),
        sa.Column("sender_address", sa.String(length=64), nullable=False),
        sa.Column("amount_value", sa.String(length=64), nullable=False),
        sa.Column("amount_currency", sa.String(length=40), nullable=False),
        sa.Column("amount_issuer", sa.String(length=64), nullable=True),
        sa.Column("transaction_timestamp", sa.String(length=40), nullable=True),
        sa.Column("explorer_url", sa.String(length=500), nullable=True),
        sa.Column("destination_tag", sa.Integer(), nullable=True),
        sa.Column("raw_transaction", sa.JSON(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.UniqueConstraint("xrpl_tx_hash", name="uq_donations_xrpl_tx_hash"),
    )
    op.create_index("ix_donations_sender_address", "donations", ["sender_address"])


def downgrade() -> None:
    op.drop_index("ix_donations_sender_address", table_name="donations")
    op.drop_table("donations")
    op.drop_index("ix_schools_wallet_address", table_name="schools")
    op.drop_table("schools")
