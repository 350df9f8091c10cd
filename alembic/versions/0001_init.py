"""init schema

Revision ID: 0001
Revises:
Create Date: 2026-10-18
"""

from __future__ import annotations

import sqlalchemy as sa
from alembic import op


revision = "0001"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "companies",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )
    op.create_table(
        "products",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("company_id", sa.String(36), sa.ForeignKey("companies.id"), nullable=False),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("sku_code", sa.String(64), nullable=True),
        sa.Column("ean_code", sa.String(64), nullable=True),
        sa.Column("dun_code", sa.String(64), nullable=True),
        sa.Column("deleted_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )
    op.create_index("ix_products_company_id", "products", ["company_id"], unique=False)
    op.create_table(
        "conversation_messages",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("company_id", sa.String(36), nullable=True),
        sa.Column("timestamp_iso", sa.DateTime(timezone=True), nullable=True),
        sa.Column("sender_id", sa.String(255), nullable=True),
        sa.Column("message_date", sa.DateTime(timezone=True), nullable=True),
        sa.Column("msg_type", sa.String(64), nullable=True),
        sa.Column("flow_name", sa.String(255), nullable=True),
        sa.Column("execution_id", sa.String(255), nullable=True),
        sa.Column("message_id", sa.String(255), nullable=True),
        sa.Column("message_text", sa.Text(), nullable=True),
        sa.Column("response_text", sa.Text(), nullable=True),
        sa.Column("seller_name", sa.String(255), nullable=True),
        sa.Column("seller_phone", sa.String(32), nullable=True),
        sa.Column("supervisor", sa.String(255), nullable=True),
        sa.Column("client_name", sa.String(255), nullable=True),
        sa.Column("leads_found", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )
    op.create_index("ix_conversation_messages_company_id", "conversation_messages", ["company_id"], unique=False)
    op.create_index("ix_conversation_messages_seller_phone", "conversation_messages", ["seller_phone"], unique=False)
    op.create_table(
        "conversation_product_citations",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column(
            "conversation_message_id",
            sa.String(36),
            sa.ForeignKey("conversation_messages.id"),
            nullable=False,
        ),
        sa.Column("product_id", sa.String(36), sa.ForeignKey("products.id"), nullable=False),
        sa.Column("company_id", sa.String(36), nullable=True),
        sa.Column("cited_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("source", sa.String(255), nullable=False),
        sa.UniqueConstraint("conversation_message_id", "product_id", name="uq_citation_message_product"),
    )
    op.create_index("ix_conversation_product_citations_product_id", "conversation_product_citations", ["product_id"])
    op.create_index("ix_conversation_product_citations_company_id", "conversation_product_citations", ["company_id"])
    op.create_index("ix_conversation_product_citations_cited_at", "conversation_product_citations", ["cited_at"])


def downgrade() -> None:
    op.drop_table("conversation_product_citations")
    op.drop_table("conversation_messages")
    op.drop_table("products")
    op.drop_table("companies")
