import uuid
from datetime import datetime
from typing import List, Optional

from sqlalchemy import DateTime, ForeignKey, String, Text, UniqueConstraint, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .database import Base


def _new_id() -> str:
    return uuid.uuid4().hex


class Company(Base):
    __tablename__ = "companies"
    __table_args__ = {'extend_existing': True}

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )

    products: Mapped[List["Product"]] = relationship("Product", back_populates="company", cascade="all, delete-orphan")


class Product(Base):
    __tablename__ = "products"
    __table_args__ = {'extend_existing': True}

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)
    company_id: Mapped[str] = mapped_column(ForeignKey("companies.id"), nullable=False, index=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    sku_code: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)
    ean_code: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)
    dun_code: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)
    deleted_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )

    company: Mapped["Company"] = relationship(Company, back_populates="products")
    citations: Mapped[List["ConversationProductCitation"]] = relationship(
        "ConversationProductCitation", back_populates="product", cascade="all, delete-orphan"
    )


class ConversationMessage(Base):
    __tablename__ = "conversation_messages"
    __table_args__ = {'extend_existing': True}

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)
    company_id: Mapped[Optional[str]] = mapped_column(String(36), nullable=True, index=True)
    timestamp_iso: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    sender_id: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    message_date: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    msg_type: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)
    flow_name: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    execution_id: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    message_id: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    message_text: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    response_text: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    seller_name: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    seller_phone: Mapped[Optional[str]] = mapped_column(String(32), nullable=True, index=True)
    supervisor: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    client_name: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    leads_found: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )

    citations: Mapped[List["ConversationProductCitation"]] = relationship(
        "ConversationProductCitation", back_populates="conversation_message", cascade="all, delete-orphan"
    )


class ConversationProductCitation(Base):
    __tablename__ = "conversation_product_citations"
    __table_args__ = (
        UniqueConstraint("conversation_message_id", "product_id", name="uq_citation_message_product"),
        {'extend_existing': True},
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)
    conversation_message_id: Mapped[str] = mapped_column(ForeignKey("conversation_messages.id"), nullable=False)
    product_id: Mapped[str] = mapped_column(ForeignKey("products.id"), nullable=False, index=True)
    company_id: Mapped[Optional[str]] = mapped_column(String(36), nullable=True, index=True)
    cited_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, index=True)
    source: Mapped[str] = mapped_column(String(255), nullable=False)

    conversation_message: Mapped["ConversationMessage"] = relationship(ConversationMessage, back_populates="citations")
    product: Mapped["Product"] = relationship(Product, back_populates="citations")
