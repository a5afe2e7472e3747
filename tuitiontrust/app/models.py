from __future__ import annotations

import uuid
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import (
    JSON,
    Boolean,
    DateTime,
    Integer,
    String,
    Text,
    UniqueConstraint,
    text,
)
from sqlalchemy.orm import Mapped, mapped_column

from tuitiontrust.app.db import Base


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def uuid_str() -> str:
    return str(uuid.uuid4())


class School(Base):
    """
    Registry of schools eligible to receive distributions.

    Verification is decided outside this service; we only read is_verified.
    """
    __tablename__ = "schools"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=uuid_str)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    contact_email: Mapped[Optional[str]] = mapped_column(String(320), nullable=True)
    website_url: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    country: Mapped[Optional[str]] = mapped_column(String(120), nullable=True)
    did: Mapped[Optional[str]] = mapped_column(String(255), nullable=True, unique=True)
    wallet_address: Mapped[Optional[str]] = mapped_column(String(64), nullable=True, index=True)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    is_verified: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False, server_default=text("false")
    )
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, nullable=False)


class Donation(Base):
    """
    One incoming treasury payment, keyed by its ledger transaction hash.

    Rows are written once by the donation sync and never updated.
    """
    __tablename__ = "donations"
    __table_args__ = (UniqueConstraint("xrpl_tx_hash", name="uq_donations_xrpl_tx_hash"),)

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=uuid_str)
    xrpl_tx_hash: Mapped[str] = mapped_column(String(64), nullable=False)
    sender_address: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    amount_value: Mapped[str] = mapped_column(String(64), nullable=False)
    amount_currency: Mapped[str] = mapped_column(String(40), nullable=False)
    amount_issuer: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)
    transaction_timestamp: Mapped[Optional[str]] = mapped_column(String(40), nullable=True)
    explorer_url: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    destination_tag: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    raw_transaction: Mapped[Optional[dict]] = mapped_column(JSON, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, nullable=False)
