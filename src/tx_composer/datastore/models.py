"""ORM models of the transaction store."""

from __future__ import annotations

from datetime import datetime  # noqa: TC003 - SQLAlchemy needs this at runtime for Mapped[datetime]
from typing import Any

from sqlalchemy import JSON, DateTime, String, func
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    """SQLAlchemy declarative base for all models."""

    type_annotation_map = {  # noqa: RUF012
        dict[str, Any]: JSON,
    }


class DbTransaction(Base):
    """A composed, unsigned transaction waiting to be signed."""

    __tablename__ = "db_transactions"

    id: Mapped[str] = mapped_column(String(64), primary_key=True, comment="uuid4 hex")
    sender_address: Mapped[str] = mapped_column(
        String(128), nullable=False, index=True, comment="Bech32 address of the signer"
    )
    chain_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    data: Mapped[dict[str, Any]] = mapped_column(
        JSON, nullable=False, default=dict, comment="TransactionDraft JSON"
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
    )

    def __repr__(self) -> str:
        return f"<DbTransaction id={self.id[:16]}... chain={self.chain_id}>"
