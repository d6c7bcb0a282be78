"""Append-only envelope annotation ORM model."""

from __future__ import annotations

from datetime import datetime
from typing import Any
from uuid import UUID, uuid4

from sqlalchemy import DateTime, ForeignKey, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from fechamento_caixa.db.base import Base


class EnvelopeAnnotation(Base):
    """Justification note attached to an envelope before review."""

    __tablename__ = "envelope_annotations"

    id: Mapped[UUID] = mapped_column(primary_key=True, default=uuid4)
    envelope_id: Mapped[UUID] = mapped_column(
        ForeignKey("envelopes.id"),
        nullable=False,
    )
    text: Mapped[str] = mapped_column(Text, nullable=False)
    created_by: Mapped[str] = mapped_column(String(120), nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )

    envelope: Mapped[Any] = relationship("Envelope", back_populates="annotations")
