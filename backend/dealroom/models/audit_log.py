"""Audit log database model."""

from datetime import datetime

from sqlalchemy import String, Integer, ForeignKey, TIMESTAMP, Index
from sqlalchemy import JSON
from sqlalchemy.orm import Mapped, mapped_column

from dealroom.database import Base


class AuditLog(Base):
    """Audit trail entry for every state-changing deal operation."""

    __tablename__ = "audit_log"

    # Primary Key
    id: Mapped[int] = mapped_column(
        Integer,
        primary_key=True,
        autoincrement=True
    )

    # Event Details
    action: Mapped[str] = mapped_column(
        String(50),
        nullable=False,
        index=True
    )

    # Foreign Keys (nullable so entries outlive their deal)
    deal_id: Mapped[str | None] = mapped_column(
        String(36),
        ForeignKey("deals.id", ondelete="SET NULL"),
        nullable=True
    )
    actor_id: Mapped[str | None] = mapped_column(
        String(36),
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True
    )

    # Event Data
    details: Mapped[dict] = mapped_column(
        JSON,
        nullable=False,
        default=dict
    )

    # Timestamp
    created_at: Mapped[datetime] = mapped_column(
        TIMESTAMP,
        nullable=False,
        default=datetime.utcnow,
        index=True
    )

    __table_args__ = (
        Index('idx_audit_deal_created', 'deal_id', 'created_at'),
    )

    def __repr__(self) -> str:
        return f"<AuditLog(id={self.id}, action={self.action}, deal_id={self.deal_id})>"
