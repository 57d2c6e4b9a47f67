"""Respondent invitation database model."""

from datetime import datetime
import uuid

from sqlalchemy import String, ForeignKey, TIMESTAMP, Enum as SQLEnum
from sqlalchemy.orm import Mapped, mapped_column, relationship

from dealroom.database import Base
from dealroom.models.enums import InvitationStatus


class Invitation(Base):
    """An invitation for the respondent to join a deal."""

    __tablename__ = "invitations"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    deal_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("deals.id", ondelete="CASCADE"), nullable=False, index=True
    )
    sender_id: Mapped[str] = mapped_column(String(36), ForeignKey("users.id"), nullable=False)

    email: Mapped[str] = mapped_column(String(255), nullable=False)
    token: Mapped[str] = mapped_column(String(64), unique=True, nullable=False, index=True)

    status: Mapped[InvitationStatus] = mapped_column(
        SQLEnum(InvitationStatus), nullable=False, default=InvitationStatus.PENDING
    )

    sent_at: Mapped[datetime] = mapped_column(TIMESTAMP, nullable=False, default=datetime.utcnow)
    expires_at: Mapped[datetime] = mapped_column(TIMESTAMP, nullable=False)
    accepted_at: Mapped[datetime | None] = mapped_column(TIMESTAMP, nullable=True)

    deal: Mapped["Deal"] = relationship("Deal", lazy="joined")

    @property
    def is_expired(self) -> bool:
        return datetime.utcnow() > self.expires_at

    def __repr__(self) -> str:
        return f"<Invitation(deal_id={self.deal_id}, email={self.email}, status={self.status})>"
