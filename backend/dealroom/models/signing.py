"""Signing request database model."""

from datetime import datetime
import uuid

from sqlalchemy import String, Text, ForeignKey, TIMESTAMP, Enum as SQLEnum
from sqlalchemy.orm import Mapped, mapped_column

from dealroom.database import Base
from dealroom.models.enums import PartyRole, SigningStatus


class SigningRequest(Base):
    """Signature collection for an agreed deal, one signature per role."""

    __tablename__ = "signing_requests"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    deal_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("deals.id", ondelete="CASCADE"), nullable=False, index=True
    )

    provider: Mapped[str] = mapped_column(String(50), nullable=False)
    external_id: Mapped[str | None] = mapped_column(String(255), nullable=True)
    status: Mapped[SigningStatus] = mapped_column(
        SQLEnum(SigningStatus), nullable=False, default=SigningStatus.PENDING
    )

    # Type-to-sign: the signer's typed name is the signature
    party_a_signature: Mapped[str | None] = mapped_column(Text, nullable=True)
    party_a_signed_at: Mapped[datetime | None] = mapped_column(TIMESTAMP, nullable=True)
    party_b_signature: Mapped[str | None] = mapped_column(Text, nullable=True)
    party_b_signed_at: Mapped[datetime | None] = mapped_column(TIMESTAMP, nullable=True)

    created_at: Mapped[datetime] = mapped_column(TIMESTAMP, nullable=False, default=datetime.utcnow)
    completed_at: Mapped[datetime | None] = mapped_column(TIMESTAMP, nullable=True)

    def signed_at(self, role: PartyRole) -> datetime | None:
        if role == PartyRole.INITIATOR:
            return self.party_a_signed_at
        return self.party_b_signed_at

    @property
    def fully_signed(self) -> bool:
        return self.party_a_signed_at is not None and self.party_b_signed_at is not None
