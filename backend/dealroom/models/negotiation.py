"""
Negotiation models: rounds, per-clause compromise suggestions and the
counter-proposals parties submit against them.
"""

import uuid
from datetime import datetime

from sqlalchemy import (
    String,
    Text,
    Integer,
    Boolean,
    ForeignKey,
    TIMESTAMP,
    UniqueConstraint,
    Enum as SQLEnum,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from dealroom.database import Base
from dealroom.models.enums import PartyRole, ProposalStatus, RoundStatus


class NegotiationRound(Base):
    """One iteration of suggestion generation. Rounds are append-only."""

    __tablename__ = "negotiation_rounds"
    __table_args__ = (
        UniqueConstraint("deal_id", "round_number", name="uq_round_deal_number"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    deal_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("deals.id", ondelete="CASCADE"), nullable=False, index=True
    )

    round_number: Mapped[int] = mapped_column(Integer, nullable=False)
    initiated_by: Mapped[PartyRole] = mapped_column(SQLEnum(PartyRole), nullable=False)
    status: Mapped[RoundStatus] = mapped_column(
        SQLEnum(RoundStatus), nullable=False, default=RoundStatus.PENDING_RESPONSE
    )

    created_at: Mapped[datetime] = mapped_column(TIMESTAMP, nullable=False, default=datetime.utcnow)

    def __repr__(self) -> str:
        return f"<NegotiationRound(deal_id={self.deal_id}, round={self.round_number})>"


class CompromiseSuggestion(Base):
    """
    The suggested option for one clause in one round.

    Each party owns one acceptance slot: None means no response yet,
    True accepted, False rejected or countered.
    """

    __tablename__ = "compromise_suggestions"
    __table_args__ = (
        UniqueConstraint("deal_clause_id", "round_number", name="uq_suggestion_clause_round"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    deal_clause_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("deal_clauses.id", ondelete="CASCADE"), nullable=False, index=True
    )
    round_number: Mapped[int] = mapped_column(Integer, nullable=False)

    suggested_option_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("clause_options.id"), nullable=False
    )
    satisfaction_party_a: Mapped[int] = mapped_column(Integer, nullable=False)  # 0-100
    satisfaction_party_b: Mapped[int] = mapped_column(Integer, nullable=False)  # 0-100
    reasoning: Mapped[str] = mapped_column(Text, nullable=False)

    party_a_accepted: Mapped[bool | None] = mapped_column(Boolean, nullable=True)
    party_b_accepted: Mapped[bool | None] = mapped_column(Boolean, nullable=True)

    created_at: Mapped[datetime] = mapped_column(TIMESTAMP, nullable=False, default=datetime.utcnow)

    suggested_option: Mapped["ClauseOption"] = relationship("ClauseOption", lazy="joined")

    def satisfaction_for(self, role: PartyRole) -> int:
        if role == PartyRole.INITIATOR:
            return self.satisfaction_party_a
        return self.satisfaction_party_b

    @property
    def both_accepted(self) -> bool:
        return self.party_a_accepted is True and self.party_b_accepted is True


class CounterProposal(Base):
    """A party's alternative option offered instead of accepting a suggestion."""

    __tablename__ = "counter_proposals"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    round_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("negotiation_rounds.id", ondelete="CASCADE"), nullable=False, index=True
    )
    deal_clause_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("deal_clauses.id", ondelete="CASCADE"), nullable=False, index=True
    )
    proposing_party_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("parties.id", ondelete="CASCADE"), nullable=False
    )
    proposed_option_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("clause_options.id"), nullable=False
    )

    rationale: Mapped[str | None] = mapped_column(Text, nullable=True)
    new_priority: Mapped[int | None] = mapped_column(Integer, nullable=True)

    status: Mapped[ProposalStatus] = mapped_column(
        SQLEnum(ProposalStatus), nullable=False, default=ProposalStatus.PENDING, index=True
    )

    created_at: Mapped[datetime] = mapped_column(TIMESTAMP, nullable=False, default=datetime.utcnow)
    resolved_at: Mapped[datetime | None] = mapped_column(TIMESTAMP, nullable=True)

    # Relationships
    round: Mapped["NegotiationRound"] = relationship("NegotiationRound", lazy="joined")
    clause: Mapped["DealClause"] = relationship("DealClause", lazy="joined")
    proposing_party: Mapped["Party"] = relationship("Party", lazy="joined")
    proposed_option: Mapped["ClauseOption"] = relationship("ClauseOption", lazy="joined")
