"""
Deal models: the negotiation instance, its two parties, the clauses being
negotiated and each party's selection per clause.
"""

import uuid
from datetime import datetime
from typing import List

from sqlalchemy import (
    String,
    Text,
    Integer,
    ForeignKey,
    TIMESTAMP,
    UniqueConstraint,
    Enum as SQLEnum,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from dealroom.database import Base
from dealroom.models.enums import (
    ClauseStatus,
    DealStatus,
    GoverningLaw,
    PartyRole,
    PartyStatus,
)


class Deal(Base):
    """One negotiation between an initiator and a respondent."""

    __tablename__ = "deals"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    name: Mapped[str] = mapped_column(String(200), nullable=False)

    contract_template_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("contract_templates.id"), nullable=False, index=True
    )
    governing_law: Mapped[GoverningLaw] = mapped_column(SQLEnum(GoverningLaw), nullable=False)
    contract_language: Mapped[str] = mapped_column(String(5), nullable=False, default="en")

    status: Mapped[DealStatus] = mapped_column(
        SQLEnum(DealStatus),
        nullable=False,
        default=DealStatus.DRAFT,
        index=True
    )
    current_round: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    # Optimistic concurrency token, bumped on every write to the deal row
    version: Mapped[int] = mapped_column(Integer, nullable=False, default=1)

    created_at: Mapped[datetime] = mapped_column(TIMESTAMP, nullable=False, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(TIMESTAMP, nullable=False, default=datetime.utcnow)

    __mapper_args__ = {"version_id_col": version}

    # Relationships
    contract_template: Mapped["ContractTemplate"] = relationship("ContractTemplate", lazy="joined")
    parties: Mapped[List["Party"]] = relationship(
        "Party",
        back_populates="deal",
        order_by="Party.created_at",
        cascade="all, delete-orphan",
        lazy="selectin"
    )
    clauses: Mapped[List["DealClause"]] = relationship(
        "DealClause",
        back_populates="deal",
        order_by="DealClause.position",
        cascade="all, delete-orphan",
        lazy="selectin"
    )

    def party_for_role(self, role: PartyRole) -> "Party | None":
        return next((p for p in self.parties if p.role == role), None)

    def party_for_user(self, user_id: str) -> "Party | None":
        return next((p for p in self.parties if p.user_id == user_id), None)

    def __repr__(self) -> str:
        return f"<Deal(id={self.id}, status={self.status}, round={self.current_round})>"


class Party(Base):
    """One negotiating side of a deal."""

    __tablename__ = "parties"
    __table_args__ = (
        UniqueConstraint("deal_id", "role", name="uq_party_deal_role"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    deal_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("deals.id", ondelete="CASCADE"), nullable=False, index=True
    )

    # Respondents are linked to a user when they accept the invitation
    user_id: Mapped[str | None] = mapped_column(
        String(36), ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True
    )

    role: Mapped[PartyRole] = mapped_column(SQLEnum(PartyRole), nullable=False)
    status: Mapped[PartyStatus] = mapped_column(
        SQLEnum(PartyStatus), nullable=False, default=PartyStatus.PENDING
    )

    email: Mapped[str] = mapped_column(String(255), nullable=False)
    name: Mapped[str | None] = mapped_column(String(200), nullable=True)
    company: Mapped[str | None] = mapped_column(String(200), nullable=True)

    created_at: Mapped[datetime] = mapped_column(TIMESTAMP, nullable=False, default=datetime.utcnow)
    submitted_at: Mapped[datetime | None] = mapped_column(TIMESTAMP, nullable=True)

    deal: Mapped["Deal"] = relationship("Deal", back_populates="parties")

    @property
    def display_name(self) -> str:
        if self.name:
            return self.name
        return self.email


class DealClause(Base):
    """A catalog clause instantiated within one deal."""

    __tablename__ = "deal_clauses"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    deal_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("deals.id", ondelete="CASCADE"), nullable=False, index=True
    )
    clause_template_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("clause_templates.id"), nullable=False
    )
    position: Mapped[int] = mapped_column(Integer, nullable=False)

    status: Mapped[ClauseStatus] = mapped_column(
        SQLEnum(ClauseStatus), nullable=False, default=ClauseStatus.PENDING, index=True
    )
    # Set iff status is AGREED
    agreed_option_id: Mapped[str | None] = mapped_column(
        String(36), ForeignKey("clause_options.id"), nullable=True
    )

    deal: Mapped["Deal"] = relationship("Deal", back_populates="clauses")
    template: Mapped["ClauseTemplate"] = relationship("ClauseTemplate", lazy="joined")
    selections: Mapped[List["Selection"]] = relationship(
        "Selection",
        back_populates="clause",
        cascade="all, delete-orphan",
        lazy="selectin"
    )

    @property
    def title(self) -> str:
        return self.template.title

    @property
    def options(self) -> List["ClauseOption"]:
        return self.template.options

    def find_option(self, option_id: str) -> "ClauseOption | None":
        return next((o for o in self.template.options if o.id == option_id), None)

    def selection_for(self, party_id: str) -> "Selection | None":
        return next((s for s in self.selections if s.party_id == party_id), None)


class Selection(Base):
    """One party's choice for one clause."""

    __tablename__ = "selections"
    __table_args__ = (
        UniqueConstraint("deal_clause_id", "party_id", name="uq_selection_clause_party"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    deal_clause_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("deal_clauses.id", ondelete="CASCADE"), nullable=False, index=True
    )
    party_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("parties.id", ondelete="CASCADE"), nullable=False, index=True
    )
    option_id: Mapped[str] = mapped_column(String(36), ForeignKey("clause_options.id"), nullable=False)

    priority: Mapped[int] = mapped_column(Integer, nullable=False, default=3)  # 1-5
    flexibility: Mapped[int] = mapped_column(Integer, nullable=False, default=3)  # 1-5
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    created_at: Mapped[datetime] = mapped_column(TIMESTAMP, nullable=False, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(TIMESTAMP, nullable=False, default=datetime.utcnow)

    clause: Mapped["DealClause"] = relationship("DealClause", back_populates="selections")
    option: Mapped["ClauseOption"] = relationship("ClauseOption", lazy="joined")
