"""
Clause catalog models: contract templates, their clauses and the options
offered for each clause.
"""

import uuid
from datetime import datetime
from typing import List

from sqlalchemy import (
    String,
    Text,
    Integer,
    Boolean,
    Float,
    ForeignKey,
    TIMESTAMP,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from dealroom.database import Base


class ContractTemplate(Base):
    """A contract type and the ordered clauses negotiated for it."""

    __tablename__ = "contract_templates"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))

    contract_type: Mapped[str] = mapped_column(String(50), unique=True, nullable=False, index=True)
    display_name: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    version: Mapped[str] = mapped_column(String(20), nullable=False, default="1.0")

    # Licensed templates require an entitlement to open a deal
    is_licensed: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    created_at: Mapped[datetime] = mapped_column(TIMESTAMP, default=datetime.utcnow)

    clauses: Mapped[List["ClauseTemplate"]] = relationship(
        "ClauseTemplate",
        back_populates="contract_template",
        order_by="ClauseTemplate.order",
        cascade="all, delete-orphan",
        lazy="selectin"
    )

    def __repr__(self) -> str:
        return f"<ContractTemplate(contract_type={self.contract_type}, version={self.version})>"


class ClauseTemplate(Base):
    """One clause of a contract template."""

    __tablename__ = "clause_templates"
    __table_args__ = (
        UniqueConstraint("contract_template_id", "clause_key", name="uq_clause_template_key"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    contract_template_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("contract_templates.id", ondelete="CASCADE"), nullable=False, index=True
    )

    clause_key: Mapped[str] = mapped_column(String(100), nullable=False)
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    category: Mapped[str] = mapped_column(String(100), nullable=False, default="general")
    order: Mapped[int] = mapped_column(Integer, nullable=False)
    plain_description: Mapped[str] = mapped_column(Text, nullable=False, default="")
    legal_context: Mapped[str | None] = mapped_column(Text, nullable=True)
    is_required: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    contract_template: Mapped["ContractTemplate"] = relationship(
        "ContractTemplate", back_populates="clauses"
    )
    options: Mapped[List["ClauseOption"]] = relationship(
        "ClauseOption",
        back_populates="clause_template",
        order_by="ClauseOption.order",
        cascade="all, delete-orphan",
        lazy="selectin"
    )


class ClauseOption(Base):
    """
    An offered choice for a clause.

    `order` ranks the options and drives the distance metrics; the bias
    scores say how strongly the option favors each party (-1..1).
    """

    __tablename__ = "clause_options"
    __table_args__ = (
        UniqueConstraint("clause_template_id", "code", name="uq_clause_option_code"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    clause_template_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("clause_templates.id", ondelete="CASCADE"), nullable=False, index=True
    )

    code: Mapped[str] = mapped_column(String(100), nullable=False)
    label: Mapped[str] = mapped_column(String(200), nullable=False)
    order: Mapped[int] = mapped_column(Integer, nullable=False)
    plain_description: Mapped[str] = mapped_column(Text, nullable=False, default="")
    legal_text: Mapped[str] = mapped_column(Text, nullable=False, default="")

    bias_party_a: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    bias_party_b: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)

    clause_template: Mapped["ClauseTemplate"] = relationship(
        "ClauseTemplate", back_populates="options"
    )
