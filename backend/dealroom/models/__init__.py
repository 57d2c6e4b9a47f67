"""Database models package."""

from dealroom.models.user import User
from dealroom.models.catalog import ContractTemplate, ClauseTemplate, ClauseOption
from dealroom.models.deal import Deal, Party, DealClause, Selection
from dealroom.models.negotiation import NegotiationRound, CompromiseSuggestion, CounterProposal
from dealroom.models.invitation import Invitation
from dealroom.models.signing import SigningRequest
from dealroom.models.audit_log import AuditLog
from dealroom.models.enums import (
    DealStatus,
    PartyRole,
    PartyStatus,
    ClauseStatus,
    RoundStatus,
    ProposalStatus,
    InvitationStatus,
    SigningStatus,
    GoverningLaw,
)

__all__ = [
    "User",
    "ContractTemplate",
    "ClauseTemplate",
    "ClauseOption",
    "Deal",
    "Party",
    "DealClause",
    "Selection",
    "NegotiationRound",
    "CompromiseSuggestion",
    "CounterProposal",
    "Invitation",
    "SigningRequest",
    "AuditLog",
    "DealStatus",
    "PartyRole",
    "PartyStatus",
    "ClauseStatus",
    "RoundStatus",
    "ProposalStatus",
    "InvitationStatus",
    "SigningStatus",
    "GoverningLaw",
]
