"""Status and role enums shared by the deal room models."""

from enum import Enum


class DealStatus(str, Enum):
    """Deal lifecycle status."""
    DRAFT = "DRAFT"
    AWAITING_RESPONSE = "AWAITING_RESPONSE"  # Invitation sent
    NEGOTIATING = "NEGOTIATING"
    AGREED = "AGREED"  # Every clause agreed
    SIGNING = "SIGNING"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"


class PartyRole(str, Enum):
    """Which side of the deal a party is on."""
    INITIATOR = "INITIATOR"  # Party A
    RESPONDENT = "RESPONDENT"  # Party B


class PartyStatus(str, Enum):
    """Per-party progress through the negotiation."""
    PENDING = "PENDING"
    SUBMITTED = "SUBMITTED"
    REVIEWING = "REVIEWING"
    ACCEPTED = "ACCEPTED"


class ClauseStatus(str, Enum):
    """Negotiation status of one clause within a deal."""
    PENDING = "PENDING"
    SUGGESTED = "SUGGESTED"
    AGREED = "AGREED"


class RoundStatus(str, Enum):
    """Negotiation round status. Rounds are superseded implicitly."""
    PENDING_RESPONSE = "PENDING_RESPONSE"


class ProposalStatus(str, Enum):
    """Counter-proposal status."""
    PENDING = "PENDING"
    ACCEPTED = "ACCEPTED"
    REJECTED = "REJECTED"
    SUPERSEDED = "SUPERSEDED"


class InvitationStatus(str, Enum):
    """Respondent invitation status."""
    PENDING = "PENDING"
    ACCEPTED = "ACCEPTED"
    CANCELLED = "CANCELLED"


class SigningStatus(str, Enum):
    """Signature collection status."""
    PENDING = "PENDING"
    PARTIALLY_SIGNED = "PARTIALLY_SIGNED"
    COMPLETED = "COMPLETED"


class GoverningLaw(str, Enum):
    """Supported governing law jurisdictions."""
    CALIFORNIA = "CALIFORNIA"
    ENGLAND_WALES = "ENGLAND_WALES"
    SPAIN = "SPAIN"


# Map governing law to jurisdiction codes used by entitlements
GOVERNING_LAW_JURISDICTIONS = {
    GoverningLaw.CALIFORNIA: "US-CA",
    GoverningLaw.ENGLAND_WALES: "GB",
    GoverningLaw.SPAIN: "ES",
}
