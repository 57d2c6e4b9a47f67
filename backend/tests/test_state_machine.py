"""Tests for the lifecycle transition tables."""

import pytest

from dealroom.core.state_machine import (
    CLAUSE_STATE_MACHINE,
    DEAL_STATE_MACHINE,
    PARTY_STATE_MACHINE,
    PROPOSAL_STATE_MACHINE,
    InvalidTransitionError,
)
from dealroom.models.enums import ClauseStatus, DealStatus, PartyStatus, ProposalStatus


@pytest.mark.parametrize(
    "current,target",
    [
        (DealStatus.DRAFT, DealStatus.AWAITING_RESPONSE),
        (DealStatus.AWAITING_RESPONSE, DealStatus.NEGOTIATING),
        (DealStatus.NEGOTIATING, DealStatus.AGREED),
        (DealStatus.AGREED, DealStatus.SIGNING),
        (DealStatus.SIGNING, DealStatus.COMPLETED),
        (DealStatus.NEGOTIATING, DealStatus.CANCELLED),
        (DealStatus.NEGOTIATING, DealStatus.NEGOTIATING),
    ],
)
def test_deal_allowed_transitions(current, target):
    assert DEAL_STATE_MACHINE.can_transition(current, target)


@pytest.mark.parametrize(
    "current,target",
    [
        (DealStatus.DRAFT, DealStatus.NEGOTIATING),
        (DealStatus.AGREED, DealStatus.NEGOTIATING),
        (DealStatus.COMPLETED, DealStatus.CANCELLED),
        (DealStatus.CANCELLED, DealStatus.DRAFT),
    ],
)
def test_deal_rejected_transitions(current, target):
    with pytest.raises(InvalidTransitionError):
        DEAL_STATE_MACHINE.assert_transition(current, target)


def test_terminal_states():
    assert DEAL_STATE_MACHINE.is_terminal(DealStatus.COMPLETED)
    assert DEAL_STATE_MACHINE.is_terminal(DealStatus.CANCELLED)
    assert not DEAL_STATE_MACHINE.is_terminal(DealStatus.SIGNING)
    assert CLAUSE_STATE_MACHINE.is_terminal(ClauseStatus.AGREED)


def test_agreed_clause_never_reopens():
    assert not CLAUSE_STATE_MACHINE.can_transition(ClauseStatus.AGREED, ClauseStatus.SUGGESTED)
    assert not CLAUSE_STATE_MACHINE.can_transition(ClauseStatus.AGREED, ClauseStatus.PENDING)
    assert CLAUSE_STATE_MACHINE.can_transition(ClauseStatus.PENDING, ClauseStatus.AGREED)


def test_party_cannot_go_back_to_pending():
    assert PARTY_STATE_MACHINE.can_transition(PartyStatus.SUBMITTED, PartyStatus.REVIEWING)
    assert not PARTY_STATE_MACHINE.can_transition(PartyStatus.SUBMITTED, PartyStatus.PENDING)


def test_resolved_proposal_is_final():
    with pytest.raises(InvalidTransitionError, match="Counter-proposal cannot move from ACCEPTED to SUPERSEDED"):
        PROPOSAL_STATE_MACHINE.assert_transition(ProposalStatus.ACCEPTED, ProposalStatus.SUPERSEDED)
