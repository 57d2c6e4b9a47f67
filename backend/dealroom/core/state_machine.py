"""Canonical state transition tables for deal room entities."""

from __future__ import annotations

from dealroom.core.exceptions import BadRequestError
from dealroom.models.enums import (
    ClauseStatus,
    DealStatus,
    PartyStatus,
    ProposalStatus,
)


class InvalidTransitionError(BadRequestError):
    """Raised when a disallowed state transition is attempted."""

    code = "INVALID_TRANSITION"


def _label(state) -> str:
    return getattr(state, "value", state)


class StateMachine:
    """Transition table for one entity type.

    Re-entering the current state is always allowed and is a no-op.
    """

    def __init__(self, entity: str, transitions: dict[str, set[str]]) -> None:
        self.entity = entity
        self._transitions = transitions

    def can_transition(self, current: str, target: str) -> bool:
        if current == target:
            return True
        return target in self._transitions.get(current, set())

    def assert_transition(self, current: str, target: str) -> None:
        if not self.can_transition(current=current, target=target):
            raise InvalidTransitionError(
                f"{self.entity} cannot move from {_label(current)} to {_label(target)}"
            )

    def is_terminal(self, state: str) -> bool:
        return not self._transitions.get(state)


DEAL_STATE_MACHINE = StateMachine(
    "Deal",
    {
        DealStatus.DRAFT: {DealStatus.AWAITING_RESPONSE, DealStatus.CANCELLED},
        DealStatus.AWAITING_RESPONSE: {DealStatus.NEGOTIATING, DealStatus.CANCELLED},
        DealStatus.NEGOTIATING: {DealStatus.AGREED, DealStatus.CANCELLED},
        DealStatus.AGREED: {DealStatus.SIGNING, DealStatus.CANCELLED},
        DealStatus.SIGNING: {DealStatus.COMPLETED, DealStatus.CANCELLED},
        DealStatus.COMPLETED: set(),
        DealStatus.CANCELLED: set(),
    },
)

PARTY_STATE_MACHINE = StateMachine(
    "Party",
    {
        PartyStatus.PENDING: {PartyStatus.SUBMITTED},
        PartyStatus.SUBMITTED: {PartyStatus.REVIEWING, PartyStatus.ACCEPTED},
        PartyStatus.REVIEWING: {PartyStatus.ACCEPTED},
        PartyStatus.ACCEPTED: set(),
    },
)

CLAUSE_STATE_MACHINE = StateMachine(
    "Clause",
    {
        ClauseStatus.PENDING: {ClauseStatus.SUGGESTED, ClauseStatus.AGREED},
        ClauseStatus.SUGGESTED: {ClauseStatus.AGREED},
        ClauseStatus.AGREED: set(),
    },
)

PROPOSAL_STATE_MACHINE = StateMachine(
    "Counter-proposal",
    {
        ProposalStatus.PENDING: {
            ProposalStatus.ACCEPTED,
            ProposalStatus.REJECTED,
            ProposalStatus.SUPERSEDED,
        },
        ProposalStatus.ACCEPTED: set(),
        ProposalStatus.REJECTED: set(),
        ProposalStatus.SUPERSEDED: set(),
    },
)
