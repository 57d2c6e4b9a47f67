"""
Negotiation round manager: generates compromise rounds, records each
party's response and handles counter-proposals.
"""

import logging
from datetime import datetime
from typing import Dict, List, Optional, Tuple

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from dealroom.core.exceptions import BadRequestError, NotFoundError
from dealroom.core.state_machine import PROPOSAL_STATE_MACHINE
from dealroom.models.deal import Deal, DealClause, Party
from dealroom.models.enums import (
    ClauseStatus,
    DealStatus,
    PartyRole,
    PartyStatus,
    ProposalStatus,
    RoundStatus,
)
from dealroom.models.negotiation import CompromiseSuggestion, CounterProposal, NegotiationRound
from dealroom.models.user import User
from dealroom.schemas.negotiation import (
    ClauseNegotiationView,
    PartySatisfaction,
    SatisfactionScores,
)
from dealroom.services import audit_service, selection_service
from dealroom.services import lifecycle_service as lifecycle
from dealroom.services.compromise_engine import (
    BatchEntry,
    CompromiseResult,
    OptionInput,
    SelectionInput,
    calculate_compromise,
    counter_proposal_override,
    global_fairness_pass,
    round_half_up,
)

logger = logging.getLogger(__name__)

DEFAULT_PRIORITY_WEIGHT = 3


def _option_inputs(clause: DealClause) -> List[OptionInput]:
    return [
        OptionInput(
            id=o.id,
            order=o.order,
            bias_party_a=o.bias_party_a,
            bias_party_b=o.bias_party_b,
        )
        for o in clause.options
    ]


def _selection_input(party_selection) -> SelectionInput:
    return SelectionInput(
        option_id=party_selection.option_id,
        priority=party_selection.priority,
        flexibility=party_selection.flexibility,
    )


class NegotiationRoundManager:
    """Service for compromise rounds and counter-proposals."""

    # Queries

    async def _latest_round(self, db: AsyncSession, deal_id: str) -> Optional[NegotiationRound]:
        result = await db.execute(
            select(NegotiationRound)
            .where(NegotiationRound.deal_id == deal_id)
            .order_by(NegotiationRound.round_number.desc())
            .limit(1)
        )
        return result.scalar_one_or_none()

    async def _latest_suggestion(self, db: AsyncSession, clause_id: str) -> Optional[CompromiseSuggestion]:
        result = await db.execute(
            select(CompromiseSuggestion)
            .where(CompromiseSuggestion.deal_clause_id == clause_id)
            .order_by(CompromiseSuggestion.round_number.desc())
            .limit(1)
        )
        return result.unique().scalar_one_or_none()

    async def _latest_suggestions(self, db: AsyncSession, deal: Deal) -> Dict[str, CompromiseSuggestion]:
        """Current suggestion per clause: the entry from the highest round."""
        result = await db.execute(
            select(CompromiseSuggestion)
            .join(DealClause, DealClause.id == CompromiseSuggestion.deal_clause_id)
            .where(DealClause.deal_id == deal.id)
            .order_by(CompromiseSuggestion.round_number)
        )
        latest = {}
        for suggestion in result.unique().scalars().all():
            latest[suggestion.deal_clause_id] = suggestion
        return latest

    async def _pending_proposals(self, db: AsyncSession, deal_id: str) -> List[CounterProposal]:
        """Deal-wide pending counter-proposals, newest first."""
        result = await db.execute(
            select(CounterProposal)
            .join(DealClause, DealClause.id == CounterProposal.deal_clause_id)
            .where(
                DealClause.deal_id == deal_id,
                CounterProposal.status == ProposalStatus.PENDING,
            )
            .order_by(CounterProposal.created_at.desc())
        )
        return list(result.unique().scalars().all())

    async def _supersede_clause_proposals(
        self,
        db: AsyncSession,
        clause_id: str,
        keep_id: Optional[str] = None,
    ) -> int:
        """Retire pending counter-proposals on a clause that has just been agreed."""
        result = await db.execute(
            select(CounterProposal).where(
                CounterProposal.deal_clause_id == clause_id,
                CounterProposal.status == ProposalStatus.PENDING,
            )
        )
        now = datetime.utcnow()
        retired = 0
        for proposal in result.unique().scalars().all():
            if proposal.id == keep_id:
                continue
            PROPOSAL_STATE_MACHINE.assert_transition(proposal.status, ProposalStatus.SUPERSEDED)
            proposal.status = ProposalStatus.SUPERSEDED
            proposal.resolved_at = now
            retired += 1
        return retired

    # Round building

    def _plan_round(
        self,
        deal: Deal,
        initiator: Party,
        respondent: Party,
        counters: Optional[Dict[str, CounterProposal]] = None,
    ) -> Tuple[List[Tuple[DealClause, CompromiseResult]], List[BatchEntry]]:
        """
        Run the engine over every open clause.

        Returns the same-choice clauses (to be agreed outright) and the
        divergent ones after the fairness pass. Nothing is written here.
        """
        counters = counters or {}
        same_choice = []
        entries = []

        for clause in deal.clauses:
            if clause.status == ClauseStatus.AGREED:
                continue

            selection_a = clause.selection_for(initiator.id)
            selection_b = clause.selection_for(respondent.id)
            if not selection_a or not selection_b:
                continue

            options = _option_inputs(clause)
            result = calculate_compromise(
                clause.title, options, _selection_input(selection_a), _selection_input(selection_b)
            )
            if result.same_choice:
                same_choice.append((clause, result))
                continue

            orders = {o.id: o.order for o in options}
            order_a = orders[selection_a.option_id]
            order_b = orders[selection_b.option_id]

            counter = counters.get(clause.id)
            if counter is not None:
                proposed = next((o for o in options if o.id == counter.proposed_option_id), None)
                if proposed is not None:
                    override = counter_proposal_override(clause.title, order_a, order_b, proposed)
                    if override is not None:
                        result = override

            entries.append(
                BatchEntry(
                    clause_id=clause.id,
                    options=options,
                    party_a_order=order_a,
                    party_b_order=order_b,
                    result=result,
                )
            )

        return same_choice, global_fairness_pass(entries)

    def _persist_round(
        self,
        db: AsyncSession,
        deal: Deal,
        round_number: int,
        initiated_by: PartyRole,
        same_choice: List[Tuple[DealClause, CompromiseResult]],
        entries: List[BatchEntry],
    ) -> List[CompromiseSuggestion]:
        db.add(
            NegotiationRound(
                deal_id=deal.id,
                round_number=round_number,
                initiated_by=initiated_by,
                status=RoundStatus.PENDING_RESPONSE,
            )
        )

        suggestions = []
        for clause, result in same_choice:
            lifecycle.agree_clause(clause, result.suggested_option_id)
            suggestions.append(
                CompromiseSuggestion(
                    deal_clause_id=clause.id,
                    round_number=round_number,
                    suggested_option_id=result.suggested_option_id,
                    satisfaction_party_a=result.satisfaction_party_a,
                    satisfaction_party_b=result.satisfaction_party_b,
                    reasoning=result.reasoning,
                    party_a_accepted=True,
                    party_b_accepted=True,
                )
            )

        clauses = {c.id: c for c in deal.clauses}
        for entry in entries:
            lifecycle.suggest_clause(clauses[entry.clause_id])
            suggestions.append(
                CompromiseSuggestion(
                    deal_clause_id=entry.clause_id,
                    round_number=round_number,
                    suggested_option_id=entry.result.suggested_option_id,
                    satisfaction_party_a=entry.result.satisfaction_party_a,
                    satisfaction_party_b=entry.result.satisfaction_party_b,
                    reasoning=entry.result.reasoning,
                )
            )

        db.add_all(suggestions)
        deal.current_round = round_number
        return suggestions

    # Operations

    async def generate(
        self,
        db: AsyncSession,
        deal_id: str,
        user: User,
    ) -> Tuple[int, List[CompromiseSuggestion]]:
        """
        Open the next round with a suggestion for every unagreed clause.

        Same-choice clauses are agreed on the spot. Both parties move to
        REVIEWING and the deal to NEGOTIATING.

        Returns:
            Tuple of (round_number, suggestions)

        Raises:
            BadRequestError: If a party is missing or has not submitted
        """
        deal = await lifecycle.load_deal(db, deal_id)
        lifecycle.require_party(deal, user)
        initiator, respondent = lifecycle.require_both_parties(deal)

        if initiator.status == PartyStatus.PENDING or respondent.status == PartyStatus.PENDING:
            raise BadRequestError("Both parties must submit their selections first")
        lifecycle.assert_open(deal)

        same_choice, entries = self._plan_round(deal, initiator, respondent)

        lifecycle.transition_deal(deal, DealStatus.NEGOTIATING)
        round_number = deal.current_round + 1
        suggestions = self._persist_round(
            db, deal, round_number, PartyRole.INITIATOR, same_choice, entries
        )
        for party in (initiator, respondent):
            lifecycle.transition_party(party, PartyStatus.REVIEWING)
        all_agreed = lifecycle.reconcile_deal(deal)

        await lifecycle.commit(db, deal)

        logger.info(
            f"Deal {deal.id}: generated round {round_number} "
            f"({len(same_choice)} agreed outright, {len(entries)} suggested)"
        )
        await audit_service.record(db, deal.id, user.id, "COMPROMISE_GENERATED", {
            "round_number": round_number,
            "suggestions_count": len(suggestions),
            "all_agreed": all_agreed,
        })
        return round_number, suggestions

    async def get_current(self, db: AsyncSession, deal_id: str, user: User) -> List[ClauseNegotiationView]:
        """Every clause with its options, visible selections and latest suggestion."""
        deal = await lifecycle.load_deal(db, deal_id)
        party = lifecycle.require_party(deal, user)
        latest = await self._latest_suggestions(db, deal)

        return [
            ClauseNegotiationView(
                clause_id=clause.id,
                clause_title=clause.title,
                clause_description=clause.template.plain_description,
                category=clause.template.category,
                status=clause.status,
                options=clause.options,
                selections=selection_service.visible_selections(deal, clause, party),
                suggestion=latest.get(clause.id),
            )
            for clause in deal.clauses
        ]

    async def respond(
        self,
        db: AsyncSession,
        clause_id: str,
        user: User,
        accept: bool,
        round_number: Optional[int] = None,
    ) -> CompromiseSuggestion:
        """
        Accept or reject the clause's latest suggestion.

        Only the caller's own acceptance slot is written. When both slots
        are true the clause is agreed on the suggested option.

        Raises:
            NotFoundError: If the clause has no suggestion yet
            BadRequestError: If the clause is agreed or round_number is stale
        """
        deal, clause = await lifecycle.load_clause(db, clause_id)
        party = lifecycle.require_party(deal, user)
        lifecycle.assert_open(deal)

        suggestion = await self._latest_suggestion(db, clause.id)
        if not suggestion:
            raise NotFoundError("No compromise suggestion found")
        if round_number is not None and round_number != suggestion.round_number:
            raise BadRequestError(
                f"Round {round_number} has been superseded by round {suggestion.round_number}"
            )
        if clause.status == ClauseStatus.AGREED:
            raise BadRequestError("This clause has already been agreed")

        if party.role == PartyRole.INITIATOR:
            suggestion.party_a_accepted = accept
        else:
            suggestion.party_b_accepted = accept

        all_agreed = False
        superseded = 0
        if suggestion.both_accepted:
            lifecycle.agree_clause(clause, suggestion.suggested_option_id)
            superseded = await self._supersede_clause_proposals(db, clause.id)
            all_agreed = lifecycle.reconcile_deal(deal)
        lifecycle.touch(deal)

        await lifecycle.commit(db, deal)

        action = "COMPROMISE_ACCEPTED" if accept else "COMPROMISE_REJECTED"
        await audit_service.record(db, deal.id, user.id, action, {
            "clause_id": clause.id,
            "round_number": suggestion.round_number,
            "clause_agreed": clause.status == ClauseStatus.AGREED,
            "all_agreed": all_agreed,
            "superseded_proposals": superseded,
        })
        return suggestion

    async def satisfaction_scores(self, db: AsyncSession, deal_id: str, user: User) -> SatisfactionScores:
        """Priority-weighted average satisfaction over the latest suggestions."""
        deal = await lifecycle.load_deal(db, deal_id)
        lifecycle.require_party(deal, user)
        latest = await self._latest_suggestions(db, deal)

        initiator = deal.party_for_role(PartyRole.INITIATOR)
        respondent = deal.party_for_role(PartyRole.RESPONDENT)

        totals = {PartyRole.INITIATOR: [0, 0], PartyRole.RESPONDENT: [0, 0]}
        for clause in deal.clauses:
            suggestion = latest.get(clause.id)
            if not suggestion:
                continue
            for role, party in ((PartyRole.INITIATOR, initiator), (PartyRole.RESPONDENT, respondent)):
                selection = clause.selection_for(party.id) if party else None
                weight = selection.priority if selection else DEFAULT_PRIORITY_WEIGHT
                totals[role][0] += suggestion.satisfaction_for(role) * weight
                totals[role][1] += weight

        def score(role: PartyRole, party: Optional[Party], fallback: str) -> PartySatisfaction:
            weighted, weight = totals[role]
            return PartySatisfaction(
                name=party.display_name if party else fallback,
                satisfaction=round_half_up(weighted / weight) if weight else 0,
            )

        return SatisfactionScores(
            party_a=score(PartyRole.INITIATOR, initiator, "Party A"),
            party_b=score(PartyRole.RESPONDENT, respondent, "Party B"),
        )

    async def counter_propose(
        self,
        db: AsyncSession,
        clause_id: str,
        user: User,
        option_id: str,
        rationale: Optional[str] = None,
        new_priority: Optional[int] = None,
    ) -> CounterProposal:
        """
        Reject the clause's suggestion with an alternative option.

        Raises:
            BadRequestError: If no round is active, the option is not the
                clause's or the clause is already agreed
            NotFoundError: If the clause has no suggestion to counter
        """
        deal, clause = await lifecycle.load_clause(db, clause_id)
        party = lifecycle.require_party(deal, user)
        lifecycle.assert_open(deal)

        active_round = await self._latest_round(db, deal.id)
        if not active_round:
            raise BadRequestError("No active negotiation round")
        suggestion = await self._latest_suggestion(db, clause.id)
        if not suggestion:
            raise NotFoundError("No compromise suggestion found to counter")
        if clause.status == ClauseStatus.AGREED:
            raise BadRequestError("This clause has already been agreed")
        if not clause.find_option(option_id):
            raise BadRequestError("Invalid option for this clause")

        if party.role == PartyRole.INITIATOR:
            suggestion.party_a_accepted = False
        else:
            suggestion.party_b_accepted = False

        proposal = CounterProposal(
            round_id=active_round.id,
            deal_clause_id=clause.id,
            proposing_party_id=party.id,
            proposed_option_id=option_id,
            rationale=rationale,
            new_priority=new_priority,
            status=ProposalStatus.PENDING,
        )
        db.add(proposal)

        if new_priority is not None:
            selection = clause.selection_for(party.id)
            if selection:
                selection.priority = new_priority
                selection.updated_at = datetime.utcnow()
        lifecycle.touch(deal)

        await lifecycle.commit(db, deal)

        logger.info(f"Deal {deal.id}: {party.role.value} countered clause {clause.id}")
        await audit_service.record(db, deal.id, user.id, "COUNTER_PROPOSAL_SUBMITTED", {
            "clause_id": clause.id,
            "proposal_id": proposal.id,
            "proposed_option_id": option_id,
            "round_number": active_round.round_number,
        })
        return proposal

    async def respond_to_counter_proposal(
        self,
        db: AsyncSession,
        proposal_id: str,
        user: User,
        accept: bool,
    ) -> Dict[str, bool]:
        """
        Accept or reject the other party's counter-proposal.

        Accepting agrees the clause on the proposed option.

        Returns:
            {"accepted": bool, "all_agreed": bool}

        Raises:
            BadRequestError: On self-response or a proposal no longer pending
        """
        result = await db.execute(select(CounterProposal).where(CounterProposal.id == proposal_id))
        proposal = result.unique().scalar_one_or_none()
        if not proposal:
            raise NotFoundError("Counter-proposal not found")

        deal, clause = await lifecycle.load_clause(db, proposal.deal_clause_id)
        party = lifecycle.require_party(deal, user)
        lifecycle.assert_open(deal)

        if proposal.proposing_party_id == party.id:
            raise BadRequestError("You cannot respond to your own counter-proposal")
        if proposal.status != ProposalStatus.PENDING:
            raise BadRequestError("This counter-proposal is no longer pending")

        target = ProposalStatus.ACCEPTED if accept else ProposalStatus.REJECTED
        PROPOSAL_STATE_MACHINE.assert_transition(proposal.status, target)

        all_agreed = False
        if accept:
            lifecycle.agree_clause(clause, proposal.proposed_option_id)
            await self._supersede_clause_proposals(db, clause.id, keep_id=proposal.id)
            all_agreed = lifecycle.reconcile_deal(deal)

        proposal.status = target
        proposal.resolved_at = datetime.utcnow()
        lifecycle.touch(deal)

        await lifecycle.commit(db, deal)

        action = "COUNTER_PROPOSAL_ACCEPTED" if accept else "COUNTER_PROPOSAL_REJECTED"
        await audit_service.record(db, deal.id, user.id, action, {
            "clause_id": clause.id,
            "proposal_id": proposal.id,
            "all_agreed": all_agreed,
        })
        return {"accepted": accept, "all_agreed": all_agreed}

    async def list_counter_proposals(
        self,
        db: AsyncSession,
        deal_id: str,
        user: User,
    ) -> Dict[str, List[CounterProposal]]:
        """The caller's counter-proposals split into sent, received and awaiting their answer."""
        deal = await lifecycle.load_deal(db, deal_id)
        party = lifecycle.require_party(deal, user)

        result = await db.execute(
            select(CounterProposal)
            .join(DealClause, DealClause.id == CounterProposal.deal_clause_id)
            .where(DealClause.deal_id == deal.id)
            .order_by(CounterProposal.created_at.desc())
        )
        proposals = list(result.unique().scalars().all())

        from_me = [p for p in proposals if p.proposing_party_id == party.id]
        to_me = [p for p in proposals if p.proposing_party_id != party.id]
        return {
            "from_me": from_me,
            "to_me": to_me,
            "pending_for_me": [p for p in to_me if p.status == ProposalStatus.PENDING],
        }

    async def regenerate(self, db: AsyncSession, deal_id: str, user: User) -> Tuple[int, int]:
        """
        Open a new round that takes pending counter-proposals into account.

        A clause's newest pending counter-proposal replaces the engine's
        suggestion when its option lies between both original choices.
        All pending counter-proposals are then superseded. Party statuses
        are left as they are.

        Returns:
            Tuple of (round_number, suggestion_count)
        """
        deal = await lifecycle.load_deal(db, deal_id)
        party = lifecycle.require_party(deal, user)
        initiator, respondent = lifecycle.require_both_parties(deal)
        lifecycle.assert_open(deal)
        if deal.current_round == 0:
            raise BadRequestError("No active negotiation round")

        pending = await self._pending_proposals(db, deal.id)
        counters: Dict[str, CounterProposal] = {}
        for proposal in pending:
            counters.setdefault(proposal.deal_clause_id, proposal)

        same_choice, entries = self._plan_round(deal, initiator, respondent, counters)

        now = datetime.utcnow()
        for proposal in pending:
            PROPOSAL_STATE_MACHINE.assert_transition(proposal.status, ProposalStatus.SUPERSEDED)
            proposal.status = ProposalStatus.SUPERSEDED
            proposal.resolved_at = now

        lifecycle.transition_deal(deal, DealStatus.NEGOTIATING)
        round_number = deal.current_round + 1
        suggestions = self._persist_round(db, deal, round_number, party.role, same_choice, entries)
        lifecycle.reconcile_deal(deal)

        await lifecycle.commit(db, deal)

        logger.info(
            f"Deal {deal.id}: regenerated as round {round_number} "
            f"({len(counters)} counter-proposals considered)"
        )
        await audit_service.record(db, deal.id, user.id, "COMPROMISE_REGENERATED", {
            "round_number": round_number,
            "clause_count": len(suggestions),
            "superseded_proposals": len(pending),
        })
        return round_number, len(suggestions)


# Singleton instance
negotiation_manager = NegotiationRoundManager()
