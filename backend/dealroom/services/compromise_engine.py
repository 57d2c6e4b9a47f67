"""
Compromise engine: stake scoring, per-clause suggestions and the
round-wide fairness pass.

Everything here is pure. Callers hand in plain option and selection
values and persist whatever comes back.
"""

import math
from dataclasses import dataclass, field, replace
from typing import List, Sequence

from dealroom.core.exceptions import BadRequestError

SIMILAR_STAKE_THRESHOLD = 0.1
FLEXIBLE_THRESHOLD = 4
LEAN_TOWARD_FACTOR = 0.3
BIAS_WEIGHT = 0.15
FAIRNESS_GAP = 15
FAIRNESS_NUDGE = 0.1

SAME_CHOICE_REASONING = "Both parties selected the same option."
FAIRNESS_SUFFIX = " (Adjusted for overall fairness between parties.)"


@dataclass(frozen=True)
class OptionInput:
    """The parts of a clause option the engine needs."""
    id: str
    order: int
    bias_party_a: float = 0.0
    bias_party_b: float = 0.0


@dataclass(frozen=True)
class SelectionInput:
    """One party's choice for a clause."""
    option_id: str
    priority: int = 3
    flexibility: int = 3


@dataclass(frozen=True)
class CompromiseResult:
    suggested_option_id: str
    satisfaction_party_a: int
    satisfaction_party_b: int
    reasoning: str
    same_choice: bool = False


@dataclass(frozen=True)
class BatchEntry:
    """A clause's suggestion inside one round, as seen by the fairness pass."""
    clause_id: str
    options: List[OptionInput]
    party_a_order: int
    party_b_order: int
    result: CompromiseResult
    fairness_checked: bool = field(default=False)


def round_half_up(value: float) -> int:
    """Round to the nearest integer, .5 going up."""
    return math.floor(value + 0.5)


def calculate_stake(priority: int, flexibility: int, bias: float) -> float:
    """
    How invested a party is in its choice, in [0, 1].

    Weighs importance (priority), unwillingness to move (5 - flexibility)
    and how strongly the chosen option favors the party (|bias|).
    """
    return (priority / 5) * 0.4 + ((5 - flexibility) / 5) * 0.3 + abs(bias) * 0.3


def closest_option(options: Sequence[OptionInput], target: float) -> OptionInput:
    """Option whose order is nearest to target; ties go to the lower order."""
    ordered = sorted(options, key=lambda o: o.order)
    return min(ordered, key=lambda o: abs(o.order - target))


def calculate_satisfaction(
    party_order: int,
    suggested: OptionInput,
    option_count: int,
    is_party_a: bool,
) -> int:
    """0-100 estimate of how content a party is with the suggested option."""
    if option_count > 1:
        distance_sat = 1 - abs(party_order - suggested.order) / (option_count - 1)
    else:
        distance_sat = 1.0

    if is_party_a:
        bias_adj = suggested.bias_party_a * BIAS_WEIGHT
    else:
        bias_adj = -suggested.bias_party_b * BIAS_WEIGHT

    raw = (distance_sat + bias_adj) * 100
    return round_half_up(max(0.0, min(100.0, raw)))


def _find(options: Sequence[OptionInput], option_id: str) -> OptionInput:
    for option in options:
        if option.id == option_id:
            return option
    raise BadRequestError("Invalid option for this clause")


def _reasoning(clause_title: str, branch: str) -> str:
    if branch == "similar":
        return (
            f'For "{clause_title}", both parties have similar levels of investment in this clause. '
            "The suggested option represents a balanced middle ground that aims to satisfy both parties equally."
        )
    if branch == "a_flexible":
        return (
            f'For "{clause_title}", Party A (initiator) has indicated this clause is highly important to them, '
            "and Party B has shown flexibility. The suggestion reflects Party A's preference while "
            "acknowledging Party B's willingness to accommodate."
        )
    if branch == "a_lean":
        return (
            f'For "{clause_title}", Party A (initiator) has a higher stake in this clause. '
            "The suggestion leans toward Party A's preference while still considering Party B's position."
        )
    if branch == "b_flexible":
        return (
            f'For "{clause_title}", Party B (respondent) has indicated this clause is highly important to them, '
            "and Party A has shown flexibility. The suggestion reflects Party B's preference while "
            "acknowledging Party A's willingness to accommodate."
        )
    return (
        f'For "{clause_title}", Party B (respondent) has a higher stake in this clause. '
        "The suggestion leans toward Party B's preference while still considering Party A's position."
    )


def calculate_compromise(
    clause_title: str,
    options: Sequence[OptionInput],
    selection_a: SelectionInput,
    selection_b: SelectionInput,
) -> CompromiseResult:
    """
    Suggest an option for one clause given both parties' selections.

    Raises:
        BadRequestError: If either selection names an option outside the clause
    """
    option_a = _find(options, selection_a.option_id)
    option_b = _find(options, selection_b.option_id)

    if option_a.id == option_b.id:
        return CompromiseResult(
            suggested_option_id=option_a.id,
            satisfaction_party_a=100,
            satisfaction_party_b=100,
            reasoning=SAME_CHOICE_REASONING,
            same_choice=True,
        )

    stake_a = calculate_stake(selection_a.priority, selection_a.flexibility, option_a.bias_party_a)
    stake_b = calculate_stake(selection_b.priority, selection_b.flexibility, option_b.bias_party_b)

    if abs(stake_a - stake_b) < SIMILAR_STAKE_THRESHOLD:
        midpoint = round_half_up((option_a.order + option_b.order) / 2)
        suggested = closest_option(options, midpoint)
        branch = "similar"
    elif stake_a > stake_b:
        if selection_b.flexibility >= FLEXIBLE_THRESHOLD:
            suggested = option_a
            branch = "a_flexible"
        else:
            target = option_a.order + (option_b.order - option_a.order) * LEAN_TOWARD_FACTOR
            suggested = closest_option(options, target)
            branch = "a_lean"
    else:
        if selection_a.flexibility >= FLEXIBLE_THRESHOLD:
            suggested = option_b
            branch = "b_flexible"
        else:
            target = option_b.order + (option_a.order - option_b.order) * LEAN_TOWARD_FACTOR
            suggested = closest_option(options, target)
            branch = "b_lean"

    count = len(options)
    return CompromiseResult(
        suggested_option_id=suggested.id,
        satisfaction_party_a=calculate_satisfaction(option_a.order, suggested, count, is_party_a=True),
        satisfaction_party_b=calculate_satisfaction(option_b.order, suggested, count, is_party_a=False),
        reasoning=_reasoning(clause_title, branch),
    )


def counter_proposal_override(
    clause_title: str,
    party_a_order: int,
    party_b_order: int,
    proposed: OptionInput,
) -> CompromiseResult | None:
    """
    Adopt a pending counter-proposal when it lies between both original
    choices (inclusive). Returns None when it falls outside that span.
    """
    low, high = sorted((party_a_order, party_b_order))
    if not low <= proposed.order <= high:
        return None

    span = (high - low) or 1
    return CompromiseResult(
        suggested_option_id=proposed.id,
        satisfaction_party_a=round_half_up(100 - abs(party_a_order - proposed.order) / span * 50),
        satisfaction_party_b=round_half_up(100 - abs(party_b_order - proposed.order) / span * 50),
        reasoning=(
            f'For "{clause_title}", this suggestion incorporates the counter-proposal '
            "as a reasonable middle ground between both parties' positions."
        ),
    )


def global_fairness_pass(entries: Sequence[BatchEntry]) -> List[BatchEntry]:
    """
    Nudge a round's suggestions toward the party that is losing overall.

    When the average satisfactions differ by more than FAIRNESS_GAP, every
    entry not yet checked is retargeted 10% of the way toward the
    disadvantaged party's original order. Checked entries are left alone,
    so running the pass again changes nothing.
    """
    entries = list(entries)
    if not entries:
        return entries

    avg_a = sum(e.result.satisfaction_party_a for e in entries) / len(entries)
    avg_b = sum(e.result.satisfaction_party_b for e in entries) / len(entries)
    if abs(avg_a - avg_b) <= FAIRNESS_GAP:
        return entries

    favor_a = avg_a < avg_b
    adjusted = []
    for entry in entries:
        if entry.fairness_checked:
            adjusted.append(entry)
            continue

        current = _find(entry.options, entry.result.suggested_option_id)
        disadvantaged_order = entry.party_a_order if favor_a else entry.party_b_order
        target = round_half_up(current.order * (1 - FAIRNESS_NUDGE) + disadvantaged_order * FAIRNESS_NUDGE)
        nudged = closest_option(entry.options, target)

        result = entry.result
        if nudged.id != current.id:
            count = len(entry.options)
            result = CompromiseResult(
                suggested_option_id=nudged.id,
                satisfaction_party_a=calculate_satisfaction(entry.party_a_order, nudged, count, is_party_a=True),
                satisfaction_party_b=calculate_satisfaction(entry.party_b_order, nudged, count, is_party_a=False),
                reasoning=entry.result.reasoning + FAIRNESS_SUFFIX,
            )
        adjusted.append(replace(entry, result=result, fairness_checked=True))

    return adjusted
