"""Business logic services package."""

from dealroom.services.compromise_engine import (
    calculate_stake,
    calculate_compromise,
    calculate_satisfaction,
    global_fairness_pass,
)
from dealroom.services.deal_service import (
    create_deal,
    list_deals,
    get_deal,
    rename_deal,
    cancel_deal,
    get_progress,
    submit_all,
)
from dealroom.services.selection_service import upsert_selection, bulk_save
from dealroom.services.negotiation_service import negotiation_manager

__all__ = [
    # Compromise engine
    "calculate_stake",
    "calculate_compromise",
    "calculate_satisfaction",
    "global_fairness_pass",
    # Deal service
    "create_deal",
    "list_deals",
    "get_deal",
    "rename_deal",
    "cancel_deal",
    "get_progress",
    "submit_all",
    # Selection service
    "upsert_selection",
    "bulk_save",
    # Negotiation rounds
    "negotiation_manager",
]
