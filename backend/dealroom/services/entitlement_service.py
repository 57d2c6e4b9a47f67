"""Entitlement check consulted when a deal is created."""

import logging

from dealroom.config import settings
from dealroom.core.exceptions import ForbiddenError
from dealroom.models.catalog import ContractTemplate
from dealroom.models.user import User

logger = logging.getLogger(__name__)

NOT_ENTITLED_MESSAGE = (
    "This contract skill has not been enabled on your account. "
    "Please contact us to get access."
)


def is_entitled(user: User, template: ContractTemplate) -> bool:
    """Unlicensed templates are open to everyone."""
    if not template.is_licensed or not settings.ENFORCE_ENTITLEMENTS:
        return True
    return template.contract_type in (user.entitlements or [])


def check_entitlement(user: User, template: ContractTemplate) -> None:
    """
    Raises:
        ForbiddenError: If the user may not open deals for this template
    """
    if not is_entitled(user, template):
        logger.warning(f"User {user.id} is not entitled to {template.contract_type}")
        raise ForbiddenError(NOT_ENTITLED_MESSAGE, code="NOT_ENTITLED")
