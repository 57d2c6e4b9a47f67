"""Clause catalog: contract templates with ordered clauses and options."""

import logging
from typing import List

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from dealroom.core.exceptions import BadRequestError, NotFoundError
from dealroom.models.catalog import ClauseOption, ClauseTemplate, ContractTemplate
from dealroom.schemas.catalog import ContractTemplateCreate

logger = logging.getLogger(__name__)


async def import_template(db: AsyncSession, data: ContractTemplateCreate) -> ContractTemplate:
    """
    Add a contract template and its clause catalog.

    Raises:
        BadRequestError: If the contract type exists or clause keys repeat
    """
    result = await db.execute(
        select(ContractTemplate).where(ContractTemplate.contract_type == data.contract_type)
    )
    if result.scalar_one_or_none():
        raise BadRequestError(f"Contract template '{data.contract_type}' already exists")

    keys = [c.clause_key for c in data.clauses]
    if len(set(keys)) != len(keys):
        raise BadRequestError("Clause keys must be unique within a template")

    template = ContractTemplate(
        contract_type=data.contract_type,
        display_name=data.display_name,
        description=data.description,
        version=data.version,
        is_licensed=data.is_licensed,
    )
    for clause_data in sorted(data.clauses, key=lambda c: c.order):
        clause = ClauseTemplate(
            clause_key=clause_data.clause_key,
            title=clause_data.title,
            category=clause_data.category,
            order=clause_data.order,
            plain_description=clause_data.plain_description,
            legal_context=clause_data.legal_context,
            is_required=clause_data.is_required,
        )
        for option_data in sorted(clause_data.options, key=lambda o: o.order):
            clause.options.append(ClauseOption(**option_data.model_dump()))
        template.clauses.append(clause)

    db.add(template)
    await db.commit()

    logger.info(f"Imported contract template {template.contract_type} with {len(template.clauses)} clauses")
    return await get_template(db, template.contract_type)


async def get_template(db: AsyncSession, contract_type: str) -> ContractTemplate:
    """
    Ordered clauses with ordered options for an active contract type.

    Raises:
        NotFoundError: If no active template has this contract type
    """
    result = await db.execute(
        select(ContractTemplate)
        .where(
            ContractTemplate.contract_type == contract_type,
            ContractTemplate.is_active.is_(True),
        )
        .execution_options(populate_existing=True)
    )
    template = result.scalar_one_or_none()
    if not template:
        raise NotFoundError("Contract template not found")
    return template


async def list_templates(db: AsyncSession) -> List[ContractTemplate]:
    result = await db.execute(
        select(ContractTemplate)
        .where(ContractTemplate.is_active.is_(True))
        .order_by(ContractTemplate.display_name)
    )
    return list(result.scalars().all())
