"""Opportunity exercises — update by id, bulk normalize, create under an account."""
import logging
from datetime import date
from decimal import Decimal
from uuid import UUID

from dateutil.relativedelta import relativedelta

from db.models import Account, Opportunity
from db.store import RecordStore

logger = logging.getLogger(__name__)

NORMALIZED_STAGE = "Qualification"
NORMALIZED_AMOUNT = Decimal("50000")
NORMALIZED_CLOSE_MONTHS = 3

NEW_OPPORTUNITY_STAGE = "Prospecting"
NEW_OPPORTUNITY_CLOSE_MONTHS = 1


async def restage_opportunity(store: RecordStore, opportunity_id: UUID, stage: str) -> None:
    """Move an Opportunity to a new stage. An unknown id raises RecordNotFoundError."""
    opportunity = await store.get(Opportunity, opportunity_id, fields=["stage_name"])
    opportunity.stage_name = stage
    await store.update([opportunity])


async def normalize_opportunities(store: RecordStore, opportunities: list[Opportunity]) -> None:
    """Force stage, amount and close date on every Opportunity, then upsert them.

    Close date is today + NORMALIZED_CLOSE_MONTHS months. The caller's records
    are mutated in place; records without an id are created.
    """
    close_date = date.today() + relativedelta(months=NORMALIZED_CLOSE_MONTHS)
    for opportunity in opportunities:
        opportunity.stage_name = NORMALIZED_STAGE
        opportunity.close_date = close_date
        opportunity.amount = NORMALIZED_AMOUNT

    if opportunities:
        await store.upsert(opportunities)
        logger.info(
            "Normalized %d opportunit(ies) to %s closing %s",
            len(opportunities),
            NORMALIZED_STAGE,
            close_date,
        )


async def create_opportunities_for_account(
    store: RecordStore, account_name: str, opportunity_names: list[str]
) -> None:
    """Create one Opportunity per name under the Account called account_name.

    The Account is upserted by name first, so it is created when missing.
    Names already used by an Opportunity under that Account, and repeats
    within opportunity_names, are skipped. Fewer Opportunities than names
    may therefore be created: ["Dup", "Dup", "Solo"] creates two.
    """
    [account] = await store.upsert([Account(name=account_name)], external_key="name")

    seen: set[str] = set()
    if opportunity_names:
        existing = await store.read(
            Opportunity,
            Opportunity.account_id == account.id,
            Opportunity.name.in_(sorted(set(opportunity_names))),
            fields=["name"],
        )
        seen = {opportunity.name for opportunity in existing}

    close_date = date.today() + relativedelta(months=NEW_OPPORTUNITY_CLOSE_MONTHS)
    new_opportunities = []
    for name in opportunity_names:
        if name in seen:
            continue
        seen.add(name)
        new_opportunities.append(
            Opportunity(
                name=name,
                stage_name=NEW_OPPORTUNITY_STAGE,
                close_date=close_date,
                account_id=account.id,
            )
        )

    if new_opportunities:
        await store.create(new_opportunities)
    logger.info(
        "Created %d opportunit(ies) under account %s (%s); skipped %d existing",
        len(new_opportunities),
        account.id,
        account_name,
        len(opportunity_names) - len(new_opportunities),
    )
