"""Account exercises — single insert, conditional update, upsert by name."""
import logging
from typing import Optional
from uuid import UUID

from db.models import Account
from db.store import RecordStore

logger = logging.getLogger(__name__)

BASIC_ACCOUNT_NAME = "Acme Corporation"
BASIC_ACCOUNT_INDUSTRY = "Technology"
BASIC_ACCOUNT_RATING = "Warm"

DESCRIPTION_NEW = "New Account"
DESCRIPTION_UPDATED = "Updated Account"


async def create_basic_account(store: RecordStore) -> Optional[UUID]:
    """Insert a fixed Account and return its id, or None if none was assigned."""
    account = Account(
        name=BASIC_ACCOUNT_NAME,
        industry=BASIC_ACCOUNT_INDUSTRY,
        rating=BASIC_ACCOUNT_RATING,
    )
    await store.create([account])
    if account.id is None:
        return None
    logger.info("Created account %s (%s)", account.id, account.name)
    return account.id


async def create_named_account(store: RecordStore, name: str, industry: str) -> None:
    """Insert one Account with the given name and industry."""
    account = Account(name=name, industry=industry)
    await store.create([account])
    logger.info("Created account %s (%s, %s)", account.id, name, industry)


async def update_account_fields(
    store: RecordStore, account_id: UUID, name: str, industry: str
) -> None:
    """Rename an Account and change its industry.

    An unknown id is not an error: there is simply nothing to update.
    """
    accounts = await store.read(
        Account, Account.id == account_id, fields=["name", "industry"]
    )
    if not accounts:
        logger.info("No account %s to update", account_id)
        return

    for account in accounts:
        account.name = name
        account.industry = industry
    await store.update(accounts)


async def upsert_account_by_name(store: RecordStore, name: str) -> Account:
    """Update the description of the Account with this name, or create it.

    A match gets DESCRIPTION_UPDATED on the stored record itself; otherwise a
    new Account named `name` is built with DESCRIPTION_NEW.
    """
    matches = await store.read(Account, Account.name == name, fields=["name", "description"])
    if matches:
        account = matches[0]
        account.description = DESCRIPTION_UPDATED
    else:
        account = Account(name=name, description=DESCRIPTION_NEW)

    [account] = await store.upsert([account])
    logger.info(
        "Upserted account %s (%s): %s", account.id, name, account.description
    )
    return account
