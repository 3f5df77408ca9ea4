"""Contact exercises — linked insert, update by id, account reconciliation."""
import logging
from typing import Optional
from uuid import UUID

from db.models import Account, Contact
from db.store import RecordStore

logger = logging.getLogger(__name__)

LINKED_CONTACT_FIRST_NAME = "John"
LINKED_CONTACT_LAST_NAME = "Doe"


async def create_linked_contact(store: RecordStore, account_id: UUID) -> Optional[UUID]:
    """Insert a fixed Contact under account_id and return its id (or None)."""
    contact = Contact(
        first_name=LINKED_CONTACT_FIRST_NAME,
        last_name=LINKED_CONTACT_LAST_NAME,
        account_id=account_id,
    )
    await store.create([contact])
    if contact.id is None:
        return None
    logger.info("Created contact %s under account %s", contact.id, account_id)
    return contact.id


async def rename_contact(store: RecordStore, contact_id: UUID, last_name: str) -> None:
    """Change a Contact's last name. An unknown id raises RecordNotFoundError."""
    contact = await store.get(Contact, contact_id, fields=["last_name"])
    contact.last_name = last_name
    await store.update([contact])


async def link_contacts_to_accounts(store: RecordStore, contacts: list[Contact]) -> None:
    """Point every Contact at the Account whose name equals its last name.

    Missing Accounts are created, one per distinct last name. Contacts
    without a last name are saved unlinked. The caller's Contacts are
    mutated in place and upserted.
    """
    last_names = {c.last_name for c in contacts if c.last_name is not None}

    accounts_by_name: dict[str, Account] = {}
    if last_names:
        existing = await store.read(Account, Account.name.in_(sorted(last_names)), fields=["name"])
        for account in existing:
            accounts_by_name.setdefault(account.name, account)

    new_accounts = [
        Account(name=name) for name in sorted(last_names) if name not in accounts_by_name
    ]
    if new_accounts:
        await store.create(new_accounts)
        for account in new_accounts:
            accounts_by_name[account.name] = account
        logger.info("Created %d account(s) for unmatched last names", len(new_accounts))

    for contact in contacts:
        if contact.last_name is not None:
            contact.account_id = accounts_by_name[contact.last_name].id

    if contacts:
        await store.upsert(contacts)
    logger.info(
        "Linked %d contact(s) across %d account(s)",
        sum(1 for c in contacts if c.last_name is not None),
        len(last_names),
    )
