"""Tests for the Contact exercises, including account reconciliation."""
import uuid

import pytest

from db.errors import RecordNotFoundError
from db.models import Account, Contact
from exercises import contacts


@pytest.mark.asyncio
async def test_create_linked_contact(store, stored):
    [account] = await store.create([Account(name="Parent")])
    account_id = account.id

    contact_id = await contacts.create_linked_contact(store, account_id)

    assert isinstance(contact_id, uuid.UUID)
    [row] = await stored(Contact, Contact.id == contact_id)
    assert row.account_id == account_id
    assert row.first_name == contacts.LINKED_CONTACT_FIRST_NAME
    assert row.last_name == contacts.LINKED_CONTACT_LAST_NAME


@pytest.mark.asyncio
async def test_create_linked_contact_returns_none_without_id(store, monkeypatch):
    """A store that hands back records without ids yields None, not an error."""
    async def create_without_ids(records):
        return list(records)

    monkeypatch.setattr(store, "create", create_without_ids)

    assert await contacts.create_linked_contact(store, uuid.uuid4()) is None


@pytest.mark.asyncio
async def test_rename_contact_changes_only_last_name(store, stored):
    [account] = await store.create([Account(name="Employer")])
    account_id = account.id
    [contact] = await store.create([
        Contact(first_name="Ada", last_name="Byron", account_id=account_id)
    ])
    contact_id = contact.id

    await contacts.rename_contact(store, contact_id, "Lovelace")

    [row] = await stored(Contact, Contact.id == contact_id)
    assert row.last_name == "Lovelace"
    assert row.first_name == "Ada"
    assert row.account_id == account_id


@pytest.mark.asyncio
async def test_rename_contact_unknown_id_propagates(store):
    with pytest.raises(RecordNotFoundError):
        await contacts.rename_contact(store, uuid.uuid4(), "Anyone")


@pytest.mark.asyncio
async def test_link_contacts_reuses_existing_and_creates_missing(store, stored):
    [smith] = await store.create([Account(name="Smith")])
    smith_id = smith.id
    batch = [
        Contact(first_name="Anna", last_name="Smith"),
        Contact(first_name="Ben", last_name="Jones"),
        Contact(first_name="Cleo", last_name="Jones"),
    ]

    await contacts.link_contacts_to_accounts(store, batch)

    assert batch[0].account_id == smith_id
    assert batch[1].account_id is not None
    assert batch[1].account_id == batch[2].account_id

    account_ids = {a.name: a.id for a in await stored(Account)}
    assert set(account_ids) == {"Smith", "Jones"}  # one account per distinct last name
    rows = await stored(Contact)
    assert len(rows) == 3
    for row in rows:
        assert row.account_id == account_ids[row.last_name]


@pytest.mark.asyncio
async def test_link_contacts_leaves_contacts_without_last_name_unlinked(store, stored):
    batch = [Contact(first_name="Mononym"), Contact(last_name="Present")]

    await contacts.link_contacts_to_accounts(store, batch)

    assert batch[0].account_id is None
    assert batch[1].account_id is not None
    assert [a.name for a in await stored(Account)] == ["Present"]
    assert len(await stored(Contact)) == 2


@pytest.mark.asyncio
async def test_link_contacts_updates_already_stored_contacts(store, stored):
    stored_contacts = await store.create([Contact(last_name="Rivera"), Contact(last_name="Chen")])
    ids = [c.id for c in stored_contacts]

    await contacts.link_contacts_to_accounts(store, stored_contacts)

    rows = await stored(Contact, Contact.id.in_(ids))
    assert len(rows) == 2
    assert all(r.account_id is not None for r in rows)
    assert len(await stored(Account)) == 2


@pytest.mark.asyncio
async def test_link_contacts_empty_list_writes_nothing(store, stored):
    await contacts.link_contacts_to_accounts(store, [])

    assert await stored(Account) == []
    assert await stored(Contact) == []
