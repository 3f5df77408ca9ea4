"""Tests for SqlRecordStore verbs and error translation."""
import uuid
from datetime import date

import pytest

from db.errors import RecordNotFoundError, StoreError, ValidationError
from db.models import Account, Contact, Lead, Opportunity


@pytest.mark.asyncio
async def test_create_assigns_ids(store, stored):
    accounts = [Account(name="Alpha"), Account(name="Beta")]
    returned = await store.create(accounts)

    assert returned == accounts
    assert all(isinstance(a.id, uuid.UUID) for a in accounts)
    assert accounts[0].id != accounts[1].id
    rows = await stored(Account)
    assert sorted(r.name for r in rows) == ["Alpha", "Beta"]


@pytest.mark.asyncio
async def test_create_rejects_record_with_id(store):
    with pytest.raises(ValidationError, match="already has an id"):
        await store.create([Account(id=uuid.uuid4(), name="Preset")])


@pytest.mark.asyncio
async def test_create_missing_required_field_raises_validation_error(store):
    with pytest.raises(ValidationError) as excinfo:
        await store.create([Lead(last_name="Nobody")])  # company is required
    assert excinfo.value.__cause__ is not None


@pytest.mark.asyncio
async def test_check_constraint_violation_is_validation_error(store):
    opportunity = Opportunity(name="Bad", stage_name="Not A Stage", close_date=date.today())
    with pytest.raises(ValidationError):
        await store.create([opportunity])


def test_store_errors_share_a_base_class():
    assert issubclass(ValidationError, StoreError)
    assert issubclass(RecordNotFoundError, StoreError)


@pytest.mark.asyncio
async def test_update_writes_pending_changes(store, stored):
    [account] = await store.create([Account(name="Before")])
    account_id = account.id

    account.name = "After"
    await store.update([account])

    [row] = await stored(Account, Account.id == account_id)
    assert row.name == "After"


@pytest.mark.asyncio
async def test_update_merges_record_built_with_id(store, stored):
    [account] = await store.create([Account(name="Original", industry="Retail")])
    account_id = account.id

    [merged] = await store.update([Account(id=account_id, industry="Banking")])

    assert merged.id == account_id
    [row] = await stored(Account, Account.id == account_id)
    assert row.industry == "Banking"
    assert row.name == "Original"


@pytest.mark.asyncio
async def test_update_unknown_id_raises_not_found(store):
    with pytest.raises(RecordNotFoundError):
        await store.update([Account(id=uuid.uuid4(), name="Ghost")])


@pytest.mark.asyncio
async def test_update_record_without_id_raises_not_found(store):
    with pytest.raises(RecordNotFoundError, match="never created"):
        await store.update([Account(name="Never saved")])


@pytest.mark.asyncio
async def test_upsert_creates_and_updates(store, stored):
    [existing] = await store.create([Account(name="Existing")])
    existing_id = existing.id
    existing.description = "touched"
    fresh = Account(name="Fresh")

    await store.upsert([existing, fresh])

    assert fresh.id is not None
    rows = {r.name: r for r in await stored(Account)}
    assert set(rows) == {"Existing", "Fresh"}
    assert rows["Existing"].id == existing_id
    assert rows["Existing"].description == "touched"


@pytest.mark.asyncio
async def test_upsert_by_external_key_adopts_existing_id(store, stored):
    [existing] = await store.create([Account(name="Keyed", industry="Energy")])
    existing_id = existing.id

    incoming = Account(name="Keyed", rating="Hot")
    [result] = await store.upsert([incoming], external_key="name")

    assert result.id == existing_id
    assert incoming.id == existing_id
    rows = await stored(Account)
    assert len(rows) == 1
    assert rows[0].rating == "Hot"
    assert rows[0].industry == "Energy"  # null values on the incoming record are not copied


@pytest.mark.asyncio
async def test_upsert_by_external_key_creates_when_unmatched(store, stored):
    [result] = await store.upsert([Account(name="Brand New")], external_key="name")

    assert result.id is not None
    assert len(await stored(Account, Account.name == "Brand New")) == 1


@pytest.mark.asyncio
async def test_upsert_rejects_duplicate_external_key_in_batch(store):
    with pytest.raises(ValidationError, match="duplicate external key"):
        await store.upsert([Account(name="Twin"), Account(name="Twin")], external_key="name")


@pytest.mark.asyncio
async def test_upsert_rejects_unknown_external_key(store):
    with pytest.raises(ValidationError, match="no field"):
        await store.upsert([Account(name="X")], external_key="not_a_column")


@pytest.mark.asyncio
async def test_delete_removes_records(store, stored):
    leads = await store.create([
        Lead(last_name="One", company="Co"),
        Lead(last_name="Two", company="Co"),
    ])

    await store.delete(leads)

    assert await stored(Lead) == []


@pytest.mark.asyncio
async def test_delete_empty_is_noop(store):
    await store.delete([])


@pytest.mark.asyncio
async def test_delete_unknown_id_raises_not_found(store):
    with pytest.raises(RecordNotFoundError):
        await store.delete([Lead(id=uuid.uuid4(), last_name="Ghost", company="Co")])


@pytest.mark.asyncio
async def test_delete_record_without_id_raises_not_found(store):
    with pytest.raises(RecordNotFoundError, match="never created"):
        await store.delete([Lead(last_name="Unsaved", company="Co")])


@pytest.mark.asyncio
async def test_read_filters_and_limits_fields(store, session):
    await store.create([
        Account(name="Match", industry="Media"),
        Account(name="Other", industry="Media"),
    ])
    session.expire_all()

    rows = await store.read(Account, Account.name == "Match", fields=["name"])

    assert len(rows) == 1
    assert rows[0].name == "Match"
    assert "industry" not in rows[0].__dict__


@pytest.mark.asyncio
async def test_read_unknown_field_raises_validation_error(store):
    with pytest.raises(ValidationError):
        await store.read(Account, fields=["no_such_field"])


@pytest.mark.asyncio
async def test_get_returns_record(store):
    [contact] = await store.create([Contact(last_name="Lookup")])

    found = await store.get(Contact, contact.id)

    assert found.last_name == "Lookup"


@pytest.mark.asyncio
async def test_get_missing_raises_not_found(store):
    with pytest.raises(RecordNotFoundError):
        await store.get(Contact, uuid.uuid4())
