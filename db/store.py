"""Record store — the create / update / upsert / delete / read verbs.

Exercises never touch a session directly; they receive a RecordStore and
issue verbs against it. SqlRecordStore implements the protocol over an
AsyncSession, so the same exercise runs on PostgreSQL or in-memory SQLite.
"""
import logging
from collections import defaultdict
from contextlib import contextmanager
from typing import Any, Iterator, Optional, Protocol, Sequence, TypeVar
from uuid import UUID

from sqlalchemy import delete as sa_delete
from sqlalchemy import inspect, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import load_only
from sqlalchemy.orm.exc import StaleDataError

from db.errors import RecordNotFoundError, StoreError, ValidationError
from db.models import Base

logger = logging.getLogger(__name__)

RecordT = TypeVar("RecordT", bound=Base)


class RecordStore(Protocol):
    """Capability set every exercise depends on."""

    async def create(self, records: Sequence[RecordT]) -> list[RecordT]: ...

    async def update(self, records: Sequence[RecordT]) -> list[RecordT]: ...

    async def upsert(
        self, records: Sequence[RecordT], external_key: Optional[str] = None
    ) -> list[RecordT]: ...

    async def delete(self, records: Sequence[Base]) -> None: ...

    async def read(
        self, model: type[RecordT], *criteria: Any, fields: Optional[Sequence[str]] = None
    ) -> list[RecordT]: ...

    async def get(
        self, model: type[RecordT], record_id: UUID, fields: Optional[Sequence[str]] = None
    ) -> RecordT: ...


@contextmanager
def _translate_errors(verb: str) -> Iterator[None]:
    """Re-raise SQLAlchemy failures as StoreError subclasses."""
    try:
        yield
    except StoreError:
        raise
    except StaleDataError as exc:
        raise RecordNotFoundError(f"{verb}: record no longer exists ({exc})") from exc
    except IntegrityError as exc:
        raise ValidationError(f"{verb}: {exc.orig}") from exc
    except SQLAlchemyError as exc:
        raise StoreError(f"{verb}: {exc}") from exc


def _column(model: type[Base], field: str):
    mapper = inspect(model)
    if field not in mapper.columns:
        raise ValidationError(f"{model.__name__} has no field {field!r}")
    return getattr(model, field)


class SqlRecordStore:
    """RecordStore backed by a SQLAlchemy AsyncSession.

    The store flushes after each verb so identifiers and constraint errors
    surface immediately; committing is left to the session owner (get_db).
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    # ------------------------------------------------------------------
    # Write verbs
    # ------------------------------------------------------------------

    async def create(self, records: Sequence[RecordT]) -> list[RecordT]:
        """Insert new records and return them with identifiers assigned."""
        records = list(records)
        for record in records:
            if record.id is not None or inspect(record).persistent:
                raise ValidationError(
                    f"create: {type(record).__name__} {record.id} already has an id; use update or upsert"
                )

        with _translate_errors("create"):
            self.session.add_all(records)
            await self.session.flush()

        missing = [r for r in records if r.id is None]
        if missing:
            raise StoreError(f"create: {len(missing)} record(s) were not assigned an id")
        logger.debug("create: %d record(s)", len(records))
        return records

    async def update(self, records: Sequence[RecordT]) -> list[RecordT]:
        """Write pending changes on existing records, matched by identifier.

        Records loaded through this store are updated in place. Records built
        elsewhere with an id are merged; the returned list holds the
        session-bound instances.
        """
        with _translate_errors("update"):
            attached = [await self._attach(record) for record in records]
            await self.session.flush()
        logger.debug("update: %d record(s)", len(attached))
        return attached

    async def upsert(
        self, records: Sequence[RecordT], external_key: Optional[str] = None
    ) -> list[RecordT]:
        """Create records without an id, update records with one.

        With external_key, records lacking an id are first matched against
        stored rows on that column. A match adopts the stored row's id (set
        on the caller's record too) and receives the record's non-null
        values; unmatched records are created.
        """
        records = list(records)
        matches = await self._match_external_key(records, external_key) if external_key else {}

        result: list[RecordT] = []
        created = updated = 0
        with _translate_errors("upsert"):
            for record in records:
                if record.id is None and external_key:
                    existing = matches.get((type(record), getattr(record, external_key)))
                    if existing is not None:
                        self._copy_values(record, existing)
                        record.id = existing.id
                        result.append(existing)
                        updated += 1
                        continue
                if record.id is None:
                    self.session.add(record)
                    result.append(record)
                    created += 1
                else:
                    result.append(await self._attach(record))
                    updated += 1
            await self.session.flush()

        logger.debug("upsert: %d created, %d updated", created, updated)
        return result

    async def delete(self, records: Sequence[Base]) -> None:
        """Delete records by identifier. An empty sequence is a no-op."""
        by_model: dict[type[Base], set[UUID]] = defaultdict(set)
        for record in records:
            if record.id is None:
                raise RecordNotFoundError(
                    f"delete: {type(record).__name__} has no id; it was never created"
                )
            by_model[type(record)].add(record.id)

        with _translate_errors("delete"):
            for model, ids in by_model.items():
                result = await self.session.execute(
                    sa_delete(model).where(model.id.in_(list(ids))).returning(model.id)
                )
                deleted = result.fetchall()
                if len(deleted) != len(ids):
                    raise RecordNotFoundError(
                        f"delete: {len(ids) - len(deleted)} {model.__name__} record(s) not found"
                    )
            await self.session.flush()
        logger.debug("delete: %d record(s)", sum(len(ids) for ids in by_model.values()))

    # ------------------------------------------------------------------
    # Read verbs
    # ------------------------------------------------------------------

    async def read(
        self,
        model: type[RecordT],
        *criteria: Any,
        fields: Optional[Sequence[str]] = None,
    ) -> list[RecordT]:
        """Return records of model matching every criterion.

        When fields is given only those columns (plus the id) are loaded.
        """
        stmt = select(model).where(*criteria)
        if fields:
            stmt = stmt.options(load_only(*(_column(model, f) for f in fields)))
        with _translate_errors("read"):
            result = await self.session.execute(stmt)
            return list(result.scalars().all())

    async def get(
        self,
        model: type[RecordT],
        record_id: UUID,
        fields: Optional[Sequence[str]] = None,
    ) -> RecordT:
        """Return the single record with this id, or raise RecordNotFoundError."""
        rows = await self.read(model, model.id == record_id, fields=fields)
        if not rows:
            raise RecordNotFoundError(f"{model.__name__} {record_id} not found")
        return rows[0]

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    async def _attach(self, record: RecordT) -> RecordT:
        state = inspect(record)
        if state.persistent and state.session is self.session.sync_session:
            return record
        if record.id is None:
            raise RecordNotFoundError(
                f"update: {type(record).__name__} has no id; it was never created"
            )
        if await self.session.get(type(record), record.id) is None:
            raise RecordNotFoundError(f"update: {type(record).__name__} {record.id} not found")
        return await self.session.merge(record)

    async def _match_external_key(
        self, records: list[RecordT], external_key: str
    ) -> dict[tuple[type[Base], Any], Base]:
        keys: dict[type[Base], set[Any]] = defaultdict(set)
        for record in records:
            column = _column(type(record), external_key)
            if record.id is not None:
                continue
            value = getattr(record, column.key)
            if value is None:
                raise ValidationError(
                    f"upsert: {type(record).__name__} has no value for external key {external_key!r}"
                )
            if value in keys[type(record)]:
                raise ValidationError(
                    f"upsert: duplicate external key {external_key}={value!r} in one batch"
                )
            keys[type(record)].add(value)

        matches: dict[tuple[type[Base], Any], Base] = {}
        for model, values in keys.items():
            column = _column(model, external_key)
            for row in await self.read(model, column.in_(list(values))):
                # First stored row wins when the key is not unique in the store
                matches.setdefault((model, getattr(row, external_key)), row)
        return matches

    @staticmethod
    def _copy_values(source: Base, target: Base) -> None:
        for column in inspect(type(source)).columns:
            if column.key == "id" or column.key not in source.__dict__:
                continue
            value = source.__dict__[column.key]
            if value is not None:
                setattr(target, column.key, value)
