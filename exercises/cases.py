"""Case exercise — bulk insert followed by bulk delete."""
import logging
from uuid import UUID

from db.models import Case
from db.store import RecordStore

logger = logging.getLogger(__name__)

CASE_STATUS = "New"
CASE_ORIGIN = "Web"


async def create_and_delete_cases(store: RecordStore, account_id: UUID, count: int) -> None:
    """Create `count` Cases under account_id, then delete them.

    A count of zero or less creates nothing; the delete is still issued.
    """
    cases = [
        Case(status=CASE_STATUS, origin=CASE_ORIGIN, account_id=account_id)
        for _ in range(max(count, 0))
    ]
    if cases:
        await store.create(cases)
    await store.delete(cases)
    logger.info("Created and deleted %d case(s) for account %s", len(cases), account_id)
