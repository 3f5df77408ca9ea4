"""Lead exercise — bulk insert followed by bulk delete."""
import logging

from db.models import Lead
from db.store import RecordStore

logger = logging.getLogger(__name__)

LEAD_COMPANY = "Sample Company"
LEAD_EMAIL = "lead@example.com"


async def create_and_delete_leads(store: RecordStore, names: list[str]) -> None:
    """Create one Lead per name, then delete the same batch.

    The delete is issued even when nothing was created; deleting an empty
    batch is a no-op.
    """
    leads = [Lead(last_name=name, company=LEAD_COMPANY, email=LEAD_EMAIL) for name in names]
    if leads:
        await store.create(leads)
    await store.delete(leads)
    logger.info("Created and deleted %d lead(s)", len(leads))
