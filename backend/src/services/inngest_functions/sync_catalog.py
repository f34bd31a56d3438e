"""
Inngest function for the recurring catalog sync.

The cron trigger runs the sync on a fixed schedule; the event trigger lets
the API queue an extra run. Both, plus the startup run and the inline API
trigger, go through ``run_catalog_sync``.
"""

from typing import Any, Dict

import inngest

from backend.src.core.config import settings
from backend.src.core.database import AsyncSessionLocal
from backend.src.core.inngest import create_inngest_function
from backend.src.core.logging import get_logger
from backend.src.models.catalog import SyncSummary
from backend.src.services.catalog_sync_service import catalog_sync_service

logger = get_logger(__name__)

CATALOG_SYNC_EVENT = "catalog/sync.requested"
CRON_EVENT = "inngest/scheduled.timer"


async def run_catalog_sync(trigger: str) -> Dict[str, Any]:
    """
    Run one catalog sync in a fresh session.

    Used by the background paths, which have no caller to report to, so
    unexpected failures are logged and returned as an aborted summary.

    Args:
        trigger: What started the run

    Returns:
        JSON-serializable sync summary
    """
    try:
        async with AsyncSessionLocal() as db:
            summary = await catalog_sync_service.sync_catalog(db=db, trigger=trigger)
    except Exception as e:
        logger.error(
            "Error during product sync",
            extra={"trigger": trigger, "error": str(e)},
            exc_info=True,
        )
        summary = SyncSummary(trigger=trigger, status="aborted", error=str(e))

    return summary.model_dump(mode="json")


@create_inngest_function(
    fn_id="sync-catalog",
    name="Synchronize Catalog from Product Feed",
    trigger=[
        inngest.TriggerCron(cron=settings.CATALOG_SYNC_CRON),
        inngest.TriggerEvent(event=CATALOG_SYNC_EVENT),
    ],
    retries=0,
)
async def sync_catalog_function(ctx: inngest.Context, step: inngest.Step) -> Dict[str, Any]:
    """
    Inngest function for scheduled and event-driven catalog syncs.

    Steps:
    1. Fetch the feed and reconcile it against the store
    """
    trigger = "scheduled" if ctx.event.name == CRON_EVENT else "event"

    async def reconcile_catalog() -> Dict[str, Any]:
        return await run_catalog_sync(trigger)

    return await step.run("reconcile-catalog", reconcile_catalog)


# Export
__all__ = ["sync_catalog_function", "run_catalog_sync", "CATALOG_SYNC_EVENT"]
