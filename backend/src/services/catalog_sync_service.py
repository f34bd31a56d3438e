"""
Catalog synchronization from the external product feed.

A run merges one feed snapshot into the store under a fixed capacity
ceiling:

1. Free slots are computed once from the pre-run count.
2. At most ``ceiling`` feed entries are examined.
3. Known external IDs are replaced in place (keeping ID and created_at);
   unknown ones are inserted while slots remain, otherwise skipped.
4. The store is pruned back to ``ceiling`` unconditionally.

Runs are not serialized against each other. Two overlapping runs can both
see free slots and overshoot the ceiling; the trailing prune of the next
run brings the catalog back under it.
"""

from typing import Any, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from backend.src.core.config import settings
from backend.src.core.exceptions import ExternalServiceError
from backend.src.core.logging import get_logger
from backend.src.models.catalog import SyncSummary
from backend.src.services.feed_client import FeedClient, feed_client
from backend.src.services.feed_parser import extract_product_nodes, parse_feed_product
from backend.src.services.product_store import ProductStore, product_store

logger = get_logger(__name__)


class CatalogSyncService:
    """Service reconciling the catalog against the product feed."""

    def __init__(
        self,
        store: Optional[ProductStore] = None,
        client: Optional[FeedClient] = None,
        ceiling: Optional[int] = None,
    ):
        self.store = store or product_store
        self.client = client or feed_client
        self.ceiling = settings.CATALOG_MAX_PRODUCTS if ceiling is None else ceiling

    async def reconcile(
        self,
        feed_snapshot: Any,
        db: AsyncSession,
        ceiling: Optional[int] = None,
        trigger: str = "manual",
    ) -> SyncSummary:
        """
        Merge a decoded feed document into the store.

        Args:
            feed_snapshot: Decoded feed JSON (``{"products": [...]}``)
            db: Database session
            ceiling: Capacity ceiling, defaults to the configured maximum
            trigger: What started the run (for logs and the summary)

        Returns:
            SyncSummary; ``status`` is "aborted" when the document has no
            ``products`` array
        """
        ceiling = self.ceiling if ceiling is None else ceiling
        summary = SyncSummary(trigger=trigger)

        product_nodes = extract_product_nodes(feed_snapshot)
        if product_nodes is None:
            logger.error(
                "Invalid response format - products array not found",
                extra={"trigger": trigger},
            )
            return summary.model_copy(
                update={"status": "aborted", "error": "products array not found"}
            )

        initial_count = await self.store.count(db)
        available_slots = max(0, ceiling - initial_count)

        processed = inserted = updated = skipped_invalid = skipped_by_limit = 0

        for product_node in product_nodes:
            if processed >= ceiling:
                break
            processed += 1

            try:
                candidate = parse_feed_product(product_node)
                if candidate is None:
                    skipped_invalid += 1
                    continue

                existing = await self.store.find_by_external_id(
                    candidate.shopify_product_id, db
                )
                if existing is not None:
                    replacement = candidate.model_copy(
                        update={"id": existing.id, "created_at": existing.created_at}
                    )
                    await self.store.upsert(replacement, db)
                    updated += 1
                elif available_slots > 0:
                    await self.store.upsert(candidate, db)
                    available_slots -= 1
                    inserted += 1
                else:
                    skipped_by_limit += 1

            except Exception as e:
                logger.warning(
                    "Failed to process product node",
                    extra={"trigger": trigger, "error": str(e)},
                )
                await db.rollback()
                skipped_invalid += 1

        removed = await self.store.prune_excess(ceiling, db)
        final_count = await self.store.count(db)

        summary = summary.model_copy(
            update={
                "processed": processed,
                "inserted": inserted,
                "updated": updated,
                "skipped_invalid": skipped_invalid,
                "skipped_by_limit": skipped_by_limit,
                "pruned": removed,
                "total": final_count,
            }
        )

        logger.info(
            "Product sync completed",
            extra=summary.model_dump(exclude={"error"}),
        )
        return summary

    async def sync_catalog(self, db: AsyncSession, trigger: str = "manual") -> SyncSummary:
        """
        Fetch the feed and reconcile it.

        Fetch and decode failures abort the run and are reported in the
        summary rather than raised.

        Args:
            db: Database session
            trigger: What started the run ("startup", "scheduled", "event", "manual")

        Returns:
            SyncSummary for the run
        """
        logger.info(
            "Starting product sync from feed",
            extra={"trigger": trigger, "feed_url": self.client.feed_url},
        )

        try:
            snapshot = await self.client.fetch_snapshot()
        except ExternalServiceError as e:
            logger.error(
                "Product feed fetch failed",
                extra={"trigger": trigger, "error": e.message, "error_code": e.error_code},
            )
            return SyncSummary(trigger=trigger, status="aborted", error=e.message)

        return await self.reconcile(snapshot, db, trigger=trigger)


# Global instance
catalog_sync_service = CatalogSyncService()
