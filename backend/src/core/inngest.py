"""
Inngest client configuration for background task processing.
"""

from typing import Any, Dict, List, Optional, Sequence, Union

import inngest

from backend.src.core.config import settings
from backend.src.core.exceptions import InngestError
from backend.src.core.logging import get_logger

logger = get_logger(__name__)

Trigger = Union[inngest.TriggerCron, inngest.TriggerEvent]

# Initialize Inngest client
inngest_client = inngest.Inngest(
    app_id=settings.INNGEST_APP_ID,
    event_key=settings.INNGEST_EVENT_KEY,
    signing_key=settings.INNGEST_SIGNING_KEY,
    is_production=settings.is_production,
    logger=logger,
)


async def send_event(name: str, data: Dict[str, Any]) -> List[str]:
    """
    Send an event to Inngest for background processing.

    Args:
        name: Event name (e.g., "catalog/sync.requested")
        data: Event payload data

    Returns:
        IDs of the accepted events

    Raises:
        InngestError: If event delivery fails

    Example:
        >>> await send_event(
        ...     name="catalog/sync.requested",
        ...     data={"requested_by": "api"},
        ... )
    """
    try:
        logger.info(
            "Sending Inngest event",
            extra={
                "event_name": name,
                "data_keys": list(data.keys()),
            },
        )

        event_ids = await inngest_client.send(inngest.Event(name=name, data=data))

        logger.info(
            "Inngest event sent successfully",
            extra={
                "event_name": name,
                "event_ids": event_ids,
            },
        )

        return event_ids

    except Exception as e:
        logger.error(
            "Failed to send Inngest event",
            extra={
                "event_name": name,
                "error": str(e),
            },
            exc_info=True,
        )
        raise InngestError(
            message=f"Failed to send event '{name}' to Inngest",
            function_name=name,
        ) from e


def create_inngest_function(
    fn_id: str,
    name: str,
    trigger: Union[Trigger, Sequence[Trigger]],
    retries: Optional[int] = 0,
):
    """
    Decorator to create an Inngest function.

    Args:
        fn_id: Unique function identifier
        name: Human-readable function name
        trigger: Cron and/or event trigger(s)
        retries: Number of retry attempts

    Example:
        >>> @create_inngest_function(
        ...     fn_id="sync-catalog",
        ...     name="Synchronize Catalog",
        ...     trigger=inngest.TriggerCron(cron="0 * * * *"),
        ... )
        ... async def sync_catalog(ctx, step):
        ...     ...
    """
    return inngest_client.create_function(
        fn_id=fn_id,
        name=name,
        trigger=list(trigger) if isinstance(trigger, (list, tuple)) else trigger,
        retries=retries,
    )


# Export commonly used objects
__all__ = [
    "inngest_client",
    "send_event",
    "create_inngest_function",
]
