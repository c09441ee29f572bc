"""Direct-message inbox and read receipts."""

import logging
from collections.abc import Iterable
from datetime import datetime

from oracle.lib.store import from_row
from oracle.lib.uuid7 import timestamp
from oracle.models import Actor, Message

logger = logging.getLogger(__name__)


async def messages_for(store, actor: Actor, include_read: bool = False) -> list[Message]:
    """Messages addressed to ``actor`` directly, oldest first."""
    where = {"receiver_id": actor.id}
    if not include_read:
        where["read_at__isnull"] = True
    rows = await store.select("messages", where, order_by="seq")
    return [from_row(row, Message) for row in rows]


async def unread(store, actor: Actor) -> list[Message]:
    return await messages_for(store, actor)


async def mark_read(store, message_ids: Iterable[str], now: datetime | None = None) -> list[str]:
    """Set ``read_at`` on messages still unread. Already-read messages keep their receipt."""
    read_at = timestamp(now)
    marked = []
    for message_id in message_ids:
        changed = await store.update_where(
            "messages", {"id": message_id, "read_at__isnull": True}, {"read_at": read_at}
        )
        if changed:
            marked.append(message_id)
    logger.debug(f"Marked {len(marked)} messages read")
    return marked
