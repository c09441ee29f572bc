"""Cross-process change feed: poll `messages` by commit sequence, republish locally."""

import asyncio
import logging
from collections.abc import Callable

from oracle.errors import StoreError
from oracle.lib import config

logger = logging.getLogger(__name__)

ERROR_BACKOFF = 1.0


class StorePoller:
    """Publishes rows whose `seq` is past the last one seen.

    `seq` is assigned when the insert commits, so a message whose id was
    generated earlier but committed later is still picked up.
    """

    def __init__(
        self,
        store,
        transport,
        interval: float | None = None,
        on_error: Callable[[Exception], None] | None = None,
    ):
        self.store = store
        self.transport = transport
        self.interval = float(config.get("poll_interval", 0.5) if interval is None else interval)
        self.on_error = on_error
        self.last_seq = 0
        self.running = False

    async def prime(self) -> None:
        """Start after the newest existing message so history is not replayed."""
        rows = await self.store.select("messages", order_by="seq", desc=True, limit=1)
        self.last_seq = rows[0]["seq"] if rows else 0

    async def poll_once(self) -> int:
        rows = await self.store.select("messages", {"seq__gt": self.last_seq}, order_by="seq")
        for row in rows:
            self.last_seq = row["seq"]
            self.transport.publish("messages", row)
        return len(rows)

    async def run(self) -> None:
        self.running = True
        while self.running:
            try:
                await self.poll_once()
                await asyncio.sleep(self.interval)
            except StoreError as e:
                logger.warning(f"Message poll failed: {e}")
                if self.on_error is not None:
                    self.on_error(e)
                await asyncio.sleep(ERROR_BACKOFF)

    def stop(self) -> None:
        self.running = False
