"""Filtered message subscriptions over a transport."""

import asyncio
import logging
from collections.abc import AsyncIterator, Callable
from dataclasses import dataclass
from typing import Any

from oracle.lib.store import from_row
from oracle.models import Actor, Message, Role

logger = logging.getLogger(__name__)

_CLOSED = object()


@dataclass(frozen=True)
class MessageFilter:
    """Conjunctive predicate over message records. Unset fields match anything."""

    role: str | None = None
    team_id: str | None = None
    receiver_id: str | None = None
    broadcast_only: bool = False

    def matches(self, record: dict[str, Any]) -> bool:
        if self.role is not None and record.get("receiver_role") != self.role:
            return False
        if self.team_id is not None and record.get("team_id") != self.team_id:
            return False
        if self.receiver_id is not None and record.get("receiver_id") != self.receiver_id:
            return False
        if self.broadcast_only and record.get("receiver_id") is not None:
            return False
        return True

    @classmethod
    def for_actor(cls, actor: Actor) -> list["MessageFilter"]:
        """Direct messages, role broadcasts and team chat addressed to ``actor``."""
        filters = [cls(receiver_id=actor.id)]
        role = Role.parse(actor.role)
        if role is not None:
            filters.append(cls(role=role.value, broadcast_only=True))
        if actor.team_id:
            filters.append(cls(role=Role.BUILDER.value, team_id=actor.team_id, broadcast_only=True))
        return filters


class Subscription:
    """Matching inserts go to ``on_event`` when given, otherwise to ``events()``."""

    def __init__(self, transport, message_filter: MessageFilter, on_event: Callable[[Message], None] | None = None):
        self.filter = message_filter
        self._on_event = on_event
        self._queue: asyncio.Queue = asyncio.Queue()
        self.active = True
        self._unbind = transport.on_insert("messages", self._deliver)

    def _deliver(self, event) -> None:
        if not self.active or not self.filter.matches(event.record):
            return
        message = from_row(event.record, Message)
        if self._on_event is not None:
            self._on_event(message)
        else:
            self._queue.put_nowait(message)

    async def events(self) -> AsyncIterator[Message]:
        while True:
            item = await self._queue.get()
            if item is _CLOSED:
                return
            yield item

    def release(self) -> None:
        if not self.active:
            return
        self.active = False
        self._unbind()
        self._queue.put_nowait(_CLOSED)

    def __enter__(self) -> "Subscription":
        return self

    def __exit__(self, *exc) -> None:
        self.release()


def subscribe(
    transport, message_filter: MessageFilter, on_event: Callable[[Message], None] | None = None
) -> Subscription:
    return Subscription(transport, message_filter, on_event)
