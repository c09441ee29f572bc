"""In-process realtime broker: insert bindings per collection, presence per topic."""

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

from oracle.models import PresenceRecord

logger = logging.getLogger(__name__)

SYNC = "sync"
JOIN = "join"
LEAVE = "leave"


@dataclass(frozen=True)
class ChangeEvent:
    collection: str
    record: dict[str, Any]


@dataclass(frozen=True)
class PresenceEvent:
    kind: str
    topic: str
    records: tuple[PresenceRecord, ...] = ()
    state: dict[str, PresenceRecord] = field(default_factory=dict)


InsertCallback = Callable[[ChangeEvent], None]
PresenceCallback = Callable[[PresenceEvent], None]


def _remover(items: list, item) -> Callable[[], None]:
    def remove() -> None:
        if item in items:
            items.remove(item)

    return remove


class LocalTransport:
    """Delivers each published insert to its bindings in publish order.

    A failing callback is logged and does not stop delivery to the others.
    """

    def __init__(self):
        self._bindings: dict[str, list[InsertCallback]] = {}
        # topic -> ref -> record
        self._presence: dict[str, dict[str, PresenceRecord]] = {}
        self._presence_listeners: dict[str, list[PresenceCallback]] = {}

    def on_insert(self, collection: str, callback: InsertCallback) -> Callable[[], None]:
        bindings = self._bindings.setdefault(collection, [])
        bindings.append(callback)
        return _remover(bindings, callback)

    def publish(self, collection: str, record: dict[str, Any]) -> None:
        event = ChangeEvent(collection, dict(record))
        for callback in list(self._bindings.get(collection, [])):
            try:
                callback(event)
            except Exception:
                logger.exception(f"Insert callback failed for {collection}")

    def attach(self, store) -> Callable[[], None]:
        """Feed the store's insert change feed into this broker."""
        return store.listen(self.publish)

    def on_presence(self, topic: str, callback: PresenceCallback) -> Callable[[], None]:
        listeners = self._presence_listeners.setdefault(topic, [])
        listeners.append(callback)
        return _remover(listeners, callback)

    def presence_state(self, topic: str) -> dict[str, PresenceRecord]:
        return dict(self._presence.get(topic, {}))

    def track(self, topic: str, record: PresenceRecord) -> None:
        self._presence.setdefault(topic, {})[record.ref] = record
        self._emit(PresenceEvent(JOIN, topic, (record,)))
        self._emit(PresenceEvent(SYNC, topic, state=self.presence_state(topic)))

    def untrack(self, topic: str, ref: str) -> None:
        record = self._presence.get(topic, {}).pop(ref, None)
        if record is None:
            return
        self._emit(PresenceEvent(LEAVE, topic, (record,)))
        self._emit(PresenceEvent(SYNC, topic, state=self.presence_state(topic)))

    def _emit(self, event: PresenceEvent) -> None:
        for callback in list(self._presence_listeners.get(event.topic, [])):
            try:
                callback(event)
            except Exception:
                logger.exception(f"Presence callback failed for {event.topic}")
