"""Ephemeral presence: who is online on a topic. Never persisted."""

from collections.abc import Callable

from oracle.lib.uuid7 import timestamp, uuid7
from oracle.models import Actor, PresenceRecord, Role

from .transport import JOIN, LEAVE, SYNC, PresenceEvent

DEFAULT_TOPIC = "oracle"


class PresenceHandle:
    """Tracks ``actor`` on ``topic`` and keeps a local roster in step with join/leave/sync.

    Each handle is tracked under its own ref. An actor with two open sessions
    shows up once in ``roster`` and stays online until both are released.
    ``on_change`` only fires when an actor comes online or goes offline.
    """

    def __init__(
        self,
        transport,
        actor: Actor,
        topic: str = DEFAULT_TOPIC,
        on_change: Callable[[PresenceEvent], None] | None = None,
    ):
        role = Role.parse(actor.role)
        self.transport = transport
        self.topic = topic
        self.record = PresenceRecord(
            actor_id=actor.id,
            role=role.value if role else str(actor.role),
            online_since=timestamp(),
            ref=uuid7(),
        )
        self._on_change = on_change
        self._roster: dict[str, PresenceRecord] = transport.presence_state(topic)
        self._unbind = transport.on_presence(topic, self._handle)
        self.active = True
        transport.track(topic, self.record)

    def _online(self) -> set[str]:
        return {record.actor_id for record in self._roster.values()}

    def _handle(self, event: PresenceEvent) -> None:
        before = self._online()
        if event.kind == SYNC:
            self._roster = dict(event.state)
            return
        if event.kind == JOIN:
            for record in event.records:
                self._roster[record.ref] = record
            changed = tuple(r for r in event.records if r.actor_id not in before)
        elif event.kind == LEAVE:
            for record in event.records:
                self._roster.pop(record.ref, None)
            after = self._online()
            changed = tuple(r for r in event.records if r.actor_id not in after)
        else:
            return
        if self._on_change is not None and changed:
            self._on_change(PresenceEvent(event.kind, event.topic, changed))

    @property
    def roster(self) -> list[PresenceRecord]:
        """One record per online actor, from its longest-running session."""
        earliest: dict[str, PresenceRecord] = {}
        for record in sorted(self._roster.values(), key=lambda r: (r.online_since, r.ref)):
            earliest.setdefault(record.actor_id, record)
        return sorted(earliest.values(), key=lambda r: (r.online_since, r.actor_id))

    @property
    def online_count(self) -> int:
        return len(self._online())

    def release(self) -> None:
        if not self.active:
            return
        self.active = False
        self.transport.untrack(self.topic, self.record.ref)
        self._unbind()

    def __enter__(self) -> "PresenceHandle":
        return self

    def __exit__(self, *exc) -> None:
        self.release()


def track_presence(
    transport,
    actor: Actor,
    topic: str = DEFAULT_TOPIC,
    on_change: Callable[[PresenceEvent], None] | None = None,
) -> PresenceHandle:
    return PresenceHandle(transport, actor, topic, on_change)
