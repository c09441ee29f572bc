"""Append-only, session-scoped transcript."""

from collections.abc import Callable, Iterable

from oracle.lib.uuid7 import timestamp, uuid7
from oracle.models import HandlerResult, Message, Origin, TranscriptEntry

Listener = Callable[[TranscriptEntry], None]


class Transcript:
    """Entries appear in completion order. A message id is rendered at most once."""

    def __init__(self):
        self._entries: list[TranscriptEntry] = []
        self._seen: set[str] = set()
        self._listeners: list[Listener] = []

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self):
        return iter(self._entries)

    @property
    def entries(self) -> tuple[TranscriptEntry, ...]:
        return tuple(self._entries)

    def on_append(self, listener: Listener) -> Callable[[], None]:
        self._listeners.append(listener)

        def remove() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return remove

    def expect(self, message_ids: Iterable[str]) -> None:
        """Mark ids this session wrote itself so their realtime copies are skipped."""
        self._seen.update(message_ids)

    def seen(self, message_id: str) -> bool:
        return message_id in self._seen

    def append(
        self,
        origin: Origin,
        content: str,
        metadata: dict | None = None,
        entry_id: str | None = None,
    ) -> TranscriptEntry:
        entry = TranscriptEntry(
            id=entry_id or uuid7(),
            origin=origin,
            content=content,
            timestamp=timestamp(),
            metadata=metadata,
        )
        self._entries.append(entry)
        for listener in list(self._listeners):
            listener(entry)
        return entry

    def add_user(self, raw: str) -> TranscriptEntry:
        return self.append(Origin.USER, raw)

    def add_result(self, result: HandlerResult) -> TranscriptEntry:
        content = result.message
        if result.usage:
            content = f"{content}\nUsage: {result.usage}"
        metadata = {"success": result.success, "error": result.error.value if result.error else None}
        return self.append(Origin.HANDLER, content, metadata)

    def add_notice(self, content: str) -> TranscriptEntry:
        return self.append(Origin.SYSTEM, content)

    def add_message(self, message: Message) -> TranscriptEntry | None:
        if message.id in self._seen:
            return None
        self._seen.add(message.id)
        return self.append(
            Origin.REALTIME,
            message.content,
            {
                "message_id": message.id,
                "sender_id": message.sender_id,
                "sender_role": message.sender_role,
                "receiver_role": message.receiver_role,
                "team_id": message.team_id,
                "direct": not message.is_broadcast,
                "created_at": message.created_at,
            },
            entry_id=message.id,
        )
