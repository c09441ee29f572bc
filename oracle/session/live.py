"""Live session: dispatch user input and fold realtime events into one transcript."""

import asyncio
import logging
from collections.abc import AsyncIterable

from prompt_toolkit import PromptSession
from prompt_toolkit.history import InMemoryHistory
from prompt_toolkit.patch_stdout import patch_stdout

from oracle.commands.dispatcher import Dispatcher
from oracle.models import Actor, HandlerResult, Message, Origin, Role
from oracle.realtime import (
    DEFAULT_TOPIC,
    MessageFilter,
    PresenceEvent,
    PresenceHandle,
    StorePoller,
    Subscription,
    subscribe,
    track_presence,
)
from oracle.realtime.transport import JOIN

from .render import format_entry, format_header
from .transcript import Transcript

logger = logging.getLogger(__name__)

EXIT_COMMANDS = {"/quit", "/exit"}


class Session:
    def __init__(
        self,
        dispatcher: Dispatcher,
        actor: Actor,
        transport,
        transcript: Transcript | None = None,
        topic: str = DEFAULT_TOPIC,
    ):
        self.dispatcher = dispatcher
        self.actor = actor
        self.transport = transport
        self.transcript = transcript or Transcript()
        self.topic = topic
        self.subscriptions: list[Subscription] = []
        self.presence: PresenceHandle | None = None
        # Own messages that arrive while a submit is in flight wait here until
        # its written ids are known.
        self._inflight = 0
        self._held: list[Message] = []

    @property
    def is_open(self) -> bool:
        return self.presence is not None

    def open(self) -> "Session":
        if self.is_open:
            return self
        self.subscriptions = [
            subscribe(self.transport, message_filter, self.receive)
            for message_filter in MessageFilter.for_actor(self.actor)
        ]
        self.presence = track_presence(self.transport, self.actor, self.topic, self._on_presence)
        logger.debug(f"Session opened for {self.actor.id} with {len(self.subscriptions)} subscriptions")
        return self

    def close(self) -> None:
        for subscription in self.subscriptions:
            subscription.release()
        self.subscriptions = []
        if self.presence is not None:
            self.presence.release()
            self.presence = None

    async def __aenter__(self) -> "Session":
        return self.open()

    async def __aexit__(self, *exc) -> None:
        self.close()

    async def submit(self, raw: str) -> HandlerResult:
        self.transcript.add_user(raw)
        self._inflight += 1
        try:
            result = await self.dispatcher.submit(raw, self.actor)
            self.transcript.expect(result.written("messages"))
            self.transcript.add_result(result)
        finally:
            self._inflight -= 1
            if not self._inflight:
                held, self._held = self._held, []
                for message in held:
                    self.transcript.add_message(message)
        return result

    def receive(self, message: Message) -> None:
        """Fold one realtime message into the transcript.

        Messages this session wrote are skipped by id. The same user writing
        from another process still shows up.
        """
        if self._inflight and message.sender_id == self.actor.id:
            self._held.append(message)
            return
        self.transcript.add_message(message)

    async def consume(self, events: AsyncIterable[Message]) -> None:
        async for message in events:
            self.receive(message)

    def notice(self, content: str) -> None:
        self.transcript.add_notice(content)

    def _on_presence(self, event: PresenceEvent) -> None:
        for record in event.records:
            if record.actor_id == self.actor.id:
                continue
            verb = "is online" if event.kind == JOIN else "went offline"
            self.notice(f"{record.role} {record.actor_id[-8:]} {verb}")


class Console:
    """Interactive prompt over a ``Session``, fed by a store poller."""

    def __init__(self, session: Session, poller: StorePoller, names: dict[str, str] | None = None):
        self.session = session
        self.poller = poller
        self.names = names or {}
        self.running = True
        self.prompt = PromptSession(history=InMemoryHistory())

    def _print_entry(self, entry) -> None:
        if entry.origin == Origin.USER:
            return
        print(format_entry(entry, self.names))

    async def read_input(self) -> None:
        """Read user input asynchronously with prompt_toolkit."""
        loop = asyncio.get_event_loop()
        while self.running:
            try:
                with patch_stdout():
                    raw = await loop.run_in_executor(None, self.prompt.prompt, "> ")
                raw = raw.strip()
                if raw.lower() in EXIT_COMMANDS:
                    self.running = False
                elif raw:
                    await self.session.submit(raw)
            except EOFError:
                self.running = False
        self.poller.stop()

    async def run(self) -> None:
        """Main loop: realtime poll + input."""
        self.poller.on_error = lambda e: self.session.notice("Live updates interrupted; retrying.")
        remove = self.session.transcript.on_append(self._print_entry)
        try:
            await self.poller.prime()
            self.session.open()
            actor = self.session.actor
            role = Role.parse(actor.role)
            header = format_header(
                actor.name or actor.id,
                role.value if role else str(actor.role),
                self.session.presence.online_count,
            )
            print(header, end="")
            poll_task = asyncio.create_task(self.poller.run())
            input_task = asyncio.create_task(self.read_input())
            await asyncio.gather(poll_task, input_task)
        except KeyboardInterrupt:
            print("\n")
        finally:
            self.running = False
            self.poller.stop()
            self.session.close()
            remove()
