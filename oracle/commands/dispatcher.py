"""Route parsed input to a handler after the permission check.

Nothing escapes ``dispatch``: typed errors raised by handlers become failed
results with usage guidance, anything else is logged and reported generically.
"""

import logging
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from oracle.commands.format import render_answer
from oracle.commands.parser import parse
from oracle.commands.registry import REGISTRY, CommandSpec, allowed
from oracle.directory import Directory
from oracle.errors import CollaboratorError, ErrorKind, OracleError
from oracle.inference import Inference, from_config
from oracle.lib import config
from oracle.lib.store import Store
from oracle.lib.uuid7 import utcnow
from oracle.models import Actor, Command, HandlerResult, ParsedInput, Role

logger = logging.getLogger(__name__)

GENERIC_FAILURE = "Something went wrong on our side. Please try again."
QUERY_FALLBACK = "🔮 The Oracle can't answer right now. Try again shortly, or type /help for commands."


@dataclass
class CommandContext:
    store: Store
    directory: Directory
    inference: Inference
    clock: Callable[[], datetime] = utcnow
    settings: dict[str, Any] = field(default_factory=lambda: dict(config.load_config()))

    def now(self) -> datetime:
        return self.clock()

    def setting(self, key: str, default: Any = None) -> Any:
        return self.settings.get(key, default)


class Dispatcher:
    def __init__(self, context: CommandContext, registry: Mapping[str, CommandSpec] = REGISTRY):
        self.context = context
        self.registry = registry

    async def submit(self, raw: str, actor: Actor) -> HandlerResult:
        return await self.dispatch(parse(raw), actor)

    async def dispatch(self, parsed: ParsedInput, actor: Actor) -> HandlerResult:
        try:
            if parsed.kind == ParsedInput.QUERY:
                return await self._query(parsed.query or "", actor)
            return await self._command(parsed.command, actor)
        except Exception:
            logger.exception(f"Dispatch failed for {actor.id}: {parsed.raw!r}")
            return HandlerResult.fail(GENERIC_FAILURE, ErrorKind.COLLABORATOR)

    async def _command(self, command: Command, actor: Actor) -> HandlerResult:
        spec = self.registry.get(command.name)
        if spec is None:
            logger.info(f"Unknown command /{command.name} from {actor.id}")
            return HandlerResult.fail(
                f"Unknown command: /{command.name}. Type /help to see available commands.",
                ErrorKind.PARSE,
            )

        if not allowed(actor.role, spec):
            role = Role.parse(actor.role)
            logger.info(f"Rejected /{spec.name} for {actor.id} (role {actor.role})")
            return HandlerResult.fail(
                f"Insufficient permission: /{spec.name} is not available to "
                f"{role.plural if role else 'unrecognized roles'}.",
                ErrorKind.AUTHORIZATION,
            )

        try:
            result = await spec.handler(command, actor, self.context)
        except CollaboratorError as e:
            logger.error(f"/{spec.name} collaborator failure for {actor.id}: {e}")
            return HandlerResult.fail(GENERIC_FAILURE, ErrorKind.COLLABORATOR)
        except OracleError as e:
            logger.debug(f"/{spec.name} rejected for {actor.id}: {e.message}")
            usage = e.usage or (spec.usage if e.kind == ErrorKind.VALIDATION else None)
            return HandlerResult.fail(e.message, e.kind, usage=usage)
        except Exception:
            logger.exception(f"/{spec.name} failed for {actor.id}")
            return HandlerResult.fail(GENERIC_FAILURE, ErrorKind.COLLABORATOR)

        logger.debug(f"/{spec.name} by {actor.id}: success={result.success}")
        return result

    async def _query(self, text: str, actor: Actor) -> HandlerResult:
        if not text:
            return HandlerResult.fail(
                "Ask the Oracle a question, or type /help to see commands.", ErrorKind.VALIDATION
            )
        role = Role.parse(actor.role) or Role.UNASSIGNED
        try:
            answer = await self.context.inference.answer(
                text, role.value, {"team_id": actor.team_id, "user_id": actor.id}
            )
        except CollaboratorError as e:
            logger.warning(f"Inference failed for {actor.id}: {e}")
            return HandlerResult.fail(QUERY_FALLBACK, ErrorKind.COLLABORATOR)
        return HandlerResult.ok(
            render_answer(answer),
            answer=answer.text,
            resources=answer.resources,
            confidence=answer.confidence,
        )


def build_context(store: Store, inference: Inference | None = None, **kwargs) -> CommandContext:
    return CommandContext(
        store=store,
        directory=Directory(store),
        inference=inference or from_config(),
        **kwargs,
    )
