"""Command table: name -> handler, required capability, role restriction, usage."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from types import MappingProxyType

from oracle.commands.handlers import (
    analyze,
    directory,
    messaging,
    progress,
    resources,
    status,
    update,
)
from oracle.commands.handlers import help as help_command
from oracle.commands.permissions import authorize
from oracle.models import Actor, Capability, Command, HandlerResult, Role

Handler = Callable[[Command, Actor, object], Awaitable[HandlerResult]]


@dataclass(frozen=True)
class CommandSpec:
    name: str
    handler: Handler
    usage: str
    description: str
    capability: Capability | None = None
    roles: frozenset[Role] | None = None


_SPECS = (
    CommandSpec("help", help_command.handle, help_command.USAGE, "List the commands available to you"),
    CommandSpec(
        "status",
        status.handle,
        status.USAGE,
        "Show your team's status, a user's, or another team's",
        Capability.VIEW_TEAM_DATA,
    ),
    CommandSpec(
        "update",
        update.handle,
        update.USAGE,
        "Log a progress update for your team",
        Capability.EDIT_OWN_PROGRESS,
    ),
    CommandSpec(
        "message",
        messaging.message,
        messaging.MESSAGE_USAGE,
        "Message a user or everyone in a role",
        Capability.SEND_MESSAGES,
    ),
    CommandSpec(
        "chat", messaging.chat, messaging.CHAT_USAGE, "Post to your team chat", Capability.SEND_MESSAGES
    ),
    CommandSpec("find", directory.find, directory.FIND_USAGE, "Search people by name, skill or bio"),
    CommandSpec(
        "connect", directory.connect, directory.CONNECT_USAGE, "Find collaborators with matching skills"
    ),
    CommandSpec("resources", resources.handle, resources.USAGE, "Get learning resources on a topic"),
    CommandSpec(
        "progress",
        progress.handle,
        progress.USAGE,
        "Show stage, recent updates and readiness to advance",
        Capability.VIEW_TEAM_DATA,
    ),
    CommandSpec(
        "analyze",
        analyze.handle,
        analyze.USAGE,
        "Health report for a team or the whole program",
        Capability.RUN_ANALYSIS,
        frozenset({Role.MENTOR, Role.LEAD}),
    ),
    CommandSpec(
        "broadcast",
        messaging.broadcast,
        messaging.BROADCAST_USAGE,
        "Send a message to everyone",
        Capability.SEND_BROADCASTS,
        frozenset({Role.LEAD}),
    ),
)

REGISTRY: MappingProxyType[str, CommandSpec] = MappingProxyType({spec.name: spec for spec in _SPECS})


def lookup(name: str | None) -> CommandSpec | None:
    return REGISTRY.get((name or "").lower())


def allowed(role: Role | str | None, spec: CommandSpec) -> bool:
    parsed = Role.parse(role)
    if parsed is None:
        return False
    if spec.roles is not None and parsed not in spec.roles:
        return False
    return authorize(parsed, spec.capability)


def visible_commands(role: Role | str | None) -> list[CommandSpec]:
    return [spec for spec in REGISTRY.values() if allowed(role, spec)]
