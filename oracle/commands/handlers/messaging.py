"""Directed messages, team chat and lead broadcasts."""

import logging
import re

from oracle.commands.parser import split_arguments, strip_quotes
from oracle.errors import ValidationError
from oracle.lib.uuid7 import timestamp
from oracle.models import Actor, Command, HandlerResult, Role, SideEffect

logger = logging.getLogger(__name__)

MESSAGE_USAGE = "/message <@user|builders|mentors|leads|guests> <text>"
CHAT_USAGE = "/chat [--mentor] <text>"
BROADCAST_USAGE = "/broadcast <text>"

BROADCAST_PREFIX = "BROADCAST: "
REQUEST_PREFIX = "[REQUEST] "
MENTOR_FLAG = "--mentor"
BROADCAST_SCOPES = ("all", "team", "role")

_NAMED_TARGET = re.compile(r"^(?P<target>[^@:\s][^:]*?)\s*:\s*(?P<content>.*)$", re.DOTALL)


def split_target(text: str) -> tuple[str, str]:
    """Split ``@user text``, ``mentors text`` or ``Full Name: text`` into (target, content)."""
    text = text.strip()
    if not text:
        return "", ""
    first, _, rest = text.partition(" ")
    if first.startswith("@") or Role.from_plural(first.rstrip(":")):
        return first.rstrip(":"), strip_quotes(rest)
    named = _NAMED_TARGET.match(text)
    if named:
        return named.group("target").strip(), strip_quotes(named.group("content"))
    tokens = split_arguments(text)
    return (tokens[0], " ".join(tokens[1:])) if tokens else ("", "")


def _message_record(actor: Actor, receiver_role: str, content: str, now: str, **extra) -> dict:
    role = Role.parse(actor.role)
    record = {
        "sender_id": actor.id,
        "sender_role": role.value if role else str(actor.role),
        "receiver_id": None,
        "receiver_role": receiver_role,
        "team_id": actor.team_id,
        "content": content,
        "created_at": now,
    }
    record.update(extra)
    return record


async def message(command: Command, actor: Actor, ctx) -> HandlerResult:
    target, content = split_target(command.text)
    if not target or not content:
        raise ValidationError("A recipient and message text are required.", MESSAGE_USAGE)

    now = timestamp(ctx.now())
    role_target = Role.from_plural(target)
    if role_target:
        record = _message_record(actor, role_target.value, content, now)
        reply = f"📣 Message sent to all {role_target.plural}."
    else:
        profile = await ctx.directory.resolve_mention(target)
        record = _message_record(actor, profile.role, content, now, receiver_id=profile.id)
        reply = f"✉️ Message sent to {profile.full_name}."

    inserted = await ctx.store.insert("messages", record)
    return HandlerResult.ok(
        reply,
        [SideEffect("messages", inserted["id"])],
        message_id=inserted["id"],
        receiver_id=inserted["receiver_id"],
        receiver_role=inserted["receiver_role"],
    )


async def chat(command: Command, actor: Actor, ctx) -> HandlerResult:
    """Post to the team room. With --mentor the post goes to mentors as a help request."""
    if not actor.team_id:
        raise ValidationError("No team assigned. Team chat needs a team.", CHAT_USAGE)
    content = command.text.strip()
    first, _, rest = content.partition(" ")
    to_mentors = first == MENTOR_FLAG
    if to_mentors:
        content = strip_quotes(rest.strip())
    if not content:
        raise ValidationError("Message text is required.", CHAT_USAGE)

    now = timestamp(ctx.now())
    if to_mentors:
        record = _message_record(actor, Role.MENTOR.value, f"{REQUEST_PREFIX}{content}", now)
        reply = "🙋 Mentor request sent."
    else:
        record = _message_record(actor, Role.BUILDER.value, content, now)
        reply = "💬 Sent to team chat."
    inserted = await ctx.store.insert("messages", record)
    return HandlerResult.ok(
        reply,
        [SideEffect("messages", inserted["id"])],
        message_id=inserted["id"],
        team_id=actor.team_id,
        mentor_request=to_mentors,
    )


async def broadcast(command: Command, actor: Actor, ctx) -> HandlerResult:
    """Copy the message to every known actor in scope, one record each."""
    content = command.text.strip()
    if not content:
        raise ValidationError("Broadcast text is required.", BROADCAST_USAGE)
    scope = command.options.get("scope", "all")
    if scope not in BROADCAST_SCOPES:
        raise ValidationError(f"Unknown broadcast scope: {scope}", BROADCAST_USAGE)

    actors = await ctx.directory.actors()
    if scope == "team":
        if not actor.team_id:
            raise ValidationError("No team assigned. Use a plain broadcast instead.", BROADCAST_USAGE)
        recipients = [p for p in actors if p.team_id == actor.team_id]
    elif scope == "role":
        own_role = Role.parse(actor.role)
        recipients = [p for p in actors if Role.parse(p.role) == own_role]
    else:
        recipients = actors

    if not recipients:
        return HandlerResult.ok("No known actors in scope; nothing sent.", recipients=0)

    now = timestamp(ctx.now())
    records = [
        _message_record(actor, p.role, f"{BROADCAST_PREFIX}{content}", now, receiver_id=p.id)
        for p in recipients
    ]
    inserted = await ctx.store.insert_many("messages", records)
    logger.info(f"Broadcast from {actor.id} fanned out to {len(inserted)} actors ({scope})")
    return HandlerResult.ok(
        f"📢 Broadcast sent to {len(inserted)} people.",
        [SideEffect("messages", row["id"]) for row in inserted],
        recipients=len(inserted),
        scope=scope,
    )
