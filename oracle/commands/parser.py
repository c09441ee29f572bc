"""Input grammar: slash commands, a few prose intents, everything else is a query.

Grammar, in evaluation order:

    /<name> [args...]                              slash command
    (send|message|tell) [to] <target> (:|that) <content>   -> message
    (update|log|record) [progress|update|work|status]: <content>  -> update
    broadcast [to (all|team|role)]: <content>      -> broadcast

Anything else is forwarded verbatim to the inference service.
"""

import re
import shlex
from collections.abc import Callable

from oracle.models import Command, ParsedInput, Role

Synthesizer = Callable[[re.Match, str], Command]


def strip_quotes(text: str) -> str:
    """Remove one pair of enclosing quotes, only when they wrap the whole text."""
    text = text.strip()
    if len(text) >= 2 and text[0] == text[-1] and text[0] in "\"'" and text[0] not in text[1:-1]:
        return text[1:-1].strip()
    return text


def split_arguments(text: str) -> list[str]:
    """Shell-style split; unbalanced quotes fall back to plain whitespace."""
    try:
        return shlex.split(text)
    except ValueError:
        return text.split()


def _parse_slash(raw: str) -> ParsedInput:
    parts = raw.strip()[1:].split(None, 1)
    name = parts[0].lower() if parts else ""
    rest = parts[1].strip() if len(parts) > 1 else ""
    command = Command(name=name, arguments=split_arguments(rest), raw=raw, text=strip_quotes(rest))
    return ParsedInput(kind=ParsedInput.COMMAND, raw=raw, command=command)


def _message(match: re.Match, raw: str) -> Command:
    target = match.group("target")
    content = strip_quotes(match.group("content"))
    if not target.startswith("@") and Role.from_plural(target) is None:
        target = f"@{target}"
    return Command(
        name="message",
        arguments=[target, *split_arguments(content)],
        raw=raw,
        text=f"{target} {content}",
        synthesized=True,
    )


def _update(match: re.Match, raw: str) -> Command:
    content = strip_quotes(match.group("content"))
    return Command(
        name="update", arguments=split_arguments(content), raw=raw, text=content, synthesized=True
    )


def _broadcast(match: re.Match, raw: str) -> Command:
    content = strip_quotes(match.group("content"))
    scope = (match.group("scope") or "all").lower()
    return Command(
        name="broadcast",
        arguments=split_arguments(content),
        raw=raw,
        text=content,
        options={"scope": scope},
        synthesized=True,
    )


INTENTS: tuple[tuple[re.Pattern, Synthesizer], ...] = (
    (
        re.compile(
            r"^(?:send|message|tell)\s+(?:to\s+)?(?P<target>@?[\w.'-]+)"
            r"\s*(?::|\s+that\b)\s*(?P<content>\S.*)$",
            re.IGNORECASE | re.DOTALL,
        ),
        _message,
    ),
    (
        re.compile(
            r"^(?:update|log|record)"
            r"(?:\s+(?:today'?s?\s+)?(?:progress|update|work|status))?"
            r"\s*:\s*(?P<content>\S.*)$",
            re.IGNORECASE | re.DOTALL,
        ),
        _update,
    ),
    (
        re.compile(
            r"^broadcast(?:\s+to\s+(?P<scope>all|team|role))?\s*:\s*(?P<content>\S.*)$",
            re.IGNORECASE | re.DOTALL,
        ),
        _broadcast,
    ),
)


def parse(raw: str | None) -> ParsedInput:
    """Classify raw input. Never raises."""
    raw = raw or ""
    stripped = raw.strip()
    if stripped.startswith("/"):
        return _parse_slash(raw)

    for pattern, synthesize in INTENTS:
        match = pattern.match(stripped)
        if match:
            return ParsedInput(kind=ParsedInput.COMMAND, raw=raw, command=synthesize(match, raw))

    return ParsedInput(kind=ParsedInput.QUERY, raw=raw, query=stripped)
