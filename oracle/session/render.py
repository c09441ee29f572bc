"""Terminal rendering for live sessions."""

from oracle.lib.uuid7 import parse_timestamp
from oracle.models import Origin, TranscriptEntry


class Colors:
    CYAN = "\033[36m"
    WHITE = "\033[37m"
    GRAY = "\033[90m"
    YELLOW = "\033[33m"
    RED = "\033[31m"
    BOLD = "\033[1m"
    RESET = "\033[0m"


def _styled(text: str, *colors: str) -> str:
    """Apply colors to text with automatic reset."""
    return f"{''.join(colors)}{text}{Colors.RESET}"


def _clock(value: str) -> str:
    try:
        return parse_timestamp(value).astimezone().strftime("%H:%M:%S")
    except (ValueError, TypeError):
        return value


def format_entry(entry: TranscriptEntry, names: dict[str, str] | None = None) -> str:
    """Format a transcript entry for display.

    Args:
        entry: The entry to render
        names: Optional actor id -> display name map for realtime senders

    Returns:
        Formatted line(s) with colors and styling
    """
    meta = entry.metadata or {}
    if entry.origin == Origin.REALTIME:
        ts = _styled(_clock(meta.get("created_at") or entry.timestamp), Colors.WHITE)
        sender_id = meta.get("sender_id", "?")
        sender = (names or {}).get(sender_id, f"{meta.get('sender_role', '?')} {sender_id[-8:]}")
        kind = "→ you" if meta.get("direct") else f"→ {meta.get('receiver_role', 'all')}s"
        return f"{ts} {_styled(sender, Colors.BOLD)} {_styled(kind, Colors.GRAY)}: {entry.content}"

    if entry.origin == Origin.SYSTEM:
        return _styled(f"· {entry.content}", Colors.GRAY)

    if entry.origin == Origin.HANDLER:
        if meta.get("success") is False:
            return _styled(entry.content, Colors.YELLOW)
        return entry.content

    prefix = _styled(">", Colors.CYAN)
    return f"{prefix} {entry.content}"


def format_header(name: str, role: str, online: int) -> str:
    title = _styled(f"🔮 Oracle: {name} ({role})", Colors.BOLD, Colors.CYAN)
    hint = _styled(f"{online} online · /help for commands · Ctrl-D to leave", Colors.GRAY)
    return f"\n{title}\n   {hint}\n\n"

