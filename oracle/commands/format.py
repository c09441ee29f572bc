"""Plain-text rendering for handler results."""

from oracle.inference import Answer
from oracle.lib.uuid7 import parse_timestamp
from oracle.models import Profile


def format_time(value: str | None) -> str:
    """Format ISO timestamp as readable UTC time."""
    if not value:
        return "never"
    try:
        return parse_timestamp(value).strftime("%Y-%m-%d %H:%M")
    except (ValueError, TypeError):
        return value


def bullets(items, indent: str = "  ") -> list[str]:
    return [f"{indent}• {item}" for item in items]


def profile_line(profile: Profile, score: float | None = None) -> str:
    parts = [f"{profile.full_name} ({profile.role})"]
    if profile.skills:
        parts.append(", ".join(profile.skills))
    line = " · ".join(parts)
    if score is not None:
        line += f" [match {score:g}]"
    return line


def render_answer(answer: Answer) -> str:
    lines = [answer.text]
    if answer.resources:
        lines.append("")
        lines.append("Resources:")
        for resource in answer.resources:
            title = resource.get("title") or resource.get("name") or "Untitled"
            url = resource.get("url")
            lines.append(f"  • {title} ({url})" if url else f"  • {title}")
    return "\n".join(lines)
