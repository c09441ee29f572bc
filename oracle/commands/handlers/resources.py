import logging

from oracle.commands.format import render_answer
from oracle.errors import ErrorKind, InferenceError, ValidationError
from oracle.models import Actor, Command, HandlerResult, Role

logger = logging.getLogger(__name__)

USAGE = "/resources <topic>"
FALLBACK = "📚 Resources are unavailable right now. Please try again in a moment."


async def handle(command: Command, actor: Actor, ctx) -> HandlerResult:
    topic = command.text.strip()
    if not topic:
        raise ValidationError("Name a topic to find resources for.", USAGE)

    role = Role.parse(actor.role) or Role.UNASSIGNED
    try:
        answer = await ctx.inference.answer(
            f"resources: {topic}", role.value, {"team_id": actor.team_id, "user_id": actor.id}
        )
    except InferenceError as e:
        logger.warning(f"Resource lookup for '{topic}' failed: {e}")
        return HandlerResult.fail(FALLBACK, ErrorKind.COLLABORATOR)

    return HandlerResult.ok(render_answer(answer), topic=topic, resources=answer.resources)
