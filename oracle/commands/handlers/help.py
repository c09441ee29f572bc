from oracle.errors import NotFoundError
from oracle.models import Actor, Command, HandlerResult, Role

USAGE = "/help [command]"


async def handle(command: Command, actor: Actor, ctx) -> HandlerResult:
    from oracle.commands.registry import visible_commands

    specs = visible_commands(actor.role)

    if command.arguments:
        name = command.arguments[0].lstrip("/").lower()
        spec = next((s for s in specs if s.name == name), None)
        if spec is None:
            raise NotFoundError(f"No command /{name} available to your role.", USAGE)
        return HandlerResult.ok(f"{spec.usage}\n  {spec.description}", commands=[spec.name])

    role = Role.parse(actor.role)
    width = max((len(s.usage) for s in specs), default=0)
    lines = [f"Commands ({role.value if role else 'unknown role'}):"]
    lines.extend(f"  {s.usage:<{width}}  {s.description}" for s in specs)
    lines.append("Anything else is sent to the Oracle as a question.")
    return HandlerResult.ok("\n".join(lines), commands=[s.name for s in specs])
