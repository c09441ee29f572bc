"""One coroutine per command: (command, actor, context) -> HandlerResult."""
