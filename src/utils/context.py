from contextvars import ContextVar

# Id of the composition session currently driving the event loop task
session_id: ContextVar[str | None] = ContextVar[str | None]("session_id", default=None)
