import logging
import time
from contextvars import ContextVar
from dataclasses import dataclass, field

from sqlalchemy import event
from starlette.types import ASGIApp, Message, Receive, Scope, Send

logger = logging.getLogger(__name__)


@dataclass
class RequestStats:
    started: float = field(default_factory=time.perf_counter)
    queries: int = 0

    @property
    def elapsed_ms(self) -> float:
        return round((time.perf_counter() - self.started) * 1000, 2)


# Holds a mutable object, so increments made from copied contexts still land.
current_stats: ContextVar[RequestStats | None] = ContextVar("request_stats", default=None)


def install_query_counter(engine) -> None:
    @event.listens_for(engine.sync_engine, "before_cursor_execute")
    def _count(conn, cursor, statement, parameters, context, executemany):
        stats = current_stats.get()
        if stats is not None:
            stats.queries += 1


def _route_label(scope: Scope) -> str:
    route = scope.get("route")
    return getattr(route, "path", scope["path"])


class TimingMiddleware:
    """Reports elapsed time and SQL statement count per HTTP request."""

    def __init__(self, app: ASGIApp) -> None:
        self.app = app

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        stats = RequestStats()
        token = current_stats.set(stats)

        async def send_with_stats(message: Message) -> None:
            if message["type"] == "http.response.start":
                message["headers"] = [
                    *message.get("headers", []),
                    (b"x-response-time-ms", str(stats.elapsed_ms).encode()),
                    (b"x-query-count", str(stats.queries).encode()),
                ]
                logger.debug(
                    "%s %s status=%s queries=%d time=%sms",
                    scope["method"],
                    _route_label(scope),
                    message["status"],
                    stats.queries,
                    stats.elapsed_ms,
                )
            await send(message)

        try:
            await self.app(scope, receive, send_with_stats)
        finally:
            current_stats.reset(token)
