"""ASGI middleware emitting one Cloud Logging style request entry per request.

Implemented as pure ASGI middleware rather than BaseHTTPMiddleware so the
exact bytes handed to the server can be counted and the moment the last body
chunk goes out can be observed.
"""
import logging
import time
from typing import Callable, Optional

from starlette.datastructures import Headers
from starlette.types import ASGIApp, Message, Receive, Scope, Send

from .entry import Latency, LogEntry
from .trace import TRACE_CONTEXT_HEADER, build_trace_id

LoggerFn = Callable[[LogEntry, str], None]

logger = logging.getLogger(__name__)


def resolve_remote_ip(scope: Scope, headers: Headers, trust_proxy: bool) -> Optional[str]:
    """Client address, preferring the original client behind a trusted proxy."""
    if trust_proxy:
        forwarded = headers.get("x-forwarded-for", "")
        first = forwarded.split(",", 1)[0].strip()
        if first:
            return first
    client = scope.get("client")
    if client:
        return client[0]
    return None


def request_url(scope: Scope) -> str:
    raw_path = scope.get("raw_path")
    if raw_path:
        path = raw_path.decode("latin-1")
    else:
        path = scope.get("path", "")
    query = scope.get("query_string", b"")
    if query:
        return f"{path}?{query.decode('latin-1')}"
    return path


class RequestLogMiddleware:
    def __init__(
        self,
        app: ASGIApp,
        project_id: str,
        logger: LoggerFn,
        trust_proxy: bool = False,
    ):
        self.app = app
        self.project_id = project_id
        self.log_request = logger
        self.trust_proxy = trust_proxy

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        start = time.perf_counter_ns()
        status: Optional[int] = None
        response_size = 0
        emitted = False

        def emit(final_status: int) -> None:
            nonlocal emitted
            if emitted:
                return
            # Flag first: a failing logger must not cause a second entry.
            emitted = True
            elapsed = time.perf_counter_ns() - start
            entry, trace_id = self._build(scope, final_status, response_size, elapsed)
            self.log_request(entry, trace_id)

        async def send_wrapper(message: Message) -> None:
            nonlocal status, response_size
            if message["type"] == "http.response.start":
                status = message["status"]
            elif message["type"] == "http.response.body":
                response_size += len(message.get("body", b""))
            await send(message)
            if message["type"] == "http.response.body" and not message.get("more_body", False):
                emit(status if status is not None else 500)

        try:
            await self.app(scope, receive, send_wrapper)
        except Exception:
            # Error middleware below has normally finished a response already
            if not emitted:
                logger.debug("Unhandled error in %s %s", scope.get("method"), scope.get("path"))
                emit(status if status is not None else 500)
            raise

        if not emitted:
            logger.debug("Response not finished by %s %s", scope.get("method"), scope.get("path"))
            emit(status if status is not None else 500)

    def _build(
        self, scope: Scope, status: int, response_size: int, elapsed_ns: int
    ) -> tuple[LogEntry, str]:
        headers = Headers(scope=scope)
        http_version = scope.get("http_version")
        entry = LogEntry(
            request_method=scope.get("method", ""),
            request_url=request_url(scope),
            status=status,
            response_size=response_size,
            user_agent=headers.get("user-agent"),
            remote_ip=resolve_remote_ip(scope, headers, self.trust_proxy),
            referer=headers.get("referer"),
            latency=Latency.from_nanoseconds(elapsed_ns),
            protocol=f"HTTP/{http_version}" if http_version else None,
        )
        trace_id = build_trace_id(self.project_id, headers.get(TRACE_CONTEXT_HEADER))
        return entry, trace_id


def make_middleware(
    project_id: str, logger: LoggerFn, *, trust_proxy: bool = False
) -> Callable[[ASGIApp], RequestLogMiddleware]:
    """Return a wrapper that puts request logging around a built ASGI app.

    Wrap the whole application (`app = make_middleware(...)(FastAPI())`) rather
    than registering it through `add_middleware`: Starlette's error middleware
    is always outermost in the app's own stack, and the error responses it
    writes are only visible from outside it.

    `logger` is called once per completed request with the entry and a trace id
    of the form `projects/<project_id>/traces/<token>`.
    """

    def wrap(app: ASGIApp) -> RequestLogMiddleware:
        return RequestLogMiddleware(
            app,
            project_id=project_id,
            logger=logger,
            trust_proxy=trust_proxy,
        )

    return wrap
