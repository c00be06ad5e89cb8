from .core.logging import CloudLoggingFormatter, cloud_logger, configure_logging, make_cloud_logger
from .entry import Latency, LogEntry
from .middleware import LoggerFn, RequestLogMiddleware, make_middleware
from .trace import build_trace_id, parse_trace_token

__all__ = [
    "CloudLoggingFormatter",
    "Latency",
    "LogEntry",
    "LoggerFn",
    "RequestLogMiddleware",
    "build_trace_id",
    "cloud_logger",
    "configure_logging",
    "make_cloud_logger",
    "make_middleware",
    "parse_trace_token",
]
