import json
import logging
from datetime import datetime, timezone
from typing import Union

from ..entry import LogEntry

HTTP_REQUEST_FIELD = "httpRequest"
TRACE_FIELD = "logging.googleapis.com/trace"


class CloudLoggingFormatter(logging.Formatter):
    """One JSON object per line, in the shape Cloud Logging parses from stdout."""

    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "severity": record.levelname,
            "message": record.getMessage(),
            "time": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "logger": record.name,
        }
        http_request = getattr(record, HTTP_REQUEST_FIELD, None)
        if http_request is not None:
            payload[HTTP_REQUEST_FIELD] = http_request
        trace = getattr(record, TRACE_FIELD, None)
        if trace:
            payload[TRACE_FIELD] = trace
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)
        return json.dumps(payload)


def configure_logging(level: Union[int, str] = logging.INFO, json_format: bool = False):
    if json_format:
        handler = logging.StreamHandler()
        handler.setFormatter(CloudLoggingFormatter())
        logging.basicConfig(level=level, handlers=[handler])
    else:
        logging.basicConfig(
            level=level,
            format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        )


def _level_for(status: int) -> int:
    if status >= 500:
        return logging.ERROR
    if status >= 400:
        return logging.WARNING
    return logging.INFO


def make_cloud_logger(name: str = "requestlog.request"):
    """Return a request logger callable that writes through `logging.getLogger(name)`."""
    log = logging.getLogger(name)

    def cloud_logger(entry: LogEntry, trace_id: str) -> None:
        extra = {HTTP_REQUEST_FIELD: entry.to_http_request()}
        # An empty token means the request carried no trace context
        if not trace_id.endswith("/traces/"):
            extra[TRACE_FIELD] = trace_id
        log.log(
            _level_for(entry.status),
            "%s %s %s",
            entry.request_method,
            entry.request_url,
            entry.status,
            extra=extra,
        )

    return cloud_logger


cloud_logger = make_cloud_logger()
