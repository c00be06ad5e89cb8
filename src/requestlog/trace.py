from typing import Optional

TRACE_CONTEXT_HEADER = "x-cloud-trace-context"


def parse_trace_token(header_value: Optional[str]) -> str:
    """Return the trace id part of `<traceId>/<spanId>;o=<flags>`.

    Everything before the first "/" is the token; a missing header yields "".
    """
    if not header_value:
        return ""
    return header_value.split("/", 1)[0]


def build_trace_id(project_id: str, header_value: Optional[str]) -> str:
    return f"projects/{project_id}/traces/{parse_trace_token(header_value)}"
