from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

NANOS_PER_SECOND = 1_000_000_000


class Latency(BaseModel):
    """Elapsed time split the way Cloud Logging expects a Duration."""

    model_config = ConfigDict(frozen=True)

    seconds: int = Field(0, ge=0)
    nanos: int = Field(0, ge=0, lt=NANOS_PER_SECOND)

    @classmethod
    def from_nanoseconds(cls, elapsed_ns: int) -> "Latency":
        seconds, nanos = divmod(max(elapsed_ns, 0), NANOS_PER_SECOND)
        return cls(seconds=seconds, nanos=nanos)


class LogEntry(BaseModel):
    """One request, shaped like the `httpRequest` field of a Cloud Logging entry."""

    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )

    request_method: str
    request_url: str
    status: int
    response_size: int = 0
    user_agent: Optional[str] = None
    remote_ip: Optional[str] = None
    referer: Optional[str] = None
    latency: Latency = Latency()
    protocol: Optional[str] = None

    def to_http_request(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)
