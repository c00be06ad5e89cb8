from fastapi import APIRouter, Request
from pydantic import BaseModel


class RequestLogStatus(BaseModel):
    status: str = "ok"
    project_id: str
    trace_enabled: bool
    trust_proxy: bool


router = APIRouter()


@router.get("/health", response_model=RequestLogStatus, tags=["health"])
async def health(request: Request):
    """Liveness check that also reports how request logs will be attributed.

    `trace_enabled` is false when no project id is configured, in which case
    trace ids carry an empty project segment and Cloud Logging cannot link them.
    """
    settings = request.app.state.settings
    return RequestLogStatus(
        project_id=settings.project_id,
        trace_enabled=bool(settings.project_id),
        trust_proxy=settings.trust_proxy,
    )
