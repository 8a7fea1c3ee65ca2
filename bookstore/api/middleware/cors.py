"""CORS Stage - rejects foreign origins before session and authorization run.

Invariants:
    - A request with an Origin header different from the allowed origin fails
      with 403 CORS_REJECTED; nothing downstream runs
    - Requests without an Origin header (same-origin, curl, probes) pass
    - Response headers and preflights are not handled here: CORSMiddleware
      (outermost layer, see main.create_app) writes Access-Control-* headers
      for the allowed origin and answers OPTIONS preflights
"""

from bookstore.api.middleware.driver import BaseStage
from bookstore.core.errors import CorsRejectedError
from bookstore.core.pipeline import CONTINUE, Fail, RequestContext, StageResult


def is_allowed_origin(origin: str | None, allowed_origin: str) -> bool:
    """True when there is no Origin or it equals the configured one."""
    return origin is None or origin.rstrip("/") == allowed_origin.rstrip("/")


class CorsStage(BaseStage):
    name = "cors"

    def __init__(self, allowed_origin: str):
        self.allowed_origin = allowed_origin.rstrip("/")

    async def process(self, ctx: RequestContext) -> StageResult:
        origin = ctx.request.headers.get("origin")
        if not is_allowed_origin(origin, self.allowed_origin):
            return Fail(CorsRejectedError(origin))
        return CONTINUE
