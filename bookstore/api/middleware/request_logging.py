"""Request and Access Logging Stages.

RequestLoggingStage logs request metadata as it enters the chain (structured).
AccessLogStage logs a one-line human-readable summary once the response exists:
    "POST /orders 201 12.3 ms"
Neither stage ever halts the chain.
"""

import logging
import time
from typing import Any

from bookstore.api.middleware.driver import BaseStage
from bookstore.core.pipeline import CONTINUE, RequestContext, StageResult

logger = logging.getLogger(__name__)
access_logger = logging.getLogger("bookstore.access")


def _client(request) -> str | None:
    return request.client.host if request.client else None


class RequestLoggingStage(BaseStage):
    name = "request_logging"

    async def process(self, ctx: RequestContext) -> StageResult:
        request = ctx.request
        logger.info(
            f"{request.method} {request.url.path}",
            extra={
                "method": request.method,
                "path": request.url.path,
                "client": _client(request),
            },
        )
        return CONTINUE


class AccessLogStage(BaseStage):
    name = "access_log"

    async def finalize(self, ctx: RequestContext, response: Any) -> Any:
        request = ctx.request
        duration_ms = round((time.perf_counter() - ctx.started_at) * 1000, 1)
        access_logger.info(
            f"{request.method} {request.url.path} {response.status_code} {duration_ms} ms",
            extra={"status_code": response.status_code, "duration_ms": duration_ms},
        )
        return response
