"""Pipeline Driver - interprets stage results and adapts the pipeline to Starlette.

Invariants:
    - Stages run in registration order; the first non-Continue result halts the chain
    - An exception escaping a stage becomes Fail (BookstoreError as-is,
      anything else as InternalError); it never crashes the process
    - Finalizers run in reverse order, only for stages that returned Continue
    - A finalizer failure is logged and the response produced so far is kept
    - An exception escaping the app becomes a 500 INTERNAL_ERROR response that
      still passes through the finalizers (session saved, access logged)

Design Decisions:
    - One BaseHTTPMiddleware hosting the whole chain instead of one middleware
      per concern: the order lives in a single tuple (build_default_stages)
      and the driver loop is the only place that decides continue/stop
"""

import logging
import time
from collections.abc import Sequence
from typing import Any

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response
from starlette.types import ASGIApp

from bookstore.api.error_handlers import build_error_response
from bookstore.core.errors import BookstoreError, InternalError
from bookstore.core.pipeline import (
    CONTINUE, Continue, Fail, PipelineOutcome, RequestContext, Respond,
    Stage, StageResult,
)

logger = logging.getLogger(__name__)


class BaseStage:
    """Default no-op finalize so stages only implement what they need."""
    name = "stage"

    async def process(self, ctx: RequestContext) -> StageResult:
        return CONTINUE

    async def finalize(self, ctx: RequestContext, response: Any) -> Any:
        return response


async def run_stages(
    stages: Sequence[Stage], ctx: RequestContext,
) -> PipelineOutcome:
    entered: list[Stage] = []
    for stage in stages:
        try:
            result = await stage.process(ctx)
        except BookstoreError as exc:
            result = Fail(exc)
        except Exception as exc:
            logger.error(
                f"Stage {stage.name} raised: {exc}",
                exc_info=True,
                extra={"path": _path(ctx)},
            )
            result = Fail(InternalError())
        if not isinstance(result, Continue):
            return PipelineOutcome(result=result, entered=entered)
        entered.append(stage)
    return PipelineOutcome(result=CONTINUE, entered=entered)


async def finalize_stages(
    entered: Sequence[Stage], ctx: RequestContext, response: Any,
) -> Any:
    for stage in reversed(entered):
        try:
            response = await stage.finalize(ctx, response)
        except Exception as exc:
            logger.error(
                f"Stage {stage.name} finalize failed: {exc}",
                exc_info=True,
                extra={"path": _path(ctx)},
            )
    return response


class RequestPipelineMiddleware(BaseHTTPMiddleware):
    """Runs the ordered stages around every HTTP request."""

    def __init__(self, app: ASGIApp, stages: Sequence[Stage]):
        super().__init__(app)
        self.stages = tuple(stages)

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint,
    ) -> Response:
        ctx = RequestContext(request=request, started_at=time.perf_counter())
        outcome = await run_stages(self.stages, ctx)
        if isinstance(outcome.result, Respond):
            response = outcome.result.response
        elif isinstance(outcome.result, Fail):
            error = outcome.result.error
            logger.warning(
                f"Request halted: {error.code}",
                extra={"path": request.url.path, "error_code": error.code},
            )
            response = build_error_response(error)
        else:
            try:
                response = await call_next(request)
            except Exception as exc:
                logger.error(
                    f"Unhandled exception on {request.url.path}: {exc}",
                    exc_info=True,
                    extra={"path": request.url.path},
                )
                response = build_error_response(InternalError())
        return await finalize_stages(outcome.entered, ctx, response)


def _path(ctx: RequestContext) -> str | None:
    url = getattr(ctx.request, "url", None)
    return getattr(url, "path", None)
