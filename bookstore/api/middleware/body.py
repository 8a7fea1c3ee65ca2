"""Body Parsing Stage - decodes JSON bodies once, before any handler reads them.

Invariants:
    - Only JSON content types are inspected; other bodies pass through untouched
    - Bodies over max_bytes fail with 413 as soon as the limit is crossed,
      declared (Content-Length) or streamed (chunked); the rest is never read
    - Malformed JSON fails with 400 MALFORMED_BODY; the handler never runs
    - Decoded value exposed as request.state.json (None for an empty body)
    - The buffered bytes stay on the request, so handlers read the same body
"""

import json

from starlette.requests import Request

from bookstore.api.middleware.driver import BaseStage
from bookstore.core.errors import MalformedBodyError, PayloadTooLargeError
from bookstore.core.pipeline import CONTINUE, Fail, RequestContext, StageResult

DEFAULT_MAX_BYTES = 100 * 1024


def _is_json(content_type: str) -> bool:
    media_type = content_type.split(";", 1)[0].strip().lower()
    return media_type == "application/json" or media_type.endswith("+json")


class BodyParsingStage(BaseStage):
    name = "body_parsing"

    def __init__(self, max_bytes: int = DEFAULT_MAX_BYTES):
        self.max_bytes = max_bytes

    async def process(self, ctx: RequestContext) -> StageResult:
        request = ctx.request
        if not _is_json(request.headers.get("content-type", "")):
            return CONTINUE
        declared = request.headers.get("content-length")
        if declared and declared.isdigit() and int(declared) > self.max_bytes:
            return Fail(PayloadTooLargeError(self.max_bytes))
        body = await self._read_limited(request)
        if body is None:
            return Fail(PayloadTooLargeError(self.max_bytes))
        if not body:
            request.state.json = None
            return CONTINUE
        try:
            request.state.json = json.loads(body)
        except ValueError:
            return Fail(MalformedBodyError("JSON"))
        return CONTINUE

    async def _read_limited(self, request: Request) -> bytes | None:
        """Read the stream up to max_bytes; None once the limit is crossed."""
        chunks: list[bytes] = []
        received = 0
        async for chunk in request.stream():
            received += len(chunk)
            if received > self.max_bytes:
                return None
            chunks.append(chunk)
        body = b"".join(chunks)
        # Same cache Request.body() fills: downstream reads replay it
        request._body = body
        return body
