"""Pipeline Results - tagged outcomes returned by every request-pipeline stage.

Invariants:
    - A stage returns exactly one of Continue, Respond, Fail
    - Respond and Fail halt the chain; later stages never see the request
    - Only stages that returned Continue are finalized, in reverse order

Design Decisions:
    - Tagged results over exception short-circuiting: the driver loop is the
      only place that decides whether the chain continues
    - Respond carries an opaque response object so core stays framework-free
"""

from dataclasses import dataclass, field
from typing import Any, Protocol

from bookstore.core.errors import BookstoreError


@dataclass(frozen=True)
class Continue:
    """Hand the request to the next stage."""


@dataclass(frozen=True)
class Respond:
    """Stop the chain and send this response."""
    response: Any


@dataclass(frozen=True)
class Fail:
    """Stop the chain with a structured error."""
    error: BookstoreError


StageResult = Continue | Respond | Fail

CONTINUE = Continue()


@dataclass
class RequestContext:
    """Per-request state shared across stages."""
    request: Any
    started_at: float = 0.0
    state: dict[str, Any] = field(default_factory=dict)


class Stage(Protocol):
    """A request processor in the pipeline."""
    name: str

    async def process(self, ctx: RequestContext) -> StageResult: ...

    async def finalize(self, ctx: RequestContext, response: Any) -> Any: ...


@dataclass
class PipelineOutcome:
    """Result of running the stages: the halting result and who to finalize."""
    result: StageResult
    entered: list = field(default_factory=list)

    @property
    def halted(self) -> bool:
        return not isinstance(self.result, Continue)
