"""Server Lifecycle - explicit finite-state machine for startup and failure.

Invariants:
    - UNINITIALIZED -> BOOTSTRAPPING -> READY -> LISTENING is the only success path
    - FAILED is reachable from BOOTSTRAPPING only, and is followed by TERMINATED
    - No transition leaves FAILED or TERMINATED except FAILED -> TERMINATED
    - Every transition is recorded in history (oldest first)

Design Decisions:
    - Transition table as a dict of allowed targets: illegal moves raise
      LifecycleError instead of silently reordering startup
    - Pure state holder: the shell (main.py) performs the bootstrap IO and the
      port bind, then reports the outcome here
"""

from bookstore.core.domain_types import LifecycleState
from bookstore.core.errors import LifecycleError

_ALLOWED: dict[LifecycleState, frozenset[LifecycleState]] = {
    LifecycleState.UNINITIALIZED: frozenset({LifecycleState.BOOTSTRAPPING}),
    LifecycleState.BOOTSTRAPPING: frozenset({
        LifecycleState.READY, LifecycleState.FAILED,
    }),
    LifecycleState.READY: frozenset({LifecycleState.LISTENING}),
    LifecycleState.LISTENING: frozenset(),
    LifecycleState.FAILED: frozenset({LifecycleState.TERMINATED}),
    LifecycleState.TERMINATED: frozenset(),
}


class ServerLifecycle:
    """Tracks where the process is in its startup sequence."""

    def __init__(self) -> None:
        self._state = LifecycleState.UNINITIALIZED
        self.history: list[LifecycleState] = [self._state]
        self.failure: Exception | None = None

    @property
    def state(self) -> LifecycleState:
        return self._state

    @property
    def is_ready(self) -> bool:
        return self._state in (LifecycleState.READY, LifecycleState.LISTENING)

    def can_transition(self, target: LifecycleState) -> bool:
        return target in _ALLOWED[self._state]

    def transition(self, target: LifecycleState) -> None:
        if not self.can_transition(target):
            raise LifecycleError(self._state.value, target.value)
        self._state = target
        self.history.append(target)

    def begin_bootstrap(self) -> None:
        self.transition(LifecycleState.BOOTSTRAPPING)

    def mark_ready(self) -> None:
        self.transition(LifecycleState.READY)

    def mark_listening(self) -> None:
        self.transition(LifecycleState.LISTENING)

    def fail(self, error: Exception) -> None:
        """BOOTSTRAPPING -> FAILED -> TERMINATED in one step."""
        self.transition(LifecycleState.FAILED)
        self.failure = error
        self.transition(LifecycleState.TERMINATED)
