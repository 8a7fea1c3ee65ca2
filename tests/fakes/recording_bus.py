"""Recording EventBus fake - keeps every publish while still dispatching."""

from typing import Any

from bookstore.services.event_bus import DispatchResult, EventBus, _key


class RecordingEventBus(EventBus):
    def __init__(self) -> None:
        super().__init__()
        self.published: list[tuple[str, Any]] = []

    def publish(self, event_name: str, payload: Any) -> DispatchResult:
        self.published.append((_key(event_name), payload))
        return super().publish(event_name, payload)
