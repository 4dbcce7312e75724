"""
Clock event bus.

The clock collaborator publishes one ``ClockEvent`` per change that
crosses an hour or a day; the scheduler subscribes.  Ordering is the
publish order and cancellation is an explicit ``unsubscribe`` call.
"""
from typing import Callable, List

from loguru import logger
from pydantic import BaseModel, ConfigDict

from src.marketsim.market.types import ClockReading


class ClockEvent(BaseModel):
    model_config = ConfigDict(frozen=True)

    previous: ClockReading
    current: ClockReading

    @property
    def hour_changed(self) -> bool:
        return self.day_changed or self.previous.hour != self.current.hour

    @property
    def day_changed(self) -> bool:
        return self.previous.calendar_date != self.current.calendar_date


ClockHandler = Callable[[ClockEvent], None]


class EventBus:
    """Synchronous publish/subscribe channel for clock events."""

    def __init__(self):
        self._handlers: List[ClockHandler] = []

    def subscribe(self, handler: ClockHandler) -> Callable[[], None]:
        self._handlers.append(handler)

        def unsubscribe() -> None:
            if handler in self._handlers:
                self._handlers.remove(handler)

        return unsubscribe

    def publish(self, event: ClockEvent) -> None:
        logger.debug(
            f"Clock event {event.previous.calendar_date} h{event.previous.hour} -> "
            f"{event.current.calendar_date} h{event.current.hour}"
        )
        for handler in list(self._handlers):
            handler(event)

    def __len__(self) -> int:
        return len(self._handlers)
