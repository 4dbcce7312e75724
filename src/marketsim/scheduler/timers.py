"""
Deterministic timer for replays.

``InlineTimer`` has the ``threading.Timer`` call signature but runs its
callback synchronously on ``start()``, ignoring the interval.  Passed as
the scheduler's ``timer_factory``, every post-boundary verification
completes before the next clock step, so a seeded replay never races a
verification thread for the tick lock.
"""
from typing import Any, Callable, Iterable, Mapping, Optional


class InlineTimer:
    def __init__(
        self,
        interval: float,
        function: Callable[..., Any],
        args: Optional[Iterable[Any]] = None,
        kwargs: Optional[Mapping[str, Any]] = None,
    ):
        self.interval = interval
        self.function = function
        self.args = tuple(args or ())
        self.kwargs = dict(kwargs or {})
        self.daemon = True
        self.result: Any = None
        self._cancelled = False

    def start(self) -> None:
        if not self._cancelled:
            self.result = self.function(*self.args, **self.kwargs)

    def cancel(self) -> None:
        self._cancelled = True
