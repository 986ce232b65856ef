"""Shared state surface for controllers: listeners plus load/error flags."""

from __future__ import annotations

from collections.abc import Callable

import structlog

from coinview_core.exceptions import CoinviewError, Offline

log = structlog.get_logger("viewstate")

Listener = Callable[["ObservableState"], None]

UNEXPECTED_ERROR_MESSAGE = "An unexpected error occurred"


class ObservableState:
    """Listener registry and the loading/offline/error indicators.

    All mutation is expected to happen on the event loop that owns the
    controller, so there is no locking here.
    """

    def __init__(self) -> None:
        self.is_loading = False
        self.is_offline = False
        self.last_error: str | None = None
        self._listeners: list[Listener] = []

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Call *listener* after every published change. Returns an unsubscribe function."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _publish(self) -> None:
        for listener in list(self._listeners):
            try:
                listener(self)
            except Exception:
                log.exception("listener_failed", listener=repr(listener))

    def _record_success(self) -> None:
        self.is_offline = False
        self.last_error = None

    def _record_failure(self, exc: Exception, event: str, **context) -> None:
        """Turn an error into user-visible state. Never re-raises."""
        self.is_offline = isinstance(exc, Offline)
        if isinstance(exc, CoinviewError):
            self.last_error = str(exc)
            log.warning(event, error=repr(exc), **context)
        else:
            self.last_error = UNEXPECTED_ERROR_MESSAGE
            log.error(event, error=repr(exc), exc_info=exc, **context)
