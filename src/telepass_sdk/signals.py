"""Navigation signals consumed by the UI shell."""

from __future__ import annotations

from typing import Callable

from .telemetry import get_logger

RedirectListener = Callable[[str], None]


class NavigationSignals:
    """Fan-out of ``redirect_to(path)`` side effects.

    The client layer only announces where the shell should navigate; it
    never navigates itself.
    """

    def __init__(self) -> None:
        self._listeners: list[RedirectListener] = []
        self.history: list[str] = []
        self._logger = get_logger()

    def connect(self, listener: RedirectListener) -> Callable[[], None]:
        """Register a listener. Returns a callable that disconnects it."""
        self._listeners.append(listener)

        def disconnect() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return disconnect

    def redirect_to(self, path: str) -> None:
        self.history.append(path)
        self._logger.info("Redirect requested", path=path)
        for listener in list(self._listeners):
            try:
                listener(path)
            except Exception as e:
                self._logger.error("Redirect listener failed", path=path, error=str(e))
