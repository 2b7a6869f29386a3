"""
Lightweight event emitter used for tree-change and document notifications
"""

import logging
import threading
from typing import Any, Callable, List

logger = logging.getLogger(__name__)


class Disposable:
    """Handle returned by a subscription; call dispose() to unsubscribe"""

    def __init__(self, on_dispose: Callable[[], None]):
        self._on_dispose = on_dispose
        self._disposed = False

    def dispose(self):
        if self._disposed:
            return
        self._disposed = True
        self._on_dispose()

    @property
    def is_disposed(self) -> bool:
        return self._disposed


class EventEmitter:
    """Fan-out of a single event to any number of listeners"""

    def __init__(self, name: str = "event"):
        self.name = name
        self._listeners: List[Callable[[Any], None]] = []
        self._lock = threading.Lock()

    def subscribe(self, listener: Callable[[Any], None]) -> Disposable:
        """Add a listener; returns a Disposable that removes it again"""
        with self._lock:
            self._listeners.append(listener)

        def remove():
            with self._lock:
                if listener in self._listeners:
                    self._listeners.remove(listener)

        return Disposable(remove)

    # Allows `emitter(listener)` as shorthand for subscribe
    __call__ = subscribe

    def fire(self, data: Any = None):
        """Notify every listener; a failing listener does not stop the others"""
        with self._lock:
            listeners = list(self._listeners)

        for listener in listeners:
            try:
                listener(data)
            except Exception as e:
                logger.error(f"Error in {self.name} listener: {e}", exc_info=True)
