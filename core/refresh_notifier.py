"""
Refresh notifier - change events for tree hosts plus an optional polling timer
"""

import logging
import threading
from typing import Any, Callable, Optional

from utils.events import Disposable, EventEmitter

logger = logging.getLogger(__name__)


class AutoRefreshTimer:
    """Repeating timer running a callback every interval on a daemon thread"""

    def __init__(self, interval: float, callback: Callable[[], None]):
        self.interval = interval
        self.callback = callback
        self.stop_event = threading.Event()
        self.thread = threading.Thread(
            target=self._run, daemon=True, name="AutoRefreshTimer"
        )

    def start(self):
        self.thread.start()

    def cancel(self):
        self.stop_event.set()

    @property
    def is_alive(self) -> bool:
        return self.thread.is_alive() and not self.stop_event.is_set()

    def _run(self):
        # wait() returns True once cancelled
        while not self.stop_event.wait(self.interval):
            try:
                self.callback()
            except Exception as e:
                logger.error(f"Error in auto refresh tick: {e}")


class RefreshNotifier:
    """
    Fires "tree data changed" events for tree hosts.

    Owns the auto-refresh flag and timer for one provider instance. Call
    close() when the provider is discarded so the timer thread stops.
    """

    def __init__(self):
        self._auto_refresh_enabled = True
        self._timer: Optional[AutoRefreshTimer] = None
        self._timer_lock = threading.Lock()
        self._on_did_change_tree_data = EventEmitter("tree data changed")

    def on_did_change_tree_data(self, listener: Callable[[Any], None]) -> Disposable:
        """Subscribe to refresh events; the payload carries no node hint"""
        return self._on_did_change_tree_data.subscribe(listener)

    @property
    def auto_refresh_enabled(self) -> bool:
        return self._auto_refresh_enabled

    @property
    def auto_refresh_active(self) -> bool:
        """True while a timer is scheduled"""
        with self._timer_lock:
            return self._timer is not None and self._timer.is_alive

    def set_auto_refresh(self, interval: int):
        """
        Refresh every `interval` milliseconds while auto refresh is enabled.

        Replaces any running timer. A non-positive interval stops the timer.
        """
        with self._timer_lock:
            if self._timer is not None:
                self._timer.cancel()
                self._timer = None

            if interval <= 0:
                logger.debug("Auto refresh timer stopped")
                return

            self._timer = AutoRefreshTimer(interval / 1000.0, self._on_timer_tick)
            self._timer.start()
            logger.debug(f"Auto refresh every {interval}ms")

    def _on_timer_tick(self):
        if self._auto_refresh_enabled:
            self.refresh()

    def refresh(self, root: Any = None):
        """Signal hosts to re-query the whole tree; `root` is accepted and ignored"""
        self._on_did_change_tree_data.fire(None)

    def enable_auto_refresh(self):
        self._auto_refresh_enabled = True

    def disable_auto_refresh(self):
        self._auto_refresh_enabled = False

    def close(self):
        """Stop the timer; safe to call more than once"""
        self.set_auto_refresh(0)
