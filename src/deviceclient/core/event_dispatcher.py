"""
Listener registry and event dispatch.

The registry is a tuple that is replaced, never mutated, whenever a listener
is added or removed. Dispatch reads the tuple current at that moment and
iterates it without holding any lock, so registration from other threads
never waits on a listener callback and never disturbs an iteration in
progress.
"""

import logging
import threading
from typing import Dict, Tuple

from deviceclient.models.device_event import DeviceEvent, DeviceEventType
from deviceclient.models.listener import DeviceListener

logger = logging.getLogger(__name__)


# Listener method invoked for each event type
HANDLER_NAMES: Dict[DeviceEventType, str] = {
    DeviceEventType.BUTTON_PRESSED: 'device_pressed',
    DeviceEventType.BUTTON_RELEASED: 'device_released',
    DeviceEventType.SENSOR_MOVED: 'device_moved',
    DeviceEventType.SENSOR_SWAYED: 'device_swayed',
}


class EventDispatcher:
    """
    Delivers DeviceEvents to registered listeners.

    - Listeners are compared by identity; duplicates are ignored
    - Each dispatch goes to a snapshot of the listeners, in registration order
    - A listener that raises is logged and skipped; the others still run
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._listeners: Tuple[DeviceListener, ...] = ()

        # Statistics for debugging
        self._stats = {
            'events_dispatched': 0,
            'callbacks_invoked': 0,
            'listener_errors': 0,
        }

    def add_listener(self, listener: DeviceListener) -> None:
        """
        Register a listener.

        Registering a listener that is already present does nothing.

        Args:
            listener: Object implementing the DeviceListener methods
        """
        with self._lock:
            if any(existing is listener for existing in self._listeners):
                return
            self._listeners = self._listeners + (listener,)
        logger.debug(f"Added listener {listener!r}")

    def remove_listener(self, listener: DeviceListener) -> None:
        """Remove a listener. Removing an absent listener does nothing."""
        with self._lock:
            remaining = tuple(l for l in self._listeners if l is not listener)
            if len(remaining) == len(self._listeners):
                return
            self._listeners = remaining
        logger.debug(f"Removed listener {listener!r}")

    @property
    def listeners(self) -> Tuple[DeviceListener, ...]:
        """Current listener snapshot."""
        return self._listeners

    def __len__(self) -> int:
        return len(self._listeners)

    def dispatch(self, event: DeviceEvent) -> None:
        """
        Deliver an event to every listener in the current snapshot.

        Runs synchronously on the calling thread.

        Args:
            event: Decoded event to deliver
        """
        if event is None:
            return

        handler_name = HANDLER_NAMES[event.event_type]
        snapshot = self._listeners
        self._stats['events_dispatched'] += 1

        for listener in snapshot:
            try:
                getattr(listener, handler_name)(event)
                self._stats['callbacks_invoked'] += 1
            except Exception as e:
                self._stats['listener_errors'] += 1
                logger.error(f"Listener {listener!r} failed in {handler_name}: {e}",
                             exc_info=True)

    def get_stats(self) -> Dict[str, int]:
        """Get dispatch statistics."""
        return self._stats.copy()
