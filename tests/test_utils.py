# tests/test_utils.py
import threading
import time
from typing import Callable, List, Optional, Tuple

from deviceclient.models.device_event import DeviceEvent
from deviceclient.models.listener import DeviceListener


class RecordingListener(DeviceListener):
    """Records (handler_name, event) pairs and lets tests wait for them."""

    def __init__(self, name: str = "recorder", hook: Optional[Callable[[str, DeviceEvent], None]] = None):
        self.name = name
        self.hook = hook
        self.calls: List[Tuple[str, DeviceEvent]] = []
        self._cond = threading.Condition()

    def _record(self, handler: str, event: DeviceEvent):
        with self._cond:
            self.calls.append((handler, event))
            self._cond.notify_all()
        if self.hook:
            self.hook(handler, event)

    def device_pressed(self, event):
        self._record("device_pressed", event)

    def device_released(self, event):
        self._record("device_released", event)

    def device_moved(self, event):
        self._record("device_moved", event)

    def device_swayed(self, event):
        self._record("device_swayed", event)

    @property
    def events(self) -> List[DeviceEvent]:
        with self._cond:
            return [event for _, event in self.calls]

    def wait_for(self, count: int, timeout: float = 2.0) -> bool:
        """Wait until at least count events have been recorded."""
        with self._cond:
            return self._cond.wait_for(lambda: len(self.calls) >= count, timeout=timeout)

    def __repr__(self):
        return f"RecordingListener({self.name!r})"


class FailingListener(RecordingListener):
    """Records the call, then raises."""

    def _record(self, handler: str, event: DeviceEvent):
        super()._record(handler, event)
        raise RuntimeError(f"{self.name} failed in {handler}")


def wait_until(predicate: Callable[[], bool], timeout: float = 2.0, interval: float = 0.01) -> bool:
    """Poll predicate until it returns True or timeout expires."""
    deadline = time.time() + timeout
    while time.time() < deadline:
        if predicate():
            return True
        time.sleep(interval)
    return predicate()
