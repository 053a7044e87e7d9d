"""Observer registry used by the orchestrator to publish batch events."""
from typing import Callable, Dict, List
import inspect
import logging

logger = logging.getLogger(__name__)


class EventEmitter:
    """
    Named-event registry whose listeners may be plain callables or coroutines.

    ``emit`` holds no shared state while listeners run: concurrent emitters
    (one per upload task) never wait on each other, only on their own
    listeners. A failing listener is logged and does not reach the emitter.
    """

    def __init__(self):
        self._listeners: Dict[str, List[Callable]] = {}

    def on(self, event_name: str, callback: Callable) -> None:
        listeners = self._listeners.setdefault(event_name, [])
        if callback not in listeners:
            listeners.append(callback)

    def off(self, event_name: str, callback: Callable) -> None:
        listeners = self._listeners.get(event_name, [])
        if callback in listeners:
            listeners.remove(callback)

    def listeners(self, event_name: str) -> List[Callable]:
        return list(self._listeners.get(event_name, []))

    async def emit(self, event_name: str, *args, **kwargs) -> None:
        for callback in self.listeners(event_name):
            try:
                result = callback(*args, **kwargs)
                if inspect.isawaitable(result):
                    await result
            except Exception as exc:
                logger.error(f"Listener for {event_name} failed: {exc}")
