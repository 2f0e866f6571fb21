"""
Event dispatch for entities and entity sets.

An EventHub is owned by the object that emits events and maps event names
to ordered listener lists. Entities and sets hold one hub each and expose
it through their own on/off/once/trigger methods.
"""

import logging
from typing import Any, Callable, Dict, List, Optional

logger = logging.getLogger(__name__)

Listener = Callable[..., Any]


class EventHub:
    """
    Ordered listener registry for a single emitter.

    Listeners run synchronously in registration order and receive the
    arguments passed to trigger(). Dispatch walks the live listener list by
    index, so unbinding during a trigger shifts the remaining listeners.
    """

    def __init__(self, owner: Any = None):
        self.owner = owner
        self._listeners: Dict[str, List[Listener]] = {}

    def bind(self, event: str, callback: Listener) -> "EventHub":
        """Register callback for event."""
        self._listeners.setdefault(event, []).append(callback)
        return self

    def unbind(self, event: str, callback: Optional[Listener] = None) -> "EventHub":
        """Remove callback from event, or every listener when callback is None."""
        if callback is None:
            self._listeners.pop(event, None)
            return self

        listeners = self._listeners.get(event)
        if listeners:
            listeners[:] = [
                listener for listener in listeners
                if listener is not callback and getattr(listener, "listener", None) is not callback
            ]
        return self

    def once(self, event: str, callback: Listener) -> "EventHub":
        """Register callback to run on the first trigger of event only."""
        ran = False

        def wrapper(*args):
            nonlocal ran
            if ran:
                return False
            ran = True
            callback(*args)
            return True

        wrapper.listener = callback
        return self.bind(event, wrapper)

    def trigger(self, event: str, *args: Any) -> "EventHub":
        """Invoke every listener for event with args."""
        listeners = self._listeners.get(event)
        if not listeners:
            return self

        logger.debug("Triggering %r on %r (%d listeners)", event, self.owner, len(listeners))
        i = 0
        while i < len(listeners):
            listeners[i](*args)
            i += 1
        return self

    def listeners(self, event: str) -> List[Listener]:
        """Copy of the listeners registered for event."""
        return list(self._listeners.get(event, []))

    def has_listeners(self, event: str) -> bool:
        return bool(self._listeners.get(event))

    # Aliases
    on = bind
    off = unbind


__all__ = ["EventHub", "Listener"]
