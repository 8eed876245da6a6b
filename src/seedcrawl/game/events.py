from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Tuple

logger = logging.getLogger(__name__)

# Event names published by the session.
DAMAGE = "damage"
ENEMY_KILLED = "enemy_killed"
POTION_PICKED = "potion_picked"
HAZARD_TRIGGERED = "hazard_triggered"
LEVEL_CHANGED = "level_changed"
GAME_OVER = "game_over"
VICTORY = "victory"


@dataclass
class Event:
    type: str
    payload: Dict[str, Any]


Handler = Callable[[Event], None]


class EventBus:
    """
    Minimal pub/sub bus for gameplay notifications.

    The session publishes after it has already applied a change, so handlers
    observe state and never take part in resolving a turn. A failing handler is
    logged and the remaining handlers still run. A history is kept for tests.
    """

    def __init__(self) -> None:
        self._subscribers: Dict[str, List[Handler]] = {}
        self._history: List[Event] = []

    def subscribe(self, event_type: str, handler: Handler) -> None:
        self._subscribers.setdefault(event_type, []).append(handler)
        logger.debug("Subscribed %s to '%s'", getattr(handler, "__name__", repr(handler)), event_type)

    def unsubscribe(self, event_type: str, handler: Handler) -> None:
        """Remove a handler. Silently ignores handlers that were never subscribed."""
        handlers = self._subscribers.get(event_type)
        if handlers and handler in handlers:
            handlers.remove(handler)

    def publish(self, event_type: str, payload: Dict[str, Any] | None = None) -> Event:
        evt = Event(event_type, payload or {})
        self._history.append(evt)
        handlers = list(self._subscribers.get(event_type, []))
        logger.debug("Publishing '%s' to %d handlers: %r", event_type, len(handlers), evt.payload)
        for h in handlers:
            try:
                h(evt)
            except Exception:  # noqa: BLE001 - a broken listener must not break the turn
                logger.exception("Error in handler for '%s'", event_type)
        return evt

    @property
    def history(self) -> Tuple[Event, ...]:
        return tuple(self._history)

    def of_type(self, event_type: str) -> List[Event]:
        return [e for e in self._history if e.type == event_type]
