"""Change notification for game state subscribers.

Two event kinds exist: ``STATE_CHANGED`` after a batch of lines mutated
the state, and ``TURN_CHANGED`` when a new main phase starts. Callbacks
receive the live GameState; they must not mutate it and must not keep a
reference across notifications.
"""

from __future__ import annotations

from collections.abc import Callable
from enum import StrEnum
from typing import TYPE_CHECKING

from hearth_watcher.core.logging import get_logger


if TYPE_CHECKING:
    from hearth_watcher.models.game_state import GameState

logger = get_logger(__name__)

Subscriber = Callable[["GameState"], None]


class WatcherEvent(StrEnum):
    """Events published by the watcher."""

    STATE_CHANGED = "gamestate-changed"
    TURN_CHANGED = "turn-changed"


class ChangeNotifier:
    """Registry of subscriber callbacks per event kind.

    Example:
        >>> notifier = ChangeNotifier()
        >>> unsubscribe = notifier.subscribe(WatcherEvent.STATE_CHANGED, print)
        >>> unsubscribe()
    """

    def __init__(self) -> None:
        self._subscribers: dict[WatcherEvent, list[Subscriber]] = {event: [] for event in WatcherEvent}

    def subscribe(self, event: WatcherEvent, callback: Subscriber) -> Callable[[], None]:
        """Register a callback.

        Returns:
            A function removing the subscription.
        """
        self._subscribers[WatcherEvent(event)].append(callback)

        def unsubscribe() -> None:
            callbacks = self._subscribers[WatcherEvent(event)]
            if callback in callbacks:
                callbacks.remove(callback)

        return unsubscribe

    def subscriber_count(self, event: WatcherEvent) -> int:
        return len(self._subscribers[WatcherEvent(event)])

    def publish(self, event: WatcherEvent, game_state: GameState) -> None:
        """Invoke every callback of an event.

        A failing callback is logged and does not prevent the others
        from running.
        """
        for callback in list(self._subscribers[WatcherEvent(event)]):
            try:
                callback(game_state)
            except Exception:
                logger.exception("Subscriber error", watcher_event=str(event))


__all__ = ["WatcherEvent", "ChangeNotifier", "Subscriber"]
