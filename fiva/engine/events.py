# fiva/engine/events.py
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, List


class GameEvent(str, Enum):
    GAME_STARTED = "game_started"
    CARD_SELECTED = "card_selected"
    CHIP_PLACED = "chip_placed"
    CHIP_REMOVED = "chip_removed"
    FIVA_COMPLETED = "fiva_completed"
    CARD_DISCARDED = "card_discarded"
    TURN_ADVANCED = "turn_advanced"
    LAYOUT_CHANGED = "layout_changed"
    GAME_OVER = "game_over"


@dataclass(frozen=True)
class GameEventRecord:
    kind: GameEvent
    payload: Dict[str, Any] = field(default_factory=dict)


Listener = Callable[[GameEventRecord], None]


class EventBus:
    """
    Synchronous observer list. The engine emits after a mutation has completed,
    so listeners always see a consistent state.
    """

    def __init__(self):
        self._listeners: List[Listener] = []

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        self._listeners.append(listener)
        return lambda: self.unsubscribe(listener)

    def unsubscribe(self, listener: Listener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def emit(self, kind: GameEvent, **payload: Any) -> GameEventRecord:
        record = GameEventRecord(kind=kind, payload=payload)
        for listener in list(self._listeners):
            listener(record)
        return record

    def __len__(self) -> int:
        return len(self._listeners)
