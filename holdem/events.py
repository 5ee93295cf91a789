"""Outbound event stream consumed by presentation layers and decision actors."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass, fields
from enum import Enum
from types import MappingProxyType
from typing import Callable, ClassVar, Dict, Iterator, List, Tuple

from .cards import Card
from .models import ActionType, EndReason, Street

LOGGER = logging.getLogger("holdem.events")

Listener = Callable[["Event"], None]


def _plain(value: object) -> object:
    if isinstance(value, Card):
        return value.label
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, Mapping):
        return {key: _plain(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [_plain(item) for item in value]
    return value


@dataclass(frozen=True)
class Event:
    ev: ClassVar[str] = "EVENT"

    hand_id: str

    def __post_init__(self) -> None:
        # Every listener sees the same instance; mappings are copied read-only.
        for item in fields(self):
            value = getattr(self, item.name)
            if isinstance(value, dict):
                object.__setattr__(self, item.name, MappingProxyType(dict(value)))

    def to_payload(self) -> Dict[str, object]:
        payload: Dict[str, object] = {"ev": self.ev}
        for item in fields(self):
            payload[item.name] = _plain(getattr(self, item.name))
        return payload


@dataclass(frozen=True)
class HandStarted(Event):
    ev: ClassVar[str] = "HAND_STARTED"

    seats: Tuple[int, ...]
    stacks: Mapping[int, int]


@dataclass(frozen=True)
class StreetAdvanced(Event):
    ev: ClassVar[str] = "STREET_ADVANCED"

    street: Street
    new_community_cards: Tuple[Card, ...]


@dataclass(frozen=True)
class SeatActed(Event):
    ev: ClassVar[str] = "SEAT_ACTED"

    seat: int
    kind: ActionType
    amount: int


@dataclass(frozen=True)
class PotChanged(Event):
    ev: ClassVar[str] = "POT_CHANGED"

    banked_pot: int
    per_seat_committed: Tuple[int, ...]


@dataclass(frozen=True)
class HandsRevealed(Event):
    ev: ClassVar[str] = "HANDS_REVEALED"

    hands: Mapping[int, Tuple[Card, ...]]


@dataclass(frozen=True)
class PotAwarded(Event):
    ev: ClassVar[str] = "POT_AWARDED"

    pot_index: int
    amount: int
    eligible_seats: Tuple[int, ...]
    winners: Tuple[int, ...]
    shares: Mapping[int, int]


@dataclass(frozen=True)
class HandEnded(Event):
    ev: ClassVar[str] = "HAND_ENDED"

    winners: Tuple[int, ...]
    amounts: Mapping[int, int]
    reason: EndReason


@dataclass(frozen=True)
class HandAborted(Event):
    ev: ClassVar[str] = "HAND_ABORTED"

    reason: str
    refunds: Mapping[int, int]


class EventLog:
    """Append-only, ordered record of everything the engine reported."""

    def __init__(self) -> None:
        self._events: List[Event] = []
        self._listeners: List[Listener] = []

    def __len__(self) -> int:
        return len(self._events)

    def __iter__(self) -> Iterator[Event]:
        return iter(list(self._events))

    def publish(self, event: Event) -> None:
        self._events.append(event)
        for listener in list(self._listeners):
            try:
                listener(event)
            except Exception:  # noqa: BLE001
                LOGGER.exception("Event listener %r failed on %s", listener, event.ev)

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def replay(self, since: int = 0) -> List[Event]:
        return list(self._events[since:])

    def for_hand(self, hand_id: str) -> List[Event]:
        return [event for event in self._events if event.hand_id == hand_id]
