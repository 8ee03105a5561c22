"""
System zdarzeń nawigacji: powiadomienia + log JSON.

Każda zmiana stanu siatki i każde żądanie ścieżki jest zapisywane jako
zdarzenie z pełnym kontekstem. Subskrybenci (UI, debug overlay, warstwa
tur) dostają powiadomienia fire-and-forget - rdzeń nie czeka na nich
i nie interesuje się wynikiem.

TYPY ZDARZEŃ:
═══════════════════════════════════════════════════════════════════

    GRID_GENERATED
    ─────────────────────────────────────────────────────────────
    Siatka wygenerowana i gotowa do zapytań.
    Data: width, height, hex_size, cell_count, orientation

    GRID_CLEARED
    ─────────────────────────────────────────────────────────────
    Siatka wyczyszczona (koniec sesji).
    Data: cell_count

    CELL_STATE_CHANGED
    ─────────────────────────────────────────────────────────────
    Komórka włączona/wyłączona. Emitowane DOKŁADNIE raz na zmianę.
    Data: coord [q, r], enabled

    INTEGRATION_COMPLETE
    ─────────────────────────────────────────────────────────────
    Zakończona klasyfikacja całej siatki względem navmesha.
    Data: enabled_count, disabled_count, toggled_count

    INTEGRATION_ABANDONED
    ─────────────────────────────────────────────────────────────
    Serwis zapytań nie zgłosił gotowości po wszystkich próbach.
    Data: attempts

    PATH_FOUND / PATH_NOT_FOUND
    ─────────────────────────────────────────────────────────────
    Wynik żądania ścieżki dyskretnej (A*).
    Data: start, goal, length / reason, duration_ms

    PLAN_COMPLETED / PLAN_FAILED / PLAN_CANCELLED
    ─────────────────────────────────────────────────────────────
    Wynik planowania ścieżki ciągłej.
    Data: total_length, point_count / reason

FORMAT LOGU:
═══════════════════════════════════════════════════════════════════

{
    "metadata": {
        "version": "1.0",
        "session": "default",
        "timestamp": "2024-01-01T12:00:00"
    },
    "events": [
        {"seq": 0, "type": "GRID_GENERATED", "data": {...}},
        {"seq": 1, "type": "CELL_STATE_CHANGED", "data": {"coord": [3, 4], "enabled": false}},
        ...
    ]
}
"""

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Any, Callable, Dict, List, Optional
from datetime import datetime
from pathlib import Path
import json
import logging

logger = logging.getLogger(__name__)


class EventType(Enum):
    """Typ zdarzenia nawigacji."""

    # Siatka
    GRID_GENERATED = auto()
    GRID_CLEARED = auto()
    CELL_STATE_CHANGED = auto()

    # Navmesh
    INTEGRATION_COMPLETE = auto()
    INTEGRATION_ABANDONED = auto()

    # Ścieżki dyskretne
    PATH_FOUND = auto()
    PATH_NOT_FOUND = auto()

    # Ścieżki ciągłe
    PLAN_COMPLETED = auto()
    PLAN_FAILED = auto()
    PLAN_CANCELLED = auto()


EventCallback = Callable[["NavEvent"], None]


@dataclass
class NavEvent:
    """
    Pojedyncze zdarzenie.

    Attributes:
        sequence (int): Numer kolejny zdarzenia w logu
        event_type (EventType): Typ zdarzenia
        data (Dict): Dane specyficzne dla typu
    """
    sequence: int
    event_type: EventType
    data: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        """Serializuje zdarzenie do słownika."""
        result: Dict[str, Any] = {
            "seq": self.sequence,
            "type": self.event_type.name,
        }
        if self.data:
            result["data"] = self.data
        return result


class EventLogger:
    """
    Logger zdarzeń + szyna powiadomień.

    Zbiera wszystkie zdarzenia (do eksportu JSON) i przekazuje je
    subskrybentom. Wyjątek w subskrybencie jest logowany i nie
    przerywa operacji rdzenia (fire-and-forget).

    Attributes:
        events (List[NavEvent]): Lista wszystkich zdarzeń
        metadata (Dict): Metadane sesji
        record (bool): Czy przechowywać zdarzenia (False = tylko powiadomienia)
        max_events (Optional[int]): Limit przechowywanych zdarzeń; najstarsze
                                    są usuwane (None = bez limitu)

    Example:
        >>> events = EventLogger(session="demo")
        >>> events.subscribe(EventType.CELL_STATE_CHANGED, print)
        >>> events.log_cell_state_change(HexCoord(1, 2), False)
        >>> events.save("output/nav_demo.json")
    """

    def __init__(
        self,
        session: str = "default",
        record: bool = True,
        max_events: Optional[int] = None,
    ):
        if max_events is not None and max_events <= 0:
            raise ValueError(f"max_events must be positive, got {max_events}")
        self.events: List[NavEvent] = []
        self.record = record
        self.max_events = max_events
        self.metadata: Dict[str, Any] = {
            "version": "1.0",
            "session": session,
            "timestamp": datetime.now().isoformat(),
        }
        self._sequence = 0
        self._subscribers: Dict[Optional[EventType], List[EventCallback]] = {}

    # ─────────────────────────────────────────────────────────────────────────
    # SUBSKRYPCJE
    # ─────────────────────────────────────────────────────────────────────────

    def subscribe(
        self,
        event_type: Optional[EventType],
        callback: EventCallback,
    ) -> None:
        """
        Rejestruje callback dla typu zdarzenia.

        Args:
            event_type: Typ zdarzenia (None = wszystkie typy)
            callback: Funkcja wywoływana z NavEvent
        """
        self._subscribers.setdefault(event_type, []).append(callback)

    def unsubscribe(
        self,
        event_type: Optional[EventType],
        callback: EventCallback,
    ) -> bool:
        """
        Usuwa callback.

        Returns:
            bool: True jeśli callback był zarejestrowany
        """
        callbacks = self._subscribers.get(event_type, [])
        if callback in callbacks:
            callbacks.remove(callback)
            return True
        return False

    def _notify(self, event: NavEvent) -> None:
        listeners = list(self._subscribers.get(event.event_type, []))
        listeners += self._subscribers.get(None, [])
        for callback in listeners:
            try:
                callback(event)
            except Exception:
                logger.exception(
                    "Subscriber %r failed on %s", callback, event.event_type.name
                )

    # ─────────────────────────────────────────────────────────────────────────
    # LOGOWANIE OGÓLNE
    # ─────────────────────────────────────────────────────────────────────────

    def log_event(self, event_type: EventType, **data: Any) -> NavEvent:
        """
        Tworzy, zapisuje i rozsyła zdarzenie.

        Args:
            event_type: Typ zdarzenia
            **data: Dodatkowe dane

        Returns:
            NavEvent: Utworzone zdarzenie
        """
        event = NavEvent(
            sequence=self._sequence,
            event_type=event_type,
            data=dict(data),
        )
        self._sequence += 1
        if self.record:
            self.events.append(event)
            if self.max_events is not None and len(self.events) > self.max_events:
                del self.events[: len(self.events) - self.max_events]
        self._notify(event)
        return event

    # ─────────────────────────────────────────────────────────────────────────
    # POMOCNICZE METODY LOGOWANIA
    # ─────────────────────────────────────────────────────────────────────────

    def log_grid_generated(
        self,
        width: int,
        height: int,
        hex_size: float,
        cell_count: int,
        orientation: str,
    ) -> None:
        """Loguje wygenerowanie siatki (powiadomienie o gotowości)."""
        self.log_event(
            EventType.GRID_GENERATED,
            width=width,
            height=height,
            hex_size=hex_size,
            cell_count=cell_count,
            orientation=orientation,
        )

    def log_grid_cleared(self, cell_count: int) -> None:
        """Loguje wyczyszczenie siatki."""
        self.log_event(EventType.GRID_CLEARED, cell_count=cell_count)

    def log_cell_state_change(self, coord: Any, enabled: bool) -> None:
        """Loguje zmianę stanu komórki."""
        self.log_event(
            EventType.CELL_STATE_CHANGED,
            coord=[coord.q, coord.r],
            enabled=enabled,
        )

    def log_integration_complete(
        self,
        enabled_count: int,
        disabled_count: int,
        toggled_count: int,
    ) -> None:
        """Loguje zakończenie integracji z navmeshem."""
        self.log_event(
            EventType.INTEGRATION_COMPLETE,
            enabled_count=enabled_count,
            disabled_count=disabled_count,
            toggled_count=toggled_count,
        )

    def log_integration_abandoned(self, attempts: int) -> None:
        """Loguje porzucenie integracji (serwis niegotowy)."""
        self.log_event(EventType.INTEGRATION_ABANDONED, attempts=attempts)

    def log_path_result(
        self,
        found: bool,
        start: Optional[List[float]],
        goal: Optional[List[float]],
        length: int,
        reason: str,
        duration_ms: float,
    ) -> None:
        """Loguje wynik żądania ścieżki dyskretnej."""
        self.log_event(
            EventType.PATH_FOUND if found else EventType.PATH_NOT_FOUND,
            start=start,
            goal=goal,
            length=length,
            reason=reason,
            duration_ms=round(duration_ms, 3),
        )

    def log_plan_result(
        self,
        event_type: EventType,
        total_length: float,
        point_count: int,
        reason: str,
    ) -> None:
        """Loguje wynik planowania ścieżki ciągłej."""
        self.log_event(
            event_type,
            total_length=round(total_length, 3),
            point_count=point_count,
            reason=reason,
        )

    # ─────────────────────────────────────────────────────────────────────────
    # SERIALIZACJA
    # ─────────────────────────────────────────────────────────────────────────

    def to_dict(self) -> Dict[str, Any]:
        """
        Serializuje cały log do słownika.

        Returns:
            Dict: Pełny log w formacie dla JSON
        """
        return {
            "metadata": self.metadata,
            "events": [e.to_dict() for e in self.events],
        }

    def save(self, filepath: str) -> None:
        """
        Zapisuje log do pliku JSON.

        Args:
            filepath: Ścieżka do pliku
        """
        path = Path(filepath)
        path.parent.mkdir(parents=True, exist_ok=True)

        with open(path, 'w', encoding='utf-8') as f:
            json.dump(self.to_dict(), f, indent=2, ensure_ascii=False)

    def to_json(self, indent: Optional[int] = 2) -> str:
        """
        Zwraca log jako string JSON.

        Args:
            indent: Wcięcie (None = compact)
        """
        return json.dumps(self.to_dict(), indent=indent, ensure_ascii=False)

    # ─────────────────────────────────────────────────────────────────────────
    # STATYSTYKI
    # ─────────────────────────────────────────────────────────────────────────

    def get_event_count(self) -> int:
        """Zwraca liczbę zdarzeń."""
        return len(self.events)

    def get_events_by_type(self, event_type: EventType) -> List[NavEvent]:
        """Filtruje zdarzenia po typie."""
        return [e for e in self.events if e.event_type == event_type]

    def get_events(self) -> List[Dict[str, Any]]:
        """Zwraca zdarzenia jako listę słowników."""
        return [e.to_dict() for e in self.events]

    def clear(self) -> None:
        """Usuwa zapisane zdarzenia (subskrypcje zostają)."""
        self.events.clear()
