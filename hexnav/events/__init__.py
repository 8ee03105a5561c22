"""
Events module - powiadomienia i logowanie zdarzeń do formatu JSON.

Zawiera:
- NavEvent: Dataclass reprezentująca zdarzenie
- EventType: Enum typów zdarzeń
- EventLogger: Logger + szyna powiadomień
"""

from .event_logger import NavEvent, EventType, EventLogger

__all__ = ["NavEvent", "EventType", "EventLogger"]
