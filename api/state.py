"""
Współdzielona sesja nawigacji dla routerów API.

API obsługuje jedną sesję na proces (jeden stół gry). Routery
sięgają po nią przez get_session().
"""

from pathlib import Path
from typing import Optional

from hexnav.core.config_loader import ConfigLoader
from hexnav.session import NavigationSession, SessionConfig


DATA_PATH = Path(__file__).parent.parent / "data"
_loader = ConfigLoader(str(DATA_PATH))
_session: Optional[NavigationSession] = None


def get_session() -> NavigationSession:
    """Zwraca sesję procesu (tworzy ją przy pierwszym użyciu)."""
    global _session
    if _session is None:
        _session = NavigationSession(SessionConfig.from_loader(_loader))
    return _session


def reset_session() -> NavigationSession:
    """Porzuca bieżącą sesję i tworzy nową (koniec gry / testy)."""
    global _session
    if _session is not None:
        _session.clear()
    _session = None
    return get_session()
