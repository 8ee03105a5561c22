"""
Testy dla sesji nawigacji i logu zdarzeń.

Testuje pełny przepływ: generowanie -> navmesh -> integracja -> ścieżki.
"""

import json
import pytest
import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from hexnav.core.hex_coord import HexCoord
from hexnav.core.pathfinding import PathStatus
from hexnav.core.vec2 import Vec2
from hexnav.events.event_logger import EventLogger, EventType
from hexnav.navmesh import CircleObstacle, GeometrySpatialQuery, NavMesh
from hexnav.planning import PlanStatus
from hexnav.session import NavigationSession, SessionConfig


# ═══════════════════════════════════════════════════════════════════════════
# FIXTURES
# ═══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def session():
    """Sesja z siatką 10x8, hex_size = 10."""
    config = SessionConfig(grid_width=10, grid_height=8, hex_size=10.0)
    session = NavigationSession(config, sleep=lambda _: None)
    session.generate()
    return session


@pytest.fixture
def mesh():
    """Navmesh pokrywający siatkę z zapasem."""
    return NavMesh.rectangle(Vec2(-20.0, -20.0), 200.0, 300.0)


# ═══════════════════════════════════════════════════════════════════════════
# TEST: SIATKA
# ═══════════════════════════════════════════════════════════════════════════

def test_generate_uses_config_defaults(session):
    """generate() bez argumentów bierze wymiary z konfiguracji."""
    assert len(session.grid) == 80
    assert session.get_summary()["enabled_count"] == 80


def test_generate_with_arguments(session):
    """Argumenty nadpisują konfigurację."""
    result = session.generate(width=3, height=4, hex_size=5.0)
    assert result.cell_count == 12
    assert session.grid.hex_size == 5.0


def test_set_cell_enabled(session):
    """Zmiana stanu przez sesję."""
    assert session.set_cell_enabled(HexCoord(1, 1), False) is True
    assert session.set_cell_enabled(HexCoord(1, 1), False) is False
    assert session.set_cell_enabled(HexCoord(99, 99), False) is None


def test_clear_keeps_instance(session):
    """clear() czyści siatkę, instancja zostaje."""
    grid = session.grid
    session.clear()
    assert session.grid is grid
    assert not grid.is_generated


# ═══════════════════════════════════════════════════════════════════════════
# TEST: NAVMESH
# ═══════════════════════════════════════════════════════════════════════════

def test_integrate_without_spatial(session):
    """Integracja bez serwisu: None, siatka bez zmian."""
    assert session.integrate_navmesh() is None
    assert session.grid.enabled_count == 80


def test_integrate_before_generate():
    """Integracja przed generate(): None."""
    session = NavigationSession()
    session.attach_mesh(NavMesh.rectangle(Vec2(0, 0), 10, 10))
    assert session.integrate_navmesh() is None


def test_attach_and_integrate(session):
    """Mały navmesh wyłącza komórki poza nim."""
    session.attach_mesh(NavMesh.rectangle(Vec2(-10.0, -10.0), 50.0, 300.0))
    result = session.integrate_navmesh()
    assert result is not None
    assert result.disabled_count > 0
    assert session.last_integration is result
    assert session.grid.cell_at_coords(HexCoord(0, 0)).enabled
    assert not session.grid.cell_at_coords(HexCoord(9, 0)).enabled


def test_unready_service_is_abandoned(session, mesh):
    """Serwis nigdy niegotowy: None i zdarzenie INTEGRATION_ABANDONED."""
    session.attach_spatial(GeometrySpatialQuery(mesh, ready=False))
    assert session.integrate_navmesh() is None
    assert session.events.get_events_by_type(EventType.INTEGRATION_ABANDONED)


# ═══════════════════════════════════════════════════════════════════════════
# TEST: ŚCIEŻKI
# ═══════════════════════════════════════════════════════════════════════════

def test_request_path_found(session):
    """Ścieżka dyskretna na pełnej siatce."""
    start = session.grid.cell_at_coords(HexCoord(0, 0)).world_position
    goal = session.grid.cell_at_coords(HexCoord(5, 3)).world_position
    result = session.request_path(start, goal)
    assert result.found
    assert session.events.get_events_by_type(EventType.PATH_FOUND)


def test_request_path_before_generate():
    """Żądanie przed generate(): INVALID_ENDPOINT, bez wyjątku."""
    session = NavigationSession()
    result = session.request_path(Vec2(0, 0), Vec2(10, 10))
    assert result.status is PathStatus.INVALID_ENDPOINT
    assert result.reason == "grid not generated"


def test_request_path_not_found_is_logged(session):
    """Brak ścieżki: PATH_NOT_FOUND z powodem."""
    a = session.grid.cell_at_coords(HexCoord(2, 2))
    b = session.grid.cell_at_coords(HexCoord(3, 2))
    session.set_cell_enabled(a.coord, False)
    session.set_cell_enabled(b.coord, False)

    result = session.request_path(a.world_position, b.world_position)

    assert result.cells == []
    not_found = session.events.get_events_by_type(EventType.PATH_NOT_FOUND)
    assert not_found[0].data["reason"] == result.reason


def test_continuous_path_with_obstacles(session, mesh):
    """Planer ciągły omija przeszkodę i mieści się w budżecie."""
    session.attach_mesh(mesh, [CircleObstacle("rock", Vec2(60.0, 100.0), 6.0)])
    result = session.request_continuous_path(Vec2(0.0, 0.0), Vec2(150.0, 0.0), 80.0)
    assert result.status is PlanStatus.SUCCESS
    assert result.total_length == 80.0
    assert session.planner.get_position_at(1.0) == result.points[-1]


def test_continuous_path_without_spatial(session):
    """Bez serwisu planer działa na linii prostej."""
    result = session.request_continuous_path(Vec2(0.0, 0.0), Vec2(30.0, 0.0), 100.0)
    assert result.ok
    assert result.points[-1] == Vec2(30.0, 0.0)


def test_cancel_plan_drops_path(session):
    """cancel_plan() porzuca ostatnią ścieżkę."""
    session.request_continuous_path(Vec2(0.0, 0.0), Vec2(30.0, 0.0), 100.0)
    session.cancel_plan()
    assert session.planner.points == []


# ═══════════════════════════════════════════════════════════════════════════
# TEST: LOG ZDARZEŃ
# ═══════════════════════════════════════════════════════════════════════════

def test_event_sequence_is_monotonic(session):
    """Numery sekwencyjne rosną o 1."""
    session.set_cell_enabled(HexCoord(0, 0), False)
    session.set_cell_enabled(HexCoord(0, 0), True)
    sequences = [e["seq"] for e in session.events.get_events()]
    assert sequences == list(range(len(sequences)))


def test_save_log(session, tmp_path):
    """save_log zapisuje JSON z metadanymi i zdarzeniami."""
    session.set_cell_enabled(HexCoord(1, 0), False)
    path = tmp_path / "logs" / "session.json"
    session.save_log(str(path))

    data = json.loads(path.read_text(encoding="utf-8"))
    assert data["metadata"]["version"] == "1.0"
    types = [e["type"] for e in data["events"]]
    assert types == ["GRID_GENERATED", "CELL_STATE_CHANGED"]


def test_unsubscribe_stops_notifications():
    """Po unsubscribe callback nie jest wołany."""
    events = EventLogger()
    received = []
    events.subscribe(EventType.GRID_CLEARED, received.append)
    events.log_grid_cleared(5)
    assert events.unsubscribe(EventType.GRID_CLEARED, received.append) is True
    events.log_grid_cleared(5)
    assert len(received) == 1
    assert events.unsubscribe(EventType.GRID_CLEARED, received.append) is False


def test_notification_only_logger():
    """record=False: powiadomienia bez przechowywania."""
    events = EventLogger(record=False)
    received = []
    events.subscribe(None, received.append)
    events.log_grid_cleared(3)
    assert len(received) == 1
    assert events.get_event_count() == 0


def test_event_log_cap_drops_oldest():
    """max_events: zostają najnowsze zdarzenia, numeracja ciągła."""
    events = EventLogger(max_events=3)
    for count in range(5):
        events.log_grid_cleared(count)
    assert events.get_event_count() == 3
    assert [e["seq"] for e in events.get_events()] == [2, 3, 4]


def test_event_log_cap_must_be_positive():
    """max_events <= 0 to błąd konfiguracji."""
    with pytest.raises(ValueError):
        EventLogger(max_events=0)


def test_session_passes_cap_to_logger():
    """SessionConfig.max_events trafia do loggera sesji."""
    session = NavigationSession(SessionConfig(max_events=10))
    assert session.events.max_events == 10
