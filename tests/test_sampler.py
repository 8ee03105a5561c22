"""
Testy dla integracji siatki z navmeshem (NavMeshSampler).

Testuje klasyfikację komórek (większość próbek), retry gotowości
serwisu i przełączanie tylko zmienionych komórek.
"""

import pytest
import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from hexnav.core.hex_coord import HexCoord
from hexnav.core.hex_grid import HexGrid
from hexnav.core.vec2 import Vec2
from hexnav.events.event_logger import EventLogger, EventType
from hexnav.navmesh import (
    GeometrySpatialQuery, NavMesh, NavMeshSampler, SamplerConfig,
    SpatialQueryProvider,
)


# ═══════════════════════════════════════════════════════════════════════════
# FIXTURES
# ═══════════════════════════════════════════════════════════════════════════

class ScriptedSpatial(SpatialQueryProvider):
    """Serwis odpowiadający na contains_point z listy odpowiedzi."""

    def __init__(self, answers, ready_after=1):
        self.answers = list(answers)
        self.ready_after = ready_after
        self.ready_calls = 0
        self.queries = []

    def is_ready(self):
        self.ready_calls += 1
        return self.ready_calls >= self.ready_after

    def nearest_point_on_mesh(self, point):
        return point

    def contains_point(self, point):
        self.queries.append(point)
        return self.answers.pop(0)

    def ray_cast(self, start, end):
        return None

    def overlap_circle(self, center, radius):
        return []


@pytest.fixture
def grid():
    """Siatka 6x4, hex_size = 10."""
    grid = HexGrid()
    grid.generate(width=6, height=4, hex_size=10.0)
    return grid


@pytest.fixture
def half_mesh():
    """Navmesh pokrywający tylko lewą część siatki (x < 42)."""
    return NavMesh.rectangle(Vec2(-20.0, -20.0), 62.0, 200.0)


@pytest.fixture
def sleeps():
    """Rejestrator wywołań sleep."""
    return []


# ═══════════════════════════════════════════════════════════════════════════
# TEST: KLASYFIKACJA KOMÓRKI
# ═══════════════════════════════════════════════════════════════════════════

def test_center_on_mesh_is_navigable(grid):
    """Środek na navmeshu wystarcza, bez próbek."""
    spatial = ScriptedSpatial([True])
    sampler = NavMeshSampler(spatial, SamplerConfig(sample_count=5))
    assert sampler.classify_cell(grid.cell_at_index(0), 10.0) is True
    assert len(spatial.queries) == 1


def test_three_of_five_samples_is_navigable(grid):
    """N = 5, 3 z 5 próbek na navmeshu: chodliwa (3 > 5 // 2)."""
    spatial = ScriptedSpatial([False, True, True, False, True, False])
    sampler = NavMeshSampler(spatial, SamplerConfig(sample_count=5))
    assert sampler.classify_cell(grid.cell_at_index(0), 10.0) is True


def test_two_of_five_samples_is_not_navigable(grid):
    """N = 5, 2 z 5 próbek na navmeshu: nie chodliwa."""
    spatial = ScriptedSpatial([False, True, False, False, True, False])
    sampler = NavMeshSampler(spatial, SamplerConfig(sample_count=5))
    assert sampler.classify_cell(grid.cell_at_index(0), 10.0) is False


def test_even_sample_count_tie_is_not_navigable(grid):
    """N = 6, remis 3 z 6: nie chodliwa."""
    spatial = ScriptedSpatial([False, True, True, True, False, False, False])
    sampler = NavMeshSampler(spatial, SamplerConfig(sample_count=6))
    assert sampler.classify_cell(grid.cell_at_index(0), 10.0) is False


def test_single_sample_uses_center_only(grid):
    """N = 1: tylko test środka."""
    spatial = ScriptedSpatial([False])
    sampler = NavMeshSampler(spatial, SamplerConfig(sample_count=1))
    assert sampler.classify_cell(grid.cell_at_index(0), 10.0) is False
    assert len(spatial.queries) == 1


def test_sample_points_on_ring():
    """Próbki leżą na okręgu 0.7 * hex_size, pierwsza pod kątem 0."""
    sampler = NavMeshSampler(None, SamplerConfig(sample_count=4))
    center = Vec2(100.0, 50.0)
    points = sampler.sample_points(center, 10.0)
    assert len(points) == 4
    for point in points:
        assert point.distance_to(center) == pytest.approx(7.0)
    assert points[0].is_close(Vec2(107.0, 50.0))
    assert points[1].is_close(Vec2(100.0, 57.0))


# ═══════════════════════════════════════════════════════════════════════════
# TEST: INTEGRACJA
# ═══════════════════════════════════════════════════════════════════════════

def test_integrate_matches_mesh(grid, half_mesh):
    """Komórki ze środkiem na navmeshu zostają enabled, reszta disabled."""
    sampler = NavMeshSampler(GeometrySpatialQuery(half_mesh), SamplerConfig(sample_count=6))
    result = sampler.integrate(grid)

    assert result is not None
    for cell in grid:
        if cell.world_position.x < 30.0:
            assert cell.enabled, cell
        elif cell.world_position.x > 50.0:
            assert not cell.enabled, cell
    assert result.enabled_count + result.disabled_count == len(grid)
    assert result.toggled_count == result.disabled_count


def test_integrate_is_idempotent(grid, half_mesh):
    """Drugie uruchomienie na tym samym navmeshu przełącza 0 komórek."""
    events = EventLogger()
    sampler = NavMeshSampler(GeometrySpatialQuery(half_mesh), events=events)
    sampler.integrate(grid)
    changes_after_first = len(events.get_events_by_type(EventType.CELL_STATE_CHANGED))

    second = sampler.integrate(grid)

    assert second.toggled_count == 0
    assert len(events.get_events_by_type(EventType.CELL_STATE_CHANGED)) == changes_after_first


def test_integrate_reenables_cells(grid, half_mesh):
    """Komórka wyłączona ręcznie, ale na navmeshu, wraca do enabled."""
    grid.set_enabled(HexCoord(0, 0), False)
    sampler = NavMeshSampler(GeometrySpatialQuery(half_mesh))
    sampler.integrate(grid)
    assert grid.cell_at_coords(HexCoord(0, 0)).enabled


def test_integrate_emits_completion(grid, half_mesh):
    """Integracja kończy się INTEGRATION_COMPLETE."""
    events = EventLogger()
    NavMeshSampler(GeometrySpatialQuery(half_mesh), events=events).integrate(grid)
    completed = events.get_events_by_type(EventType.INTEGRATION_COMPLETE)
    assert len(completed) == 1
    assert completed[0].data["enabled_count"] == grid.enabled_count


def test_integrate_without_grid_or_service(grid, half_mesh):
    """Brak siatki lub serwisu: None, bez wyjątku."""
    assert NavMeshSampler(GeometrySpatialQuery(half_mesh)).integrate(None) is None
    assert NavMeshSampler(GeometrySpatialQuery(half_mesh)).integrate(HexGrid()) is None
    assert NavMeshSampler(None).integrate(grid) is None
    assert grid.enabled_count == len(grid)


# ═══════════════════════════════════════════════════════════════════════════
# TEST: GOTOWOŚĆ SERWISU
# ═══════════════════════════════════════════════════════════════════════════

def test_waits_for_ready_service(grid, sleeps):
    """Serwis gotowy za 3. razem: 2 oczekiwania o stałym opóźnieniu."""
    spatial = ScriptedSpatial([True] * len(grid), ready_after=3)
    config = SamplerConfig(retry_delay=0.25, max_attempts=5)
    sampler = NavMeshSampler(spatial, config, sleep=sleeps.append)

    result = sampler.integrate(grid)

    assert result is not None
    assert result.attempts == 3
    assert sleeps == [0.25, 0.25]


def test_abandons_when_never_ready(grid, sleeps):
    """Po max_attempts: rezygnacja, siatka bez zmian, zdarzenie."""
    events = EventLogger()
    spatial = ScriptedSpatial([], ready_after=100)
    config = SamplerConfig(retry_delay=0.1, max_attempts=4)
    sampler = NavMeshSampler(spatial, config, events=events, sleep=sleeps.append)

    assert sampler.integrate(grid) is None
    assert spatial.ready_calls == 4
    assert len(sleeps) == 3
    assert grid.enabled_count == len(grid)
    abandoned = events.get_events_by_type(EventType.INTEGRATION_ABANDONED)
    assert abandoned[0].data["attempts"] == 4


def test_config_from_dict_ignores_unknown_keys():
    """SamplerConfig.from_dict pomija nieznane klucze."""
    config = SamplerConfig.from_dict({"sample_count": 8, "colour": "red"})
    assert config.sample_count == 8
    assert config.sample_radius_factor == pytest.approx(0.7)
