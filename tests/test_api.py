"""
Testy dla API FastAPI.

Używa TestClient (httpx) na współdzielonej sesji resetowanej przed
każdym testem.
"""

import pytest
import sys
from pathlib import Path

from fastapi.testclient import TestClient

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from api.main import app
from api.state import get_session, reset_session


# ═══════════════════════════════════════════════════════════════════════════
# FIXTURES
# ═══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def client():
    """Klient testowy z czystą sesją."""
    reset_session()
    return TestClient(app)


@pytest.fixture
def generated(client):
    """Klient z wygenerowaną siatką 6x5."""
    response = client.post("/api/grid/generate", json={"width": 6, "height": 5, "hex_size": 10.0})
    assert response.status_code == 200
    return client


RECTANGLE = {
    "anchor": [-10.0, -10.0],
    "vertices": [[0, 0], [50, 0], [50, 300], [0, 300]],
    "polygons": [[0, 1, 2], [0, 2, 3]],
}


# ═══════════════════════════════════════════════════════════════════════════
# TEST: SIATKA
# ═══════════════════════════════════════════════════════════════════════════

def test_health(client):
    """Health check."""
    assert client.get("/api/health").json() == {"status": "healthy"}


def test_generate_grid(client):
    """Generowanie zwraca liczbę komórek."""
    response = client.post("/api/grid/generate", json={"width": 4, "height": 3})
    assert response.status_code == 200
    assert response.json()["cell_count"] == 12


def test_generate_uses_defaults(client):
    """Puste body: wymiary z defaults.yaml."""
    response = client.post("/api/grid/generate", json={})
    assert response.json()["cell_count"] == 20 * 15


def test_generate_rejects_invalid_dimensions(client):
    """Ujemna szerokość: 422."""
    response = client.post("/api/grid/generate", json={"width": -1})
    assert response.status_code == 422


def test_get_grid(generated):
    """Stan siatki z komórkami."""
    data = generated.get("/api/grid").json()
    assert data["generated"] is True
    assert data["cell_count"] == 30
    assert len(data["cells"]) == 30
    assert data["cells"][0] == {"q": 0, "r": 0, "index": 0, "enabled": True, "position": [0.0, 0.0]}


def test_set_cell_state(generated):
    """Wyłączenie komórki."""
    response = generated.put("/api/grid/cells/2/3", json={"enabled": False})
    assert response.json()["changed"] is True
    assert generated.get("/api/grid").json()["disabled_count"] == 1


def test_set_unknown_cell(generated):
    """Nieistniejąca komórka: 404."""
    response = generated.put("/api/grid/cells/40/40", json={"enabled": False})
    assert response.status_code == 404


def test_cell_state_before_generate(client):
    """Przed generowaniem: 409."""
    response = client.put("/api/grid/cells/0/0", json={"enabled": False})
    assert response.status_code == 409


def test_integrate_navmesh(generated):
    """Navmesh z przeszkodą wyłącza komórki spoza obszaru."""
    body = dict(RECTANGLE, obstacles=[{"id": "rock", "center": [100, 100], "radius": 5}])
    response = generated.post("/api/grid/navmesh", json=body)
    data = response.json()
    assert response.status_code == 200
    assert data["integrated"] is True
    assert data["disabled_count"] > 0
    assert data["enabled_count"] + data["disabled_count"] == 30


def test_integrate_invalid_mesh(generated):
    """Zły indeks wierzchołka: 422."""
    body = {"vertices": [[0, 0], [1, 0]], "polygons": [[0, 1, 7]]}
    response = generated.post("/api/grid/navmesh", json=body)
    assert response.status_code == 422


def test_obstacle_without_shape(generated):
    """Przeszkoda bez kształtu: 422."""
    body = dict(RECTANGLE, obstacles=[{"id": "ghost"}])
    response = generated.post("/api/grid/navmesh", json=body)
    assert response.status_code == 422


# ═══════════════════════════════════════════════════════════════════════════
# TEST: ŚCIEŻKI
# ═══════════════════════════════════════════════════════════════════════════

def test_find_path(generated):
    """Ścieżka między środkami komórek (0, 0) i (3, 0)."""
    response = generated.post("/api/path", json={"start": [0.0, 0.0], "goal": [45.0, 25.98]})
    data = response.json()
    assert data["status"] == "found"
    assert data["cells"] == [[0, 0], [1, 0], [2, 0], [3, 0]]


def test_find_path_outside_grid(generated):
    """Punkt poza siatką: status invalid_endpoint, nie błąd HTTP."""
    response = generated.post("/api/path", json={"start": [-500.0, 0.0], "goal": [0.0, 0.0]})
    assert response.status_code == 200
    assert response.json()["status"] == "invalid_endpoint"


def test_find_path_before_generate(client):
    """Przed generowaniem: 409."""
    response = client.post("/api/path", json={"start": [0, 0], "goal": [1, 1]})
    assert response.status_code == 409


def test_plan_path(generated):
    """Ścieżka ciągła przycięta do budżetu."""
    response = generated.post(
        "/api/plan",
        json={"start": [0.0, 0.0], "destination": [200.0, 0.0], "movement_budget": 50.0},
    )
    data = response.json()
    assert data["status"] == "success"
    assert data["trimmed"] is True
    assert data["total_length"] == pytest.approx(50.0)


def test_plan_rejects_negative_budget(generated):
    """Ujemny budżet: 422 (walidacja pydantic)."""
    response = generated.post(
        "/api/plan",
        json={"start": [0.0, 0.0], "destination": [10.0, 0.0], "movement_budget": -5.0},
    )
    assert response.status_code == 422


def test_events_log(generated):
    """Log zdarzeń zawiera generowanie siatki."""
    generated.put("/api/grid/cells/1/1", json={"enabled": False})
    data = generated.get("/api/events").json()
    types = [e["type"] for e in data["events"]]
    assert "GRID_GENERATED" in types
    assert "CELL_STATE_CHANGED" in types
    assert data["total_events"] == len(data["events"])


def test_api_session_event_log_is_capped(client):
    """Sesja API ma limit logu zdarzeń z defaults.yaml."""
    assert get_session().events.max_events == 5000


# ═══════════════════════════════════════════════════════════════════════════
# TEST: WALIDACJA PUNKTÓW
# ═══════════════════════════════════════════════════════════════════════════

def test_path_point_too_short(generated):
    """Punkt z jedną współrzędną: 422, nie 500."""
    response = generated.post("/api/path", json={"start": [1.0], "goal": [5, 5]})
    assert response.status_code == 422


def test_plan_point_too_long(generated):
    """Punkt z trzema współrzędnymi nie jest obcinany: 422."""
    response = generated.post(
        "/api/plan",
        json={"start": [0.0, 0.0, 7.0], "destination": [10.0, 0.0], "movement_budget": 5.0},
    )
    assert response.status_code == 422


def test_navmesh_vertex_wrong_length(generated):
    """Wierzchołek navmesha musi mieć 2 współrzędne."""
    body = dict(RECTANGLE, vertices=[[0, 0], [50], [50, 300], [0, 300]])
    response = generated.post("/api/grid/navmesh", json=body)
    assert response.status_code == 422


def test_generate_origin_offset_wrong_length(client):
    """origin_offset musi być parą [x, y]."""
    response = client.post("/api/grid/generate", json={"origin_offset": [1.0, 2.0, 3.0]})
    assert response.status_code == 422
