"""
Testy dla navmesha, zapytań przestrzennych i ścieżek po navmeshu.
"""

import pytest
import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from hexnav.core.vec2 import Vec2, polyline_length
from hexnav.navmesh import (
    CircleObstacle, GeometrySpatialQuery, NavMesh, NavMeshPathfinder,
    PolygonObstacle, point_in_polygon,
)


# ═══════════════════════════════════════════════════════════════════════════
# FIXTURES
# ═══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def square():
    """Kwadrat 10x10."""
    return [Vec2(0, 0), Vec2(10, 0), Vec2(10, 10), Vec2(0, 10)]


@pytest.fixture
def l_mesh():
    """
    Navmesh w kształcie litery L (trzy kwadraty 100x100):

        +---+
        | 2 |
        +---+---+
        | 0 | 1 |
        +---+---+
    """
    return NavMesh.from_dict({
        "anchor": [0.0, 0.0],
        "vertices": [
            [0, 0], [100, 0], [200, 0],
            [0, 100], [100, 100], [200, 100],
            [0, 200], [100, 200],
        ],
        "polygons": [
            [0, 1, 4, 3],
            [1, 2, 5, 4],
            [3, 4, 7, 6],
        ],
    })


# ═══════════════════════════════════════════════════════════════════════════
# TEST: GEOMETRIA
# ═══════════════════════════════════════════════════════════════════════════

def test_vec2_basics():
    """Długość, odległość i interpolacja."""
    a = Vec2(3.0, 4.0)
    assert a.length() == pytest.approx(5.0)
    assert a.distance_to(Vec2(0.0, 0.0)) == pytest.approx(5.0)
    assert Vec2(0, 0).lerp(Vec2(10, 20), 0.25) == Vec2(2.5, 5.0)
    assert Vec2(1, 0).angle_to(Vec2(0, 1)) == pytest.approx(90.0)
    assert polyline_length([Vec2(0, 0), Vec2(3, 4), Vec2(3, 10)]) == pytest.approx(11.0)


def test_point_in_polygon_inside_and_outside(square):
    """Środek wewnątrz, punkt daleko na zewnątrz."""
    assert point_in_polygon(Vec2(5, 5), square)
    assert not point_in_polygon(Vec2(15, 5), square)
    assert not point_in_polygon(Vec2(-1, -1), square)


def test_point_in_polygon_edge_counts_as_inside(square):
    """Punkty na krawędzi i w wierzchołku są wewnątrz."""
    assert point_in_polygon(Vec2(10, 5), square)
    assert point_in_polygon(Vec2(0, 0), square)
    assert point_in_polygon(Vec2(5, 10), square)


def test_point_in_concave_polygon():
    """Wklęsły wielokąt (even-odd)."""
    u_shape = [
        Vec2(0, 0), Vec2(30, 0), Vec2(30, 30), Vec2(20, 30),
        Vec2(20, 10), Vec2(10, 10), Vec2(10, 30), Vec2(0, 30),
    ]
    assert point_in_polygon(Vec2(5, 20), u_shape)
    assert not point_in_polygon(Vec2(15, 20), u_shape)


def test_degenerate_polygon_contains_nothing():
    """Mniej niż 3 wierzchołki = pusty obszar."""
    assert not point_in_polygon(Vec2(0, 0), [Vec2(0, 0), Vec2(1, 1)])


# ═══════════════════════════════════════════════════════════════════════════
# TEST: NAVMESH
# ═══════════════════════════════════════════════════════════════════════════

def test_mesh_contains_point(l_mesh):
    """Zawieranie w L."""
    assert l_mesh.contains_point(Vec2(50, 50))
    assert l_mesh.contains_point(Vec2(150, 50))
    assert l_mesh.contains_point(Vec2(50, 150))
    assert not l_mesh.contains_point(Vec2(150, 150))


def test_mesh_anchor_offsets_vertices():
    """Anchor przesuwa navmesh w świecie."""
    mesh = NavMesh.rectangle(Vec2(100.0, 50.0), 80.0, 60.0)
    assert mesh.contains_point(Vec2(110.0, 60.0))
    assert not mesh.contains_point(Vec2(10.0, 10.0))


def test_mesh_rejects_bad_polygons():
    """Wielokąt < 3 wierzchołków lub zły indeks to ValueError."""
    with pytest.raises(ValueError):
        NavMesh(vertices=[Vec2(0, 0), Vec2(1, 0)], polygons=[[0, 1]])
    with pytest.raises(ValueError):
        NavMesh(vertices=[Vec2(0, 0), Vec2(1, 0), Vec2(0, 1)], polygons=[[0, 1, 5]])


def test_mesh_nearest_point(l_mesh):
    """Punkt poza navmeshem jest przyciągany do brzegu."""
    assert l_mesh.nearest_point(Vec2(50, 50)) == Vec2(50, 50)
    nearest = l_mesh.nearest_point(Vec2(250, 50))
    assert nearest.is_close(Vec2(200, 50))


def test_mesh_adjacency(l_mesh):
    """Wielokąty dzielące krawędź są sąsiadami."""
    graph = l_mesh.adjacency()
    assert sorted(n for n, _ in graph[0]) == [1, 2]
    assert [n for n, _ in graph[1]] == [0]
    assert [n for n, _ in graph[2]] == [0]


def test_mesh_dict_round_trip(l_mesh):
    """to_dict -> from_dict zachowuje navmesh."""
    restored = NavMesh.from_dict(l_mesh.to_dict())
    assert restored.vertices == l_mesh.vertices
    assert restored.polygons == l_mesh.polygons


# ═══════════════════════════════════════════════════════════════════════════
# TEST: ZAPYTANIA PRZESTRZENNE
# ═══════════════════════════════════════════════════════════════════════════

def test_ray_cast_hits_circle():
    """Promień trafia koło w najbliższym punkcie."""
    spatial = GeometrySpatialQuery(obstacles=[CircleObstacle("rock", Vec2(50, 50), 8.0)])
    hit = spatial.ray_cast(Vec2(0, 50), Vec2(100, 50))
    assert hit is not None
    assert hit.obstacle_id == "rock"
    assert hit.distance == pytest.approx(42.0)


def test_ray_cast_misses():
    """Promień obok przeszkody: brak trafienia."""
    spatial = GeometrySpatialQuery(obstacles=[CircleObstacle("rock", Vec2(50, 50), 8.0)])
    assert spatial.ray_cast(Vec2(0, 0), Vec2(100, 0)) is None


def test_ray_cast_nearest_of_many():
    """Zwracane jest najbliższe trafienie."""
    spatial = GeometrySpatialQuery(obstacles=[
        CircleObstacle("far", Vec2(80, 0), 5.0),
        PolygonObstacle("wall", [Vec2(20, -10), Vec2(25, -10), Vec2(25, 10), Vec2(20, 10)]),
    ])
    hit = spatial.ray_cast(Vec2(0, 0), Vec2(100, 0))
    assert hit.obstacle_id == "wall"
    assert hit.distance == pytest.approx(20.0)


def test_ray_cast_from_inside_obstacle():
    """Start wewnątrz przeszkody = trafienie w odległości 0."""
    spatial = GeometrySpatialQuery(obstacles=[CircleObstacle("rock", Vec2(0, 0), 5.0)])
    hit = spatial.ray_cast(Vec2(1, 0), Vec2(50, 0))
    assert hit.distance == pytest.approx(0.0)


def test_overlap_circle():
    """overlap_circle zwraca ID nachodzących przeszkód."""
    spatial = GeometrySpatialQuery(obstacles=[
        CircleObstacle("rock", Vec2(50, 50), 8.0),
        PolygonObstacle("box", [Vec2(0, 0), Vec2(10, 0), Vec2(10, 10), Vec2(0, 10)]),
    ])
    assert spatial.overlap_circle(Vec2(55, 50), 4.0) == ["rock"]
    assert spatial.overlap_circle(Vec2(12, 5), 4.0) == ["box"]
    assert spatial.overlap_circle(Vec2(30, 30), 2.0) == []


def test_spatial_without_mesh():
    """Brak navmesha: nic nie jest chodliwe."""
    spatial = GeometrySpatialQuery()
    assert not spatial.contains_point(Vec2(0, 0))
    assert spatial.nearest_point_on_mesh(Vec2(0, 0)) is None


# ═══════════════════════════════════════════════════════════════════════════
# TEST: ŚCIEŻKI PO NAVMESHU
# ═══════════════════════════════════════════════════════════════════════════

def test_mesh_path_same_polygon(l_mesh):
    """Ten sam wielokąt: linia prosta."""
    path = NavMeshPathfinder(l_mesh).find_path(Vec2(10, 10), Vec2(90, 90))
    assert path == [Vec2(10, 10), Vec2(90, 90)]


def test_mesh_path_through_portals(l_mesh):
    """Ścieżka z 1 do 2 przechodzi przez portale wielokąta 0."""
    path = NavMeshPathfinder(l_mesh).find_path(Vec2(150, 50), Vec2(50, 150))
    assert path[0] == Vec2(150, 50)
    assert path[-1] == Vec2(50, 150)
    assert Vec2(100, 50) in path
    assert Vec2(50, 100) in path
    assert len(path) == 4


def test_mesh_path_snaps_endpoints(l_mesh):
    """Punkty poza navmeshem są przyciągane do brzegu."""
    path = NavMeshPathfinder(l_mesh).find_path(Vec2(-20, 50), Vec2(50, 50))
    assert path[0].is_close(Vec2(0, 50))


def test_mesh_path_disconnected():
    """Rozłączne wielokąty: brak ścieżki."""
    mesh = NavMesh(
        vertices=[
            Vec2(0, 0), Vec2(10, 0), Vec2(0, 10),
            Vec2(50, 50), Vec2(60, 50), Vec2(50, 60),
        ],
        polygons=[[0, 1, 2], [3, 4, 5]],
    )
    assert NavMeshPathfinder(mesh).find_path(Vec2(2, 2), Vec2(52, 52)) == []
