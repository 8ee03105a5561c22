"""
Opis chodliwego obszaru (navigable mesh).

Navmesh to zbiór prostych wielokątów. Każdy wielokąt to uporządkowana
lista indeksów do wspólnej tablicy wierzchołków. Wierzchołki są w
układzie lokalnym, przesuniętym o znany punkt zakotwiczenia (anchor):

    world = local + anchor

FORMAT (YAML / JSON):
═══════════════════════════════════════════════════════════════════

    anchor: [100.0, 50.0]
    vertices:
      - [0, 0]
      - [80, 0]
      - [80, 60]
      - [0, 60]
    polygons:
      - [0, 1, 2]
      - [0, 2, 3]

Test zawierania punktu:
    Ray casting (even-odd) + punkty leżące na krawędzi liczą się
    jako wewnątrz (sąsiednie wielokąty dzielą krawędzie).

Przykład użycia:
    >>> mesh = NavMesh.from_dict(data)
    >>> mesh.contains_point(Vec2(110, 60))
    True
"""

from __future__ import annotations
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, FrozenSet, List, Optional, Sequence, Tuple

from ..core.vec2 import Vec2, ZERO

EDGE_EPSILON = 1e-9


# ═══════════════════════════════════════════════════════════════════════════
# GEOMETRIA
# ═══════════════════════════════════════════════════════════════════════════

def closest_point_on_segment(point: Vec2, a: Vec2, b: Vec2) -> Vec2:
    """
    Najbliższy punkt odcinka AB względem punktu.
    """
    ab = b - a
    denom = ab.dot(ab)
    if denom == 0.0:
        return a
    t = max(0.0, min(1.0, (point - a).dot(ab) / denom))
    return a + ab * t


def point_on_segment(point: Vec2, a: Vec2, b: Vec2, eps: float = EDGE_EPSILON) -> bool:
    """Czy punkt leży na odcinku AB (z tolerancją)."""
    return closest_point_on_segment(point, a, b).distance_to(point) <= eps


def point_in_polygon(point: Vec2, polygon: Sequence[Vec2]) -> bool:
    """
    Test zawierania punktu w wielokącie prostym.

    Algorytm (ray casting, even-odd):
        Promień z punktu w kierunku +x; liczba przecięć z krawędziami
        nieparzysta = wewnątrz. Punkty na krawędzi = wewnątrz.

    Args:
        point: Testowany punkt
        polygon: Wierzchołki wielokąta (w kolejności obwodu)

    Returns:
        bool: True jeśli punkt jest wewnątrz lub na krawędzi
    """
    count = len(polygon)
    if count < 3:
        return False

    inside = False
    j = count - 1
    for i in range(count):
        a = polygon[i]
        b = polygon[j]
        if point_on_segment(point, a, b):
            return True
        if (a.y > point.y) != (b.y > point.y):
            x_cross = a.x + (point.y - a.y) * (b.x - a.x) / (b.y - a.y)
            if point.x < x_cross:
                inside = not inside
        j = i
    return inside


def polygon_centroid(polygon: Sequence[Vec2]) -> Vec2:
    """Średnia wierzchołków (wystarcza dla wielokątów wypukłych)."""
    count = len(polygon)
    return Vec2(
        sum(p.x for p in polygon) / count,
        sum(p.y for p in polygon) / count,
    )


# ═══════════════════════════════════════════════════════════════════════════
# INTERFEJS
# ═══════════════════════════════════════════════════════════════════════════

class NavigableMeshProvider(ABC):
    """
    Źródło opisu chodliwego obszaru.

    Implementacje dostarczają surowe dane; metody pomocnicze
    (world_polygon, polygon_count) są wspólne.
    """

    @abstractmethod
    def get_vertices(self) -> List[Vec2]:
        """Wierzchołki w układzie lokalnym."""

    @abstractmethod
    def get_polygons(self) -> List[List[int]]:
        """Wielokąty jako listy indeksów wierzchołków."""

    @abstractmethod
    def get_anchor(self) -> Vec2:
        """Globalne zakotwiczenie układu lokalnego."""

    def polygon_count(self) -> int:
        return len(self.get_polygons())

    def world_polygon(self, index: int) -> List[Vec2]:
        """
        Wierzchołki wielokąta w przestrzeni świata.

        Args:
            index: Indeks wielokąta
        """
        vertices = self.get_vertices()
        anchor = self.get_anchor()
        return [vertices[i] + anchor for i in self.get_polygons()[index]]


# ═══════════════════════════════════════════════════════════════════════════
# NAVMESH
# ═══════════════════════════════════════════════════════════════════════════

Portal = Tuple[Vec2, Vec2]


@dataclass
class NavMesh(NavigableMeshProvider):
    """
    Navmesh z wielokątów indeksowanych do wspólnej tablicy wierzchołków.

    Attributes:
        vertices (List[Vec2]): Wierzchołki (układ lokalny)
        polygons (List[List[int]]): Wielokąty (indeksy)
        anchor (Vec2): Przesunięcie układu lokalnego do świata

    Raises:
        ValueError: Przy wielokącie < 3 wierzchołków lub złym indeksie
    """
    vertices: List[Vec2] = field(default_factory=list)
    polygons: List[List[int]] = field(default_factory=list)
    anchor: Vec2 = ZERO
    _world_cache: Optional[List[List[Vec2]]] = field(default=None, repr=False)

    def __post_init__(self) -> None:
        for index, polygon in enumerate(self.polygons):
            if len(polygon) < 3:
                raise ValueError(f"Polygon {index} has fewer than 3 vertices")
            for vertex in polygon:
                if not 0 <= vertex < len(self.vertices):
                    raise ValueError(
                        f"Polygon {index} references missing vertex {vertex}"
                    )

    # ─────────────────────────────────────────────────────────────────────────
    # NavigableMeshProvider
    # ─────────────────────────────────────────────────────────────────────────

    def get_vertices(self) -> List[Vec2]:
        return self.vertices

    def get_polygons(self) -> List[List[int]]:
        return self.polygons

    def get_anchor(self) -> Vec2:
        return self.anchor

    def world_polygons(self) -> List[List[Vec2]]:
        """Wszystkie wielokąty w przestrzeni świata (cache)."""
        if self._world_cache is None:
            self._world_cache = [
                self.world_polygon(i) for i in range(len(self.polygons))
            ]
        return self._world_cache

    # ─────────────────────────────────────────────────────────────────────────
    # ZAPYTANIA
    # ─────────────────────────────────────────────────────────────────────────

    def containing_polygon(self, point: Vec2) -> Optional[int]:
        """
        Indeks pierwszego wielokąta zawierającego punkt.

        Returns:
            Optional[int]: Indeks lub None jeśli punkt poza navmeshem
        """
        for index, polygon in enumerate(self.world_polygons()):
            if point_in_polygon(point, polygon):
                return index
        return None

    def contains_point(self, point: Vec2) -> bool:
        """Czy punkt świata leży na navmeshu."""
        return self.containing_polygon(point) is not None

    def nearest_point(self, point: Vec2) -> Optional[Vec2]:
        """
        Najbliższy punkt navmesha.

        Returns:
            Optional[Vec2]: Sam punkt jeśli jest na navmeshu, najbliższy
                            punkt brzegu w przeciwnym razie, None dla
                            pustego navmesha
        """
        if self.contains_point(point):
            return point

        best: Optional[Vec2] = None
        best_distance = float("inf")
        for polygon in self.world_polygons():
            count = len(polygon)
            for i in range(count):
                candidate = closest_point_on_segment(point, polygon[i], polygon[(i + 1) % count])
                distance = candidate.distance_to(point)
                if distance < best_distance:
                    best = candidate
                    best_distance = distance
        return best

    def centroid(self, index: int) -> Vec2:
        """Środek wielokąta w przestrzeni świata."""
        return polygon_centroid(self.world_polygons()[index])

    def adjacency(self) -> Dict[int, List[Tuple[int, Portal]]]:
        """
        Graf sąsiedztwa wielokątów.

        Dwa wielokąty są sąsiadami, gdy dzielą krawędź (parę indeksów
        wierzchołków). Portal = wspólna krawędź w przestrzeni świata.

        Returns:
            Dict: polygon -> [(sąsiad, portal), ...]
        """
        owners: Dict[FrozenSet[int], List[int]] = {}
        for index, polygon in enumerate(self.polygons):
            count = len(polygon)
            for i in range(count):
                edge = frozenset((polygon[i], polygon[(i + 1) % count]))
                owners.setdefault(edge, []).append(index)

        graph: Dict[int, List[Tuple[int, Portal]]] = {
            i: [] for i in range(len(self.polygons))
        }
        for edge, polys in owners.items():
            if len(polys) < 2:
                continue
            a, b = sorted(edge)
            portal = (self.vertices[a] + self.anchor, self.vertices[b] + self.anchor)
            for p in polys:
                for other in polys:
                    if other != p:
                        graph[p].append((other, portal))
        return graph

    # ─────────────────────────────────────────────────────────────────────────
    # SERIALIZACJA
    # ─────────────────────────────────────────────────────────────────────────

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> NavMesh:
        """
        Tworzy navmesh ze słownika (YAML / JSON).

        Args:
            data: {"vertices": [[x, y], ...], "polygons": [[i, j, k], ...],
                   "anchor": [x, y]}
        """
        return cls(
            vertices=[Vec2.of(v) for v in data.get("vertices", [])],
            polygons=[list(p) for p in data.get("polygons", [])],
            anchor=Vec2.of(data.get("anchor", [0.0, 0.0])),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "anchor": self.anchor.as_list(),
            "vertices": [v.as_list() for v in self.vertices],
            "polygons": [list(p) for p in self.polygons],
        }

    @classmethod
    def rectangle(cls, origin: Vec2, width: float, height: float) -> NavMesh:
        """
        Navmesh z jednego prostokąta (dwa trójkąty).

        Args:
            origin: Lewy górny róg (anchor)
            width, height: Wymiary
        """
        return cls(
            vertices=[
                Vec2(0.0, 0.0),
                Vec2(width, 0.0),
                Vec2(width, height),
                Vec2(0.0, height),
            ],
            polygons=[[0, 1, 2], [0, 2, 3]],
            anchor=origin,
        )
