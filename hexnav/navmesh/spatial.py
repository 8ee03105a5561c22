"""
Serwis zapytań przestrzennych (spatial queries).

Rdzeń nawigacji nie zna fizyki - pyta o świat wyłącznie przez
wąski interfejs SpatialQueryProvider:

    is_ready()                       - czy serwis jest zainicjalizowany
    nearest_point_on_mesh(p)         - najbliższy punkt chodliwego obszaru
    contains_point(p)                - czy punkt leży na navmeshu
    ray_cast(start, end)             - najbliższe trafienie przeszkody
    overlap_circle(center, radius)   - przeszkody nachodzące na dysk

Wszystkie zapytania są synchroniczne.

GeometrySpatialQuery to implementacja referencyjna: navmesh + zbiór
przeszkód (koła i wielokąty) liczony czystą geometrią. Silnik gry
podstawia własną implementację (np. nad silnikiem fizyki).

Przykład użycia:
    >>> spatial = GeometrySpatialQuery(mesh, [CircleObstacle("rock", Vec2(50, 50), 8.0)])
    >>> spatial.overlap_circle(Vec2(55, 50), 4.0)
    ['rock']
    >>> spatial.ray_cast(Vec2(0, 50), Vec2(100, 50)).distance
    42.0
"""

from __future__ import annotations
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import List, Optional, Sequence
import math

from ..core.vec2 import Vec2
from .mesh import NavMesh, closest_point_on_segment, point_in_polygon


@dataclass(frozen=True)
class RayHit:
    """
    Trafienie promienia.

    Attributes:
        point (Vec2): Punkt trafienia
        distance (float): Odległość od początku promienia
        obstacle_id (str): Trafiona przeszkoda
    """
    point: Vec2
    distance: float
    obstacle_id: str


# ═══════════════════════════════════════════════════════════════════════════
# INTERFEJS
# ═══════════════════════════════════════════════════════════════════════════

class SpatialQueryProvider(ABC):
    """Interfejs serwisu zapytań przestrzennych."""

    @abstractmethod
    def is_ready(self) -> bool:
        """Czy serwis może odpowiadać na zapytania."""

    @abstractmethod
    def nearest_point_on_mesh(self, point: Vec2) -> Optional[Vec2]:
        """Najbliższy punkt navmesha (None = brak navmesha)."""

    @abstractmethod
    def contains_point(self, point: Vec2) -> bool:
        """Czy punkt leży na navmeshu."""

    @abstractmethod
    def ray_cast(self, start: Vec2, end: Vec2) -> Optional[RayHit]:
        """Najbliższe trafienie na odcinku start -> end (None = wolne)."""

    @abstractmethod
    def overlap_circle(self, center: Vec2, radius: float) -> List[str]:
        """ID przeszkód nachodzących na dysk."""


# ═══════════════════════════════════════════════════════════════════════════
# PRZESZKODY
# ═══════════════════════════════════════════════════════════════════════════

class Obstacle(ABC):
    """Przeszkoda statyczna."""

    id: str

    @abstractmethod
    def overlaps_circle(self, center: Vec2, radius: float) -> bool:
        """Czy przeszkoda nachodzi na dysk."""

    @abstractmethod
    def ray_fraction(self, start: Vec2, end: Vec2) -> Optional[float]:
        """
        Parametr t w [0, 1] pierwszego trafienia na odcinku start -> end.

        Start wewnątrz przeszkody = trafienie w t = 0.
        """


@dataclass
class CircleObstacle(Obstacle):
    """Przeszkoda w kształcie koła."""
    id: str
    center: Vec2
    radius: float

    def overlaps_circle(self, center: Vec2, radius: float) -> bool:
        return self.center.distance_to(center) < self.radius + radius

    def ray_fraction(self, start: Vec2, end: Vec2) -> Optional[float]:
        # |start + t*d - c|^2 = r^2
        d = end - start
        f = start - self.center
        c = f.dot(f) - self.radius * self.radius
        if c <= 0.0:
            return 0.0

        a = d.dot(d)
        if a == 0.0:
            return None
        b = 2.0 * f.dot(d)
        discriminant = b * b - 4.0 * a * c
        if discriminant < 0.0:
            return None

        t = (-b - math.sqrt(discriminant)) / (2.0 * a)
        if 0.0 <= t <= 1.0:
            return t
        return None


@dataclass
class PolygonObstacle(Obstacle):
    """Przeszkoda w kształcie wielokąta prostego (współrzędne świata)."""
    id: str
    points: List[Vec2] = field(default_factory=list)

    def _edges(self):
        count = len(self.points)
        for i in range(count):
            yield self.points[i], self.points[(i + 1) % count]

    def overlaps_circle(self, center: Vec2, radius: float) -> bool:
        if point_in_polygon(center, self.points):
            return True
        return any(
            closest_point_on_segment(center, a, b).distance_to(center) < radius
            for a, b in self._edges()
        )

    def ray_fraction(self, start: Vec2, end: Vec2) -> Optional[float]:
        if point_in_polygon(start, self.points):
            return 0.0

        best: Optional[float] = None
        for a, b in self._edges():
            t = _segment_intersection(start, end, a, b)
            if t is not None and (best is None or t < best):
                best = t
        return best


def _segment_intersection(p: Vec2, p2: Vec2, q: Vec2, q2: Vec2) -> Optional[float]:
    """
    Parametr t na odcinku p -> p2 przecięcia z odcinkiem q -> q2.

    Odcinki równoległe / współliniowe są traktowane jako brak przecięcia.
    """
    r = p2 - p
    s = q2 - q
    denom = r.cross(s)
    if denom == 0.0:
        return None
    qp = q - p
    t = qp.cross(s) / denom
    u = qp.cross(r) / denom
    if 0.0 <= t <= 1.0 and 0.0 <= u <= 1.0:
        return t
    return None


# ═══════════════════════════════════════════════════════════════════════════
# IMPLEMENTACJA REFERENCYJNA
# ═══════════════════════════════════════════════════════════════════════════

class GeometrySpatialQuery(SpatialQueryProvider):
    """
    Zapytania przestrzenne liczone geometrycznie.

    Attributes:
        mesh (Optional[NavMesh]): Navmesh (None = brak obszaru chodliwego)
        obstacles (List[Obstacle]): Przeszkody statyczne
        ready (bool): Flaga gotowości (symuluje serwis, który się uruchamia)
    """

    def __init__(
        self,
        mesh: Optional[NavMesh] = None,
        obstacles: Optional[Sequence[Obstacle]] = None,
        ready: bool = True,
    ):
        self.mesh = mesh
        self.obstacles: List[Obstacle] = list(obstacles or [])
        self.ready = ready

    def add_obstacle(self, obstacle: Obstacle) -> None:
        self.obstacles.append(obstacle)

    def is_ready(self) -> bool:
        return self.ready

    def nearest_point_on_mesh(self, point: Vec2) -> Optional[Vec2]:
        if self.mesh is None:
            return None
        return self.mesh.nearest_point(point)

    def contains_point(self, point: Vec2) -> bool:
        if self.mesh is None:
            return False
        return self.mesh.contains_point(point)

    def ray_cast(self, start: Vec2, end: Vec2) -> Optional[RayHit]:
        best_t: Optional[float] = None
        best_id = ""
        for obstacle in self.obstacles:
            t = obstacle.ray_fraction(start, end)
            if t is not None and (best_t is None or t < best_t):
                best_t = t
                best_id = obstacle.id

        if best_t is None:
            return None

        point = start.lerp(end, best_t)
        return RayHit(point=point, distance=start.distance_to(point), obstacle_id=best_id)

    def overlap_circle(self, center: Vec2, radius: float) -> List[str]:
        return [o.id for o in self.obstacles if o.overlaps_circle(center, radius)]
