"""
Punkt / wektor 2D w przestrzeni ciągłej (world space).

Vec2 jest używany wszędzie tam, gdzie pracujemy poza siatką hex:
- pozycje środków komórek (HexCell.world_position)
- wierzchołki navmesha
- punkty ścieżki ciągłej (ContinuousPathPlanner)

Klasa jest niemutowalna - operatory zwracają nowe instancje.

Przykład użycia:
    >>> a = Vec2(3.0, 4.0)
    >>> a.length()
    5.0
    >>> (a + Vec2(1, 1)) * 2
    Vec2(x=8.0, y=10.0)
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Iterable, Sequence, Tuple
import math


@dataclass(frozen=True)
class Vec2:
    """
    Niemutowalny wektor 2D.

    Attributes:
        x (float): Współrzędna pozioma
        y (float): Współrzędna pionowa
    """
    x: float
    y: float

    # ─────────────────────────────────────────────────────────────────────────
    # OPERATORY ARYTMETYCZNE
    # ─────────────────────────────────────────────────────────────────────────

    def __add__(self, other: Vec2) -> Vec2:
        return Vec2(self.x + other.x, self.y + other.y)

    def __sub__(self, other: Vec2) -> Vec2:
        return Vec2(self.x - other.x, self.y - other.y)

    def __mul__(self, scalar: float) -> Vec2:
        return Vec2(self.x * scalar, self.y * scalar)

    __rmul__ = __mul__

    def __truediv__(self, scalar: float) -> Vec2:
        return Vec2(self.x / scalar, self.y / scalar)

    def __neg__(self) -> Vec2:
        return Vec2(-self.x, -self.y)

    # ─────────────────────────────────────────────────────────────────────────
    # GEOMETRIA
    # ─────────────────────────────────────────────────────────────────────────

    def dot(self, other: Vec2) -> float:
        """Iloczyn skalarny."""
        return self.x * other.x + self.y * other.y

    def cross(self, other: Vec2) -> float:
        """Iloczyn wektorowy (składowa z)."""
        return self.x * other.y - self.y * other.x

    def length(self) -> float:
        """Długość wektora."""
        return math.hypot(self.x, self.y)

    def distance_to(self, other: Vec2) -> float:
        """Odległość euklidesowa do innego punktu."""
        return math.hypot(self.x - other.x, self.y - other.y)

    def normalized(self) -> Vec2:
        """
        Wektor jednostkowy w tym samym kierunku.

        Returns:
            Vec2: Wektor o długości 1 (lub zerowy dla wektora zerowego)
        """
        length = self.length()
        if length == 0.0:
            return Vec2(0.0, 0.0)
        return Vec2(self.x / length, self.y / length)

    def lerp(self, other: Vec2, t: float) -> Vec2:
        """
        Interpolacja liniowa między self (t=0) a other (t=1).
        """
        return Vec2(
            self.x + (other.x - self.x) * t,
            self.y + (other.y - self.y) * t,
        )

    def angle_to(self, other: Vec2) -> float:
        """
        Kąt (w stopniach, 0-180) między dwoma wektorami kierunku.

        Dla wektora zerowego zwraca 0 - brak kierunku = brak skrętu.
        """
        denom = self.length() * other.length()
        if denom == 0.0:
            return 0.0
        cos_angle = max(-1.0, min(1.0, self.dot(other) / denom))
        return math.degrees(math.acos(cos_angle))

    def is_close(self, other: Vec2, eps: float = 1e-9) -> bool:
        """Porównanie z tolerancją."""
        return abs(self.x - other.x) <= eps and abs(self.y - other.y) <= eps

    # ─────────────────────────────────────────────────────────────────────────
    # KONWERSJE
    # ─────────────────────────────────────────────────────────────────────────

    @classmethod
    def of(cls, value: Sequence[float]) -> Vec2:
        """Tworzy Vec2 z pary [x, y] (np. z YAML / JSON)."""
        if len(value) != 2:
            raise ValueError(f"expected [x, y], got {list(value)!r}")
        return cls(float(value[0]), float(value[1]))

    def as_tuple(self) -> Tuple[float, float]:
        return (self.x, self.y)

    def as_list(self) -> list:
        return [self.x, self.y]

    def __str__(self) -> str:
        return f"({self.x:.2f}, {self.y:.2f})"


ZERO = Vec2(0.0, 0.0)


def polyline_length(points: Iterable[Vec2]) -> float:
    """
    Suma odległości między kolejnymi punktami łamanej.

    Args:
        points: Punkty łamanej

    Returns:
        float: Długość łamanej (0 dla < 2 punktów)
    """
    total = 0.0
    previous = None
    for point in points:
        if previous is not None:
            total += previous.distance_to(point)
        previous = point
    return total
