"""
System współrzędnych hexagonalnych (Axial Coordinates).

Używamy Axial Coordinates (q, r) gdzie:
- q = kolumna
- r = wiersz

Konwersja do Cube Coordinates:
    x = q, y = r, z = -q - r
    Cube: (x, y, z) gdzie x + y + z = 0

Układ sąsiadów (kolejność stała - konsumenci mapują kierunki na krawędzie
wielokąta hexa, więc NIE wolno jej zmieniać):
    Indeks  Kierunek   (dq, dr)
    ──────────────────────────────
    0       E          (+1,  0)
    1       SE         ( 0, +1)
    2       SW         (-1, +1)
    3       W          (-1,  0)
    4       NW         ( 0, -1)
    5       NE         (+1, -1)

Odległość między hexami:
    distance = (|dx| + |dy| + |dz|) / 2

Pozycja w świecie (world space) zależy od orientacji:
    FLAT_TOP:   x = size * 3/2 * q
                y = size * sqrt(3) * (r + q/2)
    POINTY_TOP: x = size * sqrt(3) * (q + r/2)
                y = size * 3/2 * r
    + przesunięcie origin (offset) siatki.

Odwrotna konwersja (world -> axial) daje współrzędne ułamkowe, które
MUSZĄ być zaokrąglone przez cube_round(). Zwykłe round(q), round(r)
wybiera złą komórkę w pobliżu granic hexów.

Przykład użycia:
    >>> a = HexCoord(0, 0)
    >>> b = HexCoord(2, 2)
    >>> a.distance(b)
    4
    >>> HexCoord.from_world(a.to_world(10.0), 10.0)
    HexCoord(q=0, r=0)
"""

from __future__ import annotations
from dataclasses import dataclass
from enum import Enum
from typing import List, Tuple
import math

from .vec2 import Vec2, ZERO


SQRT3 = math.sqrt(3.0)

# Kierunki sąsiadów w układzie axial
# Kolejność: E, SE, SW, W, NW, NE
HEX_DIRECTIONS: List[Tuple[int, int]] = [
    (+1, 0),   # E
    (0, +1),   # SE
    (-1, +1),  # SW
    (-1, 0),   # W
    (0, -1),   # NW
    (+1, -1),  # NE
]


class HexOrientation(Enum):
    """Orientacja hexów na płaszczyźnie."""
    FLAT_TOP = "flat_top"
    POINTY_TOP = "pointy_top"

    @classmethod
    def parse(cls, value: "HexOrientation | str") -> HexOrientation:
        """
        Parsuje orientację z enuma lub stringa (np. z YAML).

        Raises:
            ValueError: Jeśli string nie jest znaną orientacją
        """
        if isinstance(value, cls):
            return value
        return cls(str(value).lower())


# ─────────────────────────────────────────────────────────────────────────────
# KONWERSJE AXIAL <-> CUBE
# ─────────────────────────────────────────────────────────────────────────────

def axial_to_cube(q: int, r: int) -> Tuple[int, int, int]:
    """
    Konwertuje axial (q, r) na cube (x, y, z).

    Returns:
        Tuple[int, int, int]: (q, r, -q - r)
    """
    return (q, r, -q - r)


def cube_to_axial(x: int, y: int, z: int) -> Tuple[int, int]:
    """
    Konwertuje cube (x, y, z) na axial (q, r).

    Raises:
        ValueError: Jeśli x + y + z != 0
    """
    if x + y + z != 0:
        raise ValueError(f"Invalid cube coordinates: {x} + {y} + {z} != 0")
    return (x, y)


@dataclass(frozen=True)
class HexCoord:
    """
    Współrzędna hexagonalna w systemie axial (q, r).

    Klasa jest niemutowalna (frozen=True), więc może być używana jako
    klucz w słowniku lub element zbioru (indeks komórek w HexGrid).

    Attributes:
        q (int): Współrzędna kolumny
        r (int): Współrzędna wiersza

    Note:
        Współrzędna z w systemie cube jest wyliczana jako: z = -q - r
    """
    q: int
    r: int

    # ─────────────────────────────────────────────────────────────────────────
    # WŁAŚCIWOŚCI
    # ─────────────────────────────────────────────────────────────────────────

    @property
    def s(self) -> int:
        """Trzecia współrzędna cube (z = -q - r)."""
        return -self.q - self.r

    @property
    def cube(self) -> Tuple[int, int, int]:
        """
        Konwersja do współrzędnych cube.

        Returns:
            Tuple[int, int, int]: Krotka (x, y, z)
        """
        return axial_to_cube(self.q, self.r)

    @property
    def axial(self) -> Tuple[int, int]:
        """Współrzędne axial jako krotka."""
        return (self.q, self.r)

    @classmethod
    def from_cube(cls, x: int, y: int, z: int) -> HexCoord:
        """
        Tworzy HexCoord z współrzędnych cube.

        Raises:
            ValueError: Jeśli x + y + z != 0
        """
        q, r = cube_to_axial(x, y, z)
        return cls(q, r)

    # ─────────────────────────────────────────────────────────────────────────
    # ODLEGŁOŚĆ
    # ─────────────────────────────────────────────────────────────────────────

    def distance(self, other: HexCoord) -> int:
        """
        Oblicza odległość między dwoma hexami w krokach.

        Wzór (cube distance):
            distance = (|dx| + |dy| + |dz|) / 2

        Heurystyka dopuszczalna i dokładna dla jednolitego kosztu kroku.

        Example:
            >>> HexCoord(0, 0).distance(HexCoord(2, 2))
            4
        """
        dx = abs(self.q - other.q)
        dy = abs(self.r - other.r)
        dz = abs(self.s - other.s)
        return (dx + dy + dz) // 2

    # ─────────────────────────────────────────────────────────────────────────
    # SĄSIEDZI
    # ─────────────────────────────────────────────────────────────────────────

    def neighbors(self) -> List[HexCoord]:
        """
        Zwraca listę 6 sąsiednich hexów w kolejności HEX_DIRECTIONS:
            E, SE, SW, W, NW, NE
        """
        return [
            HexCoord(self.q + dq, self.r + dr)
            for dq, dr in HEX_DIRECTIONS
        ]

    def neighbor(self, direction: int) -> HexCoord:
        """
        Zwraca sąsiada w określonym kierunku.

        Args:
            direction: Indeks kierunku (0-5)
                0 = E, 1 = SE, 2 = SW, 3 = W, 4 = NW, 5 = NE

        Raises:
            IndexError: Jeśli direction nie jest w zakresie 0-5
        """
        dq, dr = HEX_DIRECTIONS[direction]
        return HexCoord(self.q + dq, self.r + dr)

    # ─────────────────────────────────────────────────────────────────────────
    # LINIA DO CELU
    # ─────────────────────────────────────────────────────────────────────────

    def line_to(self, other: HexCoord) -> List[HexCoord]:
        """
        Zwraca listę hexów tworzących linię prostą do celu.

        Interpolacja liniowa w przestrzeni cube + cube_round().

        Example:
            >>> HexCoord(0, 0).line_to(HexCoord(3, 0))
            [HexCoord(q=0, r=0), HexCoord(q=1, r=0), HexCoord(q=2, r=0), HexCoord(q=3, r=0)]
        """
        n = self.distance(other)
        if n == 0:
            return [self]

        # Małe przesunięcie, żeby linie wzdłuż krawędzi nie trafiały w remis
        eps = 1e-6
        results: List[HexCoord] = []
        for i in range(n + 1):
            t = i / n
            x = self.q + eps + (other.q - self.q) * t
            y = self.r + eps + (other.r - self.r) * t
            z = self.s - 2 * eps + (other.s - self.s) * t
            results.append(cube_round(x, y, z))

        return results

    # ─────────────────────────────────────────────────────────────────────────
    # WORLD SPACE
    # ─────────────────────────────────────────────────────────────────────────

    def to_world(
        self,
        size: float,
        orientation: HexOrientation = HexOrientation.FLAT_TOP,
        offset: Vec2 = ZERO,
    ) -> Vec2:
        """
        Pozycja środka hexa w przestrzeni świata.

        Args:
            size: Promień hexa (środek -> wierzchołek)
            orientation: FLAT_TOP lub POINTY_TOP
            offset: Przesunięcie origin siatki

        Returns:
            Vec2: Środek hexa
        """
        if orientation is HexOrientation.FLAT_TOP:
            x = size * 1.5 * self.q
            y = size * SQRT3 * (self.r + self.q / 2.0)
        else:
            x = size * SQRT3 * (self.q + self.r / 2.0)
            y = size * 1.5 * self.r
        return Vec2(x + offset.x, y + offset.y)

    @classmethod
    def from_world(
        cls,
        point: Vec2,
        size: float,
        orientation: HexOrientation = HexOrientation.FLAT_TOP,
        offset: Vec2 = ZERO,
    ) -> HexCoord:
        """
        Hex zawierający punkt świata.

        Odwrotność to_world() daje ułamkowe (q, r), które są zaokrąglane
        w przestrzeni cube.

        Args:
            point: Punkt w przestrzeni świata
            size: Promień hexa
            orientation: FLAT_TOP lub POINTY_TOP
            offset: Przesunięcie origin siatki

        Returns:
            HexCoord: Hex (może leżeć poza siatką - sprawdzaj granice!)
        """
        px = (point.x - offset.x) / size
        py = (point.y - offset.y) / size
        if orientation is HexOrientation.FLAT_TOP:
            fq = (2.0 / 3.0) * px
            fr = (-1.0 / 3.0) * px + (SQRT3 / 3.0) * py
        else:
            fq = (SQRT3 / 3.0) * px - (1.0 / 3.0) * py
            fr = (2.0 / 3.0) * py
        return cube_round(fq, fr, -fq - fr)

    # ─────────────────────────────────────────────────────────────────────────
    # OPERATORY ARYTMETYCZNE
    # ─────────────────────────────────────────────────────────────────────────

    def __add__(self, other: HexCoord) -> HexCoord:
        """Dodawanie współrzędnych."""
        return HexCoord(self.q + other.q, self.r + other.r)

    def __sub__(self, other: HexCoord) -> HexCoord:
        """Odejmowanie współrzędnych."""
        return HexCoord(self.q - other.q, self.r - other.r)

    def __mul__(self, scalar: int) -> HexCoord:
        """Mnożenie przez skalar."""
        return HexCoord(self.q * scalar, self.r * scalar)

    def __neg__(self) -> HexCoord:
        """Negacja (punkt przeciwny względem origin)."""
        return HexCoord(-self.q, -self.r)

    # ─────────────────────────────────────────────────────────────────────────
    # REPREZENTACJA
    # ─────────────────────────────────────────────────────────────────────────

    def __repr__(self) -> str:
        return f"HexCoord(q={self.q}, r={self.r})"

    def __str__(self) -> str:
        return f"({self.q}, {self.r})"


# ─────────────────────────────────────────────────────────────────────────────
# FUNKCJE POMOCNICZE
# ─────────────────────────────────────────────────────────────────────────────

def cube_round(x: float, y: float, z: float) -> HexCoord:
    """
    Zaokrągla ułamkowe współrzędne cube do najbliższego hexa.

    Algorytm:
    1. Zaokrąglij każdą współrzędną do najbliższej int
    2. Znajdź współrzędną z największym błędem zaokrąglenia
    3. Przelicz ją z dwóch pozostałych, żeby x + y + z = 0

    Args:
        x, y, z: Współrzędne cube (float)

    Returns:
        HexCoord: Najbliższy hex
    """
    rx = round(x)
    ry = round(y)
    rz = round(z)

    dx = abs(rx - x)
    dy = abs(ry - y)
    dz = abs(rz - z)

    if dx > dy and dx > dz:
        rx = -ry - rz
    elif dy > dz:
        ry = -rx - rz
    # else: rz = -rx - ry (z nie jest potrzebne w axial)

    return HexCoord(int(rx), int(ry))


def hex_distance(a: HexCoord, b: HexCoord) -> int:
    """Odległość hex między dwiema współrzędnymi (alias dla a.distance(b))."""
    return a.distance(b)
