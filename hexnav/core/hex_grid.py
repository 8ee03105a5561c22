"""
Siatka hexagonalna (HexGrid) z obsługą stanu enabled/disabled komórek.

HexGrid zarządza dyskretną teselacją przestrzeni ciągłej:
- Generuje komórki (width x height) z pozycjami w świecie
- Indeksuje komórki po współrzędnych i po numerze sekwencyjnym
- Śledzi które komórki są enabled (chodliwe)
- Odpowiada na zapytania o sąsiadów, zasięg i pozycję w świecie

Układ siatki:
    Komórki zajmują romb w układzie axial:
        0 <= q < width, 0 <= r < height

    Generowanie: wiersze (r), potem kolumny (q):
        index = r * width + q

    r=0:  (0,0) (1,0) (2,0) ...   -> index 0, 1, 2, ...
    r=1:  (0,1) (1,1) (2,1) ...   -> index width, width+1, ...

Niezmiennik enabled:
    _enabled == {cell.coord | cell.enabled}
    Flaga komórki i zbiór są zmieniane RAZEM wyłącznie w set_enabled().

Przykład użycia:
    >>> grid = HexGrid()
    >>> grid.generate(width=10, height=8, hex_size=10.0, origin_offset=Vec2(0, 0))
    >>> cell = grid.cell_at_coords(HexCoord(2, 3))
    >>> grid.set_enabled(cell, False)
    True
    >>> grid.set_enabled(cell, False)  # bez zmian = brak powiadomienia
    False
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, List, Optional, Set, Union
import logging
import math
import time

from .hex_coord import HexCoord, HexOrientation
from .vec2 import Vec2, ZERO
from ..events.event_logger import EventLogger

logger = logging.getLogger(__name__)


@dataclass(eq=False)
class HexCell:
    """
    Pojedyncza komórka siatki.

    Attributes:
        coord (HexCoord): Współrzędne axial (q, r)
        index (int): Numer sekwencyjny w [0, width * height)
        world_position (Vec2): Środek komórki w świecie
        metadata (Dict): Dowolne dane konsumentów (teren, koszt, ...)

    Note:
        `enabled` jest tylko do odczytu - zmiana wyłącznie przez
        HexGrid.set_enabled(), który aktualizuje też indeks enabled.
    """
    coord: HexCoord
    index: int
    world_position: Vec2
    metadata: Dict[str, Any] = field(default_factory=dict)
    _enabled: bool = field(default=True, repr=False)

    @property
    def enabled(self) -> bool:
        return self._enabled

    @property
    def q(self) -> int:
        return self.coord.q

    @property
    def r(self) -> int:
        return self.coord.r

    @property
    def cube(self):
        """Współrzędne cube (x, y, z), x + y + z = 0."""
        return self.coord.cube

    def distance(self, other: HexCell) -> int:
        """Odległość hex do innej komórki."""
        return self.coord.distance(other.coord)

    def to_dict(self) -> Dict[str, Any]:
        """Serializacja do API / logów."""
        return {
            "q": self.q,
            "r": self.r,
            "index": self.index,
            "enabled": self.enabled,
            "position": self.world_position.as_list(),
        }

    def __repr__(self) -> str:
        state = "on" if self._enabled else "off"
        return f"HexCell(#{self.index} {self.coord}, {state})"


@dataclass
class GenerationResult:
    """
    Wynik generowania siatki.

    Attributes:
        cell_count (int): Liczba utworzonych komórek (width * height)
        width, height (int): Wymiary
        hex_size (float): Promień hexa
        duration_ms (float): Czas generowania
    """
    cell_count: int
    width: int
    height: int
    hex_size: float
    duration_ms: float


CellOrCoord = Union[HexCell, HexCoord]


@dataclass
class HexGrid:
    """
    Siatka hexagonalna z indeksami po współrzędnych i stanem enabled.

    Attributes:
        width (int): Szerokość siatki w hexach (zakres q)
        height (int): Wysokość siatki w hexach (zakres r)
        hex_size (float): Promień hexa w jednostkach świata
        orientation (HexOrientation): FLAT_TOP / POINTY_TOP
        origin_offset (Vec2): Przesunięcie origin siatki
        events (EventLogger): Odbiorca powiadomień (opcjonalny)
        _cells (List[HexCell]): Komórki w kolejności index
        _by_coord (Dict[HexCoord, HexCell]): Indeks współrzędnych
        _enabled (Set[HexCoord]): Podzbiór enabled

    Note:
        Siatka jest tworzona pusta i wypełniana raz przez generate().
        clear() czyści zawartość, ale instancja zostaje.
    """
    width: int = 0
    height: int = 0
    hex_size: float = 1.0
    orientation: HexOrientation = HexOrientation.FLAT_TOP
    origin_offset: Vec2 = ZERO
    events: Optional[EventLogger] = field(default=None, repr=False)
    _cells: List[HexCell] = field(default_factory=list, repr=False)
    _by_coord: Dict[HexCoord, HexCell] = field(default_factory=dict, repr=False)
    _enabled: Set[HexCoord] = field(default_factory=set, repr=False)

    # ─────────────────────────────────────────────────────────────────────────
    # GENEROWANIE
    # ─────────────────────────────────────────────────────────────────────────

    def generate(
        self,
        width: int,
        height: int,
        hex_size: float,
        origin_offset: Vec2 = ZERO,
        orientation: Optional[HexOrientation] = None,
    ) -> GenerationResult:
        """
        Wypełnia siatkę komórkami.

        Iteruje wiersze, potem kolumny; każda komórka dostaje kolejny
        index, pozycję w świecie i enabled = True.

        Args:
            width: Liczba kolumn
            height: Liczba wierszy
            hex_size: Promień hexa
            origin_offset: Przesunięcie origin
            orientation: Orientacja (None = bez zmian)

        Returns:
            GenerationResult: Podsumowanie generowania

        Raises:
            ValueError: Jeśli wymiary lub hex_size nie są dodatnie
        """
        if width <= 0 or height <= 0:
            raise ValueError(f"Grid dimensions must be positive, got {width}x{height}")
        if hex_size <= 0:
            raise ValueError(f"hex_size must be positive, got {hex_size}")

        started = time.perf_counter()
        self._reset()
        self.width = width
        self.height = height
        self.hex_size = hex_size
        self.origin_offset = origin_offset
        if orientation is not None:
            self.orientation = HexOrientation.parse(orientation)

        for r in range(height):
            for q in range(width):
                coord = HexCoord(q, r)
                cell = HexCell(
                    coord=coord,
                    index=len(self._cells),
                    world_position=self._world_position(coord),
                )
                self._cells.append(cell)
                self._by_coord[coord] = cell
                self._enabled.add(coord)

        duration_ms = (time.perf_counter() - started) * 1000.0
        logger.debug(
            "Generated %dx%d grid (%d cells) in %.2f ms",
            width, height, len(self._cells), duration_ms,
        )
        if self.events is not None:
            self.events.log_grid_generated(
                width, height, hex_size, len(self._cells), self.orientation.value
            )
        return GenerationResult(
            cell_count=len(self._cells),
            width=width,
            height=height,
            hex_size=hex_size,
            duration_ms=duration_ms,
        )

    def clear(self) -> None:
        """
        Czyści siatkę (koniec sesji). Instancja pozostaje do ponownego
        generate().
        """
        count = len(self._cells)
        self._reset()
        self.width = 0
        self.height = 0
        if self.events is not None:
            self.events.log_grid_cleared(count)

    def _reset(self) -> None:
        self._cells = []
        self._by_coord = {}
        self._enabled = set()

    def set_origin_offset(self, offset: Vec2) -> None:
        """
        Zmienia origin całej siatki i przelicza pozycje wszystkich komórek.

        Args:
            offset: Nowe przesunięcie origin
        """
        self.origin_offset = offset
        for cell in self._cells:
            cell.world_position = self._world_position(cell.coord)

    def _world_position(self, coord: HexCoord) -> Vec2:
        return coord.to_world(self.hex_size, self.orientation, self.origin_offset)

    # ─────────────────────────────────────────────────────────────────────────
    # MUTACJE
    # ─────────────────────────────────────────────────────────────────────────

    def set_enabled(self, cell: CellOrCoord, value: bool) -> bool:
        """
        Włącza / wyłącza komórkę.

        Jeśli stan się nie zmienia - nic nie robi i NIE emituje
        powiadomienia. W przeciwnym razie zmienia flagę i zbiór enabled
        razem, po czym emituje dokładnie jedno CELL_STATE_CHANGED.

        Args:
            cell: Komórka lub jej współrzędne
            value: Nowy stan

        Returns:
            bool: True jeśli stan się zmienił

        Raises:
            ValueError: Jeśli komórka nie należy do tej siatki
        """
        target = self._resolve(cell)
        if target is None:
            raise ValueError(f"Cell {cell!r} does not belong to this grid")

        value = bool(value)
        if target._enabled == value:
            return False

        target._enabled = value
        if value:
            self._enabled.add(target.coord)
        else:
            self._enabled.discard(target.coord)

        if self.events is not None:
            self.events.log_cell_state_change(target.coord, value)
        return True

    def _resolve(self, cell: CellOrCoord) -> Optional[HexCell]:
        coord = cell.coord if isinstance(cell, HexCell) else cell
        found = self._by_coord.get(coord)
        if isinstance(cell, HexCell) and found is not cell:
            return None
        return found

    # ─────────────────────────────────────────────────────────────────────────
    # ZAPYTANIA
    # ─────────────────────────────────────────────────────────────────────────

    def is_in_bounds(self, coord: HexCoord) -> bool:
        """
        Sprawdza czy współrzędne mieszczą się w [0, width) x [0, height).
        """
        return 0 <= coord.q < self.width and 0 <= coord.r < self.height

    def cell_at_coords(self, coord: HexCoord) -> Optional[HexCell]:
        """
        Komórka o podanych współrzędnych (O(1)).

        Returns:
            Optional[HexCell]: Komórka lub None jeśli brak
        """
        return self._by_coord.get(coord)

    def cell_at_index(self, index: int) -> Optional[HexCell]:
        """Komórka o podanym numerze sekwencyjnym lub None."""
        if 0 <= index < len(self._cells):
            return self._cells[index]
        return None

    def cell_at_world_position(self, point: Vec2) -> Optional[HexCell]:
        """
        Komórka zawierająca punkt świata.

        Punkt jest konwertowany do axial (cube rounding), sprawdzany
        względem granic siatki i dopiero wtedy wyszukiwany.

        Args:
            point: Punkt w przestrzeni świata

        Returns:
            Optional[HexCell]: Komórka lub None jeśli punkt poza siatką
                               (także dla współrzędnych inf/nan)
        """
        if not self._cells:
            return None
        if not (math.isfinite(point.x) and math.isfinite(point.y)):
            return None
        coord = HexCoord.from_world(
            point, self.hex_size, self.orientation, self.origin_offset
        )
        if not self.is_in_bounds(coord):
            return None
        return self._by_coord.get(coord)

    def get_neighbors(self, cell: HexCell) -> List[HexCell]:
        """
        Sąsiedzi komórki istniejący w siatce.

        Kolejność zgodna z HEX_DIRECTIONS (E, SE, SW, W, NW, NE).
        """
        result = []
        for coord in cell.coord.neighbors():
            neighbor = self._by_coord.get(coord)
            if neighbor is not None:
                result.append(neighbor)
        return result

    def get_enabled_neighbors(self, cell: HexCell) -> List[HexCell]:
        """Sąsiedzi komórki, którzy są enabled."""
        return [n for n in self.get_neighbors(cell) if n.enabled]

    def get_cells_in_range(self, center: CellOrCoord, radius: int) -> List[HexCell]:
        """
        Wszystkie komórki w odległości hex <= radius od centrum.

        Skan liniowy - wystarczający dla typowych rozmiarów
        (setki / niskie tysiące komórek).

        Args:
            center: Komórka lub współrzędne centrum
            radius: Zasięg w krokach hex

        Returns:
            List[HexCell]: Komórki w kolejności index (zawiera centrum)
        """
        origin = center.coord if isinstance(center, HexCell) else center
        return [c for c in self._cells if c.coord.distance(origin) <= radius]

    def get_enabled_cells_in_range(
        self,
        center: CellOrCoord,
        radius: int,
    ) -> List[HexCell]:
        """Jak get_cells_in_range, ale tylko komórki enabled."""
        return [c for c in self.get_cells_in_range(center, radius) if c.enabled]

    def get_enabled_cells(self) -> List[HexCell]:
        """Komórki enabled w kolejności index."""
        return [c for c in self._cells if c.coord in self._enabled]

    @property
    def cells(self) -> List[HexCell]:
        """Wszystkie komórki (kopia listy)."""
        return list(self._cells)

    @property
    def enabled_count(self) -> int:
        return len(self._enabled)

    @property
    def disabled_count(self) -> int:
        return len(self._cells) - len(self._enabled)

    @property
    def is_generated(self) -> bool:
        return bool(self._cells)

    def __len__(self) -> int:
        return len(self._cells)

    def __iter__(self) -> Iterator[HexCell]:
        return iter(self._cells)

    # ─────────────────────────────────────────────────────────────────────────
    # DEBUG / WIZUALIZACJA
    # ─────────────────────────────────────────────────────────────────────────

    def debug_print(self) -> str:
        """
        Tekstowa reprezentacja siatki do debugowania.

        Legenda:
            . = enabled
            # = disabled
        """
        lines = []
        for r in range(self.height):
            indent = " " * r
            row = []
            for q in range(self.width):
                cell = self._by_coord[HexCoord(q, r)]
                row.append("." if cell.enabled else "#")
            lines.append(indent + " ".join(row))
        return "\n".join(lines)
