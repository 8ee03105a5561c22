"""
Algorytm A* (A-star) dla siatki hexagonalnej.

A* znajduje najkrótszą ścieżkę między dwiema komórkami, poruszając się
wyłącznie po komórkach enabled.

Jak działa A*:
    1. Utrzymuj open (do sprawdzenia) i closed (sprawdzone)
    2. Dla każdego node'a oblicz:
       - g_cost: koszt od startu do tego node'a
       - h_cost: heurystyka (szacowany koszt do celu)
       - f_cost: g_cost + h_cost
    3. Zawsze eksploruj node z najniższym f_cost
    4. Gdy dotrzesz do celu, odtwórz ścieżkę

Heurystyka dla hex grid:
    Odległość hex (HexCoord.distance). Przy jednolitym koszcie kroku = 1
    jest dopuszczalna (admissible) i spójna (consistent).

Rozstrzyganie remisów (deterministyczne):
    Kolejka priorytetowa sortuje po kluczu (f_cost, h_cost, q, r):
    - przy równym f wygrywa node bliżej celu (mniejsze h)
    - potem porządek leksykograficzny współrzędnych (q, r)
    Dzięki temu wynik nie zależy od kolejności iteracji kontenerów.

Stan:
    GridAStarPathfinder NIE trzyma stanu między wywołaniami - open,
    closed, g_costs i parents są zerowane na początku każdego find_path().

Przykład użycia:
    >>> pathfinder = GridAStarPathfinder(grid)
    >>> path = pathfinder.find_path(grid.cell_at_coords(HexCoord(0, 0)),
    ...                             grid.cell_at_coords(HexCoord(2, 2)))
    >>> [c.coord for c in path]
    [HexCoord(q=0, r=0), HexCoord(q=1, r=0), ...]

Edge cases:
    - Start == Goal (enabled): zwraca [start]
    - Brak ścieżki: zwraca pustą listę []
    - Start lub Goal brak / disabled: zwraca []
"""

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional, Set
import heapq
import logging
import time

from .hex_coord import HexCoord
from .hex_grid import HexCell, HexGrid
from .vec2 import Vec2

logger = logging.getLogger(__name__)


class PathStatus(Enum):
    """Status wyniku żądania ścieżki dyskretnej."""
    FOUND = "found"
    INVALID_ENDPOINT = "invalid_endpoint"
    NO_PATH = "no_path"


@dataclass
class PathResult:
    """
    Wynik żądania ścieżki dyskretnej.

    Attributes:
        cells (List[HexCell]): Ścieżka (pusta jeśli brak)
        status (PathStatus): FOUND / INVALID_ENDPOINT / NO_PATH
        reason (str): Czytelny opis wyniku
        expanded_nodes (int): Ile node'ów zostało rozwiniętych
        duration_ms (float): Czas wyszukiwania
    """
    cells: List[HexCell] = field(default_factory=list)
    status: PathStatus = PathStatus.NO_PATH
    reason: str = ""
    expanded_nodes: int = 0
    duration_ms: float = 0.0

    @property
    def found(self) -> bool:
        return self.status is PathStatus.FOUND

    @property
    def coords(self) -> List[HexCoord]:
        return [c.coord for c in self.cells]

    def to_dict(self) -> dict:
        """Serializacja do API / logów."""
        return {
            "status": self.status.value,
            "reason": self.reason,
            "cells": [[c.q, c.r] for c in self.cells],
            "positions": [c.world_position.as_list() for c in self.cells],
            "expanded_nodes": self.expanded_nodes,
            "duration_ms": round(self.duration_ms, 3),
        }


@dataclass(order=True)
class _PathNode:
    """
    Węzeł w kolejce A*.

    Sortowanie po (f_cost, h_cost, q, r) - patrz docstring modułu.
    """
    f_cost: int
    h_cost: int
    q: int
    r: int
    g_cost: int = field(compare=False)
    cell: HexCell = field(compare=False)


class GridAStarPathfinder:
    """
    A* po komórkach enabled siatki hex.

    Attributes:
        grid (HexGrid): Siatka (przekazywana jawnie, tylko do odczytu)
        max_iterations (Optional[int]): Limit rozwinięć (None = bez limitu)

    Note:
        Jedna instancja nie może być używana współbieżnie.
        Osobne instancje są niezależne.
    """

    def __init__(self, grid: HexGrid, max_iterations: Optional[int] = None):
        self.grid = grid
        self.max_iterations = max_iterations
        self._reset()

    def _reset(self) -> None:
        self._open: List[_PathNode] = []
        self._closed: Set[HexCoord] = set()
        self._g_costs: Dict[HexCoord, int] = {}
        self._parents: Dict[HexCoord, HexCell] = {}
        self._expanded = 0

    @property
    def expanded_nodes(self) -> int:
        """Liczba node'ów rozwiniętych w ostatnim wyszukiwaniu."""
        return self._expanded

    def find_path(self, start: Optional[HexCell], goal: Optional[HexCell]) -> List[HexCell]:
        """
        Znajduje najkrótszą ścieżkę między dwiema komórkami.

        Args:
            start: Komórka startowa
            goal: Komórka docelowa

        Returns:
            List[HexCell]: Ścieżka od start do goal (włącznie z oboma).
                           Pusta lista jeśli ścieżka nie istnieje.

        Algorithm:
            1. Waliduj start i goal (istnieją w siatce, enabled)
            2. Inicjalizuj open z nodem startowym
            3. Dopóki open nie jest pusty:
               a. Weź node z najniższym kluczem
               b. Jeśli to goal - odtwórz i zwróć ścieżkę
               c. Dla każdego enabled sąsiada:
                  - Oblicz tentative_g
                  - Jeśli lepszy niż dotychczasowy - aktualizuj
            4. Jeśli open pusty - brak ścieżki
        """
        self._reset()

        if not self._is_usable(start) or not self._is_usable(goal):
            return []

        if start is goal:
            return [start]

        goal_coord = goal.coord
        start_h = start.coord.distance(goal_coord)
        self._g_costs[start.coord] = 0
        heapq.heappush(
            self._open,
            _PathNode(start_h, start_h, start.q, start.r, g_cost=0, cell=start),
        )

        while self._open:
            if self.max_iterations is not None and self._expanded >= self.max_iterations:
                logger.debug("A* stopped after %d iterations", self._expanded)
                break

            current = heapq.heappop(self._open)
            coord = current.cell.coord

            # Nieaktualny wpis (znaleziono później lepszą drogę)
            if coord in self._closed:
                continue

            self._closed.add(coord)
            self._expanded += 1

            if coord == goal_coord:
                return self._reconstruct_path(start, current.cell)

            for neighbor in self.grid.get_enabled_neighbors(current.cell):
                n_coord = neighbor.coord
                if n_coord in self._closed:
                    continue

                # Koszt ruchu = 1 na każdy krok
                tentative_g = current.g_cost + 1

                if n_coord not in self._g_costs or tentative_g < self._g_costs[n_coord]:
                    self._g_costs[n_coord] = tentative_g
                    self._parents[n_coord] = current.cell

                    h_cost = n_coord.distance(goal_coord)
                    heapq.heappush(
                        self._open,
                        _PathNode(
                            tentative_g + h_cost,
                            h_cost,
                            n_coord.q,
                            n_coord.r,
                            g_cost=tentative_g,
                            cell=neighbor,
                        ),
                    )

        return []

    def _is_usable(self, cell: Optional[HexCell]) -> bool:
        return (
            cell is not None
            and self.grid.cell_at_coords(cell.coord) is cell
            and cell.enabled
        )

    def _reconstruct_path(self, start: HexCell, goal: HexCell) -> List[HexCell]:
        """
        Odtwarza ścieżkę od goal do start używając mapy rodziców.
        """
        path = [goal]
        current = goal

        while current is not start:
            current = self._parents[current.coord]
            path.append(current)

        path.reverse()
        return path

    def find_next_step(self, start: HexCell, goal: HexCell) -> Optional[HexCell]:
        """
        Znajduje tylko następny krok na ścieżce do celu.

        Returns:
            Optional[HexCell]: Następna komórka lub None (brak ścieżki / w celu)
        """
        path = self.find_path(start, goal)

        if len(path) < 2:
            return None

        return path[1]

    def find_path_between_points(self, start_point: Vec2, goal_point: Vec2) -> PathResult:
        """
        Żądanie ścieżki między dwoma punktami świata.

        Punkty są mapowane na komórki przez cell_at_world_position.
        Brak ścieżki NIE jest wyjątkiem - zwracany jest PathResult
        z pustą listą i statusem.

        Args:
            start_point: Punkt startowy
            goal_point: Punkt docelowy

        Returns:
            PathResult: Ścieżka + status + czas wyszukiwania
        """
        started = time.perf_counter()
        start = self.grid.cell_at_world_position(start_point)
        goal = self.grid.cell_at_world_position(goal_point)

        if start is None or goal is None:
            self._reset()
            return PathResult(
                status=PathStatus.INVALID_ENDPOINT,
                reason="start or goal outside grid",
                duration_ms=(time.perf_counter() - started) * 1000.0,
            )

        if not start.enabled or not goal.enabled:
            self._reset()
            blocked = start if not start.enabled else goal
            which = "start" if blocked is start else "goal"
            return PathResult(
                status=PathStatus.INVALID_ENDPOINT,
                reason=f"{which} cell {blocked.coord} is disabled",
                duration_ms=(time.perf_counter() - started) * 1000.0,
            )

        cells = self.find_path(start, goal)
        duration_ms = (time.perf_counter() - started) * 1000.0

        if not cells:
            return PathResult(
                status=PathStatus.NO_PATH,
                reason=f"no path from {start.coord} to {goal.coord} through enabled cells",
                expanded_nodes=self._expanded,
                duration_ms=duration_ms,
            )

        return PathResult(
            cells=cells,
            status=PathStatus.FOUND,
            reason=f"path of {len(cells)} cells",
            expanded_nodes=self._expanded,
            duration_ms=duration_ms,
        )
