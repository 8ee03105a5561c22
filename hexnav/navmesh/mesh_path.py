"""
Ścieżka po navmeshu w przestrzeni ciągłej.

Dostarcza surową ścieżkę (listę punktów) dla ContinuousPathPlanner.

Algorytm NavMeshPathfinder:
    1. Przyciągnij start i cel do navmesha (nearest point)
    2. Znajdź wielokąty zawierające oba punkty
    3. Ten sam wielokąt -> [start, cel]
    4. A* po grafie sąsiedztwa wielokątów:
       - koszt krawędzi = odległość środków wielokątów
       - heurystyka = odległość euklidesowa środka do celu
    5. Ścieżka = start, środki portali (wspólnych krawędzi), cel

Wygładzanie załamań na portalach robi planer (Catmull-Rom), więc
tutaj nie prostujemy ścieżki (brak funnel algorithm).
"""

from __future__ import annotations
from abc import ABC, abstractmethod
from typing import Dict, List, Optional, Tuple
import heapq
import logging

from ..core.vec2 import Vec2
from .mesh import NavMesh, Portal

logger = logging.getLogger(__name__)


class MeshPathProvider(ABC):
    """Źródło surowych ścieżek ciągłych."""

    @abstractmethod
    def find_path(self, start: Vec2, end: Vec2) -> List[Vec2]:
        """
        Ścieżka start -> end jako lista punktów.

        Returns:
            List[Vec2]: Punkty (pusta lista = brak ścieżki)
        """


class NavMeshPathfinder(MeshPathProvider):
    """
    A* po wielokątach navmesha.

    Attributes:
        mesh (NavMesh): Navmesh (tylko do odczytu)
    """

    def __init__(self, mesh: NavMesh):
        self.mesh = mesh
        self._graph: Optional[Dict[int, List[Tuple[int, Portal]]]] = None

    def _adjacency(self) -> Dict[int, List[Tuple[int, Portal]]]:
        if self._graph is None:
            self._graph = self.mesh.adjacency()
        return self._graph

    def find_path(self, start: Vec2, end: Vec2) -> List[Vec2]:
        start_on_mesh = self.mesh.nearest_point(start)
        end_on_mesh = self.mesh.nearest_point(end)
        if start_on_mesh is None or end_on_mesh is None:
            return []

        start_poly = self.mesh.containing_polygon(start_on_mesh)
        end_poly = self.mesh.containing_polygon(end_on_mesh)
        if start_poly is None or end_poly is None:
            logger.debug("Endpoints %s -> %s not resolvable on mesh", start, end)
            return []

        if start_poly == end_poly:
            return [start_on_mesh, end_on_mesh]

        portals = self._search(start_poly, end_poly, end_on_mesh)
        if portals is None:
            return []

        points = [start_on_mesh]
        points.extend(a.lerp(b, 0.5) for a, b in portals)
        points.append(end_on_mesh)
        return points

    def _search(
        self,
        start_poly: int,
        end_poly: int,
        goal: Vec2,
    ) -> Optional[List[Portal]]:
        """
        A* po grafie wielokątów.

        Returns:
            Optional[List[Portal]]: Portale na trasie lub None
        """
        graph = self._adjacency()
        g_costs: Dict[int, float] = {start_poly: 0.0}
        parents: Dict[int, Tuple[int, Portal]] = {}
        closed = set()
        open_set: List[Tuple[float, int]] = [
            (self.mesh.centroid(start_poly).distance_to(goal), start_poly)
        ]

        while open_set:
            _, current = heapq.heappop(open_set)
            if current in closed:
                continue
            closed.add(current)

            if current == end_poly:
                portals: List[Portal] = []
                while current != start_poly:
                    current, portal = parents[current]
                    portals.append(portal)
                portals.reverse()
                return portals

            here = self.mesh.centroid(current)
            for neighbor, portal in graph[current]:
                if neighbor in closed:
                    continue
                tentative = g_costs[current] + here.distance_to(self.mesh.centroid(neighbor))
                if neighbor not in g_costs or tentative < g_costs[neighbor]:
                    g_costs[neighbor] = tentative
                    parents[neighbor] = (current, portal)
                    f_cost = tentative + self.mesh.centroid(neighbor).distance_to(goal)
                    heapq.heappush(open_set, (f_cost, neighbor))

        return None
