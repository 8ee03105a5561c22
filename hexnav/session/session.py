"""
Sesja nawigacji - jedyny właściciel siatki i punkt wejścia żądań.

Sesja spina komponenty rdzenia i jest JEDYNYM zapisującym stan
enabled komórek. Pathfinder, sampler i planer dostają siatkę jawnie
(brak globalnego stanu).

CYKL ŻYCIA:
═══════════════════════════════════════════════════════════════════

    1. NavigationSession(config)
       ─────────────────────────────────────────────────────────
       • Pusta siatka, brak navmesha

    2. generate(width, height, hex_size, origin_offset)
       ─────────────────────────────────────────────────────────
       • Wypełnia siatkę, emituje GRID_GENERATED (gotowość)
       • Zapytania przed generate() są odrzucane z ostrzeżeniem

    3. attach_mesh(mesh, obstacles) / attach_spatial(service)
       ─────────────────────────────────────────────────────────
       • Navmesh + serwis zapytań przestrzennych

    4. integrate_navmesh()
       ─────────────────────────────────────────────────────────
       • Synchronizacja enabled z navmeshem (NavMeshSampler)

    5. request_path() / request_continuous_path()
       ─────────────────────────────────────────────────────────
       • A* po komórkach / planer ciągły z budżetem

    6. clear()
       ─────────────────────────────────────────────────────────
       • Koniec sesji - siatka wyczyszczona, nie zniszczona

BŁĘDY:
═══════════════════════════════════════════════════════════════════

    • Brak kolaboratora (siatka, navmesh, serwis) -> log + no-op
    • Brak ścieżki / punkt poza siatką -> pusty wynik ze statusem
    • Serwis niegotowy -> retry w samplerze, potem ostrzeżenie

Przykład użycia:
    >>> session = NavigationSession()
    >>> session.generate(width=20, height=15, hex_size=10.0)
    >>> session.attach_mesh(NavMesh.rectangle(Vec2(0, 0), 200, 150))
    >>> session.integrate_navmesh()
    >>> result = session.request_path(Vec2(5, 5), Vec2(150, 100))
    >>> result.status
    <PathStatus.FOUND: 'found'>
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Sequence
import logging
import time

from ..core.config_loader import ConfigLoader
from ..core.hex_coord import HexCoord, HexOrientation
from ..core.hex_grid import GenerationResult, HexGrid
from ..core.pathfinding import GridAStarPathfinder, PathResult, PathStatus
from ..core.vec2 import Vec2
from ..events.event_logger import EventLogger
from ..navmesh.mesh import NavMesh
from ..navmesh.mesh_path import MeshPathProvider, NavMeshPathfinder
from ..navmesh.sampler import IntegrationResult, NavMeshSampler, SamplerConfig
from ..navmesh.spatial import GeometrySpatialQuery, Obstacle, SpatialQueryProvider
from ..planning.continuous import ContinuousPathPlanner, PlannerConfig, PlanResult

logger = logging.getLogger(__name__)


@dataclass
class SessionConfig:
    """
    Konfiguracja sesji.

    Attributes:
        grid_width (int): Domyślna szerokość siatki
        grid_height (int): Domyślna wysokość siatki
        hex_size (float): Domyślny promień hexa
        orientation (HexOrientation): Orientacja hexów
        origin_offset (Vec2): Domyślny origin siatki
        max_iterations (Optional[int]): Limit rozwinięć A* (None = brak)
        max_events (Optional[int]): Limit logu zdarzeń (None = brak)
        sampler (SamplerConfig): Parametry integracji z navmeshem
        planner (PlannerConfig): Parametry planera ciągłego
    """
    grid_width: int = 20
    grid_height: int = 15
    hex_size: float = 10.0
    orientation: HexOrientation = HexOrientation.FLAT_TOP
    origin_offset: Vec2 = Vec2(0.0, 0.0)
    max_iterations: Optional[int] = None
    max_events: Optional[int] = None
    sampler: SamplerConfig = field(default_factory=SamplerConfig)
    planner: PlannerConfig = field(default_factory=PlannerConfig)

    @classmethod
    def from_loader(cls, loader: ConfigLoader) -> SessionConfig:
        """
        Buduje konfigurację z ConfigLoader (defaults.yaml + nadpisania).
        """
        grid = loader.get_grid_config()
        pathfinding = loader.get_pathfinding_config()
        events = loader.get_events_config()
        defaults = cls()
        return cls(
            grid_width=int(grid.get("width", defaults.grid_width)),
            grid_height=int(grid.get("height", defaults.grid_height)),
            hex_size=float(grid.get("hex_size", defaults.hex_size)),
            orientation=HexOrientation.parse(grid.get("orientation", defaults.orientation)),
            origin_offset=Vec2.of(grid.get("origin_offset", defaults.origin_offset.as_list())),
            max_iterations=pathfinding.get("max_iterations"),
            max_events=events.get("max_events"),
            sampler=SamplerConfig.from_dict(loader.get_sampler_config()),
            planner=PlannerConfig.from_dict(loader.get_planner_config()),
        )


class NavigationSession:
    """
    Sesja nawigacji: siatka + kolaboratorzy + żądania.

    Attributes:
        config (SessionConfig): Konfiguracja
        events (EventLogger): Logger zdarzeń / powiadomienia
        grid (HexGrid): Jedyna instancja siatki sesji
        mesh (Optional[NavMesh]): Navmesh
        spatial (Optional[SpatialQueryProvider]): Serwis zapytań
        mesh_path (Optional[MeshPathProvider]): Ścieżki po navmeshu
        planner (ContinuousPathPlanner): Planer ciągły (jeden na sesję)

    Example:
        >>> session = NavigationSession()
        >>> session.generate()
        >>> session.request_path(Vec2(0, 0), Vec2(50, 40)).found
        True
    """

    def __init__(
        self,
        config: Optional[SessionConfig] = None,
        events: Optional[EventLogger] = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        """
        Inicjalizuje sesję.

        Args:
            config: Konfiguracja (domyślne wartości jeśli None)
            events: Logger zdarzeń (nowy jeśli None)
            sleep: Funkcja czekania dla retry gotowości (podmieniana w testach)
        """
        self.config = config or SessionConfig()
        self.events = events or EventLogger(max_events=self.config.max_events)
        self.grid = HexGrid(orientation=self.config.orientation, events=self.events)
        self.mesh: Optional[NavMesh] = None
        self.spatial: Optional[SpatialQueryProvider] = None
        self.mesh_path: Optional[MeshPathProvider] = None
        self.planner = ContinuousPathPlanner(config=self.config.planner, events=self.events)
        self.last_integration: Optional[IntegrationResult] = None
        self._sleep = sleep

    # ─────────────────────────────────────────────────────────────────────────
    # SIATKA
    # ─────────────────────────────────────────────────────────────────────────

    def generate(
        self,
        width: Optional[int] = None,
        height: Optional[int] = None,
        hex_size: Optional[float] = None,
        origin_offset: Optional[Vec2] = None,
    ) -> GenerationResult:
        """
        Generuje siatkę (brakujące parametry z konfiguracji).

        Returns:
            GenerationResult: Podsumowanie generowania
        """
        result = self.grid.generate(
            width=width if width is not None else self.config.grid_width,
            height=height if height is not None else self.config.grid_height,
            hex_size=hex_size if hex_size is not None else self.config.hex_size,
            origin_offset=origin_offset if origin_offset is not None else self.config.origin_offset,
            orientation=self.config.orientation,
        )
        self.last_integration = None
        logger.info(
            "Grid generated: %dx%d, hex_size=%.2f",
            result.width, result.height, result.hex_size,
        )
        return result

    def set_cell_enabled(self, coord: HexCoord, enabled: bool) -> Optional[bool]:
        """
        Włącza / wyłącza komórkę.

        Returns:
            Optional[bool]: True = zmieniono, False = bez zmian,
                            None = brak komórki
        """
        cell = self.grid.cell_at_coords(coord)
        if cell is None:
            logger.warning("Cannot set state of %s: no such cell", coord)
            return None
        return self.grid.set_enabled(cell, enabled)

    def clear(self) -> None:
        """Koniec sesji: czyści siatkę i porzuca plan."""
        self.planner.cancel()
        self.grid.clear()
        self.last_integration = None

    # ─────────────────────────────────────────────────────────────────────────
    # NAVMESH
    # ─────────────────────────────────────────────────────────────────────────

    def attach_mesh(
        self,
        mesh: NavMesh,
        obstacles: Optional[Sequence[Obstacle]] = None,
    ) -> None:
        """
        Podpina navmesh z geometrycznym serwisem zapytań.

        Args:
            mesh: Navmesh
            obstacles: Przeszkody statyczne
        """
        self.mesh = mesh
        self.mesh_path = NavMeshPathfinder(mesh)
        self.attach_spatial(GeometrySpatialQuery(mesh, obstacles))

    def attach_spatial(self, spatial: Optional[SpatialQueryProvider]) -> None:
        """Podpina (lub odpina) serwis zapytań przestrzennych."""
        self.spatial = spatial
        self.planner.spatial = spatial
        self.planner.mesh_path = self.mesh_path

    def integrate_navmesh(self) -> Optional[IntegrationResult]:
        """
        Synchronizuje siatkę z navmeshem.

        Returns:
            Optional[IntegrationResult]: Wynik lub None (brak siatki /
                                         serwisu, serwis niegotowy)
        """
        if not self.grid.is_generated:
            logger.warning("Navmesh integration requested before grid generation")
            return None
        if self.spatial is None:
            logger.error("Navmesh integration requested without a spatial query service")
            return None

        sampler = NavMeshSampler(
            self.spatial, self.config.sampler, self.events, sleep=self._sleep
        )
        self.last_integration = sampler.integrate(self.grid)
        return self.last_integration

    # ─────────────────────────────────────────────────────────────────────────
    # ŚCIEŻKI
    # ─────────────────────────────────────────────────────────────────────────

    def request_path(self, start_point: Vec2, goal_point: Vec2) -> PathResult:
        """
        Ścieżka dyskretna między punktami świata.

        Returns:
            PathResult: Komórki + status + czas
        """
        if not self.grid.is_generated:
            logger.warning("Path requested before grid generation")
            result = PathResult(
                status=PathStatus.INVALID_ENDPOINT,
                reason="grid not generated",
            )
        else:
            pathfinder = GridAStarPathfinder(self.grid, self.config.max_iterations)
            result = pathfinder.find_path_between_points(start_point, goal_point)

        self.events.log_path_result(
            found=result.found,
            start=start_point.as_list(),
            goal=goal_point.as_list(),
            length=len(result.cells),
            reason=result.reason,
            duration_ms=result.duration_ms,
        )
        return result

    def request_continuous_path(
        self,
        start: Vec2,
        destination: Vec2,
        movement_budget: float,
    ) -> PlanResult:
        """
        Ścieżka ciągła w ramach budżetu ruchu.

        Bez serwisu zapytań planer działa bez odpychania i walidacji
        (ostrzeżenie w logu).
        """
        if self.spatial is None:
            logger.warning("Continuous plan without spatial query service: no obstacle checks")
        return self.planner.plan(start, destination, movement_budget)

    def cancel_plan(self) -> None:
        """Porzuca plan w toku / ostatnią ścieżkę ciągłą."""
        self.planner.cancel()

    # ─────────────────────────────────────────────────────────────────────────
    # WYNIKI
    # ─────────────────────────────────────────────────────────────────────────

    def get_summary(self) -> Dict[str, Any]:
        """
        Podsumowanie stanu sesji.

        Returns:
            Dict: Wymiary, liczniki komórek, obecność kolaboratorów
        """
        return {
            "generated": self.grid.is_generated,
            "width": self.grid.width,
            "height": self.grid.height,
            "hex_size": self.grid.hex_size,
            "orientation": self.grid.orientation.value,
            "cell_count": len(self.grid),
            "enabled_count": self.grid.enabled_count,
            "disabled_count": self.grid.disabled_count,
            "has_mesh": self.mesh is not None,
            "has_spatial": self.spatial is not None,
        }

    def get_cells(self) -> List[Dict[str, Any]]:
        """Wszystkie komórki jako słowniki."""
        return [cell.to_dict() for cell in self.grid]

    def save_log(self, filepath: str) -> None:
        """Zapisuje log zdarzeń do pliku JSON."""
        self.events.save(filepath)

    def get_log(self) -> Dict[str, Any]:
        """Log zdarzeń jako słownik."""
        return self.events.to_dict()
