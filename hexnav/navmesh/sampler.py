"""
Integracja siatki hex z navmeshem (NavMeshSampler).

Każda komórka jest klasyfikowana jako chodliwa lub nie na podstawie
testów zawierania punktów w navmeshu (containment sampling).

KLASYFIKACJA KOMÓRKI:
═══════════════════════════════════════════════════════════════════

    1. Środek komórki na navmeshu -> chodliwa
    2. Inaczej, gdy sample_count N > 1:
       N punktów na okręgu o promieniu 0.7 * hex_size,
       kąt i-tego punktu = 2π * i / N
       chodliwa  <=>  liczba trafień > N // 2
       (remis przy parzystym N -> NIE chodliwa)
    3. Inaczej -> nie chodliwa

    Przykład N = 5:  3 z 5 -> chodliwa (3 > 2)
                     2 z 5 -> nie chodliwa

GOTOWOŚĆ SERWISU:
═══════════════════════════════════════════════════════════════════

    Serwis zapytań może się jeszcze inicjalizować. Przed testami:
    - pytamy is_ready()
    - jeśli nie: czekamy retry_delay (stałe, bez backoff) i ponawiamy
    - po max_attempts próbach: warning + rezygnacja (None)

    Nie odróżniamy "nigdy nie będzie gotowy" od "jeszcze startuje".

PRZEŁĄCZANIE:
═══════════════════════════════════════════════════════════════════

    Najpierw klasyfikujemy WSZYSTKIE komórki, potem przełączamy tylko
    te, których stan różni się od obliczonego (HexGrid.set_enabled).
    Ponowne uruchomienie na niezmienionym navmeshu przełącza 0 komórek.

Przykład użycia:
    >>> sampler = NavMeshSampler(spatial, SamplerConfig(sample_count=6), events)
    >>> result = sampler.integrate(grid)
    >>> result.toggled_count
    42
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional
import logging
import math
import time

from ..core.config_loader import filter_known_fields
from ..core.hex_grid import HexCell, HexGrid
from ..core.vec2 import Vec2
from ..events.event_logger import EventLogger
from .spatial import SpatialQueryProvider

logger = logging.getLogger(__name__)


@dataclass
class SamplerConfig:
    """
    Konfiguracja próbkowania.

    Attributes:
        sample_count (int): Liczba próbek na okręgu (1 = tylko środek)
        sample_radius_factor (float): Promień okręgu jako ułamek hex_size
        retry_delay (float): Odstęp między próbami gotowości [s]
        max_attempts (int): Maksymalna liczba prób gotowości
    """
    sample_count: int = 6
    sample_radius_factor: float = 0.7
    retry_delay: float = 0.05
    max_attempts: int = 10

    @classmethod
    def from_dict(cls, data: Optional[Dict]) -> SamplerConfig:
        return cls(**filter_known_fields(cls, data))


@dataclass
class IntegrationResult:
    """
    Wynik integracji siatki z navmeshem.

    Attributes:
        enabled_count (int): Komórki enabled po integracji
        disabled_count (int): Komórki disabled po integracji
        toggled_count (int): Ile komórek zmieniło stan
        attempts (int): Ile prób gotowości było potrzebnych
        duration_ms (float): Czas klasyfikacji
    """
    enabled_count: int
    disabled_count: int
    toggled_count: int
    attempts: int
    duration_ms: float


class NavMeshSampler:
    """
    Klasyfikuje komórki siatki względem navmesha.

    Attributes:
        spatial (SpatialQueryProvider): Serwis testów zawierania
        config (SamplerConfig): Parametry próbkowania
        events (EventLogger): Odbiorca powiadomień (opcjonalny)

    Note:
        Sampler tylko czyta navmesh; jedynym zapisem do siatki jest
        HexGrid.set_enabled() po klasyfikacji całej siatki.
    """

    def __init__(
        self,
        spatial: Optional[SpatialQueryProvider],
        config: Optional[SamplerConfig] = None,
        events: Optional[EventLogger] = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.spatial = spatial
        self.config = config or SamplerConfig()
        self.events = events
        self._sleep = sleep

    # ─────────────────────────────────────────────────────────────────────────
    # KLASYFIKACJA
    # ─────────────────────────────────────────────────────────────────────────

    def sample_points(self, center: Vec2, hex_size: float) -> List[Vec2]:
        """
        Punkty próbek na okręgu wokół środka komórki.

        Args:
            center: Środek komórki
            hex_size: Promień hexa

        Returns:
            List[Vec2]: N punktów pod kątami 2π * i / N
        """
        count = self.config.sample_count
        radius = self.config.sample_radius_factor * hex_size
        return [
            Vec2(
                center.x + radius * math.cos(2.0 * math.pi * i / count),
                center.y + radius * math.sin(2.0 * math.pi * i / count),
            )
            for i in range(count)
        ]

    def classify_cell(self, cell: HexCell, hex_size: float) -> bool:
        """
        Czy komórka jest chodliwa.

        Args:
            cell: Klasyfikowana komórka
            hex_size: Promień hexa siatki

        Returns:
            bool: True jeśli chodliwa
        """
        if self.spatial.contains_point(cell.world_position):
            return True

        count = self.config.sample_count
        if count <= 1:
            return False

        contained = sum(
            1 for point in self.sample_points(cell.world_position, hex_size)
            if self.spatial.contains_point(point)
        )
        return contained > count // 2

    # ─────────────────────────────────────────────────────────────────────────
    # GOTOWOŚĆ
    # ─────────────────────────────────────────────────────────────────────────

    def wait_until_ready(self) -> Optional[int]:
        """
        Czeka aż serwis zgłosi gotowość.

        Returns:
            Optional[int]: Numer udanej próby lub None po wyczerpaniu prób
        """
        attempts = max(1, self.config.max_attempts)
        for attempt in range(1, attempts + 1):
            if self.spatial.is_ready():
                return attempt
            if attempt < attempts:
                logger.debug(
                    "Spatial query service not ready (attempt %d/%d), retrying in %.3fs",
                    attempt, attempts, self.config.retry_delay,
                )
                self._sleep(self.config.retry_delay)
        return None

    # ─────────────────────────────────────────────────────────────────────────
    # INTEGRACJA
    # ─────────────────────────────────────────────────────────────────────────

    def integrate(self, grid: Optional[HexGrid]) -> Optional[IntegrationResult]:
        """
        Synchronizuje stan enabled komórek z navmeshem.

        Args:
            grid: Siatka do zaktualizowania

        Returns:
            Optional[IntegrationResult]: Wynik lub None (brak siatki /
                                         serwisu, serwis niegotowy)
        """
        if grid is None or not grid.is_generated:
            logger.error("Navmesh integration skipped: no generated grid")
            return None
        if self.spatial is None:
            logger.error("Navmesh integration skipped: no spatial query service")
            return None

        attempts = self.wait_until_ready()
        if attempts is None:
            logger.warning(
                "Spatial query service not ready after %d attempts, "
                "navmesh integration abandoned",
                self.config.max_attempts,
            )
            if self.events is not None:
                self.events.log_integration_abandoned(self.config.max_attempts)
            return None

        started = time.perf_counter()
        decisions = [
            (cell, self.classify_cell(cell, grid.hex_size)) for cell in grid
        ]

        toggled = 0
        for cell, navigable in decisions:
            if cell.enabled != navigable:
                grid.set_enabled(cell, navigable)
                toggled += 1

        duration_ms = (time.perf_counter() - started) * 1000.0
        result = IntegrationResult(
            enabled_count=grid.enabled_count,
            disabled_count=grid.disabled_count,
            toggled_count=toggled,
            attempts=attempts,
            duration_ms=duration_ms,
        )
        logger.info(
            "Navmesh integration: %d enabled, %d disabled, %d toggled (%.1f ms)",
            result.enabled_count, result.disabled_count, toggled, duration_ms,
        )
        if self.events is not None:
            self.events.log_integration_complete(
                result.enabled_count, result.disabled_count, toggled
            )
        return result
