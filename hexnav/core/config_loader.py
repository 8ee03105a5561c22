"""
Loader konfiguracji z automatycznym uzupełnianiem wartości domyślnych.

Parametry nawigacji są trzymane w plikach YAML:
- defaults.yaml: wartości bazowe wszystkich komponentów
- (opcjonalnie) plik nadpisań, np. config/arena.yaml

Sekcje defaults.yaml:
    grid:         wymiary, hex_size, orientacja, origin
    sampler:      próbkowanie navmesha, retry gotowości
    pathfinding:  limit iteracji A*
    planner:      parametry planera ścieżek ciągłych

Logika merge (uzupełniania defaults):
    1. Wczytaj defaults.yaml
    2. Wczytaj plik nadpisań (jeśli podany)
    3. Nadpisania wygrywają, zagnieżdżone słowniki są łączone rekurencyjnie
    4. Klucze nieobecne w żadnym pliku -> wartości domyślne dataclass
       (SamplerConfig, PlannerConfig, SessionConfig)

Przykład:
    defaults.yaml:
        planner:
            agent_radius: 4.0
            obstacle_buffer: 12.0

    arena.yaml:
        planner:
            agent_radius: 6.0   # nadpisuje default
            # obstacle_buffer nie podane -> 12.0 z defaults

Użycie:
    >>> loader = ConfigLoader("data/")
    >>> loader.load_overrides("config/arena.yaml")
    >>> loader.get_planner_config()["agent_radius"]
    6.0
"""

from __future__ import annotations
from pathlib import Path
from typing import Any, Dict, Optional
import copy
import logging

import yaml

logger = logging.getLogger(__name__)


class ConfigLoader:
    """
    Ładuje konfigurację z plików YAML z automatycznym merge defaults.

    Attributes:
        data_path (Path): Ścieżka do folderu data/
        _defaults (Dict): Cache wczytanych defaults
        _overrides (Dict): Wczytane nadpisania

    Example:
        >>> loader = ConfigLoader("data/")
        >>> loader.get_grid_config()["hex_size"]
        10.0
    """

    def __init__(self, data_path: str = "data/"):
        """
        Inicjalizuje loader z ścieżką do danych.

        Args:
            data_path: Ścieżka do folderu z plikami YAML
        """
        self.data_path = Path(data_path)
        self._defaults: Optional[Dict] = None
        self._overrides: Dict[str, Any] = {}

    # ─────────────────────────────────────────────────────────────────────────
    # WCZYTYWANIE PLIKÓW
    # ─────────────────────────────────────────────────────────────────────────

    @staticmethod
    def _load_yaml(filepath: Path) -> Dict:
        """
        Wczytuje plik YAML.

        Raises:
            FileNotFoundError: Jeśli plik nie istnieje
        """
        with open(filepath, 'r', encoding='utf-8') as f:
            return yaml.safe_load(f) or {}

    def get_defaults(self) -> Dict:
        """
        Zwraca połączone defaults + nadpisania.

        Cache'uje wczytany plik. Brak defaults.yaml nie jest błędem -
        komponenty używają wtedy wartości wbudowanych.

        Returns:
            Dict: Zawartość defaults.yaml z nałożonymi nadpisaniami
        """
        if self._defaults is None:
            filepath = self.data_path / "defaults.yaml"
            if filepath.exists():
                self._defaults = self._load_yaml(filepath)
            else:
                logger.warning("No defaults.yaml in %s, using built-in values", self.data_path)
                self._defaults = {}
        return self._deep_merge(self._defaults, self._overrides)

    def load_overrides(self, filepath: str) -> Dict:
        """
        Wczytuje plik nadpisań i nakłada go na defaults.

        Args:
            filepath: Ścieżka do pliku YAML

        Returns:
            Dict: Wczytane nadpisania

        Raises:
            FileNotFoundError: Jeśli plik nie istnieje
        """
        overrides = self._load_yaml(Path(filepath))
        self._overrides = self._deep_merge(self._overrides, overrides)
        return overrides

    def _section(self, name: str) -> Dict:
        return copy.deepcopy(self.get_defaults().get(name, {}) or {})

    def get_grid_config(self) -> Dict:
        """Sekcja grid: width, height, hex_size, orientation, origin_offset."""
        return self._section("grid")

    def get_sampler_config(self) -> Dict:
        """Sekcja sampler: sample_count, sample_radius_factor, retry."""
        return self._section("sampler")

    def get_pathfinding_config(self) -> Dict:
        """Sekcja pathfinding: max_iterations."""
        return self._section("pathfinding")

    def get_planner_config(self) -> Dict:
        """Sekcja planner: parametry ContinuousPathPlanner."""
        return self._section("planner")

    def get_events_config(self) -> Dict:
        """Sekcja events: max_events."""
        return self._section("events")

    # ─────────────────────────────────────────────────────────────────────────
    # HELPERY
    # ─────────────────────────────────────────────────────────────────────────

    @staticmethod
    def _deep_merge(base: Dict, override: Dict) -> Dict:
        """
        Głęboko łączy dwa słowniki.

        Override nadpisuje wartości w base.
        Nested dicts są merge'owane rekurencyjnie.

        Args:
            base: Słownik bazowy (domyślne wartości)
            override: Słownik nadpisujący

        Returns:
            Dict: Połączony słownik
        """
        result = copy.deepcopy(base)

        for key, value in override.items():
            if (
                key in result
                and isinstance(result[key], dict)
                and isinstance(value, dict)
            ):
                result[key] = ConfigLoader._deep_merge(result[key], value)
            else:
                result[key] = copy.deepcopy(value)

        return result

    def reload(self) -> None:
        """
        Czyści cache i wymusza ponowne wczytanie defaults.

        Nadpisania wczytane przez load_overrides() zostają.
        """
        self._defaults = None


def filter_known_fields(cls: type, data: Optional[Dict]) -> Dict:
    """
    Zostawia tylko klucze będące polami dataclass `cls`.

    Nieznane klucze są logowane i pomijane (literówka w YAML nie
    powinna wywracać sesji).
    """
    known = set(getattr(cls, "__dataclass_fields__", {}))
    result = {}
    for key, value in (data or {}).items():
        if key in known:
            result[key] = value
        else:
            logger.warning("Unknown %s option '%s' ignored", cls.__name__, key)
    return result
