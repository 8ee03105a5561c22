"""
Core module - podstawowe komponenty nawigacji.

Zawiera:
- Vec2: Punkt / wektor 2D w przestrzeni świata
- HexCoord: System współrzędnych hexagonalnych
- HexGrid: Siatka hexagonalna z obsługą enabled/disabled
- GridAStarPathfinder: Algorytm A* dla hex grid
- ConfigLoader: Wczytywanie konfiguracji z defaults
"""

from .vec2 import Vec2
from .hex_coord import HexCoord, HexOrientation, axial_to_cube, cube_to_axial, cube_round
from .hex_grid import HexCell, HexGrid, GenerationResult
from .pathfinding import GridAStarPathfinder, PathResult, PathStatus
from .config_loader import ConfigLoader

__all__ = [
    "Vec2", "HexCoord", "HexOrientation", "axial_to_cube", "cube_to_axial",
    "cube_round", "HexCell", "HexGrid", "GenerationResult",
    "GridAStarPathfinder", "PathResult", "PathStatus", "ConfigLoader",
]
