"""
Navmesh module - chodliwy obszar ciągły i jego integracja z siatką.

Zawiera:
- NavMesh / NavigableMeshProvider: Opis chodliwego obszaru
- SpatialQueryProvider / GeometrySpatialQuery: Zapytania przestrzenne
- CircleObstacle / PolygonObstacle: Przeszkody statyczne
- MeshPathProvider / NavMeshPathfinder: Surowe ścieżki po navmeshu
- NavMeshSampler: Klasyfikacja komórek siatki
"""

from .mesh import NavMesh, NavigableMeshProvider, point_in_polygon
from .spatial import (
    SpatialQueryProvider,
    GeometrySpatialQuery,
    RayHit,
    Obstacle,
    CircleObstacle,
    PolygonObstacle,
)
from .mesh_path import MeshPathProvider, NavMeshPathfinder
from .sampler import NavMeshSampler, SamplerConfig, IntegrationResult

__all__ = [
    "NavMesh", "NavigableMeshProvider", "point_in_polygon",
    "SpatialQueryProvider", "GeometrySpatialQuery", "RayHit",
    "Obstacle", "CircleObstacle", "PolygonObstacle",
    "MeshPathProvider", "NavMeshPathfinder",
    "NavMeshSampler", "SamplerConfig", "IntegrationResult",
]
