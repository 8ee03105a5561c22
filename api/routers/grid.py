"""
Grid router - generowanie siatki, stan komórek, integracja z navmeshem.
"""

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel, Field
from typing import Annotated, Any, Dict, List, Optional

from hexnav.core.hex_coord import HexCoord
from hexnav.core.vec2 import Vec2
from hexnav.navmesh import CircleObstacle, NavMesh, PolygonObstacle

from api.state import get_session


router = APIRouter()


# ═══════════════════════════════════════════════════════════════════════════
# REQUEST/RESPONSE MODELS
# ═══════════════════════════════════════════════════════════════════════════

# Punkt [x, y]; lista innej długości to 422
Point = Annotated[List[float], Field(min_length=2, max_length=2)]


class GenerateRequest(BaseModel):
    """Request generowania siatki (brakujące pola z defaults.yaml)."""
    width: Optional[int] = Field(default=None, gt=0)
    height: Optional[int] = Field(default=None, gt=0)
    hex_size: Optional[float] = Field(default=None, gt=0)
    origin_offset: Optional[Point] = None


class CellStateRequest(BaseModel):
    """Zmiana stanu komórki."""
    enabled: bool


class ObstacleModel(BaseModel):
    """Przeszkoda: koło (center + radius) lub wielokąt (points)."""
    id: str
    center: Optional[Point] = None
    radius: Optional[float] = None
    points: Optional[List[Point]] = None


class NavMeshRequest(BaseModel):
    """Navmesh + przeszkody do integracji."""
    vertices: List[Point]
    polygons: List[List[int]]
    anchor: Point = [0.0, 0.0]
    obstacles: List[ObstacleModel] = []


# ═══════════════════════════════════════════════════════════════════════════
# ENDPOINTS
# ═══════════════════════════════════════════════════════════════════════════

@router.post("/grid/generate")
async def generate_grid(request: GenerateRequest) -> Dict[str, Any]:
    """
    Generuje siatkę.

    Returns:
        Podsumowanie generowania
    """
    session = get_session()
    offset = Vec2.of(request.origin_offset) if request.origin_offset else None
    result = session.generate(
        width=request.width,
        height=request.height,
        hex_size=request.hex_size,
        origin_offset=offset,
    )
    return {
        "cell_count": result.cell_count,
        "width": result.width,
        "height": result.height,
        "hex_size": result.hex_size,
        "duration_ms": round(result.duration_ms, 3),
    }


@router.get("/grid")
async def get_grid() -> Dict[str, Any]:
    """
    Zwraca stan siatki z listą komórek.
    """
    session = get_session()
    summary = session.get_summary()
    summary["cells"] = session.get_cells()
    return summary


@router.put("/grid/cells/{q}/{r}")
async def set_cell_state(q: int, r: int, request: CellStateRequest) -> Dict[str, Any]:
    """
    Włącza / wyłącza komórkę.
    """
    session = get_session()
    if not session.grid.is_generated:
        raise HTTPException(status_code=409, detail="Grid not generated")

    changed = session.set_cell_enabled(HexCoord(q, r), request.enabled)
    if changed is None:
        raise HTTPException(status_code=404, detail=f"Cell ({q}, {r}) not found")

    return {"q": q, "r": r, "enabled": request.enabled, "changed": changed}


@router.post("/grid/navmesh")
async def integrate_navmesh(request: NavMeshRequest) -> Dict[str, Any]:
    """
    Podpina navmesh i synchronizuje z nim siatkę.
    """
    session = get_session()
    if not session.grid.is_generated:
        raise HTTPException(status_code=409, detail="Grid not generated")

    try:
        mesh = NavMesh.from_dict(request.model_dump())
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e))

    obstacles = []
    for item in request.obstacles:
        if item.points:
            obstacles.append(PolygonObstacle(item.id, [Vec2.of(p) for p in item.points]))
        elif item.center is not None and item.radius is not None:
            obstacles.append(CircleObstacle(item.id, Vec2.of(item.center), item.radius))
        else:
            raise HTTPException(status_code=422, detail=f"Obstacle '{item.id}' has no shape")

    session.attach_mesh(mesh, obstacles)
    result = session.integrate_navmesh()
    if result is None:
        return {"integrated": False}

    return {
        "integrated": True,
        "enabled_count": result.enabled_count,
        "disabled_count": result.disabled_count,
        "toggled_count": result.toggled_count,
    }
