"""
Paths router - ścieżki dyskretne (A*) i ciągłe (planer z budżetem).
"""

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel, Field
from typing import Any, Dict

from hexnav.core.vec2 import Vec2

from api.routers.grid import Point
from api.state import get_session


router = APIRouter()


class PathRequest(BaseModel):
    """Request ścieżki dyskretnej."""
    start: Point
    goal: Point


class PlanRequest(BaseModel):
    """Request ścieżki ciągłej."""
    start: Point
    destination: Point
    movement_budget: float = Field(ge=0)


@router.post("/path")
async def find_path(request: PathRequest) -> Dict[str, Any]:
    """
    Znajduje ścieżkę po komórkach.

    Brak ścieżki to normalny wynik (status != "found"), nie błąd HTTP.
    """
    session = get_session()
    if not session.grid.is_generated:
        raise HTTPException(status_code=409, detail="Grid not generated")

    result = session.request_path(Vec2.of(request.start), Vec2.of(request.goal))
    return result.to_dict()


@router.post("/plan")
async def plan_path(request: PlanRequest) -> Dict[str, Any]:
    """
    Planuje ścieżkę ciągłą przyciętą do budżetu ruchu.
    """
    session = get_session()
    result = session.request_continuous_path(
        Vec2.of(request.start),
        Vec2.of(request.destination),
        request.movement_budget,
    )
    return result.to_dict()


@router.get("/events")
async def get_events() -> Dict[str, Any]:
    """
    Log zdarzeń sesji.
    """
    session = get_session()
    events = session.events.get_events()
    return {"events": events, "total_events": len(events)}
