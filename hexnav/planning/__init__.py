"""
Planning module - ścieżki ciągłe dla ruchu turowego.

Zawiera:
- ContinuousPathPlanner: Planer z wygładzaniem, omijaniem przeszkód i budżetem
- PlannerConfig: Parametry planera
- PlanResult / PlanStatus: Wynik planowania
- position_at: Próbkowanie pozycji po postępie [0, 1]
"""

from .continuous import (
    ContinuousPathPlanner,
    PlannerConfig,
    PlanResult,
    PlanStatus,
    catmull_rom,
    trim_to_budget,
    position_at,
)

__all__ = [
    "ContinuousPathPlanner", "PlannerConfig", "PlanResult", "PlanStatus",
    "catmull_rom", "trim_to_budget", "position_at",
]
