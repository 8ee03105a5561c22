"""
Planer ścieżek ciągłych dla ruchu turowego (ContinuousPathPlanner).

Planer pracuje na punktach 2D (nie na komórkach hex) i buduje gładką,
omijającą przeszkody ścieżkę przyciętą do budżetu ruchu w turze.

ETAPY PLANOWANIA:
═══════════════════════════════════════════════════════════════════

    1. RAW PATH
       ─────────────────────────────────────────────────────────
       • Ścieżka z MeshPathProvider (start -> cel)
       • Brak providera -> linia prosta próbkowana co straight_line_step
       • Linia prosta jest próbkowana najwyżej do
         STRAIGHT_LINE_BUDGET_FACTOR * budżet (+ jeden krok)

    2. SEGMENTACJA
       ─────────────────────────────────────────────────────────
       • Nowy segment, gdy kąt między poprzednim a bieżącym
         kierunkiem > turn_angle_threshold (45°)
       • Nowy segment zaczyna się od powtórzenia ostatniego punktu
         poprzedniego (ciągłość wygładzania)

    3. WYGŁADZANIE (clamped Catmull-Rom)
       ─────────────────────────────────────────────────────────
       • Pierwszy i ostatni punkt segmentu są duplikowane jako
         wirtualne punkty kontrolne - krzywa nie wychodzi poza końce
       • samples_per_edge punktów pośrednich na każdą krawędź

    4. ODPYCHANIE OD PRZESZKÓD
       ─────────────────────────────────────────────────────────
       • overlap_circle(punkt, agent_radius)
       • Kolizja -> 8 promieni (4 osiowe + 4 ukośne)
         trafienie d < buffer -> odpychanie
             (buffer - d) / buffer * buffer * 0.5
       • Nadal kolizja -> pierścienie wokół ORYGINALNEGO punktu
         co ring_angle_step (30°), wybór próbki z największym
         prześwitem (4 promienie kardynalne)
       • Brak gwarancji - zostaje najlepszy znaleziony kandydat

    5. PRZYCINANIE DO BUDŻETU
       ─────────────────────────────────────────────────────────
       • Długość > budżet -> interpolacja ostatniego punktu tak,
         żeby długość == budżet DOKŁADNIE

    6. WALIDACJA
       ─────────────────────────────────────────────────────────
       • ray_cast między kolejnymi punktami
       • Trafienie -> porażka PATH_BLOCKED (bez ponownego planowania)

Stan:
    Planer nie przenosi stanu między żądaniami. Ostatnia udana ścieżka
    jest trzymana tylko dla get_position_at(). cancel() porzuca plan
    w toku i ostatnią ścieżkę.

Przykład użycia:
    >>> planner = ContinuousPathPlanner(spatial=spatial, mesh_path=NavMeshPathfinder(mesh))
    >>> result = planner.plan(Vec2(0, 0), Vec2(1000, 0), movement_budget=320.0)
    >>> result.total_length
    320.0
    >>> planner.get_position_at(0.5)
    Vec2(x=160.0, y=0.0)
"""

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional, Sequence, Tuple
import logging
import math
import time

from ..core.config_loader import filter_known_fields
from ..core.vec2 import Vec2, polyline_length
from ..events.event_logger import EventLogger, EventType
from ..navmesh.mesh_path import MeshPathProvider
from ..navmesh.spatial import SpatialQueryProvider

logger = logging.getLogger(__name__)

_DIAGONAL = math.sqrt(0.5)

# Kolejność: 4 osiowe, potem 4 ukośne
PROBE_DIRECTIONS: List[Vec2] = [
    Vec2(1.0, 0.0),
    Vec2(0.0, 1.0),
    Vec2(-1.0, 0.0),
    Vec2(0.0, -1.0),
    Vec2(_DIAGONAL, _DIAGONAL),
    Vec2(-_DIAGONAL, _DIAGONAL),
    Vec2(-_DIAGONAL, -_DIAGONAL),
    Vec2(_DIAGONAL, -_DIAGONAL),
]

CARDINAL_DIRECTIONS: List[Vec2] = PROBE_DIRECTIONS[:4]

# Dalej niż factor * budżet linia prosta i tak zostanie ucięta
STRAIGHT_LINE_BUDGET_FACTOR = 2.0


@dataclass
class PlannerConfig:
    """
    Konfiguracja planera.

    Attributes:
        straight_line_step (float): Krok próbkowania linii prostej (fallback)
        turn_angle_threshold (float): Kąt [°] rozpoczynający nowy segment
        samples_per_edge (int): Punkty pośrednie Catmull-Rom na krawędź
        agent_radius (float): Promień kolizji agenta
        obstacle_buffer (float): Dystans bufora od przeszkód
        probe_ray_length (float): Długość promieni sondujących
        ring_angle_step (float): Krok kątowy [°] próbek na pierścieniu
        ring_count (int): Liczba pierścieni (promień = buffer * k)
    """
    straight_line_step: float = 10.0
    turn_angle_threshold: float = 45.0
    samples_per_edge: int = 4
    agent_radius: float = 4.0
    obstacle_buffer: float = 12.0
    probe_ray_length: float = 24.0
    ring_angle_step: float = 30.0
    ring_count: int = 3

    @classmethod
    def from_dict(cls, data: Optional[Dict]) -> PlannerConfig:
        return cls(**filter_known_fields(cls, data))


class PlanStatus(Enum):
    """Status planowania."""
    SUCCESS = "success"
    NO_RAW_PATH = "no_raw_path"
    PATH_BLOCKED = "path_blocked"
    CANCELLED = "cancelled"
    INVALID_REQUEST = "invalid_request"


@dataclass
class PlanResult:
    """
    Wynik planowania ścieżki ciągłej.

    Attributes:
        points (List[Vec2]): Punkty ścieżki (puste przy porażce)
        status (PlanStatus): Status
        reason (str): Opis wyniku / przyczyna porażki
        total_length (float): Długość końcowej ścieżki
        raw_length (float): Długość przed przycięciem
        trimmed (bool): Czy ścieżka została przycięta do budżetu
        blocked_segment (Optional[int]): Indeks zablokowanego odcinka
        duration_ms (float): Czas planowania
    """
    points: List[Vec2] = field(default_factory=list)
    status: PlanStatus = PlanStatus.SUCCESS
    reason: str = ""
    total_length: float = 0.0
    raw_length: float = 0.0
    trimmed: bool = False
    blocked_segment: Optional[int] = None
    duration_ms: float = 0.0

    @property
    def ok(self) -> bool:
        return self.status is PlanStatus.SUCCESS

    def to_dict(self) -> dict:
        """Serializacja do API / logów."""
        return {
            "status": self.status.value,
            "reason": self.reason,
            "points": [p.as_list() for p in self.points],
            "total_length": self.total_length,
            "raw_length": self.raw_length,
            "trimmed": self.trimmed,
            "blocked_segment": self.blocked_segment,
            "duration_ms": round(self.duration_ms, 3),
        }


# ═══════════════════════════════════════════════════════════════════════════
# FUNKCJE GEOMETRYCZNE
# ═══════════════════════════════════════════════════════════════════════════

def catmull_rom(p0: Vec2, p1: Vec2, p2: Vec2, p3: Vec2, t: float) -> Vec2:
    """
    Punkt jednorodnej krzywej Catmull-Rom między p1 (t=0) a p2 (t=1).
    """
    t2 = t * t
    t3 = t2 * t
    x = 0.5 * (
        2.0 * p1.x
        + (p2.x - p0.x) * t
        + (2.0 * p0.x - 5.0 * p1.x + 4.0 * p2.x - p3.x) * t2
        + (3.0 * p1.x - p0.x - 3.0 * p2.x + p3.x) * t3
    )
    y = 0.5 * (
        2.0 * p1.y
        + (p2.y - p0.y) * t
        + (2.0 * p0.y - 5.0 * p1.y + 4.0 * p2.y - p3.y) * t2
        + (3.0 * p1.y - p0.y - 3.0 * p2.y + p3.y) * t3
    )
    return Vec2(x, y)


def trim_to_budget(points: Sequence[Vec2], budget: float) -> Tuple[List[Vec2], bool]:
    """
    Przycina łamaną do zadanej długości.

    Odcinek przekraczający budżet jest interpolowany liniowo tak, żeby
    długość wyniku była równa budżetowi; wszystko dalej jest odrzucane.

    Args:
        points: Punkty łamanej
        budget: Maksymalna długość

    Returns:
        Tuple[List[Vec2], bool]: (punkty, czy przycięto)
    """
    total = 0.0
    for i in range(1, len(points)):
        a = points[i - 1]
        b = points[i]
        segment = a.distance_to(b)
        if total + segment > budget:
            remaining = budget - total
            result = list(points[:i])
            if remaining > 0.0:
                result.append(a.lerp(b, remaining / segment))
            return result, True
        total += segment
    return list(points), False


def position_at(points: Sequence[Vec2], progress: float) -> Optional[Vec2]:
    """
    Pozycja na ścieżce dla postępu w [0, 1].

    Idzie po punktach sumując długość, aż osiągnie progress * długość,
    potem interpoluje liniowo wewnątrz odcinka. progress <= 0 zwraca
    pierwszy punkt, progress >= 1 DOKŁADNIE ostatni.

    Args:
        points: Punkty ścieżki
        progress: Postęp (przycinany do [0, 1])

    Returns:
        Optional[Vec2]: Pozycja lub None dla pustej ścieżki
    """
    if not points:
        return None
    if progress <= 0.0 or len(points) == 1:
        return points[0]
    if progress >= 1.0:
        return points[-1]

    total = polyline_length(points)
    if total == 0.0:
        return points[0]

    target = progress * total
    travelled = 0.0
    for a, b in zip(points, points[1:]):
        segment = a.distance_to(b)
        if segment > 0.0 and travelled + segment >= target:
            return a.lerp(b, (target - travelled) / segment)
        travelled += segment
    return points[-1]


# ═══════════════════════════════════════════════════════════════════════════
# PLANER
# ═══════════════════════════════════════════════════════════════════════════

class ContinuousPathPlanner:
    """
    Planer ścieżek ciągłych z budżetem ruchu.

    Attributes:
        spatial (Optional[SpatialQueryProvider]): Sonda przeszkód
            (None = brak odpychania i walidacji)
        mesh_path (Optional[MeshPathProvider]): Źródło surowych ścieżek
            (None = linia prosta)
        config (PlannerConfig): Parametry
        events (Optional[EventLogger]): Odbiorca powiadomień

    Note:
        Jedna instancja nie może planować współbieżnie.
    """

    def __init__(
        self,
        spatial: Optional[SpatialQueryProvider] = None,
        mesh_path: Optional[MeshPathProvider] = None,
        config: Optional[PlannerConfig] = None,
        events: Optional[EventLogger] = None,
    ):
        self.spatial = spatial
        self.mesh_path = mesh_path
        self.config = config or PlannerConfig()
        self.events = events
        self._points: List[Vec2] = []
        self._cancelled = False
        self._in_progress = False

    # ─────────────────────────────────────────────────────────────────────────
    # API
    # ─────────────────────────────────────────────────────────────────────────

    @property
    def points(self) -> List[Vec2]:
        """Punkty ostatniej udanej ścieżki."""
        return list(self._points)

    @property
    def in_progress(self) -> bool:
        return self._in_progress

    def cancel(self) -> None:
        """
        Porzuca plan w toku i ostatnią ścieżkę.

        Plan w toku kończy się statusem CANCELLED na najbliższej
        granicy etapu.
        """
        if self._in_progress:
            self._cancelled = True
        self._points = []

    def get_position_at(self, progress: float) -> Optional[Vec2]:
        """Pozycja na ostatniej ścieżce (patrz position_at)."""
        return position_at(self._points, progress)

    def plan(
        self,
        start: Vec2,
        destination: Vec2,
        movement_budget: float,
    ) -> PlanResult:
        """
        Planuje ścieżkę start -> cel w ramach budżetu ruchu.

        Args:
            start: Pozycja agenta
            destination: Cel
            movement_budget: Maksymalna długość ruchu w tej turze

        Returns:
            PlanResult: Punkty ścieżki lub powód porażki
        """
        started = time.perf_counter()
        self._points = []
        self._cancelled = False
        self._in_progress = True
        try:
            result = self._run(start, destination, movement_budget)
        finally:
            self._in_progress = False
            self._cancelled = False

        result.duration_ms = (time.perf_counter() - started) * 1000.0
        if result.ok:
            self._points = list(result.points)
        self._log_result(result)
        return result

    # ─────────────────────────────────────────────────────────────────────────
    # ETAPY
    # ─────────────────────────────────────────────────────────────────────────

    def _run(self, start: Vec2, destination: Vec2, budget: float) -> PlanResult:
        if budget < 0.0 or math.isnan(budget):
            return PlanResult(
                status=PlanStatus.INVALID_REQUEST,
                reason=f"movement budget must be >= 0, got {budget}",
            )

        # 1. Raw path
        cap = budget * STRAIGHT_LINE_BUDGET_FACTOR + self.config.straight_line_step
        raw = self.raw_path(start, destination, max_length=cap)
        if not raw:
            return PlanResult(
                status=PlanStatus.NO_RAW_PATH,
                reason=f"no navigable path from {start} to {destination}",
            )
        if self._cancelled:
            return self._cancelled_result()

        # 2-3. Segmentacja + wygładzanie
        smoothed = self.smooth_segments(self.segment_path(raw))
        if self._cancelled:
            return self._cancelled_result()

        # 4. Odpychanie od przeszkód
        if self.spatial is not None:
            smoothed = [self.displace_point(p) for p in smoothed]
            if self._cancelled:
                return self._cancelled_result()

        # 5. Budżet
        raw_length = polyline_length(smoothed)
        if self.mesh_path is None:
            # Odcinek linii prostej pominięty przy próbkowaniu
            raw_length += raw[-1].distance_to(destination)
        points, trimmed = trim_to_budget(smoothed, budget)

        # 6. Walidacja
        blocked = self.find_blocked_segment(points)
        if blocked is not None:
            return PlanResult(
                status=PlanStatus.PATH_BLOCKED,
                reason=f"segment {blocked} intersects an obstacle",
                raw_length=raw_length,
                trimmed=trimmed,
                blocked_segment=blocked,
            )

        total = budget if trimmed else raw_length
        return PlanResult(
            points=points,
            status=PlanStatus.SUCCESS,
            reason="trimmed to movement budget" if trimmed else "full path",
            total_length=total,
            raw_length=raw_length,
            trimmed=trimmed,
        )

    def _cancelled_result(self) -> PlanResult:
        return PlanResult(status=PlanStatus.CANCELLED, reason="plan cancelled")

    def raw_path(
        self,
        start: Vec2,
        destination: Vec2,
        max_length: Optional[float] = None,
    ) -> List[Vec2]:
        """
        Surowa ścieżka: z navmesha lub linia prosta.

        Linia prosta jest dzielona na ceil(długość / krok) równych
        odcinków (końce włącznie).

        Args:
            start: Początek
            destination: Cel
            max_length: Limit długości linii prostej; dłuższa kończy się
                        na tym dystansie zamiast w celu (ścieżka z navmesha
                        nie jest ucinana)
        """
        if self.mesh_path is not None:
            return list(self.mesh_path.find_path(start, destination))

        distance = start.distance_to(destination)
        if distance == 0.0:
            return [start]
        end = destination
        if max_length is not None and distance > max_length:
            end = start.lerp(destination, max_length / distance)
            distance = max_length
        steps = max(1, math.ceil(distance / self.config.straight_line_step))
        points = [start.lerp(end, i / steps) for i in range(steps)]
        points.append(end)
        return points

    def segment_path(self, points: Sequence[Vec2]) -> List[List[Vec2]]:
        """
        Dzieli ścieżkę na segmenty o podobnym kierunku.

        Kolejne powtórzone punkty są pomijane: krawędź zerowej długości
        nie ma kierunku i ukrywałaby zakręt.

        Returns:
            List[List[Vec2]]: Segmenty; każdy kolejny zaczyna się od
                              ostatniego punktu poprzedniego
        """
        points = [p for i, p in enumerate(points) if i == 0 or p != points[i - 1]]
        if len(points) < 3:
            return [list(points)]

        threshold = self.config.turn_angle_threshold
        segments: List[List[Vec2]] = []
        current = [points[0], points[1]]
        for i in range(1, len(points) - 1):
            incoming = points[i] - points[i - 1]
            outgoing = points[i + 1] - points[i]
            if incoming.angle_to(outgoing) > threshold:
                segments.append(current)
                current = [points[i]]
            current.append(points[i + 1])
        segments.append(current)
        return segments

    def smooth_segment(self, points: Sequence[Vec2]) -> List[Vec2]:
        """
        Clamped Catmull-Rom dla jednego segmentu.

        Końce segmentu są zachowane dokładnie.
        """
        if len(points) < 2:
            return list(points)

        control = [points[0]] + list(points) + [points[-1]]
        steps = max(0, self.config.samples_per_edge) + 1
        result: List[Vec2] = []
        for i in range(len(points) - 1):
            p0, p1, p2, p3 = control[i:i + 4]
            result.append(p1)
            for k in range(1, steps):
                result.append(catmull_rom(p0, p1, p2, p3, k / steps))
        result.append(points[-1])
        return result

    def smooth_segments(self, segments: Sequence[Sequence[Vec2]]) -> List[Vec2]:
        """Wygładza segmenty i skleja je bez duplikatów na łączeniach."""
        result: List[Vec2] = []
        for segment in segments:
            smoothed = self.smooth_segment(segment)
            if result and smoothed and smoothed[0] == result[-1]:
                smoothed = smoothed[1:]
            result.extend(smoothed)
        return result

    # ─────────────────────────────────────────────────────────────────────────
    # PRZESZKODY
    # ─────────────────────────────────────────────────────────────────────────

    def _collides(self, point: Vec2) -> bool:
        return bool(self.spatial.overlap_circle(point, self.config.agent_radius))

    def clearance(self, point: Vec2) -> float:
        """
        Prześwit punktu: najkrótsze trafienie z 4 promieni kardynalnych
        (długość promienia, jeśli żaden nie trafia).
        """
        length = self.config.probe_ray_length
        best = length
        for direction in CARDINAL_DIRECTIONS:
            hit = self.spatial.ray_cast(point, point + direction * length)
            if hit is not None and hit.distance < best:
                best = hit.distance
        return best

    def displace_point(self, point: Vec2) -> Vec2:
        """
        Wypycha punkt z przeszkód.

        Nigdy nie rzuca wyjątku - gdy kolizji nie da się rozwiązać,
        zwraca najlepszego znalezionego kandydata (walidacja ścieżki
        rozstrzyga o poprawności).

        Args:
            point: Punkt wygładzonej ścieżki

        Returns:
            Vec2: Punkt po przesunięciu
        """
        if not self._collides(point):
            return point

        buffer = self.config.obstacle_buffer
        length = self.config.probe_ray_length
        repulsion = Vec2(0.0, 0.0)
        for direction in PROBE_DIRECTIONS:
            hit = self.spatial.ray_cast(point, point + direction * length)
            if hit is not None and hit.distance < buffer:
                strength = (buffer - hit.distance) / buffer * buffer * 0.5
                repulsion = repulsion - direction * strength

        displaced = point + repulsion
        if not self._collides(displaced):
            return displaced

        return self._ring_candidate(point, displaced)

    def _ring_candidate(self, original: Vec2, displaced: Vec2) -> Vec2:
        """
        Próbki na pierścieniach wokół oryginalnego punktu.

        Z najbliższego pierścienia z próbkami bez kolizji wybierana jest
        próbka o największym prześwicie. Bez takich próbek - kandydat
        (także displaced) o największym prześwicie.
        """
        buffer = self.config.obstacle_buffer
        step = self.config.ring_angle_step
        sample_count = max(1, int(round(360.0 / step)))

        fallback = displaced
        fallback_clearance = self.clearance(displaced)
        for ring in range(1, max(1, self.config.ring_count) + 1):
            radius = buffer * ring
            free: List[Vec2] = []
            for i in range(sample_count):
                angle = math.radians(i * step)
                sample = Vec2(
                    original.x + radius * math.cos(angle),
                    original.y + radius * math.sin(angle),
                )
                if not self._collides(sample):
                    free.append(sample)
                    continue
                sample_clearance = self.clearance(sample)
                if sample_clearance > fallback_clearance:
                    fallback = sample
                    fallback_clearance = sample_clearance

            if free:
                return max(free, key=self.clearance)

        logger.debug("Could not resolve collision at %s, using best candidate", original)
        return fallback

    def find_blocked_segment(self, points: Sequence[Vec2]) -> Optional[int]:
        """
        Indeks pierwszego odcinka przecinającego przeszkodę.

        Returns:
            Optional[int]: i dla odcinka points[i] -> points[i + 1] lub None
        """
        if self.spatial is None:
            return None
        for i in range(len(points) - 1):
            if self.spatial.ray_cast(points[i], points[i + 1]) is not None:
                return i
        return None

    # ─────────────────────────────────────────────────────────────────────────
    # LOGI
    # ─────────────────────────────────────────────────────────────────────────

    def _log_result(self, result: PlanResult) -> None:
        if result.ok:
            logger.debug(
                "Planned %d points, length %.2f (%.1f ms)",
                len(result.points), result.total_length, result.duration_ms,
            )
        else:
            logger.info("Plan failed: %s (%s)", result.status.value, result.reason)

        if self.events is None:
            return
        event_type = {
            PlanStatus.SUCCESS: EventType.PLAN_COMPLETED,
            PlanStatus.CANCELLED: EventType.PLAN_CANCELLED,
        }.get(result.status, EventType.PLAN_FAILED)
        self.events.log_plan_result(
            event_type, result.total_length, len(result.points), result.reason
        )
