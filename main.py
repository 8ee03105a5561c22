#!/usr/bin/env python3
"""
hex-tactics-nav - Entry Point
═══════════════════════════════════════════════════════════════════════════

Uruchamia przykładową sesję nawigacji: siatka + navmesh + ścieżki.

Użycie:
    python main.py                         # Domyślna siatka z defaults.yaml
    python main.py --width 12 --height 8   # Własne wymiary
    python main.py --budget 120            # Budżet ruchu planera ciągłego
    python main.py --config my.yaml        # Nadpisania konfiguracji
    python main.py --verbose               # Szczegółowy output (DEBUG)

Wynik:
    - Wypisuje przebieg na konsolę
    - Zapisuje log zdarzeń do output/session.json
"""

import argparse
import logging
import sys
from pathlib import Path

# Dodaj root projektu do path
sys.path.insert(0, str(Path(__file__).parent))

from hexnav.core.config_loader import ConfigLoader
from hexnav.core.logging_config import configure_logging
from hexnav.core.vec2 import Vec2
from hexnav.events.event_logger import EventType
from hexnav.navmesh import CircleObstacle, NavMesh, PolygonObstacle
from hexnav.session import NavigationSession, SessionConfig


def main():
    """Główna funkcja."""
    parser = argparse.ArgumentParser(
        description="hex-tactics-nav demo",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--width", type=int, default=None, help="Szerokość siatki (komórki)")
    parser.add_argument("--height", type=int, default=None, help="Wysokość siatki (komórki)")
    parser.add_argument("--hex-size", type=float, default=None, help="Promień hexa")
    parser.add_argument(
        "--budget",
        type=float,
        default=150.0,
        help="Budżet ruchu planera ciągłego (domyślnie: 150)"
    )
    parser.add_argument(
        "--config",
        type=str,
        default=None,
        help="Plik YAML z nadpisaniami defaults.yaml"
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Szczegółowy output"
    )
    parser.add_argument(
        "--no-save",
        action="store_true",
        help="Nie zapisuj logu do pliku"
    )

    args = parser.parse_args()
    configure_logging(logging.DEBUG if args.verbose else logging.WARNING)

    print("=" * 60)
    print("HEX-TACTICS-NAV")
    print("=" * 60)

    # Załaduj konfigurację
    loader = ConfigLoader(str(Path(__file__).parent / "data"))
    if args.config:
        loader.load_overrides(args.config)

    session = NavigationSession(SessionConfig.from_loader(loader))

    # ─────────────────────────────────────────────────────────────────────────
    # SIATKA
    # ─────────────────────────────────────────────────────────────────────────
    generation = session.generate(
        width=args.width,
        height=args.height,
        hex_size=args.hex_size,
    )
    print(
        f"Siatka: {generation.width}x{generation.height} "
        f"({generation.cell_count} komórek, hex_size={generation.hex_size})"
    )

    # ─────────────────────────────────────────────────────────────────────────
    # NAVMESH (prostokąt pod siatką + dwie przeszkody)
    # ─────────────────────────────────────────────────────────────────────────
    size = generation.hex_size
    extent_x = 1.5 * size * generation.width
    extent_y = 1.8 * size * generation.height
    mesh = NavMesh.rectangle(Vec2(-size, -size), extent_x, extent_y)
    obstacles = [
        CircleObstacle("rock", Vec2(extent_x * 0.4, extent_y * 0.35), size * 1.5),
        PolygonObstacle("wall", [
            Vec2(extent_x * 0.6, extent_y * 0.1),
            Vec2(extent_x * 0.65, extent_y * 0.1),
            Vec2(extent_x * 0.65, extent_y * 0.5),
            Vec2(extent_x * 0.6, extent_y * 0.5),
        ]),
    ]
    session.attach_mesh(mesh, obstacles)

    integration = session.integrate_navmesh()
    if integration is None:
        print("⚠ Integracja z navmeshem nieudana")
    else:
        print(
            f"Navmesh: {integration.enabled_count} dostępnych, "
            f"{integration.disabled_count} zablokowanych "
            f"({integration.toggled_count} zmian)"
        )

    if args.verbose:
        print()
        print(session.grid.debug_print())

    # ─────────────────────────────────────────────────────────────────────────
    # ŚCIEŻKA DYSKRETNA
    # ─────────────────────────────────────────────────────────────────────────
    print()
    print("-" * 60)
    print("A* PO KOMÓRKACH")
    print("-" * 60)

    cells = session.grid.get_enabled_cells()
    if len(cells) < 2:
        print("Za mało dostępnych komórek")
        return

    start_cell, goal_cell = cells[0], cells[-1]
    path = session.request_path(start_cell.world_position, goal_cell.world_position)
    print(f"Start: {start_cell.coord}  Cel: {goal_cell.coord}")
    print(f"Status: {path.status.value} ({path.expanded_nodes} rozwinięć, {path.duration_ms:.2f} ms)")
    if path.found:
        print("Ścieżka: " + " -> ".join(str(c) for c in path.coords))
    else:
        print(f"Powód: {path.reason}")

    # ─────────────────────────────────────────────────────────────────────────
    # ŚCIEŻKA CIĄGŁA
    # ─────────────────────────────────────────────────────────────────────────
    print()
    print("-" * 60)
    print(f"PLANER CIĄGŁY (budżet {args.budget})")
    print("-" * 60)

    plan = session.request_continuous_path(
        start_cell.world_position, goal_cell.world_position, args.budget
    )
    print(f"Status: {plan.status.value}")
    print(
        f"Długość: {plan.total_length:.1f} / surowa {plan.raw_length:.1f}"
        f"{' (przycięta)' if plan.trimmed else ''}"
    )
    print(f"Punkty: {len(plan.points)}")
    if plan.ok:
        midpoint = session.planner.get_position_at(0.5)
        print(f"Pozycja w połowie ruchu: {midpoint}")
    else:
        print(f"Powód: {plan.reason}")

    # Zapisz log
    if not args.no_save:
        output_path = "output/session.json"
        session.save_log(output_path)
        print()
        print(f"📄 Log zapisany: {output_path}")

    # Verbose: pokaż statystyki
    if args.verbose:
        print()
        print("-" * 60)
        print("STATYSTYKI ZDARZEŃ")
        print("-" * 60)

        for event_type in EventType:
            count = len(session.events.get_events_by_type(event_type))
            if count > 0:
                print(f"  {event_type.name}: {count}")


if __name__ == "__main__":
    main()
