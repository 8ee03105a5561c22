"""
Konfiguracja logowania dla hexnav.

Moduły biblioteki logują przez logging.getLogger(__name__) i nie
dotykają handlerów. Punkt wejścia (main.py, api) wywołuje raz:

    from hexnav.core.logging_config import configure_logging
    configure_logging()
"""

from __future__ import annotations

import logging
import sys


def configure_logging(level: int = logging.INFO) -> None:
    """
    Konfiguruje root logger, jeśli nie ma jeszcze handlerów.

    Args:
        level: Poziom logowania (np. logging.INFO, logging.DEBUG)
    """
    root = logging.getLogger()

    # Nie duplikuj handlerów, jeśli ktoś już skonfigurował logging
    if root.handlers:
        root.setLevel(level)
        return

    handler = logging.StreamHandler(stream=sys.stdout)
    formatter = logging.Formatter(
        fmt="%(asctime)s [%(levelname)s] %(name)s: %(message)s"
    )
    handler.setFormatter(formatter)
    root.addHandler(handler)
    root.setLevel(level)
