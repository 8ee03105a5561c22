"""
Session module - właściciel siatki i punkt wejścia żądań nawigacji.
"""

from .session import NavigationSession, SessionConfig

__all__ = ["NavigationSession", "SessionConfig"]
