"""Game domain services: board rules, sessions, and ratings.

This package contains the game logic imported by socket handlers and HTTP
routes, keeping transport concerns separated from core game mechanics.
"""

from .board import Variant
from .errors import SessionError
from .hub import GameHub
from .session import Phase, Session, SessionStore

__all__ = ['GameHub', 'Phase', 'Session', 'SessionError', 'SessionStore', 'Variant']
