"""
Session Module - Composition roots for skill engines.

A session represents one player's set of skills:
- Created with the host's collaborators
- Owns the registry, clock, random source, and notification queue
- Ticked by the host loop
- Saved and loaded as one registry payload

Sessions are independent; there are no process-wide singletons.
"""

from .session import SkillSession, SessionState, TickResult
from .manager import SessionManager

__all__ = [
    "SkillSession",
    "SessionState",
    "TickResult",
    "SessionManager",
]
