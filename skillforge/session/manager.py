"""
Session Manager - Creates and tracks independent skill sessions.

Each session is its own composition root; the manager only keeps them
addressable by id and ends them cleanly.
"""

from __future__ import annotations
from typing import Any
import logging

from ..collaborators import Collaborators
from ..config import EngineConfig
from ..engine_core.rng import RandomSource
from ..registry.catalog import SkillCatalog
from .session import SkillSession

logger = logging.getLogger(__name__)


class SessionManager:
    """
    Manages skill sessions.

    Responsibilities:
    - Create sessions
    - Track active sessions
    - Clean up ended or stale sessions
    """

    def __init__(self, config: EngineConfig | None = None):
        self.config = config if config is not None else EngineConfig()
        self._sessions: dict[str, SkillSession] = {}

    def create_session(
        self,
        collaborators: Collaborators | None = None,
        catalog: SkillCatalog | None = None,
        config: EngineConfig | None = None,
        clock: Any = None,
        rng: RandomSource | None = None,
        session_id: str | None = None,
    ) -> SkillSession:
        """
        Create a new session.

        Args:
            collaborators: Host systems for this player
            catalog: Skills to register (defaults to the built-in skills)
            config: Overrides the manager's config for this session
            clock: Time source (defaults to wall clock)
            rng: Random source shared by every engine (defaults to config.random_seed)
            session_id: Explicit id (defaults to a uuid4)

        Returns:
            New SkillSession with every skill registered
        """
        if session_id is not None and session_id in self._sessions:
            raise ValueError(f"Session {session_id} already exists")

        session = SkillSession(
            config=config if config is not None else self.config,
            collaborators=collaborators,
            catalog=catalog,
            clock=clock,
            rng=rng,
            session_id=session_id,
        )
        self._sessions[session.session_id] = session
        return session

    def get_session(self, session_id: str) -> SkillSession | None:
        """Get a session by ID."""
        return self._sessions.get(session_id)

    def end_session(self, session_id: str) -> bool:
        """End a session and forget it."""
        session = self._sessions.pop(session_id, None)
        if session is None:
            return False
        session.end()
        return True

    def list_active_sessions(self) -> list[str]:
        """List IDs of active sessions."""
        return [sid for sid, session in self._sessions.items() if session.is_active()]

    def cleanup_stale_sessions(self, now: int, max_age_ms: int = 3_600_000) -> list[str]:
        """End sessions created more than max_age_ms before `now`."""
        stale = [
            sid for sid, session in self._sessions.items()
            if now - session.created_at > max_age_ms
        ]
        for session_id in stale:
            self.end_session(session_id)
        if stale:
            logger.info("Cleaned up %d stale session(s)", len(stale))
        return stale

    def end_all(self) -> None:
        for session_id in list(self._sessions):
            self.end_session(session_id)
