"""Per-user state for signed-in web sessions."""

import asyncio
import logging
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path

from ..agents.confirmation import ConfirmationEngine
from ..agents.gemini import AgentFactory
from ..models.user import AuthEvent, AuthSession, User
from ..services.session_state import SessionState

logger = logging.getLogger(__name__)


@dataclass
class UserSession:
    """Session state and chat engine for one authenticated session."""

    token: str
    state: SessionState
    engine: ConfirmationEngine
    last_seen: datetime = field(default_factory=datetime.now)

    @property
    def user(self) -> User:
        return self.state.user


class SessionRegistry:
    """Maps auth-session tokens to their UserSession.

    A UserSession is created lazily on first use, which is also when the
    data snapshot is loaded and the chat engine initialized (once per
    authenticated session). Signing out drops it.
    """

    def __init__(
        self,
        db_path: Path | None = None,
        agent_factory: AgentFactory | None = None,
        max_sessions: int = 100,
    ):
        self.db_path = db_path
        self.agent_factory = agent_factory
        self._sessions: dict[str, UserSession] = {}
        self._max_sessions = max_sessions
        self._lock = asyncio.Lock()

    def __len__(self) -> int:
        return len(self._sessions)

    def __contains__(self, token: str) -> bool:
        return token in self._sessions

    async def get(self, auth_session: AuthSession) -> UserSession:
        """Get (or create) the UserSession for an authenticated session.

        A new session is loaded without holding the lock. If two requests
        race to create the same one, the first stored wins and the other
        is discarded.
        """
        async with self._lock:
            session = self._sessions.get(auth_session.token)

        if session is None:
            built = await self._build(auth_session)
            async with self._lock:
                session = self._sessions.get(auth_session.token)
                if session is None:
                    session = built
                    self._sessions[auth_session.token] = session
                    self._cleanup_old_sessions()
                    logger.info("Started session for %s", auth_session.user.email)

        session.last_seen = datetime.now()
        return session

    async def _build(self, auth_session: AuthSession) -> UserSession:
        state = SessionState(auth_session.user, self.db_path)
        await state.refresh()
        engine = ConfirmationEngine(state)
        await engine.initialize(self.agent_factory)
        return UserSession(token=auth_session.token, state=state, engine=engine)

    async def drop(self, token: str) -> bool:
        async with self._lock:
            return self._sessions.pop(token, None) is not None

    async def on_auth_state_change(self, event: AuthEvent, auth_session: AuthSession) -> None:
        """Auth listener: forget a session's state when it signs out."""
        if event == AuthEvent.SIGNED_OUT:
            await self.drop(auth_session.token)

    def _cleanup_old_sessions(self):
        """Evict the least recently used sessions if over limit."""
        if len(self._sessions) <= self._max_sessions:
            return
        by_age = sorted(self._sessions.values(), key=lambda s: s.last_seen)
        for session in by_age[: len(self._sessions) - self._max_sessions]:
            del self._sessions[session.token]
