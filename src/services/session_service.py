import uuid
from typing import Dict, Any, Optional

from src.config.settings import SESSION_MAX_ENTRIES
from src.models.schemas import ConversationSession, ConversationStatus
from src.utils.logger import get_logger

logger = get_logger(__name__)


class SessionService:
    """In-memory sessions, oldest evicted first once max_entries is reached."""

    def __init__(self, max_entries: int = SESSION_MAX_ENTRIES):
        self.max_entries = max_entries
        self.sessions: Dict[str, Dict[str, Any]] = {}

    def get_or_create_session(self, session_id: Optional[str] = None) -> ConversationSession:
        if session_id and session_id in self.sessions:
            return ConversationSession(**self.sessions[session_id])

        return self.create_session(session_id)

    def create_session(self, session_id: Optional[str] = None) -> ConversationSession:
        while len(self.sessions) >= self.max_entries:
            oldest = next(iter(self.sessions))
            del self.sessions[oldest]
            logger.info(f"Session store full, evicted {oldest}")

        session = ConversationSession(session_id=session_id or str(uuid.uuid4()))
        self.sessions[session.session_id] = session.model_dump()
        return session

    def get_open_session(self, session_id: Optional[str] = None) -> ConversationSession:
        """Session ready for a new turn; a completed one is replaced by a fresh session."""
        session = self.get_or_create_session(session_id)
        if session.status == ConversationStatus.COMPLETE:
            self.delete_session(session.session_id)
            return self.create_session()
        return session

    def update_session(self, session: ConversationSession):
        self.sessions[session.session_id] = session.model_dump()

    def delete_session(self, session_id: str) -> bool:
        if session_id in self.sessions:
            del self.sessions[session_id]
            return True
        return False

    def get_session(self, session_id: str) -> Optional[Dict[str, Any]]:
        return self.sessions.get(session_id)


# Global instance
session_service = SessionService()
