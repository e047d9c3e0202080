import re
import uuid

from src.utils.logger import get_logger

logger = get_logger(__name__)

MAX_MESSAGE_LENGTH = 1000


class QueryValidator:
    """Validates and normalizes user text before it reaches the model or the search URL"""

    BLOCKED_PATTERNS = [
        re.compile(pattern, re.IGNORECASE)
        for pattern in (
            r"<\s*script",
            r"javascript:",
            r"on(error|click|load)\s*=",
            r"eval\(",
            r"__import__",
        )
    ]

    @staticmethod
    def sanitize_message(message: str) -> str:
        if not message or not message.strip():
            raise ValueError("Message cannot be empty")

        if len(message) > MAX_MESSAGE_LENGTH:
            raise ValueError(f"Message too long (max {MAX_MESSAGE_LENGTH} characters)")

        for pattern in QueryValidator.BLOCKED_PATTERNS:
            if pattern.search(message):
                logger.warning(f"Blocked message matching {pattern.pattern!r}")
                raise ValueError("Message contains potentially malicious content")

        return " ".join(message.split())

    @staticmethod
    def validate_session_id(session_id: str) -> bool:
        """Empty ids are allowed (new session); anything else must be a UUID"""
        if not session_id:
            return True

        try:
            uuid.UUID(session_id)
            return True
        except ValueError:
            logger.warning(f"Invalid session ID format: {session_id}")
            return False
