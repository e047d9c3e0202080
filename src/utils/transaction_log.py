from datetime import datetime
from typing import Dict, List, Optional

from src.config.settings import (
    TRANSACTION_LOG_MAX_CONTENT_CHARS,
    TRANSACTION_LOG_MAX_ENTRIES,
)
from src.models.schemas import TransactionEntry

CONVERSATION_CHANNEL = "conversation"
DIRECT_CHANNEL = "direct"


class TransactionLog:
    """Bounded debug log of scraper transactions, newest first.

    Not locked: concurrent writers may race and the last one wins.
    """

    def __init__(
        self,
        max_entries: int = TRANSACTION_LOG_MAX_ENTRIES,
        max_content_chars: int = TRANSACTION_LOG_MAX_CONTENT_CHARS,
    ):
        self.max_entries = max_entries
        self.max_content_chars = max_content_chars
        self.entries: List[TransactionEntry] = []

    def record(self, url: str, content: str, price: Optional[float]) -> TransactionEntry:
        entry = TransactionEntry(
            url=url,
            content=content[: self.max_content_chars],
            price=price,
            timestamp=datetime.now().isoformat(),
        )
        self.entries = [entry] + self.entries[: self.max_entries - 1]
        return entry

    def list(self) -> List[TransactionEntry]:
        return list(self.entries)

    def clear(self):
        self.entries = []


# Global instances, one log per search origin
transaction_logs: Dict[str, TransactionLog] = {
    CONVERSATION_CHANNEL: TransactionLog(),
    DIRECT_CHANNEL: TransactionLog(),
}
