from dataclasses import dataclass, field
from typing import Dict, List, Optional

from src.agents.graph import agent
from src.models.errors import ConversationClosedError
from src.models.schemas import (
    ConversationSession,
    ConversationStatus,
    SearchResult,
    StructuredQuery,
)
from src.models.state import AgentState
from src.utils.logger import get_logger

logger = get_logger(__name__)

TRANSITION_NOTICE = (
    "Great! I have all the details. Now, I'll perform a live search to find "
    "the best current prices for you. This might take a moment..."
)


@dataclass
class TurnOutcome:
    replies: List[str]
    status: ConversationStatus
    fields: Optional[StructuredQuery] = None
    result: Optional[SearchResult] = None
    error: Optional[str] = None
    history: List[Dict[str, str]] = field(default_factory=list)


def render_transcript(history: List[Dict[str, str]]) -> str:
    return "\n".join(f"{message['role']}: {message['content']}" for message in history)


class SlotFillingConversation:
    """Gates one conversation from INCOMPLETE to COMPLETE.

    Which fields are already known is tracked by the extraction collaborator
    through the full transcript. This class only appends turns, decides the
    transition, and lets the graph run the search once on completion.
    """

    def __init__(self, session: ConversationSession, graph=None):
        self.session = session
        self.graph = graph or agent

    @property
    def is_complete(self) -> bool:
        return self.session.status == ConversationStatus.COMPLETE

    def _append(self, role: str, content: str):
        self.session.conversation_history.append({"role": role, "content": content})

    def handle_turn(self, text: str) -> TurnOutcome:
        if self.is_complete:
            raise ConversationClosedError(
                f"Conversation {self.session.session_id} already completed; start a new one"
            )

        self._append("user", text)
        state = self.graph.invoke(
            AgentState(transcript=render_transcript(self.session.conversation_history))
        )

        if not state.get("is_complete") or state.get("error") == "invalid_date":
            # An unreadable departure date is for the user to correct; stay open.
            reply = state.get("response") or state.get("reply") or ""
            self._append("assistant", reply)
            return TurnOutcome(
                replies=[reply],
                status=self.session.status,
                error=state.get("error"),
                history=list(self.session.conversation_history),
            )

        self.session.status = ConversationStatus.COMPLETE
        self.session.fields = state.get("fields")
        self.session.last_result = state.get("result")
        logger.info(f"Conversation {self.session.session_id} complete, search triggered")

        replies = [TRANSITION_NOTICE]
        if state.get("response"):
            replies.append(state["response"])
        for reply in replies:
            self._append("assistant", reply)

        return TurnOutcome(
            replies=replies,
            status=self.session.status,
            fields=self.session.fields,
            result=self.session.last_result,
            error=state.get("error"),
            history=list(self.session.conversation_history),
        )
