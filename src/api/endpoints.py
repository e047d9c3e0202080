from typing import List

from fastapi import APIRouter, HTTPException

from src.agents.conversation import SlotFillingConversation
from src.models.errors import (
    ConfigurationError,
    InvalidDateError,
    NetworkError,
    UnparseableQueryError,
)
from src.models.schemas import (
    ChatRequest,
    ChatResponse,
    ClassicSearchResponse,
    ConverseReply,
    ConverseRequest,
    QueryRequest,
    SearchResult,
    StructuredQuery,
    TransactionEntry,
)
from src.services.classic_search_service import classic_search, direct_search
from src.services.extraction_service import extraction_service
from src.services.session_service import session_service
from src.utils.logger import get_logger
from src.utils.transaction_log import transaction_logs
from src.utils.validators import QueryValidator

logger = get_logger(__name__)

router = APIRouter()

NETWORK_ERROR_DETAIL = "The flight search service could not be reached. Please try again later."


def search_error(e: Exception) -> HTTPException:
    """Map a pipeline failure to the HTTP error shown to the caller."""
    if isinstance(e, (InvalidDateError, UnparseableQueryError)):
        return HTTPException(status_code=400, detail=str(e))
    if isinstance(e, NetworkError):
        logger.error(f"Search fetch failed: {e}")
        return HTTPException(status_code=502, detail=NETWORK_ERROR_DETAIL)
    if isinstance(e, ConfigurationError):
        logger.error(f"Search service misconfigured: {e}")
        return HTTPException(status_code=500, detail=str(e))
    return model_error(e)


def model_error(e: Exception) -> HTTPException:
    """Translate language-model failures into user guidance by message content."""
    message = str(e)
    logger.error(f"Model call failed: {message}", exc_info=e)

    if "429" in message:
        return HTTPException(
            status_code=429,
            detail=(
                "You've exceeded the daily limit for the AI model. Please check your "
                "plan and billing details, then try again later."
            ),
        )
    if "503" in message:
        return HTTPException(
            status_code=503,
            detail="The AI model is currently overloaded. Please wait a moment and try your request again.",
        )
    return HTTPException(status_code=502, detail=f"An error occurred: {message}")


def _sanitize(message: str) -> str:
    try:
        return QueryValidator.sanitize_message(message)
    except ValueError as e:
        logger.info(f"Input validation failed: {e}")
        raise HTTPException(status_code=400, detail=str(e))


@router.post("/search", response_model=SearchResult)
def search(query: StructuredQuery):
    try:
        return direct_search(query)
    except Exception as e:
        raise search_error(e)


@router.post("/query", response_model=ClassicSearchResponse)
def query_search(req: QueryRequest):
    sanitized_query = _sanitize(req.query)
    try:
        return classic_search(sanitized_query)
    except Exception as e:
        raise search_error(e)


@router.post("/converse", response_model=ConverseReply)
def converse(req: ConverseRequest):
    if not req.transcript.strip():
        raise HTTPException(status_code=400, detail="Transcript cannot be empty")
    try:
        return extraction_service.converse(req.transcript)
    except Exception as e:
        raise model_error(e)


@router.post("/chat", response_model=ChatResponse)
def chat(req: ChatRequest):
    message = _sanitize(req.message)

    if req.session_id and not QueryValidator.validate_session_id(req.session_id):
        raise HTTPException(status_code=400, detail="Invalid session ID format")

    session = session_service.get_open_session(req.session_id)
    conversation = SlotFillingConversation(session)

    try:
        outcome = conversation.handle_turn(message)
    except Exception as e:
        raise search_error(e)

    session_service.update_session(session)

    return ChatResponse(
        session_id=session.session_id,
        replies=outcome.replies,
        status=outcome.status,
        fields=outcome.fields,
        result=outcome.result,
        error=outcome.error,
        conversation_history=outcome.history,
    )


@router.get("/session/{session_id}")
def get_session(session_id: str):
    session = session_service.get_session(session_id)
    if not session:
        raise HTTPException(status_code=404, detail="Session not found")
    return session


@router.delete("/session/{session_id}")
def clear_session(session_id: str):
    if session_service.delete_session(session_id):
        return {"message": "Session cleared"}

    raise HTTPException(status_code=404, detail="Session not found")


@router.get("/transactions/{channel}", response_model=List[TransactionEntry])
def list_transactions(channel: str):
    if channel not in transaction_logs:
        raise HTTPException(status_code=404, detail=f"Unknown transaction log: {channel}")
    return transaction_logs[channel].list()


@router.delete("/transactions/{channel}")
def clear_transactions(channel: str):
    if channel not in transaction_logs:
        raise HTTPException(status_code=404, detail=f"Unknown transaction log: {channel}")
    transaction_logs[channel].clear()
    return {"message": f"Transaction log '{channel}' cleared"}
