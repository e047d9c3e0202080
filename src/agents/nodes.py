from src.models.errors import InvalidDateError, NetworkError
from src.models.state import AgentState
from src.services.extraction_service import extraction_service
from src.services.search_service import search_service
from src.utils.logger import get_logger
from src.utils.transaction_log import CONVERSATION_CHANNEL, transaction_logs

logger = get_logger(__name__)

INVALID_DATE_MESSAGE = (
    "I couldn't work out the departure date '{expression}'. "
    "Could you give it more clearly, for example '25 December' or '2026-12-25'?"
)
NETWORK_MESSAGE = (
    "I couldn't reach the flight search service just now. Please try again later."
)


def extract_node(state: AgentState):
    converse = extraction_service.converse(state.transcript)
    return {
        "reply": converse.reply,
        "is_complete": converse.is_complete,
        "fields": converse.fields,
        "missing": converse.missing,
    }


def clarify_node(state: AgentState):
    """Ask for what is missing, using the collaborator's reply verbatim."""
    if state.missing:
        logger.info(f"Still missing: {', '.join(state.missing)}")
    return {"response": state.reply}


def search_node(state: AgentState):
    if state.fields is None:
        return {"response": "Internal error: missing flight details"}

    try:
        result = search_service.search(state.fields)
    except InvalidDateError as e:
        logger.warning(f"Conversation search rejected date: {e.expression!r}")
        return {"error": "invalid_date", "response": INVALID_DATE_MESSAGE.format(expression=e.expression)}
    except NetworkError as e:
        logger.error(f"Conversation search failed: {e}")
        return {"error": "network", "response": NETWORK_MESSAGE}

    transaction_logs[CONVERSATION_CHANNEL].record(
        result.redirect_url, result.raw_content, result.cheapest_price
    )
    return {"result": result}


def synthesis_node(state: AgentState):
    result = state.result
    if result is None:
        return {}

    if result.cheapest_price is None:
        return {
            "response": (
                "I've performed the live search, but couldn't extract the flight details. "
                "This can happen with complex pages. You can check the prices manually "
                f"here: {result.redirect_url}"
            )
        }

    return {
        "response": (
            f"I found flights starting from £{result.cheapest_price:.2f}. "
            f"See all options and book here: {result.redirect_url}"
        )
    }
