from src.models.schemas import ClassicSearchResponse, SearchResult, StructuredQuery
from src.services.extraction_service import extraction_service
from src.services.search_service import search_service
from src.utils.logger import get_logger
from src.utils.transaction_log import DIRECT_CHANNEL, transaction_logs

logger = get_logger(__name__)


def direct_search(query: StructuredQuery) -> SearchResult:
    """Search for an already structured query and record it in the direct log."""
    result = search_service.search(query)
    transaction_logs[DIRECT_CHANNEL].record(
        result.redirect_url, result.raw_content, result.cheapest_price
    )
    return result


def classic_search(query: str) -> ClassicSearchResponse:
    """Parse one free-form query into flight details, then search."""
    parsed = extraction_service.parse_query(query)
    logger.info(
        f"Parsed query: {parsed.origin} -> {parsed.destination} on '{parsed.dates}' "
        f"for {parsed.passengers}"
    )
    return ClassicSearchResponse(result=direct_search(parsed), parsed_query=parsed)
