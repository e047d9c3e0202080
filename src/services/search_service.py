from typing import Callable, Optional

from src.config.settings import PROVIDER_NAME
from src.models.errors import InvalidDateError
from src.models.schemas import (
    ExtractionStatus,
    Flight,
    FlightLeg,
    SearchResult,
    StructuredQuery,
)
from src.services.content_converter import to_text
from src.services.price_extractor import extract_cheapest
from src.services.proxy_fetcher import ProxyFetcher, get_proxy_fetcher
from src.services.query_builder import QueryBuilder, query_builder
from src.utils.logger import get_logger

logger = get_logger(__name__)


def price_only_flight(price: float) -> Flight:
    """Synthetic flight carrying the extracted price; no itinerary is known."""
    return Flight(
        id="flight-0",
        price=price,
        provider=PROVIDER_NAME,
        legs=[
            FlightLeg(
                airline="Various",
                departure_time="N/A",
                arrival_time="N/A",
                duration="N/A",
                stops="N/A",
            )
        ],
    )


class FlightSearchService:
    """Runs one search: build URL, fetch, convert, extract, assemble.

    InvalidDateError, ConfigurationError and NetworkError propagate to the
    caller. A page without a price is a soft failure reported in the result.
    """

    def __init__(
        self,
        builder: Optional[QueryBuilder] = None,
        fetcher: Optional[ProxyFetcher] = None,
        converter: Callable[[str], str] = to_text,
        extractor: Callable[[str], Optional[float]] = extract_cheapest,
    ):
        self.builder = builder or query_builder
        self._fetcher = fetcher
        self.converter = converter
        self.extractor = extractor

    @property
    def fetcher(self) -> ProxyFetcher:
        # Resolved lazily so missing proxy credentials fail at first search.
        return self._fetcher or get_proxy_fetcher()

    def search(self, query: StructuredQuery) -> SearchResult:
        built = self.builder.build(query)
        markup = self.fetcher.fetch(built.url)
        content = self.converter(markup)
        cheapest_price = self.extractor(content)

        if cheapest_price is None:
            logger.warning(f"No price found on provider page for '{built.phrase}'")
            return SearchResult(
                flights=[],
                redirect_url=built.url,
                raw_content=content,
                cheapest_price=None,
                extraction=ExtractionStatus.MISS,
            )

        logger.info(f"Cheapest price £{cheapest_price} for '{built.phrase}'")
        return SearchResult(
            flights=[price_only_flight(cheapest_price)],
            redirect_url=built.url,
            raw_content=content,
            cheapest_price=cheapest_price,
            extraction=ExtractionStatus.PRICE_ONLY,
        )


# Global instance
search_service = FlightSearchService()


def search_flights(
    origin: str,
    destination: str,
    dates: str,
    passengers: int = 1,
    flight_class: Optional[str] = None,
) -> SearchResult:
    if not dates or not dates.strip():
        raise InvalidDateError(dates)

    query = StructuredQuery(
        origin=origin,
        destination=destination,
        dates=dates,
        passengers=passengers,
        flight_class=flight_class,
    )
    return search_service.search(query)
