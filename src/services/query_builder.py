from typing import List, Optional
from urllib.parse import quote_plus, urlencode

from src.config.settings import (
    DEFAULT_FLIGHT_CLASS,
    FLIGHTS_SEARCH_URL,
    PROVIDER_LOCALE_PARAMS,
)
from src.models.errors import InvalidDateError
from src.models.schemas import BuiltSearch, StructuredQuery
from src.services.date_resolver import DateResolver, date_resolver
from src.utils.logger import get_logger

logger = get_logger(__name__)

DATE_RANGE_SEPARATOR = " to "
# Characters left unescaped in the query phrase, matching browser URI encoding.
QUERY_SAFE_CHARS = "!~*'()"


def split_date_range(dates: str) -> List[str]:
    """Split a raw dates field into departure and optional return expressions."""
    return [part.strip() for part in dates.split(DATE_RANGE_SEPARATOR)[:2]]


def passenger_phrase(passengers: int) -> str:
    return f"{passengers} adult" if passengers == 1 else f"{passengers} adults"


class QueryBuilder:
    def __init__(
        self,
        resolver: Optional[DateResolver] = None,
        base_url: str = FLIGHTS_SEARCH_URL,
        locale_params: Optional[dict] = None,
    ):
        self.resolver = resolver or date_resolver
        self.base_url = base_url
        self.locale_params = locale_params or PROVIDER_LOCALE_PARAMS

    def compose_phrase(
        self, query: StructuredQuery, departure: str, return_date: Optional[str]
    ) -> str:
        parts = ["Flights", "to", query.destination, "from", query.origin, "on", departure]
        if return_date:
            parts += ["through", return_date]

        if query.flight_class and query.flight_class.lower() != DEFAULT_FLIGHT_CLASS:
            parts.append(query.flight_class.lower())

        parts.append(passenger_phrase(query.passengers))
        return " ".join(parts)

    def build_url(self, phrase: str) -> str:
        params = {"q": phrase, **self.locale_params}
        return f"{self.base_url}?{urlencode(params, safe=QUERY_SAFE_CHARS, quote_via=quote_plus)}"

    def build(self, query: StructuredQuery) -> BuiltSearch:
        date_parts = split_date_range(query.dates)

        departure = self.resolver.resolve(date_parts[0])
        if not departure:
            raise InvalidDateError(date_parts[0])

        return_date = None
        if len(date_parts) > 1:
            return_date = self.resolver.resolve(date_parts[1])
            if not return_date:
                logger.warning(
                    f"Return date '{date_parts[1]}' could not be resolved, searching one-way"
                )

        phrase = self.compose_phrase(query, departure, return_date)
        url = self.build_url(phrase)
        logger.info(f"Built search URL for '{phrase}'")

        return BuiltSearch(url=url, phrase=phrase, departure=departure, return_date=return_date)


# Global instance
query_builder = QueryBuilder()
