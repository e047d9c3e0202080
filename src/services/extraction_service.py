"""
Language-model collaborator for flight detail extraction.

The model is asked for structured output, but what comes back is treated as
untrusted: required fields must be present and non-empty, and passenger
counts must really be positive integers, before anything reaches the search
pipeline.
"""

from datetime import date
from typing import Any, Dict, List, Optional, Tuple

from langchain_ollama import ChatOllama
from pydantic import BaseModel

from src.config.settings import (
    DEFAULT_DATES,
    DEFAULT_ORIGIN,
    DEFAULT_PASSENGERS,
    OLLAMA_BASE_URL,
    OLLAMA_MODEL,
    OLLAMA_TEMPERATURE,
)
from src.models.errors import UnparseableQueryError
from src.models.schemas import (
    ConverseReply,
    FlightBookingReply,
    FlightDetails,
    StructuredQuery,
)
from src.utils.logger import get_logger

logger = get_logger(__name__)

REQUIRED_FIELDS = {
    "origin": "departure city",
    "destination": "destination city",
    "dates": "travel dates",
    "passengers": "number of passengers",
}

CONVERSATION_PROMPT = """You are an expert travel agent. Have a concise conversation with the user to gather what is needed to find a flight.
You MUST determine the **origin**, **destination**, **dates** and **number of passengers**.
Your replies must be plain text without any markdown.

- If any required detail is missing, ask for it in a friendly, direct way. Never ask again for a detail the user already gave.
- Once origin, destination, dates and passengers are all known, set is_flight_details_complete to true and fill flight_details. Do not ask for confirmation.
- Keep the user's own wording for dates (e.g. "next week", "25th December"). For a return trip write "<departure> to <return>".
- flight_class is optional (economy, premium economy, business, first).

Today's date: {today}

Conversation history:
{transcript}

Assistant's next reply:
"""

QUERY_PROMPT = """You are an expert flight search assistant. Extract the flight details from the user's query: origin, destination, dates, passengers and optionally flight_class.
- If the query gives only partial information, infer the rest: origin "{default_origin}", dates "{default_dates}", passengers {default_passengers}.
- Keep the user's own wording for dates. For a return trip write "<departure> to <return>".

Today's date: {today}

User query: {query}
"""


def _as_dict(raw: Any) -> Dict[str, Any]:
    if isinstance(raw, BaseModel):
        return raw.model_dump()
    if isinstance(raw, dict):
        return raw
    return {}


def _text(value: Any) -> Optional[str]:
    if isinstance(value, str) and value.strip():
        return value.strip()
    return None


def coerce_passengers(value: Any) -> Optional[int]:
    """Positive integer passenger count, or None if the value is not one."""
    if isinstance(value, bool):
        return None
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    if isinstance(value, str) and value.strip().isdigit():
        value = int(value.strip())
    if isinstance(value, int) and value >= 1:
        return value
    return None


def validate_flight_details(raw: Any) -> Tuple[Optional[StructuredQuery], List[str]]:
    """Check collaborator output; returns the query or the list of missing fields."""
    details = _as_dict(raw)
    values = {
        "origin": _text(details.get("origin")),
        "destination": _text(details.get("destination")),
        "dates": _text(details.get("dates")),
        "passengers": coerce_passengers(details.get("passengers")),
    }

    missing = [label for key, label in REQUIRED_FIELDS.items() if values[key] is None]

    if (
        values["origin"]
        and values["destination"]
        and values["origin"].casefold() == values["destination"].casefold()
    ):
        missing.append("destination city (cannot be the same as departure)")

    if missing:
        return None, missing

    flight_class = _text(details.get("flight_class") or details.get("flightClass"))
    return StructuredQuery(flight_class=flight_class, **values), []


def clarification_message(missing: List[str]) -> str:
    if len(missing) == 1:
        needed = missing[0]
    else:
        needed = ", ".join(missing[:-1]) + f" and {missing[-1]}"
    return f"I just need a few more details to find your flight. Could you tell me the {needed}?"


class ExtractionService:
    def __init__(self, llm=None):
        self._llm = llm

    @property
    def llm(self):
        if self._llm is None:
            self._llm = ChatOllama(
                model=OLLAMA_MODEL,
                base_url=OLLAMA_BASE_URL,
                temperature=OLLAMA_TEMPERATURE,
            )
        return self._llm

    def _invoke(self, schema, prompt: str) -> Dict[str, Any]:
        structured = self.llm.with_structured_output(schema)
        return _as_dict(structured.invoke(prompt))

    def converse(self, transcript: str) -> ConverseReply:
        """Given the transcript so far, return a clarifying reply or the completed fields."""
        data = self._invoke(
            FlightBookingReply,
            CONVERSATION_PROMPT.format(today=date.today().isoformat(), transcript=transcript),
        )
        reply = _text(data.get("reply"))
        fields, missing = validate_flight_details(data.get("flight_details"))

        if data.get("is_flight_details_complete") is not True:
            return ConverseReply(
                reply=reply or clarification_message(missing or list(REQUIRED_FIELDS.values())),
                is_complete=False,
                missing=missing,
            )

        if fields is None:
            logger.warning(f"Model reported complete details but is missing: {', '.join(missing)}")
            return ConverseReply(
                reply=clarification_message(missing), is_complete=False, missing=missing
            )

        logger.info(f"Flight details complete: {fields.origin} -> {fields.destination}")
        return ConverseReply(reply=reply or "", is_complete=True, fields=fields)

    def parse_query(self, query: str) -> StructuredQuery:
        """Parse one free-form query, inferring origin, dates and passengers if absent."""
        data = self._invoke(
            FlightDetails,
            QUERY_PROMPT.format(
                today=date.today().isoformat(),
                query=query,
                default_origin=DEFAULT_ORIGIN,
                default_dates=DEFAULT_DATES,
                default_passengers=DEFAULT_PASSENGERS,
            ),
        )

        details = {
            **data,
            "origin": _text(data.get("origin")) or DEFAULT_ORIGIN,
            "dates": _text(data.get("dates")) or DEFAULT_DATES,
            "passengers": data.get("passengers") or DEFAULT_PASSENGERS,
        }
        fields, missing = validate_flight_details(details)
        if fields is None:
            raise UnparseableQueryError(
                f"Could not parse flight details from your query (missing {', '.join(missing)})."
            )
        return fields


# Global instance
extraction_service = ExtractionService()
