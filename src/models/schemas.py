from enum import Enum
from typing import Optional, Literal, Dict, List
from datetime import datetime
from pydantic import BaseModel, ConfigDict, Field, field_validator


class StructuredQuery(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True, str_strip_whitespace=True)

    origin: str = Field(min_length=1)
    destination: str = Field(min_length=1)
    dates: str = Field(min_length=1)
    passengers: int = Field(default=1, ge=1)
    flight_class: Optional[str] = Field(default=None, alias="flightClass")

    @field_validator("flight_class")
    @classmethod
    def blank_class_is_default(cls, value: Optional[str]) -> Optional[str]:
        return value or None


class BuiltSearch(BaseModel):
    """Provider URL plus the resolved date range it was built from."""

    model_config = ConfigDict(frozen=True)

    url: str
    phrase: str
    departure: str
    return_date: Optional[str] = None


class FlightLeg(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    airline: str
    airline_logo_url: str = Field(default="", alias="airlineLogoUrl")
    departure_time: str = Field(alias="departureTime")
    arrival_time: str = Field(alias="arrivalTime")
    duration: str
    stops: str
    from_code: Optional[str] = Field(default=None, alias="fromCode")
    to_code: Optional[str] = Field(default=None, alias="toCode")


class FlightEndpoint(BaseModel):
    code: str
    time: str


class Emissions(BaseModel):
    co2: float


class Flight(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str
    price: float
    provider: str
    legs: List[FlightLeg]
    origin: Optional[FlightEndpoint] = Field(default=None, alias="from")
    destination: Optional[FlightEndpoint] = Field(default=None, alias="to")
    duration: Optional[str] = None
    stops: Optional[int] = None
    emissions: Optional[Emissions] = None


class ExtractionStatus(str, Enum):
    PRICE_ONLY = "price_only"
    MISS = "miss"


class SearchResult(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    flights: List[Flight] = []
    redirect_url: str = Field(alias="redirectUrl")
    raw_content: str = Field(alias="htmlContent")
    cheapest_price: Optional[float] = Field(alias="cheapestPrice")
    extraction: ExtractionStatus


# Shapes requested from the language model. Every field is optional because
# the model output is validated afterwards, not trusted.
class FlightDetails(BaseModel):
    origin: Optional[str] = None
    destination: Optional[str] = None
    dates: Optional[str] = None
    passengers: Optional[int] = None
    flight_class: Optional[str] = None


class FlightBookingReply(BaseModel):
    reply: str = Field(description="The assistant's next reply to the user, plain text.")
    is_flight_details_complete: bool = Field(
        description="Whether origin, destination, dates and passengers are all known."
    )
    flight_details: Optional[FlightDetails] = None


class ConverseReply(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    reply: str
    is_complete: bool = Field(alias="isComplete")
    fields: Optional[StructuredQuery] = None
    missing: List[str] = []


class ConversationStatus(str, Enum):
    INCOMPLETE = "incomplete"
    COMPLETE = "complete"


class ConversationSession(BaseModel):
    session_id: str
    conversation_history: List[Dict[str, str]] = []
    status: ConversationStatus = ConversationStatus.INCOMPLETE
    fields: Optional[StructuredQuery] = None
    last_result: Optional[SearchResult] = None
    created_at: str = Field(default_factory=lambda: datetime.now().isoformat())


class TransactionEntry(BaseModel):
    url: str
    content: str
    price: Optional[float]
    timestamp: str


class QueryRequest(BaseModel):
    query: str


class ClassicSearchResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    result: SearchResult
    parsed_query: StructuredQuery = Field(alias="parsedQuery")


class ConverseRequest(BaseModel):
    transcript: str


class ChatRequest(BaseModel):
    message: str
    session_id: Optional[str] = None


class ChatResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    session_id: str
    replies: List[str]
    status: ConversationStatus
    fields: Optional[StructuredQuery] = None
    result: Optional[SearchResult] = None
    error: Optional[Literal["invalid_date", "network"]] = None
    conversation_history: List[Dict[str, str]]
