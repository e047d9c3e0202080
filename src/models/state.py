from typing import Optional, List
from pydantic import BaseModel

from src.models.schemas import SearchResult, StructuredQuery


class AgentState(BaseModel):
    transcript: str
    reply: Optional[str] = None
    is_complete: bool = False
    fields: Optional[StructuredQuery] = None
    missing: List[str] = []
    result: Optional[SearchResult] = None
    error: Optional[str] = None
    response: Optional[str] = None
