"""Client activity timeline schemas."""

from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional
from uuid import UUID

from pydantic import BaseModel, Field


class TimelineEntryType(str, Enum):
    """Source of a timeline entry."""
    LEAD = "LEAD"
    QUOTATION = "QUOTATION"
    BOOKING = "BOOKING"
    PAYMENT = "PAYMENT"
    AUDIT = "AUDIT"


class TimelineEntry(BaseModel):
    """One event in a client's history."""

    type: TimelineEntryType
    date: datetime = Field(..., description="When the event happened")
    title: str
    description: Optional[str] = None
    data: Dict[str, Any] = Field(default_factory=dict, description="Identifiers and figures of the source row")


class ClientTimeline(BaseModel):
    """Newest-first timeline; ``total`` counts entries before the limit is applied."""

    client_id: UUID
    total: int
    timeline: List[TimelineEntry]
