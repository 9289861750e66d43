"""
Data models for the Carrier Tracker.
Defines queries, fetched content, tracking records and the typed result.

Flow:
1. TrackingQuery names a carrier and a tracking number
2. The carrier adapter fetches a RawFetchResult
3. Extraction turns it into ExtractedText and then a TrackingRecord
4. The caller gets a TrackingSuccess or a TrackingFailure
"""

from enum import Enum
from typing import Any, Literal, Optional, Union
from pydantic import BaseModel, Field, field_validator


class CarrierId(str, Enum):
    """Supported carriers."""
    COPETRAN = "copetran"
    TRANSMORALAR = "transmoralar"


class ContentKind(str, Enum):
    """What the fetched bytes turned out to be."""
    PDF = "pdf"
    MARKUP = "markup"
    EMPTY = "empty"


class FailureKind(str, Enum):
    """Request-level failure kinds reported to callers."""
    TIMEOUT = "timeout"
    NETWORK = "network"
    UPSTREAM_STATUS = "upstream_status"
    NO_DATA = "no_data"
    NOT_FOUND = "not_found"
    EXTRACTION_ERROR = "extraction_error"


class TrackingQuery(BaseModel):
    """A single tracking request. Created per request, never reused."""

    carrier_id: CarrierId
    tracking_number: str

    @field_validator("tracking_number", mode="before")
    @classmethod
    def _strip_number(cls, value: Any) -> Any:
        if isinstance(value, str):
            return value.strip()
        return value

    class Config:
        frozen = True
        use_enum_values = True


class RawFetchResult(BaseModel):
    """Bytes returned by a carrier plus response metadata."""

    content: bytes = b""
    http_status: int
    url: str = ""
    content_type: str = ""  # as declared by upstream, informational only
    cookies: dict[str, str] = Field(default_factory=dict)


class ExtractedText(BaseModel):
    """Plain text recovered from a PDF report or an HTML page."""

    plain_text: str
    source_kind: ContentKind

    class Config:
        frozen = True
        use_enum_values = True


class TimelineEntry(BaseModel):
    """One status milestone as found in the carrier document."""

    raw_label: str
    canonical_label: Optional[str] = None
    timestamp: str  # carrier-native, e.g. "2024/01/10 08.00 AM"
    details: str = ""
    icon: str = ""
    description: str = ""

    # Character offset of the match in the plain text
    position: int = Field(default=-1, exclude=True)

    def to_payload(self) -> dict[str, Any]:
        return {
            "status": self.canonical_label or self.raw_label,
            "timestamp": self.timestamp,
            "details": self.details,
            "icon": self.icon,
            "description": self.description,
        }


class Sender(BaseModel):
    """Shipment sender."""
    name: str = ""
    origin: str = ""
    address: str = ""


class Receiver(BaseModel):
    """Shipment receiver."""
    name: str = ""
    destination: str = ""
    address: str = ""
    unit: str = ""


class TrackingRecord(BaseModel):
    """Canonical tracking record built from one carrier document."""

    tracking_number: str
    sender: Sender = Field(default_factory=Sender)
    receiver: Receiver = Field(default_factory=Receiver)

    # Status
    current_status: str = ""
    current_status_icon: str = ""
    current_status_description: str = ""
    last_update: str = ""

    timeline: list[TimelineEntry] = Field(default_factory=list)

    def to_payload(self) -> dict[str, Any]:
        return {
            "tracking_number": self.tracking_number,
            "sender": self.sender.model_dump(),
            "receiver": self.receiver.model_dump(),
            "current_status": self.current_status,
            "current_status_icon": self.current_status_icon,
            "current_status_description": self.current_status_description,
            "last_update": self.last_update,
            "timeline": [entry.to_payload() for entry in self.timeline],
        }


class TrackingSuccess(BaseModel):
    """Tracking lookup that produced a record."""

    ok: Literal[True] = True
    carrier_id: CarrierId
    record: TrackingRecord
    raw_text: str  # unprocessed plain text for client-side fallback rendering
    source_kind: ContentKind
    source_url: str = ""

    class Config:
        use_enum_values = True

    def to_payload(self) -> dict[str, Any]:
        payload = self.record.to_payload()
        payload.update({
            "success": True,
            "carrier_id": self.carrier_id,
            "raw_text": self.raw_text,
            "source_kind": self.source_kind,
            "source_url": self.source_url,
        })
        return payload


class TrackingFailure(BaseModel):
    """Tracking lookup that ended in a typed failure."""

    ok: Literal[False] = False
    kind: FailureKind
    message: str
    tracking_number: str
    carrier_id: CarrierId
    status_code: Optional[int] = None  # only for upstream_status

    class Config:
        use_enum_values = True

    def to_payload(self) -> dict[str, Any]:
        payload = {
            "success": False,
            "kind": self.kind,
            "message": self.message,
            "tracking_number": self.tracking_number,
            "carrier_id": self.carrier_id,
        }
        if self.status_code is not None:
            payload["status_code"] = self.status_code
        return payload


TrackingResult = Union[TrackingSuccess, TrackingFailure]
