"""
Exceptions raised inside the tracking pipeline.
The tracking service turns them into TrackingFailure results.
"""

from enum import Enum
from typing import Any, Optional


class TransportErrorKind(str, Enum):
    """Why a carrier fetch did not produce content."""
    TIMEOUT = "timeout"
    NETWORK = "network"
    UPSTREAM_STATUS = "upstream_status"


class ExtractionStage(str, Enum):
    """Pipeline stage that failed while extracting."""
    PDF_DECODE = "pdf_decode"
    MARKUP_DECODE = "markup_decode"
    FIELDS = "fields"


class TrackerError(Exception):
    """Base exception for all tracker errors."""

    def __init__(self, message: str, details: Optional[dict[str, Any]] = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} | Details: {self.details}"
        return self.message


class TransportError(TrackerError):
    """The carrier could not be reached or answered with an unusable status."""

    def __init__(
        self,
        kind: TransportErrorKind,
        message: str,
        status_code: Optional[int] = None,
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        super().__init__(message, details)
        self.kind = kind
        self.status_code = status_code

    @classmethod
    def timeout(cls, carrier: str, seconds: float) -> "TransportError":
        return cls(
            TransportErrorKind.TIMEOUT,
            f"Tiempo de espera agotado al consultar {carrier}",
            details={"timeout_seconds": seconds},
        )

    @classmethod
    def network(cls, carrier: str, reason: str) -> "TransportError":
        return cls(
            TransportErrorKind.NETWORK,
            f"Error de conexión con {carrier}",
            details={"reason": reason},
        )

    @classmethod
    def upstream_status(cls, carrier: str, status_code: int) -> "TransportError":
        return cls(
            TransportErrorKind.UPSTREAM_STATUS,
            f"Error del servidor de {carrier}: {status_code}",
            status_code=status_code,
        )


class NoDataError(TrackerError):
    """Payload empty or too short to hold tracking data."""

    pass


class NotFoundError(TrackerError):
    """The carrier explicitly says the tracking number does not exist."""

    def __init__(self, message: str, phrase: str) -> None:
        super().__init__(message, {"phrase": phrase})
        self.phrase = phrase


class ExtractionError(TrackerError):
    """Text could not be decoded or structured extraction blew up."""

    def __init__(self, stage: ExtractionStage, message: str, details: Optional[dict[str, Any]] = None) -> None:
        super().__init__(message, details)
        self.stage = stage


class UnknownCarrierError(TrackerError):
    """Carrier id is not one of the supported carriers."""

    def __init__(self, carrier_id: str, available: list[str]) -> None:
        super().__init__(
            f"Transportadora no soportada: {carrier_id}",
            {"available": available},
        )
        self.carrier_id = carrier_id
        self.available = available
