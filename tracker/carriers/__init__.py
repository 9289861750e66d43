"""
Carrier adapters.
One self-contained scraper per carrier, selected by carrier id.
"""

from typing import Union

from tracker.carriers.base import CarrierAdapter, new_session
from tracker.carriers.copetran import CopetranCarrier
from tracker.carriers.transmoralar import TransmoralarCarrier
from tracker.config import TrackerConfig
from tracker.errors import UnknownCarrierError
from tracker.models import CarrierId


CARRIERS: dict[CarrierId, type[CarrierAdapter]] = {
    CarrierId.COPETRAN: CopetranCarrier,
    CarrierId.TRANSMORALAR: TransmoralarCarrier,
}


def resolve_carrier_id(carrier_id: Union[CarrierId, str]) -> CarrierId:
    """Accept a CarrierId or its (case-insensitive) string value."""
    if isinstance(carrier_id, CarrierId):
        return carrier_id
    try:
        return CarrierId(str(carrier_id).strip().lower())
    except ValueError:
        raise UnknownCarrierError(str(carrier_id), [c.value for c in CarrierId]) from None


def get_carrier(carrier_id: Union[CarrierId, str], config: TrackerConfig) -> CarrierAdapter:
    """Build the adapter for a carrier."""
    return CARRIERS[resolve_carrier_id(carrier_id)](config)


__all__ = [
    "CARRIERS",
    "CarrierAdapter",
    "CopetranCarrier",
    "TransmoralarCarrier",
    "get_carrier",
    "new_session",
    "resolve_carrier_id",
]
