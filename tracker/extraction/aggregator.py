"""
Result aggregator.
Builds the final tracking record: current status fallbacks, icons and descriptions.
"""

from loguru import logger

from tracker.extraction.states import Milestone, find_milestone_in_text
from tracker.models import Receiver, Sender, TimelineEntry, TrackingRecord


# Query succeeded but the document names no recognizable status
STATUS_UNSPECIFIED = "CONSULTADO"

DEFAULT_ICON = "📦"

MILESTONE_DISPLAY: dict[str, tuple[str, str]] = {
    Milestone.DIGITADA.value: ("📝", "Guía registrada en el sistema del transportador"),
    Milestone.EN_BODEGA.value: ("🏭", "Mercancía recibida en bodega de origen"),
    Milestone.CARGADA_EN_VEHICULO.value: ("📥", "Mercancía cargada en el vehículo"),
    Milestone.EN_TRANSPORTE_NACIONAL.value: ("🚛", "En tránsito hacia la ciudad de destino"),
    Milestone.BODEGA_DESTINO.value: ("🏢", "Mercancía en bodega de la ciudad de destino"),
    Milestone.EN_TRANSPORTE_URBANO.value: ("🚚", "En reparto hacia la dirección de entrega"),
    Milestone.ENTREGADA.value: ("✅", "Mercancía entregada al destinatario"),
    Milestone.ENTREGADA_SIN_CUMPLIDO.value: ("📋", "Entregada, pendiente el soporte de entrega (cumplido)"),
}


def describe_status(status: str) -> tuple[str, str]:
    """Icon and human-readable description for a status label."""
    return MILESTONE_DISPLAY.get(status, (DEFAULT_ICON, status))


def decorate_timeline(timeline: list[TimelineEntry]) -> list[TimelineEntry]:
    decorated = []
    for entry in timeline:
        icon, description = describe_status(entry.canonical_label or entry.raw_label)
        decorated.append(entry.model_copy(update={"icon": icon, "description": description}))
    return decorated


def resolve_current_status(timeline: list[TimelineEntry], plain_text: str, min_text_length: int) -> str:
    """
    Current status, in order of preference:

    1. canonical label of the last timeline entry
    2. first milestone phrase found anywhere in the text
    3. STATUS_UNSPECIFIED when the text is long enough to be a real answer
    """
    if timeline:
        return timeline[-1].canonical_label or timeline[-1].raw_label

    milestone = find_milestone_in_text(plain_text)
    if milestone is not None:
        logger.debug(f"Status found by text search: {milestone.value}")
        return milestone.value

    if len(plain_text) >= min_text_length:
        return STATUS_UNSPECIFIED
    return ""


def build_record(
    tracking_number: str,
    sender: Sender,
    receiver: Receiver,
    timeline: list[TimelineEntry],
    plain_text: str,
    min_text_length: int,
) -> TrackingRecord:
    """Assemble the canonical record from extracted parts."""
    timeline = decorate_timeline(timeline)
    status = resolve_current_status(timeline, plain_text, min_text_length)
    icon, description = describe_status(status)

    return TrackingRecord(
        tracking_number=tracking_number,
        sender=sender,
        receiver=receiver,
        current_status=status,
        current_status_icon=icon,
        current_status_description=description,
        last_update=timeline[-1].timestamp if timeline else "",
        timeline=timeline,
    )
