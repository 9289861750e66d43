"""
Extraction pipeline.
Pure, synchronous stages from fetched bytes to a canonical tracking record.
"""

from dataclasses import dataclass
from typing import TYPE_CHECKING, Optional
from loguru import logger

from tracker.errors import ExtractionError, ExtractionStage, NoDataError, NotFoundError
from tracker.extraction.aggregator import build_record
from tracker.extraction.classifier import MIN_CONTENT_BYTES, classify_content
from tracker.extraction.fields import enrich_details, extract_parties, extract_timeline
from tracker.extraction.no_result import find_no_result_phrase
from tracker.extraction.states import normalize_timeline
from tracker.extraction.text import extract_text
from tracker.models import ContentKind, ExtractedText, TimelineEntry, TrackingRecord

if TYPE_CHECKING:
    from tracker.carriers.base import CarrierAdapter


MIN_TEXT_LENGTH = 50

NO_DATA_MESSAGE = "No se encontraron datos para esta guía"
NOT_FOUND_MESSAGE = "El transportador no tiene registros para esta guía"


@dataclass
class PipelineOutput:
    """What extraction produced for one document."""
    record: TrackingRecord
    text: ExtractedText


def extract_document(
    content: bytes,
    min_content_bytes: int = MIN_CONTENT_BYTES,
    min_text_length: int = MIN_TEXT_LENGTH,
) -> ExtractedText:
    """
    Classify and decode fetched bytes.

    Raises:
        NoDataError: payload or decoded text too short
        ExtractionError: the document could not be decoded
    """
    kind = classify_content(content, min_content_bytes)
    if kind == ContentKind.EMPTY:
        raise NoDataError(NO_DATA_MESSAGE, {"content_bytes": len(content or b"")})

    text = extract_text(content, kind)
    logger.debug(f"Extracted {len(text.plain_text)} characters from {kind.value} content")

    if len(text.plain_text) < min_text_length:
        raise NoDataError(NO_DATA_MESSAGE, {"text_length": len(text.plain_text)})
    return text


def _canonical_timeline(text: str, carrier: "CarrierAdapter") -> list[TimelineEntry]:
    try:
        raw = extract_timeline(text, carrier.brand_name)
    except Exception as e:
        raise ExtractionError(
            ExtractionStage.FIELDS,
            "Error al extraer el historial de la guía",
            {"reason": str(e)},
        ) from e

    try:
        raw = enrich_details(text, raw, carrier.brand_name)
    except Exception as e:
        logger.warning(f"Detail enrichment failed, continuing without details: {e}")

    try:
        return normalize_timeline(raw)
    except Exception as e:
        logger.warning(f"Timeline normalization failed, returning empty timeline: {e}")
        return []


def run_pipeline(
    content: bytes,
    carrier: "CarrierAdapter",
    tracking_number: str,
    min_content_bytes: int = MIN_CONTENT_BYTES,
    min_text_length: int = MIN_TEXT_LENGTH,
    text: Optional[ExtractedText] = None,
) -> PipelineOutput:
    """
    Turn carrier content into a tracking record.

    Args:
        content: Raw bytes from the carrier
        carrier: Adapter supplying brand name, no-result phrases and field layout
        tracking_number: Number the caller asked for
        text: Already extracted text, skips classification and decoding

    Raises:
        NoDataError, NotFoundError, ExtractionError
    """
    if text is None:
        text = extract_document(content, min_content_bytes, min_text_length)
    plain = text.plain_text

    phrase = find_no_result_phrase(plain, carrier.no_result_phrases)
    if phrase:
        logger.info(f"{carrier.get_carrier_name()} reports no results ('{phrase}')")
        raise NotFoundError(NOT_FOUND_MESSAGE, phrase)

    try:
        sender, receiver = extract_parties(plain, carrier.layout)
    except Exception as e:
        raise ExtractionError(
            ExtractionStage.FIELDS,
            "Error al extraer los datos de la guía",
            {"reason": str(e)},
        ) from e

    timeline = _canonical_timeline(plain, carrier)

    record = build_record(
        tracking_number=tracking_number,
        sender=sender,
        receiver=receiver,
        timeline=timeline,
        plain_text=plain,
        min_text_length=min_text_length,
    )

    logger.info(
        f"Extraction complete: status={record.current_status}, "
        f"{len(record.timeline)} timeline entries"
    )
    return PipelineOutput(record=record, text=text)
