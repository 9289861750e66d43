"""
Field and timeline extractor.
Pulls party fields and (status, timestamp) pairs out of carrier plain text.
"""

import re
from dataclasses import dataclass
from typing import Optional
from loguru import logger

from tracker.models import Receiver, Sender, TimelineEntry


UPPER = "A-ZÁÉÍÓÚÑÜ"

MIN_LABEL_LENGTH = 6

# "DIGITADA 2024/01/10 08.00 AM"; the label stays on one line, the
# timestamp may follow on the next one.
TIMELINE_PATTERN = re.compile(
    rf"([{UPPER}][{UPPER} \t]{{{MIN_LABEL_LENGTH - 1},}})"
    r"\s*"
    r"(\d{4}/\d{2}/\d{2}\s+\d{2}\.\d{2}\s+(?:AM|PM))"
)

DETAIL_LINE_PATTERN = re.compile(rf"^[{UPPER} ]{{10,}}$")
PLATE_PATTERN = re.compile(r"\b([A-Z]{3}\d{3})\b")

# Lines after a timeline entry that may describe it
DETAIL_WINDOW = 3


@dataclass(frozen=True)
class FieldLayout:
    """
    Label regexes for the single-value fields of a carrier document.

    ``name`` and ``address`` appear once per party. The first match belongs
    to the sender and the second to the receiver, which is how the
    Transmoralar report prints them; other layouts must not assume it.
    """

    origin: str = "Origen"
    destination: str = "Destino"
    unit: str = "Unidad"
    name: str = "Nombre"
    address: str = "Direcci[oó]n"


def _label_pattern(label: str) -> re.Pattern:
    # Labels open their line; "BODEGA DESTINO 2024/..." is not a Destino field.
    return re.compile(rf"^[ \t]*{label}\b[ \t]*:?\s*([^\n]+)", re.IGNORECASE | re.MULTILINE)


def find_field(text: str, label: str) -> str:
    """First value following ``label`` on its line, or an empty string."""
    match = _label_pattern(label).search(text)
    return match.group(1).strip() if match else ""


def find_all_fields(text: str, label: str) -> list[str]:
    """Every value following ``label``, in document order."""
    return [m.group(1).strip() for m in _label_pattern(label).finditer(text)]


def _nth(values: list[str], index: int) -> str:
    return values[index] if len(values) > index else ""


def extract_parties(text: str, layout: FieldLayout) -> tuple[Sender, Receiver]:
    """Extract sender and receiver blocks."""
    names = find_all_fields(text, layout.name)
    addresses = find_all_fields(text, layout.address)

    sender = Sender(
        name=_nth(names, 0),
        origin=find_field(text, layout.origin),
        address=_nth(addresses, 0),
    )
    receiver = Receiver(
        name=_nth(names, 1),
        destination=find_field(text, layout.destination),
        address=_nth(addresses, 1),
        unit=find_field(text, layout.unit),
    )

    logger.debug(
        f"Parties: sender={sender.name!r} origin={sender.origin!r} "
        f"receiver={receiver.name!r} destination={receiver.destination!r}"
    )
    return sender, receiver


def extract_timeline(text: str, brand_name: str = "") -> list[TimelineEntry]:
    """
    Find every (status label, timestamp) pair in order of appearance.

    Labels shorter than MIN_LABEL_LENGTH and labels carrying the carrier's
    own brand (footers, watermarks) are discarded.
    """
    entries = []
    brand = brand_name.upper()

    for match in TIMELINE_PATTERN.finditer(text):
        label = " ".join(match.group(1).split())
        timestamp = " ".join(match.group(2).split())

        if len(label) < MIN_LABEL_LENGTH:
            continue
        if brand and brand in label:
            logger.debug(f"Skipping brand text in timeline: {label}")
            continue

        entries.append(TimelineEntry(
            raw_label=label,
            timestamp=timestamp,
            position=match.start(1),
        ))

    logger.debug(f"Timeline candidates: {len(entries)}")
    return entries


def _line_index(line_starts: list[int], position: int) -> int:
    index = 0
    for i, start in enumerate(line_starts):
        if start > position:
            break
        index = i
    return index


def _details_from_lines(lines: list[str], brand: str) -> str:
    details = ""
    plates: list[str] = []

    for line in lines:
        if not details and DETAIL_LINE_PATTERN.match(line) and "ESTADO" not in line:
            if not (brand and brand in line):
                details = line
        for plate in PLATE_PATTERN.findall(line):
            if plate not in plates:
                plates.append(plate)

    for plate in plates:
        if details:
            details += f" - {plate}"
        else:
            details = f"Vehículo: {plate}"
    return details


def enrich_details(
    text: str,
    entries: list[TimelineEntry],
    brand_name: str = "",
    window: Optional[int] = None,
) -> list[TimelineEntry]:
    """
    Attach nearby free text (people, warehouses, vehicle plates) to entries.

    Best effort only: looks at the few lines that follow each entry, up to
    the next entry. Entries without a usable neighbourhood are returned
    unchanged.
    """
    if not entries:
        return entries

    window = window or DETAIL_WINDOW
    brand = brand_name.upper()

    raw_lines = text.split("\n")
    line_starts = []
    offset = 0
    for line in raw_lines:
        line_starts.append(offset)
        offset += len(line) + 1

    entry_lines = [_line_index(line_starts, entry.position) for entry in entries]

    enriched = []
    for i, entry in enumerate(entries):
        if entry.position < 0:
            enriched.append(entry)
            continue

        first = entry_lines[i] + 1
        last = min(first + window, len(raw_lines))
        if i + 1 < len(entries):
            last = min(last, entry_lines[i + 1])

        block = [line.strip() for line in raw_lines[first:last] if line.strip()]
        details = _details_from_lines(block, brand)

        if details and not entry.details:
            entry = entry.model_copy(update={"details": details})
        enriched.append(entry)

    return enriched
