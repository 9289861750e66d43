"""
State normalizer.
Maps carrier status labels onto the canonical milestone vocabulary.

Rule order matters: several carrier labels contain the keyword of another
milestone ("ENTREGADA SIN CUMPLIDO" contains "ENTREGADA", "BODEGA DESTINO"
contains "BODEGA"), so the more specific rule always comes first.
"""

import unicodedata
from dataclasses import dataclass
from enum import Enum
from typing import Optional
from loguru import logger

from tracker.models import TimelineEntry


class Milestone(str, Enum):
    """Canonical shipment milestones, in the order a shipment goes through them."""
    DIGITADA = "DIGITADA"
    EN_BODEGA = "EN_BODEGA"
    CARGADA_EN_VEHICULO = "CARGADA_EN_VEHICULO"
    EN_TRANSPORTE_NACIONAL = "EN_TRANSPORTE_NACIONAL"
    BODEGA_DESTINO = "BODEGA_DESTINO"
    EN_TRANSPORTE_URBANO = "EN_TRANSPORTE_URBANO"
    ENTREGADA = "ENTREGADA"
    ENTREGADA_SIN_CUMPLIDO = "ENTREGADA_SIN_CUMPLIDO"


@dataclass(frozen=True)
class StateRule:
    """Maps a label to ``milestone`` when it contains every keyword."""

    keywords: tuple[str, ...]
    milestone: Milestone

    def matches(self, label: str) -> bool:
        return all(keyword in label for keyword in self.keywords)


STATE_RULES: tuple[StateRule, ...] = (
    StateRule(("ENTREGA", "SIN CUMPLIDO"), Milestone.ENTREGADA_SIN_CUMPLIDO),
    StateRule(("ENTREGAD",), Milestone.ENTREGADA),
    StateRule(("TRANSPORTE URBANO",), Milestone.EN_TRANSPORTE_URBANO),
    StateRule(("REPARTO",), Milestone.EN_TRANSPORTE_URBANO),
    StateRule(("TRANSPORTE NACIONAL",), Milestone.EN_TRANSPORTE_NACIONAL),
    StateRule(("BODEGA DESTINO",), Milestone.BODEGA_DESTINO),
    StateRule(("CARGAD",), Milestone.CARGADA_EN_VEHICULO),
    StateRule(("BODEGA",), Milestone.EN_BODEGA),
    StateRule(("DIGITAD",), Milestone.DIGITADA),
    StateRule(("EN TRANSPORTE",), Milestone.EN_TRANSPORTE_NACIONAL),
)


def fold_accents(text: str) -> str:
    """Accent-free with underscores read as spaces, single-spaced. Case is kept."""
    decomposed = unicodedata.normalize("NFKD", text.replace("_", " "))
    stripped = "".join(ch for ch in decomposed if not unicodedata.combining(ch))
    return " ".join(stripped.split())


def canonical_form(label: str) -> str:
    """Upper-case, accent-free, underscores read as spaces, single-spaced."""
    return fold_accents(label.upper())


def normalize_label(label: str, rules: tuple[StateRule, ...] = STATE_RULES) -> Optional[Milestone]:
    """Canonical milestone for a raw label, or None if no rule applies."""
    form = canonical_form(label)
    for rule in rules:
        if rule.matches(form):
            return rule.milestone
    return None


def normalize_timeline(entries: list[TimelineEntry]) -> list[TimelineEntry]:
    """
    Canonicalize a raw timeline.

    Unmapped labels are dropped (they stay visible in the raw text). Only the
    first occurrence of each milestone is kept and the original order is
    preserved.
    """
    seen: set[Milestone] = set()
    timeline = []

    for entry in entries:
        milestone = normalize_label(entry.canonical_label or entry.raw_label)
        if milestone is None:
            logger.debug(f"Dropping unmapped status label: {entry.raw_label}")
            continue
        if milestone in seen:
            continue
        seen.add(milestone)
        timeline.append(entry.model_copy(update={"canonical_label": milestone.value}))

    return timeline


# Phrases searched in free text when no timeline was found, most specific first
FALLBACK_PHRASES: tuple[tuple[str, Milestone], ...] = (
    ("ENTREGADA SIN CUMPLIDO", Milestone.ENTREGADA_SIN_CUMPLIDO),
    ("EN TRANSPORTE NACIONAL", Milestone.EN_TRANSPORTE_NACIONAL),
    ("EN TRANSPORTE URBANO", Milestone.EN_TRANSPORTE_URBANO),
    ("CARGADA EN VEHICULO", Milestone.CARGADA_EN_VEHICULO),
    ("BODEGA DESTINO", Milestone.BODEGA_DESTINO),
    ("EN TRANSPORTE", Milestone.EN_TRANSPORTE_NACIONAL),
    ("EN BODEGA", Milestone.EN_BODEGA),
    ("ENTREGADA", Milestone.ENTREGADA),
    ("DIGITADA", Milestone.DIGITADA),
)


def find_milestone_in_text(text: str) -> Optional[Milestone]:
    """
    First known milestone name mentioned anywhere in the text.

    Carriers print milestone names in capitals; ordinary prose such as
    "cuando su pedido sea entregada" is not a status, so case is kept.
    """
    form = fold_accents(text)
    for phrase, milestone in FALLBACK_PHRASES:
        if phrase in form:
            return milestone
    return None
