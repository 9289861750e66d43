"""Tests for the state normalizer."""

import pytest

from tracker.extraction.states import (
    STATE_RULES,
    Milestone,
    StateRule,
    canonical_form,
    find_milestone_in_text,
    normalize_label,
    normalize_timeline,
)
from tracker.models import TimelineEntry


def entry(label: str, timestamp: str = "2024/01/10 08.00 AM") -> TimelineEntry:
    return TimelineEntry(raw_label=label, timestamp=timestamp)


class TestNormalizeLabel:
    """Tests for normalize_label."""

    @pytest.mark.parametrize("label,expected", [
        ("DIGITADA", Milestone.DIGITADA),
        ("EN BODEGA", Milestone.EN_BODEGA),
        ("CARGADA EN VEHICULO", Milestone.CARGADA_EN_VEHICULO),
        ("CARGADA EN VEHÍCULO", Milestone.CARGADA_EN_VEHICULO),
        ("EN TRANSPORTE NACIONAL", Milestone.EN_TRANSPORTE_NACIONAL),
        ("BODEGA DESTINO", Milestone.BODEGA_DESTINO),
        ("EN BODEGA DESTINO", Milestone.BODEGA_DESTINO),
        ("EN TRANSPORTE URBANO", Milestone.EN_TRANSPORTE_URBANO),
        ("EN REPARTO", Milestone.EN_TRANSPORTE_URBANO),
        ("ENTREGADA", Milestone.ENTREGADA),
        ("ENTREGADA SIN CUMPLIDO", Milestone.ENTREGADA_SIN_CUMPLIDO),
        ("EN TRANSPORTE", Milestone.EN_TRANSPORTE_NACIONAL),
        ("entregada", Milestone.ENTREGADA),
    ])
    def test_known_labels(self, label, expected):
        assert normalize_label(label) == expected

    def test_unknown_label(self):
        assert normalize_label("ANULADA POR CLIENTE") is None

    @pytest.mark.parametrize("label", [
        "ENTREGADA SIN CUMPLIDO",
        "SIN CUMPLIDO ENTREGADA",
        "REMESA ENTREGADA   SIN CUMPLIDO",
        "ENTREGADA_SIN_CUMPLIDO",
    ])
    def test_without_proof_beats_delivered(self, label):
        assert normalize_label(label) == Milestone.ENTREGADA_SIN_CUMPLIDO

    def test_rule_order_is_load_bearing(self):
        """Evaluated in the wrong order the superset label collapses to ENTREGADA."""
        reversed_rules = tuple(reversed(STATE_RULES))
        assert normalize_label("ENTREGADA SIN CUMPLIDO", reversed_rules) != Milestone.ENTREGADA_SIN_CUMPLIDO
        assert normalize_label("ENTREGADA SIN CUMPLIDO") == Milestone.ENTREGADA_SIN_CUMPLIDO

    def test_specific_rules_come_first(self):
        index = {rule: i for i, rule in enumerate(STATE_RULES)}
        without_proof = StateRule(("ENTREGA", "SIN CUMPLIDO"), Milestone.ENTREGADA_SIN_CUMPLIDO)
        delivered = StateRule(("ENTREGAD",), Milestone.ENTREGADA)
        destination = StateRule(("BODEGA DESTINO",), Milestone.BODEGA_DESTINO)
        warehouse = StateRule(("BODEGA",), Milestone.EN_BODEGA)

        assert index[without_proof] < index[delivered]
        assert index[destination] < index[warehouse]

    def test_every_milestone_is_reachable(self):
        assert {rule.milestone for rule in STATE_RULES} == set(Milestone)

    def test_canonical_form(self):
        assert canonical_form("  en_bodega  destíno ") == "EN BODEGA DESTINO"


class TestNormalizeTimeline:
    """Tests for normalize_timeline."""

    def test_distinct_labels_keep_order(self):
        labels = [
            "DIGITADA",
            "EN BODEGA",
            "CARGADA EN VEHICULO",
            "EN TRANSPORTE NACIONAL",
            "BODEGA DESTINO",
            "EN TRANSPORTE URBANO",
            "ENTREGADA",
        ]
        raw = [entry(label, f"2024/01/{10 + i:02d} 08.00 AM") for i, label in enumerate(labels)]

        timeline = normalize_timeline(raw)

        assert len(timeline) == len(labels)
        assert [e.timestamp for e in timeline] == [e.timestamp for e in raw]
        assert [e.canonical_label for e in timeline] == [
            "DIGITADA",
            "EN_BODEGA",
            "CARGADA_EN_VEHICULO",
            "EN_TRANSPORTE_NACIONAL",
            "BODEGA_DESTINO",
            "EN_TRANSPORTE_URBANO",
            "ENTREGADA",
        ]

    def test_duplicates_keep_first(self):
        raw = [
            entry("EN BODEGA", "2024/01/10 08.00 AM"),
            entry("EN TRANSPORTE NACIONAL", "2024/01/11 08.00 AM"),
            entry("EN BODEGA", "2024/01/12 08.00 AM"),
        ]

        timeline = normalize_timeline(raw)

        assert [e.canonical_label for e in timeline] == ["EN_BODEGA", "EN_TRANSPORTE_NACIONAL"]
        assert timeline[0].timestamp == "2024/01/10 08.00 AM"

    def test_unmapped_labels_dropped(self):
        raw = [entry("DIGITADA"), entry("ANULADA POR CLIENTE"), entry("ENTREGADA")]
        timeline = normalize_timeline(raw)

        assert [e.canonical_label for e in timeline] == ["DIGITADA", "ENTREGADA"]
        assert timeline[1].raw_label == "ENTREGADA"

    def test_idempotent(self):
        raw = [
            entry("DIGITADA"),
            entry("BODEGA DESTINO"),
            entry("ENTREGADA SIN CUMPLIDO"),
            entry("EN TRANSPORTE URBANO"),
        ]

        once = normalize_timeline(raw)
        twice = normalize_timeline(once)

        assert [e.canonical_label for e in twice] == [e.canonical_label for e in once]
        assert twice == once

    def test_canonical_labels_map_to_themselves(self):
        for milestone in Milestone:
            assert normalize_label(milestone.value) == milestone

    def test_input_entries_not_mutated(self):
        raw = [entry("DIGITADA")]
        normalize_timeline(raw)
        assert raw[0].canonical_label is None


class TestFindMilestoneInText:
    """Tests for the free-text status fallback."""

    def test_specific_phrase_first(self):
        text = "Estado actual: ENTREGADA SIN CUMPLIDO por el cliente"
        assert find_milestone_in_text(text) == Milestone.ENTREGADA_SIN_CUMPLIDO

    def test_plain_phrase(self):
        assert find_milestone_in_text("La remesa se encuentra EN BODEGA") == Milestone.EN_BODEGA

    def test_nothing_known(self):
        assert find_milestone_in_text("Consulta realizada correctamente") is None

    @pytest.mark.parametrize("text", [
        "Cuando su pedido sea entregada recibira un correo",
        "La mercancia queda en bodega hasta el despacho",
        "Su remesa fue digitada y esta en transporte",
    ])
    def test_lowercase_prose_is_not_a_status(self, text):
        assert find_milestone_in_text(text) is None

    def test_accents_and_underscores_folded(self):
        assert find_milestone_in_text("Estado: CARGADA EN VEHÍCULO") == Milestone.CARGADA_EN_VEHICULO
        assert find_milestone_in_text("estado=BODEGA_DESTINO") == Milestone.BODEGA_DESTINO
