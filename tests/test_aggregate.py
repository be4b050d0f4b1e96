"""
tests/test_aggregate.py
=======================

Unit tests for fleetwatch.aggregate
"""

from datetime import date, timedelta

from fleetwatch.aggregate import (
    Granularity,
    aggregate,
    by_key,
    count_by,
    groups_with,
    tally,
)
from fleetwatch.classifier import classify_all
from fleetwatch.models import DOCUMENTS, MAINTENANCE, FieldSpec

TODAY = date(2024, 5, 1)
MOT = FieldSpec.single("mot", required=True, warn_within_days=30)
INSURANCE = FieldSpec.single("insurance", warn_within_days=30)
SERVICE = FieldSpec.tiered("next_service_date", 7, 30)


def _in(days):
    return TODAY + timedelta(days=days)


def _fleet():
    return [
        {"id": 1, "partner_id": "p1", "mot": _in(-5), "insurance": _in(100)},
        {"id": 2, "partner_id": "p1", "mot": _in(10)},
        {"id": 3, "partner_id": "p2", "mot": None, "insurance": _in(3)},
    ]


def test_three_vehicle_scenario_totals():
    vehicles = [{"id": 1, "mot": _in(-5)}, {"id": 2, "mot": _in(10)}, {"id": 3, "mot": None}]
    summary = aggregate(vehicles, [MOT], TODAY)
    assert summary.total == {"expired": 1, "missing": 1, "expiring": 1, "valid": 0}


def test_field_granularity_counts_every_field():
    summary = aggregate(_fleet(), [MOT, INSURANCE], TODAY)
    assert sum(summary.total.values()) == 3 * 2
    assert summary.total == {"expired": 1, "missing": 1, "expiring": 2, "valid": 2}


def test_entity_granularity_counts_overall_once():
    summary = aggregate(_fleet(), [MOT, INSURANCE], TODAY, granularity=Granularity.ENTITY)
    assert summary.total == {"expired": 1, "missing": 1, "expiring": 1, "valid": 0}
    assert summary.entities == 3


def test_entity_granularity_sets_aside_untracked_entities():
    vehicles = [{"next_service_date": _in(3)}, {"next_service_date": None}, {}]
    summary = aggregate(vehicles, [SERVICE], TODAY, scheme=MAINTENANCE, granularity=Granularity.ENTITY)
    assert summary.total["urgent"] == 1
    assert summary.untracked == 2
    assert sum(summary.total.values()) + summary.untracked == len(vehicles)


def test_group_counts_partition_the_total():
    summary = aggregate(_fleet(), [MOT, INSURANCE], TODAY, by_key("partner_id"))
    assert set(summary.by_group) == {"p1", "p2"}
    assert summary.by_group["p1"] == {"expired": 1, "missing": 0, "expiring": 1, "valid": 2}
    assert summary.by_group["p2"] == {"expired": 0, "missing": 1, "expiring": 1, "valid": 0}
    for label in DOCUMENTS.precedence:
        assert sum(c[label] for c in summary.by_group.values()) == summary.total[label]


def test_entity_without_group_key_counts_only_in_total():
    vehicles = [{"mot": _in(-1), "partner_id": ""}, {"mot": _in(-1), "partner_id": "p1"}]
    summary = aggregate(vehicles, [MOT], TODAY, by_key("partner_id"))
    assert summary.total["expired"] == 2
    assert summary.by_group == {"p1": {"expired": 1, "missing": 0, "expiring": 0, "valid": 0}}


def test_empty_collection_gives_zeroed_counts():
    summary = aggregate([], [MOT], TODAY, by_key("partner_id"))
    assert summary.total == {"expired": 0, "missing": 0, "expiring": 0, "valid": 0}
    assert summary.by_group == {}
    assert summary.entities == 0


def test_aggregate_is_idempotent():
    fleet = _fleet()
    first = aggregate(fleet, [MOT, INSURANCE], TODAY, by_key("partner_id")).to_dict()
    second = aggregate(fleet, [MOT, INSURANCE], TODAY, by_key("partner_id")).to_dict()
    assert first == second


def test_tally_reuses_a_classification():
    classified = classify_all(_fleet(), [MOT], TODAY)
    assert tally(classified).total == aggregate(_fleet(), [MOT], TODAY).total


def test_to_dict_uses_plain_labels():
    data = aggregate(_fleet(), [MOT], TODAY, by_key("partner_id")).to_dict()
    assert data["scheme"] == "documents"
    assert data["granularity"] == "field"
    assert list(data["total"]) == ["expired", "missing", "expiring", "valid"]
    assert all(type(k) is str for k in data["by_group"]["p1"])


def test_groups_with_problem_labels():
    summary = aggregate(_fleet(), [MOT, INSURANCE], TODAY, by_key("partner_id"))
    assert groups_with(summary, "expired") == ["p1"]
    assert groups_with(summary, "missing") == ["p2"]
    assert sorted(groups_with(summary, "expiring")) == ["p1", "p2"]


def test_groups_with_valid_means_no_problems():
    vehicles = [
        {"partner_id": "clean", "mot": _in(200)},
        {"partner_id": "dirty", "mot": _in(200)},
        {"partner_id": "dirty", "mot": _in(-1)},
    ]
    summary = aggregate(vehicles, [MOT], TODAY, by_key("partner_id"))
    assert groups_with(summary, "valid") == ["clean"]


def test_groups_with_unknown_label_matches_nothing():
    summary = aggregate(_fleet(), [MOT], TODAY, by_key("partner_id"))
    assert groups_with(summary, "stale") == []


def test_count_by_zero_fills_and_totals():
    claims = [{"status": "open"}, {"status": "open"}, {"status": "escalated"}, {}]
    counts = count_by(claims, "status", ("open", "need_info", "closed"))
    assert counts == {"open": 2, "need_info": 0, "closed": 0, "escalated": 1, "total": 4}
