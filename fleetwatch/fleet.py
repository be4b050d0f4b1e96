"""
fleetwatch.fleet
================

Domain rule sets and the page-level overviews built on top of the
classifier, aggregator and pager.

Each overview takes raw rows (as the stores or the hosted database hand
them out), a reference time and the user's filter state, and returns a
plain ``dict`` ready to serialise: summary cards, per-partner (or
per-category) panels and the visible table page.
"""

from __future__ import annotations

import logging
from collections import Counter
from datetime import date
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence

from .aggregate import Granularity, by_key, count_by, groups_with, tally
from .classifier import classify_all, parse_when
from .models import COMPLIANCE, DOCUMENTS, MAINTENANCE, ClassifiedEntity, FieldSpec, lookup
from .paging import ALL, Page, filter_and_paginate, group_rows
from .settings import Settings, settings as default_settings

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------
# Configuration constants
# ---------------------------------------------------------------------
# (key, label, required)
DOCUMENT_TYPES = (
    ("private_hire_license", "Private Hire License", True),
    ("mot", "MOT Certificate", True),
    ("insurance", "Insurance Certificate", False),
    ("logbook", "V5C Logbook", True),
)

# An uploaded document without an expiry date never expires.
NO_EXPIRY = date.max

VEHICLE_SEARCH_FIELDS = ("partner_name", "make", "model", "registration_number")
COMPLIANCE_SEARCH_FIELDS = ("name", "description", "category", "regulatory_framework", "assigned_to")
CLAIM_SEARCH_FIELDS = ("partner_name", "driver_name", "description", "vehicle_name")

CLAIM_STATUSES = ("open", "need_info", "closed")
COMPLIANCE_STATUSES = ("compliant", "non-compliant", "pending", "review")
RISK_LEVELS = ("low", "medium", "high", "critical")

DOCUMENT_EXPIRY = "document-expiry"
UNASSIGNED = "unassigned"

_VEHICLE_COLUMNS = ("id", "partner_id", "partner_name", "make", "model", "registration_number", "category")
_COMPLIANCE_COLUMNS = ("id", "name", "category", "status", "risk_level", "priority", "next_review", "assigned_to")


# ---------------------------------------------------------------------
# Rule sets
# ---------------------------------------------------------------------
def document_specs(cfg: Settings = default_settings) -> List[FieldSpec]:
    """One spec per vehicle document type."""
    return [
        FieldSpec.single(key, required=required, warn_within_days=cfg.document_warn_days, label=label)
        for key, label, required in DOCUMENT_TYPES
    ]


def miles_until_service(vehicle: Any) -> Optional[float]:
    """Service interval minus miles driven since the last service, or ``None``."""
    interval = lookup(vehicle, "service_interval")
    last = lookup(vehicle, "last_service_mileage")
    current = lookup(vehicle, "mileage")
    if not interval or last is None or current is None:
        return None
    try:
        return float(interval) - (float(current) - float(last))
    except (TypeError, ValueError):
        return None


def maintenance_specs(cfg: Settings = default_settings) -> List[FieldSpec]:
    """Date-based and mileage-based service schedule; the worse one wins."""
    return [
        FieldSpec.tiered(
            "next_service_date",
            cfg.maintenance_urgent_days,
            cfg.maintenance_soon_days,
            label="Next service",
        ),
        FieldSpec.tiered(
            "service_miles_remaining",
            cfg.mileage_urgent_miles,
            cfg.mileage_soon_miles,
            unit="miles",
            getter=miles_until_service,
            label="Service mileage",
        ),
    ]


def vehicle_expiry_specs(cfg: Settings = default_settings) -> List[FieldSpec]:
    """Statutory expiry columns stored on the vehicle row itself."""
    warn = cfg.vehicle_expiry_warn_days
    return [
        FieldSpec.single("mot_expiry", warn_within_days=warn, label="MOT"),
        FieldSpec.single("insurance_expiry", warn_within_days=warn, label="Insurance"),
        FieldSpec.single("road_tax_expiry", warn_within_days=warn, label="Road Tax"),
    ]


def compliance_specs(cfg: Settings = default_settings) -> List[FieldSpec]:
    return [FieldSpec.single("next_review", warn_within_days=cfg.compliance_upcoming_days, label="Next review")]


# ---------------------------------------------------------------------
# Row shaping
# ---------------------------------------------------------------------
def partner_display_name(partner: Optional[Mapping[str, Any]]) -> str:
    """Business name, then personal name, then email."""
    if not partner:
        return "Unknown Partner"
    email = partner.get("email")
    business = partner.get("business_name") or partner.get("company_name")
    if business and business != email:
        return business
    personal = partner.get("name") or partner.get("contact_person")
    if personal and personal != email:
        return personal
    return email or "Unknown Partner"


def _partner_names(partners: Iterable[Mapping[str, Any]]) -> Dict[str, str]:
    return {str(p.get("id")): partner_display_name(p) for p in partners}


def _with_partner(rows: Iterable[Mapping[str, Any]], names: Mapping[str, str]) -> List[Dict[str, Any]]:
    out = []
    for row in rows:
        item = dict(row)
        item["partner_name"] = names.get(str(item.get("partner_id")), "Unknown Partner")
        out.append(item)
    return out


def _latest_expiry(docs: Sequence[Mapping[str, Any]]) -> Any:
    """Expiry of the upload of one type that runs the longest."""
    best, best_when = None, None
    for doc in docs:
        raw = doc.get("expiry_date")
        value = NO_EXPIRY if raw in (None, "") else raw
        when = parse_when(value)
        if when is None:
            continue
        if best_when is None or when > best_when:
            best, best_when = value, when
    if best is None and docs:
        # only unreadable dates: hand one through so it classifies as absent
        return docs[0].get("expiry_date")
    return best


def vehicle_document_entities(
    vehicles: Iterable[Mapping[str, Any]],
    documents: Iterable[Mapping[str, Any]],
    partners: Iterable[Mapping[str, Any]] = (),
) -> List[Dict[str, Any]]:
    """
    One entity per vehicle carrying each document type's expiry.

    A type with no upload stays ``None`` (missing when required); an
    upload without an expiry date becomes :data:`NO_EXPIRY`.
    """
    by_vehicle: Dict[str, Dict[str, List[Mapping[str, Any]]]] = {}
    for doc in documents:
        uploads = by_vehicle.setdefault(str(doc.get("vehicle_id")), {})
        uploads.setdefault(doc.get("type"), []).append(doc)

    entities = _with_partner(vehicles, _partner_names(partners))
    for entity in entities:
        uploads = by_vehicle.get(str(entity.get("id")), {})
        for key, _, _ in DOCUMENT_TYPES:
            entity[key] = _latest_expiry(uploads[key]) if key in uploads else None
    return entities


def _table_item(item: ClassifiedEntity, columns: Sequence[str]) -> Dict[str, Any]:
    row = {c: lookup(item.entity, c) for c in columns}
    row["overall"] = str(item.overall)
    row["fields"] = {k: str(v) for k, v in item.per_field.items()}
    return row


def _driver_name(driver: Mapping[str, Any]) -> Optional[str]:
    full = f"{driver.get('first_name') or ''} {driver.get('last_name') or ''}".strip()
    return driver.get("name") or driver.get("full_name") or full or None


def _page_dict(page: Page, items: List[Any]) -> Dict[str, Any]:
    return {
        "items": items,
        "total_matching": page.total_matching,
        "total_pages": page.total_pages,
        "page": page.page,
        "page_size": page.page_size,
    }


def _partner_panels(summary, names: Mapping[str, str], vehicles: Mapping[str, int], only=None) -> List[Dict[str, Any]]:
    keep = None if only in (None, "", ALL) else set(groups_with(summary, only))
    return [
        {
            "partner_id": pid,
            "name": names.get(pid, "Unknown Partner"),
            "vehicles": vehicles.get(pid, 0),
            "counts": {str(k): v for k, v in counts.items()},
        }
        for pid, counts in summary.by_group.items()
        if keep is None or pid in keep
    ]


def _only_partner(rows: List[Dict[str, Any]], partner_id: Optional[str]) -> List[Dict[str, Any]]:
    if not partner_id:
        return rows
    return [r for r in rows if str(r.get("partner_id")) == str(partner_id)]


# ---------------------------------------------------------------------
# Overviews
# ---------------------------------------------------------------------
def document_overview(
    vehicles: Iterable[Mapping[str, Any]],
    documents: Iterable[Mapping[str, Any]],
    partners: Iterable[Mapping[str, Any]],
    now: Any,
    *,
    status: str = ALL,
    q: str = "",
    page: int = 1,
    page_size: Optional[int] = None,
    partner_id: Optional[str] = None,
    partner_status: str = ALL,
    cfg: Settings = default_settings,
) -> Dict[str, Any]:
    """
    Fleet documents by partner.

    Cards count every (vehicle × document type); partner panels list
    only partners that own vehicles; the table pages vehicles by their
    worst document status.  ``partner_status`` narrows the panels to
    partners with at least one document in that bucket (``valid``: no
    problems at all).
    """
    partners = list(partners)
    entities = _only_partner(vehicle_document_entities(vehicles, documents, partners), partner_id)

    classified = classify_all(entities, document_specs(cfg), now, DOCUMENTS)
    summary = tally(classified, DOCUMENTS, Granularity.FIELD, by_key("partner_id"))
    vehicle_counts = Counter(str(e["partner_id"]) for e in entities if e.get("partner_id") not in (None, ""))

    result = filter_and_paginate(
        classified,
        status_filter=status,
        search_text=q,
        search_fields=VEHICLE_SEARCH_FIELDS,
        page=page,
        page_size=page_size or cfg.default_page_size,
    )
    logger.debug(f"Document overview: {len(entities)} vehicles, {result.total_matching} matching")
    return {
        "summary": summary.to_dict(),
        "partners": _partner_panels(summary, _partner_names(partners), vehicle_counts, partner_status),
        "page": _page_dict(result, [_table_item(c, _VEHICLE_COLUMNS) for c in result.items]),
    }


def maintenance_overview(
    vehicles: Iterable[Mapping[str, Any]],
    partners: Iterable[Mapping[str, Any]],
    now: Any,
    *,
    status: str = ALL,
    q: str = "",
    page: int = 1,
    page_size: Optional[int] = None,
    partner_id: Optional[str] = None,
    cfg: Settings = default_settings,
) -> Dict[str, Any]:
    """
    Service schedule by partner.

    Each vehicle counts once, under the worse of its date-based and
    mileage-based status; vehicles with neither are ``no-schedule``.
    The ``document-expiry`` card counts vehicles whose MOT, insurance
    or road tax is expired or inside its warning window, and is also
    accepted as a status filter.
    """
    partners = list(partners)
    entities = _only_partner(_with_partner(vehicles, _partner_names(partners)), partner_id)

    classified = classify_all(entities, maintenance_specs(cfg), now, MAINTENANCE)
    summary = tally(classified, MAINTENANCE, Granularity.ENTITY, by_key("partner_id"))

    expiry = classify_all(entities, vehicle_expiry_specs(cfg), now, DOCUMENTS)
    flagged = {
        id(e.entity) for e in expiry
        if e.overall in (DOCUMENTS.expired, *DOCUMENTS.warnings)
    }
    expiry_by_partner = Counter(
        str(e.entity.get("partner_id")) for e in expiry if id(e.entity) in flagged
    )

    status_of = None
    if status == DOCUMENT_EXPIRY:
        def status_of(item):
            return DOCUMENT_EXPIRY if id(item.entity) in flagged else None

    result = filter_and_paginate(
        classified,
        status_filter=status,
        search_text=q,
        search_fields=VEHICLE_SEARCH_FIELDS,
        page=page,
        page_size=page_size or cfg.default_page_size,
        status_of=status_of,
    )

    untracked_by_partner = Counter(
        str(c.entity.get("partner_id")) for c in classified if not c.tracked
    )
    vehicle_counts = Counter(str(e["partner_id"]) for e in entities if e.get("partner_id") not in (None, ""))
    panels = _partner_panels(summary, _partner_names(partners), vehicle_counts)
    for panel in panels:
        panel["counts"][str(MAINTENANCE.idle_label)] = untracked_by_partner.get(panel["partner_id"], 0)
        panel["document_expiry"] = expiry_by_partner.get(panel["partner_id"], 0)

    summary_dict = summary.to_dict()
    summary_dict["total"][str(MAINTENANCE.idle_label)] = summary.untracked
    summary_dict["document_expiry"] = len(flagged)
    summary_dict["total_vehicles"] = len(entities)
    return {
        "summary": summary_dict,
        "partners": panels,
        "page": _page_dict(result, [_table_item(c, _VEHICLE_COLUMNS) for c in result.items]),
    }


def compliance_overview(
    requirements: Iterable[Mapping[str, Any]],
    now: Any,
    *,
    status: str = ALL,
    review: str = ALL,
    category: Optional[str] = None,
    q: str = "",
    page: int = 1,
    page_size: Optional[int] = None,
    cfg: Settings = default_settings,
) -> Dict[str, Any]:
    """
    Compliance requirements: stored status and risk tallies, review
    schedule buckets per category, and the filtered requirement table.

    ``status`` filters the stored status (compliant, pending...);
    ``review`` filters the review bucket (overdue, upcoming, scheduled).
    """
    rows = [dict(r) for r in requirements]
    if category:
        rows = [r for r in rows if r.get("category") == category]

    classified = classify_all(rows, compliance_specs(cfg), now, COMPLIANCE)
    reviews = tally(classified, COMPLIANCE, Granularity.ENTITY, by_key("category"))

    statuses = count_by(rows, "status", COMPLIANCE_STATUSES)
    total = statuses["total"]
    evidence_required = sum(1 for r in rows if r.get("evidence_required"))
    evidence_provided = sum(1 for r in rows if r.get("evidence_required") and r.get("last_evidence_date"))

    if review not in (None, "", ALL):
        classified = [c for c in classified if str(c.overall) == str(review)]

    result = filter_and_paginate(
        classified,
        status_filter=status,
        search_text=q,
        search_fields=COMPLIANCE_SEARCH_FIELDS,
        page=page,
        page_size=page_size or cfg.default_page_size,
        status_of=lambda item: lookup(item.entity, "status"),
    )
    return {
        "summary": {
            "statuses": statuses,
            "risk": count_by(rows, "risk_level", RISK_LEVELS),
            "reviews": reviews.to_dict(),
            "compliance_rate": round(statuses["compliant"] / total * 100) if total else 0,
            "evidence_required": evidence_required,
            "evidence_provided": evidence_provided,
            "frameworks": len({r["regulatory_framework"] for r in rows if r.get("regulatory_framework")}),
        },
        "page": _page_dict(result, [_table_item(c, _COMPLIANCE_COLUMNS) for c in result.items]),
    }


def claims_overview(
    claims: Iterable[Mapping[str, Any]],
    partners: Iterable[Mapping[str, Any]] = (),
    vehicles: Iterable[Mapping[str, Any]] = (),
    drivers: Iterable[Mapping[str, Any]] = (),
    *,
    status: str = ALL,
    q: str = "",
    page: int = 1,
    page_size: Optional[int] = None,
    cfg: Settings = default_settings,
) -> Dict[str, Any]:
    """
    Claims with stored status: stats, the filtered page and that page
    grouped partner → driver.

    Drivers without a known name are searchable by their id.
    """
    vehicle_names = {
        str(v.get("id")): (v.get("name") or f"{v.get('make') or ''} {v.get('model') or ''}".strip() or str(v.get("id")))
        for v in vehicles
    }
    driver_names = {str(d.get("id")): _driver_name(d) for d in drivers}
    rows = _with_partner(claims, _partner_names(partners))
    for row in rows:
        if row.get("driver_id"):
            row["driver_name"] = driver_names.get(str(row["driver_id"])) or str(row["driver_id"])
        if row.get("car_id"):
            row["vehicle_name"] = vehicle_names.get(str(row["car_id"]), str(row["car_id"]))

    result = filter_and_paginate(
        rows,
        status_filter=status,
        search_text=q,
        search_fields=CLAIM_SEARCH_FIELDS,
        page=page,
        page_size=page_size or cfg.default_page_size,
    )
    grouped = group_rows(result.items, "partner_id", "driver_id")
    groups = {
        str(pid) if pid not in (None, "") else UNASSIGNED: {
            str(did) if did not in (None, "") else UNASSIGNED: [c.get("id") for c in items]
            for did, items in by_driver.items()
        }
        for pid, by_driver in grouped.items()
    }
    return {
        "summary": count_by(rows, "status", CLAIM_STATUSES),
        "groups": groups,
        "page": _page_dict(result, result.items),
    }
