"""
fleetwatch.classifier
=====================

Turns date (or remaining-distance) fields into status buckets.

One generic rule covers every page of the portal: a value in the past
is *expired*, a value inside the nearest warning window gets that
window's label, anything further out is *valid*, and an absent value is
*missing* only when the field is required.  The :class:`Scheme` decides
what those labels are called for a given domain.

The reference time is always passed in; nothing in here reads a clock.

Examples
--------
>>> from datetime import date
>>> from fleetwatch.models import FieldSpec
>>> mot = FieldSpec.single("mot", required=True, warn_within_days=30)
>>> classify_field(date(2024, 5, 20), mot, date(2024, 5, 1))
<DocumentStatus.EXPIRING: 'expiring'>
>>> classify_field(None, mot, date(2024, 5, 1))
<DocumentStatus.MISSING: 'missing'>
"""

from __future__ import annotations

import logging
import math
import re
from datetime import date, datetime, timezone
from typing import Any, Iterable, List, Optional, Sequence, Tuple

from .models import DOCUMENTS, ClassifiedEntity, FieldSpec, Scheme

logger = logging.getLogger(__name__)

# fromisoformat before 3.11 only reads 3 or 6 fraction digits
_FRACTION = re.compile(r"(:\d{2})\.(\d+)")


# ---------------------------------------------------------------------
# Value coercion
# ---------------------------------------------------------------------
def parse_when(value: Any) -> Optional[datetime]:
    """
    Coerce *value* into a naive UTC :class:`datetime`, or ``None``.

    Accepts ``date``, ``datetime`` and ISO-8601 strings (``2024-05-01``,
    ``2024-05-01T09:30:00Z``, ``2024-05-01T09:30:00+01:00``). Second
    fractions may carry any number of digits.  Anything
    that cannot be read as a point in time yields ``None`` rather than
    an exception.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, datetime):
        when = value
    elif isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    elif isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        if text[-1] in "Zz":
            text = text[:-1] + "+00:00"
        text = _FRACTION.sub(lambda m: f"{m.group(1)}.{m.group(2)[:6].ljust(6, '0')}", text, count=1)
        try:
            when = datetime.fromisoformat(text)
        except ValueError:
            logger.debug(f"Ignoring unparseable date {value!r}")
            return None
    else:
        return None

    if when.tzinfo is not None:
        when = when.astimezone(timezone.utc).replace(tzinfo=None)
    return when


def parse_distance(value: Any) -> Optional[float]:
    """Finite number from *value* (int, float or numeric string), else ``None``."""
    if value is None or isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        logger.debug(f"Ignoring non-numeric distance {value!r}")
        return None
    return number if math.isfinite(number) else None


def _reference(now: Any) -> datetime:
    ref = parse_when(now)
    if ref is None:
        raise TypeError(f"now must be a date or datetime, got {now!r}")
    return ref


def days_until(value: Any, now: Any) -> Optional[int]:
    """
    Whole calendar days from *now* to *value* (negative when past).

    For date-only values this equals ``ceil((value - now) / 1 day)``;
    the time of day on either side never moves a date across a boundary.
    """
    target = parse_when(value)
    if target is None:
        return None
    return (target.date() - _reference(now).date()).days


# ---------------------------------------------------------------------
# Classification
# ---------------------------------------------------------------------
def _remaining(value: Any, spec: FieldSpec, ref: datetime) -> Optional[float]:
    if spec.unit == "miles":
        return parse_distance(value)
    target = parse_when(value)
    if target is None:
        return None
    return (target.date() - ref.date()).days


def _classify(value: Any, spec: FieldSpec, ref: datetime, scheme: Scheme) -> Tuple[str, bool]:
    """Return ``(bucket, usable)`` for one value."""
    remaining = _remaining(value, spec, ref)
    if remaining is None:
        return (scheme.missing if spec.required else scheme.valid), False

    overdue = remaining <= 0 if spec.unit == "miles" else remaining < 0
    if overdue:
        return scheme.expired, True
    # thresholds pair with warning tiers nearest-first
    for label, limit in zip(scheme.warnings, spec.warn_within):
        if remaining <= limit:
            return label, True
    return scheme.valid, True


def classify_field(value: Any, spec: FieldSpec, now: Any, scheme: Scheme = DOCUMENTS) -> str:
    """
    Bucket a single field value.

    Parameters
    ----------
    value : date | datetime | str | number | None
        The raw field value.  Unparseable values count as absent.
    spec : FieldSpec
        Requiredness and warning thresholds.
    now : date | datetime
        Reference time.
    scheme : Scheme, default=DOCUMENTS
        Label set to answer in.
    """
    bucket, _ = _classify(value, spec, _reference(now), scheme)
    return bucket


def classify_entity(
    entity: Any,
    specs: Sequence[FieldSpec],
    now: Any,
    scheme: Scheme = DOCUMENTS,
) -> ClassifiedEntity:
    """
    Bucket every declared field of *entity* and derive its overall status.

    The overall status is the worst per-field bucket.  With no specs it
    is the scheme's valid label; when every field is absent and optional
    it is the scheme's idle label (``no-schedule`` for maintenance).
    """
    ref = _reference(now)
    per_field = {}
    tracked = False
    for spec in specs:
        bucket, usable = _classify(spec.value_of(entity), spec, ref, scheme)
        per_field[spec.name] = bucket
        tracked = tracked or usable or spec.required

    if not per_field:
        overall = scheme.valid
    elif not tracked:
        overall = scheme.idle_label
    else:
        overall = scheme.worst(per_field.values())
    return ClassifiedEntity(entity=entity, per_field=per_field, overall=overall, tracked=tracked)


def classify_all(
    entities: Iterable[Any],
    specs: Sequence[FieldSpec],
    now: Any,
    scheme: Scheme = DOCUMENTS,
) -> List[ClassifiedEntity]:
    """:func:`classify_entity` over a collection, order preserved."""
    return [classify_entity(e, specs, now, scheme) for e in entities]
