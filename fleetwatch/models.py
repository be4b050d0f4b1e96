"""
fleetwatch.models
=================

Status vocabularies and the small value objects the classifier works
with.  Everything here is stdlib-only so that ``import fleetwatch``
stays cheap.

Each domain (documents, maintenance, compliance reviews) gets its own
``str`` enum, so a bucket compares equal to the plain label a browser
sends back as a filter value.  A :class:`Scheme` ties one of those label
sets to the precedence order used to pick an entity's overall status.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, Optional, Tuple


class DocumentStatus(str, Enum):
    """Buckets for expiring paperwork."""
    VALID = "valid"
    EXPIRING = "expiring"
    EXPIRED = "expired"
    MISSING = "missing"

    def __str__(self) -> str:
        return self.value


class MaintenanceStatus(str, Enum):
    """Buckets for service schedules (date or mileage based)."""
    OK = "ok"
    SOON = "soon"
    URGENT = "urgent"
    OVERDUE = "overdue"
    MISSING = "missing"
    NO_SCHEDULE = "no-schedule"

    def __str__(self) -> str:
        return self.value


class ReviewStatus(str, Enum):
    """Buckets for compliance review dates."""
    SCHEDULED = "scheduled"
    UPCOMING = "upcoming"
    OVERDUE = "overdue"
    MISSING = "missing"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class Scheme:
    """
    A tagged label set with its precedence order.

    Parameters
    ----------
    name : str
        Short tag (``"documents"``, ``"maintenance"``...).
    expired, missing, valid : str
        Labels for the past-due, required-but-absent and healthy cases.
    warnings : tuple[str, ...]
        Warning tiers, nearest threshold first (``("urgent", "soon")``).
    idle : str | None
        Overall label for an entity with nothing tracked.  Defaults to
        ``valid``.
    """
    name: str
    expired: str
    missing: str
    warnings: Tuple[str, ...]
    valid: str
    idle: Optional[str] = None

    def __post_init__(self):
        if not self.warnings:
            raise ValueError("a scheme needs at least one warning tier")
        if len(set(self.precedence)) != len(self.precedence):
            raise ValueError(f"duplicate labels in scheme {self.name!r}")

    @property
    def precedence(self) -> Tuple[str, ...]:
        """Labels from worst to best."""
        return (self.expired, self.missing, *self.warnings, self.valid)

    @property
    def idle_label(self) -> str:
        return self.idle if self.idle is not None else self.valid

    def rank(self, label: str) -> int:
        """Position in :pyattr:`precedence` (0 is worst)."""
        return self.precedence.index(label)

    def worst(self, labels) -> str:
        """Highest-precedence label among *labels*, ``valid`` when empty."""
        return min(labels, key=self.rank, default=self.valid)

    def empty_counts(self) -> Dict[str, int]:
        """Zero-filled bucket counts in precedence order."""
        return {label: 0 for label in self.precedence}


DOCUMENTS = Scheme(
    name="documents",
    expired=DocumentStatus.EXPIRED,
    missing=DocumentStatus.MISSING,
    warnings=(DocumentStatus.EXPIRING,),
    valid=DocumentStatus.VALID,
)

MAINTENANCE = Scheme(
    name="maintenance",
    expired=MaintenanceStatus.OVERDUE,
    missing=MaintenanceStatus.MISSING,
    warnings=(MaintenanceStatus.URGENT, MaintenanceStatus.SOON),
    valid=MaintenanceStatus.OK,
    idle=MaintenanceStatus.NO_SCHEDULE,
)

COMPLIANCE = Scheme(
    name="compliance",
    expired=ReviewStatus.OVERDUE,
    missing=ReviewStatus.MISSING,
    warnings=(ReviewStatus.UPCOMING,),
    valid=ReviewStatus.SCHEDULED,
)


def lookup(entity: Any, name: str) -> Any:
    """Read *name* from a mapping row or an object, ``None`` if absent."""
    if isinstance(entity, Mapping):
        return entity.get(name)
    return getattr(entity, name, None)


@dataclass(frozen=True)
class FieldSpec:
    """
    Declares one trackable field and its warning thresholds.

    Parameters
    ----------
    name : str
        Column / attribute name (also the key in ``per_field``).
    required : bool, default=False
        Whether an absent value counts as *missing*.
    warn_within : tuple[int, ...], default=(30,)
        One non-negative threshold per warning tier of the scheme,
        strictly increasing.
    unit : {"days", "miles"}, default="days"
        ``days``: the value is a date.  ``miles``: the value is the
        remaining distance and is overdue at zero.
    getter : callable, optional
        Extracts the value from an entity; defaults to :func:`lookup`.
    label : str, optional
        Human-readable name for tables and charts.
    """
    name: str
    required: bool = False
    warn_within: Tuple[int, ...] = (30,)
    unit: str = "days"
    getter: Optional[Callable[[Any], Any]] = field(default=None, compare=False)
    label: Optional[str] = None

    def __post_init__(self):
        thresholds = tuple(int(t) for t in self.warn_within)
        if not thresholds:
            raise ValueError(f"{self.name}: at least one threshold is required")
        if any(t < 0 for t in thresholds):
            raise ValueError(f"{self.name}: thresholds must be non-negative")
        if any(a >= b for a, b in zip(thresholds, thresholds[1:])):
            raise ValueError(f"{self.name}: thresholds must be strictly increasing")
        if self.unit not in ("days", "miles"):
            raise ValueError(f"{self.name}: unknown unit {self.unit!r}")
        object.__setattr__(self, "warn_within", thresholds)

    @classmethod
    def single(cls, name: str, required: bool = False, warn_within_days: int = 30, **kw) -> "FieldSpec":
        """Single-tier spec with one warning window in days."""
        return cls(name, required, (warn_within_days,), **kw)

    @classmethod
    def tiered(cls, name: str, urgent_within: int, soon_within: int, required: bool = False, **kw) -> "FieldSpec":
        """Two-tier spec for maintenance-style urgent/soon windows."""
        return cls(name, required, (urgent_within, soon_within), **kw)

    def value_of(self, entity: Any) -> Any:
        return self.getter(entity) if self.getter else lookup(entity, self.name)


@dataclass(frozen=True)
class ClassifiedEntity:
    """
    An entity with its per-field buckets and overall status.

    ``tracked`` is False when every field was absent and optional, i.e.
    there was nothing to judge the entity on.
    """
    entity: Any
    per_field: Dict[str, str]
    overall: str
    tracked: bool = True

    def status(self, field_name: Optional[str] = None) -> Optional[str]:
        """Overall bucket, or the bucket of *field_name* if given."""
        if field_name is None:
            return self.overall
        return self.per_field.get(field_name)
