"""
fleetwatch.aggregate
====================

Roll classified entities up into the counts shown on dashboard cards.

Two granularities are in use across the portal:

* **field** – every (entity × tracked field) pair is one increment.  The
  documents page counts this way: four document types per vehicle.
* **entity** – every entity contributes its overall bucket once.  The
  maintenance page counts vehicles, not service dates.

Counts can additionally be partitioned by a group key (owning partner,
vehicle category).  A group only appears once it has an entity in it.
"""

from __future__ import annotations

import logging
from collections import Counter
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, Iterable, List, Optional, Sequence

from .classifier import classify_all
from .models import DOCUMENTS, ClassifiedEntity, FieldSpec, Scheme, lookup

logger = logging.getLogger(__name__)

BucketCounts = Dict[str, int]
GroupKey = Callable[[Any], Optional[str]]


class Granularity(Enum):
    """How many increments one entity contributes."""
    FIELD = "field"
    ENTITY = "entity"

    def __str__(self) -> str:
        return self.value


@dataclass
class Summary:
    """
    Aggregated bucket counts.

    Parameters
    ----------
    total : dict[str, int]
        Zero-filled counts for every label of the scheme.
    by_group : dict[str, dict[str, int]]
        Same counts per group key; only groups that had entities.
    untracked : int
        Entities with nothing to judge them on (entity granularity only).
    entities : int
        Number of entities seen.
    """
    scheme: Scheme
    granularity: Granularity
    total: BucketCounts
    by_group: Dict[str, BucketCounts] = field(default_factory=dict)
    untracked: int = 0
    entities: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "scheme": self.scheme.name,
            "granularity": str(self.granularity),
            "total": {str(k): v for k, v in self.total.items()},
            "by_group": {g: {str(k): v for k, v in c.items()} for g, c in self.by_group.items()},
            "untracked": self.untracked,
            "entities": self.entities,
        }


def _increments(item: ClassifiedEntity, granularity: Granularity) -> List[str]:
    if granularity is Granularity.FIELD:
        return list(item.per_field.values())
    return [item.overall] if item.tracked else []


def tally(
    classified: Iterable[ClassifiedEntity],
    scheme: Scheme = DOCUMENTS,
    granularity: Granularity = Granularity.FIELD,
    group_key: Optional[GroupKey] = None,
) -> Summary:
    """Count buckets over entities that were already classified."""
    summary = Summary(scheme=scheme, granularity=granularity, total=scheme.empty_counts())
    for item in classified:
        summary.entities += 1
        labels = _increments(item, granularity)
        if granularity is Granularity.ENTITY and not item.tracked:
            summary.untracked += 1

        for label in labels:
            summary.total[label] += 1

        if group_key is None:
            continue
        key = group_key(item.entity)
        if key is None:
            logger.debug("Entity without a group key left out of group counts")
            continue
        counts = summary.by_group.setdefault(str(key), scheme.empty_counts())
        for label in labels:
            counts[label] += 1
    return summary


def aggregate(
    entities: Iterable[Any],
    specs: Sequence[FieldSpec],
    now: Any,
    group_key: Optional[GroupKey] = None,
    *,
    scheme: Scheme = DOCUMENTS,
    granularity: Granularity = Granularity.FIELD,
) -> Summary:
    """
    Classify *entities* and count the resulting buckets.

    With ``Granularity.FIELD`` the total always sums to
    ``len(entities) * len(specs)``; with ``Granularity.ENTITY`` it sums to
    the number of tracked entities and the rest land in ``untracked``.
    An empty collection gives zeroed counts.
    """
    return tally(classify_all(entities, specs, now, scheme), scheme, granularity, group_key)


def by_key(name: str) -> GroupKey:
    """Group key reading column *name*; blank values count as no key."""
    def _key(entity: Any) -> Optional[str]:
        value = lookup(entity, name)
        return None if value in (None, "") else str(value)
    return _key


def groups_with(summary: Summary, label: str) -> List[str]:
    """
    Group keys whose counts match a status filter.

    For a problem label (expired, missing, a warning tier) a group
    matches when it has at least one of it.  For the valid label a group
    matches when it has no problems at all.  Unknown labels match
    nothing.
    """
    scheme = summary.scheme
    if label not in scheme.precedence:
        return []
    label = scheme.precedence[scheme.rank(label)]
    if label == scheme.valid:
        problems = scheme.precedence[:-1]
        return [g for g, c in summary.by_group.items() if not any(c[p] for p in problems)]
    return [g for g, c in summary.by_group.items() if c[label] > 0]


def count_by(rows: Iterable[Any], key: str, labels: Sequence[str] = ()) -> Dict[str, int]:
    """
    Tally rows by a stored status column.

    *labels* are zero-filled first so a card for an empty status still
    renders; ``total`` counts every row, including ones with labels not
    listed.
    """
    counts: Dict[str, int] = {label: 0 for label in labels}
    seen = Counter()
    total = 0
    for row in rows:
        total += 1
        value = lookup(row, key)
        if value is not None:
            seen[str(value)] += 1
    counts.update(seen)
    counts["total"] = total
    return counts
