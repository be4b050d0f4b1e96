"""
fleetwatch.paging
=================

Status filter, free-text search and pagination for portal tables.

Works on :class:`~fleetwatch.models.ClassifiedEntity` items as well as
on plain rows whose status is a stored column (claims), via the
``status_of`` hook.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterable, List, Optional, Sequence

from .models import ClassifiedEntity, lookup

ALL = "all"


@dataclass
class Page:
    """One visible slice of a filtered collection."""
    items: List[Any]
    total_matching: int
    total_pages: int
    page: int
    page_size: int


def _subject(item: Any) -> Any:
    return item.entity if isinstance(item, ClassifiedEntity) else item


def _status(item: Any, status_field: Optional[str], status_of: Optional[Callable[[Any], Any]]) -> Any:
    if status_of is not None:
        return status_of(item)
    if isinstance(item, ClassifiedEntity):
        return item.status(status_field)
    return lookup(item, status_field or "status")


def search_blob(item: Any, search_fields: Sequence[str]) -> str:
    """Lower-cased, space-joined values of *search_fields* (blanks skipped)."""
    subject = _subject(item)
    parts = [lookup(subject, name) for name in search_fields]
    return " ".join(str(p) for p in parts if p not in (None, "")).lower()


def matches(
    item: Any,
    status_filter: Optional[str] = ALL,
    search_text: Optional[str] = "",
    search_fields: Sequence[str] = (),
    status_field: Optional[str] = None,
    status_of: Optional[Callable[[Any], Any]] = None,
) -> bool:
    """True when *item* passes both the status filter and the search."""
    if status_filter not in (None, "", ALL):
        status = _status(item, status_field, status_of)
        if status is None or str(status) != str(status_filter):
            return False
    needle = (search_text or "").strip().lower()
    if needle and needle not in search_blob(item, search_fields):
        return False
    return True


def filter_and_paginate(
    entities: Iterable[Any],
    *,
    status_filter: Optional[str] = ALL,
    search_text: Optional[str] = "",
    search_fields: Sequence[str] = (),
    page: int = 1,
    page_size: int = 10,
    status_field: Optional[str] = None,
    status_of: Optional[Callable[[Any], Any]] = None,
) -> Page:
    """
    Narrow *entities* and return the requested page.

    Parameters
    ----------
    status_filter : str, default="all"
        Keep items whose overall status (or ``status_field`` bucket, or
        ``status_of(item)``) equals this label.  Unknown labels match
        nothing.
    search_text : str
        Case-insensitive substring looked up in the joined
        ``search_fields``; blank matches everything.
    page : int
        1-indexed.  Out-of-range values clamp to the first/last page.
    page_size : int
        Rows per page; values below 1 are treated as 1.
    """
    matching = [
        item for item in entities
        if matches(item, status_filter, search_text, search_fields, status_field, status_of)
    ]
    size = max(1, int(page_size))
    total_pages = max(1, math.ceil(len(matching) / size))
    current = min(max(1, int(page)), total_pages)
    start = (current - 1) * size
    return Page(
        items=matching[start:start + size],
        total_matching=len(matching),
        total_pages=total_pages,
        page=current,
        page_size=size,
    )


def group_rows(rows: Iterable[Any], *keys: str) -> Dict[Any, Any]:
    """
    Nest *rows* by one or more columns, e.g. partner → driver → claims.

    Groups keep first-seen order and only exist when they hold rows.
    Rows without a value for a key are grouped under ``None``.
    """
    if not keys:
        raise ValueError("group_rows needs at least one key")
    head, rest = keys[0], keys[1:]
    buckets: Dict[Any, List[Any]] = {}
    for row in rows:
        buckets.setdefault(lookup(row, head), []).append(row)
    if not rest:
        return buckets
    return {k: group_rows(v, *rest) for k, v in buckets.items()}
