"""
fleetwatch.viz
==============

Minimal plotting helpers used by the CLI demo and status reports.

Outputs are PNGs written to the *images/* folder (auto-created when the
first chart is saved).  Filenames can be overridden via keyword argument.
"""
from __future__ import annotations

import os
from pathlib import Path
from typing import Mapping

import matplotlib

matplotlib.use("Agg")
import matplotlib.pyplot as plt  # noqa: E402

from .aggregate import Summary  # noqa: E402
from .models import DOCUMENTS, Scheme  # noqa: E402

# default output dir
_IMG_DIR = Path("images")

# worst → best, matched to the scheme's precedence order
_PALETTE = ("#d00000", "#6c757d", "#f48c06", "#ffba08", "#2b9348", "#adb5bd")


def _colours(n: int):
    # expired, missing, warnings…, valid
    return [_PALETTE[0], _PALETTE[1], *_PALETTE[2:2 + n - 3], _PALETTE[4]]


def _save(out_path: str | os.PathLike) -> Path:
    out_path = Path(out_path)
    out_path.parent.mkdir(parents=True, exist_ok=True)
    plt.savefig(out_path, dpi=120, bbox_inches="tight")
    plt.close()
    return out_path


# ---------------------------------------------------------------------
# Plot 1 – bar chart of bucket counts
# ---------------------------------------------------------------------
def status_summary(
    counts: Mapping[str, int],
    scheme: Scheme = DOCUMENTS,
    out_path: str | os.PathLike = _IMG_DIR / "status_snapshot.png",
    title: str = "Status Snapshot",
) -> Path:
    """
    Generate a bar chart of how many items are in each bucket.

    Parameters
    ----------
    counts : Mapping[str, int]
        Bucket counts, e.g. ``Summary.total``.  Labels of *scheme* that
        are absent are drawn as zero.
    scheme : Scheme, default=DOCUMENTS
        Decides bar order (worst first).
    out_path : str or Path, default='images/status_snapshot.png'
        Where to save the PNG.
    title : str
        Chart title.

    Returns
    -------
    pathlib.Path
        Final image path for convenience.
    """
    labels = [str(label) for label in scheme.precedence]
    ys = [counts.get(label, 0) for label in labels]

    plt.figure()
    bars = plt.bar(labels, ys, color=_colours(len(labels)), edgecolor="#333")
    # add counts on top of each bar
    for rect, cnt in zip(bars, ys):
        plt.text(rect.get_x() + rect.get_width() / 2,
                 cnt + 0.05,
                 str(cnt),
                 ha="center", va="bottom",
                 fontsize=8, color="#333")
    plt.grid(axis="y", linestyle=":", alpha=0.3)
    plt.title(title)
    plt.ylabel("Count")
    plt.tight_layout()
    return _save(out_path)


# ---------------------------------------------------------------------
# Plot 2 – stacked bars per partner / category
# ---------------------------------------------------------------------
def partner_breakdown(
    summary: Summary,
    names: Mapping[str, str] | None = None,
    out_path: str | os.PathLike = _IMG_DIR / "partner_breakdown.png",
) -> Path:
    """
    Stacked bar per group of a :class:`~fleetwatch.aggregate.Summary`.

    *names* maps group keys to display names (partner business names);
    keys without a name are shown as-is.
    """
    names = names or {}
    groups = list(summary.by_group)
    labels = [str(label) for label in summary.scheme.precedence]

    plt.figure(figsize=(max(6, len(groups) * 0.8), 4))
    bottoms = [0] * len(groups)
    xs = [names.get(g, g) for g in groups]
    for label, colour in zip(labels, _colours(len(labels))):
        ys = [summary.by_group[g].get(label, 0) for g in groups]
        plt.bar(xs, ys, bottom=bottoms, color=colour, edgecolor="#333", label=label)
        bottoms = [b + y for b, y in zip(bottoms, ys)]

    plt.legend(fontsize=7)
    plt.grid(axis="y", linestyle=":", alpha=0.3)
    plt.title(f"{summary.scheme.name.title()} by group")
    plt.ylabel("Count")
    plt.xticks(rotation=30, ha="right")
    plt.tight_layout()
    return _save(out_path)


# ---------------------------------------------------------------------
# CLI demo:  python -m fleetwatch.viz  [--rows vehicles.json]
# ---------------------------------------------------------------------
if __name__ == "__main__":
    import argparse
    import json
    from datetime import date, timedelta

    from .aggregate import Granularity, aggregate, by_key
    from .fleet import maintenance_specs
    from .models import MAINTENANCE

    parser = argparse.ArgumentParser(
        description="Generate status_snapshot.png and partner_breakdown.png for a list of vehicles.")
    parser.add_argument(
        "--rows",
        help="Path to JSON list of vehicle rows. If omitted, demo vehicles are used.",
    )
    args = parser.parse_args()

    today = date.today()
    if args.rows:
        p = Path(args.rows)
        if not p.exists():
            raise SystemExit(f"⛔  File not found: {p!s}")
        vehicles = json.loads(p.read_text())
    else:
        vehicles = [
            {"id": "v1", "partner_id": "demo", "next_service_date": today + timedelta(days=3)},
            {"id": "v2", "partner_id": "demo", "next_service_date": today - timedelta(days=2)},
            {"id": "v3", "partner_id": "other", "next_service_date": today + timedelta(days=90)},
        ]

    summary = aggregate(vehicles, maintenance_specs(), today, by_key("partner_id"),
                        scheme=MAINTENANCE, granularity=Granularity.ENTITY)
    out = status_summary(summary.total, MAINTENANCE, title="Maintenance Snapshot")
    print(f"status_snapshot saved to {out}")
    out = partner_breakdown(summary)
    print(f"partner_breakdown saved to {out}")
