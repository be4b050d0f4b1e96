"""
Fleetwatch
==========

Status engine behind a fleet-rental partner portal: classifies the dates
a fleet has to keep an eye on (document expiries, service schedules,
compliance reviews), rolls them up into dashboard counts and pages the
resulting tables.

Import structure
----------------
`import fleetwatch` is intentionally cheap: only the stdlib-based
sub-modules are imported by default.  Heavy dependencies such as
*sqlmodel*, *requests* and *matplotlib* are only imported when you
explicitly access :pymod:`fleetwatch.db`, :pymod:`fleetwatch.sources`
or :pymod:`fleetwatch.viz`.

Sub-modules
~~~~~~~~~~~
- :pymod:`fleetwatch.models`      – status enums, ``Scheme``, ``FieldSpec``, ``ClassifiedEntity``
- :pymod:`fleetwatch.classifier`  – date/mileage → bucket rules
- :pymod:`fleetwatch.aggregate`   – bucket counts per partner / category
- :pymod:`fleetwatch.paging`      – status filter, search and pagination
- :pymod:`fleetwatch.fleet`       – rule sets and page overviews
- :pymod:`fleetwatch.store`       – ``FleetStore`` in-memory row registry
- :pymod:`fleetwatch.viz`         – plotting helpers (bar charts)

Quick start
-----------
>>> from datetime import date
>>> from fleetwatch.models import FieldSpec
>>> from fleetwatch.aggregate import aggregate
>>> mot = FieldSpec.single("mot", required=True)
>>> aggregate([{"mot": date(2024, 5, 20)}], [mot], date(2024, 5, 1)).to_dict()["total"]
{'expired': 0, 'missing': 0, 'expiring': 1, 'valid': 0}
"""

__all__ = [
    "models",
    "classifier",
    "aggregate",
    "paging",
    "fleet",
    "store",
    "viz",
]

__version__ = "0.1.0"
