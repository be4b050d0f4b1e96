"""Row sources feeding the status engine."""

from .base import RowSource, SourceError, sync_tables
from .rest import RestRowSource

__all__ = ["RowSource", "SourceError", "RestRowSource", "sync_tables"]
