"""
fleetwatch.sources.rest
=======================

Row source for the hosted database's REST interface.

The hosted tables are exposed PostgREST-style: ``GET /rest/v1/<table>``
with ``select=*`` and one ``<column>=eq.<value>`` parameter per filter.
Every request carries the project key both as ``apikey`` and as a
bearer token.
"""

import logging
from typing import Any, Dict, List, Optional

import requests

from fleetwatch.settings import settings
from .base import RowSource, SourceError

logger = logging.getLogger(__name__)


class RestRowSource(RowSource):
    """
    Fetch fleet rows from the hosted database.

    Example
    -------
    >>> src = RestRowSource("https://example.supabase.co", "anon-key")
    >>> src.fetch("vehicles", partner_id="p1")   # doctest: +SKIP
    [{'id': 'v1', 'partner_id': 'p1', ...}]
    """

    def __init__(self, base_url: Optional[str] = None, api_key: Optional[str] = None):
        """
        Initialize the REST source.

        Args:
            base_url: Project URL; defaults to ``settings.supabase_url``
            api_key: Project key; defaults to ``settings.supabase_key``
        """
        super().__init__()
        self.base_url = (base_url or settings.supabase_url).rstrip("/")
        self.api_key = api_key if api_key is not None else settings.supabase_key
        if not self.api_key:
            logger.warning("No hosted database key provided. Set FLEETWATCH_SUPABASE_KEY environment variable.")

    def _headers(self) -> Dict[str, str]:
        return {
            "apikey": self.api_key,
            "Authorization": f"Bearer {self.api_key}",
            "Accept": "application/json",
            "User-Agent": self.user_agent,
        }

    def fetch(self, table: str, **filters: Any) -> List[Dict[str, Any]]:
        """
        Return rows of *table*, optionally narrowed by equality filters.

        Args:
            table: Hosted table name (``vehicles``, ``claims``...)
            **filters: Column equality filters

        Raises:
            SourceError: on transport errors, HTTP errors or a payload that
                is not a JSON array
        """
        params = {"select": "*"}
        params.update({column: f"eq.{value}" for column, value in filters.items()})
        url = f"{self.base_url}/rest/v1/{table}"

        logger.info(f"Fetching {table} from hosted database with filters {filters or 'none'}")
        try:
            response = requests.get(url, headers=self._headers(), params=params, timeout=self.timeout)
            response.raise_for_status()
            data = response.json()
        except requests.RequestException as e:
            logger.error(f"Error fetching {table} from hosted database: {e}")
            raise SourceError(f"could not fetch {table}: {e}") from e
        except ValueError as e:
            logger.error(f"Invalid JSON for {table}: {e}")
            raise SourceError(f"invalid JSON for {table}") from e

        if not isinstance(data, list):
            logger.error(f"Unexpected payload for {table}: {type(data).__name__}")
            raise SourceError(f"expected a list of rows for {table}")

        rows = [dict(row) for row in data if isinstance(row, dict)]
        logger.info(f"Found {len(rows)} rows in {table}")
        return rows
