"""PostgREST store for hosted Supabase projects."""

import time
import logging
from typing import Any, Dict, List, Optional, Sequence

import requests

from .base import BaseStore, InFilter, Row
from ..exceptions import StoreError
from ..models.migration import StoreConfig

logger = logging.getLogger(__name__)


def _format_value(value: Any) -> str:
    """Render a scalar the way PostgREST expects it in a filter."""
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def _quote(value: Any) -> str:
    """Quote a value for use inside an ``in.(...)`` list."""
    text = _format_value(value).replace("\\", "\\\\").replace('"', '\\"')
    return f'"{text}"'


class RestStore(BaseStore):
    """
    Store backed by the PostgREST API of a Supabase project.

    Authenticates with the project's service role key, which bypasses
    row-level security for the migration.
    """

    def __init__(
        self,
        config: StoreConfig,
        session: Optional[requests.Session] = None
    ):
        """
        Initialize the REST store.

        Args:
            config: Connection settings for the project
            session: Custom requests session
        """
        super().__init__(config.name)
        self.config = config
        self.base_url = config.rest_url
        self.timeout = config.timeout
        self.rate_limit = config.rate_limit or 0.0
        self._last_request_time = 0.0
        self._session = session or self._create_session()

    def _create_session(self) -> requests.Session:
        """Create a requests session with authentication."""
        session = requests.Session()

        key = self.config.service_role_key
        if key:
            session.headers["apikey"] = key
            session.headers["Authorization"] = f"Bearer {key}"

        session.headers["Content-Type"] = "application/json"

        return session

    def _rate_limit_wait(self):
        """Wait to respect rate limits."""
        if self.rate_limit > 0:
            elapsed = time.time() - self._last_request_time
            wait_time = (1.0 / self.rate_limit) - elapsed
            if wait_time > 0:
                time.sleep(wait_time)
        self._last_request_time = time.time()

    def _build_params(
        self,
        columns: Optional[Sequence[str]],
        eq: Optional[Dict[str, Any]] = None,
        in_filter: Optional[InFilter] = None,
        limit: Optional[int] = None
    ) -> Dict[str, Any]:
        """Build PostgREST query parameters."""
        params: Dict[str, Any] = {}

        if columns:
            params["select"] = ",".join(columns)

        for column, value in (eq or {}).items():
            if value is None:
                params[column] = "is.null"
            else:
                params[column] = f"eq.{_format_value(value)}"

        if in_filter is not None:
            column, values = in_filter
            params[column] = f"in.({','.join(_quote(v) for v in values)})"

        if limit is not None:
            params["limit"] = limit

        return params

    def _request(
        self,
        method: str,
        table: str,
        params: Dict[str, Any],
        json_body: Optional[List[Row]] = None,
        headers: Optional[Dict[str, str]] = None
    ) -> List[Row]:
        """Send a request and return the decoded rows."""
        url = f"{self.base_url}/{table}"

        self._rate_limit_wait()

        try:
            response = self._session.request(
                method,
                url,
                params=params,
                json=json_body,
                headers=headers,
                timeout=self.timeout,
            )
            response.raise_for_status()

        except requests.exceptions.HTTPError as e:
            error_msg = str(e)
            try:
                error_data = e.response.json()
                error_msg = error_data.get("message") or error_data.get("error") or str(error_data)
            except ValueError:
                pass

            raise StoreError(
                f"{self.name} {method} {table} failed: {error_msg}",
                status_code=e.response.status_code,
                table=table,
            ) from e

        except requests.exceptions.RequestException as e:
            raise StoreError(f"{self.name} {method} {table} failed: {e}", table=table) from e

        if not response.text:
            return []

        data = response.json()
        if not isinstance(data, list):
            data = [data]
        return data

    def select(
        self,
        table: str,
        columns: Sequence[str],
        eq: Optional[Dict[str, Any]] = None,
        in_filter: Optional[InFilter] = None,
        limit: Optional[int] = None
    ) -> List[Row]:
        """Select rows through a PostgREST GET."""
        params = self._build_params(columns, eq, in_filter, limit)
        rows = self._request("GET", table, params)
        logger.debug(f"{self.name}: fetched {len(rows)} rows from {table}")
        return rows

    def insert(
        self,
        table: str,
        rows: List[Row],
        returning: Optional[Sequence[str]] = None
    ) -> List[Row]:
        """Insert rows through a PostgREST POST returning the representation."""
        if not rows:
            return []

        params = self._build_params(returning)
        inserted = self._request(
            "POST",
            table,
            params,
            json_body=rows,
            headers={"Prefer": "return=representation"},
        )
        logger.debug(f"{self.name}: inserted {len(inserted)} rows into {table}")
        return inserted

    def validate_connection(self) -> bool:
        """Validate connection to the PostgREST endpoint."""
        try:
            self._rate_limit_wait()
            response = self._session.get(f"{self.base_url}/", timeout=self.timeout)
            return response.status_code < 500
        except requests.exceptions.RequestException as e:
            logger.error(f"{self.name} connection validation failed: {e}")
            return False
