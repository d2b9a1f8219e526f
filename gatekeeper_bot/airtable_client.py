"""
Airtable REST Client

Async HTTP client for listing records from a single Airtable table.

Features:
- filterByFormula / view selection
- 'string' cell format with locale and timezone so dates are human-readable
- Follows the `offset` cursor until every matching record is fetched
- Non-2xx responses raised as AirtableError

Usage:
    async with AirtableClient(config) as client:
        records = await client.select(filter_by_formula="OR(...)")
"""

import logging
from dataclasses import dataclass, field
from typing import Optional, List, Dict, Any

import httpx

from .config import BridgeConfig, CELL_FORMAT, USER_LOCALE, TIME_ZONE

logger = logging.getLogger(__name__)


class AirtableError(Exception):
    """Airtable answered with a non-success status."""

    def __init__(self, status_code: int, error_type: str, message: str = ""):
        self.status_code = status_code
        self.error_type = error_type
        self.message = message
        detail = f": {message}" if message else ""
        super().__init__(f"Airtable error {status_code} ({error_type}){detail}")


@dataclass
class AirtableRecord:
    """A single row returned by the Airtable API."""
    id: str
    fields: Dict[str, Any] = field(default_factory=dict)
    created_time: str = ""

    def get(self, field_name: str) -> Any:
        """Get a field value, or None if the cell is empty."""
        return self.fields.get(field_name)

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "AirtableRecord":
        """Create from an API record object."""
        return cls(
            id=d["id"],
            fields=d.get("fields") or {},
            created_time=d.get("createdTime", ""),
        )


def _parse_error(response: httpx.Response) -> AirtableError:
    """Build an AirtableError from an error response body."""
    error_type = response.reason_phrase or "UNKNOWN_ERROR"
    message = ""
    try:
        body = response.json()
    except ValueError:
        body = None
    error = body.get("error") if isinstance(body, dict) else None

    # Airtable sends either {"error": "NOT_FOUND"} or {"error": {"type": ..., "message": ...}}
    if isinstance(error, dict):
        error_type = error.get("type", error_type)
        message = error.get("message", "")
    elif isinstance(error, str):
        error_type = error

    return AirtableError(response.status_code, error_type, message)


class AirtableClient:
    """
    Read-only client for one Airtable table.

    Args:
        config: Bridge configuration (API key, base and table ids, timeout)
        transport: Optional httpx transport, used by tests to fake the API
    """

    def __init__(
        self,
        config: BridgeConfig,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.config = config
        self.transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    async def __aenter__(self):
        self._client = httpx.AsyncClient(
            timeout=self.config.timeout,
            transport=self.transport,
            headers={"Authorization": f"Bearer {self.config.airtable_api_key}"},
        )
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

    async def close(self):
        """Close HTTP client."""
        if self._client:
            await self._client.aclose()
            self._client = None

    async def _list_page(self, params: Dict[str, Any]) -> Dict[str, Any]:
        response = await self._client.get(self.config.table_url, params=params)
        if response.status_code >= 400:
            raise _parse_error(response)

        try:
            data = response.json()
        except ValueError:
            raise AirtableError(response.status_code, "INVALID_RESPONSE", "response body is not JSON")

        records = data.get("records", []) if isinstance(data, dict) else None
        if not isinstance(records, list) or not all(isinstance(r, dict) and r.get("id") for r in records):
            raise AirtableError(response.status_code, "INVALID_RESPONSE", "unexpected list records payload")
        return data

    async def select(
        self,
        filter_by_formula: Optional[str] = None,
        view: Optional[str] = None,
        cell_format: str = CELL_FORMAT,
        user_locale: str = USER_LOCALE,
        time_zone: str = TIME_ZONE,
        page_size: Optional[int] = None,
    ) -> List[AirtableRecord]:
        """
        List every record matching a formula, in the order Airtable returns them.

        Args:
            filter_by_formula: Airtable formula; only records where it is truthy are returned
            view: Optional view name or id to read from
            cell_format: "json" or "string"
            user_locale: Locale used to render values when cell_format is "string"
            time_zone: Timezone used to render dates when cell_format is "string"
            page_size: Records per request (Airtable caps this at 100)

        Returns:
            All matching records across pages

        Raises:
            AirtableError: Airtable returned a non-success status or a malformed body
            httpx.HTTPError: The request could not be completed
        """
        if self._client is None:
            raise RuntimeError("AirtableClient must be used as an async context manager")

        params: Dict[str, Any] = {"cellFormat": cell_format}
        if cell_format == "string":
            params["userLocale"] = user_locale
            params["timeZone"] = time_zone
        if filter_by_formula is not None:
            params["filterByFormula"] = filter_by_formula
        if view:
            params["view"] = view
        if page_size:
            params["pageSize"] = page_size

        records: List[AirtableRecord] = []
        pages = 0
        while True:
            data = await self._list_page(params)
            pages += 1
            records.extend(AirtableRecord.from_dict(r) for r in data.get("records", []))

            offset = data.get("offset")
            if not offset:
                break
            params["offset"] = offset

        logger.debug(f"Fetched {len(records)} records from {self.config.table_id} in {pages} page(s)")
        return records
