"""Async client for the Airtable REST API.

Only what the RSVP page needs: read whole tables (following the ``offset``
continuation token), read one row by record id, patch a row, create a row.
Configuration is handed over at construction time; nothing here reads the
environment.
"""
import logging
from dataclasses import dataclass
from typing import Any, Optional
from urllib.parse import quote

import httpx

from retreat_rsvp.config import Settings

logger = logging.getLogger(__name__)

Record = dict[str, Any]


class AirtableError(Exception):
    """A request to Airtable came back with a non-success status."""

    def __init__(self, table: str, status_code: int, message: str = ""):
        self.table = table
        self.status_code = status_code
        super().__init__(message or f"Airtable error {status_code} on table '{table}'")


@dataclass(frozen=True)
class AirtableConfig:
    api_key: str
    base_id: str
    api_url: str = "https://api.airtable.com/v0"
    page_size: int = 100
    timeout: float = 30.0

    @classmethod
    def from_settings(cls, settings: Settings) -> "AirtableConfig":
        return cls(
            api_key=settings.AIRTABLE_API_KEY,
            base_id=settings.AIRTABLE_BASE_ID,
            api_url=settings.AIRTABLE_API_URL,
            page_size=settings.AIRTABLE_PAGE_SIZE,
            timeout=settings.AIRTABLE_TIMEOUT_SECONDS,
        )


class AirtableClient:
    """Thin wrapper over ``httpx.AsyncClient`` for one Airtable base.

    ``transport`` lets callers swap the network layer (tests hand in an
    ``httpx.MockTransport``).
    """

    def __init__(self, config: AirtableConfig, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.config = config
        self._transport = transport

    def _table_url(self, table: str, record_id: Optional[str] = None) -> str:
        url = f"{self.config.api_url.rstrip('/')}/{self.config.base_id}/{quote(table, safe='')}"
        if record_id:
            url += f"/{record_id}"
        return url

    def _headers(self, write: bool = False) -> dict[str, str]:
        headers = {"Authorization": f"Bearer {self.config.api_key}"}
        if write:
            headers["Content-Type"] = "application/json"
        return headers

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(timeout=self.config.timeout, transport=self._transport)

    @staticmethod
    def _check(response: httpx.Response, table: str) -> None:
        if response.is_success:
            return
        logger.warning("Airtable %s %s -> HTTP %d", response.request.method, table, response.status_code)
        raise AirtableError(table, response.status_code)

    async def fetch_all(self, table: str, filter_formula: Optional[str] = None) -> list[Record]:
        """Return every record of ``table``, walking pages until no ``offset`` comes back."""
        records: list[Record] = []
        offset: Optional[str] = None
        pages = 0

        async with self._client() as client:
            while True:
                params: dict[str, Any] = {"pageSize": str(self.config.page_size)}
                if offset:
                    params["offset"] = offset
                if filter_formula:
                    params["filterByFormula"] = filter_formula

                response = await client.get(self._table_url(table), headers=self._headers(), params=params)
                self._check(response, table)
                data = response.json()
                records.extend(data.get("records") or [])
                pages += 1

                offset = data.get("offset")
                if not offset:
                    break

        logger.debug("Fetched %d records from '%s' in %d page(s)", len(records), table, pages)
        return records

    async def fetch_by_id(self, table: str, record_id: str) -> Optional[Record]:
        """Fetch a single row using a ``RECORD_ID()`` formula; ``None`` when absent."""
        async with self._client() as client:
            response = await client.get(
                self._table_url(table),
                headers=self._headers(),
                params={"filterByFormula": f'RECORD_ID()="{record_id}"'},
            )
        self._check(response, table)
        records = response.json().get("records") or []
        return records[0] if records else None

    async def update_record(self, table: str, record_id: str, fields: dict[str, Any]) -> Record:
        async with self._client() as client:
            response = await client.patch(
                self._table_url(table, record_id),
                headers=self._headers(write=True),
                json={"fields": fields},
            )
        self._check(response, table)
        return response.json()

    async def create_record(self, table: str, fields: dict[str, Any]) -> Record:
        async with self._client() as client:
            response = await client.post(
                self._table_url(table),
                headers=self._headers(write=True),
                json={"fields": fields},
            )
        self._check(response, table)
        return response.json()
