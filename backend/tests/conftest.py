"""Pytest fixtures: an in-memory Airtable behind ``httpx.MockTransport``."""
import copy
import itertools
import json
import re
from typing import Any, Optional

import httpx
import pytest
from fastapi.testclient import TestClient

from retreat_rsvp.main import app
from retreat_rsvp.services.airtable_client import AirtableClient, AirtableConfig
from retreat_rsvp.services.rsvp_session import SessionRegistry, TableNames, get_registry

BASE_ID = "appTEST"
PARTICIPATION_ID = "recPART1"
RETREAT_ID = "recRET1"

TABLES = TableNames(events="Retreat Sessions")

_RECORD_ID_FORMULA = re.compile(r'RECORD_ID\(\)="([^"]+)"')


class FakeAirtable:
    """Tables of ``{"id", "fields"}`` rows answering GET / PATCH / POST like Airtable does."""

    def __init__(self, page_size: Optional[int] = None):
        self.tables: dict[str, list[dict[str, Any]]] = {}
        self.requests: list[httpx.Request] = []
        self.failures: dict[tuple[str, str], int] = {}
        self.page_size = page_size
        self._ids = itertools.count(1)

    def seed(self, table: str, records: list[dict[str, Any]]) -> None:
        self.tables.setdefault(table, []).extend(copy.deepcopy(records))

    def fail(self, method: str, table: str, status_code: int = 500) -> None:
        self.failures[(method, table)] = status_code

    def calls(self, method: str, table: Optional[str] = None) -> list[httpx.Request]:
        return [
            r for r in self.requests
            if r.method == method and (table is None or self._split(r)[0] == table)
        ]

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)

    @staticmethod
    def _split(request: httpx.Request) -> tuple[str, Optional[str]]:
        # /v0/<base>/<table>[/<record id>]
        parts = request.url.path.split("/")
        return parts[3], parts[4] if len(parts) > 4 else None

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        table, record_id = self._split(request)

        if (request.method, table) in self.failures:
            return httpx.Response(self.failures[(request.method, table)], json={"error": "boom"})

        rows = self.tables.setdefault(table, [])

        if request.method == "GET":
            formula = request.url.params.get("filterByFormula")
            if formula:
                match = _RECORD_ID_FORMULA.search(formula)
                rows = [r for r in rows if match and r["id"] == match.group(1)]
            size = self.page_size or int(request.url.params.get("pageSize", 100))
            start = int(request.url.params.get("offset", 0))
            body: dict[str, Any] = {"records": copy.deepcopy(rows[start:start + size])}
            if start + size < len(rows):
                body["offset"] = str(start + size)
            return httpx.Response(200, json=body)

        fields = json.loads(request.content)["fields"]

        if request.method == "PATCH":
            row = next((r for r in rows if r["id"] == record_id), None)
            if row is None:
                return httpx.Response(404, json={"error": "NOT_FOUND"})
            row["fields"].update(fields)
            return httpx.Response(200, json=copy.deepcopy(row))

        if request.method == "POST":
            row = {"id": f"recNEW{next(self._ids)}", "fields": fields}
            rows.append(row)
            return httpx.Response(200, json=copy.deepcopy(row))

        return httpx.Response(405)


def seed_retreat(fake: FakeAirtable) -> None:
    """One participant at 'Spring Retreat' with a realistic mix of sessions."""
    fake.seed(TABLES.participation, [
        {"id": PARTICIPATION_ID, "fields": {
            "Full Name": "Ada Lovelace", "Email": "ada@example.com", "Retreat": [RETREAT_ID],
        }},
    ])
    fake.seed(TABLES.retreats, [
        {"id": RETREAT_ID, "fields": {"Name": "Spring Retreat", "Location": "Lisbon"}},
    ])
    fake.seed(TABLES.events, [
        {"id": "recYOGA", "fields": {
            "Event Name": "Morning Yoga", "Date": "2025-05-01", "Start Time": "08:00", "End Time": "09:00",
            "Event Type": "Wellness", "Capacity": 10, "Count": 3, "Retreat": [RETREAT_ID],
        }},
        {"id": "recWSA", "fields": {
            "Event Name": "Workshop A", "Date": "2025-05-02", "Start Time": "10:00",
            "Event Type": "Workshops", "Selection Type": "One Option", "Retreat": [RETREAT_ID],
        }},
        {"id": "recWSB", "fields": {
            "Event Name": "Workshop B", "Date": "2025-05-02", "Start Time": "14:00",
            "Event Type": "Workshops", "Selection Type": "One Option",
            "Capacity": 5, "Count": 5, "Retreat": [RETREAT_ID],
        }},
        {"id": "recOPEN", "fields": {
            "Event Name": "Open Seating", "Date": "2025-04-30", "Event Type": "Meals", "Retreat": [RETREAT_ID],
        }},
        {"id": "recCLOSE", "fields": {
            "Event Name": "Closing Circle", "Date": "2025-05-03", "Event Type": "Wellness",
            "Lock RSVP": True, "Retreat": [RETREAT_ID],
        }},
        {"id": "recOTHER", "fields": {
            "Event Name": "Elsewhere", "Date": "2025-05-01", "Retreat": ["recRET2"],
        }},
    ])
    fake.seed(TABLES.rsvps, [
        {"id": "recRSVP1", "fields": {
            "Event": ["recYOGA"], "Retreat Participation": [PARTICIPATION_ID], "RSVP Response": "Yes",
        }},
        {"id": "recRSVP2", "fields": {
            "Event": ["recYOGA"], "Retreat Participation": ["recPART2"], "RSVP Response": "No",
        }},
    ])


def make_registry(fake: FakeAirtable) -> SessionRegistry:
    config = AirtableConfig(api_key="keyTEST", base_id=BASE_ID)
    return SessionRegistry(AirtableClient(config, transport=fake.transport), TABLES)


@pytest.fixture(scope="function")
def airtable():
    """A fake Airtable seeded with one participant's retreat."""
    fake = FakeAirtable()
    seed_retreat(fake)
    return fake


@pytest.fixture(scope="function")
def registry(airtable):
    return make_registry(airtable)


@pytest.fixture(scope="function")
def client(registry):
    """FastAPI TestClient with the session registry overridden to use the fake Airtable."""
    app.dependency_overrides[get_registry] = lambda: registry
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()
