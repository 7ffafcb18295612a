"""
Pytest configuration and shared fixtures.

Key fixtures:
- companies_csv / problems_csv / links_csv: Small consistent spreadsheet tabs
- sheet_transport: Factory for an httpx.MockTransport serving tabs by name
- make_fetcher: Factory for a SheetFetcher backed by sheet_transport

No network access is needed; every HTTP call goes through MockTransport.
"""

import sys
from collections.abc import Callable
from pathlib import Path

import httpx
import pytest
import structlog

# Add src to path for imports
src_path = Path(__file__).parent.parent / 'src'
sys.path.insert(0, str(src_path))

from sheet_catalog.fetcher import SheetFetcher

SHEET_ID = 'test-sheet-123'

Tab = str | tuple[int, str]


@pytest.fixture(autouse=True)
def reset_structlog():
    """configure_logging() binds the current stderr; undo it after each test."""
    yield
    structlog.reset_defaults()


@pytest.fixture
def companies_csv() -> str:
    return (
        'Company ID,Company Name,Website,Location,Target,Org Types\n'
        'c1,Acme,https://acme.example,"Austin, TX",Clinics,Clinic | Nonprofit\n'
        'c2,Globex,https://globex.example,Denver,Hospitals,Hospital\n'
        'c3,Initech,,Remote,,\n'
    )


@pytest.fixture
def problems_csv() -> str:
    return (
        'Problem,Solution,Feature\n'
        'Slow onboarding,Add checklist,Checklist tool\n'
        '"Missed follow-ups, lost leads",Automate reminders,Reminder engine\n'
        '"Billing is ""hard""",Unified invoices,Billing hub\n'
    )


@pytest.fixture
def links_csv() -> str:
    return (
        'Company ID,Company Name,Problem\n'
        'c1,Acme,slow onboarding\n'
        'c1,Acme,Slow Onboarding!\n'
        'c1,Acme,"Missed follow-ups, lost leads"\n'
        'c2,Globex,Billing is “hard”\n'
        'c9,Umbrella,Slow onboarding\n'
        'c3,Initech,Unknown problem\n'
    )


@pytest.fixture
def sheet_transport() -> Callable[[dict[str, Tab]], httpx.MockTransport]:
    """
    Build a MockTransport from {tab name: csv text or (status, body)}.

    Unknown tab names return 404. Requested tab names are recorded on
    transport.requested.
    """

    def factory(tabs: dict[str, Tab]) -> httpx.MockTransport:
        requested: list[str] = []

        def handler(request: httpx.Request) -> httpx.Response:
            name = request.url.params.get('sheet', '')
            requested.append(name)
            tab = tabs.get(name)
            if tab is None:
                return httpx.Response(404, text='not found')
            if isinstance(tab, tuple):
                status, body = tab
                return httpx.Response(status, text=body)
            return httpx.Response(200, text=tab)

        transport = httpx.MockTransport(handler)
        transport.requested = requested
        return transport

    return factory


@pytest.fixture
def make_fetcher(sheet_transport) -> Callable[..., SheetFetcher]:
    """Factory for a SheetFetcher whose client serves the given tabs."""

    def factory(tabs: dict[str, Tab], **kwargs) -> SheetFetcher:
        client = httpx.AsyncClient(transport=sheet_transport(tabs))
        return SheetFetcher(SHEET_ID, client=client, **kwargs)

    return factory
