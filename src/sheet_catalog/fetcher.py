"""HTTP loader for spreadsheet tabs exported as CSV."""

import asyncio
from collections.abc import Sequence
from urllib.parse import quote

import httpx

from .config import DEFAULT_CSV_URL_TEMPLATE, Settings
from .csv_parser import parse_csv
from .errors import EmptyTableError, FetchError, MalformedTableError
from .logging import get_logger, logging_context

logger = get_logger(__name__)


def csv_url(sheet_id: str, table: str, template: str = DEFAULT_CSV_URL_TEMPLATE) -> str:
    """Build the CSV export URL for one tab of a spreadsheet."""
    return template.format(sheet_id=quote(sheet_id, safe=''), sheet=quote(table, safe=''))


class SheetFetcher:
    """
    Loads named tabs of one spreadsheet as parsed CSV rows.

    No retries: a failed fetch aborts the run and the next scheduled run
    starts from scratch.

    Usage:
        async with SheetFetcher(sheet_id) as fetcher:
            companies, problems = await fetcher.load_tables(["Companies", "Problems"])
    """

    def __init__(
        self,
        sheet_id: str,
        url_template: str = DEFAULT_CSV_URL_TEMPLATE,
        timeout: float = 30,
        allow_empty: bool = False,
        client: httpx.AsyncClient | None = None,
    ):
        """
        Initialize the fetcher.

        Args:
            sheet_id: Spreadsheet identifier substituted into url_template
            url_template: Template with {sheet_id} and {sheet} placeholders
            timeout: Per-request timeout in seconds
            allow_empty: Return [] for empty tabs instead of raising EmptyTableError
            client: Pre-built client (mainly for tests); not closed by close()
        """
        self.sheet_id = sheet_id
        self.url_template = url_template
        self.timeout = timeout
        self.allow_empty = allow_empty
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(timeout=timeout, follow_redirects=True)

    @classmethod
    def from_settings(cls, settings: Settings) -> 'SheetFetcher':
        return cls(
            sheet_id=settings.SHEET_ID,
            url_template=settings.SHEET_CSV_URL_TEMPLATE,
            timeout=settings.HTTP_TIMEOUT_SECONDS,
            allow_empty=settings.ALLOW_EMPTY_TABLES,
        )

    async def close(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def __aenter__(self) -> 'SheetFetcher':
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()

    def url_for(self, table: str) -> str:
        return csv_url(self.sheet_id, table, self.url_template)

    async def fetch_text(self, table: str) -> str:
        """
        Fetch one tab as raw CSV text.

        Raises:
            FetchError: On a non-2xx response, timeout, redirect loop or transport failure
        """
        url = self.url_for(table)
        try:
            response = await self._client.get(url, headers={'Cache-Control': 'no-cache'})
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            status = e.response.status_code
            raise FetchError(
                f'Failed to load sheet "{table}" ({status})',
                status_code=status,
                context={'table': table},
            ) from e
        except httpx.TimeoutException as e:
            raise FetchError(
                f'Timed out loading sheet "{table}" after {self.timeout}s',
                context={'table': table},
            ) from e
        except httpx.RequestError as e:
            raise FetchError(
                f'Failed to load sheet "{table}": {type(e).__name__}: {e}',
                context={'table': table},
            ) from e
        return response.text

    async def load_table(self, table: str) -> list[dict[str, str]]:
        """
        Fetch and parse one tab.

        Raises:
            FetchError: If the fetch fails
            MalformedTableError: If the body is not parseable CSV
            EmptyTableError: If the tab parses to zero rows and allow_empty is False
        """
        with logging_context(table=table):
            text = await self.fetch_text(table)
            try:
                rows = parse_csv(text)
            except MalformedTableError as e:
                raise MalformedTableError(
                    f'Sheet "{table}" is not valid CSV: {e.message}',
                    context={'table': table, **e.context},
                ) from e

            if not rows:
                if not self.allow_empty:
                    raise EmptyTableError(
                        f'Sheet "{table}" returned 0 rows (check sharing + sheet name).',
                        context={'table': table},
                    )
                logger.warning('fetch.empty_table')
                return []

            logger.info('fetch.table_loaded', rows=len(rows), columns=list(rows[0].keys()))
            return rows

    async def load_tables(self, tables: Sequence[str]) -> list[list[dict[str, str]]]:
        """
        Load several tabs concurrently.

        All fetches complete before this returns; the first failure propagates.

        Returns:
            Parsed rows per tab, in the order of ``tables``
        """
        return list(await asyncio.gather(*(self.load_table(t) for t in tables)))
