# ==============================================
# DebtApiSource
# ==============================================
#
# PURPOSE:
#   Read debt records from an HTTP JSON endpoint instead of MySQL.
#
# PROTOCOL:
#   GET {url}?offset=N&limit=M  →  either a JSON list of records or
#   an object {"records": [...]}. Paging stops at the first page
#   shorter than `limit`.
#
# ERRORS:
#   HTTP / connection failures are raised as-is; the engine turns
#   them into SourceError and aborts the run. No retries here.
#
# ==============================================

from typing import Iterator, Optional

import requests

from collection_strategy.normalization.debt_record import DebtRecord


class DebtApiSource:
    """Iterable over debt records served page by page by an HTTP API."""

    def __init__(self, url: str, page_size: int = 500, timeout: float = 10.0, session: Optional[requests.Session] = None):
        """
        Args:
            url: Endpoint returning debt records as JSON
            page_size: Records requested per page
            timeout: Per-request timeout in seconds
            session: Optional requests.Session (connection reuse / auth)
        """
        self.url = url
        self.page_size = page_size
        self.timeout = timeout
        self._http = session or requests

    def __iter__(self) -> Iterator[DebtRecord]:
        offset = 0
        while True:
            page = self._fetch_page(offset)
            for row in page:
                yield DebtRecord.from_mapping(row)
            if len(page) < self.page_size:
                break
            offset += len(page)

    def _fetch_page(self, offset: int) -> list:
        response = self._http.get(
            self.url,
            params={"offset": offset, "limit": self.page_size},
            timeout=self.timeout
        )
        response.raise_for_status()
        payload = response.json()
        if isinstance(payload, dict):
            payload = payload.get("records", [])
        if not isinstance(payload, list):
            raise ValueError(f"Unexpected payload from {self.url}: {type(payload).__name__}")
        return payload
