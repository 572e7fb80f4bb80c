"""
Ahrefs API Client

Async HTTP client for the keyword data provider with:
- Connection pooling
- Per-request timeout (a hung call fails instead of stalling a job)
- Graceful error translation to AhrefsError
- Request/response logging

No retries: a failed call is final for that call. Callers decide whether a
failure is fatal (bulk fetches) or best-effort (rank checks).
"""

import asyncio
import httpx
import logging
from datetime import date
from typing import Any, Dict, List, Optional, Sequence

logger = logging.getLogger(__name__)


ORGANIC_KEYWORD_FIELDS = "keyword,best_position,volume,keyword_difficulty,cpc"
MATCHING_TERM_FIELDS = "keyword,volume,difficulty,cpc"
SERP_FIELDS = "position,url"


class AhrefsError(Exception):
    """Custom exception for Ahrefs API errors."""
    def __init__(self, message: str, status_code: int = None, response: dict = None):
        super().__init__(message)
        self.status_code = status_code
        self.response = response


class AhrefsClient:
    """
    Async client for the Ahrefs v3 API.

    Usage:
        client = AhrefsClient(api_key="your_key")

        rows = await client.get_organic_keywords("xero.com", country="us", limit=100)

        await client.close()
    """

    BASE_URL = "https://api.ahrefs.com/v3"

    def __init__(
        self,
        api_key: str,
        max_connections: int = 20,
        timeout: float = 60.0,
    ):
        """
        Initialize Ahrefs client.

        Args:
            api_key: Ahrefs API key
            max_connections: Maximum concurrent connections
            timeout: Request timeout in seconds
        """
        self.api_key = api_key

        self._client = httpx.AsyncClient(
            base_url=self.BASE_URL,
            headers={
                "Authorization": f"Bearer {api_key}",
                "Accept": "application/json",
            },
            limits=httpx.Limits(
                max_connections=max_connections,
                max_keepalive_connections=max_connections // 2,
            ),
            timeout=httpx.Timeout(timeout),
        )

        self._closed = False

    async def get(self, endpoint: str, params: Dict[str, Any]) -> Dict[str, Any]:
        """
        Make GET request to the Ahrefs API.

        Args:
            endpoint: API endpoint path (e.g., "site-explorer/organic-keywords")
            params: Query parameters

        Returns:
            API response as dictionary

        Raises:
            AhrefsError: On transport or API error
        """
        if self._closed:
            raise AhrefsError("Client is closed")

        url = f"/{endpoint}"
        logger.debug(f"GET {url} {params}")

        try:
            response = await self._client.get(url, params=params)
        except httpx.TimeoutException as e:
            raise AhrefsError(f"Request timed out: {e}") from e
        except httpx.HTTPError as e:
            raise AhrefsError(f"HTTP error: {e}") from e

        if response.status_code != 200:
            body = None
            if response.content:
                try:
                    body = response.json()
                except ValueError:
                    body = {"raw": response.text}
            raise AhrefsError(
                f"API request failed: {response.status_code}",
                status_code=response.status_code,
                response=body,
            )

        try:
            return response.json()
        except ValueError as e:
            raise AhrefsError(f"Malformed API response: {e}") from e

    async def close(self):
        """Close the HTTP client."""
        if not self._closed:
            await self._client.aclose()
            self._closed = True

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

    # ========================================================================
    # KEYWORD DATA
    # ========================================================================

    async def get_organic_keywords(
        self,
        target: str,
        country: str,
        limit: int,
        request_date: Optional[date] = None,
    ) -> List[Dict[str, Any]]:
        """
        List the organic keywords a domain ranks for, highest volume first.

        Args:
            target: Domain to inspect (e.g. "xero.com")
            country: Two-letter country code
            limit: Maximum rows
            request_date: Snapshot date (defaults to today)

        Returns:
            List of keyword rows (keyword, best_position, volume, keyword_difficulty, cpc)
        """
        result = await self.get(
            "site-explorer/organic-keywords",
            {
                "target": target,
                "date": (request_date or date.today()).isoformat(),
                "select": ORGANIC_KEYWORD_FIELDS,
                "country": country,
                "limit": int(limit),
                "order_by": "volume:desc",
            },
        )
        return result.get("keywords") or []

    async def get_matching_terms(
        self,
        seeds: Sequence[str],
        country: str,
        limit: int,
    ) -> List[Dict[str, Any]]:
        """
        Expand seed terms into matching keywords in one batched call.

        Args:
            seeds: Seed phrases, sent comma-joined
            country: Two-letter country code
            limit: Maximum rows

        Returns:
            List of keyword rows (keyword, volume, difficulty, cpc)
        """
        if not seeds:
            return []

        result = await self.get(
            "keywords-explorer/matching-terms",
            {
                "keywords": ",".join(seeds),
                "country": country,
                "limit": int(limit),
                "select": MATCHING_TERM_FIELDS,
                "order_by": "volume:desc",
            },
        )
        return result.get("keywords") or []

    async def get_serp_overview(self, keyword: str, country: str) -> List[Dict[str, Any]]:
        """Ranked result URLs with positions for a single keyword."""
        result = await self.get(
            "serp-overview/serp-overview",
            {
                "keyword": keyword,
                "country": country,
                "select": SERP_FIELDS,
            },
        )
        return result.get("positions") or []

    async def find_domain_position(
        self,
        keyword: str,
        domain: str,
        country: str,
    ) -> Optional[int]:
        """
        Current position of `domain` in the SERP for `keyword`.

        Returns:
            First position whose URL contains the domain, None if absent

        Raises:
            AhrefsError: If the SERP lookup fails
        """
        for row in await self.get_serp_overview(keyword, country):
            url = row.get("url") or ""
            if domain in url:
                return row.get("position")
        return None


# ============================================================================
# TESTING
# ============================================================================

async def test_client():
    """Test the client with a simple request."""
    import os
    from dotenv import load_dotenv

    load_dotenv()

    api_key = os.getenv("AHREFS_API_KEY")
    if not api_key:
        print("Missing AHREFS_API_KEY")
        return

    async with AhrefsClient(api_key=api_key) as client:
        rows = await client.get_organic_keywords("xero.com", country="us", limit=5)
        print(f"Rows: {len(rows)}")
        for row in rows:
            print(row)


if __name__ == "__main__":
    asyncio.run(test_client())
