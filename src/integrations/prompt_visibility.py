"""
Prompt Visibility Client

Looks up real prompts people send to AI assistants, filtered by category,
date range and a substring. Used by the geo-insights endpoint.

Key gated: without an API key the client never makes a request and every
search returns an empty list.
"""

import logging
from datetime import date, timedelta
from typing import Any, Dict, List, Optional

import httpx

logger = logging.getLogger(__name__)


class PromptVisibilityError(Exception):
    """Custom exception for prompt visibility API errors."""

    def __init__(self, message: str, status_code: int = None, response: dict = None):
        super().__init__(message)
        self.status_code = status_code
        self.response = response


class PromptVisibilityClient:
    """
    Async client for the prompt visibility API.

    Usage:
        client = PromptVisibilityClient(api_key="your_key", base_url="https://...")

        prompts = await client.search_prompts("business software", contains="payroll")

        await client.close()
    """

    DEFAULT_CATEGORY = "business software"
    LOOKBACK_DAYS = 30

    def __init__(
        self,
        api_key: Optional[str],
        base_url: str,
        timeout: float = 30.0,
    ):
        """
        Initialize prompt visibility client.

        Args:
            api_key: API key; None disables the client
            base_url: API base URL
            timeout: Request timeout in seconds
        """
        self.api_key = api_key
        self._client: Optional[httpx.AsyncClient] = None
        if api_key:
            self._client = httpx.AsyncClient(
                base_url=base_url,
                headers={
                    "Authorization": f"Bearer {api_key}",
                    "Accept": "application/json",
                },
                timeout=httpx.Timeout(timeout),
            )

    @property
    def enabled(self) -> bool:
        return self._client is not None

    async def search_prompts(
        self,
        category: str = DEFAULT_CATEGORY,
        contains: str = "",
        date_from: Optional[date] = None,
        date_to: Optional[date] = None,
        limit: int = 20,
    ) -> List[str]:
        """
        Search prompts in a category and date range containing a substring.

        Args:
            category: Prompt category
            contains: Substring the prompt must contain
            date_from: Start of range (defaults to 30 days ago)
            date_to: End of range (defaults to today)
            limit: Maximum prompts

        Returns:
            Prompt strings; empty when the client is disabled

        Raises:
            PromptVisibilityError: On transport or API error
        """
        if not self.enabled:
            return []

        date_to = date_to or date.today()
        date_from = date_from or (date_to - timedelta(days=self.LOOKBACK_DAYS))

        params = {
            "category": category,
            "date_from": date_from.isoformat(),
            "date_to": date_to.isoformat(),
            "contains": contains,
            "limit": limit,
        }

        try:
            response = await self._client.get("/prompts", params=params)
        except httpx.HTTPError as e:
            raise PromptVisibilityError(f"HTTP error: {e}") from e

        if response.status_code != 200:
            raise PromptVisibilityError(
                f"API request failed: {response.status_code}",
                status_code=response.status_code,
            )

        try:
            data: Dict[str, Any] = response.json()
        except ValueError as e:
            raise PromptVisibilityError(f"Malformed API response: {e}") from e

        return self._extract_prompts(data)

    @staticmethod
    def _extract_prompts(data: Dict[str, Any]) -> List[str]:
        prompts = []
        for item in data.get("prompts") or []:
            text = item.get("prompt") if isinstance(item, dict) else item
            if isinstance(text, str) and text.strip():
                prompts.append(text.strip())
        return prompts

    async def close(self):
        """Close the HTTP client."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None
