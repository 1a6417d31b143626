"""
Review Fetcher component.

Retrieves the current reviews of a pull request from the GitHub REST API.
"""

import time
from typing import Dict, List, Optional, Tuple

import httpx
from pydantic import ValidationError

from review_notifier.errors import UpstreamFetchFailed
from review_notifier.models.pull_request import Review
from review_notifier.utils.logging import get_logger, log_api_call
from review_notifier.utils.resilience import retry_with_backoff


logger = get_logger(__name__)

# GitHub caps per_page at 100
REVIEWS_PER_PAGE = 100


class ReviewFetcher:
    """Reads reviews from ``{pull_request.url}/reviews``."""

    def __init__(
        self,
        token: Optional[str] = None,
        user_agent: str = "review-notifier",
        max_retries: int = 3,
        retry_delay: float = 1.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize the fetcher.

        Args:
            token: Optional GitHub token, sent as a bearer token
            user_agent: User-Agent header, required by the GitHub API
            max_retries: Maximum number of attempts on transport errors
            retry_delay: Base delay in seconds for exponential backoff
            transport: Optional httpx transport (tests use httpx.MockTransport)
        """
        self._token = token
        self._user_agent = user_agent
        self._max_retries = max_retries
        self._retry_delay = retry_delay
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    async def initialize(self) -> None:
        """Open the underlying HTTP client."""
        if self._client is not None:
            return

        headers = {
            "Accept": "application/vnd.github+json",
            "User-Agent": self._user_agent,
        }
        if self._token:
            headers["Authorization"] = f"Bearer {self._token}"

        self._client = httpx.AsyncClient(headers=headers, transport=self._transport)

    async def close(self) -> None:
        """Close the underlying HTTP client."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def fetch_reviews(self, pull_request_api_url: str) -> List[Review]:
        """
        Fetch all reviews of a pull request, following pagination.

        Args:
            pull_request_api_url: API url of the pull request

        Returns:
            Reviews in the order returned by GitHub

        Raises:
            UpstreamFetchFailed: On network error, non-success status or
                malformed response on any page
        """
        await self.initialize()

        url: Optional[str] = f"{pull_request_api_url.rstrip('/')}/reviews"
        params: Optional[Dict[str, int]] = {"per_page": REVIEWS_PER_PAGE}
        reviews: List[Review] = []

        while url:
            page, url = await self._fetch_page(url, params)
            reviews.extend(page)
            # The next link already carries the query string
            params = None

        return reviews

    async def _fetch_page(
        self,
        url: str,
        params: Optional[Dict[str, int]]
    ) -> Tuple[List[Review], Optional[str]]:
        """Fetch one page of reviews and the url of the next page, if any."""
        start_time = time.time()

        get = retry_with_backoff(
            max_retries=self._max_retries,
            base_delay=self._retry_delay,
            exceptions=(httpx.TransportError,)
        )(self._client.get)

        try:
            response = await get(url, params=params)
        except httpx.HTTPError as e:
            log_api_call(logger, service="github", endpoint=url, method="GET", error=str(e))
            raise UpstreamFetchFailed(f"Failed to fetch reviews from {url}: {e}") from e

        duration_ms = (time.time() - start_time) * 1000

        if not response.is_success:
            log_api_call(
                logger,
                service="github",
                endpoint=url,
                method="GET",
                status_code=response.status_code,
                duration_ms=duration_ms,
                error=f"HTTP {response.status_code}"
            )
            raise UpstreamFetchFailed(f"GitHub returned {response.status_code} for {url}")

        log_api_call(
            logger,
            service="github",
            endpoint=url,
            method="GET",
            status_code=response.status_code,
            duration_ms=duration_ms
        )

        try:
            payload = response.json()
        except ValueError as e:
            raise UpstreamFetchFailed(f"Malformed reviews response from {url}: {e}") from e

        if not isinstance(payload, list):
            raise UpstreamFetchFailed(f"Expected a list of reviews from {url}")

        try:
            page = [Review.model_validate(item) for item in payload]
        except ValidationError as e:
            raise UpstreamFetchFailed(f"Malformed review record from {url}: {e}") from e

        next_url = response.links.get("next", {}).get("url")
        return page, next_url
