"""Async HTTP client for the content store query API."""
import asyncio
import httpx
from typing import Iterable, List, Optional, Dict, Any
import logging

from ebook_library.client import FAILED, build_query_url, build_params, unwrap_result
from ebook_library.queries import QueryTag, is_single

logger = logging.getLogger(__name__)


class CancellationToken:
    """Marks a pending fetch as unwanted; its result is discarded on arrival."""

    def __init__(self):
        self._cancelled = False

    def cancel(self):
        self._cancelled = True

    @property
    def cancelled(self) -> bool:
        return self._cancelled


class AsyncContentStoreClient:
    """Async client for the content store."""

    def __init__(
        self,
        project_id: str,
        dataset: str = "production",
        api_version: str = "2023-05-03",
        token: Optional[str] = None,
        use_cdn: bool = True,
        timeout: int = 10,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        """
        Initialize async client.

        Args:
            project_id: Store project identifier
            dataset: Dataset name
            api_version: Dated API version
            token: Optional read token (disables the CDN)
            use_cdn: Read through the edge cache
            timeout: Request timeout
            transport: Optional httpx transport (tests)
        """
        self.url = build_query_url(project_id, dataset, api_version, use_cdn and not token)
        self.timeout = timeout

        headers = {"Authorization": f"Bearer {token}"} if token else None

        # Create async HTTP client
        self.client = httpx.AsyncClient(timeout=timeout, headers=headers, transport=transport)

    async def fetch_list(
        self,
        tag: QueryTag,
        cancel_token: Optional[CancellationToken] = None
    ) -> List[Dict[str, Any]]:
        """
        Fetch a list of raw documents asynchronously.

        Args:
            tag: List query to run
            cancel_token: Optional token; a cancelled fetch yields []

        Returns:
            Documents in store order, or an empty list on failure or cancellation
        """
        if is_single(tag):
            raise ValueError(f"{tag.value} selects a single document, use fetch_one")

        result = await self._query(tag, None, cancel_token)
        if result is FAILED or result is None:
            return []
        if not isinstance(result, list):
            logger.error(f"Unexpected result for {tag.value}: {type(result).__name__}")
            return []
        return result

    async def fetch_one(
        self,
        tag: QueryTag,
        slug: str,
        cancel_token: Optional[CancellationToken] = None
    ) -> Optional[Dict[str, Any]]:
        """
        Fetch one raw document by slug asynchronously.

        Returns:
            The document, or None when absent, failed or cancelled
        """
        if not is_single(tag):
            raise ValueError(f"{tag.value} is a list query, use fetch_list")

        result = await self._query(tag, {"slug": slug}, cancel_token)
        if result is FAILED:
            return None
        if result is None:
            logger.info(f"No {tag.value} found for slug '{slug}'")
            return None
        if not isinstance(result, dict):
            logger.error(f"Unexpected result for {tag.value}: {type(result).__name__}")
            return None
        return result

    async def fetch_many(self, tags: Iterable[QueryTag]) -> Dict[QueryTag, List[Dict[str, Any]]]:
        """
        Run several list queries in parallel.

        Args:
            tags: List queries to run

        Returns:
            Mapping of tag to its documents
        """
        tags = list(tags)
        results = await asyncio.gather(*(self.fetch_list(tag) for tag in tags))
        return dict(zip(tags, results))

    async def _query(
        self,
        tag: QueryTag,
        params: Optional[Dict[str, Any]],
        cancel_token: Optional[CancellationToken]
    ) -> Any:
        if cancel_token is not None and cancel_token.cancelled:
            logger.debug(f"Skipping cancelled fetch: {tag.value}")
            return FAILED

        try:
            logger.debug(f"Async request: {tag.value}")
            response = await self.client.get(self.url, params=build_params(tag, params))

            if response.status_code != 200:
                logger.error(f"Query {tag.value} failed ({response.status_code}): {response.text[:200]}")
                return FAILED

            result = unwrap_result(response.json(), tag)

        except httpx.HTTPError as e:
            logger.error(f"Async request failed for {tag.value}: {e}")
            return FAILED
        except ValueError as e:
            logger.error(f"Malformed response for {tag.value}: {e}")
            return FAILED

        if cancel_token is not None and cancel_token.cancelled:
            logger.debug(f"Discarding result of cancelled fetch: {tag.value}")
            return FAILED
        return result

    async def close(self):
        """Close the HTTP client."""
        await self.client.aclose()

    async def __aenter__(self):
        """Async context manager entry."""
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Async context manager exit."""
        await self.close()
