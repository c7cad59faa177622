"""HTTP client for the content store query API."""
import json
import requests
from typing import Optional, Dict, Any, List
import logging

from ebook_library.queries import QueryTag, query_for, is_single

logger = logging.getLogger(__name__)

# Returned by a query that failed, as opposed to a null result
FAILED = object()


def build_query_url(project_id: str, dataset: str, api_version: str, use_cdn: bool = True) -> str:
    """Build the GROQ query endpoint URL."""
    domain = "apicdn.sanity.io" if use_cdn else "api.sanity.io"
    return f"https://{project_id}.{domain}/v{api_version}/data/query/{dataset}"


def unwrap_result(body: Any, tag: QueryTag) -> Any:
    """Return the ``result`` member of a response body, or FAILED if it has none."""
    if not isinstance(body, dict) or "result" not in body:
        logger.error(f"Response for {tag.value} has no result member")
        return FAILED
    return body["result"]


def build_params(tag: QueryTag, params: Optional[Dict[str, Any]] = None) -> Dict[str, str]:
    """
    Encode a query and its parameters for the query endpoint.

    Query parameters are sent as ``$name`` with JSON-encoded values.
    """
    encoded = {"query": query_for(tag)}
    for name, value in (params or {}).items():
        encoded[f"${name}"] = json.dumps(value)
    return encoded


class ContentStoreClient:
    """Client for the content store. One round trip per call, no caching."""

    def __init__(
        self,
        project_id: str,
        dataset: str = "production",
        api_version: str = "2023-05-03",
        token: Optional[str] = None,
        use_cdn: bool = True,
        timeout: int = 10
    ):
        """
        Initialize content store client.

        Args:
            project_id: Store project identifier
            dataset: Dataset name
            api_version: Dated API version
            token: Optional read token (disables the CDN)
            use_cdn: Read through the edge cache
            timeout: Request timeout in seconds
        """
        self.project_id = project_id
        self.dataset = dataset
        self.timeout = timeout
        # Authenticated reads go to the live API
        self.url = build_query_url(project_id, dataset, api_version, use_cdn and not token)

        self.session = requests.Session()
        if token:
            self.session.headers["Authorization"] = f"Bearer {token}"

    def fetch_list(self, tag: QueryTag) -> List[Dict[str, Any]]:
        """
        Fetch a list of raw documents.

        Args:
            tag: List query to run

        Returns:
            Documents in store order, or an empty list on any failure
        """
        if is_single(tag):
            raise ValueError(f"{tag.value} selects a single document, use fetch_one")

        result = self._query(tag)
        if result is FAILED or result is None:
            return []
        if not isinstance(result, list):
            logger.error(f"Unexpected result for {tag.value}: {type(result).__name__}")
            return []

        logger.info(f"Fetched {len(result)} documents for {tag.value}")
        return result

    def fetch_one(self, tag: QueryTag, slug: str) -> Optional[Dict[str, Any]]:
        """
        Fetch a single raw document by slug.

        Args:
            tag: Single-document query to run
            slug: Slug of the document

        Returns:
            The document, or None when nothing matches or the request failed
        """
        if not is_single(tag):
            raise ValueError(f"{tag.value} is a list query, use fetch_list")

        result = self._query(tag, {"slug": slug})
        if result is FAILED:
            return None
        if result is None:
            logger.info(f"No {tag.value} found for slug '{slug}'")
            return None
        if not isinstance(result, dict):
            logger.error(f"Unexpected result for {tag.value}: {type(result).__name__}")
            return None
        return result

    def _query(self, tag: QueryTag, params: Optional[Dict[str, Any]] = None) -> Any:
        """
        Run one query and unwrap its result.

        Returns:
            The ``result`` member of the response, or FAILED
        """
        try:
            logger.debug(f"Request: {tag.value} -> {self.url}")

            response = self.session.get(
                self.url,
                params=build_params(tag, params),
                timeout=self.timeout
            )

            if response.status_code != 200:
                logger.error(f"Query {tag.value} failed ({response.status_code}): {response.text[:200]}")
                return FAILED

            return unwrap_result(response.json(), tag)

        except requests.exceptions.Timeout:
            logger.error(f"Timeout running {tag.value}")
        except requests.exceptions.RequestException as e:
            logger.error(f"Request error running {tag.value}: {e}")
        except ValueError as e:
            logger.error(f"Malformed response for {tag.value}: {e}")
        return FAILED

    def close(self):
        """Close the session."""
        self.session.close()

    def __enter__(self):
        """Context manager entry."""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit."""
        self.close()
