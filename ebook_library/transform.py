"""Transform raw store documents into display records."""
import hashlib
import logging
import math
import re
from datetime import datetime, timezone
from typing import Dict, Any, Iterable, List, Optional

from ebook_library.assets import AssetUrlResolver
from ebook_library.config import Config
from ebook_library.models import (
    BookDetails,
    Category,
    ContentKind,
    DisplayRecord,
    PostDetails,
)

logger = logging.getLogger(__name__)

DEFAULT_CATEGORY = "General"
DEFAULT_BOOK_TITLE = "Untitled"
DEFAULT_POST_TITLE = "Untitled Article"
DEFAULT_EXCERPT = "No excerpt available."
DEFAULT_FORMAT = "PDF"
WORDS_PER_MINUTE_CHARS = 200


def slugify(text: str) -> str:
    """Lower-case, URL-safe form of a title."""
    slug = re.sub(r"[^a-z0-9]+", "-", text.lower()).strip("-")
    return slug[:96]


def title_digest(title: str) -> str:
    """Stable id for titles with no URL-safe characters."""
    return "doc-" + hashlib.sha1(title.encode("utf-8")).hexdigest()[:12]


def parse_timestamp(value: Any) -> Optional[datetime]:
    """Parse an ISO 8601 timestamp or date into an aware datetime."""
    if not isinstance(value, str) or not value.strip():
        return None
    try:
        parsed = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def read_time(excerpt: Optional[str]) -> str:
    """Estimated read time label for a post."""
    length = len(excerpt) if excerpt else 300
    return f"{max(1, math.ceil(length / WORDS_PER_MINUTE_CHARS))} min read"


def _text(value: Any) -> Optional[str]:
    if isinstance(value, str) and value.strip():
        return value.strip()
    return None


def _mapping(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _string_list(value: Any) -> List[str]:
    if not isinstance(value, list):
        return []
    return [item.strip() for item in value if isinstance(item, str) and item.strip()]


class Transformer:
    """Maps raw documents to DisplayRecords, substituting defaults."""

    def __init__(
        self,
        resolver: AssetUrlResolver,
        config: Optional[Config] = None,
        now: Optional[datetime] = None
    ):
        """
        Args:
            resolver: Image reference to URL resolver
            config: Placeholder URLs and fallback labels
            now: Fallback publish time for undated documents
                (time of construction when omitted)
        """
        self.resolver = resolver
        self.config = config or Config()
        self.now = now or datetime.now(timezone.utc)

    def to_records(self, raws: Iterable[Dict[str, Any]], kind: ContentKind) -> List[DisplayRecord]:
        """
        Transform a sequence of raw documents.

        Args:
            raws: Raw documents from the store
            kind: Kind of content the documents describe

        Returns:
            New list of DisplayRecords in input order
        """
        return [self.to_record(raw, kind) for raw in raws]

    def to_record(self, raw: Dict[str, Any], kind: ContentKind) -> DisplayRecord:
        """Transform one raw document of the given kind."""
        raw = _mapping(raw)
        if kind is ContentKind.BOOK:
            return self._book(raw)
        if kind is ContentKind.POST:
            return self._post(raw)
        raise ValueError(f"Unknown content kind: {kind}")

    def _book(self, raw: Dict[str, Any]) -> DisplayRecord:
        title = _text(raw.get("title")) or DEFAULT_BOOK_TITLE
        doc_id, slug = self._identity(raw, title)

        cover_url = self.resolver.url_for(raw.get("coverImage")) or self.config.PLACEHOLDER_COVER_URL

        pages = raw.get("pages")
        if isinstance(pages, bool) or not isinstance(pages, int) or pages < 0:
            pages = 0

        details = BookDetails(
            file_format=(_text(raw.get("fileType")) or DEFAULT_FORMAT).upper(),
            pages=pages,
            file_url=_text(raw.get("fileUrl")) or "",
        )

        return DisplayRecord(
            id=doc_id,
            kind=ContentKind.BOOK,
            title=title,
            author=_text(raw.get("author")) or self.config.FALLBACK_AUTHOR,
            description=_text(raw.get("description")) or "",
            category=self._category(raw.get("category"), doc_id),
            tags=tuple(_string_list(raw.get("tags"))),
            published_at=self._published(raw.get("publishedAt"), doc_id),
            cover_url=cover_url,
            featured=raw.get("featured") is True,
            slug=slug,
            details=details,
        )

    def _post(self, raw: Dict[str, Any]) -> DisplayRecord:
        title = _text(raw.get("title")) or DEFAULT_POST_TITLE
        doc_id, slug = self._identity(raw, title)

        # Present-but-partial author references resolve per field
        author = _mapping(raw.get("author"))
        author_image = (
            self.resolver.url_for(author.get("image"), width=64, height=64)
            or self.config.PLACEHOLDER_AVATAR_URL
        )

        category_titles = []
        categories = raw.get("categories")
        if isinstance(categories, list):
            for ref in categories:
                name = _text(_mapping(ref).get("title"))
                if name:
                    category_titles.append(name)

        excerpt = _text(raw.get("excerpt"))
        cover_url = self.resolver.url_for(raw.get("mainImage")) or self.config.PLACEHOLDER_POST_COVER_URL

        details = PostDetails(
            excerpt=excerpt or DEFAULT_EXCERPT,
            read_time=read_time(excerpt),
            author_image_url=author_image,
        )

        return DisplayRecord(
            id=doc_id,
            kind=ContentKind.POST,
            title=title,
            author=_text(author.get("name")) or self.config.FALLBACK_AUTHOR,
            description=excerpt or DEFAULT_EXCERPT,
            category=category_titles[0] if category_titles else DEFAULT_CATEGORY,
            tags=tuple(category_titles),
            published_at=self._published(raw.get("publishedAt"), doc_id),
            cover_url=cover_url,
            featured=raw.get("featured") is True,
            slug=slug,
            details=details,
        )

    def _identity(self, raw: Dict[str, Any], title: str):
        """Resolve (id, slug); the id stands in for a missing slug."""
        slug = _text(_mapping(raw.get("slug")).get("current"))
        if slug is None:
            slug = _text(raw.get("slug"))

        doc_id = _text(raw.get("_id"))
        if doc_id is None:
            doc_id = slug or slugify(title) or title_digest(title)
            logger.warning(f"Document without _id, using '{doc_id}'")

        return doc_id, slug or doc_id

    def _category(self, value: Any, doc_id: str) -> str:
        label = _text(value)
        if label is None:
            return DEFAULT_CATEGORY
        if Category.lookup(label) is None:
            logger.warning(f"Unknown category '{label}' on {doc_id}")
        return label

    def _published(self, value: Any, doc_id: str) -> datetime:
        parsed = parse_timestamp(value)
        if parsed is not None:
            return parsed
        if value is not None:
            logger.warning(f"Unparsable publishedAt {value!r} on {doc_id}")
        return self.now
