"""Data models for library content."""
from dataclasses import dataclass, replace
from datetime import datetime
from enum import Enum
from typing import Optional, Tuple, Union, Dict, Any


class ContentKind(Enum):
    """Kind of content item, keyed by its document type in the store."""
    BOOK = "book"
    POST = "post"


class Category(Enum):
    """Fixed set of category labels used across the library."""
    TECHNOLOGY = "technology"
    BUSINESS = "business"
    SCIENCE = "science"
    ARTS = "arts"
    EDUCATION = "education"
    HEALTH = "health"
    GENERAL = "general"

    @classmethod
    def lookup(cls, label: str) -> Optional["Category"]:
        """Find a category by label, ignoring case."""
        wanted = label.strip().lower()
        for category in cls:
            if category.value == wanted:
                return category
        return None


ALL_CATEGORIES = "All"

CATEGORY_CHOICES = [ALL_CATEGORIES] + [
    c.value.title() for c in Category if c is not Category.GENERAL
]


class SortKey(Enum):
    NEWEST = "newest"
    OLDEST = "oldest"
    TITLE = "title"
    AUTHOR = "author"


@dataclass(frozen=True)
class BookDetails:
    """Book-only display fields."""
    file_format: str = "PDF"
    pages: int = 0
    file_url: str = ""


@dataclass(frozen=True)
class PostDetails:
    """Post-only display fields."""
    excerpt: str
    read_time: str
    author_image_url: str


@dataclass(frozen=True)
class DisplayRecord:
    """Render-ready projection of a book or post.

    Every field is resolved; ``details`` carries the payload matching
    ``kind`` (BookDetails for books, PostDetails for posts).
    """
    id: str
    kind: ContentKind
    title: str
    author: str
    description: str
    category: str
    tags: Tuple[str, ...]
    published_at: datetime
    cover_url: str
    featured: bool
    slug: str
    details: Union[BookDetails, PostDetails]

    @property
    def tags_str(self) -> str:
        """Format tags as comma-separated string."""
        return ", ".join(self.tags) if self.tags else "None"

    @property
    def published_str(self) -> str:
        return self.published_at.strftime("%Y-%m-%d")

    @property
    def route(self) -> str:
        """Site path of the record's detail page."""
        if self.kind is ContentKind.BOOK:
            return f"/library/{self.slug}"
        if self.kind is ContentKind.POST:
            return f"/blog/{self.slug}"
        raise ValueError(f"Unknown content kind: {self.kind}")

    def to_dict(self) -> Dict[str, Any]:
        """Plain JSON-serializable representation."""
        data = {
            "id": self.id,
            "kind": self.kind.value,
            "title": self.title,
            "author": self.author,
            "description": self.description,
            "category": self.category,
            "tags": list(self.tags),
            "published_at": self.published_at.isoformat(),
            "cover_url": self.cover_url,
            "featured": self.featured,
            "slug": self.slug,
            "route": self.route,
        }
        if isinstance(self.details, BookDetails):
            data["format"] = self.details.file_format
            data["pages"] = self.details.pages
            data["file_url"] = self.details.file_url
        elif isinstance(self.details, PostDetails):
            data["excerpt"] = self.details.excerpt
            data["read_time"] = self.details.read_time
            data["author_image_url"] = self.details.author_image_url
        return data


@dataclass
class QueryState:
    """Current search text, category and sort selection of a listing."""
    search: str = ""
    category: str = ALL_CATEGORIES
    sort: str = SortKey.NEWEST.value

    def reset(self) -> "QueryState":
        """Clear search and category, keeping the sort order."""
        return replace(self, search="", category=ALL_CATEGORIES)
