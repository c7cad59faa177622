"""GROQ queries issued against the content store."""
from enum import Enum

from ebook_library.models import ContentKind


class QueryTag(Enum):
    BOOKS = "books"
    BOOK = "book"
    POSTS = "posts"
    POST = "post"
    FEATURED_BOOKS = "featured_books"
    FEATURED_POSTS = "featured_posts"


_BOOK_FIELDS = """{
    _id,
    title,
    author,
    description,
    category,
    tags,
    coverImage,
    fileUrl,
    fileType,
    pages,
    publishedAt,
    featured,
    slug
  }"""

_POST_FIELDS = """{
    _id,
    title,
    slug,
    excerpt,
    mainImage,
    publishedAt,
    featured,
    author->{
      name,
      image
    },
    categories[]->{
      title
    }
  }"""

QUERIES = {
    QueryTag.BOOKS: f'*[_type == "book"] | order(publishedAt desc) {_BOOK_FIELDS}',
    QueryTag.BOOK: (
        '*[_type == "book" && slug.current == $slug][0] {\n'
        "    ...,\n"
        "    content\n"
        "  }"
    ),
    QueryTag.POSTS: f'*[_type == "post"] | order(publishedAt desc) {_POST_FIELDS}',
    QueryTag.POST: (
        '*[_type == "post" && slug.current == $slug][0] {\n'
        "    ...,\n"
        "    author->{\n"
        "      name,\n"
        "      image,\n"
        "      bio\n"
        "    },\n"
        "    categories[]->{\n"
        "      title\n"
        "    },\n"
        "    body\n"
        "  }"
    ),
    QueryTag.FEATURED_BOOKS: (
        f'*[_type == "book" && featured == true] | order(publishedAt desc)[0...6] {_BOOK_FIELDS}'
    ),
    QueryTag.FEATURED_POSTS: (
        f'*[_type == "post" && featured == true] | order(publishedAt desc)[0...6] {_POST_FIELDS}'
    ),
}

_KINDS = {
    QueryTag.BOOKS: ContentKind.BOOK,
    QueryTag.BOOK: ContentKind.BOOK,
    QueryTag.FEATURED_BOOKS: ContentKind.BOOK,
    QueryTag.POSTS: ContentKind.POST,
    QueryTag.POST: ContentKind.POST,
    QueryTag.FEATURED_POSTS: ContentKind.POST,
}


def query_for(tag: QueryTag) -> str:
    """GROQ text for a query tag."""
    return QUERIES[tag]


def kind_for(tag: QueryTag) -> ContentKind:
    """Content kind returned by a query tag."""
    return _KINDS[tag]


def is_single(tag: QueryTag) -> bool:
    """True for queries that select one document by slug."""
    return tag in (QueryTag.BOOK, QueryTag.POST)
