"""In-memory search, category filter and sort over display records."""
from typing import List, Sequence, Tuple, Union

from ebook_library.models import ALL_CATEGORIES, DisplayRecord, QueryState, SortKey


def matches_search(record: DisplayRecord, term: str) -> bool:
    """Case-insensitive substring match on title, author or any tag."""
    if not term:
        return True
    needle = term.lower()
    if needle in record.title.lower() or needle in record.author.lower():
        return True
    return any(needle in tag.lower() for tag in record.tags)


def matches_category(record: DisplayRecord, category: str) -> bool:
    """Exact, case-insensitive category match; "All" matches everything."""
    if category == ALL_CATEGORIES:
        return True
    return record.category.lower() == category.lower()


def filter_records(
    records: Sequence[DisplayRecord],
    search: str = "",
    category: str = ALL_CATEGORIES
) -> List[DisplayRecord]:
    """
    Keep records passing both the search and the category filter.

    Args:
        records: Records to filter
        search: Search term (empty matches all)
        category: Category label or "All"

    Returns:
        New list in the original order
    """
    return [
        record for record in records
        if matches_search(record, search) and matches_category(record, category)
    ]


def sort_records(records: Sequence[DisplayRecord], key: Union[SortKey, str]) -> List[DisplayRecord]:
    """
    Stable sort by publish date, title or author.

    Args:
        records: Records to sort
        key: SortKey or its string value

    Returns:
        New sorted list; equal keys keep their relative order

    Raises:
        ValueError: if the key is not a known sort order
    """
    key = SortKey(key)

    if key is SortKey.NEWEST:
        return sorted(records, key=lambda r: r.published_at, reverse=True)
    if key is SortKey.OLDEST:
        return sorted(records, key=lambda r: r.published_at)
    if key is SortKey.TITLE:
        return sorted(records, key=lambda r: r.title.casefold())
    if key is SortKey.AUTHOR:
        return sorted(records, key=lambda r: r.author.casefold())
    raise ValueError(f"Unhandled sort key: {key}")


def apply_query(records: Sequence[DisplayRecord], state: QueryState) -> List[DisplayRecord]:
    """Filter, then sort, according to the query state."""
    filtered = filter_records(records, state.search, state.category)
    return sort_records(filtered, state.sort)


def split_featured(records: Sequence[DisplayRecord]) -> Tuple[List[DisplayRecord], List[DisplayRecord]]:
    """Partition records into (featured, regular), preserving order."""
    featured = [r for r in records if r.featured]
    regular = [r for r in records if not r.featured]
    return featured, regular


def related(records: Sequence[DisplayRecord], exclude_id: str, limit: int = 3) -> List[DisplayRecord]:
    """First records other than the one being viewed."""
    return [r for r in records if r.id != exclude_id][:limit]


def summarize(shown: int, total: int, noun: str) -> str:
    return f"Showing {shown} of {total} {noun}"
