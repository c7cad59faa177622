"""Tests for search, category filter and sorting."""
from datetime import datetime, timezone

import pytest

from ebook_library.filtering import (
    apply_query,
    filter_records,
    matches_search,
    related,
    sort_records,
    split_featured,
    summarize,
)
from ebook_library.models import BookDetails, ContentKind, DisplayRecord, QueryState, SortKey


def make_record(id, title="Title", author="Author", category="technology", tags=(), day=1, featured=False):
    return DisplayRecord(
        id=id,
        kind=ContentKind.BOOK,
        title=title,
        author=author,
        description="",
        category=category,
        tags=tuple(tags),
        published_at=datetime(2024, 1, day, tzinfo=timezone.utc),
        cover_url="/placeholder.svg",
        featured=featured,
        slug=id,
        details=BookDetails(),
    )


LIBRARY = [
    make_record("1", title="Machine Learning Basics", author="Ng", category="technology", tags=["ai"], day=3),
    make_record("2", title="Startup Finance", author="Graham", category="business", tags=["money"], day=5),
    make_record("3", title="Cell Biology", author="Alberts", category="science", tags=["Biology", "AI-assisted"], day=1),
]


def test_empty_search_returns_input_unchanged():
    assert filter_records(LIBRARY, "") == LIBRARY


def test_search_matches_title_author_or_tag_case_insensitive():
    assert [r.id for r in filter_records(LIBRARY, "LEARNING")] == ["1"]
    assert [r.id for r in filter_records(LIBRARY, "graham")] == ["2"]
    assert [r.id for r in filter_records(LIBRARY, "ai")] == ["1", "3"]
    assert filter_records(LIBRARY, "chemistry") == []


def test_search_results_all_match():
    term = "bio"
    result = filter_records(LIBRARY, term)

    assert all(matches_search(r, term) for r in result)
    assert all(r in LIBRARY for r in result)


def test_category_filter_single_match():
    records = [
        make_record("a", category="A"),
        make_record("b", category="B"),
        make_record("c", category="A"),
    ]

    result = filter_records(records, category="B")

    assert len(result) == 1
    assert result[0].id == "b"


def test_category_filter_is_case_insensitive_and_all_matches_everything():
    assert [r.id for r in filter_records(LIBRARY, category="Technology")] == ["1"]
    assert filter_records(LIBRARY, category="All") == LIBRARY
    assert filter_records(LIBRARY, category="Arts") == []


def test_search_and_category_both_apply():
    assert [r.id for r in filter_records(LIBRARY, "ai", "science")] == ["3"]


def test_sort_newest_and_oldest():
    newest = sort_records(LIBRARY, SortKey.NEWEST)
    oldest = sort_records(LIBRARY, "oldest")

    assert [r.id for r in newest] == ["2", "1", "3"]
    assert [r.id for r in oldest] == ["3", "1", "2"]
    dates = [r.published_at for r in newest]
    assert dates == sorted(dates, reverse=True)


def test_sort_by_title_and_author():
    by_title = sort_records(LIBRARY, "title")
    by_author = sort_records(LIBRARY, "author")

    assert [r.title for r in by_title] == ["Cell Biology", "Machine Learning Basics", "Startup Finance"]
    assert [r.author for r in by_author] == ["Alberts", "Graham", "Ng"]


def test_sort_title_ignores_case():
    records = [make_record("1", title="beta"), make_record("2", title="Alpha")]

    assert [r.id for r in sort_records(records, "title")] == ["2", "1"]


def test_sort_is_stable_for_equal_dates():
    records = [
        make_record("first", day=2),
        make_record("older", day=1),
        make_record("second", day=2),
    ]

    result = sort_records(records, "newest")

    assert [r.id for r in result] == ["first", "second", "older"]


def test_sort_by_title_is_stable_for_equal_titles():
    records = [
        make_record("first", title="Same"),
        make_record("other", title="Another"),
        make_record("second", title="same"),
    ]

    result = sort_records(records, "title")

    assert [r.id for r in result] == ["other", "first", "second"]


def test_sort_by_author_is_stable_for_equal_authors():
    records = [
        make_record("first", author="Lee", day=1),
        make_record("second", author="Lee", day=9),
        make_record("other", author="Adams"),
    ]

    result = sort_records(records, "author")

    assert [r.id for r in result] == ["other", "first", "second"]


def test_sort_does_not_mutate_input():
    records = list(LIBRARY)

    sort_records(records, "title")

    assert records == LIBRARY


def test_unknown_sort_key_raises():
    with pytest.raises(ValueError):
        sort_records(LIBRARY, "popularity")


def test_apply_query_filters_then_sorts_deterministically():
    state = QueryState(search="ai", category="All", sort="title")

    first = apply_query(LIBRARY, state)
    second = apply_query(LIBRARY, state)

    assert [r.id for r in first] == ["3", "1"]
    assert first == second


def test_default_query_state_orders_newest_first():
    assert [r.id for r in apply_query(LIBRARY, QueryState())] == ["2", "1", "3"]


def test_reset_clears_search_and_category_only():
    state = QueryState(search="x", category="Business", sort="author").reset()

    assert state == QueryState(search="", category="All", sort="author")


def test_split_featured_preserves_order():
    records = [
        make_record("1", featured=True),
        make_record("2"),
        make_record("3", featured=True),
    ]

    featured, regular = split_featured(records)

    assert [r.id for r in featured] == ["1", "3"]
    assert [r.id for r in regular] == ["2"]


def test_related_excludes_current_and_limits():
    records = [make_record(str(i)) for i in range(5)]

    assert [r.id for r in related(records, "1")] == ["0", "2", "3"]


def test_summarize():
    assert summarize(2, 10, "books") == "Showing 2 of 10 books"
