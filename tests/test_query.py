import random

from kintai_pulse.models import AttendanceRecord, Category
from kintai_pulse.query import filter_by_authors, search_since

from conftest import at


def build(hours, authors=("U_A", "U_B", "U_C")):
    categories = list(Category)
    return [
        AttendanceRecord(at(h), authors[i % len(authors)], categories[i % len(categories)])
        for i, h in enumerate(sorted(hours, reverse=True))
    ]


def test_empty_collection():
    assert search_since([], at(0)) == []


def test_since_before_everything_returns_all():
    records = build([1, 2, 3])
    assert search_since(records, at(-10)) == records


def test_since_after_everything_returns_nothing():
    assert search_since(build([1, 2, 3]), at(10)) == []


def test_boundary_timestamp_is_excluded():
    records = build([1, 2, 3, 4])
    assert [r.timestamp for r in search_since(records, at(2))] == [at(4), at(3)]


def test_matches_linear_scan():
    rng = random.Random(20240401)
    for _ in range(200):
        hours = [rng.randint(0, 30) for _ in range(rng.randint(0, 25))]
        records = build(hours)
        since = at(rng.randint(-2, 32))
        expected = [r for r in records if r.timestamp > since]
        assert search_since(records, since) == expected


def test_author_filter_keeps_order_and_membership():
    records = build([9, 8, 7, 6, 5, 4])
    picked = filter_by_authors(records, {"U_A", "U_C"})

    assert all(r.author in {"U_A", "U_C"} for r in picked)
    assert [r for r in records if r.author in {"U_A", "U_C"}] == picked
    assert filter_by_authors(records, set()) == []
