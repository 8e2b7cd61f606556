import pytest

from phuongnam.services.pagination import MAX_OFFSET, PageParams, Pagination, parse_page_params


def test_middle_page():
    p = Pagination.from_offset(total=95, limit=20, offset=40)
    assert p.current_page == 3
    assert p.total_pages == 5
    assert p.has_more is True
    assert p.has_previous is True


def test_empty_result():
    p = Pagination.from_offset(total=0, limit=20, offset=0)
    assert p.total_pages == 0
    assert p.has_more is False
    assert p.has_previous is False
    assert p.current_page == 1


def test_last_page_has_no_next():
    p = Pagination.from_page(total=95, page=5, limit=20)
    assert p.offset == 80
    assert p.has_more is False
    assert p.has_previous is True


def test_to_dict_shape():
    assert Pagination.from_offset(total=95, limit=20, offset=40).to_dict() == {
        "total": 95,
        "limit": 20,
        "offset": 40,
        "page": 3,
        "pages": 5,
        "totalPages": 5,
        "hasNext": True,
        "hasPrev": True,
    }


@pytest.mark.parametrize(
    "limit, expected",
    [(None, 20), ("10", 10), ("101", 100), ("1000", 100), ("0", 20), ("-5", 20), ("abc", 20)],
)
def test_limit_is_clamped(limit, expected):
    assert parse_page_params(limit=limit).limit == expected


def test_page_to_offset():
    assert parse_page_params(page="3", limit="20") == PageParams(limit=20, offset=40)
    assert parse_page_params(page="0", limit="20").offset == 0
    assert parse_page_params(page="x").offset == 0


def test_explicit_offset_wins_over_page():
    window = parse_page_params(page="5", limit="10", offset="7")
    assert window.offset == 7
    assert window.page == 1


def test_negative_offset_is_floored():
    assert parse_page_params(offset="-10").offset == 0


def test_custom_bounds():
    window = parse_page_params(limit="80", default_limit=10, max_limit=50)
    assert window.limit == 50
    assert parse_page_params(default_limit=10, max_limit=50).limit == 10


def test_huge_page_or_offset_is_capped():
    window = parse_page_params(page="100000000000000000000", limit="20")
    assert window.offset == MAX_OFFSET
    assert parse_page_params(offset=str(10**30)).offset == MAX_OFFSET
