import pytest

from storefront.products.service import ProductService
from storefront.utils.pagination import Pagination, parse_page


@pytest.mark.parametrize("raw, expected", [
    (None, 1),
    ("1", 1),
    ("3", 3),
    ("0", 1),
    ("-2", 1),
    ("abc", 1),
    ("2.5", 1),
])
def test_parse_page_falls_back_to_first_page(raw, expected):
    assert parse_page(raw) == expected


def test_pagination_metadata_for_middle_page():
    pagination = Pagination(items=[], total=20, page=2, per_page=8)

    assert pagination.to_context() == {
        "current_page": 2,
        "last_page": 3,
        "has_next_page": True,
        "has_previous_page": True,
        "next_page": 3,
        "previous_page": 1,
    }
    assert pagination.start_result == 9
    assert pagination.end_result == 16


def test_pagination_last_page_end_result_stops_at_total():
    pagination = Pagination(items=[], total=20, page=3, per_page=8)

    assert not pagination.has_next_page
    assert pagination.end_result == 20


def test_pagination_past_the_end_is_not_clamped():
    pagination = Pagination(items=[], total=5, page=4, per_page=8)

    assert pagination.page == 4
    assert pagination.last_page == 1
    assert not pagination.has_next_page
    assert pagination.has_previous_page


def test_pagination_of_empty_result():
    pagination = Pagination(items=[], total=0, page=1, per_page=8)

    assert pagination.last_page == 0
    assert not pagination.has_next_page
    assert not pagination.has_previous_page


HUGE_PAGE = "99999999999999999999"


def test_paginate_far_past_the_end_returns_no_items(db_session, make_product):
    make_product()

    pagination = ProductService.list_products(db_session, int(HUGE_PAGE))

    assert pagination.items == []
    assert pagination.total == 1
    assert pagination.page == int(HUGE_PAGE)


@pytest.mark.parametrize("path", ["/products", "/search/phone", "/admin/products"])
def test_huge_page_number_renders_an_empty_page(seller_client, make_product, path):
    make_product(category="phone")

    response = seller_client.get(path, params={"page": HUGE_PAGE})

    assert response.status_code == 200
    body = response.json()
    assert body["products"] == []
    assert body["current_page"] == int(HUGE_PAGE)
    assert body["has_next_page"] is False
