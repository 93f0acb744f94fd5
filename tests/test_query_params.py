import pytest

from catalog.models import FilterCriteria, PaginationState
from catalog.products_api import clean_params
from catalog.query_params import QueryParams, derive_query_params


def test_derive_drops_empty_values_and_shifts_page():
    filters = FilterCriteria(product_name="", category="Books", min_price="10", max_price="")
    params = derive_query_params(filters, PaginationState(page_index=1, page_size=20))

    assert params.to_params() == {
        "category": "Books",
        "minPrice": "10",
        "page": 2,
        "pageSize": 20,
    }


def test_derive_passes_prices_through_unchanged():
    filters = FilterCriteria(min_price="10.50", max_price="99")
    params = derive_query_params(filters, PaginationState())

    assert params.min_price == "10.50"
    assert params.max_price == "99"
    assert params.page == 1
    assert params.page_size == 10


def test_derive_treats_none_as_absent():
    filters = FilterCriteria(product_name=None, category=None, min_price=None, max_price=None)
    params = derive_query_params(filters, PaginationState(0, 5))

    assert params.to_params() == {"page": 1, "pageSize": 5}


def test_equal_inputs_give_equal_hashable_keys():
    filters = FilterCriteria(product_name="phone")
    first = derive_query_params(filters, PaginationState(2, 10))
    second = derive_query_params(FilterCriteria(product_name="phone"), PaginationState(2, 10))

    assert first == second
    assert {first: "cached"}[second] == "cached"
    assert first != derive_query_params(filters, PaginationState(3, 10))


def test_empty_and_none_filters_give_same_key():
    assert derive_query_params(FilterCriteria(category=""), PaginationState()) == (
        derive_query_params(FilterCriteria(category=None), PaginationState())
    )


@pytest.mark.parametrize(
    "raw, expected",
    [
        ({"productName": "", "page": 1}, {"page": 1}),
        ({"minPrice": 0, "maxPrice": None}, {"minPrice": 0}),
        ({"category": "Roupas", "pageSize": 20}, {"category": "Roupas", "pageSize": 20}),
    ],
)
def test_clean_params(raw, expected):
    assert clean_params(raw) == expected


def test_query_params_keeps_zero_price():
    params = QueryParams(page=1, page_size=10, min_price=0)

    assert params.to_params()["minPrice"] == 0
