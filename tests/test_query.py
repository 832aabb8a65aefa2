"""Tests for OData query construction."""

import pytest
from pydantic import ValidationError

from sapbridge.query import (
    EntityKind,
    QueryParameters,
    build_entity_path,
    contains_filter,
    encode_query,
    equals_filter,
    odata_string,
    search_filter,
)


@pytest.mark.parametrize("top,skip", [(1, 0), (10, 0), (5, 20), (100, 9999)])
def test_top_and_skip_always_present(top, skip):
    """Test that $top and $skip carry exactly the requested values."""
    query = encode_query(QueryParameters(top=top, skip=skip).to_params())
    assert query == f"$top={top}&$skip={skip}&$format=json"
    assert "$filter" not in query


@pytest.mark.parametrize("search", [None, "", "   "])
def test_empty_search_omits_filter(search):
    """Test that no $filter is emitted for empty or missing search text."""
    query = QueryParameters(search=search)
    params = query.to_params(search_filter(EntityKind.PRODUCT, query.search))
    assert "$filter" not in params
    assert not query.has_search


def test_search_adds_contains_filter():
    """Test that product search compiles to a contains() filter."""
    query = QueryParameters(top=5, search="Notebook")
    params = query.to_params(search_filter(EntityKind.PRODUCT, query.search))
    assert params["$filter"] == "contains(ProductDescription,'Notebook')"


def test_defaults():
    """Test default pagination values."""
    query = QueryParameters()
    assert query.top == 10
    assert query.skip == 0
    assert query.search is None


@pytest.mark.parametrize("kwargs", [{"top": 0}, {"top": 101}, {"skip": -1}])
def test_bounds_rejected(kwargs):
    """Test that out-of-range pagination values fail validation."""
    with pytest.raises(ValidationError):
        QueryParameters(**kwargs)


@pytest.mark.parametrize("kwargs", [{"top": True}, {"skip": False}])
def test_booleans_rejected(kwargs):
    """Test that JSON booleans are not accepted as page sizes or offsets."""
    with pytest.raises(ValidationError, match="got a boolean"):
        QueryParameters(**kwargs)


def test_numeric_strings_still_accepted():
    query = QueryParameters(top="5", skip="2")
    assert (query.top, query.skip) == (5, 2)


def test_query_parameters_are_immutable():
    query = QueryParameters(top=5)
    with pytest.raises(ValidationError):
        query.top = 6


def test_quotes_are_doubled():
    """Test that embedded quotes cannot terminate the OData literal."""
    assert odata_string("O'Brien") == "'O''Brien'"
    assert contains_filter("ProductDescription", "x') or true or ('") == (
        "contains(ProductDescription,'x'') or true or (''')"
    )


def test_equals_filter():
    assert equals_filter("CustomerID", "C100") == "CustomerID eq 'C100'"
    assert equals_filter("CustomerID", "") is None
    assert search_filter(EntityKind.SALES_ORDER, "C100") == "CustomerID eq 'C100'"


def test_encode_query_escapes_values():
    """Test that separators and spaces in values are percent-encoded."""
    params = QueryParameters(top=3).to_params(contains_filter("ProductDescription", "A&B #1"))
    query = encode_query(params)
    assert query == (
        "$top=3&$skip=0&$format=json"
        "&$filter=contains(ProductDescription,'A%26B%20%231')"
    )


def test_encode_query_non_ascii():
    query = encode_query({"$filter": contains_filter("ProductDescription", "Müller")})
    assert query == "$filter=contains(ProductDescription,'M%C3%BCller')"


def test_build_entity_path():
    path = build_entity_path(
        "/sap/opu/odata/sap/API_PRODUCT_SRV/",
        EntityKind.PRODUCT.entity_set,
        QueryParameters(top=2, skip=4),
    )
    assert path == "/sap/opu/odata/sap/API_PRODUCT_SRV/ProductSet?$top=2&$skip=4&$format=json"
