from __future__ import annotations

import pytest

from mbar_cli.core.constants import RATIO_META_KEY
from mbar_cli.core.filters import FilterRequest, build_query, dropdown_context, parse_month_label
from mbar_cli.core.ratios import RatioCatalog


@pytest.fixture()
def catalog() -> RatioCatalog:
    return RatioCatalog.defaults()


def _params(ratio=None, date=None, mode=None):
    params = {}
    if ratio is not None:
        params["media-attachment-ratio-filters"] = ratio
    if date is not None:
        params["media-attachment-date-filters"] = date
    if mode is not None:
        params["mode"] = mode
    return params


def test_from_params_defaults(catalog: RatioCatalog) -> None:
    request = FilterRequest.from_params({}, catalog)
    assert request == FilterRequest(ratio="all", date="All dates", mode="grid")
    assert request.is_filtered is False


def test_from_params_reads_known_values(catalog: RatioCatalog) -> None:
    request = FilterRequest.from_params(_params("1.778", "March 2024", "list"), catalog)
    assert request == FilterRequest(ratio="1.778", date="March 2024", mode="list")
    assert request.is_filtered is True


def test_from_params_falls_back_on_unknown_values(catalog: RatioCatalog) -> None:
    request = FilterRequest.from_params(_params("9.999", "", "table"), catalog)
    assert request == FilterRequest(ratio="all", date="All dates", mode="grid")


def test_from_params_takes_first_of_repeated_values(catalog: RatioCatalog) -> None:
    request = FilterRequest.from_params(_params(["1.333", "1"]), catalog)
    assert request.ratio == "1.333"


def test_parse_month_label() -> None:
    assert parse_month_label("March 2024") == "202403"
    assert parse_month_label(" December 2023 ") == "202312"
    assert parse_month_label("sometime") is None


def test_build_query_adds_ratio_constraint() -> None:
    query = build_query(FilterRequest(ratio="1.778"), {"post_type": "attachment"})
    assert query == {
        "post_type": "attachment",
        "meta_query": [{"key": RATIO_META_KEY, "value": "1.778", "compare": "="}],
        "post_mime_type": "image",
    }


def test_build_query_adds_month_constraint() -> None:
    query = build_query(FilterRequest(date="March 2024"))
    assert query == {"m": "202403"}


def test_build_query_ignores_unparseable_dates() -> None:
    assert build_query(FilterRequest(date="last summer")) == {}


def test_build_query_unfiltered_leaves_base_untouched() -> None:
    base = {"post_type": "attachment", "meta_query": [{"key": "other", "compare": "EXISTS"}]}
    query = build_query(FilterRequest(), base)
    assert query == base
    filtered = build_query(FilterRequest(ratio="1"), base)
    assert len(filtered["meta_query"]) == 2
    assert len(base["meta_query"]) == 1


def test_grid_and_list_modes_share_query(catalog: RatioCatalog) -> None:
    grid = FilterRequest.from_params(_params("1.6", "April 2024", "grid"), catalog)
    listing = FilterRequest.from_params(_params("1.6", "April 2024", "list"), catalog)
    assert build_query(grid) == build_query(listing)


def test_dropdown_context(catalog: RatioCatalog) -> None:
    context = dropdown_context(catalog, FilterRequest(ratio="1.333"))
    assert context["current"] == "1.333"
    assert context["ratios"] == [
        ("all", "All aspect ratios"),
        ("1", "1:1"),
        ("1.333", "4:3"),
        ("1.778", "16:9"),
        ("1.6", "16:10"),
    ]
    assert dropdown_context(RatioCatalog())["ratios"] == [("all", "All aspect ratios")]
    assert dropdown_context(RatioCatalog())["current"] == "all"
