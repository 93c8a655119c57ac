import time

import pytest

from agentvista.helper.property_extractor import (
    ADDRESS_MATCHERS,
    dedupe_addresses,
    extract,
    find_mls_numbers,
    is_duplicate_address,
    is_valid_mls,
)


def test_mls_numbers_are_deduplicated():
    result = extract("MLS# W12372194\nSome listing text.\nReference: W12372194")

    assert result.mls_numbers == ["W12372194"]


def test_mls_numbers_keep_first_seen_pattern_order():
    text = "Contact us about listing C1234567. MLS: N5678901"

    assert find_mls_numbers(text) == ["N5678901", "C1234567"]


def test_mls_label_is_case_insensitive_and_uppercased():
    assert find_mls_numbers("mls# w12372194") == ["W12372194"]


def test_mls_with_dash_suffix():
    result = extract("MLS# W123456-A")

    assert result.mls_numbers == ["W123456-A"]


def test_secondary_details():
    text = (
        "Beautiful home. Listed at $450,000 with 3 bedrooms and 2.5 bathrooms, "
        "about 1,200 sq ft. This detached house is close to transit."
    )
    details = extract(text).property_details

    assert details.prices == ["450000"]
    assert details.bedrooms == "3"
    assert details.bathrooms == "2.5"
    assert details.square_footage == "1200"
    assert details.property_type == "detached"


def test_all_prices_are_collected():
    details = extract("Was $1,250,000, now $1,199,000").property_details

    assert details.prices == ["1250000", "1199000"]


def test_semi_detached_type():
    assert extract("Semi-Detached home").property_details.property_type == "semi-detached"


def test_full_address_suppresses_partial_matches():
    result = extract("Property at 123 Main Street, Toronto, Ontario")

    assert result.addresses == ["123 Main Street, Toronto, Ontario"]


def test_addresses_in_pattern_order():
    text = "Showing 1: 12 Elm Ave, Markham\nShowing 2: 45 Oak Cres, Vaughan, ON"

    assert extract(text).addresses == ["45 Oak Cres, Vaughan, ON", "12 Elm Ave, Markham"]


def test_street_only_matcher_in_isolation():
    street_only = ADDRESS_MATCHERS[-1]

    assert list(street_only.find_candidates("Unit at 77 Queen St W")) == ["77 Queen St"]


def test_duplicate_filter_ignores_street_type_spelling():
    kept = dedupe_addresses(["123 Main St, Toronto", "123 Main Street, Toronto, Ontario"])

    assert kept == ["123 Main St, Toronto"]
    assert is_duplicate_address("123 Main Street, Toronto, Ontario", "123 Main St, Toronto")


def test_distinct_addresses_are_kept():
    kept = dedupe_addresses(["12 Elm Ave, Markham", "14 Elm Ave, Markham"])

    assert len(kept) == 2


def test_no_matches_gives_empty_result():
    result = extract("Nothing useful on this page.")

    assert result.mls_numbers == []
    assert result.addresses == []
    assert result.property_details.model_dump(exclude_none=True) == {}


def test_empty_text():
    assert extract("").mls_numbers == []


def test_long_unpunctuated_text_scans_quickly():
    text = ("12 " + "west first street lane " * 400 + "x ") * 5

    started = time.perf_counter()
    result = extract(text)

    assert time.perf_counter() - started < 2
    assert result.addresses


def test_long_street_name_within_word_limit():
    result = extract("Open house at 88 Upper Middle Old Mill Road, Oakville, ON")

    assert result.addresses == ["88 Upper Middle Old Mill Road, Oakville, ON"]


@pytest.mark.parametrize("value,expected", [
    ("W12372194", True),
    ("N5678901", True),
    ("W123456-A", True),
    ("W1234567-", True),
    ("w12372194", False),
    ("12372194", False),
    ("W123", False),
    (None, False),
])
def test_is_valid_mls(value, expected):
    assert is_valid_mls(value) is expected
