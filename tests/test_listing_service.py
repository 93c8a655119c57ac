import pytest
import requests

from agentvista import ddf_client as ddf_module
from agentvista.config import Config
from agentvista.ddf_client import DDFAPIClient, clean_mls_number, format_canadian_address, odata_literal
from agentvista.errors import InvalidListingNumberError, ListingLookupError
from agentvista.service.listing_service import ListingService
from agentvista.service.mock_cache_service import MockCacheService

DDF_LISTING = {
    "ListingKey": "28794985",
    "MlsNumber": "W12372194",
    "UnparsedAddress": "1103 - 4675 Metcalfe Ave",
    "City": "Mississauga",
    "StateOrProvince": "Ontario",
    "PostalCode": "L5M0Z8",
    "PropertyType": "Residential",
    "ListPrice": 689000,
    "BedroomsTotal": 2,
    "BathroomsTotal": 2,
}


class FakeResponse:
    def __init__(self, payload=None, status_code=200):
        self.payload = payload
        self.status_code = status_code

    def json(self):
        return self.payload


def install_get(monkeypatch, response):
    calls = []

    def fake_get(url, headers=None, params=None, timeout=None):
        calls.append({"url": url, "headers": headers, "params": params})
        if isinstance(response, Exception):
            raise response
        return response

    monkeypatch.setattr(ddf_module.requests, "get", fake_get)
    return calls


# --- Listing service with cache --- #

def test_repeat_lookup_is_served_from_cache(ddf_client, memory_cache):
    service = ListingService(client=ddf_client, cache=memory_cache)

    first = service.search_listing("W12372194")
    second = service.search_listing(" w12372194 ")

    assert first["success"] and not first["from_cache"]
    assert second["from_cache"]
    assert second["address"] == first["address"]
    assert ddf_client.calls == ["W12372194"]


def test_missing_listing_is_cached(ddf_client, memory_cache):
    service = ListingService(client=ddf_client, cache=memory_cache)

    first = service.search_listing("C0000000")
    second = service.search_listing("C0000000")

    assert first == {"success": False, "message": "Listing Does not Exist.", "from_cache": False}
    assert second["from_cache"]
    assert len(ddf_client.calls) == 1


def test_cache_entry_expires(ddf_client, memory_cache):
    service = ListingService(client=ddf_client, cache=memory_cache)

    service.search_listing("W12372194")
    memory_cache._clock.now += 61
    result = service.search_listing("W12372194")

    assert not result["from_cache"]
    assert len(ddf_client.calls) == 2


def test_lookup_errors_are_not_cached(failing_ddf_client, memory_cache):
    service = ListingService(client=failing_ddf_client, cache=memory_cache)

    with pytest.raises(ListingLookupError):
        service.search_listing("W12372194")

    assert memory_cache.get_cache_stats()["total_entries"] == 0


def test_cached_result_is_isolated_from_callers(ddf_client, memory_cache):
    service = ListingService(client=ddf_client, cache=memory_cache)

    service.search_listing("W12372194")["property"]["price"] = 1
    cached = service.search_listing("W12372194")

    assert cached["property"]["price"] == 689000


@pytest.mark.parametrize("value", ["X'or'1'eq'1", "W1234567'", "", "W1"])
def test_malformed_listing_number_is_rejected_before_lookup(ddf_client, memory_cache, value):
    service = ListingService(client=ddf_client, cache=memory_cache)

    with pytest.raises(InvalidListingNumberError) as excinfo:
        service.search_listing(value)

    assert excinfo.value.code == 400
    assert ddf_client.calls == []
    assert memory_cache.get_cache_stats()["misses"] == 0


def test_numeric_listing_key_is_accepted(ddf_client, memory_cache):
    service = ListingService(client=ddf_client, cache=memory_cache)

    assert not service.search_listing("28794985")["success"]
    assert ddf_client.calls == ["28794985"]


def test_listing_details_bypass_cache(ddf_client, memory_cache):
    service = ListingService(client=ddf_client, cache=memory_cache)

    result = service.get_listing_details(" w12372194 ")

    assert result["property"]["price"] == 689000
    assert ddf_client.calls == ["W12372194"]
    assert memory_cache.get_cache_stats()["total_entries"] == 0


def test_cache_health(ddf_client, memory_cache, monkeypatch):
    assert ListingService(client=ddf_client, cache=memory_cache).cache_health()["backend"] == "memory"

    monkeypatch.setattr(Config, "ENABLE_LISTING_CACHE", False)
    assert ListingService(client=ddf_client).cache_health()["status"] == "disabled"


def test_cache_stats_and_clear(ddf_client, memory_cache):
    service = ListingService(client=ddf_client, cache=memory_cache)
    service.search_listing("W12372194")
    service.search_listing("W12372194")

    stats = service.get_cache_stats()
    assert stats["backend"] == "memory"
    assert stats["hits"] == 1
    assert stats["misses"] == 1
    assert stats["hit_rate"] == 50.0

    assert service.clear_cache() == 1
    assert service.get_cache_stats()["total_entries"] == 0


def test_memory_cache_keys_are_normalized():
    cache = MockCacheService()

    cache.set_listing("w1", {"success": True})

    assert cache.get_listing("W1") == {"success": True}
    assert cache.health_check()["backend"] == "memory"


def test_memory_cache_purges_expired_entries_on_write(memory_cache):
    for number in range(500):
        memory_cache.set_listing(f"W{number:07d}", {"success": False})

    memory_cache._clock.now += 61
    memory_cache.set_listing("W9999999", {"success": True})

    assert memory_cache.get_cache_stats()["total_entries"] == 1


def test_memory_cache_expired_read_is_repeatable(memory_cache):
    memory_cache.set_listing("W1234567", {"success": True})
    memory_cache._clock.now += 61

    assert memory_cache.get_listing("W1234567") is None
    assert memory_cache.get_listing("W1234567") is None
    assert memory_cache.get_cache_stats()["misses"] == 2


# --- DDF client --- #

def test_clean_mls_number():
    assert clean_mls_number(" w 12372194 ") == "W12372194"


def test_format_canadian_address():
    assert format_canadian_address(DDF_LISTING) == "1103 - 4675 Metcalfe Ave, Mississauga, Ontario"
    assert format_canadian_address({}) == "Address not available"


def test_search_property_by_mls(monkeypatch):
    calls = install_get(monkeypatch, FakeResponse({"value": [DDF_LISTING]}))

    result = DDFAPIClient(access_token="token-123").search_property_by_mls("w12372194")

    assert result["success"]
    assert result["address"] == "1103 - 4675 Metcalfe Ave, Mississauga, Ontario"
    assert result["property"]["mls_number"] == "W12372194"
    assert result["property"]["price"] == 689000
    assert calls[0]["url"].endswith("/Property")
    assert calls[0]["headers"]["Authorization"] == "Bearer token-123"
    assert "W12372194" in calls[0]["params"]["$filter"]
    assert calls[0]["params"]["$top"] == 1


def test_search_property_not_found(monkeypatch):
    install_get(monkeypatch, FakeResponse({"value": []}))

    result = DDFAPIClient(access_token="token-123").search_property_by_mls("W00000000")

    assert result == {"success": False, "message": "Listing Does not Exist."}


def test_get_property_details_selects_all_fields(monkeypatch):
    calls = install_get(monkeypatch, FakeResponse({"value": [DDF_LISTING]}))

    result = DDFAPIClient(access_token="token-123").get_property_details("W12372194")

    assert result == {"success": True, "property": DDF_LISTING}
    assert calls[0]["params"]["$select"] == "*"


@pytest.mark.parametrize("response,reason", [
    (FakeResponse(status_code=401), "authentication failed"),
    (FakeResponse(status_code=503), "HTTP 503"),
    (requests.Timeout("read timed out"), "read timed out"),
])
def test_search_failures_raise(monkeypatch, response, reason):
    install_get(monkeypatch, response)

    with pytest.raises(ListingLookupError) as excinfo:
        DDFAPIClient(access_token="token-123").search_property_by_mls("W12372194")

    assert reason in excinfo.value.message
    assert excinfo.value.code == 502


def test_unconfigured_client_raises(monkeypatch):
    calls = install_get(monkeypatch, FakeResponse({"value": []}))
    monkeypatch.setattr(ddf_module.Config, "DDF_ACCESS_TOKEN", None)

    with pytest.raises(ListingLookupError):
        DDFAPIClient().search_property_by_mls("W12372194")

    assert calls == []


def test_odata_literal_doubles_quotes():
    assert odata_literal("W12372194") == "'W12372194'"
    assert odata_literal("A'B") == "'A''B'"


def test_filter_value_is_quoted(monkeypatch):
    calls = install_get(monkeypatch, FakeResponse({"value": []}))

    DDFAPIClient(access_token="token-123")._query_property("A'B", "*")

    assert calls[0]["params"]["$filter"] == "ListingKey eq 'A''B' or MlsNumber eq 'A''B'"


def test_client_rejects_malformed_listing_number(monkeypatch):
    calls = install_get(monkeypatch, FakeResponse({"value": []}))

    with pytest.raises(InvalidListingNumberError):
        DDFAPIClient(access_token="token-123").search_property_by_mls("X'or'1'eq'1")

    assert calls == []
