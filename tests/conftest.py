import copy
from datetime import datetime

import pytest

from agentvista.errors import ListingLookupError
from agentvista.models import Stop
from agentvista.service.mock_cache_service import MockCacheService

START = datetime(2025, 3, 10, 9, 0)

LISTINGS = {
    "W12372194": {
        "success": True,
        "address": "1103 - 4675 Metcalfe Ave, Mississauga, Ontario",
        "property": {
            "mls_number": "W12372194",
            "address": "1103 - 4675 Metcalfe Ave, Mississauga, Ontario",
            "city": "Mississauga",
            "province": "Ontario",
            "price": 689000,
            "bedrooms": 2,
            "bathrooms": 2
        }
    }
}


class FakeDDFClient:
    """Stands in for DDFAPIClient and records every lookup"""

    def __init__(self, listings=None, error=None):
        self.listings = LISTINGS if listings is None else listings
        self.error = error
        self.calls = []

    def search_property_by_mls(self, mls_number):
        self.calls.append(mls_number)
        if self.error:
            raise self.error
        if mls_number in self.listings:
            return copy.deepcopy(self.listings[mls_number])
        return {"success": False, "message": "Listing Does not Exist."}

    def get_property_details(self, mls_number):
        self.calls.append(mls_number)
        if self.error:
            raise self.error
        if mls_number in self.listings:
            return {"success": True, "property": copy.deepcopy(self.listings[mls_number]["property"])}
        return {"success": False, "message": "Property not found"}


class FakeClock:
    def __init__(self, now=0.0):
        self.now = now

    def __call__(self):
        return self.now


@pytest.fixture
def fixed_clock():
    return lambda: START


@pytest.fixture
def ddf_client():
    return FakeDDFClient()


@pytest.fixture
def failing_ddf_client():
    return FakeDDFClient(error=ListingLookupError("HTTP 503"))


@pytest.fixture
def memory_cache():
    return MockCacheService(ttl_seconds=60, clock=FakeClock())


@pytest.fixture
def gta_stops():
    return [
        Stop(address="15 BAY ST, Toronto, Ontario", visit_duration=30, mls_number="C12345678"),
        Stop(address="10 MAJOR MACKENZIE DR, Richmond Hill, Ontario", visit_duration=45),
        Stop(address="200 RUTHERFORD RD, Vaughan, Ontario", visit_duration=20, mls_number="N7654321"),
    ]


@pytest.fixture
def empty_ddf_client():
    return FakeDDFClient(listings={})
