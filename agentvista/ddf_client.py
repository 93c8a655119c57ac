import re
import requests
from typing import Dict, Any, Optional

from agentvista.config import Config
from agentvista.errors import InvalidListingNumberError, ListingLookupError
from agentvista.logger import get_logger

logger = get_logger(__name__)

SUMMARY_FIELDS = (
    'ListingKey,MlsNumber,UnparsedAddress,City,StateOrProvince,PostalCode,Country,'
    'PropertyType,ListPrice,BedroomsTotal,BathroomsTotal'
)

# MLS numbers (W12372194, N123456-A) and numeric DDF listing keys
LISTING_NUMBER_PATTERN = re.compile(r'^[A-Z0-9][A-Z0-9-]{2,19}$')


def clean_mls_number(mls_number) -> str:
    return ''.join(str(mls_number).split()).upper()


def is_listing_number(value: str) -> bool:
    return bool(LISTING_NUMBER_PATTERN.match(value or ''))


def require_listing_number(mls_number) -> str:
    """Cleaned listing number, or InvalidListingNumberError when it is not one"""
    clean_mls = clean_mls_number(mls_number)
    if not is_listing_number(clean_mls):
        raise InvalidListingNumberError(mls_number)
    return clean_mls


def odata_literal(value: str) -> str:
    """Quote a value as an OData string literal"""
    return "'" + str(value).replace("'", "''") + "'"


def format_canadian_address(listing: Dict[str, Any]) -> str:
    """"UNPARSED ADDRESS, City, Province" from DDF property fields"""
    parts = [
        (listing.get('UnparsedAddress') or '').strip(),
        listing.get('City') or '',
        listing.get('StateOrProvince') or '',
    ]
    address = ', '.join(p for p in parts if p)
    return address or 'Address not available'


class DDFAPIClient:
    """CREA DDF (REALTOR.ca) property lookups by MLS number"""

    def __init__(self, access_token: Optional[str] = None):
        self.config = Config()
        self.access_token = access_token or self.config.DDF_ACCESS_TOKEN

    @property
    def is_configured(self) -> bool:
        return bool(self.access_token)

    def _get_headers(self) -> Dict[str, str]:
        """Get request headers with authentication"""
        return {
            'Authorization': f'Bearer {self.access_token}',
            'Accept': 'application/json',
            'User-Agent': self.config.DDF_USER_AGENT
        }

    def _query_property(self, mls_number: str, select: str) -> Optional[Dict[str, Any]]:
        if not self.is_configured:
            raise ListingLookupError("DDF_ACCESS_TOKEN is not configured")

        literal = odata_literal(mls_number)
        url = f"{self.config.DDF_API_BASE_URL}/Property"
        params = {
            '$filter': f"ListingKey eq {literal} or MlsNumber eq {literal}",
            '$select': select,
            '$top': 1
        }

        try:
            response = requests.get(url, headers=self._get_headers(), params=params,
                                    timeout=self.config.DDF_TIMEOUT)
        except requests.RequestException as e:
            raise ListingLookupError(str(e)) from e

        if response.status_code == 401:
            raise ListingLookupError("authentication failed, check DDF_ACCESS_TOKEN")
        if response.status_code != 200:
            raise ListingLookupError(f"HTTP {response.status_code}")

        listings = response.json().get('value') or []
        return listings[0] if listings else None

    def search_property_by_mls(self, mls_number: str) -> Dict[str, Any]:
        """Search for property by MLS number"""
        clean_mls = require_listing_number(mls_number)
        logger.info(f"Searching DDF for MLS: {clean_mls}")

        listing = self._query_property(clean_mls, SUMMARY_FIELDS)
        if not listing:
            logger.info(f"No property found for MLS: {clean_mls}")
            return {"success": False, "message": "Listing Does not Exist."}

        address = format_canadian_address(listing)
        return {
            "success": True,
            "address": address,
            "property": {
                "mls_number": listing.get('MlsNumber') or listing.get('ListingKey'),
                "address": address,
                "city": listing.get('City'),
                "province": listing.get('StateOrProvince'),
                "postal_code": listing.get('PostalCode'),
                "property_type": listing.get('PropertyType'),
                "price": listing.get('ListPrice'),
                "bedrooms": listing.get('BedroomsTotal'),
                "bathrooms": listing.get('BathroomsTotal')
            }
        }

    def get_property_details(self, mls_number: str) -> Dict[str, Any]:
        """Get every DDF field for a listing"""
        listing = self._query_property(require_listing_number(mls_number), '*')
        if not listing:
            return {"success": False, "message": "Property not found"}
        return {"success": True, "property": listing}
