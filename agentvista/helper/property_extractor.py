"""
Rule-based extraction of listing data from OCR / PDF text.

MLS numbers and addresses are found by ordered lists of matcher objects;
results are deduplicated in first-seen order. Secondary details (price,
bedrooms, bathrooms, area, property type) are independent regex lookups.
"""
import re
from typing import Callable, Iterable, Iterator, List, Optional

from agentvista.logger import get_logger
from agentvista.models import PropertyDetails, PropertyExtractionResult

logger = get_logger(__name__)

# Longest spellings first so "Street" is never cut down to "St" + "reet"
STREET_TYPE_PATTERN = (
    r'(?:Street|St|Avenue|Ave|Road|Rd|Drive|Dr|Boulevard|Blvd|Lane|Ln|Court|Ct|'
    r'Circle|Cir|Crescent|Cres|Place|Pl|Way|Terrace|Terr)\b\.?'
)

PROVINCE_PATTERN = (
    r'(?:Ontario|British Columbia|Alberta|Quebec|Manitoba|Saskatchewan|Nova Scotia|'
    r'New Brunswick|Newfoundland|Prince Edward Island|'
    r'(?-i:ON|BC|AB|QC|MB|SK|NS|NB|NL|PE))\b'
)

STREET_TYPE_ABBREVIATIONS = {
    'street': 'st', 'avenue': 'ave', 'road': 'rd', 'drive': 'dr',
    'boulevard': 'blvd', 'lane': 'ln', 'court': 'ct', 'circle': 'cir',
    'crescent': 'cres', 'place': 'pl', 'terrace': 'terr',
}

PROPERTY_TYPES = [
    'semi-detached', 'detached', 'townhouse', 'condominium', 'condo', 'apartment',
    'duplex', 'triplex', 'bungalow', 'ranch', 'colonial',
]

VALID_MLS_PATTERNS = [
    re.compile(r'^[A-Z]\d{7,8}$'),         # Single letter + 7-8 digits
    re.compile(r'^[A-Z]\d{6,7}-[A-Z]?$'),  # Letter + digits + dash + optional letter
]


class RegexMatcher:
    """Finds candidate strings in text with one compiled pattern."""

    def __init__(self, name: str, pattern: str, flags: int = 0,
                 render: Optional[Callable[[re.Match], str]] = None):
        self.name = name
        self.pattern: re.Pattern = re.compile(pattern, flags)
        self.render = render or (lambda match: match.group(1))

    def find_candidates(self, text: str) -> Iterator[str]:
        for match in self.pattern.finditer(text):
            candidate = self.render(match)
            if candidate:
                yield candidate

    def __repr__(self):
        return f"RegexMatcher({self.name!r})"


def _render_mls(match: re.Match) -> str:
    return match.group(1).upper().strip()


def _render_address(match: re.Match) -> str:
    groups = [g.strip() for g in match.groups() if g and g.strip()]
    number, street = groups[0], groups[1]
    return ', '.join([f"{number} {street}"] + groups[2:])


MLS_MATCHERS = [
    RegexMatcher('mls_label', r'MLS[#\s:]*([A-Z]\d{7,8})', re.I, _render_mls),                # MLS# W12372194
    RegexMatcher('mls_label_suffix', r'MLS[#\s:]*([A-Z]\d{6,7}-[A-Z]?)', re.I, _render_mls),  # MLS# W123456-A
    RegexMatcher('standalone', r'\b([A-Z]\d{7,8})\b', 0, _render_mls),                       # W12372194
    RegexMatcher('listing_label', r'Listing[#\s:]*([A-Z]\d{7,8})', re.I, _render_mls),
    RegexMatcher('property_label', r'Property[#\s:]*([A-Z]\d{7,8})', re.I, _render_mls),
    RegexMatcher('reference_label', r'Reference[#\s:]*([A-Z]\d{7,8})', re.I, _render_mls),
]

# Word runs are capped so long unpunctuated OCR text scans in linear time
_NUMBER = r'(\d+(?:-\d+| \d+)?)'
_STREET = r'((?:[A-Za-z]+ +){1,5}' + STREET_TYPE_PATTERN + r')'
_PLACE = r'([A-Za-z]+(?: +[A-Za-z]+){0,3}?)'
_CITY = r'([A-Za-z]+(?: +[A-Za-z]+){0,3})'

ADDRESS_MATCHERS = [
    # 123-456 Main Street, Toronto, ON
    RegexMatcher(
        'full_with_province',
        _NUMBER + r' +' + _STREET + r' *,? *' + _PLACE + r' *,? *(' + PROVINCE_PATTERN + r')',
        re.I, _render_address,
    ),
    # 123 Main Street, Toronto
    RegexMatcher(
        'with_city',
        _NUMBER + r' +' + _STREET + r' *, *' + _CITY,
        re.I, _render_address,
    ),
    # 123 Main Street
    RegexMatcher('street_only', _NUMBER + r' +' + _STREET, re.I, _render_address),
]

PRICE_PATTERN = re.compile(r'\$\s?(\d[\d,]*)')
BEDROOM_PATTERN = re.compile(r'(\d+)\s*bed(?:room)?s?', re.I)
BATHROOM_PATTERN = re.compile(r'(\d+(?:\.\d+)?)\s*bath(?:room)?s?', re.I)
SQFT_PATTERN = re.compile(r'(\d[\d,]*)\s*sq\.?\s*ft\.?', re.I)
PROPERTY_TYPE_PATTERN = re.compile(r'\b(' + '|'.join(map(re.escape, PROPERTY_TYPES)) + r')\b', re.I)


def _address_key(address: str) -> str:
    key = address.lower()
    for word, abbreviation in STREET_TYPE_ABBREVIATIONS.items():
        key = re.sub(rf'\b{word}\b', abbreviation, key)
    return key


def is_duplicate_address(candidate: str, accepted: str) -> bool:
    """True when either address contains the other, ignoring case and street-type spelling."""
    a, b = _address_key(candidate), _address_key(accepted)
    return a in b or b in a


def dedupe_addresses(addresses: Iterable[str]) -> List[str]:
    kept: List[str] = []
    for address in addresses:
        if not any(is_duplicate_address(address, existing) for existing in kept):
            kept.append(address)
    return kept


def dedupe_exact(values: Iterable[str]) -> List[str]:
    kept: List[str] = []
    for value in values:
        if value not in kept:
            kept.append(value)
    return kept


def find_mls_numbers(text: str, matchers=MLS_MATCHERS) -> List[str]:
    return dedupe_exact(c for m in matchers for c in m.find_candidates(text))


def find_addresses(text: str, matchers=ADDRESS_MATCHERS) -> List[str]:
    return dedupe_addresses(c for m in matchers for c in m.find_candidates(text))


def extract_property_details(text: str) -> PropertyDetails:
    details = PropertyDetails()

    prices = [p.replace(',', '') for p in PRICE_PATTERN.findall(text)]
    if prices:
        details.prices = prices

    bedroom_match = BEDROOM_PATTERN.search(text)
    if bedroom_match:
        details.bedrooms = bedroom_match.group(1)

    bathroom_match = BATHROOM_PATTERN.search(text)
    if bathroom_match:
        details.bathrooms = bathroom_match.group(1)

    sqft_match = SQFT_PATTERN.search(text)
    if sqft_match:
        details.square_footage = sqft_match.group(1).replace(',', '')

    type_match = PROPERTY_TYPE_PATTERN.search(text)
    if type_match:
        details.property_type = type_match.group(1).lower()

    return details


def extract(raw_text: str) -> PropertyExtractionResult:
    """Find MLS numbers, addresses and listing details in free text. Never raises on no match."""
    text = raw_text or ''

    result = PropertyExtractionResult(
        mls_numbers=find_mls_numbers(text),
        addresses=find_addresses(text),
        property_details=extract_property_details(text),
    )

    logger.info(
        f"Parsing complete: {len(result.mls_numbers)} MLS numbers, {len(result.addresses)} addresses"
    )
    return result


def is_valid_mls(mls_number: str) -> bool:
    """Check an MLS number against the strict listing identifier shapes (W12372194, N123456-A)."""
    if not isinstance(mls_number, str):
        return False
    return any(pattern.match(mls_number) for pattern in VALID_MLS_PATTERNS)
