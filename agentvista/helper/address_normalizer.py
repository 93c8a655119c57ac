"""
Address normalizer for listing URL slugs.

Turns a token sequence such as ``908-15-bay-street-toronto`` into structured
address components and a canonical display string
(``908 - 15 BAY ST, Toronto, Ontario``).
"""
import re
from typing import List, Optional, Sequence, Tuple

from agentvista.logger import get_logger
from agentvista.models import AddressComponents, AddressParseResult

logger = get_logger(__name__)

DEFAULT_PROVINCE = "Ontario"

# Common Canadian street suffixes and their abbreviations
STREET_SUFFIXES = {
    'avenue': 'Ave', 'ave': 'Ave',
    'street': 'St', 'st': 'St',
    'road': 'Rd', 'rd': 'Rd',
    'drive': 'Dr', 'dr': 'Dr',
    'boulevard': 'Blvd', 'blvd': 'Blvd',
    'lane': 'Ln', 'ln': 'Ln',
    'court': 'Ct', 'ct': 'Ct',
    'circle': 'Cir', 'cir': 'Cir',
    'crescent': 'Cres', 'cres': 'Cres',
    'place': 'Pl', 'pl': 'Pl',
    'way': 'Way',
    'terrace': 'Terr', 'terr': 'Terr',
}

# Localities spelled with two slug tokens, matched before single tokens
TWO_TOKEN_LOCALITIES = {
    ('richmond', 'hill'): 'Richmond Hill',
    ('north', 'york'): 'North York',
    ('east', 'york'): 'East York',
    ('st', 'catharines'): 'St. Catharines',
    ('new', 'westminster'): 'New Westminster',
    ('trois', 'rivieres'): 'Trois-Rivieres',
}

MAJOR_CITIES = {
    'toronto', 'montreal', 'vancouver', 'calgary', 'edmonton', 'ottawa', 'winnipeg',
    'quebec', 'hamilton', 'kitchener', 'london', 'victoria', 'halifax', 'oshawa',
    'windsor', 'saskatoon', 'regina', 'sherbrooke', 'barrie', 'kelowna', 'abbotsford',
    'kingston', 'sudbury', 'saguenay', 'guelph', 'cambridge', 'whitby', 'ajax',
    'langley', 'saanich', 'terrebonne', 'milton', 'coquitlam', 'richmond',
    'burlington', 'burnaby', 'laval', 'longueuil', 'mississauga', 'brampton',
    'markham', 'vaughan', 'scarborough', 'etobicoke', 'pickering', 'oakville',
    'newmarket', 'aurora',
}

DIRECTION_TOKENS = {'n', 's', 'e', 'w', 'ne', 'nw', 'se', 'sw'}

LISTING_URL_SEGMENT = 'real-estate'


def is_numeric(token: str) -> bool:
    return token.isdigit() and token.isascii()


def capitalize_word(word: str) -> str:
    return word[:1].upper() + word[1:].lower()


def match_locality(tokens: Sequence[str], i: int) -> Optional[Tuple[str, int]]:
    """Return (city, tokens consumed) when a known locality starts at position i."""
    if i >= len(tokens):
        return None

    if i + 1 < len(tokens):
        pair = (tokens[i], tokens[i + 1])
        if pair in TWO_TOKEN_LOCALITIES:
            return TWO_TOKEN_LOCALITIES[pair], 2

    if tokens[i] in MAJOR_CITIES:
        return capitalize_word(tokens[i]), 1

    return None


def find_city_after(tokens: Sequence[str], start: int) -> Optional[int]:
    """Index of the first known locality at or after start."""
    for j in range(start, len(tokens)):
        if match_locality(tokens, j):
            return j
    return None


def is_locality_start(tokens: Sequence[str], i: int) -> bool:
    if match_locality(tokens, i):
        return True
    # "KING-ST-E-OSHAWA": a direction suffix before a later city still ends the street
    return tokens[i] in DIRECTION_TOKENS and find_city_after(tokens, i + 1) is not None


def format_address(components: AddressComponents) -> str:
    address = ''

    if components.unit_number:
        address += f"{components.unit_number} - "

    if components.street_number:
        address += f"{components.street_number} "

    street = ' '.join(
        part.upper() for part in (components.street_name, components.street_type) if part
    )
    address += street
    address = address.rstrip()

    # Province is fixed until multi-province slugs are supported
    if components.city:
        address += f", {components.city}, {DEFAULT_PROVINCE}"

    return address.strip()


def normalize(tokens: Sequence[str]) -> AddressParseResult:
    """
    Parse lowercase slug tokens into address components.

    Never raises for ambiguous input; returns a failed result only when the
    token stream is too short or no street name could be formed.
    """
    tokens = [t.lower() for t in tokens if t]

    if len(tokens) < 3:
        return AddressParseResult(success=False, message='URL slug too short to parse address')

    unit_number = None
    street_number = None
    street_name: List[str] = []
    street_type = None
    city = None
    neighborhood = None

    i = 0

    # "908-15" = Unit 908, 15 Street
    if is_numeric(tokens[0]) and is_numeric(tokens[1]):
        unit_number, street_number = tokens[0], tokens[1]
        i = 2
    elif is_numeric(tokens[0]):
        street_number = tokens[0]
        i = 1

    # The first street token is always part of the name ("100-richmond-street-toronto")
    while i < len(tokens):
        token = tokens[i]
        if token in STREET_SUFFIXES and street_name:
            street_type = STREET_SUFFIXES[token]
            i += 1
            break
        if street_name and is_locality_start(tokens, i):
            break
        street_name.append(capitalize_word(token))
        i += 1

    if not street_name:
        return AddressParseResult(success=False, message='Could not parse street name from URL')

    if i < len(tokens):
        locality = match_locality(tokens, i)
        if locality:
            city, consumed = locality
            i += consumed
        elif tokens[i] in DIRECTION_TOKENS:
            city_index = find_city_after(tokens, i + 1)
            if city_index is not None:
                street_name.append(tokens[i].upper())
                city, consumed = match_locality(tokens, city_index)
                i = city_index + consumed

    # The rest is neighborhood/area information, never rendered
    if i < len(tokens):
        neighborhood = ' '.join(capitalize_word(t) for t in tokens[i:])

    components = AddressComponents(
        unit_number=unit_number,
        street_number=street_number,
        street_name=' '.join(street_name),
        street_type=street_type,
        city=city,
        province=DEFAULT_PROVINCE if city else None,
        neighborhood=neighborhood,
    )
    address = format_address(components)

    logger.debug(f"Parsed components: {components.model_dump(exclude_none=True)}")
    logger.debug(f"Formatted address: {address}")

    return AddressParseResult(success=True, address=address, components=components)


def tokenize_slug(slug: str) -> List[str]:
    cleaned = slug.lower().strip().strip('/')
    return [part for part in re.split(r'[-/]+', cleaned) if part]


def parse_address_from_url(url_slug: str) -> AddressParseResult:
    """Normalize a hyphen/slash-delimited slug like ``1103-4675-metcalfe-avenue-mississauga``."""
    logger.info(f"Parsing address from URL slug: {url_slug}")
    return normalize(tokenize_slug(url_slug))


def extract_url_slug(url: str) -> Optional[str]:
    """
    Pull the address slug out of a listing URL.

    Expected format: https://www.realtor.ca/real-estate/[id]/[address-slug]
    """
    parts = url.split('?')[0].split('#')[0].split('/')
    if len(parts) >= 6 and parts[3] == LISTING_URL_SEGMENT:
        slug = '/'.join(p for p in parts[5:] if p)
        return slug or None
    return None
