"""
Multi-stop visiting route for an agent's showing day.

Stops are ordered by a geographic clustering heuristic (city priority, then
street name), then timed either with real driving legs from a directions
provider or with simulated leg durations when the provider is missing or
fails. Both paths produce the same RoutePlan shape.
"""
import math
import random
import re
from datetime import datetime, timedelta
from typing import Callable, Dict, List, Optional, Protocol, Sequence
from urllib.parse import quote

from agentvista.config import Config
from agentvista.logger import get_logger
from agentvista.models import RoutePlan, RouteStep, StepKind, Stop

logger = get_logger(__name__)

# Starting from a Richmond Hill office: local first, then adjacent north,
# northeast, then south and west
CITY_PRIORITY = {
    'Richmond Hill': 1,
    'Vaughan': 2,
    'Markham': 3,
    'North York': 4,
    'Scarborough': 5,
    'Toronto': 6,
    'Mississauga': 7,
    'Brampton': 8,
    'Oshawa': 9,
}
UNKNOWN_CITY_PRIORITY = 999
UNKNOWN_CITY = 'Unknown'

PROVIDER_NOTES = 'Real-time travel estimates from Google Maps API with current traffic conditions.'
SIMULATION_NOTES = (
    'Note: travel times are simulated estimates, not measured driving times. '
    'Configure GOOGLE_MAPS_API_KEY for real traffic data.'
)

DIRECTIONS_OPTIONS = {
    'optimize_waypoints': False,  # order is fixed by simulate_optimal_order
    'departure_time': 'now',
    'traffic_model': 'best_guess',
}


class DirectionsProvider(Protocol):
    def route(self, origin: str, destination: str, waypoints: List[str], options: Dict): ...


def extract_city(address: str) -> str:
    """City from a formatted "STREET, CITY, PROVINCE" address"""
    parts = address.split(',')
    if len(parts) >= 2 and parts[1].strip():
        return parts[1].strip()
    return UNKNOWN_CITY


def extract_street(address: str) -> str:
    return address.split(',')[0].strip()


def _collation_key(value: str):
    return value.casefold(), value


def order_cities(cities: Sequence[str]) -> List[str]:
    return sorted(
        cities,
        key=lambda city: (CITY_PRIORITY.get(city, UNKNOWN_CITY_PRIORITY), _collation_key(city)),
    )


def simulate_optimal_order(stops: Sequence[Stop]) -> List[Stop]:
    """Group stops by city, visit cities by priority and streets in name order"""
    grouped: Dict[str, List[Stop]] = {}
    for stop in stops:
        grouped.setdefault(extract_city(stop.address), []).append(stop)

    ordered: List[Stop] = []
    for city in order_cities(list(grouped)):
        city_stops = sorted(grouped[city], key=lambda s: _collation_key(extract_street(s.address)))
        ordered.extend(city_stops)

    logger.info(f"[ROUTE] Optimized order: {[extract_city(s.address) + ': ' + s.address for s in ordered]}")
    return ordered


def build_google_maps_url(office_address: str, stops: Sequence[Stop]) -> str:
    """https://www.google.com/maps/dir/origin/waypoint1/.../destination/"""
    addresses = [office_address] + [stop.address for stop in stops] + [office_address]
    encoded = [quote(address, safe="-_.!~*'()") for address in addresses]
    return f"{Config.GOOGLE_MAPS_DIR_URL}/{'/'.join(encoded)}/"


def format_total_duration(driving_minutes: int, visiting_minutes: int) -> str:
    total = driving_minutes + visiting_minutes
    return f"{total // 60}h {total % 60}m ({driving_minutes}m driving + {visiting_minutes}m visiting)"


DISTANCE_PATTERN = re.compile(r'(\d[\d,]*(?:\.\d+)?|\.\d+)\s*(km|mi|m|ft)?\b', re.I)
KM_PER_UNIT = {'km': 1.0, 'm': 0.001, 'mi': 1.609344, 'ft': 0.0003048}


def parse_distance_km(distance_text: str) -> float:
    """Kilometres in a provider leg label such as "12.4 km" or "500 m"; unitless numbers count as km"""
    match = DISTANCE_PATTERN.search(distance_text or '')
    if not match:
        return 0.0
    value = float(match.group(1).replace(',', ''))
    unit = (match.group(2) or 'km').lower()
    return value * KM_PER_UNIT[unit]


def validate_addresses(addresses) -> bool:
    """Basic pre-check: every address is a string with more than 5 characters"""
    return all(
        isinstance(address, str) and len(address.strip()) > 5
        for address in addresses
    )


def random_leg_minutes() -> int:
    return random.randint(Config.SIMULATED_LEG_MIN_MINUTES, Config.SIMULATED_LEG_MAX_MINUTES)


class RoutePlanner:
    def __init__(self, directions_provider: Optional[DirectionsProvider] = None,
                 clock: Callable[[], datetime] = datetime.now,
                 leg_minutes: Callable[[], int] = random_leg_minutes):
        self.directions_provider = directions_provider
        self.clock = clock
        self.leg_minutes = leg_minutes

    def plan_route(self, office_address: str, stops: Sequence[Stop]) -> RoutePlan:
        ordered = simulate_optimal_order(stops)

        if self.directions_provider is None:
            logger.info("[ROUTE] No directions provider configured, simulating travel times")
            return self._simulate(office_address, ordered)

        try:
            return self._plan_with_provider(office_address, ordered)
        except Exception as e:
            logger.warning(f"[ROUTE] Directions provider failed, falling back to simulation: {e}")
            return self._simulate(office_address, ordered)

    def _plan_with_provider(self, office_address: str, ordered: List[Stop]) -> RoutePlan:
        response = self.directions_provider.route(
            office_address,
            office_address,
            [stop.address for stop in ordered],
            DIRECTIONS_OPTIONS,
        )

        if response.status != 'OK':
            raise RuntimeError(f"Directions status {response.status}: {response.error_message or 'Unknown error'}")
        legs = response.legs
        if len(legs) != len(ordered) + 1:
            raise RuntimeError(f"Expected {len(ordered) + 1} route legs, got {len(legs)}")

        current_time = self.clock()
        steps = [RouteStep(
            kind=StepKind.start,
            address=office_address,
            arrival_time=current_time,
            duration='0 minutes',
            real_travel_time=True,
        )]
        total_driving_seconds = 0
        total_visit_minutes = 0

        for index, leg in enumerate(legs):
            driving_minutes = math.ceil(leg.duration_seconds / 60)
            total_driving_seconds += leg.duration_seconds
            current_time += timedelta(seconds=leg.duration_seconds)
            duration = f"{driving_minutes} minutes driving"
            if leg.duration_text:
                duration += f" ({leg.duration_text})"

            if index < len(ordered):
                stop = ordered[index]
                steps.append(RouteStep(
                    kind=StepKind.visit,
                    index=index + 1,
                    address=stop.address,
                    arrival_time=current_time,
                    duration=duration,
                    distance=leg.distance_text or None,
                    visit_duration=stop.visit_duration,
                    mls_number=stop.mls_number,
                    real_travel_time=True,
                ))
                total_visit_minutes += stop.visit_duration
                current_time += timedelta(minutes=stop.visit_duration)
            else:
                steps.append(RouteStep(
                    kind=StepKind.return_to_office,
                    address=office_address,
                    arrival_time=current_time,
                    duration=duration,
                    distance=leg.distance_text or None,
                    real_travel_time=True,
                ))

        total_driving_minutes = math.ceil(total_driving_seconds / 60)
        total_distance_km = sum(parse_distance_km(leg.distance_text) for leg in legs)

        logger.info(
            f"[ROUTE] Provider route complete: {total_driving_minutes}m driving, "
            f"{total_visit_minutes}m visiting, {total_distance_km:.1f} km, {len(steps)} steps"
        )

        return RoutePlan(
            steps=steps,
            total_duration=format_total_duration(total_driving_minutes, total_visit_minutes),
            total_distance=f"{total_distance_km:.1f} km",
            google_maps_url=build_google_maps_url(office_address, ordered),
            optimization_notes=PROVIDER_NOTES,
            simulated=False,
            driving_minutes=total_driving_minutes,
            visiting_minutes=total_visit_minutes,
        )

    def _simulate(self, office_address: str, ordered: List[Stop]) -> RoutePlan:
        current_time = self.clock()
        steps = [RouteStep(
            kind=StepKind.start,
            address=office_address,
            arrival_time=current_time,
            duration='0 minutes',
        )]
        total_driving_minutes = 0
        total_visit_minutes = 0

        for index, stop in enumerate(ordered):
            driving_minutes = self.leg_minutes()
            total_driving_minutes += driving_minutes
            current_time += timedelta(minutes=driving_minutes)

            steps.append(RouteStep(
                kind=StepKind.visit,
                index=index + 1,
                address=stop.address,
                arrival_time=current_time,
                duration=f"{driving_minutes} minutes driving",
                visit_duration=stop.visit_duration,
                mls_number=stop.mls_number,
            ))

            total_visit_minutes += stop.visit_duration
            current_time += timedelta(minutes=stop.visit_duration)

        return_minutes = self.leg_minutes()
        total_driving_minutes += return_minutes
        current_time += timedelta(minutes=return_minutes)
        steps.append(RouteStep(
            kind=StepKind.return_to_office,
            address=office_address,
            arrival_time=current_time,
            duration=f"{return_minutes} minutes driving",
        ))

        return RoutePlan(
            steps=steps,
            total_duration=format_total_duration(total_driving_minutes, total_visit_minutes),
            google_maps_url=build_google_maps_url(office_address, ordered),
            optimization_notes=SIMULATION_NOTES,
            simulated=True,
            driving_minutes=total_driving_minutes,
            visiting_minutes=total_visit_minutes,
        )


def plan_route(office_address: str, stops: Sequence[Stop],
               directions_provider: Optional[DirectionsProvider] = None) -> RoutePlan:
    """Order the stops and time the round trip from the office"""
    return RoutePlanner(directions_provider).plan_route(office_address, stops)
