import requests
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from agentvista.config import Config
from agentvista.errors import DirectionsError
from agentvista.logger import get_logger

logger = get_logger(__name__)

STATUS_OK = "OK"


class DirectionsLeg(BaseModel):
    duration_seconds: int
    duration_text: str = ""
    distance_text: str = ""
    start_address: Optional[str] = None
    end_address: Optional[str] = None


class DirectionsResponse(BaseModel):
    status: str
    legs: List[DirectionsLeg] = Field(default_factory=list)
    error_message: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.status == STATUS_OK


class GoogleDirectionsClient:
    """Driving itineraries from the Google Maps Directions API"""

    def __init__(self, api_key: Optional[str] = None, base_url: Optional[str] = None,
                 timeout: Optional[int] = None):
        self.config = Config()
        self.api_key = api_key or self.config.GOOGLE_MAPS_API_KEY
        self.base_url = base_url or self.config.DIRECTIONS_API_URL
        self.timeout = timeout or self.config.DIRECTIONS_TIMEOUT

    def _build_params(self, origin: str, destination: str, waypoints: List[str],
                      options: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        options = options or {}
        params = {
            'origin': origin,
            'destination': destination,
            'units': 'metric',
            'key': self.api_key,
        }
        if waypoints:
            prefix = 'optimize:true|' if options.get('optimize_waypoints') else ''
            params['waypoints'] = prefix + '|'.join(waypoints)
        if options.get('departure_time'):
            params['departure_time'] = options['departure_time']
        if options.get('traffic_model'):
            params['traffic_model'] = options['traffic_model']
        return params

    @staticmethod
    def _parse_response(data: Dict[str, Any]) -> DirectionsResponse:
        status = data.get('status', 'UNKNOWN_ERROR')
        if status != STATUS_OK:
            return DirectionsResponse(status=status, error_message=data.get('error_message'))

        routes = data.get('routes') or []
        if not routes:
            return DirectionsResponse(status='ZERO_RESULTS', error_message='No routes returned')

        legs = []
        for leg in routes[0].get('legs', []):
            # duration_in_traffic is only present when departure_time was sent
            duration = leg.get('duration_in_traffic') or leg.get('duration', {})
            legs.append(DirectionsLeg(
                duration_seconds=int(duration.get('value', 0)),
                duration_text=duration.get('text', ''),
                distance_text=leg.get('distance', {}).get('text', ''),
                start_address=leg.get('start_address'),
                end_address=leg.get('end_address'),
            ))
        return DirectionsResponse(status=status, legs=legs)

    def route(self, origin: str, destination: str, waypoints: List[str],
              options: Optional[Dict[str, Any]] = None) -> DirectionsResponse:
        """Request a driving itinerary through the given waypoints, in order"""
        if not self.api_key:
            raise DirectionsError("REQUEST_DENIED", "GOOGLE_MAPS_API_KEY is not configured")

        params = self._build_params(origin, destination, waypoints, options)

        try:
            response = requests.get(self.base_url, params=params, timeout=self.timeout)
        except requests.RequestException as e:
            raise DirectionsError("NETWORK_ERROR", str(e)) from e

        if response.status_code != 200:
            raise DirectionsError(f"HTTP_{response.status_code}", response.text[:200])

        result = self._parse_response(response.json())
        if result.ok:
            logger.info(f"[DIRECTIONS] Received {len(result.legs)} legs for {len(waypoints)} waypoints")
        else:
            logger.warning(f"[DIRECTIONS] API returned {result.status}: {result.error_message}")
        return result


def get_directions_provider() -> Optional[GoogleDirectionsClient]:
    """Directions client when an API key is configured, otherwise None (simulation)"""
    if not Config.GOOGLE_MAPS_API_KEY:
        return None
    return GoogleDirectionsClient()
