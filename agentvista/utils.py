import json
import os
from typing import Dict, Any, Sequence
from datetime import datetime

from agentvista.logger import get_logger
from agentvista.models import RoutePlan, Stop

logger = get_logger(__name__)


def save_to_json(data: Dict[str, Any], filename: str, output_dir: str = "data/routes") -> str:
    """Save data to JSON file"""
    os.makedirs(output_dir, exist_ok=True)
    filepath = os.path.join(output_dir, filename)

    with open(filepath, "w", encoding="utf-8") as f:
        json.dump(data, f, indent=2)

    logger.info(f"Data saved to: {filepath}")
    return filepath


def generate_filename(prefix: str = "route") -> str:
    """Generate a timestamped JSON filename"""
    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S_%f")
    return f"{prefix}_{timestamp}.json"


def build_shareable_route_info(office_address: str, stops: Sequence[Stop], plan: RoutePlan) -> Dict[str, Any]:
    """Summary of a planned route that can be sent to a client or saved"""
    visits = [step for step in plan.steps if step.index is not None]
    return {
        "title": f"Real Estate Route Plan - {len(stops)} Properties",
        "office": office_address,
        "properties": [
            {
                "order": step.index,
                "address": step.address,
                "mls_number": step.mls_number,
                "visit_duration": step.visit_duration
            }
            for step in visits
        ],
        "summary": {
            "total_duration": plan.total_duration,
            "total_distance": plan.total_distance,
            "start_time": plan.start_time,
            "return_time": plan.return_time
        },
        "google_maps_url": plan.google_maps_url,
        "created_at": datetime.now().isoformat()
    }


def serialize_route_plan(plan: RoutePlan) -> Dict[str, Any]:
    """API shape of a route plan: steps with display labels and clock times"""
    return {
        "total_duration": plan.total_duration,
        "total_distance": plan.total_distance,
        "start_time": plan.start_time,
        "return_time": plan.return_time,
        "simulated": plan.simulated,
        "steps": [
            {
                "type": step.label,
                "address": step.address,
                "arrival_time": step.arrival_label,
                "duration": step.duration,
                "distance": step.distance,
                "visit_duration": step.visit_duration,
                "mls_number": step.mls_number,
                "real_travel_time": step.real_travel_time
            }
            for step in plan.steps
        ],
        "google_maps_url": plan.google_maps_url,
        "optimization_notes": plan.optimization_notes
    }
