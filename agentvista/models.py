# ============================================================
# File: agentvista/models.py
# ============================================================
from datetime import datetime
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

TIME_FORMAT = "%I:%M %p"


class AddressComponents(BaseModel):
    unit_number: Optional[str] = None
    street_number: Optional[str] = None
    street_name: str = ""
    street_type: Optional[str] = None
    city: Optional[str] = None
    province: Optional[str] = None
    neighborhood: Optional[str] = None


class AddressParseResult(BaseModel):
    """Tagged result of address normalization: success carries the address, failure a message."""
    success: bool
    address: Optional[str] = None
    components: Optional[AddressComponents] = None
    message: Optional[str] = None


class PropertyDetails(BaseModel):
    prices: Optional[List[str]] = None
    bedrooms: Optional[str] = None
    bathrooms: Optional[str] = None
    square_footage: Optional[str] = None
    property_type: Optional[str] = None


class PropertyExtractionResult(BaseModel):
    mls_numbers: List[str] = Field(default_factory=list)
    addresses: List[str] = Field(default_factory=list)
    property_details: PropertyDetails = Field(default_factory=PropertyDetails)


class Stop(BaseModel):
    model_config = ConfigDict(frozen=True)

    address: str
    visit_duration: int = Field(gt=0, description="Minutes spent on site")
    mls_number: Optional[str] = None


class StepKind(str, Enum):
    start = "Start"
    visit = "Visit Property"
    return_to_office = "Return to Office"


class RouteStep(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: StepKind
    index: Optional[int] = None
    address: str
    arrival_time: datetime
    duration: str
    visit_duration: Optional[int] = None
    distance: Optional[str] = None
    mls_number: Optional[str] = None
    real_travel_time: bool = False

    @property
    def label(self) -> str:
        if self.kind == StepKind.visit:
            return f"{self.kind.value} {self.index}"
        return self.kind.value

    @property
    def arrival_label(self) -> str:
        return self.arrival_time.strftime(TIME_FORMAT)


class RoutePlan(BaseModel):
    model_config = ConfigDict(frozen=True)

    steps: List[RouteStep]
    total_duration: str
    total_distance: Optional[str] = None
    google_maps_url: str
    optimization_notes: Optional[str] = None
    simulated: bool = False
    driving_minutes: int = 0
    visiting_minutes: int = 0

    @property
    def start_time(self) -> str:
        return self.steps[0].arrival_label

    @property
    def return_time(self) -> str:
        return self.steps[-1].arrival_label
