from pydantic import BaseModel, ConfigDict, Field
from typing import List, Optional

# ============================================================
# PYDANTIC MODELS
# ============================================================


class ListingSearchRequest(BaseModel):
    model_config = ConfigDict(json_schema_extra={"example": {"listing_number": "W12372194"}})
    listing_number: str = ""


class AddressParseRequest(BaseModel):
    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "slug": "https://www.realtor.ca/real-estate/28794985/1103-4675-metcalfe-avenue-mississauga-central-erin-mills"
            }
        }
    )
    slug: str = Field(..., description="Address slug or a full listing URL")


class TextExtractRequest(BaseModel):
    text: str


class MLSValidateRequest(BaseModel):
    values: List[str]


class PropertyStopRequest(BaseModel):
    address: str
    visit_duration: int = Field(30, gt=0, description="Minutes spent at the property")
    mls_number: Optional[str] = None


class RouteRequest(BaseModel):
    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "office_address": "9555 YONGE ST, Richmond Hill, Ontario",
                "properties": [
                    {"address": "908 - 15 BAY ST, Toronto, Ontario", "visit_duration": 30, "mls_number": "C12345678"},
                    {"address": "100 MAJOR MACKENZIE DR, Vaughan, Ontario", "visit_duration": 45}
                ],
                "save_to_file": False
            }
        }
    )
    office_address: Optional[str] = None
    properties: List[PropertyStopRequest] = Field(default_factory=list)
    save_to_file: Optional[bool] = False
