import os
import tempfile

from fastapi import Depends, FastAPI, File, HTTPException, UploadFile

from agentvista.config import Config
from agentvista.directions_client import get_directions_provider
from agentvista.errors import AgentVistaError
from agentvista.helper.address_normalizer import extract_url_slug, parse_address_from_url
from agentvista.helper.property_extractor import is_valid_mls
from agentvista.logger import get_logger
from agentvista.models import Stop
from agentvista.service.document_service import DocumentService, extraction_payload
from agentvista.service.listing_service import ListingService
from agentvista.service.route_planner import RoutePlanner
from agentvista.service.text_extraction_service import detect_extension
from agentvista.settings.schemas import (
    AddressParseRequest,
    ListingSearchRequest,
    MLSValidateRequest,
    RouteRequest,
    TextExtractRequest,
)
from agentvista.utils import (
    build_shareable_route_info,
    generate_filename,
    save_to_json,
    serialize_route_plan,
)

logger = get_logger(__name__)

app = FastAPI(
    title="Agent Vista API",
    description="MLS listing lookup, listing document extraction and showing-route planning for real-estate agents",
    version="1.0.0"
)


# Service providers
def get_listing_service() -> ListingService:
    return ListingService()


def get_document_service(listing_service: ListingService = Depends(get_listing_service)) -> DocumentService:
    return DocumentService(listing_service=listing_service)


def get_route_planner() -> RoutePlanner:
    return RoutePlanner(directions_provider=get_directions_provider())


# API Endpoints
@app.get("/")
def read_root():
    """Root endpoint"""
    return {
        "message": "Agent Vista API",
        "version": "1.0.0",
        "features": [
            "MLS listing lookup via CREA DDF with caching",
            "MLS number and address extraction from PDFs and images",
            "Listing URL slug to postal address parsing",
            "Showing route planning with Google Maps travel times"
        ],
        "endpoints": {
            "POST /api/search": "Look up a listing by MLS number",
            "GET /api/listings/{mls_number}/details": "Get every DDF field for a listing",
            "POST /api/address/parse": "Parse an address from a listing URL or slug",
            "POST /api/documents/upload": "Extract listing data from a PDF or image",
            "POST /api/documents/extract-text": "Extract listing data from raw text",
            "POST /api/mls/validate": "Check MLS numbers against the listing number format",
            "POST /api/route/optimize": "Plan a route from the office through 1-5 properties",
            "POST /api/cache/clear": "Clear listing cache",
            "GET /api/cache/stats": "Get cache statistics",
            "GET /health": "Health check",
            "GET /docs": "Swagger documentation"
        }
    }


@app.post("/api/search")
def search_listing(request: ListingSearchRequest, listing_service: ListingService = Depends(get_listing_service)):
    """Look up a listing address and details by MLS number"""
    if not request.listing_number.strip():
        raise HTTPException(status_code=400, detail="Listing number is required.")

    try:
        logger.info(f"Received search request for listing: {request.listing_number}")
        return listing_service.search_listing(request.listing_number)
    except AgentVistaError as e:
        raise HTTPException(status_code=e.code or 500, detail=e.message)
    except Exception as e:
        logger.exception("Listing search failed")
        raise HTTPException(status_code=500, detail=f"Error: {str(e)}")


@app.get("/api/listings/{mls_number}/details")
def listing_details(mls_number: str, listing_service: ListingService = Depends(get_listing_service)):
    """Get the full DDF record for a listing"""
    try:
        result = listing_service.get_listing_details(mls_number)
    except AgentVistaError as e:
        raise HTTPException(status_code=e.code or 500, detail=e.message)

    if not result.get("success"):
        raise HTTPException(status_code=404, detail=result.get("message", "Property not found"))
    return result


@app.post("/api/address/parse")
def parse_address(request: AddressParseRequest):
    """Parse a postal address from a listing URL or its address slug"""
    slug = request.slug.strip()
    if slug.startswith("http"):
        slug = extract_url_slug(slug)
        if not slug:
            raise HTTPException(status_code=400, detail="URL is not a listing page URL")

    result = parse_address_from_url(slug)
    return result.model_dump(exclude_none=True)


@app.post("/api/documents/upload")
def upload_document(file: UploadFile = File(...), document_service: DocumentService = Depends(get_document_service)):
    """
    Extract MLS numbers, addresses and listing details from a PDF or image

    The first MLS number found is looked up and returned as primary_property.
    """
    extension = detect_extension(file.filename or "")
    if extension and extension not in Config.SUPPORTED_DOCUMENT_FORMATS:
        raise HTTPException(
            status_code=400,
            detail=f"Invalid file type. Supported formats: {', '.join(Config.SUPPORTED_DOCUMENT_FORMATS)}"
        )

    contents = file.file.read()
    if len(contents) > Config.MAX_UPLOAD_SIZE_MB * 1024 * 1024:
        raise HTTPException(status_code=413, detail=f"File larger than {Config.MAX_UPLOAD_SIZE_MB}MB")

    os.makedirs(Config.UPLOAD_DIR, exist_ok=True)
    with tempfile.NamedTemporaryFile(dir=Config.UPLOAD_DIR, suffix=extension, delete=False) as tmp:
        tmp.write(contents)
        tmp_path = tmp.name

    logger.info(f"Processing uploaded document: {file.filename} ({len(contents)} bytes)")

    try:
        return document_service.process_document(tmp_path, file.filename)
    except AgentVistaError as e:
        raise HTTPException(status_code=e.code or 500, detail=e.message)
    except Exception as e:
        logger.exception("Document processing failed")
        raise HTTPException(status_code=500, detail=f"Error: {str(e)}")


@app.post("/api/documents/extract-text")
def extract_from_text(request: TextExtractRequest):
    """Extract listing data from text that was already pulled out of a document"""
    return extraction_payload(request.text)


@app.post("/api/mls/validate")
def validate_mls(request: MLSValidateRequest):
    """Classify each value as a valid or invalid MLS number"""
    return {
        "results": [
            {"value": value, "valid": is_valid_mls(value.strip().upper())}
            for value in request.values
        ]
    }


@app.post("/api/route/optimize")
def optimize_route(request: RouteRequest, planner: RoutePlanner = Depends(get_route_planner)):
    """
    Plan a showing route from the office through 1-5 properties and back

    Uses Google Maps travel times when GOOGLE_MAPS_API_KEY is set and falls
    back to simulated travel times otherwise.
    """
    if not request.office_address or not request.office_address.strip():
        raise HTTPException(status_code=400, detail="Office address is required.")

    if not request.properties:
        raise HTTPException(status_code=400, detail="At least one property is required.")

    if len(request.properties) > Config.MAX_ROUTE_STOPS:
        raise HTTPException(status_code=400, detail=f"Maximum of {Config.MAX_ROUTE_STOPS} properties allowed.")

    try:
        stops = [Stop(**prop.model_dump()) for prop in request.properties]

        logger.info(f"Received route optimization request for {len(stops)} properties")
        plan = planner.plan_route(request.office_address, stops)

        response = {"success": True, "route": serialize_route_plan(plan)}

        if request.save_to_file:
            share_info = build_shareable_route_info(request.office_address, stops, plan)
            response["file_saved"] = save_to_json(share_info, generate_filename("route"), Config.ROUTE_EXPORT_DIR)

        return response
    except HTTPException:
        raise
    except Exception as e:
        logger.exception("Route optimization failed")
        raise HTTPException(status_code=500, detail=f"Error: {str(e)}")


@app.post("/api/cache/clear")
def clear_cache(listing_service: ListingService = Depends(get_listing_service)):
    """Clear listing lookup cache"""
    count = listing_service.clear_cache()
    return {
        "status": "success",
        "message": f"Cleared {count} cache entries"
    }


@app.get("/api/cache/stats")
def cache_stats(listing_service: ListingService = Depends(get_listing_service)):
    """Get cache statistics"""
    return listing_service.get_cache_stats()


@app.get("/health")
def health_check(listing_service: ListingService = Depends(get_listing_service)):
    """Health check endpoint"""
    return {
        "status": "healthy",
        "cache": listing_service.cache_health(),
        "directions": "google_maps" if Config.GOOGLE_MAPS_API_KEY else "simulated",
        "listing_lookup": "configured" if Config.DDF_ACCESS_TOKEN else "not_configured",
        "max_route_stops": Config.MAX_ROUTE_STOPS
    }


@app.on_event("startup")
async def startup_event():
    """Validate configuration and log startup information"""
    Config.validate()
    logger.info("AGENT VISTA API - STARTUP")
    logger.info(f"Directions: {'Google Maps API' if Config.GOOGLE_MAPS_API_KEY else 'simulation mode'}")
    logger.info(f"Listing lookup: {'DDF API' if Config.DDF_ACCESS_TOKEN else 'DDF_ACCESS_TOKEN not set'}")
    logger.info("API Documentation: http://localhost:8000/docs")


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=int(os.getenv("PORT", "8000")))
