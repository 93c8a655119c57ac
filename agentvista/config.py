import os
from dotenv import load_dotenv

load_dotenv()


class Config:
    # Google Maps Directions API
    GOOGLE_MAPS_API_KEY = os.getenv("GOOGLE_MAPS_API_KEY")
    DIRECTIONS_API_URL = os.getenv("DIRECTIONS_API_URL", "https://maps.googleapis.com/maps/api/directions/json")
    DIRECTIONS_TIMEOUT = int(os.getenv("DIRECTIONS_TIMEOUT", "30"))
    GOOGLE_MAPS_DIR_URL = "https://www.google.com/maps/dir"

    # CREA DDF API (bearer token is issued outside this service)
    DDF_API_BASE_URL = os.getenv("DDF_API_BASE_URL", "https://api.crea.ca/odata/v1")
    DDF_ACCESS_TOKEN = os.getenv("DDF_ACCESS_TOKEN")
    DDF_TIMEOUT = int(os.getenv("DDF_TIMEOUT", "30"))
    DDF_USER_AGENT = "AgentVista/1.0"

    # Redis Cache Configuration
    REDIS_HOST = os.getenv("REDIS_HOST", "localhost")
    REDIS_PORT = int(os.getenv("REDIS_PORT", "6379"))
    REDIS_PASSWORD = os.getenv("REDIS_PASSWORD", None)
    REDIS_DB = int(os.getenv("REDIS_DB", "0"))

    # Cache TTL Settings (seconds)
    CACHE_LISTING_TTL = int(os.getenv("CACHE_LISTING_TTL", "900"))  # 15 min
    ENABLE_LISTING_CACHE = os.getenv("ENABLE_LISTING_CACHE", "true").lower() == "true"

    # Route Planning
    MAX_ROUTE_STOPS = int(os.getenv("MAX_ROUTE_STOPS", "5"))
    SIMULATED_LEG_MIN_MINUTES = int(os.getenv("SIMULATED_LEG_MIN_MINUTES", "10"))
    SIMULATED_LEG_MAX_MINUTES = int(os.getenv("SIMULATED_LEG_MAX_MINUTES", "30"))
    ROUTE_EXPORT_DIR = os.getenv("ROUTE_EXPORT_DIR", "data/routes")

    # Document Uploads
    UPLOAD_DIR = os.getenv("UPLOAD_DIR", "uploads")
    MAX_UPLOAD_SIZE_MB = int(os.getenv("MAX_UPLOAD_SIZE_MB", "10"))
    SUPPORTED_DOCUMENT_FORMATS = ['.pdf', '.jpg', '.jpeg', '.png', '.bmp', '.tiff', '.webp']

    # Logging
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
    LOG_FILE = os.getenv("LOG_FILE")

    @classmethod
    def validate(cls):
        """Validate critical configuration"""
        errors = []

        if cls.MAX_ROUTE_STOPS < 1:
            errors.append("MAX_ROUTE_STOPS must be at least 1")

        if cls.SIMULATED_LEG_MIN_MINUTES < 1:
            errors.append("SIMULATED_LEG_MIN_MINUTES must be positive")

        if cls.SIMULATED_LEG_MIN_MINUTES > cls.SIMULATED_LEG_MAX_MINUTES:
            errors.append("SIMULATED_LEG_MIN_MINUTES is greater than SIMULATED_LEG_MAX_MINUTES")

        if cls.MAX_UPLOAD_SIZE_MB < 1:
            errors.append("MAX_UPLOAD_SIZE_MB must be at least 1")

        if errors:
            raise ValueError(f"Configuration errors: {', '.join(errors)}")

        return True
