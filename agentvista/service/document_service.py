import os
from typing import Any, Dict, Optional

from agentvista.errors import AgentVistaError
from agentvista.helper.property_extractor import extract
from agentvista.logger import get_logger
from agentvista.service.listing_service import ListingService
from agentvista.service.text_extraction_service import TextExtractionService

logger = get_logger(__name__)


def cleanup_temp_file(file_path: str):
    try:
        if os.path.exists(file_path):
            os.remove(file_path)
            logger.info(f"Cleaned up temporary file: {file_path}")
    except OSError as e:
        logger.error(f"Error cleaning up temp file: {e}")


def extraction_payload(text: str) -> Dict[str, Any]:
    result = extract(text)
    return {
        "success": True,
        "extracted_text": text,
        **result.model_dump(exclude_none=True),
    }


class DocumentService:
    def __init__(self, text_extractor: Optional[TextExtractionService] = None,
                 listing_service: Optional[ListingService] = None):
        self.text_extractor = text_extractor or TextExtractionService()
        self.listing_service = listing_service

    def process_document(self, file_path: str, original_filename: Optional[str] = None,
                         lookup_primary: bool = True) -> Dict[str, Any]:
        """
        Extract MLS numbers, addresses and details from an uploaded document.

        The file is removed afterwards. When an MLS number is found, the first
        one is looked up and attached as primary_property if it resolves.
        """
        try:
            logger.info(f"Processing document: {original_filename or file_path}")
            text = self.text_extractor.extract_text(file_path, original_filename)
        finally:
            cleanup_temp_file(file_path)

        payload = extraction_payload(text)

        if lookup_primary and self.listing_service and payload["mls_numbers"]:
            primary = self._lookup_primary(payload["mls_numbers"][0])
            if primary:
                payload["primary_property"] = primary

        return payload

    def _lookup_primary(self, mls_number: str) -> Optional[Dict[str, Any]]:
        logger.info(f"Attempting to get full property info for MLS: {mls_number}")
        try:
            result = self.listing_service.search_listing(mls_number)
        except AgentVistaError as e:
            logger.warning(f"Could not fetch full property data: {e}")
            return None

        if not result.get("success"):
            return None

        return {
            "mls_number": mls_number,
            "address": result.get("address"),
            "full_data": result.get("property") or {},
        }
