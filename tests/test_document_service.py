import pytest

from agentvista.errors import TextExtractionError
from agentvista.service.document_service import DocumentService, extraction_payload
from agentvista.service.listing_service import ListingService

LISTING_TEXT = (
    "MLS# W12372194\n"
    "1103 - 4675 Metcalfe Avenue, Mississauga, Ontario\n"
    "Listed at $689,000. 2 bedrooms, 2 bathrooms, condo apartment."
)


class FakeExtractor:
    def __init__(self, text="", error=None):
        self.text = text
        self.error = error

    def extract_text(self, file_path, original_filename=None):
        if self.error:
            raise self.error
        return self.text


@pytest.fixture
def upload(tmp_path):
    path = tmp_path / "upload.pdf"
    path.write_bytes(b"%PDF-1.4")
    return path


def test_primary_property_is_attached(upload, ddf_client, memory_cache):
    service = DocumentService(FakeExtractor(LISTING_TEXT), ListingService(ddf_client, memory_cache))

    payload = service.process_document(str(upload), "listing.pdf")

    assert payload["success"]
    assert payload["mls_numbers"] == ["W12372194"]
    assert payload["property_details"]["prices"] == ["689000"]
    assert payload["primary_property"]["mls_number"] == "W12372194"
    assert payload["primary_property"]["address"] == "1103 - 4675 Metcalfe Ave, Mississauga, Ontario"
    assert payload["primary_property"]["full_data"]["price"] == 689000
    assert not upload.exists()


def test_unknown_listing_has_no_primary_property(upload, empty_ddf_client, memory_cache):
    service = DocumentService(FakeExtractor(LISTING_TEXT), ListingService(empty_ddf_client, memory_cache))

    payload = service.process_document(str(upload), "listing.pdf")

    assert payload["mls_numbers"] == ["W12372194"]
    assert "primary_property" not in payload


def test_lookup_failure_keeps_extraction(upload, failing_ddf_client, memory_cache):
    service = DocumentService(FakeExtractor(LISTING_TEXT), ListingService(failing_ddf_client, memory_cache))

    payload = service.process_document(str(upload), "listing.pdf")

    assert payload["addresses"]
    assert "primary_property" not in payload


def test_lookup_can_be_skipped(upload, ddf_client, memory_cache):
    service = DocumentService(FakeExtractor(LISTING_TEXT), ListingService(ddf_client, memory_cache))

    payload = service.process_document(str(upload), "listing.pdf", lookup_primary=False)

    assert "primary_property" not in payload
    assert ddf_client.calls == []


def test_file_removed_when_extraction_fails(upload):
    service = DocumentService(FakeExtractor(error=TextExtractionError("PDF", "damaged xref")))

    with pytest.raises(TextExtractionError):
        service.process_document(str(upload), "listing.pdf")

    assert not upload.exists()


def test_extraction_payload_echoes_text():
    payload = extraction_payload("nothing to see")

    assert payload == {
        "success": True,
        "extracted_text": "nothing to see",
        "mls_numbers": [],
        "addresses": [],
        "property_details": {},
    }
