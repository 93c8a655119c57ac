class AgentVistaError(Exception):
    """Base class for all custom errors in the project."""
    def __init__(self, message="An error occurred", code=None):
        super().__init__(message)
        self.message = message
        self.code = code  # HTTP status the API layer answers with

    def __str__(self):
        return f"[{self.code}] {self.message}" if self.code else self.message


# --- Specific Error Classes --- #
class UnsupportedFileTypeError(AgentVistaError):
    """Raised when an uploaded document has an extension we cannot read."""
    def __init__(self, extension, allowed_extensions=None):
        message = f"Unsupported file format: '{extension}'"
        if allowed_extensions:
            message = message + f". Supported formats: {', '.join(allowed_extensions)}"
        super().__init__(message, code=400)


class TextExtractionError(AgentVistaError):
    """Raised when PDF parsing or OCR fails on a supported document."""
    def __init__(self, source, reason):
        super().__init__(f"Failed to extract text from {source}: {reason}", code=422)


class ListingLookupError(AgentVistaError):
    """Raised when the listing service cannot be queried."""
    def __init__(self, reason):
        super().__init__(f"DDF API search failed: {reason}", code=502)


class DirectionsError(AgentVistaError):
    """Raised when the directions provider cannot be reached or rejects the request."""
    def __init__(self, status, detail=None):
        self.status = status
        message = f"Directions API error: {status}"
        if detail:
            message = message + f" - {detail}"
        super().__init__(message, code=502)


class InvalidListingNumberError(AgentVistaError):
    """Raised when a listing number is not an MLS number or DDF listing key."""
    def __init__(self, value):
        super().__init__(f"Invalid listing number: {value!r}", code=400)
