# ================================================================
# Light Processor - Errors
# ================================================================
# Capacity exhaustion and empty walks are not errors; only the host
# side (text extraction, file ingestion) raises.
# ================================================================

INGESTION_FAILED_MESSAGE = "Error processing file. Please try again."


class LightProcessorError(Exception):
    """Base class for errors surfaced to the user."""


class UnsupportedFormatError(LightProcessorError):
    """Raised when no text extractor exists for a file type."""

    def __init__(self, suffix):
        self.suffix = suffix
        super().__init__(f"Unsupported file type: {suffix or '<none>'}")


class IngestionError(LightProcessorError):
    """Single flat failure for an ingestion call. The cause is chained."""

    def __init__(self, message=INGESTION_FAILED_MESSAGE, tokens_processed=0):
        self.tokens_processed = tokens_processed
        super().__init__(message)
