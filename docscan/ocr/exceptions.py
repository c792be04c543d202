class OcrError(Exception):
    """Base exception for text recognition."""


class EngineUnavailableError(OcrError):
    """Raised when the OCR engine binary is not installed on the host."""


class ExtractionFailedError(OcrError):
    """Raised when the engine ran but produced no usable text."""

    def __init__(self, reason: str) -> None:
        self.reason = reason
        super().__init__(reason)
