from abc import ABC, abstractmethod
from pathlib import Path


class BasePdfExtractor(ABC):
    """Contract for all PDF text extraction adapters."""

    @abstractmethod
    def extract(self, pdf_path: Path) -> str:
        """Extract the embedded text layer of a PDF file.

        Args:
            pdf_path: Path to a text-bearing (vector) PDF.

        Returns:
            Page texts joined by newlines and stripped. Empty for image-only PDFs.

        Raises:
            PdfExtractionError: if extraction fails for any reason.
        """
