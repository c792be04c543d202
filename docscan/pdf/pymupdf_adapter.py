from pathlib import Path

import pymupdf

from docscan.logging.logger import Log
from docscan.pdf.base import BasePdfExtractor
from docscan.pdf.exceptions import PdfExtractionError


class PyMuPdfAdapter(BasePdfExtractor):
    """Reads the text layer of scanner-produced PDFs with PyMuPDF, in reading order."""

    def extract(self, pdf_path: Path) -> str:
        try:
            with pymupdf.open(str(pdf_path)) as doc:  # type: ignore[no-untyped-call]
                page_texts = [page.get_text("text", sort=True).strip() for page in doc]
        except Exception as exc:
            raise PdfExtractionError(f"pymupdf could not read {pdf_path.name}: {exc}") from exc

        text_pages = [text for text in page_texts if text]
        Log.debug(
            f"pymupdf found text on {len(text_pages)}/{len(page_texts)} pages",
            file=pdf_path.name,
        )
        return "\n".join(text_pages)
