from pathlib import Path

import pdfplumber

from docscan.logging.logger import Log
from docscan.pdf.base import BasePdfExtractor
from docscan.pdf.exceptions import PdfExtractionError


class PdfPlumberAdapter(BasePdfExtractor):
    """Reads the text layer of scanner-produced PDFs with pdfplumber."""

    def extract(self, pdf_path: Path) -> str:
        try:
            with pdfplumber.open(pdf_path) as pdf:
                page_texts = [(page.extract_text() or "").strip() for page in pdf.pages]
        except Exception as exc:
            raise PdfExtractionError(f"pdfplumber could not read {pdf_path.name}: {exc}") from exc

        text_pages = [text for text in page_texts if text]
        Log.debug(
            f"pdfplumber found text on {len(text_pages)}/{len(page_texts)} pages",
            file=pdf_path.name,
        )
        return "\n".join(text_pages)
