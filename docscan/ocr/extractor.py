from pathlib import Path

from docscan.logging.logger import Log
from docscan.ocr.base import BaseOcrEngine
from docscan.ocr.confidence import score_confidence
from docscan.ocr.exceptions import EngineUnavailableError, ExtractionFailedError
from docscan.ocr.models import OcrResult
from docscan.pdf.base import BasePdfExtractor
from docscan.pdf.exceptions import PdfExtractionError

PDF_MIME_TYPE = "application/pdf"


class OcrExtractor:
    """Turns an acquired file into text plus a confidence score.

    PDFs go through the PDF text layer; every other mime type goes to the OCR
    engine. Failures are reported in the returned :class:`OcrResult`, never
    raised, so callers can still archive unreadable documents.
    """

    def __init__(
        self,
        ocr_engine: BaseOcrEngine,
        pdf_extractor: BasePdfExtractor,
        default_language: str = "eng",
    ) -> None:
        self._ocr_engine = ocr_engine
        self._pdf_extractor = pdf_extractor
        self._default_language = default_language

    def extract(
        self,
        file_path: str | Path,
        mime_type: str,
        language: str | None = None,
    ) -> OcrResult:
        language = language or self._default_language
        path = Path(file_path)
        try:
            if mime_type.lower() == PDF_MIME_TYPE:
                text = self._pdf_extractor.extract(path)
            else:
                text = self._ocr_engine.recognize(path, language)
        except EngineUnavailableError as exc:
            Log.warning(f"OCR skipped for {path.name}: {exc}")
            return OcrResult.failed("engine not installed", language)
        except (ExtractionFailedError, PdfExtractionError) as exc:
            Log.warning(f"Text extraction failed for {path.name}: {exc}")
            return OcrResult.failed(str(exc), language)

        confidence = score_confidence(text)
        Log.info(
            f"Extracted {len(text)} chars from {path.name}",
            confidence=confidence,
            language=language,
        )
        return OcrResult(
            success=True,
            text=text,
            confidence_score=confidence,
            language=language,
        )
