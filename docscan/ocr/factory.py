from docscan.commands.runner import CommandRunner
from docscan.config.settings import Settings
from docscan.ocr.extractor import OcrExtractor
from docscan.ocr.tesseract_cli_adapter import TesseractCliAdapter
from docscan.pdf.factory import PdfExtractorFactory


class OcrExtractorFactory:
    """Builds the OCR extractor with the engine and PDF adapter from settings."""

    @classmethod
    def create(cls, settings: Settings, runner: CommandRunner) -> OcrExtractor:
        engine = TesseractCliAdapter(
            runner,
            binary=settings.ocr_engine_path,
            psm=settings.ocr_page_segmentation_mode,
            timeout_seconds=settings.ocr_timeout_seconds,
        )
        return OcrExtractor(
            ocr_engine=engine,
            pdf_extractor=PdfExtractorFactory.create(settings, runner),
            default_language=settings.ocr_language,
        )
