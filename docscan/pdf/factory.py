from docscan.commands.runner import CommandRunner
from docscan.config.settings import Settings
from docscan.pdf.base import BasePdfExtractor
from docscan.pdf.pdfplumber_adapter import PdfPlumberAdapter
from docscan.pdf.pdftotext_adapter import PdfToTextAdapter
from docscan.pdf.pymupdf_adapter import PyMuPdfAdapter


class PdfExtractorFactory:
    """Creates the correct PDF extractor based on settings."""

    ENGINES: tuple[str, ...] = ("pdfplumber", "pymupdf", "pdftotext")

    @classmethod
    def create(cls, settings: Settings, runner: CommandRunner) -> BasePdfExtractor:
        engine = settings.pdf_engine.lower()
        if engine == "pdfplumber":
            return PdfPlumberAdapter()
        if engine == "pymupdf":
            return PyMuPdfAdapter()
        if engine == "pdftotext":
            return PdfToTextAdapter(
                runner,
                command=settings.pdftotext_command,
                timeout_seconds=settings.pdf_timeout_seconds,
            )
        raise ValueError(
            f"Unknown PDF engine '{engine}'. Choose from: {list(cls.ENGINES)}"
        )
