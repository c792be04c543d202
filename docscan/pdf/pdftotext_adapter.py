from pathlib import Path

from docscan.commands.exceptions import CommandError
from docscan.commands.runner import CommandRunner
from docscan.pdf.base import BasePdfExtractor
from docscan.pdf.exceptions import PdfExtractionError


class PdfToTextAdapter(BasePdfExtractor):
    """Extracts text with poppler's ``pdftotext``, reading the result from stdout."""

    def __init__(
        self,
        runner: CommandRunner,
        command: str = "pdftotext",
        timeout_seconds: float = 60,
    ) -> None:
        self._runner = runner
        self._command = command
        self._timeout_seconds = timeout_seconds

    def extract(self, pdf_path: Path) -> str:
        try:
            result = self._runner.run(
                [self._command, "-layout", str(pdf_path), "-"],
                self._timeout_seconds,
            )
        except CommandError as exc:
            raise PdfExtractionError(f"pdftotext extraction failed: {exc}") from exc
        if not result.ok:
            raise PdfExtractionError(
                f"pdftotext extraction failed: {result.stderr.strip() or result.exit_code}"
            )
        return result.stdout.strip()
