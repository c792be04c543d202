import tempfile
from pathlib import Path

from docscan.commands.exceptions import CommandNotFoundError, CommandTimeoutError
from docscan.commands.runner import CommandRunner
from docscan.logging.logger import Log
from docscan.ocr.base import BaseOcrEngine
from docscan.ocr.exceptions import EngineUnavailableError, ExtractionFailedError

# Tesseract page segmentation mode 6: assume a single uniform block of text.
UNIFORM_BLOCK_PSM = 6


class TesseractCliAdapter(BaseOcrEngine):
    """Runs the ``tesseract`` binary and reads the ``.txt`` file it writes."""

    def __init__(
        self,
        runner: CommandRunner,
        binary: str = "tesseract",
        psm: int = UNIFORM_BLOCK_PSM,
        timeout_seconds: float = 120,
    ) -> None:
        self._runner = runner
        self._binary = binary
        self._psm = psm
        self._timeout_seconds = timeout_seconds

    def recognize(self, image_path: Path, language: str) -> str:
        if not image_path.exists():
            raise ExtractionFailedError(f"input file not found: {image_path}")

        with tempfile.TemporaryDirectory(prefix="docscan-ocr-") as tmp_dir:
            output_base = Path(tmp_dir) / image_path.stem
            command = [
                self._binary,
                str(image_path),
                str(output_base),
                "-l",
                language,
                "--psm",
                str(self._psm),
            ]
            try:
                result = self._runner.run(command, self._timeout_seconds)
            except CommandNotFoundError as exc:
                raise EngineUnavailableError("engine not installed") from exc
            except CommandTimeoutError as exc:
                raise ExtractionFailedError(str(exc)) from exc

            if not result.ok:
                raise ExtractionFailedError(
                    result.stderr.strip() or f"tesseract exited with status {result.exit_code}"
                )

            output_file = Path(f"{output_base}.txt")
            if not output_file.exists():
                raise ExtractionFailedError("tesseract produced no output file")
            text = output_file.read_text(encoding="utf-8", errors="replace")

        Log.debug(f"Recognized {len(text)} chars in {image_path.name}")
        return text.strip()
