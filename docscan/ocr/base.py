from abc import ABC, abstractmethod
from pathlib import Path


class BaseOcrEngine(ABC):
    """Contract for image text-recognition engines."""

    @abstractmethod
    def recognize(self, image_path: Path, language: str) -> str:
        """Return the raw text recognized in *image_path*.

        Raises:
            EngineUnavailableError: if the engine is not installed.
            ExtractionFailedError: on any other recognition failure.
        """
