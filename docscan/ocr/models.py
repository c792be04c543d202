from dataclasses import dataclass


@dataclass(frozen=True)
class OcrResult:
    """Text recognized from one acquired file.

    ``confidence_score`` is the rule-based quality heuristic from
    :func:`docscan.ocr.confidence.score_confidence`, not a probability.
    """

    success: bool
    text: str = ""
    confidence_score: int = 0
    language: str = "eng"
    error_reason: str | None = None

    @property
    def word_count(self) -> int:
        return len(self.text.split())

    @property
    def character_count(self) -> int:
        return len(self.text)

    @classmethod
    def failed(cls, reason: str, language: str) -> "OcrResult":
        return cls(
            success=False,
            text="",
            confidence_score=0,
            language=language,
            error_reason=reason,
        )
