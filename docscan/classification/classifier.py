"""Pattern-based metadata classification of recognized text.

Everything here is a pure function of ``(text, filename)``. Document type
rules are checked in order and the first match wins.
"""

import re
from collections import Counter
from typing import ClassVar

from docscan.classification.models import GENERAL_DOCUMENT, ExtractedMetadata
from docscan.ocr.confidence import score_confidence

_MONTHS = (
    "January|February|March|April|May|June|July|August|September|October|"
    "November|December|Jan|Feb|Mar|Apr|Jun|Jul|Aug|Sept|Sep|Oct|Nov|Dec"
)
_AMOUNT = r"\d+(?:,\d{3})*(?:\.\d+)?"
_CAPITALIZED = r"[A-Z][\w&'-]*"


def _unique(values: list[str]) -> list[str]:
    return list(dict.fromkeys(v.strip() for v in values if v.strip()))


class MetadataClassifier:
    """Derives document type, keywords and references from OCR text."""

    DOCUMENT_TYPE_RULES: ClassVar[list[tuple[str, tuple[str, ...]]]] = [
        ("Invoice", ("invoice", "bill")),
        ("Contract", ("contract", "agreement", "terms and conditions")),
        ("Receipt", ("receipt", "payment", "total amount")),
        ("Report", ("report", "summary", "analysis")),
        ("Certificate", ("certificate", "certified")),
        ("Letter", ("dear", "sincerely", "yours truly")),
    ]

    MAX_KEYWORDS: ClassVar[int] = 10
    MIN_KEYWORD_LENGTH: ClassVar[int] = 4

    CONFIDENTIAL_MARKERS: ClassVar[tuple[str, ...]] = (
        "confidential",
        "secret",
        "restricted",
        "private",
        "sensitive",
        "classified",
    )
    PUBLIC_MARKERS: ClassVar[tuple[str, ...]] = ("public", "open", "published", "announcement")

    CATEGORY_KEYWORDS: ClassVar[dict[str, tuple[str, ...]]] = {
        "financial": (
            "budget", "cost", "expense", "financial", "payment", "invoice",
            "receipt", "money", "fund", "account", "bank", "transaction",
        ),
        "technical": (
            "technical", "specification", "system", "implementation", "architecture",
            "code", "software", "hardware", "technology", "development", "programming",
        ),
        "legal": (
            "legal", "contract", "agreement", "terms", "conditions", "compliance",
            "law", "regulation", "policy", "clause", "liability",
        ),
        "hr": (
            "employee", "staff", "personnel", "recruitment", "training",
            "performance", "human", "resource", "hiring", "employment",
        ),
        "project": (
            "project", "plan", "timeline", "milestone", "deliverable",
            "scope", "objective", "goal", "strategy",
        ),
    }
    UNCATEGORIZED: ClassVar[str] = "other"
    MAX_SUGGESTED_TAG_KEYWORDS: ClassVar[int] = 5

    _PUNCTUATION_RE: ClassVar[re.Pattern[str]] = re.compile(r"[^\w\s]")

    _DATE_PATTERNS: ClassVar[list[re.Pattern[str]]] = [
        re.compile(r"\b\d{4}-\d{1,2}-\d{1,2}\b"),
        re.compile(r"\b\d{1,2}[/.-]\d{1,2}[/.-]\d{2,4}\b"),
        re.compile(
            rf"\b(?:{_MONTHS})\.?\s+\d{{1,2}}(?:st|nd|rd|th)?,?\s+\d{{4}}\b",
            re.IGNORECASE,
        ),
        re.compile(
            rf"\b\d{{1,2}}(?:st|nd|rd|th)?\s+(?:{_MONTHS})\.?,?\s+\d{{4}}\b",
            re.IGNORECASE,
        ),
    ]

    _ORGANIZATION_PATTERNS: ClassVar[list[re.Pattern[str]]] = [
        re.compile(
            rf"\b(?:{_CAPITALIZED}\s+){{1,4}}(?:Corporation|Corp|Inc|LLC|Ltd|Limited|Company)\b"
        ),
        re.compile(rf"\b(?:{_CAPITALIZED}\s+){{1,4}}(?:Ministry|Department|Agency|Authority)\b"),
        re.compile(
            rf"\b(?:Ministry|Department|Agency|Authority)\s+of\s+{_CAPITALIZED}"
            rf"(?:\s+(?:and\s+|&\s+)?{_CAPITALIZED})*"
        ),
    ]

    _MONEY_PATTERNS: ClassVar[list[re.Pattern[str]]] = [
        re.compile(rf"[$€£₦]\s?{_AMOUNT}"),
        re.compile(
            rf"\b{_AMOUNT}\s?(?:USD|EUR|GBP|NGN|dollars?|euros?|pounds?|naira)\b",
            re.IGNORECASE,
        ),
        re.compile(rf"\b(?:USD|EUR|GBP|NGN)\s?{_AMOUNT}"),
    ]

    def classify(self, text: str, filename: str = "") -> ExtractedMetadata:
        return ExtractedMetadata(
            document_type=self.detect_document_type(text, filename),
            keywords=self.extract_keywords(text),
            date_references=self.extract_dates(text),
            organization_references=self.extract_organizations(text),
            monetary_values=self.extract_monetary_values(text),
            confidence=score_confidence(text),
            confidentiality_level=self.detect_confidentiality(text),
            suggested_title=self.suggest_title(text),
            suggested_description=self.suggest_description(text),
            suggested_category=self.suggest_category(text),
            suggested_tags=self.suggest_tags(text),
        )

    def detect_document_type(self, text: str, filename: str = "") -> str:
        haystack = f"{text}\n{filename}".lower()
        for document_type, markers in self.DOCUMENT_TYPE_RULES:
            if any(marker in haystack for marker in markers):
                return document_type
        return GENERAL_DOCUMENT

    def extract_keywords(self, text: str) -> list[str]:
        """Top tokens by frequency; ties keep first-seen order."""
        cleaned = self._PUNCTUATION_RE.sub(" ", text.lower())
        counts = Counter(
            token for token in cleaned.split() if len(token) >= self.MIN_KEYWORD_LENGTH
        )
        ranked = sorted(counts.items(), key=lambda item: -item[1])
        return [token for token, _ in ranked[: self.MAX_KEYWORDS]]

    def extract_dates(self, text: str) -> list[str]:
        return _unique([m.group(0) for p in self._DATE_PATTERNS for m in p.finditer(text)])

    def extract_organizations(self, text: str) -> list[str]:
        return _unique(
            [m.group(0) for p in self._ORGANIZATION_PATTERNS for m in p.finditer(text)]
        )

    def extract_monetary_values(self, text: str) -> list[str]:
        return _unique([m.group(0) for p in self._MONEY_PATTERNS for m in p.finditer(text)])

    def detect_confidentiality(self, text: str) -> str:
        lowered = text.lower()
        if any(marker in lowered for marker in self.CONFIDENTIAL_MARKERS):
            return "confidential"
        if any(marker in lowered for marker in self.PUBLIC_MARKERS):
            return "public"
        return "internal"

    @staticmethod
    def suggest_title(text: str) -> str:
        """First eight words, cut to 60 characters."""
        title = " ".join(text.split()[:8])
        return title[:60] + "..." if len(title) > 60 else title

    @staticmethod
    def suggest_description(text: str) -> str:
        """First two sentences longer than ten characters, cut to 200 characters."""
        sentences = [s.strip() for s in re.split(r"[.!?]+", text) if len(s.strip()) > 10]
        description = ". ".join(sentences[:2])
        return description[:200] + "..." if len(description) > 200 else description

    def category_matches(self, text: str) -> list[str]:
        """Category keywords present in *text*, in table order."""
        lowered = text.lower()
        return [
            keyword
            for keywords in self.CATEGORY_KEYWORDS.values()
            for keyword in keywords
            if keyword in lowered
        ]

    def suggest_category(self, text: str) -> str:
        """Category with the most matched keywords; the earliest wins a tie."""
        lowered = text.lower()
        best, best_score = self.UNCATEGORIZED, 0
        for category, keywords in self.CATEGORY_KEYWORDS.items():
            score = sum(1 for keyword in keywords if keyword in lowered)
            if score > best_score:
                best, best_score = category, score
        return best

    def suggest_tags(self, text: str) -> list[str]:
        """Suggested category followed by the first five matched category keywords."""
        matches = self.category_matches(text)[: self.MAX_SUGGESTED_TAG_KEYWORDS]
        return list(dict.fromkeys([self.suggest_category(text), *matches]))
