from dataclasses import dataclass, field

GENERAL_DOCUMENT = "General Document"


@dataclass(frozen=True)
class ExtractedMetadata:
    """Heuristic metadata derived from recognized text."""

    document_type: str = GENERAL_DOCUMENT
    keywords: list[str] = field(default_factory=list)
    date_references: list[str] = field(default_factory=list)
    organization_references: list[str] = field(default_factory=list)
    monetary_values: list[str] = field(default_factory=list)
    confidence: int = 0
    confidentiality_level: str = "internal"
    suggested_title: str = ""
    suggested_description: str = ""
    suggested_category: str = "other"
    suggested_tags: list[str] = field(default_factory=list)
