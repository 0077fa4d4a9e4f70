"""
Pydantic schemas for the grocery scan pipeline.

AnnotationResult is the vendor-neutral input shape; Candidate and ScanResult
are what the ranker and orchestrator hand back to the app.
"""
from enum import Enum
from typing import Any, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator


class CandidateSource(str, Enum):
    """Where a candidate came from, in emission (priority) order."""
    LOGO = "logo"
    WEB_GUESS = "web-guess"
    WEB_ENTITY = "web-entity"
    OCR = "ocr"
    OBJECT = "object"
    LABEL = "label"


def _coerce_score(value: Any) -> Optional[float]:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    return float(value)


class ScoredText(BaseModel):
    """One detection with optional confidence."""
    text: str
    score: Optional[float] = None

    @field_validator("score", mode="before")
    @classmethod
    def _score_or_none(cls, value: Any) -> Optional[float]:
        return _coerce_score(value)


class NormalizedBox(BaseModel):
    """Axis-aligned box in normalized [0, 1] image coordinates."""
    x_min: float
    y_min: float
    x_max: float
    y_max: float


class ObjectAnnotation(ScoredText):
    """Localized object; region is present when the vendor returned a polygon."""
    region: Optional[NormalizedBox] = None


def _region_or_none(value: Any) -> Optional[NormalizedBox]:
    if isinstance(value, NormalizedBox):
        return value
    if not isinstance(value, dict):
        return None
    coords = [_coerce_score(value.get(k)) for k in ("x_min", "y_min", "x_max", "y_max")]
    if any(c is None for c in coords):
        return None
    return NormalizedBox(x_min=coords[0], y_min=coords[1], x_max=coords[2], y_max=coords[3])


def _scored_entries(value: Any, keep_region: bool = False) -> List[dict]:
    """Drop malformed entries instead of failing validation."""
    if not isinstance(value, list):
        return []
    entries = []
    for item in value:
        if isinstance(item, ScoredText):
            item = item.model_dump()
        if not isinstance(item, dict):
            continue
        text = item.get("text")
        if not isinstance(text, str) or not text.strip():
            continue
        entry = {"text": text, "score": _coerce_score(item.get("score"))}
        if keep_region:
            region = _region_or_none(item.get("region"))
            if region is not None:
                entry["region"] = region
        entries.append(entry)
    return entries


class AnnotationResult(BaseModel):
    """
    Vendor-neutral vision analysis of one image.

    Accepts both snake_case and the camelCase JSON names
    (webBestGuess, webEntities, fullText). Malformed optional fields are
    treated as absent.
    """
    model_config = ConfigDict(populate_by_name=True)

    logos: List[ScoredText] = Field(default_factory=list)
    web_best_guess: Optional[str] = Field(default=None, alias="webBestGuess")
    web_entities: List[ScoredText] = Field(default_factory=list, alias="webEntities")
    full_text: Optional[str] = Field(default=None, alias="fullText")
    objects: List[ObjectAnnotation] = Field(default_factory=list)
    labels: List[ScoredText] = Field(default_factory=list)

    @field_validator("logos", "web_entities", "labels", mode="before")
    @classmethod
    def _clean_scored(cls, value: Any) -> List[dict]:
        return _scored_entries(value)

    @field_validator("objects", mode="before")
    @classmethod
    def _clean_objects(cls, value: Any) -> List[dict]:
        return _scored_entries(value, keep_region=True)

    @field_validator("web_best_guess", "full_text", mode="before")
    @classmethod
    def _str_or_none(cls, value: Any) -> Optional[str]:
        return value if isinstance(value, str) and value.strip() else None


AnnotationInput = Union[AnnotationResult, dict, None]


def as_annotation_result(value: AnnotationInput) -> AnnotationResult:
    """Accept a model, a JSON-shaped dict, or None (-> empty result)."""
    if isinstance(value, AnnotationResult):
        return value
    if isinstance(value, dict):
        return AnnotationResult.model_validate(value)
    return AnnotationResult()


class Candidate(BaseModel):
    """Ranked product-name candidate. Immutable, created fresh per call."""
    model_config = ConfigDict(frozen=True)

    text: str
    score: float
    source: CandidateSource


class GroceryItem(BaseModel):
    """Entry on the user's grocery list."""
    id: Optional[str] = None
    name: str
    quantity: float = 1
    unit: Optional[str] = None
    category: Optional[str] = None
    notes: Optional[str] = None
    completed: bool = False


class GroceryMatch(BaseModel):
    """Grocery list item matched by a scanned candidate."""
    item: GroceryItem
    candidate: str
    score: float


class ScanResult(BaseModel):
    """Complete scan outcome for one image."""
    candidates: List[str] = Field(default_factory=list)
    detected_label: Optional[str] = None
    specific_item: Optional[str] = None
    best_label: Optional[str] = None
    grocery_matches: List[GroceryMatch] = Field(default_factory=list)

    # Version tracking
    config_version: str
