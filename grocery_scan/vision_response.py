"""
Map Google Cloud Vision `images:annotate` responses into AnnotationResult.

Vendor field names:
- logoAnnotations[].description / score
- webDetection.bestGuessLabels[0].label, webDetection.webEntities[].description / score
- fullTextAnnotation.text (fallback: textAnnotations[0].description)
- localizedObjectAnnotations[].name / score / boundingPoly.normalizedVertices
- labelAnnotations[].description / score

Missing or wrongly typed fields are skipped, never fatal.
"""
import json
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from .schemas import AnnotationResult


def _as_list(value: Any) -> List[Any]:
    return value if isinstance(value, list) else []


def _as_dict(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _scored(entries: Any, text_key: str) -> List[Dict[str, Any]]:
    out = []
    for entry in _as_list(entries):
        entry = _as_dict(entry)
        text = entry.get(text_key)
        if isinstance(text, str) and text.strip():
            out.append({"text": text, "score": entry.get("score")})
    return out


def _region(bounding_poly: Any) -> Optional[Dict[str, float]]:
    """Bounding box of normalized polygon vertices (omitted coords are 0)."""
    vertices = _as_list(_as_dict(bounding_poly).get("normalizedVertices"))
    xs, ys = [], []
    for v in vertices:
        v = _as_dict(v)
        x, y = v.get("x", 0.0), v.get("y", 0.0)
        if not isinstance(x, (int, float)) or not isinstance(y, (int, float)):
            return None
        xs.append(float(x))
        ys.append(float(y))
    if not xs:
        return None
    return {"x_min": min(xs), "y_min": min(ys), "x_max": max(xs), "y_max": max(ys)}


def from_vision_response(resp: Optional[Dict[str, Any]]) -> AnnotationResult:
    """
    Convert one entry of the Vision `responses[]` array.

    Args:
        resp: Raw response dict (or None)

    Returns:
        AnnotationResult (empty for None / non-dict input)
    """
    if not isinstance(resp, dict):
        return AnnotationResult()

    web = _as_dict(resp.get("webDetection"))
    best_guess = None
    guesses = _as_list(web.get("bestGuessLabels"))
    if guesses:
        best_guess = _as_dict(guesses[0]).get("label")

    full_text = _as_dict(resp.get("fullTextAnnotation")).get("text")
    if not isinstance(full_text, str) or not full_text.strip():
        text_annotations = _as_list(resp.get("textAnnotations"))
        full_text = _as_dict(text_annotations[0]).get("description") if text_annotations else None

    objects = []
    for obj in _as_list(resp.get("localizedObjectAnnotations")):
        obj = _as_dict(obj)
        name = obj.get("name")
        if not isinstance(name, str) or not name.strip():
            continue
        objects.append({
            "text": name,
            "score": obj.get("score"),
            "region": _region(obj.get("boundingPoly")),
        })

    return AnnotationResult(
        logos=_scored(resp.get("logoAnnotations"), "description"),
        web_best_guess=best_guess,
        web_entities=_scored(web.get("webEntities"), "description"),
        full_text=full_text,
        objects=objects,
        labels=_scored(resp.get("labelAnnotations"), "description"),
    )


def first_response(payload: Any) -> Optional[Dict[str, Any]]:
    """
    Pull responses[0] out of a full annotate envelope.

    A dict that is already a single response is returned unchanged.
    """
    if not isinstance(payload, dict):
        return None
    if "responses" in payload:
        responses = _as_list(payload.get("responses"))
        return _as_dict(responses[0]) if responses else None
    return payload


def load_annotation_file(path: Union[str, Path]) -> AnnotationResult:
    """
    Load a saved Vision response (envelope or single response) from JSON.

    Raises:
        FileNotFoundError: If the file does not exist
        json.JSONDecodeError: If the file is not valid JSON
    """
    with open(path, 'r') as f:
        payload = json.load(f)
    return from_vision_response(first_response(payload))
