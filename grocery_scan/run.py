"""
Scan orchestrator - one call per captured photo.

scan_once() is what the app and the replay CLI both call, so a saved Vision
response replays through exactly the same ranking and matching path.
"""
from typing import Any, Dict, Iterable, Optional, Union

from .config_loader import RankerConfig
from .feature_flags import FLAGS
from .grocery_match import match_grocery_items
from .ranker import pick_best_label, rank
from .resolver import resolve_specific
from .schemas import AnnotationResult, GroceryItem, ScanResult, as_annotation_result
from .vision_response import first_response, from_vision_response


_ANNOTATION_KEYS = frozenset({
    "logos", "webBestGuess", "web_best_guess", "webEntities", "web_entities",
    "fullText", "full_text", "objects", "labels",
})


def _to_annotations(response: Union[AnnotationResult, Dict[str, Any], None]) -> AnnotationResult:
    """Accept an AnnotationResult (or its dict shape), a raw Vision response/envelope, or None."""
    if isinstance(response, AnnotationResult):
        return response
    if isinstance(response, dict) and _ANNOTATION_KEYS & set(response):
        return as_annotation_result(response)
    return from_vision_response(first_response(response))


def scan_once(
    response: Union[AnnotationResult, Dict[str, Any], None],
    hint: Optional[str] = None,
    grocery_items: Optional[Iterable[Union[GroceryItem, dict]]] = None,
    cfg: Optional[RankerConfig] = None,
) -> ScanResult:
    """
    Run ranking, specific-item resolution and grocery matching for one scan.

    Args:
        response: Raw Vision response (or envelope) or a mapped AnnotationResult
        hint: Optional specific-item hint (e.g., object detector label)
        grocery_items: User's grocery list for matching (optional)
        cfg: Ranker config (default: built-in constants)

    Returns:
        ScanResult; detected_label is the top candidate or None

    Example:
        >>> from grocery_scan.run import scan_once
        >>> result = scan_once({"logoAnnotations": [{"description": "Acme", "score": 0.9}]})
        >>> result.detected_label
        'Acme'
    """
    cfg = cfg or RankerConfig.defaults()
    annotations = _to_annotations(response)

    candidates = rank(annotations, cfg)
    specific = resolve_specific(annotations, hint=hint, cfg=cfg)
    best_label = pick_best_label(annotations, cfg) if FLAGS.legacy_best_label else None

    matches = []
    if grocery_items is not None and FLAGS.grocery_matching:
        # A resolved produce name is also a valid thing to match on
        match_on = list(candidates)
        if specific and specific not in match_on:
            match_on.append(specific)
        matches = match_grocery_items(match_on, grocery_items)

    result = ScanResult(
        candidates=candidates,
        detected_label=candidates[0] if candidates else None,
        specific_item=specific,
        best_label=best_label,
        grocery_matches=matches,
        config_version=cfg.config_version,
    )

    if FLAGS.verbose_scan:
        print(
            f"[SCAN] candidates={len(candidates)} detected={result.detected_label!r} "
            f"specific={specific!r} matches={len(matches)} config={cfg.config_version}"
        )

    return result
