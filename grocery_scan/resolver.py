"""
Specific-item resolver: prefer "Banana" over "fruit".

Rules run in order and the first hit wins:
1. Caller hint (e.g., an object-detector label)
2. Web entities, highest score first
3. Labels, highest score first
4. OCR lines (first line mentioning a dictionary word)
"""
from typing import List, Optional

from .config_loader import RankerConfig
from .dictionary import GENERIC, canonicalize, find_produce_word, mentions_produce, normalize_text, title_case
from .ranker import split_lines
from .schemas import AnnotationInput, ScoredText, as_annotation_result


def _by_score(entries: List[ScoredText]) -> List[ScoredText]:
    # Stable: equal scores keep vendor order
    return sorted(entries, key=lambda e: -(e.score or 0.0))


def _resolve_from(entries: List[ScoredText]) -> Optional[str]:
    for entry in _by_score(entries):
        text = normalize_text(entry.text)
        if text in GENERIC or not mentions_produce(text):
            continue
        canonical = canonicalize(text)
        if canonical:
            return canonical
    return None


def resolve_specific(
    result: AnnotationInput,
    hint: Optional[str] = None,
    cfg: Optional[RankerConfig] = None,
) -> Optional[str]:
    """
    Resolve a generic scan to a specific produce name.

    Args:
        result: AnnotationResult, JSON-shaped dict, or None
        hint: Optional label from another detector (e.g., "bananas")
        cfg: Ranker config (default: built-in constants)

    Returns:
        Title-Cased dictionary word ("Banana", "Bell Pepper") or None
    """
    cfg = cfg or RankerConfig.defaults()

    if hint:
        canonical = canonicalize(hint)
        if canonical:
            return canonical

    annotations = as_annotation_result(result)

    canonical = _resolve_from(annotations.web_entities)
    if canonical:
        return canonical

    canonical = _resolve_from(annotations.labels)
    if canonical:
        return canonical

    if cfg.ocr_specific_fallback:
        for line in split_lines(annotations.full_text):
            lowered = normalize_text(line)
            if lowered in GENERIC:
                continue
            # Several dictionary words on one line: first by position wins
            word = find_produce_word(lowered)
            if word:
                return title_case(word)

    return None
