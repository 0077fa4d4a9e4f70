"""
Candidate ranker: turn one vision analysis into ordered product-name candidates.

Sources are emitted in priority order (logo, web guess, web entities, OCR
lines, objects, labels), deduplicated on normalized text keeping the highest
score, then stably sorted by score. Pure function of its input.
"""
import re
from typing import Dict, List, Optional

from .config_loader import RankerConfig
from .dictionary import normalize_text
from .schemas import AnnotationInput, AnnotationResult, Candidate, CandidateSource, as_annotation_result

_LINE_SPLIT_RE = re.compile(r"\r?\n")
_NON_NAME_CHARS_RE = re.compile(r"[^A-Za-z0-9 \-]")
_SINGLE_TOKEN_RE = re.compile(r"^(?:[A-Z][a-z]+|[A-Z]{3,})$")
_STARTS_UPPER_RE = re.compile(r"^[A-Z]")


def _score_or(score: Optional[float], default: float) -> float:
    return default if score is None else score


def is_brand_like_line(line: str, cfg: RankerConfig) -> bool:
    """
    Decide whether a trimmed OCR line looks like a product/brand name.

    Lines dominated by packaging noise ("Green Tea", "Net Weight") are
    rejected. A single token must be TitleCase or ALL-CAPS (3+ letters);
    multi-token lines need most tokens capitalized.
    """
    pure = _NON_NAME_CHARS_RE.sub("", line).strip()
    if not pure:
        return False

    tokens = pure.split()
    stop_count = sum(1 for t in tokens if t.lower() in cfg.ocr_stopwords)
    if stop_count / len(tokens) > cfg.ocr_stopword_ratio:
        return False

    if len(tokens) == 1:
        if tokens[0].lower() in cfg.ocr_stopwords:
            return False
        return bool(_SINGLE_TOKEN_RE.match(pure))

    capitalized = sum(1 for t in tokens if _STARTS_UPPER_RE.match(t))
    return capitalized / len(tokens) >= cfg.ocr_capitalized_ratio


def split_lines(full_text: Optional[str]) -> List[str]:
    """Trimmed, non-empty OCR lines."""
    if not full_text:
        return []
    return [s.strip() for s in _LINE_SPLIT_RE.split(full_text) if s.strip()]


def ocr_lines(full_text: Optional[str], cfg: RankerConfig) -> List[str]:
    """Trimmed OCR lines within the configured length window."""
    return [
        s for s in split_lines(full_text)
        if cfg.ocr_min_line_length <= len(s) <= cfg.ocr_max_line_length
    ]


def _emit(result: AnnotationResult, cfg: RankerConfig) -> List[Candidate]:
    out: List[Candidate] = []

    # 1) Logos (brands)
    for logo in result.logos:
        out.append(Candidate(
            text=logo.text,
            score=_score_or(logo.score, cfg.logo_default_score),
            source=CandidateSource.LOGO,
        ))

    # 2) Web best guess and entities
    if result.web_best_guess:
        out.append(Candidate(
            text=result.web_best_guess,
            score=cfg.web_guess_score,
            source=CandidateSource.WEB_GUESS,
        ))
    for entity in result.web_entities:
        # Absent score counts as 0 against the floor
        if _score_or(entity.score, 0.0) >= cfg.web_entity_min_score:
            out.append(Candidate(
                text=entity.text,
                score=_score_or(entity.score, cfg.web_entity_default_score),
                source=CandidateSource.WEB_ENTITY,
            ))

    # 3) OCR lines: TitleCase / ALLCAPS, skip packaging noise
    accepted = [s for s in ocr_lines(result.full_text, cfg) if is_brand_like_line(s, cfg)]
    for i, line in enumerate(accepted[:cfg.ocr_max_lines]):
        out.append(Candidate(
            text=line,
            score=cfg.ocr_base_score - i * cfg.ocr_score_step,
            source=CandidateSource.OCR,
        ))

    # 4) Objects (discounted, often "carton" / "bottle")
    for obj in result.objects:
        out.append(Candidate(
            text=obj.text,
            score=_score_or(obj.score, cfg.object_default_score) * cfg.object_weight,
            source=CandidateSource.OBJECT,
        ))

    # 5) Labels fallback
    for label in result.labels:
        out.append(Candidate(
            text=label.text,
            score=_score_or(label.score, cfg.label_default_score) * cfg.label_weight,
            source=CandidateSource.LABEL,
        ))

    return out


def extract_candidates(result: AnnotationInput, cfg: Optional[RankerConfig] = None) -> List[Candidate]:
    """
    Full deduplicated candidate list, best first.

    Args:
        result: AnnotationResult, JSON-shaped dict, or None
        cfg: Ranker config (default: built-in constants)

    Returns:
        Candidates sorted by score descending. Ties keep the position where
        the normalized text was first emitted.
    """
    cfg = cfg or RankerConfig.defaults()
    annotations = as_annotation_result(result)

    best: Dict[str, Candidate] = {}
    for cand in _emit(annotations, cfg):
        key = normalize_text(cand.text)
        if not key:
            continue
        prev = best.get(key)
        # dict keeps the first insertion position when the value is replaced
        if prev is None or cand.score > prev.score:
            best[key] = cand

    return sorted(best.values(), key=lambda c: -c.score)


def rank(result: AnnotationInput, cfg: Optional[RankerConfig] = None) -> List[str]:
    """
    Rank product-name candidates for one vision analysis.

    Returns:
        At most cfg.max_candidates distinct texts, best first. Empty list for
        an empty or absent result.
    """
    cfg = cfg or RankerConfig.defaults()
    return [c.text for c in extract_candidates(result, cfg)[:cfg.max_candidates]]


def pick_best_label(result: AnnotationInput, cfg: Optional[RankerConfig] = None) -> Optional[str]:
    """
    Legacy single-label pick, first rule wins:

    1. Highest-scoring logo with score >= best_logo_min_score
    2. Web best guess
    3. Strongest web entity with score >= best_entity_min_score
    4. First OCR line longer than one character
    5. Top object with score >= best_object_min_score
    6. Top label with score >= best_label_min_score
    """
    cfg = cfg or RankerConfig.defaults()
    annotations = as_annotation_result(result)

    def top(entries):
        return max(entries, key=lambda e: _score_or(e.score, 0.0), default=None)

    logo = top(annotations.logos)
    if logo and _score_or(logo.score, 0.0) >= cfg.best_logo_min_score:
        return logo.text

    if annotations.web_best_guess:
        return annotations.web_best_guess

    strong = [e for e in annotations.web_entities if _score_or(e.score, 0.0) >= cfg.best_entity_min_score]
    entity = top(strong)
    if entity:
        return entity.text

    for line in split_lines(annotations.full_text):
        if len(line) > 1:
            return line

    obj = top(annotations.objects)
    if obj and _score_or(obj.score, 0.0) >= cfg.best_object_min_score:
        return obj.text

    label = top(annotations.labels)
    if label and _score_or(label.score, 0.0) >= cfg.best_label_min_score:
        return label.text

    return None
