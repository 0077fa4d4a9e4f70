"""
Match scanned candidates against the user's grocery list.

Scoring per (item, candidate) pair, best of:
- exact normalized match           1.00
- same canonical produce word      0.95  ("Bananas" vs "banana")
- whole-word containment           0.90  ("Oatly Oat Milk" vs "oat milk")
- difflib similarity ratio         0.0-1.0
"""
import re
import difflib
from typing import Iterable, List, Optional, Sequence, Union

from .dictionary import canonicalize, normalize_text
from .schemas import GroceryItem, GroceryMatch

EXACT_SCORE = 1.0
PRODUCE_SCORE = 0.95
CONTAINS_SCORE = 0.9

_PUNCT_RE = re.compile(r"[^a-z0-9 ]+")


def _clean(text: str) -> str:
    return normalize_text(_PUNCT_RE.sub(" ", text.lower()))


def _contains_words(haystack: str, needle: str) -> bool:
    if len(needle) < 3:
        return False
    return re.search(r"(?<![a-z0-9])" + re.escape(needle) + r"(?![a-z0-9])", haystack) is not None


def match_score(item_name: str, candidate: str) -> float:
    """Similarity of a grocery item name and a scanned candidate in [0, 1]."""
    a, b = _clean(item_name), _clean(candidate)
    if not a or not b:
        return 0.0
    if a == b:
        return EXACT_SCORE

    score = difflib.SequenceMatcher(None, a, b).ratio()

    produce = canonicalize(a)
    if produce and produce == canonicalize(b):
        score = max(score, PRODUCE_SCORE)

    if _contains_words(a, b) or _contains_words(b, a):
        score = max(score, CONTAINS_SCORE)

    return score


def match_grocery_items(
    candidates: Sequence[str],
    items: Iterable[Union[GroceryItem, dict]],
    min_score: float = 0.6,
    include_completed: bool = False,
) -> List[GroceryMatch]:
    """
    Best candidate per open grocery item.

    Args:
        candidates: Ranked candidate texts (best first; earlier wins ties)
        items: Grocery list entries (models or dicts)
        min_score: Minimum score for a match to be reported
        include_completed: Also match items already checked off

    Returns:
        Matches sorted by score descending, then list order
    """
    matches = []
    for idx, raw in enumerate(items):
        item = raw if isinstance(raw, GroceryItem) else GroceryItem.model_validate(raw)
        if item.completed and not include_completed:
            continue

        best: Optional[GroceryMatch] = None
        for candidate in candidates:
            score = match_score(item.name, candidate)
            if score >= min_score and (best is None or score > best.score):
                best = GroceryMatch(item=item, candidate=candidate, score=round(score, 4))
        if best is not None:
            matches.append((idx, best))

    matches.sort(key=lambda pair: (-pair[1].score, pair[0]))
    return [m for _, m in matches]
