"""
Static produce dictionary and canonicalization for specific-item resolution.

Handles:
- Fruit / vegetable vocabulary (lowercase singular nouns)
- Generic stoplist ("fruit", "produce", "food", ...) that must never resolve
- Regular plurals (+s, +es, -ies -> -y) when the singular is a dictionary word
- Regional aliases (capsicum -> bell pepper, aubergine -> eggplant, ...)

Everything here is read-only module state; canonicalize() is a pure function.
"""
import re
from typing import Dict, FrozenSet, List, Optional

FRUITS: FrozenSet[str] = frozenset({
    "apple", "apricot", "avocado", "banana", "blackberry", "blueberry",
    "cantaloupe", "cherry", "clementine", "coconut", "cranberry",
    "dragon fruit", "fig", "grape", "grapefruit", "guava", "honeydew",
    "kiwi", "kumquat", "lemon", "lime", "lychee", "mandarin", "mango",
    "melon", "nectarine", "orange", "papaya", "passion fruit", "peach",
    "pear", "persimmon", "pineapple", "plum", "pomegranate", "raspberry",
    "strawberry", "tangerine", "watermelon",
})

VEGETABLES: FrozenSet[str] = frozenset({
    "artichoke", "arugula", "asparagus", "beet", "bell pepper", "bok choy",
    "broccoli", "brussels sprout", "cabbage", "carrot", "cauliflower",
    "celery", "chili", "corn", "cucumber", "eggplant", "garlic",
    "ginger", "green bean", "kale", "leek", "lettuce", "mushroom", "okra",
    "onion", "parsnip", "pea", "pepper", "potato", "pumpkin", "radish",
    "shallot", "spinach", "squash", "sweet potato", "tomato", "turnip",
    "yam", "zucchini",
})

# Combined dictionary used for plural stripping and matching
PRODUCE: FrozenSet[str] = FRUITS | VEGETABLES

GENERIC: FrozenSet[str] = frozenset({
    "fruit", "fruits", "vegetable", "vegetables", "produce", "food", "foods",
    "grocery", "groceries", "natural foods", "whole food", "whole foods",
    "local food", "superfood", "plant", "ingredient", "staple food",
    "vegan nutrition", "recipe", "dish", "cuisine",
})

ALIASES: Dict[str, str] = {
    "capsicum": "bell pepper",
    "aubergine": "eggplant",
    "courgette": "zucchini",
    "chilli": "chili",
    "chile": "chili",
    "rocket": "arugula",
    "scallion": "onion",
    "mange tout": "pea",
}

# Every single word appearing in a dictionary entry or alias key
_PRODUCE_TOKENS: FrozenSet[str] = frozenset(
    token for entry in list(PRODUCE) + list(ALIASES) for token in entry.split()
)

# Alias keys count as dictionary words when scanning free text
MATCH_VOCABULARY: FrozenSet[str] = PRODUCE | frozenset(ALIASES)

_WS_RE = re.compile(r"\s+")
_PUNCT_RE = re.compile(r"[^a-z0-9 \-]")


def normalize_text(text: str) -> str:
    """Trim, collapse internal whitespace, lowercase."""
    return _WS_RE.sub(" ", text.strip()).lower()


def title_case(text: str) -> str:
    """Capitalize first letter of every word, lowercase the rest."""
    return " ".join(word[:1].upper() + word[1:].lower() for word in text.split())


def _singularize(token: str) -> str:
    """Strip a regular plural only when the singular is a dictionary word."""
    if token.endswith("ies") and token[:-3] + "y" in _PRODUCE_TOKENS:
        return token[:-3] + "y"
    if token.endswith("es") and token[:-2] in _PRODUCE_TOKENS:
        return token[:-2]
    if token.endswith("s") and token[:-1] in _PRODUCE_TOKENS:
        return token[:-1]
    return token


def _word_pattern(word: str) -> "re.Pattern[str]":
    return re.compile(r"(?<![a-z])" + re.escape(word) + r"(?![a-z])")


def _inflected_pattern(word: str) -> "re.Pattern[str]":
    forms = [re.escape(word) + "(?:s|es)?"]
    if word.endswith("y"):
        forms.append(re.escape(word[:-1]) + "ies")
    return re.compile(r"(?<![a-z])(?:" + "|".join(forms) + r")(?![a-z])")


_WORD_PATTERNS = {word: _word_pattern(word) for word in MATCH_VOCABULARY}
_INFLECTED_PATTERNS = {word: _inflected_pattern(word) for word in MATCH_VOCABULARY}


def _apply_aliases(text: str) -> str:
    if text in ALIASES:
        return ALIASES[text]
    for alias, target in ALIASES.items():
        text = _WORD_PATTERNS[alias].sub(target, text)
    return text


def _dictionary_words_in(text: str) -> List[str]:
    """Dictionary words contained in text as whole words, longest first."""
    hits = []
    for word in PRODUCE:
        match = _WORD_PATTERNS[word].search(text)
        if match:
            hits.append((-len(word), match.start(), word))
    hits.sort()
    return [word for _, _, word in hits]


def canonicalize(text: Optional[str]) -> Optional[str]:
    """
    Resolve free text to a Title-Cased dictionary entry.

    Args:
        text: Raw label text (e.g., "bananas", "Capsicum", "red bell peppers")

    Returns:
        Title-Cased dictionary word ("Banana", "Bell Pepper") or None when the
        text is generic or contains no dictionary word.
    """
    if not text or not isinstance(text, str):
        return None

    canonical = normalize_text(_PUNCT_RE.sub(" ", text.lower()))
    if not canonical or canonical in GENERIC:
        return None

    canonical = " ".join(_singularize(token) for token in canonical.split(" "))
    canonical = _apply_aliases(canonical)

    if canonical in GENERIC:
        return None
    if canonical in PRODUCE:
        return title_case(canonical)

    # Substring match: longest dictionary word wins ("green bell pepper" -> "bell pepper")
    words = _dictionary_words_in(canonical)
    if words:
        return title_case(words[0])
    return None


def mentions_produce(text: str) -> bool:
    """
    True when lowercased text equals, starts with, or contains " " + word
    for some dictionary word (aliases included), or holds a plural of one
    ("Strawberries").
    """
    lowered = normalize_text(text)
    for word in MATCH_VOCABULARY:
        if lowered == word or lowered.startswith(word) or (" " + word) in lowered:
            return True
        if _INFLECTED_PATTERNS[word].search(lowered):
            return True
    return False


def find_produce_word(line: str) -> Optional[str]:
    """
    First dictionary word found in an OCR line, by position in the line.

    Words match whole or with a regular plural, so "bananas" matches "banana"
    but "pineapple" does not match "apple". At the same position the longer
    word wins. Alias hits are mapped to their dictionary target.
    """
    lowered = normalize_text(line)
    best = None
    for word in MATCH_VOCABULARY:
        match = _INFLECTED_PATTERNS[word].search(lowered)
        if not match:
            continue
        key = (match.start(), -len(word))
        if best is None or key < best[0]:
            best = (key, word)
    if best is None:
        return None
    word = best[1]
    return ALIASES.get(word, word)
