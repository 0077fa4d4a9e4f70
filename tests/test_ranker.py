"""
Candidate ranker tests.

Covers source priority, default scores, OCR line filtering, deduplication and
the top-5 cut.
"""
import pytest
from pathlib import Path
import sys
from pydantic import ValidationError

# Add repo root to path
repo_root = Path(__file__).parent.parent
sys.path.insert(0, str(repo_root))

from grocery_scan.config_loader import RankerConfig
from grocery_scan.dictionary import normalize_text
from grocery_scan.ranker import extract_candidates, is_brand_like_line, pick_best_label, rank
from grocery_scan.schemas import AnnotationResult, CandidateSource
from grocery_scan.vision_response import from_vision_response


CFG = RankerConfig.defaults()


class TestRankBasics:
    """Contract-level behavior of rank()."""

    def test_single_logo(self):
        """A lone logo annotation is the only candidate."""
        assert rank({"logos": [{"text": "Acme", "score": 0.9}]}) == ["Acme"]

    def test_empty_and_absent_input(self):
        """Empty or absent results rank to an empty list."""
        assert rank({}) == []
        assert rank(None) == []
        assert rank(AnnotationResult()) == []

    def test_at_most_five_unique(self):
        """Never more than five entries, all unique after normalization."""
        labels = [{"text": f"Label {i}", "score": 0.9 - i * 0.01} for i in range(10)]
        result = rank({
            "labels": labels,
            "logos": [{"text": "ACME"}, {"text": " acme "}],
            "webBestGuess": "Acme",
        })

        assert len(result) == 5
        keys = [normalize_text(t) for t in result]
        assert len(keys) == len(set(keys)), f"Duplicate candidates: {result}"

    def test_source_priority_ordering(self):
        """Default scores put logo > web guess > OCR > object > label."""
        result = rank({
            "labels": [{"text": "Beverage", "score": 0.9}],
            "objects": [{"text": "Bottle", "score": 0.9}],
            "fullText": "Fizzco",
            "webBestGuess": "fizzco cola",
            "logos": [{"text": "Fizz Co"}],
        })

        assert result == ["Fizz Co", "fizzco cola", "Fizzco", "Bottle", "Beverage"]

    def test_ties_keep_emission_order(self):
        """Equal scores keep the order sources were emitted in."""
        result = rank({
            "fullText": "Beta",
            "logos": [{"text": "Alpha", "score": 0.7}],
        })

        assert result == ["Alpha", "Beta"]

    def test_malformed_fields_are_ignored(self):
        """Wrongly typed optional fields count as absent."""
        result = rank({
            "logos": "oops",
            "webEntities": [None, {"text": 5}, {"score": 0.9}],
            "fullText": 42,
            "labels": [{"text": "", "score": 0.9}],
        })

        assert result == []


class TestScoring:
    """Per-source score rules."""

    def test_default_scores(self):
        """Missing scores fall back to the per-source defaults."""
        cands = extract_candidates({
            "logos": [{"text": "Acme"}],
            "objects": [{"text": "Box"}],
            "labels": [{"text": "Snack"}],
        })
        scores = {c.text: c.score for c in cands}

        assert scores["Acme"] == pytest.approx(0.85)
        assert scores["Box"] == pytest.approx(0.5 * 0.6)
        assert scores["Snack"] == pytest.approx(0.5 * 0.5)

    def test_web_guess_fixed_score(self):
        """Best guess always scores 0.80."""
        cands = extract_candidates({"webBestGuess": "oat milk"})

        assert len(cands) == 1
        assert cands[0].score == pytest.approx(0.80)
        assert cands[0].source == CandidateSource.WEB_GUESS

    def test_web_entity_floor(self):
        """Entities below 0.5 or without a score are dropped."""
        result = rank({
            "webEntities": [
                {"text": "Oat milk", "score": 0.55},
                {"text": "Plant milk", "score": 0.49},
                {"text": "Dairy"},
            ]
        })

        assert result == ["Oat milk"]

    def test_object_and_label_discount(self):
        """Objects are weighted by 0.6 and labels by 0.5."""
        cands = extract_candidates({
            "objects": [{"text": "Carton", "score": 0.9}],
            "labels": [{"text": "Milk", "score": 0.9}],
        })
        scores = {c.text: c.score for c in cands}

        assert scores["Carton"] == pytest.approx(0.54)
        assert scores["Milk"] == pytest.approx(0.45)

    def test_candidates_are_immutable(self):
        """Candidate objects are frozen."""
        cand = extract_candidates({"logos": [{"text": "Acme"}]})[0]

        with pytest.raises(ValidationError):
            cand.score = 1.0


class TestOcrLines:
    """OCR line acceptance heuristics."""

    def test_all_caps_single_token_accepted(self):
        """'MILK' is a single ALL-CAPS token, not a stopword."""
        assert is_brand_like_line("MILK", CFG)
        assert rank({"fullText": "MILK"}) == ["MILK"]

    def test_stopword_dominated_line_rejected(self):
        """'tea leaves' is 50% stopwords (> 40%)."""
        assert not is_brand_like_line("tea leaves", CFG)
        assert not is_brand_like_line("Tea Leaves", CFG)

    def test_single_token_case_rules(self):
        """Single tokens must be TitleCase or 3+ capitals."""
        assert is_brand_like_line("Milk", CFG)
        assert not is_brand_like_line("milk", CFG)
        assert not is_brand_like_line("MK", CFG)
        assert not is_brand_like_line("McVities", CFG)

    def test_single_stopword_rejected(self):
        """A TitleCase stopword alone is still noise."""
        assert not is_brand_like_line("Organic", CFG)
        assert not is_brand_like_line("BOTTLE", CFG)

    def test_multi_token_capitalization_ratio(self):
        """At least 60% of tokens must start uppercase."""
        assert is_brand_like_line("Horizon Organic Milk", CFG)
        assert not is_brand_like_line("Fresh whole milk", CFG)

    def test_punctuation_stripped_for_checks_only(self):
        """Checks run on the stripped line, the emitted text keeps it."""
        assert rank({"fullText": "Ben & Jerry's"}) == ["Ben & Jerry's"]

    def test_line_length_window(self):
        """Lines shorter than 2 or longer than 40 characters are skipped."""
        long_line = "Very Long Product Name That Goes On And On Forever"
        assert len(long_line) > 40

        assert rank({"fullText": f"A\n{long_line}\nKale Chips"}) == ["Kale Chips"]

    def test_all_stopword_text_contributes_nothing(self):
        """Packaging noise only yields no candidates."""
        assert rank({"fullText": "Green Tea\nNet Weight\nBOTTLE\nml"}) == []

    def test_at_most_six_lines_with_descending_scores(self):
        """First six accepted lines score 0.70, 0.65, ... 0.45."""
        text = "Alpha\nBravo\nCharlie\nDelta\nEcho\nFoxtrot\nGolf"
        cands = [c for c in extract_candidates({"fullText": text}) if c.source == CandidateSource.OCR]

        assert [c.text for c in cands] == ["Alpha", "Bravo", "Charlie", "Delta", "Echo", "Foxtrot"]
        assert [c.score for c in cands] == pytest.approx([0.70, 0.65, 0.60, 0.55, 0.50, 0.45])

    def test_rejected_lines_do_not_consume_score_slots(self):
        """Scores step down over accepted lines only."""
        cands = extract_candidates({"fullText": "net weight\nAlpha\nbottle\nBravo"})

        assert [(c.text, round(c.score, 2)) for c in cands] == [("Alpha", 0.7), ("Bravo", 0.65)]


class TestDeduplication:
    """Normalized-text dedup keeps the highest score."""

    def test_higher_score_casing_survives(self):
        """Logo beats the discounted label with the same text."""
        result = rank({
            "logos": [{"text": "ACME", "score": 0.9}],
            "labels": [{"text": "acme", "score": 0.99}],
        })

        assert result == ["ACME"]

    def test_later_higher_score_replaces_earlier(self):
        """OCR line at 0.70 replaces a 0.55 web entity."""
        result = rank({
            "webEntities": [{"text": "Oat Milk", "score": 0.55}],
            "fullText": "OAT  MILK",
        })

        assert result == ["OAT  MILK"]

    def test_whitespace_and_case_normalized(self):
        """Keys ignore case and internal whitespace."""
        cands = extract_candidates({
            "logos": [{"text": "Oat   Milk", "score": 0.6}],
            "webBestGuess": "oat milk",
        })

        assert len(cands) == 1
        assert cands[0].text == "oat milk"
        assert cands[0].source == CandidateSource.WEB_GUESS


class TestVisionResponseRanking:
    """End-to-end ranking of a realistic Vision reply."""

    def test_banana_photo(self, vision_response):
        """Logo first, then entity, guess, generic entity, OCR."""
        result = rank(from_vision_response(vision_response))

        assert result == ["Chiquita", "Banana", "chiquita banana", "Fruit", "PREMIUM"]

    def test_config_limits_candidates(self, vision_response):
        """max_candidates is configurable."""
        cfg = RankerConfig.defaults().with_overrides(max_candidates=2)

        assert rank(from_vision_response(vision_response), cfg) == ["Chiquita", "Banana"]


class TestPickBestLabel:
    """Legacy single-label cascade."""

    def test_strong_logo_wins(self, vision_response):
        assert pick_best_label(from_vision_response(vision_response)) == "Chiquita"

    def test_weak_logo_falls_through_to_guess(self):
        result = pick_best_label({
            "logos": [{"text": "Acme", "score": 0.3}],
            "webBestGuess": "acme crackers",
        })

        assert result == "acme crackers"

    def test_entity_then_ocr_then_object_then_label(self):
        assert pick_best_label({"webEntities": [{"text": "Kale", "score": 0.65}]}) == "Kale"
        assert pick_best_label({"fullText": "x\n  Kale Chips  \nmore"}) == "Kale Chips"
        assert pick_best_label({"objects": [{"text": "Bottle", "score": 0.61}]}) == "Bottle"
        assert pick_best_label({"objects": [{"text": "Bottle", "score": 0.59}]}) is None
        assert pick_best_label({"labels": [{"text": "Snack", "score": 0.7}]}) == "Snack"

    def test_nothing_found(self):
        assert pick_best_label({}) is None
        assert pick_best_label(None) is None
