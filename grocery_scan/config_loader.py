"""
Configuration loader for the candidate ranker.

Loads tuning constants and the OCR stopword list from YAML files and computes
a deterministic fingerprint for drift detection.
"""
import yaml
import json
import hashlib
from dataclasses import dataclass, fields, replace
from typing import Any, Dict, FrozenSet, Optional
from pathlib import Path

DEFAULT_CONFIG_DIR = Path(__file__).parent / "configs"

DEFAULT_OCR_STOPWORDS: FrozenSet[str] = frozenset({
    "tea", "green", "black", "carton", "bottle", "box", "drink",
    "organic", "product", "net", "weight", "ml", "g",
})


@dataclass(frozen=True)
class RankerConfig:
    """Ranker/resolver tuning constants with version tracking."""
    max_candidates: int = 5

    logo_default_score: float = 0.85
    web_guess_score: float = 0.80
    web_entity_min_score: float = 0.50
    web_entity_default_score: float = 0.60

    ocr_min_line_length: int = 2
    ocr_max_line_length: int = 40
    ocr_stopword_ratio: float = 0.40
    ocr_capitalized_ratio: float = 0.60
    ocr_max_lines: int = 6
    ocr_base_score: float = 0.70
    ocr_score_step: float = 0.05

    object_default_score: float = 0.5
    object_weight: float = 0.6
    label_default_score: float = 0.5
    label_weight: float = 0.5

    best_logo_min_score: float = 0.5
    best_entity_min_score: float = 0.6
    best_object_min_score: float = 0.6
    best_label_min_score: float = 0.7

    ocr_specific_fallback: bool = True

    ocr_stopwords: FrozenSet[str] = DEFAULT_OCR_STOPWORDS

    config_version: str = "configs@builtin"
    config_fingerprint: str = "builtin"

    @classmethod
    def defaults(cls) -> "RankerConfig":
        """Built-in constants, no file I/O."""
        return _DEFAULTS

    def with_overrides(self, **overrides: Any) -> "RankerConfig":
        """Copy with tuning values replaced and the fingerprint recomputed."""
        updated = replace(self, **overrides)
        fingerprint = _fingerprint(updated.tuning_dict())
        return replace(
            updated,
            config_version=f"configs@{fingerprint}",
            config_fingerprint=fingerprint,
        )

    def tuning_dict(self) -> Dict[str, Any]:
        """Tuning values only (no version fields), JSON-serializable."""
        data = {}
        for f in fields(self):
            if f.name in _VERSION_FIELDS:
                continue
            value = getattr(self, f.name)
            data[f.name] = sorted(value) if isinstance(value, frozenset) else value
        return data


_VERSION_FIELDS = ("config_version", "config_fingerprint")
_TUNING_KEYS = frozenset(
    f.name for f in fields(RankerConfig)
    if f.name not in _VERSION_FIELDS and f.name != "ocr_stopwords"
)
_DEFAULTS = RankerConfig()


def _load_yaml(path: Path) -> Dict[str, Any]:
    """Load YAML file."""
    with open(path, 'r') as f:
        return yaml.safe_load(f) or {}


def _fingerprint(data: Dict[str, Any]) -> str:
    # Sort keys to ensure stability across reordered YAML
    blob = json.dumps(data, sort_keys=True).encode("utf-8")
    return hashlib.sha256(blob).hexdigest()[:12]


def load_ranker_config(root: Optional[str] = None) -> RankerConfig:
    """
    Load ranker configs from directory and compute version fingerprint.

    Args:
        root: Path to configs directory (default: packaged grocery_scan/configs/)

    Returns:
        RankerConfig with loaded values and version tracking

    Raises:
        FileNotFoundError: If ranker_thresholds.yml is missing
        ValueError: If the thresholds file has unknown keys or a bad stopword list
    """
    root_path = Path(root) if root else DEFAULT_CONFIG_DIR

    thresholds_path = root_path / "ranker_thresholds.yml"
    stopwords_path = root_path / "ocr_stopwords.yml"

    if not thresholds_path.exists():
        raise FileNotFoundError(
            f"Required config file not found: {thresholds_path}"
        )

    thresholds = _load_yaml(thresholds_path)
    if not isinstance(thresholds, dict):
        raise ValueError(f"Expected a mapping in {thresholds_path}")

    unknown = sorted(set(thresholds) - _TUNING_KEYS)
    if unknown:
        raise ValueError(f"Unknown ranker threshold keys in {thresholds_path}: {unknown}")

    # Stopwords are optional (built-in list when the file is absent)
    stopwords = DEFAULT_OCR_STOPWORDS
    if stopwords_path.exists():
        raw = _load_yaml(stopwords_path).get("stopwords", [])
        if not isinstance(raw, list) or not all(isinstance(w, str) for w in raw):
            raise ValueError(f"'stopwords' must be a list of strings in {stopwords_path}")
        stopwords = frozenset(w.strip().lower() for w in raw if w.strip())
    else:
        print(f"[CONFIG] {stopwords_path.name} not found, using built-in OCR stopwords")

    cfg = RankerConfig(**thresholds, ocr_stopwords=stopwords)

    # Compute deterministic config fingerprint
    fingerprint = _fingerprint(cfg.tuning_dict())
    return replace(
        cfg,
        config_version=f"configs@{fingerprint}",
        config_fingerprint=fingerprint,
    )
