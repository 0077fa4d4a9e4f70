"""
Grocery scan: rank product names from a cloud vision analysis of a photo.

Usage:
    from grocery_scan import rank, resolve_specific

    rank({"logos": [{"text": "Acme", "score": 0.9}]})      # ["Acme"]
    resolve_specific({}, hint="bananas")                     # "Banana"
"""
from .config_loader import RankerConfig, load_ranker_config
from .ranker import extract_candidates, pick_best_label, rank
from .resolver import resolve_specific
from .run import scan_once
from .schemas import AnnotationResult, Candidate, CandidateSource, GroceryItem, ScanResult

__all__ = [
    "AnnotationResult",
    "Candidate",
    "CandidateSource",
    "GroceryItem",
    "RankerConfig",
    "ScanResult",
    "extract_candidates",
    "load_ranker_config",
    "pick_best_label",
    "rank",
    "resolve_specific",
    "scan_once",
]
