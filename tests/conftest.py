"""
Pytest configuration for grocery scan tests.
"""
import sys
from pathlib import Path

import pytest

# Add repo root to path for imports
repo_root = Path(__file__).parent.parent
sys.path.insert(0, str(repo_root))


@pytest.fixture
def vision_response():
    """Raw Google Vision reply for a photo of a bunch of bananas."""
    return {
        "logoAnnotations": [{"description": "Chiquita", "score": 0.92}],
        "webDetection": {
            "bestGuessLabels": [{"label": "chiquita banana"}],
            "webEntities": [
                {"description": "Banana", "score": 0.88},
                {"description": "Fruit", "score": 0.7},
                {"description": "Cavendish", "score": 0.3},
            ],
        },
        "fullTextAnnotation": {"text": "Chiquita\nPREMIUM\nnet weight 1kg\n"},
        "localizedObjectAnnotations": [
            {
                "name": "Banana",
                "score": 0.95,
                "boundingPoly": {
                    "normalizedVertices": [
                        {"x": 0.1, "y": 0.2},
                        {"x": 0.6, "y": 0.2},
                        {"x": 0.6, "y": 0.9},
                        {"x": 0.1, "y": 0.9},
                    ]
                },
            }
        ],
        "labelAnnotations": [
            {"description": "Food", "score": 0.97},
            {"description": "Banana family", "score": 0.9},
        ],
    }


@pytest.fixture
def vision_envelope(vision_response):
    """Full images:annotate reply wrapping one response."""
    return {"responses": [vision_response]}
