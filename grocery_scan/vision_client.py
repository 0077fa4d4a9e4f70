"""
Google Cloud Vision client for product photos.

Builds the multi-feature annotate request used by the scan screen (logo, web,
text, object and label detection) and posts it with aiohttp. One request per
call, no retries; failures surface as VisionAPIError for the caller to show.
"""
import os
import base64
from pathlib import Path
from typing import Any, Dict, Optional, Sequence

import aiohttp

from .image_regions import preprocess_image_for_api
from .schemas import AnnotationResult
from .vision_response import first_response, from_vision_response

ANNOTATE_ENDPOINT = "https://vision.googleapis.com/v1/images:annotate"


class VisionAPIError(Exception):
    """Vision API returned an HTTP error or an error object."""

    def __init__(self, message: str, status: Optional[int] = None):
        super().__init__(message)
        self.status = status


def build_annotate_request(
    image_b64: str,
    max_results: int = 5,
    language_hints: Sequence[str] = ("en",),
) -> Dict[str, Any]:
    """
    Build the images:annotate request body for one base64 image.

    Args:
        image_b64: Base64-encoded image content
        max_results: maxResults for every feature
        language_hints: OCR language hints

    Returns:
        JSON-serializable request body
    """
    return {
        "requests": [
            {
                "image": {"content": image_b64},
                "imageContext": {"languageHints": list(language_hints)},
                "features": [
                    {"type": "LOGO_DETECTION", "maxResults": max_results},
                    {"type": "WEB_DETECTION", "maxResults": max_results},
                    {"type": "TEXT_DETECTION", "maxResults": max_results},
                    {"type": "OBJECT_LOCALIZATION", "maxResults": max_results},
                    {
                        "type": "LABEL_DETECTION",
                        "maxResults": max_results,
                        "model": "builtin/latest",
                    },
                ],
            }
        ]
    }


class VisionClient:
    """Thin async client for the Vision annotate endpoint."""

    def __init__(self, api_key: Optional[str] = None, max_results: int = 5, timeout_s: float = 30.0):
        """
        Initialize Vision client.

        Args:
            api_key: API key (default: GCV_API_KEY environment variable)
            max_results: maxResults per feature
            timeout_s: Total request timeout in seconds
        """
        api_key = api_key or os.getenv("GCV_API_KEY")
        if not api_key:
            raise ValueError("GCV_API_KEY environment variable not set")

        self.api_key = api_key
        self.max_results = max_results
        self.timeout_s = timeout_s

    async def annotate(self, image_bytes: bytes) -> Dict[str, Any]:
        """
        Annotate raw image bytes.

        Returns:
            responses[0] of the Vision reply

        Raises:
            VisionAPIError: On HTTP status >= 400, an error object, or an empty reply
        """
        image_b64 = base64.b64encode(image_bytes).decode("utf-8")
        body = build_annotate_request(image_b64, max_results=self.max_results)

        timeout = aiohttp.ClientTimeout(total=self.timeout_s)
        async with aiohttp.ClientSession(timeout=timeout) as session:
            async with session.post(ANNOTATE_ENDPOINT, params={"key": self.api_key}, json=body) as resp:
                payload = await resp.json(content_type=None)
                if resp.status >= 400:
                    error = payload.get("error") if isinstance(payload, dict) else None
                    message = error.get("message", resp.reason) if isinstance(error, dict) else resp.reason
                    raise VisionAPIError(f"Vision API HTTP {resp.status}: {message}", status=resp.status)

        response = first_response(payload)
        if not response:
            raise VisionAPIError("Vision API returned no responses")
        if "error" in response:
            error = response["error"] if isinstance(response["error"], dict) else {}
            raise VisionAPIError(f"Vision API error: {error.get('message', 'unknown')}")

        print(f"[VISION] Annotated image ({len(image_bytes)} bytes)")
        return response

    async def annotate_image(self, image_path: Path) -> AnnotationResult:
        """Preprocess an image file, annotate it, and map the reply."""
        image_bytes = preprocess_image_for_api(Path(image_path))
        return from_vision_response(await self.annotate(image_bytes))
