"""
Image handling for scans: API-ready JPEG bytes and per-object crop regions.

Features:
- EXIF orientation correction (phone camera rotation)
- Longest-edge downscaling before upload
- Crops around localized objects for multi-item photos, so each crop can be
  annotated again on its own
"""
import io
from pathlib import Path
from typing import List, Optional, Tuple

from PIL import Image, ImageOps

from .schemas import AnnotationInput, NormalizedBox, ObjectAnnotation, as_annotation_result

PixelBox = Tuple[int, int, int, int]


def load_image(image_path: Path) -> Image.Image:
    """Load image with EXIF orientation applied, converted to RGB."""
    img = Image.open(image_path)
    img = ImageOps.exif_transpose(img)
    if img.mode != 'RGB':
        img = img.convert('RGB')
    return img


def resize_longest_edge(img: Image.Image, target_size: int = 1600) -> Image.Image:
    """Downscale so the longest edge is at most target_size (never upscales)."""
    width, height = img.size
    longest = max(width, height)
    if longest <= target_size:
        return img
    scale = target_size / longest
    new_size = (max(1, round(width * scale)), max(1, round(height * scale)))
    return img.resize(new_size, Image.Resampling.LANCZOS)


def to_jpeg_bytes(img: Image.Image, quality: int = 80) -> bytes:
    buffer = io.BytesIO()
    img.save(buffer, format='JPEG', quality=quality, optimize=True)
    return buffer.getvalue()


def preprocess_image_for_api(image_path: Path, target_size: int = 1600, jpeg_quality: int = 80) -> bytes:
    """
    Load, orient, downscale and JPEG-encode an image for the Vision API.

    Args:
        image_path: Path to image file
        target_size: Longest edge in pixels
        jpeg_quality: JPEG quality 1-100 (0.8 matches the camera capture setting)

    Returns:
        JPEG bytes
    """
    img = resize_longest_edge(load_image(image_path), target_size)
    return to_jpeg_bytes(img, jpeg_quality)


def object_regions(result: AnnotationInput, min_score: float = 0.5) -> List[ObjectAnnotation]:
    """Localized objects that carry a region, highest score first."""
    annotations = as_annotation_result(result)
    regions = [
        obj for obj in annotations.objects
        if obj.region is not None and (obj.score if obj.score is not None else 0.5) >= min_score
    ]
    return sorted(regions, key=lambda o: -(o.score if o.score is not None else 0.5))


def to_pixel_box(box: NormalizedBox, width: int, height: int, padding: float = 0.0) -> Optional[PixelBox]:
    """
    Convert a normalized box to a clamped pixel box.

    Args:
        box: Normalized region
        width: Image width in pixels
        height: Image height in pixels
        padding: Fraction of the box size added on every side

    Returns:
        (left, top, right, bottom), or None when the clamped box is empty
    """
    pad_x = (box.x_max - box.x_min) * padding
    pad_y = (box.y_max - box.y_min) * padding

    left = int(round(max(0.0, box.x_min - pad_x) * width))
    top = int(round(max(0.0, box.y_min - pad_y) * height))
    right = int(round(min(1.0, box.x_max + pad_x) * width))
    bottom = int(round(min(1.0, box.y_max + pad_y) * height))

    if right <= left or bottom <= top:
        return None
    return left, top, right, bottom


def crop_regions(
    img: Image.Image,
    result: AnnotationInput,
    padding: float = 0.05,
    min_score: float = 0.5,
) -> List[Tuple[str, Image.Image]]:
    """
    Crop one sub-image per localized object.

    Returns:
        (object name, cropped image) pairs, highest-scoring object first.
        Degenerate regions are skipped.
    """
    width, height = img.size
    crops = []
    for obj in object_regions(result, min_score=min_score):
        pixel_box = to_pixel_box(obj.region, width, height, padding=padding)
        if pixel_box is None:
            continue
        crops.append((obj.text, img.crop(pixel_box)))
    return crops
