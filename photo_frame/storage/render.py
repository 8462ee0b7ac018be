#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Render submitted images to the frame's fixed resolution.

Three strategies depending on how large the letterbox bars of a plain
"contain" fit would be:
  - small bars (<= SMALL_BAR_RATIO): contain, pad with the background;
  - big bars (>= BIG_BAR_RATIO): cover, centre crop;
  - in between: zoom so the bars shrink to SMALL_BAR_RATIO at most, then
    composite centred on a background canvas.
"""

import io
import logging
import warnings
from typing import Tuple

from PIL import Image, ImageOps

from ..config import (
    BIG_BAR_RATIO, FRAME_BACKGROUND, FRAME_HEIGHT, FRAME_JPEG_QUALITY, FRAME_WIDTH, SMALL_BAR_RATIO,
)

logger = logging.getLogger(__name__)

# Suppress PIL warnings
warnings.filterwarnings("ignore", category=UserWarning,
                        message=".*Palette images with Transparency expressed in bytes.*")


def _flatten(img: Image.Image, background: Tuple[int, int, int]) -> Image.Image:
    """Convert to RGB, compositing any alpha channel onto `background`."""
    if img.mode in ("RGBA", "LA") or (img.mode == "P" and "transparency" in img.info):
        rgba = img.convert("RGBA")
        canvas = Image.new("RGB", rgba.size, background)
        canvas.paste(rgba, mask=rgba.split()[-1])
        return canvas
    return img.convert("RGB")


def _encode(img: Image.Image, quality: int) -> bytes:
    buf = io.BytesIO()
    img.save(buf, format="JPEG", quality=quality)
    return buf.getvalue()


def _on_canvas(img: Image.Image, width: int, height: int, background: Tuple[int, int, int]) -> Image.Image:
    canvas = Image.new("RGB", (width, height), background)
    canvas.paste(img, ((width - img.width) // 2, (height - img.height) // 2))
    return canvas


def bar_ratio(size: Tuple[int, int], width: int = FRAME_WIDTH, height: int = FRAME_HEIGHT) -> float:
    """Largest letterbox bar, as a fraction of the frame, for a contain fit."""
    w, h = size
    scale = min(width / w, height / h)
    pad_x = max(0, width - int(w * scale))
    pad_y = max(0, height - int(h * scale))
    return max(pad_x / width, pad_y / height)


def render_for_frame(
    source: bytes,
    width: int = FRAME_WIDTH,
    height: int = FRAME_HEIGHT,
    background: Tuple[int, int, int] = FRAME_BACKGROUND,
    quality: int = FRAME_JPEG_QUALITY,
) -> bytes:
    """Return JPEG bytes of exactly `width` x `height` pixels.

    Raises PIL.UnidentifiedImageError (an OSError) for data that is not an image.
    """
    with Image.open(io.BytesIO(source)) as opened:
        img = ImageOps.exif_transpose(opened)
        img = _flatten(img, background)

    w, h = img.size
    if w <= 0 or h <= 0:
        return _encode(Image.new("RGB", (width, height), background), quality)

    scale_contain = min(width / w, height / h)
    ratio = bar_ratio((w, h), width, height)

    if ratio <= SMALL_BAR_RATIO:
        # Never enlarge a contained image; the canvas absorbs the difference
        scale = min(1.0, scale_contain)
        fitted = img.resize((max(1, int(w * scale)), max(1, int(h * scale))), Image.LANCZOS)
        logger.debug("Render contain %dx%d -> %dx%d", w, h, fitted.width, fitted.height)
        return _encode(_on_canvas(fitted, width, height, background), quality)

    if ratio >= BIG_BAR_RATIO:
        logger.debug("Render cover %dx%d", w, h)
        return _encode(ImageOps.fit(img, (width, height), Image.LANCZOS, centering=(0.5, 0.5)), quality)

    # Compromise zone: over-zoom until bars are at most SMALL_BAR_RATIO
    scale_cover = max(width / w, height / h)
    if w / h < width / height:
        min_w = width * (1 - SMALL_BAR_RATIO)
        scale = min(scale_cover, max(scale_contain, min_w / w))
    else:
        min_h = height * (1 - SMALL_BAR_RATIO)
        scale = min(scale_cover, max(scale_contain, min_h / h))

    resized = img.resize((max(1, round(w * scale)), max(1, round(h * scale))), Image.LANCZOS)
    if resized.width > width or resized.height > height:
        resized = ImageOps.fit(resized, (min(resized.width, width), min(resized.height, height)), Image.LANCZOS)
    logger.debug("Render compromise %dx%d -> %dx%d", w, h, resized.width, resized.height)
    return _encode(_on_canvas(resized, width, height, background), quality)
