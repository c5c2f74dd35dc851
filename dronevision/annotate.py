"""Drawing detections onto frames."""

from __future__ import annotations

from collections.abc import Iterable

import numpy as np
from PIL import Image, ImageDraw, ImageFont

from .engine import Detection

_TEXT_COLOR = (0, 0, 0)


def label_text(detection: Detection) -> str:
    """Class name followed by the confidence cut to four characters."""
    return f"{detection.class_name} {detection.confidence:f}"[: len(detection.class_name) + 5]


def _corners(x: int, y: int, width: int, height: int) -> tuple[int, int, int, int]:
    x0, x1 = sorted((x, x + width - 1))
    y0, y1 = sorted((y, y + height - 1))
    return x0, y0, x1, y1


def _check_color_image(image: np.ndarray) -> None:
    if image.ndim != 3 or image.shape[2] != 3 or image.dtype != np.uint8:
        raise ValueError("image must be an HxWx3 uint8 array")


def draw_detections(image: np.ndarray, detections: Iterable[Detection]) -> np.ndarray:
    """Return a copy of ``image`` with boxes and labels drawn for each detection."""
    image = np.asarray(image)
    _check_color_image(image)
    canvas = Image.fromarray(np.ascontiguousarray(image))
    draw = ImageDraw.Draw(canvas)
    font = ImageFont.load_default()
    for detection in detections:
        x, y, width, height = detection.box
        color = tuple(int(channel) for channel in detection.color)
        draw.rectangle(_corners(x, y, width, height), outline=color, width=2)
        text = label_text(detection)
        left, top, right, bottom = draw.textbbox((0, 0), text, font=font)
        text_w, text_h = right - left, bottom - top
        draw.rectangle(_corners(x, y - 40, text_w + 10, text_h + 20), fill=color)
        draw.text((x + 5, y - 10 - text_h), text, fill=_TEXT_COLOR, font=font)
    return np.array(canvas)


def scale_image(image: np.ndarray, factor: float) -> np.ndarray:
    """Resize an image by ``factor`` in both directions."""
    image = np.asarray(image)
    if factor <= 0:
        raise ValueError("scale factor must be positive")
    width = int(image.shape[1] * factor)
    height = int(image.shape[0] * factor)
    if width == 0 or height == 0:
        raise ValueError("scaled image would be empty")
    resized = Image.fromarray(np.ascontiguousarray(image)).resize(
        (width, height), Image.Resampling.BILINEAR
    )
    return np.array(resized)