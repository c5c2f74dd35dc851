"""Square letterboxing and network input blobs for detector models."""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np
from PIL import Image


@dataclass(frozen=True)
class Letterbox:
    """An image fitted into a fixed canvas, with the padding and scale used."""

    image: np.ndarray
    pad_x: int
    pad_y: int
    scale: float


def _check_size(width: int, height: int) -> None:
    if width <= 0 or height <= 0:
        raise ValueError(f"target size must be positive, got {width}x{height}")


def _check_image(image: np.ndarray) -> None:
    if image.ndim not in (2, 3) or image.shape[0] == 0 or image.shape[1] == 0:
        raise ValueError("image must be a non-empty 2-D or 3-D array")


def _resize(image: np.ndarray, width: int, height: int) -> np.ndarray:
    """Bilinearly resize an HxW or HxWxC array to ``width`` x ``height``."""
    if image.shape[1] == width and image.shape[0] == height:
        return image.copy()
    planes = image[..., np.newaxis] if image.ndim == 2 else image
    resized = [
        np.asarray(
            Image.fromarray(np.ascontiguousarray(plane, dtype=np.float32)).resize(
                (width, height), Image.Resampling.BILINEAR
            )
        )
        for plane in np.moveaxis(planes, -1, 0)
    ]
    stacked = np.stack(resized, axis=-1)
    if np.issubdtype(image.dtype, np.integer):
        info = np.iinfo(image.dtype)
        stacked = np.clip(np.rint(stacked), info.min, info.max)
    result = stacked.astype(image.dtype)
    return result[..., 0] if image.ndim == 2 else result


def letterbox(image: np.ndarray, width: int, height: int) -> Letterbox:
    """Scale ``image`` to fit ``width`` x ``height`` keeping its aspect ratio.

    The scaled image is centred on a zero-filled canvas.
    """
    _check_size(width, height)
    image = np.asarray(image)
    _check_image(image)
    rows, cols = image.shape[:2]
    scale = min(width / cols, height / rows)
    resized_w = int(cols * scale)
    resized_h = int(rows * scale)
    pad_x = (width - resized_w) // 2
    pad_y = (height - resized_h) // 2

    canvas = np.zeros((height, width) + image.shape[2:], dtype=image.dtype)
    canvas[pad_y : pad_y + resized_h, pad_x : pad_x + resized_w] = _resize(
        image, resized_w, resized_h
    )
    return Letterbox(image=canvas, pad_x=pad_x, pad_y=pad_y, scale=scale)


def blob_from_image(
    image: np.ndarray,
    width: int,
    height: int,
    scale_factor: float = 1.0,
    swap_rb: bool = False,
) -> np.ndarray:
    """Build a float32 NCHW blob of shape (1, C, height, width) from an image."""
    _check_size(width, height)
    image = np.asarray(image)
    _check_image(image)
    data = _resize(image, width, height).astype(np.float32)
    if data.ndim == 2:
        data = data[..., np.newaxis]
    channels = data.shape[2]
    if swap_rb and channels >= 3:
        data = data[..., [2, 1, 0, *range(3, channels)]]
    data = data * np.float32(scale_factor)
    return np.ascontiguousarray(np.transpose(data, (2, 0, 1))[np.newaxis], dtype=np.float32)