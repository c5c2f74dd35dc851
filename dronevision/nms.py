"""Greedy non-maximum suppression over (x, y, width, height) boxes."""

from __future__ import annotations

from collections.abc import Sequence


def box_iou(first: Sequence[float], second: Sequence[float]) -> float:
    """Intersection over union of two (x, y, width, height) boxes."""
    ax, ay, aw, ah = first
    bx, by, bw, bh = second
    area_a = aw * ah
    area_b = bw * bh
    if area_a + area_b <= 0:
        return 1.0
    inter_w = min(ax + aw, bx + bw) - max(ax, bx)
    inter_h = min(ay + ah, by + bh) - max(ay, by)
    inter = inter_w * inter_h if inter_w > 0 and inter_h > 0 else 0
    return inter / (area_a + area_b - inter)


def nms_boxes(
    boxes: Sequence[Sequence[float]],
    scores: Sequence[float],
    score_threshold: float,
    nms_threshold: float,
) -> list[int]:
    """Indices of boxes kept by non-maximum suppression, best score first.

    Only boxes scoring strictly above ``score_threshold`` are considered; a
    box is dropped when it overlaps a kept box by more than ``nms_threshold``.
    """
    if len(boxes) != len(scores):
        raise ValueError("boxes and scores must have the same length")
    if score_threshold < 0 or nms_threshold < 0:
        raise ValueError("thresholds must not be negative")

    candidates = sorted(
        (index for index, score in enumerate(scores) if score > score_threshold),
        key=lambda index: -scores[index],
    )
    kept: list[int] = []
    for index in candidates:
        if all(box_iou(boxes[index], boxes[other]) <= nms_threshold for other in kept):
            kept.append(index)
    return kept