"""Object detection with YOLOv5 / YOLOv8 style models."""

from __future__ import annotations

import os
import random
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from typing import NamedTuple, Union

import numpy as np

from .letterbox import blob_from_image, letterbox
from .nms import nms_boxes

PathLike = Union[str, "os.PathLike[str]"]
Model = Callable[[np.ndarray], object]


class Box(NamedTuple):
    """An axis-aligned box in pixel coordinates."""

    x: int
    y: int
    width: int
    height: int


@dataclass
class Detection:
    """One detected object."""

    class_id: int = 0
    class_name: str = ""
    confidence: float = 0.0
    color: tuple[int, int, int] = (0, 0, 0)
    box: Box = field(default_factory=lambda: Box(0, 0, 0, 0))


def load_class_list(path: PathLike) -> list[str]:
    """Read class names from a file, one per line."""
    with open(path, encoding="utf-8") as handle:
        lines = handle.read().split("\n")
    if lines and lines[-1] == "":
        lines.pop()
    return lines


def random_color(rng: random.Random) -> tuple[int, int, int]:
    """A random colour with every channel between 100 and 255."""
    return (rng.randint(100, 255), rng.randint(100, 255), rng.randint(100, 255))


class InferenceEngine:
    """Runs a detector model on frames and turns its output into detections.

    ``model`` is called with a float32 NCHW blob and returns the raw output
    tensor (or a sequence whose first item is that tensor).
    """

    def __init__(
        self,
        model: Model,
        input_size: tuple[int, int] = (640, 640),
        class_file: PathLike = "../VisDroneClasses.txt",
        letterbox_square: bool = True,
        conf_threshold: float = 0.25,
        score_threshold: float = 0.45,
        nms_threshold: float = 0.5,
    ) -> None:
        self.model = model
        self.input_size = (int(input_size[0]), int(input_size[1]))
        self.classes = load_class_list(class_file)
        self.letterbox_square = letterbox_square
        self.conf_threshold = conf_threshold
        self.score_threshold = score_threshold
        self.nms_threshold = nms_threshold
        self.rng = random.Random()

    def decode(
        self, output: np.ndarray, pad_x: int = 0, pad_y: int = 0, scale: float = 1.0
    ) -> list[Detection]:
        """Turn a raw model output into detections in original image coordinates.

        An output shaped (rows, 5 + classes) is read as YOLOv5; one with more
        columns than rows, (4 + classes, rows), is read as YOLOv8.
        """
        data = np.asarray(output, dtype=np.float32)
        if data.ndim == 3:
            data = data[0]
        if data.ndim != 2:
            raise ValueError(f"unexpected output shape {np.shape(output)}")
        if not self.classes:
            raise ValueError("no class names loaded")

        yolov8 = data.shape[1] > data.shape[0]
        if yolov8:
            data = data.T
        offset = 4 if yolov8 else 5
        class_count = len(self.classes)
        if data.shape[1] < offset + class_count:
            raise ValueError(
                f"output has {data.shape[1]} values per row, "
                f"need {offset + class_count} for {class_count} classes"
            )

        scores = data[:, offset : offset + class_count]
        best_scores = scores.max(axis=1)
        best_ids = scores.argmax(axis=1)
        if yolov8:
            keep = best_scores > self.score_threshold
            confidences_all = best_scores
        else:
            keep = (data[:, 4] >= self.conf_threshold) & (best_scores > self.score_threshold)
            confidences_all = data[:, 4]

        boxes: list[Box] = []
        confidences: list[float] = []
        class_ids: list[int] = []
        for row, confidence, class_id in zip(
            data[keep], confidences_all[keep], best_ids[keep]
        ):
            x, y, w, h = (float(value) for value in row[:4])
            boxes.append(
                Box(
                    int((x - 0.5 * w - pad_x) / scale),
                    int((y - 0.5 * h - pad_y) / scale),
                    int(w / scale),
                    int(h / scale),
                )
            )
            confidences.append(float(confidence))
            class_ids.append(int(class_id))

        return [
            Detection(
                class_id=class_ids[index],
                class_name=self.classes[class_ids[index]],
                confidence=confidences[index],
                color=random_color(self.rng),
                box=boxes[index],
            )
            for index in nms_boxes(
                boxes, confidences, self.score_threshold, self.nms_threshold
            )
        ]

    def run_inference(self, frame: np.ndarray) -> list[Detection]:
        """Detect objects in an HxWx3 BGR frame."""
        width, height = self.input_size
        model_input = np.asarray(frame)
        pad_x, pad_y, scale = 0, 0, 1.0
        if self.letterbox_square and width == height:
            fitted = letterbox(model_input, width, height)
            model_input = fitted.image
            pad_x, pad_y, scale = fitted.pad_x, fitted.pad_y, fitted.scale
        blob = blob_from_image(model_input, width, height, 1.0 / 255.0, True)
        output = self.model(blob)
        if isinstance(output, Sequence) and not isinstance(output, np.ndarray):
            output = output[0]
        return self.decode(np.asarray(output), pad_x, pad_y, scale)