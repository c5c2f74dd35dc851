import random

import numpy as np
import pytest

from dronevision.engine import (
    Box,
    Detection,
    InferenceEngine,
    load_class_list,
    random_color,
)
from dronevision.letterbox import letterbox


@pytest.fixture
def class_file(tmp_path):
    path = tmp_path / "classes.txt"
    path.write_text("pedestrian\ncar\n", encoding="utf-8")
    return path


class RecordingModel:
    def __init__(self, output):
        self.output = output
        self.blobs = []

    def __call__(self, blob):
        self.blobs.append(blob)
        return [self.output]


def _row_for(box, scale=1.0, pad_x=0, pad_y=0):
    cx = (box.x + box.width / 2) * scale + pad_x
    cy = (box.y + box.height / 2) * scale + pad_y
    return [cx, cy, box.width * scale, box.height * scale]


def test_load_class_list(class_file):
    assert load_class_list(class_file) == ["pedestrian", "car"]


def test_load_class_list_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_class_list(tmp_path / "absent.txt")


def test_random_color_range_and_determinism():
    first = [random_color(random.Random(3)) for _ in range(5)]
    second = [random_color(random.Random(3)) for _ in range(5)]
    assert first == second
    colors = [random_color(random.Random(seed)) for seed in range(50)]
    assert all(100 <= channel <= 255 for color in colors for channel in color)


def test_decode_yolov5(class_file):
    engine = InferenceEngine(lambda blob: None, (64, 64), class_file)
    target = Box(40, 54, 20, 12)
    output = np.zeros((1, 10, 7), dtype=np.float32)
    output[0, 0] = _row_for(target) + [0.9, 0.1, 0.8]
    detections = engine.decode(output)
    assert len(detections) == 1
    found = detections[0]
    assert isinstance(found, Detection)
    assert found.box == target
    assert found.class_id == 1
    assert found.class_name == "car"
    assert found.confidence == pytest.approx(0.9)


def test_decode_yolov5_objectness_filter(class_file):
    engine = InferenceEngine(lambda blob: None, (64, 64), class_file)
    output = np.zeros((10, 7), dtype=np.float32)
    output[0] = _row_for(Box(10, 10, 8, 8)) + [0.2, 0.9, 0.1]
    assert engine.decode(output) == []


def test_decode_yolov8(class_file):
    engine = InferenceEngine(lambda blob: None, (64, 64), class_file)
    target = Box(12, 6, 30, 16)
    rows = np.zeros((20, 6), dtype=np.float32)
    rows[3] = _row_for(target) + [0.7, 0.2]
    detections = engine.decode(rows.T[np.newaxis])
    assert len(detections) == 1
    assert detections[0].box == target
    assert detections[0].class_name == "pedestrian"
    assert detections[0].confidence == pytest.approx(0.7)


def test_decode_maps_back_through_padding_and_scale(class_file):
    engine = InferenceEngine(lambda blob: None, (64, 64), class_file)
    target = Box(20, 10, 40, 20)
    output = np.zeros((10, 7), dtype=np.float32)
    output[0] = _row_for(target, scale=0.5, pad_x=4, pad_y=8) + [0.95, 0.9, 0.0]
    detections = engine.decode(output, pad_x=4, pad_y=8, scale=0.5)
    assert [d.box for d in detections] == [target]


def test_decode_suppresses_duplicates(class_file):
    engine = InferenceEngine(lambda blob: None, (64, 64), class_file)
    output = np.zeros((10, 7), dtype=np.float32)
    output[0] = _row_for(Box(10, 10, 20, 20)) + [0.6, 0.9, 0.0]
    output[1] = _row_for(Box(11, 10, 20, 20)) + [0.8, 0.9, 0.0]
    detections = engine.decode(output)
    assert len(detections) == 1
    assert detections[0].confidence == pytest.approx(0.8)


def test_decode_requires_classes(tmp_path):
    empty = tmp_path / "empty.txt"
    empty.write_text("", encoding="utf-8")
    engine = InferenceEngine(lambda blob: None, (64, 64), empty)
    with pytest.raises(ValueError):
        engine.decode(np.zeros((10, 7), dtype=np.float32))


def test_decode_rejects_short_rows(class_file):
    engine = InferenceEngine(lambda blob: None, (64, 64), class_file)
    with pytest.raises(ValueError):
        engine.decode(np.zeros((10, 6), dtype=np.float32))


def test_decode_colors_follow_rng(class_file):
    engine = InferenceEngine(lambda blob: None, (64, 64), class_file)
    output = np.zeros((10, 7), dtype=np.float32)
    output[0] = _row_for(Box(5, 5, 10, 10)) + [0.9, 0.9, 0.0]
    engine.rng = random.Random(11)
    first = engine.decode(output)[0].color
    engine.rng = random.Random(11)
    second = engine.decode(output)[0].color
    assert first == second
    assert all(100 <= channel <= 255 for channel in first)


def test_run_inference_end_to_end(class_file):
    frame = np.zeros((64, 128, 3), dtype=np.uint8)
    fitted = letterbox(frame, 64, 64)
    target = Box(20, 10, 40, 20)
    output = np.zeros((1, 10, 7), dtype=np.float32)
    output[0, 0] = _row_for(target, fitted.scale, fitted.pad_x, fitted.pad_y) + [
        0.9,
        0.1,
        0.8,
    ]
    model = RecordingModel(output)
    engine = InferenceEngine(model, (64, 64), class_file)
    detections = engine.run_inference(frame)
    assert len(model.blobs) == 1
    assert model.blobs[0].shape == (1, 3, 64, 64)
    assert [(d.class_name, d.box) for d in detections] == [("car", target)]