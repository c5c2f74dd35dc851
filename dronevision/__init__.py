"""Letterboxing, YOLOv5/YOLOv8 output decoding, non-maximum suppression and annotation."""

__version__ = "0.1.0"
__all__ = ["annotate", "engine", "letterbox", "nms"]