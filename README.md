# dronevision

Helpers for running YOLO-family object detectors on drone imagery. The
package prepares frames for a model and turns the model's raw output into
detections. It can also draw those detections onto images. You supply the
model as a Python callable.

## Installation

```
pip install .
```

To run the test suite as well:

```
pip install ".[test]"
pytest
```

## Modules

### `dronevision.letterbox`

- `letterbox(image, width, height)` scales an `H x W` or `H x W x C` array to
  fit inside `width x height` and keeps its aspect ratio. The scaled image sits
  in the centre of a zero-filled canvas. The function returns a `Letterbox`
  with the fields `image`, `pad_x`, `pad_y` and `scale`.
- `blob_from_image(image, width, height, scale_factor=1.0, swap_rb=False)`
  builds the input tensor for the model. It resizes the image bilinearly and
  multiplies it by `scale_factor`. If `swap_rb` is set, it swaps the first and
  third channels. The result is a float32 array of shape `(1, C, height, width)`.

Both functions raise `ValueError` for a non-positive target size or an empty
image.

### `dronevision.nms`

- `box_iou(first, second)` returns the intersection over union of two
  `(x, y, width, height)` boxes.
- `nms_boxes(boxes, scores, score_threshold, nms_threshold)` runs greedy
  non-maximum suppression and returns the indices of the kept boxes, highest
  score first. It considers only boxes that score strictly above
  `score_threshold`. It drops a box when its IoU with a box already kept is
  greater than `nms_threshold`.

### `dronevision.engine`

- `InferenceEngine(model, input_size=(640, 640), class_file="../VisDroneClasses.txt",
  letterbox_square=True, conf_threshold=0.25, score_threshold=0.45,
  nms_threshold=0.5)` reads the class names from `class_file` and wraps
  `model`. The model is called with a blob and returns the raw output. It may
  also return a sequence, in which case the engine uses the first item.
- `run_inference(frame)` takes an `H x W x 3` BGR frame. When the input size is
  square and `letterbox_square` is set, it letterboxes the frame first. It then
  builds a blob scaled by 1/255 with the red and blue channels swapped, calls
  the model, and decodes the output.
- `decode(output, pad_x=0, pad_y=0, scale=1.0)` accepts a 2-D output, or a 3-D
  output of which it uses the first batch item. It reads the output in one of
  two layouts:
  - `(rows, 5 + classes)` is YOLOv5. A row is kept when its objectness is at
    least `conf_threshold` and its best class score is above
    `score_threshold`. The confidence reported is the objectness.
  - `(4 + classes, rows)` is YOLOv8. The engine picks this layout when there
    are more columns than rows. A row is kept when its best class score is
    above `score_threshold`, and that score is the confidence.

  Boxes are mapped back to original image coordinates and then filtered with
  `nms_boxes`. Each result is a `Detection` with `class_id`, `class_name`,
  `confidence`, `color` (a random colour from `random_color`, every channel
  between 100 and 255) and `box` (a `Box` named tuple `x, y, width, height`).
- `load_class_list(path)` reads one class name per line.

### `dronevision.annotate`

- `draw_detections(image, detections)` returns a copy of an `H x W x 3` uint8
  image. On the copy it draws each box outline and a filled label with the
  caption in black.
- `label_text(detection)` gives the caption: the class name followed by the
  confidence, cut to four characters (for example `car 0.87`).
- `scale_image(image, factor)` resizes an image by `factor` in both directions.

## Example

```python
from pathlib import Path

import numpy as np

from dronevision.annotate import draw_detections, scale_image
from dronevision.engine import InferenceEngine

Path("classes.txt").write_text("pedestrian\ncar\ntruck\n", encoding="utf-8")

def model(blob):
    # Stand-in for a real network call, returning a YOLOv8-shaped output.
    return np.zeros((1, 4 + 3, 8400), dtype=np.float32)

engine = InferenceEngine(model, (640, 640), "classes.txt")
frame = np.zeros((720, 1280, 3), dtype=np.uint8)
detections = engine.run_inference(frame)
annotated = scale_image(draw_detections(frame, detections), 0.8)
```

## What it does not do

The package does not load model files or run a neural network itself. The
`model` callable has to do that. It also does not read video files or
cameras, does not open display windows, and has no command-line program.
You supply the frames and choose what to do with the annotated images.