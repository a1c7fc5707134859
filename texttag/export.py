"""
YOLO-style CSV export of tagged boxes.
"""

import os
from typing import Collection, Iterable, List, Optional

from texttag.errors import ExportError
from texttag.reading_order import sort_boxes_by_columns
from texttag.region import BoundingBox

CSV_HEADER = 'filename,class,x_center,y_center,width,height'
DEFAULT_FILENAME = 'image.jpg'
FALLBACK_STEM = 'yolo_coordinates'


def _clamp01(value: float) -> float:
    return max(0.0, min(1.0, value))


def _csv_field(value: str) -> str:
    """Drop separators so a value always stays a single unquoted column."""
    return ''.join(ch for ch in (value or '') if ch not in ',\r\n')


def normalize_box(box: BoundingBox, image_width: float,
                  image_height: float) -> tuple:
    """
    Normalized (x_center, y_center, width, height), each clamped to [0, 1].
    """
    cx, cy = box.center
    return (_clamp01(cx / image_width),
            _clamp01(cy / image_height),
            _clamp01(box.w / image_width),
            _clamp01(box.h / image_height))


def encode_csv(boxes: Iterable[BoundingBox],
               image_width: Optional[float],
               image_height: Optional[float],
               filename: str = DEFAULT_FILENAME,
               excluded_ids: Collection[int] = ()) -> str:
    """
    Serialize boxes in reading order as normalized CSV.

    Args:
        boxes: Final box set (any order)
        image_width, image_height: Source image size in pixels
        filename: Value written to the filename column
        excluded_ids: Box ids left out of the export

    Returns:
        Header plus one line per box, joined with newlines

    Raises:
        ExportError: If no boxes remain or image dimensions are unusable
    """
    if not image_width or not image_height or image_width <= 0 or image_height <= 0:
        raise ExportError("Cannot export: image dimensions are unavailable")

    excluded = set(excluded_ids)
    to_export = [b for b in boxes if b.id not in excluded]
    if not to_export:
        raise ExportError("No bounding boxes to export")

    filename = _csv_field(filename) or DEFAULT_FILENAME
    lines: List[str] = [CSV_HEADER]
    for box in sort_boxes_by_columns(to_export):
        x_center, y_center, width, height = normalize_box(box, image_width, image_height)
        box_class = box.label.value if box.label else ''
        lines.append(f"{filename},{box_class},{x_center:.6f},{y_center:.6f},"
                     f"{width:.6f},{height:.6f}")

    return '\n'.join(lines)


def export_filename(original_name: str) -> str:
    """CSV file name derived from the source image name."""
    stem = '.'.join(os.path.basename(original_name or '').split('.')[:-1])
    return f"{stem or FALLBACK_STEM}.csv"


def write_csv(path: str, content: str) -> None:
    directory = os.path.dirname(path)
    if directory:
        os.makedirs(directory, exist_ok=True)
    with open(path, 'w', encoding='utf-8', newline='') as f:
        f.write(content)
