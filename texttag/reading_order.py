"""
Column-major reading order for finalized boxes.
"""

from typing import List, Sequence

from texttag.region import BoundingBox


def _center_x(box: BoundingBox) -> float:
    return box.x + box.w / 2


def _mean_center_x(column: Sequence[BoundingBox]) -> float:
    return sum(_center_x(b) for b in column) / len(column)


def group_columns(boxes: Sequence[BoundingBox]) -> List[List[BoundingBox]]:
    """
    Greedily cluster boxes into columns by horizontal center.

    Boxes are visited left to right; each joins the first column whose
    running mean center-x lies within half the average box width, or
    opens a new column. Columns are never split or merged afterwards.

    Args:
        boxes: Boxes in any order

    Returns:
        Columns ordered left to right, each sorted top to bottom
    """
    if not boxes:
        return []

    avg_width = sum(b.w for b in boxes) / len(boxes)
    column_threshold = avg_width * 0.5

    columns: List[List[BoundingBox]] = []
    for box in sorted(boxes, key=_center_x):
        cx = _center_x(box)
        for column in columns:
            if abs(cx - _mean_center_x(column)) < column_threshold:
                column.append(box)
                break
        else:
            columns.append([box])

    columns.sort(key=_mean_center_x)
    for column in columns:
        column.sort(key=lambda b: b.y)

    return columns


def sort_boxes_by_columns(boxes: Sequence[BoundingBox]) -> List[BoundingBox]:
    """Order boxes left-to-right by column, then top-to-bottom."""
    return [box for column in group_columns(boxes) for box in column]
