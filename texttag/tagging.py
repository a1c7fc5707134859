"""
Bulk class tagging over a box set.
"""

from dataclasses import replace
from typing import Collection, Iterable, List, Optional, Sequence, Tuple

from texttag.region import BoundingBox, BoxClass


def assign_class(boxes: Iterable[BoundingBox], box_ids: Collection[int],
                 box_class: Optional[BoxClass]) -> List[BoundingBox]:
    """
    Set (or clear, with None) the class of every box whose id is listed.

    Args:
        boxes: Current box set
        box_ids: Ids to tag
        box_class: New class, or None to clear

    Returns:
        New list of boxes; unlisted boxes are returned unchanged
    """
    box_ids = set(box_ids)
    return [replace(b, label=box_class) if b.id in box_ids else b for b in boxes]


def common_class(boxes: Sequence[BoundingBox],
                 box_ids: Collection[int]) -> Optional[BoxClass]:
    """Class shared by all selected boxes, or None if they differ."""
    selected = [b for b in boxes if b.id in set(box_ids)]
    if not selected:
        return None
    first = selected[0].label
    if all(b.label == first for b in selected):
        return first
    return None


def tag_summary(boxes: Sequence[BoundingBox]) -> Tuple[int, int]:
    """(tagged, total) box counts."""
    return sum(1 for b in boxes if b.label), len(boxes)


def toggle_selection(selection: Sequence[int], box_id: int,
                     multi: bool) -> Tuple[int, ...]:
    """
    Selection after clicking a box.

    With the multi-select modifier the box's membership is toggled.
    Without it the selection becomes just this box, unless it already
    was, in which case the click deselects.
    """
    selection = tuple(selection)
    if multi:
        if box_id in selection:
            return tuple(i for i in selection if i != box_id)
        return selection + (box_id,)
    if selection == (box_id,):
        return ()
    return (box_id,)


def box_at_point(boxes: Sequence[BoundingBox], x: float,
                 y: float) -> Optional[BoundingBox]:
    """First box containing the point, edges inclusive."""
    for box in boxes:
        if box.contains_point(x, y):
            return box
    return None


def click_select(boxes: Sequence[BoundingBox], selection: Sequence[int],
                 x: float, y: float, multi: bool = False) -> Tuple[int, ...]:
    """
    Selection after a click on the tagging view.

    Clicking a box follows the editor's toggle rules; clicking empty space
    clears the selection unless the multi-select modifier is held.
    """
    hit = box_at_point(boxes, x, y)
    if hit is None:
        return tuple(selection) if multi else ()
    return toggle_selection(selection, hit.id, multi)
