"""Tests for the column-major reading order sort."""

import random

from texttag.reading_order import group_columns, sort_boxes_by_columns
from texttag.region import BoundingBox


def box(box_id, x, y, w=50, h=30):
    return BoundingBox(x=x, y=y, w=w, h=h, id=box_id)


def ids(boxes):
    return [b.id for b in boxes]


def test_two_columns_left_to_right_top_to_bottom():
    boxes = [box(1, 200, 50), box(2, 0, 100), box(3, 200, 10), box(4, 0, 0)]

    assert ids(sort_boxes_by_columns(boxes)) == [4, 2, 3, 1]


def test_empty_input():
    assert sort_boxes_by_columns([]) == []
    assert group_columns([]) == []


def test_column_threshold_is_half_average_width():
    """Average width 50 gives a threshold of 25 (strict)."""
    same = [box(1, 0, 0), box(2, 20, 50)]        # centers 25 and 45
    split = [box(1, 0, 0), box(2, 30, 50)]       # centers 25 and 55
    edge = [box(1, 0, 0), box(2, 25, 50)]        # centers 25 and 50

    assert len(group_columns(same)) == 1
    assert len(group_columns(split)) == 2
    assert len(group_columns(edge)) == 2


def test_running_average_decides_membership():
    """The third box is measured against the column mean, not its first box."""
    boxes = [box(1, -25, 0), box(2, -5, 40), box(3, 15, 80)]  # centers 0, 20, 40

    columns = group_columns(boxes)

    assert [ids(c) for c in columns] == [[1, 2], [3]]


def test_columns_are_never_merged_afterwards():
    boxes = [box(1, 0, 0), box(2, 40, 10), box(3, 80, 20)]  # centers 25, 65, 105

    assert [ids(c) for c in group_columns(boxes)] == [[1], [2], [3]]


def test_sort_is_idempotent():
    rng = random.Random(3)
    boxes = [box(i, rng.randint(0, 600), rng.randint(0, 800),
                 w=rng.randint(20, 80), h=rng.randint(20, 60)) for i in range(40)]

    once = sort_boxes_by_columns(boxes)
    twice = sort_boxes_by_columns(once)

    assert ids(twice) == ids(once)


def test_equal_center_ties_do_not_change_membership():
    boxes = [box(1, 0, 300), box(2, 0, 100), box(3, 150, 0), box(4, 150, 200),
             box(5, 0, 200)]
    reordered = [boxes[4], boxes[3], boxes[1], boxes[2], boxes[0]]

    def membership(columns):
        return [sorted(ids(c)) for c in columns]

    assert membership(group_columns(boxes)) == membership(group_columns(reordered))
    assert ids(sort_boxes_by_columns(boxes)) == [2, 5, 1, 3, 4]


def test_input_order_is_not_mutated():
    boxes = [box(1, 200, 50), box(2, 0, 100)]
    before = ids(boxes)

    sort_boxes_by_columns(boxes)

    assert ids(boxes) == before
