"""Tests for the BoundingBox and Component dataclasses."""

import pytest

from texttag.region import DEFAULT_CLASS, BoundingBox, BoxClass, Component


def test_box_properties():
    """Derived edges, center and aspect ratio."""
    box = BoundingBox(x=10, y=20, w=100, h=50)

    assert box.x2 == 110
    assert box.y2 == 70
    assert box.center == (60.0, 45.0)
    assert box.aspect_ratio == pytest.approx(0.5)
    assert box.is_valid
    assert not BoundingBox(x=0, y=0, w=0, h=10).is_valid
    assert BoundingBox(x=0, y=0, w=0, h=10).aspect_ratio == float('inf')


def test_contains_point_is_edge_inclusive():
    box = BoundingBox(x=10, y=10, w=20, h=20)

    assert box.contains_point(10, 10)
    assert box.contains_point(30, 30)
    assert box.contains_point(20, 15)
    assert not box.contains_point(31, 20)
    assert not box.contains_point(20, 9)


def test_overlap_with_tolerance_expands_each_side_independently():
    """Only the side facing `other` matters, and touching is not overlap."""
    primary = BoundingBox(x=100, y=100, w=50, h=20)
    right_mark = BoundingBox(x=155, y=105, w=5, h=5)
    above_mark = BoundingBox(x=110, y=92, w=5, h=5)

    assert not primary.overlaps_with_tolerance(right_mark)
    assert primary.overlaps_with_tolerance(right_mark, right=6)
    # Left tolerance does not reach a mark on the right
    assert not primary.overlaps_with_tolerance(right_mark, left=20)
    # Mark ends at y=97: needs upper tolerance above 3
    assert not primary.overlaps_with_tolerance(above_mark, upper=3)
    assert primary.overlaps_with_tolerance(above_mark, upper=4)
    assert not primary.overlaps_with_tolerance(above_mark, lower=20)


def test_touching_boxes_do_not_overlap():
    a = BoundingBox(x=0, y=0, w=10, h=10)
    b = BoundingBox(x=10, y=0, w=10, h=10)

    assert not a.overlaps_with_tolerance(b)
    assert a.overlaps_with_tolerance(b, right=1)


def test_union_covers_all_boxes():
    boxes = [BoundingBox(x=10, y=10, w=50, h=20),
             BoundingBox(x=60, y=5, w=5, h=5),
             BoundingBox(x=30, y=25, w=10, h=10)]

    assert BoundingBox.union(boxes) == (10, 5, 55, 30)


def test_union_of_nothing_raises():
    with pytest.raises(ValueError):
        BoundingBox.union([])


def test_padded_grows_all_sides_and_keeps_identity():
    box = BoundingBox(x=5, y=5, w=10, h=20, area=150, id=7, label=DEFAULT_CLASS)
    padded = box.padded(8)

    assert (padded.x, padded.y, padded.w, padded.h) == (-3, -3, 26, 36)
    assert padded.id == 7
    assert padded.area == 150
    assert padded.label == DEFAULT_CLASS
    # Original untouched
    assert (box.x, box.y, box.w, box.h) == (5, 5, 10, 20)


def test_component_to_box():
    comp = Component(left=3, top=4, width=5, height=6, area=21, index=9)
    box = comp.to_box()

    assert (box.x, box.y, box.w, box.h) == (3, 4, 5, 6)
    assert box.area == 21
    assert box.id == 9
    assert box.label is None


def test_dict_conversion():
    box = BoundingBox(x=1, y=2, w=3, h=4, area=12, id=5, label=BoxClass.FRAME_REGION)
    data = box.to_dict()

    assert data['label'] == 'Frame'
    assert BoundingBox.from_dict(data) == box
    assert BoundingBox.from_dict({**data, 'label': None}).label is None


def test_class_vocabulary():
    assert [c.value for c in BoxClass] == ['Man', 'Chi', 'Frame']
    assert DEFAULT_CLASS is BoxClass.PRIMARY_SUBJECT
