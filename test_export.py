"""Tests for the normalized CSV exporter."""

import pytest

from texttag.errors import ExportError
from texttag.export import (CSV_HEADER, encode_csv, export_filename,
                            normalize_box, write_csv)
from texttag.region import BoundingBox, BoxClass


def test_full_image_box():
    box = BoundingBox(x=0, y=0, w=100, h=200, id=1, label=BoxClass.PRIMARY_SUBJECT)

    csv = encode_csv([box], 100, 200, filename='page.jpg')

    assert csv.split('\n') == [
        CSV_HEADER,
        'page.jpg,Man,0.500000,0.500000,1.000000,1.000000',
    ]


def test_values_are_clamped():
    over = BoundingBox(x=90, y=0, w=40, h=10, id=1)
    under = BoundingBox(x=-20, y=-20, w=10, h=10, id=2)
    huge = BoundingBox(x=-50, y=-50, w=300, h=300, id=3)

    assert normalize_box(over, 100, 100) == (1.0, pytest.approx(0.05), pytest.approx(0.4),
                                             pytest.approx(0.1))
    assert normalize_box(under, 100, 100)[:2] == (0.0, 0.0)
    assert normalize_box(huge, 100, 100) == (1.0, 1.0, 1.0, 1.0)

    line = encode_csv([over], 100, 100).split('\n')[1]
    assert line == 'image.jpg,,1.000000,0.050000,0.400000,0.100000'


def test_untagged_box_has_empty_class():
    box = BoundingBox(x=10, y=10, w=20, h=20, id=1)

    line = encode_csv([box], 100, 100, filename='a.png').split('\n')[1]

    assert line.startswith('a.png,,')


def test_records_follow_reading_order():
    boxes = [BoundingBox(x=200, y=0, w=50, h=30, id=1, label=BoxClass.FRAME_REGION),
             BoundingBox(x=0, y=100, w=50, h=30, id=2, label=BoxClass.SECONDARY_MARK),
             BoundingBox(x=0, y=0, w=50, h=30, id=3, label=BoxClass.PRIMARY_SUBJECT)]

    lines = encode_csv(boxes, 400, 400).split('\n')

    assert lines[0] == CSV_HEADER
    assert [line.split(',')[1] for line in lines[1:]] == ['Man', 'Chi', 'Frame']
    assert not encode_csv(boxes, 400, 400).endswith('\n')


def test_excluded_boxes_are_left_out():
    boxes = [BoundingBox(x=0, y=0, w=50, h=30, id=1),
             BoundingBox(x=0, y=100, w=50, h=30, id=2)]

    lines = encode_csv(boxes, 400, 400, excluded_ids={1}).split('\n')

    assert len(lines) == 2
    assert lines[1].split(',')[3] == f"{115 / 400:.6f}"


def test_nothing_to_export_is_an_error():
    box = BoundingBox(x=0, y=0, w=50, h=30, id=1)

    with pytest.raises(ExportError):
        encode_csv([], 100, 100)
    with pytest.raises(ExportError):
        encode_csv([box], 100, 100, excluded_ids=[1])


def test_missing_dimensions_is_an_error():
    box = BoundingBox(x=0, y=0, w=50, h=30, id=1)

    with pytest.raises(ExportError):
        encode_csv([box], None, 100)
    with pytest.raises(ExportError):
        encode_csv([box], 100, 0)


def test_export_filename():
    assert export_filename('scan.page.jpg') == 'scan.page.csv'
    assert export_filename('/tmp/in/page1.png') == 'page1.csv'
    assert export_filename('noext') == 'yolo_coordinates.csv'
    assert export_filename('') == 'yolo_coordinates.csv'


def test_write_csv(tmp_path):
    box = BoundingBox(x=0, y=0, w=100, h=200, id=1)
    content = encode_csv([box], 100, 200)
    path = tmp_path / 'out' / 'page.csv'

    write_csv(str(path), content)

    assert path.read_text(encoding='utf-8') == content


def test_separators_in_filename_do_not_shift_columns():
    box = BoundingBox(x=0, y=0, w=100, h=200, id=1, label=BoxClass.PRIMARY_SUBJECT)

    line = encode_csv([box], 100, 200, filename='scan,page\n1.jpg').split('\n')[1]

    assert line == 'scanpage1.jpg,Man,0.500000,0.500000,1.000000,1.000000'
    assert encode_csv([box], 100, 200, filename=',').split('\n')[1].startswith('image.jpg,')
