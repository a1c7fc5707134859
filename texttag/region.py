"""
BoundingBox dataclass for text-unit tagging.
Represents a rectangular text unit with class tag and spatial information.
"""

from dataclasses import dataclass, replace
from enum import Enum
from typing import Iterable, Optional, Tuple


class BoxClass(str, Enum):
    """Closed set of class tags used for detection training."""

    PRIMARY_SUBJECT = "Man"
    SECONDARY_MARK = "Chi"
    FRAME_REGION = "Frame"


DEFAULT_CLASS = BoxClass.PRIMARY_SUBJECT


@dataclass(frozen=True)
class Component:
    """Raw connected-component statistics (one row of CC stats)."""

    left: int
    top: int
    width: int
    height: int
    area: int
    index: int

    def to_box(self) -> 'BoundingBox':
        return BoundingBox(x=self.left, y=self.top, w=self.width,
                           h=self.height, area=self.area, id=self.index)


@dataclass(frozen=True)
class BoundingBox:
    """Represents a rectangular box in source-image pixel space."""

    x: float  # Top-left x coordinate (may be negative after padding)
    y: float  # Top-left y coordinate
    w: float  # Width
    h: float  # Height
    area: int = 0  # Component pixel count, 0 for merged boxes
    id: int = 0
    label: Optional[BoxClass] = None

    @property
    def x2(self) -> float:
        """Right edge x coordinate."""
        return self.x + self.w

    @property
    def y2(self) -> float:
        """Bottom edge y coordinate."""
        return self.y + self.h

    @property
    def center(self) -> Tuple[float, float]:
        """Center point (cx, cy)."""
        return (self.x + self.w / 2, self.y + self.h / 2)

    @property
    def aspect_ratio(self) -> float:
        """Height to width ratio. Returns inf if width is 0."""
        return self.h / self.w if self.w > 0 else float('inf')

    @property
    def is_valid(self) -> bool:
        return self.w > 0 and self.h > 0

    def contains_point(self, px: float, py: float) -> bool:
        """Check if a point is inside the box (edges inclusive)."""
        return self.x <= px <= self.x2 and self.y <= py <= self.y2

    def overlaps_with_tolerance(self, other: 'BoundingBox',
                                left: float = 0, right: float = 0,
                                upper: float = 0, lower: float = 0) -> bool:
        """
        Check if `other` intersects this box after expanding this box.

        Each side of this box is pushed out by its own tolerance; `other`
        keeps its raw extent. Touching edges do not count as overlap.

        Args:
            other: Box to test against
            left, right, upper, lower: Per-side expansion in pixels

        Returns:
            True if the expanded box and `other` overlap
        """
        return (self.x - left < other.x2 and
                other.x < self.x2 + right and
                self.y - upper < other.y2 and
                other.y < self.y2 + lower)

    def padded(self, padding: float) -> 'BoundingBox':
        """Grow the box by `padding` on all four sides."""
        return replace(self,
                       x=self.x - padding,
                       y=self.y - padding,
                       w=self.w + 2 * padding,
                       h=self.h + 2 * padding)

    def moved_to(self, x: float, y: float) -> 'BoundingBox':
        return replace(self, x=x, y=y)

    def with_extent(self, x: float, y: float, w: float, h: float) -> 'BoundingBox':
        return replace(self, x=x, y=y, w=w, h=h)

    def with_label(self, label: Optional[BoxClass]) -> 'BoundingBox':
        return replace(self, label=label)

    @staticmethod
    def union(boxes: Iterable['BoundingBox']) -> Tuple[float, float, float, float]:
        """
        Minimal axis-aligned extent covering all boxes.

        Args:
            boxes: Boxes to cover

        Returns:
            (x, y, w, h) of the covering rectangle
        """
        boxes = list(boxes)
        if not boxes:
            raise ValueError("Cannot take union of empty list of boxes")

        x_min = min(b.x for b in boxes)
        y_min = min(b.y for b in boxes)
        x_max = max(b.x2 for b in boxes)
        y_max = max(b.y2 for b in boxes)

        return (x_min, y_min, x_max - x_min, y_max - y_min)

    def to_dict(self) -> dict:
        """Convert box to dictionary."""
        return {
            'x': self.x,
            'y': self.y,
            'w': self.w,
            'h': self.h,
            'area': self.area,
            'id': self.id,
            'label': self.label.value if self.label else None
        }

    @classmethod
    def from_dict(cls, data: dict) -> 'BoundingBox':
        label = data.get('label')
        return cls(
            x=data['x'],
            y=data['y'],
            w=data['w'],
            h=data['h'],
            area=int(data.get('area', 0)),
            id=int(data['id']),
            label=BoxClass(label) if label else None
        )

    def __repr__(self) -> str:
        label = self.label.value if self.label else None
        return (f"BoundingBox(id={self.id}, x={self.x}, y={self.y}, "
                f"w={self.w}, h={self.h}, label={label!r})")
