"""
Primary filtering and diacritic merging of connected components.
"""

from typing import List, Sequence, Set

from texttag.region import DEFAULT_CLASS, BoundingBox, Component
from texttag.settings import DetectionSettings


def _within_aspect(width: float, height: float, bound: float) -> bool:
    """Both h/w and w/h must stay under `bound`."""
    if width <= 0 or height <= 0:
        return False
    ratio = height / width
    return ratio < bound and (1 / ratio) < bound


def is_primary(component: Component, settings: DetectionSettings) -> bool:
    """
    Decide whether a component is large and compact enough to be a glyph.

    Args:
        component: Raw component statistics
        settings: Detection thresholds

    Returns:
        True if the component is a primary candidate
    """
    return (settings.area_lower_bound < component.area < settings.area_upper_bound and
            _within_aspect(component.width, component.height,
                           settings.aspect_ratio_bound))


def is_diacritic(component: Component, settings: DetectionSettings) -> bool:
    """
    Decide whether a component is a small mark that can join a primary.

    Diacritics are smaller than any primary but above the noise floor.
    """
    return (settings.overlap_area_lower_bound < component.area < settings.area_lower_bound and
            _within_aspect(component.width, component.height,
                           settings.overlap_aspect_ratio_bound))


def find_diacritics(primary: Component,
                    components: Sequence[Component],
                    settings: DetectionSettings,
                    visited: Set[int] = frozenset()) -> List[Component]:
    """
    Collect the unclaimed diacritics that touch a primary's padded box.

    Args:
        primary: The primary component
        components: All raw components
        settings: Detection thresholds and tolerances
        visited: Component indices already consumed

    Returns:
        Diacritic components in input order
    """
    primary_box = primary.to_box()
    found = []

    for other in components:
        if other.index == primary.index or other.index in visited:
            continue
        if not is_diacritic(other, settings):
            continue
        if primary_box.overlaps_with_tolerance(
                other.to_box(),
                left=settings.overlap_left_tolerance,
                right=settings.overlap_right_tolerance,
                upper=settings.overlap_upper_tolerance,
                lower=settings.overlap_lower_tolerance):
            found.append(other)

    return found


def detect_text_boxes(components: Sequence[Component],
                      settings: DetectionSettings) -> List[BoundingBox]:
    """
    Turn raw components into padded text-unit boxes.

    Each primary absorbs the diacritics around it; the union extent is
    padded uniformly and tagged with the default class. A diacritic is
    owned by the first primary that claims it. Components that are
    neither primary nor claimed diacritics are dropped.

    Args:
        components: Raw components (background already excluded)
        settings: Detection thresholds

    Returns:
        List of final boxes, one per primary, ids taken from the primary
    """
    print(f"\nText box detection ({len(components)} components)...")

    primaries = [c for c in components if is_primary(c, settings)]
    print(f"  Primary candidates: {len(primaries)}")

    final_boxes = []
    visited: Set[int] = set()
    merged_count = 0

    for primary in primaries:
        if primary.index in visited:
            continue

        diacritics = find_diacritics(primary, components, settings, visited)
        visited.update(d.index for d in diacritics)

        box = primary.to_box()
        if diacritics:
            x, y, w, h = BoundingBox.union([box] + [d.to_box() for d in diacritics])
            box = BoundingBox(x=x, y=y, w=w, h=h, area=0, id=primary.index)
            merged_count += len(diacritics)

        box = box.padded(settings.crop_padding_width).with_label(DEFAULT_CLASS)
        final_boxes.append(box)
        visited.add(primary.index)

    print(f"  Merged diacritics: {merged_count}")
    print(f"  Final: {len(final_boxes)} boxes")

    return final_boxes
