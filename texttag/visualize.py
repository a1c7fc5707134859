"""
Debug renderings: box overlays and component-area histograms.
"""

from typing import Sequence

import cv2
import matplotlib.pyplot as plt
import numpy as np

from texttag.region import BoundingBox, BoxClass, Component
from texttag.settings import DetectionSettings

# BGR colors per class
CLASS_COLORS = {
    BoxClass.PRIMARY_SUBJECT: (255, 0, 0),    # Blue
    BoxClass.SECONDARY_MARK: (0, 160, 0),     # Green
    BoxClass.FRAME_REGION: (0, 165, 255),     # Orange
    None: (0, 0, 255),                        # Red = untagged
}


def draw_overlay(image: np.ndarray, boxes: Sequence[BoundingBox]) -> np.ndarray:
    """
    Draw boxes on a copy of the image, colored by class.

    Args:
        image: Page image (grayscale or BGR)
        boxes: Boxes in image pixel coordinates

    Returns:
        BGR overlay image
    """
    out = image.copy()
    if out.ndim == 2:
        out = cv2.cvtColor(out, cv2.COLOR_GRAY2BGR)

    h, w = out.shape[:2]
    for box in boxes:
        color = CLASS_COLORS.get(box.label, CLASS_COLORS[None])
        # Padding can push boxes past the border
        x0 = int(max(0, min(w - 1, box.x)))
        y0 = int(max(0, min(h - 1, box.y)))
        x1 = int(max(0, min(w - 1, box.x2)))
        y1 = int(max(0, min(h - 1, box.y2)))
        cv2.rectangle(out, (x0, y0), (x1, y1), color, 2)

        if box.label:
            cv2.putText(out, box.label.value, (x0, max(12, y0 - 5)),
                        cv2.FONT_HERSHEY_SIMPLEX, 0.6, color, 2, cv2.LINE_AA)

    return out


def plot_area_histogram(components: Sequence[Component],
                        settings: DetectionSettings,
                        output_path: str) -> None:
    """
    Plot the component area distribution against the detection bounds.

    Useful when tuning area thresholds for a new scan source.
    """
    areas = np.array([c.area for c in components if c.area > 0])

    plt.figure(figsize=(10, 6))

    if areas.size:
        bins = np.logspace(0, np.log10(areas.max() + 1), 60)
        plt.hist(areas, bins=bins, color='steelblue', alpha=0.8,
                 label=f'Components (n={areas.size})')

    plt.axvline(settings.overlap_area_lower_bound, color='orange', linestyle='--',
                linewidth=2, label='Diacritic lower bound')
    plt.axvline(settings.area_lower_bound, color='green', linestyle='--',
                linewidth=2, label='Primary lower bound')
    plt.axvline(settings.area_upper_bound, color='red', linestyle='--',
                linewidth=2, label='Primary upper bound')

    plt.xscale('log')
    plt.xlabel('Component area (pixels)', fontsize=12)
    plt.ylabel('Count', fontsize=12)
    plt.title('Connected Component Areas', fontsize=14)
    plt.grid(True, alpha=0.3)
    plt.legend(fontsize=11)

    plt.tight_layout()
    plt.savefig(output_path, dpi=150)
    plt.close()
    print(f"Saved area histogram to {output_path}")
