"""
Main pipeline for text-box detection.
Integrates all steps: crop, preprocessing, component labeling and merging.
"""

from dataclasses import dataclass, field
from typing import Any, Callable, List, Optional, Tuple

import numpy as np

from texttag.errors import InputError, TextTagError
from texttag.merge import detect_text_boxes
from texttag.preprocessing import (connected_components, crop_image, load_image,
                                   normalize_page, prepare_for_detection,
                                   preprocess_image)
from texttag.region import BoundingBox, Component
from texttag.settings import DEFAULT_SETTINGS, Settings


@dataclass(frozen=True)
class StageResult:
    """Outcome of one pipeline stage: a value, or the error that stopped it."""

    ok: bool
    value: Any = None
    error: Optional[TextTagError] = None


@dataclass
class PipelineResult:
    ok: bool
    cropped: Optional[np.ndarray] = None
    preprocessed: Optional[np.ndarray] = None
    components: List[Component] = field(default_factory=list)
    boxes: List[BoundingBox] = field(default_factory=list)
    error: Optional[TextTagError] = None

    @property
    def image_size(self) -> Optional[Tuple[int, int]]:
        """(width, height) of the image the boxes refer to."""
        if self.preprocessed is None:
            return None
        h, w = self.preprocessed.shape[:2]
        return (w, h)


def run_stage(name: str, fn: Callable, *args) -> StageResult:
    """Run a stage, turning pipeline errors into a failed StageResult."""
    try:
        value = fn(*args)
    except TextTagError as e:
        print(f"  ✗ {name} failed: {e}")
        return StageResult(ok=False, error=e)

    if value is None:
        error = InputError(f"{name} produced no output")
        print(f"  ✗ {error}")
        return StageResult(ok=False, error=error)

    return StageResult(ok=True, value=value)


def _crop(image: np.ndarray, crop: Optional[Tuple[int, int, int, int]]):
    if image is None or image.size == 0:
        raise InputError("Missing source image")
    cropped = crop_image(image, crop)
    if cropped is None:
        raise InputError(f"Invalid crop rectangle: {crop}")
    return cropped


def _preprocess(image: np.ndarray, settings: Settings) -> np.ndarray:
    p = settings.preprocess
    return preprocess_image(image, p.odd_block_size, p.adaptive_c,
                            p.denoise_open_kernel_width,
                            p.denoise_close_kernel_width)


def _detect(preprocessed: np.ndarray,
            settings: Settings) -> Tuple[List[Component], List[BoundingBox]]:
    mask = prepare_for_detection(preprocessed, settings.detection.detect_dilate_kernel_width)
    components = connected_components(mask, connectivity=8)
    print(f"  Found {len(components)} initial components")
    return components, detect_text_boxes(components, settings.detection)


def detect_document(image: np.ndarray,
                    settings: Settings = DEFAULT_SETTINGS,
                    crop: Optional[Tuple[int, int, int, int]] = None) -> PipelineResult:
    """
    Complete text-box detection pipeline.

    Stages run strictly in order (crop, preprocess, detect); the first
    failure stops the run and no boxes are returned.

    Args:
        image: Source page image
        settings: Settings snapshot used for the whole run
        crop: Optional (x, y, w, h) crop rectangle in image pixels

    Returns:
        PipelineResult with intermediate images and final boxes
    """
    print("=" * 60)
    print("TEXT BOX DETECTION PIPELINE")
    print("=" * 60)

    # Step 1: Crop
    print("\n[Step 1/3] Cropping...")
    cropped = run_stage("Crop", _crop, image, crop)
    if not cropped.ok:
        return PipelineResult(ok=False, error=cropped.error)
    h, w = cropped.value.shape[:2]
    print(f"  Cropped size: {w} x {h}")

    # Step 2: Preprocessing
    print("\n[Step 2/3] Preprocessing...")
    preprocessed = run_stage("Preprocessing", _preprocess, cropped.value, settings)
    if not preprocessed.ok:
        return PipelineResult(ok=False, error=preprocessed.error)

    # Step 3: Detection
    print("\n[Step 3/3] Text detection...")
    detected = run_stage("Text detection", _detect, preprocessed.value, settings)
    if not detected.ok:
        return PipelineResult(ok=False, error=detected.error)
    components, boxes = detected.value

    print("\n" + "=" * 60)
    print("DETECTION COMPLETE")
    print("=" * 60)
    print(f"  Total boxes: {len(boxes)}")

    return PipelineResult(ok=True, cropped=cropped.value,
                          preprocessed=preprocessed.value,
                          components=components, boxes=boxes)


def run_file(image_path: str,
             settings: Settings = DEFAULT_SETTINGS,
             crop: Optional[Tuple[int, int, int, int]] = None,
             normalize: bool = True) -> PipelineResult:
    """
    Load a page from disk and run the pipeline on it.

    Args:
        image_path: Path to the page image
        settings: Settings snapshot
        crop: Optional crop rectangle, in normalized-page pixels
        normalize: Pad to 2:3 and resize to the standard page width first

    Returns:
        PipelineResult (failed if the image cannot be read)
    """
    loaded = run_stage("Load", load_image, image_path)
    if not loaded.ok:
        return PipelineResult(ok=False, error=loaded.error)

    image = loaded.value
    if normalize:
        normalized = run_stage("Normalize", normalize_page, image)
        if not normalized.ok:
            return PipelineResult(ok=False, error=normalized.error)
        image = normalized.value
        print(f"Image normalized: {image.shape[1]} x {image.shape[0]} (W x H)")

    return detect_document(image, settings, crop)
