"""
Preprocessing utilities for text-box detection.
Handles image loading, page normalization, cropping, binarization,
denoising and connected-component extraction.
"""

from typing import List, Optional, Tuple

import cv2
import numpy as np

from texttag.errors import InputError, ProcessingError
from texttag.region import Component

PAGE_ASPECT = 2.0 / 3.0
PAGE_WIDTH = 2000


def load_image(image_path: str) -> np.ndarray:
    """
    Load an image from file.

    Args:
        image_path: Path to the image file

    Returns:
        Image as numpy array (BGR format)

    Raises:
        InputError: If image cannot be loaded
    """
    image = cv2.imread(image_path)

    if image is None:
        raise InputError(f"Failed to load image from {image_path}")

    return image


def to_grayscale(image: np.ndarray) -> np.ndarray:
    """
    Convert image to grayscale.

    Args:
        image: Input image (BGR, BGRA or already grayscale)

    Returns:
        Grayscale image
    """
    if image.ndim == 2:
        return image

    try:
        if image.shape[2] == 3:
            return cv2.cvtColor(image, cv2.COLOR_BGR2GRAY)
        elif image.shape[2] == 4:
            return cv2.cvtColor(image, cv2.COLOR_BGRA2GRAY)
    except cv2.error as e:
        raise ProcessingError(f"Grayscale conversion failed: {e}") from e

    raise ProcessingError(f"Unexpected number of channels: {image.shape[2]}")


def normalize_page(image: np.ndarray,
                   aspect: float = PAGE_ASPECT,
                   target_width: int = PAGE_WIDTH) -> np.ndarray:
    """
    Pad a page with white to a fixed aspect ratio, then resize it.

    Args:
        image: Input page image
        aspect: Target width / height ratio (default 2:3)
        target_width: Output width in pixels

    Returns:
        Padded and resized image
    """
    h, w = image.shape[:2]
    if h == 0 or w == 0:
        raise InputError("Cannot normalize an empty image")

    top = bottom = left = right = 0
    if w / h > aspect:
        # Too wide: grow height
        target_height = round(w / aspect)
        top = (target_height - h) // 2
        bottom = target_height - h - top
    else:
        # Too tall: grow width
        padded_width = round(h * aspect)
        left = (padded_width - w) // 2
        right = padded_width - w - left

    if top > 0 or bottom > 0 or left > 0 or right > 0:
        white = (255,) * (1 if image.ndim == 2 else image.shape[2])
        image = cv2.copyMakeBorder(image, top, bottom, left, right,
                                   cv2.BORDER_CONSTANT, value=white)

    h, w = image.shape[:2]
    size = (target_width, round(h * target_width / w))
    return cv2.resize(image, size, interpolation=cv2.INTER_AREA)


def crop_image(image: np.ndarray,
               rect: Optional[Tuple[int, int, int, int]]) -> Optional[np.ndarray]:
    """
    Crop to an (x, y, w, h) rectangle clamped to the image bounds.

    A missing or zero-sized rectangle means "use the whole image".

    Returns:
        Cropped copy, or None if the clamped rectangle is degenerate
    """
    if rect is None or not rect[2] or not rect[3]:
        return image.copy()

    x, y, w, h = (int(round(v)) for v in rect)
    img_h, img_w = image.shape[:2]

    x = max(0, x)
    y = max(0, y)
    if x + w > img_w:
        w = img_w - x
    if y + h > img_h:
        h = img_h - y

    if w <= 0 or h <= 0:
        return None

    return image[y:y + h, x:x + w].copy()


def binarize(gray_image: np.ndarray, block_size: int, constant: float) -> np.ndarray:
    """
    Gaussian adaptive thresholding (ink black, background white).

    Args:
        gray_image: Grayscale image
        block_size: Neighbourhood size; even values are bumped to odd
        constant: Value subtracted from the weighted mean

    Returns:
        Binary image (0 or 255)
    """
    block_size = max(3, block_size + 1 if block_size % 2 == 0 else block_size)
    try:
        return cv2.adaptiveThreshold(gray_image, 255,
                                     cv2.ADAPTIVE_THRESH_GAUSSIAN_C,
                                     cv2.THRESH_BINARY,
                                     block_size, constant)
    except cv2.error as e:
        raise ProcessingError(f"Adaptive threshold failed: {e}") from e


def morphology_open_close(binary: np.ndarray, open_width: int,
                          close_width: int) -> np.ndarray:
    """Open then close with square all-ones kernels to remove speckle."""
    open_kernel = np.ones((open_width, open_width), np.uint8)
    close_kernel = np.ones((close_width, close_width), np.uint8)
    try:
        opened = cv2.morphologyEx(binary, cv2.MORPH_OPEN, open_kernel)
        return cv2.morphologyEx(opened, cv2.MORPH_CLOSE, close_kernel)
    except cv2.error as e:
        raise ProcessingError(f"Morphological denoising failed: {e}") from e


def dilate(image: np.ndarray, width: int) -> np.ndarray:
    kernel = np.ones((width, width), np.uint8)
    try:
        return cv2.morphologyEx(image, cv2.MORPH_DILATE, kernel)
    except cv2.error as e:
        raise ProcessingError(f"Dilation failed: {e}") from e


def prepare_for_detection(denoised: np.ndarray, dilate_width: int) -> np.ndarray:
    """
    Invert a denoised page so ink is foreground, then dilate it.

    Args:
        denoised: Binary page (black ink on white)
        dilate_width: Dilation kernel width

    Returns:
        Foreground mask ready for component labeling
    """
    gray = to_grayscale(denoised)
    return dilate(cv2.bitwise_not(gray), dilate_width)


def connected_components(mask: np.ndarray, connectivity: int = 8) -> List[Component]:
    """
    Label connected foreground regions.

    Args:
        mask: Foreground mask (non-zero = ink)
        connectivity: 4 or 8

    Returns:
        One Component per label, background (label 0) excluded
    """
    try:
        num_labels, _, stats, _ = cv2.connectedComponentsWithStats(
            mask, connectivity=connectivity, ltype=cv2.CV_32S)
    except cv2.error as e:
        raise ProcessingError(f"Connected component labeling failed: {e}") from e

    components = []
    for i in range(1, num_labels):
        components.append(Component(
            left=int(stats[i, cv2.CC_STAT_LEFT]),
            top=int(stats[i, cv2.CC_STAT_TOP]),
            width=int(stats[i, cv2.CC_STAT_WIDTH]),
            height=int(stats[i, cv2.CC_STAT_HEIGHT]),
            area=int(stats[i, cv2.CC_STAT_AREA]),
            index=i,
        ))

    return components


def preprocess_image(image: np.ndarray, block_size: int, constant: float,
                     open_width: int, close_width: int) -> np.ndarray:
    """
    Complete preprocessing: grayscale, binarize, denoise.

    Args:
        image: Cropped page image
        block_size, constant: Adaptive threshold parameters
        open_width, close_width: Denoising kernel widths

    Returns:
        Denoised binary image
    """
    if image is None or image.size == 0:
        raise InputError("No image to preprocess")

    gray = to_grayscale(image)
    binary = binarize(gray, block_size, constant)
    return morphology_open_close(binary, open_width, close_width)
