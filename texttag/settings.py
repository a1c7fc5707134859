"""
Tunable thresholds for preprocessing and text-box detection.

Settings are immutable snapshots: every pipeline run receives one and
changing settings only affects the next run. Snapshots persist as JSON.
"""

import json
import os
from dataclasses import asdict, dataclass, field, fields, replace
from typing import Dict, Tuple


# (min, max) accepted for each user-adjustable value
SETTING_RANGES: Dict[str, Tuple[int, int]] = {
    'adaptive_block_size': (3, 255),
    'adaptive_c': (0, 50),
    'denoise_open_kernel_width': (1, 21),
    'denoise_close_kernel_width': (1, 21),
    'detect_dilate_kernel_width': (1, 21),
    'area_lower_bound': (10, 1000),
    'area_upper_bound': (1000, 30000),
    'aspect_ratio_bound': (1, 20),
    'overlap_area_lower_bound': (1, 200),
    'overlap_aspect_ratio_bound': (1, 20),
    'overlap_upper_tolerance': (0, 20),
    'overlap_lower_tolerance': (0, 20),
    'overlap_left_tolerance': (0, 20),
    'overlap_right_tolerance': (0, 20),
    'crop_padding_width': (0, 20),
}


def clamp_to_range(name: str, value):
    """Clamp a user-supplied value into its documented range."""
    if name not in SETTING_RANGES:
        return value
    lo, hi = SETTING_RANGES[name]
    return max(lo, min(hi, value))


@dataclass(frozen=True)
class PreprocessSettings:
    """Adaptive binarization and morphological denoising parameters."""

    adaptive_block_size: int = 101
    adaptive_c: int = 30
    denoise_open_kernel_width: int = 2
    denoise_close_kernel_width: int = 1

    def __post_init__(self):
        if self.adaptive_block_size < 3:
            raise ValueError("adaptive_block_size must be >= 3")
        if self.denoise_open_kernel_width < 1 or self.denoise_close_kernel_width < 1:
            raise ValueError("denoise kernel widths must be >= 1")

    @property
    def odd_block_size(self) -> int:
        """Block size bumped to the next odd value, as adaptive thresholding needs."""
        size = self.adaptive_block_size
        return size + 1 if size % 2 == 0 else size


@dataclass(frozen=True)
class DetectionSettings:
    """Primary/diacritic filtering, overlap tolerances and final padding."""

    detect_dilate_kernel_width: int = 2
    area_lower_bound: int = 500
    area_upper_bound: int = 15000
    aspect_ratio_bound: float = 5
    overlap_area_lower_bound: int = 100
    overlap_aspect_ratio_bound: float = 10
    overlap_upper_tolerance: int = 3
    overlap_lower_tolerance: int = 3
    overlap_left_tolerance: int = 7
    overlap_right_tolerance: int = 7
    crop_padding_width: int = 8

    def __post_init__(self):
        if self.detect_dilate_kernel_width < 1:
            raise ValueError("detect_dilate_kernel_width must be >= 1")
        if self.area_lower_bound >= self.area_upper_bound:
            raise ValueError("area_lower_bound must be below area_upper_bound")
        if self.aspect_ratio_bound <= 0 or self.overlap_aspect_ratio_bound <= 0:
            raise ValueError("aspect ratio bounds must be positive")
        tolerances = (self.overlap_upper_tolerance, self.overlap_lower_tolerance,
                      self.overlap_left_tolerance, self.overlap_right_tolerance)
        if any(t < 0 for t in tolerances):
            raise ValueError("overlap tolerances must be non-negative")
        if self.crop_padding_width < 0:
            raise ValueError("crop_padding_width must be non-negative")


@dataclass(frozen=True)
class Settings:
    preprocess: PreprocessSettings = field(default_factory=PreprocessSettings)
    detection: DetectionSettings = field(default_factory=DetectionSettings)

    def to_dict(self) -> dict:
        return {'preprocess': asdict(self.preprocess),
                'detection': asdict(self.detection)}

    @classmethod
    def from_dict(cls, data: dict) -> 'Settings':
        """
        Build settings from a (possibly partial) dictionary.

        Unknown keys are ignored, missing keys keep their defaults and
        out-of-range values are clamped.

        Raises:
            ValueError: If the data is malformed, or the clamped values
                break a settings invariant
        """
        if not isinstance(data, dict):
            raise ValueError("settings must be a JSON object")
        return cls(
            preprocess=_section(PreprocessSettings, data.get('preprocess', {})),
            detection=_section(DetectionSettings, data.get('detection', {})),
        )

    def with_preprocess(self, **changes) -> 'Settings':
        return replace(self, preprocess=replace(self.preprocess, **changes))

    def with_detection(self, **changes) -> 'Settings':
        return replace(self, detection=replace(self.detection, **changes))


def _section(cls, values: dict):
    if not isinstance(values, dict):
        raise ValueError(f"{cls.__name__} section must be a JSON object")
    known = {f.name for f in fields(cls)}
    kwargs = {}
    for key, value in values.items():
        if key not in known:
            continue
        # bool is an int subclass but never a valid threshold
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise ValueError(f"{key} must be a number, got {value!r}")
        kwargs[key] = clamp_to_range(key, value)
    return cls(**kwargs)


DEFAULT_SETTINGS = Settings()


def load_settings(path: str) -> Settings:
    """
    Load persisted settings.

    Args:
        path: JSON settings file

    Returns:
        Stored settings, or the defaults if the file does not exist
    """
    if not os.path.exists(path):
        return DEFAULT_SETTINGS

    with open(path, encoding='utf-8') as f:
        data = json.load(f)

    return Settings.from_dict(data)


def save_settings(settings: Settings, path: str) -> None:
    directory = os.path.dirname(path)
    if directory:
        os.makedirs(directory, exist_ok=True)
    with open(path, 'w', encoding='utf-8') as f:
        json.dump(settings.to_dict(), f, indent=2)


def reset_settings(path: str) -> Settings:
    """Forget persisted settings and return the documented defaults."""
    if os.path.exists(path):
        os.remove(path)
    return DEFAULT_SETTINGS
