"""Declarative per-style tables interpreted by the effect pipelines.

Each table maps a style, mode or filter name to plain data: multipliers,
factor formulas, kernel choices and metric bonuses. The pipelines in
:mod:`rasterfx.effects.pipeline` contain one generic composition per family
and read all per-style differences from here.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Optional

# Film stock and toning tables are kept with the color transforms
from ..filters.color import FILM_PROFILES, TONING_COLORS  # noqa: F401


# ============================================================================
# HDR
# ============================================================================

@dataclass(frozen=True)
class HdrStyle:
    """Shadow/highlight multipliers, contrast/saturation formulas and grade.

    ``contrast`` and ``saturation`` map the raw option value (-100..100) to a
    multiplicative factor. ``extra`` names a style-specific grading stage.
    """

    shadow_mult: float
    highlight_mult: float
    contrast: Callable[[float], float]
    saturation: Callable[[float], float]
    extra: Optional[str] = None
    score_bonus: float = 0.0


HDR_STYLES: dict[str, HdrStyle] = {
    "natural": HdrStyle(1.0, 1.0, lambda c: 1 + c / 200, lambda s: 1 + s / 200, None, 0.5),
    "dramatic": HdrStyle(1.5, 0.8, lambda c: 1 + c / 100 + 0.2, lambda s: 1 + s / 100 + 0.3, None, 1.2),
    "cinematic": HdrStyle(1.0, 1.0, lambda c: 1 + c / 150 + 0.1, lambda s: 1 + s / 200, "orange_teal", 0.8),
    "surreal": HdrStyle(2.0, 1.5, lambda c: 1 + c / 100 + 0.3, lambda s: 1 + s / 100 + 0.5, "surreal", 1.5),
    "vivid": HdrStyle(1.2, 1.0, lambda c: 1 + c / 150 + 0.1, lambda s: 1 + s / 100 + 0.4, "vibrance", 1.0),
    "moody": HdrStyle(0.8, 1.2, lambda c: 1 + c / 150 + 0.2, lambda s: 1 + s / 200 - 0.1, "moody", 0.3),
    "landscape": HdrStyle(1.1, 1.1, lambda c: 1 + c / 150 + 0.1, lambda s: 1 + s / 150 + 0.2, "landscape", 0.7),
    "custom": HdrStyle(1.0, 1.0, lambda c: 1 + c / 200, lambda s: 1 + s / 150, "custom", 0.0),
}

TONE_MAPPING_BONUS = {"aces": 0.8, "uncharted2": 0.6, "filmic": 0.4, "reinhard": 0.2}

# (shadow blue, shadow green, highlight red) divisors for (128 - lum) / (lum - 128)
GRADE_DIVISORS = {
    "orange_teal": (4.0, None, 4.0),
    "moody": (3.0, 6.0, 6.0),
}


# ============================================================================
# Vintage
# ============================================================================

@dataclass(frozen=True)
class VintageStep:
    """One operation of a vintage style.

    ``op`` is one of: sepia, gray, saturation, scale, contrast, offset,
    split_scale (lum > 128 uses ``value``, else ``alt``).
    """

    op: str
    value: tuple = ()
    alt: tuple = ()


VINTAGE_STYLES: dict[str, tuple[VintageStep, ...]] = {
    "classic": (VintageStep("sepia", (1.05, 1.0, 0.9)),),
    "sepia": (VintageStep("sepia", (1.1, 1.0, 0.8)),),
    "noir": (
        VintageStep("gray"),
        VintageStep("contrast", (1.5,)),
        VintageStep("scale", (0.95, 0.95, 1.05)),
    ),
    "faded": (
        VintageStep("saturation", (0.6,)),
        VintageStep("scale", (1.05, 1.05, 1.0)),
    ),
    "technicolor": (
        VintageStep("scale", (1.2, 1.1, 1.3)),
        VintageStep("contrast", (1.2,)),
    ),
    "polaroid": (
        VintageStep("saturation", (0.8,)),
        VintageStep("scale", (1.1, 1.05, 0.95)),
        VintageStep("offset", (10, 10, 10)),
    ),
    "cinematic": (
        VintageStep("split_scale", (1.1, 1.05, 0.9), (0.9, 1.05, 1.1)),
        VintageStep("contrast", (1.15,)),
    ),
    "retro": (
        VintageStep("saturation", (1.2,)),
        VintageStep("scale", (1.05, 0.95, 1.1)),
        VintageStep("contrast", (1.1,)),
    ),
    # Built from the request's saturation/brightness/contrast/balance/shift
    "custom": (),
}

# Border fill color and bottom-width multiplier
VINTAGE_BORDERS: dict[str, tuple[tuple[int, int, int], int]] = {
    "white": ((255, 255, 255), 1),
    "black": ((0, 0, 0), 1),
    "film": ((0, 0, 0), 1),
    "polaroid": ((255, 255, 255), 3),
}


# ============================================================================
# Black & white
# ============================================================================

@dataclass(frozen=True)
class BwMode:
    """Weight source and the ordered adjustments applied after mixing.

    ``weights`` is ``default``, ``options`` (normalized request weights) or
    ``film`` (the request's film profile).
    """

    weights: str
    adjustments: tuple[str, ...] = ()


BW_MODES: dict[str, BwMode] = {
    "simple": BwMode("default"),
    "channel-mix": BwMode("options", ("contrast",)),
    "tonal": BwMode("default", ("contrast", "brightness", "tonal")),
    "film": BwMode("film", ("contrast",)),
    "custom": BwMode("options", ("contrast", "brightness", "tonal")),
}

FILM_FALLBACK_WEIGHTS = (0.3, 0.59, 0.11)


# ============================================================================
# Artistic
# ============================================================================

ARTISTIC_FILTERS: dict[str, float] = {
    # filter: score bonus
    "oil": 0.8,
    "watercolor": 0.7,
    "sketch": 0.6,
    "comic": 0.9,
    "pointillism": 0.8,
    "impressionist": 0.7,
}


# ============================================================================
# Scratch removal / Restore
# ============================================================================

@dataclass(frozen=True)
class ScratchMode:
    """Median radius rule and follow-up repair for a detection mode.

    The median radius is ``clamp(round(thickness * scale), lo, hi)``.
    """

    scale: float
    lo: int
    hi: int
    follow_up: str
    score_bonus: float


SCRATCH_MODES: dict[str, ScratchMode] = {
    "aggressive": ScratchMode(1.0, 3, 5, "inpaint", 0.8),
    "conservative": ScratchMode(0.5, 1, 3, "edge_preserve", 0.4),
    "manual": ScratchMode(1.0, 1, 7, "contrast", 0.6),
    "auto": ScratchMode(0.7, 1, 3, "content_aware", 0.7),
}

# Colorize offsets per unit strength
COLORIZE_OFFSETS = (40.0, 20.0, -20.0)


# mode: (stage label, mode score bonus)
RESTORE_MODES: dict[str, tuple[str, float]] = {
    "auto": ("Auto enhancement", 0.2),
    "colorize": ("Colorization", 0.5),
    "enhance": ("Detail enhancement", 0.0),
    "repair": ("Damage repair", 0.0),
}

# Optional stages in application order: (option flag, stage label)
RESTORE_FLAGS: tuple[tuple[str, str], ...] = (
    ("enhance_details", "Detail enhancement"),
    ("repair_damage", "Damage repair"),
    ("remove_noise", "Noise reduction"),
    ("sharpen_image", "Image sharpening"),
    ("enhance_contrast", "Contrast enhancement"),
)

RESTORE_STAGE_SCORES: dict[str, float] = {
    "Colorization": 0.8,
    "Detail enhancement": 0.5,
    "Damage repair": 0.7,
    "Noise reduction": 0.4,
    "Image sharpening": 0.3,
    "Contrast enhancement": 0.3,
    "Auto enhancement": 0.5,
}
