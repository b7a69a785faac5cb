# rasterfx effect families
"""
Effect option models, per-style tables, pipelines and derived metrics.
"""

from .options import (
    EffectOptions,
    EffectRequest,
    FAMILIES,
    FAMILY_MODELS,
    HdrOptions,
    VintageOptions,
    BlackAndWhiteOptions,
    SharpenBlurOptions,
    ArtisticFilterOptions,
    ColorBalanceOptions,
    BrightnessContrastOptions,
    ScratchRemovalOptions,
    RestoreOptions,
    PerspectiveOptions,
    ResizeOptions,
    parse_request,
    validate_request,
)
from .metrics import derive_metrics
from .pipeline import EffectResult, PIPELINES, run_pipeline

__all__ = [
    'EffectOptions', 'EffectRequest', 'FAMILIES', 'FAMILY_MODELS',
    'HdrOptions', 'VintageOptions', 'BlackAndWhiteOptions', 'SharpenBlurOptions',
    'ArtisticFilterOptions', 'ColorBalanceOptions', 'BrightnessContrastOptions',
    'ScratchRemovalOptions', 'RestoreOptions', 'PerspectiveOptions', 'ResizeOptions',
    'parse_request', 'validate_request',
    'derive_metrics',
    'EffectResult', 'PIPELINES', 'run_pipeline',
]
