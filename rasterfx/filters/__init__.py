# rasterfx software filters
"""
Pure numpy/scipy pixel filters used by the software backend.

Every filter takes a uint8 array shaped (H, W, 3) or (H, W, 4) and returns a
new uint8 array; the input is never modified.
"""

from .kernels import (
    Kernel,
    SHARPEN,
    UNSHARP,
    EDGE,
    SMOOTH,
    IDENTITY,
    NAMED_KERNELS,
    sharpen_kernel,
    convolve,
)

from .blur import (
    BLUR_TYPES,
    box_blur,
    gaussian_blur,
    motion_blur,
    radial_blur,
    surface_blur,
)

from .tone import (
    TONE_OPERATORS,
    reinhard,
    filmic,
    aces,
    uncharted2,
    tone_map,
    brightness,
    contrast,
    scale_contrast,
    gamma,
    exposure,
    shadows_highlights,
    auto_levels,
    auto_contrast,
    histogram,
)

from .color import (
    FILM_PROFILES,
    TONING_COLORS,
    channel_mix,
    film_grayscale,
    saturation,
    vibrance,
    hue_rotate,
    auto_white_balance,
    sepia,
    apply_toning,
)

from .repair import (
    median_filter,
    scratch_mask,
    is_likely_scratch,
    count_defects,
    inpaint_scratches,
    edge_preserving_filter,
    preserve_details,
)

from .texture import (
    shape_rng,
    blend,
    film_vignette,
    soft_vignette,
    film_grain,
    mono_grain,
    light_leak,
    scratch_overlay,
    glow,
    add_border,
    styled_border,
    background_texture,
)

from .stylize import ArtisticParams, RENDERERS, render

from .geometry import (
    ResizePlan,
    plan_resize,
    resize,
    render_resize,
    estimate_angle,
    estimate_keystone,
    perspective_correct,
    grid_overlay,
)

__all__ = [
    # Kernels
    'Kernel', 'SHARPEN', 'UNSHARP', 'EDGE', 'SMOOTH', 'IDENTITY', 'NAMED_KERNELS',
    'sharpen_kernel', 'convolve',
    # Blur
    'BLUR_TYPES', 'box_blur', 'gaussian_blur', 'motion_blur', 'radial_blur', 'surface_blur',
    # Tone
    'TONE_OPERATORS', 'reinhard', 'filmic', 'aces', 'uncharted2', 'tone_map',
    'brightness', 'contrast', 'scale_contrast', 'gamma', 'exposure',
    'shadows_highlights', 'auto_levels', 'auto_contrast', 'histogram',
    # Color
    'FILM_PROFILES', 'TONING_COLORS', 'channel_mix', 'film_grayscale', 'saturation',
    'vibrance', 'hue_rotate', 'auto_white_balance', 'sepia', 'apply_toning',
    # Repair
    'median_filter', 'scratch_mask', 'is_likely_scratch', 'count_defects',
    'inpaint_scratches', 'edge_preserving_filter', 'preserve_details',
    # Texture
    'shape_rng', 'blend', 'film_vignette', 'soft_vignette', 'film_grain', 'mono_grain',
    'light_leak', 'scratch_overlay', 'glow', 'add_border', 'styled_border',
    'background_texture',
    # Stylize
    'ArtisticParams', 'RENDERERS', 'render',
    # Geometry
    'ResizePlan', 'plan_resize', 'resize', 'render_resize', 'estimate_angle',
    'estimate_keystone', 'perspective_correct', 'grid_overlay',
]
