"""
rasterfx - Photo effect processing with a native/software/passthrough backend chain
"""

__version__ = "0.1.0"

from .exceptions import (
    RasterFxError,
    InvalidInput,
    InvalidParameters,
    BackendFailure,
    UnsupportedOperation,
    UnreadableImage,
    ProcessingFailure,
    Busy,
)
from .pixel_buffer import PixelBuffer
from .probe import probe, sniff_format
from .codec import decode, encode
from .effects import EffectOptions, EffectRequest, FAMILIES, validate_request, run_pipeline
from .selector import BackendSelector, default_backends
from .worker_pool import WorkerPool

__all__ = [
    "__version__",
    # Errors
    "RasterFxError",
    "InvalidInput",
    "InvalidParameters",
    "BackendFailure",
    "UnsupportedOperation",
    "UnreadableImage",
    "ProcessingFailure",
    "Busy",
    # Buffers and codecs
    "PixelBuffer",
    "probe",
    "sniff_format",
    "decode",
    "encode",
    # Effects
    "EffectOptions",
    "EffectRequest",
    "FAMILIES",
    "validate_request",
    "run_pipeline",
    # Processing
    "BackendSelector",
    "default_backends",
    "WorkerPool",
]
