"""Software backend: decode, run the numpy effect pipeline, encode."""

from __future__ import annotations

import logging
from typing import Optional

import numpy as np

from ..codec import decode, encode
from ..effects.metrics import derive_metrics
from ..effects.options import EffectOptions
from ..effects.pipeline import run_pipeline
from .base import Backend, ProcessingOutcome

logger = logging.getLogger(__name__)


class SoftwareBackend(Backend):
    """Runs every family with the filters in :mod:`rasterfx.filters`.

    Args:
        rng: Optional generator for the grain stage, e.g. a seeded one in
            tests. A fresh unseeded generator is used per request otherwise.
    """

    name = "software"

    def __init__(self, rng: Optional[np.random.Generator] = None):
        self._rng = rng

    def attempt(
        self,
        data: bytes,
        request: EffectOptions,
        size: Optional[tuple[int, int]] = None,
    ) -> ProcessingOutcome:
        buffer = decode(data)
        if size is None:
            size = buffer.dimensions
        result = run_pipeline(buffer, request, self._rng)
        encoded = encode(result.buffer, request.output_format, request.quality)
        return ProcessingOutcome(
            encoded_bytes=encoded,
            dimensions=result.buffer.dimensions,
            derived_metrics=derive_metrics(request, size),
            details=result.details,
            buffer=result.buffer,
        )
