"""Terminal fallback: return the input unchanged."""

from __future__ import annotations

from typing import Optional

from ..effects.metrics import derive_metrics
from ..effects.options import EffectOptions
from ..probe import probe
from .base import Backend, ProcessingOutcome


class PassthroughBackend(Backend):
    """Echo the original bytes so a response is always produced.

    Dimensions come from the prober; metrics are still derived from the
    request.
    """

    name = "passthrough"

    def attempt(
        self,
        data: bytes,
        request: EffectOptions,
        size: Optional[tuple[int, int]] = None,
    ) -> ProcessingOutcome:
        if size is None:
            size = probe(data)
        return ProcessingOutcome(
            encoded_bytes=data,
            dimensions=size,
            derived_metrics=derive_metrics(request, size),
            details=["Original image returned unchanged"],
        )
