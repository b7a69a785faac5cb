"""Backend interface and the outcome record every backend returns."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Optional

from ..effects.options import EffectOptions
from ..pixel_buffer import PixelBuffer


@dataclass
class BackendAttempt:
    """One entry of the degradation path."""

    backend_name: str
    succeeded: bool
    error: Optional[str] = None

    def __str__(self) -> str:
        return f"{self.backend_name}:{'ok' if self.succeeded else 'fail'}"


@dataclass
class ProcessingOutcome:
    """Result of serving one request.

    ``buffer`` is None for the passthrough backend, which never decodes.
    ``dimensions`` is ``(width, height)`` of the encoded output.
    """

    encoded_bytes: bytes
    dimensions: tuple[int, int]
    derived_metrics: dict[str, float] = field(default_factory=dict)
    details: list[str] = field(default_factory=list)
    buffer: Optional[PixelBuffer] = None
    source_dimensions: Optional[tuple[int, int]] = None
    attempts: list[BackendAttempt] = field(default_factory=list)

    @property
    def backend_path(self) -> str:
        """Comma-joined attempts, e.g. ``native:fail,software:ok``."""
        return ",".join(str(a) for a in self.attempts)

    @property
    def served_by(self) -> Optional[str]:
        for attempt in self.attempts:
            if attempt.succeeded:
                return attempt.backend_name
        return None


class Backend(ABC):
    """A processing strategy the selector can try."""

    name: str = "backend"

    @abstractmethod
    def attempt(
        self,
        data: bytes,
        request: EffectOptions,
        size: Optional[tuple[int, int]] = None,
    ) -> ProcessingOutcome:
        """Serve a request or raise.

        Args:
            data: Encoded source image
            request: Validated effect options
            size: Probed (width, height) of the source, if known

        Returns:
            ProcessingOutcome without attempts; the selector fills them in
        """

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.name!r})"
