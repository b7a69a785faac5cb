"""Ordered backend fallback chain.

:class:`BackendSelector` tries each backend once, in order. A backend that
raises is recorded as a failed :class:`BackendAttempt`, logged as a
degradation event, and the next one is tried. The default chain is
native, software, passthrough, so a response is always produced unless the
request itself is invalid.

Usage:
    from rasterfx.selector import BackendSelector

    selector = BackendSelector()
    outcome = selector.process(data, validate_request("hdr", {}))
    outcome.backend_path  # e.g. "native:fail,software:ok"
"""

from __future__ import annotations

import logging
import time
from typing import Optional, Sequence

from .backends import (
    Backend,
    BackendAttempt,
    NativeBackend,
    PassthroughBackend,
    ProcessingOutcome,
    SoftwareBackend,
)
from .config import settings
from .effects.options import EffectOptions, ResizeOptions
from .exceptions import BackendFailure, InvalidInput, InvalidParameters, UnreadableImage
from .filters.geometry import plan_resize
from .probe import probe, sniff_format

logger = logging.getLogger(__name__)

# Families whose output geometry depends on the source size
SIZE_DEPENDENT = frozenset({"perspective", "resize"})


def default_backends(enable_native: Optional[bool] = None) -> list[Backend]:
    """The standard chain, with native included unless disabled in config."""
    if enable_native is None:
        enable_native = settings.ENABLE_NATIVE_BACKEND
    backends: list[Backend] = [SoftwareBackend(), PassthroughBackend()]
    if enable_native:
        backends.insert(0, NativeBackend())
    return backends


def check_upload(data: bytes, max_size: Optional[int] = None) -> str:
    """Validate raw upload bytes and return the sniffed format.

    Raises:
        InvalidInput: For empty, oversized or unrecognized data
    """
    if not data:
        raise InvalidInput("Empty image data")
    limit = settings.MAX_FILE_SIZE if max_size is None else max_size
    if len(data) > limit:
        raise InvalidInput(f"Image of {len(data)} bytes exceeds the {limit} byte limit")
    fmt = sniff_format(data)
    if fmt is None:
        raise InvalidInput("Unrecognized image format (expected PNG, JPEG, GIF or WebP)")
    return fmt


class BackendSelector:
    """Serve requests through an ordered list of backends.

    Args:
        backends: Backends to try in order, defaults to :func:`default_backends`
    """

    def __init__(self, backends: Optional[Sequence[Backend]] = None):
        self.backends = list(backends) if backends is not None else default_backends()
        if not self.backends:
            raise ValueError("BackendSelector needs at least one backend")

    def source_size(self, data: bytes, request: EffectOptions) -> Optional[tuple[int, int]]:
        """Probe the source size; fatal only for size-dependent families."""
        try:
            return probe(data)
        except UnreadableImage:
            if request.family in SIZE_DEPENDENT:
                raise
            logger.debug(f"Could not probe source size for {request.family}, continuing")
            return None

    def check_geometry(self, request: EffectOptions, size: Optional[tuple[int, int]]) -> None:
        """Reject geometry the source size makes invalid, before any backend runs.

        Raises:
            InvalidParameters: If a resize target exceeds the upscale limit
        """
        if isinstance(request, ResizeOptions) and size is not None:
            plan_resize(
                size[0], size[1], request.width, request.height,
                request.maintain_aspect_ratio, request.resize_mode,
            )

    def process(self, data: bytes, request: EffectOptions) -> ProcessingOutcome:
        """Run the chain for one request.

        Args:
            data: Encoded source image
            request: Validated effect options

        Returns:
            Outcome of the first backend that succeeded, with all attempts

        Raises:
            UnreadableImage: If a size-dependent family's source cannot be probed
            InvalidParameters: If the request is invalid for the source size
            BackendFailure: If every backend failed
        """
        size = self.source_size(data, request)
        self.check_geometry(request, size)
        attempts: list[BackendAttempt] = []
        last_error: Optional[BaseException] = None

        for backend in self.backends:
            start = time.perf_counter()
            try:
                outcome = backend.attempt(data, request, size)
            except InvalidParameters:
                raise
            except Exception as e:
                attempts.append(BackendAttempt(backend.name, False, str(e)))
                last_error = e
                logger.warning(f"Backend '{backend.name}' failed for {request.family}: {e}")
                continue
            attempts.append(BackendAttempt(backend.name, True))
            outcome.attempts = attempts
            outcome.source_dimensions = size
            elapsed = (time.perf_counter() - start) * 1000
            logger.info(
                f"{request.family} served by '{backend.name}' in {elapsed:.1f}ms "
                f"({outcome.backend_path})"
            )
            return outcome

        path = ",".join(str(a) for a in attempts)
        logger.error(f"All backends failed for {request.family}: {path}")
        raise BackendFailure(self.backends[-1].name, last_error)
