"""HTTP endpoints for applying effects to uploaded images."""

from __future__ import annotations

import json
import logging
import time
import unicodedata
from pathlib import Path
from typing import Optional
from urllib.parse import quote

from fastapi import APIRouter, File, Form, Request, UploadFile
from fastapi.responses import Response

from .. import __version__
from ..backends import NativeBackend, ProcessingOutcome
from ..codec import EXTENSIONS, MIME_TYPES
from ..effects.options import FAMILY_MODELS, EffectOptions, validate_request
from ..exceptions import InvalidParameters
from ..probe import probe, sniff_format
from ..selector import check_upload

logger = logging.getLogger(__name__)

router = APIRouter(tags=["effects"])


def metric_header(name: str) -> str:
    """``dynamic_range_score`` -> ``X-Dynamic-Range-Score``."""
    return "X-" + "-".join(part.capitalize() for part in name.split("_"))


def _parse_options(raw: Optional[str]) -> dict:
    if not raw:
        return {}
    try:
        data = json.loads(raw)
    except json.JSONDecodeError as e:
        raise InvalidParameters("options", "a JSON object", f"options is not valid JSON: {e}") from e
    if not isinstance(data, dict):
        raise InvalidParameters("options", "a JSON object")
    return data


def content_disposition(stem: str, suffix: str) -> str:
    """Attachment header for ``stem + suffix`` that is safe for latin-1 transport.

    ``filename=`` carries an ASCII-folded stem without quotes or backslashes
    (``image`` if nothing is left); non-ASCII or altered names also get an
    RFC 5987 ``filename*``.
    """
    folded = unicodedata.normalize("NFKD", stem).encode("ascii", "ignore").decode("ascii")
    ascii_stem = "".join(c for c in folded if c.isprintable() and c not in '"\\').strip() or "image"
    header = f'attachment; filename="{ascii_stem}{suffix}"'
    if ascii_stem != stem:
        header += f"; filename*=UTF-8''{quote(stem + suffix)}"
    return header


def _format_dims(dims: Optional[tuple[int, int]]) -> str:
    if dims is None:
        return "unknown"
    return f"{dims[0]}x{dims[1]}"


def build_headers(
    outcome: ProcessingOutcome,
    options: EffectOptions,
    filename: str,
    output_type: str,
    elapsed_ms: float,
) -> dict[str, str]:
    """Response headers describing one processed request."""
    stem = Path(filename or "image").stem or "image"
    headers = {
        "Content-Disposition": content_disposition(
            stem, f"_{options.family}.{EXTENSIONS[output_type]}"
        ),
        "X-Processing-Time": f"{elapsed_ms:.0f}",
        "X-Original-Dimensions": _format_dims(outcome.source_dimensions),
        "X-Processed-Dimensions": _format_dims(outcome.dimensions),
        "X-Backend-Path": outcome.backend_path,
        "X-Effect-Style": options.style_label,
    }
    for name, value in outcome.derived_metrics.items():
        headers[metric_header(name)] = f"{value:g}"
    if outcome.details:
        headers["X-Adjustments"] = "; ".join(outcome.details)
    return headers


@router.get("/health")
async def health_check(request: Request):
    """Health check endpoint."""
    selector = request.app.state.selector
    return {
        "status": "ok",
        "version": __version__,
        "native_backend": any(isinstance(b, NativeBackend) for b in selector.backends),
    }


@router.get("/effects")
async def list_effects():
    """List effect families with the JSON schema of their options."""
    return {
        "families": {
            family: model.model_json_schema(by_alias=True)
            for family, model in FAMILY_MODELS.items()
        }
    }


@router.post("/effects/{family}")
async def apply_effect(
    request: Request,
    family: str,
    image: UploadFile = File(...),
    options: Optional[str] = Form(None),
) -> Response:
    """Apply an effect family to an uploaded image.

    The body is multipart with ``image`` (file) and ``options`` (JSON
    string). The response body is the encoded result; metrics, dimensions
    and the backend degradation path are returned as ``X-`` headers.
    """
    start = time.perf_counter()
    effect = validate_request(family, _parse_options(options))
    data = await image.read()
    check_upload(data, request.app.state.settings.MAX_FILE_SIZE)

    outcome = await request.app.state.pool.run_async(
        request.app.state.selector.process, data, effect
    )
    elapsed = (time.perf_counter() - start) * 1000

    # Passthrough returns the upload in its original format
    output_type = sniff_format(outcome.encoded_bytes) or "png"
    headers = build_headers(outcome, effect, image.filename, output_type, elapsed)
    logger.debug(f"{family} {headers['X-Backend-Path']} in {elapsed:.0f}ms")
    return Response(content=outcome.encoded_bytes, media_type=MIME_TYPES[output_type], headers=headers)


@router.post("/probe")
async def probe_image(request: Request, image: UploadFile = File(...)):
    """Return the dimensions and detected format of an uploaded image."""
    data = await image.read()
    fmt = check_upload(data, request.app.state.settings.MAX_FILE_SIZE)
    width, height = probe(data)
    return {"width": width, "height": height, "format": fmt}
