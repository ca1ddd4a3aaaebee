#!/usr/bin/env python3
from __future__ import annotations

import base64
import io
import math
import re
from dataclasses import replace
from pathlib import Path
from typing import Any

import segno
from PIL import Image, ImageColor, ImageDraw

from ..core.errors import EncodeOptionsError, RenderError
from ..core.models import (
    Color,
    EncodeRequest,
    LogoOverlay,
    ModuleShape,
    RasterSymbol,
    RenderedSymbol,
    RenderOptions,
    SymbolFormat,
    VectorSymbol,
)
from ..encoding.payloads import serialize_payload

_ROUNDED_RATIO = 0.2
_SVG_ROOT_RE = re.compile(r"<svg\b[^>]*>")
_SVG_SIZE_ATTR_RE = re.compile(r'(?<=\s)(width|height)="[^"]*"')
_SUFFIX_FORMATS = {
    ".png": SymbolFormat.PNG,
    ".jpg": SymbolFormat.JPEG,
    ".jpeg": SymbolFormat.JPEG,
    ".svg": SymbolFormat.SVG,
}


def encode_symbol(request: EncodeRequest) -> RenderedSymbol:
    """Serialize the request payload and render it as a QR symbol."""
    content = serialize_payload(request.payload)
    if request.prefix:
        content = f"{request.prefix}{content}"
    return render_symbol(content, request.options)


def render_symbol(content: str, options: RenderOptions) -> RenderedSymbol:
    qr = make_qr(content, error=options.error.value)
    if options.format.is_raster:
        return _render_raster(qr, options)
    return _render_vector(qr, options)


def save_symbol(
    path: str | Path,
    request: EncodeRequest,
    *,
    infer_format: bool = True,
) -> RenderedSymbol:
    """Render request and write the artifact to path, creating parent dirs.

    With infer_format a known suffix (.png, .jpg, .jpeg, .svg) selects the
    output format; otherwise a suffix that disagrees with the requested format
    is rejected.
    """
    target = Path(path).expanduser()
    suffix_format = format_for_path(target)
    if suffix_format is not None and suffix_format is not request.options.format:
        if not infer_format:
            raise EncodeOptionsError(
                f"output suffix {target.suffix} does not match format "
                f"{request.options.format.value}"
            )
        request = replace(request, options=replace(request.options, format=suffix_format))
    symbol = encode_symbol(request)
    target.parent.mkdir(parents=True, exist_ok=True)
    if isinstance(symbol, VectorSymbol):
        target.write_text(symbol.text, encoding="utf-8")
    else:
        target.write_bytes(symbol.data)
    return symbol


def format_for_path(path: str | Path) -> SymbolFormat | None:
    return _SUFFIX_FORMATS.get(Path(path).suffix.lower())


def make_qr(data: str, *, error: str = "M") -> Any:
    # boost_error stays off so the caller's error-correction level is used as-is.
    try:
        return segno.make(data, error=error, micro=False, boost_error=False)
    except segno.DataOverflowError as exc:
        raise RenderError(f"payload does not fit in a QR symbol at level {error}") from exc
    except ValueError as exc:
        raise RenderError(f"failed to build QR symbol: {exc}") from exc


def _render_raster(qr: Any, options: RenderOptions) -> RasterSymbol:
    warnings: list[str] = []
    light_rgba = _color_to_rgba(options.light, (255, 255, 255, 255))
    dark_rgba = _color_to_rgba(options.dark, (0, 0, 0, 255))
    matrix = [list(row) for row in qr.matrix_iter(scale=1, border=options.margin)]
    modules = len(matrix)
    unit = options.size / modules
    if unit < 1:
        warnings.append(
            f"symbol needs {modules} modules but size is {options.size}px; "
            "modules are narrower than one pixel and may not scan"
        )

    image = Image.new("RGBA", (options.size, options.size), light_rgba)
    draw = ImageDraw.Draw(image)
    roundness = _ROUNDED_RATIO if options.module_shape is ModuleShape.ROUNDED else 0.0
    radius = max(0.0, min(roundness, 0.5)) * unit
    for row_idx, row in enumerate(matrix):
        for col_idx, is_dark in enumerate(row):
            if not is_dark:
                continue
            _draw_module(
                draw,
                _edge(col_idx, unit),
                _edge(row_idx, unit),
                _edge(col_idx + 1, unit),
                _edge(row_idx + 1, unit),
                radius=radius,
                color=dark_rgba,
            )

    has_logo = False
    if options.logo is not None:
        try:
            image = _composite_logo(image, options.logo)
            has_logo = True
        except (OSError, ValueError, Image.DecompressionBombError) as exc:
            warnings.append(f"failed to add logo: {exc}")

    data = _encode_raster(image, options.format, quality=options.quality, background=light_rgba)
    return RasterSymbol(
        data=data,
        mime_type=options.format.mime_type,
        width=options.size,
        height=options.size,
        warnings=tuple(warnings),
        has_logo=has_logo,
    )


def _render_vector(qr: Any, options: RenderOptions) -> VectorSymbol:
    warnings: list[str] = []
    width, _height = qr.symbol_size(scale=1, border=options.margin)
    scale = options.size / width
    buf = io.BytesIO()
    qr.save(
        buf,
        kind="svg",
        scale=scale,
        border=options.margin,
        xmldecl=False,
        **_segno_color_kwargs(dark=options.dark, light=options.light),
    )
    text = buf.getvalue().decode("utf-8")
    text = _set_svg_size(text, options.size)

    has_logo = False
    if options.logo is not None:
        try:
            text = _embed_svg_logo(text, options.logo, size=options.size)
            has_logo = True
        except (OSError, ValueError, Image.DecompressionBombError) as exc:
            warnings.append(f"failed to add logo: {exc}")

    return VectorSymbol(
        text=text,
        width=options.size,
        height=options.size,
        warnings=tuple(warnings),
        has_logo=has_logo,
    )


def _set_svg_size(svg: str, size: int) -> str:
    # A fractional scale leaves segno reporting float dimensions.
    match = _SVG_ROOT_RE.search(svg)
    if match is None:
        raise RenderError("rendered SVG has no root element")
    root = _SVG_SIZE_ATTR_RE.sub(lambda attr: f'{attr.group(1)}="{size}"', match.group(0))
    return svg[: match.start()] + root + svg[match.end() :]


def _edge(index: int, unit: float) -> int:
    return math.floor(index * unit)


def _draw_module(
    draw: ImageDraw.ImageDraw,
    x0: int,
    y0: int,
    x1: int,
    y1: int,
    *,
    radius: float,
    color: tuple[int, int, int, int],
) -> None:
    # Pillow rectangles include their end coordinate.
    right = max(x0, x1 - 1)
    bottom = max(y0, y1 - 1)
    if radius > 0:
        draw.rounded_rectangle((x0, y0, right, bottom), radius=radius, fill=color)
        return
    draw.rectangle((x0, y0, right, bottom), fill=color)


def _logo_image(logo: LogoOverlay, *, size: int) -> Image.Image:
    box = max(1, math.floor(size * logo.size_percentage / 100))
    with Image.open(io.BytesIO(logo.image)) as source:
        source.load()
        image = source.convert("RGBA")
    image.thumbnail((box, box), Image.Resampling.LANCZOS)
    return image


def _composite_logo(image: Image.Image, logo: LogoOverlay) -> Image.Image:
    overlay = _logo_image(logo, size=image.width)
    composed = image.copy()
    left = (image.width - overlay.width) // 2
    top = (image.height - overlay.height) // 2
    composed.alpha_composite(overlay, dest=(left, top))
    return composed


def _embed_svg_logo(svg: str, logo: LogoOverlay, *, size: int) -> str:
    overlay = _logo_image(logo, size=size)
    buf = io.BytesIO()
    overlay.save(buf, format="PNG")
    encoded = base64.b64encode(buf.getvalue()).decode("ascii")
    left = (size - overlay.width) / 2
    top = (size - overlay.height) / 2
    element = (
        f'<image x="{left:g}" y="{top:g}" width="{overlay.width}" height="{overlay.height}" '
        f'href="data:image/png;base64,{encoded}"/>'
    )
    closing = svg.rfind("</svg>")
    if closing < 0:
        raise ValueError("rendered SVG has no closing tag")
    return svg[:closing] + element + svg[closing:]


def _encode_raster(
    image: Image.Image,
    kind: SymbolFormat,
    *,
    quality: int,
    background: tuple[int, int, int, int],
) -> bytes:
    buf = io.BytesIO()
    if kind is SymbolFormat.JPEG:
        flat = Image.new("RGB", image.size, background[:3])
        flat.paste(image, mask=image.getchannel("A"))
        flat.save(buf, format="JPEG", quality=quality)
    else:
        image.save(buf, format="PNG")
    return buf.getvalue()


def _color_to_rgba(
    value: object,
    fallback: tuple[int, int, int, int],
) -> tuple[int, int, int, int]:
    normalized = _normalize_color_value(value)
    if normalized is None:
        return fallback
    if isinstance(normalized, str):
        rgb = ImageColor.getcolor(normalized, "RGBA")
        if isinstance(rgb, int):
            return (rgb, rgb, rgb, 255)
        return (int(rgb[0]), int(rgb[1]), int(rgb[2]), int(rgb[3]))
    if isinstance(normalized, (tuple, list)):
        if len(normalized) == 3:
            return (int(normalized[0]), int(normalized[1]), int(normalized[2]), 255)
        if len(normalized) == 4:
            return (
                int(normalized[0]),
                int(normalized[1]),
                int(normalized[2]),
                int(normalized[3]),
            )
    return fallback


def _segno_color_kwargs(**values: Color | None) -> dict[str, object]:
    style: dict[str, object] = {}
    for key, value in values.items():
        normalized = _normalize_color_value(value)
        if normalized is None:
            continue
        style[key] = normalized
    return style


def _normalize_color_value(value: object) -> object | None:
    if value is None:
        return None
    if isinstance(value, str):
        return value.strip()
    if isinstance(value, list):
        return tuple(value)
    return value
