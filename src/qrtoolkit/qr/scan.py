#!/usr/bin/env python3
from __future__ import annotations

import functools
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

import zxingcpp
from PIL import Image, ImageOps

from ..core.models import DecodedSymbol, ImageBuffer, InversionMode, Point, SymbolGeometry

_WHITE = (255, 255, 255, 255)


@dataclass(frozen=True)
class QrDecoder:
    name: str
    decode_image: Callable[[Image.Image], DecodedSymbol | None]


def decode_symbol(
    buffer: ImageBuffer,
    *,
    inversion: InversionMode = InversionMode.BOTH,
) -> DecodedSymbol | None:
    """Locate and decode one QR symbol; None when the image holds none."""
    decoder = _load_decoder()
    luminance = _luminance_image(buffer)
    for candidate in _inversion_candidates(luminance, inversion):
        symbol = decoder.decode_image(candidate)
        if symbol is not None:
            return symbol
    return None


def buffer_to_image(buffer: ImageBuffer) -> Image.Image:
    return Image.frombytes("RGBA", (buffer.width, buffer.height), buffer.pixels)


def _luminance_image(buffer: ImageBuffer) -> Image.Image:
    image = buffer_to_image(buffer)
    alpha_min, _alpha_max = image.getchannel("A").getextrema()
    if alpha_min < 255:
        background = Image.new("RGBA", image.size, _WHITE)
        image = Image.alpha_composite(background, image)
    return image.convert("L")


def _inversion_candidates(image: Image.Image, inversion: InversionMode) -> list[Image.Image]:
    if inversion is InversionMode.NORMAL:
        return [image]
    inverted = ImageOps.invert(image)
    if inversion is InversionMode.INVERTED:
        return [inverted]
    return [image, inverted]


def _decode_image(image: Image.Image, *, zxing_module: Any) -> DecodedSymbol | None:
    results = zxing_module.read_barcodes(image, formats=zxing_module.BarcodeFormat.QRCode)
    for result in results:
        if not getattr(result, "valid", True):
            continue
        text = getattr(result, "text", None)
        if text is None:
            continue
        return DecodedSymbol(text=text, geometry=_geometry(getattr(result, "position", None)))
    return None


def _geometry(position: Any) -> SymbolGeometry | None:
    if position is None:
        return None
    try:
        return SymbolGeometry(
            top_left=_point(position.top_left),
            top_right=_point(position.top_right),
            bottom_right=_point(position.bottom_right),
            bottom_left=_point(position.bottom_left),
        )
    except AttributeError:
        return None


def _point(value: Any) -> Point:
    return Point(x=int(value.x), y=int(value.y))


def _load_decoder() -> QrDecoder:
    return QrDecoder(
        name="zxingcpp",
        decode_image=functools.partial(_decode_image, zxing_module=zxingcpp),
    )
