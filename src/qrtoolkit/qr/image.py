#!/usr/bin/env python3
# Copyright (C) 2026 Alex Stoyanov
#
# This program is free software: you can redistribute it and/or modify
# it under the terms of the GNU General Public License as published by
# the Free Software Foundation; either version 3 of the License, or
# (at your option) any later version.
#
# This program is distributed in the hope that it will be useful,
# but WITHOUT ANY WARRANTY; without even the implied warranty of
# MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.  See the
# GNU General Public License for more details.
#
# You should have received a copy of the GNU General Public License along with this program.
# If not, see <https://www.gnu.org/licenses/>.

from __future__ import annotations

import io
from dataclasses import dataclass

from PIL import Image

from ..core.bounds import DEFAULT_SCAN_DIMENSION
from ..core.errors import ImageDecodeError
from ..core.models import ImageBuffer


@dataclass(frozen=True)
class NormalizedImage:
    buffer: ImageBuffer
    source_width: int
    source_height: int


def fit_within(width: int, height: int, *, max_width: int, max_height: int) -> tuple[int, int]:
    """Aspect-preserving fit inside max bounds; never upscales."""
    if width <= 0 or height <= 0:
        raise ValueError("image dimensions must be positive")
    if max_width <= 0 or max_height <= 0:
        raise ValueError("max dimensions must be positive")
    scale = min(max_width / width, max_height / height, 1.0)
    if scale >= 1.0:
        return width, height
    fitted_width = min(max_width, max(1, round(width * scale)))
    fitted_height = min(max_height, max(1, round(height * scale)))
    return fitted_width, fitted_height


def normalize_image(
    data: bytes,
    *,
    max_width: int = DEFAULT_SCAN_DIMENSION,
    max_height: int = DEFAULT_SCAN_DIMENSION,
) -> NormalizedImage:
    """Decode image bytes into a bounded RGBA raster."""
    try:
        with Image.open(io.BytesIO(data)) as image:
            image.load()
            source_width, source_height = image.size
            rgba = image.convert("RGBA")
    except (OSError, ValueError, SyntaxError, Image.DecompressionBombError) as exc:
        raise ImageDecodeError(f"failed to decode image: {exc}") from exc

    width, height = fit_within(
        source_width,
        source_height,
        max_width=max_width,
        max_height=max_height,
    )
    if (width, height) != rgba.size:
        rgba = rgba.resize((width, height), Image.Resampling.LANCZOS)
    buffer = ImageBuffer(width=width, height=height, pixels=rgba.tobytes())
    return NormalizedImage(buffer=buffer, source_width=source_width, source_height=source_height)
