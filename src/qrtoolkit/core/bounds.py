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

# Rendered symbol edge length in pixels.
MIN_SYMBOL_SIZE = 32
MAX_SYMBOL_SIZE = 2048
DEFAULT_SYMBOL_SIZE = 256

# Quiet zone in modules.
MIN_MARGIN = 0
MAX_MARGIN = 20
DEFAULT_MARGIN = 4

# Logo edge length as a percentage of the symbol edge length.
MIN_LOGO_PERCENT = 5.0
MAX_LOGO_PERCENT = 30.0
DEFAULT_LOGO_PERCENT = 20.0

# JPEG encoder quality.
MIN_JPEG_QUALITY = 1
MAX_JPEG_QUALITY = 100
DEFAULT_JPEG_QUALITY = 90

# Normalized scan raster bounds (pixels per side).
MIN_SCAN_DIMENSION = 100
MAX_SCAN_DIMENSION = 5000
DEFAULT_SCAN_DIMENSION = 1000

# Channels per pixel in a normalized scan raster (RGBA).
SCAN_CHANNELS = 4


__all__ = [
    "DEFAULT_JPEG_QUALITY",
    "DEFAULT_LOGO_PERCENT",
    "DEFAULT_MARGIN",
    "DEFAULT_SCAN_DIMENSION",
    "DEFAULT_SYMBOL_SIZE",
    "MAX_JPEG_QUALITY",
    "MAX_LOGO_PERCENT",
    "MAX_MARGIN",
    "MAX_SCAN_DIMENSION",
    "MAX_SYMBOL_SIZE",
    "MIN_JPEG_QUALITY",
    "MIN_LOGO_PERCENT",
    "MIN_MARGIN",
    "MIN_SCAN_DIMENSION",
    "MIN_SYMBOL_SIZE",
    "SCAN_CHANNELS",
]
