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


class QrToolkitError(RuntimeError):
    """Base class for per-item failures raised by the codec pipeline."""


class SourceUnavailable(QrToolkitError):
    """The source could not be read (missing file, HTTP error, transport failure)."""


class SourceMalformed(QrToolkitError):
    """The source descriptor or inline data is invalid."""


class ImageDecodeError(QrToolkitError):
    """The image container could not be parsed."""


class RenderError(QrToolkitError):
    """The symbol generation primitive rejected the payload."""


class EncodeOptionsError(ValueError):
    """Render options fall outside the supported ranges."""


__all__ = [
    "EncodeOptionsError",
    "ImageDecodeError",
    "QrToolkitError",
    "RenderError",
    "SourceMalformed",
    "SourceUnavailable",
]
