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

from PIL import ImageColor


def require_int(value: object, *, label: str, error: type[ValueError] = ValueError) -> int:
    """Validate that value is an int (bools are rejected)."""
    if isinstance(value, bool) or not isinstance(value, int):
        raise error(f"{label} must be an integer")
    return value


def require_int_range(
    value: object,
    *,
    min_val: int,
    max_val: int,
    label: str,
    error: type[ValueError] = ValueError,
) -> int:
    """Validate that integer value is within range [min_val, max_val]."""
    number = require_int(value, label=label, error=error)
    if number < min_val or number > max_val:
        raise error(f"{label} must be between {min_val} and {max_val}")
    return number


def require_number_range(
    value: object,
    *,
    min_val: float,
    max_val: float,
    label: str,
    error: type[ValueError] = ValueError,
) -> float:
    """Validate that a real number is within range [min_val, max_val]."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise error(f"{label} must be a number")
    number = float(value)
    if number != number or number < min_val or number > max_val:
        raise error(f"{label} must be between {min_val:g} and {max_val:g}")
    return number


def require_color(value: object, *, label: str, error: type[ValueError] = ValueError) -> None:
    """Validate that value is a colour Pillow understands (name, hex, or RGB(A) tuple)."""
    if isinstance(value, str):
        try:
            ImageColor.getcolor(value.strip(), "RGBA")
        except ValueError as exc:
            raise error(f"{label} is not a valid color: {value!r}") from exc
        return
    if isinstance(value, (tuple, list)) and len(value) in (3, 4):
        if all(
            not isinstance(item, bool) and isinstance(item, int) and 0 <= item <= 255
            for item in value
        ):
            return
    raise error(f"{label} is not a valid color: {value!r}")
