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

import unittest

from qrtoolkit.core.errors import ImageDecodeError
from qrtoolkit.qr.image import fit_within, normalize_image
from tests.test_support import image_bytes


class TestFitWithin(unittest.TestCase):
    def test_fit_within_cases(self) -> None:
        cases = (
            ((800, 600), (1000, 1000), (800, 600)),
            ((2000, 1000), (1000, 1000), (1000, 500)),
            ((1000, 3000), (1000, 1000), (333, 1000)),
            ((4000, 4000), (500, 1000), (500, 500)),
            ((1000, 1000), (1000, 1000), (1000, 1000)),
        )
        for (width, height), (max_width, max_height), expected in cases:
            with self.subTest(size=(width, height), bounds=(max_width, max_height)):
                fitted = fit_within(width, height, max_width=max_width, max_height=max_height)
                self.assertEqual(fitted, expected)

    def test_fit_within_never_returns_zero(self) -> None:
        self.assertEqual(fit_within(10000, 1, max_width=100, max_height=100), (100, 1))

    def test_fit_within_rejects_non_positive(self) -> None:
        with self.assertRaises(ValueError):
            fit_within(0, 10, max_width=100, max_height=100)
        with self.assertRaises(ValueError):
            fit_within(10, 10, max_width=0, max_height=100)


class TestNormalizeImage(unittest.TestCase):
    def test_small_image_kept_at_native_size(self) -> None:
        normalized = normalize_image(image_bytes(120, 80))
        self.assertEqual((normalized.buffer.width, normalized.buffer.height), (120, 80))
        self.assertEqual((normalized.source_width, normalized.source_height), (120, 80))
        self.assertEqual(len(normalized.buffer.pixels), 120 * 80 * 4)

    def test_large_image_downscaled_preserving_aspect(self) -> None:
        normalized = normalize_image(image_bytes(400, 200), max_width=100, max_height=100)
        self.assertEqual((normalized.buffer.width, normalized.buffer.height), (100, 50))
        self.assertEqual((normalized.source_width, normalized.source_height), (400, 200))

    def test_output_is_rgba_for_every_input_mode(self) -> None:
        cases = (
            ("RGB", (10, 20, 30), "PNG", (10, 20, 30, 255)),
            ("L", 200, "PNG", (200, 200, 200, 255)),
            ("RGBA", (1, 2, 3, 0), "PNG", (1, 2, 3, 0)),
            ("RGB", (255, 255, 255), "BMP", (255, 255, 255, 255)),
        )
        for mode, color, kind, expected in cases:
            with self.subTest(mode=mode, kind=kind):
                data = image_bytes(4, 4, color=color, mode=mode, kind=kind)
                pixels = normalize_image(data).buffer.pixels
                self.assertEqual(tuple(pixels[:4]), expected)

    def test_jpeg_input_is_accepted(self) -> None:
        normalized = normalize_image(image_bytes(64, 32, kind="JPEG"))
        self.assertEqual((normalized.buffer.width, normalized.buffer.height), (64, 32))

    def test_unreadable_data_raises(self) -> None:
        for data in (b"", b"not an image", b"GIF89a"):
            with self.subTest(data=data):
                with self.assertRaises(ImageDecodeError):
                    normalize_image(data)


if __name__ == "__main__":
    unittest.main()
