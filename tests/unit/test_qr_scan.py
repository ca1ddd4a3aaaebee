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
from types import SimpleNamespace
from unittest import mock

from qrtoolkit.core.models import DecodedSymbol, InversionMode, Point
from qrtoolkit.qr.scan import QrDecoder, _decode_image, decode_symbol
from tests.test_support import solid_buffer


def _recording_decoder(answers: dict[int, DecodedSymbol]):
    seen: list[int] = []

    def _decode(image):
        value = image.getpixel((0, 0))
        seen.append(value)
        return answers.get(value)

    return QrDecoder(name="fake", decode_image=_decode), seen


class TestDecodeSymbol(unittest.TestCase):
    def test_inversion_order(self) -> None:
        cases = (
            (InversionMode.NORMAL, [255]),
            (InversionMode.INVERTED, [0]),
            (InversionMode.BOTH, [255, 0]),
        )
        for inversion, expected in cases:
            with self.subTest(inversion=inversion):
                decoder, seen = _recording_decoder({})
                with mock.patch("qrtoolkit.qr.scan._load_decoder", return_value=decoder):
                    self.assertIsNone(decode_symbol(solid_buffer(8, 8), inversion=inversion))
                self.assertEqual(seen, expected)

    def test_first_successful_pass_wins(self) -> None:
        symbol = DecodedSymbol(text="hello")
        decoder, seen = _recording_decoder({255: symbol, 0: DecodedSymbol(text="other")})
        with mock.patch("qrtoolkit.qr.scan._load_decoder", return_value=decoder):
            self.assertEqual(decode_symbol(solid_buffer(8, 8)), symbol)
        self.assertEqual(seen, [255])

    def test_inverted_pass_used_when_normal_fails(self) -> None:
        symbol = DecodedSymbol(text="inverted")
        decoder, seen = _recording_decoder({255: symbol})
        buffer = solid_buffer(8, 8, rgba=(0, 0, 0, 255))
        with mock.patch("qrtoolkit.qr.scan._load_decoder", return_value=decoder):
            self.assertEqual(decode_symbol(buffer), symbol)
        self.assertEqual(seen, [0, 255])

    def test_transparent_pixels_read_as_white(self) -> None:
        decoder, seen = _recording_decoder({})
        buffer = solid_buffer(4, 4, rgba=(0, 0, 0, 0))
        with mock.patch("qrtoolkit.qr.scan._load_decoder", return_value=decoder):
            decode_symbol(buffer, inversion=InversionMode.NORMAL)
        self.assertEqual(seen, [255])


class TestZxingAdapter(unittest.TestCase):
    def _module(self, results):
        return SimpleNamespace(
            BarcodeFormat=SimpleNamespace(QRCode="qr"),
            read_barcodes=mock.Mock(return_value=results),
        )

    def test_geometry_and_text_extracted(self) -> None:
        position = SimpleNamespace(
            top_left=SimpleNamespace(x=1, y=2),
            top_right=SimpleNamespace(x=10, y=2),
            bottom_right=SimpleNamespace(x=10, y=11),
            bottom_left=SimpleNamespace(x=1, y=11),
        )
        module = self._module([SimpleNamespace(valid=True, text="hi", position=position)])
        symbol = _decode_image(object(), zxing_module=module)
        self.assertIsNotNone(symbol)
        self.assertEqual(symbol.text, "hi")
        self.assertEqual(symbol.geometry.top_left, Point(1, 2))
        self.assertEqual(symbol.geometry.bottom_right, Point(10, 11))
        module.read_barcodes.assert_called_once()
        self.assertEqual(module.read_barcodes.call_args.kwargs["formats"], "qr")

    def test_invalid_results_skipped(self) -> None:
        module = self._module(
            [
                SimpleNamespace(valid=False, text="bad", position=None),
                SimpleNamespace(valid=True, text="good", position=None),
            ]
        )
        symbol = _decode_image(object(), zxing_module=module)
        self.assertEqual(symbol, DecodedSymbol(text="good"))

    def test_no_results(self) -> None:
        self.assertIsNone(_decode_image(object(), zxing_module=self._module([])))


if __name__ == "__main__":
    unittest.main()
