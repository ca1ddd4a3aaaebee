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

import io
import re
import tempfile
import unittest
from pathlib import Path

from PIL import Image

from qrtoolkit.core.errors import EncodeOptionsError, RenderError
from qrtoolkit.core.models import (
    EncodeRequest,
    ErrorCorrection,
    JsonPayload,
    LogoOverlay,
    ModuleShape,
    RasterSymbol,
    RenderOptions,
    SymbolFormat,
    TextPayload,
    VectorSymbol,
    WifiPayload,
)
from qrtoolkit.qr.codec import encode_symbol, format_for_path, make_qr, save_symbol
from qrtoolkit.qr.image import normalize_image
from qrtoolkit.qr.scan import decode_symbol
from tests.test_support import HAS_ZXING, image_bytes


def _open(symbol: RasterSymbol) -> Image.Image:
    image = Image.open(io.BytesIO(symbol.data))
    image.load()
    return image


class TestEncodeSymbol(unittest.TestCase):
    def test_png_has_exact_requested_size(self) -> None:
        for size in (32, 100, 256, 333):
            with self.subTest(size=size):
                options = RenderOptions(size=size)
                symbol = encode_symbol(EncodeRequest(TextPayload("hello"), options))
                self.assertIsInstance(symbol, RasterSymbol)
                self.assertEqual(symbol.mime_type, "image/png")
                self.assertEqual((symbol.width, symbol.height), (size, size))
                self.assertEqual(_open(symbol).size, (size, size))
                self.assertEqual(symbol.warnings, ())
                self.assertFalse(symbol.has_logo)

    def test_colors_applied(self) -> None:
        options = RenderOptions(size=100, margin=4, dark="#ff0000", light=(0, 0, 255))
        image = _open(encode_symbol(EncodeRequest(TextPayload("x"), options))).convert("RGB")
        colors = {color for _count, color in image.getcolors()}
        self.assertEqual(colors, {(255, 0, 0), (0, 0, 255)})
        self.assertEqual(image.getpixel((0, 0)), (0, 0, 255))

    def test_jpeg_output(self) -> None:
        options = RenderOptions(size=128, format=SymbolFormat.JPEG, quality=80)
        symbol = encode_symbol(EncodeRequest(TextPayload("hello"), options))
        self.assertEqual(symbol.mime_type, "image/jpeg")
        self.assertTrue(symbol.data.startswith(b"\xff\xd8"))
        self.assertTrue(symbol.data_uri().startswith("data:image/jpeg;base64,"))
        self.assertEqual(_open(symbol).size, (128, 128))

    def test_svg_output(self) -> None:
        options = RenderOptions(size=200, format="svg")
        symbol = encode_symbol(EncodeRequest(TextPayload("hello"), options))
        self.assertIsInstance(symbol, VectorSymbol)
        self.assertEqual(symbol.mime_type, "image/svg+xml")
        self.assertIn("<svg", symbol.text)
        self.assertTrue(symbol.text.rstrip().endswith("</svg>"))
        self.assertNotIn("<?xml", symbol.text)

    def test_svg_reports_integer_size(self) -> None:
        for size in (100, 200, 333):
            with self.subTest(size=size):
                options = RenderOptions(size=size, format=SymbolFormat.SVG)
                symbol = encode_symbol(EncodeRequest(TextPayload("hello"), options))
                root = re.search(r"<svg\b[^>]*>", symbol.text).group(0)
                self.assertIn(f' width="{size}"', root)
                self.assertIn(f' height="{size}"', root)

    def test_rounded_modules_render(self) -> None:
        options = RenderOptions(size=128, module_shape=ModuleShape.ROUNDED)
        symbol = encode_symbol(EncodeRequest(TextPayload("hello"), options))
        self.assertEqual(_open(symbol).size, (128, 128))

    def test_rounded_modules_rejected_for_svg(self) -> None:
        with self.assertRaises(EncodeOptionsError):
            RenderOptions(format=SymbolFormat.SVG, module_shape=ModuleShape.ROUNDED)

    def test_out_of_range_options_rejected(self) -> None:
        cases = (
            ("size-low", {"size": 31}),
            ("size-high", {"size": 2049}),
            ("margin-negative", {"margin": -1}),
            ("margin-high", {"margin": 21}),
            ("quality-zero", {"quality": 0}),
            ("bad-error", {"error": "X"}),
            ("bad-format", {"format": "gif"}),
            ("bad-color", {"dark": "not-a-color"}),
            ("transparent-keyword", {"light": "transparent"}),
        )
        for name, kwargs in cases:
            with self.subTest(case=name):
                with self.assertRaises(EncodeOptionsError):
                    RenderOptions(**kwargs)

    def test_logo_percentage_bounds(self) -> None:
        for value in (4.9, 30.1):
            with self.subTest(value=value):
                with self.assertRaises(EncodeOptionsError):
                    LogoOverlay(image=b"", size_percentage=value)

    def test_logo_composited_at_center(self) -> None:
        logo = LogoOverlay(image=image_bytes(50, 50, color=(0, 255, 0)), size_percentage=20)
        options = RenderOptions(size=200, error=ErrorCorrection.H, logo=logo)
        symbol = encode_symbol(EncodeRequest(TextPayload("hello"), options))
        self.assertTrue(symbol.has_logo)
        image = _open(symbol).convert("RGB")
        self.assertEqual(image.getpixel((100, 100)), (0, 255, 0))

    def test_svg_logo_embedded(self) -> None:
        logo = LogoOverlay(image=image_bytes(20, 20), size_percentage=10)
        options = RenderOptions(size=200, format=SymbolFormat.SVG, logo=logo)
        symbol = encode_symbol(EncodeRequest(TextPayload("hello"), options))
        self.assertTrue(symbol.has_logo)
        self.assertIn('href="data:image/png;base64,', symbol.text)

    def test_unreadable_logo_is_a_warning(self) -> None:
        for kind in (SymbolFormat.PNG, SymbolFormat.SVG):
            with self.subTest(kind=kind):
                options = RenderOptions(format=kind, logo=LogoOverlay(image=b"not an image"))
                symbol = encode_symbol(EncodeRequest(TextPayload("hello"), options))
                self.assertFalse(symbol.has_logo)
                self.assertEqual(len(symbol.warnings), 1)
                self.assertIn("failed to add logo", symbol.warnings[0])

    def test_small_size_for_dense_payload_warns(self) -> None:
        options = RenderOptions(size=32, error=ErrorCorrection.H)
        symbol = encode_symbol(EncodeRequest(TextPayload("x" * 200), options))
        self.assertEqual(_open(symbol).size, (32, 32))
        self.assertTrue(any("modules" in warning for warning in symbol.warnings))

    def test_prefix_prepended(self) -> None:
        options = RenderOptions(format=SymbolFormat.SVG)
        plain = encode_symbol(EncodeRequest(JsonPayload({"a": 1}), options))
        prefixed = encode_symbol(EncodeRequest(JsonPayload({"a": 1}), options, prefix="CRED:"))
        expected = encode_symbol(EncodeRequest(TextPayload('CRED:{"a":1}'), options))
        self.assertNotEqual(plain.text, prefixed.text)
        self.assertEqual(prefixed.text, expected.text)

    def test_unencodable_payloads_raise_options_error(self) -> None:
        cases = (
            ("nan", JsonPayload({"x": float("nan")})),
            ("infinity", JsonPayload({"x": float("inf")})),
            ("not-json", JsonPayload({"x": {1, 2}})),
            ("empty-ssid", WifiPayload(ssid="")),
        )
        for name, payload in cases:
            with self.subTest(case=name):
                with self.assertRaises(EncodeOptionsError):
                    encode_symbol(EncodeRequest(payload))

    def test_payload_overflow_raises_render_error(self) -> None:
        with self.assertRaises(RenderError):
            encode_symbol(EncodeRequest(TextPayload("x" * 5000)))

    def test_error_level_respected(self) -> None:
        for level in ("L", "M", "Q", "H"):
            with self.subTest(level=level):
                self.assertEqual(make_qr("hello", error=level).error, level)


@unittest.skipUnless(HAS_ZXING, "zxingcpp not installed")
class TestEncodeDecodeRoundTrip(unittest.TestCase):
    def test_round_trip_every_error_level(self) -> None:
        text = '{"apiKey":"k","name":"svc"}'
        payload = JsonPayload({"apiKey": "k", "name": "svc"})
        for level in ErrorCorrection:
            with self.subTest(level=level):
                symbol = encode_symbol(EncodeRequest(payload, RenderOptions(size=300, error=level)))
                decoded = decode_symbol(normalize_image(symbol.data).buffer)
                self.assertIsNotNone(decoded)
                self.assertEqual(decoded.text, text)

    def test_plain_text_round_trip_and_repeat_decode(self) -> None:
        text = "hello, qr world"
        for level in ErrorCorrection:
            with self.subTest(level=level):
                options = RenderOptions(size=256, error=level)
                symbol = encode_symbol(EncodeRequest(TextPayload(text), options))
                buffer = normalize_image(symbol.data).buffer
                first = decode_symbol(buffer)
                second = decode_symbol(buffer)
                self.assertIsNotNone(first)
                self.assertEqual(first.text, text)
                self.assertEqual(first, second)


class TestSaveSymbol(unittest.TestCase):
    def test_format_for_path(self) -> None:
        cases = (
            ("a.png", SymbolFormat.PNG),
            ("a.JPG", SymbolFormat.JPEG),
            ("a.jpeg", SymbolFormat.JPEG),
            ("a.svg", SymbolFormat.SVG),
            ("a.gif", None),
            ("a", None),
        )
        for path, expected in cases:
            with self.subTest(path=path):
                self.assertIs(format_for_path(path), expected)

    def test_save_infers_format_and_creates_parents(self) -> None:
        with tempfile.TemporaryDirectory() as tmpdir:
            target = Path(tmpdir) / "nested" / "code.svg"
            symbol = save_symbol(target, EncodeRequest(TextPayload("hello")))
            self.assertIsInstance(symbol, VectorSymbol)
            self.assertTrue(target.read_text(encoding="utf-8").lstrip().startswith("<svg"))

            png = Path(tmpdir) / "code.png"
            save_symbol(png, EncodeRequest(TextPayload("hello")))
            self.assertTrue(png.read_bytes().startswith(b"\x89PNG"))

    def test_save_rejects_mismatched_suffix_without_inference(self) -> None:
        with tempfile.TemporaryDirectory() as tmpdir:
            target = Path(tmpdir) / "code.svg"
            with self.assertRaises(EncodeOptionsError):
                save_symbol(target, EncodeRequest(TextPayload("hello")), infer_format=False)
            self.assertFalse(target.exists())


if __name__ == "__main__":
    unittest.main()
