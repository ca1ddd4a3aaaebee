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

import base64
import tempfile
import unittest
from pathlib import Path

import httpx

from qrtoolkit.core.errors import SourceMalformed, SourceUnavailable
from qrtoolkit.core.models import FileSource, InlineBase64Source, InlineTextSource, UrlSource
from qrtoolkit.sources.resolver import (
    _expand_paths,
    build_async_client,
    decode_inline,
    expand_file_sources,
    resolve_source,
)

PAYLOAD = b"\x89PNG fake image bytes"
ENCODED = base64.b64encode(PAYLOAD).decode("ascii")


class TestInlineSources(unittest.IsolatedAsyncioTestCase):
    async def test_inline_variants(self) -> None:
        wrapped = "\n".join(ENCODED[i : i + 8] for i in range(0, len(ENCODED), 8))
        cases = (
            ("base64", InlineBase64Source(ENCODED)),
            ("base64-data-uri", InlineBase64Source(f"data:image/png;base64,{ENCODED}")),
            ("base64-surrounding-space", InlineBase64Source(f"  {ENCODED}\n")),
            ("base64-unpadded", InlineBase64Source(ENCODED.rstrip("="))),
            ("text-wrapped", InlineTextSource(wrapped)),
            ("text-data-uri", InlineTextSource(f"data:image/jpeg;base64,{wrapped}")),
        )
        for name, source in cases:
            with self.subTest(case=name):
                self.assertEqual(await resolve_source(source), PAYLOAD)

    async def test_inline_rejects_bad_data(self) -> None:
        cases = (
            ("empty", InlineBase64Source("")),
            ("only-prefix", InlineBase64Source("data:image/png;base64,")),
            ("not-base64", InlineBase64Source("!!!not base64!!!")),
            ("inner-whitespace-base64", InlineBase64Source(ENCODED[:8] + " " + ENCODED[8:])),
        )
        for name, source in cases:
            with self.subTest(case=name):
                with self.assertRaises(SourceMalformed):
                    await resolve_source(source)

    def test_decode_inline_strips_whitespace_only_when_asked(self) -> None:
        spaced = ENCODED[:8] + "\n" + ENCODED[8:]
        self.assertEqual(decode_inline(spaced, strip_all_whitespace=True), PAYLOAD)
        with self.assertRaises(SourceMalformed):
            decode_inline(spaced, strip_all_whitespace=False)


class TestFileSources(unittest.IsolatedAsyncioTestCase):
    async def test_file_read(self) -> None:
        with tempfile.TemporaryDirectory() as tmpdir:
            path = Path(tmpdir) / "code.png"
            path.write_bytes(PAYLOAD)
            self.assertEqual(await resolve_source(FileSource(str(path))), PAYLOAD)

    async def test_missing_file_and_directory(self) -> None:
        with tempfile.TemporaryDirectory() as tmpdir:
            cases = (
                ("missing", FileSource(str(Path(tmpdir) / "nope.png"))),
                ("directory", FileSource(tmpdir)),
            )
            for name, source in cases:
                with self.subTest(case=name):
                    with self.assertRaises(SourceUnavailable):
                        await resolve_source(source)

    def test_expand_file_sources(self) -> None:
        with tempfile.TemporaryDirectory() as tmpdir:
            root = Path(tmpdir)
            (root / "b.png").write_bytes(PAYLOAD)
            (root / "sub").mkdir()
            (root / "sub" / "a.JPG").write_bytes(PAYLOAD)
            (root / "notes.txt").write_text("skip", encoding="utf-8")
            single = root / "single.bin"
            single.write_bytes(PAYLOAD)

            sources = expand_file_sources([root, single])
            self.assertEqual(
                sources,
                [
                    FileSource(str(root / "b.png")),
                    FileSource(str(root / "sub" / "a.JPG")),
                    FileSource(str(single)),
                ],
            )

    def test_invalid_scan_paths_raise(self) -> None:
        with tempfile.TemporaryDirectory() as tmpdir:
            cases = (
                ("missing-path", [Path("does-not-exist")]),
                ("empty-directory", [Path(tmpdir)]),
            )
            for name, paths in cases:
                with self.subTest(case=name):
                    with self.assertRaises(SourceUnavailable):
                        list(_expand_paths(paths))


class TestUrlSources(unittest.IsolatedAsyncioTestCase):
    def _client(self, handler) -> httpx.AsyncClient:
        return build_async_client(
            timeout=5.0,
            user_agent="qrtoolkit-test",
            transport=httpx.MockTransport(handler),
        )

    async def test_fetch_success_sends_user_agent(self) -> None:
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, content=PAYLOAD)

        async with self._client(handler) as client:
            data = await resolve_source(UrlSource("https://example.com/code.png"), client=client)
        self.assertEqual(data, PAYLOAD)
        self.assertEqual(seen[0].headers["User-Agent"], "qrtoolkit-test")

    async def test_redirects_followed(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            if request.url.path == "/old.png":
                return httpx.Response(302, headers={"Location": "https://example.com/new.png"})
            return httpx.Response(200, content=PAYLOAD)

        async with self._client(handler) as client:
            data = await resolve_source(UrlSource("https://example.com/old.png"), client=client)
        self.assertEqual(data, PAYLOAD)

    async def test_http_errors_raise_unavailable(self) -> None:
        for status in (404, 500):
            with self.subTest(status=status):

                def handler(request: httpx.Request, status=status) -> httpx.Response:
                    return httpx.Response(status)

                async with self._client(handler) as client:
                    with self.assertRaises(SourceUnavailable) as ctx:
                        await resolve_source(UrlSource("https://example.com/x.png"), client=client)
                self.assertIn(str(status), str(ctx.exception))

    async def test_transport_error_raises_unavailable(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        async with self._client(handler) as client:
            with self.assertRaises(SourceUnavailable):
                await resolve_source(UrlSource("http://example.com/x.png"), client=client)

    async def test_unsupported_scheme(self) -> None:
        for url in ("ftp://example.com/x.png", "file:///etc/passwd", "example.com/x.png"):
            with self.subTest(url=url):
                with self.assertRaises(SourceMalformed):
                    await resolve_source(UrlSource(url))


if __name__ == "__main__":
    unittest.main()
