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

import base64
import binascii
import re
from collections.abc import Iterable, Sequence
from pathlib import Path
from urllib.parse import urlsplit

import httpx

from ..core.errors import SourceMalformed, SourceUnavailable
from ..core.models import (
    FileSource,
    InlineBase64Source,
    InlineTextSource,
    Source,
    UrlSource,
)

DEFAULT_USER_AGENT = "qrtoolkit"
DEFAULT_TIMEOUT_SECONDS = 30.0
IMAGE_SUFFIXES = {".png", ".jpg", ".jpeg", ".bmp", ".gif", ".tif", ".tiff", ".webp"}

_DATA_URI_RE = re.compile(r"^data:image/[^;,]+;base64,", re.IGNORECASE)
_WHITESPACE_RE = re.compile(r"\s+")


async def resolve_source(
    source: Source,
    *,
    client: httpx.AsyncClient | None = None,
    timeout: float | None = DEFAULT_TIMEOUT_SECONDS,
    user_agent: str = DEFAULT_USER_AGENT,
) -> bytes:
    """Return the raw bytes behind a source descriptor."""
    if isinstance(source, FileSource):
        return read_file_source(source)
    if isinstance(source, UrlSource):
        return await fetch_url_source(
            source,
            client=client,
            timeout=timeout,
            user_agent=user_agent,
        )
    if isinstance(source, InlineBase64Source):
        return decode_inline(source.data, strip_all_whitespace=False)
    if isinstance(source, InlineTextSource):
        return decode_inline(source.data, strip_all_whitespace=True)
    raise SourceMalformed(f"unsupported source: {type(source).__name__}")


def read_file_source(source: FileSource) -> bytes:
    path = Path(source.path).expanduser()
    if not path.exists():
        raise SourceUnavailable(f"file not found: {source.path}")
    if not path.is_file():
        raise SourceUnavailable(f"not a file: {source.path}")
    try:
        return path.read_bytes()
    except OSError as exc:
        raise SourceUnavailable(f"failed to read file: {source.path}") from exc


async def fetch_url_source(
    source: UrlSource,
    *,
    client: httpx.AsyncClient | None = None,
    timeout: float | None = DEFAULT_TIMEOUT_SECONDS,
    user_agent: str = DEFAULT_USER_AGENT,
) -> bytes:
    scheme = urlsplit(source.url).scheme.lower()
    if scheme not in {"http", "https"}:
        raise SourceMalformed(f"unsupported URL scheme: {source.url}")
    if client is not None:
        return await _fetch(client, source.url)
    async with build_async_client(timeout=timeout, user_agent=user_agent) as owned:
        return await _fetch(owned, source.url)


def build_async_client(
    *,
    timeout: float | None = DEFAULT_TIMEOUT_SECONDS,
    user_agent: str = DEFAULT_USER_AGENT,
    transport: httpx.AsyncBaseTransport | None = None,
) -> httpx.AsyncClient:
    return httpx.AsyncClient(
        timeout=httpx.Timeout(timeout),
        follow_redirects=True,
        headers={"User-Agent": user_agent},
        transport=transport,
    )


async def _fetch(client: httpx.AsyncClient, url: str) -> bytes:
    try:
        response = await client.get(url)
    except httpx.HTTPError as exc:
        raise SourceUnavailable(f"failed to fetch {url}: {exc}") from exc
    if not response.is_success:
        raise SourceUnavailable(
            f"failed to fetch {url}: HTTP {response.status_code} {response.reason_phrase}"
        )
    return response.content


def decode_inline(data: str, *, strip_all_whitespace: bool) -> bytes:
    """Decode inline base64 image data, tolerating a ``data:image/...`` prefix."""
    text = data.strip()
    text = _DATA_URI_RE.sub("", text, count=1)
    if strip_all_whitespace:
        text = _WHITESPACE_RE.sub("", text)
    if not text:
        raise SourceMalformed("inline image data is empty")
    try:
        return base64.b64decode(_pad_base64(text), validate=True)
    except (binascii.Error, ValueError) as exc:
        raise SourceMalformed("inline image data is not valid base64") from exc


def expand_file_sources(paths: Sequence[str | Path]) -> list[FileSource]:
    return [FileSource(path=str(path)) for path in _expand_paths(paths)]


def _expand_paths(paths: Sequence[str | Path]) -> Iterable[Path]:
    for raw in paths:
        path = Path(raw).expanduser()
        if not path.exists():
            raise SourceUnavailable(f"scan path not found: {path}")
        if path.is_dir():
            scan_files = _iter_scan_files(path)
            if not scan_files:
                raise SourceUnavailable(f"no image files found in directory: {path}")
            yield from scan_files
        else:
            yield path


def _iter_scan_files(directory: Path) -> list[Path]:
    files: list[Path] = []
    for path in sorted(directory.rglob("*")):
        if not path.is_file():
            continue
        if path.suffix.lower() in IMAGE_SUFFIXES:
            files.append(path)
    return files


def _pad_base64(text: str) -> str:
    padding = (-len(text)) % 4
    return text + ("=" * padding)
