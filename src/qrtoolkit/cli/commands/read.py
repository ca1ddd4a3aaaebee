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

import functools

import typer
from rich.markup import escape

from ...config import AppConfig, build_decode_options, parse_jobs, resolve_expected_key
from ...core.models import (
    CredentialFormat,
    DecodeOptions,
    DecodeRequest,
    DecodeResult,
    InlineBase64Source,
    InlineTextSource,
    Source,
    UrlSource,
)
from ...pipeline import BatchItem, BatchPolicy, decode_sync, run_batch
from ...sources.resolver import expand_file_sources
from ..core.common import _ctx_value, _load_config, _read_text, _run_cli, _write_json
from ..core.log import _warn
from ..ui import console_err
from ..ui.summary import print_result

_READ_HELP = (
    "Read QR codes from image files, directories, URLs or base64 data.\n\n"
    "Examples:\n"
    "  qrtoolkit read scan.png\n"
    "  qrtoolkit read ./scans --continue-on-error --jobs 4\n"
    "  qrtoolkit read --url https://example.com/qr.png --key s3cret --credential auto\n"
    "  cat qr.b64 | qrtoolkit read --text - --format text\n"
)


def register(app: typer.Typer) -> None:
    app.command(help=_READ_HELP)(read)


def read(
    ctx: typer.Context,
    paths: list[str] | None = typer.Argument(
        None,
        help="Image files or directories to scan.",
        show_default=False,
    ),
    url: list[str] | None = typer.Option(
        None,
        "--url",
        help="Fetch the image from this http(s) URL (repeatable).",
        rich_help_panel="Inputs",
    ),
    base64_data: list[str] | None = typer.Option(
        None,
        "--base64",
        help="Inline base64 image data, optionally a data:image/... URI (repeatable).",
        rich_help_panel="Inputs",
    ),
    text_file: list[str] | None = typer.Option(
        None,
        "--text",
        help="File holding base64 text, line wrapping allowed (use - for stdin, repeatable).",
        rich_help_panel="Inputs",
    ),
    max_width: int | None = typer.Option(
        None,
        "--max-width",
        help="Downscale wider images to this width (100-5000).",
        rich_help_panel="Decode",
    ),
    max_height: int | None = typer.Option(
        None,
        "--max-height",
        help="Downscale taller images to this height (100-5000).",
        rich_help_panel="Decode",
    ),
    inversion: str | None = typer.Option(
        None,
        "--inversion",
        help="Try normal, inverted or both color polarities.",
        rich_help_panel="Decode",
    ),
    prefix: str | None = typer.Option(
        None,
        "--prefix",
        help="Strip this marker from the start of the payload.",
        rich_help_panel="Decode",
    ),
    strict_prefix: bool | None = typer.Option(
        None,
        "--strict-prefix/--relaxed-prefix",
        help="Reject payloads that lack --prefix.",
        show_default=False,
        rich_help_panel="Decode",
    ),
    key: str | None = typer.Option(
        None,
        "--key",
        help="Require payloads to carry this qrKey (or set QRTOOLKIT_KEY).",
        rich_help_panel="Security",
    ),
    credential: str | None = typer.Option(
        None,
        "--credential",
        help="Classify JSON payloads: auto, basicAuth, apiKey, oauth2 or custom.",
        rich_help_panel="Security",
    ),
    envelope: bool = typer.Option(
        False,
        "--envelope",
        help="Wrap the credential in a typed envelope.",
        rich_help_panel="Security",
    ),
    metadata: bool | None = typer.Option(
        None,
        "--metadata/--no-metadata",
        help="Include decode metadata in the output.",
        show_default=False,
        rich_help_panel="Output",
    ),
    output_format: str = typer.Option(
        "json",
        "--format",
        "-f",
        help="Output format: json or text.",
        rich_help_panel="Output",
    ),
    continue_on_error: bool = typer.Option(
        False,
        "--continue-on-error",
        help="Report failing items and keep going instead of aborting.",
        rich_help_panel="Behavior",
    ),
    jobs: str | None = typer.Option(
        None,
        "--jobs",
        "-j",
        help="Parallel workers ('auto' or a positive integer).",
        rich_help_panel="Behavior",
    ),
) -> None:
    debug_value = bool(_ctx_value(ctx, "debug"))

    def _run() -> int:
        config = _load_config(ctx)
        quiet = bool(_ctx_value(ctx, "quiet"))
        if output_format not in {"json", "text"}:
            raise ValueError("--format must be json or text")
        sources = _collect_sources(paths, url, base64_data, text_file)
        options = build_decode_options(
            config.decode,
            expected_key=resolve_expected_key(key),
            max_width=max_width,
            max_height=max_height,
            inversion=inversion,
            prefix=prefix,
            strict_prefix=strict_prefix,
            credential_mode=credential,
            credential_format=CredentialFormat.ENVELOPE if envelope else None,
            include_metadata=metadata,
        )
        worker = functools.partial(_decode_one, options=options, config=config)
        policy = BatchPolicy.CONTINUE if continue_on_error else BatchPolicy.ABORT
        results = run_batch(
            sources,
            worker,
            policy=policy,
            jobs=_resolve_jobs(jobs, config),
        )
        for item in results:
            if item.error is not None:
                if output_format == "json":
                    _warn(f"{_source_label(sources[item.index])}: {item.error}", quiet=quiet)
            elif item.value is not None and not item.value.found:
                _warn(f"{_source_label(sources[item.index])}: no QR code found", quiet=quiet)
        _emit(results, sources, output_format=output_format)
        return 1 if any(item.error is not None for item in results) else 0

    _run_cli(_run, debug=debug_value)


def _decode_one(source: Source, *, options: DecodeOptions, config: AppConfig) -> DecodeResult:
    return decode_sync(
        DecodeRequest(source=source, options=options),
        timeout=config.network.timeout,
        user_agent=config.network.user_agent,
    )


def _collect_sources(
    paths: list[str] | None,
    urls: list[str] | None,
    base64_values: list[str] | None,
    text_files: list[str] | None,
) -> list[Source]:
    sources: list[Source] = []
    if paths:
        sources.extend(expand_file_sources(paths))
    sources.extend(UrlSource(url=value) for value in urls or [])
    sources.extend(InlineBase64Source(data=value) for value in base64_values or [])
    sources.extend(InlineTextSource(data=_read_text(path)) for path in text_files or [])
    if not sources:
        raise typer.BadParameter("provide an image path, --url, --base64 or --text")
    return sources


def _resolve_jobs(value: str | None, config: AppConfig) -> int | None:
    jobs = parse_jobs(value, field="--jobs") if value is not None else config.runtime.jobs
    if jobs is None or jobs == "auto":
        return None
    return jobs


def _source_label(source: Source) -> str:
    if hasattr(source, "path"):
        return source.path
    if hasattr(source, "url"):
        return source.url
    return source.kind


def _emit(
    results: list[BatchItem[DecodeResult]],
    sources: list[Source],
    *,
    output_format: str,
) -> None:
    if output_format == "text":
        for item in results:
            label = _source_label(sources[item.index])
            if item.error is not None:
                console_err.print(
                    f"[red]Error:[/red] {escape(label)}: {escape(str(item.error))}",
                    highlight=False,
                )
                continue
            print_result(item.value, title=label)
        return

    entries = []
    for item in results:
        entry: dict[str, object] = {"source": _source_label(sources[item.index])}
        if item.error is not None:
            entry["error"] = str(item.error)
        else:
            entry.update(item.value.to_dict())
        entries.append(entry)
    _write_json(entries[0] if len(entries) == 1 else entries)
