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

import typer

from ...config import build_decode_options, resolve_expected_key
from ...core.models import CredentialFormat
from ...pipeline import Operation, run_operation
from ..core.common import _ctx_value, _load_config, _read_text, _run_cli, _write_json
from ..ui.summary import print_result

_PARSE_HELP = (
    "Interpret and verify an already-decoded QR payload string.\n\n"
    "Examples:\n"
    "  qrtoolkit parse 'WIFI:S:Home;T:WPA;P:secret;H:false;;'\n"
    "  qrtoolkit parse '{\"qrKey\": \"abc\", \"apiKey\": \"k\"}' --key abc --credential auto\n"
    "  scanner-tool | qrtoolkit parse - --format text\n"
)


def register(app: typer.Typer) -> None:
    app.command(help=_PARSE_HELP)(parse)


def parse(
    ctx: typer.Context,
    raw: str = typer.Argument(..., help="Raw payload text (use - for stdin)."),
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
        help="Require the payload to carry this qrKey (or set QRTOOLKIT_KEY).",
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
        help="Include prefix metadata in the output.",
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
) -> None:
    debug_value = bool(_ctx_value(ctx, "debug"))

    def _run() -> None:
        config = _load_config(ctx)
        if output_format not in {"json", "text"}:
            raise ValueError("--format must be json or text")
        text = _read_text("-").rstrip("\r\n") if raw == "-" else raw
        options = build_decode_options(
            config.decode,
            expected_key=resolve_expected_key(key),
            prefix=prefix,
            strict_prefix=strict_prefix,
            credential_mode=credential,
            credential_format=CredentialFormat.ENVELOPE if envelope else None,
            include_metadata=metadata,
        )
        result = run_operation(Operation.VERIFY, text, options=options)
        if output_format == "text":
            print_result(result, title="Payload")
            return
        _write_json(result.to_dict())

    _run_cli(_run, debug=debug_value)
