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

import json
import sys

import typer
from rich.markup import escape

from ...config import build_render_options, resolve_expected_key
from ...core.models import (
    ContactPayload,
    EncodeRequest,
    JsonPayload,
    Payload,
    PayloadKind,
    TextPayload,
    UrlPayload,
    VectorSymbol,
    WifiEncryption,
    WifiPayload,
    coerce_enum,
)
from ...crypto.verification import attach_key
from ...pipeline import encode
from ...qr.codec import format_for_path, save_symbol
from ..core.common import _ctx_value, _load_config, _read_bytes, _read_text, _run_cli
from ..core.log import _warn_all
from ..ui import console_err

_GENERATE_HELP = (
    "Generate a QR code from text, JSON, a URL, WiFi settings or a contact card.\n\n"
    "Examples:\n"
    "  qrtoolkit generate 'hello world' -o hello.png\n"
    "  qrtoolkit generate --kind json '{\"user\": \"a\"}' --key s3cret -o gated.svg\n"
    "  qrtoolkit generate --kind wifi --ssid Home --password secret -o wifi.png\n"
)


def register(app: typer.Typer) -> None:
    app.command(help=_GENERATE_HELP)(generate)


def generate(
    ctx: typer.Context,
    content: str | None = typer.Argument(
        None,
        help="Text, JSON or URL to encode (use - for stdin).",
        show_default=False,
    ),
    kind: str = typer.Option(
        "text",
        "--kind",
        "-k",
        help="Payload type: text, json, url, wifi or contact.",
        rich_help_panel="Payload",
    ),
    ssid: str | None = typer.Option(
        None,
        "--ssid",
        help="WiFi network name.",
        rich_help_panel="WiFi",
    ),
    password: str | None = typer.Option(
        None,
        "--password",
        help="WiFi password.",
        rich_help_panel="WiFi",
    ),
    encryption: str = typer.Option(
        "WPA",
        "--encryption",
        help="WiFi encryption: WPA, WEP or nopass.",
        rich_help_panel="WiFi",
    ),
    hidden: bool = typer.Option(
        False,
        "--hidden",
        help="Mark the WiFi network as hidden.",
        rich_help_panel="WiFi",
    ),
    name: str = typer.Option("", "--name", help="Full name.", rich_help_panel="Contact"),
    phone: str = typer.Option("", "--phone", help="Phone number.", rich_help_panel="Contact"),
    email: str = typer.Option("", "--email", help="Email address.", rich_help_panel="Contact"),
    address: str = typer.Option("", "--address", help="Postal address.", rich_help_panel="Contact"),
    website: str = typer.Option("", "--website", help="Website URL.", rich_help_panel="Contact"),
    key: str | None = typer.Option(
        None,
        "--key",
        help="Embed this verification key as qrKey (JSON payloads only).",
        rich_help_panel="Security",
    ),
    prefix: str | None = typer.Option(
        None,
        "--prefix",
        help="Prepend this marker to the encoded text.",
        rich_help_panel="Payload",
    ),
    size: int | None = typer.Option(
        None,
        "--size",
        help="Symbol size in pixels (32-2048).",
        rich_help_panel="Render",
    ),
    margin: int | None = typer.Option(
        None,
        "--margin",
        help="Quiet zone in modules (0-20).",
        rich_help_panel="Render",
    ),
    error: str | None = typer.Option(
        None,
        "--error",
        "-e",
        help="Error correction level: L, M, Q or H.",
        rich_help_panel="Render",
    ),
    dark: str | None = typer.Option(
        None,
        "--dark",
        help="Module color.",
        rich_help_panel="Render",
    ),
    light: str | None = typer.Option(
        None,
        "--light",
        help="Background color.",
        rich_help_panel="Render",
    ),
    output_format: str | None = typer.Option(
        None,
        "--format",
        "-f",
        help="Output format: png, jpeg or svg (inferred from --output when omitted).",
        rich_help_panel="Render",
    ),
    quality: int | None = typer.Option(
        None,
        "--quality",
        help="JPEG quality (1-100).",
        rich_help_panel="Render",
    ),
    module_shape: str | None = typer.Option(
        None,
        "--shape",
        help="Module shape: square or rounded (raster only).",
        rich_help_panel="Render",
    ),
    logo: str | None = typer.Option(
        None,
        "--logo",
        help="Logo image to overlay at the center.",
        rich_help_panel="Logo",
    ),
    logo_size: float | None = typer.Option(
        None,
        "--logo-size",
        help="Logo size as percent of the symbol (5-30).",
        rich_help_panel="Logo",
    ),
    output: str | None = typer.Option(
        None,
        "--output",
        "-o",
        help="Write the symbol to this file.",
        rich_help_panel="Output",
    ),
) -> None:
    debug_value = bool(_ctx_value(ctx, "debug"))

    def _run() -> None:
        config = _load_config(ctx)
        quiet = bool(_ctx_value(ctx, "quiet"))
        payload_kind = coerce_enum(PayloadKind, kind, label="--kind")
        payload = _build_payload(
            payload_kind,
            content=content,
            ssid=ssid,
            password=password,
            encryption=encryption,
            hidden=hidden,
            contact=ContactPayload(
                name=name, phone=phone, email=email, address=address, website=website
            ),
        )
        expected_key = resolve_expected_key(key)
        if expected_key is not None:
            if not isinstance(payload, JsonPayload):
                raise ValueError("--key requires a JSON payload (--kind json)")
            payload = JsonPayload(data=attach_key(payload.data, expected_key))

        symbol_format = output_format
        if symbol_format is None and output:
            inferred = format_for_path(output)
            symbol_format = inferred.value if inferred is not None else None
        options = build_render_options(
            config.encode,
            logo=_read_bytes(logo) if logo else None,
            size=size,
            margin=margin,
            error=error,
            dark=dark,
            light=light,
            format=symbol_format,
            quality=quality,
            module_shape=module_shape,
            logo_size=logo_size,
        )
        request = EncodeRequest(payload=payload, options=options, prefix=prefix or None)
        if output:
            symbol = save_symbol(output, request, infer_format=False)
            _warn_all(symbol.warnings, quiet=quiet)
            if not quiet:
                console_err.print(f"[muted]- wrote {escape(str(output))}[/muted]")
            return
        symbol = encode(request)
        _warn_all(symbol.warnings, quiet=quiet)
        if isinstance(symbol, VectorSymbol):
            sys.stdout.write(symbol.text)
        else:
            sys.stdout.write(symbol.data_uri())
        sys.stdout.write("\n")

    _run_cli(_run, debug=debug_value)


def _build_payload(
    kind: PayloadKind,
    *,
    content: str | None,
    ssid: str | None,
    password: str | None,
    encryption: str,
    hidden: bool,
    contact: ContactPayload,
) -> Payload:
    if kind is PayloadKind.WIFI:
        if not ssid:
            raise ValueError("--ssid is required for WiFi payloads")
        return WifiPayload(
            ssid=ssid,
            password=password or "",
            encryption=coerce_enum(WifiEncryption, encryption, label="--encryption"),
            hidden=hidden,
        )
    if kind is PayloadKind.CONTACT:
        if not any((contact.name, contact.phone, contact.email, contact.address, contact.website)):
            raise ValueError("contact payloads need at least one field")
        return contact

    text = _resolve_content(content)
    if kind is PayloadKind.JSON:
        try:
            data = json.loads(text)
        except json.JSONDecodeError as exc:
            raise ValueError(f"invalid JSON content: {exc}") from exc
        if not isinstance(data, dict):
            raise ValueError("JSON content must be an object")
        return JsonPayload(data=data)
    if kind is PayloadKind.URL:
        if not text.startswith(("http://", "https://")):
            raise ValueError("URL content must start with http:// or https://")
        return UrlPayload(url=text)
    return TextPayload(text=text)


def _resolve_content(content: str | None) -> str:
    if content is None:
        raise ValueError("CONTENT is required for text, json and url payloads")
    if content == "-":
        return _read_text("-").rstrip("\n")
    if not content:
        raise ValueError("CONTENT cannot be empty")
    return content
