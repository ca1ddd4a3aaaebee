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
from rich.markup import escape

from ...config import init_user_config, load_app_config, resolve_config_path
from ..core.common import _ctx_value, _run_cli
from ..ui import build_kv_table, console, panel

_CONFIG_HELP = (
    "Show the active TOML config.\n\n"
    "Examples:\n"
    "  qrtoolkit config\n"
    "  qrtoolkit config --init\n"
    "  qrtoolkit config --print-path\n"
    "  qrtoolkit --config ./my_config.toml config\n"
)


def register(app: typer.Typer) -> None:
    app.command(help=_CONFIG_HELP)(config)


def config(
    ctx: typer.Context,
    init: bool = typer.Option(
        False,
        "--init",
        help="Copy the packaged defaults to the user config directory.",
        rich_help_panel="Behavior",
    ),
    print_path: bool = typer.Option(
        False,
        "--print-path",
        help="Print the resolved config path and exit.",
        rich_help_panel="Behavior",
    ),
) -> None:
    config_value = _ctx_value(ctx, "config")
    debug_value = bool(_ctx_value(ctx, "debug"))

    def _run() -> None:
        if init:
            path = init_user_config()
            console.print(f"User config ready at {escape(str(path))}", highlight=False)
            return
        path = resolve_config_path(config_value)
        if print_path:
            console.print(str(path), markup=False, highlight=False, soft_wrap=True)
            return
        loaded = load_app_config(path)
        timeout = loaded.network.timeout
        rows = [
            ("Path", str(path)),
            ("Encode", _describe(loaded.encode)),
            ("Decode", _describe(loaded.decode)),
            ("Network timeout", "none" if timeout is None else f"{timeout:g}s"),
            ("User agent", loaded.network.user_agent),
            ("Jobs", str(loaded.runtime.jobs or "auto")),
        ]
        console.print(panel("Config", build_kv_table(rows)))

    _run_cli(_run, debug=debug_value)


def _describe(section: object) -> str:
    parts = []
    for name, value in vars(section).items():
        if hasattr(value, "value"):
            value = value.value
        parts.append(f"{name}={value}")
    return ", ".join(parts)
