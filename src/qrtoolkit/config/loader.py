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

import os
import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Literal

from ..core.bounds import (
    DEFAULT_JPEG_QUALITY,
    DEFAULT_LOGO_PERCENT,
    DEFAULT_MARGIN,
    DEFAULT_SCAN_DIMENSION,
    DEFAULT_SYMBOL_SIZE,
)
from ..core.models import (
    Color,
    CredentialFormat,
    CredentialMode,
    DecodeOptions,
    ErrorCorrection,
    InversionMode,
    LogoOverlay,
    ModuleShape,
    RenderOptions,
    SymbolFormat,
    coerce_enum,
)
from .installer import KEY_ENV, resolve_config_path

DEFAULT_TIMEOUT = 30.0
DEFAULT_USER_AGENT = "qrtoolkit"


@dataclass(frozen=True)
class EncodeDefaults:
    size: int = DEFAULT_SYMBOL_SIZE
    margin: int = DEFAULT_MARGIN
    error: ErrorCorrection = ErrorCorrection.M
    dark: Color = "#000000"
    light: Color = "#ffffff"
    format: SymbolFormat = SymbolFormat.PNG
    quality: int = DEFAULT_JPEG_QUALITY
    module_shape: ModuleShape = ModuleShape.SQUARE
    logo_size: float = DEFAULT_LOGO_PERCENT


@dataclass(frozen=True)
class DecodeDefaults:
    max_width: int = DEFAULT_SCAN_DIMENSION
    max_height: int = DEFAULT_SCAN_DIMENSION
    credential_mode: CredentialMode | None = None
    credential_format: CredentialFormat = CredentialFormat.BARE
    prefix: str | None = None
    strict_prefix: bool = False
    inversion: InversionMode = InversionMode.BOTH
    metadata: bool = False


@dataclass(frozen=True)
class NetworkDefaults:
    timeout: float | None = DEFAULT_TIMEOUT
    user_agent: str = DEFAULT_USER_AGENT


@dataclass(frozen=True)
class RuntimeDefaults:
    jobs: int | Literal["auto"] | None = None


@dataclass(frozen=True)
class UiDefaults:
    quiet: bool = False
    no_color: bool = False


@dataclass(frozen=True)
class AppConfig:
    path: Path | None = None
    encode: EncodeDefaults = field(default_factory=EncodeDefaults)
    decode: DecodeDefaults = field(default_factory=DecodeDefaults)
    network: NetworkDefaults = field(default_factory=NetworkDefaults)
    runtime: RuntimeDefaults = field(default_factory=RuntimeDefaults)
    ui: UiDefaults = field(default_factory=UiDefaults)


def load_app_config(path: str | Path | None = None) -> AppConfig:
    config_path = resolve_config_path(path)
    data = _load_toml(config_path)
    return parse_app_config(data, path=config_path)


def parse_app_config(data: dict[str, object], *, path: Path | None = None) -> AppConfig:
    return AppConfig(
        path=path,
        encode=_parse_encode_defaults(_get_dict(data, "encode")),
        decode=_parse_decode_defaults(_get_dict(data, "decode")),
        network=_parse_network_defaults(_get_dict(data, "network")),
        runtime=_parse_runtime_defaults(_get_dict(data, "runtime")),
        ui=_parse_ui_defaults(_get_dict(data, "ui")),
    )


def build_render_options(
    defaults: EncodeDefaults,
    *,
    logo: bytes | None = None,
    **overrides: object,
) -> RenderOptions:
    """Merge config defaults with explicit overrides; None overrides are ignored."""
    values: dict[str, object] = {
        "size": defaults.size,
        "margin": defaults.margin,
        "error": defaults.error,
        "dark": defaults.dark,
        "light": defaults.light,
        "format": defaults.format,
        "quality": defaults.quality,
        "module_shape": defaults.module_shape,
    }
    logo_size = overrides.pop("logo_size", None)
    values.update({key: value for key, value in overrides.items() if value is not None})
    if logo is not None:
        size_percentage = defaults.logo_size if logo_size is None else logo_size
        values["logo"] = LogoOverlay(image=logo, size_percentage=size_percentage)
    return RenderOptions(**values)


def build_decode_options(
    defaults: DecodeDefaults,
    *,
    expected_key: str | None = None,
    **overrides: object,
) -> DecodeOptions:
    values: dict[str, object] = {
        "max_width": defaults.max_width,
        "max_height": defaults.max_height,
        "credential_mode": defaults.credential_mode,
        "credential_format": defaults.credential_format,
        "prefix": defaults.prefix,
        "strict_prefix": defaults.strict_prefix,
        "inversion": defaults.inversion,
        "include_metadata": defaults.metadata,
    }
    values.update({key: value for key, value in overrides.items() if value is not None})
    return DecodeOptions(expected_key=expected_key, **values)


def resolve_expected_key(value: str | None) -> str | None:
    """Key from the command line, else from the environment; empty means none."""
    if value:
        return value
    env_value = os.environ.get(KEY_ENV, "")
    return env_value or None


def _parse_encode_defaults(cfg: dict[str, object]) -> EncodeDefaults:
    return EncodeDefaults(
        size=_parse_int(cfg.get("size"), field="encode.size", default=DEFAULT_SYMBOL_SIZE),
        margin=_parse_int(cfg.get("margin"), field="encode.margin", default=DEFAULT_MARGIN),
        error=_parse_enum(
            ErrorCorrection, cfg.get("error"), field="encode.error", default=ErrorCorrection.M
        ),
        dark=_parse_color(cfg.get("dark"), field="encode.dark", default="#000000"),
        light=_parse_color(cfg.get("light"), field="encode.light", default="#ffffff"),
        format=_parse_enum(
            SymbolFormat, cfg.get("format"), field="encode.format", default=SymbolFormat.PNG
        ),
        quality=_parse_int(
            cfg.get("quality"), field="encode.quality", default=DEFAULT_JPEG_QUALITY
        ),
        module_shape=_parse_enum(
            ModuleShape,
            cfg.get("module_shape"),
            field="encode.module_shape",
            default=ModuleShape.SQUARE,
        ),
        logo_size=_parse_float(
            cfg.get("logo_size"), field="encode.logo_size", default=DEFAULT_LOGO_PERCENT
        ),
    )


def _parse_decode_defaults(cfg: dict[str, object]) -> DecodeDefaults:
    mode_value = _parse_optional_unset_str(
        cfg.get("credential_mode"), field="decode.credential_mode"
    )
    return DecodeDefaults(
        max_width=_parse_int(
            cfg.get("max_width"), field="decode.max_width", default=DEFAULT_SCAN_DIMENSION
        ),
        max_height=_parse_int(
            cfg.get("max_height"), field="decode.max_height", default=DEFAULT_SCAN_DIMENSION
        ),
        credential_mode=(
            None
            if mode_value is None
            else _parse_enum(
                CredentialMode, mode_value, field="decode.credential_mode", default=None
            )
        ),
        credential_format=_parse_enum(
            CredentialFormat,
            cfg.get("credential_format"),
            field="decode.credential_format",
            default=CredentialFormat.BARE,
        ),
        prefix=_parse_optional_unset_str(cfg.get("prefix"), field="decode.prefix"),
        strict_prefix=_parse_bool(
            cfg.get("strict_prefix"), field="decode.strict_prefix", default=False
        ),
        inversion=_parse_enum(
            InversionMode,
            cfg.get("inversion"),
            field="decode.inversion",
            default=InversionMode.BOTH,
        ),
        metadata=_parse_bool(cfg.get("metadata"), field="decode.metadata", default=False),
    )


def _parse_network_defaults(cfg: dict[str, object]) -> NetworkDefaults:
    timeout = _parse_float(cfg.get("timeout"), field="network.timeout", default=DEFAULT_TIMEOUT)
    if timeout < 0:
        raise ValueError("network.timeout must be 0 or a positive number")
    user_agent = _parse_optional_unset_str(cfg.get("user_agent"), field="network.user_agent")
    return NetworkDefaults(
        timeout=None if timeout == 0 else timeout,
        user_agent=user_agent or DEFAULT_USER_AGENT,
    )


def _parse_runtime_defaults(cfg: dict[str, object]) -> RuntimeDefaults:
    return RuntimeDefaults(jobs=parse_jobs(cfg.get("jobs"), field="runtime.jobs"))


def _parse_ui_defaults(cfg: dict[str, object]) -> UiDefaults:
    return UiDefaults(
        quiet=_parse_bool(cfg.get("quiet"), field="ui.quiet", default=False),
        no_color=_parse_bool(cfg.get("no_color"), field="ui.no_color", default=False),
    )


def parse_jobs(value: object, *, field: str) -> int | Literal["auto"] | None:
    if value is None:
        return None
    if isinstance(value, str):
        normalized = value.strip().lower()
        if not normalized:
            return None
        if normalized == "auto":
            return "auto"
        parsed = _parse_int_strict(normalized, field=field)
        if parsed <= 0:
            raise ValueError(f"{field} must be 'auto' or a positive integer")
        return parsed
    parsed = _parse_int_strict(value, field=field)
    if parsed <= 0:
        raise ValueError(f"{field} must be 'auto' or a positive integer")
    return parsed


def _load_toml(path: Path) -> dict[str, object]:
    with path.open("rb") as handle:
        return tomllib.load(handle)


def _get_dict(data: dict[str, object], key: str) -> dict[str, object]:
    value = data.get(key)
    if isinstance(value, dict):
        return value
    return {}


def _parse_optional_unset_str(value: object, *, field: str) -> str | None:
    if value is None:
        return None
    if not isinstance(value, str):
        raise ValueError(f"{field} must be a string")
    normalized = value.strip()
    return normalized or None


def _parse_enum(enum_cls, value: object, *, field: str, default):
    if value is None:
        return default
    if isinstance(value, str) and not value.strip():
        return default
    return coerce_enum(enum_cls, value, label=field)


def _parse_bool(value: object, *, field: str, default: bool) -> bool:
    if value is None:
        return default
    if isinstance(value, bool):
        return value
    if isinstance(value, int):
        if value in (0, 1):
            return bool(value)
        raise ValueError(f"{field} must be a boolean")
    if isinstance(value, str):
        normalized = value.strip().lower()
        if normalized in {"1", "true", "yes", "on"}:
            return True
        if normalized in {"0", "false", "no", "off"}:
            return False
        raise ValueError(f"{field} must be a boolean")
    raise ValueError(f"{field} must be a boolean")


def _parse_int(value: object, *, field: str, default: int) -> int:
    if value is None:
        return default
    return _parse_int_strict(value, field=field)


def _parse_int_strict(value: object, *, field: str) -> int:
    if isinstance(value, bool):
        raise ValueError(f"{field} must be an integer")
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        if not value.is_integer():
            raise ValueError(f"{field} must be an integer")
        return int(value)
    if isinstance(value, str):
        text = value.strip()
        if not text:
            raise ValueError(f"{field} must be an integer")
        try:
            return int(text)
        except ValueError as exc:
            raise ValueError(f"{field} must be an integer") from exc
    raise ValueError(f"{field} must be an integer")


def _parse_float(value: object, *, field: str, default: float) -> float:
    if value is None:
        return default
    if isinstance(value, bool):
        raise ValueError(f"{field} must be a number")
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        try:
            return float(value.strip())
        except ValueError as exc:
            raise ValueError(f"{field} must be a number") from exc
    raise ValueError(f"{field} must be a number")


def _parse_color(value: object, *, field: str, default: Color) -> Color:
    if value is None:
        return default
    if isinstance(value, str):
        text = value.strip()
        return text or default
    if isinstance(value, (list, tuple)):
        if len(value) == 3:
            return (int(value[0]), int(value[1]), int(value[2]))
        if len(value) == 4:
            return (int(value[0]), int(value[1]), int(value[2]), int(value[3]))
    raise ValueError(f"{field} must be a color string or an RGB(A) list")
