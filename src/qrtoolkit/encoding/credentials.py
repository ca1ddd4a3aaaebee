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
from collections.abc import Callable, Mapping
from typing import Any

from ..core.models import (
    ApiKeyCredential,
    BasicAuthCredential,
    CredentialFormat,
    CredentialMode,
    CredentialShape,
    CustomCredential,
    JsonPayload,
    OAuth2Credential,
)
from ..crypto.verification import attach_key


def detect_credential_mode(data: Mapping[str, Any]) -> CredentialMode:
    """Field-presence heuristic used by auto mode."""
    if "username" in data and "password" in data:
        return CredentialMode.BASIC_AUTH
    if "apiKey" in data:
        return CredentialMode.API_KEY
    if "accessToken" in data or "refreshToken" in data:
        return CredentialMode.OAUTH2
    return CredentialMode.CUSTOM


def classify_credential(
    data: Mapping[str, Any],
    mode: CredentialMode = CredentialMode.AUTO,
) -> CredentialShape:
    """Normalize a JSON mapping into a credential shape. Never raises."""
    if mode is CredentialMode.AUTO:
        mode = detect_credential_mode(data)
    builder = _BUILDERS.get(mode, _build_custom)
    return builder(data)


def credential_to_dict(
    shape: CredentialShape,
    credential_format: CredentialFormat = CredentialFormat.BARE,
) -> dict[str, Any]:
    if isinstance(shape, CustomCredential):
        if credential_format is CredentialFormat.ENVELOPE:
            return {"type": shape.kind.value, "data": dict(shape.data)}
        return dict(shape.data)
    fields = _credential_fields(shape)
    if credential_format is CredentialFormat.ENVELOPE:
        return {"type": shape.kind.value, **fields}
    return fields


def credential_payload(shape: CredentialShape, *, key: str | None = None) -> JsonPayload:
    """Build the JSON payload a generator encodes for a credential shape."""
    data = credential_to_dict(shape, CredentialFormat.BARE)
    if key is not None:
        data = attach_key(data, key)
    return JsonPayload(data=data)


def _credential_fields(shape: CredentialShape) -> dict[str, Any]:
    if isinstance(shape, BasicAuthCredential):
        return {"username": shape.username, "password": shape.password}
    if isinstance(shape, ApiKeyCredential):
        return {"apiKey": shape.api_key, "name": shape.name}
    if isinstance(shape, OAuth2Credential):
        return {
            "accessToken": shape.access_token,
            "refreshToken": shape.refresh_token,
            "expiresIn": shape.expires_in,
        }
    raise TypeError(f"unsupported credential shape: {type(shape).__name__}")


def _build_basic_auth(data: Mapping[str, Any]) -> CredentialShape:
    return BasicAuthCredential(
        username=_text(data.get("username")),
        password=_text(data.get("password")),
    )


def _build_api_key(data: Mapping[str, Any]) -> CredentialShape:
    return ApiKeyCredential(
        api_key=_text(data.get("apiKey")),
        name=_text(data.get("name")),
    )


def _build_oauth2(data: Mapping[str, Any]) -> CredentialShape:
    return OAuth2Credential(
        access_token=_text(data.get("accessToken")),
        refresh_token=_text(data.get("refreshToken")),
        expires_in=_number(data.get("expiresIn")),
    )


def _build_custom(data: Mapping[str, Any]) -> CredentialShape:
    return CustomCredential(data=dict(data))


_BUILDERS: dict[CredentialMode, Callable[[Mapping[str, Any]], CredentialShape]] = {
    CredentialMode.BASIC_AUTH: _build_basic_auth,
    CredentialMode.API_KEY: _build_api_key,
    CredentialMode.OAUTH2: _build_oauth2,
    CredentialMode.CUSTOM: _build_custom,
}


def _text(value: object) -> str:
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    return json.dumps(value, sort_keys=True, ensure_ascii=False)


def _number(value: object) -> int | float:
    if isinstance(value, bool) or value is None:
        return 0
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        if value != value or value in (float("inf"), float("-inf")):
            return 0
        return int(value) if value.is_integer() else value
    if isinstance(value, str):
        text = value.strip()
        try:
            return int(text)
        except ValueError:
            pass
        try:
            parsed = float(text)
        except ValueError:
            return 0
        if parsed != parsed or parsed in (float("inf"), float("-inf")):
            return 0
        return int(parsed) if parsed.is_integer() else parsed
    return 0
