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

"""Classify raw QR payload strings and serialize typed payloads back to them.

Classification order is fixed: JSON object, ``WIFI:`` descriptor, vCard,
http(s) URL, then plain text. The interpreter never raises; a WiFi or vCard
body that cannot be parsed is returned as plain text.
"""

from __future__ import annotations

import json
import re
from abc import ABC, abstractmethod
from collections.abc import Callable
from typing import Any, ClassVar

from ..core.errors import EncodeOptionsError
from ..core.models import (
    ContactPayload,
    JsonPayload,
    Payload,
    PayloadKind,
    TextPayload,
    UrlPayload,
    WifiEncryption,
    WifiPayload,
)

WIFI_PREFIX = "WIFI:"
VCARD_BEGIN = "BEGIN:VCARD"
VCARD_END = "END:VCARD"
VCARD_VERSION = "3.0"
URL_PREFIXES = ("http://", "https://")

_WIFI_SPECIAL = '\\;,:"'
_WIFI_ENCRYPTION_ALIASES = {
    "": WifiEncryption.NOPASS,
    "NOPASS": WifiEncryption.NOPASS,
    "NONE": WifiEncryption.NOPASS,
    "WEP": WifiEncryption.WEP,
    "WPA": WifiEncryption.WPA,
    "WPA2": WifiEncryption.WPA,
    "WPA3": WifiEncryption.WPA,
    "SAE": WifiEncryption.WPA,
}
_VCARD_FIELDS = {
    "FN": "name",
    "TEL": "phone",
    "EMAIL": "email",
    "ADR": "address",
    "URL": "website",
}
_VCARD_LINE_RE = re.compile(r"\r\n|\r|\n")


class MalformedPayload(ValueError):
    """Raised by grammar parsers; the interpreter downgrades it to plain text."""


class PayloadGrammar(ABC):
    """Strategy interface for one structured QR payload grammar."""

    kind: ClassVar[PayloadKind]

    @abstractmethod
    def matches(self, raw: str) -> bool:
        """Return True when raw looks like this grammar."""
        ...

    @abstractmethod
    def parse(self, raw: str) -> Payload:
        """Parse raw into a payload, raising MalformedPayload on bad bodies."""
        ...


class JsonGrammar(PayloadGrammar):
    kind = PayloadKind.JSON

    def matches(self, raw: str) -> bool:
        return True

    def parse(self, raw: str) -> Payload:
        try:
            value = json.loads(raw, parse_constant=_reject_constant)
        except ValueError as exc:
            raise MalformedPayload("payload is not strict JSON") from exc
        if not isinstance(value, dict):
            raise MalformedPayload("JSON payload is not an object")
        return JsonPayload(data=value)


class WifiGrammar(PayloadGrammar):
    kind = PayloadKind.WIFI

    def matches(self, raw: str) -> bool:
        return raw.startswith(WIFI_PREFIX)

    def parse(self, raw: str) -> Payload:
        fields = _parse_wifi_fields(raw[len(WIFI_PREFIX) :])
        ssid = fields.get("S")
        if not ssid:
            raise MalformedPayload("WIFI payload has no SSID")
        encryption_value = fields.get("T", "").strip().upper()
        encryption = _WIFI_ENCRYPTION_ALIASES.get(encryption_value)
        if encryption is None:
            raise MalformedPayload(f"unknown WIFI encryption: {fields.get('T')}")
        return WifiPayload(
            ssid=ssid,
            password=fields.get("P", ""),
            encryption=encryption,
            hidden=_parse_wifi_hidden(fields.get("H")),
        )


class VcardGrammar(PayloadGrammar):
    kind = PayloadKind.CONTACT

    def matches(self, raw: str) -> bool:
        return raw.startswith(VCARD_BEGIN)

    def parse(self, raw: str) -> Payload:
        values: dict[str, str] = {}
        lines = _VCARD_LINE_RE.split(raw)
        if lines[0].strip().upper() != VCARD_BEGIN:
            raise MalformedPayload("vCard does not start with BEGIN:VCARD")
        for line in lines[1:]:
            if line.strip().upper() == VCARD_END:
                return ContactPayload(**values)
            name, sep, value = line.partition(":")
            if not sep:
                continue
            prop = name.split(";", 1)[0].strip().upper()
            attr = _VCARD_FIELDS.get(prop)
            if attr is not None and attr not in values:
                values[attr] = _vcard_unescape(value)
        raise MalformedPayload("vCard has no END:VCARD line")


class UrlGrammar(PayloadGrammar):
    kind = PayloadKind.URL

    def matches(self, raw: str) -> bool:
        return raw.startswith(URL_PREFIXES)

    def parse(self, raw: str) -> Payload:
        return UrlPayload(url=raw)


_GRAMMARS: tuple[PayloadGrammar, ...] = (
    JsonGrammar(),
    WifiGrammar(),
    VcardGrammar(),
    UrlGrammar(),
)


def interpret_payload(raw: str) -> Payload:
    """Classify and parse a decoded QR string. Never raises."""
    for grammar in _GRAMMARS:
        if not grammar.matches(raw):
            continue
        try:
            return grammar.parse(raw)
        except MalformedPayload:
            if grammar.kind is PayloadKind.JSON:
                continue
            return TextPayload(text=raw)
    return TextPayload(text=raw)


def serialize_payload(payload: Payload) -> str:
    """Serialize a payload to the string form the interpreter reads back."""
    serializer = _SERIALIZERS.get(type(payload))
    if serializer is None:
        raise TypeError(f"unsupported payload type: {type(payload).__name__}")
    return serializer(payload)


def split_prefix(raw: str, prefix: str | None) -> tuple[str, bool]:
    """Strip prefix from raw when present; returns (body, prefix_present)."""
    if not prefix:
        return raw, False
    if raw.startswith(prefix):
        return raw[len(prefix) :], True
    return raw, False


def describe_payload(payload: Payload) -> list[tuple[str, str]]:
    rows: list[tuple[str, str]] = [("Type", payload.kind.value)]
    if isinstance(payload, TextPayload):
        rows.append(("Text", payload.text))
    elif isinstance(payload, UrlPayload):
        rows.append(("URL", payload.url))
    elif isinstance(payload, JsonPayload):
        rows.append(("Content", json.dumps(payload.data, indent=2, ensure_ascii=False)))
    elif isinstance(payload, WifiPayload):
        rows.extend(
            [
                ("SSID", payload.ssid),
                ("Encryption", payload.encryption.value),
                ("Password", payload.password),
                ("Hidden", str(payload.hidden).lower()),
            ]
        )
    elif isinstance(payload, ContactPayload):
        rows.extend(
            [
                ("Name", payload.name),
                ("Phone", payload.phone),
                ("Email", payload.email),
                ("Address", payload.address),
                ("Website", payload.website),
            ]
        )
    return rows


def _serialize_text(payload: TextPayload) -> str:
    return payload.text


def _serialize_url(payload: UrlPayload) -> str:
    return payload.url


def _serialize_json(payload: JsonPayload) -> str:
    try:
        return json.dumps(
            payload.data,
            sort_keys=True,
            separators=(",", ":"),
            ensure_ascii=False,
            allow_nan=False,
        )
    except (TypeError, ValueError) as exc:
        raise EncodeOptionsError(f"JSON payload is not encodable: {exc}") from exc


def _serialize_wifi(payload: WifiPayload) -> str:
    if not payload.ssid:
        raise EncodeOptionsError("WiFi payload needs a non-empty SSID")
    hidden = "true" if payload.hidden else "false"
    return (
        f"{WIFI_PREFIX}S:{_wifi_escape(payload.ssid)};"
        f"T:{payload.encryption.value};"
        f"P:{_wifi_escape(payload.password)};"
        f"H:{hidden};;"
    )


def _serialize_contact(payload: ContactPayload) -> str:
    lines = [
        VCARD_BEGIN,
        f"VERSION:{VCARD_VERSION}",
        f"FN:{_vcard_escape(payload.name)}",
        f"TEL:{_vcard_escape(payload.phone)}",
        f"EMAIL:{_vcard_escape(payload.email)}",
        f"ADR:{_vcard_escape(payload.address)}",
        f"URL:{_vcard_escape(payload.website)}",
        VCARD_END,
    ]
    return "\n".join(lines)


_SERIALIZERS: dict[type, Callable[[Any], str]] = {
    TextPayload: _serialize_text,
    UrlPayload: _serialize_url,
    JsonPayload: _serialize_json,
    WifiPayload: _serialize_wifi,
    ContactPayload: _serialize_contact,
}


def _reject_constant(name: str) -> Any:
    raise ValueError(f"non-standard JSON constant: {name}")


def _parse_wifi_fields(body: str) -> dict[str, str]:
    fields: dict[str, str] = {}
    index = 0
    length = len(body)
    while index < length:
        if body.startswith(";", index):
            if index == length - 1:
                return fields
            raise MalformedPayload("unexpected ';' in WIFI payload")
        key, sep, _rest = body[index:].partition(":")
        if not sep or not key or ";" in key:
            raise MalformedPayload("WIFI field is missing a ':' separator")
        index += len(key) + 1
        value_chars: list[str] = []
        while True:
            if index >= length:
                raise MalformedPayload("WIFI payload is not terminated by ';;'")
            char = body[index]
            if char == "\\" and index + 1 < length:
                value_chars.append(body[index + 1])
                index += 2
                continue
            if char == ";":
                index += 1
                break
            value_chars.append(char)
            index += 1
        fields.setdefault(key.strip().upper(), "".join(value_chars))
    raise MalformedPayload("WIFI payload is not terminated by ';;'")


def _parse_wifi_hidden(value: str | None) -> bool:
    if value is None:
        return False
    normalized = value.strip().lower()
    if normalized in {"", "false"}:
        return False
    if normalized == "true":
        return True
    raise MalformedPayload(f"invalid WIFI hidden flag: {value}")


def _wifi_escape(value: str) -> str:
    return "".join(f"\\{char}" if char in _WIFI_SPECIAL else char for char in value)


def _vcard_escape(value: str) -> str:
    escaped = value.replace("\\", "\\\\")
    return _VCARD_LINE_RE.sub("\\\\n", escaped)


def _vcard_unescape(value: str) -> str:
    out: list[str] = []
    index = 0
    while index < len(value):
        char = value[index]
        if char == "\\" and index + 1 < len(value):
            nxt = value[index + 1]
            out.append("\n" if nxt in "nN" else nxt)
            index += 2
            continue
        out.append(char)
        index += 1
    return "".join(out)
