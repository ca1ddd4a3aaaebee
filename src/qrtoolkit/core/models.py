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
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, ClassVar, TypeVar, Union

from .bounds import (
    DEFAULT_JPEG_QUALITY,
    DEFAULT_LOGO_PERCENT,
    DEFAULT_MARGIN,
    DEFAULT_SCAN_DIMENSION,
    DEFAULT_SYMBOL_SIZE,
    MAX_JPEG_QUALITY,
    MAX_LOGO_PERCENT,
    MAX_MARGIN,
    MAX_SCAN_DIMENSION,
    MAX_SYMBOL_SIZE,
    MIN_JPEG_QUALITY,
    MIN_LOGO_PERCENT,
    MIN_MARGIN,
    MIN_SCAN_DIMENSION,
    MIN_SYMBOL_SIZE,
    SCAN_CHANNELS,
)
from .errors import EncodeOptionsError
from .validation import require_color, require_int_range, require_number_range

_E = TypeVar("_E", bound=Enum)

Color = Union[str, tuple[int, int, int], tuple[int, int, int, int]]


class PayloadKind(str, Enum):
    TEXT = "text"
    JSON = "json"
    WIFI = "wifi"
    CONTACT = "contact"
    URL = "url"


class WifiEncryption(str, Enum):
    WPA = "WPA"
    WEP = "WEP"
    NOPASS = "nopass"


class ErrorCorrection(str, Enum):
    L = "L"
    M = "M"
    Q = "Q"
    H = "H"


class SymbolFormat(str, Enum):
    PNG = "png"
    JPEG = "jpeg"
    SVG = "svg"

    @property
    def is_raster(self) -> bool:
        return self is not SymbolFormat.SVG

    @property
    def mime_type(self) -> str:
        return _MIME_TYPES[self]


_MIME_TYPES = {
    SymbolFormat.PNG: "image/png",
    SymbolFormat.JPEG: "image/jpeg",
    SymbolFormat.SVG: "image/svg+xml",
}


class ModuleShape(str, Enum):
    SQUARE = "square"
    ROUNDED = "rounded"


class InversionMode(str, Enum):
    NORMAL = "normal"
    INVERTED = "inverted"
    BOTH = "both"


class VerificationStatus(str, Enum):
    NOT_REQUIRED = "not_required"
    PASSED = "passed"
    FAILED = "failed"


class VerificationReason(str, Enum):
    KEY_FIELD_MISSING = "key_field_missing"
    KEY_MISMATCH = "key_mismatch"
    PAYLOAD_NOT_STRUCTURED = "payload_not_structured"
    PREFIX_MISSING = "prefix_missing"


class CredentialMode(str, Enum):
    AUTO = "auto"
    BASIC_AUTH = "basicAuth"
    API_KEY = "apiKey"
    OAUTH2 = "oauth2"
    CUSTOM = "custom"


class CredentialFormat(str, Enum):
    BARE = "bare"
    ENVELOPE = "envelope"


def coerce_enum(enum_cls: type[_E], value: object, *, label: str, error=ValueError) -> _E:
    if isinstance(value, enum_cls):
        return value
    if isinstance(value, str):
        text = value.strip()
        for member in enum_cls:
            if text == member.value or text.lower() == str(member.value).lower():
                return member
    choices = ", ".join(str(member.value) for member in enum_cls)
    raise error(f"{label} must be one of: {choices}")


# --- raster and geometry -----------------------------------------------------


@dataclass(frozen=True)
class ImageBuffer:
    width: int
    height: int
    pixels: bytes
    channels: int = SCAN_CHANNELS

    def __post_init__(self) -> None:
        if self.channels != SCAN_CHANNELS:
            raise ValueError(f"image buffer must have {SCAN_CHANNELS} channels")
        if self.width <= 0 or self.height <= 0:
            raise ValueError("image buffer dimensions must be positive")
        expected = self.width * self.height * self.channels
        if len(self.pixels) != expected:
            raise ValueError(
                f"image buffer holds {len(self.pixels)} bytes, expected {expected}"
            )


@dataclass(frozen=True)
class Point:
    x: int
    y: int

    def to_dict(self) -> dict[str, int]:
        return {"x": self.x, "y": self.y}


@dataclass(frozen=True)
class SymbolGeometry:
    top_left: Point
    top_right: Point
    bottom_right: Point
    bottom_left: Point

    def to_dict(self) -> dict[str, dict[str, int]]:
        return {
            "topLeftCorner": self.top_left.to_dict(),
            "topRightCorner": self.top_right.to_dict(),
            "bottomRightCorner": self.bottom_right.to_dict(),
            "bottomLeftCorner": self.bottom_left.to_dict(),
        }


@dataclass(frozen=True)
class DecodedSymbol:
    text: str
    geometry: SymbolGeometry | None = None


# --- payloads ----------------------------------------------------------------


@dataclass(frozen=True)
class TextPayload:
    kind: ClassVar[PayloadKind] = PayloadKind.TEXT
    text: str

    def to_dict(self) -> dict[str, object]:
        return {"type": self.kind.value, "text": self.text}


@dataclass(frozen=True)
class JsonPayload:
    kind: ClassVar[PayloadKind] = PayloadKind.JSON
    data: dict[str, Any]

    def to_dict(self) -> dict[str, object]:
        return {"type": self.kind.value, "data": self.data}


@dataclass(frozen=True)
class WifiPayload:
    kind: ClassVar[PayloadKind] = PayloadKind.WIFI
    ssid: str
    password: str = ""
    encryption: WifiEncryption = WifiEncryption.WPA
    hidden: bool = False

    def to_dict(self) -> dict[str, object]:
        return {
            "type": self.kind.value,
            "ssid": self.ssid,
            "password": self.password,
            "encryption": self.encryption.value,
            "hidden": self.hidden,
        }


@dataclass(frozen=True)
class ContactPayload:
    kind: ClassVar[PayloadKind] = PayloadKind.CONTACT
    name: str = ""
    phone: str = ""
    email: str = ""
    address: str = ""
    website: str = ""

    def to_dict(self) -> dict[str, object]:
        return {
            "type": self.kind.value,
            "name": self.name,
            "phone": self.phone,
            "email": self.email,
            "address": self.address,
            "website": self.website,
        }


@dataclass(frozen=True)
class UrlPayload:
    kind: ClassVar[PayloadKind] = PayloadKind.URL
    url: str

    def to_dict(self) -> dict[str, object]:
        return {"type": self.kind.value, "url": self.url}


Payload = Union[TextPayload, JsonPayload, WifiPayload, ContactPayload, UrlPayload]


# --- verification ------------------------------------------------------------


@dataclass(frozen=True)
class VerificationOutcome:
    status: VerificationStatus
    payload: Payload | None = None
    reason: VerificationReason | None = None

    @classmethod
    def not_required(cls, payload: Payload) -> VerificationOutcome:
        return cls(status=VerificationStatus.NOT_REQUIRED, payload=payload)

    @classmethod
    def passed(cls, payload: Payload) -> VerificationOutcome:
        return cls(status=VerificationStatus.PASSED, payload=payload)

    @classmethod
    def failed(cls, reason: VerificationReason) -> VerificationOutcome:
        return cls(status=VerificationStatus.FAILED, reason=reason)

    @property
    def released(self) -> bool:
        return self.status is not VerificationStatus.FAILED

    def to_dict(self) -> dict[str, object]:
        data: dict[str, object] = {"status": self.status.value}
        if self.reason is not None:
            data["reason"] = self.reason.value
        return data


# --- credentials -------------------------------------------------------------


@dataclass(frozen=True)
class BasicAuthCredential:
    kind: ClassVar[CredentialMode] = CredentialMode.BASIC_AUTH
    username: str = ""
    password: str = ""


@dataclass(frozen=True)
class ApiKeyCredential:
    kind: ClassVar[CredentialMode] = CredentialMode.API_KEY
    api_key: str = ""
    name: str = ""


@dataclass(frozen=True)
class OAuth2Credential:
    kind: ClassVar[CredentialMode] = CredentialMode.OAUTH2
    access_token: str = ""
    refresh_token: str = ""
    expires_in: int | float = 0


@dataclass(frozen=True)
class CustomCredential:
    kind: ClassVar[CredentialMode] = CredentialMode.CUSTOM
    data: dict[str, Any] = field(default_factory=dict)


CredentialShape = Union[BasicAuthCredential, ApiKeyCredential, OAuth2Credential, CustomCredential]


# --- encode ------------------------------------------------------------------


@dataclass(frozen=True)
class LogoOverlay:
    image: bytes
    size_percentage: float = DEFAULT_LOGO_PERCENT

    def __post_init__(self) -> None:
        require_number_range(
            self.size_percentage,
            min_val=MIN_LOGO_PERCENT,
            max_val=MAX_LOGO_PERCENT,
            label="logo size percentage",
            error=EncodeOptionsError,
        )


@dataclass(frozen=True)
class RenderOptions:
    size: int = DEFAULT_SYMBOL_SIZE
    margin: int = DEFAULT_MARGIN
    error: ErrorCorrection = ErrorCorrection.M
    dark: Color = "#000000"
    light: Color = "#ffffff"
    format: SymbolFormat = SymbolFormat.PNG
    quality: int = DEFAULT_JPEG_QUALITY
    module_shape: ModuleShape = ModuleShape.SQUARE
    logo: LogoOverlay | None = None

    def __post_init__(self) -> None:
        require_int_range(
            self.size,
            min_val=MIN_SYMBOL_SIZE,
            max_val=MAX_SYMBOL_SIZE,
            label="size",
            error=EncodeOptionsError,
        )
        require_int_range(
            self.margin,
            min_val=MIN_MARGIN,
            max_val=MAX_MARGIN,
            label="margin",
            error=EncodeOptionsError,
        )
        require_int_range(
            self.quality,
            min_val=MIN_JPEG_QUALITY,
            max_val=MAX_JPEG_QUALITY,
            label="quality",
            error=EncodeOptionsError,
        )
        object.__setattr__(
            self,
            "error",
            coerce_enum(ErrorCorrection, self.error, label="error", error=EncodeOptionsError),
        )
        object.__setattr__(
            self,
            "format",
            coerce_enum(SymbolFormat, self.format, label="format", error=EncodeOptionsError),
        )
        object.__setattr__(
            self,
            "module_shape",
            coerce_enum(
                ModuleShape, self.module_shape, label="module_shape", error=EncodeOptionsError
            ),
        )
        require_color(self.dark, label="dark", error=EncodeOptionsError)
        require_color(self.light, label="light", error=EncodeOptionsError)
        if self.module_shape is not ModuleShape.SQUARE and not self.format.is_raster:
            raise EncodeOptionsError("custom module shapes are only supported for raster output")
        if self.logo is not None and not isinstance(self.logo, LogoOverlay):
            raise EncodeOptionsError("logo must be a LogoOverlay")


@dataclass(frozen=True)
class EncodeRequest:
    payload: Payload
    options: RenderOptions = field(default_factory=RenderOptions)
    prefix: str | None = None


@dataclass(frozen=True)
class RasterSymbol:
    data: bytes
    mime_type: str
    width: int
    height: int
    warnings: tuple[str, ...] = ()
    has_logo: bool = False

    def data_uri(self) -> str:
        encoded = base64.b64encode(self.data).decode("ascii")
        return f"data:{self.mime_type};base64,{encoded}"

    def to_dict(self) -> dict[str, object]:
        return {
            "data": base64.b64encode(self.data).decode("ascii"),
            "mimeType": self.mime_type,
            "width": self.width,
            "height": self.height,
            "warnings": list(self.warnings),
            "hasLogo": self.has_logo,
        }


@dataclass(frozen=True)
class VectorSymbol:
    text: str
    width: int
    height: int
    mime_type: str = "image/svg+xml"
    warnings: tuple[str, ...] = ()
    has_logo: bool = False

    def to_dict(self) -> dict[str, object]:
        return {
            "text": self.text,
            "mimeType": self.mime_type,
            "width": self.width,
            "height": self.height,
            "warnings": list(self.warnings),
            "hasLogo": self.has_logo,
        }


RenderedSymbol = Union[RasterSymbol, VectorSymbol]


# --- decode ------------------------------------------------------------------


@dataclass(frozen=True)
class FileSource:
    kind: ClassVar[str] = "filePath"
    path: str


@dataclass(frozen=True)
class UrlSource:
    kind: ClassVar[str] = "url"
    url: str


@dataclass(frozen=True)
class InlineBase64Source:
    kind: ClassVar[str] = "inlineBase64"
    data: str


@dataclass(frozen=True)
class InlineTextSource:
    kind: ClassVar[str] = "inlineText"
    data: str


Source = Union[FileSource, UrlSource, InlineBase64Source, InlineTextSource]


@dataclass(frozen=True)
class DecodeOptions:
    max_width: int = DEFAULT_SCAN_DIMENSION
    max_height: int = DEFAULT_SCAN_DIMENSION
    expected_key: str | None = None
    credential_mode: CredentialMode | None = None
    credential_format: CredentialFormat = CredentialFormat.BARE
    prefix: str | None = None
    strict_prefix: bool = False
    inversion: InversionMode = InversionMode.BOTH
    include_metadata: bool = False

    def __post_init__(self) -> None:
        require_int_range(
            self.max_width,
            min_val=MIN_SCAN_DIMENSION,
            max_val=MAX_SCAN_DIMENSION,
            label="max_width",
        )
        require_int_range(
            self.max_height,
            min_val=MIN_SCAN_DIMENSION,
            max_val=MAX_SCAN_DIMENSION,
            label="max_height",
        )
        if self.credential_mode is not None:
            object.__setattr__(
                self,
                "credential_mode",
                coerce_enum(CredentialMode, self.credential_mode, label="credential_mode"),
            )
        object.__setattr__(
            self,
            "credential_format",
            coerce_enum(CredentialFormat, self.credential_format, label="credential_format"),
        )
        object.__setattr__(
            self,
            "inversion",
            coerce_enum(InversionMode, self.inversion, label="inversion"),
        )
        if self.strict_prefix and not self.prefix:
            raise ValueError("strict_prefix requires a prefix")


@dataclass(frozen=True)
class DecodeRequest:
    source: Source
    options: DecodeOptions = field(default_factory=DecodeOptions)


@dataclass(frozen=True)
class DecodeResult:
    found: bool
    raw: str | None = None
    payload: Payload | None = None
    verification: VerificationOutcome | None = None
    credential: dict[str, Any] | None = None
    geometry: SymbolGeometry | None = None
    image_width: int | None = None
    image_height: int | None = None
    metadata: dict[str, object] | None = None

    def to_dict(self) -> dict[str, object]:
        data: dict[str, object] = {"found": self.found}
        if self.payload is not None:
            data["payload"] = self.payload.to_dict()
        if self.verification is not None:
            data["verification"] = self.verification.to_dict()
        if self.credential is not None:
            data["credential"] = self.credential
        if self.geometry is not None:
            data["geometry"] = self.geometry.to_dict()
        if self.raw is not None:
            data["rawData"] = self.raw
        if self.image_width is not None and self.image_height is not None:
            data["imageDimensions"] = {"width": self.image_width, "height": self.image_height}
        if self.metadata is not None:
            data["metadata"] = self.metadata
        return data
