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

"""QR encode/decode toolkit with a shared-key gate and credential classifier."""

from .core.errors import (
    EncodeOptionsError,
    ImageDecodeError,
    QrToolkitError,
    RenderError,
    SourceMalformed,
    SourceUnavailable,
)
from .core.models import (
    ApiKeyCredential,
    BasicAuthCredential,
    ContactPayload,
    CredentialFormat,
    CredentialMode,
    CustomCredential,
    DecodedSymbol,
    DecodeOptions,
    DecodeRequest,
    DecodeResult,
    EncodeRequest,
    ErrorCorrection,
    FileSource,
    ImageBuffer,
    InlineBase64Source,
    InlineTextSource,
    InversionMode,
    JsonPayload,
    LogoOverlay,
    ModuleShape,
    OAuth2Credential,
    Payload,
    PayloadKind,
    RasterSymbol,
    RenderOptions,
    SymbolFormat,
    SymbolGeometry,
    TextPayload,
    UrlPayload,
    UrlSource,
    VectorSymbol,
    VerificationOutcome,
    VerificationReason,
    VerificationStatus,
    WifiEncryption,
    WifiPayload,
)
from .crypto.verification import attach_key, verify_payload
from .encoding.credentials import classify_credential, credential_payload, credential_to_dict
from .encoding.payloads import interpret_payload, serialize_payload
from .pipeline import (
    BatchItem,
    BatchPolicy,
    Operation,
    decode,
    decode_image_bytes,
    decode_sync,
    encode,
    inspect_payload,
    run_batch,
    run_operation,
)
from .qr.codec import save_symbol

__version__ = "0.1.0"

__all__ = [
    "ApiKeyCredential",
    "BasicAuthCredential",
    "BatchItem",
    "BatchPolicy",
    "ContactPayload",
    "CredentialFormat",
    "CredentialMode",
    "CustomCredential",
    "DecodeOptions",
    "DecodeRequest",
    "DecodeResult",
    "DecodedSymbol",
    "EncodeOptionsError",
    "EncodeRequest",
    "ErrorCorrection",
    "FileSource",
    "ImageBuffer",
    "ImageDecodeError",
    "InlineBase64Source",
    "InlineTextSource",
    "InversionMode",
    "JsonPayload",
    "LogoOverlay",
    "ModuleShape",
    "OAuth2Credential",
    "Operation",
    "Payload",
    "PayloadKind",
    "QrToolkitError",
    "RasterSymbol",
    "RenderError",
    "RenderOptions",
    "SourceMalformed",
    "SourceUnavailable",
    "SymbolFormat",
    "SymbolGeometry",
    "TextPayload",
    "UrlPayload",
    "UrlSource",
    "VectorSymbol",
    "VerificationOutcome",
    "VerificationReason",
    "VerificationStatus",
    "WifiEncryption",
    "WifiPayload",
    "attach_key",
    "classify_credential",
    "credential_payload",
    "credential_to_dict",
    "decode",
    "decode_image_bytes",
    "decode_sync",
    "encode",
    "inspect_payload",
    "interpret_payload",
    "run_batch",
    "run_operation",
    "save_symbol",
    "serialize_payload",
]
