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

"""Shared-key gate applied to decoded JSON payloads before release."""

from __future__ import annotations

import hmac
from collections.abc import Mapping
from typing import Any

from ..core.models import (
    JsonPayload,
    Payload,
    VerificationOutcome,
    VerificationReason,
)

KEY_FIELD = "qrKey"


def verify_payload(payload: Payload, expected_key: str | None) -> VerificationOutcome:
    """Check the payload's ``qrKey`` against expected_key.

    Without an expected key the payload is released unchanged, ``qrKey``
    included. With one, only a JSON payload whose ``qrKey`` matches byte for
    byte is released, and the key field is removed from the released copy.
    """
    if expected_key is None:
        return VerificationOutcome.not_required(payload)
    if not isinstance(payload, JsonPayload):
        return VerificationOutcome.failed(VerificationReason.PAYLOAD_NOT_STRUCTURED)
    if KEY_FIELD not in payload.data:
        return VerificationOutcome.failed(VerificationReason.KEY_FIELD_MISSING)
    if not keys_match(payload.data[KEY_FIELD], expected_key):
        return VerificationOutcome.failed(VerificationReason.KEY_MISMATCH)
    stripped = {key: value for key, value in payload.data.items() if key != KEY_FIELD}
    return VerificationOutcome.passed(JsonPayload(data=stripped))


def keys_match(candidate: object, expected_key: str) -> bool:
    if not isinstance(candidate, str):
        return False
    # Lone surrogates are valid JSON string content; compare them as code points.
    return hmac.compare_digest(
        candidate.encode("utf-8", "surrogatepass"),
        expected_key.encode("utf-8", "surrogatepass"),
    )


def attach_key(data: Mapping[str, Any], key: str) -> dict[str, Any]:
    """Return a copy of data carrying ``qrKey``."""
    if not isinstance(key, str) or not key:
        raise ValueError("verification key must be a non-empty string")
    return {**data, KEY_FIELD: key}
