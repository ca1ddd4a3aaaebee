#!/usr/bin/env python3
from __future__ import annotations

import json

from ...core.models import DecodeResult, VerificationStatus
from ...encoding.payloads import describe_payload
from . import build_kv_table, console, panel


def result_rows(result: DecodeResult) -> list[tuple[str, str]]:
    if not result.found:
        return [("Found", "no")]
    rows: list[tuple[str, str]] = []
    if result.payload is not None:
        rows.extend(describe_payload(result.payload))
    if result.verification is not None:
        rows.append(("Verification", format_verification(result)))
    if result.credential is not None:
        rows.append(("Credential", json.dumps(result.credential, indent=2, ensure_ascii=False)))
    if result.image_width is not None and result.image_height is not None:
        rows.append(("Image", f"{result.image_width}x{result.image_height}"))
    if result.metadata:
        for key, value in result.metadata.items():
            rows.append((key, str(value)))
    return rows


def format_verification(result: DecodeResult) -> str:
    outcome = result.verification
    if outcome is None:
        return "n/a"
    if outcome.status is VerificationStatus.FAILED and outcome.reason is not None:
        return f"failed ({outcome.reason.value})"
    return outcome.status.value.replace("_", " ")


def outcome_style(result: DecodeResult) -> str:
    if not result.found:
        return "not_found"
    status = result.verification.status if result.verification is not None else None
    if status is VerificationStatus.FAILED:
        return "rejected"
    if status is VerificationStatus.PASSED:
        return "verified"
    return "panel"


def print_result(result: DecodeResult, *, title: str) -> None:
    style = outcome_style(result)
    console.print(panel(title, build_kv_table(result_rows(result)), style=style))
