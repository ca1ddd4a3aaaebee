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

"""Encode and decode pipelines, operation dispatch and batch policy.

Decoding runs source resolution, image normalization, symbol detection,
prefix handling, payload interpretation, the key gate and credential
classification in that order. Per-item fatal errors are raised; everything
else (no symbol, failed verification) is reported on the ``DecodeResult``.
"""

from __future__ import annotations

import asyncio
import concurrent.futures
import os
from collections.abc import Callable, Sequence
from dataclasses import dataclass, replace
from datetime import datetime, timezone
from enum import Enum
from typing import Generic, TypeVar

import httpx

from .core.bounds import SCAN_CHANNELS
from .core.errors import EncodeOptionsError, QrToolkitError
from .core.models import (
    DecodeOptions,
    DecodeRequest,
    DecodeResult,
    EncodeRequest,
    JsonPayload,
    RenderedSymbol,
    VerificationOutcome,
    VerificationReason,
)
from .crypto.verification import verify_payload
from .encoding.credentials import classify_credential, credential_to_dict
from .encoding.payloads import interpret_payload, split_prefix
from .qr.codec import encode_symbol
from .qr.image import normalize_image
from .qr.scan import decode_symbol
from .sources.resolver import DEFAULT_TIMEOUT_SECONDS, DEFAULT_USER_AGENT, resolve_source

_T = TypeVar("_T")
_R = TypeVar("_R")

_DEFAULT_JOBS_CAP = 8
_ITEM_ERRORS = (QrToolkitError, EncodeOptionsError)


class Operation(str, Enum):
    GENERATE = "generate"
    READ = "read"
    VERIFY = "verify"


class BatchPolicy(str, Enum):
    ABORT = "abort"
    CONTINUE = "continue"


@dataclass(frozen=True)
class BatchItem(Generic[_R]):
    index: int
    value: _R | None = None
    error: Exception | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


def encode(request: EncodeRequest) -> RenderedSymbol:
    return encode_symbol(request)


async def decode(
    request: DecodeRequest,
    *,
    client: httpx.AsyncClient | None = None,
    timeout: float | None = DEFAULT_TIMEOUT_SECONDS,
    user_agent: str = DEFAULT_USER_AGENT,
) -> DecodeResult:
    """Resolve the request's source and decode the symbol it holds."""
    data = await resolve_source(
        request.source,
        client=client,
        timeout=timeout,
        user_agent=user_agent,
    )
    return decode_image_bytes(data, request.options, source_kind=request.source.kind)


def decode_sync(
    request: DecodeRequest,
    *,
    timeout: float | None = DEFAULT_TIMEOUT_SECONDS,
    user_agent: str = DEFAULT_USER_AGENT,
) -> DecodeResult:
    return asyncio.run(decode(request, timeout=timeout, user_agent=user_agent))


def decode_image_bytes(
    data: bytes,
    options: DecodeOptions | None = None,
    *,
    source_kind: str = "bytes",
) -> DecodeResult:
    options = options or DecodeOptions()
    normalized = normalize_image(data, max_width=options.max_width, max_height=options.max_height)
    buffer = normalized.buffer
    metadata: dict[str, object] | None = None
    if options.include_metadata:
        metadata = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "sourceKind": source_kind,
            "sourceDimensions": {
                "width": normalized.source_width,
                "height": normalized.source_height,
            },
            "channels": SCAN_CHANNELS,
        }

    symbol = decode_symbol(buffer, inversion=options.inversion)
    if symbol is None:
        return DecodeResult(
            found=False,
            image_width=buffer.width,
            image_height=buffer.height,
            metadata=metadata,
        )

    result = inspect_payload(symbol.text, options)
    if metadata is not None and result.metadata is not None:
        metadata.update(result.metadata)
    return replace(
        result,
        geometry=symbol.geometry,
        image_width=buffer.width,
        image_height=buffer.height,
        metadata=metadata,
    )


def inspect_payload(raw: str, options: DecodeOptions | None = None) -> DecodeResult:
    """Interpret, verify and classify a raw payload string without an image.

    When an expected key is configured the raw text is withheld from the
    result because it still carries ``qrKey``.
    """
    options = options or DecodeOptions()
    body, prefix_present = split_prefix(raw, options.prefix)
    metadata: dict[str, object] | None = None
    if options.include_metadata:
        metadata = {}
        if options.prefix:
            metadata["prefixPresent"] = prefix_present
            metadata["validationLevel"] = "strict" if options.strict_prefix else "relaxed"

    if options.prefix and options.strict_prefix and not prefix_present:
        return DecodeResult(
            found=True,
            verification=VerificationOutcome.failed(VerificationReason.PREFIX_MISSING),
            metadata=metadata,
        )

    payload = interpret_payload(body)
    outcome = verify_payload(payload, options.expected_key)
    if not outcome.released:
        return DecodeResult(found=True, verification=outcome, metadata=metadata)

    released = outcome.payload
    credential = None
    if options.credential_mode is not None and isinstance(released, JsonPayload):
        shape = classify_credential(released.data, options.credential_mode)
        credential = credential_to_dict(shape, options.credential_format)
    if metadata is not None and released is not None:
        metadata["payloadType"] = released.kind.value

    return DecodeResult(
        found=True,
        raw=raw if options.expected_key is None else None,
        payload=released,
        verification=outcome,
        credential=credential,
        metadata=metadata,
    )


def run_operation(
    operation: Operation | str,
    request: EncodeRequest | DecodeRequest | str,
    *,
    options: DecodeOptions | None = None,
) -> RenderedSymbol | DecodeResult:
    """Dispatch a single request by operation name."""
    op = Operation(operation)
    if op is Operation.GENERATE:
        if not isinstance(request, EncodeRequest):
            raise TypeError("generate expects an EncodeRequest")
        return encode(request)
    if op is Operation.READ:
        if not isinstance(request, DecodeRequest):
            raise TypeError("read expects a DecodeRequest")
        return decode_sync(request)
    if not isinstance(request, str):
        raise TypeError("verify expects a raw payload string")
    return inspect_payload(request, options)


def run_batch(
    items: Sequence[_T],
    worker: Callable[[_T], _R],
    *,
    policy: BatchPolicy = BatchPolicy.ABORT,
    jobs: int | None = None,
) -> list[BatchItem[_R]]:
    """Run worker over items, keeping input order in the returned list.

    Only codec errors are captured per item. Under ABORT the lowest-index
    failure is re-raised once every submitted item has finished.
    """
    policy = BatchPolicy(policy)
    if not items:
        return []

    def _run(index: int, item: _T) -> BatchItem[_R]:
        try:
            return BatchItem(index=index, value=worker(item))
        except _ITEM_ERRORS as exc:
            return BatchItem(index=index, error=exc)

    workers = resolve_jobs(jobs, len(items))
    if workers <= 1:
        results = []
        for index, item in enumerate(items):
            outcome = _run(index, item)
            if outcome.error is not None and policy is BatchPolicy.ABORT:
                raise outcome.error
            results.append(outcome)
        return results

    with concurrent.futures.ThreadPoolExecutor(max_workers=workers) as executor:
        results = list(executor.map(_run, range(len(items)), items))
    if policy is BatchPolicy.ABORT:
        for outcome in results:
            if outcome.error is not None:
                raise outcome.error
    return results


def resolve_jobs(jobs: int | None, task_count: int) -> int:
    if jobs is not None and jobs <= 0:
        raise ValueError("jobs must be a positive integer")
    cpu = os.cpu_count() or 1
    requested = jobs if jobs is not None else min(cpu, _DEFAULT_JOBS_CAP)
    return max(1, min(requested, task_count))
