#
# SPDX-FileCopyrightText: Copyright (c) 2025 provide.io llc. All rights reserved.
# SPDX-License-Identifier: Apache-2.0
#

"""Lazy resolution of configurable payloads (config, lingo, splash, icons)."""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable, Sequence
from concurrent.futures import ThreadPoolExecutor
import inspect
from pathlib import Path
from typing import Any, TypeAlias

from provide.foundation import logger

PayloadValue: TypeAlias = bytes | str | Sequence[str]
PayloadData: TypeAlias = PayloadValue | Callable[[], Any]


async def _await(awaitable: Awaitable[Any]) -> Any:
    return await awaitable


def run_awaitable(awaitable: Awaitable[Any]) -> Any:
    """
    Drive an awaitable to completion from synchronous code.

    Inside a running event loop the awaitable runs on a fresh loop in a
    worker thread, since the current loop cannot be re-entered.
    """
    try:
        asyncio.get_running_loop()
    except RuntimeError:
        return asyncio.run(_await(awaitable))

    logger.debug("Event loop running, resolving payload in a worker thread")
    with ThreadPoolExecutor(max_workers=1, thread_name_prefix="dirprojector-payload") as executor:
        return executor.submit(asyncio.run, _await(awaitable)).result()


def encode_payload(value: Any, newline: str = "\n") -> bytes:
    """
    Convert a literal payload value to bytes.

    Args:
        value: Bytes, a string, or a sequence of lines
        newline: Separator used when joining lines

    Returns:
        Encoded payload bytes
    """
    if isinstance(value, (bytes, bytearray, memoryview)):
        return bytes(value)
    if isinstance(value, str):
        return value.encode("utf-8")
    return newline.join(value).encode("utf-8")


def resolve_payload(
    data: PayloadData | None,
    file: Path | str | None,
    newline: str = "\n",
) -> bytes | None:
    """
    Resolve one optional payload at write time.

    Data takes precedence over file. A callable is invoked with no arguments
    and may return an awaitable, which is run to completion.

    Args:
        data: In-memory payload or zero-argument generator
        file: Path to read when no data is given
        newline: Line separator for list payloads

    Returns:
        Payload bytes, or None when neither source is set
    """
    if data is not None:
        value = data
        if callable(value):
            value = value()
            if inspect.isawaitable(value):
                value = run_awaitable(value)
            if value is None:
                return None
        return encode_payload(value, newline)
    if file is not None:
        logger.trace("Reading payload file", file=str(file))
        return Path(file).read_bytes()
    return None


# 🌶️📦🔚
