#
# SPDX-FileCopyrightText: Copyright (c) 2025 provide.io llc. All rights reserved.
# SPDX-License-Identifier: Apache-2.0
#

"""Apply a single fixed-width byte patch to a buffer or file."""

from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path

from provide.foundation import logger
from provide.foundation.file import atomic_write

from dirprojector.exceptions import AmbiguousPatchCandidateError, NoPatchCandidateError
from dirprojector.patcher.templates import PatchTemplate


def find_patch_site(data: bytes | bytearray, templates: Sequence[PatchTemplate], name: str) -> tuple[int, PatchTemplate]:
    """
    Locate the one offset matched by any template.

    Args:
        data: Buffer to scan
        templates: Candidate templates, one per known binary revision
        name: Patch name used in errors

    Returns:
        Tuple of (offset, matching template)

    Raises:
        NoPatchCandidateError: If nothing matched
        AmbiguousPatchCandidateError: If more than one offset matched
    """
    found: tuple[int, PatchTemplate] | None = None
    for template in templates:
        for match in template.pattern().finditer(data):
            if found is not None:
                logger.debug(
                    "Ambiguous patch site",
                    patch=name,
                    first=f"0x{found[0]:x}",
                    second=f"0x{match.start():x}",
                )
                raise AmbiguousPatchCandidateError(name)
            found = (match.start(), template)
    if found is None:
        raise NoPatchCandidateError(name)
    return found


def patch_once(data: bytearray, templates: Sequence[PatchTemplate], name: str) -> None:
    """
    Patch a buffer in place at the single site matched by the templates.

    Only non-wildcard replacement bytes are written; wildcard positions keep
    the original bytes.

    Args:
        data: Buffer to modify
        templates: Candidate templates
        name: Patch name used in errors and logs
    """
    offset, template = find_patch_site(data, templates, name)
    for i, value in enumerate(template.replace):
        if value is not None:
            data[offset + i] = value
    logger.debug("Applied byte patch", patch=name, offset=f"0x{offset:x}", size=len(template.replace))


def patch_bytes_once(data: bytes, templates: Sequence[PatchTemplate], name: str) -> bytes:
    """Return a patched copy of data."""
    buffer = bytearray(data)
    patch_once(buffer, templates, name)
    return bytes(buffer)


def patch_file_once(path: Path, templates: Sequence[PatchTemplate], name: str) -> None:
    """Patch a file on disk, replacing it atomically."""
    data = patch_bytes_once(path.read_bytes(), templates, name)
    atomic_write(path, data)


# 🌶️📦🔚
