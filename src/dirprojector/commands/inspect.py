#
# SPDX-FileCopyrightText: Copyright (c) 2025 provide.io llc. All rights reserved.
# SPDX-License-Identifier: Apache-2.0
#

"""Inspect command for the dirprojector CLI."""

from __future__ import annotations

from pathlib import Path

import click
from provide.foundation.console import perr, pout

from dirprojector.console import get_command_logger
from dirprojector.exceptions import ProjectorError
from dirprojector.macho import MachoType, macho_types_file
from dirprojector.pe_utils import (
    RT_GROUP_ICON,
    RT_ICON,
    RT_VERSION,
    ResourceEntry,
    VersionInfo,
    get_machine_type,
    is_pe_executable,
    read_resources,
    signature_get,
    signature_strip,
)

log = get_command_logger("inspect")

RESOURCE_TYPE_NAMES = {RT_ICON: "ICON", RT_GROUP_ICON: "GROUP_ICON", RT_VERSION: "VERSION"}


@click.command("inspect")
@click.argument(
    "binary",
    type=click.Path(exists=True, dir_okay=False, resolve_path=True),
    required=True,
)
def inspect_command(binary: str) -> None:
    """Shows the architecture and resources of a skeleton binary."""
    path = Path(binary)
    log.debug("Inspecting binary", path=str(path))
    pout(f"🔍 Inspecting '{path}'...")

    try:
        with path.open("rb") as f:
            head = f.read(2)
        if is_pe_executable(head):
            _display_pe(path.read_bytes())
        else:
            _display_macho(macho_types_file(path))
    except (ProjectorError, OSError) as e:
        log.error("Inspection failed", error=str(e), path=str(path))
        perr(f"❌ Inspection failed: {e}")
        raise click.Abort() from e


def _display_pe(data: bytes) -> None:
    """Display machine, signature and resource details of a PE file."""
    pout("\nFormat: PE")
    pout(f"Machine: 0x{get_machine_type(data[:4096]):x}")
    signature = signature_get(data)
    pout(f"Signature: {f'{len(signature)} bytes' if signature else 'none'}")

    entries = read_resources(signature_strip(data))
    pout(f"\nResources ({len(entries)}):")
    for entry in entries:
        _display_resource(entry)

    for info in VersionInfo.from_entries(entries):
        for lang, codepage in info.languages():
            strings = info.get_string_values(lang, codepage)
            if not strings:
                continue
            pout(f"\nVersion strings [{lang:04X}{codepage:04X}]:")
            for key, value in strings.items():
                pout(f"  {key}: {value}")


def _display_resource(entry: ResourceEntry) -> None:
    type_name = RESOURCE_TYPE_NAMES.get(entry.type, str(entry.type)) if isinstance(entry.type, int) else entry.type
    pout(f"  {type_name}/{entry.id}/{entry.lang}: {len(entry.data)} bytes")


def _display_macho(types: MachoType | list[MachoType]) -> None:
    """Display the architectures of a Mach-O file."""
    if isinstance(types, MachoType):
        pout("\nFormat: Mach-O")
        types = [types]
    else:
        pout(f"\nFormat: FAT Mach-O ({len(types)} architectures)")
    for t in types:
        pout(f"  cputype=0x{t.cpu_type:x} cpusubtype=0x{t.cpu_subtype:x}")


# 🌶️📦🔚
