#
# SPDX-FileCopyrightText: Copyright (c) 2025 provide.io llc. All rights reserved.
# SPDX-License-Identifier: Apache-2.0
#

"""Windows launcher stubs."""

from __future__ import annotations

from pathlib import Path

from provide.foundation import logger

from dirprojector.exceptions import UnknownMachineTypeError
from dirprojector.launchers.loader import load_launcher_binary
from dirprojector.pe_utils import IMAGE_FILE_MACHINE_I386, copy_resources, get_machine_type

WINDOWS_LAUNCHERS = {
    "i686": "windows-i686",
}

MACHINE_LAUNCHER_TYPES = {
    IMAGE_FILE_MACHINE_I386: "i686",
}


def windows_launcher(arch: str, resources: Path | None = None) -> bytes:
    """
    Build a Windows launcher stub.

    Args:
        arch: Launcher architecture ("i686")
        resources: Executable whose version info and first icon group per
            language are copied into the launcher

    Returns:
        Launcher executable bytes
    """
    try:
        launcher_id = WINDOWS_LAUNCHERS[arch]
    except KeyError:
        raise ValueError(f"Invalid launcher type: {arch}") from None

    data = load_launcher_binary(launcher_id)
    if resources is None:
        return data

    logger.debug("Copying resources into launcher", arch=arch, source=str(resources))
    return copy_resources(data, resources.read_bytes())


def launcher_type_for_executable(path: Path) -> str:
    """
    Pick the launcher architecture matching an executable's COFF machine.

    Raises:
        UnknownMachineTypeError: For machines without a launcher
    """
    with path.open("rb") as f:
        header = f.read(0x40)
        if len(header) == 0x40:
            pe_offset = int.from_bytes(header[60:64], "little")
            f.seek(0)
            header = f.read(max(0x40, pe_offset + 6))
    machine = get_machine_type(header)
    try:
        return MACHINE_LAUNCHER_TYPES[machine]
    except KeyError:
        raise UnknownMachineTypeError(machine) from None


# 🌶️📦🔚
