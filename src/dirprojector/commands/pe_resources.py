#
# SPDX-FileCopyrightText: Copyright (c) 2025 provide.io llc. All rights reserved.
# SPDX-License-Identifier: Apache-2.0
#

"""PE resource editing command."""

from __future__ import annotations

from pathlib import Path

import click
from provide.foundation.console import perr, pout
from provide.foundation.file import atomic_write

from dirprojector.console import get_command_logger, parse_key_values
from dirprojector.exceptions import OutputAlreadyExistsError, ProjectorError
from dirprojector.pe_utils import pe_resource_replace

log = get_command_logger("pe-resources")


@click.command("pe-resources")
@click.argument("executable", type=click.Path(exists=True, dir_okay=False, resolve_path=True, path_type=Path))
@click.argument("output", type=click.Path(dir_okay=False, path_type=Path))
@click.option("--icon-file", type=click.Path(exists=True, dir_okay=False, path_type=Path), help="Replacement .ico file")
@click.option("--version-string", multiple=True, help="Version string KEY=VALUE")
@click.option("--remove-signature", is_flag=True, help="Drop the Authenticode signature")
def pe_resources_command(
    executable: Path,
    output: Path,
    icon_file: Path | None,
    version_string: tuple[str, ...],
    remove_signature: bool,
) -> None:
    """Replaces icons and version strings in a Windows executable."""
    version_strings = parse_key_values(version_string, "--version-string")
    log.debug("Editing PE resources", executable=str(executable), output=str(output))
    pout(f"🔧 Editing resources of '{executable.name}'...")

    try:
        if output.exists() or output.is_symlink():
            raise OutputAlreadyExistsError(str(output))
        data = pe_resource_replace(
            executable.read_bytes(),
            icon_data=icon_file.read_bytes() if icon_file else None,
            version_strings=version_strings or None,
            remove_signature=remove_signature,
        )
        atomic_write(output, data)
    except (ProjectorError, OSError) as e:
        log.error("Resource edit failed", error=str(e), executable=str(executable))
        perr(f"❌ Resource edit failed: {e}")
        raise click.Abort() from e

    log.info("Wrote edited executable", output=str(output), size=len(data))
    pout(f"✅ Wrote '{output}'")


# 🌶️📦🔚
