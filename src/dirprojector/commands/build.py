#
# SPDX-FileCopyrightText: Copyright (c) 2025 provide.io llc. All rights reserved.
# SPDX-License-Identifier: Apache-2.0
#

"""Build command for the dirprojector CLI."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import click
from provide.foundation.console import perr, pout

from dirprojector.bundle import Bundle
from dirprojector.config import DirProjectorRuntimeConfig
from dirprojector.console import get_command_logger, parse_key_values
from dirprojector.exceptions import ProjectorError
from dirprojector.projector import (
    HtmlProjectorConfig,
    MacProjectorConfig,
    Variant,
    WindowsProjectorConfig,
    write_projector,
)
from dirprojector.projector.config import AnyProjectorConfig

log = get_command_logger("build")

_PATH = click.Path(path_type=Path)
_EXISTING_FILE = click.Path(exists=True, dir_okay=False, path_type=Path)


def parse_include_xtras(values: tuple[str, ...]) -> dict[str, str | None] | None:
    """``SRC`` keeps the source path, ``SRC=DEST`` renames it, an empty SRC matches all."""
    if not values:
        return None
    mappings: dict[str, str | None] = {}
    for value in values:
        src, sep, dest = value.partition("=")
        mappings[src] = dest if sep else None
    return mappings


def build_config(variant: Variant, output: Path, options: dict[str, Any]) -> AnyProjectorConfig:
    """Create the config record for a variant from command options."""
    if variant is Variant.HTML:
        return HtmlProjectorConfig(
            path=output,
            src=options["src"] or "",
            width=options["width"],
            height=options["height"],
            title=options["title"],
            lang=options["lang"],
        )

    common: dict[str, Any] = {
        "path": output,
        "skeleton": options["skeleton"],
        "config_file": options["config_file"],
        "lingo_file": options["lingo_file"],
        "splash_image_file": options["splash_image_file"],
        "movie_file": options["movie_file"],
        "movie_name": options["movie_name"],
        "include_xtras": parse_include_xtras(options["include_xtras"]),
        "nest_xtras_configuration": options["nest_xtras_configuration"],
        "shockwave": options["shockwave"],
        "path_to_hdiutil": DirProjectorRuntimeConfig.from_env().hdiutil,
        "icon_file": options["icon_file"],
    }

    if variant in (Variant.WINDOWS_EXE, Variant.OTTO_WINDOWS):
        return WindowsProjectorConfig(
            **common,
            version_strings=parse_key_values(options["version_string"], "--version-string") or None,
            patch_3d_display_drivers_size=options["patch_3d_display_drivers_size"],
        )

    bundle_name: bool | str | None = False
    if options["remove_bundle_name"]:
        bundle_name = None
    elif options["bundle_name"] is not None:
        bundle_name = options["bundle_name"] or True
    return MacProjectorConfig(
        **common,
        binary_name=options["binary_name"],
        intel=options["intel"],
        info_plist_file=options["info_plist_file"],
        pkg_info_file=options["pkg_info_file"],
        bundle_name=bundle_name,
        nest_xtras_contents=options["nest_xtras_contents"],
    )


@click.command("build")
@click.argument("variant", type=click.Choice([v.value for v in Variant]))
@click.argument("output", type=_PATH)
@click.option("--skeleton", type=click.Path(exists=True, path_type=Path), help="Skeleton directory or archive")
@click.option("--config-file", type=_EXISTING_FILE, help="Projector config INI")
@click.option("--lingo-file", type=_EXISTING_FILE, help="LINGO.INI contents")
@click.option("--splash-image-file", type=_EXISTING_FILE, help="Splash image")
@click.option("--movie-file", type=_EXISTING_FILE, help="Movie to copy next to the projector")
@click.option("--movie-name", help="File name for --movie-file")
@click.option("--include-xtras", multiple=True, help="Xtras to include: SRC or SRC=DEST (empty SRC for all)")
@click.option("--nest-xtras-configuration", is_flag=True, help="Put Xtras under Configuration/xtras")
@click.option("--shockwave", is_flag=True, help="Build a Shockwave projector")
@click.option("--icon-file", type=_EXISTING_FILE, help="Icon (.ico for Windows, .icns for Mac)")
@click.option("--version-string", multiple=True, help="Windows version string KEY=VALUE")
@click.option("--patch-3d-display-drivers-size", is_flag=True, help="Patch Shockwave 3D driver name buffers")
@click.option("--binary-name", help="Mac binary name")
@click.option("--intel", is_flag=True, help="Use the Intel Mac skeleton resources")
@click.option("--info-plist-file", type=_EXISTING_FILE, help="Custom Info.plist")
@click.option("--pkg-info-file", type=_EXISTING_FILE, help="Custom PkgInfo")
@click.option("--bundle-name", help="CFBundleName; empty for the output name")
@click.option("--remove-bundle-name", is_flag=True, help="Remove CFBundleName")
@click.option("--nest-xtras-contents", is_flag=True, help="Put Xtras in the app's Contents/xtras")
@click.option("--src", help="HTML: movie URL")
@click.option("--width", help="HTML: player width")
@click.option("--height", help="HTML: player height")
@click.option("--title", help="HTML: page title")
@click.option("--lang", help="HTML: document language")
@click.option("--bundle", "as_bundle", is_flag=True, help="Write a bundle with a launcher")
@click.option("--flat", is_flag=True, help="Bundle without nesting or launcher")
@click.option("--resource", multiple=True, help="Bundle resource DEST=SOURCE")
def build_command(variant: str, output: Path, as_bundle: bool, flat: bool, resource: tuple[str, ...], **options: Any) -> None:
    """Builds a projector or projector bundle."""
    selected = Variant(variant)
    log.debug("Starting build", variant=selected.value, output=str(output), bundle=as_bundle)
    pout(f"🏗️  Building {selected.value} projector '{output}'...")

    try:
        config = build_config(selected, output, options)
        if as_bundle:
            resources = parse_key_values(resource, "--resource")
            bundle = Bundle(selected, config, flat=flat)
            bundle.write(lambda b: [b.copy_resource(dest, Path(src)) for dest, src in resources.items()])
            log.info("Bundle written", path=str(output), resources=len(resources))
        else:
            write_projector(selected, config)
            log.info("Projector written", path=str(output))
    except ProjectorError as e:
        log.error("Build failed", error=str(e), output=str(output))
        perr(f"❌ Build failed: {e}")
        raise click.Abort() from e

    pout(f"✅ Wrote '{output}'")


# 🌶️📦🔚
