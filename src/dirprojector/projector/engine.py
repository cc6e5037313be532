#
# SPDX-FileCopyrightText: Copyright (c) 2025 provide.io llc. All rights reserved.
# SPDX-License-Identifier: Apache-2.0
#

"""Projector build engine.

A build runs once, in a fixed order of states::

    UNCONFIGURED -> SKELETON_WRITTEN -> RESOURCES_PATCHED
                 -> AUX_FILES_WRITTEN -> FINALIZED

Nothing is rolled back on failure; output written so far stays on disk.
"""

from __future__ import annotations

from enum import Enum
from pathlib import Path

from provide.foundation import logger

from dirprojector.archive import open_archive, write_file
from dirprojector.config import DirProjectorRuntimeConfig
from dirprojector.exceptions import ConfigurationError, OutputAlreadyExistsError, ProjectorError
from dirprojector.projector.config import AnyProjectorConfig, ProjectorConfig
from dirprojector.projector.layout import (
    config_path,
    lingo_path,
    movie_path,
    sibling_output_paths,
    splash_image_path,
)
from dirprojector.projector.patches import FilePatch, PatchTally, validate_patches
from dirprojector.projector.skeleton import SkeletonRules, transform_skeleton
from dirprojector.projector.variants import Variant, capabilities_for, check_config_type
from dirprojector.utils.data import PayloadData, resolve_payload


class BuildState(Enum):
    """Build progress, in order."""

    UNCONFIGURED = 0
    SKELETON_WRITTEN = 1
    RESOURCES_PATCHED = 2
    AUX_FILES_WRITTEN = 3
    FINALIZED = 4


class ProjectorBuild:
    """One projector build. Create a new instance for every build."""

    def __init__(self, variant: Variant, config: AnyProjectorConfig) -> None:
        check_config_type(variant, config)
        self.variant = variant
        self.config = config
        self.capabilities = capabilities_for(variant)
        self.state = BuildState.UNCONFIGURED
        self.patches: list[FilePatch] = []
        self.tally = PatchTally()

    @property
    def path(self) -> Path:
        return self.config.path

    def output_paths(self) -> list[Path]:
        """Every path this build creates at the top level."""
        paths = [self.config.path]
        if isinstance(self.config, ProjectorConfig):
            caps = self.capabilities
            paths += sibling_output_paths(self.config, caps.extension, caps.splash_image_extension)
        return paths

    def _advance(self, state: BuildState) -> None:
        if state.value != self.state.value + 1:
            raise ProjectorError(f"Invalid build transition: {self.state.name} -> {state.name}")
        logger.trace("Build state", variant=self.variant.value, state=state.name)
        self.state = state

    def check_outputs(self) -> None:
        """
        Raises:
            OutputAlreadyExistsError: If any output path exists
        """
        for path in self.output_paths():
            if path.exists() or path.is_symlink():
                raise OutputAlreadyExistsError(str(path))

    def stream_skeleton(self, rules: SkeletonRules) -> None:
        """Extract the configured skeleton once through the platform rules."""
        config = self.config
        assert isinstance(config, ProjectorConfig)
        if config.skeleton is None:
            raise ConfigurationError("Projector skeleton not specified")

        hdiutil = config.path_to_hdiutil or DirProjectorRuntimeConfig.from_env().hdiutil
        with open_archive(config.skeleton, nobrowse=config.nobrowse, hdiutil=hdiutil) as archive:
            logger.info("Reading skeleton", skeleton=str(config.skeleton), variant=self.variant.value)
            self.tally = transform_skeleton(archive, rules, self.patches)

    def run(self) -> Path:
        """
        Run every build step once.

        Returns:
            The projector path

        Raises:
            ProjectorError: If the build was already run, or any step fails
        """
        if self.state is not BuildState.UNCONFIGURED:
            raise ProjectorError(f"Build already run: {self.path}")
        caps = self.capabilities

        self.check_outputs()
        if caps.file_patches is not None:
            self.patches = caps.file_patches(self.config)
            logger.debug("Prepared file patches", patches=[p.name for p in self.patches])

        caps.write_skeleton(self)
        self._advance(BuildState.SKELETON_WRITTEN)

        validate_patches(self.patches, self.tally)
        self._advance(BuildState.RESOURCES_PATCHED)

        if isinstance(self.config, ProjectorConfig):
            self._write_aux_files(self.config)
        self._advance(BuildState.AUX_FILES_WRITTEN)

        if caps.modify_skeleton is not None:
            caps.modify_skeleton(self)
        self._advance(BuildState.FINALIZED)

        logger.info("Projector written", path=str(self.path), variant=self.variant.value)
        return self.path

    def _write_aux_files(self, config: ProjectorConfig) -> None:
        caps = self.capabilities
        movie = movie_path(config)
        movie_data = resolve_payload(config.movie_data, config.movie_file)
        if movie_data is not None:
            if movie is None:
                raise ConfigurationError("Cannot write movie data without a movie name")
            self._write_payload(movie, movie_data)

        outputs: list[tuple[Path, PayloadData | None, Path | None, str]] = [
            (config_path(config, caps.extension), config.config_data, config.config_file, caps.config_newline),
            (
                splash_image_path(config, caps.extension, caps.splash_image_extension),
                config.splash_image_data,
                config.splash_image_file,
                "\n",
            ),
            (lingo_path(config), config.lingo_data, config.lingo_file, caps.lingo_newline),
        ]
        for path, data, file, newline in outputs:
            payload = resolve_payload(data, file, newline)
            if payload is not None:
                self._write_payload(path, payload)

    def _write_payload(self, path: Path, payload: bytes) -> None:
        write_file(path, payload)
        logger.debug("Wrote projector file", path=str(path), size=len(payload))


def write_projector(variant: Variant, config: AnyProjectorConfig) -> ProjectorBuild:
    """
    Build a projector.

    Args:
        variant: Target platform
        config: The variant's config record

    Returns:
        The finished build

    Raises:
        OutputAlreadyExistsError: If an output path exists
        SkeletonError: If the skeleton cannot be read or lacks required entries
        PatchTargetNotFoundError: If a configured patch found no target
        ConfigurationError: If the config does not fit the variant
    """
    build = ProjectorBuild(variant, config)
    build.run()
    return build


# 🌶️📦🔚
