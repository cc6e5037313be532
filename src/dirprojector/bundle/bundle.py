#
# SPDX-FileCopyrightText: Copyright (c) 2025 provide.io llc. All rights reserved.
# SPDX-License-Identifier: Apache-2.0
#

"""Distributable bundles: a projector, its resources and an outer launcher.

A nested bundle keeps the projector in its own folder and writes a launcher
at the bundle path:

- Windows: ``dir/app.exe`` launches ``dir/app/app.exe``
- Mac: ``app.app/Contents/MacOS/<binary>`` launches ``app.app/Contents/Resources/app.app``
- HTML: ``dir/app.html`` redirects to ``dir/app/app.html``

A flat bundle writes the projector at the bundle path and no launcher.
Resources are placed in the projector's directory.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
import io
import os
from pathlib import Path
import re
import shutil
import stat
from typing import BinaryIO, TypeVar

from attrs import evolve
from provide.foundation import logger
from provide.foundation.file.directory import ensure_dir, ensure_parent_dir

from dirprojector.bundle.resources import (
    DeferredAttributes,
    ResourceOptions,
    expand_copy_options,
    set_resource_attributes,
)
from dirprojector.config.defaults import RESOURCE_EXCLUDE_PATTERNS
from dirprojector.exceptions import (
    BundleStateError,
    ConfigurationError,
    OutputAlreadyExistsError,
    ResourceExistsError,
)
from dirprojector.projector.config import AnyProjectorConfig, ProjectorConfig
from dirprojector.projector.engine import write_projector
from dirprojector.projector.variants import Variant, capabilities_for, check_config_type

T = TypeVar("T")

COPY_CHUNK_SIZE = 1024 * 1024


class Bundle:
    """
    A projector plus resources, for the ``HTML``, ``OTTO_MAC`` and
    ``OTTO_WINDOWS`` variants.

    Usage::

        bundle = Bundle(Variant.OTTO_WINDOWS, config)
        bundle.write(lambda b: b.copy_resource("movie.dir", movie))
    """

    excludes: tuple[re.Pattern[str], ...] = tuple(re.compile(p) for p in RESOURCE_EXCLUDE_PATTERNS)

    def __init__(self, variant: Variant, config: AnyProjectorConfig, flat: bool = False) -> None:
        check_config_type(variant, config)
        self.capabilities = capabilities_for(variant)
        if self.capabilities.nested_path is None or self.capabilities.write_launcher is None:
            raise ConfigurationError(f"{variant.name} projectors cannot be bundled")

        self.variant = variant
        self.path = config.path
        self.flat = flat
        projector_path = config.path if flat else self.capabilities.nested_path(config.path)
        self.projector_config: AnyProjectorConfig = evolve(config, path=projector_path)
        self._is_open = False
        self._deferred = DeferredAttributes()

    @property
    def is_open(self) -> bool:
        return self._is_open

    @property
    def projector_path(self) -> Path:
        return self.projector_config.path

    def is_excluded_file(self, name: str) -> bool:
        return any(pattern.search(name) for pattern in self.excludes)

    def open(self) -> None:
        """
        Write the projector and start accepting resources.

        Raises:
            BundleStateError: If already open
            OutputAlreadyExistsError: If the bundle or resource path exists
        """
        if self._is_open:
            raise BundleStateError("Already open")
        self._check_output()
        self._deferred.clear()

        logger.info("Opening bundle", path=str(self.path), variant=self.variant.value, flat=self.flat)
        write_projector(self.variant, self.projector_config)
        self._is_open = True

    def close(self) -> None:
        """Write the launcher (nested bundles) and apply deferred attributes."""
        self._assert_is_open()
        try:
            if not self.flat:
                assert self.capabilities.write_launcher is not None
                self.capabilities.write_launcher(self.projector_config, self.path)
            self._deferred.apply()
        finally:
            self._deferred.clear()
        self._is_open = False
        logger.info("Closed bundle", path=str(self.path))

    def write(self, func: Callable[[Bundle], T] | None = None) -> T | None:
        """Open, run func with this bundle, and close even if func fails."""
        self.open()
        try:
            return func(self) if func is not None else None
        finally:
            self.close()

    def with_data(
        self,
        player: Path | str,
        config_data: bytes | None,
        func: Callable[[Bundle], T] | None = None,
    ) -> T | None:
        """Write the bundle from a skeleton and in-memory config data."""
        self._use_player(player, config_data=config_data)
        return self.write(func)

    def with_file(
        self,
        player: Path | str,
        config_file: Path | str | None,
        func: Callable[[Bundle], T] | None = None,
    ) -> T | None:
        """Write the bundle from a skeleton and a config file."""
        self._use_player(player, config_file=config_file)
        return self.write(func)

    def _use_player(self, player: Path | str, **changes: object) -> None:
        if not isinstance(self.projector_config, ProjectorConfig):
            raise ConfigurationError(f"{self.variant.name} bundles have no player skeleton")
        self.projector_config = evolve(self.projector_config, skeleton=player, **changes)

    def resource_path(self, destination: str | Path) -> Path:
        return self.projector_path.parent / destination

    def resource_exists(self, destination: str | Path) -> bool:
        return os.path.lexists(self.resource_path(destination))

    def copy_resource(self, destination: str | Path, source: str | Path, options: ResourceOptions | None = None) -> None:
        """
        Copy a symlink, file or directory into the bundle.

        Raises:
            ConfigurationError: For other file types
        """
        self._assert_is_open()
        source = Path(source)
        mode = source.lstat().st_mode
        if stat.S_ISLNK(mode):
            self.copy_resource_symlink(destination, source, options)
        elif stat.S_ISREG(mode):
            self.copy_resource_file(destination, source, options)
        elif stat.S_ISDIR(mode):
            self.copy_resource_directory(destination, source, options)
        else:
            raise ConfigurationError(f"Unsupported resource type: {source}")

    def copy_resource_directory(
        self,
        destination: str | Path,
        source: str | Path,
        options: ResourceOptions | None = None,
    ) -> None:
        """
        Copy a directory, recursively unless ``no_recurse`` is set.

        Names matching ``excludes`` are skipped along with their contents.
        """
        self._assert_is_open()
        source = Path(source)
        self.create_resource_directory(
            destination,
            expand_copy_options(options, source) if options else options,
        )
        if options and options.no_recurse:
            return

        child_options = evolve(options or ResourceOptions(), no_recurse=True)
        for root, dirs, files in os.walk(source):
            dirs[:] = sorted(d for d in dirs if not self.is_excluded_file(d))
            relative_root = Path(root).relative_to(source)
            for name in [*dirs, *sorted(files)]:
                if self.is_excluded_file(name):
                    continue
                relative = relative_root / name
                self.copy_resource(Path(destination) / relative, source / relative, child_options)

    def copy_resource_file(
        self,
        destination: str | Path,
        source: str | Path,
        options: ResourceOptions | None = None,
    ) -> None:
        self._assert_is_open()
        source = Path(source)
        with source.open("rb") as handle:
            self.stream_resource_file(
                destination,
                handle,
                expand_copy_options(options, source) if options else options,
            )

    def copy_resource_symlink(
        self,
        destination: str | Path,
        source: str | Path,
        options: ResourceOptions | None = None,
    ) -> None:
        self._assert_is_open()
        source = Path(source)
        self.create_resource_symlink(
            destination,
            os.readlink(source),
            expand_copy_options(options, source, follow_symlinks=False) if options else options,
        )

    def create_resource_directory(self, destination: str | Path, options: ResourceOptions | None = None) -> None:
        """Create a directory; its timestamps are applied when the bundle closes."""
        self._assert_is_open()
        dest = self._assert_not_resource_exists(destination, allow_directory=bool(options and options.merge))
        ensure_dir(dest)
        if options and options.has_times:
            self._deferred.add(dest, options)

    def create_resource_file(
        self,
        destination: str | Path,
        data: bytes | str,
        options: ResourceOptions | None = None,
    ) -> None:
        self._assert_is_open()
        payload = data.encode("utf-8") if isinstance(data, str) else data
        self.stream_resource_file(destination, io.BytesIO(payload), options)

    def create_resource_symlink(
        self,
        destination: str | Path,
        target: str | Path,
        options: ResourceOptions | None = None,
    ) -> None:
        self._assert_is_open()
        dest = self._assert_not_resource_exists(destination)
        ensure_parent_dir(dest)
        os.symlink(target, dest)
        if options:
            set_resource_attributes(dest, options)

    def stream_resource_file(
        self,
        destination: str | Path,
        data: BinaryIO | Iterable[bytes],
        options: ResourceOptions | None = None,
    ) -> None:
        """Write a new file from a binary stream or an iterable of chunks."""
        self._assert_is_open()
        dest = self._assert_not_resource_exists(destination)
        ensure_parent_dir(dest)
        with dest.open("xb") as out:
            if hasattr(data, "read"):
                shutil.copyfileobj(data, out, COPY_CHUNK_SIZE)
            else:
                for chunk in data:
                    out.write(chunk)
        if options:
            set_resource_attributes(dest, options)
        logger.trace("Wrote resource", path=str(dest))

    def _check_output(self) -> None:
        paths = [self.path]
        if not self.flat:
            paths.append(self.resource_path(""))
        for path in paths:
            if os.path.lexists(path):
                raise OutputAlreadyExistsError(str(path))

    def _assert_is_open(self) -> None:
        if not self._is_open:
            raise BundleStateError("Not open")

    def _assert_not_resource_exists(self, destination: str | Path, allow_directory: bool = False) -> Path:
        dest = self.resource_path(destination)
        if os.path.lexists(dest) and not (allow_directory and dest.is_dir() and not dest.is_symlink()):
            raise ResourceExistsError(str(dest))
        return dest


# 🌶️📦🔚
