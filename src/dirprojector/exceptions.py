#
# SPDX-FileCopyrightText: Copyright (c) 2025 provide.io llc. All rights reserved.
# SPDX-License-Identifier: Apache-2.0
#

"""Custom exceptions for dirprojector."""

from __future__ import annotations

from collections.abc import Iterable

from provide.foundation.errors import FoundationError


class ProjectorError(FoundationError):
    """Base exception for all projector-related errors."""

    pass


class ConfigurationError(ProjectorError):
    """Raised when a projector configuration is incomplete or inconsistent."""

    pass


class OutputAlreadyExistsError(ProjectorError):
    """Raised when an output path exists before a build starts."""

    def __init__(self, path: str) -> None:
        self.path = path
        super().__init__(f"Output path already exists: {path}")


class SkeletonError(ProjectorError):
    """Raised for skeletons that cannot be opened or do not match the expected layout."""

    pass


class UnsupportedSkeletonFormatError(SkeletonError):
    """Raised when a skeleton file has no known archive extension."""

    def __init__(self, path: str) -> None:
        self.path = path
        super().__init__(f"Unsupported skeleton format: {path}")


class SkeletonNotFileOrDirectoryError(SkeletonError):
    """Raised when the skeleton path is neither a file nor a directory."""

    def __init__(self, path: str) -> None:
        self.path = path
        super().__init__(f"Skeleton path not a file or directory: {path}")


class MissingSkeletonEntryError(SkeletonError):
    """Raised once after a full skeleton pass, naming every missing marker."""

    def __init__(self, missing: Iterable[str]) -> None:
        self.missing = list(missing)
        super().__init__(f"Invalid skeleton, missing: {', '.join(self.missing)}")


class BytePatchError(ProjectorError):
    """Raised when a byte-pattern patch site is missing or ambiguous."""

    def __init__(self, name: str, message: str) -> None:
        self.name = name
        super().__init__(f"{message}: {name}")


class NoPatchCandidateError(BytePatchError):
    """No template matched anywhere in the buffer."""

    def __init__(self, name: str) -> None:
        super().__init__(name, "No patch candidates found for")


class AmbiguousPatchCandidateError(BytePatchError):
    """More than one offset matched across all templates."""

    def __init__(self, name: str) -> None:
        super().__init__(name, "Multiple patch candidates found for")


class ExecutableFormatError(ProjectorError):
    """Raised when a native executable cannot be parsed or rewritten."""

    pass


class MalformedExecutableError(ExecutableFormatError):
    """Raised for truncated or invalid PE and Mach-O structures."""

    pass


class NonFinalResourceSectionError(ExecutableFormatError):
    """Raised when the resource section is followed by another section."""

    def __init__(self, section: str) -> None:
        self.section = section
        super().__init__(f"Resource section is not the last section: {section}")


class UnknownMachineTypeError(ExecutableFormatError):
    """Raised for COFF machine types without a matching launcher."""

    def __init__(self, machine: int) -> None:
        self.machine = machine
        super().__init__(f"Unknown machine type: 0x{machine:x}")


class UnknownHeaderMagicError(ExecutableFormatError):
    """Raised for data that is not a thin or FAT Mach-O binary."""

    def __init__(self, magic: int) -> None:
        self.magic = magic
        super().__init__(f"Unknown header magic: 0x{magic:08x}")


class UnknownCpuTypeError(ExecutableFormatError):
    """Raised for Mach-O CPU types without a launcher payload."""

    def __init__(self, cpu_type: int) -> None:
        self.cpu_type = cpu_type
        super().__init__(f"Unknown CPU type: 0x{cpu_type:x}")


class PatchTargetNotFoundError(ProjectorError):
    """Raised when a configured file patch never found its target entry."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"Failed to locate file to patch: {name}")


class LauncherNotFoundError(ProjectorError):
    """Raised when a precompiled launcher stub cannot be located."""

    def __init__(self, name: str, searched: Iterable[str]) -> None:
        self.name = name
        self.searched = list(searched)
        super().__init__(f"Launcher '{name}' not found. Searched in: {', '.join(self.searched)}")


class BundleStateError(ProjectorError):
    """Raised for bundle operations attempted in the wrong open/closed state."""

    pass


class ResourceExistsError(ProjectorError):
    """Raised when a bundle resource destination already exists."""

    def __init__(self, path: str) -> None:
        self.path = path
        super().__init__(f"Resource path exists: {path}")


# 🌶️📦🔚
