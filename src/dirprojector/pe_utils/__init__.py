"""Windows PE Executable Utilities for projector skeletons.

Provides resource-section editing (icons, version info), Authenticode
signature handling and COFF machine detection.
"""

from dirprojector.pe_utils.editor import (
    copy_resources,
    pe_resource_replace,
    read_resources,
    replace_resource_section,
    select_launcher_resources,
)
from dirprojector.pe_utils.icons import IconFile, IconGroup, icon_groups
from dirprojector.pe_utils.resources import RT_GROUP_ICON, RT_ICON, RT_VERSION, ResourceEntry
from dirprojector.pe_utils.signature import pe_checksum, signature_get, signature_set, signature_strip
from dirprojector.pe_utils.validation import (
    IMAGE_FILE_MACHINE_AMD64,
    IMAGE_FILE_MACHINE_I386,
    get_machine_type,
    get_pe_header_offset,
    is_pe_executable,
)
from dirprojector.pe_utils.version import VersionInfo, pe_version_ints

__all__ = [
    "IMAGE_FILE_MACHINE_AMD64",
    "IMAGE_FILE_MACHINE_I386",
    "RT_GROUP_ICON",
    "RT_ICON",
    "RT_VERSION",
    "IconFile",
    "IconGroup",
    "ResourceEntry",
    "VersionInfo",
    "copy_resources",
    "get_machine_type",
    "get_pe_header_offset",
    "icon_groups",
    "is_pe_executable",
    "pe_checksum",
    "pe_resource_replace",
    "pe_version_ints",
    "read_resources",
    "replace_resource_section",
    "select_launcher_resources",
    "signature_get",
    "signature_set",
    "signature_strip",
]
