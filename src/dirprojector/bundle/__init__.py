#
# SPDX-FileCopyrightText: Copyright (c) 2025 provide.io llc. All rights reserved.
# SPDX-License-Identifier: Apache-2.0
#

"""Bundles wrapping a projector with resources and a launcher."""

from __future__ import annotations

from dirprojector.bundle.bundle import Bundle
from dirprojector.bundle.resources import (
    DeferredAttributes,
    ResourceOptions,
    expand_copy_options,
    set_resource_attributes,
)

__all__ = [
    "Bundle",
    "DeferredAttributes",
    "ResourceOptions",
    "expand_copy_options",
    "set_resource_attributes",
]

# 🌶️📦🔚
