#
# SPDX-FileCopyrightText: Copyright (c) 2025 provide.io llc. All rights reserved.
# SPDX-License-Identifier: Apache-2.0
#

"""Shared path and payload helpers."""

from __future__ import annotations

from dirprojector.utils.data import PayloadData, encode_payload, resolve_payload
from dirprojector.utils.paths import (
    html_encode,
    path_relative_base,
    path_relative_base_match,
    trim_extension,
)

__all__ = [
    "PayloadData",
    "encode_payload",
    "html_encode",
    "path_relative_base",
    "path_relative_base_match",
    "resolve_payload",
    "trim_extension",
]

# 🌶️📦🔚
