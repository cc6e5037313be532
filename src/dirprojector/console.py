#
# SPDX-FileCopyrightText: Copyright (c) 2025 provide.io llc. All rights reserved.
# SPDX-License-Identifier: Apache-2.0
#

"""Console helpers for CLI commands."""

from __future__ import annotations

from typing import Any

import click
from provide.foundation import logger


class CommandLogger:
    """Structured logger that tags every event with the CLI command name."""

    def __init__(self, command: str) -> None:
        self.command = command

    def trace(self, event: str, **kwargs: Any) -> None:
        logger.trace(event, command=self.command, **kwargs)

    def debug(self, event: str, **kwargs: Any) -> None:
        logger.debug(event, command=self.command, **kwargs)

    def info(self, event: str, **kwargs: Any) -> None:
        logger.info(event, command=self.command, **kwargs)

    def warning(self, event: str, **kwargs: Any) -> None:
        logger.warning(event, command=self.command, **kwargs)

    def error(self, event: str, **kwargs: Any) -> None:
        logger.error(event, command=self.command, **kwargs)


def get_command_logger(command: str) -> CommandLogger:
    return CommandLogger(command)


def parse_key_values(values: tuple[str, ...], option: str) -> dict[str, str]:
    """
    Parse repeated ``KEY=VALUE`` option values, keeping their order.

    Raises:
        click.BadParameter: For values without ``=``
    """
    result: dict[str, str] = {}
    for value in values:
        key, sep, rest = value.partition("=")
        if not sep or not key:
            raise click.BadParameter(f"Expected KEY=VALUE, got {value!r}", param_hint=option)
        result[key] = rest
    return result


# 🌶️📦🔚
