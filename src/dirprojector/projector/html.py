#
# SPDX-FileCopyrightText: Copyright (c) 2025 provide.io llc. All rights reserved.
# SPDX-License-Identifier: Apache-2.0
#

"""HTML pages embedding a Shockwave movie with ``<object>`` and ``<embed>``."""

from __future__ import annotations

import os
from pathlib import Path
import re
from typing import TYPE_CHECKING

from provide.foundation import logger

from dirprojector.archive import write_file
from dirprojector.exceptions import ConfigurationError
from dirprojector.projector.config import HtmlAttribute, HtmlProjectorConfig, ProjectorConfig
from dirprojector.utils.paths import html_encode

if TYPE_CHECKING:
    from dirprojector.projector.engine import ProjectorBuild

_LEADING_SPACES = re.compile(r"^ +")

_STYLE = [
    "   * {",
    "    margin: 0;",
    "    padding: 0;",
    "   }",
    "   html,",
    "   body {",
    "    height: 100%;",
    "   }",
]

_STYLE_TAIL = [
    "    font-family: Verdana, Geneva, sans-serif;",
    "   }",
    "   object,",
    "   embed {",
    "    display: block;",
    "    outline: 0;",
    "   }",
    "   object:focus,",
    "   embed:focus {",
    "    outline: 0;",
    "   }",
    "   .main {",
    "    display: table;",
    "    height: 100%;",
    "    width: 100%;",
    "   }",
    "   .player {",
    "    display: table-cell;",
    "    vertical-align: middle;",
    "   }",
    "   .player object,",
    "   .player embed {",
    "    margin: 0 auto;",
    "   }",
]


def _attribute_value(value: HtmlAttribute) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def _indent_with_tabs(lines: list[str]) -> str:
    return "\n".join(_LEADING_SPACES.sub(lambda m: "\t" * len(m.group(0)), line) for line in lines)


def generate_html(config: HtmlProjectorConfig) -> str:
    """
    Generate the default embedding page.

    Raises:
        ConfigurationError: If src, width or height is missing
    """
    if not config.src:
        raise ConfigurationError("Required property: src")
    if config.width is None:
        raise ConfigurationError("Required property: width")
    if config.height is None:
        raise ConfigurationError("Required property: height")

    obj: dict[str, str] = {"classid": config.classid}
    if config.codebase is not None:
        obj["codebase"] = config.codebase
    obj["width"] = str(config.width)
    obj["height"] = str(config.height)
    if config.id is not None:
        obj["id"] = config.id

    param: dict[str, str] = {"movie": config.src}

    embed: dict[str, str] = {"type": config.type}
    if config.pluginspage is not None:
        embed["pluginspage"] = config.pluginspage
    embed["width"] = str(config.width)
    embed["height"] = str(config.height)
    embed["src"] = config.src

    if config.name is not None:
        obj["name"] = config.name
        param["name"] = config.name
        embed["name"] = config.name

    player_params: list[tuple[str, HtmlAttribute]] = [
        ("bgcolor", config.bgcolor),
        ("swstretchstyle", config.sw_stretch_style),
        ("swstretchhalign", config.sw_stretch_h_align),
        ("swStretchvalign", config.sw_stretch_v_align),
        ("swremote", config.sw_remote),
        ("sw1", config.sw1),
        ("sw2", config.sw2),
        ("sw3", config.sw3),
        ("sw4", config.sw4),
        ("sw5", config.sw5),
        ("sw6", config.sw6),
        ("sw7", config.sw7),
        ("sw8", config.sw8),
        ("sw9", config.sw9),
        ("progress", config.progress),
        ("logo", config.logo),
        ("playerversion", config.player_version),
    ]
    for key, value in player_params:
        if value is not None:
            param[key] = _attribute_value(value)
            embed[key] = _attribute_value(value)

    doc_attr = "" if config.lang is None else f" lang={html_encode(config.lang, dq=True)}"
    lines = [
        "<!DOCTYPE html>",
        f"<html{doc_attr}>",
        " <head>",
        '  <meta charset="UTF-8">',
        '  <meta http-equiv="X-UA-Compatible" content="IE=Edge">',
    ]
    if config.title is not None:
        lines.append(f"  <title>{html_encode(config.title)}</title>")
    lines += ["  <style>", *_STYLE, "   body {"]
    if config.background is not None:
        lines.append(f"    background: {html_encode(config.background)};")
    if config.color is not None:
        lines.append(f"    color: {html_encode(config.color)};")
    lines += [
        *_STYLE_TAIL,
        "  </style>",
        " </head>",
        " <body>",
        '  <div class="main">',
        '   <div class="player">',
        "    <object",
        *(f'     {key}="{html_encode(value, dq=True)}"' for key, value in obj.items()),
        "    >",
        *(f'     <param name="{key}" value="{html_encode(value, dq=True)}">' for key, value in param.items()),
        "     <embed",
        *(f'      {key}="{html_encode(value, dq=True)}"' for key, value in embed.items()),
        "     >",
        "    </object>",
        "   </div>",
        "  </div>",
        " </body>",
        "</html>",
        "",
    ]
    return _indent_with_tabs(lines)


def html_document(config: HtmlProjectorConfig) -> str:
    """The custom document when one is configured, else the generated one."""
    if config.html is None:
        return generate_html(config)
    return config.html(config) if callable(config.html) else config.html


def write_html_projector(build: ProjectorBuild) -> None:
    config = build.config
    assert isinstance(config, HtmlProjectorConfig)
    document = html_document(config).encode("utf-8")
    write_file(config.path, document)
    logger.debug("Wrote HTML document", path=str(config.path), size=len(document))


def redirect_html(target: str) -> str:
    """A page that forwards the browser to a relative URL."""
    url = html_encode(target, dq=True)
    lines = [
        "<!DOCTYPE html>",
        "<html>",
        " <head>",
        '  <meta charset="UTF-8">',
        f'  <meta http-equiv="refresh" content="0;url={url}">',
        " </head>",
        " <body>",
        f'  <a href="{url}">{html_encode(target)}</a>',
        " </body>",
        "</html>",
        "",
    ]
    return _indent_with_tabs(lines)


def write_html_launcher(config: ProjectorConfig | HtmlProjectorConfig, launcher_path: Path) -> None:
    """Write a redirect page at launcher_path pointing to the nested page."""
    target = Path(os.path.relpath(config.path, launcher_path.parent)).as_posix()
    write_file(launcher_path, redirect_html(target).encode("utf-8"))
    logger.info("Wrote launcher", path=str(launcher_path), target=target)


# 🌶️📦🔚
