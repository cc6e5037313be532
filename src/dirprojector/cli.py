#
# SPDX-FileCopyrightText: Copyright (c) 2025 provide.io llc. All rights reserved.
# SPDX-License-Identifier: Apache-2.0
#

"""dirprojector command-line interface entrypoint."""

from __future__ import annotations

from attrs import evolve
import click
from provide.foundation import CLIContext, TelemetryConfig, get_hub
from provide.foundation.utils import get_version

from dirprojector.commands.build import build_command
from dirprojector.commands.inspect import inspect_command
from dirprojector.commands.pe_resources import pe_resources_command
from dirprojector.config import DirProjectorRuntimeConfig

__version__ = get_version("dirprojector", caller_file=__file__)


@click.group(context_settings=dict(help_option_names=["-h", "--help"]))
@click.version_option(
    __version__,
    "-V",
    "--version",
    prog_name="dirprojector",
    message="%(prog)s version %(version)s",
)
@click.pass_context
def cli(ctx: click.Context) -> None:
    """Director projector and bundle builder.

    Configure logging via environment variables:
    - DIRPROJECTOR_LOG_LEVEL: Log level for dirprojector (trace, debug, info, warning, error)
    - DIRPROJECTOR_LAUNCHERS_DIR: Extra directory searched for launcher stubs
    - DIRPROJECTOR_HDIUTIL: hdiutil binary used to mount dmg skeletons
    - PROVIDE_LOG_FILE: Write logs to file
    """
    ctx.ensure_object(dict)

    runtime_config = DirProjectorRuntimeConfig.from_env()
    cli_ctx = CLIContext.from_env()
    base_telemetry = TelemetryConfig.from_env()

    telemetry_config = evolve(
        base_telemetry,
        service_name="dirprojector",
        logging=evolve(
            base_telemetry.logging,
            default_level=runtime_config.log_level,  # type: ignore[arg-type]
        ),
    )

    hub = get_hub()
    hub.initialize_foundation(telemetry_config)

    ctx.obj["cli_context"] = cli_ctx
    ctx.obj["log"] = cli_ctx.logger


cli.add_command(build_command, name="build")
cli.add_command(pe_resources_command, name="pe-resources")
cli.add_command(inspect_command, name="inspect")

main = cli

if __name__ == "__main__":
    cli()

# 🌶️📦🔚
