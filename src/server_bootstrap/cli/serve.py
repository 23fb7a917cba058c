"""CLI serve command for daemon mode.

This module provides the `server-bootstrap serve` command that runs the
selected server variant as a long-lived process suitable for systemd
management.
"""

import logging
import sys
from pathlib import Path

import click

from server_bootstrap.bootstrap.exit_codes import ExitCode
from server_bootstrap.bootstrap.orchestrator import create_orchestrator
from server_bootstrap.bootstrap.selector import load_most_specialized_variant

logger = logging.getLogger(__name__)


@click.command(
    "serve",
    context_settings={"ignore_unknown_options": True},
)
@click.option(
    "--config",
    "-c",
    "config_path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Path to configuration file (default: ~/.server-bootstrap/config.toml).",
)
@click.argument("args", nargs=-1, type=click.UNPROCESSED)
def serve_command(config_path: Path | None, args: tuple[str, ...]) -> None:
    """Run the server as a background daemon.

    Selects the most specialized installed variant, starts it, and blocks
    until SIGTERM (from systemd) or SIGINT (Ctrl+C) shuts it down.

    \b
    Exit codes:
      0 - Clean shutdown
      1 - Server startup failed (bad configuration, port in use, ...)
      2 - Database startup failed (location locked by another process, ...)

    Extra ARGS are accepted and passed through, but currently unused.
    """
    try:
        variant = load_most_specialized_variant()
        orchestrator = create_orchestrator(variant, config_path=config_path)
        exit_code = orchestrator.start(args)
    except KeyboardInterrupt:
        # User pressed Ctrl+C before signal handlers were installed
        logger.info("Interrupted before server started")
        sys.exit(130)

    if exit_code != ExitCode.OK:
        sys.exit(int(exit_code))

    orchestrator.wait_for_shutdown()
    sys.exit(int(orchestrator.stop_code or 0))
