import logging
import os

import click

from patchferry.cli.commands.upstream import upstream_cmd

CONTEXT_SETTINGS = dict(help_option_names=["-h", "--help"])  # terse help flags

DEBUG_ENV_VAR = "PATCHFERRY_DEBUG"


def configure_logging(verbose: bool) -> None:
    """Send pipeline logs to stderr; DEBUG with --verbose or PATCHFERRY_DEBUG set."""
    debug = verbose or bool(os.environ.get(DEBUG_ENV_VAR))
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.INFO,
        format="[%(levelname)s %(name)s] %(message)s",
    )


@click.group(context_settings=CONTEXT_SETTINGS)
@click.version_option(package_name="patchferry")
@click.option("-v", "--verbose", is_flag=True, help="Show debug logging.")
def cli(verbose: bool) -> None:
    """Forward fork commits onto an upstream patch-staging branch."""
    configure_logging(verbose)


cli.add_command(upstream_cmd)


def main() -> None:
    """CLI entry point used by the `patchferry` console script."""
    cli()
