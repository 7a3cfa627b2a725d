"""
CLI entry point for osbclient.

Provides command-line access to a single service broker: catalog retrieval,
instance and binding lifecycle operations, and last-operation queries.
"""

import logging
import sys
from pathlib import Path
from typing import Optional

import click


from osbclient._version import __version__
from osbclient.config.settings import get_default_config_path, load_config
from osbclient.core.version import all_versions, parse
from osbclient.exceptions import InvalidConfigurationError
from osbclient.logging_config import setup_logging
from osbclient.cli.context import CLIContext, pass_context


@click.group()
@click.option(
    '--config',
    '-c',
    type=click.Path(exists=False, dir_okay=False, path_type=Path),
    default=None,
    help=f'Path to configuration file (default: {get_default_config_path()})',
)
@click.option(
    '--log-level',
    '-l',
    type=click.Choice(['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'], case_sensitive=False),
    default=None,
    help='Set logging level (overrides the configuration file)',
)
@click.option(
    '--verbose',
    '-v',
    is_flag=True,
    help='Enable verbose output, including broker request URLs and response bodies',
)
@click.option(
    '--url',
    default=None,
    help='Broker URL (overrides the configuration file)',
)
@click.option(
    '--api-version',
    type=click.Choice([v.label for v in all_versions()]),
    default=None,
    help='Broker API version (overrides the configuration file)',
)
@click.option(
    '--enable-alpha',
    is_flag=True,
    default=False,
    help='Exchange alpha-only fields with the broker',
)
@click.version_option(version=__version__, prog_name='osbclient')
@pass_context
def cli(
    ctx: CLIContext,
    config: Optional[Path],
    log_level: Optional[str],
    verbose: bool,
    url: Optional[str],
    api_version: Optional[str],
    enable_alpha: bool,
):
    """
    osbclient - Versioned client for the Open Service Broker API.

    Talks to one broker at a configured API version, gating every field and
    operation by that version.
    """
    ctx.verbose = verbose
    ctx.config_path = str(config) if config else None

    # Route log events to stderr before anything logs; stdout carries command output
    setup_logging(level=log_level.upper() if log_level else "WARNING", json_format=False)

    # Load configuration
    try:
        ctx.config = load_config(ctx.config_path)
    except InvalidConfigurationError as e:
        click.echo(f"Error: Invalid configuration: {e}", err=True)
        sys.exit(1)

    # Command-line overrides
    if url:
        ctx.config.url = url
    if api_version:
        ctx.config.api_version = parse(api_version)
    if enable_alpha:
        ctx.config.enable_alpha_features = True
    if verbose:
        ctx.config.verbose = True

    # Set up logging
    effective_log_level = log_level.upper() if log_level else ctx.config.logging.level
    log_file = Path(ctx.config.logging.file) if ctx.config.logging.file else None
    setup_logging(
        level=effective_log_level,
        log_file=log_file,
        json_format=ctx.config.logging.format == "json",
    )

    if verbose:
        logger = logging.getLogger("osbclient")
        logger.info(f"Loaded configuration from: {ctx.config_path or 'defaults'}")
        logger.info(f"Broker: {ctx.config.url} (API {ctx.config.api_version})")


from osbclient.cli.catalog import catalog, last_operation
cli.add_command(catalog)
cli.add_command(last_operation)


@cli.group()
def instance():
    """Manage service instances."""
    pass


# Import and register instance commands
from osbclient.cli.instance import deprovision, get as get_instance, provision, update
instance.add_command(provision)
instance.add_command(update)
instance.add_command(deprovision)
instance.add_command(get_instance, name='get')


@cli.group()
def binding():
    """Manage service bindings."""
    pass


# Import and register binding commands
from osbclient.cli.binding import bind, get as get_binding, rotate, unbind
binding.add_command(bind)
binding.add_command(unbind)
binding.add_command(rotate)
binding.add_command(get_binding, name='get')


if __name__ == '__main__':
    cli()
