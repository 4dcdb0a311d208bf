"""
Click-based CLI for Terminal Intelligence.

This module provides the main Click group and entry point.
Commands are organized in the commands/ subpackage.
"""
import click
import logging
import sys
from pathlib import Path

from terminal_intel.core.errors import ConfigError, TerminalIntelError
from .context import CLIContext

# Configure logging format
logging.basicConfig(
    level=logging.INFO,
    format='%(message)s'
)


@click.group()
@click.option('-v', '--verbose', is_flag=True, help='Enable verbose output')
@click.option(
    '--config-dir',
    type=click.Path(file_okay=False, path_type=Path),
    help='Directory containing terminal-intel.yaml'
)
@click.pass_context
def cli(ctx, verbose, config_dir):
    """
    Terminal Intelligence - language commanders for your shell.

    Generates commander model files, registers them with Ollama and keeps
    one alias per language in your shell profile.
    """
    ctx.obj = CLIContext(verbose=verbose, config_dir=config_dir)

    # Configure logging level based on verbosity
    if verbose:
        logging.getLogger().setLevel(logging.DEBUG)
    else:
        level = ctx.obj.get_config().get("logging.level", "INFO")
        try:
            logging.getLogger().setLevel(str(level).upper())
        except ValueError:
            raise ConfigError(f"Unknown logging.level: {level}")


from .commands.misc import info, setup

cli.add_command(info)
cli.add_command(setup)

from .commands.generate import generate, batch

cli.add_command(generate)
cli.add_command(batch)

from .commands.aliases import plan, aliases

cli.add_command(plan)
cli.add_command(aliases)


def main():
    """
    Main entry point for the CLI.

    Used by the console script and __main__.py.
    """
    try:
        cli()
    except TerminalIntelError as e:
        click.secho(f"Error: {e}", fg='red', err=True)
        sys.exit(1)


if __name__ == '__main__':
    main()
