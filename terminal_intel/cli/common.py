"""
Common Click decorators and utilities for CLI commands.

Provides reusable option decorators to reduce boilerplate across command definitions.
"""
import functools

import click
from pathlib import Path
from typing import Callable, List, Optional

from terminal_intel.core.errors import TerminalIntelError
from terminal_intel.core.models import Entry, ShellDialect
from terminal_intel.readers.entry_reader import load_entries


def csv_argument(f: Callable) -> Callable:
    """
    Add an optional CSV_FILE argument (default: entries.path from config).

    Args:
        f: Command function to decorate

    Returns:
        Decorated function with csv_file argument
    """
    return click.argument(
        'csv_file',
        required=False,
        type=click.Path(path_type=Path),
    )(f)


def profile_options(f: Callable) -> Callable:
    """
    Add --profile and --shell options to command.

    Allows users to target a profile file other than the one derived from
    their login shell.
    """
    f = click.option(
        '--shell',
        type=click.Choice([d.value for d in ShellDialect]),
        help='Profile dialect (default: detected from $SHELL)'
    )(f)
    return click.option(
        '--profile',
        type=click.Path(path_type=Path),
        help='Profile file to update (default: ~/.bashrc, ~/.zshrc or PowerShell profile)'
    )(f)


def output_dir_option(default: Optional[str] = None) -> Callable:
    """
    Add --output-dir/-o option to command.

    Args:
        default: Default output directory (default: commander.output_dir from config)

    Returns:
        Decorator function
    """
    def decorator(f: Callable) -> Callable:
        return click.option(
            '-o', '--output-dir',
            type=click.Path(path_type=Path),
            default=default,
            help='Directory for commander files (default: commander.output_dir)'
        )(f)
    return decorator


def resolve_entries(ctx_obj, csv_file: Optional[Path]) -> List[Entry]:
    """Load entries from the given CSV or the configured default."""
    path = csv_file or Path(ctx_obj.get_config().get("entries.path", "languages.csv"))
    return load_entries(path)


def resolve_output_dir(ctx_obj, output_dir: Optional[Path]) -> Path:
    return output_dir or Path(ctx_obj.get_config().get("commander.output_dir", "."))


def reports_errors(f: Callable) -> Callable:
    """
    Turn expected failures into a red message and exit status 1.

    Anything derived from TerminalIntelError is reported without a traceback.
    """
    @functools.wraps(f)
    def wrapper(*args, **kwargs):
        try:
            return f(*args, **kwargs)
        except TerminalIntelError as e:
            click.secho(f"Error: {e}", fg='red', err=True)
            raise click.Abort()
    return wrapper
