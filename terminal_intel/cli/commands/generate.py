"""
Commander file CLI commands (generate, batch).

Commands for rendering commander files from the template and registering
them as Ollama models.
"""
import click

from terminal_intel.cli.common import (
    csv_argument,
    output_dir_option,
    reports_errors,
    resolve_entries,
    resolve_output_dir,
)
from terminal_intel.cli.console import print_error, print_success, print_warning
from terminal_intel.core.errors import CommanderFileError, RegistryError
from terminal_intel.core.models import Entry


@click.command()
@click.argument('language')
@click.argument('identifier')
@output_dir_option()
@click.option('--no-create', is_flag=True, help='Only write the file, do not create the model')
@click.pass_obj
@reports_errors
def generate(obj, language, identifier, output_dir, no_create):
    """Generate one commander file and create its model.

    Example: terminal-intel generate Python py-commander
    """
    output_dir = resolve_output_dir(obj, output_dir)
    generator = obj.get_generator()
    entry = Entry(name=language, identifier=identifier)

    if no_create:
        path = generator.generate(entry, output_dir)
        click.echo(f"Generated {path} with '{language}' replacing 'PowerShell'")
        return

    registry = obj.get_registry()
    path = generator.generate_and_register(entry, registry, output_dir)
    click.echo(f"Generated {path} with '{language}' replacing 'PowerShell'")
    click.secho(f"✓ Successfully created Ollama model: {identifier}", fg='green')


@click.command()
@csv_argument
@output_dir_option()
@click.option('--no-create', is_flag=True, help='Only write the files, do not create the models')
@click.option('--missing-only', is_flag=True, help='Skip entries whose commander file already exists')
@click.pass_obj
@reports_errors
def batch(obj, csv_file, output_dir, no_create, missing_only):
    """Generate commander files (and models) for every CSV entry."""
    entries = resolve_entries(obj, csv_file)
    output_dir = resolve_output_dir(obj, output_dir)
    generator = obj.get_generator()
    registry = None if no_create else obj.get_registry()

    if missing_only:
        entries = generator.missing_files(entries, output_dir)

    click.echo(f"Processing {len(entries)} languages...")
    click.echo("=" * 40)

    failed = 0
    for entry in entries:
        click.echo(f"Generating {entry.identifier} for {entry.name}...")
        try:
            if registry is None:
                generator.generate(entry, output_dir)
            else:
                generator.generate_and_register(entry, registry, output_dir)
        except (CommanderFileError, RegistryError) as e:
            print_error(str(e))
            failed += 1
            continue
        print_success(f"{entry.identifier} ready")

    click.echo("=" * 40)
    if failed:
        print_warning(f"{failed} of {len(entries)} entries failed")
        raise click.Abort()
    click.secho("All files generated successfully!", fg='green')
