"""
Miscellaneous CLI commands (info, setup).

`info` shows the resolved configuration; `setup` runs the whole flow.
"""
import sys

import click

from terminal_intel.cli.common import (
    csv_argument,
    output_dir_option,
    profile_options,
    reports_errors,
    resolve_output_dir,
)
from terminal_intel.cli.console import (
    ConsoleObserver,
    print_error,
    print_header,
    print_status,
    print_success,
    print_warning,
)
from terminal_intel.cli.orchestrators.setup import SetupOrchestrator

PROGRESS_PRINTERS = {
    "header": print_header,
    "info": print_status,
    "success": print_success,
    "warning": print_warning,
    "error": print_error,
}


@click.command()
@profile_options
@click.pass_obj
@reports_errors
def info(obj, profile, shell):
    """Show resolved paths and settings."""
    obj.apply_overrides(profile=profile, shell=shell)
    config = obj.get_config()
    click.echo(f"Shell: {config.shell().value}")
    click.echo(f"Profile: {config.profile_path()}")
    click.echo(f"Entry source: {config.get('entries.path')}")
    click.echo(f"Registry executable: {config.get('registry.executable')}")
    click.echo(f"Base model: {config.get('base.identifier')} (alias {config.get('base.alias')})")
    click.echo(f"Config sources: {', '.join(s.name for s in config.sources)}")
    click.echo(f"Python: {sys.version.split()[0]}")
    click.echo(f"Platform: {sys.platform}")


@click.command()
@csv_argument
@output_dir_option()
@profile_options
@click.option('--no-reload', is_flag=True, help='Do not re-source the profile afterwards')
@click.pass_obj
@reports_errors
def setup(obj, csv_file, output_dir, profile, shell, no_reload):
    """Generate commander files, create models and set up aliases."""
    obj.apply_overrides(profile=profile, shell=shell)
    config = obj.get_config()
    csv_path = csv_file or config.get("entries.path", "languages.csv")
    output_dir = resolve_output_dir(obj, output_dir)

    print_header("Terminal Intelligence Setup Starting")
    orchestrator = SetupOrchestrator(
        registry=obj.get_registry(),
        generator=obj.get_generator(),
        synchronizer=obj.get_synchronizer(
            obj.get_store(), observer=ConsoleObserver(cli=config.get("registry.executable"))
        ),
        progress=lambda level, message: PROGRESS_PRINTERS[level](message),
    )
    stats = orchestrator.run_setup(csv_path, output_dir, reload=not no_reload)

    print_header("Setup Complete!")
    files_ready = stats['files_existing'] + len(stats['files_generated'])
    models_ready = stats['models_existing'] + len(stats['models_created'])
    aliases_ready = stats['aliases_existing'] + stats['aliases_added']
    click.echo(click.style("✓", fg='green') + f" Commander files: {files_ready} files ready")
    click.echo(click.style("✓", fg='green') + f" Ollama models: {models_ready} models available")
    click.echo(click.style("✓", fg='green') + f" Shell aliases: {aliases_ready} aliases configured")

    nothing_new = not (stats['files_generated'] or stats['models_created'] or stats['aliases_added'])
    if nothing_new and not stats['models_failed']:
        print_success("Terminal Intelligence is fully up to date! All components were already in place.")
    else:
        print_success("Terminal Intelligence setup completed successfully!")

    if stats['aliases']:
        print_status(f"You can now use commands like: {', '.join(stats['aliases'])}")
        print_status(f"Example: {stats['aliases'][0]} 'read a CSV file and print its first rows'")
    print_status("Tip: You can add new languages to the CSV and run this command again!")

    if stats['models_failed']:
        raise click.Abort()
