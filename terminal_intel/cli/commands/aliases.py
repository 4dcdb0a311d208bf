"""
Profile alias CLI commands (plan, aliases).

`plan` shows what a synchronization would do; `aliases` performs it.
"""
import click

from terminal_intel.cli.common import csv_argument, profile_options, reports_errors, resolve_entries
from terminal_intel.cli.console import ConsoleObserver, print_legacy_hint, print_status
from terminal_intel.core.naming import entry_alias
from terminal_intel.core.errors import ProfileInconsistencyError


@click.command()
@csv_argument
@profile_options
@click.pass_obj
@reports_errors
def plan(obj, csv_file, profile, shell):
    """Show which aliases exist, are missing or conflict (writes nothing)."""
    obj.apply_overrides(profile=profile, shell=shell)
    entries = resolve_entries(obj, csv_file)
    config = obj.get_config()
    store = obj.get_store()

    print_status(f"Checking {store.describe()} ({config.shell().value})...")
    synchronizer = obj.get_synchronizer(store, observer=ConsoleObserver(cli=config.get("registry.executable")))
    result = synchronizer.plan(entries)

    rules = config.alias_rules()
    for entry in result.missing:
        click.echo(f"  + {entry_alias(entry, rules)} -> {entry.identifier} ({entry.name})")

    legacy = synchronizer.legacy_aliases(entries)
    if legacy:
        print_legacy_hint(store.describe(), legacy)

    if result.has_conflicts:
        raise ProfileInconsistencyError(result.conflicts)


@click.command()
@csv_argument
@profile_options
@click.option('--no-reload', is_flag=True, help='Do not re-source the profile afterwards')
@click.pass_obj
@reports_errors
def aliases(obj, csv_file, profile, shell, no_reload):
    """Add missing commander aliases to the shell profile."""
    obj.apply_overrides(profile=profile, shell=shell)
    entries = resolve_entries(obj, csv_file)
    config = obj.get_config()
    store = obj.get_store()

    click.echo(f"Adding aliases to {store.describe()}...")
    click.echo("=" * 34)
    synchronizer = obj.get_synchronizer(store, observer=ConsoleObserver(cli=config.get("registry.executable")))
    legacy = synchronizer.legacy_aliases(entries)
    if legacy:
        print_legacy_hint(store.describe(), legacy)
    report = synchronizer.run(entries, reload=not no_reload)
    click.echo("=" * 34)

    if report.result.changed:
        click.secho("Aliases added successfully!", fg='green')
    else:
        click.echo("Profile already up to date.")
