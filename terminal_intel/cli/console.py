"""
Colored console output.

Status lines use the [INFO]/[SUCCESS]/[WARNING]/[ERROR] prefixes of the
original setup scripts. ConsoleObserver turns synchronizer events into such
lines.
"""
from typing import List

import click

from terminal_intel.core.models import AppendResult, Conflict, Entry, ProfileBlock, ReloadResult, SyncPlan
from terminal_intel.services.events import SyncObserver


def print_status(message: str):
    click.echo(click.style("[INFO]", fg="blue") + f" {message}")


def print_success(message: str):
    click.echo(click.style("[SUCCESS]", fg="green") + f" {message}")


def print_warning(message: str):
    click.echo(click.style("[WARNING]", fg="yellow") + f" {message}")


def print_error(message: str):
    click.echo(click.style("[ERROR]", fg="red") + f" {message}", err=True)


def print_header(title: str):
    rule = "=" * 43
    click.secho(f"\n{rule}", fg="blue")
    click.secho(f" {title}", fg="blue")
    click.secho(f"{rule}\n", fg="blue")


def print_legacy_hint(profile: str, blocks: List[ProfileBlock]):
    """One migration note for every alias left by the old setup scripts."""
    print_warning(
        f"{len(blocks)} alias line(s) in {profile} were written by an older setup "
        "script and run the model directly."
    )
    print_status("Remove these lines, then run again:")
    for block in blocks:
        click.echo(f"  line {block.start_line + 1}: {block.text.strip()}")


class ConsoleObserver(SyncObserver):
    """Reports synchronizer events on the terminal."""

    def __init__(self, cli: str = "ollama", verbose: bool = False):
        self.cli = cli
        self.verbose = verbose

    def entry_found(self, entry: Entry, alias: str) -> None:
        print_success(f"Found existing alias: {alias}")

    def entry_missing(self, entry: Entry, alias: str) -> None:
        print_warning(f"Missing alias: {alias}")

    def entry_conflict(self, conflict: Conflict) -> None:
        print_error(f"Inconsistent entry {conflict.entry.identifier}: {conflict.reason}")

    def plan_computed(self, plan: SyncPlan) -> None:
        for entry in plan.redundant:
            print_warning(f"Duplicate entry ignored: {entry.identifier}")
        if plan.is_empty and not plan.has_conflicts:
            print_success(f"All aliases already exist ({len(plan.existing)} aliases)")
        elif not plan.has_conflicts:
            print_status(f"Found {len(plan.missing)} missing aliases. Updating profile...")

    def backup_created(self, backup_path: str) -> None:
        print_status(f"Backup created: {backup_path}")

    def entry_appended(self, entry: Entry, alias: str) -> None:
        print_success(f"Creating alias: {alias} -> {self.cli} run {entry.identifier} ({entry.name})")

    def base_added(self, entry: Entry) -> None:
        print_success(f"Creating alias: {entry.alias} -> {self.cli} run {entry.identifier} ({entry.name})")

    def reload_finished(self, result: ReloadResult) -> None:
        if result.reloaded:
            print_success(result.message)
        else:
            print_warning(result.message)

    def run_complete(self, result: AppendResult) -> None:
        if result.changed:
            extra = " and the base model alias" if result.base_added else ""
            print_success(f"Added {result.appended} aliases{extra}")
