"""
Profile synchronization.

Decides which commander entries already exist in a shell profile and appends
only the missing ones. Running it twice in a row changes nothing the second
time.
"""
import logging
import shutil
import subprocess
from datetime import datetime
from typing import Callable, Iterable, List, Optional, Set

from terminal_intel.core.errors import ProfileInconsistencyError
from terminal_intel.core.models import (
    AppendResult,
    Conflict,
    Entry,
    ProfileBlock,
    ReloadResult,
    ShellDialect,
    SyncPlan,
    SyncReport,
)
from terminal_intel.core.naming import DEFAULT_RULES, AliasRules, derive_function_name, entry_alias
from terminal_intel.profile.dialects import get_syntax
from terminal_intel.profile.parser import ProfileIndex, parse_profile
from terminal_intel.profile.store import ProfileStore
from terminal_intel.services.events import SyncObserver

logger = logging.getLogger(__name__)

DEFAULT_CLI = "ollama"
BASE_ENTRY = Entry(name="Base Model", identifier="gemma3:12b", alias="oll")

SECTION_HEADER = "# Terminal Intelligence commanders - added {timestamp}"
SECTION_FOOTER = "# End of Terminal Intelligence commanders"

# Entry states returned by check_entry
PRESENT = "present"
ABSENT = "absent"


def find_legacy_alias(
    entry: Entry,
    index: ProfileIndex,
    dialect: ShellDialect,
    rules: AliasRules = DEFAULT_RULES,
) -> Optional[ProfileBlock]:
    """Alias that runs the model directly instead of going through the function."""
    alias_block = index.alias(entry_alias(entry, rules))
    if alias_block is None or alias_block.target == derive_function_name(entry.identifier, dialect):
        return None
    if alias_block.invokes != entry.identifier:
        return None
    return alias_block


def check_entry(
    entry: Entry,
    index: ProfileIndex,
    dialect: ShellDialect,
    rules: AliasRules = DEFAULT_RULES,
) -> str:
    """
    Classify one entry against a parsed profile.

    Returns
    ----
    str
        PRESENT when both the function definition and an alias pointing at it
        exist, ABSENT when neither exists, otherwise a human-readable reason
        describing the inconsistency.
    """
    function_name = derive_function_name(entry.identifier, dialect)
    alias = entry_alias(entry, rules)
    definition = index.definition(function_name)
    alias_block = index.alias(alias)

    if definition is None and alias_block is None:
        return ABSENT

    if definition is not None and definition.invokes not in (None, entry.identifier):
        return (
            f"function {function_name} runs '{definition.invokes}' "
            f"instead of '{entry.identifier}'"
        )

    legacy = find_legacy_alias(entry, index, dialect, rules)
    if legacy is not None:
        return (
            f"legacy alias '{alias}' calls the model directly; "
            f"remove line {legacy.start_line + 1} and re-run"
        )
    if alias_block is not None and alias_block.target != function_name:
        return f"alias '{alias}' is already bound to '{alias_block.target}'"

    if definition is None:
        return f"alias '{alias}' exists but function {function_name} is missing"
    if alias_block is None:
        return f"function {function_name} exists but alias '{alias}' is missing"

    return PRESENT


def compute_missing(
    entries: Iterable[Entry],
    profile_text: str,
    dialect: ShellDialect = ShellDialect.BASH,
    rules: AliasRules = DEFAULT_RULES,
) -> SyncPlan:
    """
    Compute which entries need to be added to a profile.

    Pure function of its inputs: no I/O, same inputs give the same plan.

    Parameters
    ----
    entries : Iterable[Entry]
        Desired entries, in the order they should be appended
    profile_text : str
        Current profile contents
    dialect : ShellDialect
        Dialect the profile is written in
    rules : AliasRules
        Alias derivation rules

    Returns
    ----
    SyncPlan
        existing / missing in input order, plus conflicts and redundant duplicates
    """
    index = parse_profile(profile_text, dialect)
    plan = SyncPlan()
    seen_identifiers: Set[str] = set()
    claimed_aliases = {}
    claimed_functions = {}

    for entry in entries:
        if entry.identifier in seen_identifiers:
            plan.redundant.append(entry)
            continue
        seen_identifiers.add(entry.identifier)

        alias = entry_alias(entry, rules)
        function_name = derive_function_name(entry.identifier, dialect)

        if alias in claimed_aliases:
            plan.conflicts.append(Conflict(
                entry, f"alias '{alias}' is also derived for '{claimed_aliases[alias]}'"
            ))
            continue
        if function_name in claimed_functions:
            plan.conflicts.append(Conflict(
                entry, f"function {function_name} is also derived for '{claimed_functions[function_name]}'"
            ))
            continue
        claimed_aliases[alias] = entry.identifier
        claimed_functions[function_name] = entry.identifier

        state = check_entry(entry, index, dialect, rules)
        if state == PRESENT:
            plan.existing.append(entry)
        elif state == ABSENT:
            plan.missing.append(entry)
        else:
            plan.conflicts.append(Conflict(entry, state))

    return plan


def render_entry(
    entry: Entry,
    dialect: ShellDialect,
    rules: AliasRules = DEFAULT_RULES,
    cli: str = DEFAULT_CLI,
) -> str:
    """Render the definition line and alias line for one entry."""
    syntax = get_syntax(dialect)
    function_name = derive_function_name(entry.identifier, dialect)
    return "\n".join([
        f"{syntax.comment_prefix} {entry.name}",
        syntax.render_definition(function_name, cli, entry.identifier),
        syntax.render_alias(entry_alias(entry, rules), function_name),
    ])


def apply_plan(
    plan: SyncPlan,
    store: ProfileStore,
    dialect: ShellDialect = ShellDialect.BASH,
    rules: AliasRules = DEFAULT_RULES,
    base_entry: Entry = BASE_ENTRY,
    cli: str = DEFAULT_CLI,
    now: Optional[datetime] = None,
    observer: Optional[SyncObserver] = None,
) -> AppendResult:
    """
    Append the plan's missing entries to a profile store.

    The store is backed up first; nothing is written if the backup fails.
    Existing content is never rewritten. After the entries, the base entry is
    appended unless the profile already has it.

    Raises
    ----
    ProfileInconsistencyError
        If the plan has conflicts (nothing is written)
    BackupError
        If the backup cannot be written (nothing is written)
    ProfileWriteError
        If appending fails after a successful backup
    """
    observer = observer or SyncObserver()

    if plan.has_conflicts:
        raise ProfileInconsistencyError(plan.conflicts)

    if plan.is_empty:
        logger.debug("Nothing to append")
        return AppendResult()

    now = now or datetime.now()
    current = store.read_text()
    index = parse_profile(current, dialect)

    add_base = base_entry.identifier not in {e.identifier for e in plan.missing}
    if add_base:
        base_state = check_entry(base_entry, index, dialect, rules)
        if base_state not in (PRESENT, ABSENT):
            raise ProfileInconsistencyError([Conflict(base_entry, base_state)])
        add_base = base_state == ABSENT

    if add_base:
        base_alias = entry_alias(base_entry, rules)
        clashing = [e for e in plan.missing if entry_alias(e, rules) == base_alias]
        if clashing:
            raise ProfileInconsistencyError([
                Conflict(e, f"alias '{base_alias}' is reserved for the base model {base_entry.identifier}")
                for e in clashing
            ])

    backup_path = store.backup(now)
    observer.backup_created(backup_path)

    parts: List[str] = []
    if current and not current.endswith("\n"):
        parts.append("\n")
    lines = ["", SECTION_HEADER.format(timestamp=now.strftime("%Y-%m-%d %H:%M:%S"))]
    for entry in plan.missing:
        lines.append(render_entry(entry, dialect, rules, cli))
    if add_base:
        lines.append(render_entry(base_entry, dialect, rules, cli))
    lines.append(SECTION_FOOTER)
    parts.append("\n".join(lines) + "\n")
    text = "".join(parts)

    store.append(text)

    for entry in plan.missing:
        logger.debug("Appended %s -> %s", entry_alias(entry, rules), entry.identifier)
        observer.entry_appended(entry, entry_alias(entry, rules))
    if add_base:
        observer.base_added(base_entry)

    result = AppendResult(
        appended=len(plan.missing),
        base_added=add_base,
        backup_path=backup_path,
        text=text,
    )
    logger.debug(
        "Appended %d entries to %s%s",
        result.appended, store.describe(), " (plus base entry)" if add_base else "",
    )
    return result


RELOAD_COMMANDS = {
    ShellDialect.BASH: lambda path: ["bash", "-c", 'source "$1"', "terminal-intel", path],
    ShellDialect.ZSH: lambda path: ["zsh", "-c", 'source "$1"', "terminal-intel", path],
    ShellDialect.POWERSHELL: lambda path: [
        "pwsh", "-NoProfile", "-Command", ". '{}'".format(path.replace("'", "''")),
    ],
}


def manual_reload_hint(store: ProfileStore, dialect: ShellDialect) -> str:
    if dialect == ShellDialect.POWERSHELL:
        return f". '{store.describe()}'"
    return f"source {store.describe()}"


def reload_profile(
    store: ProfileStore,
    dialect: ShellDialect = ShellDialect.BASH,
    runner: Callable = subprocess.run,
    timeout: int = 30,
) -> ReloadResult:
    """
    Best-effort re-source of the profile in a child shell.

    A child process cannot change the calling shell, so this only proves the
    profile still sources cleanly. Failures are reported, never raised and
    never retried.
    """
    hint = manual_reload_hint(store, dialect)
    if store.path is None:
        return ReloadResult(False, "In-memory profile; nothing to reload")

    command = RELOAD_COMMANDS[dialect](str(store.path))
    if shutil.which(command[0]) is None:
        return ReloadResult(False, f"Could not reload profile automatically ({command[0]} not found). "
                                   f"Please run '{hint}' manually")
    try:
        completed = runner(command, capture_output=True, text=True, timeout=timeout)
    except (OSError, subprocess.SubprocessError) as e:
        logger.debug("Reload failed: %s", e)
        return ReloadResult(False, f"Could not reload profile automatically. Please run '{hint}' manually")

    if completed.returncode != 0:
        logger.debug("Reload stderr: %s", completed.stderr)
        return ReloadResult(False, f"Could not reload profile automatically. Please run '{hint}' manually")

    return ReloadResult(True, f"Profile reloaded. Run '{hint}' in your current terminal to activate the aliases there")


class ProfileSynchronizer:
    """
    Runs one synchronization pass against a profile store.

    Reads the profile, computes the plan, reports it, applies it and reloads
    the profile when something changed.
    """

    def __init__(
        self,
        store: ProfileStore,
        dialect: ShellDialect = ShellDialect.BASH,
        rules: AliasRules = DEFAULT_RULES,
        base_entry: Entry = BASE_ENTRY,
        cli: str = DEFAULT_CLI,
        observer: Optional[SyncObserver] = None,
        reloader: Callable = reload_profile,
    ):
        self.store = store
        self.dialect = dialect
        self.rules = rules
        self.base_entry = base_entry
        self.cli = cli
        self.observer = observer or SyncObserver()
        self.reloader = reloader

    def plan(self, entries: Iterable[Entry]) -> SyncPlan:
        """Compute and report the plan without writing anything."""
        plan = compute_missing(entries, self.store.read_text(), self.dialect, self.rules)
        for entry in plan.existing:
            self.observer.entry_found(entry, entry_alias(entry, self.rules))
        for entry in plan.missing:
            self.observer.entry_missing(entry, entry_alias(entry, self.rules))
        for conflict in plan.conflicts:
            self.observer.entry_conflict(conflict)
        self.observer.plan_computed(plan)
        return plan

    def legacy_aliases(self, entries: Iterable[Entry]) -> List[ProfileBlock]:
        """
        Aliases written by older setup scripts, base entry included.

        These bind the alias straight to `<cli> run <identifier>`. They have to
        be removed by hand before the profile can be synchronized.
        """
        index = parse_profile(self.store.read_text(), self.dialect)
        found = {}
        for entry in list(entries) + [self.base_entry]:
            block = find_legacy_alias(entry, index, self.dialect, self.rules)
            if block is not None:
                found[block.start_line] = block
        return [found[line] for line in sorted(found)]

    def run(self, entries: Iterable[Entry], reload: bool = True, now: Optional[datetime] = None) -> SyncReport:
        plan = self.plan(list(entries))
        result = apply_plan(
            plan,
            self.store,
            dialect=self.dialect,
            rules=self.rules,
            base_entry=self.base_entry,
            cli=self.cli,
            now=now,
            observer=self.observer,
        )

        reload_result = None
        if result.changed and reload:
            reload_result = self.reloader(self.store, self.dialect)
            if not reload_result.reloaded:
                logger.debug("Reload failed: %s", reload_result.message)
            self.observer.reload_finished(reload_result)

        self.observer.run_complete(result)
        return SyncReport(plan=plan, result=result, reload=reload_result)
