"""
Tests for profile synchronization: planning, appending and reloading.
"""
import subprocess
from datetime import datetime

import pytest

from terminal_intel.core.errors import BackupError, ProfileInconsistencyError
from terminal_intel.core.models import BlockKind, Entry, ReloadResult, ShellDialect
from terminal_intel.profile.parser import parse_profile
from terminal_intel.profile.store import FileProfileStore, MemoryProfileStore
from terminal_intel.services import synchronizer as sync_module
from terminal_intel.services.synchronizer import (
    ProfileSynchronizer,
    apply_plan,
    compute_missing,
    reload_profile,
)

from conftest import RecordingObserver

NOW = datetime(2024, 1, 2, 3, 4, 5)


def sync_once(entries, store, dialect=ShellDialect.BASH):
    plan = compute_missing(entries, store.read_text(), dialect)
    return plan, apply_plan(plan, store, dialect=dialect, now=NOW)


class TestComputeMissing:
    """Planning is pure and order preserving."""

    def test_empty_profile(self, python_entry):
        plan = compute_missing([python_entry], "")
        assert plan.missing == [python_entry]
        assert plan.existing == []
        assert not plan.has_conflicts

    def test_deterministic(self, sample_entries):
        text = "alias ll='ls -la'\n"
        assert compute_missing(sample_entries, text) == compute_missing(sample_entries, text)

    def test_order_preserved(self, sample_entries):
        reordered = list(reversed(sample_entries))
        assert compute_missing(reordered, "").missing == reordered

    def test_duplicate_identifier_is_redundant(self, python_entry):
        plan = compute_missing([python_entry, python_entry], "")
        assert plan.missing == [python_entry]
        assert plan.redundant == [python_entry]

    def test_commented_entry_is_missing(self, python_entry):
        text = "# ti_py_commander() { ollama run py-commander \"$@\"; }\n# alias opy='ti_py_commander'\n"
        assert compute_missing([python_entry], text).missing == [python_entry]

    def test_partial_match_is_conflict(self, python_entry):
        plan = compute_missing([python_entry], "alias opy='ti_py_commander'\n")
        assert plan.missing == []
        assert len(plan.conflicts) == 1
        assert "function ti_py_commander is missing" in plan.conflicts[0].reason

    def test_definition_without_alias_is_conflict(self, python_entry):
        text = 'ti_py_commander() { ollama run py-commander "$@"; }\n'
        plan = compute_missing([python_entry], text)
        assert "alias 'opy' is missing" in plan.conflicts[0].reason

    def test_legacy_alias_is_conflict(self, python_entry):
        plan = compute_missing([python_entry], "alias opy='ollama run py-commander'\n")
        assert "legacy alias" in plan.conflicts[0].reason

    def test_alias_bound_elsewhere_is_conflict(self, python_entry):
        plan = compute_missing([python_entry], "alias opy='python3'\n")
        assert "already bound" in plan.conflicts[0].reason

    def test_derived_alias_collision(self):
        entries = [Entry("JavaScript", "js-commander"), Entry("JSX", "jsx-commander")]
        plan = compute_missing(entries, "")
        assert plan.missing == [entries[0]]
        assert plan.conflicts[0].entry == entries[1]


class TestApplyPlan:
    """Appending is backed up, append-only and idempotent."""

    def test_scenario(self, python_entry):
        store = MemoryProfileStore("")
        plan, result = sync_once([python_entry], store)

        assert len(plan.missing) == 1
        assert result.appended == 1
        assert result.base_added is True

        index = parse_profile(store.text, ShellDialect.BASH)
        assert index.count(BlockKind.DEFINITION, "ti_py_commander") == 1
        assert index.alias("opy").target == "ti_py_commander"
        assert index.definition("ti_gemma3_12b").invokes == "gemma3:12b"
        assert index.alias("oll").target == "ti_gemma3_12b"
        assert 'ti_py_commander() { ollama run py-commander "$@"; }' in store.text
        assert "alias opy='ti_py_commander'" in store.text

        replan = compute_missing([python_entry], store.text)
        assert replan.missing == []
        assert replan.existing == [python_entry]

    def test_idempotent(self, sample_entries):
        store = MemoryProfileStore("export EDITOR=vim\n")
        sync_once(sample_entries, store)
        after_first = store.text

        plan, result = sync_once(sample_entries, store)
        assert plan.missing == []
        assert result.appended == 0
        assert result.backup_path is None
        assert store.text == after_first
        assert len(store.backups) == 1

    @pytest.mark.parametrize("user_function", [
        'lb() { echo "{"; }\n',
        'mkcd() ( mkdir -p "$1" && cd "$1" )\n',
    ])
    def test_idempotent_after_user_functions(self, sample_entries, user_function):
        store = MemoryProfileStore(user_function)
        sync_once(sample_entries, store)
        after_first = store.text

        plan, result = sync_once(sample_entries, store)
        assert plan.conflicts == []
        assert plan.missing == []
        assert result.appended == 0
        assert store.text == after_first
        index = parse_profile(store.text, ShellDialect.BASH)
        assert index.count(BlockKind.ALIAS, "oll") == 1
        assert index.count(BlockKind.ALIAS, "opy") == 1

    def test_original_text_is_prefix(self, sample_entries):
        original = "export EDITOR=vim\nalias ll='ls -la'"
        store = MemoryProfileStore(original)
        sync_once(sample_entries, store)
        assert store.text.startswith(original)
        assert store.text[len(original)] == "\n"

    def test_append_order_matches_input(self, sample_entries):
        store = MemoryProfileStore("")
        sync_once(sample_entries, store)
        positions = [store.text.index(f"ti_{e.identifier.replace('-', '_')}()") for e in sample_entries]
        assert positions == sorted(positions)

    def test_backup_failure_leaves_profile_untouched(self, sample_entries):
        original = "export EDITOR=vim\n"
        store = MemoryProfileStore(original, fail_backup=True)
        plan = compute_missing(sample_entries, original)
        with pytest.raises(BackupError):
            apply_plan(plan, store, now=NOW)
        assert store.text == original

    def test_backup_taken_before_append(self, python_entry):
        store = MemoryProfileStore("export EDITOR=vim\n")
        sync_once([python_entry], store)
        assert store.backups == ["export EDITOR=vim\n"]

    def test_base_entry_singleton(self, sample_entries):
        store = MemoryProfileStore("")
        sync_once(sample_entries[:1], store)
        plan, result = sync_once(sample_entries, store)

        assert result.appended == 2
        assert result.base_added is False
        index = parse_profile(store.text, ShellDialect.BASH)
        assert index.count(BlockKind.DEFINITION, "ti_gemma3_12b") == 1
        assert index.count(BlockKind.ALIAS, "oll") == 1

    def test_conflicts_abort_before_backup(self, python_entry):
        original = "alias opy='ti_py_commander'\n"
        store = MemoryProfileStore(original)
        plan = compute_missing([python_entry, Entry("Bash", "sh-commander")], original)
        with pytest.raises(ProfileInconsistencyError) as excinfo:
            apply_plan(plan, store, now=NOW)
        assert excinfo.value.conflicts[0].entry == python_entry
        assert store.text == original
        assert store.backups == []

    def test_base_alias_reserved(self):
        store = MemoryProfileStore("")
        plan = compute_missing([Entry("Llama", "llama-commander")], "")
        with pytest.raises(ProfileInconsistencyError, match="reserved"):
            apply_plan(plan, store, now=NOW)
        assert store.text == ""

    def test_section_markers(self, python_entry):
        store = MemoryProfileStore("")
        sync_once([python_entry], store)
        assert "# Terminal Intelligence commanders - added 2024-01-02 03:04:05" in store.text
        assert store.text.rstrip().endswith("# End of Terminal Intelligence commanders")

    def test_powershell_scenario(self, python_entry):
        store = MemoryProfileStore("")
        sync_once([python_entry], store, ShellDialect.POWERSHELL)

        assert "function Invoke-PyCommander { ollama run py-commander @args }" in store.text
        assert "Set-Alias -Name opy -Value Invoke-PyCommander" in store.text
        assert "Set-Alias -Name oll -Value Invoke-Gemma312b" in store.text
        assert compute_missing([python_entry], store.text, ShellDialect.POWERSHELL).missing == []

    def test_file_store_round_trip(self, tmp_path, sample_entries):
        bashrc = tmp_path / ".bashrc"
        bashrc.write_text("export EDITOR=vim\n")
        store = FileProfileStore(bashrc)

        plan, result = sync_once(sample_entries, store)

        assert result.backup_path == str(tmp_path / ".bashrc.backup.20240102_030405")
        assert (tmp_path / ".bashrc.backup.20240102_030405").read_text() == "export EDITOR=vim\n"
        assert compute_missing(sample_entries, bashrc.read_text()).missing == []


class TestReloadProfile:
    """Reload is best effort and never raises."""

    @pytest.fixture
    def store(self, tmp_path):
        bashrc = tmp_path / ".bashrc"
        bashrc.write_text("alias ll='ls -la'\n")
        return FileProfileStore(bashrc)

    @pytest.fixture(autouse=True)
    def shell_on_path(self, monkeypatch):
        monkeypatch.setattr(sync_module.shutil, "which", lambda name: f"/usr/bin/{name}")

    def test_success(self, store):
        calls = []

        def runner(cmd, **kwargs):
            calls.append(cmd)
            return subprocess.CompletedProcess(cmd, 0, "", "")

        result = reload_profile(store, ShellDialect.BASH, runner=runner)
        assert result.reloaded is True
        assert calls[0][:3] == ["bash", "-c", 'source "$1"']
        assert calls[0][-1] == str(store.path)

    def test_non_zero_exit(self, store):
        runner = lambda cmd, **kwargs: subprocess.CompletedProcess(cmd, 1, "", "syntax error")
        result = reload_profile(store, ShellDialect.BASH, runner=runner)
        assert result.reloaded is False
        assert "manually" in result.message

    def test_timeout(self, store):
        def runner(cmd, **kwargs):
            raise subprocess.TimeoutExpired(cmd, 30)

        assert reload_profile(store, ShellDialect.ZSH, runner=runner).reloaded is False

    def test_shell_missing(self, store, monkeypatch):
        monkeypatch.setattr(sync_module.shutil, "which", lambda name: None)
        result = reload_profile(store, ShellDialect.POWERSHELL)
        assert result.reloaded is False
        assert "pwsh not found" in result.message

    def test_memory_store(self):
        assert reload_profile(MemoryProfileStore("")).reloaded is False


class TestProfileSynchronizer:
    """The run loop wires planning, applying, reloading and events."""

    def test_events_on_first_and_second_run(self, python_entry):
        store = MemoryProfileStore("")
        observer = RecordingObserver()
        reloads = []

        def reloader(store, dialect):
            reloads.append(dialect)
            return ReloadResult(True, "ok")

        synchronizer = ProfileSynchronizer(store, observer=observer, reloader=reloader)
        report = synchronizer.run([python_entry], now=NOW)

        assert report.result.appended == 1
        assert report.reload.reloaded is True
        assert observer.events == [
            ("entry_missing", "opy"),
            "plan_computed",
            "backup_created",
            ("entry_appended", "opy"),
            "base_added",
            "reload_finished",
            "run_complete",
        ]

        observer.events.clear()
        report = synchronizer.run([python_entry], now=NOW)
        assert report.result.changed is False
        assert report.reload is None
        assert observer.events == [("entry_found", "opy"), "plan_computed", "run_complete"]
        assert len(reloads) == 1

    def test_reload_failure_is_not_fatal(self, python_entry):
        store = MemoryProfileStore("")
        synchronizer = ProfileSynchronizer(
            store, reloader=lambda store, dialect: ReloadResult(False, "reload manually")
        )
        report = synchronizer.run([python_entry], now=NOW)
        assert report.result.appended == 1
        assert report.reload.reloaded is False

    def test_plan_only_writes_nothing(self, python_entry):
        store = MemoryProfileStore("")
        plan = ProfileSynchronizer(store).plan([python_entry])
        assert plan.missing == [python_entry]
        assert store.text == ""

    def test_legacy_aliases_in_file_order(self, sample_entries):
        text = (
            "alias oll='ollama run gemma3:12b'\n"
            "export EDITOR=vim\n"
            "alias opy='ollama run py-commander'\n"
            "alias ojs='ti_js_commander'\n"
        )
        synchronizer = ProfileSynchronizer(MemoryProfileStore(text))

        blocks = synchronizer.legacy_aliases(sample_entries)

        assert [b.start_line for b in blocks] == [0, 2]
        assert [b.name for b in blocks] == ["oll", "opy"]

    def test_no_legacy_aliases_after_sync(self, sample_entries):
        store = MemoryProfileStore("")
        synchronizer = ProfileSynchronizer(store, reloader=lambda store, dialect: ReloadResult(True, "ok"))
        synchronizer.run(sample_entries, now=NOW)
        assert synchronizer.legacy_aliases(sample_entries) == []
