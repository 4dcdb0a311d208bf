"""
Shared fixtures: fake registry, recording observer, sample entries.
"""
from pathlib import Path

import pytest

from terminal_intel.core.errors import RegistryError
from terminal_intel.core.models import Entry
from terminal_intel.services.events import SyncObserver


class FakeRegistry:
    """In-memory stand-in for OllamaRegistry."""

    def __init__(self, registered=(), fail=()):
        self.registered = list(registered)
        self.fail = set(fail)
        self.created = []
        self.verified = False

    def verify(self):
        self.verified = True

    def list(self):
        return list(self.registered)

    def missing(self, identifiers):
        return [i for i in identifiers if i not in self.registered]

    def create(self, identifier, template_path):
        if identifier in self.fail:
            raise RegistryError(f"Failed to create Ollama model: {identifier}")
        self.created.append((identifier, Path(template_path)))
        self.registered.append(identifier)


class RecordingObserver(SyncObserver):
    """Records event names in the order they were emitted."""

    def __init__(self):
        self.events = []

    def plan_computed(self, plan):
        self.events.append("plan_computed")

    def entry_found(self, entry, alias):
        self.events.append(("entry_found", alias))

    def entry_missing(self, entry, alias):
        self.events.append(("entry_missing", alias))

    def entry_conflict(self, conflict):
        self.events.append(("entry_conflict", conflict.entry.identifier))

    def backup_created(self, backup_path):
        self.events.append("backup_created")

    def entry_appended(self, entry, alias):
        self.events.append(("entry_appended", alias))

    def base_added(self, entry):
        self.events.append("base_added")

    def reload_finished(self, result):
        self.events.append("reload_finished")

    def run_complete(self, result):
        self.events.append("run_complete")


@pytest.fixture
def python_entry():
    return Entry(name="Python", identifier="py-commander")


@pytest.fixture
def sample_entries():
    return [
        Entry(name="Python", identifier="py-commander"),
        Entry(name="JavaScript", identifier="js-commander"),
        Entry(name="Bash", identifier="sh-commander"),
    ]


@pytest.fixture
def languages_csv(tmp_path):
    """Write a small languages.csv and return its path."""
    path = tmp_path / "languages.csv"
    path.write_text("language,filename\nPython,py-commander\nJavaScript,js-commander\n")
    return path
