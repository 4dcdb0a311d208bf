"""
Domain models for commander entries and profile synchronization.

These models represent the desired commander entries, the structured view of a
shell profile, and the in-memory results of a synchronization run. None of them
are persisted.
"""
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional


class ShellDialect(str, Enum):
    """Shell configuration dialects a profile can be written in."""
    BASH = "bash"
    ZSH = "zsh"
    POWERSHELL = "powershell"


class BlockKind(str, Enum):
    """Kinds of blocks recognized in a profile."""
    DEFINITION = "definition"      # function definition
    ALIAS = "alias"                # alias / shortcut binding
    UNRECOGNIZED = "unrecognized"  # anything else, comments included


@dataclass(frozen=True)
class Entry:
    """
    A desired commander entry.

    Attributes:
        name: Human-readable label, usually a language name
        identifier: Model identifier, also the key for alias derivation
        alias: Explicit alias; derived from identifier when None
    """
    name: str
    identifier: str
    alias: Optional[str] = None


@dataclass
class ProfileBlock:
    """A recognized span of lines in a profile."""
    kind: BlockKind
    start_line: int
    end_line: int
    text: str
    name: Optional[str] = None
    target: Optional[str] = None       # alias value / function the alias points at
    invokes: Optional[str] = None      # identifier passed to `<cli> run`


@dataclass(frozen=True)
class Conflict:
    """An entry found in a partial or inconsistent state."""
    entry: Entry
    reason: str


@dataclass
class SyncPlan:
    """
    Result of comparing desired entries against a profile.

    `existing` and `missing` keep the order of the input entry list.
    """
    existing: List[Entry] = field(default_factory=list)
    missing: List[Entry] = field(default_factory=list)
    conflicts: List[Conflict] = field(default_factory=list)
    redundant: List[Entry] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not self.missing

    @property
    def has_conflicts(self) -> bool:
        return bool(self.conflicts)


@dataclass
class AppendResult:
    """Outcome of applying a plan to a profile store."""
    appended: int = 0
    base_added: bool = False
    backup_path: Optional[str] = None
    text: str = ""

    @property
    def changed(self) -> bool:
        return self.appended > 0 or self.base_added


@dataclass
class ReloadResult:
    """Outcome of the best-effort profile reload."""
    reloaded: bool
    message: str


@dataclass
class SyncReport:
    """Everything one synchronizer run produced."""
    plan: SyncPlan
    result: AppendResult
    reload: Optional[ReloadResult] = None
