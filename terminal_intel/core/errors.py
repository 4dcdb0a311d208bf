"""
Exception hierarchy for Terminal Intelligence.

Every error the CLI knows how to report derives from TerminalIntelError so
that the entry point can turn it into a red message and a non-zero exit.
"""
from typing import List, Optional


class TerminalIntelError(Exception):
    """Base class for all expected, reportable failures."""

    pass


class ConfigError(TerminalIntelError):
    """Exception raised for configuration-related errors."""

    pass


class EntrySourceError(ConfigError):
    """The entry CSV is missing or unreadable."""

    pass


class ToolNotFoundError(TerminalIntelError):
    """A required external executable is not on PATH."""

    pass


class RegistryError(TerminalIntelError):
    """The model registry CLI failed or is not running."""

    def __init__(self, message: str, stderr: Optional[str] = None):
        super().__init__(message)
        self.stderr = stderr


class ProfileReadError(TerminalIntelError):
    """The profile store could not be read."""

    pass


class ProfileWriteError(TerminalIntelError):
    """The profile store could not be written."""

    pass


class BackupError(ProfileWriteError):
    """The profile backup could not be written; the profile was not touched."""

    pass


class ProfileInconsistencyError(TerminalIntelError):
    """
    The profile holds commander entries in a partial or conflicting state.

    Raised before any mutation so the operator can fix the profile by hand.
    """

    def __init__(self, conflicts: List["Conflict"]):
        self.conflicts = list(conflicts)
        lines = [f"  {c.entry.identifier}: {c.reason}" for c in self.conflicts]
        super().__init__(
            f"Profile has {len(self.conflicts)} inconsistent commander "
            "entr{}:\n{}".format("y" if len(self.conflicts) == 1 else "ies", "\n".join(lines))
        )


class CommanderFileError(TerminalIntelError):
    """A commander model file could not be written."""

    pass
