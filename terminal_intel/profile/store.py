"""
Profile stores: where the synchronizer reads, backs up and appends.

The synchronizer only ever receives a store object, never a global path, so
the same code runs against a real rc file or an in-memory string.
"""
import logging
import shutil
from datetime import datetime
from pathlib import Path
from typing import List, Optional

from terminal_intel.core.errors import BackupError, ProfileReadError, ProfileWriteError

logger = logging.getLogger(__name__)

BACKUP_TIMESTAMP_FORMAT = "%Y%m%d_%H%M%S"


class ProfileStore:
    """Interface shared by all profile stores."""

    path: Optional[Path] = None

    def read_text(self) -> str:
        raise NotImplementedError

    def backup(self, now: Optional[datetime] = None) -> str:
        """Snapshot the current contents; return where the copy lives."""
        raise NotImplementedError

    def append(self, text: str) -> None:
        raise NotImplementedError

    def describe(self) -> str:
        return str(self.path) if self.path else "<memory>"


class FileProfileStore(ProfileStore):
    """
    Profile stored in a file on disk (e.g. ~/.bashrc).

    A missing file reads as empty and is created on first backup. Bytes that
    are not valid UTF-8 are kept as surrogate escapes; appends never rewrite
    them.
    """

    def __init__(self, path):
        """
        Initialize file store.

        Parameters
        ----
        path : str or Path
            Profile file location
        """
        self.path = Path(path).expanduser()

    def read_text(self) -> str:
        if not self.path.exists():
            return ""
        try:
            return self.path.read_text(encoding="utf-8", errors="surrogateescape")
        except OSError as e:
            raise ProfileReadError(f"Cannot read profile {self.path}: {e}")

    def _backup_path(self, now: datetime) -> Path:
        stamp = now.strftime(BACKUP_TIMESTAMP_FORMAT)
        candidate = self.path.with_name(f"{self.path.name}.backup.{stamp}")
        counter = 1
        while candidate.exists():
            candidate = self.path.with_name(f"{self.path.name}.backup.{stamp}_{counter}")
            counter += 1
        return candidate

    def backup(self, now: Optional[datetime] = None) -> str:
        """
        Copy the profile to `<profile>.backup.YYYYmmdd_HHMMSS`.

        Raises
        ---
        BackupError
            If the profile cannot be created or the copy cannot be written
        """
        now = now or datetime.now()
        try:
            if not self.path.exists():
                logger.warning("Profile %s not found. Creating it...", self.path)
                self.path.parent.mkdir(parents=True, exist_ok=True)
                self.path.touch()
            backup_path = self._backup_path(now)
            shutil.copy2(self.path, backup_path)
        except OSError as e:
            raise BackupError(f"Cannot back up profile {self.path}: {e}")

        logger.debug("Backup created: %s", backup_path)
        return str(backup_path)

    def append(self, text: str) -> None:
        try:
            with open(self.path, "a", encoding="utf-8") as f:
                f.write(text)
        except OSError as e:
            raise ProfileWriteError(f"Cannot write profile {self.path}: {e}")


class MemoryProfileStore(ProfileStore):
    """
    Profile held in memory; used for dry runs and tests.

    Backups are kept in `backups`. Set `fail_backup` to simulate an
    unwritable backup location.
    """

    def __init__(self, text: str = "", fail_backup: bool = False):
        self.text = text
        self.fail_backup = fail_backup
        self.backups: List[str] = []

    def read_text(self) -> str:
        return self.text

    def backup(self, now: Optional[datetime] = None) -> str:
        if self.fail_backup:
            raise BackupError("Cannot back up in-memory profile")
        now = now or datetime.now()
        self.backups.append(self.text)
        return f"<memory>.backup.{now.strftime(BACKUP_TIMESTAMP_FORMAT)}"

    def append(self, text: str) -> None:
        self.text += text
