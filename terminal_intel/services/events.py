"""
Lifecycle events emitted while synchronizing a profile.

Observers only report; they never influence which entries are written.
"""
from terminal_intel.core.models import AppendResult, Conflict, Entry, ReloadResult, SyncPlan


class SyncObserver:
    """No-op observer. Subclass and override the events you care about."""

    def plan_computed(self, plan: SyncPlan) -> None:
        pass

    def entry_found(self, entry: Entry, alias: str) -> None:
        pass

    def entry_missing(self, entry: Entry, alias: str) -> None:
        pass

    def entry_conflict(self, conflict: Conflict) -> None:
        pass

    def backup_created(self, backup_path: str) -> None:
        pass

    def entry_appended(self, entry: Entry, alias: str) -> None:
        pass

    def base_added(self, entry: Entry) -> None:
        pass

    def reload_finished(self, result: ReloadResult) -> None:
        pass

    def run_complete(self, result: AppendResult) -> None:
        pass
