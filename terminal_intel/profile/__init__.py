"""
Shell profile parsing, rendering and storage.
"""

from terminal_intel.profile.parser import ProfileIndex, parse_profile
from terminal_intel.profile.store import FileProfileStore, MemoryProfileStore, ProfileStore

__all__ = [
    "ProfileIndex",
    "parse_profile",
    "FileProfileStore",
    "MemoryProfileStore",
    "ProfileStore",
]
