"""Repository state sentinel.

A single ``INIT`` file at the storage root marks a directory as
bootstrapped. It is committed as part of the initial history, so clones
and copies of the storage root carry their initialization state along.
"""

from __future__ import annotations

from pathlib import Path

SENTINEL_NAME = "INIT"


class Sentinel:
    """Marker file proving a storage root has been initialized."""

    def __init__(self, storage_path: Path) -> None:
        self.storage_path = storage_path

    @property
    def relative_path(self) -> str:
        return SENTINEL_NAME

    @property
    def path(self) -> Path:
        return self.storage_path / SENTINEL_NAME

    def exists(self) -> bool:
        return self.path.is_file()

    def create(self) -> Path:
        """Create the (empty) sentinel file. Existing content is kept."""
        self.path.touch(mode=0o600, exist_ok=True)
        return self.path
