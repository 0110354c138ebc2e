"""
Directory Access

Reading the recipe directory goes through a capability object instead
of touching the filesystem directly. A desktop shell can implement it
with its own permission prompt; LocalDirectoryAccess is the plain
filesystem version.
"""

from abc import ABC, abstractmethod
from datetime import datetime
from pathlib import Path
from typing import Optional, Union

from pydantic import BaseModel, Field


class DirectoryAccessError(Exception):
    """Access to a directory was denied or it cannot be listed."""
    pass


class AccessToken(BaseModel):
    """Proof that access to a directory was granted."""

    path: Path
    granted_at: datetime = Field(default_factory=datetime.utcnow)

    @property
    def reference(self) -> str:
        """Value persisted so access can be re-requested next session."""
        return str(self.path)


class DirectoryAccess(ABC):
    """Capability for reading one user-selected directory."""

    @abstractmethod
    def request_directory_access(self) -> AccessToken:
        """
        Ask for access to the directory.

        Raises:
            DirectoryAccessError: If access is denied
        """
        pass

    @abstractmethod
    def read_directory(self, token: AccessToken) -> list[Path]:
        """
        List the visible files of a granted directory.

        Raises:
            DirectoryAccessError: If the directory cannot be listed
        """
        pass


class LocalDirectoryAccess(DirectoryAccess):
    """Direct filesystem access. Hidden files are skipped."""

    def __init__(self, directory: Optional[Union[str, Path]] = None):
        self._directory = Path(directory).expanduser() if directory else None

    def request_directory_access(self) -> AccessToken:
        if self._directory is None:
            raise DirectoryAccessError("No directory selected")
        if not self._directory.is_dir():
            raise DirectoryAccessError(f"Not a directory: {self._directory}")
        return AccessToken(path=self._directory)

    def read_directory(self, token: AccessToken) -> list[Path]:
        try:
            entries = list(token.path.iterdir())
        except OSError as e:
            raise DirectoryAccessError(f"Cannot list {token.path}: {e}")
        return sorted(
            entry for entry in entries
            if entry.is_file() and not entry.name.startswith(".")
        )
