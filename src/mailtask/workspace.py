# =============================================================================
# Workspace
# =============================================================================
# The task's file workspace: the project directory the workflow engine runs
# the task in. Attachments and body templates are read from here by
# relative path.
#
# The engine may supply its own Workspace; LocalWorkspace serves a plain
# directory and refuses paths that point outside of it.
# =============================================================================

from pathlib import Path
from typing import Protocol

from mailtask.errors import ConfigurationError


class Workspace(Protocol):
    """Read-only access to files in the task's workspace."""

    def read_bytes(self, path: str) -> bytes:
        """Return the content of path. Raises OSError if it can't be read."""
        ...

    def read_text(self, path: str, encoding: str = "utf-8") -> str:
        """Return the decoded content of path."""
        ...


class LocalWorkspace:
    """
    A workspace backed by a local directory.

    Usage:
        >>> workspace = LocalWorkspace(Path("/srv/project"))
        >>> workspace.read_bytes("reports/q1.csv")

    Attributes:
        root: The workspace directory.
    """

    def __init__(self, root: Path) -> None:
        self.root = root.resolve()

    def get_file(self, path: str) -> Path:
        """
        Resolve a workspace-relative path.

        Raises:
            ConfigurationError: If path is absolute, escapes the workspace
                or isn't a valid file name.
        """
        if "\x00" in path:
            raise ConfigurationError(f"Invalid file name {path!r}: embedded null byte")
        try:
            resolved = (self.root / path).resolve()
        except ValueError as e:
            raise ConfigurationError(f"Invalid file name {path!r}: {e}") from e
        if not resolved.is_relative_to(self.root):
            raise ConfigurationError(f"File name must not be outside of the workspace: {path!r}")
        return resolved

    def read_bytes(self, path: str) -> bytes:
        return self.get_file(path).read_bytes()

    def read_text(self, path: str, encoding: str = "utf-8") -> str:
        return self.get_file(path).read_text(encoding=encoding)

    def __repr__(self) -> str:
        return f"LocalWorkspace({str(self.root)!r})"
