"""
Remote session protocol definition.

A session is one control connection to a server. FTPSession and SFTPSession
implement it, so the connection manager works with either transport.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import BinaryIO, Protocol, runtime_checkable


@dataclass
class RemoteEntry:
    """One record of a directory listing."""

    name: str
    is_dir: bool
    size: int = 0
    mtime: datetime = field(default_factory=datetime.now)

    @property
    def is_file(self) -> bool:
        return not self.is_dir

    @property
    def is_directory(self) -> bool:
        return self.is_dir


@runtime_checkable
class RemoteSession(Protocol):
    """Protocol for a single stateful connection to a file server.

    Missing remote files and folders are soft failures (None or False).
    Connection, authentication and transient errors are raised.
    """

    def open(self) -> None:
        """Connect and authenticate.

        Raises:
            ConnectionError: If the server cannot be reached.
            PermissionError: If authentication is rejected.
            TimeoutError: If the connection times out.
        """
        ...

    def close(self) -> None:
        """Close the connection. Safe to call when already closed."""
        ...

    def is_connected(self) -> bool:
        ...

    def print_working_directory(self) -> str:
        ...

    def change_working_directory(self, path: str) -> bool:
        """Enter path. Returns False if it does not exist or cannot be entered."""
        ...

    def list_files(self) -> list[RemoteEntry]:
        """List the current working directory, without . and .. entries."""
        ...

    def retrieve_file_stream(self, path: str) -> BinaryIO | None:
        """Download path into a readable binary stream, or None if missing."""
        ...

    def store_file(self, path: str, stream: BinaryIO) -> bool:
        """Upload the content of stream to path."""
        ...

    def delete_file(self, path: str) -> bool:
        ...
