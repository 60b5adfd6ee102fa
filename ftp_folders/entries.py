"""
Folder and file handles.

Handles are cheap, connection-oblivious views of a remote path. They keep a
reference to the client's ConnectionManager and go through it for every
operation, so a handle is only usable while its client is open. Nothing is
cached: every listing is fetched from the server again.
"""

from __future__ import annotations

import enum
import logging

from .codec import text_to_bytes
from .manager import ConnectionManager
from .session import RemoteEntry
from .streams import InputStream, create_byte_array_input_stream

logger = logging.getLogger(__name__)

NOT_IMPLEMENTED = "Not Implemented"


class EntryKind(enum.Enum):
    FILE = "file"
    FOLDER = "folder"

    @classmethod
    def of(cls, record: RemoteEntry) -> EntryKind:
        return cls.FOLDER if record.is_directory else cls.FILE


def child_path(manager: ConnectionManager, path: str | None, name: str | None) -> str:
    """Directory prefix for the children of the folder path+name."""
    folder_path = manager.get_full_path(path, name)
    if not folder_path.endswith("/"):
        folder_path += "/"
    # The root folder ("/", "/") composes to "//"
    while folder_path.startswith("//"):
        folder_path = folder_path[1:]
    return folder_path


class Entry:
    """A listing record whose kind decides whether it is a File or a Folder."""

    def __init__(self, manager: ConnectionManager, record: RemoteEntry, path: str, name: str):
        self.manager = manager
        self.record = record
        self.path = path
        self.name = name
        self.kind = EntryKind.of(record)

    def __repr__(self) -> str:
        return f"Entry({self.kind.value}, path={self.path!r}, name={self.name!r})"

    def get_path(self) -> str:
        return self.path

    def get_name(self) -> str:
        return self.name

    def is_file(self) -> bool:
        return self.kind is EntryKind.FILE

    def is_folder(self) -> bool:
        return self.kind is EntryKind.FOLDER

    def get_file(self) -> File | None:
        if self.is_file():
            return File(self.manager, self.record, self.path, self.name)
        return None

    def get_folder(self) -> Folder | None:
        if self.is_folder():
            return Folder(self.manager, self.path, self.name, self.record)
        return None


class Folder:
    """
    A remote directory.

    Listing methods first enter the directory on the control connection and
    then list it, which costs one round trip per call.
    """

    def __init__(
        self,
        manager: ConnectionManager,
        path: str,
        name: str,
        record: RemoteEntry | None = None,
    ):
        self.manager = manager
        self.path = path
        self.name = name
        self.record = record

    def __repr__(self) -> str:
        return f"Folder(path={self.path!r}, name={self.name!r})"

    def __eq__(self, other) -> bool:
        if not isinstance(other, Folder):
            return NotImplemented
        return (self.path, self.name) == (other.path, other.name)

    def __hash__(self) -> int:
        return hash(("folder", self.path, self.name))

    def get_path(self) -> str:
        return self.path

    def get_name(self) -> str:
        return self.name

    def _children_path(self) -> str:
        return child_path(self.manager, self.path, self.name)

    def _records(self) -> list[RemoteEntry]:
        if not self.manager.set_current_folder(self.path, self.name):
            logger.warning(
                "Folder %s does not exist", self.manager.get_full_path(self.path, self.name)
            )
            return []
        return self.manager.list()

    def get_file(self, name: str) -> File | None:
        """Find a file in this folder by name. Lists the folder on every call."""
        for file in self.list_files():
            if file.get_name() == name:
                return file
        return None

    def get_folder(self, name: str) -> Folder | None:
        raise NotImplementedError(NOT_IMPLEMENTED)

    def list(self) -> list[Entry]:
        """All entries of this folder, files and folders alike."""
        children_path = self._children_path()
        return [
            Entry(self.manager, record, children_path, record.name) for record in self._records()
        ]

    def list_files(self) -> list[File]:
        children_path = self._children_path()
        return [
            File(self.manager, record, children_path, record.name)
            for record in self._records()
            if EntryKind.of(record) is EntryKind.FILE
        ]

    def list_folders(self) -> list[Folder]:
        children_path = self._children_path()
        return [
            Folder(self.manager, children_path, record.name, record)
            for record in self._records()
            if EntryKind.of(record) is EntryKind.FOLDER
        ]

    def create_file(self, name: str, input_stream: InputStream) -> File | None:
        """
        Upload a new file into this folder.

        Returns:
            The new file as listed by the server afterwards, or None if it
            could not be found there.
        """
        self.manager.create_file(self._children_path(), name, input_stream)
        return self.get_file(name)

    def create_file_binary(self, name: str, data) -> File | None:
        return self.create_file(name, create_byte_array_input_stream(data))

    def create_file_text(self, name: str, text: str) -> File | None:
        return self.create_file(name, create_byte_array_input_stream(text_to_bytes(text)))

    def create_folder(self, name: str) -> Folder:
        raise NotImplementedError(NOT_IMPLEMENTED)

    def delete(self) -> bool:
        """Delete this folder's own path on the server."""
        return self.manager.delete_file(self.path, self.name)

    def delete_file(self, name: str) -> bool:
        return self.manager.delete_file(self._children_path(), name)

    def delete_folder(self, name: str) -> bool:
        raise NotImplementedError(NOT_IMPLEMENTED)


class File:
    """A remote file. Content is always transferred over a fresh connection."""

    def __init__(
        self,
        manager: ConnectionManager,
        record: RemoteEntry | None,
        path: str,
        name: str,
    ):
        self.manager = manager
        self.record = record
        self.path = path
        self.name = name

    def __repr__(self) -> str:
        return f"File(path={self.path!r}, name={self.name!r})"

    def __eq__(self, other) -> bool:
        if not isinstance(other, File):
            return NotImplemented
        return (self.path, self.name) == (other.path, other.name)

    def __hash__(self) -> int:
        return hash(("file", self.path, self.name))

    def get_path(self) -> str:
        return self.path

    def get_name(self) -> str:
        return self.name

    def get_content(self) -> InputStream:
        """Content stream. Check is_valid() before reading: the file may be gone."""
        return self.manager.get_file_stream(self.path, self.name)

    def get_content_binary(self) -> bytes | None:
        input_stream = self.get_content()
        return input_stream.read_bytes() if input_stream.is_valid() else None

    def get_content_text(self) -> str | None:
        input_stream = self.get_content()
        return input_stream.read_text() if input_stream.is_valid() else None

    def set_content(self, input_stream: InputStream) -> bool:
        return self.manager.create_file(self.path, self.name, input_stream)

    def set_content_binary(self, data) -> bool:
        return self.set_content(create_byte_array_input_stream(data))

    def set_content_text(self, text: str) -> bool:
        return self.set_content(create_byte_array_input_stream(text_to_bytes(text)))

    def delete(self) -> bool:
        return self.manager.delete_file(self.path, self.name)
