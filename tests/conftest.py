"""
Shared pytest fixtures for ftp-folders tests.
"""

import ftplib
import posixpath
from collections.abc import Generator
from datetime import datetime
from io import BytesIO
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest

from ftp_folders.client import Client
from ftp_folders.config import ConnectionConfig, FTPConfig
from ftp_folders.ftp_session import FTPSession
from ftp_folders.manager import ConnectionManager
from ftp_folders.session import RemoteEntry


class FakeServer:
    """
    In-memory file server shared by all FakeSessions it creates.

    Records how many connections were opened and closed so tests can check
    connection handling. Set fail_with to an exception to make every
    transfer raise it.
    """

    def __init__(self):
        self.dirs: set[str] = {"/"}
        self.files: dict[str, bytes] = {}
        self.sessions: list["FakeSession"] = []
        self.opened = 0
        self.closed = 0
        self.refuse_connections = False
        self.fail_with: Exception | None = None

    @staticmethod
    def normalize(path: str, cwd: str = "/") -> str:
        if not path.startswith("/"):
            path = cwd.rstrip("/") + "/" + path
        path = posixpath.normpath(path)
        while path.startswith("//"):
            path = path[1:]
        return path

    def add_dir(self, path: str) -> None:
        self.dirs.add(self.normalize(path))

    def add_file(self, path: str, content: bytes) -> None:
        self.files[self.normalize(path)] = content

    def children(self, directory: str) -> list[RemoteEntry]:
        entries = [
            RemoteEntry(name=posixpath.basename(d), is_dir=True)
            for d in sorted(self.dirs)
            if d != "/" and posixpath.dirname(d) == directory
        ]
        entries += [
            RemoteEntry(name=posixpath.basename(f), is_dir=False, size=len(data))
            for f, data in sorted(self.files.items())
            if posixpath.dirname(f) == directory
        ]
        return entries

    def session(self) -> "FakeSession":
        return FakeSession(self)


class FakeSession:
    """RemoteSession backed by a FakeServer."""

    def __init__(self, server: FakeServer):
        self.server = server
        self.cwd = "/"
        self.connected = False
        self.commands: list[str] = []

    def open(self) -> None:
        if self.server.refuse_connections:
            raise ConnectionError("Connection failed: [Errno 111] Connection refused")
        self.connected = True
        self.server.opened += 1
        self.server.sessions.append(self)

    def close(self) -> None:
        if self.connected:
            self.connected = False
            self.server.closed += 1

    def is_connected(self) -> bool:
        return self.connected

    def print_working_directory(self) -> str:
        self.commands.append("PWD")
        return self.cwd

    def change_working_directory(self, path: str) -> bool:
        self.commands.append(f"CWD {path}")
        target = self.server.normalize(path, self.cwd)
        if target not in self.server.dirs:
            return False
        self.cwd = target
        return True

    def list_files(self) -> list[RemoteEntry]:
        self.commands.append("LIST")
        return self.server.children(self.cwd)

    def _check_failure(self) -> None:
        if self.server.fail_with is not None:
            raise self.server.fail_with

    def retrieve_file_stream(self, path: str) -> BytesIO | None:
        self.commands.append(f"RETR {path}")
        self._check_failure()
        target = self.server.normalize(path, self.cwd)
        if target not in self.server.files:
            return None
        return BytesIO(self.server.files[target])

    def store_file(self, path: str, stream) -> bool:
        self.commands.append(f"STOR {path}")
        self._check_failure()
        target = self.server.normalize(path, self.cwd)
        if posixpath.dirname(target) not in self.server.dirs:
            return False
        self.server.files[target] = stream.read()
        return True

    def delete_file(self, path: str) -> bool:
        self.commands.append(f"DELE {path}")
        self._check_failure()
        target = self.server.normalize(path, self.cwd)
        if target not in self.server.files:
            return False
        del self.server.files[target]
        return True


@pytest.fixture
def fake_server() -> FakeServer:
    """
    In-memory server with this tree:

        /
        +-- hello.txt          ("Hello World")
        +-- docs/
        |   +-- readme.txt     ("Read me")
        |   +-- notes.md       ("# Notes")
        |   +-- guides/
        |       +-- intro.txt  ("Intro")
        +-- empty/
    """
    server = FakeServer()
    server.add_file("/hello.txt", b"Hello World")
    server.add_dir("/docs")
    server.add_file("/docs/readme.txt", b"Read me")
    server.add_file("/docs/notes.md", b"# Notes")
    server.add_dir("/docs/guides")
    server.add_file("/docs/guides/intro.txt", b"Intro")
    server.add_dir("/empty")
    return server


@pytest.fixture
def manager(fake_server: FakeServer) -> ConnectionManager:
    """ConnectionManager whose sessions talk to the fake server."""
    return ConnectionManager(
        "fake.ftp.local", 21, "testuser", "testpass", session_factory=fake_server.session
    )


@pytest.fixture
def client(manager: ConnectionManager) -> Generator[Client, None, None]:
    client = Client(manager)
    yield client
    client.close()


@pytest.fixture
def mock_ftp() -> Generator[MagicMock, None, None]:
    """
    Creates a mocked ftplib.FTP instance.

    Returns:
        Mocked FTP object with common methods stubbed.
    """
    mock = MagicMock(spec=ftplib.FTP)
    mock.encoding = "utf-8"

    # Default responses
    mock.sendcmd.return_value = "200 OK"
    mock.login.return_value = "230 Login successful"
    mock.cwd.return_value = "250 OK"
    mock.pwd.return_value = "/"
    mock.quit.return_value = "221 Goodbye"
    mock.delete.return_value = "250 Deleted"

    yield mock


@pytest.fixture
def ftp_config() -> FTPConfig:
    """Creates a standard FTPConfig for testing."""
    return FTPConfig(
        host="test.ftp.local",
        port=2121,
        username="testuser",
        password="testpass",
        passive_mode=True,
        encoding="utf-8",
    )


@pytest.fixture
def conn_config() -> ConnectionConfig:
    return ConnectionConfig(timeout_seconds=30)


@pytest.fixture
def ftp_session(
    ftp_config: FTPConfig, conn_config: ConnectionConfig, mock_ftp: MagicMock
) -> Generator[FTPSession, None, None]:
    """
    Creates an open FTPSession with a mocked FTP connection.
    """
    with patch("ftp_folders.ftp_session.ftplib.FTP", return_value=mock_ftp):
        session = FTPSession(ftp_config, conn_config)
        session._ftp = mock_ftp
        session._connected = True
        session._supports_mlsd = True
        yield session


@pytest.fixture
def tmp_config_file(tmp_path: Path) -> Generator[Path, None, None]:
    """
    Creates a temporary INI configuration file for config tests.
    """
    config_content = """[general]
protocol = ftp

[ftp]
host = testserver.local
port = 2121
username = testuser
password = testpass
passive_mode = false
encoding = latin-1

[connection]
timeout_seconds = 45

[logging]
level = DEBUG
file = test.log
console = false
"""
    config_path = tmp_path / "test_config.ini"
    config_path.write_text(config_content, encoding="utf-8")
    yield config_path


@pytest.fixture
def sample_file_entry() -> RemoteEntry:
    return RemoteEntry(
        name="testfile.txt", is_dir=False, size=12345, mtime=datetime(2024, 1, 15, 10, 30, 0)
    )


@pytest.fixture
def sample_dir_entry() -> RemoteEntry:
    return RemoteEntry(name="testdir", is_dir=True, mtime=datetime(2024, 1, 15, 10, 30, 0))
