"""
Unit tests for ftp_folders.manager module.

Tests cover:
- Path composition rules
- Lazy connection reuse for navigation and listing
- Forced fresh connection for transfers, disconnected on success and failure
- Missing files reported as invalid streams
- Connection failures propagate unchanged
- close() idempotence
"""

import ftplib
from unittest.mock import MagicMock

import pytest

from ftp_folders.manager import ConnectionManager, compose_path
from ftp_folders.streams import create_byte_array_input_stream


class TestComposePath:
    """Tests for compose_path / get_full_path."""

    @pytest.mark.parametrize(
        "path,name,expected",
        [
            ("/home/", "a.txt", "/home/a.txt"),
            ("/home/", "", "/home/"),
            ("", "a.txt", "a.txt"),
            (None, "a.txt", "a.txt"),
            ("/home/", None, "/home/"),
            ("/home", "a.txt", "/homea.txt"),
            ("/", "/", "//"),
            ("", "", ""),
        ],
    )
    def test_compose_path(self, path, name, expected):
        assert compose_path(path, name) == expected

    def test_get_full_path_matches_compose_path(self, manager: ConnectionManager):
        assert manager.get_full_path("/a/", "b") == compose_path("/a/", "b")


class TestLazyReuse:
    """Navigation calls connect once and keep the connection."""

    def test_not_connected_until_first_call(self, manager: ConnectionManager, fake_server):
        assert manager.is_connected() is False
        assert manager.session is None
        assert fake_server.opened == 0

    def test_current_folder_connects_lazily(self, manager: ConnectionManager, fake_server):
        assert manager.current_folder() == "/"
        assert manager.is_connected() is True
        assert fake_server.opened == 1

    def test_set_current_folder_then_list_reuses_connection(
        self, manager: ConnectionManager, fake_server
    ):
        assert manager.set_current_folder("/docs/", "guides") is True
        session = manager.session

        entries = manager.list()

        assert manager.session is session
        assert fake_server.opened == 1
        assert [e.name for e in entries] == ["intro.txt"]
        assert session.commands == ["CWD /docs/guides", "LIST"]

    def test_set_current_folder_tracks_working_directory(self, manager: ConnectionManager):
        manager.set_current_folder("/docs/", "")
        assert manager.working_directory == "/docs/"

    def test_set_current_folder_missing_returns_false(self, manager: ConnectionManager):
        manager.set_current_folder("/docs/", "")

        assert manager.set_current_folder("/", "nowhere") is False
        # The server stays where it was
        assert manager.working_directory == "/docs/"
        assert manager.current_folder() == "/docs"

    def test_reconnects_after_connection_drops(self, manager: ConnectionManager, fake_server):
        manager.list()
        manager.session.connected = False

        manager.list()

        assert fake_server.opened == 2

    def test_dead_connection_dropped_after_listing_fails(
        self, manager: ConnectionManager, fake_server
    ):
        manager.list()
        dead = manager.session
        # Socket closed by the server while the session still looks connected
        dead.list_files = MagicMock(side_effect=EOFError())

        with pytest.raises(EOFError):
            manager.list()

        assert manager.is_connected() is False
        assert dead.connected is False
        assert manager.working_directory is None

        manager.list()
        assert fake_server.opened == 2
        assert manager.session is not dead

    @pytest.mark.parametrize(
        "error",
        [ftplib.error_temp("421 Timeout"), BrokenPipeError(32, "Broken pipe")],
    )
    def test_dead_connection_dropped_after_navigation_fails(
        self, manager: ConnectionManager, fake_server, error
    ):
        manager.current_folder()
        manager.session.change_working_directory = MagicMock(side_effect=error)

        with pytest.raises(type(error)) as exc_info:
            manager.set_current_folder("/docs/", "")

        assert exc_info.value is error
        assert manager.session is None
        assert manager.set_current_folder("/docs/", "") is True
        assert fake_server.opened == 2


class TestForcedSingleShot:
    """Transfers always run on their own connection."""

    def test_get_file_stream_disconnects_after_success(
        self, manager: ConnectionManager, fake_server
    ):
        stream = manager.get_file_stream("/", "hello.txt")

        assert manager.is_connected() is False
        assert fake_server.opened == fake_server.closed == 1
        # Content stays readable after the disconnect
        assert stream.read_bytes() == b"Hello World"

    def test_get_file_stream_replaces_existing_connection(
        self, manager: ConnectionManager, fake_server
    ):
        manager.set_current_folder("/docs/", "")
        navigation_session = manager.session

        manager.get_file_stream("/docs/", "readme.txt")

        assert navigation_session.connected is False
        assert fake_server.opened == 2
        assert manager.session is None
        assert manager.working_directory is None

    def test_get_file_stream_missing_file_is_invalid(self, manager: ConnectionManager):
        stream = manager.get_file_stream("/", "missing.txt")

        assert stream.is_valid() is False
        assert manager.is_connected() is False

    def test_create_file_uploads_and_disconnects(self, manager: ConnectionManager, fake_server):
        result = manager.create_file("/docs/", "new.txt", create_byte_array_input_stream(b"new"))

        assert result is True
        assert fake_server.files["/docs/new.txt"] == b"new"
        assert manager.is_connected() is False

    def test_create_file_in_missing_folder_returns_false(self, manager: ConnectionManager):
        result = manager.create_file("/nowhere/", "x.txt", create_byte_array_input_stream(b""))

        assert result is False
        assert manager.is_connected() is False

    def test_create_file_rejects_invalid_stream(self, manager: ConnectionManager, fake_server):
        with pytest.raises(ValueError):
            manager.create_file("/", "x.txt", manager.get_file_stream("/", "missing"))

    def test_delete_file(self, manager: ConnectionManager, fake_server):
        assert manager.delete_file("/", "hello.txt") is True
        assert "/hello.txt" not in fake_server.files
        assert manager.is_connected() is False

    def test_delete_missing_file_returns_false(self, manager: ConnectionManager):
        assert manager.delete_file("/", "missing.txt") is False

    @pytest.mark.parametrize(
        "operation",
        [
            lambda m: m.get_file_stream("/", "hello.txt"),
            lambda m: m.create_file("/", "x.txt", create_byte_array_input_stream(b"x")),
            lambda m: m.delete_file("/", "hello.txt"),
        ],
        ids=["get_file_stream", "create_file", "delete_file"],
    )
    def test_disconnects_when_transfer_fails(self, manager: ConnectionManager, fake_server, operation):
        fake_server.fail_with = ftplib.error_temp("421 Service not available")

        with pytest.raises(ftplib.error_temp):
            operation(manager)

        assert manager.is_connected() is False
        assert fake_server.sessions[-1].connected is False
        assert fake_server.opened == fake_server.closed


class TestConnectionFailures:
    """Connection errors are not caught or retried."""

    def test_navigation_propagates_connection_error(self, manager: ConnectionManager, fake_server):
        fake_server.refuse_connections = True

        with pytest.raises(ConnectionError):
            manager.list()

        assert manager.session is None
        assert fake_server.opened == 0

    def test_transfer_propagates_connection_error(self, manager: ConnectionManager, fake_server):
        fake_server.refuse_connections = True

        with pytest.raises(ConnectionError):
            manager.get_file_stream("/", "hello.txt")

        assert manager.is_connected() is False

    def test_permission_error_from_session_is_unchanged(self):
        error = PermissionError("FTP login failed: 530 Login incorrect")
        session = MagicMock()
        session.open.side_effect = error
        manager = ConnectionManager("host", session_factory=lambda: session)

        with pytest.raises(PermissionError) as exc_info:
            manager.current_folder()

        assert exc_info.value is error


class TestClose:
    def test_close_disconnects(self, manager: ConnectionManager, fake_server):
        manager.list()
        manager.close()

        assert manager.is_connected() is False
        assert fake_server.closed == 1

    def test_close_is_idempotent(self, manager: ConnectionManager, fake_server):
        manager.close()
        manager.list()
        manager.close()
        manager.close()

        assert fake_server.closed == 1

    def test_repr_hides_password(self, manager: ConnectionManager):
        assert "testpass" not in repr(manager)
        assert "fake.ftp.local" in repr(manager)


class TestDefaultSessionFactory:
    def test_builds_ftp_session_from_credentials(self):
        manager = ConnectionManager("ftp.example.com", 2121, "bob", "secret")

        session = manager._session_factory()

        assert session.ftp_config.host == "ftp.example.com"
        assert session.ftp_config.port == 2121
        assert session.ftp_config.username == "bob"
        assert session.ftp_config.password == "secret"
        assert session.is_connected() is False
