import ftplib
import logging
from collections.abc import Callable, Iterator
from contextlib import contextmanager

from .config import ConnectionConfig, FTPConfig
from .ftp_session import FTPSession
from .session import RemoteEntry, RemoteSession
from .streams import InputStream

logger = logging.getLogger(__name__)

SessionFactory = Callable[[], RemoteSession]


def compose_path(path: str | None, name: str | None) -> str:
    """
    Join a directory and a leaf name into a full remote path.

    No separator is inserted: compose_path("/home/", "a.txt") is
    "/home/a.txt" but compose_path("/home", "a.txt") is "/homea.txt".
    An empty name yields the path, an empty path yields the name.
    """
    if path and name:
        return path + name
    if path:
        return path
    return name or ""


class ConnectionManager:
    """
    Owns the credentials and the single control connection of a client.

    Navigation (current_folder, set_current_folder, list) connects lazily and
    leaves the connection open, so set_current_folder() followed by list()
    lists the directory just entered. Transfers (get_file_stream,
    create_file, delete_file) always run on a fresh connection that is torn
    down afterwards, whatever the outcome.

    There is no internal locking. A manager, and every Folder or File that
    refers to it, must not be used from several threads at once unless the
    caller serializes access.
    """

    def __init__(
        self,
        host: str,
        port: int = 21,
        username: str | None = None,
        password: str | None = None,
        session_factory: SessionFactory | None = None,
        conn_config: ConnectionConfig | None = None,
    ):
        self.host = host
        self.port = port
        self.username = username
        self.password = password
        self.conn_config = conn_config or ConnectionConfig()
        self._session_factory = session_factory or self._default_session_factory
        self.session: RemoteSession | None = None
        # Directory last entered on the live connection, None when unknown
        self.working_directory: str | None = None

    def __repr__(self) -> str:
        return f"ConnectionManager(host={self.host!r}, port={self.port}, username={self.username!r})"

    def _default_session_factory(self) -> RemoteSession:
        ftp_config = FTPConfig(
            host=self.host, port=self.port, username=self.username, password=self.password
        )
        return FTPSession(ftp_config, self.conn_config)

    def is_connected(self) -> bool:
        return self.session is not None and self.session.is_connected()

    def _connect(self) -> RemoteSession:
        """Drop any current connection and open a new one."""
        self._disconnect()
        session = self._session_factory()
        session.open()
        self.session = session
        return session

    def _disconnect(self) -> None:
        session, self.session = self.session, None
        self.working_directory = None
        if session is not None:
            session.close()

    def _check_connection(self) -> RemoteSession:
        """Reuse the live connection or open one."""
        if not self.is_connected():
            logger.debug("Not connected to %s:%d, connecting", self.host, self.port)
            return self._connect()
        return self.session

    @contextmanager
    def _reusing(self) -> Iterator[RemoteSession]:
        """
        Live connection for a navigation call.

        A transient or socket error drops the connection before it propagates,
        so the next call reconnects instead of reusing a dead socket.
        """
        session = self._check_connection()
        try:
            yield session
        except (ftplib.error_temp, EOFError, OSError) as e:
            logger.warning("Connection to %s:%d lost: %s", self.host, self.port, e)
            self._disconnect()
            raise

    @contextmanager
    def _single_shot(self) -> Iterator[RemoteSession]:
        """Fresh connection for exactly one transfer, always disconnected on exit."""
        try:
            yield self._connect()
        finally:
            self._disconnect()

    @staticmethod
    def get_full_path(path: str | None, name: str | None) -> str:
        return compose_path(path, name)

    def current_folder(self) -> str:
        with self._reusing() as session:
            self.working_directory = session.print_working_directory()
        return self.working_directory

    def set_current_folder(self, path: str | None, name: str | None) -> bool:
        """
        Enter the directory path+name on the control connection.

        Returns:
            True if the directory was entered. On False the server stays in
            its previous working directory.
        """
        full_path = self.get_full_path(path, name)
        with self._reusing() as session:
            entered = session.change_working_directory(full_path)
        if entered:
            self.working_directory = full_path
            return True
        logger.debug("Cannot enter %s", full_path)
        return False

    def list(self) -> list[RemoteEntry]:
        """List the current working directory."""
        with self._reusing() as session:
            return session.list_files()

    def get_file_stream(self, path: str | None, name: str | None) -> InputStream:
        """
        Download path+name.

        Returns:
            InputStream over the whole content, or an invalid InputStream
            (is_valid() is False) if the file does not exist.
        """
        full_path = self.get_full_path(path, name)
        logger.debug("Retrieving %s", full_path)
        with self._single_shot() as session:
            return InputStream(session.retrieve_file_stream(full_path))

    def create_file(self, path: str | None, name: str | None, input_stream: InputStream) -> bool:
        """Upload the content of input_stream to path+name."""
        if not input_stream.is_valid():
            raise ValueError("Cannot upload from an invalid stream")
        full_path = self.get_full_path(path, name)
        logger.debug("Storing %s", full_path)
        with self._single_shot() as session:
            return session.store_file(full_path, input_stream.native)

    def delete_file(self, path: str | None, name: str | None) -> bool:
        full_path = self.get_full_path(path, name)
        logger.debug("Deleting %s", full_path)
        with self._single_shot() as session:
            return session.delete_file(full_path)

    def close(self) -> None:
        """Disconnect if connected. Safe to call repeatedly."""
        if self.is_connected():
            logger.info("Closing connection to %s:%d", self.host, self.port)
        self._disconnect()
