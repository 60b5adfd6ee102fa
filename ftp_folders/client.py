import logging
from functools import partial

from .codec import text_to_bytes
from .config import AppConfig, ConnectionConfig, FTPConfig, SSHConfig
from .entries import NOT_IMPLEMENTED, Folder
from .ftp_session import FTPSession
from .manager import ConnectionManager
from .streams import InputStream, create_byte_array_input_stream

logger = logging.getLogger(__name__)

ROOT = "/"


class Client:
    """
    Entry point to a remote server.

    Folder and File handles obtained from a client share its single
    connection and stop working once the client is closed.
    """

    def __init__(self, manager: ConnectionManager):
        self.manager = manager

    def __repr__(self) -> str:
        return f"Client({self.manager!r})"

    def __enter__(self) -> "Client":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def get_root_folder(self) -> Folder:
        return Folder(self.manager, ROOT, ROOT)

    def get_file(self, path: str, name: str) -> InputStream:
        """Content of path+name as a stream; invalid if the file does not exist."""
        return self.manager.get_file_stream(path, name)

    def get_file_binary(self, path: str, name: str) -> bytes | None:
        input_stream = self.get_file(path, name)
        return input_stream.read_bytes() if input_stream.is_valid() else None

    def get_file_text(self, path: str, name: str) -> str | None:
        input_stream = self.get_file(path, name)
        return input_stream.read_text() if input_stream.is_valid() else None

    def get_folder(self, path: str, name: str) -> Folder | None:
        """
        Folder handle for path+name, or None if it cannot be entered.

        Existence is checked by entering the directory, which leaves the
        connection in it. A failed check leaves the working directory as it was.
        """
        if self.manager.set_current_folder(path, name):
            return Folder(self.manager, path, name)
        return None

    def create_file(self, path: str, name: str, input_stream: InputStream) -> bool:
        return self.manager.create_file(path, name, input_stream)

    def create_file_binary(self, path: str, name: str, data) -> bool:
        return self.create_file(path, name, create_byte_array_input_stream(data))

    def create_file_text(self, path: str, name: str, text: str) -> bool:
        return self.create_file(path, name, create_byte_array_input_stream(text_to_bytes(text)))

    def create_folder(self, path: str, name: str) -> Folder:
        raise NotImplementedError(NOT_IMPLEMENTED)

    def close(self) -> None:
        self.manager.close()


def get_client(
    host: str,
    port: int = 21,
    username: str | None = None,
    password: str | None = None,
    *,
    passive_mode: bool = True,
    encoding: str = "utf-8",
    timeout_seconds: int = 30,
) -> Client:
    """
    Create an FTP client. No connection is made until the first operation.

    Args:
        host: Server host name or address.
        port: Server port.
        username: Login name, None for anonymous login.
        password: Login password.
        passive_mode: Use passive data connections.
        encoding: Encoding of file names on the control connection.
        timeout_seconds: Socket timeout for connect and transfers.
    """
    ftp_config = FTPConfig(
        host=host,
        port=port,
        username=username,
        password=password,
        passive_mode=passive_mode,
        encoding=encoding,
    )
    conn_config = ConnectionConfig(timeout_seconds=timeout_seconds)
    manager = ConnectionManager(
        host,
        port,
        username,
        password,
        session_factory=partial(FTPSession, ftp_config, conn_config),
        conn_config=conn_config,
    )
    return Client(manager)


def get_sftp_client(ssh_config: SSHConfig, conn_config: ConnectionConfig | None = None) -> Client:
    """Create a client that talks SFTP instead of FTP."""
    # paramiko is only needed for SFTP
    from .sftp_session import SFTPSession

    conn_config = conn_config or ConnectionConfig()
    manager = ConnectionManager(
        ssh_config.host,
        ssh_config.port,
        ssh_config.username,
        ssh_config.password,
        session_factory=partial(SFTPSession, ssh_config, conn_config),
        conn_config=conn_config,
    )
    return Client(manager)


def client_from_config(config: AppConfig) -> Client:
    if config.protocol == "sftp":
        logger.debug("Using SFTP transport")
        return get_sftp_client(config.ssh, config.connection)
    ftp = config.ftp
    return get_client(
        ftp.host,
        ftp.port,
        ftp.username,
        ftp.password,
        passive_mode=ftp.passive_mode,
        encoding=ftp.encoding,
        timeout_seconds=config.connection.timeout_seconds,
    )
