__version__ = "0.1.0"

# Public API exports
from .client import Client, client_from_config, get_client, get_sftp_client
from .codec import ENCODING, bytes_to_text, text_to_bytes
from .config import (
    AppConfig,
    ConnectionConfig,
    FTPConfig,
    LogConfig,
    SSHConfig,
    load_config,
)
from .entries import Entry, EntryKind, File, Folder
from .ftp_session import FTPSession
from .manager import ConnectionManager, compose_path
from .session import RemoteEntry, RemoteSession
from .streams import (
    InputStream,
    OutputStream,
    create_byte_array_input_stream,
    create_byte_array_output_stream,
)


def get_sftp_session():
    """Lazy loader for SFTPSession.

    Returns the SFTPSession class, importing it on first use so that
    importing ftp_folders does not import paramiko.
    """
    from .sftp_session import SFTPSession

    return SFTPSession


__all__ = [
    "__version__",
    # Client API
    "get_client",
    "get_sftp_client",
    "client_from_config",
    "Client",
    "Folder",
    "File",
    "Entry",
    "EntryKind",
    # Connection handling
    "ConnectionManager",
    "compose_path",
    "RemoteSession",
    "RemoteEntry",
    "FTPSession",
    "get_sftp_session",
    # Streams and text
    "InputStream",
    "OutputStream",
    "create_byte_array_input_stream",
    "create_byte_array_output_stream",
    "ENCODING",
    "text_to_bytes",
    "bytes_to_text",
    # Configuration
    "AppConfig",
    "FTPConfig",
    "SSHConfig",
    "ConnectionConfig",
    "LogConfig",
    "load_config",
]
