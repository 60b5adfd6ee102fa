import ftplib
import logging
from io import BytesIO
from typing import BinaryIO

from .config import ConnectionConfig, FTPConfig
from .listing import parse_list_line, parse_mlsd_facts
from .session import RemoteEntry

logger = logging.getLogger(__name__)


class FTPSession:
    """
    One FTP control connection, wrapping ftplib.FTP.

    Permanent negative replies (5xx) on navigation and transfers are soft
    failures. Everything else raised by ftplib or the socket propagates.
    """

    def __init__(self, ftp_config: FTPConfig, conn_config: ConnectionConfig):
        self.ftp_config = ftp_config
        self.conn_config = conn_config
        self._ftp: ftplib.FTP | None = None
        self._connected = False
        self._supports_mlsd = False

    def open(self) -> None:
        """
        Connect, authenticate and set the transfer mode.

        Raises:
            PermissionError: Login rejected.
            TimeoutError: Connect timed out.
            ConnectionError: Any other network failure.
        """
        try:
            self._ftp = ftplib.FTP()
            self._ftp.encoding = self.ftp_config.encoding

            logger.debug(
                "Connecting to FTP server %s:%d", self.ftp_config.host, self.ftp_config.port
            )
            self._ftp.connect(
                host=self.ftp_config.host,
                port=self.ftp_config.port,
                timeout=self.conn_config.timeout_seconds,
            )

            # Anonymous login if no credentials
            if self.ftp_config.username:
                logger.debug("Logging in as user: %s", self.ftp_config.username)
                self._ftp.login(
                    user=self.ftp_config.username, passwd=self.ftp_config.password or ""
                )
            else:
                logger.debug("Logging in anonymously")
                self._ftp.login()

            self._ftp.set_pasv(self.ftp_config.passive_mode)
            self._connected = True
            logger.info("Connected to FTP server %s:%d", self.ftp_config.host, self.ftp_config.port)

            self._probe_capabilities()

        except (ftplib.error_perm, ftplib.error_temp) as e:
            self._abandon()
            logger.error("FTP login failed: %s", e)
            raise PermissionError(f"FTP login failed: {e}") from e
        except TimeoutError as e:
            self._abandon()
            logger.error("Connection timeout: %s", e)
            raise TimeoutError(f"Connection timeout: {e}") from e
        except OSError as e:
            self._abandon()
            logger.error("Connection failed: %s", e)
            raise ConnectionError(f"Connection failed: {e}") from e

    def _abandon(self) -> None:
        """Drop a half-open connection after a failed open()."""
        if self._ftp:
            try:
                self._ftp.close()
            except OSError:
                pass
        self._ftp = None
        self._connected = False

    def _probe_capabilities(self) -> None:
        """Check FEAT for machine-readable listings, falling back to LIST."""
        try:
            features = self._ftp.sendcmd("FEAT").upper().split()
        except ftplib.error_perm:
            # Server doesn't support FEAT
            features = []
        # An MLST feature line implies MLSD (RFC 3659)
        self._supports_mlsd = "MLSD" in features or "MLST" in features
        logger.debug("Server capabilities - MLSD: %s", self._supports_mlsd)

    def close(self) -> None:
        """Send QUIT, or just drop the socket if the server is gone."""
        if self._ftp is None:
            return
        try:
            self._ftp.quit()
            logger.debug("FTP connection closed gracefully")
        except (ftplib.Error, OSError, EOFError) as e:
            logger.debug("FTP quit failed, forcing close: %s", e)
            self._ftp.close()
        finally:
            self._ftp = None
            self._connected = False

    def is_connected(self) -> bool:
        return self._connected and self._ftp is not None

    def print_working_directory(self) -> str:
        return self._ftp.pwd()

    def change_working_directory(self, path: str) -> bool:
        try:
            self._ftp.cwd(path)
        except ftplib.error_perm as e:
            logger.debug("CWD %s refused: %s", path, e)
            return False
        logger.debug("Working directory: %s", path)
        return True

    def list_files(self) -> list[RemoteEntry]:
        if self._supports_mlsd:
            records = (parse_mlsd_facts(name, facts) for name, facts in self._ftp.mlsd())
        else:
            lines = []
            self._ftp.retrlines("LIST", lines.append)
            records = (parse_list_line(line) for line in lines)

        entries = [entry for entry in records if entry is not None]
        logger.debug("Listed %d entries", len(entries))
        return entries

    def retrieve_file_stream(self, path: str) -> BinaryIO | None:
        buffer = BytesIO()
        try:
            self._ftp.retrbinary(f"RETR {path}", buffer.write)
        except ftplib.error_perm as e:
            logger.debug("RETR %s refused: %s", path, e)
            return None
        logger.debug("Read %d bytes from %s", buffer.tell(), path)
        buffer.seek(0)
        return buffer

    def store_file(self, path: str, stream: BinaryIO) -> bool:
        try:
            self._ftp.storbinary(f"STOR {path}", stream)
        except ftplib.error_perm as e:
            logger.warning("STOR %s refused: %s", path, e)
            return False
        logger.debug("Stored %s", path)
        return True

    def delete_file(self, path: str) -> bool:
        try:
            self._ftp.delete(path)
        except ftplib.error_perm as e:
            logger.warning("DELE %s refused: %s", path, e)
            return False
        logger.debug("Deleted %s", path)
        return True
