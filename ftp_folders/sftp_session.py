"""
SFTP session implementation using paramiko.

Provides the same interface as FTPSession over SSH, so folders and files can
be browsed on an SSH server through the same client API. The working
directory is tracked client-side by paramiko's chdir().
"""

import logging
import os
import stat
from datetime import datetime
from io import BytesIO
from pathlib import Path
from typing import BinaryIO

import paramiko

from .config import ConnectionConfig, SSHConfig
from .session import RemoteEntry

logger = logging.getLogger(__name__)


class TrustOnFirstUsePolicy(paramiko.MissingHostKeyPolicy):
    """
    Trust-on-first-use host key policy (same model as OpenSSH).

    - Unknown host: accept and save key to ~/.ssh/known_hosts
    - Known host, same key: accept
    - Known host, CHANGED key: reject
    """

    def __init__(self, known_hosts_path: Path | None = None):
        self._known_hosts_path = known_hosts_path or Path.home() / ".ssh" / "known_hosts"

    def missing_host_key(self, client, hostname, key):
        host_keys = client.get_host_keys()
        existing = host_keys.lookup(hostname)

        if existing is not None:
            existing_key = existing.get(key.get_name())
            if existing_key is not None and existing_key != key:
                raise paramiko.SSHException(
                    f"Host key for {hostname} has CHANGED. "
                    f"Remove the old entry from {self._known_hosts_path} "
                    f"if the server key was legitimately changed."
                )

        logger.info("Adding host key for %s to known_hosts", hostname)
        host_keys.add(hostname, key.get_name(), key)
        try:
            self._known_hosts_path.parent.mkdir(parents=True, exist_ok=True)
            host_keys.save(str(self._known_hosts_path))
        except OSError as e:
            logger.warning("Could not save known_hosts: %s", e)


class SFTPSession:
    """One SSH connection with an open SFTP channel."""

    def __init__(self, ssh_config: SSHConfig, conn_config: ConnectionConfig):
        self.ssh_config = ssh_config
        self.conn_config = conn_config
        self._ssh: paramiko.SSHClient | None = None
        self._sftp: paramiko.SFTPClient | None = None

    def _connect_kwargs(self) -> dict:
        kwargs: dict = {
            "hostname": self.ssh_config.host,
            "port": self.ssh_config.port,
            "timeout": self.conn_config.timeout_seconds,
            "allow_agent": self.ssh_config.use_agent,
        }
        if self.ssh_config.username:
            kwargs["username"] = self.ssh_config.username

        # Auth priority: key file -> password -> agent/default keys
        if self.ssh_config.key_file:
            kwargs["key_filename"] = os.path.expanduser(self.ssh_config.key_file)
            if self.ssh_config.key_passphrase:
                kwargs["passphrase"] = self.ssh_config.key_passphrase
            kwargs["look_for_keys"] = True
        elif self.ssh_config.password:
            kwargs["password"] = self.ssh_config.password
            kwargs["look_for_keys"] = False
        else:
            kwargs["look_for_keys"] = True
        return kwargs

    def open(self) -> None:
        try:
            self._ssh = paramiko.SSHClient()
            self._ssh.load_system_host_keys()
            self._ssh.set_missing_host_key_policy(TrustOnFirstUsePolicy())

            logger.debug(
                "Connecting to SSH server %s:%d", self.ssh_config.host, self.ssh_config.port
            )
            self._ssh.connect(**self._connect_kwargs())
            self._sftp = self._ssh.open_sftp()
            logger.info(
                "Connected to SSH server %s:%d", self.ssh_config.host, self.ssh_config.port
            )

        except paramiko.AuthenticationException as e:
            self.close()
            logger.error("SSH authentication failed: %s", e)
            raise PermissionError(f"SSH authentication failed: {e}") from e
        except TimeoutError as e:
            self.close()
            logger.error("SSH connection timeout: %s", e)
            raise TimeoutError(f"SSH connection timeout: {e}") from e
        except (OSError, paramiko.SSHException) as e:
            self.close()
            logger.error("SSH connection failed: %s", e)
            raise ConnectionError(f"SSH connection failed: {e}") from e

    def close(self) -> None:
        if self._sftp:
            try:
                self._sftp.close()
            except (OSError, paramiko.SSHException) as e:
                logger.debug("SFTP close failed: %s", e)
            self._sftp = None
        if self._ssh:
            self._ssh.close()
            self._ssh = None
            logger.debug("SSH connection closed")

    def is_connected(self) -> bool:
        if self._ssh is None or self._sftp is None:
            return False
        transport = self._ssh.get_transport()
        return transport is not None and transport.is_active()

    def print_working_directory(self) -> str:
        return self._sftp.getcwd() or self._sftp.normalize(".")

    def change_working_directory(self, path: str) -> bool:
        try:
            self._sftp.chdir(path)
        except (OSError, paramiko.SFTPError) as e:
            # SFTPError: path exists but is not a directory
            logger.debug("chdir %s failed: %s", path, e)
            return False
        return True

    def list_files(self) -> list[RemoteEntry]:
        entries = []
        for attr in self._sftp.listdir_attr("."):
            if attr.filename in (".", ".."):
                continue
            is_dir = stat.S_ISDIR(attr.st_mode) if attr.st_mode else False
            entries.append(
                RemoteEntry(
                    name=attr.filename,
                    is_dir=is_dir,
                    size=attr.st_size if attr.st_size and not is_dir else 0,
                    mtime=datetime.fromtimestamp(attr.st_mtime) if attr.st_mtime else datetime.now(),
                )
            )
        logger.debug("Listed %d entries", len(entries))
        return entries

    def retrieve_file_stream(self, path: str) -> BinaryIO | None:
        buffer = BytesIO()
        try:
            self._sftp.getfo(path, buffer)
        except FileNotFoundError:
            logger.debug("No such file: %s", path)
            return None
        buffer.seek(0)
        return buffer

    def store_file(self, path: str, stream: BinaryIO) -> bool:
        try:
            self._sftp.putfo(stream, path, confirm=False)
        except (FileNotFoundError, PermissionError) as e:
            logger.warning("Upload to %s failed: %s", path, e)
            return False
        return True

    def delete_file(self, path: str) -> bool:
        try:
            self._sftp.remove(path)
        except (FileNotFoundError, PermissionError) as e:
            logger.warning("Delete of %s failed: %s", path, e)
            return False
        return True
