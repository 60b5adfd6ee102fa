"""
ftp-folders - Command line interface

Browse and transfer files on an FTP (or SFTP) server through the
folder/file API. Paths are given as directory plus name, exactly as the
library composes them: "/pub/" + "readme.txt".
"""

import argparse
import logging
import sys
from pathlib import Path

from .client import Client, client_from_config
from .config import load_config
from .logger import setup_logging
from .streams import create_byte_array_input_stream

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    """Build the command-line argument parser."""
    parser = argparse.ArgumentParser(
        prog="ftp-folders",
        description="ftp-folders - Browse an FTP server as folders and files",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  ftp-folders --host 192.168.0.130 --port 2121 ls /pub/
  ftp-folders --config server.ini cat /pub/ readme.txt
  ftp-folders --host myserver.com --user bob put /upload/ report.csv ./report.csv
  ftp-folders --protocol sftp --host myserver.com --key-file ~/.ssh/id_rsa pwd
        """,
    )
    parser.add_argument("--config", help="Path to configuration file")
    parser.add_argument("--host", help="Server host")
    parser.add_argument("--port", type=int, help="Server port")
    parser.add_argument("--user", help="Username (anonymous if omitted)")
    parser.add_argument("--password", help="Password")
    parser.add_argument(
        "--protocol", choices=["ftp", "sftp"], default=None, help="Protocol to use (default: ftp)"
    )
    parser.add_argument("--key-file", help="Path to SSH private key (SFTP only)")
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging")

    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    subparsers.add_parser("pwd", help="Print the server's initial working directory")

    ls_parser = subparsers.add_parser("ls", help="List a folder")
    ls_parser.add_argument("path", nargs="?", default="/", help="Folder path (default: /)")

    cat_parser = subparsers.add_parser("cat", help="Print a text file")
    cat_parser.add_argument("path", help="Directory, with trailing slash")
    cat_parser.add_argument("name", help="File name")

    get_parser = subparsers.add_parser("get", help="Download a file")
    get_parser.add_argument("path", help="Directory, with trailing slash")
    get_parser.add_argument("name", help="File name")
    get_parser.add_argument("dest", help="Local destination file")

    put_parser = subparsers.add_parser("put", help="Upload a file")
    put_parser.add_argument("path", help="Directory, with trailing slash")
    put_parser.add_argument("name", help="File name")
    put_parser.add_argument("src", help="Local source file")

    rm_parser = subparsers.add_parser("rm", help="Delete a file")
    rm_parser.add_argument("path", help="Directory, with trailing slash")
    rm_parser.add_argument("name", help="File name")

    return parser


def cmd_pwd(client: Client, args) -> int:
    print(client.manager.current_folder())
    return 0


def cmd_ls(client: Client, args) -> int:
    folder = client.get_folder(args.path, "")
    if folder is None:
        print(f"[ERROR] No such folder: {args.path}")
        return 1
    for entry in sorted(folder.list(), key=lambda e: (e.is_file(), e.get_name())):
        if entry.is_folder():
            print(f"{'<DIR>':>12}  {entry.get_name()}/")
        else:
            print(f"{entry.record.size:>12}  {entry.get_name()}")
    return 0


def cmd_cat(client: Client, args) -> int:
    text = client.get_file_text(args.path, args.name)
    if text is None:
        print(f"[ERROR] No such file: {args.path}{args.name}")
        return 1
    sys.stdout.write(text)
    return 0


def cmd_get(client: Client, args) -> int:
    data = client.get_file_binary(args.path, args.name)
    if data is None:
        print(f"[ERROR] No such file: {args.path}{args.name}")
        return 1
    Path(args.dest).write_bytes(data)
    logger.info("Downloaded %d bytes to %s", len(data), args.dest)
    return 0


def cmd_put(client: Client, args) -> int:
    src = Path(args.src)
    if not src.is_file():
        print(f"[ERROR] Local file not found: {src}")
        return 1
    if not client.create_file(args.path, args.name, create_byte_array_input_stream(src.read_bytes())):
        print(f"[ERROR] Upload refused: {args.path}{args.name}")
        return 1
    logger.info("Uploaded %s to %s%s", src, args.path, args.name)
    return 0


def cmd_rm(client: Client, args) -> int:
    if not client.manager.delete_file(args.path, args.name):
        print(f"[ERROR] Delete refused: {args.path}{args.name}")
        return 1
    return 0


COMMANDS = {
    "pwd": cmd_pwd,
    "ls": cmd_ls,
    "cat": cmd_cat,
    "get": cmd_get,
    "put": cmd_put,
    "rm": cmd_rm,
}


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    if not args.command:
        parser.print_help()
        return 1

    try:
        config = load_config(
            config_path=args.config,
            host=args.host,
            port=args.port,
            username=args.user,
            password=args.password,
            protocol=args.protocol,
            key_file=args.key_file,
            debug=args.verbose,
        )
    except (FileNotFoundError, ValueError) as e:
        print(f"[ERROR] {e}")
        return 1

    setup_logging(config.logging)
    from . import __version__

    logger.debug("ftp-folders v%s, command: %s", __version__, args.command)

    with client_from_config(config) as client:
        try:
            return COMMANDS[args.command](client, args)
        except PermissionError as e:
            logger.error("Authentication failed: %s", e)
            print(f"[ERROR] Authentication failed: {e}")
        except TimeoutError as e:
            logger.error("Connection timed out: %s", e)
            print(f"[ERROR] Connection timed out: {e}")
        except ConnectionError as e:
            logger.error("Failed to connect to server: %s", e)
            print(f"[ERROR] Could not connect to server: {e}")
        except Exception as e:
            logger.exception("Fatal error: %s", e)
            print(f"[ERROR] Fatal error: {e}")
    return 1


if __name__ == "__main__":
    sys.exit(main())
