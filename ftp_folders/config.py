import configparser
from dataclasses import dataclass
from pathlib import Path

PROTOCOLS = ("ftp", "sftp")
TRUE_VALUES = ("true", "1", "yes")


@dataclass
class FTPConfig:
    host: str
    port: int = 21
    username: str | None = None
    password: str | None = None
    passive_mode: bool = True
    encoding: str = "utf-8"  # Encoding of file names on the control connection


@dataclass
class SSHConfig:
    host: str
    port: int = 22
    username: str | None = None
    password: str | None = None
    key_file: str | None = None  # Path to SSH private key
    key_passphrase: str | None = None  # Passphrase for encrypted keys
    use_agent: bool = True  # Try SSH agent for auth


@dataclass
class ConnectionConfig:
    timeout_seconds: int = 30


@dataclass
class LogConfig:
    level: str = "INFO"
    file: str = ""  # Empty means no log file
    console: bool = True


@dataclass
class AppConfig:
    ftp: FTPConfig
    connection: ConnectionConfig
    logging: LogConfig
    protocol: str = "ftp"  # "ftp" or "sftp"
    ssh: SSHConfig | None = None


def _get_int(section: configparser.SectionProxy, key: str, label: str) -> int | None:
    value = section.get(key)
    if not value:
        return None
    try:
        return int(value)
    except ValueError:
        raise ValueError(f"Invalid {label} value in config: '{value}' - must be an integer")


def _get_bool(section: configparser.SectionProxy, key: str) -> bool | None:
    value = section.get(key)
    if not value:
        return None
    return value.lower() in TRUE_VALUES


def _merge(target: dict, values: dict) -> None:
    """Copy values that were actually set (not None) into target."""
    for key, value in values.items():
        if value is not None:
            target[key] = value


def load_config(config_path: str | None = None, **cli_args) -> AppConfig:
    """
    Load configuration from an INI file and/or CLI arguments.
    CLI arguments take precedence over config file.

    Args:
        config_path: Path to the INI configuration file.
        **cli_args: Key-value pairs from command line arguments.

    Returns:
        AppConfig: The populated configuration object.

    Raises:
        FileNotFoundError: If config_path is provided but does not exist.
        ValueError: If host is missing, a number is malformed, or the
            protocol is unknown.
    """
    ftp_config = {
        "host": None,
        "port": 21,
        "username": None,
        "password": None,
        "passive_mode": True,
        "encoding": "utf-8",
    }
    ssh_config = {
        "host": None,
        "port": 22,
        "username": None,
        "password": None,
        "key_file": None,
        "key_passphrase": None,
        "use_agent": True,
    }
    connection_config = {"timeout_seconds": 30}
    log_config = {"level": "INFO", "file": "", "console": True}
    protocol = "ftp"

    if config_path is not None:
        config_file = Path(config_path)
        if not config_file.exists():
            raise FileNotFoundError(f"Configuration file not found: {config_path}")

        parser = configparser.ConfigParser()
        parser.read(config_file, encoding="utf-8")

        if parser.has_section("general") and parser["general"].get("protocol"):
            protocol = parser["general"]["protocol"].lower()

        if parser.has_section("ftp"):
            section = parser["ftp"]
            _merge(
                ftp_config,
                {
                    "host": section.get("host") or None,
                    "port": _get_int(section, "port", "port"),
                    "username": section.get("username") or None,
                    "password": section.get("password") or None,
                    "passive_mode": _get_bool(section, "passive_mode"),
                    "encoding": section.get("encoding") or None,
                },
            )

        if parser.has_section("ssh"):
            section = parser["ssh"]
            _merge(
                ssh_config,
                {
                    "host": section.get("host") or None,
                    "port": _get_int(section, "port", "SSH port"),
                    "username": section.get("username") or None,
                    "password": section.get("password") or None,
                    "key_file": section.get("key_file") or None,
                    "key_passphrase": section.get("key_passphrase") or None,
                    "use_agent": _get_bool(section, "use_agent"),
                },
            )

        if parser.has_section("connection"):
            section = parser["connection"]
            _merge(
                connection_config,
                {"timeout_seconds": _get_int(section, "timeout_seconds", "timeout_seconds")},
            )

        if parser.has_section("logging"):
            section = parser["logging"]
            _merge(
                log_config,
                {
                    "level": section.get("level") or None,
                    "file": section.get("file"),
                    "console": _get_bool(section, "console"),
                },
            )

    # CLI arguments win over the config file
    if cli_args.get("protocol") is not None:
        protocol = cli_args["protocol"].lower()
    if protocol not in PROTOCOLS:
        raise ValueError(f"Unknown protocol: {protocol}. Must be one of: {', '.join(PROTOCOLS)}")

    target = ssh_config if protocol == "sftp" else ftp_config
    if cli_args.get("host") is not None:
        target["host"] = cli_args["host"]
    if cli_args.get("port") is not None:
        target["port"] = int(cli_args["port"])
    if cli_args.get("username") is not None:
        target["username"] = cli_args["username"] or None
    if cli_args.get("password") is not None:
        target["password"] = cli_args["password"] or None
    if cli_args.get("key_file") is not None:
        ssh_config["key_file"] = cli_args["key_file"]
    if cli_args.get("key_passphrase") is not None:
        ssh_config["key_passphrase"] = cli_args["key_passphrase"]
    if cli_args.get("timeout") is not None:
        connection_config["timeout_seconds"] = int(cli_args["timeout"])
    if cli_args.get("debug"):
        log_config["level"] = "DEBUG"
        log_config["console"] = True

    if not target["host"]:
        raise ValueError("Missing required configuration fields: host")

    ssh_obj = None
    if protocol == "sftp":
        ssh_obj = SSHConfig(**ssh_config)

    return AppConfig(
        ftp=FTPConfig(
            host=ftp_config["host"] or "",
            port=ftp_config["port"],
            username=ftp_config["username"],
            password=ftp_config["password"],
            passive_mode=ftp_config["passive_mode"],
            encoding=ftp_config["encoding"],
        ),
        connection=ConnectionConfig(timeout_seconds=connection_config["timeout_seconds"]),
        logging=LogConfig(
            level=log_config["level"],
            file=log_config["file"] or "",
            console=log_config["console"],
        ),
        protocol=protocol,
        ssh=ssh_obj,
    )
