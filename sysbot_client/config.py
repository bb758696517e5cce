"""Configuration loader for sysbot-client."""

from __future__ import annotations

from configparser import ConfigParser
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from . import constants


@dataclass(slots=True)
class ConnectionConfig:
    host: str = constants.DEFAULT_HOST
    port: int = constants.DEFAULT_PORT
    connect_timeout_seconds: float = constants.DEFAULT_CONNECT_TIMEOUT_SECONDS
    request_timeout_seconds: Optional[float] = None  # None waits indefinitely
    read_chunk_size: int = constants.DEFAULT_READ_CHUNK_SIZE


@dataclass(slots=True)
class LoggingConfig:
    level: str = "INFO"
    path: Optional[Path] = constants.DEFAULT_LOG_PATH
    log_wire: bool = False


@dataclass(slots=True)
class HealthConfig:
    enabled: bool = False
    host: str = "127.0.0.1"
    port: int = 0


@dataclass(slots=True)
class MonitorConfig:
    interval_seconds: float = 5.0


@dataclass(slots=True)
class SysBotConfig:
    connection: ConnectionConfig
    logging: LoggingConfig
    health: HealthConfig
    monitor: MonitorConfig
    raw: ConfigParser
    path: Path


def _optional_float(parser: ConfigParser, section: str, option: str) -> Optional[float]:
    value = parser.get(section, option, fallback="").strip()
    if not value or value.lower() == "none":
        return None
    return float(value)


def load_config(path: Optional[Path] = None) -> SysBotConfig:
    """Load configuration from disk, applying defaults where necessary."""

    config_path = path or constants.DEFAULT_CONFIG_PATH
    parser = ConfigParser()
    parser.read_dict(
        {
            "connection": {
                "host": constants.DEFAULT_HOST,
                "port": str(constants.DEFAULT_PORT),
                "connect_timeout_seconds": str(constants.DEFAULT_CONNECT_TIMEOUT_SECONDS),
                "request_timeout_seconds": "",
                "read_chunk_size": str(constants.DEFAULT_READ_CHUNK_SIZE),
            },
            "logging": {
                "level": "INFO",
                "path": "",
                "log_wire": "false",
            },
            "health": {
                "enabled": "false",
                "host": "127.0.0.1",
                "port": "0",
            },
            "monitor": {
                "interval_seconds": "5",
            },
        }
    )

    if config_path.exists():
        parser.read(config_path)

    host_value = parser.get("connection", "host")
    port_value = parser.getint("connection", "port", fallback=constants.DEFAULT_PORT)

    if ":" in host_value and host_value.count(":") == 1:
        host_part, port_part = host_value.rsplit(":", 1)
        try:
            parsed_port = int(port_part)
        except ValueError:
            pass
        else:
            host_value = host_part
            port_value = parsed_port
            parser.set("connection", "host", host_part)
            parser.set("connection", "port", str(parsed_port))

    connection = ConnectionConfig(
        host=host_value,
        port=port_value,
        connect_timeout_seconds=parser.getfloat(
            "connection",
            "connect_timeout_seconds",
            fallback=constants.DEFAULT_CONNECT_TIMEOUT_SECONDS,
        ),
        request_timeout_seconds=_optional_float(
            parser, "connection", "request_timeout_seconds"
        ),
        read_chunk_size=max(
            1,
            parser.getint(
                "connection",
                "read_chunk_size",
                fallback=constants.DEFAULT_READ_CHUNK_SIZE,
            ),
        ),
    )

    log_path_value = parser.get("logging", "path", fallback="").strip()
    logging_config = LoggingConfig(
        level=parser.get("logging", "level", fallback="INFO"),
        path=Path(log_path_value).expanduser() if log_path_value else None,
        log_wire=parser.getboolean("logging", "log_wire", fallback=False),
    )

    health = HealthConfig(
        enabled=parser.getboolean("health", "enabled", fallback=False),
        host=parser.get("health", "host", fallback="127.0.0.1"),
        port=parser.getint("health", "port", fallback=0),
    )

    monitor = MonitorConfig(
        interval_seconds=max(
            0.1, parser.getfloat("monitor", "interval_seconds", fallback=5.0)
        ),
    )

    return SysBotConfig(
        connection=connection,
        logging=logging_config,
        health=health,
        monitor=monitor,
        raw=parser,
        path=config_path,
    )


def save_config(config: SysBotConfig) -> None:
    """Persist the current configuration to disk."""

    config_path = config.path
    config_path.parent.mkdir(parents=True, exist_ok=True)
    with config_path.open("w", encoding="utf-8") as stream:
        config.raw.write(stream)
